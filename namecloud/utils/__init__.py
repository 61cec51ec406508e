"""
Utility functions and helpers.

This package contains domain name validation and parsing helpers.
"""

from .validators import sanitize_domain_name, split_domain, validate_domain_name

__all__ = ["sanitize_domain_name", "split_domain", "validate_domain_name"]
