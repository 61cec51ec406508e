"""
Command-line interface components.

This package contains the entry point for the namecloud CLI.
"""

from .main import main

__all__ = ["main"]
