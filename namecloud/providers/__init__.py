"""
Registrar and zone provider implementations.

This package contains the Namecheap registrar, the Cloudflare zone provider,
and in-memory stand-ins for both.
"""

from .base_provider import Registrar, ZoneProvider
from .cloudflare_provider import CloudflareZoneProvider
from .mock_provider import MockRegistrar, MockZoneProvider
from .namecheap_provider import NamecheapRegistrar

__all__ = [
    "Registrar",
    "ZoneProvider",
    "CloudflareZoneProvider",
    "NamecheapRegistrar",
    "MockRegistrar",
    "MockZoneProvider",
]
