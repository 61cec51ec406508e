"""
Base provider interfaces.

This module defines the abstract base classes for the registrar and the
zone provider. The workflows only talk to these interfaces.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.models import (
    Account,
    DomainInfo,
    DomainListing,
    TransferRequest,
    Zone,
)


class Registrar(ABC):
    """Abstract base class for the domain registrar."""

    @abstractmethod
    def list_domains(self) -> List[DomainListing]:
        """List all domains owned by the account."""
        pass

    @abstractmethod
    def get_domain_info(self, name: str) -> Optional[DomainInfo]:
        """Get full detail for a domain, or None if the account doesn't own it."""
        pass

    @abstractmethod
    def set_registrar_lock(self, name: str, locked: bool) -> bool:
        """Lock or unlock a domain. Returns the registrar's success flag."""
        pass

    @abstractmethod
    def enable_whoisguard(self, whoisguard_id: str, forwarded_to: str) -> bool:
        """Enable privacy guard, forwarding mail to the given address."""
        pass

    @abstractmethod
    def disable_whoisguard(self, whoisguard_id: str) -> bool:
        """Disable privacy guard."""
        pass

    @abstractmethod
    def set_custom_nameservers(self, sld: str, tld: str, nameservers: str) -> bool:
        """Set custom nameservers from a comma-joined list. Returns the updated flag."""
        pass

    def close(self) -> None:
        """Release any held resources."""


class ZoneProvider(ABC):
    """Abstract base class for the DNS zone and registrar-transfer provider."""

    @abstractmethod
    def get_account(self, account_id: str) -> Account:
        """Resolve the account context."""
        pass

    @abstractmethod
    def list_zones(self, account: Account, name: str = "") -> List[Zone]:
        """List zones in the account, optionally filtered by exact name."""
        pass

    @abstractmethod
    def create_zone(self, name: str, account: Account) -> Zone:
        """Create a zone and return it with its assigned nameservers."""
        pass

    @abstractmethod
    def check_auth_code(self, account: Account, name: str, auth_code: str) -> bool:
        """Return True if the auth code is valid for the domain."""
        pass

    @abstractmethod
    def transfer_domain(self, zone: Zone, request: TransferRequest) -> bool:
        """Initiate a registrar transfer. Returns the provider's success flag."""
        pass

    def close(self) -> None:
        """Release any held resources."""
