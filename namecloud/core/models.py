"""
Data model for registrar domains, zones and transfer requests.

Everything here is transient: built from API responses, used for one command
and thrown away.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class Whoisguard:
    """Namecheap privacy guard state for a domain."""

    id: str = ""
    enabled: bool = False
    forwarded_to: str = ""


@dataclass
class DomainListing:
    """Entry of the registrar's domain list."""

    name: str
    is_expired: bool = False
    is_locked: bool = False


@dataclass
class DomainInfo:
    """Full registrar detail of a single domain."""

    name: str
    created: Optional[datetime] = None
    is_expired: bool = False
    is_locked: bool = False
    whoisguard: Whoisguard = field(default_factory=Whoisguard)
    nameservers: List[str] = field(default_factory=list)


@dataclass
class Zone:
    id: str
    name: str
    name_servers: List[str] = field(default_factory=list)


@dataclass
class Account:
    id: str
    name: str = ""


@dataclass
class ParsedDomain:
    """A domain split into registrable label and public suffix."""

    sld: str
    tld: str


@dataclass
class TransferRequest:
    """Body of a registrar transfer request. Sent once, never retried."""

    name: str
    auth_code: str
    registrant_contact_id: str = ""
    years: int = 1
    privacy: bool = True
    auto_renew: bool = True
    import_dns: bool = True

    def to_payload(self) -> dict:
        return {
            "name": self.name,
            "auth_code": self.auth_code,
            "registrant_contact_id": self.registrant_contact_id,
            "years": self.years,
            "privacy": self.privacy,
            "auto_renew": self.auto_renew,
            "import_dns": self.import_dns,
        }


@dataclass
class PointResult:
    """Outcome of a point run, one list of domain names per outcome."""

    planned: List[str] = field(default_factory=list)
    created: List[str] = field(default_factory=list)
    nameservers_updated: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
