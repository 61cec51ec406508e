"""
In-memory registrar and zone provider.

These keep their state in memory and record every call, so the workflows can
be exercised without touching either API. Failures are injected per
operation with ``fail()``.
"""

import copy
import logging
from typing import Dict, List, Optional, Tuple

from .base_provider import Registrar, ZoneProvider
from ..core.models import Account, DomainInfo, DomainListing, TransferRequest, Zone
from ..exceptions import RegistrarError, ZoneProviderError

logger = logging.getLogger(__name__)

DEFAULT_NAMESERVERS = ["ada.ns.cloudflare.com", "bob.ns.cloudflare.com"]


class _FailureInjection:
    def __init__(self):
        self.calls: List[Tuple] = []
        self._failures: Dict[Tuple[str, Optional[str]], Exception] = {}

    def fail(self, operation: str, error: Exception, name: Optional[str] = None):
        """Make ``operation`` raise ``error``, for every name or only ``name``."""
        self._failures[(operation, name)] = error

    def _record(self, operation: str, *args):
        self.calls.append((operation,) + args)
        name = args[0] if args else None
        error = self._failures.get((operation, name)) or self._failures.get((operation, None))
        if error is not None:
            raise error

    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]


class MockRegistrar(_FailureInjection, Registrar):
    """In-memory registrar."""

    def __init__(self, domains: List[DomainInfo] = None):
        super().__init__()
        self.domains = {d.name: copy.deepcopy(d) for d in domains or []}
        self.update_succeeds = True
        logger.info("Mock registrar initialized")

    def list_domains(self) -> List[DomainListing]:
        self._record("list_domains")
        return [
            DomainListing(name=d.name, is_expired=d.is_expired, is_locked=d.is_locked)
            for d in self.domains.values()
        ]

    def get_domain_info(self, name: str) -> Optional[DomainInfo]:
        self._record("get_domain_info", name)
        domain = self.domains.get(name)
        return copy.deepcopy(domain) if domain else None

    def _find_by_guard(self, whoisguard_id: str) -> DomainInfo:
        for domain in self.domains.values():
            if domain.whoisguard.id == whoisguard_id:
                return domain
        raise RegistrarError(f"Whoisguard {whoisguard_id} not found")

    def set_registrar_lock(self, name: str, locked: bool) -> bool:
        self._record("set_registrar_lock", name, locked)
        self.domains[name].is_locked = locked
        logger.info(f"Mock: {'Locked' if locked else 'Unlocked'} {name}")
        return True

    def enable_whoisguard(self, whoisguard_id: str, forwarded_to: str) -> bool:
        self._record("enable_whoisguard", whoisguard_id, forwarded_to)
        guard = self._find_by_guard(whoisguard_id).whoisguard
        guard.enabled = True
        guard.forwarded_to = forwarded_to
        return True

    def disable_whoisguard(self, whoisguard_id: str) -> bool:
        self._record("disable_whoisguard", whoisguard_id)
        self._find_by_guard(whoisguard_id).whoisguard.enabled = False
        return True

    def set_custom_nameservers(self, sld: str, tld: str, nameservers: str) -> bool:
        name = f"{sld}.{tld}"
        self._record("set_custom_nameservers", name, nameservers)
        if self.update_succeeds and name in self.domains:
            self.domains[name].nameservers = nameservers.split(",")
        return self.update_succeeds


class MockZoneProvider(_FailureInjection, ZoneProvider):
    """In-memory zone provider."""

    def __init__(self, account_id: str = "account-1", zones: List[Zone] = None,
                 nameservers: List[str] = None):
        super().__init__()
        self.account = Account(id=account_id, name="Mock Account")
        self.zones = {z.name: copy.deepcopy(z) for z in zones or []}
        self.nameservers = list(nameservers or DEFAULT_NAMESERVERS)
        self.valid_auth_codes: Dict[str, str] = {}
        self.transfer_succeeds = True
        self.transfers: List[TransferRequest] = []
        logger.info("Mock zone provider initialized")

    def get_account(self, account_id: str) -> Account:
        self._record("get_account", account_id)
        if account_id != self.account.id:
            raise ZoneProviderError(f"Account {account_id} not found")
        return self.account

    def list_zones(self, account: Account, name: str = "") -> List[Zone]:
        self._record("list_zones", name)
        return [copy.deepcopy(z) for z in self.zones.values() if not name or z.name == name]

    def create_zone(self, name: str, account: Account) -> Zone:
        self._record("create_zone", name)
        if name in self.zones:
            raise ZoneProviderError(f"Zone {name} already exists")
        zone = Zone(id=f"zone-{len(self.zones) + 1}", name=name,
                    name_servers=list(self.nameservers))
        self.zones[name] = zone
        logger.info(f"Mock: Created zone {name}")
        return copy.deepcopy(zone)

    def check_auth_code(self, account: Account, name: str, auth_code: str) -> bool:
        self._record("check_auth_code", name, auth_code)
        return self.valid_auth_codes.get(name) == auth_code

    def transfer_domain(self, zone: Zone, request: TransferRequest) -> bool:
        self._record("transfer_domain", request.name)
        self.transfers.append(request)
        return self.transfer_succeeds
