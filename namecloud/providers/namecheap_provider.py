"""
Namecheap registrar implementation.

This module talks to the Namecheap XML API over httpx. Every command is a GET
against a single endpoint with the credentials and ``Command`` as query
parameters.
"""

import logging
from typing import Dict, List, Optional

import httpx

from .base_provider import Registrar
from ..core.models import DomainInfo, DomainListing
from ..exceptions import RegistrarError
from ..parsers.namecheap_xml import (
    parse_api_response,
    parse_domain_info,
    parse_domain_list,
    parse_result_flag,
)

logger = logging.getLogger(__name__)

NAMECHEAP_LIVE_ENDPOINT = "https://api.namecheap.com/xml.response"
NAMECHEAP_SANDBOX_ENDPOINT = "https://api.sandbox.namecheap.com/xml.response"

DOMAIN_LIST_PAGE_SIZE = 100

# "Domain not found" and "Domain is not associated with your account"
DOMAIN_NOT_FOUND_CODES = {"2019166", "2016166"}


class NamecheapRegistrar(Registrar):
    """Registrar backed by the Namecheap XML API."""

    def __init__(self, config: Dict, transport: Optional[httpx.BaseTransport] = None):
        """Initialize the Namecheap client."""
        self.api_user = config.get("api_user", "")
        self.api_token = config.get("api_token", "")
        self.username = config.get("username", "") or self.api_user
        self.client_ip = config.get("client_ip", "127.0.0.1")
        self.endpoint = (
            NAMECHEAP_SANDBOX_ENDPOINT if config.get("sandbox") else NAMECHEAP_LIVE_ENDPOINT
        )
        self._http = httpx.Client(timeout=config.get("timeout", 30.0), transport=transport)

        logger.info(f"Namecheap client initialized for {self.endpoint}")

    def _call(self, command: str, **params):
        query = {
            "ApiUser": self.api_user,
            "ApiKey": self.api_token,
            "UserName": self.username,
            "ClientIp": self.client_ip,
            "Command": command,
        }
        query.update({k: str(v) for k, v in params.items()})

        logger.debug(f"Namecheap {command} {params}")
        try:
            resp = self._http.get(self.endpoint, params=query)
        except httpx.HTTPError as e:
            raise RegistrarError(f"Namecheap {command} request failed: {e}") from e

        if resp.status_code != 200:
            raise RegistrarError(
                f"Namecheap {command} failed with HTTP {resp.status_code}: {resp.text}"
            )
        return parse_api_response(resp.content)

    def list_domains(self) -> List[DomainListing]:
        """List all domains, following pages until the reported total is reached."""
        domains = []
        page = 1
        while True:
            cmd = self._call(
                "namecheap.domains.getList", Page=page, PageSize=DOMAIN_LIST_PAGE_SIZE
            )
            page_domains, total = parse_domain_list(cmd)
            domains.extend(page_domains)
            if not page_domains or len(domains) >= total:
                break
            page += 1

        logger.info(f"Retrieved {len(domains)} domains from Namecheap")
        return domains

    def get_domain_info(self, name: str) -> Optional[DomainInfo]:
        try:
            cmd = self._call("namecheap.domains.getInfo", DomainName=name)
        except RegistrarError as e:
            if DOMAIN_NOT_FOUND_CODES.intersection(e.codes):
                logger.debug(f"Domain {name} not found in Namecheap account")
                return None
            raise

        info = parse_domain_info(cmd)

        # getInfo doesn't reliably carry the lock state
        lock = self._call("namecheap.domains.getRegistrarLock", DomainName=name)
        info.is_locked = parse_result_flag(
            lock, "DomainGetRegistrarLockResult", "RegistrarLockStatus"
        )
        return info

    def set_registrar_lock(self, name: str, locked: bool) -> bool:
        cmd = self._call(
            "namecheap.domains.setRegistrarLock",
            DomainName=name,
            LockAction="LOCK" if locked else "UNLOCK",
        )
        return parse_result_flag(cmd, "DomainSetRegistrarLockResult", "IsSuccess")

    def enable_whoisguard(self, whoisguard_id: str, forwarded_to: str) -> bool:
        cmd = self._call(
            "namecheap.whoisguard.enable",
            WhoisguardID=whoisguard_id,
            ForwardedToEmail=forwarded_to,
        )
        return parse_result_flag(cmd, "WhoisguardEnableResult", "IsSuccess")

    def disable_whoisguard(self, whoisguard_id: str) -> bool:
        cmd = self._call("namecheap.whoisguard.disable", WhoisguardID=whoisguard_id)
        return parse_result_flag(cmd, "WhoisguardDisableResult", "IsSuccess")

    def set_custom_nameservers(self, sld: str, tld: str, nameservers: str) -> bool:
        cmd = self._call(
            "namecheap.domains.dns.setCustom", SLD=sld, TLD=tld, Nameservers=nameservers
        )
        return parse_result_flag(cmd, "DomainDNSSetCustomResult", "Updated")

    def close(self) -> None:
        self._http.close()
