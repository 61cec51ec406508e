"""
Cloudflare zone provider implementation.

This module talks to the Cloudflare v4 JSON API over httpx using global API
key authentication.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .base_provider import ZoneProvider
from ..core.models import Account, TransferRequest, Zone
from ..exceptions import ZoneProviderError

logger = logging.getLogger(__name__)

CLOUDFLARE_API_URL = "https://api.cloudflare.com/client/v4"

ZONE_LIST_PAGE_SIZE = 50
ZONE_TYPE = "full"


class CloudflareZoneProvider(ZoneProvider):
    """Zone provider backed by the Cloudflare v4 API."""

    def __init__(self, config: Dict, transport: Optional[httpx.BaseTransport] = None):
        """Initialize the Cloudflare client."""
        api_key = config.get("api_key", "")
        email = config.get("email", "")
        if not api_key or not email:
            raise ZoneProviderError("Cloudflare API key and email are required")

        self.base_url = config.get("base_url", CLOUDFLARE_API_URL).rstrip("/")
        self._http = httpx.Client(
            base_url=self.base_url,
            headers={
                "X-Auth-Email": email,
                "X-Auth-Key": api_key,
                "Content-Type": "application/json",
            },
            timeout=config.get("timeout", 30.0),
            transport=transport,
        )

        logger.info(f"Cloudflare client initialized for {self.base_url}")

    def _request(
        self, method: str, path: str, allow_failure: bool = False, **kwargs
    ) -> Dict[str, Any]:
        """
        Send a request and return the decoded envelope.

        HTTP errors always raise. An envelope with ``success: false`` raises
        unless ``allow_failure`` is set, in which case the caller inspects it.
        """
        try:
            resp = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ZoneProviderError(f"Cloudflare {method} {path} failed: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            raise ZoneProviderError(
                f"Cloudflare {method} {path} returned HTTP {resp.status_code}: {resp.text}"
            )

        if resp.status_code >= 400 or not (allow_failure or body.get("success", False)):
            errors = body.get("errors") or []
            detail = "; ".join(
                f"{err.get('code')}: {err.get('message')}" for err in errors
            ) or resp.text
            raise ZoneProviderError(
                f"Cloudflare {method} {path} failed with HTTP {resp.status_code}: {detail}"
            )
        return body

    @staticmethod
    def _to_zone(data: Dict[str, Any]) -> Zone:
        return Zone(
            id=data.get("id", ""),
            name=data.get("name", ""),
            name_servers=list(data.get("name_servers") or []),
        )

    def get_account(self, account_id: str) -> Account:
        body = self._request("GET", f"/accounts/{account_id}")
        result = body.get("result") or {}
        return Account(id=result.get("id", account_id), name=result.get("name", ""))

    def list_zones(self, account: Account, name: str = "") -> List[Zone]:
        """List zones in the account, following every page."""
        zones = []
        page = 1
        while True:
            params = {"account.id": account.id, "per_page": ZONE_LIST_PAGE_SIZE, "page": page}
            if name:
                params["name"] = name
            body = self._request("GET", "/zones", params=params)
            zones.extend(self._to_zone(z) for z in body.get("result") or [])

            total_pages = (body.get("result_info") or {}).get("total_pages", 1) or 1
            if page >= total_pages:
                break
            page += 1

        logger.info(f"Retrieved {len(zones)} zones from Cloudflare")
        return zones

    def create_zone(self, name: str, account: Account) -> Zone:
        body = self._request(
            "POST",
            "/zones",
            json={
                "name": name,
                "account": {"id": account.id},
                "jump_start": True,
                "type": ZONE_TYPE,
            },
        )
        zone = self._to_zone(body.get("result") or {})
        logger.info(f"Created Cloudflare zone {zone.name} ({zone.id})")
        return zone

    def check_auth_code(self, account: Account, name: str, auth_code: str) -> bool:
        body = self._request(
            "POST",
            f"/accounts/{account.id}/registrar/domains/{name}/check_auth",
            json={"auth_code": auth_code},
        )
        result = body.get("result") or {}
        return bool(result.get("valid", False))

    def transfer_domain(self, zone: Zone, request: TransferRequest) -> bool:
        body = self._request(
            "POST",
            f"/zones/{zone.id}/registrar/domains/{request.name}/transfer",
            allow_failure=True,
            json=request.to_payload(),
        )
        return bool(body.get("success", False))

    def close(self) -> None:
        self._http.close()
