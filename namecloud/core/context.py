"""
Client bootstrap.

Builds the registrar and zone-provider clients from configuration and
resolves the zone-provider account once. The resulting ``ClientContext`` is
handed to each workflow explicitly.
"""

import logging
from dataclasses import dataclass
from typing import Dict

from .models import Account
from ..exceptions import BootstrapError, ConfigError, NamecloudError
from ..providers.base_provider import Registrar, ZoneProvider
from ..providers.cloudflare_provider import CloudflareZoneProvider
from ..providers.namecheap_provider import NamecheapRegistrar

logger = logging.getLogger(__name__)

REQUIRED_SETTINGS = {
    "namecheap": ["api_user", "api_token", "username"],
    "cloudflare": ["api_key", "email", "account_id"],
}


@dataclass
class ClientContext:
    """Clients and account shared by a single command run."""

    registrar: Registrar
    zone_provider: ZoneProvider
    account: Account

    def close(self):
        self.registrar.close()
        self.zone_provider.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def validate_credentials(config: Dict) -> None:
    """Raise ConfigError naming every missing credential."""
    missing = []
    for section, keys in REQUIRED_SETTINGS.items():
        values = config.get(section) or {}
        missing.extend(f"{section}.{key}" for key in keys if not values.get(key))

    if missing:
        raise ConfigError(f"Missing required settings: {', '.join(missing)}")


def bootstrap(config: Dict) -> ClientContext:
    """
    Construct both API clients and resolve the Cloudflare account.

    Args:
        config: Merged configuration with ``namecheap`` and ``cloudflare``
            sections

    Returns:
        ClientContext ready to be passed to a workflow

    Raises:
        ConfigError: if credentials are missing
        BootstrapError: if a client can't be built or the account can't be
            resolved
    """
    validate_credentials(config)
    namecheap_config = config["namecheap"]
    cloudflare_config = config["cloudflare"]

    registrar = NamecheapRegistrar(namecheap_config)
    try:
        zone_provider = CloudflareZoneProvider(cloudflare_config)
    except NamecloudError as e:
        registrar.close()
        raise BootstrapError(f"Error creating Cloudflare API client: {e}") from e

    try:
        account = zone_provider.get_account(cloudflare_config["account_id"])
    except NamecloudError as e:
        registrar.close()
        zone_provider.close()
        raise BootstrapError(f"Error getting Cloudflare account: {e}") from e

    logger.info(f"Using Cloudflare account {account.name or account.id}")
    return ClientContext(registrar=registrar, zone_provider=zone_provider, account=account)
