"""
Transfer workflow - move a Namecheap domain to Cloudflare Registrar

Checks that the domain can be transferred, collects the EPP/auth code from the
operator, unlocks the domain, disables WhoisGuard and starts the transfer.
Once the domain has been touched, any failure re-locks it and re-enables
WhoisGuard before the error is raised.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from rich.console import Console

from .context import ClientContext
from .models import DomainInfo, TransferRequest
from ..exceptions import BailoutError, NamecloudError, ProviderError, TransferError
from ..utils.validators import sanitize_domain_name, validate_domain_name

console = Console()
logger = logging.getLogger(__name__)

MIN_DAYS_SINCE_REGISTRATION = 60
EPP_CODE_URL = "https://ap.www.namecheap.com/domains/dcp/share/{name}/rights"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def prompt_auth_code(domain_name: str) -> str:
    """Block on standard input until the operator enters the auth code."""
    return console.input(f"Enter the EPP/Auth Code for {domain_name} to continue: ")


def days_since(created: datetime, now: datetime) -> float:
    return (now - created).total_seconds() / 86400


def check_transfer_eligibility(domain: DomainInfo, now: datetime) -> None:
    """
    Raise TransferError unless the domain can be transferred.

    The domain must not be expired and more than 60 days must have passed
    since it was registered.
    """
    if domain.is_expired:
        raise TransferError("You can't transfer an expired domain!")

    if domain.created is None:
        raise TransferError(f"Namecheap didn't report a registration date for {domain.name}")

    days = days_since(domain.created, now)
    if days <= MIN_DAYS_SINCE_REGISTRATION:
        raise TransferError(
            f"Transfer can not begin until at least {MIN_DAYS_SINCE_REGISTRATION} days "
            f"since initial registration. It has only been {days:f} days"
        )


class TransferWorkflow:
    """Walks one domain through the registrar transfer."""

    def __init__(
        self,
        context: ClientContext,
        read_auth_code: Callable[[str], str] = prompt_auth_code,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.context = context
        self.registrar = context.registrar
        self.zone_provider = context.zone_provider
        self.read_auth_code = read_auth_code
        self.clock = clock

    def run(
        self,
        domain_name: Optional[str],
        contact_id: str = "",
        years: int = 1,
        privacy: bool = True,
        auto_renew: bool = True,
        import_dns: bool = True,
    ) -> TransferRequest:
        """
        Run the transfer for ``domain_name``.

        Returns:
            The transfer request that the provider accepted

        Raises:
            TransferError: if a precondition fails, or if the transfer fails
                after the domain was restored
            BailoutError: if restoring the domain failed
        """
        name = self._normalize(domain_name)
        domain = self._get_domain(name)
        check_transfer_eligibility(domain, self.clock())
        zone = self._get_zone(domain.name)
        auth_code = self._collect_auth_code(domain.name)

        # Everything below mutates the domain at Namecheap.
        if domain.is_locked:
            logger.info(f"{domain.name}: Unlocking")
            try:
                success = self.registrar.set_registrar_lock(domain.name, False)
            except ProviderError as e:
                self._bail_out(domain, f"Error unlocking domain {domain.name}: {e}")
            logger.info(f"setLockStatus {domain.name} is success? {success}")
        else:
            logger.info(f"{domain.name}: Domain is already unlocked")

        if domain.whoisguard.enabled:
            logger.info(f"{domain.name}: Disabling WhoisGuard")
            try:
                self.registrar.disable_whoisguard(domain.whoisguard.id)
            except ProviderError as e:
                self._bail_out(domain, f"Error disabling WhoisGuard on domain {domain.name}: {e}")
        else:
            logger.info(f"{domain.name}: WhoisGuard is already disabled")

        logger.info("Domain is ready to be transferred to Cloudflare, continuing...")

        request = TransferRequest(
            name=domain.name,
            auth_code=auth_code,
            registrant_contact_id=contact_id,
            years=years,
            privacy=privacy,
            auto_renew=auto_renew,
            import_dns=import_dns,
        )
        try:
            success = self.zone_provider.transfer_domain(zone, request)
        except ProviderError as e:
            self._bail_out(
                domain, f"Error beginning Cloudflare Registrar transfer of {domain.name}: {e}"
            )

        if not success:
            self._bail_out(domain, f"Cloudflare reported the transfer of {domain.name} failed!")

        logger.info(
            "Cloudflare has started the process. Keep an eye on your email for a "
            "confirmation email from Namecheap. Inside, you'll find a link that must "
            "be clicked to continue the process."
        )
        return request

    def _normalize(self, domain_name: Optional[str]) -> str:
        if not domain_name:
            raise TransferError("You must provide the domain name to transfer as the last argument.")

        try:
            name = sanitize_domain_name(domain_name)
        except NamecloudError as e:
            raise TransferError(str(e)) from e

        if not validate_domain_name(name):
            raise TransferError(f"'{domain_name}' is not a valid domain name")
        return name

    def _get_domain(self, name: str) -> DomainInfo:
        try:
            domain = self.registrar.get_domain_info(name)
        except ProviderError as e:
            raise TransferError(f"Error getting Namecheap domain info for {name}: {e}") from e

        if domain is None:
            raise TransferError(f"Didn't find domain name {name} in your Namecheap account!")
        return domain

    def _get_zone(self, name: str):
        try:
            zones = self.zone_provider.list_zones(self.context.account, name=name)
        except ProviderError as e:
            raise TransferError(f"Error getting Cloudflare zones for {name}: {e}") from e

        if not zones:
            raise TransferError(f"Didn't find Cloudflare zone for {name}")
        return zones[0]

    def _collect_auth_code(self, name: str) -> str:
        logger.info(
            f"We need the EPP/Auth code for {name}. You can get this at the bottom of "
            f"{EPP_CODE_URL.format(name=name)}. It will be emailed to you within a few "
            f"minutes. You must then enter it below."
        )
        try:
            auth_code = self.read_auth_code(name)
        except (EOFError, OSError) as e:
            raise TransferError(f"Error accepting EPP code input: {e!r}") from e

        auth_code = auth_code.rstrip("\r\n")
        logger.info(f"Received EPP/auth code for {name}: {auth_code!r}")

        try:
            valid = self.zone_provider.check_auth_code(self.context.account, name, auth_code)
        except ProviderError as e:
            raise TransferError(
                f"Error checking EPP/auth code validity for domain {name}: {e}"
            ) from e

        if not valid:
            raise TransferError(
                f'Cloudflare reported the EPP/auth code "{auth_code}" is invalid for '
                f"the domain {name}. Please try again."
            )
        return auth_code

    def _bail_out(self, domain: DomainInfo, message: str):
        """
        Re-lock the domain and re-enable WhoisGuard, then raise ``message``.

        Never returns. A failing compensation raises BailoutError straight
        away and nothing further is attempted.
        """
        logger.warning(
            "Bailout: Something went seriously wrong, entering bailout. We will attempt "
            "to lock the domain and re-enable WhoisGuard (if it exists on domain) but "
            "this may fail. Double check with the Namecheap control panel. Error details "
            "to follow."
        )

        try:
            self.registrar.set_registrar_lock(domain.name, True)
        except ProviderError as e:
            raise BailoutError(
                f"Bailout: Error locking domain {domain.name}, domain left unlocked. "
                f"YOUR DOMAIN IS UNLOCKED!! {e}. Original error: {message}"
            ) from e
        logger.info("Bailout: Successfully re-locked domain")

        if domain.whoisguard.enabled:
            try:
                self.registrar.enable_whoisguard(
                    domain.whoisguard.id, domain.whoisguard.forwarded_to
                )
            except ProviderError as e:
                raise BailoutError(
                    f"Bailout: Error re-enabling WhoisGuard on domain {domain.name}, WHOIS "
                    f"information left unprotected. YOUR WHOIS INFORMATION IS UNPROTECTED!! "
                    f"{e}. Original error: {message}"
                ) from e
            logger.info("Bailout: Successfully re-enabled WhoisGuard")

        logger.info("Bailout complete, error details to follow")
        raise TransferError(message)
