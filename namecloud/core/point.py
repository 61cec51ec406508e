"""
Point workflow - create Cloudflare zones for Namecheap domains

For every Namecheap domain without a Cloudflare zone of the same name, this
creates the zone and points the domain's nameservers at the ones Cloudflare
assigned. Per-domain failures are logged and never stop the run.
"""

import logging
from typing import Dict, List

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .context import ClientContext
from .models import DomainInfo, PointResult
from ..exceptions import DomainParseError, ProviderError
from ..utils.validators import split_domain

console = Console()
logger = logging.getLogger(__name__)


def nameservers_match(assigned: List[str], current: List[str]) -> bool:
    """Exact ordered comparison; the same servers in another order don't match."""
    return list(assigned) == list(current)


class PointWorkflow:
    """Creates missing zones and updates registrar nameservers to match."""

    def __init__(self, context: ClientContext):
        self.context = context
        self.registrar = context.registrar
        self.zone_provider = context.zone_provider

    def run(self, dry_run: bool = False) -> PointResult:
        """
        Run the workflow.

        Listing zones, listing domains and looking up domain detail are fatal
        on error. Everything after planning is isolated per domain.
        """
        result = PointResult()
        to_add = self.plan()
        result.planned = list(to_add)

        self._display_plan(to_add)

        if dry_run:
            console.print("[yellow]DRY RUN MODE - No zones will be created[/yellow]")
            return result

        if not to_add:
            console.print("[green]Every Namecheap domain already has a Cloudflare zone[/green]")
            return result

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Creating Cloudflare zones...", total=len(to_add))
            for domain in to_add.values():
                self._point_domain(domain, result)
                progress.update(task, advance=1)

        console.print(
            f"[blue]Created {len(result.created)}/{len(to_add)} zones, "
            f"updated nameservers for {len(result.nameservers_updated)} domains[/blue]"
        )
        return result

    def plan(self) -> Dict[str, DomainInfo]:
        """Return the registrar domains that have no zone yet, keyed by name."""
        zones = self.zone_provider.list_zones(self.context.account)
        zone_names = {zone.name for zone in zones}

        to_add = {}
        for listing in self.registrar.list_domains():
            if listing.name in zone_names:
                continue

            info = self.registrar.get_domain_info(listing.name)
            if info is None:
                logger.warning(f"Namecheap returned no detail for {listing.name}, skipping")
                continue

            logger.info(
                f"Namecheap Domain: {info.name} has name servers: {', '.join(info.nameservers)}"
            )
            to_add[info.name] = info

        logger.info(f"Zones that will be created in Cloudflare: {list(to_add)}")
        return to_add

    def _point_domain(self, domain: DomainInfo, result: PointResult) -> None:
        try:
            zone = self.zone_provider.create_zone(domain.name, self.context.account)
        except ProviderError as e:
            logger.error(f"Error when adding new zone {domain.name}: {e}")
            result.failed.append(domain.name)
            return

        result.created.append(domain.name)

        if nameservers_match(zone.name_servers, domain.nameservers):
            return

        logger.info(
            f"New zone {zone.name} nameservers don't match what's on Namecheap! "
            f"Cloudflare wants {zone.name_servers}, Namecheap has {domain.nameservers}"
        )

        try:
            parsed = split_domain(domain.name)
        except DomainParseError as e:
            logger.error(f"Error when parsing domain name {domain.name}: {e}")
            result.failed.append(domain.name)
            return

        try:
            updated = self.registrar.set_custom_nameservers(
                parsed.sld, parsed.tld, ",".join(zone.name_servers)
            )
        except ProviderError as e:
            logger.error(f"Error when setting Namecheap nameservers for domain {domain.name}: {e}")
            result.failed.append(domain.name)
            return

        if not updated:
            logger.warning(f"Namecheap nameservers update failed for domain {domain.name}")
            result.failed.append(domain.name)
            return

        result.nameservers_updated.append(domain.name)

    def _display_plan(self, to_add: Dict[str, DomainInfo]):
        """Display the zones that will be created."""
        table = Table(title="Zones to create in Cloudflare")
        table.add_column("Domain", style="cyan")
        table.add_column("Current nameservers", style="white")

        for domain in to_add.values():
            table.add_row(domain.name, ", ".join(domain.nameservers))

        console.print(table)
        console.print(f"\n[bold]Total zones to create: {len(to_add)}[/bold]")
