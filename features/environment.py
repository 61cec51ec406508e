"""
Behave environment configuration for namecloud workflow tests.

Scenarios run against the in-memory registrar and zone provider, so no
credentials or network access are needed.
"""

import logging
from datetime import datetime, timezone

from namecloud.core.context import ClientContext
from namecloud.providers.mock_provider import MockRegistrar, MockZoneProvider

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def before_all(context):
    """Set up test environment before all tests."""
    context.now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    logger.info("Test environment setup complete")


def before_scenario(context, scenario):
    """Give each scenario fresh providers."""
    context.registrar = MockRegistrar()
    context.zone_provider = MockZoneProvider()
    context.clients = ClientContext(
        registrar=context.registrar,
        zone_provider=context.zone_provider,
        account=context.zone_provider.account,
    )
    context.auth_code = ""
    context.error = None
    context.result = None

    logger.info(f"Starting scenario: {scenario.name}")


def after_scenario(context, scenario):
    """Log the outcome of each scenario."""
    if context.error is not None:
        logger.info(f"Scenario {scenario.name} ended with: {context.error}")
    logger.info(f"Completed scenario: {scenario.name}")
