"""
Step definitions for the point workflow.
"""

from datetime import timedelta

from behave import given, when, then

from namecloud.core.models import DomainInfo, Zone
from namecloud.core.point import PointWorkflow
from namecloud.exceptions import ZoneProviderError
from namecloud.providers.mock_provider import DEFAULT_NAMESERVERS

NAMECHEAP_NAMESERVERS = ["dns1.registrar-servers.com", "dns2.registrar-servers.com"]


def _names(text):
    return [name.strip() for name in text.split(",") if name.strip()]


def _add_domain(context, name, nameservers):
    context.registrar.domains[name] = DomainInfo(
        name=name,
        created=context.now - timedelta(days=365),
        nameservers=list(nameservers),
    )


@given('Namecheap has the domains "{names}"')
def step_impl(context, names):
    """Add domains using Namecheap's own nameservers."""
    for name in _names(names):
        _add_domain(context, name, NAMECHEAP_NAMESERVERS)


@given('Namecheap has the domain "{name}" already using Cloudflare nameservers')
def step_impl(context, name):
    _add_domain(context, name, DEFAULT_NAMESERVERS)


@given('Cloudflare already has a zone for "{name}"')
def step_impl(context, name):
    context.zone_provider.zones[name] = Zone(
        id=f"existing-{name}", name=name, name_servers=list(DEFAULT_NAMESERVERS)
    )


@given('Cloudflare fails to create a zone for "{name}"')
def step_impl(context, name):
    context.zone_provider.fail(
        "create_zone", ZoneProviderError(f"Cloudflare refused {name}"), name=name
    )


@when("I run point")
def step_impl(context):
    context.result = PointWorkflow(context.clients).run()


@then('Cloudflare zones are created for "{names}"')
def step_impl(context, names):
    assert context.result.created == _names(names), context.result.created


@then('Namecheap nameservers are updated for "{names}"')
def step_impl(context, names):
    assert context.result.nameservers_updated == _names(names), context.result.nameservers_updated
    for name in _names(names):
        assert context.registrar.domains[name].nameservers == DEFAULT_NAMESERVERS


@then("no Namecheap nameservers are updated")
def step_impl(context):
    assert "set_custom_nameservers" not in context.registrar.operations()


@then("{count:d} zones were created in total")
def step_impl(context, count):
    created = context.zone_provider.operations().count("create_zone")
    assert created == count, f"expected {count} zones, created {created}"
