"""
Step definitions for the transfer workflow.
"""

from datetime import timedelta

from behave import given, when, then

from namecloud.core.models import DomainInfo, Whoisguard, Zone
from namecloud.core.transfer import TransferWorkflow
from namecloud.exceptions import RegistrarError, TransferError

READ_ONLY_OPERATIONS = {"get_domain_info", "list_domains"}


@given('Namecheap has the locked domain "{name}" registered {days:d} days ago with WhoisGuard')
def step_impl(context, name, days):
    context.registrar.domains[name] = DomainInfo(
        name=name,
        created=context.now - timedelta(days=days),
        is_locked=True,
        whoisguard=Whoisguard(id=f"wg-{name}", enabled=True, forwarded_to="owner@example.org"),
    )


@given('the domain "{name}" was registered {days:d} days ago')
def step_impl(context, name, days):
    context.registrar.domains[name].created = context.now - timedelta(days=days)


@given('the domain "{name}" is not locked')
def step_impl(context, name):
    context.registrar.domains[name].is_locked = False


@given('Cloudflare has a zone for "{name}"')
def step_impl(context, name):
    context.zone_provider.zones[name] = Zone(id=f"zone-{name}", name=name)


@given('the EPP code for "{name}" is "{code}"')
def step_impl(context, name, code):
    context.zone_provider.valid_auth_codes[name] = code


@given('I will enter the EPP code "{code}"')
def step_impl(context, code):
    context.auth_code = code


@given("Cloudflare rejects the transfer")
def step_impl(context):
    context.zone_provider.transfer_succeeds = False


@given("Namecheap refuses to lock domains")
def step_impl(context):
    context.registrar.fail("set_registrar_lock", RegistrarError("lock refused"))


@when('I transfer "{name}"')
def step_impl(context, name):
    workflow = TransferWorkflow(
        context.clients,
        read_auth_code=lambda domain: context.auth_code + "\n",
        clock=lambda: context.now,
    )
    try:
        context.result = workflow.run(name)
    except TransferError as e:
        context.error = e


@then("the transfer is started")
def step_impl(context):
    assert context.error is None, context.error
    assert len(context.zone_provider.transfers) == 1


@then('the transfer fails with "{text}"')
def step_impl(context, text):
    assert context.error is not None, "expected the transfer to fail"
    assert text in str(context.error), str(context.error)


@then("Namecheap was not changed")
def step_impl(context):
    changes = [op for op in context.registrar.operations() if op not in READ_ONLY_OPERATIONS]
    assert changes == [], changes


@then('the domain "{name}" is unlocked')
def step_impl(context, name):
    assert not context.registrar.domains[name].is_locked


@then('the domain "{name}" is locked')
def step_impl(context, name):
    assert context.registrar.domains[name].is_locked


@then('WhoisGuard is disabled for "{name}"')
def step_impl(context, name):
    assert not context.registrar.domains[name].whoisguard.enabled


@then('WhoisGuard is enabled for "{name}"')
def step_impl(context, name):
    assert context.registrar.domains[name].whoisguard.enabled
