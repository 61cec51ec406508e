#!/usr/bin/env python3
"""
Test suite for the point and transfer workflows

Both workflows run against the in-memory registrar and zone provider.
"""

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, patch

from namecloud.core.context import ClientContext, bootstrap
from namecloud.core.models import Account, DomainInfo, Whoisguard, Zone
from namecloud.core.point import PointWorkflow, nameservers_match
from namecloud.core.transfer import TransferWorkflow, check_transfer_eligibility
from namecloud.exceptions import (
    BailoutError,
    BootstrapError,
    ConfigError,
    RegistrarError,
    TransferError,
    ZoneProviderError,
)
from namecloud.providers.mock_provider import (
    DEFAULT_NAMESERVERS,
    MockRegistrar,
    MockZoneProvider,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
NAMECHEAP_NS = ["dns1.registrar-servers.com", "dns2.registrar-servers.com"]


def make_domain(name, days_old=365, **kwargs):
    return DomainInfo(
        name=name,
        created=NOW - timedelta(days=days_old),
        nameservers=list(kwargs.pop("nameservers", NAMECHEAP_NS)),
        **kwargs,
    )


def make_context(domains=(), zones=()):
    registrar = MockRegistrar(list(domains))
    zone_provider = MockZoneProvider(zones=list(zones))
    return ClientContext(
        registrar=registrar, zone_provider=zone_provider, account=zone_provider.account
    )


class TestNameserversMatch(unittest.TestCase):
    """Test nameserver comparison."""

    def test_same_sequence_matches(self):
        self.assertTrue(nameservers_match(["a", "b"], ["a", "b"]))

    def test_order_matters(self):
        self.assertFalse(nameservers_match(["a", "b"], ["b", "a"]))

    def test_different_servers(self):
        self.assertFalse(nameservers_match(["a", "b"], ["a", "c"]))


class TestPointWorkflow(unittest.TestCase):
    """Test zone creation and nameserver updates."""

    def test_creates_zones_only_for_domains_without_one(self):
        context = make_context(
            domains=[make_domain("one.com"), make_domain("two.com")],
            zones=[Zone(id="z1", name="one.com")],
        )

        result = PointWorkflow(context).run()

        self.assertEqual(result.planned, ["two.com"])
        self.assertEqual(result.created, ["two.com"])
        self.assertIn("two.com", context.zone_provider.zones)
        created = [c for c in context.zone_provider.calls if c[0] == "create_zone"]
        self.assertEqual(created, [("create_zone", "two.com")])

    def test_second_run_creates_nothing(self):
        context = make_context(domains=[make_domain("one.com"), make_domain("two.com")])

        first = PointWorkflow(context).run()
        second = PointWorkflow(context).run()

        self.assertEqual(sorted(first.created), ["one.com", "two.com"])
        self.assertEqual(second.planned, [])
        self.assertEqual(second.created, [])
        self.assertEqual(context.zone_provider.operations().count("create_zone"), 2)

    def test_pushes_assigned_nameservers_when_different(self):
        context = make_context(domains=[make_domain("example.co.uk")])

        result = PointWorkflow(context).run()

        self.assertEqual(result.nameservers_updated, ["example.co.uk"])
        self.assertIn(
            ("set_custom_nameservers", "example.co.uk", ",".join(DEFAULT_NAMESERVERS)),
            context.registrar.calls,
        )
        self.assertEqual(
            context.registrar.domains["example.co.uk"].nameservers, DEFAULT_NAMESERVERS
        )

    def test_no_update_when_nameservers_already_match(self):
        context = make_context(
            domains=[make_domain("example.com", nameservers=DEFAULT_NAMESERVERS)]
        )

        result = PointWorkflow(context).run()

        self.assertEqual(result.created, ["example.com"])
        self.assertEqual(result.nameservers_updated, [])
        self.assertNotIn("set_custom_nameservers", context.registrar.operations())

    def test_reordered_nameservers_still_trigger_update(self):
        context = make_context(
            domains=[
                make_domain("example.com", nameservers=list(reversed(DEFAULT_NAMESERVERS)))
            ]
        )

        PointWorkflow(context).run()

        self.assertIn("set_custom_nameservers", context.registrar.operations())

    def test_zone_creation_failure_is_isolated(self):
        context = make_context(
            domains=[make_domain("first.com"), make_domain("second.com"), make_domain("third.com")]
        )
        context.zone_provider.fail(
            "create_zone", ZoneProviderError("zone exists elsewhere"), name="second.com"
        )

        with self.assertLogs("namecloud.core.point", level="ERROR") as logs:
            result = PointWorkflow(context).run()

        self.assertEqual(result.created, ["first.com", "third.com"])
        self.assertEqual(result.failed, ["second.com"])
        updated = [c[1] for c in context.registrar.calls if c[0] == "set_custom_nameservers"]
        self.assertEqual(updated, ["first.com", "third.com"])
        self.assertTrue(any("second.com" in line for line in logs.output))

    def test_registrar_update_error_is_isolated(self):
        context = make_context(domains=[make_domain("first.com"), make_domain("second.com")])
        context.registrar.fail(
            "set_custom_nameservers", RegistrarError("boom"), name="first.com"
        )

        result = PointWorkflow(context).run()

        self.assertEqual(result.failed, ["first.com"])
        self.assertEqual(result.nameservers_updated, ["second.com"])

    def test_unsuccessful_update_logs_warning(self):
        context = make_context(domains=[make_domain("example.com")])
        context.registrar.update_succeeds = False

        with self.assertLogs("namecloud.core.point", level="WARNING") as logs:
            result = PointWorkflow(context).run()

        self.assertEqual(result.created, ["example.com"])
        self.assertEqual(result.failed, ["example.com"])
        self.assertTrue(any("update failed" in line for line in logs.output))

    def test_unparseable_domain_skips_nameserver_update(self):
        context = make_context(domains=[make_domain("example.notarealsuffix")])

        result = PointWorkflow(context).run()

        self.assertEqual(result.created, ["example.notarealsuffix"])
        self.assertEqual(result.failed, ["example.notarealsuffix"])
        self.assertNotIn("set_custom_nameservers", context.registrar.operations())

    def test_dry_run_creates_nothing(self):
        context = make_context(domains=[make_domain("example.com")])

        result = PointWorkflow(context).run(dry_run=True)

        self.assertEqual(result.planned, ["example.com"])
        self.assertNotIn("create_zone", context.zone_provider.operations())

    def test_zone_listing_error_is_fatal(self):
        context = make_context(domains=[make_domain("example.com")])
        context.zone_provider.fail("list_zones", ZoneProviderError("unauthorized"))

        with self.assertRaises(ZoneProviderError):
            PointWorkflow(context).run()
        self.assertEqual(context.registrar.calls, [])


class TestTransferEligibility(unittest.TestCase):
    """Test the expiry and age checks."""

    def test_exactly_sixty_days_is_rejected(self):
        with self.assertRaises(TransferError):
            check_transfer_eligibility(make_domain("example.com", days_old=60), NOW)

    def test_just_over_sixty_days_is_allowed(self):
        domain = make_domain("example.com", days_old=60)
        domain.created -= timedelta(seconds=1)
        check_transfer_eligibility(domain, NOW)

    def test_expired_domain_is_rejected_regardless_of_age(self):
        domain = make_domain("example.com", days_old=3000, is_expired=True)
        with self.assertRaises(TransferError) as ctx:
            check_transfer_eligibility(domain, NOW)
        self.assertIn("expired", str(ctx.exception))

    def test_missing_creation_date_is_rejected(self):
        domain = DomainInfo(name="example.com")
        with self.assertRaises(TransferError):
            check_transfer_eligibility(domain, NOW)


class TestTransferWorkflow(unittest.TestCase):
    """Test the transfer state machine and its bailout."""

    def setUp(self):
        self.domain = make_domain(
            "example.com",
            is_locked=True,
            whoisguard=Whoisguard(id="wg-1", enabled=True, forwarded_to="me@example.org"),
        )
        self.context = make_context(
            domains=[self.domain], zones=[Zone(id="z1", name="example.com")]
        )
        self.context.zone_provider.valid_auth_codes["example.com"] = "EPP-CODE"
        self.read_auth_code = Mock(return_value="EPP-CODE\n")

    def workflow(self):
        return TransferWorkflow(
            self.context, read_auth_code=self.read_auth_code, clock=lambda: NOW
        )

    def mutations(self):
        return [
            call for call in self.context.registrar.calls if call[0] != "get_domain_info"
        ]

    def test_successful_transfer(self):
        request = self.workflow().run(
            "example.com", contact_id="c-1", years=2, privacy=False
        )

        self.assertEqual(
            self.mutations(),
            [("set_registrar_lock", "example.com", False), ("disable_whoisguard", "wg-1")],
        )
        self.assertEqual(request.auth_code, "EPP-CODE")
        self.assertEqual(request.registrant_contact_id, "c-1")
        self.assertEqual(request.years, 2)
        self.assertFalse(request.privacy)
        self.assertTrue(request.auto_renew)
        self.assertTrue(request.import_dns)
        self.assertEqual(self.context.zone_provider.transfers, [request])
        self.read_auth_code.assert_called_once_with("example.com")

    def test_unlocked_domain_without_guard_skips_both_steps(self):
        self.context.registrar.domains["example.com"].is_locked = False
        self.context.registrar.domains["example.com"].whoisguard.enabled = False

        self.workflow().run("example.com")

        self.assertEqual(self.mutations(), [])
        self.assertEqual(len(self.context.zone_provider.transfers), 1)

    def test_domain_name_is_normalized(self):
        self.workflow().run("Example.COM.")

        self.assertIn(("get_domain_info", "example.com"), self.context.registrar.calls)

    def test_missing_domain_name(self):
        with self.assertRaises(TransferError) as ctx:
            self.workflow().run(None)

        self.assertIn("must provide the domain name", str(ctx.exception))
        self.assertEqual(self.context.registrar.calls, [])

    def test_invalid_domain_name(self):
        with self.assertRaises(TransferError):
            self.workflow().run("not_a_domain")
        self.assertEqual(self.context.registrar.calls, [])

    def test_domain_not_in_account(self):
        with self.assertRaises(TransferError) as ctx:
            self.workflow().run("other.com")
        self.assertIn("Didn't find domain name", str(ctx.exception))

    def test_lookup_error_is_fatal(self):
        self.context.registrar.fail("get_domain_info", RegistrarError("API down"))

        with self.assertRaises(TransferError):
            self.workflow().run("example.com")
        self.assertEqual(self.mutations(), [])

    def test_young_domain_is_rejected_before_prompting(self):
        self.context.registrar.domains["example.com"].created = NOW - timedelta(days=30)

        with self.assertRaises(TransferError):
            self.workflow().run("example.com")

        self.read_auth_code.assert_not_called()
        self.assertEqual(self.mutations(), [])

    def test_missing_zone_is_fatal(self):
        self.context.zone_provider.zones.clear()

        with self.assertRaises(TransferError) as ctx:
            self.workflow().run("example.com")

        self.assertIn("Didn't find Cloudflare zone", str(ctx.exception))
        self.read_auth_code.assert_not_called()

    def test_auth_code_read_error_is_fatal(self):
        self.read_auth_code.side_effect = EOFError()

        with self.assertRaises(TransferError):
            self.workflow().run("example.com")
        self.assertEqual(self.mutations(), [])

    def test_invalid_auth_code_is_fatal(self):
        self.read_auth_code.return_value = "WRONG\n"

        with self.assertRaises(TransferError) as ctx:
            self.workflow().run("example.com")

        self.assertIn("is invalid", str(ctx.exception))
        self.assertEqual(self.mutations(), [])

    def test_auth_code_check_error_is_fatal(self):
        self.context.zone_provider.fail("check_auth_code", ZoneProviderError("timeout"))

        with self.assertRaises(TransferError):
            self.workflow().run("example.com")
        self.assertEqual(self.mutations(), [])

    def test_bailout_after_transfer_failure(self):
        self.context.zone_provider.transfer_succeeds = False

        with self.assertRaises(TransferError) as ctx:
            self.workflow().run("example.com")

        self.assertNotIsInstance(ctx.exception, BailoutError)
        self.assertIn("transfer of example.com failed", str(ctx.exception))
        self.assertEqual(
            self.mutations(),
            [
                ("set_registrar_lock", "example.com", False),
                ("disable_whoisguard", "wg-1"),
                ("set_registrar_lock", "example.com", True),
                ("enable_whoisguard", "wg-1", "me@example.org"),
            ],
        )
        restored = self.context.registrar.domains["example.com"]
        self.assertTrue(restored.is_locked)
        self.assertTrue(restored.whoisguard.enabled)

    def test_bailout_after_transfer_error(self):
        self.context.zone_provider.fail("transfer_domain", ZoneProviderError("HTTP 500"))

        with self.assertRaises(TransferError) as ctx:
            self.workflow().run("example.com")

        self.assertIn("Error beginning Cloudflare Registrar transfer", str(ctx.exception))
        self.assertEqual(
            self.context.registrar.operations()[-2:],
            ["set_registrar_lock", "enable_whoisguard"],
        )

    def test_bailout_after_guard_disable_error(self):
        self.context.registrar.fail("disable_whoisguard", RegistrarError("denied"))

        with self.assertRaises(TransferError) as ctx:
            self.workflow().run("example.com")

        self.assertIn("Error disabling WhoisGuard", str(ctx.exception))
        self.assertEqual(
            self.mutations()[-2:],
            [
                ("set_registrar_lock", "example.com", True),
                ("enable_whoisguard", "wg-1", "me@example.org"),
            ],
        )
        self.assertEqual(self.context.zone_provider.transfers, [])

    def test_bailout_skips_guard_when_it_was_never_enabled(self):
        self.context.registrar.domains["example.com"].whoisguard.enabled = False
        self.context.zone_provider.transfer_succeeds = False

        with self.assertRaises(TransferError):
            self.workflow().run("example.com")

        self.assertNotIn("enable_whoisguard", self.context.registrar.operations())
        self.assertEqual(self.context.registrar.operations()[-1], "set_registrar_lock")

    def test_relock_failure_stops_bailout(self):
        # Not locked to begin with, so the only lock call is the bailout's.
        self.context.registrar.domains["example.com"].is_locked = False
        self.context.registrar.fail("set_registrar_lock", RegistrarError("lock refused"))
        self.context.zone_provider.transfer_succeeds = False

        with self.assertRaises(BailoutError) as ctx:
            self.workflow().run("example.com")

        self.assertIn("domain left unlocked", str(ctx.exception))
        self.assertNotIn("enable_whoisguard", self.context.registrar.operations())

    def test_unlock_error_enters_bailout(self):
        self.context.registrar.fail("set_registrar_lock", RegistrarError("lock refused"))

        with self.assertRaises(BailoutError):
            self.workflow().run("example.com")

        self.assertEqual(
            self.mutations(),
            [
                ("set_registrar_lock", "example.com", False),
                ("set_registrar_lock", "example.com", True),
            ],
        )

    def test_guard_reenable_failure(self):
        self.context.registrar.fail("enable_whoisguard", RegistrarError("denied"))
        self.context.zone_provider.transfer_succeeds = False

        with self.assertRaises(BailoutError) as ctx:
            self.workflow().run("example.com")

        self.assertIn("WHOIS information left unprotected", str(ctx.exception))
        self.assertTrue(self.context.registrar.domains["example.com"].is_locked)


class TestBootstrap(unittest.TestCase):
    """Test client bootstrap."""

    def setUp(self):
        self.config = {
            "namecheap": {"api_user": "u", "api_token": "t", "username": "u"},
            "cloudflare": {"api_key": "k", "email": "e@example.com", "account_id": "acc"},
        }

    def test_missing_credentials(self):
        del self.config["cloudflare"]["account_id"]
        self.config["namecheap"]["api_token"] = ""

        with self.assertRaises(ConfigError) as ctx:
            bootstrap(self.config)

        self.assertIn("namecheap.api_token", str(ctx.exception))
        self.assertIn("cloudflare.account_id", str(ctx.exception))

    @patch("namecloud.core.context.CloudflareZoneProvider")
    @patch("namecloud.core.context.NamecheapRegistrar")
    def test_resolves_account(self, mock_registrar, mock_provider):
        mock_provider.return_value.get_account.return_value = Account(id="acc", name="Acme")

        context = bootstrap(self.config)

        self.assertEqual(context.account.name, "Acme")
        mock_provider.return_value.get_account.assert_called_once_with("acc")
        self.assertIs(context.registrar, mock_registrar.return_value)

    @patch("namecloud.core.context.CloudflareZoneProvider")
    @patch("namecloud.core.context.NamecheapRegistrar")
    def test_account_error_is_fatal(self, mock_registrar, mock_provider):
        mock_provider.return_value.get_account.side_effect = ZoneProviderError("forbidden")

        with self.assertRaises(BootstrapError):
            bootstrap(self.config)

        mock_registrar.return_value.close.assert_called_once()
        mock_provider.return_value.close.assert_called_once()

    @patch("namecloud.core.context.CloudflareZoneProvider")
    @patch("namecloud.core.context.NamecheapRegistrar")
    def test_client_construction_error_is_fatal(self, mock_registrar, mock_provider):
        mock_provider.side_effect = ZoneProviderError("bad credentials")

        with self.assertRaises(BootstrapError):
            bootstrap(self.config)


if __name__ == "__main__":
    unittest.main()
