"""Unit tests for domain_manager.manager module."""

import threading
from unittest.mock import Mock

import pytest

from src.domain_manager.hostname import NAMESERVERS
from src.domain_manager.manager import DomainManager, status_from_verification
from src.domain_manager.models import (
    DnsRecord,
    SetupStrategy,
    VerificationResult,
    VerificationState,
)
from src.hosting_client.errors import HostApiError, NetworkError
from src.hosting_client.hosting_api import HostingAPI

SITE = {
    "id": "site-1",
    "name": "summer-sale",
    "default_domain": "summer-sale.netlify.app",
    "custom_domain": None,
    "domain_aliases": [],
    "force_ssl": False,
}


def _resolver(table):
    """Resolver answering from a dict; unknown names fail like the system resolver."""
    def resolve(hostname):
        if hostname not in table:
            raise OSError(f"{hostname} does not resolve")
        return table[hostname]
    return resolve


@pytest.fixture
def api():
    api = Mock(spec=HostingAPI)
    api.get_site.return_value = dict(SITE)
    api.update_site.return_value = dict(SITE)
    api.get_ssl_status.return_value = {"state": "issued", "domains": ["shop.example.com"]}
    return api


def _manager(api, resolver=None, prober=None, **kwargs):
    return DomainManager(
        api,
        resolver=resolver or _resolver({}),
        prober=prober or (lambda hostname: (True, False)),
        **kwargs,
    )


class TestSetupSubdomain:
    """Test cases for attaching a subdomain."""

    def test_cname_to_site_default_domain(self, api):
        result = _manager(api).setup_domain("site-1", "Shop.Example.com")

        assert result.error is None
        assert result.domain == "shop.example.com"
        assert result.strategy is SetupStrategy.DNS_RECORDS
        assert result.verification is VerificationState.DNS_PENDING
        assert result.records == [DnsRecord("CNAME", "shop", "summer-sale.netlify.app", 3600)]
        assert result.nameservers == []
        assert "Create a CNAME record" in result.instructions
        assert result.diagnostics == []
        api.create_dns_zone.assert_not_called()

    def test_registers_custom_domain_and_forces_ssl(self, api):
        _manager(api).setup_domain("site-1", "shop.example.com")

        api.update_site.assert_any_call("site-1", custom_domain="shop.example.com")
        api.update_site.assert_any_call("site-1", force_ssl=True)
        api.new_retry_budget.assert_called_once()

    def test_existing_custom_domain_gets_alias(self, api):
        api.get_site.return_value = dict(SITE, custom_domain="www.example.com",
                                         domain_aliases=["old.example.com"])

        _manager(api).setup_domain("site-1", "shop.example.com")

        api.update_site.assert_any_call(
            "site-1", domain_aliases=["old.example.com", "shop.example.com"]
        )

    def test_already_registered_domain_is_not_updated_again(self, api):
        api.get_site.return_value = dict(SITE, custom_domain="shop.example.com")

        _manager(api).setup_domain("site-1", "shop.example.com")

        api.update_site.assert_called_once_with("site-1", force_ssl=True)

    def test_unreadable_site_targets_site_id(self, api):
        api.get_site.side_effect = NetworkError("connection reset")

        result = _manager(api).setup_domain("site-1", "shop.example.com")

        assert result.records[0].value == "site-1.netlify.app"
        assert "Could not load site site-1: connection reset" in result.diagnostics
        assert result.instructions


class TestSetupApex:
    """Test cases for attaching an apex domain."""

    def test_zone_delegation(self, api):
        api.create_dns_zone.return_value = {"id": "zone-1", "dns_servers": ["ns1.example.net", "ns2.example.net"]}

        result = _manager(api).setup_domain("site-1", "example.com")

        api.create_dns_zone.assert_called_once_with("example.com", "site-1")
        assert result.strategy is SetupStrategy.NAMESERVERS
        assert result.dns_zone_id == "zone-1"
        assert result.nameservers == ["ns1.example.net", "ns2.example.net"]
        assert "NS1: ns1.example.net" in result.instructions
        assert [r.type for r in result.records] == ["A", "A"]

    def test_zone_without_servers_uses_default_nameservers(self, api):
        api.create_dns_zone.return_value = {"id": "zone-1"}

        result = _manager(api).setup_domain("site-1", "example.com")

        assert result.nameservers == NAMESERVERS

    def test_zone_failure_falls_back_to_a_records(self, api):
        api.create_dns_zone.side_effect = HostApiError(422, "Zone already exists")

        result = _manager(api).setup_domain("site-1", "example.com")

        assert result.strategy is SetupStrategy.DNS_RECORDS
        assert result.nameservers == []
        assert result.dns_zone_id is None
        assert result.diagnostics[0].startswith("DNS zone creation failed, using A records instead")
        assert "75.2.60.5" in result.instructions


class TestSetupSideEffects:
    """Test cases for background alias and SSL registration."""

    def test_failures_become_sorted_diagnostics(self, api):
        api.update_site.side_effect = NetworkError("boom")

        result = _manager(api).setup_domain("site-1", "shop.example.com")

        assert result.error is None
        assert result.diagnostics == [
            "Could not enable forced SSL: boom",
            "Could not register domain alias: boom",
        ]
        assert result.records

    def test_slow_side_effects_do_not_block_instructions(self, api):
        release = threading.Event()
        api.update_site.side_effect = lambda *args, **kwargs: release.wait(2)

        try:
            result = _manager(api, side_effect_timeout=0.05).setup_domain("site-1", "shop.example.com")
        finally:
            release.set()

        assert result.instructions
        assert result.diagnostics == [
            "Still trying to enable forced SSL in the background",
            "Still trying to register domain alias in the background",
        ]


class TestInvalidHostname:
    """Test cases for malformed hostnames."""

    def test_setup_returns_error_result(self, api):
        result = _manager(api).setup_domain("site-1", "not a domain")

        assert result.config is None
        assert result.strategy is None
        assert result.verification is VerificationState.ERROR
        assert "not a domain" in result.error
        api.get_site.assert_not_called()

    def test_status_is_error(self, api):
        status = _manager(api).get_domain_status("site-1", "localhost")

        assert status.state is VerificationState.ERROR
        assert status.next_steps == ["Check domain configuration and try again"]

    def test_required_records_empty(self, api):
        assert _manager(api).get_required_dns_records("site-1", "-bad-.com") == []

    def test_remove_reports_not_removed(self, api):
        result = _manager(api).remove_domain("site-1", "localhost")

        assert result.removed is False
        api.update_site.assert_not_called()


class TestInvalidSiteId:
    """Test cases for site ids the hosting API would reject."""

    def test_setup_returns_error_result(self, api):
        result = _manager(api).setup_domain("bad site/id", "shop.example.com")

        assert result.verification is VerificationState.ERROR
        assert "Invalid site_id format" in result.error
        assert result.diagnostics == [result.error]
        api.get_site.assert_not_called()
        api.update_site.assert_not_called()

    def test_status_is_error(self, api):
        status = _manager(api).get_domain_status("bad site/id", "shop.example.com")

        assert status.state is VerificationState.ERROR
        assert status.next_steps == ["Check domain configuration and try again"]
        assert "Invalid site_id format" in status.error

    def test_verify_reads_as_unverified(self, api):
        assert _manager(api).verify_domain("", "shop.example.com") == VerificationResult()

    def test_required_records_empty(self, api):
        assert _manager(api).get_required_dns_records("../sites", "shop.example.com") == []
        api.get_site_dns.assert_not_called()

    def test_enable_ssl_reports_error(self, api):
        result = _manager(api).enable_ssl("bad site/id")

        assert result.status == "error"
        assert "Invalid site_id format" in result.error
        api.provision_ssl.assert_not_called()

    def test_remove_reports_not_removed(self, api):
        result = _manager(api).remove_domain("bad site/id", "shop.example.com")

        assert result.removed is False
        assert "Invalid site_id format" in result.diagnostics[0]


class TestStatusFromVerification:
    """Test cases for deriving the verification state."""

    def test_active(self):
        state, steps = status_from_verification(VerificationResult(
            reachable=True, ssl_enabled=True, dns_configured=True, certificate_issued=True,
        ))

        assert state is VerificationState.ACTIVE
        assert steps == []

    def test_certificate_issued_but_ssl_not_enforced(self):
        state, steps = status_from_verification(VerificationResult(
            reachable=True, dns_configured=True, certificate_issued=True,
        ))

        assert state is VerificationState.SSL_PENDING
        assert steps == ["SSL certificate is being activated"]

    def test_certificate_pending(self):
        state, steps = status_from_verification(VerificationResult(reachable=True, dns_configured=True))

        assert state is VerificationState.SSL_PENDING
        assert steps == ["SSL certificate is being provisioned"]

    def test_dns_pending(self):
        state, steps = status_from_verification(VerificationResult(ssl_enabled=True))

        assert state is VerificationState.DNS_PENDING
        assert steps == [
            "Configure DNS records with your domain provider",
            "DNS propagation can take up to 48 hours",
        ]

    def test_unreachable_after_dns_is_propagating(self):
        state, steps = status_from_verification(VerificationResult(
            dns_configured=True, certificate_issued=True, ssl_enabled=True,
        ))

        assert state is VerificationState.ACTIVE
        assert steps == ["Domain propagation is still in progress"]


class TestDomainStatus:
    """Test cases for verify_domain and get_domain_status."""

    def test_active_domain_via_apex_addresses(self, api):
        api.get_site.return_value = dict(SITE, force_ssl=True)
        manager = _manager(
            api,
            resolver=_resolver({"shop.example.com": ["75.2.60.5"]}),
            prober=lambda hostname: (True, True),
        )

        status = manager.get_domain_status("site-1", "shop.example.com")

        assert status.state is VerificationState.ACTIVE
        assert status.details.redirects_properly is True
        assert status.error is None

    def test_dns_configured_via_site_target(self, api):
        manager = _manager(api, resolver=_resolver({
            "shop.example.com": ["10.0.0.7"],
            "summer-sale.netlify.app": ["10.0.0.7", "10.0.0.8"],
        }))

        verification = manager.verify_domain("site-1", "shop.example.com")

        assert verification.dns_configured is True
        assert verification.certificate_issued is True
        assert verification.ssl_enabled is False

    def test_unresolved_domain_is_dns_pending(self, api):
        status = _manager(api).get_domain_status("site-1", "shop.example.com")

        assert status.state is VerificationState.DNS_PENDING
        assert status.details.dns_configured is False

    def test_resolution_elsewhere_is_not_configured(self, api):
        manager = _manager(api, resolver=_resolver({"shop.example.com": ["192.0.2.1"]}))

        assert manager.verify_domain("site-1", "shop.example.com").dns_configured is False

    @pytest.mark.parametrize("ssl,issued", [
        ({"state": "issued", "domains": []}, True),
        ({"state": "issued", "domains": ["*.example.com"]}, True),
        ({"state": "issued", "domains": ["other.example.org"]}, False),
        ({"state": "pending", "domains": ["shop.example.com"]}, False),
        ({}, False),
    ])
    def test_certificate_coverage(self, api, ssl, issued):
        api.get_ssl_status.return_value = ssl

        verification = _manager(api).verify_domain("site-1", "shop.example.com")

        assert verification.certificate_issued is issued

    def test_lookup_failure_gives_error_state(self, api):
        api.get_ssl_status.side_effect = NetworkError("service unavailable")

        status = _manager(api).get_domain_status("site-1", "shop.example.com")

        assert status.state is VerificationState.ERROR
        assert "service unavailable" in status.error

    def test_verify_never_raises(self, api):
        api.get_site.side_effect = HostApiError(404, "Not Found")

        assert _manager(api).verify_domain("site-1", "shop.example.com") == VerificationResult()


class TestRequiredRecords:
    """Test cases for get_required_dns_records."""

    def test_records_from_provider_zone(self, api):
        api.get_site_dns.return_value = [
            {"name": "example.com", "records": [
                {"type": "a", "hostname": "example.com", "value": "75.2.60.5", "ttl": 300},
                {"type": "NS", "hostname": "example.com", "value": ""},
            ]},
            {"name": "other.org", "records": [{"type": "A", "hostname": "other.org", "value": "1.1.1.1"}]},
        ]

        records = _manager(api).get_required_dns_records("site-1", "shop.example.com")

        assert records == [DnsRecord("A", "example.com", "75.2.60.5", 300)]

    def test_static_records_when_provider_has_none(self, api):
        api.get_site_dns.side_effect = HostApiError(404, "Not Found")

        records = _manager(api).get_required_dns_records("site-1", "shop.example.com")

        assert records == [DnsRecord("CNAME", "shop", "site-1.netlify.app", 3600)]

    def test_custom_site_suffix(self, api):
        api.get_site_dns.return_value = []

        records = _manager(api, site_suffix="example.host").get_required_dns_records(
            "site-1", "shop.example.com"
        )

        assert records[0].value == "site-1.example.host"


class TestEnableSsl:
    """Test cases for certificate provisioning."""

    def test_issued_certificate(self, api):
        api.provision_ssl.return_value = {"state": "issued", "domains": ["shop.example.com"]}

        result = _manager(api).enable_ssl("site-1")

        assert result.status == "issued"
        assert result.certificate_url == "https://shop.example.com"
        assert result.error is None

    def test_empty_response_is_provisioning(self, api):
        api.provision_ssl.return_value = {}

        result = _manager(api).enable_ssl("site-1")

        assert result.status == "provisioning"
        assert result.certificate_url is None

    def test_failure_is_reported(self, api):
        api.provision_ssl.side_effect = HostApiError(422, "DNS not verified")

        result = _manager(api).enable_ssl("site-1")

        assert result.status == "error"
        assert "DNS not verified" in result.error


class TestRemoveDomain:
    """Test cases for detaching a domain."""

    def test_detaches_alias_custom_domain_and_zone(self, api):
        api.get_site.return_value = dict(
            SITE, custom_domain="shop.example.com",
            domain_aliases=["www.example.com", "shop.example.com"],
        )
        api.list_dns_zones.return_value = [
            {"id": "zone-1", "name": "shop.example.com", "site_id": "site-1"},
            {"id": "zone-2", "name": "shop.example.com", "site_id": "site-9"},
            {"id": "zone-3", "name": "example.com", "site_id": "site-1"},
        ]

        result = _manager(api).remove_domain("site-1", "shop.example.com")

        assert result.removed is True
        assert result.diagnostics == []
        api.update_site.assert_called_once_with(
            "site-1", domain_aliases=["www.example.com"], custom_domain=""
        )
        api.delete_dns_zone.assert_called_once_with("zone-1")

    def test_unattached_domain_skips_update(self, api):
        api.list_dns_zones.return_value = []

        result = _manager(api).remove_domain("site-1", "shop.example.com")

        assert result.removed is True
        api.update_site.assert_not_called()

    def test_detach_failure_is_not_removed(self, api):
        api.get_site.return_value = dict(SITE, custom_domain="shop.example.com")
        api.update_site.side_effect = HostApiError(422, "Domain locked")

        result = _manager(api).remove_domain("site-1", "shop.example.com")

        assert result.removed is False
        assert result.diagnostics[0].startswith("Could not detach shop.example.com")
        api.list_dns_zones.assert_not_called()

    def test_zone_cleanup_failure_is_a_diagnostic(self, api):
        api.list_dns_zones.side_effect = NetworkError("timeout")

        result = _manager(api).remove_domain("site-1", "shop.example.com")

        assert result.removed is True
        assert result.diagnostics == ["Could not clean up DNS zones: timeout"]
