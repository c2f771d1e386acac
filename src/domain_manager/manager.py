"""Custom domain manager.

Classifies a domain, picks nameserver delegation or DNS records, registers
the domain with the site and tracks verification:

    active       DNS configured, certificate issued and SSL enforced
    ssl_pending  DNS configured, certificate or SSL enforcement pending
    dns_pending  DNS not pointing at the site yet
    error        verification itself failed

Registering the alias and enforcing SSL run as independent background tasks
with a bounded wait; their failures come back as diagnostics and never hold
up the instructions. No public method raises DomainError.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Optional, Tuple

from src.hosting_client.auth import DEFAULT_SITE_SUFFIX
from src.hosting_client.errors import HostApiError, HostingError, NetworkError
from src.hosting_client.hosting_api import HostingAPI, validate_resource_id

from .errors import DomainError
from .hostname import (
    APEX_ADDRESSES,
    NAMESERVERS,
    classify,
    default_strategy,
    static_records,
    validate_hostname,
)
from .instructions import generate_instructions
from .models import (
    DnsRecord,
    DomainClassification,
    DomainConfig,
    DomainRemovalResult,
    DomainSetupResult,
    DomainStatus,
    SetupStrategy,
    SslResult,
    VerificationResult,
    VerificationState,
)
from .probe import probe_domain, resolve_addresses

logger = logging.getLogger(__name__)

SIDE_EFFECT_TIMEOUT = 10
MAX_WORKERS = 2

REMOTE_ERRORS = (HostApiError, NetworkError)


def status_from_verification(verification: VerificationResult) -> Tuple[VerificationState, List[str]]:
    """Derive the verification state and next steps from raw checks."""
    next_steps: List[str] = []
    if verification.dns_configured and verification.certificate_issued and verification.ssl_enabled:
        state = VerificationState.ACTIVE
    elif verification.dns_configured and verification.certificate_issued:
        state = VerificationState.SSL_PENDING
        next_steps.append("SSL certificate is being activated")
    elif verification.dns_configured:
        state = VerificationState.SSL_PENDING
        next_steps.append("SSL certificate is being provisioned")
    else:
        state = VerificationState.DNS_PENDING
        next_steps.append("Configure DNS records with your domain provider")
        next_steps.append("DNS propagation can take up to 48 hours")

    if verification.dns_configured and not verification.reachable:
        next_steps.append("Domain propagation is still in progress")
    return state, next_steps


class DomainManager:
    """Attaches custom domains to hosted sites.

    Example:
        >>> manager = DomainManager(api)
        >>> result = manager.setup_domain("site-123", "shop.example.com")
        >>> result.strategy
        <SetupStrategy.DNS_RECORDS: 'dns_records'>
    """

    def __init__(
        self,
        api: HostingAPI,
        resolver: Callable[[str], List[str]] = resolve_addresses,
        prober: Callable[[str], Tuple[bool, bool]] = probe_domain,
        site_suffix: str = DEFAULT_SITE_SUFFIX,
        side_effect_timeout: float = SIDE_EFFECT_TIMEOUT,
    ):
        self.api = api
        self._resolver = resolver
        self._prober = prober
        self.site_suffix = site_suffix
        self.side_effect_timeout = side_effect_timeout

    def setup_domain(self, site_id: str, domain: str) -> DomainSetupResult:
        """Start attaching a domain to a site.

        Args:
            site_id: Hosted site id
            domain: Hostname to attach

        Returns:
            DomainSetupResult with strategy, records or nameservers,
            instructions and diagnostics; an invalid hostname or site id gives a result
            in the error state instead of an exception
        """
        try:
            hostname = validate_hostname(domain)
            site_id = self._checked_site_id(site_id, hostname)
        except DomainError as e:
            logger.warning(str(e))
            return DomainSetupResult(domain=domain, site_id=site_id, error=str(e),
                                     diagnostics=[str(e)])

        logger.info(f"Setting up custom domain {hostname} for site {site_id}")
        classification = classify(hostname)
        result = DomainSetupResult(
            domain=hostname,
            site_id=site_id,
            config=DomainConfig(hostname, classification, default_strategy(classification),
                                VerificationState.DNS_PENDING),
        )

        self.api.new_retry_budget()
        site = self._fetch_site(site_id, result.diagnostics)
        result.records = static_records(hostname, self._site_target(site_id, site))

        if classification is DomainClassification.APEX:
            self._delegate_zone(site_id, hostname, result)

        result.diagnostics.extend(self._run_side_effects(site_id, hostname, site))
        result.instructions = generate_instructions(
            hostname, result.records, result.nameservers, result.config.strategy
        )
        logger.info(f"Domain {hostname}: {result.config.strategy.value} setup started")
        return result

    @staticmethod
    def _checked_site_id(site_id: str, hostname: str) -> str:
        try:
            return validate_resource_id(site_id, "site_id")
        except ValueError as e:
            raise DomainError(hostname, str(e)) from e

    def _fetch_site(self, site_id: str, diagnostics: List[str]) -> Optional[Dict[str, Any]]:
        try:
            return self.api.get_site(site_id)
        except REMOTE_ERRORS as e:
            message = f"Could not load site {site_id}: {e}"
            logger.warning(message)
            diagnostics.append(message)
            return None

    def _site_target(self, site_id: str, site: Optional[Dict[str, Any]]) -> str:
        """Provider hostname of the site, e.g. my-site.netlify.app."""
        if site:
            if site.get("default_domain"):
                return site["default_domain"]
            if site.get("name"):
                return f"{site['name']}.{self.site_suffix}"
        return f"{site_id}.{self.site_suffix}"

    def _delegate_zone(self, site_id: str, hostname: str, result: DomainSetupResult) -> None:
        """Create a provider DNS zone; fall back to A records when that fails."""
        try:
            zone = self.api.create_dns_zone(hostname, site_id)
        except REMOTE_ERRORS as e:
            message = f"DNS zone creation failed, using A records instead: {e}"
            logger.warning(message)
            result.diagnostics.append(message)
            result.config.strategy = SetupStrategy.DNS_RECORDS
            return
        result.dns_zone_id = zone.get("id")
        result.nameservers = list(zone.get("dns_servers") or NAMESERVERS)
        result.config.strategy = SetupStrategy.NAMESERVERS

    def _run_side_effects(self, site_id: str, hostname: str,
                          site: Optional[Dict[str, Any]]) -> List[str]:
        """Register the alias and force SSL concurrently; return failures."""
        tasks = {
            "register domain alias": lambda: self._register_alias(site_id, hostname, site),
            "enable forced SSL": lambda: self.api.update_site(site_id, force_ssl=True),
        }
        diagnostics: List[str] = []
        executor = ThreadPoolExecutor(max_workers=MAX_WORKERS)
        try:
            futures = {executor.submit(task): name for name, task in tasks.items()}
            done, not_done = wait(futures, timeout=self.side_effect_timeout)
            for future in done:
                name = futures[future]
                error = future.exception()
                if error is not None:
                    message = f"Could not {name}: {error}"
                    logger.warning(message)
                    diagnostics.append(message)
            for future in not_done:
                message = f"Still trying to {futures[future]} in the background"
                logger.info(message)
                diagnostics.append(message)
        finally:
            executor.shutdown(wait=False)
        return sorted(diagnostics)

    def _register_alias(self, site_id: str, hostname: str, site: Optional[Dict[str, Any]]) -> None:
        site = site or self.api.get_site(site_id)
        aliases = list(site.get("domain_aliases") or [])
        if site.get("custom_domain") == hostname or hostname in aliases:
            return
        if not site.get("custom_domain"):
            self.api.update_site(site_id, custom_domain=hostname)
        else:
            self.api.update_site(site_id, domain_aliases=aliases + [hostname])

    def verify_domain(self, site_id: str, domain: str) -> VerificationResult:
        """Run all verification checks; failures read as unverified."""
        try:
            return self._verify(site_id, domain)
        except DomainError as e:
            logger.warning(f"Domain verification failed: {e}")
            return VerificationResult()

    def _verify(self, site_id: str, domain: str) -> VerificationResult:
        hostname = validate_hostname(domain)
        site_id = self._checked_site_id(site_id, hostname)
        self.api.new_retry_budget()
        try:
            site = self.api.get_site(site_id)
            ssl = self.api.get_ssl_status(site_id)
        except HostingError as e:
            raise DomainError(hostname, f"lookup failed: {e}") from e

        reachable, redirects_properly = self._prober(hostname)
        return VerificationResult(
            reachable=reachable,
            ssl_enabled=bool(site.get("force_ssl")),
            redirects_properly=redirects_properly,
            dns_configured=self._dns_configured(hostname, self._site_target(site_id, site)),
            certificate_issued=self._certificate_issued(hostname, ssl),
        )

    def _dns_configured(self, hostname: str, target: str) -> bool:
        """True when the domain resolves to the provider's apex addresses or the site's."""
        try:
            addresses = set(self._resolver(hostname))
        except OSError as e:
            logger.debug(f"{hostname} does not resolve: {e}")
            return False
        if not addresses:
            return False
        if addresses & set(APEX_ADDRESSES):
            return True
        try:
            return bool(addresses & set(self._resolver(target)))
        except OSError:
            return False

    @staticmethod
    def _certificate_issued(hostname: str, ssl: Dict[str, Any]) -> bool:
        if (ssl or {}).get("state") != "issued":
            return False
        domains = ssl.get("domains") or []
        return not domains or hostname in domains or f"*.{hostname.split('.', 1)[-1]}" in domains

    def get_domain_status(self, site_id: str, domain: str) -> DomainStatus:
        """Verification state of a domain with next steps.

        Never raises: lookup failures give the error state.
        """
        try:
            verification = self._verify(site_id, domain)
        except DomainError as e:
            logger.error(f"Failed to get domain status: {e}")
            return DomainStatus(
                domain=domain,
                state=VerificationState.ERROR,
                next_steps=["Check domain configuration and try again"],
                error=str(e),
            )

        state, next_steps = status_from_verification(verification)
        return DomainStatus(domain=validate_hostname(domain), state=state,
                            details=verification, next_steps=next_steps)

    def get_required_dns_records(self, site_id: str, domain: str) -> List[DnsRecord]:
        """Records the provider expects for the domain, or the static set.

        Returns an empty list for an invalid hostname.
        """
        try:
            hostname = validate_hostname(domain)
            site_id = self._checked_site_id(site_id, hostname)
        except DomainError as e:
            logger.warning(str(e))
            return []

        self.api.new_retry_budget()
        try:
            zones = self.api.get_site_dns(site_id)
        except REMOTE_ERRORS as e:
            logger.warning(f"Failed to get required DNS records, using static records: {e}")
            zones = []

        records = [
            DnsRecord(
                type=str(record.get("type", "")).upper(),
                hostname=record.get("hostname", ""),
                value=record.get("value", ""),
                ttl=record.get("ttl"),
            )
            for zone in zones
            if zone.get("name") == hostname or hostname.endswith("." + str(zone.get("name")))
            for record in zone.get("records") or []
            if record.get("type") and record.get("value")
        ]
        if records:
            return records
        return static_records(hostname, f"{site_id}.{self.site_suffix}")

    def enable_ssl(self, site_id: str) -> SslResult:
        """Request certificate provisioning for a site."""
        try:
            site_id = validate_resource_id(site_id, "site_id")
        except ValueError as e:
            logger.error(f"Failed to enable SSL: {e}")
            return SslResult(status="error", error=str(e))

        self.api.new_retry_budget()
        try:
            cert = self.api.provision_ssl(site_id) or {}
        except REMOTE_ERRORS as e:
            logger.error(f"Failed to enable SSL for site {site_id}: {e}")
            return SslResult(status="error", error=str(e))

        domains = cert.get("domains") or []
        return SslResult(
            status=cert.get("state") or "provisioning",
            certificate_url=f"https://{domains[0]}" if domains else None,
        )

    def remove_domain(self, site_id: str, domain: str) -> DomainRemovalResult:
        """Detach a domain: alias, custom domain and the site's DNS zone."""
        try:
            hostname = validate_hostname(domain)
            site_id = self._checked_site_id(site_id, hostname)
        except DomainError as e:
            logger.warning(str(e))
            return DomainRemovalResult(domain=domain, removed=False, diagnostics=[str(e)])

        logger.info(f"Removing domain {hostname} from site {site_id}")
        result = DomainRemovalResult(domain=hostname, removed=False)
        self.api.new_retry_budget()

        try:
            site = self.api.get_site(site_id)
        except REMOTE_ERRORS as e:
            message = f"Could not load site {site_id}: {e}"
            logger.error(message)
            result.diagnostics.append(message)
            return result

        changes: Dict[str, Any] = {}
        aliases = list(site.get("domain_aliases") or [])
        if hostname in aliases:
            changes["domain_aliases"] = [alias for alias in aliases if alias != hostname]
        if site.get("custom_domain") == hostname:
            changes["custom_domain"] = ""
        if changes:
            try:
                self.api.update_site(site_id, **changes)
            except REMOTE_ERRORS as e:
                message = f"Could not detach {hostname}: {e}"
                logger.error(message)
                result.diagnostics.append(message)
                return result

        try:
            for zone in self.api.list_dns_zones():
                if zone.get("name") == hostname and zone.get("site_id") == site_id:
                    logger.info(f"Removing DNS zone {zone.get('id')} for {hostname}")
                    self.api.delete_dns_zone(zone["id"])
        except REMOTE_ERRORS as e:
            message = f"Could not clean up DNS zones: {e}"
            logger.warning(message)
            result.diagnostics.append(message)

        result.removed = True
        logger.info(f"Removed domain {hostname} from site {site_id}")
        return result
