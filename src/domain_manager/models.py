"""Data models for custom domain setup and verification."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class DomainClassification(Enum):
    APEX = "apex"
    SUBDOMAIN = "subdomain"


class SetupStrategy(Enum):
    """How the domain is pointed at the site."""

    NAMESERVERS = "nameservers"
    DNS_RECORDS = "dns_records"


class VerificationState(Enum):
    NOT_CONFIGURED = "not_configured"
    DNS_PENDING = "dns_pending"
    SSL_PENDING = "ssl_pending"
    ACTIVE = "active"
    ERROR = "error"


@dataclass(frozen=True)
class DnsRecord:
    """A DNS record the domain owner must create."""
    type: str
    hostname: str
    value: str
    ttl: Optional[int] = 3600

    def to_dict(self) -> dict:
        return {"type": self.type, "hostname": self.hostname, "value": self.value, "ttl": self.ttl}


@dataclass
class DomainConfig:
    """Hostname with its classification, strategy and verification state."""
    hostname: str
    classification: DomainClassification
    strategy: SetupStrategy
    state: VerificationState = VerificationState.NOT_CONFIGURED


@dataclass
class VerificationResult:
    """Raw verification checks for a domain."""
    reachable: bool = False
    ssl_enabled: bool = False
    redirects_properly: bool = False
    dns_configured: bool = False
    certificate_issued: bool = False


@dataclass
class DomainStatus:
    """Verification state of a domain with the steps still needed."""
    domain: str
    state: VerificationState
    details: VerificationResult = field(default_factory=VerificationResult)
    next_steps: List[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class DomainSetupResult:
    """Result of setup_domain.

    Attributes:
        domain: Normalized hostname (as given when invalid)
        site_id: Site the domain is attached to
        config: Classification, strategy and state; None when the hostname is invalid
        records: DNS records to create (always present for a valid hostname)
        nameservers: Provider nameservers when delegation is possible
        dns_zone_id: Provider DNS zone created for an apex domain
        instructions: Human-readable setup instructions
        diagnostics: Side-effect failures and other recovered problems
        error: Why setup could not start, if it could not
    """
    domain: str
    site_id: str
    config: Optional[DomainConfig] = None
    records: List[DnsRecord] = field(default_factory=list)
    nameservers: List[str] = field(default_factory=list)
    dns_zone_id: Optional[str] = None
    instructions: str = ""
    diagnostics: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def strategy(self) -> Optional[SetupStrategy]:
        return self.config.strategy if self.config else None

    @property
    def verification(self) -> VerificationState:
        return self.config.state if self.config else VerificationState.ERROR


@dataclass
class SslResult:
    status: str
    certificate_url: Optional[str] = None
    error: Optional[str] = None


@dataclass
class DomainRemovalResult:
    domain: str
    removed: bool
    diagnostics: List[str] = field(default_factory=list)
