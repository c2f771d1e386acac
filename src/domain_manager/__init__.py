"""Custom domain management module.

Validates and classifies hostnames, chooses nameserver delegation or DNS
records, registers domains with hosted sites and reports verification
status with next steps.
"""

from .errors import DomainError
from .hostname import classify, normalize_hostname, static_records, validate_hostname
from .instructions import generate_instructions
from .manager import DomainManager, status_from_verification
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

__all__ = [
    "DomainError",
    "classify",
    "normalize_hostname",
    "static_records",
    "validate_hostname",
    "generate_instructions",
    "DomainManager",
    "status_from_verification",
    "DnsRecord",
    "DomainClassification",
    "DomainConfig",
    "DomainRemovalResult",
    "DomainSetupResult",
    "DomainStatus",
    "SetupStrategy",
    "SslResult",
    "VerificationResult",
    "VerificationState",
]
