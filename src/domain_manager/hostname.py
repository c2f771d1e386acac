"""Hostname validation and classification."""

import re
from typing import List

from .errors import DomainError
from .models import DomainClassification, DnsRecord, SetupStrategy

MAX_HOSTNAME_LENGTH = 253
LABEL_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")

NAMESERVERS = [
    "dns1.p08.nsone.net",
    "dns2.p08.nsone.net",
    "dns3.p08.nsone.net",
    "dns4.p08.nsone.net",
]
APEX_ADDRESSES = ["75.2.60.5", "99.83.190.102"]
RECORD_TTL = 3600


def normalize_hostname(domain: str) -> str:
    """Lowercase, strip surrounding whitespace and one trailing dot."""
    hostname = (domain or "").strip().lower()
    if hostname.endswith("."):
        hostname = hostname[:-1]
    return hostname


def validate_hostname(domain: str) -> str:
    """Validate a hostname and return its normalized form.

    Labels are 1-63 characters of [a-z0-9-] without a leading or trailing
    hyphen; at least two labels; at most 253 characters overall.

    Raises:
        DomainError: If the hostname is malformed
    """
    hostname = normalize_hostname(domain)
    if not hostname:
        raise DomainError(domain, "hostname is empty")
    if len(hostname) > MAX_HOSTNAME_LENGTH:
        raise DomainError(domain, f"hostname longer than {MAX_HOSTNAME_LENGTH} characters")

    labels = hostname.split(".")
    if len(labels) < 2:
        raise DomainError(domain, "hostname needs at least two labels")
    for label in labels:
        if not LABEL_PATTERN.match(label):
            raise DomainError(domain, f"invalid label '{label}'")
    return hostname


def classify(hostname: str) -> DomainClassification:
    """Exactly two labels is an apex domain; more is a subdomain."""
    if len(hostname.split(".")) == 2:
        return DomainClassification.APEX
    return DomainClassification.SUBDOMAIN


def default_strategy(classification: DomainClassification) -> SetupStrategy:
    if classification is DomainClassification.SUBDOMAIN:
        return SetupStrategy.DNS_RECORDS
    return SetupStrategy.NAMESERVERS


def static_records(hostname: str, target: str) -> List[DnsRecord]:
    """Records pointing the domain at the site without provider DNS.

    Args:
        hostname: Validated hostname
        target: Provider hostname of the site, e.g. "my-site.netlify.app"
    """
    if classify(hostname) is DomainClassification.SUBDOMAIN:
        return [DnsRecord("CNAME", hostname.split(".")[0], target, RECORD_TTL)]
    return [DnsRecord("A", "@", address, RECORD_TTL) for address in APEX_ADDRESSES]
