"""Human-readable setup instructions for a custom domain."""

from typing import List, Optional

from .hostname import classify
from .models import DnsRecord, DomainClassification, SetupStrategy

PROVIDER_HELP = (
    "Need help? Check your DNS provider's documentation:\n"
    "  - GoDaddy: Support > DNS Management\n"
    "  - Namecheap: Domain List > Manage > Advanced DNS\n"
    "  - Cloudflare: Dashboard > DNS\n"
    "  - Route 53: AWS Console > Route 53"
)


def _nameserver_instructions(domain: str, nameservers: List[str]) -> str:
    lines = [
        f"Name server configuration for {domain}",
        "",
        "This is the recommended method for a root domain.",
        "",
        "Steps:",
        "1. Log into your domain registrar (GoDaddy, Namecheap, Cloudflare, etc.)",
        '2. Open the "DNS Management" or "Name Servers" section',
        "3. Replace the existing name servers with:",
        "",
    ]
    lines.extend(f"   NS{index}: {ns}" for index, ns in enumerate(nameservers, 1))
    lines.extend([
        "",
        "4. Save the changes",
        "5. Wait 24-48 hours for DNS propagation",
    ])
    return "\n".join(lines)


def _record_instructions(domain: str, records: List[DnsRecord]) -> str:
    lines = [f"DNS configuration for {domain}", "", "Add these DNS records at your DNS provider:", ""]
    if classify(domain) is DomainClassification.SUBDOMAIN:
        lines.extend([
            f"For a subdomain like {domain}:",
            "  - Create a CNAME record",
            "  - Your other DNS records are not affected",
        ])
    else:
        lines.extend([
            f"For a root domain like {domain}:",
            "  - Create the following A records",
            "  - Remove any existing A records for @",
        ])
    lines.append("")
    lines.append(f"  {'Type':<6} {'Name':<24} {'Value':<40} TTL")
    for record in records:
        ttl = record.ttl if record.ttl is not None else "auto"
        lines.append(f"  {record.type:<6} {record.hostname:<24} {record.value:<40} {ttl}")
    lines.extend(["", "DNS propagation can take up to 48 hours.", "", PROVIDER_HELP])
    return "\n".join(lines)


def generate_instructions(domain: str, records: List[DnsRecord],
                          nameservers: Optional[List[str]] = None,
                          strategy: SetupStrategy = SetupStrategy.DNS_RECORDS) -> str:
    """Instructions for the chosen strategy.

    Nameserver instructions are only produced when nameservers are known;
    otherwise the record instructions are returned.
    """
    if strategy is SetupStrategy.NAMESERVERS and nameservers:
        return _nameserver_instructions(domain, nameservers)
    return _record_instructions(domain, records)
