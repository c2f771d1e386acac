"""Remote site names derived from page slugs."""

import re
import time
from typing import Optional

MAX_BASE_LENGTH = 50
DEFAULT_BASE = "landing-page"


def uniqueness_token() -> str:
    """Millisecond timestamp used to keep site names unique."""
    return str(int(time.time() * 1000))


def normalize_site_name(slug: str) -> str:
    """Lowercase, [a-z0-9-] only, dash runs collapsed, trimmed, max 50 chars.

    Example:
        >>> normalize_site_name("Summer Sale!! 2024")
        'summer-sale-2024'
    """
    name = re.sub(r"[^a-z0-9-]", "-", (slug or "").lower())
    name = re.sub(r"-+", "-", name).strip("-")
    name = name[:MAX_BASE_LENGTH].strip("-")
    return name or DEFAULT_BASE


def site_name_for(slug: str, token: Optional[str] = None) -> str:
    return f"{normalize_site_name(slug)}-{token or uniqueness_token()}"


def fallback_site_name(page_id: str, token: Optional[str] = None) -> str:
    """Name for the replacement site created when an existing site is unusable."""
    page_part = normalize_site_name(page_id)[:30].strip("-") or "page"
    return f"{DEFAULT_BASE}-{page_part}-{token or uniqueness_token()}"
