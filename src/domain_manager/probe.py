"""Reachability probing and hostname resolution for domain verification."""

import logging
import socket
from typing import List, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 10


def resolve_addresses(hostname: str) -> List[str]:
    """IPv4 addresses the system resolver returns for hostname.

    Raises:
        OSError: If the name does not resolve
    """
    return sorted(set(socket.gethostbyname_ex(hostname)[2]))


def probe_domain(domain: str, session: Optional[requests.Session] = None,
                 timeout: float = PROBE_TIMEOUT) -> Tuple[bool, bool]:
    """HEAD https://<domain> without following redirects.

    A status below 500 counts as reachable. A 3xx counts as redirecting
    correctly when its Location points at the provider or at the domain.

    Returns:
        Tuple of (reachable, redirects_properly)
    """
    requester = session or requests
    try:
        response = requester.head(f"https://{domain}", timeout=timeout, allow_redirects=False)
    except requests.RequestException as e:
        logger.info(f"Domain {domain} not reachable yet: {e}")
        return False, False

    reachable = response.status_code < 500
    redirects_properly = False
    if 300 <= response.status_code < 400:
        location = response.headers.get("Location", "")
        redirects_properly = "netlify.app" in location or domain in location
        logger.debug(f"Domain {domain} redirects to {location or '(no location)'}")
    return reachable, redirects_properly
