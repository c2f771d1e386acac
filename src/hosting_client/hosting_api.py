"""Client for the hosting provider's REST API (Netlify API v1 shape).

Wraps a requests.Session and translates HTTP failures into the typed
exception hierarchy:

    connection error / timeout / 5xx / 429  -> NetworkError (retried)
    401                                     -> InvalidCredentialsError
    404 on a site                           -> SiteNotFoundError
    any other 4xx                           -> HostApiError (message verbatim)

Every call goes through retry_on_transient with the client's current retry
budget, so all calls of one deployment attempt share a single budget.
"""

import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from requests.exceptions import ConnectionError as RequestsConnectionError, Timeout

from .auth import Authenticator, Credentials
from .errors import HostApiError, InvalidCredentialsError, NetworkError, SiteNotFoundError
from .retry_logic import RetryBudget, retry_on_transient

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
RESOURCE_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def validate_resource_id(value: str, label: str) -> str:
    """Reject identifiers that could alter the request path.

    Raises:
        ValueError: If the identifier is empty or not path-safe
    """
    text = str(value or "").strip()
    if not text:
        raise ValueError(f"{label} cannot be empty")
    if not RESOURCE_ID_PATTERN.match(text):
        raise ValueError(f"Invalid {label} format: '{value}'")
    return text


def sanitize_credentials(text: str) -> str:
    """Mask bearer tokens and token-like values in error and log text.

    Example:
        >>> sanitize_credentials("Authorization: Bearer abc123")
        'Authorization: ***REDACTED***'
    """
    if not text:
        return text

    sanitized = re.sub(r"://([\w.-]+):([\w.-]+)@", r"://***:***@", text)
    sanitized = re.sub(
        r"Authorization:\s*[^\n\r]+",
        "Authorization: ***REDACTED***",
        sanitized,
        flags=re.IGNORECASE
    )
    sanitized = re.sub(
        r"Bearer\s+[^\s\n\r]+",
        "Bearer ***REDACTED***",
        sanitized,
        flags=re.IGNORECASE
    )
    sanitized = re.sub(
        r"(access_?token|api_?token|token)([\"']?\s*[:=]\s*[\"']?)([^\"'\s&,}]+)",
        r"\1\2***REDACTED***",
        sanitized,
        flags=re.IGNORECASE
    )
    return sanitized


class HostingAPI:
    """Thin client over the hosting REST API with error translation.

    Example:
        >>> api = HostingAPI(Authenticator())
        >>> site = api.create_site("summer-sale-1700000000000")
        >>> site["id"]
        '3f1c...'
    """

    def __init__(self, authenticator: Authenticator,
                 session: Optional[requests.Session] = None,
                 timeout: float = REQUEST_TIMEOUT):
        """Initialize the client.

        Args:
            authenticator: Source of the API token and base URL
            session: Session to send requests with (created lazily when omitted)
            timeout: Per-request timeout in seconds
        """
        self._authenticator = authenticator
        self._session = session
        self._credentials: Optional[Credentials] = None
        self.timeout = timeout
        self.retry_budget: Optional[RetryBudget] = None

    def new_retry_budget(self, **kwargs) -> RetryBudget:
        """Start a fresh retry budget shared by all following calls."""
        self.retry_budget = RetryBudget(**kwargs)
        return self.retry_budget

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _get_credentials(self) -> Credentials:
        if self._credentials is None:
            self._credentials = self._authenticator.get_credentials()
        return self._credentials

    def _sanitize_credentials(self, text: str) -> str:
        return sanitize_credentials(text)

    @staticmethod
    def _host_message(response: requests.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text.strip() or response.reason or f"HTTP {response.status_code}"
        if isinstance(payload, dict):
            for key in ("message", "error", "errors"):
                if payload.get(key):
                    return str(payload[key])
        return response.text.strip() or f"HTTP {response.status_code}"

    def _translate_error(self, response: requests.Response, operation: str) -> Exception:
        """Translate an HTTP error response into a typed exception.

        Args:
            response: The failed response
            operation: Description of the operation (for messages and logging)

        Returns:
            Exception: NetworkError for retryable statuses, HostApiError otherwise
        """
        status = response.status_code
        message = self._host_message(response)
        safe_message = self._sanitize_credentials(message)

        if status == 429 or status >= 500:
            return NetworkError(f"{operation} failed with HTTP {status}: {safe_message}",
                                endpoint=operation, status_code=status)
        if status == 401:
            return InvalidCredentialsError(endpoint=self._get_credentials().url, host_message=message)

        logger.error(f"Hosting API operation failed: {operation} - HTTP {status}: {safe_message}")
        return HostApiError(status, message, endpoint=operation)

    def _send(self, method: str, path: str, operation: str, **kwargs) -> Any:
        creds = self._get_credentials()
        headers = {"Authorization": f"Bearer {creds.api_token}"}
        headers.update(kwargs.pop("headers", {}))
        try:
            response = self._get_session().request(
                method, f"{creds.url}{path}", headers=headers, timeout=self.timeout, **kwargs
            )
        except (Timeout, RequestsConnectionError) as e:
            raise NetworkError(
                f"{operation} failed: {self._sanitize_credentials(str(e))}", endpoint=operation
            ) from e

        if response.status_code >= 400:
            raise self._translate_error(response, operation)

        logger.debug(f"{operation} -> HTTP {response.status_code}")
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _request(self, method: str, path: str, operation: str, **kwargs) -> Any:
        return retry_on_transient(self._send, method, path, operation,
                                  budget=self.retry_budget, **kwargs)

    # Sites

    def list_sites(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/sites", "list_sites") or []

    def get_site(self, site_id: str) -> Dict[str, Any]:
        """Fetch a site.

        Raises:
            SiteNotFoundError: If the site does not exist
            HostApiError: For other client errors
            NetworkError: If the API stays unreachable
        """
        site_id = validate_resource_id(site_id, "site_id")
        try:
            return self._request("GET", f"/sites/{site_id}", f"get_site({site_id})")
        except HostApiError as e:
            if e.status_code == 404:
                raise SiteNotFoundError(site_id, e.host_message) from e
            raise

    def create_site(self, name: str, **fields) -> Dict[str, Any]:
        body = {"name": name}
        body.update(fields)
        return self._request("POST", "/sites", f"create_site({name})", json=body)

    def update_site(self, site_id: str, **fields) -> Dict[str, Any]:
        site_id = validate_resource_id(site_id, "site_id")
        return self._request("PATCH", f"/sites/{site_id}", f"update_site({site_id})", json=fields)

    def delete_site(self, site_id: str) -> None:
        site_id = validate_resource_id(site_id, "site_id")
        self._request("DELETE", f"/sites/{site_id}", f"delete_site({site_id})")

    # Deploys

    def create_deploy(self, site_id: str, files: Dict[str, str], draft: bool = False) -> Dict[str, Any]:
        """Create a manifest deploy.

        Args:
            site_id: Target site
            files: Deploy path -> SHA-1 digest for every file
            draft: Create a draft (preview) deploy

        Returns:
            Deploy record; its "required" list holds the digests to upload
        """
        site_id = validate_resource_id(site_id, "site_id")
        return self._request(
            "POST", f"/sites/{site_id}/deploys", f"create_deploy({site_id})",
            json={"files": files, "draft": draft}
        )

    def deploy_archive(self, site_id: str, archive: bytes) -> Dict[str, Any]:
        """Create a deploy from a ZIP archive built server-side."""
        site_id = validate_resource_id(site_id, "site_id")
        return self._request(
            "POST", f"/sites/{site_id}/deploys", f"deploy_archive({site_id})",
            data=archive, headers={"Content-Type": "application/zip"}
        )

    def upload_deploy_file(self, deploy_id: str, path: str, content: bytes) -> Dict[str, Any]:
        deploy_id = validate_resource_id(deploy_id, "deploy_id")
        encoded_path = quote("/" + path.lstrip("/"))
        return self._request(
            "PUT", f"/deploys/{deploy_id}/files{encoded_path}", f"upload_deploy_file({deploy_id}, {path})",
            data=content, headers={"Content-Type": "application/octet-stream"}
        )

    def get_deploy(self, deploy_id: str) -> Dict[str, Any]:
        deploy_id = validate_resource_id(deploy_id, "deploy_id")
        return self._request("GET", f"/deploys/{deploy_id}", f"get_deploy({deploy_id})")

    def cancel_deploy(self, deploy_id: str) -> Dict[str, Any]:
        deploy_id = validate_resource_id(deploy_id, "deploy_id")
        return self._request("POST", f"/deploys/{deploy_id}/cancel", f"cancel_deploy({deploy_id})")

    # DNS

    def create_dns_zone(self, domain: str, site_id: str) -> Dict[str, Any]:
        site_id = validate_resource_id(site_id, "site_id")
        return self._request(
            "POST", "/dns_zones", f"create_dns_zone({domain})",
            json={"name": domain, "site_id": site_id}
        )

    def list_dns_zones(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/dns_zones", "list_dns_zones") or []

    def delete_dns_zone(self, zone_id: str) -> None:
        zone_id = validate_resource_id(zone_id, "zone_id")
        self._request("DELETE", f"/dns_zones/{zone_id}", f"delete_dns_zone({zone_id})")

    def get_site_dns(self, site_id: str) -> List[Dict[str, Any]]:
        """DNS zones and records the provider expects for a site."""
        site_id = validate_resource_id(site_id, "site_id")
        return self._request("GET", f"/sites/{site_id}/dns", f"get_site_dns({site_id})") or []

    # SSL

    def provision_ssl(self, site_id: str) -> Dict[str, Any]:
        site_id = validate_resource_id(site_id, "site_id")
        return self._request("POST", f"/sites/{site_id}/ssl", f"provision_ssl({site_id})")

    def get_ssl_status(self, site_id: str) -> Dict[str, Any]:
        site_id = validate_resource_id(site_id, "site_id")
        return self._request("GET", f"/sites/{site_id}/ssl", f"get_ssl_status({site_id})") or {}
