"""Exceptions raised inside the domain manager.

DomainError is converted to a structured status by DomainManager and never
reaches its callers.
"""

from src.page_model.errors import SitePublishError


class DomainError(SitePublishError):
    """Raised for invalid hostnames and failed domain lookups."""

    def __init__(self, domain: str, message: str):
        super().__init__(f"Domain {domain}: {message}")
        self.domain = domain
        self.original_message = message
