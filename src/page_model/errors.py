"""Typed exception hierarchy for site-publish errors.

This module defines the base exception for the whole tool plus the errors
raised while loading and validating page models. Every package-specific
exception inherits from SitePublishError so callers can catch any
application-level failure in one place.
"""

from typing import Optional


class SitePublishError(Exception):
    """Base exception for all site-publish errors.

    Use this to catch any application-level error from the tool.
    """
    pass


class PageModelError(SitePublishError):
    """Base exception for page model loading and validation errors."""
    pass


class PageNotFoundError(PageModelError):
    """Raised when the store has no page with the requested id."""

    def __init__(self, page_id: str):
        super().__init__(f"Page {page_id} not found")
        self.page_id = page_id


class ValidationError(PageModelError):
    """Raised when a page model is malformed.

    Validation always happens before any network call, so a ValidationError
    means nothing was sent to the hosting provider.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        if field:
            full_message = f"Invalid page model ({field}): {message}"
        else:
            full_message = f"Invalid page model: {message}"
        super().__init__(full_message)
        self.field = field
        self.original_message = message


class StoreError(PageModelError):
    """Raised when the page store cannot be read or written."""

    def __init__(self, store_path: str, operation: str, reason: Optional[str] = None):
        message = f"Page store operation '{operation}' failed for {store_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.store_path = store_path
        self.operation = operation
        self.reason = reason
