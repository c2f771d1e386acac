"""Test fixtures for site-publish tests.

This package provides:
- Page model builders and a sample YAML page store
- An in-memory fake of the hosting provider's REST API
"""

from .sample_pages import (
    FIXED_BUILD_TIME,
    HERO_CONTENT,
    make_instance,
    make_page_model,
    make_store_document,
    make_variation,
    write_store,
)
from .fake_hosting import FakeHostingProvider, FakeResponse

__all__ = [
    "FIXED_BUILD_TIME",
    "HERO_CONTENT",
    "make_instance",
    "make_page_model",
    "make_store_document",
    "make_variation",
    "write_store",
    "FakeHostingProvider",
    "FakeResponse",
]
