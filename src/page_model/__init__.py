"""Page model types, store interface and validation.

This package describes the input of the publishing pipeline: a page
definition with its ordered component instances, loaded from a store that
also receives the deployment write-back.
"""

from .errors import (
    SitePublishError,
    PageModelError,
    PageNotFoundError,
    ValidationError,
    StoreError,
)
from .models import (
    PageStatus,
    TextDirection,
    GlobalTheme,
    SeoConfig,
    TrackingConfig,
    ComponentVariation,
    ComponentInstance,
    PageDefinition,
    PageModel,
    DeploymentInfo,
)
from .store import PageStore, PageModelLoader, InMemoryPageStore, YamlPageStore
from .validator import PageValidator

__all__ = [
    "SitePublishError",
    "PageModelError",
    "PageNotFoundError",
    "ValidationError",
    "StoreError",
    "PageStatus",
    "TextDirection",
    "GlobalTheme",
    "SeoConfig",
    "TrackingConfig",
    "ComponentVariation",
    "ComponentInstance",
    "PageDefinition",
    "PageModel",
    "DeploymentInfo",
    "PageStore",
    "PageModelLoader",
    "InMemoryPageStore",
    "YamlPageStore",
    "PageValidator",
]
