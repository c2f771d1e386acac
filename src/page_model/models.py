"""Data models for page definitions and their component instances.

This module defines all data structures that describe a page as it is
loaded from the store: the page record itself, its ordered component
instances, the component variation templates they reference, and the
theme, SEO and tracking value objects. All models use dataclasses.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class PageStatus(Enum):
    """Publication status of a page."""

    DRAFT = "draft"
    PUBLISHING = "publishing"
    PUBLISHED = "published"
    ERROR = "error"


class TextDirection(Enum):
    """Text direction of the rendered document."""

    LTR = "ltr"
    RTL = "rtl"


@dataclass(frozen=True)
class GlobalTheme:
    """Page-wide theme values.

    Pure value object with no identity; two themes with the same values are
    interchangeable.

    Attributes:
        primary_color: Main brand color (CSS color string)
        secondary_color: Accent color used for gradients and outlines
        background_color: Document background color
        text_color: Default body text color
        font_family: Font family name, loaded from Google Fonts when not "inherit"
        direction: Text direction, "ltr" or "rtl"
        language: BCP 47 language tag for the html lang attribute
    """
    primary_color: str = "#2563eb"
    secondary_color: str = "#3730a3"
    background_color: str = "#ffffff"
    text_color: str = "#000000"
    font_family: str = "Inter"
    direction: str = "ltr"
    language: str = "en"


@dataclass(frozen=True)
class SeoConfig:
    """SEO metadata for the document head.

    Attributes:
        title: Page title (falls back to the page slug)
        description: Meta description
        keywords: Keywords joined into the keywords meta tag
        canonical: Canonical URL (falls back to the deployment URL)
        og_image: Open Graph image URL, also used for icons
    """
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    canonical: Optional[str] = None
    og_image: Optional[str] = None


@dataclass(frozen=True)
class TrackingConfig:
    """Third-party tracking identifiers.

    Identifiers are validated at render time; an invalid identifier is
    dropped with a warning rather than failing the page.
    """
    facebook_pixel_id: Optional[str] = None
    google_analytics_id: Optional[str] = None
    clarity_id: Optional[str] = None
    track_page_view: bool = False


@dataclass(frozen=True)
class ComponentVariation:
    """Immutable component template identified by (type, variation number).

    Attributes:
        component_type: Component family, e.g. "hero" or "cta"
        variation_number: Variation within the family, starting at 1
        template: Template source; empty means use the built-in library
        required_fields: Content fields the template must reference
        required_images: Number of image slots the template expects
        default_visibility: Visibility seeded into instances loaded from the store
    """
    component_type: str
    variation_number: int
    template: str = ""
    required_fields: tuple = ()
    required_images: int = 0
    default_visibility: tuple = ()

    @property
    def export_name(self) -> str:
        """Canonical component name, e.g. HeroVariation1."""
        return f"{self.component_type.capitalize()}Variation{self.variation_number}"

    @property
    def key(self) -> tuple:
        return (self.component_type, self.variation_number)


@dataclass
class ComponentInstance:
    """A content-filled block on a page.

    Attributes:
        id: Unique instance identifier, used as the DOM container id
        order_index: Position on the page (ascending, unique within a page)
        variation: Template this instance renders
        content: Resolved content values keyed by field name
        styles: Style values keyed by element name
        visibility: Element visibility; a missing key means visible
        media_urls: Image/video URLs keyed by slot name
        custom_actions: Button actions keyed by button name
    """
    id: str
    order_index: int
    variation: ComponentVariation
    content: Dict[str, Any] = field(default_factory=dict)
    styles: Dict[str, Any] = field(default_factory=dict)
    visibility: Dict[str, bool] = field(default_factory=dict)
    media_urls: Dict[str, str] = field(default_factory=dict)
    custom_actions: Dict[str, Any] = field(default_factory=dict)

    def is_visible(self, key: str) -> bool:
        """Return visibility for key, defaulting to True when absent."""
        return self.visibility.get(key, True) is not False


@dataclass
class PageDefinition:
    """Page-level record owned by the store.

    Attributes:
        id: Page identifier
        slug: URL-friendly page name, used to derive site names
        theme: Global theme
        seo: SEO configuration
        tracking: Tracking configuration
        status: Publication status
        site_id: Remote site identifier from a previous publish, if any
        url: Public URL of the last successful publish
        last_deployed_at: ISO 8601 timestamp of the last successful publish
        created_at: ISO 8601 creation timestamp
        updated_at: ISO 8601 last-modified timestamp
    """
    id: str
    slug: str
    theme: GlobalTheme = field(default_factory=GlobalTheme)
    seo: SeoConfig = field(default_factory=SeoConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    status: PageStatus = PageStatus.DRAFT
    site_id: Optional[str] = None
    url: Optional[str] = None
    last_deployed_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class PageModel:
    """A page together with its component instances, as loaded from the store."""
    page: PageDefinition
    components: List[ComponentInstance] = field(default_factory=list)


@dataclass
class DeploymentInfo:
    """Deployment details written back to the store.

    A publish that is still building records only the site id; url and
    deployed_at stay None and are cleared in the store.
    """
    site_id: str
    url: Optional[str] = None
    deployed_at: Optional[datetime] = None
