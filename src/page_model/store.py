"""Page store interface and implementations.

The store is the external collaborator that owns page data. The deployment
orchestrator only reads a page model and writes back deployment results, so
the interface is deliberately small:

    get_page_with_components(page_id) -> PageModel
    persist_deployment_info(page_id, DeploymentInfo)
    update_page_status(page_id, PageStatus)
    clear_deployment_info(page_id)

Two implementations are provided: an in-memory store (used by tests and by
callers embedding the library) and a YAML file store used by the CLI.

YAML store structure:
    pages:
      landing-1:
        slug: "summer-sale"
        status: "draft"
        site_id: null
        theme: {primary_color: "#2563eb", direction: "ltr", language: "en"}
        seo: {title: "Summer Sale", keywords: ["sale"]}
        tracking: {facebook_pixel_id: "123456789012345"}
        components:
          - id: "c1"
            order_index: 1
            variation: {type: "hero", number: 1}
            content: {headline: "Hello"}
"""

import copy
import logging
import os
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import yaml

from .errors import PageNotFoundError, StoreError, ValidationError
from .models import (
    ComponentInstance,
    ComponentVariation,
    DeploymentInfo,
    GlobalTheme,
    PageDefinition,
    PageModel,
    PageStatus,
    SeoConfig,
    TrackingConfig,
)

logger = logging.getLogger(__name__)


def _optional_text(value: Any) -> Optional[str]:
    """Store scalars as text; YAML may hand back datetimes for timestamps."""
    if value is None or value == "":
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


class PageStore(ABC):
    """Abstract page store consumed by the deployment orchestrator."""

    @abstractmethod
    def get_page_with_components(self, page_id: str) -> PageModel:
        """Load a page and its component instances.

        Raises:
            PageNotFoundError: If no page has this id
        """

    @abstractmethod
    def persist_deployment_info(self, page_id: str, info: DeploymentInfo) -> None:
        """Record the site id, and the URL and deployment time once published."""

    @abstractmethod
    def update_page_status(self, page_id: str, status: PageStatus) -> None:
        """Set the publication status of a page."""

    @abstractmethod
    def clear_deployment_info(self, page_id: str) -> None:
        """Forget the site id and URL of a page after its site was removed."""


class PageModelLoader:
    """Parses raw page dictionaries into PageModel objects.

    Structural problems (wrong types, missing ids) raise ValidationError with
    the offending field so the caller can report it before any deployment
    work starts.
    """

    THEME_FIELDS = (
        'primary_color', 'secondary_color', 'background_color',
        'text_color', 'font_family', 'direction', 'language',
    )

    @classmethod
    def parse_page(cls, page_id: str, page_dict: Dict[str, Any]) -> PageModel:
        """Parse one page entry.

        Args:
            page_id: Page identifier (the mapping key in the store)
            page_dict: Raw page dictionary

        Returns:
            Parsed PageModel

        Raises:
            ValidationError: If the page dictionary is malformed
        """
        if not isinstance(page_dict, dict):
            raise ValidationError(
                f"page must be a dictionary, got {type(page_dict).__name__}",
                'page'
            )

        status_value = page_dict.get('status', PageStatus.DRAFT.value)
        try:
            status = PageStatus(status_value)
        except ValueError:
            raise ValidationError(f"unknown status '{status_value}'", 'status')

        page = PageDefinition(
            id=str(page_id),
            slug=str(page_dict.get('slug') or page_id),
            theme=cls._parse_theme(page_dict.get('theme') or {}),
            seo=cls._parse_seo(page_dict.get('seo') or {}),
            tracking=cls._parse_tracking(page_dict.get('tracking') or {}),
            status=status,
            site_id=_optional_text(page_dict.get('site_id')),
            url=_optional_text(page_dict.get('url')),
            last_deployed_at=_optional_text(page_dict.get('last_deployed_at')),
            created_at=_optional_text(page_dict.get('created_at')),
            updated_at=_optional_text(page_dict.get('updated_at')),
        )

        raw_components = page_dict.get('components') or []
        if not isinstance(raw_components, list):
            raise ValidationError(
                f"components must be a list, got {type(raw_components).__name__}",
                'components'
            )

        components = [
            cls._parse_component(raw, index)
            for index, raw in enumerate(raw_components)
        ]
        return PageModel(page=page, components=components)

    @classmethod
    def _parse_theme(cls, theme_dict: Dict[str, Any]) -> GlobalTheme:
        if not isinstance(theme_dict, dict):
            raise ValidationError("theme must be a dictionary", 'theme')
        values = {
            name: theme_dict[name]
            for name in cls.THEME_FIELDS
            if theme_dict.get(name) is not None
        }
        return GlobalTheme(**values)

    @staticmethod
    def _parse_seo(seo_dict: Dict[str, Any]) -> SeoConfig:
        if not isinstance(seo_dict, dict):
            raise ValidationError("seo must be a dictionary", 'seo')
        keywords = seo_dict.get('keywords') or []
        if isinstance(keywords, str):
            keywords = [k.strip() for k in keywords.split(',') if k.strip()]
        if not isinstance(keywords, list):
            raise ValidationError("keywords must be a list of strings", 'seo.keywords')
        return SeoConfig(
            title=seo_dict.get('title'),
            description=seo_dict.get('description'),
            keywords=[str(k) for k in keywords],
            canonical=seo_dict.get('canonical'),
            og_image=seo_dict.get('og_image'),
        )

    @staticmethod
    def _parse_tracking(tracking_dict: Dict[str, Any]) -> TrackingConfig:
        if not isinstance(tracking_dict, dict):
            raise ValidationError("tracking must be a dictionary", 'tracking')
        conversion_events = tracking_dict.get('conversion_events') or {}

        def _optional_str(value: Any) -> Optional[str]:
            return str(value) if value not in (None, "") else None

        return TrackingConfig(
            facebook_pixel_id=_optional_str(tracking_dict.get('facebook_pixel_id')),
            google_analytics_id=_optional_str(tracking_dict.get('google_analytics_id')),
            clarity_id=_optional_str(tracking_dict.get('clarity_id')),
            track_page_view=bool(conversion_events.get('page_view', False)),
        )

    @staticmethod
    def _parse_variation(raw: Any, component_id: str) -> ComponentVariation:
        field_name = f"components[{component_id}].variation"
        if not isinstance(raw, dict):
            raise ValidationError("variation must be a dictionary", field_name)

        component_type = raw.get('type') or raw.get('component_type')
        number = raw.get('number', raw.get('variation_number'))
        if not component_type:
            raise ValidationError("variation is missing its type", field_name)
        if not isinstance(number, int) or isinstance(number, bool) or number < 1:
            raise ValidationError(
                f"variation number must be a positive integer, got {number!r}",
                field_name
            )

        return ComponentVariation(
            component_type=str(component_type).lower(),
            variation_number=number,
            template=raw.get('template') or "",
            required_fields=tuple(raw.get('required_fields') or ()),
            required_images=int(raw.get('required_images') or 0),
            default_visibility=tuple(sorted((raw.get('default_visibility') or {}).items())),
        )

    @classmethod
    def _parse_component(cls, raw: Any, index: int) -> ComponentInstance:
        if not isinstance(raw, dict):
            raise ValidationError(
                f"component at index {index} must be a dictionary",
                'components'
            )

        component_id = raw.get('id')
        if not component_id:
            raise ValidationError(f"component at index {index} is missing an id", 'components')
        component_id = str(component_id)

        order_index = raw.get('order_index')
        if not isinstance(order_index, int) or isinstance(order_index, bool):
            raise ValidationError(
                f"component {component_id} has invalid order_index {order_index!r}",
                'order_index'
            )

        maps = {}
        for name in ('content', 'styles', 'visibility', 'media_urls', 'custom_actions'):
            value = raw.get(name) or {}
            if not isinstance(value, dict):
                raise ValidationError(
                    f"component {component_id} field '{name}' must be a dictionary",
                    name
                )
            maps[name] = value

        variation = cls._parse_variation(raw.get('variation'), component_id)
        maps['visibility'] = {**dict(variation.default_visibility), **maps['visibility']}

        return ComponentInstance(
            id=component_id,
            order_index=order_index,
            variation=variation,
            **maps,
        )


class InMemoryPageStore(PageStore):
    """Dictionary-backed store.

    Example:
        >>> store = InMemoryPageStore({"p1": page_model})
        >>> store.get_page_with_components("p1").page.slug
    """

    def __init__(self, pages: Optional[Dict[str, PageModel]] = None):
        self.pages: Dict[str, PageModel] = dict(pages or {})
        self.deployments: Dict[str, List[DeploymentInfo]] = {}

    def get_page_with_components(self, page_id: str) -> PageModel:
        if page_id not in self.pages:
            raise PageNotFoundError(page_id)
        return copy.deepcopy(self.pages[page_id])

    def persist_deployment_info(self, page_id: str, info: DeploymentInfo) -> None:
        if page_id not in self.pages:
            raise PageNotFoundError(page_id)
        page = self.pages[page_id].page
        page.site_id = info.site_id
        page.url = info.url
        page.last_deployed_at = info.deployed_at.isoformat() if info.deployed_at else None
        self.deployments.setdefault(page_id, []).append(info)

    def update_page_status(self, page_id: str, status: PageStatus) -> None:
        if page_id not in self.pages:
            raise PageNotFoundError(page_id)
        self.pages[page_id].page.status = status

    def clear_deployment_info(self, page_id: str) -> None:
        if page_id not in self.pages:
            raise PageNotFoundError(page_id)
        page = self.pages[page_id].page
        page.site_id = None
        page.url = None
        page.last_deployed_at = None


class YamlPageStore(PageStore):
    """YAML file-backed store.

    The file is re-read on every call so external edits are picked up, and
    rewritten in full on every write-back.
    """

    def __init__(self, store_path: str):
        self.store_path = store_path

    def get_page_with_components(self, page_id: str) -> PageModel:
        pages = self._load_pages()
        if page_id not in pages:
            raise PageNotFoundError(page_id)
        return PageModelLoader.parse_page(page_id, pages[page_id])

    def list_page_ids(self) -> List[str]:
        return sorted(str(key) for key in self._load_pages())

    def persist_deployment_info(self, page_id: str, info: DeploymentInfo) -> None:
        def _apply(page_dict: Dict[str, Any]) -> None:
            page_dict['site_id'] = info.site_id
            page_dict.pop('url', None)
            page_dict.pop('last_deployed_at', None)
            if info.url:
                page_dict['url'] = info.url
            if info.deployed_at:
                page_dict['last_deployed_at'] = info.deployed_at.isoformat()

        self._update_page(page_id, _apply)

    def update_page_status(self, page_id: str, status: PageStatus) -> None:
        def _apply(page_dict: Dict[str, Any]) -> None:
            page_dict['status'] = status.value

        self._update_page(page_id, _apply)

    def clear_deployment_info(self, page_id: str) -> None:
        def _apply(page_dict: Dict[str, Any]) -> None:
            for key in ('site_id', 'url', 'last_deployed_at'):
                page_dict.pop(key, None)

        self._update_page(page_id, _apply)

    def _update_page(self, page_id: str, apply) -> None:
        document = self._load_document()
        pages = document.get('pages') or {}
        if page_id not in pages:
            raise PageNotFoundError(page_id)
        apply(pages[page_id])
        document['pages'] = pages
        self._save_document(document)

    def _load_pages(self) -> Dict[str, Any]:
        pages = self._load_document().get('pages') or {}
        if not isinstance(pages, dict):
            raise StoreError(self.store_path, 'read', "'pages' must be a mapping")
        return {str(key): value for key, value in pages.items()}

    def _load_document(self) -> Dict[str, Any]:
        try:
            with open(self.store_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise StoreError(self.store_path, 'read', 'Store file not found')
        except PermissionError:
            raise StoreError(self.store_path, 'read', 'Permission denied')
        except OSError as e:
            raise StoreError(self.store_path, 'read', str(e))

        try:
            document = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise StoreError(self.store_path, 'parse', f"Invalid YAML syntax: {e}")

        if document is None:
            return {}
        if not isinstance(document, dict):
            raise StoreError(
                self.store_path,
                'parse',
                f"Store must be a YAML dictionary, got {type(document).__name__}"
            )
        return document

    def _save_document(self, document: Dict[str, Any]) -> None:
        yaml_str = yaml.safe_dump(
            document,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        store_dir = os.path.dirname(self.store_path)
        if store_dir:
            try:
                os.makedirs(store_dir, exist_ok=True)
            except OSError as e:
                raise StoreError(store_dir, 'create_directory', str(e))

        try:
            with open(self.store_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise StoreError(self.store_path, 'write', 'Permission denied')
        except OSError as e:
            raise StoreError(self.store_path, 'write', str(e))
        logger.debug(f"Saved page store to {self.store_path}")
