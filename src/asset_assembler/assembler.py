"""Asset assembler: page model in, deployable file set out.

Validation happens first, so a malformed page fails before any network call.
Components are rendered through the content injection engine, ordered by
order_index and wrapped in their container element. Identical inputs give
byte-identical files apart from the build-timestamp meta tag.
"""

import html
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from src.content_injection.engine import ContentInjectionEngine, InjectionResult
from src.content_injection.renderers import RenderVariant
from src.page_model.models import ComponentInstance, PageModel
from src.page_model.validator import PageValidator

from .css_builder import CssBuilder, google_fonts_url
from .manifest import FileManifest
from .provider_files import build_headers_file, build_netlify_toml, build_redirects_file
from .runtime_js import build_runtime
from .seo import DEFAULT_SITE_SUFFIX, SeoHeadBuilder, page_title
from .tracking import TrackingScriptBuilder

logger = logging.getLogger(__name__)

INDEX_HTML = "index.html"
STYLES_CSS = "styles.css"
APP_JS = "app.js"
HEADERS_FILE = "_headers"
REDIRECTS_FILE = "_redirects"
NETLIFY_TOML = "netlify.toml"


@dataclass
class AssembledSite:
    """Output of one assembly.

    Attributes:
        files: Deployable file set (index.html, styles.css, app.js, _headers, _redirects)
        components: Injection results in page order
        diagnostics: Recovered problems (fallback components, dropped tracking ids)
        build_time: Timestamp stamped into index.html
    """
    files: FileManifest
    components: List[InjectionResult] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)
    build_time: Optional[datetime] = None

    def source_archive_files(self) -> FileManifest:
        """File set for a server-side build: the static files plus netlify.toml."""
        archive = self.files.copy()
        archive.add(NETLIFY_TOML, build_netlify_toml())
        return archive

    @property
    def used_fallback(self) -> bool:
        return any(result.used_fallback for result in self.components)


def ordered_components(model: PageModel) -> List[ComponentInstance]:
    """Instances by ascending order_index; sorted() keeps input order on ties."""
    return sorted(model.components, key=lambda instance: instance.order_index)


def wrap_component(result: InjectionResult) -> str:
    component_id = html.escape(result.component_id, quote=True)
    return (
        f'<div id="component-{component_id}" data-component-id="{component_id}" '
        f'data-component="{result.name}">\n{result.html}\n</div>'
    )


class AssetAssembler:
    """Builds the complete static file set for a page.

    Example:
        >>> assembler = AssetAssembler()
        >>> site = assembler.assemble(model, build_time=datetime(2024, 1, 1))
        >>> site.files.paths
        ['_headers', '_redirects', 'app.js', 'index.html', 'styles.css']
    """

    def __init__(
        self,
        engine: Optional[ContentInjectionEngine] = None,
        checkout_fields_url: Optional[str] = None,
        site_suffix: str = DEFAULT_SITE_SUFFIX,
    ):
        self.engine = engine or ContentInjectionEngine(RenderVariant.PRODUCTION)
        self.checkout_fields_url = checkout_fields_url
        self.seo_builder = SeoHeadBuilder(site_suffix)

    def assemble(
        self,
        model: PageModel,
        build_time: Optional[datetime] = None,
        deployment_url: Optional[str] = None,
    ) -> AssembledSite:
        """Assemble a page.

        Args:
            model: Page with its component instances
            build_time: Timestamp for the build-timestamp meta tag (defaults to now)
            deployment_url: Known public URL, used for canonical and og:url

        Returns:
            AssembledSite with the file set and diagnostics

        Raises:
            ValidationError: If the page model is malformed
        """
        PageValidator.validate(model)
        build_time = build_time or datetime.now(timezone.utc)
        page = model.page
        components = ordered_components(model)
        diagnostics: List[str] = []

        results = []
        for instance in components:
            result = self.engine.inject(instance, page.theme)
            for error in result.errors:
                diagnostics.append(f"component {instance.id}: {error}")
            results.append(result)

        tracking_html, tracking_warnings = TrackingScriptBuilder.build(page.tracking)
        diagnostics.extend(tracking_warnings)

        files = FileManifest()
        files.add(INDEX_HTML, self._build_index(model, results, tracking_html, build_time, deployment_url))
        files.add(STYLES_CSS, CssBuilder.build(page.theme, components))
        files.add(APP_JS, build_runtime(page, components, self.checkout_fields_url))
        files.add(HEADERS_FILE, build_headers_file())
        files.add(REDIRECTS_FILE, build_redirects_file())

        logger.info(
            f"Assembled page {page.id}: {len(results)} components, "
            f"{len(files)} files, {files.total_bytes} bytes"
        )
        return AssembledSite(files=files, components=results, diagnostics=diagnostics, build_time=build_time)

    def _build_index(self, model: PageModel, results: List[InjectionResult], tracking_html: str,
                     build_time: datetime, deployment_url: Optional[str]) -> str:
        page = model.page
        theme = page.theme
        head = [
            '<meta charset="UTF-8">',
            '<meta name="viewport" content="width=device-width, initial-scale=1.0">',
            f"<title>{html.escape(page_title(page))}</title>",
            f'<meta name="build-timestamp" content="{build_time.isoformat()}">',
            self.seo_builder.build(page, deployment_url),
        ]
        font_url = google_fonts_url(theme.font_family)
        if font_url:
            head.extend([
                '<link rel="preconnect" href="https://fonts.googleapis.com">',
                '<link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>',
                f'<link rel="stylesheet" href="{html.escape(font_url, quote=True)}">',
            ])
        head.append('<link rel="stylesheet" href="styles.css">')
        head.append(tracking_html)

        body = "\n".join(wrap_component(result) for result in results)
        return (
            "<!DOCTYPE html>\n"
            f'<html lang="{html.escape(theme.language, quote=True)}" dir="{theme.direction}">\n'
            "<head>\n"
            f"{_indent(chr(10).join(head))}\n"
            "</head>\n"
            "<body>\n"
            '<main id="landing-page">\n'
            f"{body}\n"
            "</main>\n"
            '<div id="toast-container" aria-live="polite"></div>\n'
            '<script src="app.js" defer></script>\n'
            "</body>\n"
            "</html>\n"
        )


def _indent(text: str, prefix: str = "  ") -> str:
    return "\n".join(prefix + line if line else line for line in text.split("\n"))
