"""Content injection engine.

Turns one component instance into production markup:

    1. compile the variation's template (cached per variation and source)
    2. drop editor-only blocks and developer comments
    3. prune hidden blocks, unwrapping blocks whose key is visible or absent
    4. substitute every reference with its literal value
    5. normalize whitespace and stamp the canonical component name

The engine performs no I/O. A template that cannot be compiled or that lacks
a hook required by its variation is replaced by a fallback skeleton and the
TemplateError is logged and returned with the result instead of raised.

Rendering is idempotent: feeding the engine its own output returns that
output unchanged.
"""

import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Tuple

from src.page_model.models import ComponentInstance, ComponentVariation, GlobalTheme

from .errors import MissingHookError, TemplateError
from .fallback import build_fallback_source
from .library import lookup_template
from .parser import TemplateParser
from .renderers import RenderVariant, get_renderer
from .template_model import CompiledTemplate, FieldKind, RenderContext

logger = logging.getLogger(__name__)

BLANK_RUN = re.compile(r"\n{3,}")


@dataclass
class InjectionResult:
    """Rendered component.

    Attributes:
        component_id: Instance id the markup belongs to
        name: Canonical component name, e.g. HeroVariation1
        html: Rendered markup
        used_fallback: True when the fallback skeleton was rendered
        errors: Recovered template errors (empty on a clean render)
    """
    component_id: str
    name: str
    html: str
    used_fallback: bool = False
    errors: List[TemplateError] = field(default_factory=list)


def name_marker(name: str) -> str:
    return f"<!-- component: {name} -->"


def normalize_whitespace(text: str) -> str:
    """Strip trailing spaces, collapse blank-line runs and trim the ends."""
    lines = [line.rstrip() for line in text.replace("\r\n", "\n").split("\n")]
    collapsed = BLANK_RUN.sub("\n\n", "\n".join(lines))
    return collapsed.strip("\n")


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def theme_namespace(theme: GlobalTheme) -> Dict[str, str]:
    """Theme values addressable as theme.primary_color or theme.primaryColor."""
    values = asdict(theme)
    values.update({_camel_case(key): value for key, value in list(values.items())})
    return values


class ContentInjectionEngine:
    """Renders component instances through compiled templates.

    Example:
        >>> engine = ContentInjectionEngine()
        >>> result = engine.inject(instance, theme)
        >>> result.name
        'HeroVariation1'
    """

    def __init__(self, variant: RenderVariant = RenderVariant.PRODUCTION):
        self.variant = variant
        self.renderer = get_renderer(variant)
        self._cache: Dict[Tuple[str, int, str], CompiledTemplate] = {}

    def inject(self, instance: ComponentInstance, theme: GlobalTheme) -> InjectionResult:
        """Render one component instance.

        Args:
            instance: Component instance with resolved data
            theme: Global theme

        Returns:
            InjectionResult; never raises TemplateError
        """
        variation = instance.variation
        name = variation.export_name
        context = self._build_context(instance, theme)

        try:
            compiled = self._compile_for(variation)
            if not self._is_rendered_output(compiled, name):
                self._check_hooks(compiled, variation, name)
        except TemplateError as e:
            logger.warning(f"{e}; rendering fallback skeleton for component {instance.id}")
            return InjectionResult(
                component_id=instance.id,
                name=name,
                html=self._render_fallback(instance, context),
                used_fallback=True,
                errors=[e],
            )

        html = self._finalize(self.renderer.render(compiled, context), name)
        logger.debug(f"Injected {name} for component {instance.id} ({len(html)} chars)")
        return InjectionResult(component_id=instance.id, name=name, html=html)

    def compile(self, variation: ComponentVariation) -> CompiledTemplate:
        """Compile (or fetch from cache) the template of a variation.

        Raises:
            TemplateError: If no template exists or it does not compile
        """
        return self._compile_for(variation)

    def _compile_for(self, variation: ComponentVariation) -> CompiledTemplate:
        source = variation.template
        if not source:
            library_entry = lookup_template(variation.component_type, variation.variation_number)
            if library_entry is None:
                raise TemplateError("no template available", variation.export_name)
            source = library_entry.source

        key = (variation.component_type, variation.variation_number, source)
        compiled = self._cache.get(key)
        if compiled is None:
            compiled = TemplateParser.compile(source, variation.export_name)
            self._cache[key] = compiled
        return compiled

    @staticmethod
    def _required_hooks(variation: ComponentVariation) -> Tuple[Tuple[str, ...], int]:
        required_fields = tuple(variation.required_fields)
        required_images = variation.required_images
        if not variation.template:
            library_entry = lookup_template(variation.component_type, variation.variation_number)
            if library_entry is not None:
                required_fields = required_fields or library_entry.required_fields
                required_images = required_images or library_entry.required_images
        return required_fields, required_images

    def _check_hooks(self, compiled: CompiledTemplate, variation: ComponentVariation, name: str) -> None:
        required_fields, required_images = self._required_hooks(variation)
        referenced = compiled.referenced(FieldKind.CONTENT)
        missing = [f"content.{f}" for f in required_fields if f not in referenced]

        image_slots = compiled.referenced(FieldKind.MEDIA_URLS)
        if len(image_slots) < required_images:
            missing.append(f"mediaUrls ({required_images - len(image_slots)} image slot(s))")

        if missing:
            raise MissingHookError(missing, name)

    @staticmethod
    def _is_rendered_output(compiled: CompiledTemplate, name: str) -> bool:
        return compiled.is_resolved and compiled.source.lstrip().startswith(name_marker(name))

    def _build_context(self, instance: ComponentInstance, theme: GlobalTheme) -> RenderContext:
        return RenderContext(
            content=instance.content,
            styles=instance.styles,
            media_urls=instance.media_urls,
            visibility=instance.visibility,
            custom_actions=instance.custom_actions,
            theme=theme_namespace(theme),
        )

    def _render_fallback(self, instance: ComponentInstance, context: RenderContext) -> str:
        variation = instance.variation
        source = build_fallback_source(
            variation.component_type,
            variation.variation_number,
            instance.content.keys(),
            instance.media_urls.keys(),
            instance.custom_actions.keys(),
        )
        compiled = TemplateParser.compile(source, f"{variation.export_name} fallback")
        return self._finalize(self.renderer.render(compiled, context), variation.export_name)

    @staticmethod
    def _finalize(text: str, name: str) -> str:
        body = normalize_whitespace(text)
        marker = name_marker(name)
        if body.startswith(marker):
            return body
        return f"{marker}\n{body}"


def inject_component(
    instance: ComponentInstance,
    theme: GlobalTheme,
    variant: RenderVariant = RenderVariant.PRODUCTION,
    engine: Optional[ContentInjectionEngine] = None,
) -> InjectionResult:
    """Convenience wrapper rendering a single instance."""
    engine = engine or ContentInjectionEngine(variant)
    return engine.inject(instance, theme)
