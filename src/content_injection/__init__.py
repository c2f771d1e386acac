"""Content injection engine.

Compiles component templates into a typed template model and renders them
against component data, producing production markup (or editor markup for
the editable variant).

Key classes:
    ContentInjectionEngine: Renders component instances
    TemplateParser: Compiles template source
    ProductionRenderer / EditableRenderer: The two capability sets
"""

from .engine import ContentInjectionEngine, InjectionResult, inject_component, normalize_whitespace
from .errors import TemplateError, TemplateSyntaxError, MissingHookError
from .parser import TemplateParser
from .renderers import (
    RenderVariant,
    TemplateRenderer,
    ProductionRenderer,
    EditableRenderer,
    get_renderer,
)
from .template_model import (
    CompiledTemplate,
    ConditionalBlock,
    EditorBlock,
    FieldKind,
    FieldRef,
    Literal,
    RenderContext,
)

__all__ = [
    "ContentInjectionEngine",
    "InjectionResult",
    "inject_component",
    "normalize_whitespace",
    "TemplateError",
    "TemplateSyntaxError",
    "MissingHookError",
    "TemplateParser",
    "RenderVariant",
    "TemplateRenderer",
    "ProductionRenderer",
    "EditableRenderer",
    "get_renderer",
    "CompiledTemplate",
    "ConditionalBlock",
    "EditorBlock",
    "FieldKind",
    "FieldRef",
    "Literal",
    "RenderContext",
]
