"""Renderers evaluating a compiled template against a render context.

Two renderers share one interface and differ only in their capability set:

    ProductionRenderer  drops editor blocks, removes hidden blocks and emits
                        plain literal values
    EditableRenderer    keeps editor blocks, keeps hidden blocks behind a
                        hidden wrapper and wraps content values in selection
                        spans so the page editor can target them

Callers pick one with get_renderer(variant).
"""

import html
import json
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Iterable

from .template_model import (
    Comment,
    CompiledTemplate,
    ConditionalBlock,
    EditorBlock,
    FieldKind,
    FieldRef,
    Literal,
    Node,
    RenderContext,
)


class RenderVariant(Enum):
    """Which capability set to render with."""

    PRODUCTION = "production"
    EDITABLE = "editable"


_MISSING = object()


def resolve_path(namespace: Any, path: Iterable[str]) -> Any:
    """Follow dotted path segments through nested dicts and lists.

    Returns the _MISSING sentinel when any segment does not resolve.
    """
    value = namespace
    for segment in path:
        if isinstance(value, dict):
            if segment not in value:
                return _MISSING
            value = value[segment]
        elif isinstance(value, (list, tuple)) and segment.isdigit():
            index = int(segment)
            if index >= len(value):
                return _MISSING
            value = value[index]
        else:
            return _MISSING
    return value


def escape_literal(text: str) -> str:
    """HTML-escape text and neutralise template braces.

    Braces are encoded so rendered output can never contain a template tag,
    which keeps re-rendering a no-op.
    """
    return html.escape(text, quote=True).replace("{", "&#123;").replace("}", "&#125;")


def format_value(value: Any) -> str:
    """Format a resolved value as literal output.

    Strings are escaped as-is; everything else is JSON-encoded with sorted
    keys (so output is deterministic) and then escaped.
    """
    if isinstance(value, str):
        return escape_literal(value)
    encoded = json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(",", ":"))
    return escape_literal(encoded)


class TemplateRenderer(ABC):
    """Walks a compiled template and produces text."""

    variant: RenderVariant

    def render(self, compiled: CompiledTemplate, context: RenderContext) -> str:
        return self._render_nodes(compiled.nodes, context)

    def _render_nodes(self, nodes: Iterable[Node], context: RenderContext) -> str:
        parts = []
        for node in nodes:
            if isinstance(node, Literal):
                parts.append(node.text)
            elif isinstance(node, FieldRef):
                parts.append(self.render_field(node, context))
            elif isinstance(node, ConditionalBlock):
                if context.is_visible(node.visibility_key):
                    parts.append(self._render_nodes(node.body, context))
                else:
                    parts.append(self.render_hidden_block(node, context))
            elif isinstance(node, EditorBlock):
                parts.append(self.render_editor_block(node, context))
            elif isinstance(node, Comment):
                parts.append(self.render_comment(node))
        return "".join(parts)

    def resolve_field(self, ref: FieldRef, context: RenderContext) -> str:
        """Resolve a field reference to escaped literal text."""
        if ref.kind is FieldKind.VISIBILITY:
            return format_value(context.is_visible(ref.root))

        value = resolve_path(context.namespace(ref.kind), ref.path)
        if value is _MISSING or value is None:
            return ref.default if ref.default is not None else ""
        return format_value(value)

    @abstractmethod
    def render_field(self, ref: FieldRef, context: RenderContext) -> str:
        """Render a field reference."""

    @abstractmethod
    def render_hidden_block(self, block: ConditionalBlock, context: RenderContext) -> str:
        """Render a conditional block whose visibility key is False."""

    @abstractmethod
    def render_editor_block(self, block: EditorBlock, context: RenderContext) -> str:
        """Render an editor-only block."""

    def render_comment(self, comment: Comment) -> str:
        return ""


class ProductionRenderer(TemplateRenderer):
    """Renders deployable output: no editor constructs, hidden blocks pruned."""

    variant = RenderVariant.PRODUCTION

    def render_field(self, ref: FieldRef, context: RenderContext) -> str:
        return self.resolve_field(ref, context)

    def render_hidden_block(self, block: ConditionalBlock, context: RenderContext) -> str:
        return ""

    def render_editor_block(self, block: EditorBlock, context: RenderContext) -> str:
        return ""


class EditableRenderer(TemplateRenderer):
    """Renders the editor preview with selection wrappers."""

    variant = RenderVariant.EDITABLE

    def render_field(self, ref: FieldRef, context: RenderContext) -> str:
        value = self.resolve_field(ref, context)
        # Attribute values cannot hold markup
        if ref.in_tag or ref.kind is not FieldKind.CONTENT:
            return value
        return (
            f'<span data-field="{escape_literal(ref.name)}" data-editable="true">'
            f'{value}</span>'
        )

    def render_hidden_block(self, block: ConditionalBlock, context: RenderContext) -> str:
        body = self._render_nodes(block.body, context)
        key = escape_literal(block.visibility_key)
        return f'<div data-visibility-key="{key}" data-hidden="true" hidden>{body}</div>'

    def render_editor_block(self, block: EditorBlock, context: RenderContext) -> str:
        return self._render_nodes(block.body, context)


_RENDERERS = {
    RenderVariant.PRODUCTION: ProductionRenderer(),
    RenderVariant.EDITABLE: EditableRenderer(),
}


def get_renderer(variant: RenderVariant) -> TemplateRenderer:
    """Return the renderer for a variant tag."""
    return _RENDERERS[variant]
