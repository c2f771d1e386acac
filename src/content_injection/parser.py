"""Template compiler.

Turns template source into a CompiledTemplate. Tag grammar:

    {{ content.headline }}                  field reference
    {{ content.headline | Your headline }}  field reference with default
    {{#visibility.badge}} ... {{/visibility.badge}}
    {{#editor}} ... {{/editor}}
    {{! developer note }}

Anything else between double braces is a syntax error.
"""

import logging
import re
from typing import List, Optional, Tuple

from .errors import TemplateSyntaxError
from .template_model import (
    Comment,
    CompiledTemplate,
    ConditionalBlock,
    EditorBlock,
    FieldKind,
    FieldRef,
    Literal,
    Node,
    walk,
)

logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r"\{\{\s*([#/!]?)(.*?)\}\}", re.DOTALL)
SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

EDITOR_BLOCK = "editor"

KIND_ALIASES = {
    "content": FieldKind.CONTENT,
    "styles": FieldKind.STYLES,
    "mediaUrls": FieldKind.MEDIA_URLS,
    "media_urls": FieldKind.MEDIA_URLS,
    "visibility": FieldKind.VISIBILITY,
    "customActions": FieldKind.CUSTOM_ACTIONS,
    "custom_actions": FieldKind.CUSTOM_ACTIONS,
    "theme": FieldKind.THEME,
    "globalTheme": FieldKind.THEME,
}


class _OpenBlock:
    """Parser stack frame for a block whose closing tag has not been seen."""

    def __init__(self, name: str, position: int):
        self.name = name
        self.position = position
        self.children: List[Node] = []


class TemplateParser:
    """Compiles template source into the typed template model.

    Example:
        >>> compiled = TemplateParser.compile("<h1>{{content.title}}</h1>")
        >>> [ref.name for ref in compiled.field_refs]
        ['content.title']
    """

    @classmethod
    def compile(cls, source: str, component_name: Optional[str] = None) -> CompiledTemplate:
        """Compile template source.

        Args:
            source: Template text
            component_name: Name used in error messages

        Returns:
            CompiledTemplate

        Raises:
            TemplateSyntaxError: On malformed or unbalanced tags
        """
        root = _OpenBlock("", 0)
        stack = [root]
        in_tag = False
        cursor = 0

        for match in TAG_PATTERN.finditer(source):
            text = source[cursor:match.start()]
            if text:
                cls._check_stray_braces(text, cursor, component_name)
                stack[-1].children.append(Literal(text))
                in_tag = cls._tag_state_after(text, in_tag)
            cursor = match.end()

            sigil, body = match.group(1), match.group(2).strip()
            if sigil == "!":
                stack[-1].children.append(Comment(body))
            elif sigil == "#":
                cls._validate_block_name(body, match.start(), component_name)
                stack.append(_OpenBlock(body, match.start()))
            elif sigil == "/":
                if len(stack) == 1 or stack[-1].name != body:
                    expected = stack[-1].name if len(stack) > 1 else "no open block"
                    raise TemplateSyntaxError(
                        f"closing tag '{body}' does not match '{expected}'",
                        match.start(),
                        component_name
                    )
                block = stack.pop()
                stack[-1].children.append(cls._close_block(block))
            else:
                stack[-1].children.append(
                    cls._parse_field_ref(body, in_tag, match.start(), component_name)
                )

        tail = source[cursor:]
        if tail:
            cls._check_stray_braces(tail, cursor, component_name)
            root.children.append(Literal(tail))

        if len(stack) > 1:
            unclosed = stack[-1]
            raise TemplateSyntaxError(
                f"block '{unclosed.name}' is never closed",
                unclosed.position,
                component_name
            )

        nodes = cls._merge_literals(root.children)
        flat = walk(nodes)
        field_refs = tuple(node for node in flat if isinstance(node, FieldRef))
        visibility_keys = tuple(
            node.visibility_key for node in flat if isinstance(node, ConditionalBlock)
        )
        return CompiledTemplate(
            nodes=nodes,
            source=source,
            field_refs=field_refs,
            visibility_keys=visibility_keys,
        )

    @staticmethod
    def _tag_state_after(text: str, in_tag: bool) -> bool:
        # Tracks whether the next tag sits between '<' and '>' (attribute context)
        last_open = text.rfind("<")
        last_close = text.rfind(">")
        if last_open == -1 and last_close == -1:
            return in_tag
        return last_open > last_close

    @staticmethod
    def _check_stray_braces(text: str, offset: int, component_name: Optional[str]) -> None:
        position = text.find("{{")
        if position != -1:
            raise TemplateSyntaxError("unterminated tag", offset + position, component_name)

    @staticmethod
    def _validate_block_name(name: str, position: int, component_name: Optional[str]) -> None:
        if name == EDITOR_BLOCK:
            return
        kind, _, key = name.partition(".")
        if KIND_ALIASES.get(kind) is not FieldKind.VISIBILITY or not SEGMENT_PATTERN.match(key):
            raise TemplateSyntaxError(
                f"unsupported block '{name}' (expected visibility.<key> or editor)",
                position,
                component_name
            )

    @staticmethod
    def _close_block(block: _OpenBlock) -> Node:
        body = TemplateParser._merge_literals(block.children)
        if block.name == EDITOR_BLOCK:
            return EditorBlock(body=body)
        return ConditionalBlock(visibility_key=block.name.partition(".")[2], body=body)

    @staticmethod
    def _parse_field_ref(
        body: str,
        in_tag: bool,
        position: int,
        component_name: Optional[str],
    ) -> FieldRef:
        reference, pipe, default = body.partition("|")
        reference = reference.strip()
        segments = reference.split(".")
        kind = KIND_ALIASES.get(segments[0])
        if kind is None:
            raise TemplateSyntaxError(
                f"unknown reference namespace '{segments[0]}'",
                position,
                component_name
            )

        path: Tuple[str, ...] = tuple(segments[1:])
        if not path or not all(SEGMENT_PATTERN.match(segment) for segment in path):
            raise TemplateSyntaxError(
                f"invalid reference '{reference}'",
                position,
                component_name
            )

        return FieldRef(
            kind=kind,
            path=path,
            default=default.strip() if pipe else None,
            in_tag=in_tag,
        )

    @staticmethod
    def _merge_literals(nodes: List[Node]) -> Tuple[Node, ...]:
        merged: List[Node] = []
        for node in nodes:
            if isinstance(node, Literal) and merged and isinstance(merged[-1], Literal):
                merged[-1] = Literal(merged[-1].text + node.text)
            else:
                merged.append(node)
        return tuple(merged)
