"""Typed template model.

A component template is compiled once into a tree of nodes and then
evaluated against a data record.

Node types:
    Literal: verbatim text
    FieldRef: symbolic reference such as content.headline
    ConditionalBlock: body rendered only when a visibility key is not False
    EditorBlock: body only present in the editable rendering
    Comment: developer note, never rendered
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set, Tuple, Union


class FieldKind(Enum):
    """Namespaces a template may reference."""

    CONTENT = "content"
    STYLES = "styles"
    MEDIA_URLS = "mediaUrls"
    VISIBILITY = "visibility"
    CUSTOM_ACTIONS = "customActions"
    THEME = "theme"


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class FieldRef:
    """Reference to a value in one of the component's data maps.

    Attributes:
        kind: Namespace of the reference
        path: Dotted path segments below the namespace, e.g. ("features", "0", "title")
        default: Literal text used when the value is missing
        in_tag: True when the reference sits inside an HTML tag (an attribute value)
    """
    kind: FieldKind
    path: Tuple[str, ...]
    default: Optional[str] = None
    in_tag: bool = False

    @property
    def name(self) -> str:
        return ".".join((self.kind.value,) + self.path)

    @property
    def root(self) -> str:
        return self.path[0] if self.path else ""


@dataclass(frozen=True)
class ConditionalBlock:
    visibility_key: str
    body: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class EditorBlock:
    body: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class Comment:
    text: str


Node = Union[Literal, FieldRef, ConditionalBlock, EditorBlock, Comment]


@dataclass(frozen=True)
class CompiledTemplate:
    """Result of compiling a template source.

    Attributes:
        nodes: Top-level node sequence
        source: Original template text
        field_refs: Every FieldRef in the tree, in document order
        visibility_keys: Every key guarded by a ConditionalBlock
    """
    nodes: Tuple[Node, ...]
    source: str
    field_refs: Tuple[FieldRef, ...] = ()
    visibility_keys: Tuple[str, ...] = ()

    @property
    def is_resolved(self) -> bool:
        """True when the template contains nothing but literal text."""
        return all(isinstance(node, Literal) for node in self.nodes)

    def referenced(self, kind: FieldKind) -> Set[str]:
        """Root field names referenced in the given namespace."""
        return {ref.root for ref in self.field_refs if ref.kind is kind}


@dataclass
class RenderContext:
    """Data record a compiled template is evaluated against."""
    content: dict = field(default_factory=dict)
    styles: dict = field(default_factory=dict)
    media_urls: dict = field(default_factory=dict)
    visibility: dict = field(default_factory=dict)
    custom_actions: dict = field(default_factory=dict)
    theme: dict = field(default_factory=dict)

    def namespace(self, kind: FieldKind) -> dict:
        return {
            FieldKind.CONTENT: self.content,
            FieldKind.STYLES: self.styles,
            FieldKind.MEDIA_URLS: self.media_urls,
            FieldKind.VISIBILITY: self.visibility,
            FieldKind.CUSTOM_ACTIONS: self.custom_actions,
            FieldKind.THEME: self.theme,
        }[kind]

    def is_visible(self, key: str) -> bool:
        """Absent or true keeps the block; only an explicit False hides it."""
        return self.visibility.get(key, True) is not False


def walk(nodes) -> List[Node]:
    """Flatten a node tree in document order."""
    flat: List[Node] = []
    for node in nodes:
        flat.append(node)
        if isinstance(node, (ConditionalBlock, EditorBlock)):
            flat.extend(walk(node.body))
    return flat
