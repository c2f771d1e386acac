"""Stylesheet generation.

The stylesheet has three parts: theme variables on :root, base rules for the
document and the built-in component classes, and one rule block per
component instance scoped to its container id. Instance style maps use
camelCase property names:

    styles:
      container: {backgroundColor: "#111", padding: [40, 16, 40, 16]}
      headline: {fontSize: 48, color: "#fff"}
      textAlign: center

A nested map targets the element with the matching data-element attribute
("container" targets the component root); a scalar applies to the root.
"""

import re
from typing import Any, Dict, Iterable, List, Optional

from src.page_model.models import ComponentInstance, GlobalTheme

CONTAINER_KEY = "container"

# Numeric values for these properties are emitted without a unit
UNITLESS_PROPERTIES = {
    "flex", "flex-grow", "flex-shrink", "font-weight", "line-height",
    "opacity", "order", "z-index", "zoom",
}

BOX_SHORTHAND_PROPERTIES = {"padding", "margin", "border-radius", "inset"}

UNSAFE_VALUE_CHARS = re.compile(r"[;{}<>\\]")
IDENTIFIER_SAFE = re.compile(r"[A-Za-z0-9_-]")

SYSTEM_FONTS = {"inherit", "system-ui", "sans-serif", "serif", "monospace"}


def kebab_case(name: str) -> str:
    """backgroundColor -> background-color; already-kebab names pass through."""
    return re.sub(r"(?<!^)(?=[A-Z])", "-", name).lower()


def css_identifier(value: str) -> str:
    """Escape a string for use in an id selector."""
    escaped = []
    for index, char in enumerate(value):
        if IDENTIFIER_SAFE.match(char) and not (index == 0 and char.isdigit()):
            escaped.append(char)
        else:
            escaped.append(f"\\{ord(char):x} ")
    return "".join(escaped)


def format_css_value(prop: str, value: Any) -> Optional[str]:
    """Convert a style value to CSS text, or None when it cannot be expressed."""
    if value is None or isinstance(value, (dict, bool)):
        return None
    if isinstance(value, (list, tuple)):
        if prop in BOX_SHORTHAND_PROPERTIES and 1 <= len(value) <= 4:
            parts = [format_css_value(prop, item) for item in value]
            if None in parts:
                return None
            return " ".join(parts)
        return None
    if isinstance(value, (int, float)):
        if prop in UNITLESS_PROPERTIES or value == 0:
            return f"{value:g}"
        return f"{value:g}px"
    text = UNSAFE_VALUE_CHARS.sub("", str(value)).strip()
    return text or None


def _declarations(properties: Dict[str, Any]) -> List[str]:
    declarations = []
    for name in sorted(properties):
        prop = kebab_case(name)
        value = format_css_value(prop, properties[name])
        if value is not None:
            declarations.append(f"  {prop}: {value};")
    return declarations


def _rule(selector: str, declarations: Iterable[str]) -> str:
    body = "\n".join(declarations)
    return f"{selector} {{\n{body}\n}}"


def google_fonts_url(font_family: str) -> Optional[str]:
    """Google Fonts stylesheet URL for a theme font, None for system fonts."""
    if not font_family or font_family.lower() in SYSTEM_FONTS:
        return None
    family = font_family.strip().replace(" ", "+")
    return f"https://fonts.googleapis.com/css2?family={family}:wght@400;500;600;700&display=swap"


BASE_RULES = """*, *::before, *::after {
  box-sizing: border-box;
}
body {
  margin: 0;
  font-family: var(--font-family), system-ui, sans-serif;
  line-height: 1.6;
  color: var(--text-color);
  background: var(--background-color);
  direction: var(--direction);
}
img {
  max-width: 100%;
  height: auto;
}
[hidden] {
  display: none !important;
}
#landing-page > div {
  display: block;
}
.lp-hero, .lp-features, .lp-cta, .lp-testimonials, .lp-pricing, .lp-faq, .lp-fallback {
  padding: 64px 24px;
}
.lp-container {
  max-width: 1120px;
  margin: 0 auto;
}
.lp-narrow {
  max-width: 720px;
}
.lp-text-center {
  text-align: center;
}
.lp-hero__headline {
  font-size: 2.75rem;
  line-height: 1.15;
  margin: 0 0 16px;
}
.lp-section-title {
  font-size: 2rem;
  margin: 0 0 12px;
  text-align: center;
}
.lp-buttons {
  display: flex;
  flex-wrap: wrap;
  gap: 12px;
}
.lp-badge {
  display: inline-block;
  padding: 4px 12px;
  border-radius: 999px;
  background: var(--secondary-color);
  color: #ffffff;
  font-size: 0.875rem;
}
.lp-price__original {
  margin-inline-start: 8px;
  text-decoration: line-through;
  opacity: 0.6;
}
.lp-faq__item {
  padding: 16px 0;
  border-bottom: 1px solid rgba(0, 0, 0, 0.1);
}
.lp-faq__question {
  font-weight: 600;
  cursor: pointer;
}
.lp-button {
  display: inline-block;
  padding: 12px 28px;
  border: 0;
  border-radius: 8px;
  background: var(--primary-color);
  color: #ffffff;
  font: inherit;
  font-weight: 600;
  text-decoration: none;
  cursor: pointer;
}
.lp-button--outline {
  background: transparent;
  color: var(--primary-color);
  border: 2px solid var(--primary-color);
}
.lp-grid {
  display: grid;
  gap: 24px;
  grid-template-columns: repeat(auto-fit, minmax(240px, 1fr));
}
.lp-grid--2 {
  grid-template-columns: repeat(auto-fit, minmax(320px, 1fr));
  align-items: center;
}
.lp-card {
  padding: 24px;
  border-radius: 12px;
  background: rgba(0, 0, 0, 0.03);
}
.lp-checkout-form {
  display: grid;
  gap: 12px;
  max-width: 480px;
}
.lp-checkout-form input,
.lp-checkout-form select,
.lp-checkout-form textarea {
  padding: 10px 12px;
  border: 1px solid #d1d5db;
  border-radius: 6px;
  font: inherit;
}
#toast-container {
  position: fixed;
  bottom: 24px;
  inset-inline-end: 24px;
  z-index: 1000;
  display: grid;
  gap: 8px;
}
.lp-toast {
  padding: 12px 16px;
  border-radius: 8px;
  background: #111827;
  color: #ffffff;
  box-shadow: 0 10px 25px rgba(0, 0, 0, 0.2);
}
.lp-toast--error {
  background: #b91c1c;
}
.lp-toast--success {
  background: #15803d;
}"""


class CssBuilder:
    """Builds styles.css for a page."""

    @staticmethod
    def theme_variables(theme: GlobalTheme) -> str:
        return _rule(":root", [
            f"  --primary-color: {format_css_value('color', theme.primary_color)};",
            f"  --secondary-color: {format_css_value('color', theme.secondary_color)};",
            f"  --background-color: {format_css_value('color', theme.background_color)};",
            f"  --text-color: {format_css_value('color', theme.text_color)};",
            f"  --font-family: {format_css_value('font-family', theme.font_family)};",
            f"  --direction: {theme.direction};",
        ])

    @staticmethod
    def component_rules(instance: ComponentInstance) -> List[str]:
        """Rule blocks for one instance, sorted by element name."""
        root = f"#component-{css_identifier(instance.id)}"
        root_properties: Dict[str, Any] = {}
        element_rules: List[str] = []

        for key in sorted(instance.styles):
            value = instance.styles[key]
            if isinstance(value, dict):
                if key == CONTAINER_KEY:
                    root_properties.update(value)
                    continue
                declarations = _declarations(value)
                if declarations:
                    selector = f'{root} [data-element="{css_identifier(key)}"]'
                    element_rules.append(_rule(selector, declarations))
            else:
                root_properties[key] = value

        rules = []
        root_declarations = _declarations(root_properties)
        if root_declarations:
            rules.append(_rule(root, root_declarations))
        rules.extend(element_rules)
        return rules

    @classmethod
    def build(cls, theme: GlobalTheme, components: Iterable[ComponentInstance]) -> str:
        """Build the stylesheet.

        Args:
            theme: Global theme
            components: Instances in page order

        Returns:
            Stylesheet text ending with a newline
        """
        blocks = [cls.theme_variables(theme), BASE_RULES]
        for instance in components:
            blocks.extend(cls.component_rules(instance))
        return "\n\n".join(blocks) + "\n"
