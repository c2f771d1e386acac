"""Fallback skeleton for components whose template cannot be used.

The skeleton honors the same prop contract as a real template: it reads
content, styles (through the data-element hooks the stylesheet targets),
visibility, media URLs and custom actions, so a broken template degrades to
a plain but functional block instead of failing the page.
"""

import re
from typing import Iterable

SAFE_KEY = re.compile(r"[^A-Za-z0-9_-]")

HEADING_FIELDS = ("headline", "title", "sectionTitle")


def _safe(key: str) -> str:
    return SAFE_KEY.sub("", str(key))


def build_fallback_source(
    component_type: str,
    variation_number: int,
    content_keys: Iterable[str],
    media_keys: Iterable[str],
    action_keys: Iterable[str],
) -> str:
    """Build template source for a fallback skeleton.

    Args:
        component_type: Component family, used for default text and classes
        variation_number: Variation number, used for default text
        content_keys: Content fields present on the instance
        media_keys: Media slots present on the instance
        action_keys: Custom action keys present on the instance

    Returns:
        Template source in the regular template syntax
    """
    kind = _safe(component_type) or "component"
    content_keys = sorted({_safe(k) for k in content_keys if _safe(k)})
    lines = [
        f'<section class="lp-fallback lp-{kind}" data-element="container" data-fallback="true">',
        '  <div class="lp-container lp-text-center">',
        "    {{#visibility.headline}}"
        f'<h2 class="lp-section-title" data-element="headline">'
        f"{{{{content.headline|{kind.capitalize()} Component}}}}</h2>"
        "{{/visibility.headline}}",
        "    {{#visibility.subheadline}}"
        f'<p class="lp-section-description" data-element="subheadline">'
        f"{{{{content.subheadline|Variation {variation_number}}}}}</p>"
        "{{/visibility.subheadline}}",
    ]

    for key in content_keys:
        if key in ("headline", "subheadline"):
            continue
        tag = "h3" if key in HEADING_FIELDS else "p"
        lines.append(
            f"    {{{{#visibility.{key}}}}}"
            f'<{tag} data-element="{key}">{{{{content.{key}}}}}</{tag}>'
            f"{{{{/visibility.{key}}}}}"
        )

    for key in sorted({_safe(k) for k in media_keys if _safe(k)}):
        lines.append(
            f"    {{{{#visibility.{key}}}}}"
            f'<img data-element="{key}" src="{{{{mediaUrls.{key}}}}}" alt="" loading="lazy">'
            f"{{{{/visibility.{key}}}}}"
        )

    for key in sorted({_safe(k) for k in action_keys if _safe(k)}):
        lines.append(
            f'    <button type="button" class="lp-button lp-button--primary" '
            f'data-element="{key}Button" data-action="{{{{customActions.{key}}}}}">'
            f"{{{{content.{key}Text|Continue}}}}</button>"
        )

    lines.extend(["  </div>", "</section>"])
    return "\n".join(lines) + "\n"
