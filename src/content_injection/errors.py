"""Exceptions raised while compiling and rendering component templates.

TemplateError is always recovered by the injection engine: the component is
replaced by a fallback skeleton and the error is logged, so these exceptions
never abort a page.
"""

from typing import Optional

from src.page_model.errors import SitePublishError


class TemplateError(SitePublishError):
    """Base exception for template problems."""

    def __init__(self, message: str, component_name: Optional[str] = None):
        if component_name:
            full_message = f"Template error in {component_name}: {message}"
        else:
            full_message = f"Template error: {message}"
        super().__init__(full_message)
        self.component_name = component_name
        self.original_message = message


class TemplateSyntaxError(TemplateError):
    """Raised when template tags are malformed or unbalanced."""

    def __init__(self, message: str, position: int, component_name: Optional[str] = None):
        super().__init__(f"{message} (at offset {position})", component_name)
        self.position = position


class MissingHookError(TemplateError):
    """Raised when a template lacks a substitution hook the variation requires."""

    def __init__(self, missing: list, component_name: Optional[str] = None):
        super().__init__(
            f"missing substitution hook(s): {', '.join(missing)}",
            component_name
        )
        self.missing = missing
