"""Typed exception hierarchy for CLI-related errors.

All exceptions inherit from CLIError so the command handlers can catch
them in one place and map them to an exit code.
"""

from typing import Optional

from src.page_model.errors import SitePublishError


class CLIError(SitePublishError):
    """Base exception for all CLI-related errors."""
    pass


class ConfigError(CLIError):
    """Raised when the project configuration is invalid or unreadable."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Config error in field '{config_field}': {message}"
        else:
            full_message = f"Config error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message
