"""Command-line interface for building and publishing landing pages.

This package provides the `site-publish` CLI tool that drives the asset
assembler, the deployment orchestrator and the domain manager, with
progress indication and exit codes for scripting.
"""

from .config import ConfigLoader
from .errors import CLIError, ConfigError
from .models import ExitCode, PublishConfig

__all__ = [
    'ConfigLoader',
    'CLIError',
    'ConfigError',
    'ExitCode',
    'PublishConfig',
]
