"""Asset assembler module.

Orders rendered components, wraps them in the document shell and emits the
companion stylesheet, runtime script and provider configuration files as a
content-addressed FileManifest.
"""

from .assembler import AssembledSite, AssetAssembler, ordered_components
from .exporter import build_zip, export_directory, write_archive
from .manifest import FileEntry, FileManifest
from .manifest_validator import ManifestValidator
from .tracking import (
    TrackingScriptBuilder,
    is_valid_clarity_id,
    is_valid_facebook_pixel_id,
    is_valid_google_analytics_id,
)

__all__ = [
    "AssembledSite",
    "AssetAssembler",
    "ordered_components",
    "build_zip",
    "export_directory",
    "write_archive",
    "FileEntry",
    "FileManifest",
    "ManifestValidator",
    "TrackingScriptBuilder",
    "is_valid_clarity_id",
    "is_valid_facebook_pixel_id",
    "is_valid_google_analytics_id",
]
