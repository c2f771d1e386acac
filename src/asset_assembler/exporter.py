"""Local export of a build: a directory of files and a ZIP archive.

The archive is the last step of the deployment fallback chain: it can be
uploaded by hand through the hosting provider's drag-and-drop deploy page.
"""

import io
import logging
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from .manifest import FileManifest

logger = logging.getLogger(__name__)

# Fixed entry timestamp for every archive member
ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)

README_NAME = "README.txt"


def build_readme(slug: str, build_time: Optional[datetime] = None) -> str:
    built = f"Built: {build_time.isoformat()}\n" if build_time else ""
    return (
        f"Landing page: {slug}\n"
        f"{built}"
        "\n"
        "Manual deployment\n"
        "=================\n"
        "1. Unzip this archive.\n"
        "2. Open https://app.netlify.com/drop in a browser.\n"
        "3. Drag the unzipped folder onto the page.\n"
        "4. Wait for the upload to finish and open the generated URL.\n"
        "\n"
        "The folder already contains _headers and _redirects, so security\n"
        "headers and the single-page fallback are applied automatically.\n"
    )


def build_zip(manifest: FileManifest, readme: Optional[str] = None) -> bytes:
    """Pack a manifest into ZIP bytes, entries in sorted path order."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for entry in manifest:
            info = zipfile.ZipInfo(entry.path, date_time=ZIP_TIMESTAMP)
            info.compress_type = zipfile.ZIP_DEFLATED
            archive.writestr(info, entry.content)
        if readme is not None:
            info = zipfile.ZipInfo(README_NAME, date_time=ZIP_TIMESTAMP)
            info.compress_type = zipfile.ZIP_DEFLATED
            archive.writestr(info, readme.encode("utf-8"))
    return buffer.getvalue()


def export_directory(manifest: FileManifest, output_dir: Path) -> Path:
    """Write every file of the manifest below output_dir.

    Returns:
        The output directory
    """
    output_dir = Path(output_dir)
    for entry in manifest:
        target = output_dir / entry.path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(entry.content)
    logger.info(f"Exported {len(manifest)} files to {output_dir}")
    return output_dir


def write_archive(manifest: FileManifest, archive_path: Path, slug: str,
                  build_time: Optional[datetime] = None) -> Path:
    """Write a manual-upload ZIP (files plus README) to archive_path."""
    archive_path = Path(archive_path)
    archive_path.parent.mkdir(parents=True, exist_ok=True)
    archive_path.write_bytes(build_zip(manifest, build_readme(slug, build_time)))
    logger.info(f"Wrote manual deployment archive {archive_path}")
    return archive_path
