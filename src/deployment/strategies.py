"""Deployment strategies.

Each strategy takes an assembled site to a resolved remote site (or, for
the manual archive, to a local ZIP) and records progress on its
DeploymentRecord:

    ArchiveBuildStrategy   upload a source archive and let the provider build it
    DirectUploadStrategy   content-addressed upload of the static files
    ManualArchiveStrategy  write a ZIP with manual upload instructions
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.asset_assembler.assembler import AssembledSite
from src.asset_assembler.exporter import build_zip, write_archive
from src.asset_assembler.manifest import FileEntry
from src.hosting_client.hosting_api import HostingAPI

from .models import DeploymentRecord, DeploymentState, StrategyKind
from .poller import BuildPoller

logger = logging.getLogger(__name__)

MAX_WORKERS = 10


@dataclass
class DeployContext:
    """Everything a strategy needs for one attempt."""
    api: HostingAPI
    poller: BuildPoller
    site: AssembledSite
    slug: str
    site_id: Optional[str] = None
    site_url: Optional[str] = None
    output_dir: Path = Path("dist")
    max_workers: int = MAX_WORKERS


def deploy_url(deploy: Dict[str, Any], fallback: Optional[str] = None) -> Optional[str]:
    """Public URL of a finished deploy; the site URL wins when known."""
    return fallback or deploy.get("ssl_url") or deploy.get("url") or deploy.get("deploy_ssl_url")


class DeployStrategy(ABC):
    """One way of getting an assembled site live."""

    kind: StrategyKind

    @abstractmethod
    def run(self, context: DeployContext, record: DeploymentRecord) -> DeploymentRecord:
        """Execute the strategy, leaving the record ready on success.

        Raises:
            HostApiError, NetworkError: The strategy is blocked
            BuildFailedError: The provider rejected the build
            BuildTimeoutError: The build is still running
        """


class ArchiveBuildStrategy(DeployStrategy):
    """Uploads a ZIP source archive (files plus netlify.toml) in one request.

    The archive is always sent in full: it does not benefit from
    content-addressed deduplication.
    """

    kind = StrategyKind.ARCHIVE_BUILD

    def run(self, context: DeployContext, record: DeploymentRecord) -> DeploymentRecord:
        archive = build_zip(context.site.source_archive_files())
        logger.info(f"Uploading source archive ({len(archive)} bytes) to site {context.site_id}")
        deploy = context.api.deploy_archive(context.site_id, archive)
        record.deploy_id = deploy["id"]
        record.uploaded_files = len(context.site.files) + 1
        record.uploaded_bytes = len(archive)

        final = context.poller.wait(record.deploy_id, record, initial=deploy)
        record.url = deploy_url(final, context.site_url)
        return record


class DirectUploadStrategy(DeployStrategy):
    """Content-addressed upload of the static files.

    The manifest of path -> SHA-1 is posted first; only files whose digest
    the provider reports as required are uploaded, concurrently, and every
    upload finishes before the build is polled.
    """

    kind = StrategyKind.DIRECT_UPLOAD

    def run(self, context: DeployContext, record: DeploymentRecord) -> DeploymentRecord:
        files = context.site.files
        deploy = context.api.create_deploy(context.site_id, files.digests())
        record.deploy_id = deploy["id"]
        required = deploy.get("required") or []
        entries = files.entries_for_digests(required)

        logger.info(
            f"Deploy {record.deploy_id}: {len(entries)}/{len(files)} files required"
        )
        if entries:
            record.advance(DeploymentState.BUILDING)
            self._upload_all(context, record.deploy_id, entries)
        record.uploaded_files = len(entries)
        record.uploaded_bytes = sum(entry.size for entry in entries)

        final = context.poller.wait(record.deploy_id, record, initial=None if entries else deploy)
        record.url = deploy_url(final, context.site_url)
        return record

    @staticmethod
    def _upload_all(context: DeployContext, deploy_id: str, entries: List[FileEntry]) -> None:
        errors: List[Exception] = []

        with ThreadPoolExecutor(max_workers=max(1, context.max_workers)) as executor:
            futures = {
                executor.submit(context.api.upload_deploy_file, deploy_id, entry.path, entry.content): entry
                for entry in entries
            }

            for i, future in enumerate(as_completed(futures), 1):
                entry = futures[future]
                try:
                    future.result()
                    logger.debug(f"Uploaded {i}/{len(entries)}: {entry.path} ({entry.size} bytes)")
                except Exception as e:
                    logger.error(f"Upload failed for {entry.path}: {e}")
                    errors.append(e)

        if errors:
            raise errors[0]


class ManualArchiveStrategy(DeployStrategy):
    """Writes the static files and upload instructions to a local ZIP."""

    kind = StrategyKind.MANUAL_ARCHIVE

    def run(self, context: DeployContext, record: DeploymentRecord) -> DeploymentRecord:
        build_time = context.site.build_time or datetime.now(timezone.utc)
        archive_name = f"{context.slug}-{build_time.strftime('%Y%m%d-%H%M%S')}.zip"
        record.archive_path = write_archive(
            context.site.files,
            Path(context.output_dir) / archive_name,
            context.slug,
            build_time,
        )
        record.transition(DeploymentState.READY)
        return record


STRATEGIES = {
    StrategyKind.ARCHIVE_BUILD: ArchiveBuildStrategy,
    StrategyKind.DIRECT_UPLOAD: DirectUploadStrategy,
    StrategyKind.MANUAL_ARCHIVE: ManualArchiveStrategy,
}


def get_strategy(kind: StrategyKind) -> DeployStrategy:
    return STRATEGIES[kind]()
