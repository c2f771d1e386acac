"""Deployment orchestrator.

deploy(page_id) drives a page from the store to a live site:

    1. load and assemble the page (ValidationError before any network call)
    2. resolve the remote site: update the recorded site in place, or create
       one under a normalized name (a 404 on the recorded site means none;
       any other lookup failure means a replacement under a derived name)
    3. walk the strategy chain; a blocked strategy (HostApiError, NetworkError
       once the attempt's retry budget is spent, failed build) hands over to
       the next one
    4. if every remote strategy fails on an existing site, create a fresh
       site under a derived name and walk the remote chain once more
    5. fall back to a local archive for manual upload
    6. write back site id, URL and deploy time and mark the page published

A build that is still running when polling times out is not a failure: the
result is reported as pending and the page returns to draft, keeping only
the id of a newly created site so the next publish updates it. Store
write-back failures are logged and returned as diagnostics, never raised.
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from src.asset_assembler.assembler import AssembledSite, AssetAssembler
from src.asset_assembler.manifest_validator import ManifestValidator
from src.hosting_client.errors import HostApiError, InvalidCredentialsError, NetworkError, SiteNotFoundError
from src.hosting_client.hosting_api import HostingAPI
from src.page_model.models import DeploymentInfo, PageDefinition, PageStatus
from src.page_model.store import PageStore

from .errors import BuildFailedError, BuildTimeoutError
from .models import (
    DEFAULT_STRATEGY_ORDER,
    DeploymentRecord,
    DeploymentStatus,
    ErrorKind,
    PublishOutcome,
    PublishResult,
    StrategyKind,
)
from .poller import BuildPoller
from .site_naming import fallback_site_name, normalize_site_name, site_name_for
from .strategies import MAX_WORKERS, DeployContext, get_strategy

logger = logging.getLogger(__name__)

BLOCKING_ERRORS = (HostApiError, NetworkError, BuildFailedError)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _error_kind(error: Exception) -> ErrorKind:
    if isinstance(error, NetworkError):
        return ErrorKind.NETWORK
    if isinstance(error, BuildFailedError):
        return ErrorKind.BUILD_FAILED
    if isinstance(error, BuildTimeoutError):
        return ErrorKind.BUILD_TIMEOUT
    return ErrorKind.HOST_API


class DeploymentOrchestrator:
    """Publishes pages to the hosting provider.

    Example:
        >>> orchestrator = DeploymentOrchestrator(store, HostingAPI(Authenticator()))
        >>> result = orchestrator.deploy("landing-1")
        >>> result.url
        'https://summer-sale-1700000000000.netlify.app'
    """

    def __init__(
        self,
        store: PageStore,
        api: HostingAPI,
        assembler: Optional[AssetAssembler] = None,
        poller: Optional[BuildPoller] = None,
        strategies: Sequence[StrategyKind] = DEFAULT_STRATEGY_ORDER,
        output_dir: Path = Path("dist"),
        max_upload_workers: int = MAX_WORKERS,
        clock: Callable[[], datetime] = _utcnow,
        name_token: Optional[Callable[[], str]] = None,
    ):
        """Initialize the orchestrator.

        Args:
            store: Page store to read pages from and write results to
            api: Hosting API client
            assembler: Asset assembler (default configuration when omitted)
            poller: Build poller (5s interval, 300s timeout when omitted)
            strategies: Fallback chain order
            output_dir: Where manual-upload archives are written
            max_upload_workers: Thread pool size for file uploads
            clock: Source of deployment timestamps
            name_token: Source of site name uniqueness tokens
        """
        self.store = store
        self.api = api
        self.assembler = assembler or AssetAssembler()
        self.poller = poller or BuildPoller(api)
        self.strategies = list(strategies)
        self.output_dir = Path(output_dir)
        self.max_upload_workers = max_upload_workers
        self._clock = clock
        self._name_token = name_token

    def deploy(self, page_id: str, build_time: Optional[datetime] = None) -> PublishResult:
        """Publish a page.

        Args:
            page_id: Page to publish
            build_time: Build timestamp (defaults to now)

        Returns:
            PublishResult describing the outcome and every attempt

        Raises:
            PageNotFoundError: If the store has no such page
            ValidationError: If the page is malformed (nothing was sent)
            InvalidCredentialsError: If the hosting API rejects the token
        """
        model = self.store.get_page_with_components(page_id)
        page = model.page
        site = self.assembler.assemble(model, build_time=build_time or self._clock(),
                                       deployment_url=page.url)
        ManifestValidator.ensure_valid(site.files)

        result = PublishResult(page_id=page_id, outcome=PublishOutcome.FAILED,
                               diagnostics=list(site.diagnostics))
        self._set_status(page_id, PageStatus.PUBLISHING, result)
        logger.info(f"Publishing page {page_id} ({len(site.files)} files)")

        try:
            self._run_chain(page, site, result)
        except Exception as e:
            logger.error(f"Publishing page {page_id} aborted: {e}")
            self._set_status(page_id, PageStatus.ERROR, result)
            raise

        if result.outcome is PublishOutcome.PUBLISHED:
            self._write_back(page_id, result)
        elif result.outcome is PublishOutcome.PENDING:
            if result.site_id and result.site_id != page.site_id:
                self._persist(page_id, DeploymentInfo(site_id=result.site_id), result)
            self._set_status(page_id, PageStatus.DRAFT, result)
        elif result.outcome is PublishOutcome.MANUAL:
            self._set_status(page_id, PageStatus.DRAFT, result)
        else:
            self._set_status(page_id, PageStatus.ERROR, result)
        return result

    def _run_chain(self, page: PageDefinition, site: AssembledSite, result: PublishResult) -> None:
        remote = [kind for kind in self.strategies if kind.is_remote]

        if remote:
            try:
                site_id, site_url, existing = self._resolve_site(page, result)
            except (HostApiError, NetworkError) as e:
                if isinstance(e, InvalidCredentialsError):
                    raise
                message = f"Could not resolve a remote site: {e}"
                logger.warning(message)
                result.diagnostics.append(message)
            else:
                if self._try_remote(remote, page, site, site_id, site_url, result):
                    return
                if result.outcome is PublishOutcome.PENDING:
                    return
                if existing and self._retry_on_new_site(remote, page, site, result):
                    return

        if StrategyKind.MANUAL_ARCHIVE in self.strategies:
            self._manual_archive(page, site, result)

    def _retry_on_new_site(self, remote: List[StrategyKind], page: PageDefinition,
                           site: AssembledSite, result: PublishResult) -> bool:
        name = fallback_site_name(page.id, self._token())
        logger.warning(f"All strategies failed on site {page.site_id}; creating replacement site {name}")
        result.diagnostics.append(f"Site {page.site_id} unusable, retried on new site {name}")
        try:
            self.api.new_retry_budget()
            created = self.api.create_site(name)
        except (HostApiError, NetworkError) as e:
            if isinstance(e, InvalidCredentialsError):
                raise
            message = f"Could not create replacement site {name}: {e}"
            logger.warning(message)
            result.diagnostics.append(message)
            return False
        return self._try_remote(remote, page, site, created["id"], self._site_url(created), result) \
            or result.outcome is PublishOutcome.PENDING

    def _resolve_site(self, page: PageDefinition, result: PublishResult) -> Tuple[str, Optional[str], bool]:
        """Return (site_id, site_url, existing)."""
        self.api.new_retry_budget()
        if page.site_id:
            try:
                existing = self.api.get_site(page.site_id)
            except SiteNotFoundError:
                message = f"Recorded site {page.site_id} no longer exists; creating a new site"
                logger.warning(message)
                result.diagnostics.append(message)
            except (HostApiError, NetworkError) as e:
                if isinstance(e, InvalidCredentialsError):
                    raise
                name = fallback_site_name(page.id, self._token())
                message = f"Site {page.site_id} unusable ({e}); creating replacement site {name}"
                logger.warning(message)
                result.diagnostics.append(message)
                self.api.new_retry_budget()
                created = self.api.create_site(name)
                logger.info(f"Created site {name} ({created['id']})")
                return created["id"], self._site_url(created), False
            else:
                logger.info(f"Updating existing site {page.site_id}")
                return existing.get("id", page.site_id), self._site_url(existing), True

        name = site_name_for(page.slug, self._token())
        created = self.api.create_site(name)
        logger.info(f"Created site {name} ({created['id']})")
        return created["id"], self._site_url(created), False

    def _try_remote(self, kinds: List[StrategyKind], page: PageDefinition, site: AssembledSite,
                    site_id: str, site_url: Optional[str], result: PublishResult) -> bool:
        """Walk the remote strategies; True once one succeeds."""
        result.site_id = site_id
        for kind in kinds:
            record = self._new_record(page.id, kind, site_id)
            result.records.append(record)
            context = self._context(page, site, site_id, site_url)
            self.api.new_retry_budget()
            logger.info(f"Deploying page {page.id} to site {site_id} with {kind.value}")

            try:
                get_strategy(kind).run(context, record)
            except BuildTimeoutError as e:
                logger.warning(str(e))
                record.error_kind = ErrorKind.BUILD_TIMEOUT
                record.error_message = str(e)
                record.updated_at = self._clock()
                result.deploy_id = record.deploy_id
                result.outcome = PublishOutcome.PENDING
                return False
            except BLOCKING_ERRORS as e:
                if isinstance(e, InvalidCredentialsError):
                    raise
                logger.warning(f"Strategy {kind.value} failed for page {page.id}: {e}")
                record.fail(_error_kind(e), str(e), self._clock())
                result.diagnostics.append(f"{kind.value}: {e}")
                continue

            record.updated_at = self._clock()
            result.outcome = PublishOutcome.PUBLISHED
            result.url = record.url
            result.deploy_id = record.deploy_id
            result.deployed_at = record.updated_at
            logger.info(f"Page {page.id} published at {record.url}")
            return True
        return False

    def _manual_archive(self, page: PageDefinition, site: AssembledSite, result: PublishResult) -> None:
        record = self._new_record(page.id, StrategyKind.MANUAL_ARCHIVE, None)
        result.records.append(record)
        context = self._context(page, site, None, None)
        try:
            get_strategy(StrategyKind.MANUAL_ARCHIVE).run(context, record)
        except OSError as e:
            logger.error(f"Could not write manual deployment archive: {e}")
            record.fail(ErrorKind.LOCAL, str(e), self._clock())
            result.outcome = PublishOutcome.FAILED
            return
        record.updated_at = self._clock()
        result.archive_path = record.archive_path
        result.outcome = PublishOutcome.MANUAL
        logger.warning(f"Remote deployment unavailable; archive written to {record.archive_path}")

    def _context(self, page: PageDefinition, site: AssembledSite, site_id: Optional[str],
                 site_url: Optional[str]) -> DeployContext:
        return DeployContext(
            api=self.api,
            poller=self.poller,
            site=site,
            slug=normalize_site_name(page.slug),
            site_id=site_id,
            site_url=site_url,
            output_dir=self.output_dir,
            max_workers=self.max_upload_workers,
        )

    def _new_record(self, page_id: str, kind: StrategyKind, site_id: Optional[str]) -> DeploymentRecord:
        now = self._clock()
        return DeploymentRecord(
            attempt_id=uuid.uuid4().hex,
            page_id=page_id,
            strategy=kind,
            site_id=site_id,
            created_at=now,
            updated_at=now,
        )

    def _token(self) -> Optional[str]:
        return self._name_token() if self._name_token else None

    @staticmethod
    def _site_url(site: dict) -> Optional[str]:
        return site.get("ssl_url") or site.get("url")

    def _write_back(self, page_id: str, result: PublishResult) -> None:
        info = DeploymentInfo(site_id=result.site_id, url=result.url, deployed_at=result.deployed_at)
        self._persist(page_id, info, result)
        self._set_status(page_id, PageStatus.PUBLISHED, result)

    def _persist(self, page_id: str, info: DeploymentInfo, result: PublishResult) -> None:
        try:
            self.store.persist_deployment_info(page_id, info)
        except Exception as e:
            message = f"Could not persist deployment info for page {page_id}: {e}"
            logger.error(message)
            result.diagnostics.append(message)

    def _set_status(self, page_id: str, status: PageStatus, result: PublishResult) -> None:
        try:
            self.store.update_page_status(page_id, status)
        except Exception as e:
            message = f"Could not set status of page {page_id} to {status.value}: {e}"
            logger.error(message)
            result.diagnostics.append(message)

    def get_status(self, page_id: str) -> DeploymentStatus:
        """Deployment status of a page as recorded in the store.

        Raises:
            PageNotFoundError: If the store has no such page
        """
        page = self.store.get_page_with_components(page_id).page
        return DeploymentStatus(
            page_id=page_id,
            status=page.status.value,
            is_deployed=page.status is PageStatus.PUBLISHED and bool(page.site_id),
            site_id=page.site_id,
            url=page.url,
            last_deployed_at=page.last_deployed_at,
        )

    def cancel(self, page_id: str, deploy_id: Optional[str] = None) -> bool:
        """Reset a page stuck in publishing back to draft.

        Args:
            page_id: Page to reset
            deploy_id: Provider deploy to cancel as well, when known

        Returns:
            True when the page was publishing and has been reset
        """
        page = self.store.get_page_with_components(page_id).page
        if deploy_id:
            try:
                self.api.new_retry_budget()
                self.api.cancel_deploy(deploy_id)
            except (HostApiError, NetworkError) as e:
                logger.warning(f"Could not cancel deploy {deploy_id}: {e}")
        if page.status is not PageStatus.PUBLISHING:
            logger.info(f"Page {page_id} is {page.status.value}; nothing to cancel")
            return False
        self.store.update_page_status(page_id, PageStatus.DRAFT)
        logger.info(f"Page {page_id} reset to draft")
        return True

    def undeploy(self, page_id: str) -> bool:
        """Delete the remote site of a page and clear its deployment record.

        Returns:
            True when a site was recorded for the page

        Raises:
            HostApiError, NetworkError: If the site could not be deleted
        """
        page = self.store.get_page_with_components(page_id).page
        if not page.site_id:
            logger.info(f"Page {page_id} has no deployed site")
            return False

        self.api.new_retry_budget()
        try:
            self.api.delete_site(page.site_id)
        except HostApiError as e:
            if e.status_code != 404:
                raise
            logger.info(f"Site {page.site_id} was already deleted")

        self.store.clear_deployment_info(page_id)
        self.store.update_page_status(page_id, PageStatus.DRAFT)
        logger.info(f"Page {page_id} undeployed (site {page.site_id} removed)")
        return True
