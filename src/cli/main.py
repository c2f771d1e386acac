"""Main CLI entry point for the site-publish command.

This module provides the Typer application that serves as the entry point
for the site-publish command-line tool. Global options (config path,
verbosity, colors, log directory) go before the command name:

    site-publish -v 1 publish landing-1
"""

import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from src.asset_assembler.assembler import AssetAssembler
from src.asset_assembler.exporter import export_directory, write_archive
from src.asset_assembler.manifest_validator import ManifestValidator
from src.cli.config import ConfigLoader
from src.cli.errors import ConfigError
from src.cli.models import ExitCode, PublishConfig
from src.cli.output import OutputHandler
from src.deployment.models import ErrorKind, PublishOutcome, PublishResult
from src.deployment.orchestrator import DeploymentOrchestrator
from src.deployment.poller import BuildPoller
from src.domain_manager.manager import DomainManager
from src.domain_manager.models import VerificationState
from src.hosting_client.auth import Authenticator
from src.hosting_client.errors import InvalidCredentialsError, NetworkError
from src.hosting_client.hosting_api import HostingAPI, sanitize_credentials
from src.page_model.errors import SitePublishError, ValidationError
from src.page_model.store import YamlPageStore

VERSION = "0.1.0"

app = typer.Typer(
    name="site-publish",
    help="""Build landing pages into static sites and publish them.

QUICK START:
  site-publish init                             # Write .site-publish/config.yaml
  site-publish build <page_id> --zip            # Build locally into dist/
  site-publish publish <page_id>                # Deploy to the hosting provider
  site-publish status <page_id>                 # Show deployment status
  site-publish domain-setup <site_id> <domain>  # Attach a custom domain""",
    add_completion=False,
    rich_markup_mode=None,  # Disable Rich markup to avoid compatibility issues
    no_args_is_help=True,
)

# Module logger
logger = logging.getLogger(__name__)


@dataclass
class GlobalOptions:
    """Options shared by every command."""
    config_path: str = ConfigLoader.DEFAULT_CONFIG_PATH
    verbosity: int = 0
    no_color: bool = False


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)
    app_logger.handlers.clear()

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"site-publish_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def exit_code_for(error: Exception) -> ExitCode:
    """Map an application error to the process exit code."""
    if isinstance(error, ValidationError):
        return ExitCode.VALIDATION_ERROR
    if isinstance(error, InvalidCredentialsError):
        return ExitCode.AUTH_ERROR
    if isinstance(error, NetworkError):
        return ExitCode.NETWORK_ERROR
    return ExitCode.GENERAL_ERROR


def exit_code_for_publish(result: PublishResult) -> ExitCode:
    """Map a publish outcome to the process exit code."""
    if result.outcome is PublishOutcome.PUBLISHED:
        return ExitCode.SUCCESS
    if result.outcome in (PublishOutcome.PENDING, PublishOutcome.MANUAL):
        return ExitCode.DEPLOY_PENDING
    remote_kinds = [record.error_kind for record in result.records if record.error_kind]
    if remote_kinds and all(kind is ErrorKind.NETWORK for kind in remote_kinds):
        return ExitCode.NETWORK_ERROR
    return ExitCode.GENERAL_ERROR


def _build_api() -> HostingAPI:
    return HostingAPI(Authenticator())


def _build_assembler(config: PublishConfig) -> AssetAssembler:
    return AssetAssembler(
        checkout_fields_url=config.checkout_fields_url,
        site_suffix=config.site_url_suffix,
    )


def _build_orchestrator(config: PublishConfig, api: HostingAPI) -> DeploymentOrchestrator:
    return DeploymentOrchestrator(
        store=YamlPageStore(config.store_path),
        api=api,
        assembler=_build_assembler(config),
        poller=BuildPoller(api, interval=config.poll_interval, timeout=config.poll_timeout),
        strategies=config.strategies,
        output_dir=Path(config.output_dir),
        max_upload_workers=config.max_upload_workers,
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"site-publish version {VERSION}")
        raise typer.Exit()


def _options(ctx: typer.Context) -> GlobalOptions:
    return ctx.obj if isinstance(ctx.obj, GlobalOptions) else GlobalOptions()


def _run(ctx: typer.Context, action) -> None:
    """Run a command body with the shared error handling.

    The body receives the output handler and the loaded configuration and
    returns the exit code.
    """
    options = _options(ctx)
    output = OutputHandler(verbosity=options.verbosity, no_color=options.no_color)

    try:
        config = ConfigLoader.load(options.config_path)
        code = action(output, config)
        raise typer.Exit(code)

    except ConfigError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    except SitePublishError as e:
        output.error(sanitize_credentials(str(e)))
        logger.error(f"{type(e).__name__}: {sanitize_credentials(str(e))}")
        raise typer.Exit(exit_code_for(e))

    except typer.Exit:
        raise

    except Exception as e:
        output.error(f"Unexpected error: {sanitize_credentials(str(e))}")
        logger.exception("Unexpected error")
        raise typer.Exit(ExitCode.GENERAL_ERROR)


@app.callback()
def cli(
    ctx: typer.Context,
    config_path: str = typer.Option(
        ConfigLoader.DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Path to the project configuration file",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Build landing pages into static sites and publish them."""
    _configure_logging(verbosity, logdir)
    ctx.obj = GlobalOptions(config_path=config_path, verbosity=verbosity, no_color=no_color)


@app.command()
def init(
    ctx: typer.Context,
    store_path: str = typer.Option("pages.yaml", "--store", help="YAML page store file"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing configuration"),
) -> None:
    """Write a configuration file with default settings."""
    options = _options(ctx)
    output = OutputHandler(verbosity=options.verbosity, no_color=options.no_color)

    if Path(options.config_path).exists() and not force:
        output.error(f"{options.config_path} already exists (use --force to overwrite)")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    try:
        ConfigLoader.save(options.config_path, PublishConfig(store_path=store_path))
    except ConfigError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    output.success(f"Wrote {options.config_path}")
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def build(
    ctx: typer.Context,
    page_id: str = typer.Argument(..., help="Page to build"),
    output_dir: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output directory (default: <output_dir>/<slug>)"
    ),
    make_zip: bool = typer.Option(False, "--zip", help="Also write a manual-upload ZIP archive"),
) -> None:
    """Assemble a page into static files without deploying it."""

    def action(output: OutputHandler, config: PublishConfig) -> ExitCode:
        model = YamlPageStore(config.store_path).get_page_with_components(page_id)
        slug = model.page.slug

        with output.spinner(f"Building page {page_id}..."):
            site = _build_assembler(config).assemble(model, deployment_url=model.page.url)
            ManifestValidator.ensure_valid(site.files)
            files = site.source_archive_files()
            target = Path(output_dir) if output_dir else Path(config.output_dir) / slug
            export_directory(files, target)

        output.print_diagnostics(site.diagnostics)
        output.print_build_summary(files.paths, files.total_bytes, str(target))

        if make_zip:
            stamp = site.build_time.strftime("%Y%m%d-%H%M%S")
            archive = write_archive(
                files, Path(config.output_dir) / f"{slug}-{stamp}.zip", slug, site.build_time
            )
            output.success(f"Archive written to {archive}")
        return ExitCode.SUCCESS

    _run(ctx, action)


@app.command()
def publish(
    ctx: typer.Context,
    page_id: str = typer.Argument(..., help="Page to publish"),
) -> None:
    """Deploy a page to the hosting provider."""

    def action(output: OutputHandler, config: PublishConfig) -> ExitCode:
        orchestrator = _build_orchestrator(config, _build_api())
        with output.spinner(f"Publishing page {page_id}..."):
            result = orchestrator.deploy(page_id)

        output.print_diagnostics(result.diagnostics)
        output.print_publish_summary(result)
        return exit_code_for_publish(result)

    _run(ctx, action)


@app.command()
def status(
    ctx: typer.Context,
    page_id: str = typer.Argument(..., help="Page to inspect"),
) -> None:
    """Show the deployment status recorded for a page."""

    def action(output: OutputHandler, config: PublishConfig) -> ExitCode:
        output.print_status(_build_orchestrator(config, _build_api()).get_status(page_id))
        return ExitCode.SUCCESS

    _run(ctx, action)


@app.command()
def cancel(
    ctx: typer.Context,
    page_id: str = typer.Argument(..., help="Page stuck in publishing"),
    deploy_id: Optional[str] = typer.Option(None, "--deploy-id", help="Provider deploy to cancel"),
) -> None:
    """Reset a page stuck in publishing back to draft."""

    def action(output: OutputHandler, config: PublishConfig) -> ExitCode:
        if _build_orchestrator(config, _build_api()).cancel(page_id, deploy_id):
            output.success(f"Page {page_id} reset to draft")
        else:
            output.warning(f"Page {page_id} is not publishing; nothing to cancel")
        return ExitCode.SUCCESS

    _run(ctx, action)


@app.command()
def undeploy(
    ctx: typer.Context,
    page_id: str = typer.Argument(..., help="Page whose site should be deleted"),
) -> None:
    """Delete the hosted site of a page."""

    def action(output: OutputHandler, config: PublishConfig) -> ExitCode:
        with output.spinner(f"Deleting site of page {page_id}..."):
            removed = _build_orchestrator(config, _build_api()).undeploy(page_id)
        if removed:
            output.success(f"Site of page {page_id} deleted")
        else:
            output.warning(f"Page {page_id} has no deployed site")
        return ExitCode.SUCCESS

    _run(ctx, action)


@app.command("domain-setup")
def domain_setup(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Hosted site id"),
    domain: str = typer.Argument(..., help="Custom domain, e.g. shop.example.com"),
) -> None:
    """Attach a custom domain and print the DNS instructions."""

    def action(output: OutputHandler, config: PublishConfig) -> ExitCode:
        manager = DomainManager(_build_api(), site_suffix=config.site_url_suffix)
        with output.spinner(f"Setting up {domain}..."):
            result = manager.setup_domain(site_id, domain)

        if result.error:
            output.error(result.error)
            return ExitCode.VALIDATION_ERROR

        output.print_diagnostics(result.diagnostics)
        output.print_domain_setup(result)
        output.success(f"{result.domain} configured ({result.strategy.value})")
        return ExitCode.SUCCESS

    _run(ctx, action)


@app.command("domain-records")
def domain_records(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Hosted site id"),
    domain: str = typer.Argument(..., help="Custom domain"),
) -> None:
    """Print the DNS records a domain needs."""

    def action(output: OutputHandler, config: PublishConfig) -> ExitCode:
        manager = DomainManager(_build_api(), site_suffix=config.site_url_suffix)
        records = manager.get_required_dns_records(site_id, domain)
        if not records:
            output.error(f"Invalid domain: {domain}")
            return ExitCode.VALIDATION_ERROR
        for record in records:
            output.print(f"{record.type}\t{record.hostname}\t{record.value}\t{record.ttl or ''}")
        return ExitCode.SUCCESS

    _run(ctx, action)


@app.command("domain-status")
def domain_status(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Hosted site id"),
    domain: str = typer.Argument(..., help="Custom domain"),
) -> None:
    """Check DNS, certificate and HTTPS status of a domain."""

    def action(output: OutputHandler, config: PublishConfig) -> ExitCode:
        manager = DomainManager(_build_api(), site_suffix=config.site_url_suffix)
        with output.spinner(f"Checking {domain}..."):
            domain_state = manager.get_domain_status(site_id, domain)
        output.print_domain_status(domain_state)
        if domain_state.state is VerificationState.ERROR:
            return ExitCode.GENERAL_ERROR
        return ExitCode.SUCCESS

    _run(ctx, action)


@app.command("domain-ssl")
def domain_ssl(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Hosted site id"),
) -> None:
    """Request certificate provisioning for a site."""

    def action(output: OutputHandler, config: PublishConfig) -> ExitCode:
        result = DomainManager(_build_api(), site_suffix=config.site_url_suffix).enable_ssl(site_id)
        if result.error:
            output.error(f"SSL provisioning failed: {result.error}")
            return ExitCode.GENERAL_ERROR
        output.success(f"Certificate status: {result.status}")
        return ExitCode.SUCCESS

    _run(ctx, action)


@app.command("domain-remove")
def domain_remove(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Hosted site id"),
    domain: str = typer.Argument(..., help="Custom domain"),
) -> None:
    """Detach a custom domain from a site."""

    def action(output: OutputHandler, config: PublishConfig) -> ExitCode:
        result = DomainManager(_build_api(), site_suffix=config.site_url_suffix).remove_domain(site_id, domain)
        output.print_diagnostics(result.diagnostics)
        if not result.removed:
            output.error(f"Could not remove {domain}")
            return ExitCode.GENERAL_ERROR
        output.success(f"Removed {result.domain} from site {site_id}")
        return ExitCode.SUCCESS

    _run(ctx, action)


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
