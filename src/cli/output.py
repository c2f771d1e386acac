"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output:
colored status lines, a spinner for long-running calls, and summaries of
builds, publishes and domain operations. Supports verbosity levels and the
--no-color flag.
"""

from contextlib import contextmanager
from typing import Iterable, Iterator, List

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.table import Table

from src.deployment.models import DeploymentStatus, PublishOutcome, PublishResult
from src.domain_manager.models import DomainSetupResult, DomainStatus, VerificationState


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Operation completed")
        >>> with handler.spinner("Publishing..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            force_terminal=not no_color,
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        """Display success message in green."""
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        """Display error message in red."""
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        """Display warning message in yellow."""
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def print(self, message: str) -> None:
        """Display message without formatting."""
        self.console.print(message, markup=False)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner for single operations.

        Example:
            >>> with handler.spinner("Publishing page..."):
            ...     pass
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10):
            yield

    def print_diagnostics(self, diagnostics: Iterable[str]) -> None:
        """Display recovered problems as warnings."""
        for diagnostic in diagnostics:
            self.warning(diagnostic)

    def print_build_summary(self, paths: List[str], total_bytes: int, output_dir: str) -> None:
        """Display the file set written by a local build.

        Args:
            paths: Relative paths of the written files
            total_bytes: Combined size of the files
            output_dir: Directory the files were written to
        """
        self.console.print("\n[bold]Build Summary:[/bold]")
        for path in paths:
            self.console.print(f"  [dim]•[/dim] {path}")
        self.console.print(f"\n[green]Built {len(paths)} file(s), {total_bytes} bytes in {output_dir}[/green]")

    def print_publish_summary(self, result: PublishResult) -> None:
        """Display each deployment attempt and the overall outcome."""
        self.console.print("\n[bold]Publish Summary:[/bold]")

        for record in result.records:
            if record.error_message:
                self.console.print(
                    f"  [red]✗[/red] {record.strategy.value}: {record.state.value} ({record.error_message})"
                )
            else:
                self.console.print(f"  [green]✓[/green] {record.strategy.value}: {record.state.value}")

        if result.outcome is PublishOutcome.PUBLISHED:
            self.console.print(f"\n[green]Published: {result.url}[/green]")
        elif result.outcome is PublishOutcome.PENDING:
            self.console.print(
                f"\n[yellow]Build {result.deploy_id} still running on site {result.site_id}; "
                f"check again later[/yellow]"
            )
        elif result.outcome is PublishOutcome.MANUAL:
            self.console.print(
                f"\n[yellow]Automatic deployment failed; upload {result.archive_path} manually[/yellow]"
            )
        else:
            self.console.print(f"\n[red]Publish failed: {result.error_message or 'unknown error'}[/red]")

    def print_status(self, status: DeploymentStatus) -> None:
        """Display the deployment status recorded for a page."""
        table = Table(show_header=False, box=None)
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Page", status.page_id)
        table.add_row("Status", status.status)
        table.add_row("Deployed", "yes" if status.is_deployed else "no")
        table.add_row("Site", status.site_id or "-")
        table.add_row("URL", status.url or "-")
        table.add_row("Last deployed", status.last_deployed_at or "-")
        self.console.print(table)

    def print_domain_setup(self, result: DomainSetupResult) -> None:
        """Display the records and instructions of a domain setup."""
        if result.records:
            table = Table(title=f"DNS records for {result.domain}")
            table.add_column("Type")
            table.add_column("Name")
            table.add_column("Value")
            table.add_column("TTL")
            for record in result.records:
                table.add_row(record.type, record.hostname, record.value, str(record.ttl or ""))
            self.console.print(table)
        if result.instructions:
            self.print(result.instructions)

    def print_domain_status(self, status: DomainStatus) -> None:
        """Display the verification state and next steps of a domain."""
        color = {
            VerificationState.ACTIVE: "green",
            VerificationState.ERROR: "red",
        }.get(status.state, "yellow")
        self.console.print(f"[bold]{status.domain}[/bold]: [{color}]{status.state.value}[/{color}]")

        details = status.details
        checks = [
            ("DNS configured", details.dns_configured),
            ("Reachable", details.reachable),
            ("Certificate issued", details.certificate_issued),
            ("SSL enabled", details.ssl_enabled),
            ("Redirects properly", details.redirects_properly),
        ]
        for label, passed in checks:
            mark = "[green]✓[/green]" if passed else "[red]✗[/red]"
            self.console.print(f"  {mark} {label}")

        if status.error:
            self.error(status.error)
        if status.next_steps:
            self.console.print("\n[bold]Next steps:[/bold]")
            for step in status.next_steps:
                self.console.print(f"  • {step}")
