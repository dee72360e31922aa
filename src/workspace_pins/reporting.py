"""
Console output for prepare and restore runs.

Provides color-coded console output using Rich library.
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .publisher import Command, PackageResult, PublishResult

_HEADERS = {
    Command.PREPARE: "🚀 Preparing packages for publishing...",
    Command.RESTORE: "🔄 Restoring packages to development mode...",
}


class PublishReporter:
    """Formats and displays manifest rewrites as they happen."""

    def __init__(
        self,
        console: Optional[Console] = None,
        quiet: bool = False,
        verbose: bool = False,
    ):
        self.console = console or Console()
        self.quiet = quiet
        self.verbose = verbose

    def print_header(self, command: Command, dry_run: bool = False) -> None:
        if self.quiet:
            return
        self.console.print(_HEADERS[command], style="bold blue")
        if dry_run:
            self.console.print("🔍 Dry run: no manifests will be written", style="yellow")

    def print_package(self, command: Command, package_result: PackageResult) -> None:
        """Print every change made to one package, then its status line."""
        if self.quiet:
            return

        for change in package_result.changes:
            self.console.print(f"  📦 {escape(change.describe())}")

        name = escape(package_result.package_name)
        if not package_result.written:
            self.console.print(f"🔍 Would rewrite {name}", style="yellow")
        elif command is Command.PREPARE:
            self.console.print(
                f"✅ Updated {name} dependencies for publishing", style="green"
            )
        else:
            self.console.print(f"✅ Restored {name} to development mode", style="green")

        if self.verbose:
            self.console.print(f"   {escape(str(package_result.path))}", style="dim")

    def print_summary(self, result: PublishResult) -> None:
        if self.quiet:
            return

        table = Table(
            title=f"📊 {result.command.value.capitalize()} Summary",
            box=box.ROUNDED,
            title_style="bold cyan",
        )
        table.add_column("Package", style="bold")
        table.add_column("Changes", justify="center")
        table.add_column("Moved", justify="center")
        table.add_column("Status", justify="center")

        for package_result in result.packages:
            if package_result.written:
                status = "[green]written[/green]"
            elif result.dry_run:
                status = "[yellow]dry run[/yellow]"
            else:
                status = "[red]not written[/red]"
            table.add_row(
                escape(package_result.package_name),
                str(len(package_result.changes)),
                str(len(package_result.moved)),
                status,
            )

        self.console.print()
        self.console.print(table)
        self.console.print(
            f"Processed {len(result.packages)} packages in {result.duration_ms}ms",
            style="dim",
        )
