import copy
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.json import JSON

from .cli_config import ComprehensiveConfig, effective_log_level, load_config
from .dependency import DEPENDENCY_MATRIX, DependencyMatrix, matrix_to_dict
from .error_handling import setup_error_handling
from .manifests import ManifestAccessor
from .publisher import Command, PublishResult, WorkspacePublisher
from .reporting import PublishReporter
from .structured_logging import configure_logging

__version__ = "1.0.0"

USAGE = "Usage: workspace-pins [prepare|restore]"

console = Console()


def build_accessor(config: ComprehensiveConfig) -> ManifestAccessor:
    return ManifestAccessor(
        config.workspace.root_path,
        packages_dir=config.workspace.packages_dir,
        manifest_name=config.workspace.manifest_name,
        indent=config.output.indent,
    )


def run_command(
    command: Command,
    config: ComprehensiveConfig,
    matrix: DependencyMatrix = DEPENDENCY_MATRIX,
    output: Optional[Console] = None,
) -> PublishResult:
    """
    Run prepare or restore over every package of the matrix.

    Args:
        command: Command to apply
        config: Effective configuration
        matrix: Dependency matrix to apply
        output: Console used for progress output

    Returns:
        PublishResult: Per-package changes of the run
    """
    reporter = PublishReporter(
        output or console, quiet=config.output.quiet, verbose=config.output.verbose
    )
    publisher = WorkspacePublisher(
        build_accessor(config),
        matrix,
        buffer_writes=config.publish.buffer_writes,
        dry_run=config.publish.dry_run,
        on_package=reporter.print_package,
    )

    reporter.print_header(command, config.publish.dry_run)
    result = publisher.run(command)
    if config.output.verbose or config.publish.dry_run:
        reporter.print_summary(result)
    return result


def apply_cli_overrides(
    config: ComprehensiveConfig,
    root: Optional[str],
    dry_run: bool,
    no_buffer: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    if root is not None:
        config.workspace.root = root
    if dry_run:
        config.publish.dry_run = True
    if no_buffer:
        config.publish.buffer_writes = False
    if quiet:
        config.output.quiet = True
        config.output.verbose = False
    if verbose:
        config.output.verbose = True
        config.output.quiet = False


@click.command(
    context_settings={
        "help_option_names": ["-h", "--help"],
        "ignore_unknown_options": True,
        "allow_extra_args": True,
    }
)
@click.argument("command", required=False)
@click.option(
    "--root",
    type=click.Path(file_okay=False),
    help="Workspace root containing the packages directory (default from config or cwd)",
)
@click.option("--dry-run", is_flag=True, help="Report changes without writing manifests")
@click.option(
    "--no-buffer",
    is_flag=True,
    help="Write each manifest as soon as it is rewritten instead of after all succeed",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-critical output")
@click.option("--verbose", "-v", is_flag=True, help="Show paths, a summary and info logs")
@click.option("--show-matrix", is_flag=True, help="Print the dependency matrix as JSON")
@click.option("--show-config", is_flag=True, help="Print the effective configuration")
@click.option("--version", is_flag=True, help="Show version information")
@click.pass_context
def cli(
    ctx,
    command: Optional[str],
    root: Optional[str],
    dry_run: bool,
    no_buffer: bool,
    quiet: bool,
    verbose: bool,
    show_matrix: bool,
    show_config: bool,
    version: bool,
) -> None:
    """
    📦 Workspace-Pins: pin workspace dependencies for publishing

    COMMAND is either "prepare" (replace workspace:* references with caret
    ranges of the current package versions) or "restore" (put workspace:*
    references back).

    Examples:

      workspace-pins prepare

      workspace-pins prepare --dry-run --verbose

      workspace-pins restore --root ../monorepo
    """
    if version:
        console.print(f"Workspace-Pins version {__version__}", style="bold blue")
        ctx.exit()

    if show_matrix:
        console.print(JSON.from_data(matrix_to_dict(DEPENDENCY_MATRIX)), soft_wrap=True)
        ctx.exit()

    if show_config:
        config = copy.deepcopy(load_config())
        apply_cli_overrides(config, root, dry_run, no_buffer, quiet, verbose)
        console.print(JSON.from_data(config.to_dict()), soft_wrap=True)
        ctx.exit()

    parsed = Command.parse(command)
    if parsed is None:
        click.echo(USAGE)
        sys.exit(1)

    try:
        config = copy.deepcopy(load_config())
        apply_cli_overrides(config, root, dry_run, no_buffer, quiet, verbose)

        log_level = effective_log_level(config)
        configure_logging(log_level, enable_json=config.logging.json_logs)
        setup_error_handling(log_level=getattr(logging, log_level))

        if not Path(config.workspace.root).is_dir():
            raise click.ClickException(
                f"Workspace root does not exist: {config.workspace.root}"
            )

        run_command(parsed, config)

    except KeyboardInterrupt:
        Console(stderr=True).print("\n⚠️  Interrupted by user", style="yellow")
        sys.exit(130)
    except Exception as e:
        err_console = Console(stderr=True)
        if verbose:
            err_console.print_exception()
        err_console.print(f"❌ Error: {e}", style="red", markup=False)
        sys.exit(1)


if __name__ == "__main__":
    cli()
