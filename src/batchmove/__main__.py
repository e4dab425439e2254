"""CLI entry point for batchmove."""

import logging
import sys
from pathlib import Path

import click

from .adapters.storage import LocalFileSystemAdapter
from .cleanup import run_cleanup
from .config import Settings, load_settings
from .domain.models import RunReport
from .domain.renamer import destination_folder, try_rename
from .errors import ConfigurationError, NoMatchError
from .runner import run_batch

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = Path("batchmove.json")


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _load(ctx: click.Context) -> Settings:
    try:
        return load_settings(ctx.obj["config_path"])
    except ConfigurationError as e:
        logger.error(str(e))
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("-c", "--config", type=click.Path(path_type=Path), help="Config file path")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: Path | None) -> None:
    """Batchmove - move dated files and report on the run."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config or DEFAULT_CONFIG


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Move matching files, write logs, notify. Exits 1 on system errors."""
    settings = _load(ctx)
    report = run_batch(settings)

    click.echo(
        f"Processed: {len(report.results)}, moved: {report.moved_count}, "
        f"action errors: {report.action_error_count}, "
        f"system errors: {len(report.system_errors)}"
    )
    sys.exit(report.exit_code)


@cli.command()
@click.pass_context
def cleanup(ctx: click.Context) -> None:
    """Remove old log files."""
    settings = _load(ctx)
    save = settings.settings.save_log_files

    if save.where.folder is None:
        click.echo("No log folder configured")
        return

    report = RunReport()
    removed = run_cleanup(
        LocalFileSystemAdapter(),
        save.where.folder,
        save.delete_logs_after_days,
        report,
        recursive=save.recursive_cleanup,
    )
    click.echo(f"Removed {removed} files from {save.where.folder}")
    for error in report.system_errors:
        click.echo(f"Error: {error.message}", err=True)
    sys.exit(report.exit_code)


@cli.command()
@click.argument("file_name")
@click.pass_context
def preview(ctx: click.Context, file_name: str) -> None:
    """Show where FILE_NAME would be moved to."""
    settings = _load(ctx)

    if not settings.source.pattern.search(file_name):
        click.echo(f"Not selected: does not match '{settings.source.match_pattern}'", err=True)
        sys.exit(1)

    try:
        plan = try_rename(
            file_name,
            prefix=settings.destination.file_name_prefix,
            extension=settings.destination.file_extension,
        )
    except NoMatchError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    folder = destination_folder(
        settings.destination.folder, plan.year, settings.destination.year_subfolder
    )
    click.echo(f"{file_name} -> {folder / plan.new_file_name}")


if __name__ == "__main__":
    cli()
