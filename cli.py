#!/usr/bin/env python3
"""
Markdown Keep CLI.

Primary entry point for the application.
Use --service to select what to run.

Usage:
    python cli.py --help
    python cli.py                                  # start the terminal UI
    python cli.py --service tui --data-dir ~/notes
    python cli.py --service export --output notes.json
    python cli.py --service config
    python cli.py --service info
"""

import sys
from pathlib import Path

import click
import structlog

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from notekeep.core.config import validate_project_root
from notekeep.core.logging import get_logger, setup_logging


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(["tui", "export", "config", "info"]),
    default="tui",
    help="Service or command to run.",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the persisted notes (overrides storage.yaml).",
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Export file path (export only).",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
def main(
    service: str,
    data_dir: Path | None,
    output: Path | None,
    verbose: bool,
    debug: bool,
) -> None:
    """
    Markdown Keep.

    Markdown notes with live preview, tags, pinning, archiving and search.

    \b
    Examples:
        python cli.py
        python cli.py --service tui --data-dir ~/notes
        python cli.py --service export --output backup.json
        python cli.py --service config
        python cli.py --service info
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = None

    # The TUI owns the terminal, so it only logs to file.
    setup_logging(
        level=log_level,
        format_type="console",
        enable_console=False if service == "tui" else bool(log_level),
    )

    structlog.contextvars.bind_contextvars(source="tui" if service == "tui" else "cli")

    logger = get_logger(__name__)

    logger.debug("CLI invoked", extra={"service": service, "log_level": log_level})

    if service == "tui":
        run_tui(logger, data_dir)
    elif service == "export":
        run_export(logger, data_dir, output)
    elif service == "config":
        show_config(logger)
    elif service == "info":
        show_info(logger, data_dir)


def run_tui(logger, data_dir: Path | None) -> None:
    """Start the terminal UI."""
    from notekeep.tui.app import run

    logger.info("Starting TUI", extra={"data_dir": str(data_dir) if data_dir else None})
    run(data_dir=data_dir)


def _headless_controller(data_dir: Path | None):
    from notekeep.services.factory import create_controller

    def on_notice(notice) -> None:
        color = "red" if notice.severity == "error" else None
        click.echo(click.style(notice.message, fg=color), err=notice.severity != "information")

    controller = create_controller(on_render=lambda view: None, on_notice=on_notice, data_dir=data_dir)
    controller.start()
    return controller


def run_export(logger, data_dir: Path | None, output: Path | None) -> None:
    """Export every note to a pretty-printed JSON file."""
    from notekeep.core.config import get_app_config

    target = output or Path.cwd() / get_app_config().application.export.filename
    controller = _headless_controller(data_dir)
    written = controller.export(target)
    if written is None:
        logger.error("Export failed", extra={"path": str(target)})
        sys.exit(1)


def show_config(logger) -> None:
    """Display loaded configuration."""
    click.echo("Application Configuration:\n")

    try:
        from notekeep.core.config import get_app_config

        app_config = get_app_config()

        sections = [
            ("Application Settings", app_config.application),
            ("Storage Settings", app_config.storage),
            ("Logging Settings", app_config.logging),
        ]
        for title, section in sections:
            click.echo(f"{title} (from YAML):")
            click.echo("-" * 40)
            for key, value in section.model_dump().items():
                if isinstance(value, dict):
                    click.echo(f"  {key}:")
                    for k, v in value.items():
                        click.echo(f"    {k}: {v}")
                else:
                    click.echo(f"  {key}: {value}")
            click.echo()

        logger.info("Configuration displayed successfully")

    except (FileNotFoundError, ValueError) as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)


def show_info(logger, data_dir: Path | None) -> None:
    """Display application identity and note counts."""
    from notekeep.core.config import get_app_config, get_data_dir

    application = get_app_config().application
    controller = _headless_controller(data_dir)
    notes = controller.repository.snapshot()

    click.echo(f"{application.name} v{application.version}")
    click.echo(application.description)
    click.echo("-" * 40)
    click.echo(f"  Data directory: {data_dir or get_data_dir()}")
    click.echo(f"  Notes:          {len(notes)}")
    click.echo(f"  Pinned:         {sum(1 for note in notes if note.pinned)}")
    click.echo(f"  Archived:       {sum(1 for note in notes if note.archived)}")
    click.echo(f"  Theme:          {controller.state.theme.value}")
    logger.debug("Info displayed", extra={"notes": len(notes)})


if __name__ == "__main__":
    main()
