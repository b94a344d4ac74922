"""CLI application for drupdate."""

import logging
import os
import sys
from pathlib import Path

import click
import typer
from rich.console import Console
from rich.logging import RichHandler

from core.composer import Composer
from core.config import resolve_config
from core.detect import check_requirements
from core.driver import UpdateDriver
from core.errors import ConfigValidationError, DrupdateError
from core.parse_composer import load_patches, parse_outdated, to_record
from core.report import publish_to_github, render_summary, write_summary_file

console = Console()
err_console = Console(stderr=True)

OUTDATED_PATTERN = "drupal/*"


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr so stdout only carries the summary."""
    handler = RichHandler(console=err_console, show_path=False)
    logging.basicConfig(
        level=logging.WARNING,
        handlers=[handler],
        format="%(message)s",
    )
    level = logging.DEBUG if verbose else logging.WARNING
    for name in ("core", "apps"):
        logging.getLogger(name).setLevel(level)


def _optional_path(variable: str) -> Path | None:
    value = os.environ.get(variable)
    return Path(value) if value else None


app = typer.Typer(
    name="drupdate",
    help="drupdate - Apply Composer updates to a Drupal project and summarize them",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.command()
def update(
    ctx: typer.Context,
    update_type: str | None = typer.Option(
        None, "--type", "-t", help="semver-safe-update (minor and security) or all. Default: semver-safe-update"
    ),
    update_core: str | None = typer.Option(
        None, "--core", "-c", help="true or false: check Drupal core updates. Default: true"
    ),
    exclude: str | None = typer.Option(
        None, "--exclude", "-e", help="Comma-separated modules to skip: token,redirect,pathauto"
    ),
    output: str | None = typer.Option(None, "--output", "-o", help="Markdown file (.md) to save the summary"),
    prefix: str | None = typer.Option(
        None, "--prefix", "-p", help="Prefix for composer commands, e.g. 'ddev' for 'ddev composer update'"
    ),
    project_dir: Path = typer.Option(Path("."), "--dir", "-d", help="Project directory holding composer.json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """drupdate - Run Composer updates for Drupal core and contributed modules."""
    setup_logging(verbose)

    try:
        config = resolve_config(
            os.environ,
            update_type=update_type,
            update_core=update_core,
            exclude=exclude,
            output=output,
            prefix=prefix,
        )
    except ConfigValidationError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        console.print(ctx.get_help(), markup=False, highlight=False)
        raise typer.Exit(1)

    try:
        check_requirements(project_dir, config.command_prefix)

        composer = Composer(project_dir, prefix=config.command_prefix)
        patches = load_patches(project_dir / "composer.json")
        listing = parse_outdated(composer.list_outdated(OUTDATED_PATTERN))
        records = [to_record(package, patches) for package in listing.locked]

        driver = UpdateDriver(config, composer, project_dir / "composer.lock", console=err_console)
        report = driver.run(records)
        summary = render_summary(report)

        if config.github_actions:
            publish_to_github(
                summary,
                _optional_path("GITHUB_STEP_SUMMARY"),
                _optional_path("GITHUB_ENV"),
            )
        else:
            console.print(summary, markup=False, highlight=False, emoji=False, soft_wrap=True, end="")

        if config.output_file:
            write_summary_file(config.output_file, summary)

    except typer.Exit:
        raise
    except DrupdateError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(1)


def main() -> None:
    """Console entry point: usage errors exit with 1 like validation errors."""
    try:
        exit_code = app(standalone_mode=False)
    except click.UsageError as e:
        e.show()
        sys.exit(1)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    sys.exit(exit_code or 0)


if __name__ == "__main__":
    main()
