from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import CollectorConfig, load_config
from .errors import FatalError, MissingIdentifierError, PrivilegeError
from .harness import LogCollector, RunResult, is_privileged
from .logging_config import configure_logging
from .run import validate_identifier

console = Console()

USAGE_HINT = "Usage: sudo save-logs <identifier>   (example: sudo save-logs tray17)"


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("identifier", required=False)
@click.option("--config", "config_path", type=click.Path(exists=True, path_type=Path), default=None)
@click.option("--archive/--no-archive", default=None, help="Compress the output directory into <identifier>_logs.tar.gz.")
@click.option("--install/--no-install", default=None, help="Try to apt-get install missing optional tools.")
@click.option("--verbose", is_flag=True, default=False, help="Increase logging verbosity.")
@click.version_option(version=__version__, message="savelogs %(version)s")
def main(
    identifier: Optional[str],
    config_path: Optional[Path],
    archive: Optional[bool],
    install: Optional[bool],
    verbose: bool,
) -> None:
    """Capture kernel, hardware, and GPU diagnostics into ./IDENTIFIER."""

    configure_logging(verbose=verbose)
    logger = logging.getLogger("savelogs.cli")
    try:
        identifier = validate_identifier(identifier)
        if not is_privileged():
            raise PrivilegeError()
        config = _prepare_config(config_path, archive=archive, install=install)
        result = LogCollector(config).execute(identifier)
    except FatalError as exc:
        click.echo(click.style(f"Error: {exc}", fg="red"), err=True)
        if isinstance(exc, MissingIdentifierError):
            click.echo(USAGE_HINT, err=True)
        sys.exit(1)

    logger.debug("Run %s finished with status %s", identifier, result.status)
    _print_summary(result)


def _prepare_config(config_path: Optional[Path], archive: Optional[bool], install: Optional[bool]) -> CollectorConfig:
    config = load_config(config_path)
    if archive is not None:
        config.archive = archive
    if install is not None:
        config.auto_install = install
    return config


def _print_summary(result: RunResult) -> None:
    console.print("")
    console.print(result.summary_text, markup=False, highlight=False, soft_wrap=True)
    if result.archive is not None:
        if result.archive.succeeded:
            console.print(f"Archive: {result.archive.output_path} ({result.archive.size} bytes)", highlight=False, soft_wrap=True)
        else:
            console.print(f"[yellow]Archive failed:[/yellow] {escape(result.archive.error or 'unknown error')}", highlight=False, soft_wrap=True)
    style = "green" if result.status == "succeeded" else "yellow"
    console.print(
        f"[{style}]--- Logs for {result.run.identifier} saved in {result.run.output_dir} ({result.status}) ---[/{style}]",
        highlight=False,
        soft_wrap=True,
    )


if __name__ == "__main__":  # pragma: no cover
    main()
