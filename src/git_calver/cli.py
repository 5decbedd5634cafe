"""Command line interface for git-calver."""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console

from . import __version__
from .config import ConfigManager
from .errors import CalverError
from .repository import open_repository
from .service import CalendarVersioner

logger = logging.getLogger(__name__)

# Diagnostics only; the version itself is written to stdout with click.echo
error_console = Console(stderr=True)


def _stdout_is_terminal() -> bool:
    return sys.stdout.isatty()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
        stream=sys.stderr,
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("paths", nargs=-1, metavar="[PATH]")
@click.option("--rev", default=None, help="git revision (default: HEAD)")
@click.option(
    "--year",
    default=None,
    help="Start year (default: year of the oldest root commit)",
)
@click.option("--prefix", default=None, help="Version prefix (default: v)")
@click.option("--sep", default=None, help="Field separator (default: .)")
@click.option("--short", is_flag=True, help="Drop the order field when it is zero")
@click.option(
    "--inverse",
    default=None,
    metavar="VERSION",
    help="Print the commit that produced VERSION instead of a version",
)
@click.option(
    "--full-scan",
    is_flag=True,
    help="Count same-day commits across all history instead of stopping "
    "at the first older commit",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Options file (default: .git-calver.json in the repository root)",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging on stderr")
@click.version_option(version=__version__, prog_name="git-calver")
def cli(
    paths: Tuple[str, ...],
    rev: Optional[str],
    year: Optional[str],
    prefix: Optional[str],
    sep: Optional[str],
    short: bool,
    inverse: Optional[str],
    full_scan: bool,
    config_path: Optional[str],
    verbose: bool,
):
    """Derive a calendar version (YEAR.MONTH.DAY.ORDER) from git history.

    \b
    YEAR is counted from the year of the repository's first commit (or
    --year), MONTH and DAY are the commit's UTC date and ORDER ranks the
    commit among the commits made that day, the most recent being 0.

    \b
    EXAMPLES:
      git-calver                       # v3.4.17.0
      git-calver --rev v1.2 ../other   # version of a tag in another repo
      git-calver --short --prefix ''   # 3.4.17
      git-calver --inverse v3.4.17.0   # commit hash for a version

    The trailing newline is only written when stdout is a terminal.
    """
    if len(paths) > 1:
        raise click.UsageError("cannot specify more than one git directory")

    _configure_logging(verbose)
    path = Path(paths[0]) if paths else Path.cwd()

    try:
        with open_repository(path) as repo:
            if config_path:
                manager = ConfigManager(Path(config_path), required=True)
            else:
                manager = ConfigManager.for_repository(repo.root)
            manager.load()
            options = manager.merge(
                {
                    "revision": rev,
                    "year": year,
                    "prefix": prefix,
                    "separator": sep,
                    "short": short or None,
                    "inverse": inverse,
                    "full_scan": full_scan or None,
                }
            )
            output = CalendarVersioner(repo, options).run()
    except CalverError as e:
        logger.debug("Failed", exc_info=True)
        error_console.print(
            f"❌ error: {e}", style="red", markup=False, highlight=False, soft_wrap=True
        )
        sys.exit(e.exit_code)

    click.echo(output, nl=_stdout_is_terminal())


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        error_console.print("\n❌ Interrupted by user", style="red")
        sys.exit(1)


if __name__ == "__main__":
    main()
