"""
Main CLI dispatcher for cmsaudit.

Usage:
    cmsaudit search TERM [--page-type T]... [--collection K]... [--blog]
    cmsaudit audit [--page-type T]... [--collection K]... [--blog]
    cmsaudit config [show|get|set|reset]
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from cmsaudit import __version__

console = Console()


class Context:
    """Shared context for all commands."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.console = console


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # urllib3 is noisy at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


@click.group()
@click.version_option(version=__version__, prog_name="cmsaudit")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Search and audit headless CMS content.

    Fetches pages, blog posts and collections with a read-only API token,
    then searches them for a term or audits them for pasted markup.
    """
    ctx.obj = Context(verbose=verbose)
    configure_logging(verbose)


# Import and register commands (imports after main definition intentional)
from cmsaudit.config.commands import config  # noqa: E402
from cmsaudit.content.commands import audit, search  # noqa: E402

main.add_command(search)
main.add_command(audit)
main.add_command(config)


if __name__ == "__main__":
    main()
