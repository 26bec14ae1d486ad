"""Main CLI entry point."""

import logging
from pathlib import Path

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from couch_tools import __version__
from couch_tools.client import CouchConfig

# Load .env from cwd
_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)


@click.group()
@click.version_option(version=__version__, prog_name="couch")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Couch CLI - Talk to a CouchDB server."""
    level = "DEBUG"
    if not verbose:
        try:
            level = CouchConfig().log_level
        except ValidationError:
            # Reported by the command itself when it builds its client
            level = "INFO"
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def setup_cli():
    """Register all commands."""
    from .databases import db
    from .documents import doc
    from .server import info, uuids

    cli.add_command(info)
    cli.add_command(uuids)
    cli.add_command(db)
    cli.add_command(doc)


setup_cli()


def main():
    """Entry point for couch CLI."""
    cli()


if __name__ == "__main__":
    main()
