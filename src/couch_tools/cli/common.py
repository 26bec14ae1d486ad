"""Shared helpers for CLI commands."""

import asyncio
import json
from typing import Any, Awaitable, Callable, TypeVar

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from ..client import CouchConfig, CouchDB, CouchError

console = Console()

T = TypeVar("T")


def run(operation: Callable[[CouchDB], Awaitable[T]], database: str | None = None) -> T:
    """Run an async operation against a fresh client, then close it.

    Client and configuration errors are printed and turned into click.Abort.
    """
    async def _run() -> T:
        config = CouchConfig()
        if database:
            config = config.model_copy(update={"default_database": database})
        async with CouchDB(config) as couch:
            return await operation(couch)

    try:
        return asyncio.run(_run())
    except CouchError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise click.Abort()
    except ValidationError as e:
        console.print(f"[red]Error:[/red] Invalid configuration: {escape(str(e))}")
        raise click.Abort()


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data))


def parse_json_option(value: str | None, name: str) -> Any:
    """Decode a JSON command-line value."""
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Invalid JSON: {e}", param_hint=name)
