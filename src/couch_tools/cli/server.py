"""Server-level commands."""

import click

from .common import console, print_json, run


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def info(as_json: bool):
    """Show server version and vendor."""
    result = run(lambda couch: couch.get_info())

    if as_json:
        print_json(result)
        return

    vendor = result.get("vendor", {})
    console.print(f"[bold]CouchDB:[/bold] {result.get('version', 'unknown')}")
    console.print(f"[bold]Vendor:[/bold] {vendor.get('name', 'unknown')}")
    if result.get("uuid"):
        console.print(f"[bold]UUID:[/bold] {result['uuid']}")


@click.command()
@click.option("--count", "-c", default=1, help="Number of UUIDs")
def uuids(count: int):
    """Generate UUIDs on the server."""
    result = run(lambda couch: couch.get_uuids(count))
    for value in result.get("uuids", []):
        console.print(value)
