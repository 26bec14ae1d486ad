"""Database management commands."""

import click
from rich.panel import Panel
from rich.table import Table

from .common import console, print_json, run


@click.group()
def db():
    """Manage databases."""
    pass


@db.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_databases(as_json: bool):
    """List all databases."""
    names = run(lambda couch: couch.list_databases())

    if as_json:
        print_json(names)
        return

    if not names:
        console.print("[yellow]No databases found.[/yellow]")
        return

    table = Table(title="Databases")
    table.add_column("Name", style="cyan")
    for name in names:
        table.add_row(name)
    console.print(table)


@db.command("show")
@click.argument("name", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show_database(name: str | None, as_json: bool):
    """Show database details."""
    result = run(lambda couch: couch.get_database(name))

    if as_json:
        print_json(result)
        return

    sizes = result.get("sizes", {})
    console.print(Panel(
        f"[bold]Documents:[/bold] {result.get('doc_count', '-')}\n"
        f"[bold]Deleted:[/bold] {result.get('doc_del_count', '-')}\n"
        f"[bold]Update seq:[/bold] {result.get('update_seq', '-')}\n"
        f"[bold]File size:[/bold] {sizes.get('file', result.get('disk_size', '-'))}\n"
        f"[bold]Compacting:[/bold] {'yes' if result.get('compact_running') else 'no'}",
        title=f"[cyan]{result.get('db_name', name)}[/cyan]",
    ))


@db.command("create")
@click.argument("name", required=False)
def create_database(name: str | None):
    """Create a database."""
    run(lambda couch: couch.create_database(name))
    console.print(f"[green]Created database '{name or 'default'}'[/green]")


@db.command("delete")
@click.argument("name", required=False)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def delete_database(name: str | None, yes: bool):
    """Delete a database and all of its documents."""
    if not yes:
        click.confirm(f"Delete database '{name or 'default'}'?", abort=True)

    run(lambda couch: couch.delete_database(name))
    console.print(f"[green]Deleted database '{name or 'default'}'[/green]")


@db.command("exists")
@click.argument("name", required=False)
def database_exists(name: str | None):
    """Check whether a database exists (exit code 1 if not)."""
    exists = run(lambda couch: couch.database_exists(name))
    if exists:
        console.print("[green]yes[/green]")
    else:
        console.print("[yellow]no[/yellow]")
        raise SystemExit(1)
