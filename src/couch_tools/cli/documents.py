"""Document management commands."""

import click
from rich.table import Table

from .common import console, parse_json_option, print_json, run


@click.group()
def doc():
    """Manage documents."""
    pass


@doc.command("list")
@click.option("--database", "-d", help="Database (defaults to COUCHDB_DEFAULT_DATABASE)")
@click.option("--limit", "-l", default=50, help="Max documents")
@click.option("--include-docs", is_flag=True, help="Include document bodies")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_documents(database: str | None, limit: int, include_docs: bool, as_json: bool):
    """List documents."""
    query = {"limit": limit, "include_docs": include_docs}
    result = run(lambda couch: couch.list_documents(query), database)

    if as_json:
        print_json(result)
        return

    rows = result.get("rows", [])
    if not rows:
        console.print("[yellow]No documents found.[/yellow]")
        return

    table = Table(title=f"Documents ({result.get('total_rows', len(rows))} total)")
    table.add_column("ID", style="cyan")
    table.add_column("Revision")
    for row in rows:
        table.add_row(row.get("id", ""), row.get("value", {}).get("rev", ""))
    console.print(table)


@doc.command("get")
@click.argument("doc_id")
@click.option("--database", "-d", help="Database (defaults to COUCHDB_DEFAULT_DATABASE)")
@click.option("--rev", help="Specific revision")
def get_document(doc_id: str, database: str | None, rev: str | None):
    """Print a document as JSON."""
    result = run(lambda couch: couch.get_document(doc_id, {"rev": rev}), database)
    print_json(result)


@doc.command("put")
@click.argument("body")
@click.option("--id", "doc_id", help="Document id (server-assigned when omitted)")
@click.option("--database", "-d", help="Database (defaults to COUCHDB_DEFAULT_DATABASE)")
def put_document(body: str, doc_id: str | None, database: str | None):
    """Create or update a document from a JSON string."""
    doc_body = parse_json_option(body, "body")
    if not isinstance(doc_body, dict):
        raise click.BadParameter("Document must be a JSON object", param_hint="body")

    result = run(lambda couch: couch.create_document(doc_body, doc_id), database)
    console.print(f"[green]Stored {result.get('id')} at rev {result.get('rev')}[/green]")


@doc.command("delete")
@click.argument("doc_id")
@click.option("--rev", required=True, help="Current revision of the document")
@click.option("--database", "-d", help="Database (defaults to COUCHDB_DEFAULT_DATABASE)")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def delete_document(doc_id: str, rev: str, database: str | None, yes: bool):
    """Delete a document."""
    if not yes:
        click.confirm(f"Delete document '{doc_id}'?", abort=True)

    run(lambda couch: couch.delete_document(doc_id, rev), database)
    console.print(f"[green]Deleted document '{doc_id}'[/green]")


@doc.command("find")
@click.argument("selector")
@click.option("--database", "-d", help="Database (defaults to COUCHDB_DEFAULT_DATABASE)")
@click.option("--limit", "-l", default=25, help="Max documents")
@click.option("--fields", help="Comma-separated fields to return")
def find_documents(selector: str, database: str | None, limit: int, fields: str | None):
    """Run a _find query with a JSON selector."""
    query = {"selector": parse_json_option(selector, "selector"), "limit": limit}
    if fields:
        query["fields"] = [f.strip() for f in fields.split(",") if f.strip()]

    result = run(lambda couch: couch.find_documents(query), database)
    if result.get("warning"):
        console.print(f"[yellow]{result['warning']}[/yellow]")
    print_json(result.get("docs", []))
