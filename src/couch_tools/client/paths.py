"""Path building helpers: name validation and percent-encoding."""

from urllib.parse import quote

from .config import DATABASE_NAME_PATTERN
from .exceptions import CouchConfigError, CouchValidationError

_RESERVED_ID_PREFIXES = ("_design/", "_local/")


def resolve_database(database: str | None, default: str | None) -> str:
    """Pick the call-site database, falling back to the configured default.

    Raises:
        CouchConfigError: If neither is available
        CouchValidationError: If the name is not a valid CouchDB database name
    """
    name = database or default
    if not name:
        raise CouchConfigError("No database name given and no default database configured")
    validate_database_name(name)
    return name


def validate_database_name(name: str) -> None:
    """Check a database name against CouchDB's naming rules."""
    if not DATABASE_NAME_PATTERN.fullmatch(name):
        raise CouchValidationError(
            f"Invalid database name '{name}': must start with a lowercase letter and "
            "contain only a-z, 0-9, _, $, (, ), +, - and /"
        )


def database_path(name: str, *segments: str) -> str:
    """Escape a database name and append already-encoded segments."""
    return "/".join([quote(name, safe=""), *segments])


def document_segment(doc_id: str) -> str:
    """Percent-encode a document id, keeping _design/ and _local/ prefixes."""
    for prefix in _RESERVED_ID_PREFIXES:
        if doc_id.startswith(prefix):
            return prefix + quote(doc_id[len(prefix):], safe="")
    return quote(doc_id, safe="")
