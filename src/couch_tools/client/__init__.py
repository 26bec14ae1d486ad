"""CouchDB API client.

This package provides an async client for the CouchDB HTTP API. Every
operation is described as a RequestDescriptor and dispatched through a
single Gateway, which normalizes success into the decoded JSON body and
failure into a NormalizedError.

Usage:
    from couch_tools.client import CouchDB, CouchConfig

    # Auto-configure from environment (COUCHDB_HOST, COUCHDB_PORT, ...)
    async with CouchDB() as couch:
        databases = await couch.list_databases()

    # Explicit configuration
    config = CouchConfig(
        host="http://127.0.0.1",
        port=5984,
        username="admin",
        password="secret",
        default_database="orders",
    )
    async with CouchDB(config) as couch:
        if not await couch.database_exists():
            await couch.create_database()
"""

from .api import CouchDB
from .config import CouchConfig
from .exceptions import (
    CouchConfigError,
    CouchError,
    CouchRequestError,
    CouchValidationError,
    NormalizedError,
)
from .gateway import Gateway, Outcome
from .query import build_query_string
from .request import Method, RequestDescriptor
from .status import STATUS_MESSAGES, resolve_status_message

__all__ = [
    # Main API
    "CouchDB",
    "CouchConfig",
    # Gateway
    "Gateway",
    "Method",
    "Outcome",
    "RequestDescriptor",
    "STATUS_MESSAGES",
    "build_query_string",
    "resolve_status_message",
    # Exceptions
    "CouchConfigError",
    "CouchError",
    "CouchRequestError",
    "CouchValidationError",
    "NormalizedError",
]
