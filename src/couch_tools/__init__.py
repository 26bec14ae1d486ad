"""Couch Tools - Async client library and CLI for CouchDB."""

from couch_tools.client import CouchDB
from couch_tools.client.config import CouchConfig
from couch_tools.client.exceptions import (
    CouchConfigError,
    CouchError,
    CouchRequestError,
    CouchValidationError,
    NormalizedError,
)

try:
    from importlib.metadata import version
    __version__ = version("couch-tools")
except Exception:
    __version__ = "0.1.0"  # Fallback for development

__all__ = [
    "CouchConfig",
    "CouchConfigError",
    "CouchDB",
    "CouchError",
    "CouchRequestError",
    "CouchValidationError",
    "NormalizedError",
    "__version__",
]
