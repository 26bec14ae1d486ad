"""Query string composition for view and listing endpoints."""

import json
from collections.abc import Mapping
from typing import Any

import httpx

# Parameters CouchDB expects as JSON literals rather than bare strings.
JSON_ENCODED_KEYS = frozenset({"key", "keys", "startkey", "endkey", "start_key", "end_key"})


def build_query_string(params: Mapping[str, Any] | None = None) -> str:
    """Serialize query parameters into a leading-"?" query string.

    Args:
        params: Parameter names to values. None values are dropped.

    Returns:
        "" for an empty mapping, otherwise "?" followed by the URL-encoded pairs

    Example:
        build_query_string({"keys": ["a", "b"], "include_docs": True})
        # -> "?keys=<url-encoded [\"a\", \"b\"]>&include_docs=true"
    """
    if not params:
        return ""

    encoded: dict[str, Any] = {}
    for name, value in params.items():
        if value is None:
            continue
        if name in JSON_ENCODED_KEYS:
            value = json.dumps(value)
        encoded[name] = value

    if not encoded:
        return ""
    return f"?{httpx.QueryParams(encoded)}"
