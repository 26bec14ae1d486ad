"""HTTP status descriptions used for diagnostics."""

from collections.abc import Mapping

UNKNOWN_STATUS = "unknown status"

# Status codes CouchDB documents for its API.
STATUS_MESSAGES: dict[int, str] = {
    200: "OK",
    201: "Created",
    202: "Accepted",
    304: "Not Modified",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    409: "Conflict",
    412: "Precondition Failed",
    413: "Request Entity Too Large",
    415: "Unsupported Media Type",
    416: "Requested Range Not Satisfiable",
    417: "Expectation Failed",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def resolve_status_message(status: int, overrides: Mapping[int, str] | None = None) -> str:
    """Describe a status code.

    Per-call overrides win over the built-in table; codes found in neither
    resolve to "unknown status".
    """
    messages = {**STATUS_MESSAGES, **(overrides or {})}
    return messages.get(status, UNKNOWN_STATUS)
