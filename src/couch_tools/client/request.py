"""Per-call request descriptions handed to the gateway."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

# Opaque JSON value; endpoint shapes are documented, never enforced.
JSONValue = Union[dict[str, Any], list[Any], str, int, float, bool, None]


class Method(str, Enum):
    """HTTP methods used by the CouchDB API."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    COPY = "COPY"
    HEAD = "HEAD"


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything the gateway needs to issue one request.

    Attributes:
        path: Path below the server root, already percent-encoded
            (empty string targets the root)
        method: HTTP method
        body: Optional JSON body
        headers: Extra headers, overriding the baseline ones on collision
        status_messages: Status code descriptions overriding the built-in table
    """

    path: str = ""
    method: Method = Method.GET
    body: JSONValue = None
    headers: Mapping[str, str] | None = None
    status_messages: Mapping[int, str] | None = None
