"""Request gateway for the CouchDB HTTP API.

Every public client operation is a thin description of one HTTP request.
The gateway turns that description into an actual call, measures how long
it took and normalizes the outcome, so callers always get either the decoded
JSON body or a NormalizedError. No retries are attempted.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from .config import CouchConfig
from .exceptions import CouchRequestError, NormalizedError
from .request import JSONValue, RequestDescriptor
from .status import resolve_status_message

logger = logging.getLogger("couch-tools")

# Status reported for failures that never produced an HTTP response.
FALLBACK_STATUS = 500


@dataclass(frozen=True)
class Outcome:
    """Tagged result of one gateway call: a value or a normalized error."""

    value: JSONValue = None
    error: NormalizedError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> int | None:
        """Status of a failed call, None on success."""
        return self.error.status if self.error else None

    def unwrap(self) -> JSONValue:
        """Return the decoded body or raise the normalized error.

        Raises:
            CouchRequestError: If the call failed
        """
        if self.error is not None:
            raise CouchRequestError(self.error)
        return self.value


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0


def _decode_body(response: httpx.Response) -> JSONValue:
    """Parse a JSON response; empty bodies (HEAD, 304) decode to None."""
    if not response.content:
        return None
    return response.json()


def _status_of(error: BaseException) -> int:
    """Extract the HTTP status carried by an error, if any."""
    response = getattr(error, "response", None)
    status = getattr(response, "status_code", None)
    if isinstance(status, int):
        return status
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        return status
    return FALLBACK_STATUS


class Gateway:
    """Single dispatch point between the client and the HTTP transport.

    Usage:
        gateway = Gateway(config)
        outcome = await gateway.dispatch(RequestDescriptor(path="_all_dbs"))
        await gateway.aclose()

    Or as async context manager:
        async with Gateway(config) as gateway:
            outcome = await gateway.dispatch(RequestDescriptor())
    """

    def __init__(
        self,
        config: CouchConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the gateway.

        Args:
            config: Connection configuration. If None, loads from environment.
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.config = config or CouchConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-initialize the HTTP client with optional Basic auth."""
        if self._client is None:
            auth = None
            if self.config.credentials:
                auth = httpx.BasicAuth(*self.config.credentials)
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                auth=auth,
                transport=self._transport,
            )
        return self._client

    async def __aenter__(self) -> "Gateway":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client and release pooled connections."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def url_for(self, path: str = "") -> str:
        """Compose the full request URL from the configured root and a path."""
        return f"{self.config.base_url}/{path.lstrip('/')}"

    def headers_for(self, descriptor: RequestDescriptor) -> dict[str, str]:
        """Baseline headers merged with the caller's (caller wins)."""
        headers = {
            "user-agent": self.config.user_agent,
            "accept": "application/json",
        }
        if descriptor.headers:
            headers.update(descriptor.headers)
        return headers

    async def dispatch(self, descriptor: RequestDescriptor) -> Outcome:
        """Issue one request and normalize its outcome.

        Never raises for transport or server failures: those come back as an
        Outcome carrying a NormalizedError. Successful calls are logged when
        request logging is enabled; failures are left to the caller.

        Args:
            descriptor: Request description

        Returns:
            Outcome with the decoded body or the normalized error
        """
        started = time.perf_counter()
        request_kwargs: dict[str, Any] = {"headers": self.headers_for(descriptor)}
        if descriptor.body is not None:
            request_kwargs["json"] = descriptor.body

        try:
            response = await self.client.request(
                descriptor.method.value,
                self.url_for(descriptor.path),
                **request_kwargs,
            )
            if response.status_code >= 400:
                raise httpx.HTTPStatusError(
                    f"{descriptor.method.value} {descriptor.path or '/'} "
                    f"returned {response.status_code}",
                    request=response.request,
                    response=response,
                )
            body = _decode_body(response)
        except Exception as e:
            status = _status_of(e)
            return Outcome(error=NormalizedError(
                error=e,
                status=status,
                message=resolve_status_message(status, descriptor.status_messages),
                duration=_elapsed_ms(started),
            ))

        if self.config.log_requests:
            message = resolve_status_message(response.status_code, descriptor.status_messages)
            duration = _elapsed_ms(started)
            logger.info(
                "%s /%s -> %d %s (%.1fms)",
                descriptor.method.value,
                descriptor.path.lstrip("/"),
                response.status_code,
                message,
                duration,
                extra={
                    "couch_status": response.status_code,
                    "couch_message": message,
                    "couch_body": body,
                    "couch_duration": duration,
                },
            )
        return Outcome(value=body)

    async def request(self, descriptor: RequestDescriptor) -> JSONValue:
        """Dispatch and unwrap: return the body or raise CouchRequestError."""
        outcome = await self.dispatch(descriptor)
        return outcome.unwrap()
