"""wave executor - HTTP transport backends."""

import logging
import time
from typing import Protocol

import requests

from wavecli.builder import ResolvedRequest
from wavecli.core import DEFAULT_TIMEOUT
from wavecli.errors import TransportFailure

logger = logging.getLogger(__name__)


class HttpResponse:
    """Result of an HTTP exchange."""

    def __init__(
        self,
        status_code: int = 0,
        headers: list[tuple[str, str]] | None = None,
        body: bytes = b"",
        elapsed_ms: float = 0,
    ):
        self.status_code = status_code
        self.headers: list[tuple[str, str]] = headers or []
        self.body = body
        self.elapsed_ms = elapsed_ms

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None

    @property
    def content_type(self) -> str | None:
        return self.header("Content-Type")

    def is_error(self) -> bool:
        return self.status_code >= 400


class HttpBackend(Protocol):
    def send(self, request: ResolvedRequest, timeout: float = DEFAULT_TIMEOUT) -> HttpResponse:
        """Send the request. Raises TransportFailure on network errors."""
        ...


class RequestsBackend:
    """Live backend built on requests."""

    def send(self, request: ResolvedRequest, timeout: float = DEFAULT_TIMEOUT) -> HttpResponse:
        logger.debug("sending %s %s", request.method, request.url)
        try:
            start = time.monotonic()
            resp = requests.request(
                method=request.method,
                url=request.url,
                headers=dict(request.headers),
                data=request.content,
                timeout=timeout,
                allow_redirects=True,
            )
            elapsed_ms = (time.monotonic() - start) * 1000
        except requests.exceptions.RequestException as e:
            raise TransportFailure(str(e)) from e

        logger.debug("received %s in %dms", resp.status_code, elapsed_ms)
        return HttpResponse(
            status_code=resp.status_code,
            headers=list(resp.headers.items()),
            body=resp.content,
            elapsed_ms=elapsed_ms,
        )


class MockBackend:
    """Deterministic backend: records requests, replays a canned response.

    If `error` is set it is raised instead of returning a response.
    """

    def __init__(self, response: HttpResponse | None = None, error: Exception | None = None):
        self.response = response or HttpResponse(status_code=200)
        self.error = error
        self.sent: list[ResolvedRequest] = []
        self.timeouts: list[float] = []

    def send(self, request: ResolvedRequest, timeout: float = DEFAULT_TIMEOUT) -> HttpResponse:
        self.sent.append(request)
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        return self.response

    @property
    def last(self) -> ResolvedRequest | None:
        return self.sent[-1] if self.sent else None


def get_backend() -> HttpBackend:
    """Backend used by the CLI."""
    return RequestsBackend()
