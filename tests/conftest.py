"""Pytest configuration and fixtures for rage tests.

This file provides:
- CountingPlugin / RecordingErrorHandler / TestAuthenticator: capability doubles
- make_transport: HttpxTransport backed by httpx.MockTransport (no live server)
- Fixtures: a plain GET request and a dispatcher that is shut down after use
"""

from __future__ import annotations

from typing import Callable, Generator

import httpx
import pytest

from rage.auth import Authenticator
from rage.dispatch import Dispatcher
from rage.error_handlers import ErrorHandler
from rage.errors import RageError, RageErrorType
from rage.models import HttpMethod
from rage.plugins import RagePlugin
from rage.request import RageRequest
from rage.result import Result, Success
from rage.transport import HttpxTransport

BASE_URL = "http://example.com"


def make_transport(handler: Callable[[httpx.Request], httpx.Response]) -> HttpxTransport:
    """HttpxTransport whose exchanges are answered by handler.

    handler may raise httpx exceptions to simulate transport failures.
    """
    return HttpxTransport(transport=httpx.MockTransport(handler))


class CountingPlugin(RagePlugin):
    """Counts hook invocations; optionally appends (name, hook) to a shared log."""

    def __init__(self, name: str = "plugin", log: list[tuple[str, str]] | None = None) -> None:
        self.name = name
        self.log = log if log is not None else []
        self.will_send_request_counter = 0
        self.did_send_request_counter = 0
        self.did_receive_response_counter = 0
        self.raw_requests: list[httpx.Request] = []

    def will_send_request(self, request):
        self.will_send_request_counter += 1
        self.log.append((self.name, "will_send_request"))

    def did_send_request(self, request, raw_request):
        self.did_send_request_counter += 1
        self.raw_requests.append(raw_request)
        self.log.append((self.name, "did_send_request"))

    def did_receive_response(self, response, raw_request):
        self.did_receive_response_counter += 1
        self.log.append((self.name, "did_receive_response"))


class TestAuthenticator(Authenticator):
    """Adds a fixed Authorization header."""

    __test__ = False  # not a test class

    def __init__(self, token: str = "secret") -> None:
        self.token = token
        self.calls = 0

    def authorize_request(self, request):
        self.calls += 1
        return request.header("Authorization", f"Bearer {self.token}")


class RecordingErrorHandler(ErrorHandler):
    """Handler that records what it saw and returns a configurable result."""

    def __init__(
        self,
        handles: set[RageErrorType] | None = None,
        enabled: bool = True,
        replacement: Callable[[RageRequest, Result], Result] | None = None,
        log: list[str] | None = None,
        name: str = "handler",
    ) -> None:
        self.handles = handles
        self.enabled = enabled
        self.replacement = replacement
        self.log = log if log is not None else []
        self.name = name
        self.predicate_calls = 0
        self.seen_results: list[Result] = []

    def can_handle_error(self, error: RageError) -> bool:
        self.predicate_calls += 1
        return self.handles is None or error.type in self.handles

    def handle_error_for_request(self, request, result):
        self.seen_results.append(result)
        self.log.append(self.name)
        if self.replacement is None:
            return result
        return self.replacement(request, result)


def recover_with(data: bytes) -> Callable[[RageRequest, Result], Result]:
    """Replacement that turns any failure into a stub-like success."""
    from rage.response import RageResponse

    def replace(request: RageRequest, result: Result) -> Result:
        return Success(RageResponse(request, data, None, None))

    return replace


@pytest.fixture
def request_get() -> RageRequest:
    """Plain GET request against BASE_URL."""
    return RageRequest(HttpMethod.GET, BASE_URL)


@pytest.fixture
def dispatcher() -> Generator[Dispatcher, None, None]:
    d = Dispatcher(max_workers=4)
    try:
        yield d
    finally:
        d.shutdown(wait=True)
