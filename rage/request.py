"""RageRequest - chainable request builder and executor.

A request is configured through chained calls and then executed, either
blocking with execute() or in the background with enqueue():

    result = (
        client.get("/repos/{owner}/{repo}")
        .path("owner", "octocat")
        .path("repo", "hello-world")
        .query("per_page", 50)
        .execute()
    )

execute() drives the pipeline: plugins are notified, the raw httpx.Request
is materialized, the stub or the transport produces a response, the response
is classified and, on failure, error handlers get a chance to recover.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any, Callable, Mapping, Self, Sequence, TypeVar

import httpx

from rage.dispatch import Dispatcher, default_dispatcher
from rage.errors import RageError, precondition
from rage.mapping import parse_json, to_json_string
from rage.models import (
    DEFAULT_TIMEOUT_MILLIS,
    ContentType,
    HttpMethod,
    StubData,
    StubMode,
    StubModeKind,
)
from rage.response import RageResponse
from rage.result import Failure, Result, Success
from rage.transport import Transport, TransportConfigError, default_transport
from rage.url_builder import UrlBuildError, build_url

if TYPE_CHECKING:
    from rage.auth import Authenticator
    from rage.body import BodyRageRequest, FormUrlEncodedRageRequest, MultipartRageRequest
    from rage.description import RequestDescription
    from rage.error_handlers import ErrorHandler
    from rage.plugins import RagePlugin

logger = logging.getLogger(__name__)

T = TypeVar("T")

AUTHENTICATOR_MISSING_ERROR_MESSAGE = "Can't create authorized request without Authenticator provided"
WRONG_HTTP_METHOD_FOR_BODY_ERROR_MESSAGE = "Can't add body to request with such HttpMethod"

CONTENT_TYPE_HEADER = "Content-Type"


def _stringify(value: Any) -> str:
    """Render a parameter value; booleans use their lowercase JSON spelling."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RageRequest:
    """Mutable description of one HTTP call plus its execution.

    Every builder method mutates the request and returns it. A request is
    not meant to be mutated from several threads or while it executes.
    """

    def __init__(
        self,
        http_method: HttpMethod,
        base_url: str | None = None,
        *,
        transport: Transport | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        self.http_method = http_method
        self.base_url = base_url
        self.method_path: str | None = None
        self.query_parameters: dict[str, str] = {}
        self.path_parameters: dict[str, str] = {}
        self.headers: dict[str, str] = {}

        self.authenticator: Authenticator | None = None
        self.error_handlers: list[ErrorHandler] = []
        self.plugins: list[RagePlugin] = []

        self.timeout_millis: int = DEFAULT_TIMEOUT_MILLIS
        self.stub_data: StubData | None = None
        self.body: bytes | None = None
        self.is_authorized = False

        self.transport = transport
        self.dispatcher = dispatcher

    @classmethod
    def from_description(cls, description: RequestDescription) -> RageRequest:
        """Seed a request from a client-produced description."""
        request = cls(
            description.http_method,
            description.base_url,
            transport=description.transport,
            dispatcher=description.dispatcher,
        )
        request.method_path = description.path
        request.headers = dict(description.headers)
        request.headers[CONTENT_TYPE_HEADER] = description.content_type.string_value()
        request.error_handlers = list(description.error_handlers)
        request.authenticator = description.authenticator
        request.timeout_millis = description.timeout_millis
        request.plugins = list(description.plugins)
        return request

    def _copy_state_from(self, other: RageRequest) -> None:
        """Take over every setting of another request (used by body variants)."""
        self.http_method = other.http_method
        self.base_url = other.base_url
        self.method_path = other.method_path
        self.query_parameters = dict(other.query_parameters)
        self.path_parameters = dict(other.path_parameters)
        self.headers = dict(other.headers)
        self.authenticator = other.authenticator
        self.error_handlers = list(other.error_handlers)
        self.plugins = list(other.plugins)
        self.timeout_millis = other.timeout_millis
        self.stub_data = other.stub_data
        self.body = other.body
        self.is_authorized = other.is_authorized
        self.transport = other.transport
        self.dispatcher = other.dispatcher

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.http_method.value} "
            f"{self.base_url!r} path={self.method_path!r})"
        )

    # -------------------------------------------------------------------------
    # Parameters
    # -------------------------------------------------------------------------

    def url(self, url: str) -> Self:
        self.base_url = url
        return self

    def query(self, key: str, value: Any | None) -> Self:
        """Set a query parameter; None removes it."""
        if value is None:
            self.query_parameters.pop(key, None)
            return self
        self.query_parameters[key] = _stringify(value)
        return self

    def query_dictionary(self, dictionary: Mapping[str, Any | None]) -> Self:
        """Set several query parameters. None entries are skipped, not removed."""
        for key, value in dictionary.items():
            if value is not None:
                self.query_parameters[key] = _stringify(value)
        return self

    def path(self, key: str, value: Any) -> Self:
        self.path_parameters[key] = _stringify(value)
        return self

    def header(self, key: str, value: Any | None) -> Self:
        """Set a header; None removes it."""
        if value is None:
            self.headers.pop(key, None)
            return self
        self.headers[key] = _stringify(value)
        return self

    def header_dictionary(self, dictionary: Mapping[str, Any | None]) -> Self:
        """Set several headers. None entries remove the header."""
        for key, value in dictionary.items():
            if value is None:
                self.headers.pop(key, None)
            else:
                self.headers[key] = _stringify(value)
        return self

    def content_type(self, content_type: ContentType) -> Self:
        self.headers[CONTENT_TYPE_HEADER] = content_type.string_value()
        return self

    def authorized(self, authenticator: Authenticator | None = None) -> RageRequest:
        """Apply the authenticator and return the request it produces.

        Passing an authenticator stores it first. Raises
        ContractViolationError when no authenticator is available.
        """
        if authenticator is not None:
            self.authenticator = authenticator
        precondition(self.authenticator is not None, AUTHENTICATOR_MISSING_ERROR_MESSAGE)
        authorized_request = self.authenticator.authorize_request(self)
        authorized_request.is_authorized = True
        return authorized_request

    def stub(self, data: bytes | str, mode: StubMode = StubMode.IMMEDIATE) -> Self:
        """Answer with data instead of calling the network.

        Strings that cannot be encoded as UTF-8 leave the request unchanged.
        """
        if isinstance(data, str):
            try:
                data = data.encode("utf-8")
            except UnicodeEncodeError:
                return self
        self.stub_data = StubData(data=bytes(data), mode=mode)
        return self

    def stub_object(self, value: Any, mode: StubMode = StubMode.IMMEDIATE) -> Self:
        """Stub with the JSON rendering of value (pydantic model, dict, list...)."""
        return self.stub(to_json_string(value), mode=mode)

    def with_error_handlers(self, handlers: Sequence[ErrorHandler]) -> Self:
        self.error_handlers = list(handlers)
        return self

    def with_plugins(self, plugins: Sequence[RagePlugin]) -> Self:
        self.plugins = list(plugins)
        return self

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def with_timeout_millis(self, timeout_millis: int) -> Self:
        if timeout_millis < 0:
            raise ValueError(f"Timeout must be non-negative, got {timeout_millis}")
        self.timeout_millis = timeout_millis
        return self

    def with_transport(self, transport: Transport) -> Self:
        self.transport = transport
        return self

    # -------------------------------------------------------------------------
    # Body variants
    # -------------------------------------------------------------------------

    def with_body(self) -> BodyRageRequest:
        from rage.body import BodyRageRequest

        return BodyRageRequest.from_request(self)

    def multipart(self) -> MultipartRageRequest:
        from rage.body import MultipartRageRequest

        return MultipartRageRequest.from_request(self)

    def form_url_encoded(self) -> FormUrlEncodedRageRequest:
        from rage.body import FormUrlEncodedRageRequest

        return FormUrlEncodedRageRequest.from_request(self)

    # -------------------------------------------------------------------------
    # Materialization
    # -------------------------------------------------------------------------

    def _request_headers(self) -> dict[str, str]:
        return self.headers

    def _body_kwargs(self) -> dict[str, Any]:
        """Body arguments for httpx.Request; variants override the encoding."""
        if self.body is None:
            return {}
        return {"content": self.body}

    def raw_request(self) -> httpx.Request:
        """Materialize the httpx.Request this request describes.

        Raises:
            UrlBuildError: If the URL cannot be built.
        """
        url = build_url(self.base_url, self.method_path, self.path_parameters, self.query_parameters)
        return httpx.Request(
            self.http_method.string_value(),
            url,
            headers=self._request_headers(),
            **self._body_kwargs(),
        )

    # -------------------------------------------------------------------------
    # Executing
    # -------------------------------------------------------------------------

    def execute(self) -> Result[RageResponse]:
        """Run the pipeline and the error-handler chain; blocks until done."""
        result = self.execute_raw()
        if result.is_success:
            return result

        error = result.error
        for handler in self.error_handlers:
            if handler.enabled and handler.can_handle_error(error):
                result = handler.handle_error_for_request(self, result)
        return result

    def execute_raw(self) -> Result[RageResponse]:
        """Run the pipeline without error handlers."""
        self._send_plugins_will_send_request()

        try:
            raw_request = self.raw_request()
        except (UrlBuildError, httpx.InvalidURL, UnicodeEncodeError) as e:
            logger.debug("Can't materialize %r: %s", self, e)
            return Failure(RageError.configuration(str(e)))

        self._send_plugins_did_send_request(raw_request)

        stub = self.get_stub_data()
        if stub is not None:
            rage_response = RageResponse(self, stub, None, None)
            self._send_plugins_did_receive_response(rage_response, raw_request)
            return Success(rage_response)

        transport = self.transport or default_transport()
        try:
            transport_result = transport.send(raw_request, self.timeout_millis)
        except TransportConfigError as e:
            return Failure(RageError.configuration(str(e)))

        rage_response = RageResponse(
            self, transport_result.data, transport_result.response, transport_result.error
        )
        self._send_plugins_did_receive_response(rage_response, raw_request)

        if rage_response.is_success():
            return Success(rage_response)
        return Failure(self._create_error_from_response(rage_response))

    def _create_error_from_response(self, rage_response: RageResponse) -> RageError:
        return RageError.from_response(rage_response)

    def enqueue(self, completion: Callable[[Result[RageResponse]], None]) -> Future:
        """Execute in the background; completion(result) runs once on the foreground thread."""
        dispatcher = self.dispatcher or default_dispatcher()
        return dispatcher.dispatch(self.execute, completion)

    def execute_object(self, target_type: type[T]) -> Result[T]:
        """Execute and parse the payload into target_type (e.g. a model or list[Model])."""
        result = self.execute()
        if result.is_failure:
            return result
        return parse_json(result.value.data, target_type)

    def enqueue_object(
        self, target_type: type[T], completion: Callable[[Result[T]], None]
    ) -> Future:
        dispatcher = self.dispatcher or default_dispatcher()
        return dispatcher.dispatch(lambda: self.execute_object(target_type), completion)

    # -------------------------------------------------------------------------
    # Plugins
    # -------------------------------------------------------------------------

    def _send_plugins_will_send_request(self) -> None:
        for plugin in self.plugins:
            plugin.will_send_request(self)

    def _send_plugins_did_send_request(self, raw_request: httpx.Request) -> None:
        for plugin in self.plugins:
            plugin.did_send_request(self, raw_request)

    def _send_plugins_did_receive_response(
        self, rage_response: RageResponse, raw_request: httpx.Request
    ) -> None:
        for plugin in self.plugins:
            plugin.did_receive_response(rage_response, raw_request)

    # -------------------------------------------------------------------------
    # Stub
    # -------------------------------------------------------------------------

    def is_stubbed(self) -> bool:
        return self.stub_data is not None and self.stub_data.mode.kind != StubModeKind.NEVER

    def get_stub_data(self) -> bytes | None:
        """Bytes to deliver instead of a network call, or None.

        For delayed stubs this blocks the calling thread for the delay.
        """
        if not self.is_stubbed():
            return None
        mode = self.stub_data.mode
        if mode.kind == StubModeKind.DELAYED:
            time.sleep(mode.delay_millis / 1000.0)
        return self.stub_data.data
