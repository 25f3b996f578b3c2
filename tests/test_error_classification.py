"""Tests for failure classification.

Transport error + response -> RAW, transport error without response ->
NETWORK_ERROR, no error + empty body -> EMPTY_NETWORK_RESPONSE, no error +
body -> HTTP.
"""

import httpx
import pytest

from rage.errors import RageError, RageErrorType
from rage.request import RageRequest
from rage.response import RageResponse
from tests.conftest import make_transport


class FailingStream(httpx.SyncByteStream):
    """Body stream that breaks after the status line was received."""

    def __iter__(self):
        raise httpx.ReadError("connection reset while reading body")
        yield b""  # pragma: no cover


def _response(status: int) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", "http://example.com"))


class TestFromResponse:
    def test_error_with_response_is_raw(self) -> None:
        response = RageResponse(None, b"partial", _response(200), httpx.ReadError("reset"))
        error = RageError.from_response(response)
        assert error.type == RageErrorType.RAW
        assert error.rage_response is response
        assert error.status_code() == 200

    def test_error_without_response_is_network_error(self) -> None:
        response = RageResponse(None, None, None, httpx.ConnectError("refused"))
        error = RageError.from_response(response)
        assert error.type == RageErrorType.NETWORK_ERROR
        assert error.message == "refused"
        assert error.status_code() is None

    @pytest.mark.parametrize("data", [None, b""])
    def test_no_error_empty_body_is_empty_network_response(self, data) -> None:
        response = RageResponse(None, data, _response(503), None)
        error = RageError.from_response(response)
        assert error.type == RageErrorType.EMPTY_NETWORK_RESPONSE

    def test_no_error_with_body_is_http(self) -> None:
        response = RageResponse(None, b"oops", _response(418), None)
        error = RageError.from_response(response)
        assert error.type == RageErrorType.HTTP
        assert error.status_code() == 418

    def test_error_str_mentions_type_and_status(self) -> None:
        response = RageResponse(None, b"oops", _response(418), None)
        assert str(RageError.from_response(response)) == "http: status=418"


class TestIsSuccess:
    @pytest.mark.parametrize("status", [200, 201, 204, 299])
    def test_2xx_is_success(self, status: int) -> None:
        assert RageResponse(None, b"", _response(status), None).is_success()

    @pytest.mark.parametrize("status", [199, 301, 404, 500])
    def test_other_status_is_not_success(self, status: int) -> None:
        assert not RageResponse(None, b"x", _response(status), None).is_success()

    def test_error_is_never_success(self) -> None:
        assert not RageResponse(None, b"x", _response(200), httpx.ReadError("x")).is_success()

    def test_no_response_is_not_success(self) -> None:
        assert not RageResponse(None, b"x", None, None).is_success()


class TestPipelineClassification:
    def test_body_read_failure_is_raw(self, request_get: RageRequest) -> None:
        def handler(req: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=FailingStream())

        result = request_get.with_transport(make_transport(handler)).execute()

        assert result.is_failure
        assert result.error.type == RageErrorType.RAW
        assert result.error.status_code() == 200
        assert isinstance(result.error.rage_response.error, httpx.ReadError)

    def test_timeout_is_network_error(self, request_get: RageRequest) -> None:
        def handler(req: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=req)

        result = request_get.with_transport(make_transport(handler)).execute()

        assert result.error.type == RageErrorType.NETWORK_ERROR
        assert result.error.rage_response.response is None


class TestConfigurationError:
    def test_configuration_factory(self) -> None:
        error = RageError.configuration("bad input")
        assert error.type == RageErrorType.CONFIGURATION
        assert error.message == "bad input"
        assert error.rage_response is None
        assert str(error) == "configuration: bad input"
