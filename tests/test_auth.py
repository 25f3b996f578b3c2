"""Tests for authorized() and the bundled authenticators."""

import pytest

from rage.auth import Authenticator, HeaderAuthenticator
from rage.errors import ContractViolationError
from rage.models import HttpMethod
from rage.request import AUTHENTICATOR_MISSING_ERROR_MESSAGE, RageRequest
from tests.conftest import BASE_URL, TestAuthenticator


class WrappingAuthenticator(Authenticator):
    """Returns a different request instance."""

    def __init__(self) -> None:
        self.replacement = RageRequest(HttpMethod.GET, "http://signed.example.com")

    def authorize_request(self, request):
        return self.replacement


class TestAuthorized:
    def test_without_authenticator_is_contract_violation(self, request_get: RageRequest) -> None:
        with pytest.raises(ContractViolationError, match=AUTHENTICATOR_MISSING_ERROR_MESSAGE):
            request_get.authorized()

    def test_contract_violation_is_not_a_result(self, request_get: RageRequest) -> None:
        """Misuse raises; it is never turned into a Failure value."""
        with pytest.raises(ContractViolationError):
            request_get.authorized(None)

    def test_request_is_authorized_after_authenticator_applied(
        self, request_get: RageRequest
    ) -> None:
        auth = TestAuthenticator()
        assert request_get.is_authorized is False
        request = request_get.authorized(auth)
        assert request.is_authorized is True
        assert request.headers["Authorization"] == "Bearer secret"
        assert request.authenticator is auth

    def test_uses_previously_set_authenticator(self, request_get: RageRequest) -> None:
        auth = TestAuthenticator("stored")
        request_get.authenticator = auth
        request = request_get.authorized()
        assert request.headers["Authorization"] == "Bearer stored"
        assert auth.calls == 1

    def test_returns_authenticator_result_exactly(self, request_get: RageRequest) -> None:
        auth = WrappingAuthenticator()
        result = request_get.authorized(auth)
        assert result is auth.replacement
        assert result is not request_get

    def test_authenticator_called_once_per_call(self, request_get: RageRequest) -> None:
        auth = TestAuthenticator()
        request_get.authorized(auth).authorized()
        assert auth.calls == 2


class TestHeaderAuthenticator:
    def test_injects_header(self) -> None:
        request = RageRequest(HttpMethod.GET, BASE_URL)
        request.authorized(HeaderAuthenticator("X-Api-Key", "k-123"))
        assert request.headers["X-Api-Key"] == "k-123"

    def test_bearer(self) -> None:
        request = RageRequest(HttpMethod.GET, BASE_URL).authorized(HeaderAuthenticator.bearer("t0k"))
        assert request.headers["Authorization"] == "Bearer t0k"

    def test_base_authenticator_is_abstract(self, request_get: RageRequest) -> None:
        with pytest.raises(NotImplementedError):
            Authenticator().authorize_request(request_get)
