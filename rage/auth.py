"""Authenticators - request-to-request credential transforms.

An authenticator is applied once per RageRequest.authorized() call. It must
not perform I/O.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rage.request import RageRequest


class Authenticator:
    """Adds credentials to a request.

    authorize_request may mutate and return the same request or return a
    different one; the caller continues with whatever is returned.
    """

    def authorize_request(self, request: RageRequest) -> RageRequest:
        raise NotImplementedError


class HeaderAuthenticator(Authenticator):
    """Injects a single header, e.g. Authorization or X-Api-Key."""

    def __init__(self, name: str, value: str) -> None:
        self.name = name
        self.value = value

    @classmethod
    def bearer(cls, token: str) -> HeaderAuthenticator:
        return cls("Authorization", f"Bearer {token}")

    def authorize_request(self, request: RageRequest) -> RageRequest:
        return request.header(self.name, self.value)
