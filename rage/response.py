"""RageResponse - outcome of one attempt (stub or network)."""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from rage.request import RageRequest


class RageResponse:
    """Payload, transport response and transport error of one attempt.

    The originating request is held through a weak reference so a request
    and its responses never keep each other alive.
    """

    def __init__(
        self,
        request: RageRequest | None,
        data: bytes | None,
        response: httpx.Response | None,
        error: Exception | None,
    ) -> None:
        self._request_ref = weakref.ref(request) if request is not None else None
        self._data = data
        self._response = response
        self._error = error

    @property
    def request(self) -> RageRequest | None:
        if self._request_ref is None:
            return None
        return self._request_ref()

    @property
    def data(self) -> bytes | None:
        return self._data

    @property
    def response(self) -> httpx.Response | None:
        return self._response

    @property
    def error(self) -> Exception | None:
        return self._error

    def status_code(self) -> int | None:
        if self._response is None:
            return None
        return self._response.status_code

    def headers(self) -> httpx.Headers:
        if self._response is None:
            return httpx.Headers()
        return self._response.headers

    def is_success(self) -> bool:
        """No transport error and a 2xx status."""
        status = self.status_code()
        return self._error is None and status is not None and 200 <= status < 300

    def text(self, encoding: str = "utf-8") -> str | None:
        if self._data is None:
            return None
        return self._data.decode(encoding)

    def __repr__(self) -> str:
        return (
            f"RageResponse(status_code={self.status_code()!r}, "
            f"bytes={len(self._data) if self._data is not None else None!r}, "
            f"error={self._error!r})"
        )
