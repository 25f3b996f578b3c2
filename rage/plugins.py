"""Plugins - side-effect-only observers of the request lifecycle.

Hooks run in registration order. Exceptions raised by a plugin are not
caught by the pipeline.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from rage.request import RageRequest
    from rage.response import RageResponse


class RagePlugin:
    """Base plugin. Override the hooks you need; the defaults do nothing."""

    def will_send_request(self, request: RageRequest) -> None:
        pass

    def did_send_request(self, request: RageRequest, raw_request: httpx.Request) -> None:
        pass

    def did_receive_response(self, response: RageResponse, raw_request: httpx.Request) -> None:
        pass


class LoggingPlugin(RagePlugin):
    """Logs each lifecycle step.

    Usage:
        client = RageClient.builder("https://api.example.com").with_plugin(LoggingPlugin()).build()
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or logging.getLogger("rage")
        self._level = level

    def will_send_request(self, request: RageRequest) -> None:
        self._logger.log(
            self._level, "Preparing %s %s", request.http_method.value, request.method_path or "/"
        )

    def did_send_request(self, request: RageRequest, raw_request: httpx.Request) -> None:
        self._logger.log(self._level, "Request: %s %s", raw_request.method, raw_request.url)
        self._logger.debug("HEADERS: %s", dict(raw_request.headers))

    def did_receive_response(self, response: RageResponse, raw_request: httpx.Request) -> None:
        if response.error is not None:
            self._logger.log(
                self._level, "Failed: %s %s: %s", raw_request.method, raw_request.url, response.error
            )
            return
        size = len(response.data) if response.data is not None else 0
        status = response.status_code()
        self._logger.log(
            self._level,
            "Response: %s %s -> %s (%d bytes)",
            raw_request.method,
            raw_request.url,
            status if status is not None else "stub",
            size,
        )
