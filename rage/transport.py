"""Transport - performs the network exchange for a materialized request.

Each send() opens its own httpx.Client and closes it afterwards; no session
or connection is reused across requests.
"""

from __future__ import annotations

import logging
import ssl
import time
from dataclasses import dataclass
from typing import Any

import httpx

from rage.models import TlsConfig

logger = logging.getLogger(__name__)


class TransportConfigError(Exception):
    """Raised when the transport cannot be configured (e.g. invalid ciphers)."""


@dataclass(frozen=True)
class TransportResult:
    """What the transport observed.

    error without response: the exchange failed before any response arrived.
    error with response: the response started but its body could not be read.
    """

    data: bytes | None
    response: httpx.Response | None
    error: Exception | None


class Transport:
    """Boundary to the network. Subclasses implement send()."""

    def send(self, raw_request: httpx.Request, timeout_millis: int) -> TransportResult:
        raise NotImplementedError


class HttpxTransport(Transport):
    """Transport backed by httpx.

    Usage:
        transport = HttpxTransport(tls=TlsConfig(verify_ssl=False))
        result = transport.send(httpx.Request("GET", "https://example.com"), 5000)

    Tests pass httpx.MockTransport as the inner transport.
    """

    def __init__(
        self,
        tls: TlsConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._tls = tls or TlsConfig()
        self._transport = transport

    def _build_ssl_context(self) -> ssl.SSLContext:
        """SSL context carrying the CA bundle, client certificate and ciphers.

        Raises:
            TransportConfigError: If the cipher string is invalid or a
                certificate file cannot be loaded.
        """
        tls = self._tls
        ssl_context = ssl.create_default_context()

        if tls.ciphers:
            try:
                ssl_context.set_ciphers(tls.ciphers)
            except ssl.SSLError as e:
                raise TransportConfigError(f"Invalid cipher string '{tls.ciphers}': {e}") from e

        try:
            if tls.ca_bundle:
                ssl_context.load_verify_locations(tls.ca_bundle)
            elif not tls.verify_ssl:
                ssl_context.check_hostname = False
                ssl_context.verify_mode = ssl.CERT_NONE

            # Handle client certificate (mTLS)
            if tls.cert and tls.key:
                ssl_context.load_cert_chain(tls.cert, tls.key, tls.key_password)
        except OSError as e:  # ssl.SSLError included
            raise TransportConfigError(f"Can't load TLS files: {e}") from e

        return ssl_context

    def _build_client_kwargs(self, timeout_millis: int) -> dict[str, Any]:
        """Build kwargs for httpx.Client including TLS configuration.

        The timeout applies identically to connect, read, write and pool.
        """
        tls = self._tls
        kwargs: dict[str, Any] = {
            "timeout": httpx.Timeout(timeout_millis / 1000.0),
        }

        if self._transport is not None:
            kwargs["transport"] = self._transport

        if tls.ca_bundle or tls.ciphers or (tls.cert and tls.key):
            kwargs["verify"] = self._build_ssl_context()
        elif not tls.verify_ssl:
            kwargs["verify"] = False

        return kwargs

    def create_session(self, timeout_millis: int) -> httpx.Client:
        kwargs = self._build_client_kwargs(timeout_millis)
        try:
            return httpx.Client(**kwargs)
        except OSError as e:
            raise TransportConfigError(f"Can't create HTTP client: {e}") from e

    def send(self, raw_request: httpx.Request, timeout_millis: int) -> TransportResult:
        start_time = time.perf_counter()
        with self.create_session(timeout_millis) as client:
            try:
                response = client.send(raw_request, stream=True)
            except httpx.HTTPError as e:
                logger.debug("%s %s failed: %s", raw_request.method, raw_request.url, e)
                return TransportResult(data=None, response=None, error=e)

            try:
                data = response.read()
            except httpx.HTTPError as e:
                logger.debug(
                    "%s %s: body read failed after status %d: %s",
                    raw_request.method, raw_request.url, response.status_code, e,
                )
                return TransportResult(data=None, response=response, error=e)
            finally:
                response.close()

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "%s %s -> %d (%d bytes, %.1f ms)",
            raw_request.method, raw_request.url, response.status_code, len(data), elapsed_ms,
        )
        return TransportResult(data=data, response=response, error=None)


_default_transport: HttpxTransport | None = None


def default_transport() -> HttpxTransport:
    """Shared transport used when a request has none configured."""
    global _default_transport
    if _default_transport is None:
        _default_transport = HttpxTransport()
    return _default_transport
