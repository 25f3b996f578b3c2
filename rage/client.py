"""RageClient - creates requests that share one configuration.

Usage:
    client = (
        RageClient.builder("https://api.github.com")
        .with_header("Accept", "application/vnd.github+json")
        .with_authenticator(HeaderAuthenticator.bearer(token))
        .with_plugin(LoggingPlugin())
        .build()
    )
    result = client.get("/users/{user}").path("user", "octocat").authorized().execute()

Or from a YAML file:
    client = RageClient.from_config_file(Path("client.yaml"))
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Sequence

from rage.config_loader import load_client_config
from rage.description import RequestDescription
from rage.models import ClientConfig, ContentType, HttpMethod
from rage.request import RageRequest
from rage.transport import HttpxTransport

if TYPE_CHECKING:
    from rage.auth import Authenticator
    from rage.dispatch import Dispatcher
    from rage.error_handlers import ErrorHandler
    from rage.plugins import RagePlugin
    from rage.transport import Transport


class RageClient:
    """Produces RequestDescriptions and RageRequests for one API."""

    def __init__(
        self,
        config: ClientConfig,
        *,
        authenticator: Authenticator | None = None,
        error_handlers: Sequence[ErrorHandler] = (),
        plugins: Sequence[RagePlugin] = (),
        transport: Transport | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        self.config = config
        self.authenticator = authenticator
        self.error_handlers = tuple(error_handlers)
        self.plugins = tuple(plugins)
        # TLS settings only apply to the default transport.
        if transport is None and config.tls is not None:
            transport = HttpxTransport(tls=config.tls)
        self.transport = transport
        self.dispatcher = dispatcher

    @classmethod
    def from_config_file(cls, config_path: Path, **kwargs: Any) -> RageClient:
        """Load ClientConfig from YAML; kwargs are passed to the constructor."""
        return cls(load_client_config(config_path), **kwargs)

    @staticmethod
    def builder(base_url: str | None = None) -> RageClientBuilder:
        return RageClientBuilder(base_url)

    def description(self, http_method: HttpMethod, path: str | None = None) -> RequestDescription:
        return RequestDescription(
            http_method=http_method,
            base_url=self.config.base_url,
            path=path,
            headers=self.config.headers,
            content_type=self.config.resolved_content_type(),
            authenticator=self.authenticator,
            error_handlers=self.error_handlers,
            timeout_millis=self.config.timeout_millis,
            plugins=self.plugins,
            transport=self.transport,
            dispatcher=self.dispatcher,
        )

    def request(self, http_method: HttpMethod, path: str | None = None) -> RageRequest:
        return RageRequest.from_description(self.description(http_method, path))

    def get(self, path: str | None = None) -> RageRequest:
        return self.request(HttpMethod.GET, path)

    def post(self, path: str | None = None) -> RageRequest:
        return self.request(HttpMethod.POST, path)

    def put(self, path: str | None = None) -> RageRequest:
        return self.request(HttpMethod.PUT, path)

    def patch(self, path: str | None = None) -> RageRequest:
        return self.request(HttpMethod.PATCH, path)

    def delete(self, path: str | None = None) -> RageRequest:
        return self.request(HttpMethod.DELETE, path)

    def head(self, path: str | None = None) -> RageRequest:
        return self.request(HttpMethod.HEAD, path)

    def options(self, path: str | None = None) -> RageRequest:
        return self.request(HttpMethod.OPTIONS, path)


class RageClientBuilder:
    """Fluent construction of a RageClient."""

    def __init__(self, base_url: str | None = None) -> None:
        self._base_url = base_url
        self._headers: dict[str, str] = {}
        self._content_type = ContentType.JSON
        self._timeout_millis: int | None = None
        self._authenticator: Authenticator | None = None
        self._error_handlers: list[ErrorHandler] = []
        self._plugins: list[RagePlugin] = []
        self._transport: Transport | None = None
        self._dispatcher: Dispatcher | None = None

    def with_header(self, key: str, value: str) -> RageClientBuilder:
        self._headers[key] = value
        return self

    def with_header_dictionary(self, headers: dict[str, str]) -> RageClientBuilder:
        self._headers.update(headers)
        return self

    def with_content_type(self, content_type: ContentType) -> RageClientBuilder:
        self._content_type = content_type
        return self

    def with_timeout_millis(self, timeout_millis: int) -> RageClientBuilder:
        self._timeout_millis = timeout_millis
        return self

    def with_authenticator(self, authenticator: Authenticator) -> RageClientBuilder:
        self._authenticator = authenticator
        return self

    def with_error_handlers(self, handlers: Sequence[ErrorHandler]) -> RageClientBuilder:
        self._error_handlers = list(handlers)
        return self

    def with_plugin(self, plugin: RagePlugin) -> RageClientBuilder:
        self._plugins.append(plugin)
        return self

    def with_transport(self, transport: Transport) -> RageClientBuilder:
        self._transport = transport
        return self

    def with_dispatcher(self, dispatcher: Dispatcher) -> RageClientBuilder:
        self._dispatcher = dispatcher
        return self

    def build(self) -> RageClient:
        config_kwargs: dict[str, Any] = {
            "base_url": self._base_url,
            "headers": self._headers,
            "content_type": self._content_type.string_value(),
        }
        if self._timeout_millis is not None:
            config_kwargs["timeout_millis"] = self._timeout_millis
        return RageClient(
            ClientConfig(**config_kwargs),
            authenticator=self._authenticator,
            error_handlers=self._error_handlers,
            plugins=self._plugins,
            transport=self._transport,
            dispatcher=self._dispatcher,
        )
