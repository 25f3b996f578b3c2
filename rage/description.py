"""RequestDescription - immutable template a RageRequest is seeded from."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rage.models import DEFAULT_TIMEOUT_MILLIS, ContentType, HttpMethod

if TYPE_CHECKING:
    from rage.auth import Authenticator
    from rage.dispatch import Dispatcher
    from rage.error_handlers import ErrorHandler
    from rage.plugins import RagePlugin
    from rage.transport import Transport


@dataclass(frozen=True)
class RequestDescription:
    """Defaults for one endpoint, produced by RageClient.

    Plugins, handlers and the authenticator are shared by reference with
    every request created from the description.
    """

    http_method: HttpMethod
    base_url: str | None = None
    path: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    content_type: ContentType = ContentType.JSON
    authenticator: Authenticator | None = None
    error_handlers: tuple[ErrorHandler, ...] = ()
    timeout_millis: int = DEFAULT_TIMEOUT_MILLIS
    plugins: tuple[RagePlugin, ...] = ()
    transport: Transport | None = None
    dispatcher: Dispatcher | None = None

    def __post_init__(self) -> None:
        if self.timeout_millis < 0:
            raise ValueError(f"Timeout must be non-negative, got {self.timeout_millis}")
        # Own a copy so later changes to the caller's dict don't leak in.
        object.__setattr__(self, "headers", dict(self.headers))
        object.__setattr__(self, "error_handlers", tuple(self.error_handlers))
        object.__setattr__(self, "plugins", tuple(self.plugins))
