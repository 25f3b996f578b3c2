"""Value types shared across rage.

HTTP verbs, content types and stub modes are plain value types. Client
configuration models use Pydantic v2 so they can be loaded from YAML.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# HTTP Value Types
# =============================================================================


class HttpMethod(str, Enum):
    """HTTP verb of a request."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    CONNECT = "CONNECT"

    def string_value(self) -> str:
        return self.value

    def has_body(self) -> bool:
        """Only POST, PUT and PATCH requests may carry a body."""
        return self in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH)


@dataclass(frozen=True)
class ContentType:
    """Body encoding, rendered as the Content-Type header value.

    Use the JSON, URL_ENCODED and MULTIPART_FORM_DATA constants or
    ContentType.custom("image/png") for anything else.
    """

    mime_type: str

    JSON: ClassVar[ContentType]
    URL_ENCODED: ClassVar[ContentType]
    MULTIPART_FORM_DATA: ClassVar[ContentType]

    def string_value(self) -> str:
        return self.mime_type

    @classmethod
    def custom(cls, mime_type: str) -> ContentType:
        return cls(mime_type)

    @classmethod
    def parse(cls, name: str) -> ContentType:
        """Resolve a config file name (json, url_encoded, multipart_form_data) or a raw MIME type."""
        named = {
            "json": cls.JSON,
            "url_encoded": cls.URL_ENCODED,
            "multipart_form_data": cls.MULTIPART_FORM_DATA,
        }
        return named.get(name.lower(), cls.custom(name))


ContentType.JSON = ContentType("application/json")
ContentType.URL_ENCODED = ContentType("application/x-www-form-urlencoded")
ContentType.MULTIPART_FORM_DATA = ContentType("multipart/form-data")


@dataclass(frozen=True)
class TypedObject:
    """A payload with its MIME type (request body or one multipart part)."""

    data: bytes
    mime_type: str
    file_name: str | None = None


# =============================================================================
# Stub Models
# =============================================================================


class StubModeKind(str, Enum):
    NEVER = "never"
    IMMEDIATE = "immediate"
    DELAYED = "delayed"


@dataclass(frozen=True)
class StubMode:
    """When stub data is delivered instead of a network response.

    NEVER ignores the stub, IMMEDIATE returns it at once and delayed(ms)
    blocks the dispatching thread for ms milliseconds first.
    """

    kind: StubModeKind
    delay_millis: int = 0

    NEVER: ClassVar[StubMode]
    IMMEDIATE: ClassVar[StubMode]

    @classmethod
    def delayed(cls, delay_millis: int) -> StubMode:
        if delay_millis < 0:
            raise ValueError(f"Stub delay must be non-negative, got {delay_millis}")
        return cls(StubModeKind.DELAYED, delay_millis)


StubMode.NEVER = StubMode(StubModeKind.NEVER)
StubMode.IMMEDIATE = StubMode(StubModeKind.IMMEDIATE)


@dataclass(frozen=True)
class StubData:
    """Canned response bytes attached to a request."""

    data: bytes
    mode: StubMode = StubMode.IMMEDIATE


# =============================================================================
# Client Configuration Models
# =============================================================================


DEFAULT_TIMEOUT_MILLIS = 60 * 1000


class TlsConfig(BaseModel):
    """TLS settings for the HTTP transport."""

    model_config = ConfigDict(extra="forbid")

    verify_ssl: bool = Field(default=True, description="Verify server certificates")
    ca_bundle: str | None = Field(default=None, description="Path to a CA bundle")
    cert: str | None = Field(default=None, description="Client certificate for mTLS")
    key: str | None = Field(default=None, description="Client private key for mTLS")
    key_password: str | None = Field(default=None, description="Password for the client key")
    ciphers: str | None = Field(default=None, description="OpenSSL cipher string")


class ClientConfig(BaseModel):
    """Defaults applied to every request a client creates."""

    model_config = ConfigDict(extra="forbid")

    base_url: str | None = Field(default=None, description="Base URL for all requests")
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Default headers (supports ${ENV_VAR} substitution)",
    )
    content_type: str = Field(
        default="json",
        description="json, url_encoded, multipart_form_data or a MIME type",
    )
    timeout_millis: int = Field(
        default=DEFAULT_TIMEOUT_MILLIS, ge=0, description="Connect and transfer timeout"
    )
    tls: TlsConfig | None = Field(default=None, description="TLS settings")

    @field_validator("content_type")
    @classmethod
    def check_content_type(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content_type must not be empty")
        return v

    def resolved_content_type(self) -> ContentType:
        return ContentType.parse(self.content_type)
