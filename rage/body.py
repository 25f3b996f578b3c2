"""Request variants that carry a body.

Each variant is created from an existing RageRequest through with_body(),
multipart() or form_url_encoded(), takes over all of its settings and adds
body-setting methods. Only POST, PUT and PATCH requests can become a variant.
"""

from __future__ import annotations

from typing import Any, Mapping, Self

from rage.errors import precondition
from rage.mapping import to_json_string
from rage.models import ContentType, TypedObject
from rage.request import (
    CONTENT_TYPE_HEADER,
    WRONG_HTTP_METHOD_FOR_BODY_ERROR_MESSAGE,
    RageRequest,
    _stringify,
)


class _BodyCapableRequest(RageRequest):
    @classmethod
    def from_request(cls, request: RageRequest) -> Self:
        precondition(request.http_method.has_body(), WRONG_HTTP_METHOD_FOR_BODY_ERROR_MESSAGE)
        variant = cls(request.http_method, request.base_url)
        variant._copy_state_from(request)
        return variant


class BodyRageRequest(_BodyCapableRequest):
    """Request with a raw body (bytes, string, JSON or typed object)."""

    def body_data(self, data: bytes) -> Self:
        self.body = bytes(data)
        return self

    def body_string(self, value: str) -> Self:
        return self.body_data(value.encode("utf-8"))

    def body_object(self, typed_object: TypedObject) -> Self:
        self.content_type(ContentType.custom(typed_object.mime_type))
        return self.body_data(typed_object.data)

    def body_json(self, value: Any) -> Self:
        """Send value as JSON (pydantic model, dataclass, dict, list...)."""
        self.content_type(ContentType.JSON)
        return self.body_string(to_json_string(value))


class MultipartRageRequest(_BodyCapableRequest):
    """multipart/form-data request built from named parts.

    httpx generates the boundary, so the Content-Type header is replaced at
    materialization time by one that carries it.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.parts: dict[str, TypedObject] = {}
        self.fields: dict[str, str] = {}

    @classmethod
    def from_request(cls, request: RageRequest) -> Self:
        variant = super().from_request(request)
        variant.content_type(ContentType.MULTIPART_FORM_DATA)
        return variant

    def part(self, typed_object: TypedObject, name: str) -> Self:
        self.parts[name] = typed_object
        return self

    def field(self, name: str, value: Any | None) -> Self:
        """Plain form field; None removes it."""
        if value is None:
            self.fields.pop(name, None)
            return self
        self.fields[name] = _stringify(value)
        return self

    def _request_headers(self) -> dict[str, str]:
        return {k: v for k, v in self.headers.items() if k.lower() != CONTENT_TYPE_HEADER.lower()}

    def _body_kwargs(self) -> dict[str, Any]:
        # Fields travel as filename-less parts so a request without files is
        # still encoded as multipart rather than urlencoded.
        files: dict[str, tuple] = {name: (None, value) for name, value in self.fields.items()}
        for name, part in self.parts.items():
            files[name] = (part.file_name or name, part.data, part.mime_type)
        if not files:
            return {}
        return {"files": files}


class FormUrlEncodedRageRequest(_BodyCapableRequest):
    """application/x-www-form-urlencoded request built from fields."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.fields: dict[str, str] = {}

    @classmethod
    def from_request(cls, request: RageRequest) -> Self:
        variant = super().from_request(request)
        variant.content_type(ContentType.URL_ENCODED)
        return variant

    def field(self, key: str, value: Any | None) -> Self:
        """Set a form field; None removes it."""
        if value is None:
            self.fields.pop(key, None)
            return self
        self.fields[key] = _stringify(value)
        return self

    def field_dictionary(self, dictionary: Mapping[str, Any | None]) -> Self:
        for key, value in dictionary.items():
            self.field(key, value)
        return self

    def _body_kwargs(self) -> dict[str, Any]:
        if not self.fields:
            return {}
        return {"data": dict(self.fields)}
