"""Tests for body, multipart and form-urlencoded request variants."""

import httpx
import pytest
from pydantic import BaseModel

from rage.body import BodyRageRequest, FormUrlEncodedRageRequest, MultipartRageRequest
from rage.errors import ContractViolationError
from rage.models import HttpMethod, StubMode, TypedObject
from rage.request import WRONG_HTTP_METHOD_FOR_BODY_ERROR_MESSAGE, RageRequest
from tests.conftest import BASE_URL, CountingPlugin, TestAuthenticator, make_transport


class Widget(BaseModel):
    name: str
    size: int


@pytest.fixture
def request_post() -> RageRequest:
    return RageRequest(HttpMethod.POST, BASE_URL)


class TestHasBody:
    @pytest.mark.parametrize("method", [HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH])
    def test_body_capable(self, method: HttpMethod) -> None:
        assert method.has_body()

    @pytest.mark.parametrize(
        "method", [HttpMethod.GET, HttpMethod.DELETE, HttpMethod.HEAD, HttpMethod.OPTIONS]
    )
    def test_not_body_capable(self, method: HttpMethod) -> None:
        assert not method.has_body()

    @pytest.mark.parametrize("variant", ["with_body", "multipart", "form_url_encoded"])
    def test_variants_reject_get(self, request_get: RageRequest, variant: str) -> None:
        with pytest.raises(ContractViolationError, match=WRONG_HTTP_METHOD_FOR_BODY_ERROR_MESSAGE):
            getattr(request_get, variant)()


class TestVariantCarriesState:
    def test_state_copied(self, request_post: RageRequest) -> None:
        plugin = CountingPlugin()
        auth = TestAuthenticator()
        request_post.query("q", 1).path("id", 2).header("X", "y").with_timeout_millis(10)
        request_post.with_plugins([plugin]).stub("{}", mode=StubMode.NEVER)
        request_post.authenticator = auth

        body_request = request_post.with_body()

        assert isinstance(body_request, BodyRageRequest)
        assert body_request.query_parameters == {"q": "1"}
        assert body_request.path_parameters == {"id": "2"}
        assert body_request.headers == {"X": "y"}
        assert body_request.timeout_millis == 10
        assert body_request.plugins == [plugin]
        assert body_request.authenticator is auth
        assert body_request.stub_data == request_post.stub_data

    def test_builder_methods_keep_variant_type(self, request_post: RageRequest) -> None:
        body_request = request_post.with_body().header("A", "b").query("c", "d")
        assert isinstance(body_request, BodyRageRequest)


class TestBodyRageRequest:
    def test_body_string(self, request_post: RageRequest) -> None:
        raw = request_post.with_body().body_string("héllo").raw_request()
        assert raw.content == "héllo".encode("utf-8")

    def test_body_data(self, request_post: RageRequest) -> None:
        raw = request_post.with_body().body_data(b"\x00\x01").raw_request()
        assert raw.content == b"\x00\x01"

    def test_body_object_sets_content_type(self, request_post: RageRequest) -> None:
        typed = TypedObject(b"\x89PNG", "image/png")
        request = request_post.with_body().body_object(typed)
        raw = request.raw_request()
        assert raw.headers["Content-Type"] == "image/png"
        assert raw.content == b"\x89PNG"

    def test_body_json_model(self, request_post: RageRequest) -> None:
        request = request_post.with_body().body_json(Widget(name="gear", size=3))
        raw = request.raw_request()
        assert raw.headers["Content-Type"] == "application/json"
        assert raw.content == b'{"name":"gear","size":3}'

    def test_body_sent_over_transport(self, request_post: RageRequest) -> None:
        received = []

        def handler(req: httpx.Request) -> httpx.Response:
            received.append(req.content)
            return httpx.Response(201, content=b"created")

        result = (
            request_post.with_transport(make_transport(handler))
            .with_body()
            .body_string("payload")
            .execute()
        )

        assert received == [b"payload"]
        assert result.value.status_code() == 201


class TestFormUrlEncoded:
    def test_sets_content_type(self, request_post: RageRequest) -> None:
        request = request_post.form_url_encoded()
        assert isinstance(request, FormUrlEncodedRageRequest)
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_fields_encoded(self, request_post: RageRequest) -> None:
        raw = (
            request_post.form_url_encoded()
            .field("name", "Paul Smith")
            .field_dictionary({"age": 24, "drop": None})
            .raw_request()
        )
        assert raw.content == b"name=Paul+Smith&age=24"
        assert raw.headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_none_removes_field(self, request_post: RageRequest) -> None:
        request = request_post.form_url_encoded().field("a", 1).field("a", None)
        assert request.fields == {}


class TestMultipart:
    def test_sets_content_type(self, request_post: RageRequest) -> None:
        request = request_post.multipart()
        assert isinstance(request, MultipartRageRequest)
        assert request.headers["Content-Type"] == "multipart/form-data"

    def test_parts_encoded_with_boundary(self, request_post: RageRequest) -> None:
        raw = (
            request_post.multipart()
            .part(TypedObject(b"col1,col2", "text/csv", "data.csv"), "file")
            .field("note", "quarterly")
            .raw_request()
        )
        raw.read()
        content_type = raw.headers["Content-Type"]
        assert content_type.startswith("multipart/form-data; boundary=")
        body = raw.content
        assert b'name="file"; filename="data.csv"' in body
        assert b"col1,col2" in body
        assert b'name="note"' in body
        assert b"quarterly" in body

    def test_fields_only_still_multipart(self, request_post: RageRequest) -> None:
        raw = request_post.multipart().field("note", "x").raw_request()
        assert raw.headers["Content-Type"].startswith("multipart/form-data; boundary=")
