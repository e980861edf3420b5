"""Tests for the CrudAPI HTTP client."""

import json
from urllib.parse import parse_qs

import httpx
import pytest
from pydantic import ValidationError

from crudkit.client import AuthorizationOptions, ClientOptions, CrudAPI
from crudkit.exceptions import APIRequestError, MissingKeyError, MissingParameterError
from crudkit.storage import UploadedFile

SERVER = "http://api.test"


class RecordingTransport:
    """Mock transport that records requests and replies with a fixed response."""

    def __init__(self, status_code=200, body=None):
        self.requests = []
        self.status_code = status_code
        self.body = {"ok": True} if body is None else body
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code == 204:
            return httpx.Response(204)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_api(options, transport, pk_name="uuid"):
    return CrudAPI(SERVER, "/materials", pk_name, options, transport=transport)


class TestOperationPresence:
    def test_only_configured_operations(self):
        api = make_api({"find": {}, "delete": True}, None)

        assert api.find is not None
        assert api.destroy is not None
        assert api.find_all is None
        assert api.create is None
        assert api.update is None
        assert not api.has_operation("create")

    def test_closed_options(self):
        with pytest.raises(ValidationError):
            make_api({"find": {"dto": ["name"]}}, None)


class TestFind:
    """Test find()."""

    @pytest.mark.asyncio
    async def test_get_by_key(self):
        recorder = RecordingTransport(body={"uuid": "a1", "name": "Foam"})
        api = make_api({"find": {}}, recorder.transport)

        result = await api.find("a1")

        assert result == {"uuid": "a1", "name": "Foam"}
        assert recorder.last.method == "GET"
        assert str(recorder.last.url) == f"{SERVER}/materials/a1"
        assert "authorization" not in recorder.last.headers

    @pytest.mark.asyncio
    async def test_include_segment_and_custom_params(self):
        recorder = RecordingTransport()
        api = make_api({"find": {}}, recorder.transport)

        await api.find("a1", include="texture", custom_params={"lang": "da"})

        assert recorder.last.url.path == "/materials/a1/texture"
        assert recorder.last.url.params["lang"] == "da"

    @pytest.mark.asyncio
    async def test_missing_key(self):
        recorder = RecordingTransport()
        api = make_api({"find": {}}, recorder.transport)

        with pytest.raises(MissingKeyError):
            await api.find("")
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_bearer_token(self):
        recorder = RecordingTransport()
        api = make_api(
            {
                "authorization": {"storage": "memory", "token": "T0K"},
                "find": {"auth": True},
            },
            recorder.transport,
        )

        await api.find("a1")
        assert recorder.last.headers["authorization"] == "Bearer T0K"

    @pytest.mark.asyncio
    async def test_env_token(self, monkeypatch):
        monkeypatch.setenv("MATERIALS_TOKEN", "ENV")
        recorder = RecordingTransport()
        api = make_api(
            {
                "authorization": {"storage": "env", "key": "MATERIALS_TOKEN"},
                "find": {"auth": True},
            },
            recorder.transport,
        )

        await api.find("a1")
        assert recorder.last.headers["authorization"] == "Bearer ENV"

    @pytest.mark.asyncio
    async def test_error_response(self):
        recorder = RecordingTransport(
            status_code=404, body={"error_code": "not_found", "message": "No Material"}
        )
        api = make_api({"find": {}}, recorder.transport)

        with pytest.raises(APIRequestError) as exc_info:
            await api.find("a1")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "No Material"
        assert exc_info.value.body["error_code"] == "not_found"


class TestFindAll:
    """Test find_all()."""

    @pytest.mark.asyncio
    async def test_query_parameters(self):
        recorder = RecordingTransport(body={"count": 0, "pages": 0, "rows": []})
        api = make_api({"findAll": {}}, recorder.transport)

        result = await api.find_all(
            limit=5,
            page=2,
            q="oa",
            where={"kind": "soft"},
            include=[{"model": "Texture", "include": ["Images"]}],
            custom_params={"lang": "da"},
        )

        assert result == {"count": 0, "pages": 0, "rows": []}
        params = recorder.last.url.params
        assert params["limit"] == "5"
        assert params["page"] == "2"
        assert params["q"] == "oa"
        assert params["where"] == "kind:soft"
        assert params["include"] == "Texture.Images"
        assert params["lang"] == "da"

    @pytest.mark.asyncio
    async def test_optional_parameters_omitted(self):
        recorder = RecordingTransport()
        api = make_api({"findAll": {}}, recorder.transport)

        await api.find_all(limit=10)
        assert parse_qs(recorder.last.url.query.decode()) == {"limit": ["10"]}

    @pytest.mark.asyncio
    async def test_limit_required(self):
        recorder = RecordingTransport()
        api = make_api({"findAll": {}}, recorder.transport)

        with pytest.raises(MissingParameterError) as exc_info:
            await api.find_all()
        assert exc_info.value.key == "limit"
        assert recorder.requests == []


class TestCreateUpdateDestroy:
    """Test write operations."""

    @pytest.mark.asyncio
    async def test_create_json(self):
        recorder = RecordingTransport(body={"uuid": "a1", "name": "Foam"})
        api = make_api({"create": {"properties": ["name"]}}, recorder.transport)

        result = await api.create(
            {"name": "Foam", "responseInclude": [{"model": "Texture"}]}
        )

        assert result["uuid"] == "a1"
        assert recorder.last.method == "POST"
        assert json.loads(recorder.last.content) == {
            "name": "Foam",
            "responseInclude": "Texture",
        }

    @pytest.mark.asyncio
    async def test_create_missing_property(self):
        recorder = RecordingTransport()
        api = make_api({"create": {"properties": ["name"]}}, recorder.transport)

        with pytest.raises(MissingParameterError):
            await api.create({"name": ""})
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_create_multipart(self):
        recorder = RecordingTransport()
        api = make_api(
            {"create": {"properties": ["name", "image"]}}, recorder.transport
        )

        await api.create(
            {"name": "Foam", "stock": 3},
            files={"image": UploadedFile(b"PNGDATA", "foam.png")},
        )

        request = recorder.last
        assert request.headers["content-type"].startswith("multipart/form-data")
        body = request.content
        assert b'name="image"; filename="foam.png"' in body
        assert b"PNGDATA" in body
        assert b'name="stock"' in body

    @pytest.mark.asyncio
    async def test_update(self):
        recorder = RecordingTransport()
        api = make_api(
            {"update": {"properties": ["name"], "requiredProperties": ["name"]}},
            recorder.transport,
        )

        await api.update({"uuid": "a1", "name": "Wood"})

        assert recorder.last.method == "PUT"
        assert str(recorder.last.url) == f"{SERVER}/materials"
        assert json.loads(recorder.last.content) == {"uuid": "a1", "name": "Wood"}

    @pytest.mark.asyncio
    async def test_update_checks(self):
        recorder = RecordingTransport()
        api = make_api(
            {"update": {"properties": ["name"], "requiredProperties": ["name"]}},
            recorder.transport,
        )

        with pytest.raises(MissingParameterError):
            await api.update({"uuid": "a1"})
        with pytest.raises(MissingKeyError):
            await api.update({"name": "Wood"})
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_destroy(self):
        recorder = RecordingTransport(status_code=204)
        api = make_api({"delete": True}, recorder.transport)

        assert await api.destroy("a1") is True
        assert recorder.last.method == "DELETE"
        assert json.loads(recorder.last.content) == {"uuid": "a1"}

    @pytest.mark.asyncio
    async def test_destroy_non_204(self):
        recorder = RecordingTransport(status_code=200)
        api = make_api({"delete": True}, recorder.transport)
        assert await api.destroy("a1") is False


class TestSerialization:
    """Test to_json/from_json and options derivation."""

    def test_round_trip(self):
        api = CrudAPI(
            SERVER,
            "/materials",
            "uuid",
            {
                "authorization": {"storage": "env", "key": "TOKEN"},
                "find": {"auth": True},
                "findAll": {},
                "update": {"properties": ["name"], "requiredProperties": ["name"]},
            },
        )

        restored = CrudAPI.from_json(api.to_json())

        assert restored.get_constructor_options() == api.get_constructor_options()
        assert restored.options == api.options
        assert restored.create is None
        assert restored.update is not None

    def test_constructor_options_shape(self):
        api = CrudAPI(SERVER, "/materials", "uuid", {"findAll": {}})
        assert api.get_constructor_options() == {
            "server_url": SERVER,
            "endpoint": "/materials",
            "pk_name": "uuid",
            "options": {"findAll": {"auth": False}},
        }

    def test_setters(self):
        api = CrudAPI(SERVER, "/materials", "uuid", {"find": {}})
        api.set_server_url("http://other.test")
        api.set_endpoint("/things")
        api.set_authorization({"token": "X"})

        assert api.url == "http://other.test/things"
        assert api.get_constructor_options()["options"]["authorization"] == {
            "storage": "memory",
            "token": "X",
        }

    def test_build_options_from_controller_options(self):
        def dependency():
            return None

        options = CrudAPI.build_options(
            {
                "find": {"dependencies": [dependency], "dto": ["name"]},
                "findAll": True,
                "create": {"properties": ["name"]},
                "update": {"properties": ["name"], "requiredProperties": ["name"]},
                "delete": {"dependencies": [dependency]},
            },
            AuthorizationOptions(token="T"),
        )

        assert isinstance(options, ClientOptions)
        assert options.find.auth is True
        assert options.find_all.auth is False
        assert options.create.properties == ["name"]
        assert options.update.required_properties == ["name"]
        assert options.delete.auth is True
        assert options.authorization.token == "T"

    @pytest.mark.parametrize(
        "delete,present", [({}, True), (True, True), (False, False)]
    )
    def test_build_options_delete_presence(self, delete, present):
        options = CrudAPI.build_options({"delete": delete})
        assert (options.delete is not None) is present

    def test_env_authorization_requires_key(self):
        with pytest.raises(ValidationError):
            AuthorizationOptions(storage="env")
