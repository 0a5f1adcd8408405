try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json

import httpx
import pytest

from fakes import StaticTokenProvider, json_handler
from taskstore.clients.firestore import (
    DecodingError,
    EncodingError,
    FirestoreConfig,
    FirestoreHTTPClient,
    InvalidURLError,
    NetworkError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
)
from taskstore.clients.tokens import ConfigurationError, EnvironmentAccessTokenProvider


def _client(handler, *, token: str | None = "secret", api_root: str = "https://fs.test/v1/"):
    return FirestoreHTTPClient(
        FirestoreConfig(project_id="p", api_root=api_root),
        StaticTokenProvider(token),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_send_joins_path_and_attaches_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    client = _client(handler)
    result = await client.send(
        "POST",
        "projects/p/databases/(default)/documents/tasks",
        params={"documentId": "abc"},
        body={"fields": {}},
    )

    assert result == {"ok": True}
    request = seen[0]
    assert request.url.path == "/v1/projects/p/databases/(default)/documents/tasks"
    assert request.url.params["documentId"] == "abc"
    assert request.headers["Accept"] == "application/json"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Authorization"] == "Bearer secret"
    assert json.loads(request.content) == {"fields": {}}


@pytest.mark.asyncio
async def test_send_omits_authorization_and_content_type_when_absent() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"")

    result = await _client(handler, token=None).send("DELETE", "/projects/p/x")

    assert result == {}
    assert "Authorization" not in seen[0].headers
    assert "Content-Type" not in seen[0].headers


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code, error_type",
    [(401, UnauthorizedError), (403, UnauthorizedError), (404, NotFoundError), (500, ServerError)],
)
async def test_error_statuses_are_classified(status_code, error_type) -> None:
    payload = {"error": {"code": status_code, "message": "nope", "status": "X"}}
    client = _client(json_handler(status_code, payload))

    with pytest.raises(error_type) as excinfo:
        await client.send("GET", "/projects/p/x")

    assert excinfo.value.message == "nope"
    if error_type is ServerError:
        assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_error_message_from_array_body() -> None:
    payload = [{"error": {"message": "first"}}, {"error": {"message": "second"}}]
    client = _client(json_handler(400, payload))

    with pytest.raises(ServerError) as excinfo:
        await client.send("POST", "/projects/p/x:runQuery", body={})

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "first. second"


@pytest.mark.asyncio
async def test_unreadable_error_body_has_no_message() -> None:
    client = _client(lambda request: httpx.Response(503, content=b"<html>down</html>"))

    with pytest.raises(ServerError) as excinfo:
        await client.send("GET", "/projects/p/x")

    assert excinfo.value.message is None


@pytest.mark.asyncio
async def test_transport_failure_is_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        await _client(handler).send("GET", "/projects/p/x")


@pytest.mark.asyncio
async def test_invalid_json_body_is_decoding_error() -> None:
    client = _client(lambda request: httpx.Response(200, content=b"{not json"))

    with pytest.raises(DecodingError):
        await client.send("GET", "/projects/p/x")


@pytest.mark.asyncio
async def test_unserializable_body_is_encoding_error() -> None:
    client = _client(json_handler(200, {}))

    with pytest.raises(EncodingError):
        await client.send("POST", "/projects/p/x", body={"when": object()})


def test_invalid_api_root() -> None:
    client = _client(json_handler(200, {}), api_root="not a url")

    with pytest.raises(InvalidURLError):
        client.build_url("/projects/p/x")


@pytest.mark.asyncio
async def test_provider_errors_propagate_unchanged(monkeypatch) -> None:
    monkeypatch.delenv("FIRESTORE_ACCESS_TOKEN", raising=False)
    client = FirestoreHTTPClient(
        FirestoreConfig(project_id="p", api_root="https://fs.test/v1"),
        EnvironmentAccessTokenProvider(),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(json_handler(200, {}))),
    )

    with pytest.raises(ConfigurationError):
        await client.send("GET", "/projects/p/x")


@pytest.mark.asyncio
async def test_corrupt_encoded_body_is_decoding_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not-gzip")

    with pytest.raises(DecodingError):
        await _client(handler).send("GET", "/projects/p/x")


@pytest.mark.asyncio
async def test_redirect_loop_is_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.TooManyRedirects("redirect loop", request=request)

    with pytest.raises(NetworkError):
        await _client(handler).send("GET", "/projects/p/x")
