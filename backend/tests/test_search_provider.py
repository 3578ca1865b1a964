# tests/test_search_provider.py
import json

import httpx
import pytest

from creditdesk.exceptions import ProviderError
from creditdesk.services.search_provider import SearchProviderClient


def _client(handler):
    return SearchProviderClient(
        search_url="https://hooks.test/search",
        status_url="https://hooks.test/status",
        download_url="https://hooks.test/download",
        token="secret-token",
        transport=httpx.MockTransport(handler),
    )


async def test_submit_sends_payload_and_bearer_token():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "id": 42})

    submission = await _client(handler).submit("Av. Paulista, 1000", "cafeterias", "01310100")

    assert submission.success is True
    assert submission.id == "42"
    assert seen["auth"] == "Bearer secret-token"
    assert seen["body"] == {"endereco": "Av. Paulista, 1000", "query": "cafeterias", "cep": "01310100"}


async def test_submit_without_cep_sends_empty_string():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": False})

    submission = await _client(handler).submit("Rua X", "bares")

    assert submission.success is False
    assert seen["body"]["cep"] == ""


async def test_submit_http_error_raises_provider_error():
    client = _client(lambda request: httpx.Response(503))

    with pytest.raises(ProviderError):
        await client.submit("Rua X", "bares")


async def test_submit_connection_error_raises_provider_error():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(ProviderError):
        await _client(handler).submit("Rua X", "bares")


@pytest.mark.parametrize("payload, expected", [
    ({"finalizado": True}, True),
    ({"finished": True}, True),
    ({"status": "completed"}, True),
    ({"status": "processing"}, False),
    ({}, False),
    ([], False),
])
async def test_is_finished(payload, expected):
    def handler(request):
        assert request.url.params["id"] == "ext-1"
        return httpx.Response(200, json=payload)

    assert await _client(handler).is_finished("ext-1") is expected


async def test_download_returns_bytes():
    client = _client(lambda request: httpx.Response(200, content=b"xlsx-bytes"))

    assert await client.download("ext-1") == b"xlsx-bytes"


async def test_download_failure():
    client = _client(lambda request: httpx.Response(404))

    with pytest.raises(ProviderError):
        await client.download("ext-1")
