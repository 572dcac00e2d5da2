from __future__ import annotations

import json

import httpx
import pytest

from solstamp.core.exceptions import TransientRpcError
from solstamp.rpc.health import check_endpoint, filter_reachable


def _transport(ok_hosts: set[str]) -> httpx.MockTransport:
    def _handle(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content)["method"] == "getVersion"
        if request.url.host in ok_hosts:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {"solana-core": "2.1.0"}})
        return httpx.Response(404)

    return httpx.MockTransport(_handle)


@pytest.mark.anyio
async def test_check_endpoint_returns_version() -> None:
    version = await check_endpoint("https://good.example/", transport=_transport({"good.example"}))
    assert version["solana-core"] == "2.1.0"


@pytest.mark.anyio
async def test_check_endpoint_raises_on_http_error() -> None:
    with pytest.raises(TransientRpcError):
        await check_endpoint("https://bad.example/", transport=_transport(set()))


@pytest.mark.anyio
async def test_filter_reachable_keeps_order() -> None:
    urls = ["https://a.example/", "https://bad.example/", "https://b.example/"]
    ok = await filter_reachable(urls, transport=_transport({"a.example", "b.example"}))
    assert ok == ["https://a.example/", "https://b.example/"]
