"""Tests for the HTTP trigger listener."""

from unittest.mock import MagicMock, call

import aiohttp
import pytest
from aiohttp.test_utils import TestClient, TestServer, unused_port

from huestream.engine import EffectEngine
from huestream.server import TriggerServer


@pytest.fixture
def engine() -> MagicMock:
    return MagicMock(spec=EffectEngine)


@pytest.fixture
def server(engine: MagicMock) -> TriggerServer:
    return TriggerServer(engine, port=8666)


@pytest.fixture
async def client(server: TriggerServer):
    async with TestClient(TestServer(server.create_app())) as client:
        yield client


@pytest.mark.parametrize(
    ("path", "trigger"),
    [
        ("/raid", "do_raid_effect"),
        ("/subscribe", "do_subscribe_effect"),
        ("/subgift", "do_sub_gift_effect"),
        ("/bits", "do_bits_effect"),
    ],
)
async def test_trigger(client: TestClient, engine: MagicMock, path: str, trigger: str) -> None:
    """Test each path cancels the queue, then plays its effect."""
    resp = await client.get(path)

    assert resp.status == 200
    assert await resp.text() == "ok\n"
    assert engine.method_calls == [call.cancel_all(), getattr(call, trigger)()]
    engine.cancel_all.assert_awaited_once()


async def test_any_method(client: TestClient, engine: MagicMock) -> None:
    resp = await client.post("/bits", data="1000")

    assert resp.status == 200
    engine.do_bits_effect.assert_called_once_with()


@pytest.mark.parametrize("path", ["/", "/raids", "/raid/extra", "/unknown"])
async def test_not_found(client: TestClient, engine: MagicMock, path: str) -> None:
    resp = await client.get(path)

    assert resp.status == 404
    assert await resp.text() == "Resource not found\n"
    assert engine.method_calls == []


async def test_start_stop(engine: MagicMock) -> None:
    """Test the server listens between start and stop."""
    server = TriggerServer(engine, port=unused_port(), host="127.0.0.1")
    assert not server.is_running

    await server.start()
    try:
        assert server.is_running
        await server.start()
        async with aiohttp.ClientSession() as session:
            async with session.get(f"{server.url}subscribe") as resp:
                assert resp.status == 200
    finally:
        await server.stop()

    assert not server.is_running
    engine.do_subscribe_effect.assert_called_once_with()
