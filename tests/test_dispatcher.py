"""Tests del WebhookEmailDispatcher contra un servidor aiohttp local."""

import asyncio

import pytest
from aiohttp import test_utils, web

from acematch.config import get_settings
from acematch.notifications import WebhookEmailDispatcher, build_payload


@pytest.fixture
def payload(engine, settings, make_investor, make_listing):
    investor, listing = make_investor(), make_listing()
    return build_payload(investor, listing, engine.score_pair(investor, listing), settings=settings)


async def _post_to_server(payload, status: int, secret="s3cret"):
    """Levanta un servidor con el endpoint de emails y envía un payload."""
    received = []

    async def handler(request):
        received.append((request.headers.get("Authorization"), await request.json()))
        return web.json_response({"ok": status < 300}, status=status)

    app = web.Application()
    app.router.add_post("/notify", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        url = str(server.make_url("/notify"))
        async with WebhookEmailDispatcher(url=url, secret=secret, timeout=5) as dispatcher:
            sent = await dispatcher.send(payload)
    finally:
        await server.close()
    return sent, received


class TestWebhookEmailDispatcher:
    """Tests del envío por HTTP."""

    def test_success(self, payload) -> None:
        sent, received = asyncio.run(_post_to_server(payload, 200))

        assert sent is True
        auth, body = received[0]
        assert auth == "Bearer s3cret"
        assert body["template"] == "new_property_match"
        assert body["subject"] == "New 100% Match: Nash Road, London, E1"
        assert body["breakdown"]["label"] == "Excellent Match"

    def test_rejected(self, payload) -> None:
        sent, received = asyncio.run(_post_to_server(payload, 500))

        assert sent is False
        assert len(received) == 1

    def test_unreachable_service(self, payload) -> None:
        async def _send():
            async with WebhookEmailDispatcher(url="http://127.0.0.1:1/notify", timeout=2) as d:
                return await d.send(payload)

        assert asyncio.run(_send()) is False

    def test_requires_context_manager(self, payload) -> None:
        dispatcher = WebhookEmailDispatcher(url="http://localhost/notify")

        with pytest.raises(RuntimeError):
            asyncio.run(dispatcher.send(payload))

    def test_requires_url(self, monkeypatch) -> None:
        monkeypatch.delenv("NOTIFICATION_WEBHOOK_URL")
        get_settings.cache_clear()

        with pytest.raises(ValueError):
            WebhookEmailDispatcher()
