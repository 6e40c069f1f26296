"""Websocket tests for the journal consumer."""

import pytest
from channels.db import database_sync_to_async
from channels.testing import WebsocketCommunicator
from rest_framework.authtoken.models import Token

from apps.trading.consumers import TradingConsumer
from apps.trading.middleware import TokenAuthMiddleware, token_from_scope
from apps.trading.models import Trade

TIMEOUT = 5

application = TokenAuthMiddleware(TradingConsumer.as_asgi())


@pytest.fixture
def token(user):
    return Token.objects.create(user=user).key


async def connected(token_key):
    communicator = WebsocketCommunicator(application, f"/ws/journal/?token={token_key}")
    ok, _ = await communicator.connect(timeout=TIMEOUT)
    assert ok
    hello = await communicator.receive_json_from(timeout=TIMEOUT)
    assert hello["type"] == "connection"
    return communicator


async def open_quarter(communicator, year=2025, quarter=1):
    await communicator.send_json_to({"action": "quarter.open", "year": year, "quarter": quarter})
    bundle = await communicator.receive_json_from(timeout=TIMEOUT)
    metrics = await communicator.receive_json_from(timeout=TIMEOUT)
    return bundle, metrics


class TestTokenFromScope:

    def test_query_string(self):
        assert token_from_scope({"query_string": b"token=abc"}) == "abc"

    def test_authorization_header(self):
        scope = {"query_string": b"", "headers": [(b"authorization", b"Token xyz")]}
        assert token_from_scope(scope) == "xyz"

    def test_missing(self):
        assert token_from_scope({"query_string": b"", "headers": [(b"authorization", b"Bearer x")]}) is None


@pytest.mark.django_db(transaction=True)
class TestTradingConsumer:

    async def test_rejects_anonymous(self):
        communicator = WebsocketCommunicator(application, "/ws/journal/")
        ok, _ = await communicator.connect(timeout=TIMEOUT)

        assert not ok

    async def test_rejects_unknown_token(self):
        communicator = WebsocketCommunicator(application, "/ws/journal/?token=nope")
        ok, _ = await communicator.connect(timeout=TIMEOUT)

        assert not ok

    async def test_open_quarter_sends_bundle_and_metrics(self, token):
        communicator = await connected(token)

        bundle, metrics = await open_quarter(communicator, 2025, 2)

        assert bundle["type"] == "quarter.bundle"
        assert [m["month"] for m in bundle["bundle"]["months"]] == ["Abril", "Mayo", "Junio"]
        assert metrics["type"] == "quarter.metrics"
        assert metrics["metrics"]["risk_limit"] == 6
        await communicator.disconnect()

    async def test_actions_need_a_loaded_quarter(self, token):
        communicator = await connected(token)

        await communicator.send_json_to({"action": "trade.add", "month": "Enero"})
        reply = await communicator.receive_json_from(timeout=TIMEOUT)

        assert reply == {"type": "quarter.error", "error": "No quarter loaded"}
        await communicator.disconnect()

    async def test_bad_messages(self, token):
        communicator = await connected(token)

        await communicator.send_to(text_data="{not json")
        assert (await communicator.receive_json_from(timeout=TIMEOUT))["error"] == "Invalid JSON"

        await communicator.send_json_to({"action": "trade.explode"})
        reply = await communicator.receive_json_from(timeout=TIMEOUT)
        assert reply["error"] == "Unknown action: trade.explode"
        await communicator.disconnect()

    async def test_add_update_and_flush_on_disconnect(self, token):
        communicator = await connected(token)
        await open_quarter(communicator)

        await communicator.send_json_to({"action": "trade.add", "month": "Enero"})
        bundle = await communicator.receive_json_from(timeout=TIMEOUT)
        await communicator.receive_json_from(timeout=TIMEOUT)

        trade = bundle["bundle"]["months"][0]["trades"][0]
        assert trade["trade_number"] == 1

        await communicator.send_json_to({
            "action": "trade.update",
            "trade_id": trade["id"],
            "changes": {"pair": "EURUSD", "risk_percent": "1"},
        })
        metrics = await communicator.receive_json_from(timeout=TIMEOUT)
        assert metrics["type"] == "quarter.metrics"

        await communicator.disconnect()

        saved = await database_sync_to_async(Trade.objects.get)(id=trade["id"])
        assert saved.pair == "EURUSD"

    async def test_open_with_missing_fields(self, token):
        communicator = await connected(token)
        await open_quarter(communicator)

        await communicator.send_json_to({"action": "trade.add", "month": "Marzo"})
        bundle = await communicator.receive_json_from(timeout=TIMEOUT)
        await communicator.receive_json_from(timeout=TIMEOUT)
        trade_id = bundle["bundle"]["months"][2]["trades"][0]["id"]

        await communicator.send_json_to({"action": "trade.open", "trade_id": trade_id})
        reply = await communicator.receive_json_from(timeout=TIMEOUT)

        assert reply["type"] == "quarter.error"
        assert "pair" in reply["missing"]
        await communicator.disconnect()

    async def test_other_sockets_are_told(self, token):
        editor = await connected(token)
        watcher = await connected(token)
        await open_quarter(editor)

        await editor.send_json_to({"action": "trade.add", "month": "Febrero"})
        await editor.receive_json_from(timeout=TIMEOUT)
        await editor.receive_json_from(timeout=TIMEOUT)

        update = await watcher.receive_json_from(timeout=TIMEOUT)
        assert update["type"] == "journal.update"
        assert update["kind"] == "trade.created"
        assert await editor.receive_nothing()

        await editor.disconnect()
        await watcher.disconnect()
