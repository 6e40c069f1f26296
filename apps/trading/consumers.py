# apps/trading/consumers.py

import json
import logging

from channels.generic.websocket import AsyncWebsocketConsumer

from apps.users.errors import RepoError

from .lifecycle import TradeTransitionError
from .notifications import group_name, update_message
from .quarters import current_quarter, current_year
from .serializers import TradeUpdateSerializer
from .session import QuarterSession, RepositoryStore

logger = logging.getLogger(__name__)


class TradingConsumer(AsyncWebsocketConsumer):
    """
    One journal editing session per socket.

    Client → server: {"action": "<name>", ...}
    Server → client: {"type": "connection" | "quarter.bundle" |
                      "quarter.metrics" | "quarter.error" | "journal.update", ...}
    """

    async def connect(self):
        user = self.scope.get("user")

        if not user or not user.is_authenticated:
            await self.close()
            return

        self.user = user
        self.user_id = str(user.id)
        self.group_name = group_name(self.user_id)
        self.session = self.make_session(user)

        await self.channel_layer.group_add(
            self.group_name,
            self.channel_name
        )

        await self.accept()

        await self.send_json({
            "type": "connection",
            "message": "WebSocket connected",
            "user_id": self.user_id
        })

    def make_session(self, user):
        return QuarterSession(RepositoryStore(user))

    async def disconnect(self, close_code):
        if hasattr(self, "session"):
            await self.session.close()

        if hasattr(self, 'group_name'):
            await self.channel_layer.group_discard(
                self.group_name,
                self.channel_name
            )

    async def send_json(self, payload):
        await self.send(text_data=json.dumps(payload))

    async def send_error(self, message, **extra):
        await self.send_json({"type": "quarter.error", "error": message, **extra})

    async def send_metrics(self):
        await self.send_json({
            "type": "quarter.metrics",
            "metrics": self.session.metrics(),
        })

    async def send_bundle(self):
        await self.send_json({
            "type": "quarter.bundle",
            "bundle": self.session.bundle,
        })
        await self.send_metrics()

    async def notify_others(self, kind, data):
        await self.channel_layer.group_send(
            self.group_name,
            update_message(kind, data, source=self.channel_name),
        )

    # ------------------------------------------------------
    # Incoming
    # ------------------------------------------------------

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or "")
        except json.JSONDecodeError as e:
            logger.warning(f"Bad message from {self.user_id}: {e}")
            await self.send_error("Invalid JSON")
            return

        if not isinstance(data, dict):
            await self.send_error("Invalid message")
            return

        action = data.get("action")
        handler = self.handlers.get(action)
        if handler is None:
            await self.send_error(f"Unknown action: {action}")
            return

        if action != "quarter.open" and not self.session.loaded:
            await self.send_error("No quarter loaded")
            return

        try:
            await handler(self, data)
        except TradeTransitionError as e:
            await self.send_error(e.message, missing=e.missing)
        except RepoError as e:
            logger.error(f"{action} failed for {self.user_id}: {e.message}")
            await self.send_error(e.message)

    async def open_quarter(self, data):
        try:
            year = int(data.get("year") or current_year())
            quarter = int(data.get("quarter") or current_quarter())
        except (TypeError, ValueError):
            await self.send_error("Invalid year or quarter")
            return

        bundle = await self.session.load(year, quarter)
        if bundle is not None:
            await self.send_bundle()

    async def add_trade(self, data):
        trade = await self.session.add_trade(data.get("month"))
        if trade is None:
            await self.send_error("Could not create trade")
            return
        await self.send_bundle()
        await self.notify_others("trade.created", trade)

    async def update_trade(self, data):
        serializer = TradeUpdateSerializer(data=data.get("changes") or {})
        if not serializer.is_valid():
            await self.send_error("Invalid trade fields", fields=serializer.errors)
            return

        trade = self.session.update_trade(data.get("trade_id"), serializer.validated_data)
        if trade is None:
            await self.send_error("Trade not found")
            return
        await self.send_metrics()

    async def delete_trade(self, data):
        trade_id = data.get("trade_id")
        if not await self.session.delete_trade(trade_id):
            await self.send_error("Trade not found")
            return
        await self.send_bundle()
        await self.notify_others("trade.deleted", {"id": str(trade_id)})

    async def open_trade(self, data):
        trade = await self.session.open_trade(data.get("trade_id"))
        if trade is None:
            await self.send_error("Could not open trade")
            return
        await self.send_bundle()
        await self.notify_others("trade.opened", trade)

    async def close_trade(self, data):
        trade = await self.session.close_trade(
            data.get("trade_id"), data.get("result"), data.get("final_rr")
        )
        if trade is None:
            await self.send_error("Could not close trade")
            return
        await self.send_bundle()
        await self.notify_others("trade.closed", trade)

    async def set_month_notes(self, data):
        notes = data.get("notes")
        if not isinstance(notes, str):
            await self.send_error("Notes must be text")
            return
        if self.session.set_month_notes(data.get("month"), notes) is None:
            await self.send_error("Month not found")

    async def toggle_month(self, data):
        month = await self.session.toggle_month(data.get("month"))
        if month is None:
            await self.send_error("Month not found")
            return
        await self.send_bundle()
        await self.notify_others("month.updated", {
            "id": month["id"],
            "completed": month["completed"],
            "quarter_completed": self.session.bundle["completed"],
        })

    handlers = {
        "quarter.open": open_quarter,
        "trade.add": add_trade,
        "trade.update": update_trade,
        "trade.delete": delete_trade,
        "trade.open": open_trade,
        "trade.close": close_trade,
        "month.notes": set_month_notes,
        "month.toggle": toggle_month,
    }

    # ------------------------------------------------------
    # Group relay
    # ------------------------------------------------------

    async def trading_update(self, event):
        """
        Handler for trading.update group messages
        event = {
            "type": "trading.update",
            "kind": "...",
            "source": <channel name or None>,
            "data": {...}
        }
        """
        if event.get("source") == self.channel_name:
            return

        await self.send_json({
            "type": "journal.update",
            "kind": event.get("kind"),
            "data": event.get("data")
        })
