# apps/trading/session.py
"""
In-memory editing session over one loaded quarter bundle.

Mutations are applied to the local bundle first and written to the store
afterwards: field edits through the debouncer, structural changes
(add/delete/toggle) right away. Write failures are logged and swallowed;
the local state is never rolled back.
"""
import logging

from channels.db import database_sync_to_async
from django.conf import settings

from apps.analytics import metrics as journal_metrics

from . import lifecycle, quarters, repository
from .debounce import Debouncer
from .quarters import is_quarter_complete
from .serializers import format_risk_percent

logger = logging.getLogger(__name__)


class RepositoryStore:
    """Async facade over ``apps.trading.repository`` for one user."""

    def __init__(self, user):
        self.user = user

    async def load(self, year, quarter):
        return await database_sync_to_async(repository.load_quarter_bundle)(
            self.user, year, quarter
        )

    async def create_trade(self, month_id):
        return await database_sync_to_async(repository.create_trade)(self.user, month_id)

    async def update_trade(self, trade_id, snapshot):
        return await database_sync_to_async(repository.update_trade)(
            self.user, trade_id, snapshot
        )

    async def delete_trade(self, trade_id):
        await database_sync_to_async(repository.delete_trade)(self.user, trade_id)

    async def open_trade(self, trade_id):
        return await database_sync_to_async(repository.open_trade)(self.user, trade_id)

    async def close_trade(self, trade_id, result, final_rr):
        return await database_sync_to_async(repository.close_trade)(
            self.user, trade_id, result, final_rr
        )

    async def update_month(self, month_id, notes=None, completed=None):
        return await database_sync_to_async(repository.update_month)(
            self.user, month_id, notes=notes, completed=completed
        )


def trade_key(trade_id):
    return f"trade:{trade_id}"


def month_notes_key(month_id):
    return f"month-notes:{month_id}"


class QuarterSession:

    def __init__(self, store, debouncer=None, trade_delay=None, notes_delay=None):
        self.store = store
        self.debouncer = debouncer or Debouncer()
        self.trade_delay = (
            settings.JOURNAL_TRADE_WRITE_DELAY if trade_delay is None else trade_delay
        )
        self.notes_delay = (
            settings.JOURNAL_MONTH_NOTES_WRITE_DELAY if notes_delay is None else notes_delay
        )

        self.bundle = None
        self._generation = 0
        self._revision = 0
        self._metrics = None    # (revision, today, result)

    # ------------------------------------------------------
    # Loading
    # ------------------------------------------------------

    async def load(self, year, quarter):
        """
        Load a bundle. Returns None when a newer load started meanwhile;
        store errors propagate to the caller.
        """
        self._generation += 1
        generation = self._generation

        bundle = await self.store.load(year, quarter)

        if generation != self._generation:
            logger.debug(f"Discarding stale bundle {year} Q{quarter}")
            return None

        self.bundle = bundle
        self._changed()
        return bundle

    @property
    def loaded(self):
        return self.bundle is not None

    # ------------------------------------------------------
    # Lookups
    # ------------------------------------------------------

    def _month(self, month_name):
        if self.bundle is None:
            return None
        for month in self.bundle["months"]:
            if month["month"] == month_name:
                return month
        return None

    def _find_trade(self, trade_id):
        if self.bundle is None:
            return None, None
        trade_id = str(trade_id)
        for month in self.bundle["months"]:
            for trade in month["trades"]:
                if trade["id"] == trade_id:
                    return month, trade
        return None, None

    def _changed(self):
        self._revision += 1

    async def _write(self, action, coro):
        try:
            return await coro
        except Exception:
            logger.exception(f"{action} failed")
            return None

    # ------------------------------------------------------
    # Trades
    # ------------------------------------------------------

    async def add_trade(self, month_name):
        month = self._month(month_name)
        if month is None:
            logger.warning(f"add_trade: month {month_name} not loaded")
            return None

        trade = await self._write("Create trade", self.store.create_trade(month["id"]))
        if trade is None:
            return None

        # the month may have been replaced by a reload while awaiting
        month = self._month(month_name)
        if month is not None and month["id"] == trade["month_id"]:
            month["trades"].append(trade)
            self._changed()
        return trade

    def update_trade(self, trade_id, changes):
        """Apply field edits locally and schedule a coalesced write."""
        _, trade = self._find_trade(trade_id)
        if trade is None:
            logger.warning(f"update_trade: trade {trade_id} not loaded")
            return None

        allowed = lifecycle.editable_fields(trade["status"])
        applied = {
            key: value for key, value in changes.items()
            if key in repository.UPDATABLE_FIELDS
            and (allowed is None or key in allowed)
        }
        if not applied:
            return trade
        if "risk_percent" in applied:
            applied["risk_percent"] = format_risk_percent(
                repository.parse_risk_percent(applied["risk_percent"])
            )

        trade.update(applied)
        self._changed()

        snapshot = dict(trade)
        self.debouncer.schedule(
            trade_key(trade["id"]),
            self.trade_delay,
            lambda: self.store.update_trade(snapshot["id"], snapshot),
        )
        return trade

    async def delete_trade(self, trade_id):
        month, trade = self._find_trade(trade_id)
        if trade is None:
            return False

        month["trades"].remove(trade)
        self._changed()

        self.debouncer.cancel(trade_key(trade["id"]))
        await self._write("Delete trade", self.store.delete_trade(trade["id"]))
        return True

    async def open_trade(self, trade_id):
        """Draft → Open. Missing fields raise before anything is written."""
        _, trade = self._find_trade(trade_id)
        if trade is None:
            return None
        if not lifecycle.can_open(trade):
            raise lifecycle.open_refusal(trade)

        # pending field edits must land before the transition is checked remotely
        await self.debouncer.flush(trade_key(trade["id"]))

        saved = await self._write("Open trade", self.store.open_trade(trade["id"]))
        return self._replace_trade(saved)

    async def close_trade(self, trade_id, result, final_rr):
        _, trade = self._find_trade(trade_id)
        if trade is None:
            return None
        if trade["status"] != lifecycle.OPEN:
            raise lifecycle.TradeTransitionError(
                f"Only open trades can be closed (status={trade['status']})"
            )
        if result not in lifecycle.RESULTS:
            raise lifecycle.TradeTransitionError(
                "Selecciona un resultado (Win / Loss / Break Even)", missing=["result"]
            )
        if not (final_rr or "").strip():
            raise lifecycle.TradeTransitionError("Indica el R:R final", missing=["final_rr"])

        await self.debouncer.flush(trade_key(trade["id"]))

        saved = await self._write(
            "Close trade", self.store.close_trade(trade["id"], result, final_rr)
        )
        return self._replace_trade(saved)

    def _replace_trade(self, saved):
        if saved is None:
            return None
        month, trade = self._find_trade(saved["id"])
        if trade is None:
            return saved
        index = month["trades"].index(trade)
        month["trades"][index] = saved
        self._changed()
        return saved

    # ------------------------------------------------------
    # Months
    # ------------------------------------------------------

    def set_month_notes(self, month_name, notes):
        month = self._month(month_name)
        if month is None:
            return None

        month["notes"] = notes
        self._changed()

        month_id = month["id"]
        self.debouncer.schedule(
            month_notes_key(month_id),
            self.notes_delay,
            lambda: self.store.update_month(month_id, notes=notes),
        )
        return month

    async def toggle_month(self, month_name):
        month = self._month(month_name)
        if month is None:
            return None

        month["completed"] = not month["completed"]
        self.bundle["completed"] = is_quarter_complete(self.bundle["months"])
        self._changed()

        await self._write(
            "Toggle month",
            self.store.update_month(month["id"], completed=month["completed"]),
        )
        return month

    # ------------------------------------------------------
    # Derived state
    # ------------------------------------------------------

    def metrics(self, today=None):
        """Header metrics, recomputed only when the bundle changed."""
        if self.bundle is None:
            return None
        today = today or quarters.today()
        cached = self._metrics
        if cached is not None and cached[0] == self._revision and cached[1] == today:
            return cached[2]

        result = journal_metrics.summary_metrics(self.bundle, today)
        self._metrics = (self._revision, today, result)
        return result

    async def close(self):
        """Push every pending write before the session goes away."""
        await self.debouncer.flush()
