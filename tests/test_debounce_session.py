"""Tests for debounced writes and the in-memory quarter session.

**Feature: trading-journal**
"""

import asyncio
from datetime import date

import pytest

from apps.trading.debounce import Debouncer
from apps.trading.lifecycle import TradeTransitionError
from apps.trading.session import QuarterSession, month_notes_key, trade_key

from .factories import make_bundle, make_trade


class FakeStore:
    """Records every call; optionally fails or blocks on load."""

    def __init__(self, bundles=None, fail=False):
        self.bundles = bundles or {}
        self.fail = fail
        self.calls = []
        self.load_gates = {}
        self._next_number = 100

    async def load(self, year, quarter):
        gate = self.load_gates.get((year, quarter))
        if gate is not None:
            await gate.wait()
        self.calls.append(("load", year, quarter))
        return self.bundles[(year, quarter)]

    async def create_trade(self, month_id):
        self.calls.append(("create_trade", month_id))
        if self.fail:
            raise RuntimeError("store down")
        self._next_number += 1
        return make_trade(id=f"new-{self._next_number}", month_id=month_id,
                          trade_number=self._next_number)

    async def update_trade(self, trade_id, snapshot):
        self.calls.append(("update_trade", trade_id, dict(snapshot)))
        if self.fail:
            raise RuntimeError("store down")
        return snapshot

    async def delete_trade(self, trade_id):
        self.calls.append(("delete_trade", trade_id))
        if self.fail:
            raise RuntimeError("store down")

    async def open_trade(self, trade_id):
        self.calls.append(("open_trade", trade_id))
        return make_trade(id=trade_id, status="open", pair="EURUSD")

    async def close_trade(self, trade_id, result, final_rr):
        self.calls.append(("close_trade", trade_id, result, final_rr))
        return make_trade(id=trade_id, status="closed", result=result, final_rr=final_rr)

    async def update_month(self, month_id, notes=None, completed=None):
        self.calls.append(("update_month", month_id, notes, completed))
        if self.fail:
            raise RuntimeError("store down")
        return {}

    def named(self, name):
        return [c for c in self.calls if c[0] == name]


def one_trade_bundle(**trade):
    return make_bundle(2025, 1, trades_per_month=([make_trade(id="t-1", **trade)], (), ()))


async def loaded_session(bundle=None, fail=False):
    store = FakeStore({(2025, 1): bundle or one_trade_bundle()}, fail=fail)
    session = QuarterSession(store, trade_delay=0.01, notes_delay=0.01)
    await session.load(2025, 1)
    return session, store


class TestDebouncer:

    async def test_coalesces_writes_per_key(self):
        debouncer = Debouncer()
        written = []

        for value in range(5):
            async def write(v=value):
                written.append(v)
            debouncer.schedule("k", 0.01, write)

        await asyncio.sleep(0.05)

        assert written == [4]
        assert debouncer.pending == []

    async def test_keys_are_independent(self):
        debouncer = Debouncer()
        written = []

        async def write_a():
            written.append("a")

        async def write_b():
            written.append("b")

        debouncer.schedule("a", 0.01, write_a)
        debouncer.schedule("b", 0.01, write_b)
        await asyncio.sleep(0.05)

        assert sorted(written) == ["a", "b"]

    async def test_failure_is_swallowed(self, caplog):
        debouncer = Debouncer()

        async def write():
            raise RuntimeError("boom")

        debouncer.schedule("k", 0.01, write)
        await asyncio.sleep(0.05)

        assert "Debounced write k failed" in caplog.text

    async def test_flush_fires_immediately(self):
        debouncer = Debouncer()
        written = []

        async def write():
            written.append(1)

        debouncer.schedule("k", 60, write)
        await debouncer.flush()

        assert written == [1]
        assert debouncer.pending == []

    async def test_flush_single_key(self):
        debouncer = Debouncer()
        written = []

        async def write_a():
            written.append("a")

        async def write_b():
            written.append("b")

        debouncer.schedule("a", 60, write_a)
        debouncer.schedule("b", 60, write_b)
        await debouncer.flush("a")

        assert written == ["a"]
        assert debouncer.pending == ["b"]
        debouncer.cancel("b")

    async def test_cancel(self):
        debouncer = Debouncer()
        written = []

        async def write():
            written.append(1)

        debouncer.schedule("k", 0.01, write)
        assert debouncer.cancel("k") is True
        assert debouncer.cancel("k") is False
        await asyncio.sleep(0.05)

        assert written == []


class TestQuarterSessionLoad:

    async def test_stale_load_is_discarded(self):
        q1 = make_bundle(2025, 1)
        q2 = make_bundle(2025, 2)
        store = FakeStore({(2025, 1): q1, (2025, 2): q2})
        gate = asyncio.Event()
        store.load_gates[(2025, 1)] = gate
        session = QuarterSession(store, trade_delay=0.01, notes_delay=0.01)

        slow = asyncio.ensure_future(session.load(2025, 1))
        await asyncio.sleep(0)
        fast = await session.load(2025, 2)
        gate.set()

        assert await slow is None
        assert fast is q2
        assert session.bundle is q2

    async def test_load_error_propagates(self):
        session = QuarterSession(FakeStore({}), trade_delay=0.01, notes_delay=0.01)

        with pytest.raises(KeyError):
            await session.load(2030, 4)
        assert not session.loaded


class TestQuarterSessionTrades:

    async def test_optimistic_update_writes_last_snapshot_once(self):
        session, store = await loaded_session()

        session.update_trade("t-1", {"pair": "EUR"})
        session.update_trade("t-1", {"pair": "EURUSD", "notes": "patient"})

        trade = session.bundle["months"][0]["trades"][0]
        assert trade["pair"] == "EURUSD"
        assert store.named("update_trade") == []

        await asyncio.sleep(0.05)

        writes = store.named("update_trade")
        assert len(writes) == 1
        assert writes[0][2]["pair"] == "EURUSD"
        assert writes[0][2]["notes"] == "patient"

    async def test_update_ignores_unknown_and_read_only_keys(self):
        session, store = await loaded_session()

        session.update_trade("t-1", {"status": "closed", "trade_number": 7})
        await session.close()

        assert session.bundle["months"][0]["trades"][0]["status"] == "draft"
        assert store.named("update_trade") == []

    async def test_closed_trade_edits_are_limited(self):
        session, store = await loaded_session(one_trade_bundle(status="closed", pair="EURUSD"))

        session.update_trade("t-1", {"pair": "GBPUSD", "notes": "review"})
        await session.close()

        trade = session.bundle["months"][0]["trades"][0]
        assert trade["pair"] == "EURUSD"
        assert trade["notes"] == "review"

    @pytest.mark.parametrize("raw, expected", [
        ("2,5", "2.5"),
        (" 1.50 ", "1.5"),
        ("abc", ""),
        ("", ""),
    ])
    async def test_risk_is_normalized_locally(self, raw, expected):
        """Local risk reads the same as it will once the store has it."""
        session, store = await loaded_session()

        session.update_trade("t-1", {"risk_percent": raw})

        assert session.bundle["months"][0]["trades"][0]["risk_percent"] == expected
        await session.close()
        assert store.named("update_trade")[0][2]["risk_percent"] == expected

    async def test_write_failure_keeps_local_state(self, caplog):
        session, store = await loaded_session(fail=True)

        session.update_trade("t-1", {"pair": "EURUSD"})
        await session.close()

        assert session.bundle["months"][0]["trades"][0]["pair"] == "EURUSD"
        assert "failed" in caplog.text

    async def test_add_trade_appends_store_row(self):
        session, store = await loaded_session()

        trade = await session.add_trade("Febrero")

        assert trade["month_id"] == "m-2"
        assert session.bundle["months"][1]["trades"] == [trade]

    async def test_add_trade_failure_adds_nothing(self):
        session, store = await loaded_session(fail=True)

        assert await session.add_trade("Febrero") is None
        assert session.bundle["months"][1]["trades"] == []

    async def test_delete_cancels_pending_write(self):
        session, store = await loaded_session()

        session.update_trade("t-1", {"pair": "EURUSD"})
        assert trade_key("t-1") in session.debouncer.pending

        assert await session.delete_trade("t-1") is True
        await asyncio.sleep(0.05)

        assert store.named("update_trade") == []
        assert store.named("delete_trade") == [("delete_trade", "t-1")]
        assert session.bundle["months"][0]["trades"] == []

    async def test_delete_unknown_trade(self):
        session, store = await loaded_session()
        assert await session.delete_trade("nope") is False

    async def test_open_with_missing_fields_writes_nothing(self):
        session, store = await loaded_session()

        with pytest.raises(TradeTransitionError) as exc:
            await session.open_trade("t-1")

        assert "pair" in exc.value.missing
        assert store.named("open_trade") == []
        assert session.bundle["months"][0]["trades"][0]["status"] == "draft"

    async def test_open_refuses_non_drafts(self):
        session, store = await loaded_session(one_trade_bundle(status="open", pair="EURUSD"))

        with pytest.raises(TradeTransitionError, match="Only draft trades"):
            await session.open_trade("t-1")

        assert store.named("open_trade") == []

    async def test_open_flushes_pending_edits_first(self):
        session, store = await loaded_session()

        session.update_trade("t-1", {
            "pair": "EURUSD", "confluences": "BOS", "link_before": "l", "image_ref": "i",
        })
        opened = await session.open_trade("t-1")

        names = [c[0] for c in store.calls if c[0] != "load"]
        assert names == ["update_trade", "open_trade"]
        assert opened["status"] == "open"
        assert session.bundle["months"][0]["trades"][0]["status"] == "open"

    async def test_close_requires_result(self):
        session, store = await loaded_session(one_trade_bundle(status="open"))

        with pytest.raises(TradeTransitionError):
            await session.close_trade("t-1", "", "1:2")

        closed = await session.close_trade("t-1", "win", "1:2")
        assert closed["status"] == "closed"
        assert store.named("close_trade") == [("close_trade", "t-1", "win", "1:2")]


class TestQuarterSessionMonths:

    async def test_notes_are_debounced_per_month(self):
        session, store = await loaded_session()

        session.set_month_notes("Enero", "a")
        session.set_month_notes("Enero", "ab")
        session.set_month_notes("Marzo", "x")
        assert month_notes_key("m-1") in session.debouncer.pending

        await asyncio.sleep(0.05)

        writes = store.named("update_month")
        assert sorted((c[1], c[2]) for c in writes) == [("m-1", "ab"), ("m-3", "x")]

    async def test_notes_survive_a_quarter_switch(self):
        """Same month name in another year keeps both pending writes."""
        store = FakeStore({
            (2025, 1): make_bundle(2025, 1),
            (2026, 1): make_bundle(2026, 1, month_prefix="y26-m"),
        })
        session = QuarterSession(store, trade_delay=0.01, notes_delay=0.01)

        await session.load(2025, 1)
        session.set_month_notes("Enero", "notes for 2025")
        await session.load(2026, 1)
        session.set_month_notes("Enero", "notes for 2026")

        await asyncio.sleep(0.05)

        writes = sorted((c[1], c[2]) for c in store.named("update_month"))
        assert writes == [("m-1", "notes for 2025"), ("y26-m-1", "notes for 2026")]

    async def test_toggle_recomputes_quarter_flag(self):
        bundle = make_bundle(2025, 1, completed=(True, True, False))
        session, store = await loaded_session(bundle)

        await session.toggle_month("Marzo")
        assert session.bundle["completed"] is True

        await session.toggle_month("Enero")
        assert session.bundle["completed"] is False
        assert store.named("update_month")[-1] == ("update_month", "m-1", None, False)

    async def test_toggle_failure_keeps_local_flag(self):
        session, store = await loaded_session(fail=True)

        month = await session.toggle_month("Enero")
        assert month["completed"] is True


class TestSessionMetrics:

    async def test_memoized_until_bundle_changes(self):
        session, store = await loaded_session()
        today = date(2025, 1, 10)

        first = session.metrics(today)
        assert session.metrics(today) is first

        session.update_trade("t-1", {"risk_percent": "2"})
        second = session.metrics(today)

        assert second is not first
        assert second["accumulated_risk"] == 2.0
        session.debouncer.cancel(trade_key("t-1"))

    async def test_comma_risk_counts_in_live_metrics(self):
        session, store = await loaded_session()

        session.update_trade("t-1", {"risk_percent": "2,5"})

        assert session.metrics(date(2025, 1, 10))["accumulated_risk"] == 2.5
        await session.close()

    async def test_default_day_follows_the_clock(self, monkeypatch):
        """Without an explicit day, a date change alone refreshes the summary."""
        from apps.trading import quarters

        session, store = await loaded_session()
        days = iter([date(2025, 1, 31), date(2025, 2, 1)])
        monkeypatch.setattr(quarters, "today", lambda: next(days))

        assert session.metrics()["month"] == "Enero"
        assert session.metrics()["month"] == "Febrero"

    async def test_no_bundle(self):
        session = QuarterSession(FakeStore(), trade_delay=0.01, notes_delay=0.01)
        assert session.metrics() is None
