# apps/analytics/metrics.py
"""
Derived journal metrics.

Everything here is a pure function over serialized data: trades and
bundles as produced by ``apps.trading.repository`` and growth rows as
produced by ``GrowthAccountSerializer``. Nothing touches the database.

Each risk scale (header card, header badge, banner, per-month panel,
yearly report) has its own thresholds and its own function.
"""
import re
from collections import Counter

from django.conf import settings

from apps.trading import quarters

RISK_MAX_MONTHLY = 6

RESULT_KEYS = ("win", "loss", "break_even")
SESSION_KEYS = ("london", "new_york", "asian", "sydney")

_LEADING_NUMBER_RE = re.compile(r"^\s*[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")


def risk_limit():
    return getattr(settings, "JOURNAL_RISK_MAX_MONTHLY", RISK_MAX_MONTHLY)


def _number(value):
    """Leading decimal of ``value`` as float, 0 when there is none."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER_RE.match(str(value))
        if not match:
            return 0.0
        number = float(match.group(0))
    if number != number or number in (float("inf"), float("-inf")):
        return 0.0
    return number


def _pct(part, total):
    return (part / total) * 100 if total > 0 else 0.0


def all_trades(bundles):
    return [
        trade
        for bundle in bundles
        for month in bundle["months"]
        for trade in month["trades"]
    ]


# ------------------------------------------------------
# Risk
# ------------------------------------------------------

def parse_risk(value) -> float:
    return _number(value)


def monthly_risk(trades) -> float:
    return sum(parse_risk(t.get("risk_percent")) for t in trades)


def risk_status(risk) -> str:
    """Summary card: Normal ≤ 3 < Alerta ≤ 5 < Crítico."""
    if risk > 5:
        return "Crítico"
    if risk > 3:
        return "Alerta"
    return "Normal"


def header_risk_badge(risk) -> str:
    if risk >= 6:
        return "CRÍTICO"
    if risk >= 4:
        return "ALERTA"
    return "NORMAL"


def risk_banner_visible(risk, limit=None) -> bool:
    return risk >= (risk_limit() if limit is None else limit)


def month_risk_level(risk, limit=None) -> str:
    """Per-month panel of the journal page."""
    if risk >= (risk_limit() if limit is None else limit):
        return "Límite alcanzado"
    if risk >= 5:
        return "Cerca del límite"
    return "Normal"


def report_risk_status(risk_used_pct) -> str:
    if risk_used_pct >= 100:
        return "EXCEDIDO"
    if risk_used_pct >= 80:
        return "ALERTA"
    return "NORMAL"


# ------------------------------------------------------
# Results, R:R, sessions, pairs
# ------------------------------------------------------

def result_counts(trades):
    counts = Counter(t.get("result") for t in trades)
    return {key: counts.get(key, 0) for key in RESULT_KEYS}


def result_percentages(trades):
    """Share of each result over all trades in scope; all 0 when empty."""
    total = len(trades)
    counts = result_counts(trades)
    return {key: _pct(counts[key], total) for key in RESULT_KEYS}


def rr_reward(value):
    """Reward side of a "risk:reward" string ("1:2" → 2.0), None if not of that form."""
    if not value or ":" not in value:
        return None
    parts = value.split(":")
    if len(parts) != 2:
        return None
    return _number(parts[1])


def average_rr(trades, wins_only=False):
    if wins_only:
        scope = [t for t in trades if t.get("result") == "win" and t.get("final_rr")]
    else:
        scope = [t for t in trades if ":" in (t.get("final_rr") or "")]

    if not scope:
        return 0.0
    total = sum(rr_reward(t.get("final_rr")) or 0.0 for t in scope)
    return total / len(scope)


def session_stats(trades):
    counts = Counter(t.get("session") for t in trades)
    return {key: counts.get(key, 0) for key in SESSION_KEYS}


def best_session(trades):
    if not trades:
        return None
    stats = session_stats(trades)
    return max(SESSION_KEYS, key=lambda key: stats[key])


def direction_counts(trades):
    counts = Counter(t.get("direction") for t in trades)
    return {"buy": counts.get("buy", 0), "sell": counts.get("sell", 0)}


def top_pair(trades):
    counts = Counter(t["pair"] for t in trades if t.get("pair"))
    if not counts:
        return None
    pair, count = counts.most_common(1)[0]
    return {"pair": pair, "count": count}


# ------------------------------------------------------
# Growth
# ------------------------------------------------------

def _chronological(rows):
    return sorted(rows, key=lambda r: (r.get("year") or 0, quarters.month_number(r.get("month"))))


def capital_trajectory(rows):
    """
    Walk rows in calendar order. Capital starts at the first row's initial
    capital and each row adds its gain; the per-row return is relative to
    the row's own initial capital.
    """
    ordered = _chronological(rows)
    if not ordered:
        return []

    capital = _number(ordered[0].get("initial_capital"))
    points = []
    for row in ordered:
        gain = _number(row.get("monthly_gain"))
        own_initial = _number(row.get("initial_capital"))
        start = capital
        capital = start + gain
        points.append({
            "month": row.get("month"),
            "year": row.get("year"),
            "quarter": row.get("quarter"),
            "account_name": row.get("account_name"),
            "starting_capital": start,
            "accumulated_capital": capital,
            "gain": gain,
            "return_pct": _pct(gain, own_initial) if own_initial > 0 else 0.0,
            "target": _number(row.get("monthly_target")),
        })
    return points


def cumulative_capital(rows):
    points = capital_trajectory(rows)
    if not points:
        return []
    return [points[0]["starting_capital"]] + [p["accumulated_capital"] for p in points]


def growth_summary(rows):
    ordered = _chronological(rows)
    if not ordered:
        return {
            "initial_capital": 0.0,
            "current_capital": 0.0,
            "total_gain": 0.0,
            "total_growth": 0.0,
            "monthly_average": 0.0,
        }

    initial = _number(ordered[0].get("initial_capital"))
    gains = sum(_number(r.get("monthly_gain")) for r in ordered)
    current = initial + gains
    return {
        "initial_capital": initial,
        "current_capital": current,
        "total_gain": gains,
        "total_growth": _pct(current - initial, initial) if initial > 0 else 0.0,
        "monthly_average": sum(_number(r.get("monthly_average")) for r in ordered) / len(ordered),
    }


def growth_report(rows):
    total = len(rows)
    statuses = Counter(r.get("status") for r in rows)
    purposes = Counter(r.get("purpose") for r in rows)
    completed = statuses.get("completed", 0)

    return {
        "total_accounts": total,
        "completed_accounts": completed,
        "failed_accounts": statuses.get("failed", 0),
        "total_capital": sum(_number(r.get("initial_capital")) for r in rows),
        "total_gains": sum(_number(r.get("monthly_gain")) for r in rows),
        "total_targets": sum(_number(r.get("monthly_target")) for r in rows),
        "average_monthly": (
            sum(_number(r.get("monthly_average")) for r in rows) / total if total else 0.0
        ),
        "success_rate": _pct(completed, total),
        "purpose_stats": {
            key: purposes.get(key, 0)
            for key in ("practice", "evaluation", "funded", "real")
        },
    }


# ------------------------------------------------------
# Diagnostics
# ------------------------------------------------------

def expectancy(win_rate, avg_rr, loss_rate=None):
    if loss_rate is None:
        loss_rate = 100 - win_rate
    return (win_rate / 100) * avg_rr - (loss_rate / 100)


def health_status(avg_risk, expectation, total_trades):
    if avg_risk <= 2 and expectation > 0 and total_trades >= 10:
        return {"color": "green", "text": "Saludable", "icon": "🟢"}
    if avg_risk > 2 or expectation < -0.5:
        return {"color": "red", "text": "Riesgo", "icon": "🔴"}
    return {"color": "yellow", "text": "En progreso", "icon": "🟡"}


def journal_metrics(bundles):
    trades = all_trades(bundles)
    total = len(trades)
    counts = result_counts(trades)

    return {
        "total_trades": total,
        "wins": counts["win"],
        "losses": counts["loss"],
        "win_rate": _pct(counts["win"], total),
        "avg_rr": average_rr(trades, wins_only=True),
        "avg_risk": monthly_risk(trades) / total if total else 0.0,
    }


def diagnostics(journal, growth_rows):
    expectation = expectancy(journal["win_rate"], journal["avg_rr"])
    status = health_status(journal["avg_risk"], expectation, journal["total_trades"])

    return {
        "expectation": expectation,
        "is_period_complete": bool(growth_rows) and all(
            r.get("status") == "completed" for r in growth_rows
        ),
        "is_risk_controlled": journal["avg_risk"] <= 2,
        "is_expectation_positive": expectation > 0,
        "is_consistent": journal["total_trades"] >= 10,
        "status": status,
    }


def overview(bundles, growth_rows):
    journal = journal_metrics(bundles)
    return {
        "growth": growth_summary(growth_rows),
        "journal": journal,
        "diagnostics": diagnostics(journal, growth_rows),
    }


# ------------------------------------------------------
# Journal page and reports
# ------------------------------------------------------

def quarter_risk_panel(bundle, limit=None):
    panel = []
    for month in bundle["months"]:
        risk = monthly_risk(month["trades"])
        panel.append({
            "month": month["month"],
            "risk": risk,
            "level": month_risk_level(risk, limit),
        })
    return panel


def summary_metrics(bundle, today=None, limit=None):
    """
    Header metrics of the current real-world month. Zeros when ``bundle``
    is not the current quarter.
    """
    today = today or quarters.today()
    limit = risk_limit() if limit is None else limit

    month = None
    if (
        bundle is not None
        and bundle["year"] == quarters.current_year(today)
        and bundle["quarter"] == quarters.current_quarter(today)
    ):
        month = bundle["months"][quarters.current_month_index(today)]

    trades = month["trades"] if month else []
    risk = monthly_risk(trades)
    pct = result_percentages(trades)

    return {
        "month": month["month"] if month else None,
        "total_trades": len(trades),
        "accumulated_risk": risk,
        "risk_limit": limit,
        "remaining_risk": max(0, limit - risk),
        "win_percent": pct["win"],
        "loss_percent": pct["loss"],
        "status": risk_status(risk),
        "badge": header_risk_badge(risk),
        "banner": risk_banner_visible(risk, limit),
        "months": quarter_risk_panel(bundle, limit) if bundle is not None else [],
    }


def trading_report(bundles, limit=None):
    limit = risk_limit() if limit is None else limit
    trades = all_trades(bundles)
    total = len(trades)
    counts = result_counts(trades)
    pct = result_percentages(trades)
    total_risk = monthly_risk(trades)
    risk_used = _pct(total_risk, limit) if limit else 0.0

    quarterly = []
    for bundle in bundles:
        q_trades = all_trades([bundle])
        q_wins = sum(1 for t in q_trades if t.get("result") == "win")
        quarterly.append({
            "quarter": quarters.quarter_label(bundle["quarter"]),
            "trades": len(q_trades),
            "win_rate": _pct(q_wins, len(q_trades)),
        })

    directions = direction_counts(trades)

    return {
        "total_trades": total,
        "wins": counts["win"],
        "losses": counts["loss"],
        "break_even": counts["break_even"],
        "win_rate": pct["win"],
        "win_percent": pct["win"],
        "loss_percent": pct["loss"],
        "break_even_percent": pct["break_even"],
        "session_stats": session_stats(trades),
        "best_session": best_session(trades),
        "buy_trades": directions["buy"],
        "sell_trades": directions["sell"],
        "total_risk": total_risk,
        "avg_risk": total_risk / total if total else 0.0,
        "max_risk": limit,
        "remaining_risk": max(0, limit - total_risk),
        "risk_used_percent": risk_used,
        "risk_status": report_risk_status(risk_used),
        "avg_rr": average_rr(trades),
        "top_pair": top_pair(trades),
        "quarterly_stats": quarterly,
    }
