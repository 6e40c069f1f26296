# apps/trading/lifecycle.py
"""
Trade lifecycle: Draft → Open → Closed.

A draft is created with direction=buy, session=london and no risk/result.
Opening requires pair, confluences, the "before" chart link and an image.
Closing requires a result and the final risk:reward and stamps the duration.
"""
import re
from datetime import datetime, time

from django.conf import settings
from django.utils import timezone

DRAFT = "draft"
OPEN = "open"
CLOSED = "closed"

RESULTS = ("win", "loss", "break_even")

# field → label used in validation messages
REQUIRED_TO_OPEN = {
    "pair": "Par",
    "confluences": "Confluencias",
    "link_before": "Link antes",
    "image_ref": "Imagen",
}

# still editable once a trade is closed
CLOSED_EDITABLE_FIELDS = {"notes", "link_after", "link_before", "image_ref"}

_UI_DATETIME_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s+(\d{1,2}):(\d{2}))?$")
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


class TradeTransitionError(Exception):
    """Raised when a lifecycle transition is not allowed. No write happens."""

    def __init__(self, message, missing=None):
        super().__init__(message)
        self.message = message
        self.missing = list(missing or [])


def new_draft_defaults():
    return {
        "trade_date": None,
        "opened_at": None,
        "pair": "",
        "direction": "buy",
        "session": "london",
        "risk_percent": None,
        "status": DRAFT,
        "result": "",
        "final_rr": "",
        "duration": "",
        "confluences": "",
        "notes": "",
        "image_ref": "",
        "link_before": "",
        "link_after": "",
    }


def _get(trade, field):
    if isinstance(trade, dict):
        return trade.get(field)
    return getattr(trade, field, None)


# ------------------------------------------------------
# Date parsing / formatting
# ------------------------------------------------------

def parse_ui_datetime(value):
    """
    "DD/MM/YYYY" or "DD/MM/YYYY HH:MM" → naive datetime, None if unparsable.
    """
    if not value:
        return None
    m = _UI_DATETIME_RE.match(value.strip())
    if not m:
        return None
    dd, mm, yyyy = int(m.group(1)), int(m.group(2)), int(m.group(3))
    hh = int(m.group(4)) if m.group(4) else 0
    mi = int(m.group(5)) if m.group(5) else 0
    try:
        return datetime(yyyy, mm, dd, hh, mi)
    except ValueError:
        return None


def parse_ui_date(value):
    """Accepts "YYYY-MM-DD" or "DD/MM/YYYY[ HH:MM]"; returns a date or None."""
    if not value:
        return None
    v = value.strip()
    m = _ISO_DATE_RE.match(v)
    if m:
        try:
            return datetime(int(m.group(1)), int(m.group(2)), int(m.group(3))).date()
        except ValueError:
            return None
    parsed = parse_ui_datetime(v)
    return parsed.date() if parsed else None


def format_ui_date(value):
    if not value:
        return ""
    return value.strftime("%d/%m/%Y")


def format_ui_datetime(value):
    if not value:
        return ""
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.strftime("%d/%m/%Y %H:%M")


def _plural(n, singular, plural):
    return f"{n} {singular if n == 1 else plural}"


def format_duration(start, end):
    """
    Human-readable elapsed time in whole units:
    months (30 days) → weeks → days → "Hh Mm" → minutes.
    """
    if start is None or end is None:
        return "—"

    diff = end - start
    total_seconds = diff.total_seconds()
    if total_seconds <= 0:
        return "—"

    minutes = int(total_seconds // 60)
    hours = int(total_seconds // 3600)
    days = int(total_seconds // 86400)
    weeks = days // 7
    months = days // 30

    if months >= 1:
        return _plural(months, "mes", "meses")
    if weeks >= 1:
        return _plural(weeks, "semana", "semanas")
    if days >= 1:
        return _plural(days, "día", "días")
    if hours >= 1:
        rest = minutes % 60
        return f"{hours}h {rest}m" if rest > 0 else f"{hours}h"
    return f"{minutes}m"


# ------------------------------------------------------
# Transitions
# ------------------------------------------------------

def missing_open_fields(trade):
    return [
        field for field in REQUIRED_TO_OPEN
        if not (_get(trade, field) or "").strip()
    ]


def can_open(trade) -> bool:
    return _get(trade, "status") == DRAFT and not missing_open_fields(trade)


def open_refusal(trade):
    """Error explaining why ``trade`` (model or dict) cannot be opened."""
    status = _get(trade, "status")
    if status != DRAFT:
        return TradeTransitionError(f"Only draft trades can be opened (status={status})")

    missing = missing_open_fields(trade)
    labels = ", ".join(REQUIRED_TO_OPEN[f] for f in missing)
    return TradeTransitionError(f"Campos incompletos: {labels}", missing=missing)


def open_trade(trade, now=None):
    """Draft → Open. Mutates and returns the trade (model instance)."""
    if not can_open(trade):
        raise open_refusal(trade)

    now = now or timezone.now()
    if trade.opened_at is None:
        local_now = timezone.localtime(now) if timezone.is_aware(now) else now
        day = trade.trade_date or local_now.date()
        opened = datetime.combine(day, local_now.time().replace(second=0, microsecond=0))
        if timezone.is_aware(now):
            opened = timezone.make_aware(opened, timezone.get_current_timezone())
        trade.opened_at = opened
        if trade.trade_date is None:
            trade.trade_date = day

    trade.status = OPEN
    return trade


def opened_reference(trade):
    """Datetime the duration is measured from (opened_at, else trade date at 00:00)."""
    if trade.opened_at is not None:
        return trade.opened_at
    if trade.trade_date is not None:
        start = datetime.combine(trade.trade_date, time.min)
        if settings.USE_TZ:
            start = timezone.make_aware(start, timezone.get_current_timezone())
        return start
    return None


def close_trade(trade, result, final_rr, now=None):
    """Open → Closed. Requires a result and the final R:R string."""
    if trade.status != OPEN:
        raise TradeTransitionError(f"Only open trades can be closed (status={trade.status})")

    if result not in RESULTS:
        raise TradeTransitionError("Selecciona un resultado (Win / Loss / Break Even)", missing=["result"])

    if not (final_rr or "").strip():
        raise TradeTransitionError("Indica el R:R final", missing=["final_rr"])

    now = now or timezone.now()
    trade.result = result
    trade.final_rr = final_rr.strip()
    trade.duration = format_duration(opened_reference(trade), now)
    trade.status = CLOSED
    return trade


def editable_fields(status):
    """Fields a PATCH may touch in the given state (None → all)."""
    if status == CLOSED:
        return CLOSED_EDITABLE_FIELDS
    return None
