# apps/trading/repository.py
"""
Store operations for the trading journal.

Every function takes the authenticated user first and only ever touches
rows owned by that user.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from apps.users.errors import RepoError, require_user, store_errors

from . import lifecycle
from .models import Trade, TradingMonth, TradingQuarter
from .quarters import is_valid_quarter, quarter_months
from .serializers import TradeSerializer, TradingMonthSerializer

logger = logging.getLogger(__name__)

# snapshot keys a trade update may write (API name → model field)
UPDATABLE_FIELDS = {
    "date": "trade_date",
    "pair": "pair",
    "direction": "direction",
    "session": "session",
    "risk_percent": "risk_percent",
    "result": "result",
    "final_rr": "final_rr",
    "confluences": "confluences",
    "notes": "notes",
    "image_ref": "image_ref",
    "link_before": "link_before",
    "link_after": "link_after",
}

_RISK_LIMIT = Decimal("10000")
_CENT = Decimal("0.01")


class TradingRepoError(RepoError):
    pass


class InvalidQuarterError(TradingRepoError):
    pass


def serialize_trade(trade):
    return dict(TradeSerializer(trade).data)


def serialize_month(month, trades=()):
    data = dict(TradingMonthSerializer(month).data)
    data["trades"] = [serialize_trade(t) for t in trades]
    return data


def parse_risk_percent(value):
    """Decimal risk from user input, None when blank or not a number."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        raw = value
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return None
        try:
            raw = Decimal(text)
        except InvalidOperation:
            return None
    if not raw.is_finite() or abs(raw) >= _RISK_LIMIT:
        return None
    return raw.quantize(_CENT)


# ============================================================
# QUARTER BUNDLE
# ============================================================

def _ensure_quarter(user, year, quarter):
    quarter_row, created = TradingQuarter.objects.get_or_create(
        user=user,
        year=year,
        quarter=quarter,
        defaults={"completed": False},
    )
    if created:
        logger.info(f"Created trading quarter {year} Q{quarter} for {user}")

    names = quarter_months(quarter)
    existing = {m.month_name: m for m in quarter_row.months.all()}
    missing = [name for name in names if name not in existing]

    if missing:
        TradingMonth.objects.bulk_create([
            TradingMonth(quarter=quarter_row, month_name=name, year=year)
            for name in missing
        ])
        existing = {m.month_name: m for m in quarter_row.months.all()}

    return quarter_row, [existing[name] for name in names]


def load_quarter_bundle(user, year, quarter):
    """
    Ensure the quarter and its three months exist and return the whole
    bundle: months in calendar order, each with its trades ordered by
    trade number.
    """
    require_user(user, TradingRepoError)
    year = int(year)
    quarter = int(quarter)
    if not is_valid_quarter(quarter):
        raise InvalidQuarterError(f"Invalid quarter: {quarter}")

    with store_errors(TradingRepoError, f"Load quarter {year} Q{quarter}"):
        with transaction.atomic():
            quarter_row, months = _ensure_quarter(user, year, quarter)

            trades_by_month = {m.id: [] for m in months}
            trades = Trade.objects.filter(
                month__in=[m.id for m in months]
            ).order_by("trade_number")

            for trade in trades:
                trades_by_month[trade.month_id].append(trade)

    return {
        "id": str(quarter_row.id),
        "year": quarter_row.year,
        "quarter": quarter_row.quarter,
        "completed": quarter_row.completed,
        "months": [serialize_month(m, trades_by_month[m.id]) for m in months],
    }


def load_year_bundles(user, year):
    return [load_quarter_bundle(user, year, q) for q in (1, 2, 3, 4)]


# ============================================================
# MONTHS
# ============================================================

def resolve_month(user, year, quarter, month_name):
    """Month row by name, creating the quarter skeleton when needed."""
    require_user(user, TradingRepoError)
    if not is_valid_quarter(quarter):
        raise InvalidQuarterError(f"Invalid quarter: {quarter}")
    if month_name not in quarter_months(quarter):
        raise InvalidQuarterError(f"{month_name} is not part of Q{quarter}")

    with store_errors(TradingRepoError, "Resolve month"):
        with transaction.atomic():
            _, months = _ensure_quarter(user, year, quarter)
    return next(m for m in months if m.month_name == month_name)


def update_month(user, month_id, notes=None, completed=None):
    """
    Update notes and/or the completion flag of a month.
    A completion change recomputes and persists the quarter flag.
    """
    require_user(user, TradingRepoError)

    with store_errors(TradingRepoError, "Update month"):
        with transaction.atomic():
            month = TradingMonth.objects.select_related("quarter").get(
                id=month_id, quarter__user=user
            )
            fields = ["updated_at"]
            if notes is not None:
                month.notes = notes
                fields.append("notes")
            if completed is not None:
                month.completed = bool(completed)
                fields.append("completed")
            month.save(update_fields=fields)

            quarter_row = month.quarter
            if completed is not None:
                flags = list(quarter_row.months.values_list("completed", flat=True))
                quarter_row.completed = len(flags) == 3 and all(flags)
                quarter_row.save(update_fields=["completed", "updated_at"])

    return {
        "month": serialize_month(month, month.trades.order_by("trade_number")),
        "quarter_completed": quarter_row.completed,
    }


# ============================================================
# TRADES
# ============================================================

def _get_trade(user, trade_id, lock=False):
    qs = Trade.objects.filter(user=user)
    if lock:
        qs = qs.select_for_update()
    return qs.get(id=trade_id)


def create_trade(user, month_id):
    """Append a new draft to a month with number max + 1."""
    require_user(user, TradingRepoError)

    with store_errors(TradingRepoError, "Create trade"):
        with transaction.atomic():
            month = TradingMonth.objects.select_for_update().get(
                id=month_id, quarter__user=user
            )
            last = month.trades.aggregate(Max("trade_number"))["trade_number__max"] or 0

            trade = Trade.objects.create(
                user=user,
                month=month,
                trade_number=last + 1,
                **lifecycle.new_draft_defaults(),
            )

    logger.info(f"Trade #{trade.trade_number} created in {month} for {user}")
    return serialize_trade(trade)


def _apply_changes(trade, changes):
    allowed = lifecycle.editable_fields(trade.status)
    touched = []

    for key, value in changes.items():
        field = UPDATABLE_FIELDS.get(key)
        if field is None:
            continue
        if allowed is not None and key not in allowed:
            logger.debug(f"Ignoring {key} on closed trade {trade.id}")
            continue

        if field == "trade_date":
            if value in (None, ""):
                value = None
            else:
                parsed = lifecycle.parse_ui_date(str(value))
                if parsed is None:
                    continue
                value = parsed
        elif field == "risk_percent":
            value = parse_risk_percent(value)
        elif value is None:
            value = ""

        setattr(trade, field, value)
        touched.append(field)

    return touched


def update_trade(user, trade_id, changes):
    """Write the given fields (a partial dict or a full snapshot)."""
    require_user(user, TradingRepoError)

    with store_errors(TradingRepoError, "Update trade"):
        with transaction.atomic():
            trade = _get_trade(user, trade_id, lock=True)
            touched = _apply_changes(trade, changes)
            if touched:
                trade.save(update_fields=touched + ["updated_at"])

    return serialize_trade(trade)


def delete_trade(user, trade_id):
    require_user(user, TradingRepoError)

    with store_errors(TradingRepoError, "Delete trade"):
        deleted, _ = Trade.objects.filter(user=user, id=trade_id).delete()

    if not deleted:
        raise Trade.DoesNotExist(f"Trade {trade_id} not found")
    logger.info(f"Trade {trade_id} deleted for {user}")


def open_trade(user, trade_id, now=None):
    require_user(user, TradingRepoError)

    with store_errors(TradingRepoError, "Open trade"):
        with transaction.atomic():
            trade = _get_trade(user, trade_id, lock=True)
            lifecycle.open_trade(trade, now or timezone.now())
            trade.save(update_fields=["status", "opened_at", "trade_date", "updated_at"])

    return serialize_trade(trade)


def close_trade(user, trade_id, result, final_rr, now=None):
    require_user(user, TradingRepoError)

    with store_errors(TradingRepoError, "Close trade"):
        with transaction.atomic():
            trade = _get_trade(user, trade_id, lock=True)
            lifecycle.close_trade(trade, result, final_rr, now or timezone.now())
            trade.save(update_fields=["status", "result", "final_rr", "duration", "updated_at"])

    return serialize_trade(trade)
