# apps/trading/quarters.py
"""
Calendar helpers shared by the trading journal, growth accounts and diary.

Month names are the canonical (Spanish) labels stored in the database and
shown to the user.
"""
from django.utils import timezone

QUARTERS = {
    1: ("Enero", "Febrero", "Marzo"),
    2: ("Abril", "Mayo", "Junio"),
    3: ("Julio", "Agosto", "Septiembre"),
    4: ("Octubre", "Noviembre", "Diciembre"),
}

QUARTER_LABELS = {
    1: "Q1",
    2: "Q2",
    3: "Q3",
    4: "Q4",
}

MONTH_NAMES = tuple(name for q in sorted(QUARTERS) for name in QUARTERS[q])

# "Enero" → 1 … "Diciembre" → 12
MONTH_NUMBERS = {name: index + 1 for index, name in enumerate(MONTH_NAMES)}

MONTH_CHOICES = [(name, name) for name in MONTH_NAMES]
QUARTER_CHOICES = [(q, QUARTER_LABELS[q]) for q in sorted(QUARTERS)]


def is_valid_quarter(quarter) -> bool:
    return quarter in QUARTERS


def quarter_months(quarter: int) -> tuple:
    if quarter not in QUARTERS:
        raise ValueError(f"Invalid quarter: {quarter}")
    return QUARTERS[quarter]


def quarter_label(quarter: int) -> str:
    return QUARTER_LABELS[quarter]


def quarter_of_month(month_name: str) -> int:
    for q, names in QUARTERS.items():
        if month_name in names:
            return q
    raise ValueError(f"Unknown month: {month_name}")


def month_number(month_name: str) -> int:
    """Calendar number of a month name, 0 when unknown."""
    return MONTH_NUMBERS.get(month_name, 0)


def today():
    return timezone.localdate()


def current_year(on=None) -> int:
    return (on or today()).year


def current_quarter(on=None) -> int:
    return ((on or today()).month - 1) // 3 + 1


def current_month_index(on=None) -> int:
    """Position (0, 1 or 2) of the current month inside its quarter."""
    return ((on or today()).month - 1) % 3


def is_quarter_complete(months) -> bool:
    return all(month["completed"] for month in months)
