from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Optional

from invoice_engine.core.currency import currency_formatter, fmt_qty


DEFAULT_DATE_FORMAT = "%d %b %Y"


def parse_date(val: Any) -> _dt.date:
    """Coerce a date, datetime or ISO-8601 string to a date.

    Strings may carry a time part ('2026-10-19T00:00:00.000Z'); only the
    calendar date is kept.
    """
    if isinstance(val, _dt.datetime):
        return val.date()
    if isinstance(val, _dt.date):
        return val
    if isinstance(val, str) and val.strip():
        s = val.strip()
        try:
            return _dt.date.fromisoformat(s[:10])
        except ValueError:
            raise ValueError(f"not an ISO date: {val!r}") from None
    raise ValueError(f"not a date: {val!r}")


def format_date(val: Any, pattern: str = DEFAULT_DATE_FORMAT) -> str:
    # Expecting datetime.date; accept string fallback
    if val is None:
        return ""
    if isinstance(val, (_dt.date, _dt.datetime)):
        return val.strftime(pattern)
    try:
        return parse_date(val).strftime(pattern)
    except ValueError:
        return str(val)


@dataclass(frozen=True)
class Formatters:
    """Display formatting used by the layout engine.

    Callers that own locale rules pass their own callables; `from_settings`
    builds the default set from currency code, grouping and date pattern.
    """

    money: Callable[[Decimal], str]
    date: Callable[[_dt.date], str]
    quantity: Callable[[Decimal], str] = fmt_qty

    @classmethod
    def from_settings(cls, settings: Any, symbol: Optional[str] = None) -> "Formatters":
        pattern = settings.date_format or DEFAULT_DATE_FORMAT
        return cls(
            money=currency_formatter(settings.currency, settings.digit_grouping, symbol),
            date=lambda d: format_date(d, pattern),
        )
