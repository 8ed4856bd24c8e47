"""Primitive extractors shared by the classifier, scorer and report assembler.

Two accessors cover the "missing number" convention used across the report:

* :func:`number_or_na` renders a value for display and yields ``"N/A"``
  when nothing usable is present.
* :func:`number_or_zero` is used for arithmetic (team sums, lane totals)
  and yields ``0`` so a single missing value never poisons a total.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from .config import NOT_AVAILABLE

Number = Union[int, float]

_UNESCAPED_PIPE = re.compile(r"(?<!\\)((?:\\\\)*)\|")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_ONE_DECIMAL = Decimal("0.1")


def is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def pick_first_number(*values: Any) -> Optional[Number]:
    """Return the first finite number in ``values``; order is the caller's preference."""
    for value in values:
        if is_finite_number(value):
            return value
    return None


def format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def number_or_na(*values: Any) -> str:
    value = pick_first_number(*values)
    return NOT_AVAILABLE if value is None else format_number(value)


def number_or_zero(value: Any) -> Number:
    return value if is_finite_number(value) else 0


def sum_numbers(items: Iterable[Any], selector: Callable[[Any], Any]) -> Number:
    total: Number = 0
    for item in items:
        total += number_or_zero(selector(item))
    return total


def percent_format(value: Any) -> str:
    if not is_finite_number(value):
        return NOT_AVAILABLE
    return f"{fixed_one(value)}%"


def fixed_one(value: Number) -> str:
    """One-decimal text with exact ties rounded away from zero."""
    return str(Decimal(value).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def round_one(value: Number) -> float:
    return float(fixed_one(value))


def round_half_up(value: Number) -> int:
    return int(math.floor(value + 0.5))


def sanitize_for_table(value: Any) -> str:
    """Make ``value`` safe for a single pipe-delimited table cell.

    A ``|`` preceded by an even number of backslashes is a cell separator and
    gets escaped; line breaks become spaces. The result is stable when
    sanitized again.
    """
    if value is None:
        return NOT_AVAILABLE
    text = _UNESCAPED_PIPE.sub(r"\1\\|", str(value))
    return _LINE_BREAK.sub(" ", text)


def format_duration(seconds: Any) -> str:
    if not is_finite_number(seconds) or seconds < 0:
        return NOT_AVAILABLE
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


def format_unix_date(unix_seconds: Any) -> str:
    if not is_finite_number(unix_seconds) or unix_seconds <= 0:
        return NOT_AVAILABLE
    millis = int(unix_seconds * 1000)
    dt = datetime.fromtimestamp(millis // 1000, tz=timezone.utc)
    return f"{dt:%Y-%m-%dT%H:%M:%S}.{millis % 1000:03d}Z"


def format_clock(seconds: Any) -> str:
    if not is_finite_number(seconds):
        return NOT_AVAILABLE
    return f"{int(seconds // 60)}:{format_number(seconds % 60).zfill(2)}"


def timeline_value_at_minute(series: Optional[Sequence[Any]], minute: int) -> Optional[Number]:
    if not series:
        return None
    idx = min(max(0, minute), len(series) - 1)
    value = series[idx]
    return value if is_finite_number(value) else None


@dataclass(frozen=True)
class AdvantageSummary:
    max_lead: Number
    max_deficit: Number
    swing: Number


def summarize_advantage(series: Optional[Sequence[Any]]) -> AdvantageSummary:
    values = [v for v in (series or ()) if is_finite_number(v)]
    if not values:
        return AdvantageSummary(max_lead=0, max_deficit=0, swing=0)
    max_lead = max(values)
    max_deficit = min(values)
    return AdvantageSummary(max_lead=max_lead, max_deficit=max_deficit, swing=max_lead - max_deficit)
