# Shared helpers for the domain report generators
import json
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from app.layers.l1_ingestion.records import Record
from app.layers.l7_analytics.coercion import to_number_or_zero

UPWARD = "upward"
DOWNWARD = "downward"
STABLE = "stable"
NO_TREND = "none"


@dataclass(frozen=True)
class TrendResult:
    """Two-half trend signal over record order."""
    direction: str
    first_half: float
    second_half: float


def sum_columns(records: Sequence[Record], columns: Sequence[str]) -> float:
    """Sum of every coercible value across the given columns. Non-numeric cells add 0."""
    return sum(
        to_number_or_zero(row.get(col))
        for row in records
        for col in columns
    )


def hashable_key(value: Any) -> Any:
    """Cell value usable as a set or dict key. Nested JSON values compare by canonical text."""
    if isinstance(value, (list, dict)):
        return json.dumps(value, sort_keys=True, default=str)
    return value


def split_halves(records: Sequence[Record]) -> Tuple[Sequence[Record], Sequence[Record]]:
    midpoint = len(records) // 2
    return records[:midpoint], records[midpoint:]


def analyze_trend(
    records: Sequence[Record],
    columns: Sequence[str],
    threshold: Optional[float] = None
) -> TrendResult:
    """
    Compare the summed metric of the later half against the earlier half.
    With a threshold the change must exceed it relative to the earlier half;
    without one any strict difference counts.
    """
    if not columns or not records:
        return TrendResult(NO_TREND, 0.0, 0.0)

    first, second = split_halves(records)
    first_sum = sum_columns(first, columns)
    second_sum = sum_columns(second, columns)

    if threshold is None:
        upward = second_sum > first_sum
        downward = second_sum < first_sum
    else:
        upward = second_sum > first_sum * (1 + threshold)
        downward = second_sum < first_sum * (1 - threshold)

    if upward:
        direction = UPWARD
    elif downward:
        direction = DOWNWARD
    else:
        direction = STABLE
    return TrendResult(direction, first_sum, second_sum)


def safe_ratio(numerator: float, denominator: float) -> Optional[float]:
    """numerator / denominator, or None when the denominator is zero."""
    if not denominator:
        return None
    return numerator / denominator


def format_number(value: float) -> str:
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,.2f}"


def format_currency(value: float) -> str:
    return f"${format_number(value)}"


def format_percent(value: float, digits: int = 1) -> str:
    return f"{value:.{digits}f}%"


def join_or(columns: Sequence[str], fallback: str) -> str:
    return ", ".join(str(c) for c in columns) if columns else fallback
