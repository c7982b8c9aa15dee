# L7: Analytics Layer - Statistics Engine
import logging
import math
from typing import Dict, List, Sequence, Optional

from app.core.exceptions import ComputationError
from app.layers.l1_ingestion.records import ColumnStats, Record
from app.layers.l7_analytics.coercion import to_number, is_number

logger = logging.getLogger(__name__)

# Relative slack for float rounding in the range check
TOLERANCE = 1e-9


def compute_stats(
    records: Sequence[Record],
    columns: Optional[Sequence[str]] = None
) -> Dict[str, ColumnStats]:
    """
    Per-column sum/average/min/max/count over every numerically-coercible value.
    Columns without a single numeric value, or whose sum overflows, are left
    out of the result.
    """
    if columns is None:
        seen: Dict[str, None] = {}
        for record in records:
            for key in record:
                seen.setdefault(key, None)
        columns = list(seen)

    stats: Dict[str, ColumnStats] = {}
    for column in columns:
        values: List[float] = []
        for record in records:
            number = to_number(record.get(column))
            if is_number(number):
                values.append(number)

        if not values:
            continue

        try:
            total = math.fsum(values)
        except OverflowError:
            total = math.inf
        if not math.isfinite(total):
            # Finite cells whose total exceeds the float range have no reportable sum
            logger.warning(f"Skipping column {column}: sum overflows float range")
            continue

        average = total / len(values)
        low, high = min(values), max(values)
        slack = TOLERANCE * max(1.0, abs(low), abs(high))
        if not (low - slack <= average <= high + slack):
            raise ComputationError(
                f"Average outside value range for column {column}",
                {"column": column, "average": average, "min": low, "max": high}
            )

        stats[column] = ColumnStats(
            sum=total,
            average=average,
            min=low,
            max=high,
            count=len(values),
        )

    return stats
