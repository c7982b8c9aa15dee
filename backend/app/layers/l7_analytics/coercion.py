# L7: Analytics Layer - Numeric Coercion
# Every statistic in the report goes through to_number so that all
# generators agree on which cells count as numeric.
import math
import re
from typing import Any

import numpy as np

NOT_A_NUMBER = float("nan")

# Thousands separators, currency symbols and percent signs
_CLEAN_PATTERN = re.compile(r"[,$%]")


def to_number(value: Any) -> float:
    """
    Best-effort conversion of a cell value to float.
    Returns NaN for anything that is not a finite number after cleaning.
    """
    if isinstance(value, (bool, np.bool_)):
        return NOT_A_NUMBER
    if isinstance(value, (int, float, np.number)):
        number = float(value)
        return number if math.isfinite(number) else NOT_A_NUMBER
    if isinstance(value, str):
        cleaned = _CLEAN_PATTERN.sub("", value).strip()
        if not cleaned:
            return NOT_A_NUMBER
        try:
            number = float(cleaned)
        except ValueError:
            return NOT_A_NUMBER
        return number if math.isfinite(number) else NOT_A_NUMBER
    return NOT_A_NUMBER


def is_number(value: float) -> bool:
    return not math.isnan(value)


def to_number_or_zero(value: Any) -> float:
    """Coerced value, with NaN mapped to 0 for running sums."""
    number = to_number(value)
    return number if is_number(number) else 0.0


def is_missing(value: Any) -> bool:
    """A cell is missing when it is None, NaN or a blank string."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False
