"""Normalization helpers.

Centralizes defensive parsing and placeholder handling for values the
platform services report.
"""

from __future__ import annotations

import math
from typing import Any

from pycellwatch._constants import CELL_INFO_UNAVAILABLE


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_identity(value: Any) -> int | None:
    """Parse an integer identity field; the platform's unavailable marker becomes ``None``."""
    parsed = safe_int(value)
    if parsed is None or parsed == CELL_INFO_UNAVAILABLE or parsed < 0:
        return None
    return parsed


def safe_code(value: Any) -> str | None:
    """Parse a mobile country/network code.

    Codes are strings on Android but some services report them as
    integers; both are accepted. Empty strings and the unavailable
    marker become ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = safe_identity(value)
        return None if number is None else str(number)
    text = str(value).strip()
    return text if text else None


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None
