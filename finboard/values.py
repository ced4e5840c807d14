from __future__ import annotations

import math
import re
from typing import Optional

PLACEHOLDER = "—"

_ABSENT_TOKENS = {"", "-", "—", "$ -"}
_PAREN_RE = re.compile(r"^\(.*\)$")
_STRIP_RE = re.compile(r"[$€£¥,\s]")
_DECIMAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def normalize_label(value: object) -> str:
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value).strip().lower())


def coerce_number(value: object) -> Optional[float]:
    """Parse a display-formatted cell ("$1,234", "(1,234)", "N/A") into a float or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        out = float(value)
        return out if math.isfinite(out) else None

    raw = str(value).strip()
    if raw in _ABSENT_TOKENS or raw.lower() == "n/a":
        return None

    negative = bool(_PAREN_RE.match(raw))
    if negative:
        raw = raw[1:-1]
    cleaned = _STRIP_RE.sub("", raw)
    if not _DECIMAL_RE.match(cleaned):
        return None
    out = float(cleaned)
    if not math.isfinite(out):
        return None
    return -out if negative else out


def format_currency(value: Optional[float]) -> str:
    if value is None or not math.isfinite(value):
        return PLACEHOLDER
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def format_pct(value: Optional[float], decimals: int = 1) -> str:
    if value is None or not math.isfinite(value):
        return PLACEHOLDER
    return f"{value * 100:.{decimals}f}%"
