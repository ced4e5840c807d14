from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Literal, Mapping, Optional

Direction = Literal["higher", "lower"]
Status = Literal["good", "warn", "bad", "neutral"]

# Liquidity ratios over a denominator smaller than this are suppressed.
MIN_LIQUIDITY_DENOMINATOR = 1000.0

QUICK_RATIO = "Quick Ratio"
CURRENT_RATIO = "Current Ratio"
DEBT_RATIO = "Debt Ratio"


def _present(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def safe_div(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if not _present(a) or not _present(b) or b == 0:
        return None
    return a / b


def liquidity_ratio(
    numerator: Optional[float],
    denominator: Optional[float],
    minimum: float = MIN_LIQUIDITY_DENOMINATOR,
) -> Optional[float]:
    if not _present(denominator) or abs(denominator) < minimum:
        return None
    return safe_div(numerator, denominator)


def pct_of_total(amount: Optional[float], total: Optional[float]) -> Optional[float]:
    if not _present(total):
        return None
    return safe_div(amount, abs(total))


def add_present(*values: Optional[float]) -> Optional[float]:
    """Sum that is absent as soon as any operand is absent."""
    if not values or not all(_present(v) for v in values):
        return None
    return float(sum(values))


@dataclass(frozen=True)
class ThresholdRule:
    good: float
    warn: float
    direction: Direction = "higher"


def classify(value: Optional[float], rule: Optional[ThresholdRule]) -> Status:
    if rule is None or not _present(value):
        return "neutral"
    if rule.direction == "higher":
        if value >= rule.good:
            return "good"
        if value >= rule.warn:
            return "warn"
        return "bad"
    if value <= rule.good:
        return "good"
    if value <= rule.warn:
        return "warn"
    return "bad"


# ---------------- Statement ratios ----------------
Fields = Mapping[str, Optional[float]]


def quick_ratio(fields: Fields, minimum: float = MIN_LIQUIDITY_DENOMINATOR) -> Optional[float]:
    quick_assets = add_present(fields.get("cash"), fields.get("receivables"))
    return liquidity_ratio(quick_assets, fields.get("current_liabilities"), minimum)


def current_ratio(fields: Fields, minimum: float = MIN_LIQUIDITY_DENOMINATOR) -> Optional[float]:
    return liquidity_ratio(fields.get("current_assets"), fields.get("current_liabilities"), minimum)


def debt_ratio(fields: Fields, minimum: float = MIN_LIQUIDITY_DENOMINATOR) -> Optional[float]:
    return safe_div(fields.get("total_liabilities"), fields.get("net_assets"))


RATIO_DEFINITIONS: Dict[str, Callable[..., Optional[float]]] = {
    QUICK_RATIO: quick_ratio,
    CURRENT_RATIO: current_ratio,
    DEBT_RATIO: debt_ratio,
}


def compute_ratio(name: str, fields: Fields, minimum: float = MIN_LIQUIDITY_DENOMINATOR) -> Optional[float]:
    fn = RATIO_DEFINITIONS.get(name)
    if fn is None:
        return None
    return fn(fields, minimum)
