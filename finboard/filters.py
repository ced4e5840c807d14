from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Literal, Optional

from finboard.metrics import (
    CURRENT_RATIO,
    DEBT_RATIO,
    MIN_LIQUIDITY_DENOMINATOR,
    QUICK_RATIO,
    ThresholdRule,
)
from finboard.values import coerce_number, normalize_label

ChartType = Literal["bar", "line"]
CHART_TYPES = ("bar", "line")


@dataclass(frozen=True)
class Thresholds:
    quick_good: float = 2.0
    quick_warn: float = 1.0
    current_good: float = 2.0
    current_warn: float = 1.0
    debt_good: float = 1.0
    debt_warn: float = 2.0
    debt_direction: str = "lower"
    min_liquidity_denominator: float = MIN_LIQUIDITY_DENOMINATOR

    def rules(self) -> Dict[str, ThresholdRule]:
        debt_direction = self.debt_direction if self.debt_direction in ("higher", "lower") else "lower"
        return {
            QUICK_RATIO: ThresholdRule(self.quick_good, self.quick_warn, "higher"),
            CURRENT_RATIO: ThresholdRule(self.current_good, self.current_warn, "higher"),
            DEBT_RATIO: ThresholdRule(self.debt_good, self.debt_warn, debt_direction),
        }


def rule_for(thresholds: Thresholds, metric: Optional[str]) -> Optional[ThresholdRule]:
    key = normalize_label(metric)
    for name, rule in thresholds.rules().items():
        if normalize_label(name) == key:
            return rule
    return None


@dataclass(frozen=True)
class RatioFilters:
    org: str = "All"
    metric: Optional[str] = None
    year_min: Optional[int] = None
    year_max: Optional[int] = None
    chart_type: ChartType = "bar"
    thresholds: Thresholds = field(default_factory=Thresholds)


def _as_year(value: object) -> Optional[int]:
    num = coerce_number(value)
    return int(num) if num is not None else None


def _as_float(raw: dict, key: str, default: float) -> float:
    num = coerce_number(raw.get(key))
    return default if num is None else num


def normalize_thresholds(raw: Optional[dict]) -> Thresholds:
    t = raw or {}
    d = Thresholds()
    return Thresholds(
        quick_good=_as_float(t, "quick_good", d.quick_good),
        quick_warn=_as_float(t, "quick_warn", d.quick_warn),
        current_good=_as_float(t, "current_good", d.current_good),
        current_warn=_as_float(t, "current_warn", d.current_warn),
        debt_good=_as_float(t, "debt_good", d.debt_good),
        debt_warn=_as_float(t, "debt_warn", d.debt_warn),
        debt_direction=str(t.get("debt_direction") or d.debt_direction).strip().lower(),
        min_liquidity_denominator=_as_float(t, "min_liquidity_denominator", d.min_liquidity_denominator),
    )


def normalize_filters(raw: dict, *, available_metrics: Optional[Iterable[str]] = None) -> RatioFilters:
    metrics: List[str] = list(available_metrics or [])

    metric = (raw.get("metric") or "").strip() or None
    if metric is None and metrics:
        metric = metrics[0]

    org = (raw.get("org") or "All").strip() or "All"

    chart_type = str(raw.get("chart_type") or "bar").strip().lower()
    if chart_type not in CHART_TYPES:
        chart_type = "bar"

    return RatioFilters(
        org=org,
        metric=metric,
        year_min=_as_year(raw.get("year_min")),
        year_max=_as_year(raw.get("year_max")),
        chart_type=chart_type,  # type: ignore[arg-type]
        thresholds=normalize_thresholds(raw.get("thresholds")),
    )
