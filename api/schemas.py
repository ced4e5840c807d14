from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class ThresholdsModel(BaseModel):
    quick_good: float = 2.0
    quick_warn: float = 1.0
    current_good: float = 2.0
    current_warn: float = 1.0
    debt_good: float = 1.0
    debt_warn: float = 2.0
    debt_direction: Literal["higher", "lower"] = "lower"
    min_liquidity_denominator: float = 1000.0


class RatioFiltersModel(BaseModel):
    org: str = "All"
    metric: Optional[str] = None
    year_min: Optional[int] = None
    year_max: Optional[int] = None
    chart_type: Literal["bar", "line"] = "bar"
    thresholds: ThresholdsModel = Field(default_factory=ThresholdsModel)
