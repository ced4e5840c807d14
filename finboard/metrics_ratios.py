from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

import altair as alt
import pandas as pd

from finboard.charts import (
    AVERAGE_COLOR,
    STATUS_COLORS,
    THRESHOLD_COLOR,
    org_palette,
    to_vega_spec,
)
from finboard.data import empty_ratio_frame
from finboard.filters import RatioFilters, Thresholds, rule_for
from finboard.metrics import classify
from finboard.values import PLACEHOLDER, normalize_label


def _metric_rows(df: pd.DataFrame, metric: Optional[str]) -> pd.DataFrame:
    if "metric" not in df.columns:
        return empty_ratio_frame()
    if df.empty:
        return df
    return df[df["metric"].map(normalize_label) == normalize_label(metric)]


def _mean(values: List[float]) -> Optional[float]:
    return float(sum(values) / len(values)) if values else None


def _sort_key(v: Any):
    if isinstance(v, (int, float)):
        return (False, v, "")
    return (True, 0, str(v).casefold())


def _sorted_unique(values) -> List[Any]:
    return sorted(set(values), key=_sort_key)


def ratio_options(df: pd.DataFrame) -> Dict[str, Any]:
    if df.empty:
        return {"orgs": ["All"], "metrics": [], "years": [], "year_min": None, "year_max": None}
    years = [int(y) for y in _sorted_unique(df["year"].dropna().astype(int).tolist())]
    return {
        "orgs": ["All"] + _sorted_unique(df["org"].astype(str).tolist()),
        "metrics": _sorted_unique(df["metric"].astype(str).tolist()),
        "years": years,
        "year_min": years[0] if years else None,
        "year_max": years[-1] if years else None,
    }


def filter_ratio_rows(
    df: pd.DataFrame,
    metric: Optional[str],
    org: Optional[str] = "All",
    year_min: Optional[int] = None,
    year_max: Optional[int] = None,
) -> pd.DataFrame:
    rows = _metric_rows(df, metric)
    if org and org != "All":
        rows = rows[rows["org"].map(normalize_label) == normalize_label(org)]
    if year_min is not None:
        rows = rows[rows["year"] >= year_min]
    if year_max is not None:
        rows = rows[rows["year"] <= year_max]
    return rows.sort_values("year", kind="stable").reset_index(drop=True)


def latest_year_for_metric(df: pd.DataFrame, metric: Optional[str]) -> Optional[int]:
    rows = _metric_rows(df, metric)
    if rows.empty:
        return None
    return int(rows["year"].max())


def _threshold_rule_layer(value: float) -> alt.Chart:
    return (
        alt.Chart(pd.DataFrame({"threshold": [value]}))
        .mark_rule(color=THRESHOLD_COLOR, strokeDash=[6, 6], strokeWidth=2)
        .encode(y="threshold:Q")
    )


def compute_grouped_bar(
    df: pd.DataFrame,
    metric: str,
    year: Optional[int] = None,
    thresholds: Optional[Thresholds] = None,
) -> Dict[str, Any]:
    """Compare organisations on one metric for a single year."""
    thresholds = thresholds or Thresholds()
    rule = rule_for(thresholds, metric)
    chosen = year if year is not None else latest_year_for_metric(df, metric)

    metric_rows = _metric_rows(df, metric)
    rows = metric_rows[metric_rows["year"] == chosen] if chosen is not None else metric_rows.iloc[0:0]
    if rows.empty and not metric_rows.empty:
        chosen = int(metric_rows["year"].max())
        rows = metric_rows[metric_rows["year"] == chosen]
    rows = rows.sort_values("org", key=lambda s: s.astype(str).str.casefold(), kind="stable")

    bars = [
        {"org": str(r.org), "value": float(r.value), "status": classify(float(r.value), rule)}
        for r in rows.itertuples(index=False)
    ]
    average = _mean([b["value"] for b in bars])

    chart: Dict[str, Any] = {}
    if bars:
        bar_df = pd.DataFrame(bars)
        layers = [
            alt.Chart(bar_df)
            .mark_bar(cornerRadius=10, stroke="rgba(255,255,255,0.08)", strokeWidth=1)
            .encode(
                x=alt.X("org:N", title=None, sort=None),
                y=alt.Y("value:Q", title=metric, scale=alt.Scale(zero=True)),
                color=alt.Color(
                    "status:N",
                    scale=alt.Scale(domain=list(STATUS_COLORS), range=list(STATUS_COLORS.values())),
                    legend=None,
                ),
                tooltip=[alt.Tooltip("org:N", title="Organization"), alt.Tooltip("value:Q", title=metric, format=".2f")],
            )
        ]
        if average is not None:
            layers.append(
                alt.Chart(pd.DataFrame({"average": [average]}))
                .mark_rule(color=AVERAGE_COLOR, strokeWidth=2)
                .encode(y="average:Q")
            )
        if rule is not None:
            layers.append(_threshold_rule_layer(rule.good))
        chart = to_vega_spec(alt.layer(*layers))

    return {
        "chart_type": "bar",
        "metric": metric,
        "year": chosen,
        "bars": bars,
        "average": average,
        "threshold": asdict(rule) if rule is not None else None,
        "title": metric,
        "subtitle": f"Organization: All • Year: {chosen if chosen is not None else PLACEHOLDER}",
        "chart": chart,
    }


def compute_multi_line(
    df: pd.DataFrame,
    metric: str,
    org: Optional[str] = "All",
    year_min: Optional[int] = None,
    year_max: Optional[int] = None,
    thresholds: Optional[Thresholds] = None,
) -> Dict[str, Any]:
    """Trend of one metric over time, one series per organisation (or the selected one)."""
    thresholds = thresholds or Thresholds()
    rule = rule_for(thresholds, metric)
    metric_rows = _metric_rows(df, metric)
    rows = filter_ratio_rows(df, metric, org, year_min, year_max)

    if org and org != "All":
        orgs = [org]
    else:
        orgs = _sorted_unique(metric_rows["org"].astype(str).tolist())

    domain = rows if not rows.empty else metric_rows
    years = [int(y) for y in _sorted_unique(domain["year"].astype(int).tolist())]

    series = []
    for name in orgs:
        org_rows = filter_ratio_rows(df, metric, name, year_min, year_max)
        by_year = {int(r.year): float(r.value) for r in org_rows.itertuples(index=False)}
        data = [by_year.get(y) for y in years]
        last = next((v for v in reversed(data) if v is not None), None)
        series.append({"org": name, "data": data, "last_value": last, "last_status": classify(last, rule)})

    average = [
        _mean(metric_rows.loc[metric_rows["year"] == y, "value"].astype(float).tolist()) for y in years
    ]

    chart: Dict[str, Any] = {}
    points = [
        {"org": s["org"], "year": y, "value": v}
        for s in series
        for y, v in zip(years, s["data"])
        if v is not None
    ]
    if points:
        line_df = pd.DataFrame(points)
        layers = [
            alt.Chart(line_df)
            .mark_line(point=True, strokeWidth=3, interpolate="monotone")
            .encode(
                x=alt.X("year:O", title="Year"),
                y=alt.Y("value:Q", title=metric),
                color=alt.Color("org:N", title="Organization", scale=alt.Scale(domain=orgs, range=org_palette(orgs))),
                tooltip=[
                    alt.Tooltip("org:N", title="Organization"),
                    alt.Tooltip("year:O", title="Year"),
                    alt.Tooltip("value:Q", title=metric, format=".2f"),
                ],
            )
        ]
        avg_df = pd.DataFrame([{"year": y, "average": a} for y, a in zip(years, average) if a is not None])
        if not avg_df.empty:
            layers.append(
                alt.Chart(avg_df)
                .mark_line(color=AVERAGE_COLOR, strokeDash=[6, 6], strokeWidth=2)
                .encode(x="year:O", y="average:Q")
            )
        if rule is not None:
            layers.append(_threshold_rule_layer(rule.good))
        chart = to_vega_spec(alt.layer(*layers))

    org_label = org if org and org != "All" else "All"
    if year_min is not None or year_max is not None:
        years_label = f"{year_min if year_min is not None else '…'}–{year_max if year_max is not None else '…'}"
    else:
        years_label = "All years"

    return {
        "chart_type": "line",
        "metric": metric,
        "years": years,
        "series": series,
        "average": average,
        "threshold": asdict(rule) if rule is not None else None,
        "title": metric,
        "subtitle": f"Organization: {org_label} • Years: {years_label}",
        "chart": chart,
    }


def compute_ratios(filters: RatioFilters, df: pd.DataFrame) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"filters": asdict(filters), "options": ratio_options(df)}
    if not filters.metric:
        payload["result"] = None
        return payload
    if filters.chart_type == "bar":
        result = compute_grouped_bar(df, filters.metric, filters.year_min, filters.thresholds)
    else:
        result = compute_multi_line(
            df, filters.metric, filters.org, filters.year_min, filters.year_max, filters.thresholds
        )
    payload["result"] = result
    return payload
