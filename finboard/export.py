from __future__ import annotations

from typing import Any, Dict, Tuple

import pandas as pd

from finboard.values import format_currency, format_pct

SUMMARY_KPIS = (
    ("revenue", "Total Revenue"),
    ("expenses", "Total Expenses"),
    ("surplus", "Surplus"),
)


def build_summary_frames(payload: Dict[str, Any]) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Split a budget payload into the ``Metric,Value`` and ``Dimension,Amount,Percent`` sections."""
    kpis = payload.get("kpis") or {}
    metrics = pd.DataFrame(
        [{"Metric": label, "Value": format_currency(kpis.get(key))} for key, label in SUMMARY_KPIS],
        columns=["Metric", "Value"],
    )
    dimensions = pd.DataFrame(
        [
            {
                "Dimension": d["label"],
                "Amount": format_currency(d.get("amount")),
                "Percent": format_pct(d.get("percentage")),
            }
            for d in payload.get("dimensions") or []
        ],
        columns=["Dimension", "Amount", "Percent"],
    )
    return metrics, dimensions


def build_summary_csv(payload: Dict[str, Any]) -> str:
    metrics, dimensions = build_summary_frames(payload)
    return "\n".join(
        [
            metrics.to_csv(index=False, lineterminator="\n"),
            dimensions.to_csv(index=False, lineterminator="\n"),
        ]
    )


def summary_filename(payload: Dict[str, Any]) -> str:
    name = (payload.get("column") or {}).get("name") or "summary"
    slug = "".join(ch if ch.isalnum() else "_" for ch in str(name)).strip("_") or "summary"
    return f"ucoa_summary_{slug}.csv"
