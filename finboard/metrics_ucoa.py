from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import altair as alt
import pandas as pd

from finboard.charts import to_vega_spec
from finboard.index import Document
from finboard.metrics import pct_of_total
from finboard.values import format_currency, format_pct


@dataclass(frozen=True)
class Dimension:
    id: str
    label: str
    dot_class: str
    statement: str
    labels: Tuple[str, ...]


DIMENSIONS: Tuple[Dimension, ...] = (
    Dimension("1.", "Backbone & Gen Ops", "dot-fn01", "Admin, indirect, management fees",
              ("1. Backbone and Gen Ops", "Backbone and Gen Ops", "Backbone & Gen Ops")),
    Dimension("2.", "Live & Thrive", "dot-fn02", "Buildings, capital improvements",
              ("2. Live and Thrive", "Live and Thrive", "Live & Thrive")),
    Dimension("3.", "Data Trust & Fund", "dot-fn03", "Evaluation, research, data",
              ("3. Data Trust and Fund", "Data Trust and Fund", "Data Trust & Fund")),
    Dimension("4.", "Power Building", "dot-fn04", "Civic engagement, organizing",
              ("4. Power Building", "Power Building")),
    Dimension("5.", "Learn & Grow", "dot-fn05", "Youth programs, scholarships",
              ("5. Learn and Grow", "Learn and Grow", "Learn & Grow")),
    Dimension("6.", "Safe & Connected", "dot-fn06", "Safety, ambassadors, community response",
              ("6. Safe and Connected", "Safe and Connected", "Safe & Connected")),
    Dimension("7.", "Work and Wealth", "dot-fn07", "Economic development",
              ("7. Work and Wealth", "Work and Wealth")),
    Dimension("8.", "Family Health and Wellbeing", "dot-fn08", "Clinical services, supplies, labs",
              ("8. Family Health and Wellbeing", "Family Health and Wellbeing")),
)

KPI_LABELS: Dict[str, Tuple[str, ...]] = {
    "revenue": ("Total Revenue", "Total Support and Revenue", "Total support and revenue", "Total Revenue (All)"),
    "expenses": ("Total Expenses", "Total Expense", "Expenses Total", "Total expenses"),
}


def default_column(doc: Optional[Document]) -> Optional[int]:
    if doc is None or not doc.columns:
        return None
    return doc.columns[-1][0]


def _kpis(doc: Optional[Document], column: Optional[int]) -> Dict[str, Optional[float]]:
    if doc is None or column is None:
        return {"revenue": None, "expenses": None, "surplus": None}
    revenue = doc.index.resolve(KPI_LABELS["revenue"], column)
    expenses = doc.index.resolve(KPI_LABELS["expenses"], column)
    surplus = revenue - expenses if revenue is not None and expenses is not None else None
    return {"revenue": revenue, "expenses": expenses, "surplus": surplus}


def compute_ucoa(doc: Optional[Document], column: Optional[int] = None) -> Dict[str, Any]:
    """Budget overview for one value column: KPI tiles plus the dimension share table."""
    if doc is not None and column is None:
        column = default_column(doc)
    if doc is not None and column is not None and doc.column_name(column) is None:
        column = None

    kpis = _kpis(doc, column)
    amounts: List[Optional[float]] = [
        doc.index.resolve(d.labels, column) if doc is not None and column is not None else None
        for d in DIMENSIONS
    ]

    # Share of total expenses; the dimension sum stands in when expenses are missing.
    if kpis["expenses"] is not None:
        total, basis = kpis["expenses"], "total_expenses"
    else:
        total, basis = sum(a for a in amounts if a is not None), "dimension_sum"

    dimensions = []
    for d, amount in zip(DIMENSIONS, amounts):
        pct = pct_of_total(amount, total)
        dimensions.append(
            {
                "id": d.id,
                "label": d.label,
                "dot_class": d.dot_class,
                "statement": d.statement,
                "amount": amount,
                "percentage": pct,
                "amount_display": format_currency(amount),
                "percentage_display": format_pct(pct),
            }
        )

    columns = [{"index": idx, "name": name} for idx, name in doc.columns] if doc is not None else []
    return {
        "loaded": doc is not None,
        "column": {"index": column, "name": doc.column_name(column) if doc is not None and column is not None else None},
        "columns": columns,
        "kpis": kpis,
        "kpis_display": {k: format_currency(v) for k, v in kpis.items()},
        "total_basis": basis,
        "dimensions": dimensions,
        "charts": _dimension_chart(dimensions),
    }


def _dimension_chart(dimensions: List[Dict[str, Any]]) -> Dict[str, Any]:
    df = pd.DataFrame([d for d in dimensions if d["amount"] is not None])
    if df.empty:
        return {}
    bar = (
        alt.Chart(df)
        .mark_bar(cornerRadiusEnd=4)
        .encode(
            x=alt.X("amount:Q", title="Amount", axis=alt.Axis(format="$,.0f")),
            y=alt.Y("label:N", title=None, sort=[d["label"] for d in dimensions]),
            tooltip=[
                alt.Tooltip("label:N", title="Dimension"),
                alt.Tooltip("amount:Q", title="Amount", format="$,.0f"),
                alt.Tooltip("percentage:Q", title="Share", format=".1%"),
            ],
        )
    )
    return {"dimension_amounts": to_vega_spec(bar)}
