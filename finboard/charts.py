from __future__ import annotations

from typing import Any, Dict, Iterable, List

import altair as alt

alt.data_transformers.disable_max_rows()

STATUS_COLORS = {
    "good": "rgba(34, 197, 94, 0.85)",
    "warn": "rgba(245, 158, 11, 0.85)",
    "bad": "rgba(239, 68, 68, 0.85)",
    "neutral": "rgba(148, 163, 184, 0.70)",
}
LINE_COLOR = "#38BDF8"
AVERAGE_COLOR = "rgba(255, 255, 255, 0.16)"
THRESHOLD_COLOR = "rgba(255, 255, 255, 0.22)"

ORG_COLORS = {
    "EOYDC": "#38BDF8",
    "Roots": "#22C55E",
    "BCZ": "#A78BFA",
    "BOEN": "#F59E0B",
}


def org_palette(orgs: Iterable[str]) -> List[str]:
    return [ORG_COLORS.get(o, LINE_COLOR) for o in orgs]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()
