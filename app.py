import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import Optional

from finboard.data import DocumentLoadError, document_from_text, load_dashboard_data
from finboard.export import build_summary_csv, summary_filename
from finboard.filters import CHART_TYPES, RatioFilters, Thresholds
from finboard.metrics_ratios import compute_ratios, ratio_options
from finboard.metrics_ucoa import compute_ucoa, default_column


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .chart-subtitle {color: #6b7280;font-size: 0.9rem;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def _optional_year(text: str) -> Optional[int]:
    text = (text or "").strip()
    return int(text) if text.isdigit() else None


# ---------- UI setup ----------
st.set_page_config(page_title="Finboard", layout="wide")
inject_base_styles()
st.title("Budget & Ratio Dashboard")

data_ctx = load_dashboard_data()

with st.sidebar:
    st.markdown("### Navigate")
    page = st.radio("Navigate", ["Budget (UCOA)", "Ratios"], index=0)


def render_budget_page():
    doc = data_ctx.budget
    uploaded = st.sidebar.file_uploader("Load a budget CSV", type=["csv"])
    if uploaded is not None:
        try:
            doc = document_from_text(uploaded.getvalue().decode("utf-8-sig"))
        except (DocumentLoadError, UnicodeDecodeError) as exc:
            st.sidebar.error(f"Could not read {uploaded.name}: {exc}")

    if doc is None:
        st.warning("No budget document loaded. Place the budget CSV in data/ or upload one.")

    options = list(doc.columns) if doc is not None else []
    column = None
    if options:
        names = [name for _, name in options]
        choice = st.selectbox("Year", names, index=len(names) - 1)
        column = options[names.index(choice)][0]
    else:
        column = default_column(doc)

    payload = compute_ucoa(doc, column)
    kpis = payload["kpis_display"]
    cols = st.columns(3)
    cols[0].metric("Total Revenue", kpis["revenue"])
    cols[1].metric("Total Expenses", kpis["expenses"])
    cols[2].metric("Surplus", kpis["surplus"])

    with card("Strategic Dimensions"):
        table = pd.DataFrame(payload["dimensions"])[["id", "label", "statement", "amount_display", "percentage_display"]]
        table = table.rename(
            columns={"id": "#", "label": "Dimension", "statement": "Covers", "amount_display": "Amount", "percentage_display": "% of Total"}
        )
        st.dataframe(table, hide_index=True, use_container_width=True)
        chart = payload["charts"].get("dimension_amounts")
        if chart:
            st.vega_lite_chart(spec=chart, use_container_width=True)

    st.download_button(
        "Export summary CSV",
        data=build_summary_csv(payload).encode("utf-8"),
        file_name=summary_filename(payload),
        mime="text/csv",
    )


def render_ratios_page():
    df = data_ctx.ratios
    options = ratio_options(df)
    if data_ctx.ratio_source == "demo":
        st.info("Showing demo ratios. Add data/consolidated.json, data/ratios.xlsx or statements to load real data.")
    if not options["metrics"]:
        st.info("No ratio data available.")
        return

    c1, c2, c3 = st.columns(3)
    metric = c1.selectbox("Ratio", options["metrics"])
    org = c2.selectbox("Organization", options["orgs"])
    chart_type = c3.selectbox("Chart type", list(CHART_TYPES), format_func=lambda t: "Grouped bar" if t == "bar" else "Multi-line")
    y1, y2 = st.columns(2)
    year_min = _optional_year(y1.text_input("From year", placeholder=str(options["year_min"] or "From")))
    year_max = _optional_year(y2.text_input("To year", placeholder=str(options["year_max"] or "To")))

    filters = RatioFilters(org=org, metric=metric, year_min=year_min, year_max=year_max, chart_type=chart_type, thresholds=Thresholds())
    result = compute_ratios(filters, df)["result"]
    with card(result["title"]):
        st.markdown(f"<div class='chart-subtitle'>{result['subtitle']}</div>", unsafe_allow_html=True)
        if result["chart"]:
            st.vega_lite_chart(spec=result["chart"], use_container_width=True)
        else:
            st.info("No rows for this selection.")


if page == "Ratios":
    render_ratios_page()
else:
    render_budget_page()
