from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import RatioFiltersModel
from finboard.data import load_dashboard_data
from finboard.export import build_summary_csv, summary_filename
from finboard.filters import RatioFilters, normalize_filters
from finboard.metrics_ratios import compute_ratios, ratio_options
from finboard.metrics_ucoa import compute_ucoa


app = FastAPI(title="Finboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: RatioFiltersModel, *, available_metrics: list[str]) -> RatioFilters:
    raw = model.model_dump()
    return normalize_filters(raw, available_metrics=available_metrics)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/columns")
def meta_columns():
    try:
        data_ctx = load_dashboard_data()
        doc = data_ctx.budget
        columns = [{"index": idx, "name": name} for idx, name in doc.columns] if doc is not None else []
        return _json({"loaded": doc is not None, "columns": columns})
    except Exception as exc:
        logger.exception("meta_columns failed")
        return _error(exc)


@app.get("/ucoa")
def ucoa(column: Optional[int] = Query(default=None)):
    try:
        data_ctx = load_dashboard_data()
        return _json(compute_ucoa(data_ctx.budget, column))
    except Exception as exc:
        logger.exception("ucoa failed")
        return _error(exc)


@app.get("/meta/ratios")
def meta_ratios():
    try:
        data_ctx = load_dashboard_data()
        options = ratio_options(data_ctx.ratios)
        options["source"] = data_ctx.ratio_source
        return _json(options)
    except Exception as exc:
        logger.exception("meta_ratios failed")
        return _error(exc)


@app.post("/ratios")
def ratios(filters: RatioFiltersModel):
    try:
        data_ctx = load_dashboard_data()
        metrics = ratio_options(data_ctx.ratios)["metrics"]
        f = _filters_from_model(filters, available_metrics=metrics)
        payload = compute_ratios(f, data_ctx.ratios)
        payload["source"] = data_ctx.ratio_source
        return _json(payload)
    except Exception as exc:
        logger.exception("ratios failed")
        return _error(exc)


@app.get("/export/summary")
def export_summary(column: Optional[int] = Query(default=None)):
    try:
        data_ctx = load_dashboard_data()
        payload = compute_ucoa(data_ctx.budget, column)
        csv_bytes = build_summary_csv(payload).encode("utf-8")
        filename = summary_filename(payload)
        return Response(
            content=csv_bytes,
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
    except Exception as exc:
        logger.exception("export_summary failed")
        return _error(exc)
