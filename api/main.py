from __future__ import annotations

from datetime import datetime
import logging
import math
import os
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import DashboardRequest, PresetRangeResponse
from dashboard.analysis import AnalysisResult
from dashboard.dashboard import compute_dashboard, prepare_context
from dashboard.export import action_plan_filename, action_plan_to_csv, rows_to_csv
from dashboard.filters import normalize_filters
from dashboard.presets import PRESET_LABELS, PRESETS, UnknownPresetError, canonical_preset, resolve_preset
from dashboard.table import compute_table


app = FastAPI(title="ERP Insight Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"
CORS_ORIGINS = [o.strip() for o in os.getenv("DASHBOARD_CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
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
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _context(request: DashboardRequest):
    result = AnalysisResult.from_payload(request.analysis.model_dump(by_alias=True))
    f = normalize_filters(request.filters.model_dump(), now=request.now)
    ctx = prepare_context(f, result, override_rows=request.override_rows)
    return f, ctx


@app.get("/meta/presets")
def meta_presets():
    return _json({"presets": [{"value": p, "label": PRESET_LABELS[p]} for p in PRESETS]})


@app.get("/presets/{name}")
def preset_range(name: str, now: Optional[datetime] = Query(default=None)):
    try:
        preset = canonical_preset(name)
        date_range = resolve_preset(preset, now or datetime.now())
        return _json(PresetRangeResponse(preset=preset, label=PRESET_LABELS[preset], **date_range.to_iso()))
    except UnknownPresetError as exc:
        return _error(exc, status_code=400)
    except Exception as exc:
        logger.exception("preset_range failed")
        return _error(exc)


@app.post("/dashboard")
def dashboard(request: DashboardRequest):
    try:
        f, ctx = _context(request)
        return _json(compute_dashboard(f, ctx))
    except Exception as exc:
        logger.exception("dashboard failed")
        return _error(exc)


@app.post("/table")
def table(request: DashboardRequest):
    try:
        f, ctx = _context(request)
        return _json(compute_table(f, ctx))
    except Exception as exc:
        logger.exception("table failed")
        return _error(exc)


@app.post("/export/rows")
def export_rows(request: DashboardRequest):
    f, ctx = _context(request)
    rows = ctx.get("override_rows")
    if rows is None:
        rows = ctx.get("filtered_rows", [])
    csv_bytes = rows_to_csv(rows)
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": "attachment; filename=dados.csv"})


@app.post("/export/action-plan")
def export_action_plan(request: DashboardRequest):
    result = AnalysisResult.from_payload(request.analysis.model_dump(by_alias=True))
    csv_bytes = action_plan_to_csv(result.action_plan)
    if csv_bytes is None:
        return Response(status_code=204)
    filename = action_plan_filename((request.now or datetime.now()).date())
    return Response(
        content=csv_bytes,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
