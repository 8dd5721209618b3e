from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, Optional, Sequence

from dashboard.analysis import KPI, AnalysisResult
from dashboard.charts import DEFAULT_LIMITS, ChartLimits, ChartSpec, recompute_charts, to_vega_spec
from dashboard.columns import infer_date_column
from dashboard.filters import DashboardFilters, filter_by_date_range, normalize_filters
from dashboard.presets import Moment
from dashboard.values import Row

logger = logging.getLogger(__name__)

PRIVACY_MASK = "••••"


def prepare_context(
    filters: dict | DashboardFilters,
    result: AnalysisResult,
    *,
    override_rows: Optional[Sequence[Row]] = None,
    now: Optional[Moment] = None,
) -> Dict[str, Any]:
    if isinstance(filters, dict):
        filters = normalize_filters(filters, now=now)

    rows = list(result.clean_data)
    date_column = infer_date_column(rows)
    is_filtered = bool(date_column) and not filters.date_range.is_open
    filtered_rows = filter_by_date_range(rows, date_column, filters.date_range) if is_filtered else rows
    logger.debug("context: %d rows, %d after filters (date column %r)", len(rows), len(filtered_rows), date_column)

    return {
        "result": result,
        "filters": filters,
        "rows": rows,
        "date_column": date_column,
        "is_filtered": is_filtered,
        "filtered_rows": filtered_rows,
        "override_rows": list(override_rows) if override_rows is not None else None,
    }


def _kpi_payload(kpi: KPI, privacy: bool) -> Dict[str, Any]:
    payload = asdict(kpi)
    if privacy:
        payload["value"] = PRIVACY_MASK
    return payload


def _chart_payload(spec: ChartSpec) -> Dict[str, Any]:
    return {
        "title": spec.title,
        "type": spec.kind,
        "category_key": spec.category_key,
        "data_key": spec.data_key,
        "data": [asdict(p) for p in spec.data],
        "vega": to_vega_spec(spec),
    }


def compute_dashboard(
    filters: DashboardFilters,
    ctx: Dict[str, Any],
    *,
    limits: ChartLimits = DEFAULT_LIMITS,
) -> Dict[str, Any]:
    result: AnalysisResult = ctx.get("result") or AnalysisResult()
    rows = ctx.get("rows", [])
    filtered_rows = ctx.get("filtered_rows", rows)

    charts = recompute_charts(
        result.charts,
        filtered_rows,
        filtered=bool(ctx.get("is_filtered")),
        override_rows=ctx.get("override_rows"),
        limits=limits,
    )
    return {
        "filters": asdict(filters),
        "date_range": filters.date_range.to_iso(),
        "preset_label": filters.selection.label,
        "report": {"type": result.report_type, "name": result.report_name},
        "date_column": ctx.get("date_column", ""),
        "is_filtered": bool(ctx.get("is_filtered")),
        "row_count": len(rows),
        "filtered_row_count": len(filtered_rows),
        "kpis": [_kpi_payload(k, filters.privacy) for k in result.kpis],
        "charts": [_chart_payload(c) for c in charts],
    }
