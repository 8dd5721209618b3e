from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from dashboard.charts import ChartSpec
from dashboard.values import Row

REPORT_TYPES = (
    "Vendas",
    "Estoque",
    "Financeiro",
    "Compras",
    "RH",
    "Logística",
    "Fiscal",
    "PCP",
    "Geral",
)
UNKNOWN_REPORT_TYPE = "Geral"
TRENDS = ("up", "down", "neutral")


@dataclass(frozen=True)
class KPI:
    label: str
    value: str
    trend: str = "neutral"
    trend_value: str = ""
    description: str = ""

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> "KPI":
        trend = str(raw.get("trend") or "neutral")
        return cls(
            label=str(raw.get("label") or ""),
            value=str(raw.get("value") or ""),
            trend=trend if trend in TRENDS else "neutral",
            trend_value=str(raw.get("trendValue") or raw.get("trend_value") or ""),
            description=str(raw.get("description") or ""),
        )


@dataclass(frozen=True)
class ActionPlanItem:
    text: str
    impact: str = ""
    effort: str = ""


def _column_mapping(raw: object) -> Dict[str, str]:
    # Either {"original": "clean"} or [{"original": ..., "clean": ...}].
    if isinstance(raw, Mapping):
        return {str(k): str(v) for k, v in raw.items()}
    out: Dict[str, str] = {}
    for item in raw or []:  # type: ignore[union-attr]
        if isinstance(item, Mapping) and item.get("original") is not None:
            out[str(item["original"])] = str(item.get("clean") or item["original"])
    return out


@dataclass(frozen=True)
class AnalysisResult:
    """One analysed upload: rows plus the charts and KPIs computed for them."""

    report_type: str = UNKNOWN_REPORT_TYPE
    report_name: str = ""
    kpis: Tuple[KPI, ...] = ()
    charts: Tuple[ChartSpec, ...] = ()
    executive_summary: Mapping[str, Any] = field(default_factory=dict)
    column_mapping: Mapping[str, str] = field(default_factory=dict)
    clean_data: Tuple[Row, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AnalysisResult":
        report_type = str(payload.get("reportType") or UNKNOWN_REPORT_TYPE)
        return cls(
            report_type=report_type if report_type in REPORT_TYPES else UNKNOWN_REPORT_TYPE,
            report_name=str(payload.get("reportName") or ""),
            kpis=tuple(KPI.from_payload(k) for k in payload.get("kpis") or [] if isinstance(k, Mapping)),
            charts=tuple(ChartSpec.from_payload(c) for c in payload.get("charts") or [] if isinstance(c, Mapping)),
            executive_summary=dict(payload.get("executiveSummary") or {}),
            column_mapping=_column_mapping(payload.get("columnMapping")),
            clean_data=tuple(dict(r) for r in payload.get("cleanData") or [] if isinstance(r, Mapping)),
        )

    @property
    def action_plan(self) -> List[ActionPlanItem]:
        items = self.executive_summary.get("actionPlan") or []
        return [
            ActionPlanItem(
                text=str(item.get("text") or ""),
                impact=str(item.get("impact") or ""),
                effort=str(item.get("effort") or ""),
            )
            for item in items
            if isinstance(item, Mapping)
        ]
