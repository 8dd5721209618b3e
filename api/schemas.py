from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DashboardFiltersModel(BaseModel):
    preset: str = "all"
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    column_filters: Dict[str, str] = Field(default_factory=dict)
    page: int = 1
    privacy: bool = False


class ChartPointModel(BaseModel):
    name: Any = None
    value: Any = 0


class ChartSpecModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    type: str = "bar"
    data_key: str = Field(default="", alias="dataKey")
    category_key: str = Field(default="", alias="categoryKey")
    data: List[ChartPointModel] = Field(default_factory=list)


class KPIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    label: str = ""
    value: str = ""
    trend: str = "neutral"
    trend_value: str = Field(default="", alias="trendValue")
    description: str = ""


class AnalysisResultModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    report_type: str = Field(default="Geral", alias="reportType")
    report_name: str = Field(default="", alias="reportName")
    kpis: List[KPIModel] = Field(default_factory=list)
    charts: List[ChartSpecModel] = Field(default_factory=list)
    executive_summary: Dict[str, Any] = Field(default_factory=dict, alias="executiveSummary")
    column_mapping: Any = Field(default=None, alias="columnMapping")
    clean_data: List[Dict[str, Any]] = Field(default_factory=list, alias="cleanData")


class DashboardRequest(BaseModel):
    analysis: AnalysisResultModel
    filters: DashboardFiltersModel = Field(default_factory=DashboardFiltersModel)
    override_rows: Optional[List[Dict[str, Any]]] = None
    now: Optional[datetime] = None


class PresetRangeResponse(BaseModel):
    preset: str
    label: str
    start: Optional[str] = None
    end: Optional[str] = None
