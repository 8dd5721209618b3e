"""
tests/test_dashboard.py

End-to-end page compute: analysis payload -> context -> dashboard and table
payloads, plus CSV exports.
"""

from __future__ import annotations

import io
from datetime import date

import pandas as pd
import pytest

from dashboard.analysis import ActionPlanItem, AnalysisResult
from dashboard.dashboard import PRIVACY_MASK, compute_dashboard, prepare_context
from dashboard.export import action_plan_filename, action_plan_to_csv, rows_to_csv
from dashboard.filters import normalize_filters
from dashboard.table import TableSettings, compute_table, paginate


@pytest.fixture()
def result(analysis_payload) -> AnalysisResult:
    return AnalysisResult.from_payload(analysis_payload)


# ---------------------------------------------------------------------------
# AnalysisResult
# ---------------------------------------------------------------------------


class TestAnalysisResult:
    def test_from_payload(self, result, regional_rows) -> None:
        assert result.report_type == "Vendas"
        assert result.kpis[0].trend_value == "12%"
        assert len(result.charts) == 2
        assert list(result.clean_data) == regional_rows
        assert result.column_mapping == {"Região": "Regiao"}

    def test_unknown_report_type(self) -> None:
        assert AnalysisResult.from_payload({"reportType": "Marketing"}).report_type == "Geral"

    def test_column_mapping_as_dict(self) -> None:
        assert AnalysisResult.from_payload({"columnMapping": {"A": "a"}}).column_mapping == {"A": "a"}

    def test_action_plan(self, result) -> None:
        assert result.action_plan[1] == ActionPlanItem("Expandir Sul", "MÉDIO", "CURTO PRAZO")


# ---------------------------------------------------------------------------
# prepare_context / compute_dashboard
# ---------------------------------------------------------------------------


class TestComputeDashboard:
    def test_scenario_january(self, result, regional_rows, now) -> None:
        f = normalize_filters({"start_date": "2025-01-01", "end_date": "2025-01-31"}, now=now)
        ctx = prepare_context(f, result)
        assert ctx["date_column"] == "Data"
        assert ctx["is_filtered"] is True
        assert ctx["filtered_rows"] == [regional_rows[0], regional_rows[2]]

        payload = compute_dashboard(f, ctx)
        bar = payload["charts"][0]
        assert bar["data"] == [{"name": "Sul", "value": 100.0}, {"name": "Norte", "value": 30.0}]
        assert payload["filtered_row_count"] == 2
        assert payload["row_count"] == 3
        assert payload["preset_label"] == "Custom"
        assert payload["date_range"] == {"start": "2025-01-01", "end": "2025-01-31"}

    def test_static_chart_passes_through_when_filtered(self, result, now) -> None:
        f = normalize_filters({"start_date": "2025-01-01"}, now=now)
        payload = compute_dashboard(f, prepare_context(f, result))
        assert payload["charts"][1]["data"] == [{"name": "Fixo", "value": 1.0}]

    def test_unfiltered_uses_static_series(self, result, now) -> None:
        f = normalize_filters({}, now=now)
        payload = compute_dashboard(f, prepare_context(f, result))
        assert payload["is_filtered"] is False
        assert payload["charts"][0]["data"] == [{"name": "Sul", "value": 150.0}, {"name": "Norte", "value": 30.0}]

    def test_dict_filters_are_normalized(self, result, now) -> None:
        ctx = prepare_context({"preset": "last-month"}, result, now=now)
        assert ctx["filters"].preset == "last-month"
        assert ctx["filtered_rows"] == []

    def test_override_rows(self, result, regional_rows, now) -> None:
        f = normalize_filters({}, now=now)
        payload = compute_dashboard(f, prepare_context(f, result, override_rows=regional_rows[1:2]))
        assert payload["charts"][0]["data"] == [{"name": "Sul", "value": 50.0}]

    def test_no_date_column_means_no_filtering(self, now) -> None:
        result = AnalysisResult.from_payload({"cleanData": [{"Regiao": "Sul", "Valor": 1}]})
        f = normalize_filters({"start_date": "2025-01-01"}, now=now)
        ctx = prepare_context(f, result)
        assert ctx["date_column"] == ""
        assert ctx["is_filtered"] is False
        assert ctx["filtered_rows"] == [{"Regiao": "Sul", "Valor": 1}]

    def test_privacy_masks_kpi_values(self, result, now) -> None:
        f = normalize_filters({"privacy": True}, now=now)
        payload = compute_dashboard(f, prepare_context(f, result))
        assert payload["kpis"][0]["value"] == PRIVACY_MASK
        assert payload["kpis"][0]["label"] == "Receita Total"

    def test_vega_spec_is_attached(self, result, now) -> None:
        f = normalize_filters({}, now=now)
        payload = compute_dashboard(f, prepare_context(f, result))
        assert "$schema" in payload["charts"][0]["vega"]


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class TestTable:
    def test_paginate(self) -> None:
        rows = [{"i": i} for i in range(45)]
        page_rows, page, total = paginate(rows, 3, 20)
        assert (len(page_rows), page, total) == (5, 3, 3)
        assert paginate(rows, 99, 20)[1] == 3
        assert paginate([], 2, 20) == ([], 1, 0)

    def test_compute_table_masks_sensitive_columns(self, result, now) -> None:
        f = normalize_filters({"privacy": True, "column_filters": {"Regiao": "sul"}}, now=now)
        payload = compute_table(f, prepare_context(f, result))
        assert payload["total_rows"] == 2
        assert payload["masked_columns"] == ["Valor"]
        assert {r["Valor"] for r in payload["rows"]} == {TableSettings().mask}
        assert payload["rows"][0]["Regiao"] == "Sul"

    def test_compute_table_respects_date_filter(self, result, now) -> None:
        f = normalize_filters({"start_date": "2025-06-01"}, now=now)
        payload = compute_table(f, prepare_context(f, result))
        assert payload["total_rows"] == 1
        assert payload["headers"] == ["Data", "Regiao", "Valor"]


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class TestExport:
    def test_rows_to_csv(self, regional_rows) -> None:
        text = rows_to_csv(regional_rows).decode("utf-8")
        assert text.splitlines()[0] == "Data,Regiao,Valor"
        assert '"100,00"' in text

    def test_action_plan_csv(self, result) -> None:
        content = action_plan_to_csv(result.action_plan)
        assert content is not None
        text = content.decode("utf-8")
        assert text.startswith("\ufeff")
        lines = text.lstrip("\ufeff").splitlines()
        assert lines[0] == '"Ação Recomendada";"Impacto";"Esforço Estimado"'
        assert lines[1] == '"Revisar ""mix"" do Norte";"ALTO";"IMEDIATO"'

    def test_empty_action_plan(self) -> None:
        assert action_plan_to_csv([]) is None

    def test_filename(self) -> None:
        assert action_plan_filename(date(2025, 3, 5)) == "Plano_de_Acao_2025-03-05.csv"

    def test_rows_csv_reads_back(self, regional_rows) -> None:
        frame = pd.read_csv(io.BytesIO(rows_to_csv(regional_rows)), dtype=str)
        assert frame["Regiao"].tolist() == ["Sul", "Sul", "Norte"]
