from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

import pytest


@pytest.fixture()
def regional_rows() -> List[Dict[str, Any]]:
    return [
        {"Data": "01/01/2025", "Regiao": "Sul", "Valor": "100,00"},
        {"Data": "15/06/2025", "Regiao": "Sul", "Valor": "50,00"},
        {"Data": "01/01/2025", "Regiao": "Norte", "Valor": "30,00"},
    ]


@pytest.fixture()
def now() -> datetime:
    return datetime(2025, 3, 15, 14, 30)


@pytest.fixture()
def analysis_payload(regional_rows) -> Dict[str, Any]:
    return {
        "reportType": "Vendas",
        "reportName": "Vendas por Região",
        "kpis": [
            {
                "label": "Receita Total",
                "value": "R$ 180,00",
                "trend": "up",
                "trendValue": "12%",
                "description": "Soma do faturamento.",
            }
        ],
        "charts": [
            {
                "title": "Receita por Região",
                "type": "bar",
                "dataKey": "Valor",
                "categoryKey": "Regiao",
                "data": [{"name": "Sul", "value": 150}, {"name": "Norte", "value": 30}],
            },
            {
                "title": "Resumo",
                "type": "pie",
                "dataKey": "",
                "categoryKey": "",
                "data": [{"name": "Fixo", "value": 1}],
            },
        ],
        "executiveSummary": {
            "situationalDiagnosis": "Sul lidera.",
            "actionPlan": [
                {"text": 'Revisar "mix" do Norte', "impact": "ALTO", "effort": "IMEDIATO"},
                {"text": "Expandir Sul", "impact": "MÉDIO", "effort": "CURTO PRAZO"},
            ],
        },
        "columnMapping": [{"original": "Região", "clean": "Regiao"}],
        "cleanData": regional_rows,
    }
