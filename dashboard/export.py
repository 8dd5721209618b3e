from __future__ import annotations

import csv
from datetime import date
from typing import Optional, Sequence

import pandas as pd

from dashboard.analysis import ActionPlanItem
from dashboard.values import Row, format_date_to_local_iso

ACTION_PLAN_HEADERS = ["Ação Recomendada", "Impacto", "Esforço Estimado"]
UTF8_BOM = "\ufeff"


def rows_to_csv(rows: Sequence[Row]) -> bytes:
    df = pd.DataFrame.from_records(list(rows))
    return df.to_csv(index=False).encode("utf-8")


def action_plan_to_csv(items: Sequence[ActionPlanItem]) -> Optional[bytes]:
    """Semicolon-separated CSV with a BOM so spreadsheet apps read accents; None when empty."""
    if not items:
        return None
    df = pd.DataFrame(
        [[item.text, item.impact, item.effort] for item in items],
        columns=ACTION_PLAN_HEADERS,
    )
    content = df.to_csv(index=False, sep=";", quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    return (UTF8_BOM + content).encode("utf-8")


def action_plan_filename(today: date) -> str:
    return f"Plano_de_Acao_{format_date_to_local_iso(today)}.csv"
