from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence, Tuple

from dashboard.columns import is_sensitive_column, table_headers
from dashboard.filters import DashboardFilters, filter_by_columns
from dashboard.values import Row


@dataclass(frozen=True)
class TableSettings:
    rows_per_page: int = 20
    mask: str = "••••••••"


DEFAULT_TABLE_SETTINGS = TableSettings()


def paginate(rows: Sequence[Row], page: int, rows_per_page: int) -> Tuple[List[Row], int, int]:
    """Return (page rows, clamped page number, total pages)."""
    total_pages = math.ceil(len(rows) / rows_per_page) if rows_per_page > 0 else 0
    page = max(1, min(page, total_pages or 1))
    start = (page - 1) * rows_per_page
    return list(rows[start : start + rows_per_page]), page, total_pages


def mask_row(row: Row, sensitive: Sequence[str], mask: str) -> Dict[str, Any]:
    return {k: (mask if k in sensitive else v) for k, v in row.items()}


def compute_table(
    filters: DashboardFilters,
    ctx: Dict[str, Any],
    *,
    settings: TableSettings = DEFAULT_TABLE_SETTINGS,
) -> Dict[str, Any]:
    rows = ctx.get("filtered_rows", [])
    headers = table_headers(ctx.get("rows", rows))
    matching = filter_by_columns(rows, filters.column_filters)
    page_rows, page, total_pages = paginate(matching, filters.page, settings.rows_per_page)

    sensitive = [h for h in headers if is_sensitive_column(str(h))] if filters.privacy else []
    if sensitive:
        page_rows = [mask_row(r, sensitive, settings.mask) for r in page_rows]

    return {
        "filters": asdict(filters),
        "headers": headers,
        "masked_columns": sensitive,
        "total_rows": len(matching),
        "page": page,
        "total_pages": total_pages,
        "rows_per_page": settings.rows_per_page,
        "rows": page_rows,
    }
