from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence

from dashboard.columns import table_headers
from dashboard.presets import (
    ALL,
    CUSTOM,
    DateRange,
    DateSelection,
    Moment,
    UnknownPresetError,
)
from dashboard.values import Row, cell, parse_date, to_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardFilters:
    preset: str = ALL
    date_range: DateRange = field(default_factory=DateRange)
    column_filters: Dict[str, str] = field(default_factory=dict)
    page: int = 1
    privacy: bool = False

    @property
    def selection(self) -> DateSelection:
        return DateSelection(preset=self.preset, date_range=self.date_range)


def _as_page(value: object) -> int:
    try:
        page = int(value)  # type: ignore[arg-type]
    except Exception:
        page = 1
    return max(1, page)


def _as_column_filters(values: Optional[Mapping[object, object]]) -> Dict[str, str]:
    if not values:
        return {}
    out: Dict[str, str] = {}
    for k, v in values.items():
        if k is None or v is None:
            continue
        text = str(v)
        if text:
            out[str(k)] = text
    return out


def _selection(raw: Mapping[str, object], now: Moment) -> DateSelection:
    bounds = DateRange.from_iso(raw.get("start_date"), raw.get("end_date"))
    if not bounds.is_open:
        return DateSelection(preset=CUSTOM, date_range=bounds)

    preset = str(raw.get("preset") or ALL)
    if preset.strip().lower() == CUSTOM:
        return DateSelection(preset=CUSTOM)
    try:
        return DateSelection.from_preset(preset, now)
    except UnknownPresetError:
        logger.warning("ignoring unknown date preset %r", preset)
        return DateSelection()


def normalize_filters(raw: Mapping[str, object], *, now: Optional[Moment] = None) -> DashboardFilters:
    """Build filters from an untrusted dict. Explicit bounds override the preset."""
    selection = _selection(raw, now or datetime.now())
    return DashboardFilters(
        preset=selection.preset,
        date_range=selection.date_range,
        column_filters=_as_column_filters(raw.get("column_filters")),  # type: ignore[arg-type]
        page=_as_page(raw.get("page", 1)),
        privacy=bool(raw.get("privacy", False)),
    )


def _row_in_range(row: Row, date_column: str, date_range: DateRange) -> bool:
    day = parse_date(cell(row, date_column))
    if day is None:
        return True
    return date_range.contains(day)


def filter_by_date_range(rows: Sequence[Row], date_column: str, date_range: DateRange) -> List[Row]:
    """Keep rows whose date falls inside the range.

    Rows without a readable date are kept. Without a date column or without
    any bound this is the identity.
    """
    if not date_column or date_range.is_open:
        return list(rows)
    kept = [row for row in rows if _row_in_range(row, date_column, date_range)]
    logger.debug("date filter on %r kept %d of %d rows", date_column, len(kept), len(rows))
    return kept


def filter_by_columns(rows: Sequence[Row], column_filters: Mapping[str, str]) -> List[Row]:
    """Case-insensitive substring filter per column, as in the data table."""
    headers = table_headers(rows)
    active = {h: column_filters[h].lower() for h in headers if column_filters.get(h)}
    if not active:
        return list(rows)
    return [
        row
        for row in rows
        if all(needle in to_label(cell(row, h), fallback="").lower() for h, needle in active.items())
    ]
