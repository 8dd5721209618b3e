from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Dict, Optional, Union

from dashboard.values import format_date_to_local_iso, parse_iso_date

ALL = "all"
LAST_30_DAYS = "last-30-days"
CURRENT_MONTH = "current-month"
LAST_MONTH = "last-month"
YEAR_TO_DATE = "year-to-date"
CUSTOM = "custom"

PRESETS = (ALL, LAST_30_DAYS, CURRENT_MONTH, LAST_MONTH, YEAR_TO_DATE)

PRESET_ALIASES = {
    "30d": LAST_30_DAYS,
    "current_month": CURRENT_MONTH,
    "last_month": LAST_MONTH,
    "ytd": YEAR_TO_DATE,
}

PRESET_LABELS = {
    ALL: "All time",
    LAST_30_DAYS: "Last 30 days",
    CURRENT_MONTH: "This month",
    LAST_MONTH: "Last month",
    YEAR_TO_DATE: "Year to date (YTD)",
    CUSTOM: "Custom",
}

Moment = Union[date, datetime]


class UnknownPresetError(ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown date preset {name!r}. Expected one of: {', '.join(PRESETS)}.")
        self.name = name


@dataclass(frozen=True)
class DateRange:
    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def is_open(self) -> bool:
        """True when neither bound is set."""
        return self.start is None and self.end is None

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True

    @classmethod
    def from_iso(cls, start: object = None, end: object = None) -> "DateRange":
        return cls(start=parse_iso_date(start), end=parse_iso_date(end))

    def to_iso(self) -> Dict[str, Optional[str]]:
        return {
            "start": format_date_to_local_iso(self.start) if self.start else None,
            "end": format_date_to_local_iso(self.end) if self.end else None,
        }


def canonical_preset(name: str) -> str:
    key = (name or "").strip().lower()
    key = PRESET_ALIASES.get(key, key)
    if key not in PRESETS:
        raise UnknownPresetError(name)
    return key


def _today(now: Moment) -> date:
    if isinstance(now, datetime):
        return now.date()
    return now


def resolve_preset(name: str, now: Moment) -> DateRange:
    """Concrete range for a named preset, relative to `now`."""
    preset = canonical_preset(name)
    today = _today(now)
    if preset == ALL:
        return DateRange()
    if preset == LAST_30_DAYS:
        return DateRange(today - timedelta(days=30), today)
    month_start = today.replace(day=1)
    if preset == CURRENT_MONTH:
        return DateRange(month_start, today)
    if preset == LAST_MONTH:
        previous_month_end = month_start - timedelta(days=1)
        return DateRange(previous_month_end.replace(day=1), previous_month_end)
    return DateRange(today.replace(month=1, day=1), today)


@dataclass(frozen=True)
class DateSelection:
    """The active range plus the preset it came from (`custom` once edited)."""

    preset: str = ALL
    date_range: DateRange = field(default_factory=DateRange)

    @property
    def label(self) -> str:
        return PRESET_LABELS.get(self.preset, PRESET_LABELS[CUSTOM])

    @classmethod
    def from_preset(cls, name: str, now: Moment) -> "DateSelection":
        return cls(preset=canonical_preset(name), date_range=resolve_preset(name, now))

    def with_preset(self, name: str, now: Moment) -> "DateSelection":
        return DateSelection.from_preset(name, now)

    def with_start(self, start: Optional[date]) -> "DateSelection":
        return replace(self, preset=CUSTOM, date_range=replace(self.date_range, start=start))

    def with_end(self, end: Optional[date]) -> "DateSelection":
        return replace(self, preset=CUSTOM, date_range=replace(self.date_range, end=end))
