from __future__ import annotations

import math
import numbers
import re
import warnings
from datetime import date, datetime, timedelta
from typing import Mapping, Optional, Union

import numpy as np
import pandas as pd

CellValue = Union[None, str, int, float, date, datetime]
Row = Mapping[str, CellValue]

NA_LABEL = "N/A"

# Spreadsheet serial dates: day 25569 is 1970-01-01.
SERIAL_FLOOR = 10000
EPOCH_OFFSET_DAYS = 25569
SECONDS_PER_DAY = 86400
_UNIX_EPOCH = datetime(1970, 1, 1)

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_FLOAT = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)")
_BR_DATE = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
_DIGITS_ONLY = re.compile(r"^\d+$")
_HAS_YEAR = re.compile(r"(?<!\d)\d{4}(?!\d)")


def is_missing(value: object) -> bool:
    """True for None, NaN/NA/NaT and the empty string."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, (bool, np.bool_))


def cell(row: Row, key: str) -> Optional[CellValue]:
    """Look up a column, returning None when it is absent or empty."""
    if not key:
        return None
    value = row.get(key)
    if is_missing(value):
        return None
    return value


def _leading_float(text: str) -> float:
    match = _LEADING_FLOAT.match(text)
    if not match:
        return 0.0
    return float(match.group(0))


def parse_number(raw: object) -> float:
    """Coerce a raw cell to a number, reading `1.234,56` as PT-BR formatting.

    Numbers pass through untouched. Anything that cannot be read yields 0.
    """
    if _is_number(raw):
        return raw  # type: ignore[return-value]
    if is_missing(raw) or isinstance(raw, (bool, np.bool_)):
        return 0.0
    text = str(raw).strip()
    if "," in text and "e" not in text.lower():
        text = text.replace(".", "").replace(",", ".", 1)
    return _leading_float(_NON_NUMERIC.sub("", text))


def _from_serial(serial: float) -> Optional[date]:
    if not math.isfinite(serial) or serial < SERIAL_FLOOR:
        return None
    millis = math.floor((serial - EPOCH_OFFSET_DAYS) * SECONDS_PER_DAY * 1000 + 0.5)
    try:
        return (_UNIX_EPOCH + timedelta(milliseconds=millis)).date()
    except OverflowError:
        return None


def _from_text(text: str) -> Optional[date]:
    if _BR_DATE.match(text):
        parts = text.split("/")
        if len(parts) == 3:
            try:
                return date(int(parts[2]), int(parts[1]), int(parts[0]))
            except ValueError:
                pass
    iso = _ISO_DATE.match(text)
    if iso:
        year, month, day = (int(part) for part in iso.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None
    # Without an explicit year the generic parser fills the gaps from today
    # or from year 1.
    if not text or _DIGITS_ONLY.match(text) or not _HAS_YEAR.search(text):
        return None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce", dayfirst=True)
        except (TypeError, ValueError, OverflowError):
            return None
    if pd.isna(parsed):
        return None
    return parsed.date()


def parse_date(raw: object) -> Optional[date]:
    """Read a raw cell as a calendar date.

    Accepts spreadsheet serials (>= 10000), DD/MM/YYYY text, anything the
    generic parser understands, and date objects. Returns None otherwise.
    """
    if is_missing(raw):
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if _is_number(raw):
        return _from_serial(float(raw))
    if isinstance(raw, str):
        return _from_text(raw.strip())
    return None


def format_date_to_local_iso(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_iso_date(value: object) -> Optional[date]:
    """Parse a `YYYY-MM-DD` range boundary; blank or invalid input is unset."""
    if is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    match = _ISO_DATE.match(str(value).strip())
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def to_label(raw: object, fallback: str = NA_LABEL) -> str:
    """Display text of a category cell."""
    if is_missing(raw):
        return fallback
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw)
