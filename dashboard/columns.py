from __future__ import annotations

import logging
import re
from typing import List, Sequence

from dashboard.values import Row

logger = logging.getLogger(__name__)

DATE_COLUMN_PATTERN = re.compile(r"data|date|dt_|emissao|emissão|periodo", re.IGNORECASE)

SENSITIVE_KEYWORDS = (
    "cpf",
    "cnpj",
    "salario",
    "salário",
    "valor",
    "preço",
    "total",
    "custo",
    "margem",
    "telefone",
    "email",
)


def table_headers(rows: Sequence[Row]) -> List[str]:
    if not rows:
        return []
    return list(rows[0].keys())


def infer_date_column(rows: Sequence[Row]) -> str:
    """Name of the first column that looks like a date, or "" if none does."""
    for key in table_headers(rows):
        if DATE_COLUMN_PATTERN.search(str(key)):
            logger.debug("inferred date column %r", key)
            return key
    return ""


def is_sensitive_column(name: str) -> bool:
    lowered = name.lower()
    return any(keyword in lowered for keyword in SENSITIVE_KEYWORDS)
