from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import altair as alt
import pandas as pd

from dashboard.values import Row, cell, parse_number, to_label

alt.data_transformers.disable_max_rows()

logger = logging.getLogger(__name__)

CHART_KINDS = ("bar", "line", "pie", "area", "donut", "horizontalBar")


@dataclass(frozen=True)
class ChartLimits:
    bar: int = 15
    horizontal_bar: int = 15
    pie: int = 8
    donut: int = 8

    def cap_for(self, kind: str) -> Optional[int]:
        """Display cap for ranked kinds; None for kinds kept in scan order."""
        return {
            "bar": self.bar,
            "horizontalBar": self.horizontal_bar,
            "pie": self.pie,
            "donut": self.donut,
        }.get(kind)


DEFAULT_LIMITS = ChartLimits()


@dataclass(frozen=True)
class ChartPoint:
    name: str
    value: float


@dataclass(frozen=True)
class ChartSpec:
    title: str
    kind: str = "bar"
    category_key: str = ""
    data_key: str = ""
    data: Tuple[ChartPoint, ...] = ()

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> "ChartSpec":
        points = tuple(
            ChartPoint(name=to_label(p.get("name"), fallback=""), value=float(parse_number(p.get("value"))))
            for p in (raw.get("data") or [])
            if isinstance(p, Mapping)
        )
        kind = str(raw.get("type") or raw.get("kind") or "bar")
        if kind not in CHART_KINDS:
            logger.warning("unknown chart type %r, drawing as bar", kind)
            kind = "bar"
        return cls(
            title=str(raw.get("title") or ""),
            kind=kind,
            category_key=str(raw.get("categoryKey") or raw.get("category_key") or ""),
            data_key=str(raw.get("dataKey") or raw.get("data_key") or ""),
            data=points,
        )

    def with_data(self, series: Iterable[ChartPoint]) -> "ChartSpec":
        return replace(self, data=tuple(series))


def aggregate(rows: Sequence[Row], spec: ChartSpec, limits: ChartLimits = DEFAULT_LIMITS) -> Tuple[ChartPoint, ...]:
    """Group rows by the category column and sum the value column.

    Ranked kinds (bar, horizontal bar, pie, donut) are sorted by total,
    largest first, equal totals keeping first-seen order, then capped.
    Line and area keep first-seen order.
    """
    if not spec.category_key or not spec.data_key:
        return spec.data

    frame = pd.DataFrame(
        {
            "name": [to_label(cell(row, spec.category_key)) for row in rows],
            "value": [parse_number(cell(row, spec.data_key)) for row in rows],
        }
    )
    frame["value"] = pd.to_numeric(frame["value"], errors="coerce").astype(float)
    frame = frame.dropna(subset=["value"])
    if frame.empty:
        return ()

    totals = frame.groupby("name", sort=False)["value"].sum().reset_index()
    cap = limits.cap_for(spec.kind)
    if cap is not None:
        totals["first_seen"] = range(len(totals))
        totals = totals.sort_values(["value", "first_seen"], ascending=[False, True]).head(cap)
    return tuple(ChartPoint(name=str(n), value=float(v)) for n, v in zip(totals["name"], totals["value"]))


def recompute_charts(
    specs: Sequence[ChartSpec],
    rows: Sequence[Row],
    *,
    filtered: bool,
    override_rows: Optional[Sequence[Row]] = None,
    limits: ChartLimits = DEFAULT_LIMITS,
) -> List[ChartSpec]:
    # The static series already describe the full dataset.
    if override_rows is None and not filtered:
        return list(specs)
    source = rows if override_rows is None else override_rows
    logger.debug("recomputing %d charts over %d rows", len(specs), len(source))
    return [spec.with_data(aggregate(source, spec, limits)) for spec in specs]


def to_vega_spec(spec: ChartSpec) -> Dict[str, Any]:
    """Vega-Lite spec dict (JSON-serializable) for a chart and its series."""
    data = pd.DataFrame([asdict(p) for p in spec.data], columns=["name", "value"])
    category_title = spec.category_key or "Category"
    value_title = spec.data_key or "Value"
    tooltip = [
        alt.Tooltip("name:N", title=category_title),
        alt.Tooltip("value:Q", title=value_title, format=",.2f"),
    ]
    base = alt.Chart(data, title=spec.title)

    if spec.kind in ("pie", "donut"):
        chart = base.mark_arc(innerRadius=60 if spec.kind == "donut" else 0).encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color("name:N", title=category_title, sort=None),
            tooltip=tooltip,
        )
    elif spec.kind == "horizontalBar":
        chart = base.mark_bar().encode(
            y=alt.Y("name:N", title=category_title, sort=None, axis=alt.Axis(grid=False)),
            x=alt.X("value:Q", title=value_title, axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=tooltip,
        )
    elif spec.kind in ("line", "area"):
        mark = base.mark_line(point={"filled": True}) if spec.kind == "line" else base.mark_area(line=True, opacity=0.6)
        chart = mark.encode(
            x=alt.X("name:N", title=category_title, sort=None, axis=alt.Axis(grid=False)),
            y=alt.Y("value:Q", title=value_title, axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=tooltip,
        )
    else:
        chart = base.mark_bar().encode(
            x=alt.X("name:N", title=category_title, sort=None, axis=alt.Axis(grid=False)),
            y=alt.Y("value:Q", title=value_title, axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=tooltip,
        )
    return chart.to_dict()
