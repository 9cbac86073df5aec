"""
KPI time-series functions: pure functions with no side effects.

Provides filtering by client/project/metric/date window, grouping by metric,
chart series construction and per-metric summary statistics. Inputs are
KPI rows as returned by the store (dicts, optionally with a nested
``project``) or KPI records; nothing here performs I/O or raises for
filters that match nothing.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, is_dataclass
from datetime import datetime
from typing import Any

import pandas as pd

from .config import CHART_FILL_ALPHA, CHART_PALETTE, CHART_TENSION, TIME_PERIODS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterCriteria:
    """Filters for a KPI series. Unset fields impose no constraint."""

    client: str | None = None
    project: str | None = None
    metric: str | None = None
    date_from: str | None = None
    date_to: str | None = None
    time_period: str | None = None

    def __post_init__(self):
        if self.time_period and self.time_period not in TIME_PERIODS:
            raise ValueError(
                f"Unknown time period '{self.time_period}'; expected one of {sorted(TIME_PERIODS)}"
            )

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "FilterCriteria":
        """Build criteria from a UI filter dict; empty strings mean 'no filter'."""
        aliases = {
            "client": "client",
            "project": "project",
            "metric": "metric",
            "metric_substring": "metric",
            "date_from": "date_from",
            "date_to": "date_to",
            "time_period": "time_period",
        }
        values = {}
        for key, value in options.items():
            target = aliases.get(key)
            text = str(value).strip() if value is not None else ""
            if target and text:
                values[target] = text
        return cls(**values)


def _as_row(item: Any) -> dict:
    if is_dataclass(item):
        return asdict(item)
    return dict(item)


def _client_of(row: dict, project_clients: dict[str, str] | None) -> str:
    if project_clients is not None:
        return project_clients.get(str(row.get("project_id") or ""), "")
    project = row.get("project") or {}
    return str(project.get("client_id") or "")


def time_period_start(time_period: str, now: datetime | None = None) -> pd.Timestamp:
    """First day included in a time-period window (calendar offset from today)."""
    today = pd.Timestamp(now) if now is not None else pd.Timestamp.now()
    if today.tzinfo is not None:
        today = today.tz_localize(None)
    return today.normalize() - pd.DateOffset(**TIME_PERIODS[time_period])


def filter_kpis(
    kpis: Iterable[Any],
    criteria: FilterCriteria | Mapping[str, Any] | None = None,
    *,
    projects: Iterable[Any] | None = None,
    now: datetime | None = None,
) -> list:
    """Apply every supplied criterion (logical AND) and sort by date.

    Parameters
    ----------
    kpis : KPI rows or records.
    criteria : FilterCriteria, or a dict of the same options.
    projects : Project rows used to resolve ``criteria.client``. When omitted
               the KPI's nested ``project.client_id`` is used.
    now : Reference time for ``time_period``; defaults to the current time.

    Returns
    -------
    The matching input items, ascending by date. The sort is stable, so
    observations on the same date keep their input order.

    Notes
    -----
    ``date_from`` / ``date_to`` are inclusive and compared as strings against
    the stored date. ``time_period`` compares parsed dates; a date that does
    not parse as ISO 8601 is excluded by that filter.
    """
    items = list(kpis)
    if criteria is None:
        criteria = FilterCriteria()
    elif not isinstance(criteria, FilterCriteria):
        criteria = FilterCriteria.from_dict(criteria)

    if not items:
        return []

    project_clients = None
    if projects is not None:
        project_clients = {}
        for p in projects:
            p = _as_row(p)
            project_clients[str(p.get("id") or "")] = str(p.get("client_id") or "")

    rows = [_as_row(k) for k in items]
    df = pd.DataFrame({
        "project_id": [str(r.get("project_id") or "") for r in rows],
        "client_id": [_client_of(r, project_clients) for r in rows],
        "metric_name": [str(r.get("metric_name") or "") for r in rows],
        "date": [str(r.get("date") or "") for r in rows],
    })

    mask = pd.Series(True, index=df.index)

    if criteria.client:
        mask &= df["client_id"] == str(criteria.client)

    if criteria.project:
        mask &= df["project_id"] == str(criteria.project)

    if criteria.metric:
        needle = criteria.metric.lower()
        mask &= df["metric_name"].str.lower().str.contains(needle, regex=False)

    if criteria.date_from:
        mask &= df["date"] >= criteria.date_from

    if criteria.date_to:
        mask &= df["date"] <= criteria.date_to

    if criteria.time_period:
        start = time_period_start(criteria.time_period, now)
        parsed = pd.to_datetime(df["date"], errors="coerce", format="ISO8601", utc=True)
        parsed = parsed.dt.tz_localize(None)
        mask &= parsed >= start

    matched = df.loc[mask].sort_values("date", kind="stable")
    if matched.empty:
        logger.info("No KPIs match %s", criteria)
    return [items[i] for i in matched.index]


def group_by_metric(series: Iterable[Any]) -> dict[str, list[tuple[str, float]]]:
    """Group a (filtered, sorted) series into (date, value) points per metric.

    Metric names appear in first-appearance order; points keep series order.
    """
    grouped: dict[str, list[tuple[str, float]]] = {}
    for item in series:
        row = _as_row(item)
        grouped.setdefault(row["metric_name"], []).append(
            (str(row["date"]), float(row["value"]))
        )
    return grouped


def _fill_color(color: str, alpha: float = CHART_FILL_ALPHA) -> str:
    return color.replace("rgb", "rgba").replace(")", f", {alpha})")


def to_chart_series(grouped: Mapping[str, list[tuple[str, float]]]) -> dict:
    """Chart-ready structure: shared date labels plus one dataset per metric.

    Returns
    -------
    {
        "labels": ["2024-01-01", "2024-01-15", ...],   # sorted unique dates
        "datasets": [
            {"label": "CO2", "data": [{"x": ..., "y": ...}, ...],
             "border_color": "rgb(...)", "background_color": "rgba(..., 0.1)",
             "tension": 0.1},
            ...
        ],
    }
    An empty grouping gives {"labels": [], "datasets": []}.
    """
    if not grouped:
        return {"labels": [], "datasets": []}

    labels = sorted({date for points in grouped.values() for date, _ in points})

    datasets = []
    for index, (metric_name, points) in enumerate(grouped.items()):
        color = CHART_PALETTE[index % len(CHART_PALETTE)]
        datasets.append({
            "label": metric_name,
            "data": [{"x": date, "y": value} for date, value in points],
            "border_color": color,
            "background_color": _fill_color(color),
            "tension": CHART_TENSION,
        })

    return {"labels": labels, "datasets": datasets}


def summarize(series: Iterable[Any]) -> list[dict]:
    """Per-metric count, average, latest value and unit.

    ``latest_value`` is the value of the last observation met while walking
    the series in the order given, not the one with the greatest date. For a
    date-sorted series (the output of filter_kpis) the two coincide.
    """
    rows = [_as_row(k) for k in series]
    if not rows:
        return []

    df = pd.DataFrame({
        "metric_name": [r["metric_name"] for r in rows],
        "value": [float(r["value"]) for r in rows],
        "unit": [r.get("unit") for r in rows],
    })

    agg = df.groupby("metric_name", sort=False, dropna=False).agg(
        count=("value", "size"),
        average=("value", "mean"),
        latest_value=("value", "last"),
        unit=("unit", "first"),
    )

    return [
        {
            "metric_name": metric_name if pd.notna(metric_name) else None,
            "count": int(row["count"]),
            "average": float(row["average"]),
            "latest_value": float(row["latest_value"]),
            "unit": row["unit"],
        }
        for metric_name, row in agg.iterrows()
    ]
