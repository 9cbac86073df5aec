"""
Dashboard-ready output functions.

These are the primary entry points for the Streamlit front end. Each
function takes rows already fetched for one tenant and returns plain dicts
or lists suitable for rendering cards, charts, and tables.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from .config import (
    ACTIVE_PROJECT_STATUS,
    DEFAULT_TIME_PERIOD,
    OTHER_COLOR,
    RISK_COLORS,
    STATUS_COLORS,
)
from .timeseries import (
    FilterCriteria,
    filter_kpis,
    group_by_metric,
    summarize,
    to_chart_series,
)

logger = logging.getLogger(__name__)


def risk_color(level: str | None) -> str:
    """Display color for an ESG risk level; anything unrecognised is grey."""
    return RISK_COLORS.get(str(level or "").strip().lower(), OTHER_COLOR)


def status_color(status: str | None) -> str:
    """Display color for a project status; anything unrecognised is grey."""
    return STATUS_COLORS.get(str(status or "").strip().lower(), OTHER_COLOR)


def get_summary_counts(
    clients: list[dict],
    projects: list[dict],
    kpis: list[dict],
) -> dict:
    """Numbers for the three dashboard cards."""
    return {
        "total_clients": len(clients),
        "active_projects": sum(1 for p in projects if p.get("status") == ACTIVE_PROJECT_STATUS),
        "total_kpis": len(kpis),
    }


def get_available_metrics(kpis: Iterable[dict]) -> list[str]:
    """Sorted unique metric names for UI dropdowns."""
    return sorted({k["metric_name"] for k in kpis if k.get("metric_name")})


def get_kpi_visualization(
    kpis: list[dict],
    criteria: FilterCriteria | dict | None = None,
    projects: list[dict] | None = None,
    now: datetime | None = None,
) -> dict:
    """Single entry point the Visualize page calls on every filter change.

    Returns
    -------
    {
        "series": [...filtered KPI rows, oldest first...],
        "chart": {"labels": [...], "datasets": [...]},
        "summary": [{"metric_name", "count", "average", "latest_value", "unit"}, ...],
    }
    """
    series = filter_kpis(kpis, criteria, projects=projects, now=now)
    return {
        "series": series,
        "chart": to_chart_series(group_by_metric(series)),
        "summary": summarize(series),
    }


def get_client_overview(
    client_id: str,
    clients: list[dict],
    projects: list[dict],
    kpis: list[dict],
    time_period: str = DEFAULT_TIME_PERIOD,
    now: datetime | None = None,
) -> dict | None:
    """Client detail page: profile, projects, KPIs per project, trend chart.

    Returns None when the client is not among the tenant's clients.
    """
    client = next((c for c in clients if c.get("id") == client_id), None)
    if client is None:
        logger.warning("Client '%s' not found for tenant", client_id)
        return None

    client_projects = [p for p in projects if p.get("client_id") == client_id]
    kpis_by_project = {
        p["id"]: [k for k in kpis if k.get("project_id") == p["id"]]
        for p in client_projects
    }
    client_kpis = [k for rows in kpis_by_project.values() for k in rows]

    series = filter_kpis(
        client_kpis,
        FilterCriteria(time_period=time_period),
        now=now,
    )

    return {
        "client": client,
        "risk_color": risk_color(client.get("esg_risk_level")),
        "projects": client_projects,
        "kpis_by_project": kpis_by_project,
        "total_kpis": len(client_kpis),
        "time_period": time_period,
        "chart": to_chart_series(group_by_metric(series)),
    }


def get_project_kpi_summary(kpis: list[dict]) -> dict | None:
    """Project detail card.

    ``kpis`` is expected newest first, as the store returns it, so the first
    three rows are the latest observations.
    """
    if not kpis:
        return None
    return {
        "total": len(kpis),
        "unique_metrics": len({k["metric_name"] for k in kpis}),
        "latest": kpis[:3],
        "last_updated": kpis[0].get("date"),
    }


def export_pdf(*_args, **_kwargs) -> None:
    """PDF export placeholder; rendering is not implemented."""
    logger.info("PDF export requested but not available")
    return None
