from __future__ import annotations

from datetime import datetime

import pytest

from esg_tracker.config import CHART_PALETTE
from esg_tracker.models import KPI
from esg_tracker.timeseries import (
    FilterCriteria,
    filter_kpis,
    group_by_metric,
    summarize,
    time_period_start,
    to_chart_series,
)


def _kpi(metric: str, value: float, date: str, project: str = "p1", client: str = "c1") -> dict:
    return {
        "metric_name": metric, "value": value, "unit": "t", "date": date,
        "project_id": project, "project": {"id": project, "client_id": client},
    }


def test_filter_date_range_is_inclusive_and_sorted(sample_kpis) -> None:
    result = filter_kpis(sample_kpis, {"date_from": "2024-01-10", "date_to": "2024-02-01"})
    assert [(k["metric_name"], k["date"]) for k in result] == [
        ("Water", "2024-01-15"),
        ("CO2", "2024-02-01"),
    ]


def test_filter_without_criteria_sorts_ascending(sample_kpis) -> None:
    result = filter_kpis(list(reversed(sample_kpis)))
    assert [k["date"] for k in result] == ["2024-01-01", "2024-01-15", "2024-02-01"]


def test_filter_keeps_input_order_for_equal_dates() -> None:
    kpis = [
        _kpi("B", 2, "2024-03-01"),
        _kpi("A", 1, "2024-01-01"),
        _kpi("C", 3, "2024-03-01"),
        _kpi("D", 4, "2024-03-01"),
    ]
    assert [k["metric_name"] for k in filter_kpis(kpis)] == ["A", "B", "C", "D"]


def test_filter_by_client_project_and_metric(sample_kpis) -> None:
    assert [k["value"] for k in filter_kpis(sample_kpis, FilterCriteria(client="c1"))] == [10.0, 20.0]
    assert [k["value"] for k in filter_kpis(sample_kpis, FilterCriteria(project="p2"))] == [5.0]
    assert [k["value"] for k in filter_kpis(sample_kpis, FilterCriteria(metric="wat"))] == [5.0]
    assert filter_kpis(sample_kpis, FilterCriteria(client="c1", metric="water")) == []


def test_filter_client_resolved_through_projects(sample_kpis) -> None:
    kpis = [{k: v for k, v in row.items() if k != "project"} for row in sample_kpis]
    projects = [{"id": "p1", "client_id": "c9"}, {"id": "p2", "client_id": "c2"}]
    result = filter_kpis(kpis, {"client": "c9"}, projects=projects)
    assert [k["value"] for k in result] == [10.0, 20.0]


def test_filter_empty_values_are_no_constraint(sample_kpis) -> None:
    assert len(filter_kpis(sample_kpis, {"client": "", "metric": "", "date_from": None})) == 3


def test_filter_accepts_kpi_records() -> None:
    records = [
        KPI("CO2", 2.0, "t", "p1", "2024-02-01", "t1"),
        KPI("CO2", 1.0, "t", "p1", "2024-01-01", "t1"),
    ]
    assert [r.value for r in filter_kpis(records, {"project": "p1"})] == [1.0, 2.0]


def test_time_period_window_uses_calendar_offsets() -> None:
    now = datetime(2024, 6, 15, 13, 30)
    assert str(time_period_start("3months", now).date()) == "2024-03-15"
    assert str(time_period_start("1year", now).date()) == "2023-06-15"
    assert str(time_period_start("3years", now).date()) == "2021-06-15"

    kpis = [
        _kpi("CO2", 1, "2024-03-14"),
        _kpi("CO2", 2, "2024-03-15"),
        _kpi("CO2", 3, "2024-06-01"),
        _kpi("CO2", 4, "not a date"),
    ]
    result = filter_kpis(kpis, FilterCriteria(time_period="3months"), now=now)
    assert [k["value"] for k in result] == [2, 3]


def test_filter_criteria_rejects_unknown_time_period() -> None:
    with pytest.raises(ValueError):
        FilterCriteria(time_period="5years")


def test_group_by_metric_preserves_first_appearance(sample_kpis) -> None:
    grouped = group_by_metric(filter_kpis(sample_kpis))
    assert list(grouped) == ["CO2", "Water"]
    assert grouped["CO2"] == [("2024-01-01", 10.0), ("2024-02-01", 20.0)]


def test_chart_series_labels_and_colors(sample_kpis) -> None:
    chart = to_chart_series(group_by_metric(filter_kpis(sample_kpis)))
    assert chart["labels"] == ["2024-01-01", "2024-01-15", "2024-02-01"]
    co2, water = chart["datasets"]
    assert co2["label"] == "CO2"
    assert co2["data"] == [{"x": "2024-01-01", "y": 10.0}, {"x": "2024-02-01", "y": 20.0}]
    assert co2["border_color"] == CHART_PALETTE[0]
    assert co2["background_color"] == "rgba(59, 130, 246, 0.1)"
    assert water["border_color"] == CHART_PALETTE[1]
    assert co2["tension"] == 0.1


def test_chart_series_palette_wraps_after_six_metrics() -> None:
    grouped = {f"M{i}": [("2024-01-01", float(i))] for i in range(8)}
    datasets = to_chart_series(grouped)["datasets"]
    assert datasets[6]["border_color"] == datasets[0]["border_color"]
    assert datasets[7]["border_color"] == datasets[1]["border_color"]
    assert len({d["border_color"] for d in datasets[:6]}) == 6


def test_chart_series_empty() -> None:
    assert to_chart_series({}) == {"labels": [], "datasets": []}


def test_summarize_counts_averages_and_latest(sample_kpis) -> None:
    summary = summarize(filter_kpis(sample_kpis))
    assert summary == [
        {"metric_name": "CO2", "count": 2, "average": 15.0, "latest_value": 20.0, "unit": "t"},
        {"metric_name": "Water", "count": 1, "average": 5.0, "latest_value": 5.0, "unit": "ML"},
    ]


def test_summarize_latest_follows_series_order() -> None:
    unsorted = [_kpi("CO2", 20, "2024-02-01"), _kpi("CO2", 10, "2024-01-01")]
    [card] = summarize(unsorted)
    assert card["latest_value"] == 10.0
    assert summarize([]) == []


def test_summarize_keeps_rows_without_metric_name() -> None:
    series = [_kpi(None, 4, "2024-01-01"), _kpi("CO2", 1, "2024-01-02"), _kpi(None, 6, "2024-01-03")]
    summary = summarize(series)
    assert {s["metric_name"]: (s["count"], s["average"]) for s in summary} == {
        None: (2, 5.0),
        "CO2": (1, 1.0),
    }
    assert list(group_by_metric(series)) == [None, "CO2"]
