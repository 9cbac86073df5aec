"""
ESG Tracker — End-to-end pipeline smoke test.

Seeds an in-memory store, runs a CSV upload through the field mapper, then
builds the KPI chart series and summaries and prints them.

Usage:
    python main.py
"""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from esg_tracker.config import DEFAULT_TENANT_ID
from esg_tracker.dashboard import (
    get_client_overview,
    get_kpi_visualization,
    get_summary_counts,
)
from esg_tracker.ingestion import build_mapping, is_submittable, parse, set_binding, upload
from esg_tracker.simulator import generate_kpis, seed_store, to_csv_text
from esg_tracker.store import InMemoryStore
from esg_tracker.timeseries import FilterCriteria

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Run the full pipeline and print smoke-test outputs."""

    tenant_id = DEFAULT_TENANT_ID

    print("=" * 70)
    print("  ESG TRACKER — Ingestion & KPI Trends")
    print("  Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Seed demo data
    # ------------------------------------------------------------------
    print("[ 1 ] SEEDING DEMO STORE")
    print("-" * 40)

    store = InMemoryStore()
    counts = seed_store(store, tenant_id)
    print(f"\nSeeded: {counts}")

    # ------------------------------------------------------------------
    # 2. CSV upload with a hand-built mapping
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] CSV UPLOAD")
    print("-" * 40)

    project_id = store.list_projects(tenant_id)[0]["id"]
    kpi_df = generate_kpis([project_id], n_months=3, seed=7)
    csv_text = to_csv_text(kpi_df)
    # one bad value to show a row-level failure
    csv_text += f"CO2 Emissions,n/a,tCO2e,{project_id},2026-01-01\n"

    parsed = parse(csv_text)
    print(f"\nHeaders: {parsed.headers}")
    print(f"Rows: {len(parsed.rows)}")

    mapping = build_mapping("kpis")
    print(f"Submittable before binding: {is_submittable(mapping)}")
    for db_field, column in [
        ("metric_name", "Metric Name"),
        ("value", "Value"),
        ("unit", "Unit"),
        ("project_id", "Project ID"),
        ("date", "Date"),
    ]:
        mapping = set_binding(mapping, db_field, column)
    print(f"Submittable after binding:  {is_submittable(mapping)}")

    outcome = upload(csv_text, mapping, tenant_id, store)
    print(f"\n{outcome.message}")
    for failure in outcome.failures:
        print(f"  row {failure.row_index}: [{failure.stage}] {failure.field} = {failure.raw_value!r}")

    # ------------------------------------------------------------------
    # 3. Dashboard outputs
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] DASHBOARD OUTPUTS")
    print("-" * 40)

    clients = store.list_clients(tenant_id)
    projects = store.list_projects(tenant_id)
    kpis = store.list_kpis(tenant_id)

    print(f"\nSummary cards: {get_summary_counts(clients, projects, kpis)}")

    view = get_kpi_visualization(kpis, FilterCriteria(metric="co2", time_period="1year"), projects=projects)
    print(f"\nCO2 series, last year: {len(view['series'])} points")
    print(f"Chart labels: {len(view['chart']['labels'])}, datasets: {len(view['chart']['datasets'])}")
    for card in view["summary"]:
        print(
            f"  {card['metric_name']:24s} | n={card['count']:3d} | "
            f"avg={card['average']:10.2f} | latest={card['latest_value']:10.2f} {card['unit']}"
        )

    overview = get_client_overview(clients[-1]["id"], clients, projects, kpis, "3months")
    if overview is not None:
        print(f"\nClient: {overview['client']['name']} ({overview['client']['esg_risk_level']})")
        print(f"  Projects: {len(overview['projects'])}, KPIs: {overview['total_kpis']}")
        print(f"  3-month chart datasets: {[d['label'] for d in overview['chart']['datasets']]}")

    # ------------------------------------------------------------------
    # 4. Checks
    # ------------------------------------------------------------------
    print("\n")
    print("[ 4 ] ACCEPTANCE CHECKS")
    print("-" * 40)

    check1 = outcome.succeeded == len(kpi_df) and outcome.failed == 1
    print(f"\n  [{'PASS' if check1 else 'FAIL'}] Upload: {outcome.succeeded} created, {outcome.failed} failed")

    dates = [k["date"] for k in view["series"]]
    check2 = dates == sorted(dates)
    print(f"  [{'PASS' if check2 else 'FAIL'}] Filtered series is in date order")

    check3 = all(isinstance(c["average"], float) for c in view["summary"])
    print(f"  [{'PASS' if check3 else 'FAIL'}] Summary cards carry numeric averages")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
