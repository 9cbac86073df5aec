"""
Simulated data generator for the ESG tracker demo.

Generates plausible clients, projects and monthly ESG KPI observations.
All values are synthetic. Seeding goes through the same materialize/ingest
path as a CSV upload, so the demo store holds exactly what an upload would
have produced.
"""

import logging

import numpy as np
import pandas as pd

from .ingestion import build_mapping, ingest, materialize, suggest_bindings
from .store import RecordStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Demo catalogue
# ---------------------------------------------------------------------------
_CLIENTS = [
    ("Northwind Mining", "Mining", "High", "esg@northwind.example"),
    ("Bluewater Utilities", "Utilities", "Medium", "sustainability@bluewater.example"),
    ("Greenfield Foods", "Agriculture", "Low", "impact@greenfield.example"),
]

# (client index, name, status, deadline, description)
_PROJECTS = [
    (0, "Tailings water recycling", "In Progress", "2026-12-31", "Cut raw water draw at the concentrator"),
    (0, "Haul fleet electrification", "Planning", "2027-06-30", None),
    (1, "Leak detection rollout", "In Progress", "2026-09-30", "Acoustic sensors on trunk mains"),
    (1, "Board diversity review", "Completed", "2025-11-15", "Governance workstream"),
    (2, "Regenerative sourcing pilot", "On Hold", "2027-03-31", "Paused pending supplier audit"),
]

# metric -> (unit, baseline, monthly drift, noise std)
_METRICS = {
    "CO2 Emissions": ("tCO2e", 1_200.0, -8.0, 40.0),
    "Water Withdrawal": ("ML", 310.0, -1.5, 12.0),
    "Energy Use": ("MWh", 4_800.0, -15.0, 150.0),
    "Waste Diverted": ("%", 52.0, 0.6, 2.0),
    "Lost Time Injury Rate": ("per 1M hrs", 2.4, -0.03, 0.3),
}

# Metrics tracked per project (by project index)
_PROJECT_METRICS = {
    0: ["Water Withdrawal", "CO2 Emissions"],
    1: ["CO2 Emissions", "Energy Use"],
    2: ["Water Withdrawal"],
    3: ["Lost Time Injury Rate"],
    4: ["Waste Diverted", "CO2 Emissions"],
}


def generate_clients() -> pd.DataFrame:
    """Demo client rows with upload-style column names."""
    return pd.DataFrame(
        _CLIENTS,
        columns=["Client Name", "Industry", "ESG Risk Level", "Email"],
    )


def generate_kpis(
    project_ids: list[str],
    end_month: str | None = None,
    n_months: int = 18,
    seed: int = 42,
) -> pd.DataFrame:
    """Monthly KPI observations for each demo project.

    Values follow a linear drift from the metric baseline plus gaussian
    noise, rounded to two decimals. Observations fall on the first of each
    month, ending at ``end_month`` (default: the current month).
    """
    rng = np.random.default_rng(seed)
    end = pd.Timestamp(end_month) if end_month else pd.Timestamp.now().normalize()
    months = pd.date_range(end=end.to_period("M").to_timestamp(), periods=n_months, freq="MS")

    rows = []
    for index, project_id in enumerate(project_ids):
        for metric in _PROJECT_METRICS.get(index, []):
            unit, baseline, drift, std = _METRICS[metric]
            scale = 1.0 + 0.15 * index
            for step, month in enumerate(months):
                value = (baseline + drift * step) * scale + rng.normal(0, std)
                rows.append({
                    "Metric Name": metric,
                    "Value": round(max(value, 0.0), 2),
                    "Unit": unit,
                    "Project ID": project_id,
                    "Date": month.strftime("%Y-%m-%d"),
                })

    return pd.DataFrame(rows)


def to_csv_text(df: pd.DataFrame) -> str:
    """Render demo rows in the upload grammar (plain commas, no quoting)."""
    return df.to_csv(index=False, lineterminator="\n")


def _seed(store: RecordStore, entity_kind: str, df: pd.DataFrame, tenant_id: str) -> list[dict]:
    mapping = suggest_bindings(build_mapping(entity_kind), list(df.columns))
    rows = df.fillna("").astype(str).to_dict(orient="records")
    outcome = ingest(materialize(mapping, rows, tenant_id), store, entity_kind)
    if outcome.failures:
        logger.warning("Demo seeding: %s", outcome.message)
    return outcome.created


def seed_store(
    store: RecordStore,
    tenant_id: str,
    n_months: int = 18,
    end_month: str | None = None,
) -> dict[str, int]:
    """Populate ``store`` with the demo dataset for ``tenant_id``."""
    clients = _seed(store, "clients", generate_clients(), tenant_id)

    project_df = pd.DataFrame([
        {
            "Project Name": name,
            "Client ID": clients[client_index]["id"],
            "Status": status,
            "Deadline": deadline,
            "Description": description or "",
        }
        for client_index, name, status, deadline, description in _PROJECTS
    ])
    projects = _seed(store, "projects", project_df, tenant_id)

    kpi_df = generate_kpis([p["id"] for p in projects], end_month=end_month, n_months=n_months)
    kpis = _seed(store, "kpis", kpi_df, tenant_id)

    counts = {"clients": len(clients), "projects": len(projects), "kpis": len(kpis)}
    logger.info("Seeded demo store: %s", counts)
    return counts
