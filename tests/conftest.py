from __future__ import annotations

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from esg_tracker.store import InMemoryStore

TENANT = "tenant-a"


@pytest.fixture()
def tenant_id() -> str:
    return TENANT


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def client_row(store: InMemoryStore, tenant_id: str) -> dict:
    return store.create(
        "clients",
        {
            "name": "Acme Metals",
            "industry": "Mining",
            "esg_risk_level": "High",
            "email": "esg@acme.example",
            "user_id": tenant_id,
        },
    )


@pytest.fixture()
def project_row(store: InMemoryStore, tenant_id: str, client_row: dict) -> dict:
    return store.create(
        "projects",
        {
            "name": "Water recycling",
            "client_id": client_row["id"],
            "status": "In Progress",
            "deadline": "2026-12-31",
            "user_id": tenant_id,
        },
    )


@pytest.fixture()
def sample_kpis() -> list[dict]:
    return [
        {"metric_name": "CO2", "value": 10.0, "unit": "t", "date": "2024-01-01", "project_id": "p1",
         "project": {"id": "p1", "client_id": "c1"}},
        {"metric_name": "CO2", "value": 20.0, "unit": "t", "date": "2024-02-01", "project_id": "p1",
         "project": {"id": "p1", "client_id": "c1"}},
        {"metric_name": "Water", "value": 5.0, "unit": "ML", "date": "2024-01-15", "project_id": "p2",
         "project": {"id": "p2", "client_id": "c2"}},
    ]
