"""
Typed entity records.

Rows coming out of an upload are flat string mappings; they are coerced into
one of these records before they reach the store. Records fetched from the
store come back as plain dicts and can be lifted with ``from_row``.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any


@dataclass
class _Record:
    def to_payload(self) -> dict[str, Any]:
        """Store payload: every populated field, minus server-assigned ones."""
        payload = asdict(self)
        for key in ("id", "created_at"):
            payload.pop(key, None)
        return {k: v for k, v in payload.items() if v is not None}

    @classmethod
    def from_row(cls, row: dict):
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in row.items() if k in known})


@dataclass
class Client(_Record):
    name: str
    industry: str
    esg_risk_level: str
    email: str
    user_id: str
    id: str | None = None
    created_at: str | None = None


@dataclass
class Project(_Record):
    name: str
    client_id: str
    status: str
    deadline: str
    user_id: str
    description: str | None = None
    id: str | None = None
    created_at: str | None = None


@dataclass
class KPI(_Record):
    metric_name: str
    value: float
    unit: str
    project_id: str
    date: str
    user_id: str
    id: str | None = None
    created_at: str | None = None


RECORD_TYPES: dict[str, type] = {
    "clients": Client,
    "projects": Project,
    "kpis": KPI,
}
