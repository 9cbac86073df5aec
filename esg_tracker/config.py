"""
Configuration: field catalog, enumerations, colors, store settings.

FIELD_CATALOG maps each entity kind to the ordered list of target fields a
CSV upload can bind, with the display label and whether the field is
required before an upload may proceed.
"""

import os

# ---------------------------------------------------------------------------
# Entity kinds and store tables
# ---------------------------------------------------------------------------
ENTITY_KINDS = ("clients", "projects", "kpis")

TABLE_NAMES: dict[str, str] = {
    "clients": "clients",
    "projects": "projects",
    "kpis": "kpis",
}

# Column holding the tenant identifier on every record
TENANT_FIELD = "user_id"

# kind -> (reference column, referenced kind)
REFERENCE_FIELDS: dict[str, tuple[str, str]] = {
    "projects": ("client_id", "clients"),
    "kpis": ("project_id", "projects"),
}

# ---------------------------------------------------------------------------
# Field catalog
# ---------------------------------------------------------------------------
FIELD_CATALOG: dict[str, list[dict]] = {
    "clients": [
        {"db_field": "name", "label": "Client Name", "required": True},
        {"db_field": "industry", "label": "Industry", "required": True},
        {"db_field": "esg_risk_level", "label": "ESG Risk Level", "required": True},
        {"db_field": "email", "label": "Email", "required": True},
    ],
    "projects": [
        {"db_field": "name", "label": "Project Name", "required": True},
        {"db_field": "client_id", "label": "Client ID", "required": True},
        {"db_field": "status", "label": "Status", "required": True},
        {"db_field": "deadline", "label": "Deadline", "required": True},
        {"db_field": "description", "label": "Description", "required": False},
    ],
    "kpis": [
        {"db_field": "metric_name", "label": "Metric Name", "required": True},
        {"db_field": "value", "label": "Value", "required": True},
        {"db_field": "unit", "label": "Unit", "required": True},
        {"db_field": "project_id", "label": "Project ID", "required": True},
        {"db_field": "date", "label": "Date", "required": True},
    ],
}

# Fields coerced to float during ingestion
NUMERIC_FIELDS: dict[str, set[str]] = {
    "clients": set(),
    "projects": set(),
    "kpis": {"value"},
}

# ---------------------------------------------------------------------------
# Enumerations and display colors
# ---------------------------------------------------------------------------
ESG_RISK_LEVELS = ("Low", "Medium", "High")
PROJECT_STATUSES = ("Planning", "In Progress", "Completed", "On Hold")
ACTIVE_PROJECT_STATUS = "In Progress"

OTHER_COLOR = "#95a5a6"

RISK_COLORS: dict[str, str] = {
    "low": "#2ecc71",
    "medium": "#f39c12",
    "high": "#e74c3c",
}

STATUS_COLORS: dict[str, str] = {
    "completed": "#2ecc71",
    "in progress": "#3498db",
    "planning": "#f39c12",
    "on hold": "#e74c3c",
}

# Dataset colors, reused cyclically by first-appearance index
CHART_PALETTE = [
    "rgb(59, 130, 246)",   # blue
    "rgb(16, 185, 129)",   # green
    "rgb(245, 158, 11)",   # yellow
    "rgb(239, 68, 68)",    # red
    "rgb(139, 92, 246)",   # purple
    "rgb(236, 72, 153)",   # pink
]
CHART_FILL_ALPHA = 0.1
CHART_TENSION = 0.1

# ---------------------------------------------------------------------------
# Time windows for the client trend chart
# ---------------------------------------------------------------------------
# period key -> pandas DateOffset keyword arguments
TIME_PERIODS: dict[str, dict[str, int]] = {
    "3months": {"months": 3},
    "1year": {"years": 1},
    "3years": {"years": 3},
}
DEFAULT_TIME_PERIOD = "1year"

TIME_PERIOD_LABELS: dict[str, str] = {
    "3months": "Last 3 months",
    "1year": "Last year",
    "3years": "Last 3 years",
}

# ---------------------------------------------------------------------------
# Hosted store settings (environment)
# ---------------------------------------------------------------------------
STORE_URL = os.environ.get("ESG_STORE_URL", "").rstrip("/")
STORE_API_KEY = os.environ.get("ESG_STORE_KEY", "")
STORE_TIMEOUT_S = float(os.environ.get("ESG_STORE_TIMEOUT_S", "30"))

# Tenant used by the demo app when no identity provider is wired in
DEFAULT_TENANT_ID = os.environ.get("ESG_TENANT_ID", "demo-tenant")
