"""
ESG Tracker: client, project and KPI record keeping with CSV bulk import
and KPI trend visualisation.

Records live in a hosted, tenant-scoped store reached through
esg_tracker.store. Every read and import takes the tenant identifier
explicitly; nothing in the package holds an implicit current user.

To import a CSV:
    Build a mapping with ingestion.build_mapping(kind), bind columns with
    ingestion.set_binding, then call ingestion.upload(text, mapping,
    tenant_id, store). Row failures come back on the BatchOutcome.

To connect to Streamlit:
    Call dashboard.get_kpi_visualization(kpis, criteria) for the filtered
    series, chart datasets and metric summary cards, and
    charts.build_trend_figure(chart) for the Plotly figure.

To add a field to an import:
    Add an entry to config.FIELD_CATALOG for the entity kind, and a matching
    attribute on the record dataclass in esg_tracker.models.
"""
