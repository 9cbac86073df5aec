"""
ESG Tracker — Interactive Dashboard

Run with:  streamlit run app.py
"""

import sys
from pathlib import Path

import pandas as pd
import streamlit as st

sys.path.insert(0, str(Path(__file__).resolve().parent))

from esg_tracker.charts import build_trend_figure
from esg_tracker.config import (
    DEFAULT_TENANT_ID,
    DEFAULT_TIME_PERIOD,
    ENTITY_KINDS,
    STORE_URL,
    TIME_PERIOD_LABELS,
)
from esg_tracker.dashboard import (
    export_pdf,
    get_available_metrics,
    get_client_overview,
    get_kpi_visualization,
    get_project_kpi_summary,
    get_summary_counts,
    status_color,
)
from esg_tracker.errors import StoreError
from esg_tracker.ingestion import (
    build_mapping,
    decode_upload,
    ingest,
    is_submittable,
    materialize,
    missing_required,
    parse,
    preview_bindings,
    set_binding,
    suggest_bindings,
)
from esg_tracker.simulator import seed_store
from esg_tracker.store import InMemoryStore, get_store

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="ESG Tracker",
    page_icon="🌱",
    layout="wide",
    initial_sidebar_state="expanded",
)


# ---------------------------------------------------------------------------
# Store (one per server process)
# ---------------------------------------------------------------------------
@st.cache_resource
def load_store():
    store = get_store()
    if isinstance(store, InMemoryStore):
        seed_store(store, DEFAULT_TENANT_ID)
    return store


store = load_store()

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title("ESG Tracker")
st.sidebar.markdown("Clients, projects and KPI trends")
st.sidebar.divider()

tenant_id = st.sidebar.text_input("Tenant", value=DEFAULT_TENANT_ID).strip()

page = st.sidebar.radio(
    "Navigate",
    ["Dashboard", "Visualize", "Client Detail", "Upload"],
)

st.sidebar.divider()
st.sidebar.caption("Hosted store" if STORE_URL else "Demo data (in-memory store)")

if not tenant_id:
    st.warning("Enter a tenant to continue.")
    st.stop()

try:
    clients = store.list_clients(tenant_id)
    projects = store.list_projects(tenant_id)
    kpis = store.list_kpis(tenant_id)
except StoreError as exc:
    st.error(f"Could not load records: {exc}")
    st.stop()

client_names = {c["id"]: c["name"] for c in clients}
project_names = {p["id"]: p["name"] for p in projects}


def summary_card(label: str, value, unit: str = "", color: str = "#3498db"):
    st.markdown(
        f"""
        <div style="background: linear-gradient(135deg, {color}22, {color}11);
                    border-left: 4px solid {color};
                    border-radius: 8px; padding: 16px; margin-bottom: 8px;">
            <div style="font-size: 13px; color: #888; font-weight: 600; text-transform: uppercase;">{label}</div>
            <div style="font-size: 28px; font-weight: 700; color: #222; margin: 4px 0;">{value} <span style="font-size: 14px; color: #888;">{unit}</span></div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def badge(text: str, color: str) -> str:
    return (
        f"<span style='background:{color}22; color:{color}; padding:2px 10px; "
        f"border-radius:10px; font-weight:600;'>{text}</span>"
    )


# ===========================================================================
# PAGE: Dashboard
# ===========================================================================
if page == "Dashboard":
    st.title("Dashboard")

    counts = get_summary_counts(clients, projects, kpis)
    cols = st.columns(3)
    with cols[0]:
        summary_card("Total Clients", counts["total_clients"], color="#3498db")
    with cols[1]:
        summary_card("Active Projects", counts["active_projects"], color="#2ecc71")
    with cols[2]:
        summary_card("Total KPIs", counts["total_kpis"], color="#8e44ad")

    st.divider()
    st.subheader("Projects")
    if projects:
        for p in projects:
            latest = get_project_kpi_summary([k for k in kpis if k["project_id"] == p["id"]])
            detail = (
                f"{latest['total']} KPIs, {latest['unique_metrics']} metrics, last updated {latest['last_updated']}"
                if latest else "No KPIs yet"
            )
            st.markdown(
                f"**{p['name']}** | {client_names.get(p['client_id'], 'Unknown client')} "
                f"{badge(p.get('status') or 'Unknown', status_color(p.get('status')))}  \n{detail}",
                unsafe_allow_html=True,
            )
    else:
        st.info("No projects yet. Use the Upload page to import some.")


# ===========================================================================
# PAGE: Visualize
# ===========================================================================
elif page == "Visualize":
    st.title("KPI Visualization")

    cols = st.columns(6)
    with cols[0]:
        client = st.selectbox(
            "Client", [""] + list(client_names),
            format_func=lambda cid: client_names.get(cid, "All Clients"),
        )
    with cols[1]:
        project_options = [p["id"] for p in projects if not client or p["client_id"] == client]
        project = st.selectbox(
            "Project", [""] + project_options,
            format_func=lambda pid: project_names.get(pid, "All Projects"),
        )
    with cols[2]:
        metric = st.text_input(
            "Metric",
            placeholder="Search metrics...",
            help="Known metrics: " + ", ".join(get_available_metrics(kpis)),
        )
    with cols[3]:
        date_from = st.text_input("From (YYYY-MM-DD)")
    with cols[4]:
        date_to = st.text_input("To (YYYY-MM-DD)")
    with cols[5]:
        chart_type = st.radio("Chart", ["line", "bar"], horizontal=True)

    view = get_kpi_visualization(
        kpis,
        {
            "client": client,
            "project": project,
            "metric": metric,
            "date_from": date_from,
            "date_to": date_to,
        },
        projects=projects,
    )

    st.plotly_chart(build_trend_figure(view["chart"], chart_type), use_container_width=True)

    if view["summary"]:
        st.subheader("Metric Summary")
        card_cols = st.columns(3)
        for i, card in enumerate(view["summary"]):
            with card_cols[i % 3]:
                st.metric(
                    card["metric_name"],
                    f"{card['latest_value']:,.2f} {card['unit'] or ''}",
                    help=f"{card['count']} observations, average {card['average']:,.2f}",
                )

        st.dataframe(
            pd.DataFrame(view["series"])[["date", "metric_name", "value", "unit", "project_id"]]
            .assign(project=lambda df: df["project_id"].map(project_names))
            .drop(columns=["project_id"]),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("No KPIs match the selected filters.")

    if st.button("Export PDF"):
        export_pdf(view)
        st.info("PDF export is not available yet.")


# ===========================================================================
# PAGE: Client Detail
# ===========================================================================
elif page == "Client Detail":
    st.title("Client Detail")

    if not clients:
        st.info("No clients yet. Use the Upload page to import some.")
        st.stop()

    client_id = st.selectbox("Client", list(client_names), format_func=client_names.get)
    periods = list(TIME_PERIOD_LABELS)
    time_period = st.radio(
        "Time period", periods,
        index=periods.index(DEFAULT_TIME_PERIOD),
        format_func=TIME_PERIOD_LABELS.get,
        horizontal=True,
    )

    overview = get_client_overview(client_id, clients, projects, kpis, time_period)
    if overview is None:
        st.error("Client not found")
        st.stop()

    client = overview["client"]
    cols = st.columns(4)
    cols[0].markdown(f"**Company**  \n{client['name']}")
    cols[1].markdown(f"**Industry**  \n{client.get('industry', '')}")
    cols[2].markdown(
        f"**ESG Risk Level**  \n{badge(client.get('esg_risk_level') or 'Unknown', overview['risk_color'])}",
        unsafe_allow_html=True,
    )
    cols[3].markdown(f"**Email**  \n{client.get('email', '')}")

    st.divider()
    if overview["total_kpis"]:
        st.plotly_chart(
            build_trend_figure(overview["chart"], title=f"Impact Trends Over Time - {client['name']}"),
            use_container_width=True,
        )
    else:
        st.info("No KPIs recorded for this client's projects.")

    st.subheader(f"Projects ({len(overview['projects'])})")
    for p in overview["projects"]:
        n_kpis = len(overview["kpis_by_project"].get(p["id"], []))
        st.markdown(
            f"**{p['name']}** {badge(p.get('status') or 'Unknown', status_color(p.get('status')))} "
            f"| deadline {p.get('deadline', '')}, {n_kpis} KPIs",
            unsafe_allow_html=True,
        )


# ===========================================================================
# PAGE: Upload
# ===========================================================================
elif page == "Upload":
    st.title("Upload CSV Data")
    st.caption("Bulk import clients, projects, or KPIs")

    entity_kind = st.radio("Data type", list(ENTITY_KINDS), horizontal=True, format_func=str.title)
    uploaded = st.file_uploader("CSV file", type=["csv"])

    if uploaded is None:
        st.stop()

    parsed = parse(decode_upload(uploaded.getvalue()))
    if parsed.is_empty:
        st.warning("Nothing to import: the file has no data rows.")
        st.stop()

    # Mapping lives in session state for this file + kind and is dropped after upload
    mapping_key = f"mapping::{entity_kind}::{uploaded.name}"
    if mapping_key not in st.session_state:
        st.session_state[mapping_key] = suggest_bindings(build_mapping(entity_kind), parsed.headers)
    mapping = st.session_state[mapping_key]

    st.subheader("Map CSV Fields")
    for b in mapping.bindings:
        cols = st.columns([1, 1, 1])
        options = [""] + parsed.headers
        cols[0].markdown(f"{b.label}{' *' if b.required else ''}")
        choice = cols[1].selectbox(
            b.label,
            options,
            index=options.index(b.csv_field) if b.csv_field in options else 0,
            format_func=lambda h: h or "Select CSV column",
            key=f"{mapping_key}::{b.db_field}",
            label_visibility="collapsed",
        )
        mapping = set_binding(mapping, b.db_field, choice)
    st.session_state[mapping_key] = mapping

    preview = preview_bindings(mapping, parsed.rows)
    if preview:
        st.caption("Preview: " + ", ".join(f"{k} = {v}" for k, v in preview.items()))

    st.subheader(f"Data Preview ({len(parsed.rows)} rows)")
    st.dataframe(pd.DataFrame(parsed.rows).head(3), use_container_width=True, hide_index=True)

    ready = is_submittable(mapping)
    if not ready:
        st.info("Map the required fields: " + ", ".join(missing_required(mapping)))

    if st.button("Upload Data", disabled=not ready, type="primary"):
        progress = st.progress(0.0)
        outcome = ingest(
            materialize(mapping, parsed.rows, tenant_id),
            store,
            entity_kind,
            total=len(parsed.rows),
            on_progress=lambda done, total: progress.progress(done / total),
        )
        if outcome.ok:
            st.success(outcome.message)
            del st.session_state[mapping_key]
        elif outcome.succeeded:
            st.warning(outcome.message)
        else:
            st.error(outcome.message)

        if outcome.failures:
            st.dataframe(
                pd.DataFrame([f.as_dict() for f in outcome.failures]),
                use_container_width=True,
                hide_index=True,
            )
