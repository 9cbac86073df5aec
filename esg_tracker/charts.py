"""
Plotly figures for KPI chart series.
"""

import plotly.graph_objects as go


def build_trend_figure(
    chart: dict,
    chart_type: str = "line",
    title: str = "KPI Trends Over Time",
    height: int = 420,
) -> go.Figure:
    """Render the output of timeseries.to_chart_series as a line or bar chart.

    The x axis is categorical over ``chart["labels"]`` so every dataset lines
    up on the same dates. An empty series gives an empty figure with a
    placeholder note.
    """
    fig = go.Figure()

    for dataset in chart.get("datasets", []):
        xs = [p["x"] for p in dataset["data"]]
        ys = [p["y"] for p in dataset["data"]]
        if chart_type == "bar":
            fig.add_trace(go.Bar(
                x=xs,
                y=ys,
                name=dataset["label"],
                marker_color=dataset["border_color"],
            ))
        else:
            fig.add_trace(go.Scatter(
                x=xs,
                y=ys,
                name=dataset["label"],
                mode="lines+markers",
                line=dict(color=dataset["border_color"], width=2, shape="spline", smoothing=dataset.get("tension", 0)),
                marker=dict(size=7),
            ))

    fig.update_layout(
        title=title,
        xaxis_title="Date",
        yaxis_title="Value",
        height=height,
        barmode="group",
        plot_bgcolor="rgba(0,0,0,0)",
        legend=dict(orientation="h", y=1.1),
        margin=dict(l=10, r=10, t=60, b=40),
    )
    fig.update_xaxes(type="category", categoryorder="array", categoryarray=chart.get("labels", []))

    if not chart.get("datasets"):
        fig.add_annotation(
            text="No KPI data for the selected filters",
            showarrow=False,
            xref="paper",
            yref="paper",
            x=0.5,
            y=0.5,
            font=dict(size=14, color="#888"),
        )

    return fig
