# dashboard_views.py
# Table and trend charts for the dashboard tab

import json
from typing import Dict, List, Optional

import pandas as pd
import plotly.graph_objects as go

from coastal_models import CoastalRecord, PredictionResult
from coastal_processor import chart_series

TABLE_COLUMNS = ["Region", "Date", "Sea Level", "Erosion Rate", "Precipitation"]
NO_DATA_MESSAGE = "No data found."

# (series key, title, trace name, line color, fill color)
TREND_CHARTS = [
    ("sea_level", "Sea Level Trend", "Sea Level", "#0d6efd", "rgba(13,110,253,0.1)"),
    ("erosion_rate", "Erosion Rate Trend", "Erosion Rate", "#dc3545", "rgba(220,53,69,0.1)"),
    ("likelihood", "Prediction Likelihood", "Likelihood", "#198754", "rgba(25,135,84,0.1)"),
]


def records_table(records: List[CoastalRecord]) -> pd.DataFrame:
    """One row per record, or a single placeholder row when there is nothing to show."""
    if not records:
        return pd.DataFrame([[NO_DATA_MESSAGE, "", "", "", ""]], columns=TABLE_COLUMNS)
    rows = [[r.region, r.date, r.sea_level, r.erosion_rate, r.precipitation] for r in records]
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def trend_figures(records: List[CoastalRecord]) -> Dict[str, go.Figure]:
    """Sea level, erosion rate and likelihood line charts over the date-sorted records."""
    series = chart_series(records)
    figures = {}
    for key, title, name, color, fill in TREND_CHARTS:
        fig = go.Figure(go.Scatter(
            x=series["labels"],
            y=series[key],
            name=name,
            mode="lines+markers",
            line={"color": color, "shape": "spline", "smoothing": 0.3},
            fill="tozeroy",
            fillcolor=fill,
        ))
        fig.update_layout(
            title=title,
            height=280,
            margin={"l": 40, "r": 10, "t": 40, "b": 40},
            showlegend=True,
        )
        fig.update_xaxes(type="category")
        if key == "likelihood":
            fig.update_yaxes(range=[0, 1])
        else:
            fig.update_yaxes(rangemode="tozero")
        figures[key] = fig
    return figures


def prediction_summary(result: Optional[PredictionResult]) -> Optional[Dict[str, str]]:
    """Headline and pretty-printed raw payload of a prediction, or None."""
    if result is None:
        return None
    headline = f"Likelihood of coastal change: {result.likelihood:.2f}"
    if result.region:
        headline += f" ({result.region}"
        headline += f", {result.date})" if result.date else ")"
    return {
        "headline": headline,
        "raw": json.dumps(result.model_dump(mode="json", by_alias=True), indent=2),
    }
