# netquality_dash/charts.py
# Altair chart builders over the grouped series produced by aggregation.py.
from __future__ import annotations

from typing import Dict, List, Optional

import altair as alt
import pandas as pd

from .aggregation import series_frame
from .analytics import score_label
from .settings import DEFAULT_SETTINGS, Settings

OPERATOR_COLORS = {
    "AIRTEL": "#E63946",
    "JIO": "#0077B6",
    "VI": "#9B59B6",
    "BSNL": "#FF9F40",
    "VANDAPHONE": "#4BC0C0",
}
FALLBACK_COLOR = "#808080"
SERIES_COLORS = {"Peak": "#4A90E2", "Non-Peak": "#E27D4A", "4G": "#4CAF50", "5G": "#E27D4A"}


def _color_scale(values: List[str]) -> alt.Scale:
    lookup = {**SERIES_COLORS, **OPERATOR_COLORS}
    return alt.Scale(domain=values, range=[lookup.get(str(v).upper(), lookup.get(v, FALLBACK_COLOR)) for v in values])


def _grouped_bar(df: pd.DataFrame, x: str, series: str, title: str, y_title: str,
                 *, horizontal: bool = False, stacked: bool = False, fmt: str = ".2f") -> alt.Chart:
    df = df.assign(**{x: df[x].astype(str), series: df[series].astype(str)})
    values = list(dict.fromkeys(df[series].tolist()))
    cat = alt.X(f"{x}:N", title="", sort=None) if not horizontal else alt.Y(f"{x}:N", title="", sort=None)
    num = (alt.Y if not horizontal else alt.X)("value:Q", title=y_title, stack="zero" if stacked else None)
    enc = {
        "x": cat if not horizontal else num,
        "y": num if not horizontal else cat,
        "color": alt.Color(f"{series}:N", scale=_color_scale(values), legend=alt.Legend(title="")),
        "tooltip": [f"{x}:N", f"{series}:N", alt.Tooltip("value:Q", format=fmt), alt.Tooltip("count:Q", format=",.0f")],
    }
    if not stacked:
        enc["xOffset" if not horizontal else "yOffset"] = f"{series}:N"
    return alt.Chart(df).mark_bar().encode(**enc).properties(title=title, height=260)


def _line(df: pd.DataFrame, x: str, series: str, title: str, y_title: str) -> alt.Chart:
    df = df.assign(**{series: df[series].astype(str)})
    values = list(dict.fromkeys(df[series].tolist()))
    return (
        alt.Chart(df).mark_line(point=True)
        .encode(
            x=alt.X(f"{x}:O", title=""),
            y=alt.Y("value:Q", title=y_title),
            color=alt.Color(f"{series}:N", scale=_color_scale(values), legend=alt.Legend(title="")),
            tooltip=[f"{x}:O", f"{series}:N", alt.Tooltip("value:Q", format=".2f")],
        )
        .properties(title=title, height=260)
    )


def score_bar(buckets: Dict) -> alt.Chart:
    """Average network score per operator, tooltip carries the badge label."""
    df = pd.DataFrame(
        [{"operator": str(op), "value": b.average("confidence_score"), "count": b.count} for op, b in buckets.items()],
        columns=["operator", "value", "count"],
    )
    df["label"] = df["value"].map(score_label)
    ops = df["operator"].tolist()
    return (
        alt.Chart(df).mark_bar()
        .encode(
            x=alt.X("operator:N", title="", sort=None),
            y=alt.Y("value:Q", title="Final network score"),
            color=alt.Color("operator:N", scale=_color_scale(ops), legend=None),
            tooltip=["operator:N", alt.Tooltip("value:Q", format=".2f", title="Score"), "label:N"],
        )
        .properties(title="Avg final network score by operator", height=260)
    )


def build_charts(series: Dict, role: str, settings: Settings = DEFAULT_SETTINGS) -> Dict[str, Optional[alt.Chart]]:
    """Title -> chart (None when the series is empty); y axes titled from the measure labels."""
    def frame(key: str, measure: Optional[str], row: str, col: str) -> pd.DataFrame:
        return series_frame(series[key], measure, row, col)

    out: Dict[str, Optional[alt.Chart]] = {}
    if role == "admin":
        specs = [
            ("Avg download by operator (peak vs non-peak)", "download_by_operator_peak", "download_mbps",
             "operator", "window", lambda d, t, y: _grouped_bar(d, "operator", "window", t, y)),
            ("Avg latency by city and network", "latency_by_city_network", "latency_ms",
             "city", "network", lambda d, t, y: _grouped_bar(d, "city", "network", t, y)),
            ("4G vs 5G coverage growth", "coverage_by_year_network", None,
             "year", "network", lambda d, t, y: _grouped_bar(d, "year", "network", t, y, stacked=True, fmt=",.0f")),
            ("Avg download by year and operator", "download_by_year_operator", "download_mbps",
             "year", "operator", lambda d, t, y: _line(d, "year", "operator", t, y)),
            ("Avg latency by year (peak vs non-peak)", "latency_by_year_peak", "latency_ms",
             "year", "window", lambda d, t, y: _line(d, "year", "window", t, y)),
        ]
    elif role == "user":
        specs = [
            ("Avg download by city and operator", "download_by_city_operator", "download_mbps",
             "city", "operator", lambda d, t, y: _grouped_bar(d, "city", "operator", t, y, horizontal=True)),
            ("Avg latency by peak hour", "latency_by_peak_operator", "latency_ms",
             "window", "operator", lambda d, t, y: _grouped_bar(d, "window", "operator", t, y)),
            ("Hourly download speed", "hourly_download_by_operator", "download_mbps",
             "hour", "operator", lambda d, t, y: _line(d, "hour", "operator", t, y)),
        ]
    else:
        raise ValueError(f"Unknown role: {role!r}")

    for title, key, measure, row, col, make in specs:
        d = frame(key, measure, row, col)
        y_title = settings.axis_title(measure) if measure else "Records"
        out[title] = make(d, title, y_title) if not d.empty else None

    if role == "admin":
        scores = series["score_by_operator"]
        out["Avg final network score by operator"] = score_bar(scores) if scores else None
    return out
