# netquality_dash/aggregation.py
"""
Grouped sums/counts over a records frame.

`aggregate` is the single engine; every chart series of both the admin
and the user view is a thin call on top of it. Buckets are returned in
sorted key order. Nested results (row -> column -> bucket) are filled
with empty buckets for absent combinations so their average reads 0.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .errors import InvalidFilterDimensionError
from .models import AggregationBucket, AreaSummary
from .settings import DEFAULT_SETTINGS, Settings

PEAK = "Peak"
NON_PEAK = "Non-Peak"
PEAK_LABELS = (NON_PEAK, PEAK)
HOURS = tuple(range(24))

Buckets = Dict[Tuple, AggregationBucket]
Nested = Dict[object, Dict[object, AggregationBucket]]


def _py(v):
    """numpy scalar -> plain Python value (keys must compare/hash like the input)."""
    return v.item() if isinstance(v, np.generic) else v


def measure_values(frame: pd.DataFrame, measures: Sequence[str]) -> pd.DataFrame:
    """Numeric view of the measure columns; missing or unusable values count as 0."""
    cols = {}
    for m in measures:
        if m in frame.columns:
            s = pd.to_numeric(frame[m], errors="coerce").replace([np.inf, -np.inf], np.nan)
            cols[m] = s.fillna(0.0).astype(float)
        else:
            cols[m] = pd.Series(0.0, index=frame.index)
    return pd.DataFrame(cols, index=frame.index)


def aggregate(
    frame: pd.DataFrame,
    group_by: Iterable[str],
    measures: Iterable[str] = (),
) -> Buckets:
    """
    Group `frame` by the tuple of `group_by` values (in the given order) and
    return {key_tuple: AggregationBucket} with the record count and the sum of
    every measure. Keys come back sorted.
    """
    group_by = list(group_by)
    measures = list(measures)
    if not group_by:
        raise ValueError("aggregate() needs at least one grouping dimension")
    for dim in group_by:
        if dim not in frame.columns:
            raise InvalidFilterDimensionError(dim, frame.columns)
    if frame.empty:
        return {}

    # keys come from the frame itself so a dimension may also be summed as a measure
    values = measure_values(frame, measures)
    g = values.groupby([frame[d] for d in group_by], sort=True, dropna=False)
    counts = g.size()
    sums = g.sum().to_dict("index") if measures else {}

    out: Buckets = {}
    for key, n in counts.items():
        raw = key if isinstance(key, tuple) else (key,)
        k = tuple(_py(v) for v in raw)
        s = {m: float(v) for m, v in sums.get(key, {}).items()}
        out[k] = AggregationBucket(key=k, count=int(n), sums=s)
    return out


def nest(
    buckets: Buckets,
    rows: Optional[Sequence] = None,
    columns: Optional[Sequence] = None,
) -> Nested:
    """Two-level view of two-dimensional buckets, zero-filled on the given rows/columns."""
    if rows is None:
        rows = sorted({k[0] for k in buckets})
    if columns is None:
        columns = sorted({k[1] for k in buckets})
    out: Nested = {}
    for r in rows:
        out[r] = {}
        for c in columns:
            out[r][c] = buckets.get((r, c), AggregationBucket(key=(r, c)))
    return out


def flat(buckets: Buckets) -> Dict[object, AggregationBucket]:
    """One-dimensional buckets keyed by their single value."""
    return {k[0]: b for k, b in buckets.items()}


def _with_peak_label(frame: pd.DataFrame) -> pd.DataFrame:
    if "is_peak_hour" in frame.columns:
        flag = frame["is_peak_hour"].astype(bool)
    else:
        flag = pd.Series(False, index=frame.index)
    return frame.assign(peak=np.where(flag, PEAK, NON_PEAK))


# ----------------------------
# Admin view groupings
# ----------------------------

def download_by_operator_peak(frame: pd.DataFrame) -> Nested:
    """operator -> {Peak, Non-Peak} -> download sum/count."""
    b = aggregate(_with_peak_label(frame), ["operator", "peak"], ["download_mbps"])
    return nest(b, columns=(PEAK, NON_PEAK))


def latency_by_city_network(frame: pd.DataFrame, network_types: Optional[Sequence[str]] = None) -> Nested:
    """city -> network_type -> latency sum/count."""
    b = aggregate(frame, ["city", "network_type"], ["latency_ms"])
    return nest(b, columns=network_types)


def coverage_by_year_network(frame: pd.DataFrame, network_types: Optional[Sequence[str]] = None) -> Nested:
    """year -> network_type -> record count (read bucket.count)."""
    b = aggregate(frame, ["year", "network_type"])
    return nest(b, columns=network_types)


def download_by_year_operator(frame: pd.DataFrame) -> Nested:
    b = aggregate(frame, ["year", "operator"], ["download_mbps"])
    return nest(b)


def latency_by_year_peak(frame: pd.DataFrame) -> Nested:
    b = aggregate(_with_peak_label(frame), ["year", "peak"], ["latency_ms"])
    return nest(b, columns=(PEAK, NON_PEAK))


def score_by_operator(frame: pd.DataFrame) -> Dict[object, AggregationBucket]:
    return flat(aggregate(frame, ["operator"], ["confidence_score"]))


# ----------------------------
# User view groupings
# ----------------------------

def download_by_city_operator(frame: pd.DataFrame, top_n: int = DEFAULT_SETTINGS.top_cities) -> Nested:
    """First `top_n` cities (sorted) x every operator -> download sum/count."""
    b = aggregate(frame, ["city", "operator"], ["download_mbps"])
    cities = sorted({k[0] for k in b})[:top_n]
    return nest(b, rows=cities)


def latency_by_peak_operator(frame: pd.DataFrame) -> Nested:
    b = aggregate(_with_peak_label(frame), ["peak", "operator"], ["latency_ms"])
    return nest(b, rows=PEAK_LABELS)


def hourly_download_by_operator(frame: pd.DataFrame) -> Nested:
    b = aggregate(frame, ["hour", "operator"], ["download_mbps"])
    return nest(b, rows=HOURS)


# ----------------------------
# Area-wise table
# ----------------------------

def area_summaries(frame: pd.DataFrame) -> List[AreaSummary]:
    """One row per (area, operator), ordered by score desc then area, operator."""
    b = aggregate(frame, ["area", "operator"], ["download_mbps", "upload_mbps", "confidence_score"])
    rows = [
        AreaSummary(
            area=str(k[0]),
            operator=str(k[1]),
            avg_download=bucket.average("download_mbps"),
            avg_upload=bucket.average("upload_mbps"),
            avg_score=bucket.average("confidence_score"),
            count=bucket.count,
        )
        for k, bucket in b.items()
    ]
    rows.sort(key=lambda r: (-r.avg_score, r.area, r.operator))
    return rows


# ----------------------------
# Chart series
# ----------------------------

def to_series(nested: Nested, measure: Optional[str] = None) -> dict:
    """
    {"labels": rows, "datasets": [{"label": column, "data": [...]}]} with
    two-decimal averages (or counts when `measure` is None); absent cells are 0.
    """
    labels = list(nested.keys())
    columns: List = []
    for cells in nested.values():
        for c in cells:
            if c not in columns:
                columns.append(c)

    def value(b: Optional[AggregationBucket]) -> float:
        if b is None:
            return 0
        return b.count if measure is None else round(b.average(measure), 2)

    datasets = [
        {"label": c, "data": [value(nested[r].get(c)) for r in labels]}
        for c in columns
    ]
    return {"labels": labels, "datasets": datasets}


def series_frame(nested: Nested, measure: Optional[str], row_name: str, col_name: str) -> pd.DataFrame:
    """Long-form frame (row, column, value, count) for charting."""
    recs = []
    for r, cells in nested.items():
        for c, b in cells.items():
            v = b.count if measure is None else b.average(measure)
            recs.append({row_name: r, col_name: c, "value": float(v), "count": b.count})
    return pd.DataFrame(recs, columns=[row_name, col_name, "value", "count"])


def chart_data(frame: pd.DataFrame, role: str = "admin", settings: Settings = DEFAULT_SETTINGS) -> Dict[str, object]:
    """Every grouped series a role's chart panel needs."""
    if role == "admin":
        return {
            "download_by_operator_peak": download_by_operator_peak(frame),
            "latency_by_city_network": latency_by_city_network(frame),
            "coverage_by_year_network": coverage_by_year_network(frame),
            "download_by_year_operator": download_by_year_operator(frame),
            "latency_by_year_peak": latency_by_year_peak(frame),
            "score_by_operator": score_by_operator(frame),
        }
    if role == "user":
        return {
            "download_by_city_operator": download_by_city_operator(frame, settings.top_cities),
            "latency_by_peak_operator": latency_by_peak_operator(frame),
            "hourly_download_by_operator": hourly_download_by_operator(frame),
        }
    raise ValueError(f"Unknown role: {role!r}")
