# netquality_dash/geo_ops.py
from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

from .aggregation import aggregate
from .analytics import NO_OPERATOR, pick_best, require_frame
from .models import GeoSummary

logger = logging.getLogger(__name__)

# Marker tiers on the 0–1 confidence scale (independent of the KPI badge scale)
MARKER_TIERS: Tuple[Tuple[float, str], ...] = (
    (0.7, "best"),
    (0.5, "good"),
    (0.3, "below-average"),
)
MARKER_COLORS = {
    "best": "#4CAF50",
    "good": "#FFC107",
    "below-average": "#FF9800",
    "poor": "#F44336",
}

DEFAULT_CENTER = (20.5937, 78.9629)


def marker_tier(score) -> str:
    try:
        s = float(score)
    except (TypeError, ValueError):
        return "poor"
    for threshold, tier in MARKER_TIERS:
        if s >= threshold:
            return tier
    return "poor"


def marker_color(score) -> str:
    return MARKER_COLORS[marker_tier(score)]


def geo_summaries(frame: pd.DataFrame) -> List[GeoSummary]:
    """
    One summary per distinct area, ordered by area name.
      - avg_score pools every operator of the area
      - best_operator ranks per-operator averages within that area only
      - coordinates/city/state come from the area's first record
    """
    if len(require_frame(frame, "geo_summaries")) == 0:
        return []

    per_area = aggregate(frame, ["area"], ["confidence_score"])
    per_area_op = aggregate(frame, ["area", "operator"], ["confidence_score"])
    first = frame.drop_duplicates(subset=["area"]).set_index("area")

    out: List[GeoSummary] = []
    for (area,), bucket in per_area.items():
        ops = {(k[1],): b for k, b in per_area_op.items() if k[0] == area}
        row = first.loc[area]
        out.append(GeoSummary(
            area=str(area),
            city=str(row["city"]),
            state=str(row["state"]),
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
            avg_score=bucket.average("confidence_score"),
            count=bucket.count,
            operators=tuple(sorted(str(k[0]) for k in ops)),
            best_operator=pick_best(ops) if ops else NO_OPERATOR,
        ))
    logger.debug("Built %d geo summaries", len(out))
    return out


# ----------------------------
# Map framing
# ----------------------------

def _valid_coords(summaries: Sequence[GeoSummary]) -> np.ndarray:
    pts = np.array([[g.latitude, g.longitude] for g in summaries], dtype=float).reshape(-1, 2)
    ok = np.isfinite(pts).all(axis=1) & (pts[:, 0] != 0) & (pts[:, 1] != 0)
    ok &= (np.abs(pts[:, 0]) <= 90) & (np.abs(pts[:, 1]) <= 180)
    return pts[ok]


def map_bounds(summaries: Sequence[GeoSummary]):
    """[[south, west], [north, east]] over valid coordinates, or None."""
    pts = _valid_coords(summaries)
    if len(pts) == 0:
        return None
    return [[float(pts[:, 0].min()), float(pts[:, 1].min())],
            [float(pts[:, 0].max()), float(pts[:, 1].max())]]


def map_center(summaries: Sequence[GeoSummary]) -> List[float]:
    pts = _valid_coords(summaries)
    if len(pts) == 0:
        return list(DEFAULT_CENTER)
    return [float(pts[:, 0].mean()), float(pts[:, 1].mean())]
