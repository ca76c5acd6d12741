# netquality_dash/analytics.py
from __future__ import annotations

import logging
from typing import Mapping

import pandas as pd

from .aggregation import aggregate, measure_values
from .io_data import canonical_operator
from .models import AggregationBucket, KPISnapshot
from .settings import DEFAULT_SETTINGS, Settings

logger = logging.getLogger(__name__)

NO_OPERATOR = "N/A"


def pick_best(buckets: Mapping[object, AggregationBucket], measure: str = "confidence_score") -> str:
    """
    Key with the strictly greatest average `measure`.
    Threshold starts at 0 so a zero average never wins; keys are visited in
    sorted order, so ties go to the alphabetically first key.
    """
    best, best_score = NO_OPERATOR, 0.0
    for key in sorted(buckets):
        avg = buckets[key].average(measure)
        if avg > best_score:
            best_score = avg
            best = key[0] if isinstance(key, tuple) else key
    return str(best)


def require_frame(frame, caller: str) -> pd.DataFrame:
    """Reject anything that is not a records frame (None included)."""
    if not isinstance(frame, pd.DataFrame):
        raise TypeError(f"{caller}() needs a records DataFrame, got {type(frame).__name__}")
    return frame


def best_operator(frame: pd.DataFrame) -> str:
    """Operator with the highest average confidence score, or "N/A"."""
    if len(require_frame(frame, "best_operator")) == 0:
        return NO_OPERATOR
    ops = frame.assign(operator=frame["operator"].map(canonical_operator))
    return pick_best(aggregate(ops, ["operator"], ["confidence_score"]))


def kpis(frame: pd.DataFrame, settings: Settings = DEFAULT_SETTINGS) -> KPISnapshot:
    """Averages of every measure plus the best operator; all zero / "N/A" when empty."""
    if len(require_frame(frame, "kpis")) == 0:
        return KPISnapshot()

    means = measure_values(frame, settings.measures).mean()
    snap = KPISnapshot(
        avg_download=float(means["download_mbps"]),
        avg_upload=float(means["upload_mbps"]),
        avg_latency=float(means["latency_ms"]),
        avg_score=float(means["confidence_score"]),
        best_operator=best_operator(frame),
        total_records=int(len(frame)),
    )
    logger.info("KPIs recomputed over %d records (best operator: %s)", snap.total_records, snap.best_operator)
    return snap


# ----------------------------
# Score scales (kept separate; thresholds differ per view)
# ----------------------------

def score_label(score) -> str:
    """Binary badge on the 0–1 confidence scale."""
    try:
        s = float(score)
    except (TypeError, ValueError):
        s = 0.0
    return "Good" if s >= 0.5 else "Poor"


def network_score_label(score) -> str:
    """Four tiers on a 0–10 scale, used by the performance insight."""
    try:
        s = float(score)
    except (TypeError, ValueError):
        s = 0.0
    if s >= 8:
        return "Excellent"
    if s >= 6:
        return "Good"
    if s >= 4:
        return "Average"
    return "Poor"
