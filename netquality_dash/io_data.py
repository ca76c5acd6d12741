# netquality_dash/io_data.py
from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from typing import Any, Optional, Sequence

import numpy as np
import pandas as pd
import streamlit as st

from .errors import DataLoadError

logger = logging.getLogger(__name__)

TEXT_COLUMNS = ("state", "city", "area", "operator", "network_type")
INT_COLUMNS = ("year", "month", "hour")
FLOAT_COLUMNS = ("download_mbps", "upload_mbps", "latency_ms", "confidence_score", "latitude", "longitude")
RECORD_COLUMNS = TEXT_COLUMNS + INT_COLUMNS + ("is_peak_hour",) + FLOAT_COLUMNS

_TRUTHY = {"1", "true", "yes", "y", "peak"}


# ----------------------------
# General helpers
# ----------------------------

def _normalize_latlon(df: pd.DataFrame) -> pd.DataFrame:
    """Rename common coordinate variants to latitude/longitude."""
    rename = {
        "Latitude": "latitude", "LAT": "latitude", "lat": "latitude",
        "Longitude": "longitude", "LON": "longitude", "lon": "longitude", "lng": "longitude",
    }
    rename = {k: v for k, v in rename.items() if k in df.columns and v not in df.columns}
    if rename:
        df = df.rename(columns=rename)
    return df


def _coerce_peak(s: pd.Series) -> pd.Series:
    def one(v: Any) -> bool:
        if isinstance(v, (bool, np.bool_)):
            return bool(v)
        if isinstance(v, (int, float, np.integer, np.floating)):
            return bool(np.isfinite(v) and v == 1)
        if isinstance(v, str):
            return v.strip().lower() in _TRUTHY
        return False
    return s.map(one).astype(bool)


def canonical_operator(name: Any) -> str:
    """Operators are case-insensitive; the canonical spelling is upper case."""
    if name is None or (isinstance(name, float) and np.isnan(name)):
        return "UNKNOWN"
    text = str(name).strip().upper()
    return text or "UNKNOWN"


def coerce_records(df: pd.DataFrame) -> pd.DataFrame:
    """
    Bring a raw frame to the record schema:
      - text dimensions as stripped strings ("" when missing), operator upper-cased
      - year/month/hour as ints, measures and coordinates as floats
      - anything non-numeric (or inf/NaN) becomes 0
    Missing columns are created with their default.
    """
    df = _normalize_latlon(df.copy())

    for c in TEXT_COLUMNS:
        if c not in df.columns:
            df[c] = ""
        df[c] = df[c].where(df[c].notna(), "").astype(str).str.strip()
    df["operator"] = df["operator"].map(canonical_operator)

    for c in FLOAT_COLUMNS + INT_COLUMNS:
        if c not in df.columns:
            df[c] = 0
        s = pd.to_numeric(df[c], errors="coerce").replace([np.inf, -np.inf], np.nan)
        df[c] = s.fillna(0)
    for c in INT_COLUMNS:
        df[c] = df[c].astype(int)
    for c in FLOAT_COLUMNS:
        df[c] = df[c].astype(float)

    if "is_peak_hour" not in df.columns:
        df["is_peak_hour"] = False
    df["is_peak_hour"] = _coerce_peak(df["is_peak_hour"])

    return df[list(RECORD_COLUMNS)].reset_index(drop=True)


def records_frame(records: Any) -> pd.DataFrame:
    """
    Validate an already-parsed collection and return the coerced records frame.
    Accepts a DataFrame or a sequence of mappings; anything else is a DataLoadError.
    """
    if isinstance(records, pd.DataFrame):
        return coerce_records(records)
    if records is None:
        raise DataLoadError("No records supplied")
    if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, (Sequence, list, tuple)):
        raise DataLoadError(f"Expected a sequence of record objects, got {type(records).__name__}")

    rows = list(records)
    for i, r in enumerate(rows):
        if not isinstance(r, Mapping):
            raise DataLoadError(f"Record #{i} is {type(r).__name__}, expected an object")

    df = pd.DataFrame.from_records([dict(r) for r in rows]) if rows else pd.DataFrame(columns=list(RECORD_COLUMNS))
    return coerce_records(df)


# ----------------------------
# Public API
# ----------------------------

def read_records_file(path: str) -> list:
    """Parse a JSON dataset file (a top-level array of record objects)."""
    if not os.path.exists(path):
        raise DataLoadError(f"Dataset file not found: {path}")
    try:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise DataLoadError(f"Could not read dataset {path}: {exc}") from exc
    if not isinstance(data, list):
        raise DataLoadError(f"Dataset {path} must contain a JSON array, got {type(data).__name__}")
    logger.info("Read %d raw records from %s", len(data), path)
    return data


@st.cache_data(show_spinner=False)
def load_records(path: str) -> Optional[list]:
    """Cached read of the dataset file. Returns None if the file is missing."""
    if not os.path.exists(path):
        return None
    return read_records_file(path)
