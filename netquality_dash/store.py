# netquality_dash/store.py
"""
Record store: the raw dataset plus filter evaluation.

The raw frame is loaded once and never mutated; every read hands out a
new frame. A FilterState is an immutable value; the store derives the
next state on user selection so that dependent geographic dimensions
are reset when the new parent value no longer contains them.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, FrozenSet, List, Optional

import pandas as pd

from .errors import InvalidFilterDimensionError, StoreNotLoadedError
from .io_data import RECORD_COLUMNS, canonical_operator, records_frame
from .settings import ALL, DEFAULT_SETTINGS, Settings

logger = logging.getLogger(__name__)

_EQUALITY_DIMS = ("state", "city", "area", "network_type")


def _is_all(value: Any) -> bool:
    return value is None or value == ALL


def _coerce_years(value: Any) -> FrozenSet[int]:
    if _is_all(value):
        return frozenset()
    if isinstance(value, (str, int)):
        value = [value]
    return frozenset(int(v) for v in value)


def _coerce_month(value: Any) -> Optional[int]:
    if _is_all(value) or value == "":
        return None
    return int(value)


@dataclass(frozen=True)
class FilterState:
    """Selected value per dimension; "All" (or empty years / no month) means unconstrained."""
    state: str = ALL
    city: str = ALL
    area: str = ALL
    operator: str = ALL
    network_type: str = ALL
    years: FrozenSet[int] = field(default_factory=frozenset)
    month: Optional[int] = None

    @classmethod
    def dimensions(cls) -> tuple:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_mapping(cls, mapping: Mapping) -> "FilterState":
        """Build from a plain dict. Unknown keys are rejected."""
        known = cls.dimensions()
        kwargs: Dict[str, Any] = {}
        for key, value in mapping.items():
            if key not in known:
                raise InvalidFilterDimensionError(key, known)
            kwargs[key] = value
        return cls().update_many(kwargs)

    def update(self, dim: str, value: Any) -> "FilterState":
        """Return a copy with one dimension replaced (no cascading)."""
        if dim not in self.dimensions():
            raise InvalidFilterDimensionError(dim, self.dimensions())
        if dim == "years":
            value = _coerce_years(value)
        elif dim == "month":
            value = _coerce_month(value)
        else:
            value = ALL if _is_all(value) else str(value)
        return replace(self, **{dim: value})

    def update_many(self, values: Mapping) -> "FilterState":
        out = self
        for dim, value in values.items():
            out = out.update(dim, value)
        return out

    def constraints(self) -> Dict[str, Any]:
        """Only the dimensions that actually restrict records."""
        out: Dict[str, Any] = {}
        for dim in ("state", "city", "area", "operator", "network_type"):
            v = getattr(self, dim)
            if not _is_all(v):
                out[dim] = v
        if self.years:
            out["years"] = sorted(self.years)
        if self.month is not None:
            out["month"] = self.month
        return out

    def value_of(self, dim: str) -> Any:
        return getattr(self, dim)


class RecordStore:
    """Holds the raw records and evaluates filters against them."""

    def __init__(self, settings: Settings = DEFAULT_SETTINGS):
        self.settings = settings
        self._frame: Optional[pd.DataFrame] = None

    # ----------------------------
    # Loading
    # ----------------------------

    def load(self, records: Any) -> int:
        """Replace the whole collection. Raises DataLoadError on malformed input."""
        frame = records_frame(records)
        self._frame = frame
        logger.info("Record store loaded with %d records", len(frame))
        return len(frame)

    @property
    def is_loaded(self) -> bool:
        return self._frame is not None

    def _require(self) -> pd.DataFrame:
        if self._frame is None:
            raise StoreNotLoadedError()
        return self._frame

    @property
    def records(self) -> pd.DataFrame:
        """Copy of the full raw collection."""
        return self._require().copy()

    def __len__(self) -> int:
        return 0 if self._frame is None else len(self._frame)

    # ----------------------------
    # Filtering
    # ----------------------------

    def apply_filter(self, filters: FilterState | Mapping | None = None) -> pd.DataFrame:
        """Every record satisfying all non-"All" constraints (logical AND)."""
        df = self._require()
        if filters is None:
            filters = FilterState()
        elif not isinstance(filters, FilterState):
            filters = FilterState.from_mapping(filters)

        mask = pd.Series(True, index=df.index)
        for dim in _EQUALITY_DIMS:
            v = filters.value_of(dim)
            if not _is_all(v):
                mask &= df[dim] == v
        if not _is_all(filters.operator):
            mask &= df["operator"] == canonical_operator(filters.operator)
        if filters.years:
            mask &= df["year"].isin(sorted(filters.years))
        if filters.month is not None:
            mask &= df["month"] == int(filters.month)

        out = df.loc[mask].copy()
        logger.debug("Filter %s -> %d of %d records", filters.constraints(), len(out), len(df))
        return out

    def select(self, filters: FilterState, dim: str, value: Any) -> FilterState:
        """
        User picked `value` for `dim`. Dependent geographic dimensions whose
        current value is no longer reachable under the new selection are reset
        to "All".
        """
        out = filters.update(dim, value)
        for child in self.settings.children_of(dim):
            current = out.value_of(child)
            if _is_all(current):
                continue
            if current not in self.options_for(out, child):
                logger.debug("Resetting %s=%r (not under %s)", child, current, out.constraints())
                out = out.update(child, ALL)
        return out

    def nearest_constraint(self, filters: FilterState, dim: str):
        """(ancestor, value) of the closest selected ancestor of `dim`, or (None, "All")."""
        parent = self.settings.parent_of(dim)
        while parent is not None:
            v = filters.value_of(parent)
            if not _is_all(v):
                return parent, v
            parent = self.settings.parent_of(parent)
        return None, ALL

    def options_for(self, filters: FilterState, dim: str) -> List[Any]:
        """
        Selector options for `dim` under the current filters. Geographic
        dimensions are limited by their nearest selected ancestor, the same
        rule `select` uses to reset them; blanks are left out.
        """
        if dim == "years":
            return [int(y) for y in self.unique_values("year") if y > 0]
        if dim not in FilterState.dimensions():
            raise InvalidFilterDimensionError(dim, FilterState.dimensions())
        parent_dim, parent_value = self.nearest_constraint(filters, dim)
        values = self.dependent_values(dim, parent_dim, parent_value) if parent_dim else self.unique_values(dim)
        return [v for v in values if v != ""]

    # ----------------------------
    # Option lists
    # ----------------------------

    def _check_field(self, name: str) -> None:
        if name not in RECORD_COLUMNS:
            raise InvalidFilterDimensionError(name, RECORD_COLUMNS)

    def unique_values(self, field_name: str) -> List[Any]:
        """Sorted distinct values over the full raw collection (not the filtered one)."""
        self._check_field(field_name)
        df = self._require()
        return sorted(df[field_name].drop_duplicates().tolist())

    def dependent_values(self, field_name: str, parent_field: str, parent_value: Any) -> List[Any]:
        """Distinct `field_name` values among records whose `parent_field` equals `parent_value`."""
        self._check_field(field_name)
        self._check_field(parent_field)
        if _is_all(parent_value):
            return self.unique_values(field_name)
        df = self._require()
        if parent_field == "operator":
            parent_value = canonical_operator(parent_value)
        sub = df.loc[df[parent_field] == parent_value, field_name]
        return sorted(sub.drop_duplicates().tolist())

    def filter_options(self) -> Dict[str, list]:
        """Option lists for every selector; blank values are left out."""
        df = self._require()

        def opts(col: str) -> list:
            s = df[col]
            if not pd.api.types.is_numeric_dtype(s):
                s = s[s != ""]
            return sorted(s.drop_duplicates().tolist())

        years = df.loc[df["year"] > 0, "year"]
        return {
            "states": opts("state"),
            "cities": opts("city"),
            "areas": opts("area"),
            "operators": opts("operator"),
            "network_types": opts("network_type"),
            "years": sorted(int(y) for y in years.drop_duplicates()),
        }

    def state_to_cities(self) -> Dict[str, List[str]]:
        df = self._require()
        d = df.loc[(df["state"] != "") & (df["city"] != ""), ["state", "city"]].drop_duplicates()
        return {state: sorted(g["city"].tolist()) for state, g in d.groupby("state", sort=True)}
