# netquality_dash/settings.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

ALL = "All"


@dataclass(frozen=True)
class Settings:
    """Central app settings (paths, dimensions, measures, UI options)."""

    # Local data file (kept out of Git)
    data_path: str = "data/data.json"

    # Geographic hierarchy, parent first (area ⊂ city ⊂ state)
    hierarchy: Tuple[str, ...] = ("state", "city", "area")

    # Numeric fields carried by every record
    measures: Tuple[str, ...] = ("download_mbps", "upload_mbps", "latency_ms", "confidence_score")

    roles: Tuple[str, ...] = ("admin", "user")

    # Table panel shows this many rows (export always has all of them)
    table_rows: int = 20

    # City charts keep the first N cities only
    top_cities: int = 5

    # Helpful labels/units used in panels
    measure_labels: Tuple[Tuple[str, str], ...] = (
        ("download_mbps", "Download"),
        ("upload_mbps", "Upload"),
        ("latency_ms", "Latency"),
        ("confidence_score", "Network score"),
    )
    measure_units: Tuple[Tuple[str, str], ...] = (
        ("download_mbps", "Mbps"),
        ("upload_mbps", "Mbps"),
        ("latency_ms", "ms"),
        ("confidence_score", ""),
    )

    def label_for(self, m: str) -> str:
        return dict(self.measure_labels).get(m, m)

    def unit_for(self, m: str) -> str:
        return dict(self.measure_units).get(m, "")

    def axis_title(self, m: str) -> str:
        """'Latency (ms)'; just the label for unitless measures."""
        unit = self.unit_for(m)
        return f"{self.label_for(m)} ({unit})" if unit else self.label_for(m)

    def parent_of(self, dim: str) -> str | None:
        """Direct parent of a hierarchical dimension, or None."""
        if dim not in self.hierarchy:
            return None
        i = self.hierarchy.index(dim)
        return self.hierarchy[i - 1] if i > 0 else None

    def children_of(self, dim: str) -> Tuple[str, ...]:
        """Every dimension below `dim` in the hierarchy, nearest first."""
        if dim not in self.hierarchy:
            return ()
        return self.hierarchy[self.hierarchy.index(dim) + 1:]


DEFAULT_SETTINGS = Settings()
