# netquality_dash/models.py
# Immutable result objects handed from the core to the views.
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class AggregationBucket:
    """One group of records: composite key, record count and per-measure sums."""
    key: Tuple
    count: int = 0
    sums: Dict[str, float] = field(default_factory=dict)

    def sum(self, measure: str) -> float:
        return float(self.sums.get(measure, 0.0))

    def average(self, measure: str) -> float:
        """sum / count, defined as 0.0 for an empty bucket."""
        if self.count == 0:
            return 0.0
        return self.sum(measure) / self.count

    def as_dict(self, measure: str) -> Dict[str, float]:
        return {"sum": self.sum(measure), "count": self.count}


@dataclass(frozen=True)
class AreaSummary:
    """One row of the area-wise table: an (area, operator) pair."""
    area: str
    operator: str
    avg_download: float
    avg_upload: float
    avg_score: float
    count: int = 0


@dataclass(frozen=True)
class GeoSummary:
    """One map marker: every record of an area pooled across operators."""
    area: str
    city: str
    state: str
    latitude: float
    longitude: float
    avg_score: float
    count: int
    operators: Tuple[str, ...]
    best_operator: str

    @property
    def operators_label(self) -> str:
        return ", ".join(self.operators)


@dataclass(frozen=True)
class KPISnapshot:
    """Top-level scalar metrics; rebuilt in full on every filter change."""
    avg_download: float = 0.0
    avg_upload: float = 0.0
    avg_latency: float = 0.0
    avg_score: float = 0.0
    best_operator: str = "N/A"
    total_records: int = 0

    @property
    def is_empty(self) -> bool:
        return self.total_records == 0

    def formatted(self) -> Dict[str, str]:
        """Two-decimal strings as shown on the KPI cards."""
        return {
            "avg_download": f"{self.avg_download:.2f}",
            "avg_upload": f"{self.avg_upload:.2f}",
            "avg_latency": f"{self.avg_latency:.2f}",
            "avg_score": f"{self.avg_score:.2f}",
            "best_operator": self.best_operator,
            "total_records": f"{self.total_records:,}",
        }


@dataclass(frozen=True)
class InsightItem:
    category: str
    title: str
    text: str
    trend: str
    icon: str = "bi-lightbulb"
