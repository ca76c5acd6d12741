# netquality_dash/table.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Sequence

import pandas as pd

from .errors import InvalidSortColumnError
from .models import AreaSummary

logger = logging.getLogger(__name__)

ASC, DESC = "asc", "desc"

# column -> (AreaSummary attribute, textual?)
SORT_COLUMNS: Dict[str, tuple] = {
    "area": ("area", True),
    "operator": ("operator", True),
    "download": ("avg_download", False),
    "upload": ("avg_upload", False),
    "score": ("avg_score", False),
}

EXPORT_HEADER = ("Area", "Operator", "Avg Download Speed", "Avg Upload Speed", "Final Network Score")


@dataclass(frozen=True)
class TableSortState:
    column: str = "score"
    direction: str = DESC

    def request(self, column: str) -> "TableSortState":
        """Same column flips direction; a new column starts descending."""
        if column not in SORT_COLUMNS:
            raise InvalidSortColumnError(f"Cannot sort by {column!r}")
        if column == self.column:
            return replace(self, direction=ASC if self.direction == DESC else DESC)
        return TableSortState(column=column, direction=DESC)


def sort_area_summaries(rows: Sequence[AreaSummary], column: str, direction: str = DESC) -> List[AreaSummary]:
    """Stable sort; text columns compare case-insensitively, numbers by their averaged value."""
    if column not in SORT_COLUMNS:
        raise InvalidSortColumnError(f"Cannot sort by {column!r}")
    if direction not in (ASC, DESC):
        raise InvalidSortColumnError(f"Unknown sort direction {direction!r}")
    attr, textual = SORT_COLUMNS[column]

    if textual:
        key = lambda r: str(getattr(r, attr)).lower()
    else:
        key = lambda r: float(getattr(r, attr))
    return sorted(rows, key=key, reverse=(direction == DESC))


def totals(rows: Sequence[AreaSummary]) -> Dict[str, float]:
    """Mean of the per-row averages (not weighted by record count)."""
    if not rows:
        return {"avg_download": 0.0, "avg_upload": 0.0, "avg_score": 0.0}
    n = len(rows)
    return {
        "avg_download": sum(r.avg_download for r in rows) / n,
        "avg_upload": sum(r.avg_upload for r in rows) / n,
        "avg_score": sum(r.avg_score for r in rows) / n,
    }


def _fmt(v) -> str:
    try:
        return f"{float(v):.2f}"
    except (TypeError, ValueError):
        return str(v)


def export_delimited(rows: Sequence[AreaSummary], delimiter: str = ",") -> str:
    """Header line plus one line per row; text quoted, numbers with two decimals."""
    lines = [delimiter.join(EXPORT_HEADER)]
    for r in rows:
        lines.append(delimiter.join([
            _quote(r.area), _quote(r.operator),
            _fmt(r.avg_download), _fmt(r.avg_upload), _fmt(r.avg_score),
        ]))
    logger.info("Exported %d area rows", len(rows))
    return "\n".join(lines) + "\n"


def _quote(text) -> str:
    return '"' + str(text).replace('"', '""') + '"'


def summaries_frame(rows: Sequence[AreaSummary]) -> pd.DataFrame:
    """Tabular view for display widgets."""
    return pd.DataFrame(
        [{"Area": r.area, "Operator": r.operator,
          "Avg Download (Mbps)": round(r.avg_download, 2),
          "Avg Upload (Mbps)": round(r.avg_upload, 2),
          "Network Score": round(r.avg_score, 2),
          "Records": r.count} for r in rows],
        columns=["Area", "Operator", "Avg Download (Mbps)", "Avg Upload (Mbps)", "Network Score", "Records"],
    )
