# netquality_dash/insights.py
"""
Templated narrative insights.

Each category is registered once with a classification function (numbers
-> status, trend, placeholder values) and its text templates per status
and role. Roles only change phrasing; thresholds are shared.
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from .analytics import network_score_label
from .models import InsightItem, KPISnapshot
from .settings import ALL

ANY = "*"
DEFAULT_LOCATION = "your area"
DEFAULT_LATENCY_MS = 50.0


class InsightCategory(str, Enum):
    NETWORK_PERFORMANCE = "network_performance"
    USAGE = "usage"
    OPERATOR_STABILITY = "operator_stability"
    LATENCY_TREND = "latency_trend"
    SPEED_RECOMMENDATION = "speed_recommendation"
    SPEED_OVERVIEW = "speed_overview"


# ----------------------------
# Numeric inputs
# ----------------------------

@dataclass(frozen=True)
class InsightMetrics:
    download: float = 0.0
    upload: float = 0.0
    latency: float = DEFAULT_LATENCY_MS
    score: float = 0.0
    record_count: int = 0

    @classmethod
    def from_snapshot(cls, snap: KPISnapshot) -> "InsightMetrics":
        # a zero latency means "no measurement"; the rules then assume 50 ms
        return cls(
            download=_num(snap.avg_download),
            upload=_num(snap.avg_upload),
            latency=_num(snap.avg_latency) or DEFAULT_LATENCY_MS,
            score=_num(snap.avg_score),
            record_count=int(snap.total_records or 0),
        )


def _num(v) -> float:
    try:
        f = float(v)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(f) else f


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


# ----------------------------
# Classification rules
# ----------------------------

@dataclass(frozen=True)
class Classification:
    status: str
    trend: str
    values: Dict[str, object] = field(default_factory=dict)


def efficiency_percent(score: float) -> int:
    """round(score * 15); a zero (or NaN) result shows 12 instead."""
    try:
        s = float(score)
    except (TypeError, ValueError):
        return 12
    if math.isnan(s):
        return 12
    return _round_half_up(s * 15) or 12


def usage_petabytes(record_count: int, download: float) -> str:
    count = record_count or (download * 2 if download else 100)
    return f"{count / 40:.1f}"


def operator_stability(download: float, upload: float, latency: float) -> str:
    """stable / unstable only when all three thresholds agree, otherwise neutral."""
    if download > 150 and upload > 40 and latency < 40:
        return "stable"
    if download < 100 and upload < 30 and latency > 60:
        return "unstable"
    return "neutral"


def latency_status(latency_ms: float) -> str:
    if latency_ms <= 50:
        return "good"
    if latency_ms <= 100:
        return "average"
    return "bad"


LATENCY_TRENDS = {"good": "up", "average": "neutral", "bad": "down"}


def speed_trend(download: float) -> str:
    return "up" if download > 50 else "neutral"


def speed_quality(download: float) -> Tuple[str, str]:
    """(label, trend) on raw Mbps."""
    if download > 100:
        return "Excellent", "stable"
    if download > 50:
        return "Good", "up"
    if download > 20:
        return "Average", "neutral"
    return "Poor", "down"


def _classify_performance(m: InsightMetrics) -> Classification:
    label = network_score_label(m.score)
    return Classification(label, "up", {"score_label": label, "efficiency": efficiency_percent(m.score)})


def _classify_usage(m: InsightMetrics) -> Classification:
    return Classification("volume", "up", {"petabytes": usage_petabytes(m.record_count, m.download)})


def _classify_stability(m: InsightMetrics) -> Classification:
    status = operator_stability(m.download, m.upload, m.latency)
    return Classification(status, status)


def _classify_latency(m: InsightMetrics) -> Classification:
    status = latency_status(m.latency)
    return Classification(status, LATENCY_TRENDS[status], {
        "latency": _round_half_up(m.latency),
        "status_tag": f"[Status: {status.upper()}]",
    })


def _classify_speed_recommendation(m: InsightMetrics) -> Classification:
    return Classification("speed", speed_trend(m.download), {"speed": _round_half_up(m.download)})


def _classify_speed_overview(m: InsightMetrics) -> Classification:
    quality, trend = speed_quality(m.download)
    return Classification(quality, trend, {"quality": quality})


@dataclass(frozen=True)
class InsightRule:
    classify: Callable[[InsightMetrics], Classification]
    # status -> role -> template; ANY matches every status/role
    texts: Mapping

    def text_for(self, status: str, role: str) -> str:
        by_status = self.texts.get(status) or self.texts[ANY]
        return by_status.get(role) or by_status[ANY]


RULES: Dict[InsightCategory, InsightRule] = {
    InsightCategory.NETWORK_PERFORMANCE: InsightRule(_classify_performance, {
        ANY: {
            "admin": "Overall network performance for {location} is rated as {score_label}, "
                     "showing a {efficiency}% efficiency gain across active nodes.",
            "user": "Your connection in {location} is currently {score_label}, "
                    "performing {efficiency}% better than the regional baseline.",
        },
    }),
    InsightCategory.USAGE: InsightRule(_classify_usage, {
        ANY: {
            "admin": "Regional data traffic in {location} has scaled to {petabytes}PB, "
                     "driven by high-density user clusters in urban sectors.",
            "user": "Data usage in {location} is high at {petabytes}PB. Consider planning large "
                    "downloads during non-peak hours for maximum speed.",
        },
    }),
    InsightCategory.OPERATOR_STABILITY: InsightRule(_classify_stability, {
        "stable": {
            "admin": "[Stable] Operators serving {location} show consistent high-speed throughput and low jitter.",
            ANY: "[Stable] Current metrics for {location} show consistent high-speed throughput and low jitter.",
        },
        "unstable": {
            "admin": "[Unstable] Performance fluctuation detected across operators in {location}. "
                     "Synchronized upload/download testing is recommended.",
            ANY: "[Unstable] Performance fluctuation detected in {location}. "
                 "Synchronized upload/download testing is recommended.",
        },
        "neutral": {
            ANY: "[Neutral] Connectivity in {location} remains within standard operating "
                 "parameters with moderate latency.",
        },
    }),
    InsightCategory.LATENCY_TREND: InsightRule(_classify_latency, {
        "good": {ANY: "{status_tag} Average latency in {location} is optimal at {latency}ms, "
                      "ensuring smooth real-time performance."},
        "average": {ANY: "{status_tag} Average latency in {location} is stable at {latency}ms. "
                         "Regular monitoring of edge servers is recommended."},
        "bad": {ANY: "{status_tag} Average latency in {location} is elevated at {latency}ms. "
                     "Investigation into local network congestion is required."},
    }),
    InsightCategory.SPEED_RECOMMENDATION: InsightRule(_classify_speed_recommendation, {
        ANY: {
            "admin": "Average download speed delivered in {location} is {speed} Mbps.",
            ANY: "Your current average download speed in {location} is {speed} Mbps.",
        },
    }),
    InsightCategory.SPEED_OVERVIEW: InsightRule(_classify_speed_overview, {
        ANY: {ANY: "Overall network quality in {location} is rated as {quality}."},
    }),
}


# ----------------------------
# Per-role template lists
# ----------------------------

@dataclass(frozen=True)
class InsightTemplate:
    category: InsightCategory
    title: str
    icon: str
    default_text: str
    default_trend: str = "neutral"


ROLE_TEMPLATES: Dict[str, Tuple[InsightTemplate, ...]] = {
    "admin": (
        InsightTemplate(InsightCategory.NETWORK_PERFORMANCE, "Network Performance", "bi-speedometer2",
                        "Network performance is being evaluated across all active nodes.", "up"),
        InsightTemplate(InsightCategory.USAGE, "User Engagement", "bi-people",
                        "Data traffic continues to grow across urban sectors.", "up"),
        InsightTemplate(InsightCategory.OPERATOR_STABILITY, "Operator Analysis", "bi-broadcast",
                        "Operator stability is monitored per region.", "neutral"),
        InsightTemplate(InsightCategory.LATENCY_TREND, "Latency Trends", "bi-clock-history",
                        "Latency is tracked for peak and non-peak windows.", "neutral"),
        InsightTemplate(InsightCategory.SPEED_OVERVIEW, "Speed Overview", "bi-bar-chart",
                        "Download quality is summarised per region.", "new"),
    ),
    "user": (
        InsightTemplate(InsightCategory.NETWORK_PERFORMANCE, "Network Quality", "bi-wifi",
                        "Your connection quality is being measured.", "up"),
        InsightTemplate(InsightCategory.USAGE, "Usage Patterns", "bi-graph-up",
                        "Plan large downloads during non-peak hours for the best speed.", "neutral"),
        InsightTemplate(InsightCategory.SPEED_RECOMMENDATION, "Speed Recommendation", "bi-lightning",
                        "Speed recommendations appear once measurements are available.", "new"),
        InsightTemplate(InsightCategory.SPEED_OVERVIEW, "Speed Overview", "bi-bar-chart",
                        "Overall network quality in your area is being rated.", "neutral"),
        InsightTemplate(InsightCategory.LATENCY_TREND, "Latency Analysis", "bi-clock-history",
                        "Latency in your area is being analysed.", "neutral"),
        InsightTemplate(InsightCategory.OPERATOR_STABILITY, "Operator Analysis", "bi-broadcast",
                        "Operator stability in your area is being checked.", "neutral"),
    ),
}


# ----------------------------
# Trend display (icon, text)
# ----------------------------

TREND_DISPLAY: Dict[str, Tuple[str, str]] = {
    "up": ("bi-caret-up-fill", "Trending Up"),
    "down": ("bi-caret-down-fill", "Trending Down"),
    "neutral": ("bi-dash-lg", "Stable"),
    "new": ("bi-patch-check-fill", "New Opportunity"),
    "stable": ("bi-check-circle-fill", "Network Stable"),
    "unstable": ("bi-exclamation-triangle-fill", "Network Unstable"),
    "good": ("bi-check-circle-fill", "Latency: Good"),
    "average": ("bi-info-circle-fill", "Latency: Average"),
    "bad": ("bi-x-circle-fill", "Latency: Bad"),
}
DEFAULT_TREND_DISPLAY = ("bi-info-circle", "Insight")


def trend_display(trend: Optional[str]) -> Tuple[str, str]:
    return TREND_DISPLAY.get(trend or "", DEFAULT_TREND_DISPLAY)


# ----------------------------
# Selection
# ----------------------------

def select_location_label(filters) -> str:
    """City if selected, else state if selected, else a generic label."""
    if filters is None:
        return DEFAULT_LOCATION
    get = filters.get if isinstance(filters, Mapping) else (lambda k: getattr(filters, k, None))
    city, state = get("city"), get("state")
    if city and city != ALL:
        return str(city)
    if state and state != ALL:
        return str(state)
    return DEFAULT_LOCATION


def _check_role(role: str) -> str:
    if role not in ROLE_TEMPLATES:
        raise ValueError(f"Unknown role: {role!r} (expected one of {', '.join(ROLE_TEMPLATES)})")
    return role


def render_insight(template: InsightTemplate, role: str, location: str, metrics: InsightMetrics) -> InsightItem:
    rule = RULES[template.category]
    c = rule.classify(metrics)
    text = rule.text_for(c.status, role).format(location=location, **c.values)
    return InsightItem(category=template.category.value, title=template.title, text=text,
                       trend=c.trend, icon=template.icon)


def select_insights(role: str, filters=None, metrics=None) -> Tuple[InsightItem, ...]:
    """
    Insight items for `role`. Without metrics every template keeps its
    default text and trend.
    """
    templates = ROLE_TEMPLATES[_check_role(role)]
    if metrics is None:
        return tuple(
            InsightItem(category=t.category.value, title=t.title, text=t.default_text,
                        trend=t.default_trend, icon=t.icon)
            for t in templates
        )
    if isinstance(metrics, KPISnapshot):
        metrics = InsightMetrics.from_snapshot(metrics)
    location = select_location_label(filters)
    return tuple(render_insight(t, role, location, metrics) for t in templates)


class InsightSelector:
    """Holds the current role/filters/metrics and the last rendered items."""

    def __init__(self, role: str = "user"):
        self.role = _check_role(role)
        self.filters = None
        self.metrics: Optional[KPISnapshot] = None
        self.last_rendered: Tuple[InsightItem, ...] = ()

    def set_role(self, role: str) -> Tuple[InsightItem, ...]:
        self.role = _check_role(role)
        return self.render()

    def update_context(self, filters, metrics: Optional[KPISnapshot]) -> Tuple[InsightItem, ...]:
        self.filters = filters
        self.metrics = metrics
        return self.render()

    def render(self) -> Tuple[InsightItem, ...]:
        self.last_rendered = select_insights(self.role, self.filters, self.metrics)
        return self.last_rendered
