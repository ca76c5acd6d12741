# netquality_dash/viz_map.py
from __future__ import annotations

from html import escape
from typing import Sequence

import folium
from folium.plugins import MarkerCluster
from streamlit_folium import st_folium
from branca.element import MacroElement, Template

from .analytics import score_label
from .geo_ops import MARKER_COLORS, map_bounds, map_center, marker_color, marker_tier
from .models import GeoSummary

OPERATOR_COLORS = {"AIRTEL": "#E63946", "JIO": "#0077B6", "VI": "#9B59B6"}

BASEMAPS = {
    "CartoDB Dark Matter": "CartoDB dark_matter",
    "CartoDB Positron": "CartoDB positron",
    "OpenStreetMap": "OpenStreetMap",
}

# ----------------------------
# Helpers
# ----------------------------

def _legend_html() -> str:
    rows = [
        ("best", "≥ 0.70"),
        ("good", "0.50–0.70"),
        ("below-average", "0.30–0.50"),
        ("poor", "< 0.30"),
    ]
    lines = ["<b>Network score</b> (area average)"]
    for tier, rng in rows:
        lines.append(
            f"<span style='background:{MARKER_COLORS[tier]}'>&nbsp;&nbsp;&nbsp;</span> {tier} ({rng})"
        )
    return "<br>".join(lines)


def _add_fixed_box(fmap, inner_html: str, *, left: int = 20, bottom: int = 20, max_width: int | None = None):
    if not inner_html:
        return
    mw = f"max-width:{max_width}px;" if max_width else ""
    template = f"""
    {{% macro html(this, kwargs) %}}
    <div style="
        position:absolute; bottom:{bottom}px; left:{left}px; z-index:9999;
        background:white; padding:8px; border:1px solid #ccc; border-radius:6px;
        font-size:12px; {mw}">
        {inner_html}
    </div>
    {{% endmacro %}}
    """
    box = MacroElement()
    box._template = Template(template)
    fmap.get_root().add_child(box)


def _marker_icon(g: GeoSummary) -> folium.DivIcon:
    color = marker_color(g.avg_score)
    html = (
        f"<div style='background:{color};width:30px;height:30px;border-radius:50%;"
        "border:3px solid white;box-shadow:0 2px 8px rgba(0,0,0,0.4);display:flex;"
        "align-items:center;justify-content:center;font-weight:bold;font-size:10px;color:white'>"
        f"{score_label(g.avg_score)}</div>"
    )
    return folium.DivIcon(html=html, icon_size=(30, 30), icon_anchor=(15, 15), class_name="custom-marker")


def _popup_html(g: GeoSummary) -> str:
    color = marker_color(g.avg_score)
    op_color = OPERATOR_COLORS.get(g.best_operator.upper(), "#4A90E2")
    return (
        "<div style='font-family:Inter,sans-serif;padding:8px;min-width:200px'>"
        f"<h4 style='margin:0 0 10px 0;border-bottom:2px solid {color};padding-bottom:5px'>{escape(g.area)}</h4>"
        f"<p style='margin:5px 0'><b>City:</b> {escape(g.city)}</p>"
        f"<p style='margin:5px 0'><b>State:</b> {escape(g.state)}</p>"
        f"<p style='margin:5px 0'><b>Network Score:</b> "
        f"<span style='color:{color};font-weight:bold'>{score_label(g.avg_score)} ({g.avg_score:.2f})</span></p>"
        f"<p style='margin:5px 0'><b>Best Operator:</b> "
        f"<span style='color:{op_color};font-weight:bold'>{escape(g.best_operator)}</span></p>"
        f"<p style='margin:5px 0;font-size:11px;color:#999'>Available: {escape(g.operators_label)}</p>"
        "</div>"
    )


# ----------------------------
# Main entry
# ----------------------------

def make_map(geo: Sequence[GeoSummary], base: str = "CartoDB Dark Matter", use_cluster: bool = False) -> folium.Map:
    """Folium map with one score-coloured marker per area, framed on the markers."""
    fmap = folium.Map(location=map_center(geo), zoom_start=5, control_scale=True, tiles=None)
    for name, tiles in BASEMAPS.items():
        folium.TileLayer(tiles, name=name, show=(base == name)).add_to(fmap)

    tgt = MarkerCluster(name="Areas (clustered)").add_to(fmap) if use_cluster else fmap
    for g in geo:
        if map_bounds([g]) is None:
            continue
        folium.Marker(
            location=[g.latitude, g.longitude],
            icon=_marker_icon(g),
            popup=folium.Popup(_popup_html(g), max_width=320),
            tooltip=f"{g.area}: {marker_tier(g.avg_score)}",
        ).add_to(tgt)

    bounds = map_bounds(geo)
    if bounds is not None:
        fmap.fit_bounds(bounds, padding=(50, 50), max_zoom=12)

    _add_fixed_box(fmap, inner_html=_legend_html(), left=20, bottom=20)
    folium.LayerControl(collapsed=True).add_to(fmap)
    return fmap


def build_map(geo: Sequence[GeoSummary], base: str = "CartoDB Dark Matter", use_cluster: bool = False) -> None:
    """Render the area map inside the Streamlit page."""
    st_folium(make_map(geo, base=base, use_cluster=use_cluster), width=1100, height=560)
