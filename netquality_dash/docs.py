# netquality_dash/docs.py
from __future__ import annotations

import streamlit as st

# ------- small knowledge base -------

_GLOSSARY = [
    ("Record", "One measured observation: speed, latency and score at a place, time and operator."),
    ("Download / Upload", "Measured throughput in Mbps (higher is better)."),
    ("Latency", "Round-trip delay in milliseconds (lower is better)."),
    ("Network score", "Confidence score on a 0–1 scale; ≥ 0.5 is shown as Good, below as Poor."),
    ("Best operator", "Operator with the highest average network score in the current view."),
    ("Peak hour", "Flag marking high-traffic windows; charts compare peak vs non-peak."),
    ("Area", "Smallest geographic unit (area ⊂ city ⊂ state); one map marker each."),
]


# ------- components -------

def glossary_popover() -> None:
    """Compact popover with key terms. Place near the page title."""
    with st.popover("ℹ️ Glossary / KPI meanings", use_container_width=True):
        st.markdown("### Glossary")
        for term, text in _GLOSSARY:
            st.markdown(f"- **{term}** — {text}")
        st.markdown("---")
        st.markdown("**Colour logic**")
        st.markdown(
            "- **Map markers:** green ≥ 0.7, yellow ≥ 0.5, orange ≥ 0.3, red below.  \n"
            "- **Latency insight:** good ≤ 50 ms, average ≤ 100 ms, bad above."
        )
        st.caption("All figures reflect the **current filters**.")


def methodology_expander() -> None:
    """Sidebar expander with processing notes & caveats."""
    with st.sidebar.expander("🧪 Data & methodology", expanded=False):
        st.markdown("**Processing**")
        st.markdown(
            "- Operator names are case-insensitive and shown upper-case.\n"
            "- Missing or non-numeric measurements count as 0.\n"
            "- Every filter change recomputes all KPIs, charts, map and table."
        )
        st.markdown("**Caveats**")
        st.markdown(
            "- Table totals are the mean of the row averages, not weighted by record count.\n"
            "- Best-operator ties go to the alphabetically first operator."
        )
