"""Progression Engine: Streamlit diagnostics page.

Run with:
    streamlit run streamlit_app/app.py

Shows the loaded rule catalog and its validator warnings, resolves a typed
exercise name to its rule, previews a decision, and tabulates stored targets.
"""

from __future__ import annotations

from pathlib import Path

import streamlit as st

from progression_engine.catalog.catalog import RuleCatalog, read_rule_records
from progression_engine.catalog.validator import validate_records
from progression_engine.config import DEFAULT_WEIGHT_UNIT, STORE_DIR
from progression_engine.engine import resolve_kind
from progression_engine.exceptions import CatalogLoadError
from progression_engine.models.enums import WeightUnit
from progression_engine.models.target import RepRange

from helpers import (
    ACTION_COLORS,
    format_increment,
    format_rep_range,
    format_weight,
    load_stored_targets,
    preview_decision,
    rules_frame,
    targets_frame,
    warnings_frame,
)

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Progression Engine",
    page_icon="🏋️",
    layout="wide",
)


# ---------------------------------------------------------------------------
# Cached catalog
# ---------------------------------------------------------------------------


@st.cache_resource
def get_catalog() -> RuleCatalog:
    return RuleCatalog.from_config()


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------

st.sidebar.title("Settings")
_UNITS = [u.value for u in WeightUnit]
unit = WeightUnit(
    st.sidebar.radio(
        "Weight unit",
        _UNITS,
        index=_UNITS.index(DEFAULT_WEIGHT_UNIT) if DEFAULT_WEIGHT_UNIT in _UNITS else 0,
        horizontal=True,
    )
)
store_dir = st.sidebar.text_input("Store directory", value=str(STORE_DIR))

catalog = get_catalog()
st.sidebar.caption(f"Rule file: {catalog.source or 'none (heuristics only)'}")
st.sidebar.caption(f"Explicit rules: {len(catalog)}")

st.title("Progression Engine")

tab_rules, tab_lookup, tab_targets = st.tabs(["Catalog", "Rule lookup", "Stored targets"])

# ---------------------------------------------------------------------------
# Catalog + validator warnings
# ---------------------------------------------------------------------------

with tab_rules:
    st.subheader("Rules")
    st.dataframe(rules_frame(catalog), use_container_width=True, hide_index=True)

    st.subheader("Validator warnings")
    if catalog.source is None:
        st.info("No rule file loaded.")
    else:
        try:
            warnings = validate_records(read_rule_records(catalog.source))
        except CatalogLoadError as exc:
            st.error(str(exc))
        else:
            if warnings:
                st.warning(f"{len(warnings)} problem(s) in {Path(catalog.source).name}")
                st.dataframe(warnings_frame(warnings), use_container_width=True, hide_index=True)
            else:
                st.success("No problems found.")

# ---------------------------------------------------------------------------
# Rule lookup + what-if decision
# ---------------------------------------------------------------------------

with tab_lookup:
    name = st.text_input("Exercise name", value="Barbell Bench Press")
    if name.strip():
        rule = catalog.rule_for(name)
        origin = "rule file" if name in catalog else "name heuristics"
        col1, col2, col3, col4 = st.columns(4)
        col1.metric("Mode", rule.progression_mode.value)
        col2.metric("Equipment", rule.equipment_class.value)
        col3.metric("Step", format_increment(rule, unit))
        col4.metric("Kind", resolve_kind(rule, name).name.lower())
        st.caption(f"Resolved from {origin}.")

        st.divider()
        st.subheader("What if")
        c1, c2, c3, c4, c5 = st.columns(5)
        weight = c1.number_input(f"Top set ({unit.value})", min_value=0.0, value=135.0, step=2.5)
        reps = c2.number_input("Reps", min_value=0, value=10, step=1)
        lower = c3.number_input("Target low", min_value=1, value=8, step=1)
        upper = c4.number_input("Target high", min_value=1, value=10, step=1)
        streak = c5.number_input("Prior misses", min_value=0, value=0, step=1)

        if lower > upper:
            st.error("Target low must not exceed target high.")
        else:
            trace = preview_decision(
                catalog,
                name,
                weight=float(weight),
                reps=int(reps),
                rep_range=RepRange(int(lower), int(upper)),
                unit=unit,
                miss_streak=int(streak),
            )
            output = trace.output
            color = ACTION_COLORS[output.action]
            st.markdown(
                f'<div style="background:{color};padding:8px 12px;border-radius:4px;">'
                f"<strong>{output.action.value.upper()}</strong> "
                f"next weight {format_weight(output.next_weight, unit)} | "
                f"next reps {format_rep_range(output.next_rep_range)} | "
                f"assistance {format_weight(output.next_assistance, unit)}</div>",
                unsafe_allow_html=True,
            )
            st.caption(trace.explanation)

# ---------------------------------------------------------------------------
# Stored targets
# ---------------------------------------------------------------------------

with tab_targets:
    if st.button("Reload"):
        st.rerun()
    frame = targets_frame(load_stored_targets(store_dir), unit)
    if frame.empty:
        st.info(f"No stored targets in {store_dir}.")
    else:
        mesocycles = sorted(frame["mesocycle"].unique())
        chosen = st.selectbox("Mesocycle", ["All"] + mesocycles)
        if chosen != "All":
            frame = frame[frame["mesocycle"] == chosen]
        st.dataframe(frame, use_container_width=True, hide_index=True)
