import sys
import os

# -----------------------------------------------------------
# Make sure "workflow_dashboard" package is importable
# -----------------------------------------------------------
THIS_FILE = os.path.abspath(__file__)
PROJECT_SRC = os.path.abspath(os.path.join(THIS_FILE, "../../../"))

if PROJECT_SRC not in sys.path:
    sys.path.insert(0, PROJECT_SRC)

import streamlit as st
import pandas as pd
import plotly.express as px

from workflow_dashboard.config import (
    COLOR_SEQUENCE,
    DELAY_FLAG_THRESHOLD_DAYS,
    DELAY_INDICATORS,
    NOT_SPECIFIED,
    PROGRESS_COLORS,
)
from workflow_dashboard.engine.dates import format_date
from workflow_dashboard.engine.hierarchy import count_leaf_records, iter_leaves
from workflow_dashboard.engine.metrics import (
    calculate_metrics,
    component_summary,
    count_delayed_items,
    delay_indicator,
    health_color,
    should_show_group_alert,
    summary_metrics,
)
from workflow_dashboard.engine.utils import resolve_today
from workflow_dashboard.sidebar import render_filter_sidebar, require_data

st.set_page_config(
    page_title="Executive Overview",
    layout="wide",
)

st.title("🧭 Executive Overview")

state = require_data()
render_filter_sidebar(state)

df = state.filtered_data

st.caption(
    f"Viewing {len(df)} of {len(state.raw_data)} workflow items"
    + (" (filtered)" if len(df) != len(state.raw_data) else "")
)

# -----------------------------------------------------------
# 1. Headline numbers
# -----------------------------------------------------------
summary = summary_metrics(df)
detail = calculate_metrics(df)

c1, c2, c3, c4, c5 = st.columns(5)
with c1:
    st.metric("Total items", summary["total"])
with c2:
    st.metric("Completed", summary["completed"], f"{summary['completion']}%")
with c3:
    st.metric("In progress", summary["in_progress"])
with c4:
    st.metric("At risk", summary["at_risk"])
with c5:
    st.metric("Avg % complete", f"{detail['average_completion']}%")

s1, s2, s3 = st.columns(3)
with s1:
    st.metric("On track", f"{summary['on_track']}%")
with s2:
    st.metric("Behind schedule", f"{summary['behind_schedule']}%")
with s3:
    st.metric("Ahead of schedule", f"{summary['ahead_of_schedule']}%")

st.divider()

# -----------------------------------------------------------
# 2. Project summary per component (full dataset)
# -----------------------------------------------------------
st.markdown("## Project Summary")

comp = component_summary(state.raw_data)
if comp.empty:
    st.info("No components in the dataset.")
else:
    pretty = comp.copy()
    for col in ["StartDate", "EndDate", "BaselineStart", "BaselineFinish"]:
        pretty[col] = pretty[col].map(format_date)
    pretty["Component"] = pretty["Component"].replace("", NOT_SPECIFIED)
    st.dataframe(pretty, use_container_width=True, hide_index=True)

st.divider()

# -----------------------------------------------------------
# 3. Status charts
# -----------------------------------------------------------
col_a, col_b, col_c = st.columns(3)

with col_a:
    st.markdown("### Progress")
    status_df = pd.DataFrame({
        "Status": ["Complete", "In Progress", "Not Started"],
        "Count": [detail["completed_items"], detail["in_progress_items"], detail["not_started_items"]],
    })
    fig_status = px.pie(status_df, names="Status", values="Count", hole=0.4,
                        color="Status", color_discrete_map=PROGRESS_COLORS)
    st.plotly_chart(fig_status, use_container_width=True)

with col_b:
    st.markdown("### Health")
    health = detail["health_status"]
    health_df = pd.DataFrame({
        "Health": ["Green", "Yellow", "Red", "Blank"],
        "Count": [health["green"], health["yellow"], health["red"], health["blank"]],
    })
    fig_health = px.bar(
        health_df, x="Health", y="Count", color="Health",
        color_discrete_map={h: health_color(h) for h in health_df["Health"]},
    )
    fig_health.update_layout(showlegend=False)
    st.plotly_chart(fig_health, use_container_width=True)

with col_c:
    st.markdown("### Schedule variance")
    var = detail["variance"]
    var_df = pd.DataFrame({
        "Bucket": ["Ahead", "On track", "Behind"],
        "Count": [var["negative"], var["zero"], var["positive"]],
    })
    fig_var = px.bar(var_df, x="Bucket", y="Count", color_discrete_sequence=COLOR_SEQUENCE)
    st.plotly_chart(fig_var, use_container_width=True)

st.divider()

# -----------------------------------------------------------
# 4. Hierarchy drill-down (full dataset)
# -----------------------------------------------------------
st.markdown("## Hierarchy")
st.caption(
    f"{DELAY_INDICATORS['flag']} more than {DELAY_FLAG_THRESHOLD_DAYS} days late · "
    f"{DELAY_INDICATORS['alert']} up to {DELAY_FLAG_THRESHOLD_DAYS} days late · "
    "highlighted groups have repeated delays"
)

today = resolve_today()
tree = state.processed_data

for component, children in tree.items():
    leaves = list(iter_leaves(children))
    comp_df = pd.DataFrame([r for _, records in leaves for r in records])
    alert = " ❗" if should_show_group_alert(comp_df, "component", today) else ""

    with st.expander(f"{component or NOT_SPECIFIED} ({count_leaf_records(children)} items){alert}"):
        # leaves sharing everything but the week belong to one unit
        units = {}
        for path, records in leaves:
            units.setdefault(path[:-1], []).append((path, records))

        for unit_path, unit_leaves in units.items():
            unit_df = pd.DataFrame([r for _, records in unit_leaves for r in records])
            unit_label = " / ".join(str(p) or NOT_SPECIFIED for p in unit_path)
            if should_show_group_alert(unit_df, "unit", today):
                st.error(f"{unit_label}: delays in several weeks")
            else:
                st.markdown(f"#### {unit_label}")

            for path, records in unit_leaves:
                counts = count_delayed_items(pd.DataFrame(records), today)
                marks = ""
                if counts["flags"]:
                    marks += f" {DELAY_INDICATORS['flag']}×{counts['flags']}"
                if counts["alerts"]:
                    marks += f" {DELAY_INDICATORS['alert']}×{counts['alerts']}"
                st.markdown(f"**{path[-1] or NOT_SPECIFIED}**{marks}")

                rows = [
                    {
                        "": delay_indicator(r, today),
                        "Activity": r["Activity"],
                        "Assigned to": r["Assigned to:"],
                        "Progress": r["Progress"],
                        "Health": r["Health"],
                        "Start": format_date(r["Scheduled Start Date"]),
                        "End": format_date(r["Scheduled End Date"]),
                    }
                    for r in records
                ]
                st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
