import sys
import os

THIS_FILE = os.path.abspath(__file__)
PROJECT_SRC = os.path.abspath(os.path.join(THIS_FILE, "../../../"))

if PROJECT_SRC not in sys.path:
    sys.path.insert(0, PROJECT_SRC)

import streamlit as st
import plotly.express as px

from workflow_dashboard.config import FLAT_COLORS
from workflow_dashboard.engine.dates import format_date
from workflow_dashboard.engine.records import filter_options
from workflow_dashboard.engine.timeline import generate_timeline, milestones, timeline_items
from workflow_dashboard.sidebar import render_filter_sidebar, require_data

st.set_page_config(page_title="Timeline", layout="wide")

st.title("🗓️ Timeline & Burndown")

state = require_data()
render_filter_sidebar(state)

df = state.filtered_data

# -----------------------------------------------------------
# Unit selector
# -----------------------------------------------------------
units = sorted(filter_options(df)["units"], key=str)
unit = st.selectbox(
    "Unit",
    [None] + units,
    format_func=lambda u: "all" if u is None else str(u),
)
scoped = df if unit is None else df[df["Unit"] == unit]

# -----------------------------------------------------------
# Monthly burndown
# -----------------------------------------------------------
st.markdown("## Monthly burndown")

burndown = generate_timeline(df, unit=unit)
if burndown.empty:
    st.info("No usable dates in the current selection.")
else:
    fig = px.line(
        burndown,
        x="Month",
        y=["Planned", "Actual", "Remaining"],
        markers=True,
        color_discrete_map={
            "Planned": FLAT_COLORS["blue"],
            "Actual": FLAT_COLORS["green"],
            "Remaining": FLAT_COLORS["amber"],
        },
        labels={"value": "Tasks", "variable": ""},
    )
    st.plotly_chart(fig, use_container_width=True)

st.divider()

tab_ms, tab_gantt = st.tabs(["Milestones", "Timeline"])

with tab_ms:
    ms = milestones(scoped)
    if ms.empty:
        st.info("No milestones.")
    else:
        ms = ms.copy()
        ms["Date"] = ms["Date"].map(format_date)
        ms["Done"] = ms["AllComplete"].map(lambda x: "✅" if x else "")
        st.dataframe(
            ms[["Done", "Unit", "ReportingStatus", "Date", "Completed", "Total"]],
            use_container_width=True,
            hide_index=True,
        )

with tab_gantt:
    items = timeline_items(scoped)
    if items.empty:
        st.info("No items with both a scheduled start and end date.")
    else:
        fig_gantt = px.timeline(
            items,
            x_start="Start",
            x_end="End",
            y="Title",
            color="Completed",
            hover_data=["Description"],
            color_discrete_map={True: FLAT_COLORS["green"], False: FLAT_COLORS["blue"]},
        )
        fig_gantt.update_yaxes(autorange="reversed")
        st.plotly_chart(fig_gantt, use_container_width=True)
