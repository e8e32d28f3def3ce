import sys
import os

THIS_FILE = os.path.abspath(__file__)
PROJECT_SRC = os.path.abspath(os.path.join(THIS_FILE, "../../../"))

if PROJECT_SRC not in sys.path:
    sys.path.insert(0, PROJECT_SRC)

import streamlit as st
import plotly.express as px

from workflow_dashboard.config import COLOR_SEQUENCE, OVERALLOCATION_THRESHOLD_DAYS
from workflow_dashboard.engine.allocation import allocation_by_percent, resource_allocation
from workflow_dashboard.engine.metrics import activity_distribution
from workflow_dashboard.sidebar import render_filter_sidebar, require_data

st.set_page_config(page_title="Resource Allocation", layout="wide")

st.title("👥 Resource Allocation")
st.caption("Scheduled days per person; shared tasks are split evenly between their assignees.")

state = require_data()
render_filter_sidebar(state)

df = state.filtered_data
alloc = resource_allocation(df)
alloc_df = alloc["allocation_df"]

# -----------------------------------------------------------
# KPI strip
# -----------------------------------------------------------
c1, c2, c3 = st.columns(3)
with c1:
    st.metric("Team members", alloc["total_assignees"])
with c2:
    st.metric("Shared tasks", len(alloc["shared_tasks"]))
with c3:
    st.metric(f"Over {OVERALLOCATION_THRESHOLD_DAYS} days allocated", alloc["overallocated"])

st.divider()

if alloc_df.empty:
    st.info("No assignees in the current selection.")
    st.stop()

col_a, col_b = st.columns([3, 2])

with col_a:
    st.subheader("Days allocated per assignee")
    fig_alloc = px.bar(
        alloc_df,
        x="DaysAllocated",
        y="Assignee",
        orientation="h",
        hover_data=["Tasks", "SharedTasks"],
        color_discrete_sequence=COLOR_SEQUENCE,
        labels={"DaysAllocated": "Days"},
    )
    fig_alloc.update_layout(yaxis={"categoryorder": "total ascending"})
    fig_alloc.add_vline(x=OVERALLOCATION_THRESHOLD_DAYS, line_dash="dash")
    st.plotly_chart(fig_alloc, use_container_width=True)

with col_b:
    st.subheader("Activity mix")
    acts = activity_distribution(df)
    fig_act = px.pie(acts, names="Activity", values="Count", hole=0.4,
                     color_discrete_sequence=COLOR_SEQUENCE)
    st.plotly_chart(fig_act, use_container_width=True)

st.subheader("Workload detail")
pretty = alloc_df.copy()
pretty["DaysAllocated"] = pretty["DaysAllocated"].astype(float).round(1)
st.dataframe(pretty, use_container_width=True, hide_index=True)

with st.expander("Shared tasks"):
    for key in sorted(alloc["shared_tasks"]):
        st.markdown(f"- {key}")

with st.expander("Reported % Allocation"):
    st.caption("Sum of the sheet's own % Allocation column per assignee cell.")
    st.dataframe(allocation_by_percent(df), use_container_width=True, hide_index=True)
