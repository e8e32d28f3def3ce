# workflow_dashboard/sidebar.py

import streamlit as st

from workflow_dashboard.engine.filters import active_filter_count
from workflow_dashboard.engine.records import filter_options
from workflow_dashboard.engine.state import DashboardState

STATE_KEY = "dashboard_state"
WIDGET_PREFIX = "flt_"
ALL = "All"

HEALTH_OPTIONS = ["Green", "Yellow", "Red"]
PROGRESS_OPTIONS = ["Complete", "In Progress", "Not Started"]


def get_state() -> DashboardState:
    """The session's DashboardState, created on first access."""
    if STATE_KEY not in st.session_state:
        st.session_state[STATE_KEY] = DashboardState()
    return st.session_state[STATE_KEY]


def require_data() -> DashboardState:
    state = get_state()
    if not state.has_data:
        st.warning("No data loaded. Upload a file or connect Smartsheet on the Menu page first.")
        st.stop()
    return state


def _option_label(option) -> str:
    return ALL if option is None else str(option)


def _select(label, options, key):
    """Single choice over the raw values; None stands for "All"."""
    return st.sidebar.selectbox(
        label,
        [None] + list(options),
        format_func=_option_label,
        key=WIDGET_PREFIX + key,
    )


def _clear_widgets():
    for k in list(st.session_state.keys()):
        if k.startswith(WIDGET_PREFIX):
            del st.session_state[k]


def render_filter_sidebar(state: DashboardState):
    """
    Draw the filter widgets and push the selection into the state.

    Every rerun re-filters from the raw records with the full criteria set.
    """
    opts = filter_options(state.raw_data)

    st.sidebar.header("Filters")

    criteria = {
        "component": _select("Component", opts["components"], "component"),
        "grade": _select("Grade/Level", opts["grades"], "grade"),
        "unit": _select("Unit", opts["units"], "unit"),
        "week": _select("Week", opts["weeks"], "week"),
        "activity": _select("Activity", opts["activities"], "activity"),
        "assignee": _select("Assignee", opts["assignees"], "assignee"),
        "reporting_status": _select("Reporting Status", opts["reporting_statuses"], "reporting_status"),
    }
    if opts["batches"]:
        criteria["batch"] = _select("Batch", opts["batches"], "batch")

    criteria["health_status"] = st.sidebar.multiselect(
        "Health", HEALTH_OPTIONS, key=WIDGET_PREFIX + "health"
    )
    criteria["progress_status"] = st.sidebar.multiselect(
        "Progress", PROGRESS_OPTIONS, key=WIDGET_PREFIX + "progress"
    )

    criteria["start_date"] = criteria["end_date"] = None
    if st.sidebar.checkbox("Limit by scheduled dates", key=WIDGET_PREFIX + "use_dates"):
        date_range = st.sidebar.date_input("Scheduled between", value=(), key=WIDGET_PREFIX + "dates")
        if len(date_range) == 2:
            criteria["start_date"], criteria["end_date"] = date_range

    if criteria != state.filters:
        state.update_filters(criteria)

    n_active = active_filter_count(state.filters)
    st.sidebar.caption(
        f"{len(state.filtered_data)} of {len(state.raw_data)} records"
        + (f" · {n_active} filter(s) active" if n_active else "")
    )

    if st.sidebar.button("Reset filters"):
        state.reset_filters()
        _clear_widgets()
        st.rerun()
