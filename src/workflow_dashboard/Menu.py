import json
import os
import sys

# Absolute directory containing Menu.py
APP_ROOT = os.path.dirname(os.path.abspath(__file__))

# The project root: Menu.py → workflow_dashboard → src
PROJECT_ROOT = os.path.abspath(os.path.join(APP_ROOT, ".."))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import streamlit as st

from workflow_dashboard.config import configure_logging
from workflow_dashboard.engine.hierarchy import count_leaf_records, hierarchy_depth
from workflow_dashboard.sidebar import get_state
from workflow_dashboard.smartsheet import SmartsheetCredentials

configure_logging()

st.set_page_config(page_title="Executive Workflow Dashboard", layout="wide")

st.title("📋 Executive Workflow Dashboard")

st.markdown("""
Load your workflow data here once; every page will use it automatically.
""")

state = get_state()

# -----------------------------------------------------------
# Active dataset
# -----------------------------------------------------------
if state.has_data:
    levels = "Component → Batch → Grade → Unit → Week" if hierarchy_depth(state.processed_data) == 5 \
        else "Component → Grade → Unit → Week"
    st.success(
        f"✅ Active dataset: **{state.source_name or 'uploaded data'}** "
        f"({count_leaf_records(state.processed_data)} workflow items)"
    )
    st.caption(f"Hierarchy: {levels}")
    st.info("Navigate to the other pages (Overview, Timeline, Resources, Report) to analyze it.")

if state.error:
    st.error(f"❌ {state.error}")

st.divider()

# -----------------------------------------------------------
# Data source
# -----------------------------------------------------------
source = st.radio(
    "Data source",
    ["excel", "smartsheet"],
    index=0 if state.data_source == "excel" else 1,
    format_func=lambda s: "JSON upload (Excel export)" if s == "excel" else "Smartsheet",
    horizontal=True,
)
state.set_data_source(source)

if source == "excel":
    uploaded = st.file_uploader("Upload workflow JSON", type=["json"])

    if uploaded is not None and uploaded.name != state.source_name:
        try:
            payload = json.load(uploaded)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            st.error(f"❌ Failed to read file: {e}")
        else:
            if state.load(payload, source_name=uploaded.name):
                st.rerun()
            else:
                st.error(f"❌ {state.error}")

else:
    creds = state.smartsheet_credentials
    with st.form("smartsheet"):
        sheet_id = st.text_input("Sheet ID", value=creds.sheet_id if creds else "")
        token = st.text_input("API token", type="password")
        submitted = st.form_submit_button("🔌 Connect")

    if submitted:
        with st.spinner("Fetching sheet from Smartsheet..."):
            ok = state.load_smartsheet(SmartsheetCredentials(sheet_id=sheet_id, token=token))
        if ok:
            st.rerun()
        else:
            st.error(f"❌ {state.error}")
