import sys
import os

THIS_FILE = os.path.abspath(__file__)
PROJECT_SRC = os.path.abspath(os.path.join(THIS_FILE, "../../../"))

if PROJECT_SRC not in sys.path:
    sys.path.insert(0, PROJECT_SRC)

import streamlit as st

from workflow_dashboard.config import ROWS_PER_PAGE
from workflow_dashboard.engine.sorting import page_count, paginate, sort_records
from workflow_dashboard.sidebar import render_filter_sidebar, require_data

st.set_page_config(page_title="Detailed Report", layout="wide")

st.title("📑 Detailed Report")

state = require_data()
render_filter_sidebar(state)

df = state.filtered_data

c1, c2 = st.columns([3, 1])
with c1:
    sort_field = st.selectbox("Sort by", ["(input order)"] + list(df.columns))
with c2:
    descending = st.toggle("Descending", value=False)

if sort_field != "(input order)":
    df = sort_records(df, sort_field, ascending=not descending)

n_pages = max(page_count(len(df), ROWS_PER_PAGE), 1)
page = st.number_input("Page", min_value=1, max_value=n_pages, value=1, step=1)

st.caption(f"Page {page} of {n_pages} · {len(df)} items")
st.dataframe(paginate(df, int(page), ROWS_PER_PAGE), use_container_width=True, hide_index=True)

st.download_button(
    "⬇️ Download filtered items (CSV)",
    data=df.to_csv(index=False),
    file_name="workflow_items.csv",
    mime="text/csv",
)
