# workflow_dashboard/config.py

import logging
import os

logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# RECORD SCHEMA
# ---------------------------------------------------------

# Exact titles, including punctuation and the trailing colon on "Assigned to:"
REQUIRED_FIELDS = [
    "Health",
    "Format",
    "Grade/Level",
    "Unit",
    "Week",
    "Component",
    "Activity",
    "Workflow",
    "Assigned to:",
    "WW Status",
    "Progress",
    "Predecessors",
    "Reporting Status",
    "Duration",
    "Scheduled Start Date",
    "Scheduled End Date",
    "Comments",
    "Completion Date",
    "Variance",
    "Baseline Start",
    "Baseline Finish",
    "% Complete",
    "% Remaining",
    "% Allocation",
    "Read",
]

# Optional 25th field; kept only when the source row carries it
BATCH_FIELD = "Batch"

# Path order of a nested upload: Component -> Grade -> Unit -> Week -> [records]
NESTED_LEVELS = ["Component", "Grade/Level", "Unit", "Week"]

DATE_FIELDS = [
    "Scheduled Start Date",
    "Scheduled End Date",
    "Completion Date",
    "Baseline Start",
    "Baseline Finish",
]

# ---------------------------------------------------------
# LABELS & THRESHOLDS
# ---------------------------------------------------------

NO_BATCH_LABEL = "No Batch"
NOT_SPECIFIED = "Not Specified"
UNASSIGNED = "Unassigned"
UNKNOWN_ACTIVITY = "Unknown"

# Delays strictly longer than this escalate from "alert" to "flag"
DELAY_FLAG_THRESHOLD_DAYS = 7

# Per-group count of flags or alerts above which a group is highlighted
GROUP_ALERT_THRESHOLD = 3

OVERALLOCATION_THRESHOLD_DAYS = 30

ROWS_PER_PAGE = 10

DELAY_INDICATORS = {
    "flag": "🚩",
    "alert": "⚠️",
}

# ---------------------------------------------------------
# VISUAL CONSTANTS
# ---------------------------------------------------------
FLAT_COLORS = {
    "blue": "#1E88E5",
    "green": "#43A047",
    "amber": "#FB8C00",
    "red": "#E53935",
    "purple": "#8E24AA",
    "grey": "#757575",
}

HEALTH_COLORS = {
    "green": "#00C48C",
    "yellow": "#FFCA41",
    "red": "#FF4858",
}
HEALTH_NEUTRAL_COLOR = "#aabbd2"

PROGRESS_COLORS = {
    "Complete": FLAT_COLORS["green"],
    "In Progress": FLAT_COLORS["blue"],
    "Not Started": FLAT_COLORS["grey"],
}

COLOR_SEQUENCE = [
    FLAT_COLORS["blue"],
    FLAT_COLORS["green"],
    FLAT_COLORS["amber"],
    FLAT_COLORS["red"],
    FLAT_COLORS["purple"],
]

# ---------------------------------------------------------
# USER-FACING MESSAGES
# ---------------------------------------------------------
EXCEL_LOAD_ERROR = "Failed to load data from Excel. Please check the file format."
SMARTSHEET_EMPTY_ERROR = "No data returned from Smartsheet"
SMARTSHEET_LOAD_ERROR = (
    "Failed to load data from Smartsheet. "
    "Please check your credentials and try again."
)

# ---------------------------------------------------------
# SMARTSHEET
# ---------------------------------------------------------
SMARTSHEET_API_BASE = os.environ.get(
    "SMARTSHEET_API_BASE", "https://api.smartsheet.com/2.0"
).rstrip("/")


def _env_float(name, default):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}; using {default}")
        return default


SMARTSHEET_TIMEOUT_SECONDS = _env_float("SMARTSHEET_TIMEOUT_SECONDS", 30.0)

# ---------------------------------------------------------
# LOGGING
# ---------------------------------------------------------
LOG_LEVEL = os.environ.get("WORKFLOW_DASHBOARD_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level=None):
    """
    Install a root handler once. Streamlit re-executes the entry script on
    every interaction, so repeated calls must be harmless.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
