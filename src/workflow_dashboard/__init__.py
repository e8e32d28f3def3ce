from workflow_dashboard.engine import (
    DashboardState,
    apply_filters,
    build_hierarchy,
    calculate_metrics,
    count_leaf_records,
    generate_timeline,
    normalize_records,
    parse_date,
    progress_percentage,
    resource_allocation,
    summary_metrics,
)
from workflow_dashboard.smartsheet import SmartsheetClient, SmartsheetCredentials, SmartsheetError

__version__ = "0.1.0"
