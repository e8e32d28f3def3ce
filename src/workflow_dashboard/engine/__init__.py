from workflow_dashboard.engine.allocation import allocation_by_percent, resource_allocation
from workflow_dashboard.engine.dates import calculate_variance, format_date, parse_date
from workflow_dashboard.engine.filters import active_filter_count, apply_filters
from workflow_dashboard.engine.hierarchy import build_hierarchy, count_leaf_records
from workflow_dashboard.engine.metrics import (
    calculate_metrics,
    count_by_status,
    delay_days,
    delay_severity,
    health_counts,
    is_at_risk,
    is_delayed,
    progress_percentage,
    summary_metrics,
    variance_buckets,
)
from workflow_dashboard.engine.records import filter_options, normalize_records
from workflow_dashboard.engine.sorting import paginate, sort_records
from workflow_dashboard.engine.state import DashboardState
from workflow_dashboard.engine.timeline import generate_timeline
