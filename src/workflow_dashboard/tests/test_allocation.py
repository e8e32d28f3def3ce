import pandas as pd

from workflow_dashboard.engine.allocation import (
    ALLOCATION_COLUMNS,
    allocation_by_percent,
    resource_allocation,
    shared_task_key,
    task_duration_days,
)
from workflow_dashboard.engine.records import empty_frame
from workflow_dashboard.tests.fixtures.sample_data import frame, make_record


def _task(assignees, start="2024-01-01", end="2024-01-11", **extra):
    return make_record({
        "Assigned to:": assignees,
        "Scheduled Start Date": start,
        "Scheduled End Date": end,
        **extra,
    })


def test_task_duration_days():
    assert task_duration_days(_task("A")) == 10
    assert task_duration_days(_task("A", end="2024-01-01")) == 0
    assert task_duration_days(_task("A", start="")) == 0
    assert task_duration_days(_task("A", start="2024-01-01T12:00:00", end="2024-01-03")) == 1


def test_shared_task_split_evenly():
    result = resource_allocation(frame(_task("Alice, Bob", Activity="Review")))
    alloc = result["allocation_df"].set_index("Assignee")

    assert alloc.loc["Alice", "DaysAllocated"] == 5.0
    assert alloc.loc["Bob", "DaysAllocated"] == 5.0
    assert alloc.loc["Alice", "SharedTasks"] == 1
    assert result["shared_tasks"] == {"Math-Review-W1"}
    assert result["total_assignees"] == 2


def test_shared_task_registered_once_per_key():
    df = frame(
        _task("Alice, Bob", Activity="Review"),
        _task("Bob, Carol", Activity="Review"),
    )
    assert resource_allocation(df)["shared_tasks"] == {"Math-Review-W1"}


def test_unusable_dates_count_task_without_days():
    result = resource_allocation(frame(_task("Carol", start="", end="")))
    row = result["allocation_df"].iloc[0]

    assert row["Assignee"] == "Carol"
    assert row["DaysAllocated"] == 0
    assert row["Tasks"] == 1


def test_allocation_sorted_descending_with_status_counts():
    df = frame(
        _task("Alice", end="2024-01-03", Progress="Complete", Activity="Draft"),
        _task("Bob", end="2024-02-15", Progress="In Progress"),
        _task("Alice", end="2024-01-05", Progress="Not Started", Activity="Review"),
        _task("", end="2024-12-31"),
    )
    result = resource_allocation(df)
    alloc = result["allocation_df"]

    assert list(alloc.columns) == ALLOCATION_COLUMNS
    assert alloc["Assignee"].tolist() == ["Bob", "Alice"]
    alice = alloc.set_index("Assignee").loc["Alice"]
    assert alice["DaysAllocated"] == 6.0
    assert alice["Tasks"] == 2
    assert alice["Activities"] == 2
    assert alice["Completed"] == 1
    assert alice["NotStarted"] == 1
    # Bob has 45 days
    assert result["overallocated"] == 1


def test_empty_allocation():
    result = resource_allocation(empty_frame())

    assert result["allocation_df"].empty
    assert list(result["allocation_df"].columns) == ALLOCATION_COLUMNS
    assert result["shared_tasks"] == set()
    assert result["total_assignees"] == 0
    assert result["overallocated"] == 0


def test_shared_task_key():
    assert shared_task_key({"Component": "Math", "Activity": "Review", "Week": "W2"}) == "Math-Review-W2"


def test_allocation_by_percent():
    df = frame(
        make_record({"Assigned to:": "Alice", "% Allocation": "50%"}),
        make_record({"Assigned to:": "Alice", "% Allocation": 0.25}),
        make_record({"Assigned to:": "Bob", "% Allocation": "80"}),
        make_record({"% Allocation": "x"}),
    )
    out = allocation_by_percent(df)

    assert out["Assignee"].tolist() == ["Bob", "Alice", "Unassigned"]
    assert out.set_index("Assignee").loc["Alice", "Allocation"] == 50.25
    assert out.set_index("Assignee").loc["Unassigned", "Allocation"] == 0


def test_allocation_by_percent_empty():
    out = allocation_by_percent(empty_frame())
    assert out.empty
    assert list(out.columns) == ["Assignee", "Allocation"]
    assert isinstance(out, pd.DataFrame)
