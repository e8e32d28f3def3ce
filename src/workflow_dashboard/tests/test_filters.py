import itertools

import pytest

from workflow_dashboard.engine.filters import active_filter_count, apply_filters
from workflow_dashboard.engine.records import empty_frame
from workflow_dashboard.engine.sorting import page_count, paginate, sort_records
from workflow_dashboard.tests.fixtures.sample_data import frame, make_record


@pytest.fixture
def records():
    return frame(
        make_record({
            "Component": "Math", "Grade/Level": "3", "Unit": "U1",
            "Assigned to:": "Alice, Bob", "Health": "Red", "Progress": "In Progress",
            "Scheduled Start Date": "2024-06-01", "Scheduled End Date": "2024-06-10",
        }),
        make_record({
            "Component": "Math", "Grade/Level": " 3 ", "Unit": "U2",
            "Assigned to:": "Carol", "Health": "Green", "Progress": "Complete",
            "Scheduled Start Date": "2024-05-01", "Scheduled End Date": "2024-05-20",
        }),
        make_record({
            "Component": "Science", "Grade/Level": "4", "Unit": "U1",
            "Assigned to:": "Alicia", "Health": "red", "Progress": "Not Started",
            "Scheduled Start Date": "", "Scheduled End Date": "",
        }),
        make_record({
            "Component": "Art", "Grade/Level": "3", "Unit": "U3",
            "Health": "Yellow", "Progress": "Complete",
            "Scheduled Start Date": "07/01/2024", "Scheduled End Date": "07/31/2024",
        }),
    )


def _rows(df):
    return list(df.index)


# ----------------------------------------------------------------
# 1. SINGLE CRITERIA
# ----------------------------------------------------------------

def test_no_filters_returns_everything(records):
    assert _rows(apply_filters(records, {})) == [0, 1, 2, 3]
    assert _rows(apply_filters(records, None)) == [0, 1, 2, 3]


def test_unset_values_impose_no_constraint(records):
    out = apply_filters(records, {"component": None, "unit": "", "health_status": []})
    assert len(out) == 4


def test_exact_component(records):
    assert _rows(apply_filters(records, {"component": "Math"})) == [0, 1]


def test_grade_compares_trimmed(records):
    assert _rows(apply_filters(records, {"grade": "3"})) == [0, 1, 3]
    assert _rows(apply_filters(records, {"grade": " 3"})) == [0, 1, 3]


def test_assignee_is_substring_match(records):
    assert _rows(apply_filters(records, {"assignee": "Ali"})) == [0, 2]
    assert _rows(apply_filters(records, {"assignee": "Bob"})) == [0]


def test_membership_filters_use_raw_values(records):
    assert _rows(apply_filters(records, {"health_status": ["Red"]})) == [0]
    assert _rows(apply_filters(records, {"progress_status": ["Complete", "Not Started"]})) == [1, 2, 3]


def test_date_bounds_exclude_unusable_dates(records):
    assert _rows(apply_filters(records, {"start_date": "2024-05-15"})) == [0, 3]
    assert _rows(apply_filters(records, {"end_date": "06/30/2024"})) == [0, 1]
    both = {"start_date": "2024-05-01", "end_date": "2024-06-10"}
    assert _rows(apply_filters(records, both)) == [0, 1]


def test_unusable_date_bound_raises(records):
    with pytest.raises(ValueError):
        apply_filters(records, {"start_date": "someday"})


def test_unknown_filter_key_raises(records):
    with pytest.raises(ValueError):
        apply_filters(records, {"colour": "blue"})


def test_batch_filter():
    no_batch = frame(make_record(), make_record())
    assert apply_filters(no_batch, {"batch": "B1"}).empty

    batched = frame(make_record(Batch="B1"), make_record(Batch=""), make_record())
    assert _rows(apply_filters(batched, {"batch": "B1"})) == [0]
    assert _rows(apply_filters(batched, {"batch": "No Batch"})) == [1, 2]


def test_filtering_empty_set():
    assert apply_filters(empty_frame(), {"component": "Math", "assignee": "A"}).empty


def test_active_filter_count():
    assert active_filter_count({"component": "Math", "unit": "", "health_status": []}) == 1
    assert active_filter_count({}) == 0


# ----------------------------------------------------------------
# 2. CONJUNCTION PROPERTIES
# ----------------------------------------------------------------

CRITERIA = [
    {"component": "Math"},
    {"grade": "3"},
    {"assignee": "Ali"},
    {"progress_status": ["Complete", "In Progress"]},
    {"end_date": "2024-07-31"},
]


def test_adding_criteria_never_grows_result(records):
    for c1, c2 in itertools.permutations(CRITERIA, 2):
        narrow = set(_rows(apply_filters(records, {**c1, **c2})))
        wide = set(_rows(apply_filters(records, c1)))
        assert narrow <= wide


def test_filters_compose_as_logical_and(records):
    for c1, c2 in itertools.combinations(CRITERIA, 2):
        stepwise = apply_filters(apply_filters(records, c1), c2)
        combined = apply_filters(records, {**c1, **c2})
        assert _rows(stepwise) == _rows(combined)


# ----------------------------------------------------------------
# 3. SORTING & PAGING
# ----------------------------------------------------------------

def test_sort_dates_chronologically_with_blanks_last(records):
    assert _rows(sort_records(records, "Scheduled Start Date")) == [1, 0, 3, 2]
    assert _rows(sort_records(records, "Scheduled Start Date", ascending=False)) == [3, 0, 1, 2]


def test_sort_text_case_insensitive_and_stable(records):
    df = records.copy()
    df.loc[3, "Component"] = "art"
    assert _rows(sort_records(df, "Component")) == [3, 0, 1, 2]


def test_sort_unknown_field_raises(records):
    with pytest.raises(ValueError):
        sort_records(records, "Nope")


def test_page_count():
    assert page_count(0, 10) == 0
    assert page_count(25, 10) == 3
    assert page_count(30, 10) == 3


def test_paginate():
    df = frame(*[make_record(Activity=f"A{i}") for i in range(25)])

    assert paginate(df, 1, 10)["Activity"].tolist()[0] == "A0"
    assert len(paginate(df, 3, 10)) == 5
    assert paginate(df, 4, 10).empty
    with pytest.raises(ValueError):
        paginate(df, 0, 10)


def test_numeric_values_are_selectable():
    df = frame(
        make_record(Component=2024, Unit=1, Activity=7),
        make_record(Component="2024", Unit="1"),
    )

    assert _rows(apply_filters(df, {"component": 2024})) == [0]
    assert _rows(apply_filters(df, {"activity": 7})) == [0]
    # trimmed fields compare as text
    assert _rows(apply_filters(df, {"unit": 1})) == [0, 1]
