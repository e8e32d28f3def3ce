import pandas as pd
import pytest

from workflow_dashboard.tests.fixtures.sample_data import create_three_records


@pytest.fixture
def today():
    return pd.Timestamp("2024-06-15")


@pytest.fixture
def three_records():
    return create_three_records()
