"""
Pytest configuration and fixtures for the TAC simulator tests.

This module provides shared fixtures and mocks for testing the simulator
and its Streamlit front end without requiring a Streamlit runtime.
"""

import sys
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from tacsim import (
    SAMPLE_TYPE_NTC,
    SampleDescriptor,
    SampleTypeAdjustment,
    TargetCatalog,
)


# ==================== STREAMLIT MOCK ====================
# Mock streamlit before importing the front-end script
class MockSessionState(dict):
    """Mock Streamlit session_state that behaves like a dict with attribute access."""

    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError:
            raise AttributeError(f"'MockSessionState' object has no attribute '{key}'")

    def __setattr__(self, key, value):
        self[key] = value

    def __delattr__(self, key):
        try:
            del self[key]
        except KeyError:
            raise AttributeError(f"'MockSessionState' object has no attribute '{key}'")


class MockContextManager:
    def __enter__(self):
        return self

    def __exit__(self, *args):
        pass


def _create_mock_streamlit():
    mock_st = MagicMock()
    mock_st.session_state = MockSessionState()
    mock_st.error = MagicMock()
    mock_st.warning = MagicMock()
    mock_st.success = MagicMock()
    mock_st.info = MagicMock()
    mock_st.spinner = MagicMock(return_value=MockContextManager())
    mock_st.tabs = MagicMock(side_effect=lambda labels: [MockContextManager() for _ in labels])
    mock_st.sidebar = MockContextManager()
    mock_st.columns = MagicMock(side_effect=lambda n: [MagicMock() for _ in range(n)])
    mock_st.set_page_config = MagicMock()
    mock_st.title = MagicMock()
    mock_st.markdown = MagicMock()
    mock_st.header = MagicMock()
    mock_st.subheader = MagicMock()
    mock_st.caption = MagicMock()
    mock_st.dataframe = MagicMock()
    mock_st.plotly_chart = MagicMock()
    mock_st.selectbox = MagicMock(return_value=None)
    mock_st.multiselect = MagicMock(return_value=[])
    mock_st.text_input = MagicMock(return_value="")
    mock_st.number_input = MagicMock(return_value=0)
    mock_st.slider = MagicMock(return_value=0)
    mock_st.button = MagicMock(return_value=False)
    mock_st.download_button = MagicMock(return_value=False)
    mock_st.metric = MagicMock()
    return mock_st


sys.modules["streamlit"] = _create_mock_streamlit()

FRONT_END_MODULE = "streamlit tac simulator"


@pytest.fixture(autouse=True)
def mock_streamlit():
    """Auto-use fixture to mock Streamlit for all tests."""
    mock_st = _create_mock_streamlit()
    sys.modules["streamlit"] = mock_st

    if FRONT_END_MODULE in sys.modules:
        del sys.modules[FRONT_END_MODULE]

    yield mock_st


# ==================== CATALOG FIXTURES ====================
@pytest.fixture
def two_target_catalog():
    """Catalog with one common target (A) and one that is never present (B)."""
    return TargetCatalog(["A", "B"], {"A": 0.5, "B": 0.0})


@pytest.fixture
def type_x_adjustment():
    """Adjustment table with a single field type plus the NTC."""
    return SampleTypeAdjustment({"typeX": 1.0, SAMPLE_TYPE_NTC: 0.0})


# ==================== SAMPLE FIXTURES ====================
@pytest.fixture
def seventeen_samples():
    """17 effluent samples from distinct households, in order."""
    return [
        SampleDescriptor(f"HH{i:03d}_EF", f"HH{i:03d}", "effluent")
        for i in range(1, 18)
    ]


@pytest.fixture
def mixed_samples():
    """Ten households crossed with the three field sample types (30 samples)."""
    from tacsim import build_sample_sheet, household_ids

    return build_sample_sheet(household_ids(10))


# ==================== CLOCK FIXTURES ====================
@pytest.fixture
def fixed_clock():
    """Clock that always reports 2024-03-04 09:15:30."""
    return lambda: datetime(2024, 3, 4, 9, 15, 30)
