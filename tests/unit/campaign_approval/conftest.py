"""
Unit Test Fixtures for Campaign Approval Service

Pure functions only; no repository or network fixtures here.
"""

import pytest
from datetime import datetime, timezone

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from tests.contracts.campaign_approval.data_contract import ApprovalTestDataFactory


@pytest.fixture
def factory():
    """Provide test data factory"""
    return ApprovalTestDataFactory()


@pytest.fixture
def now():
    """Fixed clock for age calculations"""
    return datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
