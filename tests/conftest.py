"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - component/  : Component tests (mocked repository, adapters and event bus)
    - unit/       : Unit tests (pure functions, no I/O)
    - contracts/  : Test data factories and builders
"""
import os
import sys

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Register test layer markers"""
    config.addinivalue_line("markers", "component: Component tests")
    config.addinivalue_line("markers", "unit: Unit tests")


def pytest_collection_modifyitems(config, items):
    """Tag each test with the layer it lives in"""
    for item in items:
        path = str(item.path)
        if f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)
        elif f"{os.sep}component{os.sep}" in path:
            item.add_marker(pytest.mark.component)
