"""
Unit test fixtures
"""
import sys
import types

import pytest


@pytest.fixture(autouse=True)
def no_tracking_config(monkeypatch):
    """Unit tests never see a developer's tracking_config.py"""
    monkeypatch.setitem(sys.modules, "tracking_config", None)


@pytest.fixture
def tracking_config(monkeypatch):
    """Install an in-memory tracking_config module and return it"""
    module = types.ModuleType("tracking_config")
    monkeypatch.setitem(sys.modules, "tracking_config", module)
    return module
