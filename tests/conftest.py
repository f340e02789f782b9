"""
Pytest configuration and shared fixtures
"""
import pytest
import sys
import os
from unittest.mock import MagicMock

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures"))

from PyQt6.QtCore import QCoreApplication, QSettings

from edd_tracking import StaticEnvironment, Tracker
from checkin_server import CheckinTestServer

# Fixed "now" for tracker tests (2023-11-14 22:13:20 UTC)
NOW = 1_700_000_000


@pytest.fixture(scope="session")
def qapp():
    """Create QCoreApplication instance for timer tests"""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv)
    yield app


@pytest.fixture
def settings(tmp_path):
    """Empty INI-backed settings store"""
    store = QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)
    yield store
    store.clear()


@pytest.fixture
def environment():
    """Host environment with a few plugins, one of them inactive"""
    return StaticEnvironment(
        site_url="https://shop.example.com",
        admin_email="owner@example.com",
        theme_name="Vendd",
        theme_version="1.2",
        installed_plugins=[
            "easy-digital-downloads/easy-digital-downloads.php",
            "akismet/akismet.php",
            "hello.php",
        ],
        active_plugins=[
            "easy-digital-downloads/easy-digital-downloads.php",
            "hello.php",
        ],
    )


@pytest.fixture
def mock_backend():
    """Delivery backend that reports success without touching the network"""
    backend = MagicMock()
    backend.send.return_value = True
    return backend


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def tracker(settings, environment, mock_backend, now):
    """Tracker with a fixed clock"""
    return Tracker("1.8.2", settings, environment, backend=mock_backend, clock=lambda: now)


@pytest.fixture
def checkin_server():
    """Local HTTP server recording check-in requests"""
    server = CheckinTestServer()
    server.start()
    yield server
    server.stop()
