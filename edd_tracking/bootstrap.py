"""
Plugin bootstrap for usage tracking.

The host's bootstrap routine owns the Tracker instance; there is no
module-level singleton.
"""
from typing import Any

from .payload import HostEnvironment
from .tracker import Tracker


def setup_tracking(events: Any, settings: Any, environment: HostEnvironment,
                   plugin_version: str, backend: Any = None) -> Tracker:
    """
    Create a Tracker and register its hooks.

    Args:
        events: Event bus exposing on(event, handler)
        settings: QSettings-like store
        environment: Host environment
        plugin_version: EDD version string
        backend: Optional delivery backend

    Returns:
        The registered Tracker
    """
    tracker = Tracker(plugin_version, settings, environment, backend=backend)
    tracker.register(events)
    return tracker
