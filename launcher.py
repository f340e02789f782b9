#!/usr/bin/env python3
"""
EDD Usage Tracking Launcher
Stand-alone host that runs the weekly check-in from a Qt event loop
"""

import sys

from PyQt6.QtCore import QCoreApplication, QSettings, QTimer

from edd_tracking import EventBus, StaticEnvironment, WeeklyScheduler, setup_tracking
from edd_tracking.events import SETTINGS_GENERAL_SANITIZE
from edd_tracking.tracker import ALLOW_TRACKING_KEY

# Reported EDD version - single source of truth
VERSION = "1.8.2"


def load_config():
    """Return the tracking_config module, or None if there isn't one"""
    try:
        import tracking_config as config
        return config
    except ImportError:
        print("tracking_config.py not found - reporting empty site data")
        return None


def apply_opt_in(events, settings, allow: bool):
    """Store the configured opt-in the way a settings-form save would"""
    if allow:
        # Sanitize hooks run before the value is stored
        saved = events.apply_filters(SETTINGS_GENERAL_SANITIZE, {ALLOW_TRACKING_KEY: True})
        settings.setValue(ALLOW_TRACKING_KEY, bool(saved.get(ALLOW_TRACKING_KEY)))
    else:
        events.apply_filters(SETTINGS_GENERAL_SANITIZE, {})
        settings.remove(ALLOW_TRACKING_KEY)


def main():
    app = QCoreApplication(sys.argv)
    settings = QSettings("EasyDigitalDownloads", "UsageTracking")
    config = load_config()

    events = EventBus()
    environment = StaticEnvironment.from_config(config) if config else StaticEnvironment()
    tracker = setup_tracking(events, settings, environment, VERSION)

    apply_opt_in(events, settings, bool(getattr(config, 'ALLOW_TRACKING', False)))

    scheduler = WeeklyScheduler(events)
    scheduler.start()

    # First tick shortly after startup; the throttle keeps it to once a week
    QTimer.singleShot(1000, scheduler.fire)

    print(f"Usage tracking running: {tracker.get_status()}")
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
