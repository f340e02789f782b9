"""
Usage Tracker

Reports plugin usage to the EDD site for users that have opted in.
At most one check-in is sent per week; the send time is recorded whether or
not the request got through.
"""

import time
from pathlib import Path
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .payload import HostEnvironment, TrackingPayload, collect_payload
from .events import WEEKLY_SCHEDULED_EVENTS, SETTINGS_GENERAL_SANITIZE, WEEK_SECONDS

ALLOW_TRACKING_KEY = "allow_tracking"
LAST_SEND_KEY = "edd_tracking_last_send"

DEFAULT_DEBUG_LOG = Path.home() / ".local" / "share" / "edd_tracking_debug.log"


def _is_debug_mode() -> bool:
    """Check if TRACKING_DEBUG is enabled in tracking_config"""
    try:
        import tracking_config as config
        return bool(getattr(config, 'TRACKING_DEBUG', False))
    except ImportError:
        return False


def _debug_log(message: str):
    """Write debug message to tracking log file (only if debug mode is enabled)"""
    try:
        if not _is_debug_mode():
            return

        import tracking_config as config
        log_file = Path(getattr(config, 'TRACKING_DEBUG_LOG', DEFAULT_DEBUG_LOG)).expanduser()
        with open(log_file, 'a') as f:
            timestamp = datetime.now().isoformat()
            f.write(f"[{timestamp}] {message}\n")
    except Exception:
        pass  # Silently fail if can't write log


class Tracker:
    """Opt-in weekly usage check-in"""

    def __init__(self, plugin_version: str, settings, environment: HostEnvironment,
                 backend=None, clock: Callable[[], float] = time.time):
        """
        Initialize tracker

        Args:
            plugin_version: EDD version, sent in the User-Agent
            settings: QSettings-like store holding the opt-in flag and last send time
            environment: Host environment the payload is read from
            backend: Delivery backend (defaults to get_backend())
            clock: Returns the current Unix time
        """
        if settings is None:
            raise ValueError("Tracker requires a settings store")

        self.plugin_version = plugin_version
        self.settings = settings
        self.environment = environment
        self.backend = backend if backend is not None else get_backend()
        self.clock = clock
        _debug_log(f"Tracker created (version={plugin_version}, "
                   f"backend={type(self.backend).__name__})")

    def register(self, events) -> None:
        """Hook the tracker into the host's weekly event and settings save"""
        self.schedule_weekly_check_in(events)
        events.on(SETTINGS_GENERAL_SANITIZE, self.on_settings_saved)

    def schedule_weekly_check_in(self, events) -> None:
        # Sent once a week while tracking is allowed; used to determine active sites
        events.on(WEEKLY_SCHEDULED_EVENTS, self.check_in)

    def is_tracking_allowed(self) -> bool:
        """Check if the user has opted into tracking"""
        if not self.settings.contains(ALLOW_TRACKING_KEY):
            return False
        return self.settings.value(ALLOW_TRACKING_KEY, False, type=bool)

    def get_last_send(self) -> int:
        """Unix time of the last check-in, 0 if never sent"""
        try:
            return self.settings.value(LAST_SEND_KEY, 0, type=int) or 0
        except TypeError:
            _debug_log(f"Unreadable {LAST_SEND_KEY} value, treating as never sent")
            return 0

    def build_payload(self) -> TrackingPayload:
        """Collect the data that is going to be tracked"""
        return collect_payload(self.environment, on_error=_debug_log)

    def user_agent(self) -> str:
        site_url = ""
        try:
            site_url = self.environment.site_url() or ""
        except Exception as e:
            _debug_log(f"site_url() failed: {e}")
        return f"EDD/{self.plugin_version}; {site_url}"

    def check_in(self, override: bool = False) -> None:
        """
        Send a check-in to the EDD server

        Args:
            override: Send even if tracking is not allowed. The weekly
                throttle still applies.
        """
        if not self.is_tracking_allowed() and not override:
            _debug_log("Tracking not allowed, skipping check-in")
            return

        # Send a maximum of once per week
        last_send = self.get_last_send()
        if last_send and last_send > self.clock() - WEEK_SECONDS:
            _debug_log(f"Last check-in at {last_send}, throttled")
            return

        try:
            payload = self.build_payload()
            _debug_log(f"Sending check-in: url={payload.url}, "
                       f"{len(payload.active_plugins)} active, "
                       f"{len(payload.inactive_plugins)} inactive plugins")
            success = self.backend.send(payload.to_form_fields(), self.user_agent())
            _debug_log(f"backend.send() returned: {success}")
        except Exception as e:
            msg = f"Check-in error: {e}"
            _debug_log(msg)
            print(msg)
        finally:
            # The week's check-in is spent either way
            self.settings.setValue(LAST_SEND_KEY, int(self.clock()))

    def on_settings_saved(self, settings_input):
        """
        Check for a new opt-in on settings save

        Runs as a settings-sanitize filter, so the input is returned unchanged.
        """
        if settings_input and settings_input.get(ALLOW_TRACKING_KEY):
            # Send an initial check-in on opt-in
            self.check_in(override=True)

        return settings_input

    def get_status(self) -> Dict[str, Any]:
        """Tracking state for display in settings (for transparency)"""
        last_send = self.get_last_send()
        return {
            "allowed": self.is_tracking_allowed(),
            "last_send": last_send,
            "next_send": last_send + WEEK_SECONDS if last_send else None,
        }


def get_backend():
    """
    Create the check-in backend from tracking_config.py

    Returns:
        CheckinBackend pointed at CHECKIN_URL, or the EDD server if not configured
    """
    from .backends.http import CheckinBackend, DEFAULT_CHECKIN_URL

    endpoint: Optional[str] = DEFAULT_CHECKIN_URL
    try:
        import tracking_config as config
        endpoint = getattr(config, 'CHECKIN_URL', DEFAULT_CHECKIN_URL)
        _debug_log(f"tracking_config loaded from: {getattr(config, '__file__', None)}")
    except ImportError:
        pass

    _debug_log(f"Check-in endpoint: {endpoint}")
    return CheckinBackend(endpoint)
