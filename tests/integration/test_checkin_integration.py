"""
Integration tests for check-in delivery

Runs the real HTTP backend against a local server (no external network).
"""
import socket

import pytest

from edd_tracking import EventBus, WeeklyScheduler, setup_tracking
from edd_tracking.backends.http import CheckinBackend
from edd_tracking.events import SETTINGS_GENERAL_SANITIZE
from edd_tracking.tracker import ALLOW_TRACKING_KEY

USER_AGENT = "EDD/1.8.2; https://shop.example.com"


def unused_port():
    """Return a localhost port nothing is listening on"""
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.mark.integration
class TestCheckinBackend:
    """Test the backend against a local HTTP server"""

    def test_post_received(self, checkin_server):
        backend = CheckinBackend(checkin_server.url("/?edd_action=checkin"))

        result = backend.send([("url", "https://shop.example.com"),
                               ("active_plugins[0]", "hello.php")], USER_AGENT)

        assert result is True
        assert len(checkin_server.requests) == 1
        request = checkin_server.requests[0]
        assert request["method"] == "POST"
        assert request["path"] == "/?edd_action=checkin"
        assert request["version"] == "HTTP/1.0"
        assert request["headers"].get("User-Agent") == USER_AGENT
        assert request["form"] == {
            "url": ["https://shop.example.com"],
            "active_plugins[0]": ["hello.php"],
        }

    def test_follows_five_redirects(self, checkin_server):
        backend = CheckinBackend(checkin_server.url("/redirect/5"))

        assert backend.send([("url", "x")], USER_AGENT) is True
        assert checkin_server.requests[-1]["path"] == "/checkin"
        assert len(checkin_server.requests) == 6

    def test_gives_up_after_five_redirects(self, checkin_server):
        backend = CheckinBackend(checkin_server.url("/redirect/6"))

        assert backend.send([("url", "x")], USER_AGENT) is False
        assert "/checkin" not in [r["path"] for r in checkin_server.requests]

    def test_server_error(self, checkin_server):
        backend = CheckinBackend(checkin_server.url("/error"))
        assert backend.send([("url", "x")], USER_AGENT) is False

    def test_connection_refused(self):
        backend = CheckinBackend(f"http://127.0.0.1:{unused_port()}/", timeout=2)
        assert backend.send([("url", "x")], USER_AGENT) is False


@pytest.mark.integration
class TestTrackingFlow:
    """Test the tracker wired up the way a host would"""

    def test_opt_in_then_weekly(self, qapp, checkin_server, settings, environment):
        events = EventBus()
        backend = CheckinBackend(checkin_server.url("/?edd_action=checkin"))
        tracker = setup_tracking(events, settings, environment, "1.8.2", backend=backend)
        scheduler = WeeklyScheduler(events)

        # Settings form saved with the box ticked, then stored by the host
        saved = events.apply_filters(SETTINGS_GENERAL_SANITIZE, {ALLOW_TRACKING_KEY: "1"})
        settings.setValue(ALLOW_TRACKING_KEY, bool(saved[ALLOW_TRACKING_KEY]))

        assert len(checkin_server.requests) == 1
        assert tracker.get_last_send() > 0

        # Same week: throttled
        scheduler.fire()
        assert len(checkin_server.requests) == 1

        request = checkin_server.requests[0]
        assert request["headers"].get("User-Agent") == "EDD/1.8.2; https://shop.example.com"
        assert request["form"]["inactive_plugins[0]"] == ["akismet/akismet.php"]
        assert request["form"]["theme"] == ["Vendd 1.2"]

    def test_unreachable_server_still_records_send(self, settings, environment, now):
        from edd_tracking import Tracker

        backend = CheckinBackend(f"http://127.0.0.1:{unused_port()}/", timeout=2)
        tracker = Tracker("1.8.2", settings, environment, backend=backend, clock=lambda: now)

        tracker.check_in(override=True)

        assert tracker.get_last_send() == now
