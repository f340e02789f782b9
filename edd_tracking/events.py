"""
Host event hooks.

The host exposes two kinds of hooks: actions, which notify listeners, and
filters, which pass a value through each listener and use what comes back.
The tracker only needs `on()`; emitting is done by the host (or by the
WeeklyScheduler in the stand-alone launcher).
"""
from typing import Any, Callable, Dict, List, Optional

from PyQt6.QtCore import QTimer

WEEKLY_SCHEDULED_EVENTS = "edd_weekly_scheduled_events"
SETTINGS_GENERAL_SANITIZE = "edd_settings_general_sanitize"

WEEK_SECONDS = 7 * 24 * 60 * 60

Handler = Callable[..., Any]


class EventBus:
    """
    Named hook registry.

    Example:
        events.on(WEEKLY_SCHEDULED_EVENTS, tracker.check_in)
        events.emit(WEEKLY_SCHEDULED_EVENTS)

        events.on(SETTINGS_GENERAL_SANITIZE, tracker.on_settings_saved)
        saved = events.apply_filters(SETTINGS_GENERAL_SANITIZE, form_input)
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}

    def on(self, event: str, handler: Handler) -> None:
        """Register a handler for an event."""
        self._handlers.setdefault(event, []).append(handler)

    def off(self, event: str, handler: Handler) -> None:
        """Unregister a specific handler."""
        if event in self._handlers:
            try:
                self._handlers[event].remove(handler)
            except ValueError:
                pass

    def handlers(self, event: str) -> List[Handler]:
        return list(self._handlers.get(event, []))

    def emit(self, event: str, *args: Any) -> None:
        """
        Run an action: call every handler, ignoring return values.

        A failing handler does not stop the others.
        """
        for handler in self.handlers(event):
            try:
                handler(*args)
            except Exception as e:
                print(f"Error in event handler for {event}: {e}")

    def apply_filters(self, event: str, value: Any, *args: Any) -> Any:
        """
        Run a filter: each handler receives the current value and returns
        the next one. A failing handler leaves the value unchanged.
        """
        for handler in self.handlers(event):
            try:
                value = handler(value, *args)
            except Exception as e:
                print(f"Error in filter handler for {event}: {e}")
        return value

    def clear(self, event: Optional[str] = None) -> None:
        """Clear handlers for an event, or all events if none specified."""
        if event:
            self._handlers.pop(event, None)
        else:
            self._handlers.clear()


class WeeklyScheduler:
    """Emits WEEKLY_SCHEDULED_EVENTS once a week from the Qt event loop"""

    INTERVAL_MS = WEEK_SECONDS * 1000

    def __init__(self, events: EventBus, interval_ms: int = INTERVAL_MS):
        self.events = events
        self.timer = QTimer()
        self.timer.setInterval(interval_ms)
        self.timer.timeout.connect(self.fire)

    def start(self) -> None:
        self.timer.start()

    def stop(self) -> None:
        self.timer.stop()

    def is_running(self) -> bool:
        return self.timer.isActive()

    def fire(self) -> None:
        """Emit the weekly event now"""
        self.events.emit(WEEKLY_SCHEDULED_EVENTS)
