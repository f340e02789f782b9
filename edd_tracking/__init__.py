"""
EDD Usage Tracking

Opt-in weekly check-in reporting anonymized site and plugin data.
"""

from .tracker import Tracker
from .payload import TrackingPayload, HostEnvironment, StaticEnvironment
from .events import EventBus, WeeklyScheduler
from .bootstrap import setup_tracking

__all__ = [
    'Tracker',
    'TrackingPayload',
    'HostEnvironment',
    'StaticEnvironment',
    'EventBus',
    'WeeklyScheduler',
    'setup_tracking',
]
