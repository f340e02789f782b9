"""Check-in delivery backends"""

from .http import CheckinBackend, DEFAULT_CHECKIN_URL

__all__ = ['CheckinBackend', 'DEFAULT_CHECKIN_URL']
