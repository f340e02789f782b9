"""
Tracking Configuration Example

Copy this file to 'tracking_config.py' and adjust as needed.
"""

# Check-in endpoint (defaults to the EDD server when not set)
CHECKIN_URL = 'https://easydigitaldownloads.com/?edd_action=checkin'

# Debug logging
TRACKING_DEBUG = False
TRACKING_DEBUG_LOG = '~/.local/share/edd_tracking_debug.log'

# Site data reported by the stand-alone launcher
SITE_URL = 'https://example.com'
ADMIN_EMAIL = 'admin@example.com'
THEME_NAME = 'Vendd'
THEME_VERSION = '1.0'
INSTALLED_PLUGINS = [
    'easy-digital-downloads/easy-digital-downloads.php',
    'akismet/akismet.php',
]
ACTIVE_PLUGINS = [
    'easy-digital-downloads/easy-digital-downloads.php',
]

# Opt in when the launcher starts
ALLOW_TRACKING = False
