"""
Check-in HTTP Backend

Delivers a check-in payload to the EDD server as a form-encoded POST.
"""

import ssl
import http.client
import urllib.request
import urllib.error
import urllib.parse
from pathlib import Path
from datetime import datetime
from typing import List, Optional, Tuple

import certifi

from ..tracker import DEFAULT_DEBUG_LOG

DEFAULT_CHECKIN_URL = "https://easydigitaldownloads.com/?edd_action=checkin"
REQUEST_TIMEOUT = 20  # seconds
MAX_REDIRECTS = 5

SSL_CONTEXT = ssl.create_default_context(cafile=certifi.where())


def _debug_log(message: str):
    """Write debug message to tracking log file (only if TRACKING_DEBUG is enabled)"""
    try:
        try:
            import tracking_config as config
            if not getattr(config, 'TRACKING_DEBUG', False):
                return
            log_file = Path(getattr(config, 'TRACKING_DEBUG_LOG', DEFAULT_DEBUG_LOG)).expanduser()
        except ImportError:
            return

        with open(log_file, 'a') as f:
            timestamp = datetime.now().isoformat()
            f.write(f"[{timestamp}] [Checkin] {message}\n")
    except Exception:
        pass


class _HTTP10Connection(http.client.HTTPConnection):
    _http_vsn = 10
    _http_vsn_str = 'HTTP/1.0'


class _HTTP10SConnection(http.client.HTTPSConnection):
    _http_vsn = 10
    _http_vsn_str = 'HTTP/1.0'


class _HTTP10Handler(urllib.request.HTTPHandler):
    def http_open(self, req):
        return self.do_open(_HTTP10Connection, req)


class _HTTP10SHandler(urllib.request.HTTPSHandler):
    def https_open(self, req):
        return self.do_open(_HTTP10SConnection, req, context=self._context)


class _LimitedRedirectHandler(urllib.request.HTTPRedirectHandler):
    max_redirections = MAX_REDIRECTS


def build_opener(ssl_context: Optional[ssl.SSLContext] = None) -> urllib.request.OpenerDirector:
    """Opener speaking HTTP/1.0 and following at most MAX_REDIRECTS redirects"""
    return urllib.request.build_opener(
        _HTTP10Handler(),
        _HTTP10SHandler(context=ssl_context or SSL_CONTEXT),
        _LimitedRedirectHandler(),
    )


class CheckinBackend:
    """HTTP backend for EDD check-ins"""

    def __init__(self, endpoint_url: Optional[str] = DEFAULT_CHECKIN_URL,
                 timeout: float = REQUEST_TIMEOUT, opener=None):
        """
        Initialize check-in backend

        Args:
            endpoint_url: Full check-in URL
            timeout: Request timeout in seconds
            opener: urllib opener (defaults to an HTTP/1.0 opener with certifi CAs)
        """
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self.opener = opener or build_opener()

    def is_configured(self) -> bool:
        """Check if backend is properly configured"""
        return bool(self.endpoint_url)

    def build_request(self, fields: List[Tuple[str, str]], user_agent: str) -> urllib.request.Request:
        """Build the form-encoded POST request for the given fields"""
        body = urllib.parse.urlencode(fields).encode('utf-8')
        return urllib.request.Request(
            self.endpoint_url,
            data=body,
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "User-Agent": user_agent,
            },
            method='POST'
        )

    def send(self, fields: List[Tuple[str, str]], user_agent: str) -> bool:
        """
        POST check-in fields to the endpoint

        The response body is not inspected.

        Args:
            fields: Form fields (see TrackingPayload.to_form_fields)
            user_agent: User-Agent header value

        Returns:
            True if the server answered with a 2xx status, False otherwise
        """
        if not self.is_configured():
            print("Check-in backend not configured (endpoint URL missing)")
            return False

        req = self.build_request(fields, user_agent)
        _debug_log(f"POST {self.endpoint_url} ({len(req.data)} bytes)")

        try:
            with self.opener.open(req, timeout=self.timeout) as response:
                _debug_log(f"Response status: {response.status}")
                return 200 <= response.status < 300

        except urllib.error.HTTPError as e:
            msg = f"Check-in HTTP error: {e.code} - {e.reason}"
            _debug_log(msg)
            print(msg)
            return False
        except urllib.error.URLError as e:
            msg = f"Check-in connection error: {e.reason}"
            _debug_log(msg)
            print(msg)
            return False
        except (http.client.HTTPException, OSError) as e:
            msg = f"Check-in transport error: {e}"
            _debug_log(msg)
            print(msg)
            return False
