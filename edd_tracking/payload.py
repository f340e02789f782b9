"""
Tracking Payload

The data sent on each check-in, and the host environment it is read from.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Tuple


class HostEnvironment:
    """
    Read-only view of the host site.

    Subclasses override whatever the host can provide. Anything left at the
    default reports as empty, so a partial host still produces a payload.
    """

    def site_url(self) -> str:
        return ""

    def admin_email(self) -> str:
        return ""

    def active_theme(self) -> Tuple[str, str]:
        """Return (name, version) of the active theme"""
        return ("", "")

    def installed_plugins(self) -> Iterable[str]:
        return []

    def active_plugins(self) -> Iterable[str]:
        return []


class StaticEnvironment(HostEnvironment):
    """Host environment backed by fixed values (config file, tests)"""

    def __init__(self, site_url: str = "", admin_email: str = "",
                 theme_name: str = "", theme_version: str = "",
                 installed_plugins: Optional[Iterable[str]] = None,
                 active_plugins: Optional[Iterable[str]] = None):
        self._site_url = site_url
        self._admin_email = admin_email
        self._theme = (theme_name, theme_version)
        self._installed_plugins = list(installed_plugins or [])
        self._active_plugins = list(active_plugins or [])

    def site_url(self) -> str:
        return self._site_url

    def admin_email(self) -> str:
        return self._admin_email

    def active_theme(self) -> Tuple[str, str]:
        return self._theme

    def installed_plugins(self) -> Iterable[str]:
        return list(self._installed_plugins)

    def active_plugins(self) -> Iterable[str]:
        return list(self._active_plugins)

    @classmethod
    def from_config(cls, config) -> 'StaticEnvironment':
        """Build from a tracking_config module (missing names are empty)"""
        return cls(
            site_url=getattr(config, 'SITE_URL', ''),
            admin_email=getattr(config, 'ADMIN_EMAIL', ''),
            theme_name=getattr(config, 'THEME_NAME', ''),
            theme_version=getattr(config, 'THEME_VERSION', ''),
            installed_plugins=getattr(config, 'INSTALLED_PLUGINS', []),
            active_plugins=getattr(config, 'ACTIVE_PLUGINS', []),
        )


@dataclass
class TrackingPayload:
    """Anonymized site metadata for one check-in"""

    url: str = ""
    theme: str = ""
    email: str = ""
    active_plugins: List[str] = field(default_factory=list)
    inactive_plugins: List[str] = field(default_factory=list)

    def to_form_fields(self) -> List[Tuple[str, str]]:
        """
        Flatten into form fields

        Lists use bracketed index keys (active_plugins[0]=...), which is how
        the check-in endpoint expects arrays in a form body.
        """
        fields = [
            ("url", self.url),
            ("theme", self.theme),
            ("email", self.email),
        ]
        for name in ("active_plugins", "inactive_plugins"):
            for index, plugin in enumerate(getattr(self, name)):
                fields.append((f"{name}[{index}]", plugin))
        return fields


def _read(source: Callable[[], Any], default: Any, on_error: Callable[[str], None]) -> Any:
    """Call a host data source, falling back to default on None, False or error"""
    try:
        value = source()
    except Exception as e:
        on_error(f"Host data source {getattr(source, '__name__', source)!r} failed: {e}")
        return default
    # Hosts report a missing option as False
    return default if value is None or value is False else value


def _read_list(source: Callable[[], Any], on_error: Callable[[str], None]) -> List[str]:
    """Read a host data source as a list of ids; anything malformed gives []"""
    value = _read(source, [], on_error)
    try:
        return [str(item) for item in value]
    except Exception as e:
        on_error(f"Host data source {getattr(source, '__name__', source)!r} "
                 f"returned unusable data: {e}")
        return []


def collect_payload(environment: HostEnvironment,
                    on_error: Callable[[str], None] = lambda msg: None) -> TrackingPayload:
    """
    Read the host environment into a TrackingPayload

    Installed plugins are split into active and inactive by comparing against
    the active-plugins registry. The active list is reported as the registry
    holds it.

    Args:
        environment: Host environment to read
        on_error: Called with a message when a data source fails

    Returns:
        TrackingPayload (never raises; missing data gives empty fields)
    """
    theme = _read(environment.active_theme, ("", ""), on_error)
    try:
        theme_name, theme_version = theme
        theme_label = " ".join(str(part) for part in (theme_name, theme_version) if part)
    except Exception:
        on_error(f"Unexpected theme data: {theme!r}")
        theme_label = ""

    active = _read_list(environment.active_plugins, on_error)
    installed = _read_list(environment.installed_plugins, on_error)
    active_set = set(active)

    return TrackingPayload(
        url=str(_read(environment.site_url, "", on_error)),
        theme=theme_label,
        email=str(_read(environment.admin_email, "", on_error)),
        active_plugins=active,
        inactive_plugins=[p for p in installed if p not in active_set],
    )
