"""
Configuration for the Duo MFA step.

Values are read from the ``DUO_MFA`` dict in your Django settings and merged
over ``DEFAULTS``:

    DUO_MFA = {
        "client_id": "DIXXXXXXXXXXXXXXXXXX",
        "client_secret": "deadbeefdeadbeefdeadbeefdeadbeefdeadbeef",
        "api_host": "api-XXXXXXXX.duosecurity.com",
        "callback_url": "https://sso.example.edu/duo/",
        # Exactly "CLOSED" (abort when Duo is down) or "OPEN" (bypass MFA)
        "failure_mode": "CLOSED",
    }
"""

from dataclasses import dataclass
from enum import Enum

from django.conf import settings as django_settings

from .exceptions import ConfigurationError

DEFAULTS = {
    "provider": "duo_mfa_node.verification.duo.DuoUniversalProvider",
    "client_id": "",
    "client_secret": "",
    "api_host": "",
    "callback_url": "",
    "failure_mode": "CLOSED",
    "timeout": 10,
    "username_session_key": "username",
}


class FailureMode(Enum):
    """What to do when the Duo health check fails."""
    CLOSED = "CLOSED"
    OPEN = "OPEN"

    @classmethod
    def parse(cls, value) -> "FailureMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(
                f"Invalid Duo failure mode {value!r}; expected CLOSED or OPEN"
            ) from None


class DuoMFASettings:
    """Attribute access to ``settings.DUO_MFA`` with defaults applied."""

    def __getattr__(self, name):
        key = name.lower()
        if key not in DEFAULTS:
            raise AttributeError(f"Invalid DUO_MFA setting: {name}")
        user_settings = getattr(django_settings, "DUO_MFA", None) or {}
        return user_settings.get(key, DEFAULTS[key])


settings = DuoMFASettings()


@dataclass(frozen=True)
class DuoConfig:
    """
    Immutable per-deployment configuration.

    Attributes:
        client_id: Duo client ID (ikey)
        client_secret: Duo client secret (skey)
        api_host: Duo API hostname, without scheme
        callback_url: URL Duo redirects the user agent back to
        failure_mode: Policy applied when the health check fails
    """
    client_id: str
    client_secret: str
    api_host: str
    callback_url: str
    failure_mode: FailureMode = FailureMode.CLOSED

    def __post_init__(self):
        # Accept the raw setting string as well as the enum
        object.__setattr__(self, "failure_mode", FailureMode.parse(self.failure_mode))

    @classmethod
    def from_settings(cls) -> "DuoConfig":
        return cls(
            client_id=settings.CLIENT_ID,
            client_secret=settings.CLIENT_SECRET,
            api_host=settings.API_HOST,
            callback_url=settings.CALLBACK_URL,
            failure_mode=settings.FAILURE_MODE,
        )

    def __repr__(self):
        return (
            f"DuoConfig(client_id={self.client_id!r}, "
            f"client_secret=<{len(self.client_secret)} characters>, "
            f"api_host={self.api_host!r}, callback_url={self.callback_url!r}, "
            f"failure_mode={self.failure_mode.value})"
        )
