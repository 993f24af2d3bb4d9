"""
Anti-forgery state handling.

The session is owned by the host; this module only reads and writes a
single key in it. ``MappingSessionState`` works with anything that behaves
like a dict, which covers both plain dicts and Django's ``request.session``.
"""

from abc import ABC, abstractmethod
from typing import Any, MutableMapping, Optional

from ..constants import SESSION_STATE_KEY
from .base import MFAProvider


class SessionState(ABC):
    """Key/value state scoped to one authentication attempt."""

    @abstractmethod
    def get(self, key: str) -> Any:
        """Return the value stored under ``key``, or None."""

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove ``key`` if present."""


class MappingSessionState(SessionState):
    """SessionState backed by a mutable mapping."""

    def __init__(self, mapping: MutableMapping):
        self.mapping = mapping

    def get(self, key):
        return self.mapping.get(key)

    def put(self, key, value):
        self.mapping[key] = value

    def remove(self, key):
        self.mapping.pop(key, None)


class StateTokenStore:
    """Generates and tracks the per-attempt anti-forgery token."""

    def __init__(self, provider: MFAProvider, key: str = SESSION_STATE_KEY):
        self.provider = provider
        self.key = key

    def generate(self) -> str:
        return self.provider.generate_state()

    def put(self, session: SessionState, token: str) -> None:
        session.put(self.key, token)

    def get(self, session: SessionState) -> Optional[str]:
        token = session.get(self.key)
        return str(token) if token is not None else None

    def clear(self, session: SessionState) -> None:
        session.remove(self.key)
