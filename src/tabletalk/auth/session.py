"""
TableTalk Auth - Session Providers.

The orchestrator never reads ambient auth state; it is handed a provider
that answers "what is the caller's session token right now?".
"""

from abc import ABC, abstractmethod


class SessionProvider(ABC):
    """Authentication collaborator."""

    @abstractmethod
    def get_current_session_token(self) -> str | None:
        """Return the caller's bearer token, or None when not signed in."""
        ...


class StaticSessionProvider(SessionProvider):
    """Provider bound to a single token (one per request / CLI session)."""

    def __init__(self, token: str | None):
        self._token = token

    def get_current_session_token(self) -> str | None:
        token = (self._token or "").strip()
        return token or None
