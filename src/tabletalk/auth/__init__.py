"""TableTalk Auth Module.

Callers authenticate with Supabase-issued JWTs sent as Bearer tokens. The
verified token is also the session credential forwarded to the reasoning
service.
"""

from tabletalk.auth.schemas import TokenPayload, User
from tabletalk.auth.session import SessionProvider, StaticSessionProvider
from tabletalk.auth.supabase import get_current_user, verify_jwt

__all__ = [
    "get_current_user",
    "verify_jwt",
    "SessionProvider",
    "StaticSessionProvider",
    "TokenPayload",
    "User",
]
