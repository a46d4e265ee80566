"""
TableTalk Auth - Supabase JWT Validation.

Validates JWT tokens issued by Supabase Auth.
"""

from datetime import datetime, timezone
from typing import Annotated
from uuid import NAMESPACE_URL, UUID, uuid5

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from tabletalk.auth.schemas import TokenPayload, User
from tabletalk.config import Settings, get_settings
from tabletalk.exceptions import UnauthenticatedError

# Security scheme
security = HTTPBearer(auto_error=False)

DEV_USER_ID = uuid5(NAMESPACE_URL, "tabletalk:dev-user")


def verify_jwt(
    token: str,
    secret: str,
    algorithms: list[str] | None = None,
) -> TokenPayload:
    """
    Verify and decode a JWT token.

    Args:
        token: The JWT token string
        secret: The secret key for verification
        algorithms: List of allowed algorithms (default: HS256)

    Returns:
        Decoded token payload

    Raises:
        UnauthenticatedError: If token is invalid or expired
    """
    if algorithms is None:
        algorithms = ["HS256"]

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=algorithms,
            options={"verify_aud": False},
        )

        exp = payload.get("exp")
        if exp and datetime.fromtimestamp(exp, tz=timezone.utc) < datetime.now(tz=timezone.utc):
            raise UnauthenticatedError("Token has expired")

        return TokenPayload(
            sub=UUID(payload["sub"]),
            email=payload.get("email"),
            role=payload.get("role", "authenticated"),
            aud=payload.get("aud"),
            exp=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc) if payload.get("iat") else None,
        )
    except JWTError as e:
        raise UnauthenticatedError(f"Invalid token: {e}")
    except (KeyError, ValueError) as e:
        raise UnauthenticatedError(f"Malformed token payload: {e}")


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    """
    Get the current authenticated user from the request.

    With AUTH_INSECURE_DEV_BYPASS (never in production) any bearer token is
    accepted and mapped to a fixed development user.

    Raises:
        UnauthenticatedError: If no token or invalid token
    """
    if not credentials or not credentials.credentials.strip():
        raise UnauthenticatedError("Missing authentication token")

    token = credentials.credentials.strip()

    if settings.auth_insecure_dev_bypass and not settings.is_production:
        user = User(id=DEV_USER_ID, email="dev@localhost", role="authenticated", access_token=token)
    else:
        token_payload = verify_jwt(token=token, secret=settings.supabase.jwt_secret)
        user = User(
            id=token_payload.sub,
            email=token_payload.email,
            role=token_payload.role,
            access_token=token,
        )

    # Store user in request state for access in other dependencies
    request.state.user_id = str(user.id)

    return user
