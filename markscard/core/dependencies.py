"""FastAPI dependency injection utilities."""

from typing import Annotated

from fastapi import Depends, Header

from markscard.core.exceptions import AuthenticationError
from markscard.core.security import verify_access_token
from markscard.core.session import AdminSession, admin_sessions


def get_admin_session(
    authorization: str = Header("", description="Bearer token"),
) -> AdminSession:
    """Resolve the bearer token to a live admin session."""
    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header format")

    token = authorization[7:]  # Remove "Bearer " prefix
    payload = verify_access_token(token)

    if not payload:
        raise AuthenticationError("Invalid or expired token")

    session_id = payload.get("sid")
    if not session_id:
        raise AuthenticationError("Invalid token payload")

    session = admin_sessions.get(session_id)
    if session is None or str(session.profile.id) != payload.get("sub"):
        raise AuthenticationError("Session expired or logged out")

    return session


# Type alias for dependency injection
CurrentAdmin = Annotated[AdminSession, Depends(get_admin_session)]
