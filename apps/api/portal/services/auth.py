"""Verification of access tokens issued by the hosted auth provider."""
from __future__ import annotations

import logging
from dataclasses import dataclass

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.config import Settings, settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True, slots=True)
class SessionUser:
    """The authenticated caller, derived fresh from the token on every request."""

    user_id: str
    email: str | None = None


def verify_token(token: str, config: Settings = settings) -> SessionUser:
    """Decode and validate a bearer token, returning the session user."""

    if not config.jwt_secret:
        logger.error("JWT secret is not configured; rejecting token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication unavailable")

    try:
        payload = jwt.decode(
            token,
            config.jwt_secret,
            algorithms=[config.jwt_algorithm],
            audience=config.jwt_audience,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return SessionUser(user_id=str(user_id), email=payload.get("email"))


async def get_session_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> SessionUser:
    """FastAPI dependency resolving the caller from the Authorization header."""

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return verify_token(credentials.credentials)
