"""Bearer token verification against the external identity provider."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from branch_reports.core.config import Settings, get_settings
from branch_reports.services.errors import UnauthorizedError

logger = logging.getLogger(__name__)

security_scheme = HTTPBearer(auto_error=False)


class IdentityClaims(BaseModel):
    sub: str
    email: str | None = None
    role: str | None = None


@dataclass(frozen=True)
class AuthenticatedUser:
    user_id: str
    email: str | None


def verify_token(token: str, *, settings: Settings) -> AuthenticatedUser:
    """Decode an identity-provider access token into the caller's identity."""

    options = {"verify_aud": settings.identity_jwt_audience is not None}
    try:
        payload = jwt.decode(
            token,
            settings.identity_jwt_secret,
            algorithms=[settings.identity_jwt_algorithm],
            audience=settings.identity_jwt_audience,
            options=options,
        )
        claims = IdentityClaims(**payload)
    except (JWTError, ValidationError) as exc:
        logger.info("rejected bearer token", extra={"error": str(exc)})
        raise UnauthorizedError("Unauthorized") from exc
    return AuthenticatedUser(user_id=claims.sub, email=claims.email)


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security_scheme),
) -> AuthenticatedUser:
    if credentials is None:
        raise UnauthorizedError("Missing authorization header")
    user = verify_token(credentials.credentials, settings=get_settings())
    request.state.actor_id = user.user_id
    return user


__all__ = ["AuthenticatedUser", "IdentityClaims", "get_current_user", "verify_token"]
