"""Authentication dependencies for FastAPI routes."""

from dataclasses import dataclass

from fastapi import HTTPException, Request

from app.services.jwt import get_jwt_service

BEARER_PREFIX = "bearer "


@dataclass
class CurrentUser:
    """Identity taken from a validated bearer token."""

    user_id: int


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def get_current_user(request: Request) -> CurrentUser:
    """Extract and validate user from the Bearer token. Raises 401 if invalid."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.lower().startswith(BEARER_PREFIX):
        raise _unauthenticated("Not authenticated")

    token = auth_header[len(BEARER_PREFIX) :].strip()
    if not token:
        raise _unauthenticated("Not authenticated")

    claims = get_jwt_service().decode_token(token)
    if claims is None:
        raise _unauthenticated("Invalid or expired token")

    try:
        user_id = int(claims.subject)
    except (TypeError, ValueError):
        raise _unauthenticated("Invalid token payload") from None

    return CurrentUser(user_id=user_id)
