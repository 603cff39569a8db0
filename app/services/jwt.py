"""JWT Token Service."""

import base64
import binascii
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from app.config import get_settings
from app.exceptions import ConfigurationError
from app.models.user import User

logger = logging.getLogger("water_temperature")

ALGORITHM = "HS256"
BASE64_PREFIX = "base64:"
MIN_KEY_BYTES = 32  # 256 bits for HS256


@dataclass(frozen=True)
class SigningKey:
    """HMAC key material, derived once from the configured secret."""

    key: bytes

    def __repr__(self) -> str:
        return f"SigningKey(<{len(self.key) * 8} bits>)"

    @classmethod
    def from_secret(cls, secret: str | None) -> "SigningKey":
        """Derive a key from raw UTF-8 text or a ``base64:``-prefixed value.

        Raises ConfigurationError for a missing secret, invalid base64 or a
        key shorter than 256 bits.
        """
        if not secret or not secret.strip():
            raise ConfigurationError("JWT secret is not configured. Set JWT_SECRET.")

        if secret[: len(BASE64_PREFIX)].lower() == BASE64_PREFIX:
            try:
                key = base64.b64decode(secret[len(BASE64_PREFIX) :], validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ConfigurationError("JWT_SECRET is prefixed with 'base64:' but is not valid base64.") from exc
        else:
            key = secret.encode("utf-8")

        if len(key) < MIN_KEY_BYTES:
            raise ConfigurationError(
                f"JWT secret too short: {len(key) * 8} bits. Provide at least 256 bits (32 bytes) "
                "or use 'base64:<secret>'."
            )
        return cls(key=key)


@dataclass(frozen=True)
class TokenClaims:
    """Identity facts carried by a validated token."""

    subject: str
    name: str
    email: str
    is_admin: bool
    issued_at: datetime | None
    expires_at: datetime


class JWTService:
    """Handles JWT token creation and validation."""

    def __init__(
        self,
        signing_key: SigningKey,
        lifetime_hours: int = 24,
        clock_skew_seconds: int = 30,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.signing_key = signing_key
        self.lifetime_hours = lifetime_hours
        self.clock_skew_seconds = clock_skew_seconds
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def expires_in_seconds(self) -> int:
        return self.lifetime_hours * 3600

    def create_token(self, user: User) -> str:
        """Create a JWT token for the given user."""
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": str(user.id),
            "name": user.user_name,
            "email": user.email or "",
            "admin": bool(user.is_admin),
            "iat": now,
            "exp": now + timedelta(hours=self.lifetime_hours),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.signing_key.key, algorithm=ALGORITHM)

    def decode_token(self, token: str) -> TokenClaims | None:
        """Decode and validate a JWT token. Returns None if invalid or expired."""
        try:
            payload = jwt.decode(
                token,
                self.signing_key.key,
                algorithms=[ALGORITHM],
                options={"require_exp": True, "require_sub": True, "leeway": self.clock_skew_seconds},
            )
        except JWTError as exc:
            logger.debug("Rejected token: %s", exc)
            return None

        issued_at = payload.get("iat")
        return TokenClaims(
            subject=payload["sub"],
            name=payload.get("name", ""),
            email=payload.get("email", ""),
            is_admin=payload.get("admin") is True,
            issued_at=datetime.fromtimestamp(issued_at, UTC) if isinstance(issued_at, int) else None,
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance. Raises ConfigurationError on a bad secret."""
    global _jwt_service
    if _jwt_service is None:
        settings = get_settings()
        _jwt_service = JWTService(
            SigningKey.from_secret(settings.JWT_SECRET),
            lifetime_hours=settings.JWT_TOKEN_LIFETIME_HOURS,
            clock_skew_seconds=settings.JWT_CLOCK_SKEW_SECONDS,
        )
    return _jwt_service
