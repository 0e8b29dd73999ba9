"""JWT Token Service."""

from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from authcore.config import Settings, get_settings
from authcore.database import utcnow


class JWTService:
    """Handles JWT token creation and validation."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.secret_key = settings.jwt_secret
        self.algorithm = settings.JWT_ALGORITHM
        self.expire_minutes = settings.JWT_EXPIRE_MINUTES

    def create_token(self, subject_id: str, expires_delta: timedelta | None = None) -> str:
        """Create a signed token for the given account id."""
        now = utcnow()
        expire = now + (expires_delta if expires_delta is not None else timedelta(minutes=self.expire_minutes))
        payload = {
            "sub": str(subject_id),
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> dict[str, Any] | None:
        """Decode and validate a JWT token. Returns None if invalid."""
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

    def verify_token(self, token: str) -> str | None:
        """Return the subject of a valid token.

        Bad signatures, malformed tokens and expired tokens all yield None.
        """
        payload = self.decode_token(token)
        if not payload:
            return None
        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            return None
        return subject


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService(get_settings())
    return _jwt_service
