"""JWT Token Service."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from blogspace import clock
from blogspace.config import get_settings


@dataclass(frozen=True)
class TokenIdentity:
    """Identity carried by a verified bearer token."""

    user_id: int
    is_admin: bool


class JWTService:
    """Handles bearer token creation and validation.

    Tokens are stateless: validity depends on the signature and the embedded
    expiry only, there is no server-side revocation.
    """

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
        expire_minutes: int | None = None,
    ) -> None:
        settings = get_settings()
        self.secret_key = secret_key or settings.JWT_SECRET_KEY
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.expire_minutes = settings.JWT_EXPIRE_MINUTES if expire_minutes is None else expire_minutes

    def create_token(self, user_id: int, is_admin: bool) -> str:
        """Create a signed token for the given user."""
        issued_at = clock.utcnow()
        payload = {
            "sub": str(user_id),
            "isAdmin": bool(is_admin),
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> dict[str, Any] | None:
        """Decode and validate a JWT token. Returns None if invalid."""
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

    def verify_token(self, token: str) -> TokenIdentity | None:
        """Resolve a token to its identity. Returns None if invalid, expired or malformed."""
        payload = self.decode_token(token)
        if not payload:
            return None

        subject = payload.get("sub")
        is_admin = payload.get("isAdmin")
        if not isinstance(subject, str) or not subject.isdigit() or not isinstance(is_admin, bool):
            return None

        return TokenIdentity(user_id=int(subject), is_admin=is_admin)

    def is_token_valid(self, token: str) -> bool:
        """Check if a token is valid."""
        return self.verify_token(token) is not None


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService()
    return _jwt_service
