"""Authentication service."""

import hashlib
import hmac
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blogspace import clock
from blogspace.config import get_settings
from blogspace.models.user import User
from blogspace.services.email import DeliveryError, EmailService
from blogspace.services.password import hash_password, verify_password

logger = logging.getLogger("blogspace")

INVALID_RESET_CODE = "Invalid or expired reset code"


@dataclass
class AuthResult:
    """Result of an authentication attempt."""

    success: bool
    error: str | None = None
    user_id: int | None = None
    username: str | None = None
    email: str | None = None
    is_admin: bool = False

    @classmethod
    def for_user(cls, user: User) -> "AuthResult":
        return cls(
            success=True,
            user_id=user.id,
            username=user.username,
            email=user.email,
            is_admin=user.is_admin,
        )


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_reset_code(code: str) -> str:
    """sha256 hex digest of a reset code; only this digest is ever stored."""
    return hashlib.sha256(code.strip().lower().encode("utf-8")).hexdigest()


class AuthService:
    """Handles registration, login, password changes and the reset-code flow."""

    def __init__(self, clock_func: Callable[[], datetime] | None = None) -> None:
        settings = get_settings()
        self.reset_expire_minutes = settings.PASSWORD_RESET_EXPIRE_MINUTES
        self.reset_code_bytes = settings.PASSWORD_RESET_CODE_BYTES
        self._clock = clock_func

    def now(self) -> datetime:
        if self._clock is not None:
            return self._clock()
        return clock.utcnow()

    def get_user_by_email(self, db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == normalize_email(email)).first()

    def register(self, db: Session, username: str, email: str, password: str) -> AuthResult:
        """Register a new user. Returns AuthResult with success/error."""
        if self.get_user_by_email(db, email):
            return AuthResult(success=False, error="Email already registered")

        user = User(
            username=username.strip(),
            email=normalize_email(email),
            password_hash=hash_password(password),
            is_admin=False,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            db.rollback()
            return AuthResult(success=False, error="Email already registered")
        db.refresh(user)

        logger.info("Registered user id=%s", user.id)
        return AuthResult.for_user(user)

    def authenticate(self, db: Session, email: str, password: str) -> AuthResult:
        """Authenticate a user by email and password."""
        user = self.get_user_by_email(db, email)
        if not user or not verify_password(password, user.password_hash):
            return AuthResult(success=False, error="Invalid email or password")

        user.last_login_at = self.now()
        db.commit()

        return AuthResult.for_user(user)

    def change_password(self, db: Session, user_id: int, current_password: str, new_password: str) -> AuthResult:
        """Change the password of a logged-in user after re-checking the current one."""
        user = db.get(User, user_id)
        if not user:
            return AuthResult(success=False, error="User not found")

        if not verify_password(current_password, user.password_hash):
            return AuthResult(success=False, error="Current password is incorrect")

        user.password_hash = hash_password(new_password)
        user.clear_password_reset()
        db.commit()

        return AuthResult.for_user(user)

    def request_password_reset(self, db: Session, email: str, mailer: EmailService) -> str | None:
        """Issue a reset code for the given email and mail it to the user.

        Returns the raw code if the user exists, None otherwise. Callers must
        not reveal which. A new request replaces any code still pending.

        Raises DeliveryError if the mail could not be sent; the pending code is
        cleared first so it can never be used.
        """
        user = self.get_user_by_email(db, email)
        if not user:
            return None

        code = secrets.token_hex(self.reset_code_bytes)
        user.password_reset_token_hash = hash_reset_code(code)
        user.password_reset_expires_at = self.now() + timedelta(minutes=self.reset_expire_minutes)
        db.commit()

        try:
            mailer.send(
                user.email,
                "Your password reset code",
                f"Hello {user.username},\n\n"
                f"Your password reset code is: {code}\n"
                f"It expires in {self.reset_expire_minutes} minutes.\n\n"
                "If you did not ask to reset your password you can ignore this email.",
            )
        except DeliveryError:
            user.clear_password_reset()
            db.commit()
            logger.warning("Reset code for user id=%s rolled back after delivery failure", user.id)
            raise

        logger.info("Issued password reset code for user id=%s", user.id)
        return code

    def reset_password(self, db: Session, email: str, code: str, new_password: str) -> AuthResult:
        """Consume a reset code and set a new password.

        A wrong code leaves the pending code in place so the user can retry
        until it expires. An expired code is cleared and reported with the same
        message as a wrong or missing one.
        """
        user = self.get_user_by_email(db, email)
        if not user or not user.has_pending_reset:
            return AuthResult(success=False, error=INVALID_RESET_CODE)

        if not user.password_reset_expires_at or self.now() >= user.password_reset_expires_at:
            user.clear_password_reset()
            db.commit()
            return AuthResult(success=False, error=INVALID_RESET_CODE)

        if not hmac.compare_digest(hash_reset_code(code), user.password_reset_token_hash):
            return AuthResult(success=False, error=INVALID_RESET_CODE)

        user.password_hash = hash_password(new_password)
        user.clear_password_reset()
        user.last_login_at = self.now()
        db.commit()

        logger.info("Password reset completed for user id=%s", user.id)
        return AuthResult.for_user(user)

    def ensure_admin(self, db: Session, username: str, email: str, password: str) -> bool:
        """Create the bootstrap admin account unless one with that email exists.

        Returns True if the account was created.
        """
        existing = self.get_user_by_email(db, email)
        if existing:
            if not existing.is_admin:
                logger.warning("Bootstrap admin email %s belongs to a non-admin account", existing.email)
            else:
                logger.info("Admin user already exists")
            return False

        admin = User(
            username=username,
            email=normalize_email(email),
            password_hash=hash_password(password),
            is_admin=True,
        )
        db.add(admin)
        db.commit()
        logger.info("Admin user created successfully")
        return True


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
