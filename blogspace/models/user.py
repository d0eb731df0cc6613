"""User model."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from blogspace.clock import utcnow
from blogspace.database import Base


class User(Base):
    """Blog account and its credentials."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False)
    email = Column(String(254), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    bio = Column(Text, nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    last_login_at = Column(DateTime, nullable=True)
    password_reset_token_hash = Column(String(64), nullable=True, index=True)
    password_reset_expires_at = Column(DateTime, nullable=True)

    @property
    def has_pending_reset(self) -> bool:
        return self.password_reset_token_hash is not None

    def clear_password_reset(self) -> None:
        """Drop any outstanding reset code."""
        self.password_reset_token_hash = None
        self.password_reset_expires_at = None

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} admin={self.is_admin}>"
