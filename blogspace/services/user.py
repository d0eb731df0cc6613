"""User profile service."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from blogspace.models.user import User
from blogspace.services.password import hash_password

logger = logging.getLogger("blogspace")


class UserService:
    """Handles profile lookup, updates and account deletion."""

    def get_user(self, db: Session, user_id: int) -> User | None:
        return db.get(User, user_id)

    def list_users(self, db: Session) -> list[User]:
        """All users, newest first."""
        return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

    def count_users(self, db: Session) -> int:
        return db.query(func.count(User.id)).scalar() or 0

    def update_profile(
        self,
        db: Session,
        user: User,
        username: str | None = None,
        bio: str | None = None,
        password: str | None = None,
    ) -> User:
        """Apply a self-service profile update.

        Only username, bio and password are writable here. A new password is
        re-hashed and any pending reset code is dropped in the same commit.
        """
        if username is not None:
            user.username = username.strip()
        if bio is not None:
            user.bio = bio
        if password is not None:
            user.password_hash = hash_password(password)
            user.clear_password_reset()
        db.commit()
        db.refresh(user)
        return user

    def delete_user(self, db: Session, user: User) -> None:
        """Delete a user account."""
        user_id = user.id
        db.delete(user)
        db.commit()
        logger.info("Deleted user id=%s", user_id)


_user_service: UserService | None = None


def get_user_service() -> UserService:
    """Get singleton user service instance."""
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
