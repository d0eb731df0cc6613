"""Process startup: schema creation and the admin account."""

import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from blogspace.config import get_settings
from blogspace.database import Base, SessionLocal
from blogspace.models.user import User  # noqa: F401
from blogspace.services.auth import get_auth_service
from blogspace.services.email import get_email_service

logger = logging.getLogger("blogspace")

# Tests point this at their own session
_session_factory: Callable[[], Session] | None = None


def init_app_state() -> None:
    """Run once at process start. Safe to call again."""
    settings = get_settings()
    for warning in settings.validate():
        logger.warning("CONFIG %s", warning)

    # An unknown EMAIL_PROVIDER raises here instead of on the first reset request
    mailer = get_email_service()
    logger.info("Mail provider: %s", type(mailer).__name__)

    session_factory = _session_factory or SessionLocal
    db = session_factory()
    try:
        if settings.AUTO_CREATE_TABLES:
            Base.metadata.create_all(bind=db.get_bind())
        get_auth_service().ensure_admin(
            db,
            username=settings.ADMIN_USERNAME,
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
        )
    finally:
        db.close()
