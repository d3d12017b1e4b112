"""Bootstrap the first administrator from settings."""

import logging

from sqlalchemy.orm import Session

from hr_backend.core.config import Settings
from hr_backend.core.security import hash_password
from hr_backend.models.admin_user import AdminUser, AdminRole

logger = logging.getLogger(__name__)


def seed_default_admin(db: Session, settings: Settings) -> bool:
    """Create the default admin when no identity exists. Returns True if created."""
    if db.query(AdminUser.id).first():
        logger.info("Admin users already present, skipping bootstrap admin")
        return False

    admin = AdminUser(
        login=settings.DEFAULT_ADMIN_LOGIN,
        hashed_password=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
        name=settings.DEFAULT_ADMIN_NAME,
        email=settings.DEFAULT_ADMIN_EMAIL.lower(),
        role=AdminRole.admin,
        is_active=True,
    )
    db.add(admin)
    db.commit()
    logger.info("Created default admin user '%s'", settings.DEFAULT_ADMIN_LOGIN)
    return True
