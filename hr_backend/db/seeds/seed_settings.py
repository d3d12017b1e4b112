"""Seed the upload configuration read by the document pipeline."""

import logging

from sqlalchemy.orm import Session

from hr_backend.core.config import Settings
from hr_backend.models.setting import Setting
from hr_backend.services.settings_service import ALLOWED_MIME_TYPES_KEY, MAX_FILE_SIZE_MB_KEY

logger = logging.getLogger(__name__)


def seed_default_settings(db: Session, settings: Settings) -> None:
    """Insert default settings keys that don't exist yet."""
    defaults = [
        (ALLOWED_MIME_TYPES_KEY, settings.DEFAULT_ALLOWED_MIME_TYPES,
         "Tipos MIME aceitos no envio de documentos"),
        (MAX_FILE_SIZE_MB_KEY, settings.DEFAULT_MAX_FILE_SIZE_MB,
         "Tamanho máximo de arquivo em MB"),
    ]
    created = 0
    for key, value, description in defaults:
        if db.query(Setting.key).filter(Setting.key == key).first():
            continue
        setting = Setting(key=key, description=description)
        setting.value = value
        db.add(setting)
        created += 1
    db.commit()
    if created:
        logger.info("Seeded %d default setting(s)", created)
