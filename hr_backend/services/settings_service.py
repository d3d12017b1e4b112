"""Settings service: generic key/value configuration store."""

from typing import Any, List, Optional, Tuple

from sqlalchemy.orm import Session

from hr_backend.core.exceptions import ResourceNotFoundError
from hr_backend.models.setting import Setting

ALLOWED_MIME_TYPES_KEY = "allowed_mime_types"
MAX_FILE_SIZE_MB_KEY = "max_file_size_mb"


class SettingsService:
    """CRUD over the ``settings`` table."""

    @staticmethod
    def list_settings(db: Session) -> List[Setting]:
        return db.query(Setting).order_by(Setting.key.asc()).all()

    @staticmethod
    def get(db: Session, key: str) -> Setting:
        setting = db.query(Setting).filter(Setting.key == key).first()
        if not setting:
            raise ResourceNotFoundError(f"A configuração com a chave '{key}' não foi encontrada.")
        return setting

    @staticmethod
    def get_value(db: Session, key: str, default: Any = None) -> Any:
        setting = db.query(Setting).filter(Setting.key == key).first()
        return setting.value if setting else default

    @staticmethod
    def upsert(
        db: Session,
        key: str,
        value: Any,
        description: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> Tuple[Setting, bool]:
        """Insert or update a key. Returns ``(setting, created)``."""
        setting = db.query(Setting).filter(Setting.key == key).first()
        created = setting is None
        if created:
            setting = Setting(key=key)
            db.add(setting)
        setting.value = value
        if description is not None:
            setting.description = description
        setting.updated_by_id = actor_id
        db.commit()
        db.refresh(setting)
        return setting, created

    @staticmethod
    def delete(db: Session, key: str) -> None:
        setting = SettingsService.get(db, key)
        db.delete(setting)
        db.commit()


settings_service = SettingsService()
