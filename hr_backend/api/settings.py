"""Settings API router: key/value configuration store."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from hr_backend.core.security import RequirePermission, get_current_user
from hr_backend.db.session import get_db
from hr_backend.models.admin_user import AdminUser
from hr_backend.schemas.schemas import SettingIn, SettingOut, MessageResponse
from hr_backend.services.settings_service import settings_service

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=List[SettingOut])
async def list_settings(db: Session = Depends(get_db), user: AdminUser = Depends(get_current_user)):
    return settings_service.list_settings(db)


@router.get("/{key}", response_model=SettingOut)
async def get_setting(key: str, db: Session = Depends(get_db), user: AdminUser = Depends(get_current_user)):
    return settings_service.get(db, key)


@router.post("", response_model=SettingOut)
async def upsert_setting(
    body: SettingIn,
    response: Response,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(RequirePermission("settings", "edit")),
):
    """Create or update a setting; 201 when the key is new."""
    setting, created = settings_service.upsert(db, body.key, body.value, body.description, user.id)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return setting


@router.delete("/{key}", response_model=MessageResponse)
async def delete_setting(
    key: str,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(RequirePermission("settings", "delete")),
):
    settings_service.delete(db, key)
    return MessageResponse(message="Configuração excluída com sucesso.")
