"""Admin users API router: login, password reset and administrator management."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from hr_backend.api.deps import get_app_settings, get_mailer
from hr_backend.core.config import Settings
from hr_backend.core.rate_limiter import login_rate_limit
from hr_backend.core.security import (
    TokenService, get_current_user, get_token_service, require_admin,
)
from hr_backend.db.session import get_db
from hr_backend.models.admin_user import AdminUser
from hr_backend.schemas.schemas import (
    LoginRequest, LoginResponse, RegisterRequest, AdminUserOut,
    AdminUserUpdateRequest, PermissionsUpdateRequest, ChangePasswordRequest,
    ForgotPasswordRequest, ResetPasswordRequest, MessageResponse,
)
from hr_backend.services.auth_service import auth_service
from hr_backend.services.email_service import EmailService

router = APIRouter(prefix="/admin-users", tags=["admin-users"])


@router.post("/login", response_model=LoginResponse, dependencies=[Depends(login_rate_limit)])
async def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Authenticate and return an access token."""
    return auth_service.authenticate(db, tokens, body.login, body.password)


@router.post(
    "/forgot-password", response_model=MessageResponse, dependencies=[Depends(login_rate_limit)]
)
async def forgot_password(
    body: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    mailer: EmailService = Depends(get_mailer),
    settings: Settings = Depends(get_app_settings),
):
    """Send a reset link; the answer never reveals whether the email exists."""
    auth_service.forgot_password(db, mailer, settings, body.email)
    return MessageResponse(
        message="Se um usuário com este email existir, um link de redefinição de senha foi enviado."
    )


@router.post("/reset-password/{token}", response_model=MessageResponse)
async def reset_password(token: str, body: ResetPasswordRequest, db: Session = Depends(get_db)):
    """Set a new password using a reset token."""
    auth_service.reset_password(db, token, body.new_password)
    return MessageResponse(message="Senha redefinida com sucesso!")


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user),
):
    """Change the caller's own password."""
    auth_service.change_password(db, user, body.current_password, body.new_password)
    return MessageResponse(message="Senha alterada com sucesso!")


@router.get("/me", response_model=AdminUserOut)
async def get_me(user: AdminUser = Depends(get_current_user)):
    """Get the caller's profile."""
    return user


@router.post("/register", response_model=AdminUserOut, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(require_admin),
):
    """Create an admin user (admin only)."""
    return auth_service.register(
        db,
        login=body.login,
        password=body.password,
        name=body.name,
        email=body.email,
        role=body.role,
        is_active=body.is_active,
        permissions=body.permissions,
    )


@router.get("", response_model=List[AdminUserOut])
async def list_admin_users(
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(require_admin),
):
    """List all admin users (admin only)."""
    return auth_service.list_users(db)


@router.get("/{user_id}", response_model=AdminUserOut)
async def get_admin_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(require_admin),
):
    return auth_service.get_user(db, user_id)


@router.put("/{user_id}", response_model=AdminUserOut)
async def update_admin_user(
    user_id: int,
    body: AdminUserUpdateRequest,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(require_admin),
):
    """Update another admin user's data, role, status or permissions (admin only)."""
    return auth_service.update_user(db, admin.id, user_id, body.model_dump(exclude_unset=True))


@router.put("/{user_id}/permissions", response_model=AdminUserOut)
async def update_admin_user_permissions(
    user_id: int,
    body: PermissionsUpdateRequest,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(require_admin),
):
    """Replace the granular permission document of an 'rh' user (admin only)."""
    return auth_service.update_permissions(db, admin.id, user_id, body.permissions)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_admin_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(require_admin),
):
    """Delete another admin user (admin only)."""
    auth_service.delete_user(db, admin.id, user_id)
    return MessageResponse(message="Usuário administrador excluído.")
