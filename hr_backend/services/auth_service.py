"""Auth service: login, password reset and administrator management."""

import hashlib
import logging
import secrets
import smtplib
from datetime import timedelta
from typing import Optional, Dict, Any, List

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hr_backend.core.config import Settings
from hr_backend.core.exceptions import (
    AuthenticationError, AuthorizationError, ResourceConflictError,
    ResourceNotFoundError, ValidationError,
)
from hr_backend.core.security import TokenService, hash_password, verify_password
from hr_backend.core.text import enforce_case
from hr_backend.models.admin_user import (
    AdminUser, AdminRole, GRANTABLE_RESOURCES, PERMISSION_ACTIONS,
)
from hr_backend.services.audit_service import utcnow
from hr_backend.services.email_service import EmailService

logger = logging.getLogger(__name__)

LAST_ADMIN_MESSAGE = "Não é possível remover o último administrador."


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def validate_permission_document(
    permissions: Optional[Dict[str, Dict[str, bool]]],
) -> Optional[Dict[str, Dict[str, bool]]]:
    """Reject unknown resources or actions; drop nothing silently."""
    if permissions is None:
        return None
    errors: List[str] = []
    for resource, actions in permissions.items():
        if resource not in GRANTABLE_RESOURCES:
            errors.append(f"permissions.{resource}: recurso desconhecido")
            continue
        for action in actions:
            if action not in PERMISSION_ACTIONS:
                errors.append(f"permissions.{resource}.{action}: ação desconhecida")
    if errors:
        raise ValidationError("Documento de permissões inválido.", errors)
    return permissions


def user_projection(user: AdminUser) -> Dict[str, Any]:
    """Public view of an identity: never the hash or reset fields."""
    return {
        "id": user.id,
        "name": user.name,
        "login": user.login,
        "email": user.email,
        "role": user.role,
        "is_active": user.is_active,
        "permissions": user.permissions,
        "created_at": user.created_at,
    }


class AuthService:
    """Handles authentication and administrator management."""

    @staticmethod
    def authenticate(db: Session, tokens: TokenService, login: str, password: str) -> Dict[str, Any]:
        """Check credentials and issue an access token.

        Raises:
            AuthenticationError: unknown login or wrong password.
            AuthorizationError: the account is inactive.
        """
        # Stored logins may have been title-cased on registration.
        user = (
            db.query(AdminUser)
            .filter(func.lower(AdminUser.login) == login.strip().lower())
            .first()
        )
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Credenciais inválidas.")

        if not user.is_active:
            raise AuthorizationError("Sua conta está inativa. Entre em contato com o suporte.")

        logger.info("Admin user %s logged in", user.id)
        return {
            "token": tokens.issue(user),
            "token_type": "bearer",
            "user": user_projection(user),
        }

    @staticmethod
    def register(
        db: Session,
        login: str,
        password: str,
        name: str,
        email: str,
        role: AdminRole = AdminRole.rh,
        is_active: bool = True,
        permissions: Optional[Dict[str, Dict[str, bool]]] = None,
    ) -> AdminUser:
        """Create an identity. Permission documents are kept only for ``rh``."""
        login = enforce_case(login.strip())
        name = enforce_case(name.strip())
        email = email.strip().lower()

        existing = db.query(AdminUser).filter(
            or_(func.lower(AdminUser.login) == login.lower(), AdminUser.email == email)
        ).first()
        if existing:
            if existing.login.lower() == login.lower():
                raise ResourceConflictError("Nome de usuário (login) já existe.")
            raise ResourceConflictError("Email já cadastrado.")

        user = AdminUser(
            login=login,
            hashed_password=hash_password(password),
            name=name,
            email=email,
            role=role,
            is_active=is_active,
        )
        user.permissions = (
            validate_permission_document(permissions) if role == AdminRole.rh else None
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ResourceConflictError("Login ou email já cadastrado.")
        db.refresh(user)
        logger.info("Registered admin user %s with role %s", user.id, role.value)
        return user

    @staticmethod
    def get_user(db: Session, user_id: int) -> AdminUser:
        """Get an identity by id."""
        user = db.query(AdminUser).filter(AdminUser.id == user_id).first()
        if not user:
            raise ResourceNotFoundError("Usuário administrador não encontrado.")
        return user

    @staticmethod
    def list_users(db: Session) -> List[AdminUser]:
        return db.query(AdminUser).order_by(AdminUser.name.asc()).all()

    @staticmethod
    def _ensure_not_last_admin(db: Session, target: AdminUser) -> None:
        """Refuse to remove the final active unrestricted identity.

        The active admin rows are locked so two concurrent demotions cannot
        both observe a count of two.
        """
        if target.role != AdminRole.admin or not target.is_active:
            return
        active_admins = (
            db.query(AdminUser.id)
            .filter(AdminUser.role == AdminRole.admin, AdminUser.is_active.is_(True))
            .with_for_update()
            .all()
        )
        if len(active_admins) <= 1:
            logger.warning("Refused to remove last active admin user %s", target.id)
            raise AuthorizationError(LAST_ADMIN_MESSAGE)

    @staticmethod
    def update_user(
        db: Session,
        current_user_id: int,
        target_user_id: int,
        changes: Dict[str, Any],
    ) -> AdminUser:
        """Update another identity; ``changes`` holds only the fields sent."""
        privilege_fields = {"role", "is_active", "permissions"} & changes.keys()
        if current_user_id == target_user_id and privilege_fields:
            raise AuthorizationError("Você não pode alterar seu próprio perfil ou status.")

        try:
            user = (
                db.query(AdminUser)
                .filter(AdminUser.id == target_user_id)
                .with_for_update()
                .first()
            )
            if not user:
                raise ResourceNotFoundError("Usuário administrador não encontrado.")

            new_role = changes.get("role") or user.role
            demoting = user.role == AdminRole.admin and new_role != AdminRole.admin
            deactivating = changes.get("is_active") is False and user.is_active
            if demoting or deactivating:
                AuthService._ensure_not_last_admin(db, user)

            if changes.get("login"):
                login = enforce_case(changes["login"].strip())
                AuthService._ensure_unique(db, AdminUser.login, login, user.id,
                                           "Nome de usuário (login) já existe.")
                user.login = login
            if changes.get("email"):
                email = changes["email"].strip().lower()
                AuthService._ensure_unique(db, AdminUser.email, email, user.id,
                                           "Email já cadastrado.")
                user.email = email
            if changes.get("name"):
                user.name = enforce_case(changes["name"].strip())
            if changes.get("password"):
                user.hashed_password = hash_password(changes["password"])
            if changes.get("is_active") is not None:
                user.is_active = changes["is_active"]

            user.role = new_role
            if new_role != AdminRole.rh:
                user.permissions = None
            elif "permissions" in changes:
                user.permissions = validate_permission_document(changes["permissions"])

            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(user)
        logger.info("Admin user %s updated by %s", target_user_id, current_user_id)
        return user

    @staticmethod
    def update_permissions(
        db: Session,
        current_user_id: int,
        target_user_id: int,
        permissions: Dict[str, Dict[str, bool]],
    ) -> AdminUser:
        """Replace the permission document of a granular identity."""
        if current_user_id == target_user_id:
            raise AuthorizationError("Você não pode alterar suas próprias permissões.")
        user = AuthService.get_user(db, target_user_id)
        if user.role != AdminRole.rh:
            raise ValidationError(
                "Permissões granulares só se aplicam ao perfil 'rh'.",
                ["permissions: perfil sem permissões granulares"],
            )
        user.permissions = validate_permission_document(permissions)
        db.commit()
        db.refresh(user)
        logger.info("Permissions of admin user %s replaced by %s", target_user_id, current_user_id)
        return user

    @staticmethod
    def delete_user(db: Session, current_user_id: int, target_user_id: int) -> None:
        """Delete another identity, keeping at least one active admin."""
        if current_user_id == target_user_id:
            raise AuthorizationError("Você não pode excluir sua própria conta.")

        try:
            user = (
                db.query(AdminUser)
                .filter(AdminUser.id == target_user_id)
                .with_for_update()
                .first()
            )
            if not user:
                raise ResourceNotFoundError("Usuário administrador não encontrado.")
            AuthService._ensure_not_last_admin(db, user)
            db.delete(user)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ResourceConflictError(
                "Usuário possui registros vinculados. Desative a conta em vez de excluí-la."
            )
        except Exception:
            db.rollback()
            raise
        logger.info("Admin user %s deleted by %s", target_user_id, current_user_id)

    @staticmethod
    def change_password(db: Session, user: AdminUser, current_password: str, new_password: str) -> None:
        """Self-service password change; needs the current password."""
        if not verify_password(current_password, user.hashed_password):
            raise AuthenticationError("Senha atual incorreta.")
        user.hashed_password = hash_password(new_password)
        db.commit()
        logger.info("Admin user %s changed own password", user.id)

    @staticmethod
    def forgot_password(db: Session, mailer: EmailService, settings: Settings, email: str) -> None:
        """Store a hashed reset token and mail the raw one.

        Returns the same way whether or not the email exists.
        """
        user = db.query(AdminUser).filter(AdminUser.email == email.strip().lower()).first()
        if not user:
            logger.info("Password reset requested for unknown email")
            return

        raw_token = secrets.token_hex(32)
        user.password_reset_token = hash_reset_token(raw_token)
        user.password_reset_expires = utcnow() + timedelta(
            minutes=settings.PASSWORD_RESET_EXPIRY_MINUTES
        )
        db.commit()

        reset_url = f"{settings.FRONTEND_URL}/reset-password/{raw_token}"
        try:
            mailer.send(
                to=user.email,
                subject="Redefinição de Senha",
                body=f"Link para redefinição de senha: {reset_url}",
            )
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send password reset email to admin user %s", user.id)

    @staticmethod
    def reset_password(db: Session, token: str, new_password: str) -> None:
        """Consume a reset token: match its hash, check expiry, set the password."""
        user = db.query(AdminUser).filter(
            AdminUser.password_reset_token == hash_reset_token(token),
            AdminUser.password_reset_expires > utcnow(),
        ).first()
        if not user:
            raise ValidationError("Token inválido ou expirado.")

        user.hashed_password = hash_password(new_password)
        user.password_reset_token = None
        user.password_reset_expires = None
        db.commit()
        logger.info("Admin user %s reset password", user.id)

    @staticmethod
    def _ensure_unique(db: Session, column, value: str, user_id: int, message: str) -> None:
        clash = (
            db.query(AdminUser.id)
            .filter(func.lower(column) == value.lower(), AdminUser.id != user_id)
            .first()
        )
        if clash:
            raise ResourceConflictError(message)


auth_service = AuthService()
