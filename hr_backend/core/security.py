"""JWT authentication and permission-based authorization helpers.

The bearer token only proves *who* is calling. What the caller may do is
re-resolved from the current ``admin_users`` row on every request, so a
demotion, deactivation or permission change applies to tokens that were
issued before it.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import bcrypt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from hr_backend.core.config import Settings
from hr_backend.core.exceptions import (
    AuthenticationError, AuthorizationError, InvalidTokenError,
)
from hr_backend.db.session import get_db
from hr_backend.models.admin_user import AdminUser, GRANTABLE_RESOURCES

logger = logging.getLogger(__name__)

# JWT bearer scheme
security_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(pwd_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    pwd_bytes = plain_password.encode("utf-8")
    hashed_bytes = hashed_password.encode("utf-8")
    return bcrypt.checkpw(pwd_bytes, hashed_bytes)


class TokenService:
    """Issues and verifies signed, time-limited identity assertions."""

    def __init__(self, settings: Settings):
        self._secret = settings.JWT_SECRET
        self._algorithm = settings.JWT_ALGORITHM
        self._ttl = timedelta(minutes=settings.JWT_EXPIRY_MINUTES)

    def issue(self, user: AdminUser, expires_delta: Optional[timedelta] = None) -> str:
        """Create an access token carrying {sub, login, role}."""
        expire = datetime.now(timezone.utc) + (expires_delta or self._ttl)
        claims = {
            "sub": str(user.id),
            "login": user.login,
            "role": user.role.value if user.role else None,
            "type": "access",
            "exp": expire,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """Decode and validate a token.

        Raises:
            InvalidTokenError: bad signature, malformed, expired, or not an
                access token.
        """
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            raise InvalidTokenError("Token inválido ou expirado.")

        if claims.get("type") != "access":
            raise InvalidTokenError("Token inválido ou expirado.")
        try:
            int(claims["sub"])
        except (KeyError, TypeError, ValueError):
            raise InvalidTokenError("Token inválido ou expirado.")
        return claims


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AdminUser:
    """Verify the bearer token and re-load the identity it names."""
    if credentials is None:
        raise AuthenticationError("Acesso negado. Token não fornecido.")

    claims = tokens.verify(credentials.credentials)
    user = db.query(AdminUser).filter(AdminUser.id == int(claims["sub"])).first()
    if user is None or not user.is_active:
        raise AuthenticationError("Usuário não encontrado ou inativo.")
    return user


def is_authorized(user: AdminUser, resource: str, action: str) -> bool:
    """Decide (resource, action) for the identity's *current* state.

    Only an exact ``True`` in the permission document grants a granular
    identity anything; resources outside GRANTABLE_RESOURCES are reserved
    for the unrestricted tier.
    """
    if user.is_unrestricted:
        return True
    if resource not in GRANTABLE_RESOURCES:
        return False
    entry = (user.permissions or {}).get(resource)
    if not isinstance(entry, dict):
        return False
    return entry.get(action) is True


class RequirePermission:
    """Dependency that checks the caller may perform ``action`` on ``resource``."""

    def __init__(self, resource: str, action: str):
        self.resource = resource
        self.action = action

    async def __call__(self, user: AdminUser = Depends(get_current_user)) -> AdminUser:
        if not is_authorized(user, self.resource, self.action):
            logger.warning(
                "Denied %s.%s for admin user %s (role=%s)",
                self.resource, self.action, user.id, user.role.value,
            )
            raise AuthorizationError(
                "Acesso proibido. Você não tem permissão para realizar esta ação."
            )
        return user


# Administrator management is never grantable through a permission document.
require_admin = RequirePermission("admin_user", "manage")
