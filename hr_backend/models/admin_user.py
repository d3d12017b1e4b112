"""Administrator identity model and the role/permission vocabulary."""

import enum
import json
from typing import Optional, Dict

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Enum, func
from hr_backend.db.base import Base


class AdminRole(str, enum.Enum):
    """Closed role set: one unrestricted tier, one granular tier."""
    admin = "admin"
    rh = "rh"


UNRESTRICTED_ROLES = frozenset({AdminRole.admin})

# Resources that may appear in a granular permission document.
GRANTABLE_RESOURCES = ("employee", "document", "annotation", "settings")
PERMISSION_ACTIONS = ("create", "edit", "delete")


class AdminUser(Base):
    """Administrative account that authenticates and acts on records."""
    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    login = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    role = Column(Enum(AdminRole), default=AdminRole.rh, nullable=False, index=True)
    permissions_json = Column(Text, nullable=True)  # {"employee": {"edit": true}, ...}
    password_reset_token = Column(String(64), nullable=True, index=True)  # sha256 hex
    password_reset_expires = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def permissions(self) -> Optional[Dict[str, Dict[str, bool]]]:
        if not self.permissions_json:
            return None
        return json.loads(self.permissions_json)

    @permissions.setter
    def permissions(self, value: Optional[Dict[str, Dict[str, bool]]]) -> None:
        self.permissions_json = json.dumps(value, sort_keys=True) if value else None

    @property
    def is_unrestricted(self) -> bool:
        return self.role in UNRESTRICTED_ROLES
