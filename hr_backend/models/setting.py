"""Key/value settings store."""

import json
from typing import Any

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from hr_backend.db.base import Base


class Setting(Base):
    """Runtime configuration entry; the value is stored as JSON text."""
    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value_json = Column(Text, nullable=False)
    description = Column(String(500), nullable=True)
    updated_by_id = Column(Integer, ForeignKey("admin_users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def value(self) -> Any:
        return json.loads(self.value_json)

    @value.setter
    def value(self, value: Any) -> None:
        self.value_json = json.dumps(value)
