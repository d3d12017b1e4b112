"""Annotation and AnnotationHistory models."""

import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from hr_backend.db.base import Base
from hr_backend.models.employee import enum_values


class AnnotationCategory(str, enum.Enum):
    informativo = "Informativo"
    advertencia = "Advertência"
    comunicacao = "Comunicação"
    elogio = "Elogio"
    outros = "Outros"


class Annotation(Base):
    """Free-text note about an employee."""
    __tablename__ = "annotations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(
        Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    category = Column(
        Enum(AnnotationCategory, values_callable=enum_values),
        default=AnnotationCategory.informativo,
        nullable=False,
    )
    annotation_date = Column(DateTime, server_default=func.now(), nullable=False)
    responsible_id = Column(Integer, ForeignKey("admin_users.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    employee = relationship("Employee", back_populates="annotations")
    responsible = relationship("AdminUser", lazy="joined")
    history = relationship(
        "AnnotationHistory", back_populates="annotation",
        cascade="all, delete-orphan",
        lazy="selectin", order_by="AnnotationHistory.id.desc()",
    )


class AnnotationHistory(Base):
    """Full snapshot of an annotation taken before each edit."""
    __tablename__ = "annotation_histories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    annotation_id = Column(
        Integer, ForeignKey("annotations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    old_title = Column(String(255), nullable=True)
    old_content = Column(Text, nullable=True)
    old_category = Column(Enum(AnnotationCategory, values_callable=enum_values), nullable=True)
    edited_by_id = Column(Integer, ForeignKey("admin_users.id"), nullable=False)
    edited_at = Column(DateTime, nullable=False)

    annotation = relationship("Annotation", back_populates="history")
