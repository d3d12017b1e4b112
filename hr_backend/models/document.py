"""Document metadata model; the binary lives in object storage."""

from sqlalchemy import Column, Integer, String, BigInteger, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from hr_backend.db.base import Base


class Document(Base):
    """File attached to an employee."""
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(
        Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    document_type = Column(String(255), nullable=False)
    description = Column(String(500), nullable=True)
    file_path = Column(String(1000), nullable=False)  # storage object key
    original_name = Column(String(500), nullable=True)
    content_type = Column(String(100), nullable=True)
    size_bytes = Column(BigInteger, nullable=False, default=0)
    uploaded_by_id = Column(Integer, ForeignKey("admin_users.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    employee = relationship("Employee", back_populates="documents")
    uploaded_by = relationship("AdminUser", lazy="joined")
