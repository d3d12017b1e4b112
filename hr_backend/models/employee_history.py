"""Employee change history: one immutable row per changed field."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from hr_backend.db.base import Base


class EmployeeHistory(Base):
    """Field-level change of an employee, attributed to an administrator.

    Rows are APPEND-ONLY and written only by the audit service, inside the
    transaction of the update they describe.
    """
    __tablename__ = "employee_histories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(
        Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    field_name = Column(String(100), nullable=False)  # display label, e.g. "Situação Funcional"
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    changed_by_id = Column(Integer, ForeignKey("admin_users.id"), nullable=False)
    changed_at = Column(DateTime, nullable=False, index=True)

    employee = relationship("Employee", back_populates="history")
    changed_by = relationship("AdminUser", lazy="joined")
