"""Models package: import all models so metadata.create_all can discover them."""

from hr_backend.models.admin_user import AdminUser, AdminRole
from hr_backend.models.employee import Employee
from hr_backend.models.employee_history import EmployeeHistory
from hr_backend.models.annotation import Annotation, AnnotationHistory
from hr_backend.models.document import Document
from hr_backend.models.setting import Setting

__all__ = [
    "AdminUser", "AdminRole", "Employee", "EmployeeHistory",
    "Annotation", "AnnotationHistory", "Document", "Setting",
]
