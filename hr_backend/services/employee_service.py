"""Employee service: CRUD with audited updates."""

import enum
import logging
import math
from typing import Optional, Dict, Any, List

from sqlalchemy import or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from hr_backend.core.exceptions import (
    ResourceConflictError, ResourceNotFoundError, StorageError,
)
from hr_backend.core.text import enforce_case
from hr_backend.models.employee import Employee, TRACKED_FIELDS
from hr_backend.services.audit_service import audit_service, snapshot

logger = logging.getLogger(__name__)

EMAIL_FIELDS = ("institutional_email", "personal_email")
CODE_FIELDS = (
    "registration_number", "cpf", "rg", "rg_issuer",
    "address_state", "address_zip_code", "blood_type",
)
UNIQUE_FIELDS = {
    "registration_number": "Matrícula já cadastrada.",
    "cpf": "CPF já cadastrado.",
    "institutional_email": "Email institucional já cadastrado.",
}
FILTER_FIELDS = ("department", "functional_status", "institutional_link", "position")
SEARCH_FIELDS = ("full_name", "department", "registration_number", "cpf")


def format_employee_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Lowercase emails, uppercase codes, title-case ALL-CAPS text."""
    formatted = {}
    for key, value in data.items():
        if key not in TRACKED_FIELDS:
            continue
        if isinstance(value, str) and not isinstance(value, enum.Enum):
            value = value.strip()
            if key in EMAIL_FIELDS:
                value = value.lower()
            elif key in CODE_FIELDS:
                value = value.upper()
            else:
                value = enforce_case(value)
        formatted[key] = value
    return formatted


class EmployeeService:
    """Manages employee records."""

    @staticmethod
    def _ensure_unique(db: Session, data: Dict[str, Any], exclude_id: Optional[int] = None) -> None:
        for field, message in UNIQUE_FIELDS.items():
            value = data.get(field)
            if value is None:
                continue
            query = db.query(Employee.id).filter(getattr(Employee, field) == value)
            if exclude_id is not None:
                query = query.filter(Employee.id != exclude_id)
            if query.first():
                raise ResourceConflictError(message)

    @staticmethod
    def create(db: Session, data: Dict[str, Any]) -> Employee:
        """Create a new employee."""
        formatted = format_employee_data(data)
        EmployeeService._ensure_unique(db, formatted)

        employee = Employee(**formatted)
        db.add(employee)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ResourceConflictError("Funcionário já cadastrado.")
        db.refresh(employee)
        logger.info("Employee %s created", employee.id)
        return employee

    @staticmethod
    def get(db: Session, employee_id: int, with_relations: bool = False) -> Employee:
        """Get an employee by id, optionally with documents and annotations."""
        query = db.query(Employee)
        if with_relations:
            query = query.options(
                selectinload(Employee.documents),
                selectinload(Employee.annotations),
            )
        employee = query.filter(Employee.id == employee_id).first()
        if not employee:
            raise ResourceNotFoundError("Funcionário não encontrado.")
        return employee

    @staticmethod
    def _filtered_query(db: Session, search: Optional[str], filters: Optional[Dict[str, Any]]):
        query = db.query(Employee)
        for field, value in (filters or {}).items():
            if field in FILTER_FIELDS and value not in (None, ""):
                query = query.filter(getattr(Employee, field) == value)
        if search:
            term = f"%{search.lower()}%"
            query = query.filter(or_(
                *(func.lower(getattr(Employee, field)).like(term) for field in SEARCH_FIELDS)
            ))
        return query

    @staticmethod
    def list_employees(
        db: Session,
        search: Optional[str] = None,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        """List employees with search, equality filters and pagination."""
        query = EmployeeService._filtered_query(db, search, filters)
        total = query.count()
        employees = (
            query.order_by(Employee.full_name.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "employees": employees,
            "total_items": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
            "current_page": page,
        }

    @staticmethod
    def all_for_export(
        db: Session,
        search: Optional[str] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Employee]:
        query = EmployeeService._filtered_query(db, search, filters)
        return query.order_by(Employee.full_name.asc()).all()

    @staticmethod
    def update(db: Session, employee_id: int, data: Dict[str, Any], actor_id: Optional[int]) -> Employee:
        """Apply ``data`` and record one history row per changed field.

        The row lock, the update and the history rows share one transaction;
        any failure rolls all of them back.
        """
        audit_service.require_actor(actor_id)
        try:
            employee = (
                db.query(Employee)
                .filter(Employee.id == employee_id)
                .with_for_update()
                .first()
            )
            if not employee:
                raise ResourceNotFoundError("Funcionário não encontrado.")

            formatted = format_employee_data(data)
            EmployeeService._ensure_unique(db, formatted, exclude_id=employee.id)

            before = snapshot(employee)
            for key, value in formatted.items():
                setattr(employee, key, value)
            after = snapshot(employee)

            audit_service.record_employee_changes(db, employee.id, before, after, actor_id)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ResourceConflictError("Dados únicos já estão em uso por outro funcionário.")
        except Exception:
            db.rollback()
            raise
        db.refresh(employee)
        return employee

    @staticmethod
    def delete(db: Session, employee_id: int, storage=None) -> None:
        """Delete an employee; documents, annotations and history cascade.

        Stored document objects are removed after the rows are gone.
        """
        employee = EmployeeService.get(db, employee_id)
        object_keys = [document.file_path for document in employee.documents]
        db.delete(employee)
        db.commit()
        logger.info("Employee %s deleted with %d document(s)", employee_id, len(object_keys))

        if storage is not None:
            for key in object_keys:
                try:
                    storage.delete_object(key)
                except StorageError:
                    logger.exception("Failed to remove stored object %s", key)


employee_service = EmployeeService()
