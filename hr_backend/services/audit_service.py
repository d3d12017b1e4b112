"""Audit service: field-level change history for tracked entities.

History rows are only ever *added to the caller's session*; the caller
commits them together with the mutation they describe, so a record can
never be updated without its audit trail (or the other way round).
"""

import enum
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from sqlalchemy.orm import Session

from hr_backend.core.exceptions import AuditContractError, ResourceNotFoundError
from hr_backend.models.annotation import Annotation, AnnotationHistory
from hr_backend.models.employee import Employee, FIELD_LABELS, TRACKED_FIELDS
from hr_backend.models.employee_history import EmployeeHistory

logger = logging.getLogger(__name__)

UNTRACKED_FIELDS = frozenset({"created_at", "updated_at"})


class FieldChange(NamedTuple):
    field: str
    label: str
    old_value: Optional[str]
    new_value: Optional[str]


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_value(value: Any) -> Optional[str]:
    """Stringify a value the same way on both sides of a comparison.

    ``5`` and ``"5"`` both become ``"5"``; enums become their value, dates
    ISO-8601, booleans ``"true"``/``"false"``. ``None`` stays ``None``.
    """
    if value is None:
        return None
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def snapshot(instance: Any, fields: Iterable[str] = TRACKED_FIELDS) -> Dict[str, Any]:
    """Copy the current attribute values of ``instance``."""
    return {field: getattr(instance, field) for field in fields}


class AuditService:
    """Computes diffs and writes immutable history rows."""

    @staticmethod
    def require_actor(actor_id: Optional[int]) -> int:
        """Refuse a tracked mutation that does not name its acting identity."""
        if actor_id is None:
            raise AuditContractError("Tracked mutation attempted without an acting admin user")
        return actor_id

    @staticmethod
    def diff_snapshots(before: Dict[str, Any], after: Dict[str, Any]) -> List[FieldChange]:
        """List the attributes whose normalized values differ."""
        changes = []
        for field, old in before.items():
            if field in UNTRACKED_FIELDS or field not in after:
                continue
            old_value = normalize_value(old)
            new_value = normalize_value(after[field])
            if old_value != new_value:
                changes.append(FieldChange(
                    field=field,
                    label=FIELD_LABELS.get(field, field),
                    old_value=old_value,
                    new_value=new_value,
                ))
        return changes

    @staticmethod
    def record_employee_changes(
        db: Session,
        employee_id: int,
        before: Dict[str, Any],
        after: Dict[str, Any],
        actor_id: Optional[int],
        changed_at: Optional[datetime] = None,
    ) -> List[EmployeeHistory]:
        """Add one history row per changed field to ``db``.

        All rows of one call share ``actor_id`` and ``changed_at``. Nothing is
        committed here.
        """
        AuditService.require_actor(actor_id)
        changes = AuditService.diff_snapshots(before, after)
        if not changes:
            return []

        changed_at = changed_at or utcnow()
        entries = [
            EmployeeHistory(
                employee_id=employee_id,
                field_name=change.label,
                old_value=change.old_value,
                new_value=change.new_value,
                changed_by_id=actor_id,
                changed_at=changed_at,
            )
            for change in changes
        ]
        db.add_all(entries)
        db.flush()
        logger.info(
            "Recorded %d change(s) on employee %s by admin user %s",
            len(entries), employee_id, actor_id,
        )
        return entries

    @staticmethod
    def record_annotation_snapshot(
        db: Session,
        annotation: Annotation,
        actor_id: Optional[int],
        edited_at: Optional[datetime] = None,
    ) -> AnnotationHistory:
        """Add a copy of the annotation's current state, taken before an edit."""
        AuditService.require_actor(actor_id)
        entry = AnnotationHistory(
            annotation_id=annotation.id,
            old_title=annotation.title,
            old_content=annotation.content,
            old_category=annotation.category,
            edited_by_id=actor_id,
            edited_at=edited_at or utcnow(),
        )
        db.add(entry)
        db.flush()
        return entry

    @staticmethod
    def employee_history(db: Session, employee_id: int) -> List[EmployeeHistory]:
        """History of an employee, newest first."""
        exists = db.query(Employee.id).filter(Employee.id == employee_id).first()
        if not exists:
            raise ResourceNotFoundError("Funcionário não encontrado.")
        return (
            db.query(EmployeeHistory)
            .filter(EmployeeHistory.employee_id == employee_id)
            .order_by(EmployeeHistory.changed_at.desc(), EmployeeHistory.id.desc())
            .all()
        )


audit_service = AuditService()
