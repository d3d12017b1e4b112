"""Annotation service: notes on employees with snapshot history."""

import logging
from typing import Optional, Dict, Any, List

from sqlalchemy import or_, func
from sqlalchemy.orm import Session, joinedload

from hr_backend.core.exceptions import ResourceNotFoundError
from hr_backend.models.annotation import Annotation
from hr_backend.models.employee import Employee
from hr_backend.services.audit_service import audit_service

logger = logging.getLogger(__name__)


class AnnotationService:
    """Manages annotations and their edit history."""

    @staticmethod
    def create(db: Session, employee_id: int, responsible_id: int, data: Dict[str, Any]) -> Annotation:
        """Create an annotation for an employee."""
        if not db.query(Employee.id).filter(Employee.id == employee_id).first():
            raise ResourceNotFoundError("Funcionário não encontrado.")
        annotation = Annotation(employee_id=employee_id, responsible_id=responsible_id, **data)
        db.add(annotation)
        db.commit()
        db.refresh(annotation)
        return annotation

    @staticmethod
    def list_annotations(
        db: Session,
        employee_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[Annotation]:
        """Annotations, newest first, optionally per employee and by title/content."""
        query = db.query(Annotation).options(joinedload(Annotation.employee))
        if employee_id is not None:
            query = query.filter(Annotation.employee_id == employee_id)
        if search:
            term = f"%{search.lower()}%"
            query = query.filter(or_(
                func.lower(Annotation.title).like(term),
                func.lower(Annotation.content).like(term),
            ))
        return query.order_by(Annotation.annotation_date.desc(), Annotation.id.desc()).all()

    @staticmethod
    def _get(db: Session, employee_id: int, annotation_id: int, lock: bool = False) -> Annotation:
        query = db.query(Annotation).filter(
            Annotation.id == annotation_id, Annotation.employee_id == employee_id,
        )
        if lock:
            query = query.with_for_update()
        annotation = query.first()
        if not annotation:
            raise ResourceNotFoundError("Anotação não encontrada.")
        return annotation

    @staticmethod
    def update(
        db: Session,
        employee_id: int,
        annotation_id: int,
        actor_id: Optional[int],
        data: Dict[str, Any],
    ) -> Annotation:
        """Snapshot the annotation, then apply ``data``, in one transaction."""
        audit_service.require_actor(actor_id)
        try:
            annotation = AnnotationService._get(db, employee_id, annotation_id, lock=True)
            audit_service.record_annotation_snapshot(db, annotation, actor_id)
            for key, value in data.items():
                setattr(annotation, key, value)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(annotation)
        logger.info("Annotation %s edited by admin user %s", annotation_id, actor_id)
        return annotation

    @staticmethod
    def delete(db: Session, employee_id: int, annotation_id: int) -> None:
        """Delete an annotation; its history goes with it."""
        annotation = AnnotationService._get(db, employee_id, annotation_id)
        db.delete(annotation)
        db.commit()


annotation_service = AnnotationService()
