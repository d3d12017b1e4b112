"""Annotations API router: notes nested under an employee, plus global search."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hr_backend.core.security import RequirePermission, get_current_user
from hr_backend.db.session import get_db
from hr_backend.models.admin_user import AdminUser
from hr_backend.schemas.schemas import (
    AnnotationCreate, AnnotationUpdate, AnnotationOut, AnnotationSearchOut, MessageResponse,
)
from hr_backend.services.annotation_service import annotation_service

router = APIRouter(prefix="/employees/{employee_id}/annotations", tags=["annotations"])
search_router = APIRouter(prefix="/annotations", tags=["annotations"])


@router.post("", response_model=AnnotationOut, status_code=status.HTTP_201_CREATED)
async def create_annotation(
    employee_id: int,
    body: AnnotationCreate,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(RequirePermission("annotation", "create")),
):
    """Create an annotation; the caller is recorded as responsible."""
    return annotation_service.create(db, employee_id, user.id, body.model_dump())


@router.get("", response_model=List[AnnotationOut])
async def list_employee_annotations(
    employee_id: int,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user),
):
    return annotation_service.list_annotations(db, employee_id=employee_id)


@router.put("/{annotation_id}", response_model=AnnotationOut)
async def update_annotation(
    employee_id: int,
    annotation_id: int,
    body: AnnotationUpdate,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(RequirePermission("annotation", "edit")),
):
    """Edit an annotation; the previous version is kept in its history."""
    return annotation_service.update(
        db, employee_id, annotation_id, user.id, body.model_dump(exclude_unset=True)
    )


@router.delete("/{annotation_id}", response_model=MessageResponse)
async def delete_annotation(
    employee_id: int,
    annotation_id: int,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(RequirePermission("annotation", "delete")),
):
    annotation_service.delete(db, employee_id, annotation_id)
    return MessageResponse(message="Anotação excluída com sucesso.")


@search_router.get("/search", response_model=List[AnnotationSearchOut])
async def search_annotations(
    q: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user),
):
    """Search annotations of every employee by title or content."""
    return annotation_service.list_annotations(db, search=q)
