"""Documents API router: uploads nested under an employee, plus global search."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from hr_backend.api.deps import get_app_settings, get_storage
from hr_backend.core.config import Settings
from hr_backend.core.security import RequirePermission, get_current_user
from hr_backend.db.session import get_db
from hr_backend.models.admin_user import AdminUser
from hr_backend.schemas.schemas import (
    DocumentOut, DocumentSearchOut, DocumentDownloadOut, MessageResponse,
)
from hr_backend.services.document_service import document_service
from hr_backend.services.file_service import FileStorage

router = APIRouter(prefix="/employees/{employee_id}/documents", tags=["documents"])
search_router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=List[DocumentOut], status_code=status.HTTP_201_CREATED)
async def upload_documents(
    employee_id: int,
    files: List[UploadFile] = File(...),
    document_type: List[str] = Form(...),
    description: Optional[List[str]] = Form(None),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
    user: AdminUser = Depends(RequirePermission("document", "create")),
):
    """Upload one or more documents for an employee."""
    return await document_service.upload(
        db, storage, settings, employee_id, user.id,
        files, document_type, description or (),
    )


@router.get("", response_model=List[DocumentOut])
async def list_employee_documents(
    employee_id: int,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user),
):
    return document_service.list_documents(db, employee_id=employee_id)


@router.get("/{document_id}/download", response_model=DocumentDownloadOut)
async def download_document(
    employee_id: int,
    document_id: int,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    user: AdminUser = Depends(get_current_user),
):
    """Presigned download link for a document."""
    return DocumentDownloadOut(url=document_service.download_url(db, storage, employee_id, document_id))


@router.delete("/{document_id}", response_model=MessageResponse)
async def delete_document(
    employee_id: int,
    document_id: int,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    user: AdminUser = Depends(RequirePermission("document", "delete")),
):
    """Delete a document and its stored object."""
    document_service.delete(db, storage, employee_id, document_id)
    return MessageResponse(message="Documento excluído com sucesso.")


@search_router.get("/search", response_model=List[DocumentSearchOut])
async def search_documents(
    q: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user),
):
    """Search documents of every employee by type or description."""
    return document_service.list_documents(db, search=q)
