"""Document service: uploads attributed to the acting admin user."""

import logging
import os
import re
import uuid
from typing import Optional, List, Sequence

from fastapi import UploadFile
from sqlalchemy import or_, func
from sqlalchemy.orm import Session, joinedload

from hr_backend.core.config import Settings
from hr_backend.core.exceptions import (
    ResourceNotFoundError, StorageError, ValidationError,
)
from hr_backend.models.document import Document
from hr_backend.models.employee import Employee
from hr_backend.services.file_service import FileStorage
from hr_backend.services.settings_service import (
    settings_service, ALLOWED_MIME_TYPES_KEY, MAX_FILE_SIZE_MB_KEY,
)

logger = logging.getLogger(__name__)


def _safe_name(filename: str) -> str:
    base = os.path.basename(filename or "arquivo")
    return re.sub(r"[^A-Za-z0-9._-]+", "_", base) or "arquivo"


def _pick(values: Sequence[Optional[str]], index: int) -> Optional[str]:
    """One value per file, or a single value shared by all files."""
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    return values[index] if index < len(values) else None


class DocumentService:
    """Uploads, lists and deletes employee documents."""

    @staticmethod
    async def upload(
        db: Session,
        storage: FileStorage,
        settings: Settings,
        employee_id: int,
        uploaded_by_id: int,
        files: List[UploadFile],
        document_types: Sequence[str],
        descriptions: Sequence[Optional[str]] = (),
    ) -> List[Document]:
        """Validate against the settings store, store each file, then insert the rows.

        If the rows cannot be committed, the objects already stored are removed.
        """
        if not db.query(Employee.id).filter(Employee.id == employee_id).first():
            raise ResourceNotFoundError("Funcionário não encontrado.")
        if not files:
            raise ValidationError("Nenhum arquivo foi enviado.", ["files: obrigatório"])

        allowed_types = settings_service.get_value(
            db, ALLOWED_MIME_TYPES_KEY, settings.DEFAULT_ALLOWED_MIME_TYPES
        )
        max_size_mb = settings_service.get_value(
            db, MAX_FILE_SIZE_MB_KEY, settings.DEFAULT_MAX_FILE_SIZE_MB
        )
        max_bytes = int(max_size_mb) * 1024 * 1024

        payloads = []
        errors = []
        for index, upload in enumerate(files):
            content = await upload.read()
            name = upload.filename or f"arquivo-{index + 1}"
            if upload.content_type not in allowed_types:
                errors.append(f"{name}: tipo de arquivo não permitido ({upload.content_type})")
            if len(content) > max_bytes:
                errors.append(f"{name}: excede o tamanho máximo de {max_size_mb} MB")
            document_type = _pick(document_types, index)
            if not document_type:
                errors.append(f"{name}: tipo de documento é obrigatório")
            payloads.append((upload, content, document_type, _pick(descriptions, index)))
        if errors:
            raise ValidationError("Arquivo inválido.", errors)

        stored_keys = []
        try:
            documents = []
            for upload, content, document_type, description in payloads:
                key = f"employees/{employee_id}/{uuid.uuid4().hex}-{_safe_name(upload.filename)}"
                storage.put_object(key, content, upload.content_type)
                stored_keys.append(key)
                documents.append(Document(
                    employee_id=employee_id,
                    uploaded_by_id=uploaded_by_id,
                    document_type=document_type,
                    description=description,
                    file_path=key,
                    original_name=upload.filename,
                    content_type=upload.content_type,
                    size_bytes=len(content),
                ))
            db.add_all(documents)
            db.commit()
        except Exception:
            db.rollback()
            for key in stored_keys:
                try:
                    storage.delete_object(key)
                except StorageError:
                    logger.exception("Failed to remove orphaned object %s", key)
            raise

        for document in documents:
            db.refresh(document)
        logger.info(
            "Admin user %s uploaded %d document(s) for employee %s",
            uploaded_by_id, len(documents), employee_id,
        )
        return documents

    @staticmethod
    def list_documents(
        db: Session,
        employee_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[Document]:
        """Documents, newest first, optionally per employee and by type/description."""
        query = db.query(Document).options(joinedload(Document.employee))
        if employee_id is not None:
            query = query.filter(Document.employee_id == employee_id)
        if search:
            term = f"%{search.lower()}%"
            query = query.filter(or_(
                func.lower(Document.document_type).like(term),
                func.lower(Document.description).like(term),
            ))
        return query.order_by(Document.created_at.desc(), Document.id.desc()).all()

    @staticmethod
    def get(db: Session, employee_id: int, document_id: int) -> Document:
        document = db.query(Document).filter(
            Document.id == document_id, Document.employee_id == employee_id,
        ).first()
        if not document:
            raise ResourceNotFoundError("Documento não encontrado.")
        return document

    @staticmethod
    def download_url(db: Session, storage: FileStorage, employee_id: int, document_id: int) -> str:
        """Short-lived link to the stored object."""
        document = DocumentService.get(db, employee_id, document_id)
        return storage.get_presigned_url(document.file_path)

    @staticmethod
    def delete(db: Session, storage: FileStorage, employee_id: int, document_id: int) -> None:
        """Remove the stored object, then the row.

        A storage failure is logged and the row is still deleted.
        """
        document = DocumentService.get(db, employee_id, document_id)

        try:
            storage.delete_object(document.file_path)
        except StorageError:
            logger.exception("Failed to delete stored object %s", document.file_path)

        db.delete(document)
        db.commit()


document_service = DocumentService()
