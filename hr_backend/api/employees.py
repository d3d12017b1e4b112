"""Employees API router: records, change history and exports."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from hr_backend.api.deps import get_storage
from hr_backend.core.security import RequirePermission, get_current_user
from hr_backend.db.session import get_db
from hr_backend.models.admin_user import AdminUser
from hr_backend.models.employee import FunctionalStatus, InstitutionalLink
from hr_backend.schemas.schemas import (
    EmployeeCreate, EmployeeUpdate, EmployeeOut, EmployeeDetailOut,
    EmployeeListResponse, EmployeeHistoryOut, MessageResponse,
)
from hr_backend.services import export_service
from hr_backend.services.audit_service import audit_service
from hr_backend.services.employee_service import employee_service
from hr_backend.services.file_service import FileStorage

router = APIRouter(prefix="/employees", tags=["employees"])


def _filters(
    department: Optional[str] = Query(None),
    functional_status: Optional[FunctionalStatus] = Query(None),
    institutional_link: Optional[InstitutionalLink] = Query(None),
    position: Optional[str] = Query(None),
):
    return {
        "department": department,
        "functional_status": functional_status,
        "institutional_link": institutional_link,
        "position": position,
    }


@router.get("/export/csv")
async def export_csv(
    search: Optional[str] = Query(None),
    filters: dict = Depends(_filters),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user),
):
    """Export the filtered employee list as CSV."""
    employees = employee_service.all_for_export(db, search, filters)
    return Response(
        content=export_service.to_csv(employees),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="funcionarios.csv"'},
    )


@router.get("/export/excel")
async def export_excel(
    search: Optional[str] = Query(None),
    filters: dict = Depends(_filters),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user),
):
    """Export the filtered employee list as an XLSX workbook."""
    employees = employee_service.all_for_export(db, search, filters)
    return Response(
        content=export_service.to_xlsx(employees),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="funcionarios.xlsx"'},
    )


@router.get("/export/pdf")
async def export_pdf(
    search: Optional[str] = Query(None),
    filters: dict = Depends(_filters),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user),
):
    employees = employee_service.all_for_export(db, search, filters)
    return Response(
        content=export_service.to_pdf(employees),
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="funcionarios.pdf"'},
    )


@router.post("", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
async def create_employee(
    body: EmployeeCreate,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(RequirePermission("employee", "create")),
):
    """Create an employee record."""
    return employee_service.create(db, body.model_dump())


@router.get("", response_model=EmployeeListResponse)
async def list_employees(
    search: Optional[str] = Query(None),
    filters: dict = Depends(_filters),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user),
):
    """List employees with search, filters and pagination."""
    result = employee_service.list_employees(db, search, filters, page, limit)
    return EmployeeListResponse(
        employees=[EmployeeOut.model_validate(e) for e in result["employees"]],
        total_items=result["total_items"],
        total_pages=result["total_pages"],
        current_page=result["current_page"],
    )


@router.get("/{employee_id}", response_model=EmployeeDetailOut)
async def get_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user),
):
    """Get an employee with documents and annotations."""
    return employee_service.get(db, employee_id, with_relations=True)


@router.put("/{employee_id}", response_model=EmployeeOut)
async def update_employee(
    employee_id: int,
    body: EmployeeUpdate,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(RequirePermission("employee", "edit")),
):
    """Update an employee; every changed field is written to the history."""
    return employee_service.update(db, employee_id, body.model_dump(exclude_unset=True), user.id)


@router.delete("/{employee_id}", response_model=MessageResponse)
async def delete_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    user: AdminUser = Depends(RequirePermission("employee", "delete")),
):
    employee_service.delete(db, employee_id, storage)
    return MessageResponse(message="Funcionário excluído com sucesso.")


@router.get("/{employee_id}/history", response_model=List[EmployeeHistoryOut])
async def get_employee_history(
    employee_id: int,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user),
):
    """Field-level change history, newest first."""
    return audit_service.employee_history(db, employee_id)
