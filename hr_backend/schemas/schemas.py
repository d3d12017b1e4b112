"""Pydantic schemas for API request/response serialization."""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import date, datetime

from hr_backend.models.admin_user import AdminRole
from hr_backend.models.annotation import AnnotationCategory
from hr_backend.models.employee import (
    Employee, InstitutionalLink, Gender, MaritalStatus, FunctionalStatus, TRACKED_FIELDS,
)

# {"employee": {"create": true, "edit": true}, "document": {"delete": false}}
PermissionDocument = Dict[str, Dict[str, bool]]

# Columns that may be omitted from an update but never set to null.
NOT_NULL_EMPLOYEE_FIELDS = tuple(
    column.name for column in Employee.__table__.columns
    if not column.nullable and column.name in TRACKED_FIELDS
)
NOT_NULL_ANNOTATION_FIELDS = ("title", "content", "category")


def reject_null(value):
    if value is None:
        raise ValueError("não pode ser nulo")
    return value


# ---- Auth / admin users ----
class LoginRequest(BaseModel):
    login: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class AdminUserOut(BaseModel):
    id: int
    login: str
    name: str
    email: str
    role: AdminRole
    is_active: bool = True
    permissions: Optional[PermissionDocument] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: AdminUserOut

class RegisterRequest(BaseModel):
    login: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    role: AdminRole = AdminRole.rh
    is_active: bool = True
    permissions: Optional[PermissionDocument] = None

class AdminUserUpdateRequest(BaseModel):
    login: Optional[str] = Field(None, min_length=3, max_length=100)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[AdminRole] = None
    is_active: Optional[bool] = None
    permissions: Optional[PermissionDocument] = None

class PermissionsUpdateRequest(BaseModel):
    permissions: PermissionDocument

class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)

class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., min_length=3)

class ResetPasswordRequest(BaseModel):
    new_password: str = Field(..., min_length=6)


# ---- Employee ----
class EmployeeCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    registration_number: str = Field(..., min_length=1, max_length=50)
    institutional_link: InstitutionalLink
    position: str = Field(..., min_length=1)
    role: Optional[str] = None
    department: str = Field(..., min_length=1)
    current_assignment: Optional[str] = None
    admission_date: date
    education_level: Optional[str] = None
    education_area: Optional[str] = None
    date_of_birth: date
    gender: Gender
    marital_status: MaritalStatus
    has_children: bool = False
    number_of_children: Optional[int] = Field(None, ge=0)
    cpf: str = Field(..., pattern=r"^\d{11}$")
    rg: str = Field(..., min_length=1, max_length=30)
    rg_issuer: Optional[str] = None
    address_street: str = Field(..., min_length=1)
    address_number: str = Field(..., min_length=1)
    address_complement: Optional[str] = None
    address_neighborhood: str = Field(..., min_length=1)
    address_city: str = Field(..., min_length=1)
    address_state: str = Field(..., min_length=2, max_length=2)
    address_zip_code: str = Field(..., pattern=r"^\d{8}$")
    emergency_contact_phone: str = Field(..., min_length=1)
    mobile_phone1: str = Field(..., min_length=1)
    mobile_phone2: Optional[str] = None
    institutional_email: EmailStr
    personal_email: Optional[EmailStr] = None
    functional_status: FunctionalStatus = FunctionalStatus.ativo
    general_observations: Optional[str] = None
    comorbidity: Optional[str] = None
    disability: Optional[str] = None
    blood_type: Optional[str] = Field(None, max_length=5)

class EmployeeUpdate(BaseModel):
    """Every field optional; only the fields sent are applied and audited."""
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    registration_number: Optional[str] = Field(None, min_length=1, max_length=50)
    institutional_link: Optional[InstitutionalLink] = None
    position: Optional[str] = Field(None, min_length=1)
    role: Optional[str] = None
    department: Optional[str] = Field(None, min_length=1)
    current_assignment: Optional[str] = None
    admission_date: Optional[date] = None
    education_level: Optional[str] = None
    education_area: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    marital_status: Optional[MaritalStatus] = None
    has_children: Optional[bool] = None
    number_of_children: Optional[int] = Field(None, ge=0)
    cpf: Optional[str] = Field(None, pattern=r"^\d{11}$")
    rg: Optional[str] = Field(None, min_length=1, max_length=30)
    rg_issuer: Optional[str] = None
    address_street: Optional[str] = Field(None, min_length=1)
    address_number: Optional[str] = Field(None, min_length=1)
    address_complement: Optional[str] = None
    address_neighborhood: Optional[str] = Field(None, min_length=1)
    address_city: Optional[str] = Field(None, min_length=1)
    address_state: Optional[str] = Field(None, min_length=2, max_length=2)
    address_zip_code: Optional[str] = Field(None, pattern=r"^\d{8}$")
    emergency_contact_phone: Optional[str] = Field(None, min_length=1)
    mobile_phone1: Optional[str] = Field(None, min_length=1)
    mobile_phone2: Optional[str] = None
    institutional_email: Optional[EmailStr] = None
    personal_email: Optional[EmailStr] = None
    functional_status: Optional[FunctionalStatus] = None
    general_observations: Optional[str] = None
    comorbidity: Optional[str] = None
    disability: Optional[str] = None
    blood_type: Optional[str] = Field(None, max_length=5)

    @field_validator(*NOT_NULL_EMPLOYEE_FIELDS)
    @classmethod
    def not_null(cls, value):
        return reject_null(value)

class EmployeeOut(BaseModel):
    id: int
    full_name: str
    registration_number: str
    institutional_link: InstitutionalLink
    position: str
    role: Optional[str] = None
    department: str
    current_assignment: Optional[str] = None
    admission_date: date
    education_level: Optional[str] = None
    education_area: Optional[str] = None
    date_of_birth: date
    gender: Gender
    marital_status: MaritalStatus
    has_children: bool
    number_of_children: Optional[int] = None
    cpf: str
    rg: str
    rg_issuer: Optional[str] = None
    address_street: str
    address_number: str
    address_complement: Optional[str] = None
    address_neighborhood: str
    address_city: str
    address_state: str
    address_zip_code: str
    emergency_contact_phone: str
    mobile_phone1: str
    mobile_phone2: Optional[str] = None
    institutional_email: str
    personal_email: Optional[str] = None
    functional_status: FunctionalStatus
    general_observations: Optional[str] = None
    comorbidity: Optional[str] = None
    disability: Optional[str] = None
    blood_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class EmployeeListResponse(BaseModel):
    employees: List[EmployeeOut]
    total_items: int
    total_pages: int
    current_page: int

class ActorOut(BaseModel):
    id: int
    name: str
    login: str

    class Config:
        from_attributes = True

class EmployeeHistoryOut(BaseModel):
    id: int
    employee_id: int
    field_name: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    changed_by_id: int
    changed_by: Optional[ActorOut] = None
    changed_at: datetime

    class Config:
        from_attributes = True


# ---- Document ----
class EmployeeRef(BaseModel):
    id: int
    full_name: str

    class Config:
        from_attributes = True

class DocumentOut(BaseModel):
    id: int
    employee_id: int
    document_type: str
    description: Optional[str] = None
    file_path: str
    original_name: Optional[str] = None
    content_type: Optional[str] = None
    size_bytes: int = 0
    uploaded_by_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class DocumentSearchOut(DocumentOut):
    employee: Optional[EmployeeRef] = None

class DocumentDownloadOut(BaseModel):
    url: str


# ---- Annotation ----
class AnnotationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    category: AnnotationCategory = AnnotationCategory.informativo

class AnnotationUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[AnnotationCategory] = None

    @field_validator(*NOT_NULL_ANNOTATION_FIELDS)
    @classmethod
    def not_null(cls, value):
        return reject_null(value)

class AnnotationHistoryOut(BaseModel):
    id: int
    annotation_id: int
    old_title: Optional[str] = None
    old_content: Optional[str] = None
    old_category: Optional[AnnotationCategory] = None
    edited_by_id: int
    edited_at: datetime

    class Config:
        from_attributes = True

class AnnotationOut(BaseModel):
    id: int
    employee_id: int
    title: str
    content: str
    category: AnnotationCategory
    annotation_date: Optional[datetime] = None
    responsible_id: int
    updated_at: Optional[datetime] = None
    history: List[AnnotationHistoryOut] = []

    class Config:
        from_attributes = True

class AnnotationSearchOut(AnnotationOut):
    employee: Optional[EmployeeRef] = None

class EmployeeDetailOut(EmployeeOut):
    documents: List[DocumentOut] = []
    annotations: List[AnnotationOut] = []


# ---- Settings ----
class SettingIn(BaseModel):
    key: str = Field(..., min_length=1, max_length=100)
    value: Any
    description: Optional[str] = Field(None, max_length=500)

class SettingOut(BaseModel):
    key: str
    value: Any
    description: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ---- Generic ----
class MessageResponse(BaseModel):
    message: str
    detail: Optional[Any] = None
