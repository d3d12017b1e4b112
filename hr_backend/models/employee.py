"""Employee model, its enumerations, and history display labels."""

import enum

from sqlalchemy import (
    Column, Integer, String, Text, Boolean, Date, DateTime, Enum, func
)
from sqlalchemy.orm import relationship
from hr_backend.db.base import Base


def enum_values(enum_cls):
    """Persist enum values (not member names) so accented labels survive."""
    return [member.value for member in enum_cls]


class InstitutionalLink(str, enum.Enum):
    efetivo = "Efetivo"
    comissionado_exclusivo = "Comissionado Exclusivo"
    estagiario = "Estagiário"
    terceirizado = "Terceirizado"
    servidor_temporario = "Servidor Temporário"
    consultor = "Consultor"


class Gender(str, enum.Enum):
    masculino = "Masculino"
    feminino = "Feminino"
    outro = "Outro"
    nao_informado = "Não Informado"


class MaritalStatus(str, enum.Enum):
    solteiro = "Solteiro(a)"
    casado = "Casado(a)"
    divorciado = "Divorciado(a)"
    viuvo = "Viúvo(a)"
    uniao_estavel = "União Estável"


class FunctionalStatus(str, enum.Enum):
    ativo = "Ativo"
    afastado = "Afastado"
    licenca = "Licença"
    desligado = "Desligado"
    ferias = "Férias"


# Attribute -> label recorded in employee history and used as export header.
FIELD_LABELS = {
    "full_name": "Nome Completo",
    "registration_number": "Matrícula",
    "institutional_link": "Vínculo Institucional",
    "position": "Cargo",
    "role": "Função",
    "department": "Departamento",
    "current_assignment": "Lotação Atual",
    "admission_date": "Data de Admissão",
    "education_level": "Nível de Formação",
    "education_area": "Área de Formação",
    "date_of_birth": "Data de Nascimento",
    "gender": "Gênero",
    "marital_status": "Estado Civil",
    "has_children": "Possui Filhos",
    "number_of_children": "Número de Filhos",
    "cpf": "CPF",
    "rg": "RG",
    "rg_issuer": "Órgão Emissor (RG)",
    "address_street": "Logradouro",
    "address_number": "Número (Endereço)",
    "address_complement": "Complemento",
    "address_neighborhood": "Bairro",
    "address_city": "Cidade",
    "address_state": "Estado (UF)",
    "address_zip_code": "CEP",
    "emergency_contact_phone": "Telefone de Emergência",
    "mobile_phone1": "Celular 1",
    "mobile_phone2": "Celular 2",
    "institutional_email": "E-mail Institucional",
    "personal_email": "E-mail Pessoal",
    "functional_status": "Situação Funcional",
    "general_observations": "Observações Gerais",
    "comorbidity": "Comorbidade",
    "disability": "Deficiência",
    "blood_type": "Tipo Sanguíneo",
}

TRACKED_FIELDS = tuple(FIELD_LABELS)


class Employee(Base):
    """Personal and employment record of one employee."""
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(255), nullable=False, index=True)
    registration_number = Column(String(50), unique=True, nullable=False)
    institutional_link = Column(
        Enum(InstitutionalLink, values_callable=enum_values), nullable=False
    )
    position = Column(String(255), nullable=False)
    role = Column(String(255), nullable=True)
    department = Column(String(255), nullable=False, index=True)
    current_assignment = Column(String(255), nullable=True)
    admission_date = Column(Date, nullable=False)
    education_level = Column(String(100), nullable=True)
    education_area = Column(String(255), nullable=True)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(Enum(Gender, values_callable=enum_values), nullable=False)
    marital_status = Column(Enum(MaritalStatus, values_callable=enum_values), nullable=False)
    has_children = Column(Boolean, default=False, nullable=False)
    number_of_children = Column(Integer, nullable=True)
    cpf = Column(String(11), unique=True, nullable=False)
    rg = Column(String(30), unique=True, nullable=False)
    rg_issuer = Column(String(50), nullable=True)
    address_street = Column(String(255), nullable=False)
    address_number = Column(String(20), nullable=False)
    address_complement = Column(String(255), nullable=True)
    address_neighborhood = Column(String(255), nullable=False)
    address_city = Column(String(255), nullable=False)
    address_state = Column(String(2), nullable=False)
    address_zip_code = Column(String(8), nullable=False)
    emergency_contact_phone = Column(String(30), nullable=False)
    mobile_phone1 = Column(String(30), nullable=False)
    mobile_phone2 = Column(String(30), nullable=True)
    institutional_email = Column(String(255), unique=True, nullable=False)
    personal_email = Column(String(255), nullable=True)
    functional_status = Column(
        Enum(FunctionalStatus, values_callable=enum_values),
        default=FunctionalStatus.ativo,
        nullable=False,
    )
    general_observations = Column(Text, nullable=True)
    comorbidity = Column(String(255), nullable=True)
    disability = Column(String(255), nullable=True)
    blood_type = Column(String(5), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    documents = relationship(
        "Document", back_populates="employee",
        cascade="all, delete-orphan",
        order_by="Document.created_at.desc()",
    )
    annotations = relationship(
        "Annotation", back_populates="employee",
        cascade="all, delete-orphan",
        order_by="Annotation.annotation_date.desc()",
    )
    history = relationship(
        "EmployeeHistory", back_populates="employee",
        cascade="all, delete-orphan",
    )
