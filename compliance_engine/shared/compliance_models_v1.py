from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from compliance_engine.shared.validity_models_v1 import ValiditySourceV1


class RequirementStatusV1(str, Enum):
    """Estado del requisito (ciclo de vida del documento)."""
    missing = "missing"
    submitted = "submitted"
    in_review = "in_review"
    valid = "valid"
    rejected = "rejected"
    expiring = "expiring"
    expired = "expired"


class RequirementLevelV1(str, Enum):
    """Nivel de exigencia de un documento para un subcontratista."""
    required = "required"
    optional = "optional"


class CompanyTypeV1(str, Enum):
    """Tipo de empresa: obra (standard) o proveedor de servicios."""
    standard = "standard"
    dienstleister = "dienstleister"


class SubcontractorFlagsV1(BaseModel):
    """
    Flags de riesgo declarados del subcontratista.

    None significa "desconocido": nunca se asume ni True ni False.
    """
    requires_employees: Optional[bool] = None
    has_non_eu_workers: Optional[bool] = None
    employees_not_employed_in_germany: Optional[bool] = None


class ContractorV1(BaseModel):
    """Subcontratista (registro externo, solo lectura para el motor)."""
    id: str = Field(
        description="ID del subcontratista"
    )
    company_name: str = Field(
        description="Razón social"
    )
    active: bool = Field(
        default=True,
        description="Activo/inactivo (atributo externo)"
    )
    company_type: CompanyTypeV1 = Field(
        default=CompanyTypeV1.standard,
        description="standard o dienstleister"
    )
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    country: Optional[str] = None


class DocumentHistoryEntryV1(BaseModel):
    """Entrada del historial de un documento."""
    ts: datetime
    action: Literal["created", "uploaded", "review_started", "accepted", "rejected", "status_changed", "requirement_changed"]
    by: str = "system"
    meta: Dict[str, Any] = Field(default_factory=dict)


class ContractorDocumentV1(BaseModel):
    """Documento por (subcontratista, tipo de documento)."""
    requirement_id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="ID del requisito"
    )
    contractor_id: str = Field(
        description="ID del subcontratista"
    )
    document_type_id: str = Field(
        description="Tipo de documento (ej: haftpflicht, custom:xyz)"
    )
    status: RequirementStatusV1 = Field(
        default=RequirementStatusV1.missing,
        description="Estado actual"
    )
    requirement: RequirementLevelV1 = Field(
        default=RequirementLevelV1.required,
        description="required u optional"
    )
    custom_name: Optional[str] = Field(
        default=None,
        description="Nombre para documentos custom:*"
    )

    # Subida
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    uploaded_by: Optional[Literal["admin", "contractor"]] = None
    uploaded_at: Optional[datetime] = None
    declared_valid_until: Optional[datetime] = Field(
        default=None,
        description="Caducidad declarada por quien sube el documento"
    )

    # Revisión y validez
    accepted_at: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    validity_source: Optional[ValiditySourceV1] = Field(
        default=None,
        description="None hasta que el documento es aceptado"
    )
    rejection_reason: Optional[str] = None

    due_date: Optional[datetime] = Field(
        default=None,
        description="Fecha límite asignada por el llamador"
    )
    history: List[DocumentHistoryEntryV1] = Field(default_factory=list)


class RequirementWarningV1(BaseModel):
    """Aviso para notificación/UI."""
    requirement_id: str
    document_name: str
    document_code: str
    status: RequirementStatusV1
    due_date: Optional[datetime] = None


class ComputeRequirementsResponseV1(BaseModel):
    """Respuesta del agregador de cumplimiento."""
    success: bool = True
    created_requirements: int = 0
    updated_requirements: int = 0
    warning_count: int = 0
    warnings: List[RequirementWarningV1] = Field(default_factory=list)
    subcontractor_global_active: bool = False
    should_generate_warnings: bool = False
    company_type: CompanyTypeV1 = CompanyTypeV1.standard
    flags: SubcontractorFlagsV1 = Field(default_factory=SubcontractorFlagsV1)


class RequirementComputationV1(BaseModel):
    """
    Resultado completo de compute_requirements.

    documents contiene el conjunto actualizado que el llamador debe persistir;
    changed_requirement_ids los registros creados o modificados en esta pasada.
    """
    response: ComputeRequirementsResponseV1
    documents: List[ContractorDocumentV1] = Field(default_factory=list)
    changed_requirement_ids: List[str] = Field(default_factory=list)


class AggregationSettingsV1(BaseModel):
    """Configuración explícita del agregador (ver config.load_aggregation_settings)."""
    expiring_soon_days: int = Field(
        default=30,
        ge=0,
        description="Ventana de 'expiring' en días"
    )
    warning_horizon_days: int = Field(
        default=30,
        ge=0,
        description="Requisitos con fecha límite más lejana no generan aviso"
    )
    safe_mode: bool = Field(
        default=False,
        description="Si True, should_generate_warnings es siempre False"
    )
