"""
Agregados de cumplimiento por subcontratista y por organización.

Funciones puras sobre documentos ya cargados; los estados se re-evalúan con
el reloj inyectado antes de contar.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Literal, Optional

from pydantic import BaseModel, Field

from compliance_engine.requirements.status_machine_v1 import evaluate_time
from compliance_engine.shared.compliance_models_v1 import (
    ContractorDocumentV1,
    ContractorV1,
    RequirementLevelV1,
    RequirementStatusV1,
)
from compliance_engine.shared.time_utils import DateLike, resolve_now, to_datetime
from compliance_engine.shared.validity_models_v1 import DocumentTypeInfoV1
from compliance_engine.validity.document_types_v1 import describe_document

MISSING_LIKE = (RequirementStatusV1.missing, RequirementStatusV1.rejected, RequirementStatusV1.expired)
REVIEWING = (RequirementStatusV1.submitted, RequirementStatusV1.in_review)


class ComplianceCountsV1(BaseModel):
    missing: int = 0
    reviewing: int = 0
    expiring: int = 0
    valid: int = 0


class ContractorComplianceSummaryV1(BaseModel):
    """Estado agregado de un subcontratista."""
    status: Literal["complete", "attention", "missing"]
    counts: ComplianceCountsV1 = Field(default_factory=ComplianceCountsV1)
    has_required: bool = False


class ContractorPortfolioEntryV1(BaseModel):
    """Subcontratista con sus documentos (entrada para KPIs de organización)."""
    contractor: ContractorV1
    documents: List[ContractorDocumentV1] = Field(default_factory=list)


class OrgKPIsV1(BaseModel):
    active_contractors: int = 0
    missing_required_docs: int = 0
    in_review: int = 0
    expiring: int = 0


class ExpiringDocumentV1(BaseModel):
    contractor_id: str
    company_name: str
    document_type_id: str
    document_name: str
    valid_until: datetime


def _refresh(
    documents: Iterable[ContractorDocumentV1],
    lookahead_days: int,
    now: datetime,
) -> List[ContractorDocumentV1]:
    return [evaluate_time(doc, lookahead_days=lookahead_days, now=now).document for doc in documents]


def get_missing_required_documents(documents: Iterable[ContractorDocumentV1]) -> List[str]:
    """Tipos requeridos en missing, rejected o expired."""
    return [
        doc.document_type_id
        for doc in documents
        if doc.requirement == RequirementLevelV1.required and doc.status in MISSING_LIKE
    ]


def summarize_contractor(
    documents: Iterable[ContractorDocumentV1],
    *,
    lookahead_days: int = 30,
    now: Optional[DateLike] = None,
) -> ContractorComplianceSummaryV1:
    """
    Estado agregado:
    - missing: algún requerido falta/rechazado/caducado, o no hay requeridos
    - attention: documentos en revisión o por caducar
    - complete: resto
    """
    current = resolve_now(now)
    docs = _refresh(documents, lookahead_days, current)

    required = [d for d in docs if d.requirement == RequirementLevelV1.required]
    counts = ComplianceCountsV1(
        missing=sum(1 for d in required if d.status in MISSING_LIKE),
        reviewing=sum(1 for d in docs if d.status in REVIEWING),
        expiring=sum(1 for d in docs if d.status == RequirementStatusV1.expiring),
        valid=sum(1 for d in docs if d.status == RequirementStatusV1.valid),
    )
    has_required = len(required) > 0

    if counts.missing > 0:
        status = "missing"
    elif counts.reviewing > 0 or counts.expiring > 0:
        status = "attention"
    elif has_required:
        status = "complete"
    else:
        status = "missing"

    return ContractorComplianceSummaryV1(status=status, counts=counts, has_required=has_required)


def calculate_org_kpis(
    portfolio: Iterable[ContractorPortfolioEntryV1],
    *,
    lookahead_days: int = 30,
    now: Optional[DateLike] = None,
) -> OrgKPIsV1:
    """KPIs sobre subcontratistas activos."""
    current = resolve_now(now)
    kpis = OrgKPIsV1()

    for entry in portfolio:
        if not entry.contractor.active:
            continue
        kpis.active_contractors += 1
        docs = _refresh(entry.documents, lookahead_days, current)
        kpis.missing_required_docs += len(get_missing_required_documents(docs))
        kpis.in_review += sum(1 for d in docs if d.status in REVIEWING)
        kpis.expiring += sum(1 for d in docs if d.status == RequirementStatusV1.expiring)

    return kpis


def get_expiring_documents(
    portfolio: Iterable[ContractorPortfolioEntryV1],
    *,
    limit: int = 5,
    lookahead_days: int = 30,
    now: Optional[DateLike] = None,
    registry: Optional[Dict[str, DocumentTypeInfoV1]] = None,
) -> List[ExpiringDocumentV1]:
    """Documentos por caducar de subcontratistas activos, el más próximo primero."""
    current = resolve_now(now)
    items: List[ExpiringDocumentV1] = []

    for entry in portfolio:
        if not entry.contractor.active:
            continue
        for doc in _refresh(entry.documents, lookahead_days, current):
            if doc.status != RequirementStatusV1.expiring:
                continue
            name, _ = describe_document(doc.document_type_id, doc.custom_name, registry)
            items.append(ExpiringDocumentV1(
                contractor_id=entry.contractor.id,
                company_name=entry.contractor.company_name,
                document_type_id=doc.document_type_id,
                document_name=name,
                valid_until=to_datetime(doc.valid_until),
            ))

    items.sort(key=lambda item: item.valid_until)
    return items[:limit]
