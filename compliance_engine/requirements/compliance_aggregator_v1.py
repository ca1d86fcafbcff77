"""
Agregador de cumplimiento.

Dado un subcontratista, sus flags y los documentos existentes, determina qué
tipos son requeridos, crea/actualiza los registros y genera la respuesta con
contadores y avisos. No guarda estado entre llamadas: el llamador persiste
RequirementComputationV1.documents y serializa las llamadas por subcontratista.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from compliance_engine.requirements.requirement_rules_v1 import (
    RequirementRuleV1,
    managed_types,
    resolve_required_types,
)
from compliance_engine.requirements.status_display_v1 import urgency_rank
from compliance_engine.requirements.status_machine_v1 import evaluate_time
from compliance_engine.shared.compliance_models_v1 import (
    AggregationSettingsV1,
    ComputeRequirementsResponseV1,
    ContractorDocumentV1,
    ContractorV1,
    DocumentHistoryEntryV1,
    RequirementComputationV1,
    RequirementLevelV1,
    RequirementStatusV1,
    RequirementWarningV1,
    SubcontractorFlagsV1,
)
from compliance_engine.shared.time_utils import DateLike, resolve_now, to_datetime
from compliance_engine.shared.validity_models_v1 import DocumentTypeInfoV1
from compliance_engine.validity.document_types_v1 import describe_document

logger = logging.getLogger(__name__)

# Estados requeridos que dejan al subcontratista sin camino de cumplimiento
BLOCKING_STATUSES = (RequirementStatusV1.expired, RequirementStatusV1.rejected)


def _set_requirement(
    doc: ContractorDocumentV1,
    level: RequirementLevelV1,
    now: datetime,
) -> ContractorDocumentV1:
    entry = DocumentHistoryEntryV1(
        ts=now,
        action="requirement_changed",
        meta={"from": doc.requirement.value, "to": level.value},
    )
    return doc.model_copy(update={
        "requirement": level,
        "history": list(doc.history) + [entry],
    })


def _new_requirement(contractor_id: str, document_type_id: str, now: datetime) -> ContractorDocumentV1:
    return ContractorDocumentV1(
        contractor_id=contractor_id,
        document_type_id=document_type_id,
        status=RequirementStatusV1.missing,
        requirement=RequirementLevelV1.required,
        history=[DocumentHistoryEntryV1(ts=now, action="created")],
    )


def build_warnings(
    documents: Iterable[ContractorDocumentV1],
    *,
    warning_horizon_days: int = 30,
    now: Optional[DateLike] = None,
    registry: Optional[Dict[str, DocumentTypeInfoV1]] = None,
) -> List[RequirementWarningV1]:
    """
    Avisos para requisitos obligatorios en estado distinto de valid.

    Se omiten los que tienen fecha límite más allá del horizonte. Orden: más
    urgente primero, luego fecha límite más próxima, luego nombre.
    """
    current = resolve_now(now)
    horizon = current + timedelta(days=warning_horizon_days)

    warnings: List[RequirementWarningV1] = []
    for doc in documents:
        if doc.requirement != RequirementLevelV1.required:
            continue
        if doc.status == RequirementStatusV1.valid:
            continue
        due_date = to_datetime(doc.due_date)
        if due_date is not None and due_date > horizon:
            continue

        name, code = describe_document(doc.document_type_id, doc.custom_name, registry)
        warnings.append(RequirementWarningV1(
            requirement_id=doc.requirement_id,
            document_name=name,
            document_code=code,
            status=doc.status,
            due_date=due_date or to_datetime(doc.valid_until),
        ))

    warnings.sort(key=lambda w: (
        -urgency_rank(w.status),
        w.due_date is None,
        w.due_date or datetime.max,
        w.document_name,
    ))
    return warnings


def is_globally_active(contractor: ContractorV1, documents: Iterable[ContractorDocumentV1]) -> bool:
    """
    Activo si el subcontratista está activo y al menos un documento requerido
    no está caducado ni rechazado. Sin documentos requeridos -> False.
    """
    if not contractor.active:
        return False
    return any(
        doc.requirement == RequirementLevelV1.required and doc.status not in BLOCKING_STATUSES
        for doc in documents
    )


def compute_requirements(
    contractor: ContractorV1,
    flags: Optional[SubcontractorFlagsV1],
    existing_documents: Iterable[ContractorDocumentV1],
    *,
    rules: Optional[List[RequirementRuleV1]] = None,
    settings: Optional[AggregationSettingsV1] = None,
    registry: Optional[Dict[str, DocumentTypeInfoV1]] = None,
    now: Optional[DateLike] = None,
) -> RequirementComputationV1:
    """
    Recalcula los requisitos documentales de un subcontratista.

    Args:
        contractor: Registro del subcontratista
        flags: Flags de riesgo (None = todos desconocidos)
        existing_documents: Documentos actuales del subcontratista
        rules: Tabla de reglas (default: DEFAULT_REQUIREMENT_RULES)
        settings: Configuración explícita (default: AggregationSettingsV1())
        registry: Registro de tipos de documento para nombres/códigos
        now: Reloj inyectado (default: ahora)

    Returns:
        RequirementComputationV1 con la respuesta y los documentos actualizados
    """
    current = resolve_now(now)
    settings = settings or AggregationSettingsV1()
    flags = flags or SubcontractorFlagsV1()

    required_types = resolve_required_types(contractor.company_type, flags, rules)
    required_set = set(required_types)
    managed = managed_types(rules)

    documents: List[ContractorDocumentV1] = []
    changed_ids: List[str] = []
    seen_types = set()
    updated = 0

    for doc in existing_documents:
        if doc.document_type_id in seen_types:
            logger.warning(
                "Documento duplicado para %s/%s (requirement_id=%s)",
                contractor.id, doc.document_type_id, doc.requirement_id,
            )
        seen_types.add(doc.document_type_id)

        new_doc = doc
        if doc.document_type_id in required_set:
            if doc.requirement != RequirementLevelV1.required:
                new_doc = _set_requirement(new_doc, RequirementLevelV1.required, current)
        elif doc.document_type_id in managed and doc.requirement == RequirementLevelV1.required:
            # Ya no requerido: se conserva estado y fichero, solo pasa a optional
            new_doc = _set_requirement(new_doc, RequirementLevelV1.optional, current)

        result = evaluate_time(new_doc, lookahead_days=settings.expiring_soon_days, now=current)
        new_doc = result.document

        if new_doc is not doc:
            updated += 1
            changed_ids.append(new_doc.requirement_id)
        documents.append(new_doc)

    created = 0
    for type_id in required_types:
        if type_id in seen_types:
            continue
        new_doc = _new_requirement(contractor.id, type_id, current)
        documents.append(new_doc)
        changed_ids.append(new_doc.requirement_id)
        created += 1

    warnings = build_warnings(
        documents,
        warning_horizon_days=settings.warning_horizon_days,
        now=current,
        registry=registry,
    )
    global_active = is_globally_active(contractor, documents)

    response = ComputeRequirementsResponseV1(
        success=True,
        created_requirements=created,
        updated_requirements=updated,
        warning_count=len(warnings),
        warnings=warnings,
        subcontractor_global_active=global_active,
        should_generate_warnings=global_active and not settings.safe_mode,
        company_type=contractor.company_type,
        flags=flags,
    )

    logger.info(
        "Requisitos calculados para %s: created=%d updated=%d warnings=%d global_active=%s",
        contractor.id, created, updated, len(warnings), global_active,
    )

    return RequirementComputationV1(
        response=response,
        documents=documents,
        changed_requirement_ids=changed_ids,
    )
