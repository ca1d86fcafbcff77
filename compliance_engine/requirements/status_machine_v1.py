"""
Máquina de estados de requisitos documentales.

Eventos: upload, start_review, accept, reject, evaluate_time.
Cada evento devuelve un TransitionResult; un evento no permitido en el estado
actual devuelve el documento sin cambios (changed=False) y se registra en log,
nunca lanza excepción.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from compliance_engine.shared.compliance_models_v1 import (
    ContractorDocumentV1,
    DocumentHistoryEntryV1,
    RequirementStatusV1,
)
from compliance_engine.shared.time_utils import DateLike, resolve_now
from compliance_engine.shared.validity_models_v1 import DocumentTypeInfoV1, ValidityRuleV1
from compliance_engine.validity.expiry_classifier_v1 import ExpiryStateV1, classify_expiry
from compliance_engine.validity.validity_calculator_v1 import coerce_user_date, compute_validity

logger = logging.getLogger(__name__)

S = RequirementStatusV1

VALID_TRANSITIONS: Dict[RequirementStatusV1, List[RequirementStatusV1]] = {
    S.missing: [S.submitted],
    S.submitted: [S.in_review, S.valid, S.rejected],
    S.in_review: [S.valid, S.rejected],
    S.valid: [S.expiring, S.expired],
    S.expiring: [S.expired, S.valid, S.submitted],
    S.expired: [S.submitted],
    S.rejected: [S.submitted],
}

_TRANSITION_TRIGGERS: Dict[str, str] = {
    "missing->submitted": "Dokument hochgeladen",
    "submitted->in_review": "Prüfer hat das Dokument geöffnet",
    "submitted->valid": "Dokument vom Prüfer angenommen",
    "submitted->rejected": "Dokument vom Prüfer abgelehnt",
    "in_review->valid": "Dokument vom Prüfer angenommen",
    "in_review->rejected": "Dokument vom Prüfer abgelehnt",
    "valid->expiring": "Dokument läuft bald ab",
    "valid->expired": "Dokument ist abgelaufen",
    "expiring->expired": "Dokument ist abgelaufen",
    "expiring->valid": "Gültigkeit verlängert",
    "expiring->submitted": "Erneuerung hochgeladen",
    "expired->submitted": "Neues Dokument nach Ablauf hochgeladen",
    "rejected->submitted": "Korrigiertes Dokument hochgeladen",
}

_ALLOWED_ACTIONS: Dict[RequirementStatusV1, List[str]] = {
    S.missing: ["request_upload", "view_details"],
    S.submitted: ["review", "view_document", "approve", "reject"],
    S.in_review: ["review", "view_document", "approve", "reject"],
    S.valid: ["view_document"],
    S.expiring: ["view_document", "request_renewal"],
    S.expired: ["request_upload", "view_details"],
    S.rejected: ["request_correction", "view_details"],
}

_STATE_DESCRIPTIONS: Dict[RequirementStatusV1, str] = {
    S.missing: "Dokument fehlt und muss hochgeladen werden",
    S.submitted: "Dokument wurde eingereicht und wartet auf Prüfung",
    S.in_review: "Dokument wird derzeit geprüft",
    S.valid: "Dokument ist gültig und genehmigt",
    S.expiring: "Dokument läuft bald ab und muss erneuert werden",
    S.expired: "Dokument ist abgelaufen",
    S.rejected: "Dokument wurde abgelehnt und muss korrigiert werden",
}

UPLOADABLE_STATES = (S.missing, S.rejected, S.expired, S.expiring)
REVIEWABLE_STATES = (S.submitted, S.in_review)
TIME_EVALUATED_STATES = (S.valid, S.expiring)

Uploader = Literal["admin", "contractor"]
UPLOADERS = ("admin", "contractor")


@dataclass
class TransitionResult:
    """Resultado de aplicar un evento."""
    document: ContractorDocumentV1
    changed: bool
    trigger: str


def is_valid_transition(from_status: RequirementStatusV1, to_status: RequirementStatusV1) -> bool:
    return to_status in VALID_TRANSITIONS.get(from_status, [])


def get_next_states(status: RequirementStatusV1) -> List[RequirementStatusV1]:
    return list(VALID_TRANSITIONS.get(status, []))


def get_transition_trigger(from_status: RequirementStatusV1, to_status: RequirementStatusV1) -> Optional[str]:
    """Texto del disparador de una transición, o None si no es válida."""
    if not is_valid_transition(from_status, to_status):
        return None
    return _TRANSITION_TRIGGERS.get(f"{from_status.value}->{to_status.value}")


def is_action_allowed(status: RequirementStatusV1, action: str) -> bool:
    return action in _ALLOWED_ACTIONS.get(status, [])


def get_state_description(status: RequirementStatusV1) -> str:
    return _STATE_DESCRIPTIONS.get(status, "Unbekannter Status")


def _refuse(doc: ContractorDocumentV1, event: str, trigger: Optional[str] = None) -> TransitionResult:
    trigger = trigger or f"{event}_not_allowed_in_{doc.status.value}"
    logger.warning(
        "Evento %s rechazado en estado %s: %s (requirement_id=%s)",
        event, doc.status.value, trigger, doc.requirement_id,
    )
    return TransitionResult(document=doc, changed=False, trigger=trigger)


def _apply(
    doc: ContractorDocumentV1,
    to_status: RequirementStatusV1,
    now: datetime,
    action: str,
    by: str,
    meta: Optional[Dict[str, Any]] = None,
    **updates: Any,
) -> TransitionResult:
    """Aplica la transición sobre una copia y añade entrada de historial."""
    from_status = doc.status
    entry_meta = {"from": from_status.value, "to": to_status.value}
    entry_meta.update(meta or {})
    entry = DocumentHistoryEntryV1(ts=now, action=action, by=by, meta=entry_meta)

    updates["status"] = to_status
    updates["history"] = list(doc.history) + [entry]
    new_doc = doc.model_copy(update=updates)

    trigger = get_transition_trigger(from_status, to_status) or action
    logger.debug(
        "Transición %s -> %s (%s) requirement_id=%s",
        from_status.value, to_status.value, action, doc.requirement_id,
    )
    return TransitionResult(document=new_doc, changed=True, trigger=trigger)


def upload(
    doc: ContractorDocumentV1,
    *,
    file_name: Optional[str] = None,
    file_type: Optional[str] = None,
    file_size: Optional[int] = None,
    uploaded_by: Uploader = "contractor",
    declared_valid_until: Optional[Union[DateLike, str]] = None,
    now: Optional[DateLike] = None,
) -> TransitionResult:
    """
    Subida (o re-subida) de un documento -> submitted.

    Permitido desde missing, rejected, expired y expiring (renovación).
    Limpia motivo de rechazo y la validez de la versión anterior.
    uploaded_by solo admite "admin" o "contractor".
    """
    if doc.status not in UPLOADABLE_STATES:
        return _refuse(doc, "upload")
    if uploaded_by not in UPLOADERS:
        return _refuse(doc, "upload", trigger=f"upload_invalid_uploader_{uploaded_by}")

    current = resolve_now(now)
    return _apply(
        doc,
        S.submitted,
        current,
        action="uploaded",
        by=uploaded_by,
        meta={"file_name": file_name} if file_name else None,
        file_name=file_name,
        file_type=file_type,
        file_size=file_size,
        uploaded_by=uploaded_by,
        uploaded_at=current,
        declared_valid_until=coerce_user_date(declared_valid_until),
        rejection_reason=None,
        accepted_at=None,
        valid_until=None,
        validity_source=None,
    )


def start_review(
    doc: ContractorDocumentV1,
    *,
    reviewed_by: str = "reviewer",
    now: Optional[DateLike] = None,
) -> TransitionResult:
    """El revisor abre el documento: submitted -> in_review."""
    if doc.status != S.submitted:
        return _refuse(doc, "start_review")
    return _apply(doc, S.in_review, resolve_now(now), action="review_started", by=reviewed_by)


def accept(
    doc: ContractorDocumentV1,
    *,
    valid_until: Optional[Union[DateLike, str]] = None,
    document_type: Optional[DocumentTypeInfoV1] = None,
    reviewed_by: str = "reviewer",
    now: Optional[DateLike] = None,
    catalog: Optional[Dict[str, ValidityRuleV1]] = None,
) -> TransitionResult:
    """
    Aceptación del revisor -> valid.

    La validez se calcula con el momento de aceptación como acceptedAt.
    Fecha de usuario: la que indique el revisor, o si no la declarada en la subida.
    """
    if doc.status not in REVIEWABLE_STATES:
        return _refuse(doc, "accept")

    current = resolve_now(now)
    user_date = coerce_user_date(valid_until)
    if user_date is None:
        user_date = doc.declared_valid_until

    validity = compute_validity(
        doc.document_type_id,
        accepted_at=current,
        user_date=user_date,
        strategy=document_type.validity if document_type is not None else None,
        catalog=catalog,
    )

    return _apply(
        doc,
        S.valid,
        current,
        action="accepted",
        by=reviewed_by,
        meta={
            "valid_until": validity.valid_until.isoformat() if validity.valid_until else None,
            "validity_source": validity.validity_source.value,
        },
        accepted_at=current,
        valid_until=validity.valid_until,
        validity_source=validity.validity_source,
        rejection_reason=None,
    )


def reject(
    doc: ContractorDocumentV1,
    reason: str,
    *,
    reviewed_by: str = "reviewer",
    now: Optional[DateLike] = None,
) -> TransitionResult:
    """Rechazo del revisor -> rejected (guarda el motivo)."""
    if doc.status not in REVIEWABLE_STATES:
        return _refuse(doc, "reject")

    cleaned = (reason or "").strip() or None
    return _apply(
        doc,
        S.rejected,
        resolve_now(now),
        action="rejected",
        by=reviewed_by,
        meta={"reason": cleaned},
        rejection_reason=cleaned,
    )


def evaluate_time(
    doc: ContractorDocumentV1,
    *,
    lookahead_days: int = 30,
    now: Optional[DateLike] = None,
) -> TransitionResult:
    """
    Reclasificación temporal de documentos valid/expiring.

    Idempotente: re-evaluar con el mismo reloj no produce cambios. Estados
    fuera de valid/expiring no se tocan.
    """
    if doc.status not in TIME_EVALUATED_STATES:
        return TransitionResult(document=doc, changed=False, trigger="not_time_evaluated")

    current = resolve_now(now)
    state = classify_expiry(doc.valid_until, lookahead_days, now=current)

    if state == ExpiryStateV1.expired:
        target = S.expired
    elif state == ExpiryStateV1.expiring:
        target = S.expiring
    else:
        target = S.valid

    if target == doc.status:
        return TransitionResult(document=doc, changed=False, trigger="unchanged")

    return _apply(
        doc,
        target,
        current,
        action="status_changed",
        by="system",
        meta={"valid_until": doc.valid_until.isoformat() if doc.valid_until else None},
    )
