from __future__ import annotations

from typing import Dict, Iterable, Literal, Optional, Union

from pydantic import BaseModel

from compliance_engine.shared.compliance_models_v1 import RequirementStatusV1

ESCALATED = "escalated"

DisplayStatus = Union[RequirementStatusV1, Literal["escalated"]]


class StatusDisplayV1(BaseModel):
    label: str
    tone: Literal["neutral", "info", "success", "warning", "danger"]


STATUS_DISPLAY: Dict[str, StatusDisplayV1] = {
    RequirementStatusV1.missing.value: StatusDisplayV1(label="Fehlend", tone="neutral"),
    RequirementStatusV1.submitted.value: StatusDisplayV1(label="Eingereicht", tone="info"),
    RequirementStatusV1.in_review.value: StatusDisplayV1(label="In Prüfung", tone="info"),
    RequirementStatusV1.valid.value: StatusDisplayV1(label="Gültig", tone="success"),
    RequirementStatusV1.rejected.value: StatusDisplayV1(label="Abgelehnt", tone="danger"),
    RequirementStatusV1.expiring.value: StatusDisplayV1(label="Läuft ab", tone="warning"),
    RequirementStatusV1.expired.value: StatusDisplayV1(label="Abgelaufen", tone="danger"),
    ESCALATED: StatusDisplayV1(label="Eskaliert", tone="warning"),
}

# De menor a mayor urgencia
URGENCY_ORDER = [
    RequirementStatusV1.valid,
    RequirementStatusV1.expiring,
    RequirementStatusV1.missing,
    RequirementStatusV1.submitted,
    RequirementStatusV1.in_review,
    RequirementStatusV1.rejected,
    RequirementStatusV1.expired,
]


def urgency_rank(status: RequirementStatusV1) -> int:
    """Posición en URGENCY_ORDER (mayor = más urgente)."""
    return URGENCY_ORDER.index(status)


def most_urgent_status(statuses: Iterable[RequirementStatusV1]) -> Optional[RequirementStatusV1]:
    ranked = list(statuses)
    if not ranked:
        return None
    return max(ranked, key=urgency_rank)


def display_status(status: RequirementStatusV1, escalated: bool = False) -> DisplayStatus:
    """
    Estado a mostrar: escalated es una capa de UI, nunca un estado guardado.

    Un documento válido no se muestra escalado.
    """
    if escalated and status != RequirementStatusV1.valid:
        return ESCALATED
    return status


def get_status_display(status: RequirementStatusV1, escalated: bool = False) -> StatusDisplayV1:
    shown = display_status(status, escalated)
    key = ESCALATED if shown == ESCALATED else shown.value
    return STATUS_DISPLAY[key]
