from __future__ import annotations

import re
from typing import Dict, Iterable, Optional, Tuple

from compliance_engine.shared.validity_models_v1 import DocumentTypeInfoV1

CUSTOM_PREFIX = "custom:"
CUSTOM_CODE = "CUSTOM"

_DOCUMENT_TYPES = [
    DocumentTypeInfoV1(
        type_id="gewerbeanmeldung",
        code="GEWERBEANMELDUNG",
        label="Gewerbeanmeldung",
        default_requirement="required",
    ),
    DocumentTypeInfoV1(
        type_id="haftpflicht",
        code="BETRIEBSHAFTPFLICHT",
        label="Betriebshaftpflicht",
        default_requirement="required",
    ),
    DocumentTypeInfoV1(
        type_id="freistellungsbescheinigung",
        code="FREISTELLUNGSBESCHEINIGUNG",
        label="Freistellungsbescheinigung (§ 48b EStG)",
        default_requirement="required",
    ),
    DocumentTypeInfoV1(
        type_id="unbedenklichkeitsbescheinigung",
        code="UNBEDENKLICHKEITSBESCHEINIGUNG",
        label="Unbedenklichkeitsbescheinigung Finanzamt",
    ),
    DocumentTypeInfoV1(
        type_id="handelsregisterauszug",
        code="HR_AUSZUG",
        label="Handelsregisterauszug",
    ),
    DocumentTypeInfoV1(
        type_id="bg_mitgliedschaft",
        code="BG_MITGLIEDSCHAFT",
        label="Berufsgenossenschaft – Mitgliedschaft",
    ),
    DocumentTypeInfoV1(
        type_id="kk_unbedenklichkeit",
        code="KK_UNBEDENKLICHKEIT",
        label="Unbedenklichkeitsbescheinigung – Krankenkasse",
    ),
    DocumentTypeInfoV1(
        type_id="avv",
        code="AVV",
        label="Auftragsverarbeitungsvertrag (AVV)",
    ),
    DocumentTypeInfoV1(
        type_id="a1_bescheinigung",
        code="A1_BESCHEINIGUNG",
        label="A1-Bescheinigung (bei Entsendung)",
        default_requirement="hidden",
    ),
    DocumentTypeInfoV1(
        type_id="arbeitserlaubnis",
        code="ARBEITSERLAUBNIS",
        label="Arbeitserlaubnis / Aufenthaltstitel",
        default_requirement="hidden",
    ),
]

DOCUMENT_TYPES: Dict[str, DocumentTypeInfoV1] = {t.type_id: t for t in _DOCUMENT_TYPES}


def get_document_type(
    document_type_id: str,
    registry: Optional[Dict[str, DocumentTypeInfoV1]] = None,
) -> Optional[DocumentTypeInfoV1]:
    """Obtiene la definición de un tipo por ID (None si no está registrado)."""
    types = DOCUMENT_TYPES if registry is None else registry
    return types.get(document_type_id)


def make_custom_doc_id(name: str) -> str:
    """Genera un ID custom:<slug> a partir de un nombre libre."""
    slug = name.lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return f"{CUSTOM_PREFIX}{slug}"


def is_custom_doc(document_type_id: str) -> bool:
    return document_type_id.startswith(CUSTOM_PREFIX)


def display_name(document_type_id: str, fallback: str, custom_name: Optional[str] = None) -> str:
    """Nombre visible: custom_name o slug para custom:*, fallback para el resto."""
    if is_custom_doc(document_type_id):
        return custom_name or document_type_id[len(CUSTOM_PREFIX):]
    return fallback


def validate_custom_doc_name(name: str, existing_docs: Iterable[Tuple[str, Optional[str]]]) -> Optional[str]:
    """
    Valida el nombre de un documento custom.

    Args:
        name: Nombre propuesto
        existing_docs: pares (document_type_id, custom_name) ya existentes

    Returns:
        Mensaje de error o None si es válido
    """
    if len(name) < 3:
        return "Name muss mindestens 3 Zeichen lang sein"

    existing_names = {
        (custom_name or "").lower()
        for type_id, custom_name in existing_docs
        if is_custom_doc(type_id)
    }
    if name.lower() in existing_names:
        return "Ein Dokument mit diesem Namen existiert bereits"

    return None


def describe_document(
    document_type_id: str,
    custom_name: Optional[str] = None,
    registry: Optional[Dict[str, DocumentTypeInfoV1]] = None,
) -> Tuple[str, str]:
    """
    Devuelve (nombre, código) para avisos.

    Tipos desconocidos no son error: se usa el propio ID como nombre.
    """
    doc_type = get_document_type(document_type_id, registry)
    if doc_type is not None:
        return display_name(document_type_id, doc_type.label, custom_name), doc_type.code
    if is_custom_doc(document_type_id):
        return display_name(document_type_id, document_type_id, custom_name), CUSTOM_CODE
    return document_type_id, document_type_id.upper()
