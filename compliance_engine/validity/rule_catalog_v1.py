from __future__ import annotations

from typing import Dict, Optional

from compliance_engine.shared.validity_models_v1 import (
    CustomRuleV1,
    FixedMonthsRuleV1,
    MaxMonthsRuleV1,
    NoExpiryRuleV1,
    ValidityRuleV1,
)

WILDCARD_TYPE_ID = "custom:*"

# Defaults basados en la práctica habitual en obra
DOC_VALIDITY_DEFAULTS: Dict[str, ValidityRuleV1] = {
    "haftpflicht": FixedMonthsRuleV1(months=12),
    "freistellungsbescheinigung": FixedMonthsRuleV1(months=12),
    "gewerbeanmeldung": NoExpiryRuleV1(),
    "unbedenklichkeitsbescheinigung": FixedMonthsRuleV1(months=3),  # FA-UBB
    "handelsregisterauszug": MaxMonthsRuleV1(months=3),
    "bg_mitgliedschaft": FixedMonthsRuleV1(months=12),
    "kk_unbedenklichkeit": FixedMonthsRuleV1(months=3),
    "avv": NoExpiryRuleV1(),
    "a1_bescheinigung": CustomRuleV1(
        note="Bis Ende der Entsendung, max. 24 Monate. Default 6 Monate, wenn unbekannt.",
        default_months=6,
    ),
    WILDCARD_TYPE_ID: FixedMonthsRuleV1(months=12),
}


def resolve_validity_rule(
    document_type_id: str,
    catalog: Optional[Dict[str, ValidityRuleV1]] = None,
) -> ValidityRuleV1:
    """
    Resuelve la regla de validez de un tipo de documento.

    Busca coincidencia exacta; si no existe usa el comodín "custom:*".
    Nunca lanza excepción: un catálogo sin comodín cae al comodín por defecto.
    """
    rules = DOC_VALIDITY_DEFAULTS if catalog is None else catalog
    rule = rules.get(document_type_id) if document_type_id else None
    if rule is not None:
        return rule
    wildcard = rules.get(WILDCARD_TYPE_ID)
    if wildcard is not None:
        return wildcard
    return DOC_VALIDITY_DEFAULTS[WILDCARD_TYPE_ID]


def has_expiry(
    document_type_id: str,
    catalog: Optional[Dict[str, ValidityRuleV1]] = None,
) -> bool:
    """True si el tipo de documento caduca (regla distinta de none)."""
    return resolve_validity_rule(document_type_id, catalog).mode != "none"
