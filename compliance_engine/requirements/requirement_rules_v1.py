"""
Tabla de configuración flags -> documentos requeridos.

Una regla aplica si:
- está activa,
- su company_type es None o coincide con el del subcontratista,
- cada condición de flag no-None coincide exactamente con el flag del
  subcontratista. Un flag desconocido (None) nunca satisface una condición,
  así la expansión de requisitos es conservadora (opt-in).
"""
from __future__ import annotations

from typing import List, Optional, Set

from pydantic import BaseModel, Field

from compliance_engine.shared.compliance_models_v1 import CompanyTypeV1, SubcontractorFlagsV1


class RequirementRuleV1(BaseModel):
    """Regla de requisito documental."""
    document_type_id: str = Field(
        description="Tipo de documento que se exige"
    )
    company_type: Optional[CompanyTypeV1] = Field(
        default=None,
        description="None = aplica a todos los tipos de empresa"
    )
    requires_employees: Optional[bool] = Field(
        default=None,
        description="Condición sobre el flag (None = sin condición)"
    )
    has_non_eu_workers: Optional[bool] = None
    employees_not_employed_in_germany: Optional[bool] = None
    active: bool = True


DEFAULT_REQUIREMENT_RULES: List[RequirementRuleV1] = [
    # Base
    RequirementRuleV1(document_type_id="gewerbeanmeldung"),
    RequirementRuleV1(document_type_id="haftpflicht"),
    # Empresas de obra (Bauleistungen)
    RequirementRuleV1(document_type_id="freistellungsbescheinigung", company_type=CompanyTypeV1.standard),
    RequirementRuleV1(document_type_id="unbedenklichkeitsbescheinigung", company_type=CompanyTypeV1.standard),
    # Con empleados
    RequirementRuleV1(document_type_id="bg_mitgliedschaft", requires_employees=True),
    RequirementRuleV1(document_type_id="kk_unbedenklichkeit", requires_employees=True),
    # Trabajadores de fuera de la UE
    RequirementRuleV1(document_type_id="arbeitserlaubnis", has_non_eu_workers=True),
    # Trabajadores no empleados en Alemania (Entsendung)
    RequirementRuleV1(document_type_id="a1_bescheinigung", employees_not_employed_in_germany=True),
]

_FLAG_NAMES = ("requires_employees", "has_non_eu_workers", "employees_not_employed_in_germany")


def _flag_condition_met(expected: Optional[bool], actual: Optional[bool]) -> bool:
    if expected is None:
        return True
    if actual is None:
        return False
    return actual is expected


def rule_matches(
    rule: RequirementRuleV1,
    company_type: CompanyTypeV1,
    flags: SubcontractorFlagsV1,
) -> bool:
    if not rule.active:
        return False
    if rule.company_type is not None and rule.company_type != company_type:
        return False
    for name in _FLAG_NAMES:
        if not _flag_condition_met(getattr(rule, name), getattr(flags, name)):
            return False
    return True


def managed_types(rules: Optional[List[RequirementRuleV1]] = None) -> Set[str]:
    """Tipos gobernados por la tabla; el resto (ej: custom:*) conserva su requisito."""
    table = DEFAULT_REQUIREMENT_RULES if rules is None else rules
    return {rule.document_type_id for rule in table}


def resolve_required_types(
    company_type: CompanyTypeV1,
    flags: SubcontractorFlagsV1,
    rules: Optional[List[RequirementRuleV1]] = None,
) -> List[str]:
    """
    Devuelve los tipos de documento requeridos, en el orden de la tabla y sin duplicados.
    """
    table = DEFAULT_REQUIREMENT_RULES if rules is None else rules
    required: List[str] = []
    for rule in table:
        if rule.document_type_id in required:
            continue
        if rule_matches(rule, company_type, flags):
            required.append(rule.document_type_id)
    return required
