from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class NoExpiryRuleV1(BaseModel):
    """El documento no caduca nunca."""
    mode: Literal["none"] = "none"


class FixedMonthsRuleV1(BaseModel):
    """Validez pauschal: fecha de aceptación + N meses."""
    mode: Literal["fixed_months"] = "fixed_months"
    months: int = Field(
        ge=1,
        description="Meses de validez desde la aceptación"
    )


class MaxMonthsRuleV1(BaseModel):
    """
    "No más antiguo de N meses".

    Misma aritmética que fixed_months; la intención es limitar la ventana,
    no concederla.
    """
    mode: Literal["max_months"] = "max_months"
    months: int = Field(
        ge=1,
        description="Antigüedad máxima en meses"
    )


class CustomRuleV1(BaseModel):
    """Regla irregular del mundo real con ventana numérica por defecto."""
    mode: Literal["custom"] = "custom"
    note: str = Field(
        description="Política en texto libre (ej: 'hasta fin de la Entsendung')"
    )
    default_months: int = Field(
        ge=1,
        description="Meses a usar si no hay otra señal"
    )


ValidityRuleV1 = Annotated[
    Union[NoExpiryRuleV1, FixedMonthsRuleV1, MaxMonthsRuleV1, CustomRuleV1],
    Field(discriminator="mode"),
]


class ValidityStrategyV1(BaseModel):
    """
    Estrategia inline de un tipo de documento.

    kind conocidos: none, fixed_days, end_of_year. Cualquier otro kind se
    acepta y no produce fecha de caducidad.
    """
    kind: str = Field(
        description="Tipo de estrategia"
    )
    days: Optional[int] = Field(
        default=None,
        description="Días de validez si kind=fixed_days"
    )


class ValiditySourceV1(str, Enum):
    """Procedencia de la fecha de caducidad."""
    user = "user"
    auto = "auto"
    none = "none"


class ValidityResultV1(BaseModel):
    """Resultado del cálculo de validez."""
    valid_until: Optional[datetime] = Field(
        default=None,
        description="Fecha de caducidad o None si no caduca"
    )
    validity_source: ValiditySourceV1 = Field(
        default=ValiditySourceV1.none,
        description="user (override humano), auto (regla) o none (no caduca)"
    )


class DocumentTypeInfoV1(BaseModel):
    """Tipo de documento conocido por el motor."""
    type_id: str = Field(
        description="Identificador (ej: haftpflicht, custom:elektro-pruefprotokoll)"
    )
    code: str = Field(
        description="Código estable para avisos (ej: BETRIEBSHAFTPFLICHT)"
    )
    label: str = Field(
        description="Nombre legible"
    )
    default_requirement: Literal["required", "optional", "hidden"] = Field(
        default="optional",
        description="Requisito por defecto en la UI"
    )
    validity: Optional[ValidityStrategyV1] = Field(
        default=None,
        description="Estrategia inline; si es None se usa el catálogo de reglas"
    )
