from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, Optional, Union

from compliance_engine.shared.time_utils import DateLike, resolve_now, to_datetime
from compliance_engine.shared.validity_models_v1 import (
    ValidityResultV1,
    ValidityRuleV1,
    ValiditySourceV1,
    ValidityStrategyV1,
)
from compliance_engine.validity.rule_catalog_v1 import resolve_validity_rule

logger = logging.getLogger(__name__)


def add_months(base: datetime, months: int) -> datetime:
    """
    Añade N meses a una fecha.

    Si el día no existe en el mes resultante, el exceso pasa al mes
    siguiente (31-ene + 1 mes = 2/3-mar), igual que el rollover estándar
    del calendario. La hora se conserva.
    """
    month_index = base.month - 1 + months
    year = base.year + month_index // 12
    month = month_index % 12 + 1
    first_of_month = base.replace(year=year, month=month, day=1)
    return first_of_month + timedelta(days=base.day - 1)


def coerce_user_date(user_date: Optional[Union[DateLike, str]]) -> Optional[datetime]:
    """None, "" o texto no parseable -> None; fechas -> datetime naive UTC."""
    if user_date is None:
        return None
    if isinstance(user_date, str):
        raw = user_date.strip()
        if not raw:
            return None
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            return to_datetime(datetime.fromisoformat(raw))
        except ValueError:
            logger.warning("Fecha de usuario no parseable ignorada: %r", user_date)
            return None
    return to_datetime(user_date)


def compute_valid_until(
    strategy: ValidityStrategyV1,
    issued_at: Optional[DateLike] = None,
) -> Optional[datetime]:
    """
    Calcula la caducidad para una estrategia inline.

    - fixed_days: issued_at + N días
    - end_of_year: 31-dic 23:59:59 del año de emisión
    - cualquier otro kind (incluido none): None
    """
    issued = resolve_now(issued_at)

    if strategy.kind == "fixed_days":
        if strategy.days is None:
            return None
        return issued + timedelta(days=strategy.days)
    elif strategy.kind == "end_of_year":
        return datetime(issued.year, 12, 31, 23, 59, 59)

    return None


def compute_validity(
    document_type_id: str,
    accepted_at: Optional[DateLike] = None,
    user_date: Optional[Union[DateLike, str]] = None,
    strategy: Optional[ValidityStrategyV1] = None,
    catalog: Optional[Dict[str, ValidityRuleV1]] = None,
) -> ValidityResultV1:
    """
    Calcula la validez de un documento aceptado.

    Orden de precedencia:
    1. Fecha de usuario (override explícito, gana siempre aunque la regla sea none)
    2. Estrategia inline del tipo de documento, si se pasa
    3. Regla del catálogo (con comodín custom:*)

    Args:
        document_type_id: Tipo de documento
        accepted_at: Momento de aceptación (default: ahora)
        user_date: Caducidad declarada por una persona (date, datetime o ISO string)
        strategy: Estrategia inline (fixed_days, end_of_year, ...)
        catalog: Catálogo de reglas alternativo

    Returns:
        ValidityResultV1 con valid_until y validity_source
    """
    user_valid_until = coerce_user_date(user_date)
    if user_valid_until is not None:
        return ValidityResultV1(
            valid_until=user_valid_until,
            validity_source=ValiditySourceV1.user,
        )

    accepted = resolve_now(accepted_at)

    if strategy is not None:
        valid_until = compute_valid_until(strategy, accepted)
        if valid_until is None:
            return ValidityResultV1(valid_until=None, validity_source=ValiditySourceV1.none)
        return ValidityResultV1(valid_until=valid_until, validity_source=ValiditySourceV1.auto)

    rule = resolve_validity_rule(document_type_id, catalog)

    if rule.mode == "none":
        return ValidityResultV1(valid_until=None, validity_source=ValiditySourceV1.none)
    elif rule.mode in ("fixed_months", "max_months"):
        months = rule.months
    elif rule.mode == "custom":
        months = rule.default_months
    else:
        logger.warning("Modo de validez desconocido %r para %s", rule.mode, document_type_id)
        return ValidityResultV1(valid_until=None, validity_source=ValiditySourceV1.none)

    return ValidityResultV1(
        valid_until=add_months(accepted, months),
        validity_source=ValiditySourceV1.auto,
    )
