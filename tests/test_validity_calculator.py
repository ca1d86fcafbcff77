"""
Tests para el cálculo de validez (precedencia de usuario, reglas y aritmética de meses).
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from compliance_engine.shared.validity_models_v1 import (
    FixedMonthsRuleV1,
    ValiditySourceV1,
    ValidityStrategyV1,
)
from compliance_engine.validity.validity_calculator_v1 import (
    add_months,
    coerce_user_date,
    compute_valid_until,
    compute_validity,
)


def test_haftpflicht_fixed_12_months():
    """Test: haftpflicht aceptado el 2024-01-31 caduca el 2025-01-31."""
    result = compute_validity("haftpflicht", date(2024, 1, 31))
    assert result.valid_until == datetime(2025, 1, 31)
    assert result.validity_source == ValiditySourceV1.auto


def test_gewerbeanmeldung_never_expires():
    """Test: regla none -> (None, none) para cualquier fecha."""
    for accepted in (date(2020, 1, 1), datetime(2031, 12, 31, 23, 59)):
        result = compute_validity("gewerbeanmeldung", accepted)
        assert result.valid_until is None
        assert result.validity_source == ValiditySourceV1.none


def test_unbedenklichkeitsbescheinigung_fixed_3_months():
    """Test: 2024-06-15 + 3 meses = 2024-09-15."""
    result = compute_validity("unbedenklichkeitsbescheinigung", date(2024, 6, 15))
    assert result.valid_until == datetime(2024, 9, 15)
    assert result.validity_source == ValiditySourceV1.auto


def test_max_months_uses_same_arithmetic():
    """Test: max_months calcula igual que fixed_months."""
    result = compute_validity("handelsregisterauszug", datetime(2024, 1, 10, 8, 0))
    assert result.valid_until == datetime(2024, 4, 10, 8, 0)


def test_custom_rule_uses_default_months():
    """Test: a1_bescheinigung usa default_months=6."""
    result = compute_validity("a1_bescheinigung", date(2024, 1, 15))
    assert result.valid_until == datetime(2024, 7, 15)
    assert result.validity_source == ValiditySourceV1.auto


def test_unknown_type_uses_wildcard():
    """Test: tipo desconocido -> 12 meses por el comodín."""
    result = compute_validity("custom:brandschutz", date(2024, 3, 1))
    assert result.valid_until == datetime(2025, 3, 1)
    assert result.validity_source == ValiditySourceV1.auto


def test_user_date_overrides_none_rule():
    """Test: la fecha de usuario gana aunque la regla sea none."""
    user_date = datetime(2026, 2, 28, 0, 0)
    result = compute_validity("gewerbeanmeldung", date(2024, 1, 1), user_date=user_date)
    assert result.validity_source == ValiditySourceV1.user
    assert result.valid_until == user_date


def test_user_date_overrides_computed_rule():
    """Test: la fecha de usuario gana sobre la regla calculada."""
    user_date = datetime(2024, 2, 1, 17, 30)
    result = compute_validity("haftpflicht", date(2024, 1, 31), user_date=user_date)
    assert result.validity_source == ValiditySourceV1.user
    assert result.valid_until == user_date


def test_user_date_as_iso_string():
    """Test: fecha de usuario como string ISO."""
    result = compute_validity("haftpflicht", date(2024, 1, 31), user_date="2026-02-28")
    assert result.validity_source == ValiditySourceV1.user
    assert result.valid_until == datetime(2026, 2, 28)


@pytest.mark.parametrize("blank", ["", "   ", None])
def test_blank_user_date_is_absent(blank):
    """Test: None o string vacío no cuentan como fecha de usuario."""
    result = compute_validity("haftpflicht", date(2024, 1, 31), user_date=blank)
    assert result.validity_source == ValiditySourceV1.auto
    assert result.valid_until == datetime(2025, 1, 31)


def test_unparsable_user_date_is_ignored():
    """Test: texto no parseable se ignora (fail open) y se usa la regla."""
    result = compute_validity("haftpflicht", date(2024, 1, 31), user_date="31.01.2025")
    assert result.validity_source == ValiditySourceV1.auto


def test_coerce_user_date_zulu_suffix():
    """Test: sufijo Z se interpreta como UTC."""
    assert coerce_user_date("2025-03-01T10:00:00Z") == datetime(2025, 3, 1, 10, 0)


def test_aware_accepted_at_is_normalized_to_utc():
    """Test: acceptedAt con zona horaria se normaliza a UTC naive."""
    accepted = datetime(2024, 1, 31, 1, 0, tzinfo=timezone(timedelta(hours=2)))
    result = compute_validity("haftpflicht", accepted)
    assert result.valid_until == datetime(2025, 1, 30, 23, 0)


# ---- aritmética de meses (rollover de fin de mes) ----

def test_add_months_month_end_rolls_over_leap_year():
    """Test: 31-ene-2024 + 1 mes = 2-mar-2024 (febrero de 29 días)."""
    assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 3, 2)


def test_add_months_month_end_rolls_over_common_year():
    """Test: 31-ene-2023 + 1 mes = 3-mar-2023."""
    assert add_months(datetime(2023, 1, 31), 1) == datetime(2023, 3, 3)


def test_add_months_leap_day_plus_year():
    """Test: 29-feb-2024 + 12 meses = 1-mar-2025."""
    assert add_months(datetime(2024, 2, 29), 12) == datetime(2025, 3, 1)


def test_add_months_year_boundary_and_time_kept():
    """Test: cruce de año conservando la hora."""
    assert add_months(datetime(2024, 12, 15, 9, 45), 1) == datetime(2025, 1, 15, 9, 45)
    assert add_months(datetime(2024, 11, 30), 3) == datetime(2025, 3, 2)


def test_compute_validity_month_overflow_via_catalog():
    """Test: compute_validity aplica el mismo rollover con un catálogo de 1 mes."""
    catalog = {"custom:*": FixedMonthsRuleV1(months=1)}
    result = compute_validity("custom:x", datetime(2024, 1, 31, 9, 30), catalog=catalog)
    assert result.valid_until == datetime(2024, 3, 2, 9, 30)


# ---- estrategias inline ----

def test_strategy_fixed_days():
    """Test: fixed_days suma N días."""
    strategy = ValidityStrategyV1(kind="fixed_days", days=10)
    assert compute_valid_until(strategy, datetime(2024, 12, 25)) == datetime(2025, 1, 4)


def test_strategy_end_of_year():
    """Test: end_of_year -> 31-dic 23:59:59 del año de emisión."""
    strategy = ValidityStrategyV1(kind="end_of_year")
    assert compute_valid_until(strategy, date(2024, 3, 5)) == datetime(2024, 12, 31, 23, 59, 59)


@pytest.mark.parametrize("strategy", [
    ValidityStrategyV1(kind="none"),
    ValidityStrategyV1(kind="monthly"),
    ValidityStrategyV1(kind="fixed_days"),
])
def test_strategy_other_kinds_yield_none(strategy):
    """Test: kinds no soportados (o sin days) -> None, sin error."""
    assert compute_valid_until(strategy, datetime(2024, 1, 1)) is None


def test_compute_validity_with_strategy():
    """Test: la estrategia inline sustituye a la regla del catálogo."""
    strategy = ValidityStrategyV1(kind="fixed_days", days=365)
    result = compute_validity("haftpflicht", datetime(2024, 1, 1), strategy=strategy)
    assert result.valid_until == datetime(2024, 12, 31)
    assert result.validity_source == ValiditySourceV1.auto

    unknown = compute_validity("haftpflicht", datetime(2024, 1, 1), strategy=ValidityStrategyV1(kind="weekly"))
    assert unknown.valid_until is None
    assert unknown.validity_source == ValiditySourceV1.none


def test_user_date_beats_strategy():
    """Test: la fecha de usuario también gana sobre la estrategia."""
    strategy = ValidityStrategyV1(kind="end_of_year")
    result = compute_validity("haftpflicht", datetime(2024, 1, 1), user_date=date(2024, 6, 30), strategy=strategy)
    assert result.validity_source == ValiditySourceV1.user
    assert result.valid_until == datetime(2024, 6, 30)
