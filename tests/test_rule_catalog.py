"""
Tests para el catálogo de reglas de validez.
"""
import pytest

from compliance_engine.shared.validity_models_v1 import (
    CustomRuleV1,
    FixedMonthsRuleV1,
    MaxMonthsRuleV1,
    NoExpiryRuleV1,
)
from compliance_engine.validity.rule_catalog_v1 import (
    DOC_VALIDITY_DEFAULTS,
    WILDCARD_TYPE_ID,
    has_expiry,
    resolve_validity_rule,
)


def test_resolve_exact_match():
    """Test: un tipo conocido devuelve su propia regla."""
    rule = resolve_validity_rule("haftpflicht")
    assert isinstance(rule, FixedMonthsRuleV1)
    assert rule.months == 12


def test_resolve_max_months_and_custom():
    """Test: variantes max_months y custom del catálogo por defecto."""
    hr = resolve_validity_rule("handelsregisterauszug")
    assert isinstance(hr, MaxMonthsRuleV1)
    assert hr.months == 3

    a1 = resolve_validity_rule("a1_bescheinigung")
    assert isinstance(a1, CustomRuleV1)
    assert a1.default_months == 6
    assert "Entsendung" in a1.note


def test_resolve_unknown_falls_back_to_wildcard():
    """Test: tipo desconocido -> comodín custom:* (12 meses)."""
    rule = resolve_validity_rule("custom:elektro-pruefprotokoll")
    assert rule is DOC_VALIDITY_DEFAULTS[WILDCARD_TYPE_ID]
    assert rule.mode == "fixed_months"
    assert rule.months == 12


@pytest.mark.parametrize("type_id", [
    "haftpflicht", "gewerbeanmeldung", "a1_bescheinigung", "arbeitserlaubnis",
    "custom:foo", "", "HAFTPFLICHT", "custom:*",
])
def test_resolve_is_total(type_id):
    """Test: resolve nunca devuelve None ni lanza excepción."""
    assert resolve_validity_rule(type_id) is not None


def test_resolve_catalog_without_wildcard_uses_default_wildcard():
    """Test: un catálogo propio sin comodín sigue resolviendo al comodín por defecto."""
    catalog = {"haftpflicht": NoExpiryRuleV1()}
    assert resolve_validity_rule("haftpflicht", catalog).mode == "none"
    fallback = resolve_validity_rule("otro", catalog)
    assert fallback.mode == "fixed_months"
    assert fallback.months == 12


def test_has_expiry():
    """Test: has_expiry es False solo para reglas none."""
    assert has_expiry("gewerbeanmeldung") is False
    assert has_expiry("avv") is False
    assert has_expiry("haftpflicht") is True
    assert has_expiry("a1_bescheinigung") is True
    assert has_expiry("custom:irgendwas") is True
