"""
Tests para el registro de tipos de documento y documentos custom.
"""
from compliance_engine.shared.validity_models_v1 import DocumentTypeInfoV1
from compliance_engine.validity.document_types_v1 import (
    DOCUMENT_TYPES,
    describe_document,
    display_name,
    get_document_type,
    is_custom_doc,
    make_custom_doc_id,
    validate_custom_doc_name,
)
from compliance_engine.validity.rule_catalog_v1 import DOC_VALIDITY_DEFAULTS


def test_registry_lookup():
    """Test: tipos registrados y desconocidos."""
    haftpflicht = get_document_type("haftpflicht")
    assert haftpflicht.code == "BETRIEBSHAFTPFLICHT"
    assert get_document_type("gibt_es_nicht") is None


def test_catalog_types_are_registered():
    """Test: cada tipo del catálogo de validez tiene definición."""
    for type_id in DOC_VALIDITY_DEFAULTS:
        if type_id.startswith("custom:"):
            continue
        assert type_id in DOCUMENT_TYPES


def test_make_custom_doc_id():
    """Test: slug a partir de nombre libre."""
    assert make_custom_doc_id("Sicherheits Unterweisung 2025") == "custom:sicherheits-unterweisung-2025"
    assert make_custom_doc_id("  Prüf--Bericht! ") == "custom:prf-bericht"
    assert is_custom_doc("custom:abc") is True
    assert is_custom_doc("haftpflicht") is False


def test_display_name():
    """Test: nombre visible de documentos custom y registrados."""
    assert display_name("custom:pruefbericht", "x", "Prüfbericht") == "Prüfbericht"
    assert display_name("custom:pruefbericht", "x") == "pruefbericht"
    assert display_name("haftpflicht", "Betriebshaftpflicht", "ignorado") == "Betriebshaftpflicht"


def test_validate_custom_doc_name():
    """Test: longitud mínima y nombres duplicados."""
    existing = [("custom:pruefbericht", "Prüfbericht"), ("haftpflicht", None)]
    assert validate_custom_doc_name("ab", existing) == "Name muss mindestens 3 Zeichen lang sein"
    assert validate_custom_doc_name("prüfbericht", existing) == "Ein Dokument mit diesem Namen existiert bereits"
    assert validate_custom_doc_name("Gerüstprotokoll", existing) is None


def test_describe_document():
    """Test: (nombre, código) para registrados, custom y desconocidos."""
    assert describe_document("haftpflicht") == ("Betriebshaftpflicht", "BETRIEBSHAFTPFLICHT")
    assert describe_document("custom:pruefbericht", "Prüfbericht") == ("Prüfbericht", "CUSTOM")
    assert describe_document("sonstiges") == ("sonstiges", "SONSTIGES")

    registry = {"avv": DocumentTypeInfoV1(type_id="avv", code="DPA", label="Data Processing Agreement")}
    assert describe_document("avv", registry=registry) == ("Data Processing Agreement", "DPA")
