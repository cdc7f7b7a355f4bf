import pytest

from backend.app.belfius.normalize import (
    PostalCodeCity,
    extract_reference,
    parse_amount,
    parse_date,
    parse_postal_code_city,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1234,56", 1234.56),
        ("-12,30", -12.30),
        ("250", 250.0),
        ("  -1 000,00 EUR ", -1000.0),
        ("€ 7,5", 7.5),
    ],
)
def test_parse_amount_decimal_comma(raw, expected):
    assert parse_amount(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["", "   ", "abc", "-", None, "1.234,56", "12-3"])
def test_parse_amount_rejects_unparsable(raw):
    assert parse_amount(raw) is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("29/02/2024", "2024-02-29"),
        ("1/1/2024", "2024-01-01"),
        (" 05/11/2023 ", "2023-11-05"),
        ("31/12/1999", "1999-12-31"),
    ],
)
def test_parse_date_canonical(raw, expected):
    assert parse_date(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["", None, "31/13/2024", "0/01/2024", "32/01/2024", "15-03-2024", "15/03", "aa/03/2024", "15/03/2024/1"],
)
def test_parse_date_rejects(raw):
    assert parse_date(raw) is None


def test_parse_date_only_checks_ranges():
    assert parse_date("31/02/2024") == "2024-02-31"
    assert parse_date("31/04/2023") == "2023-04-31"


def test_parse_postal_code_city():
    assert parse_postal_code_city("2600  BERCHEM") == PostalCodeCity("2600", "BERCHEM")
    assert parse_postal_code_city("1000 SINT-JANS-MOLENBEEK") == PostalCodeCity("1000", "SINT-JANS-MOLENBEEK")
    assert parse_postal_code_city("BRUSSEL") == PostalCodeCity(None, "BRUSSEL")
    assert parse_postal_code_city("") == PostalCodeCity(None, None)
    assert parse_postal_code_city("   ") == PostalCodeCity(None, None)
    assert parse_postal_code_city(None) == PostalCodeCity(None, None)


def test_postal_code_without_city_is_city():
    result = parse_postal_code_city("2600")
    assert result.postal_code is None
    assert result.city == "2600"


def test_extract_reference_ref_marker():
    assert extract_reference("OVERSCHRIJVING NAAR X REF. : 0950412345678 VAL. 15-03") == "0950412345678"
    assert extract_reference("REF.:ABC123") == "ABC123"


def test_extract_reference_payconiq():
    assert extract_reference("Payconiq 3fa9c0de12 CAFE DE KROON") == "3fa9c0de12"


def test_extract_reference_prefers_ref_marker():
    text = "Payconiq abcdef REF. : 777"
    assert extract_reference(text) == "777"


def test_extract_reference_none():
    assert extract_reference("") is None
    assert extract_reference(None) is None
    assert extract_reference("KAARTBETALING DELHAIZE") is None
