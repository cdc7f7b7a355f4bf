import pytest

from backend.app.belfius.row_mapper import (
    BELFIUS_COLUMNS,
    HeaderRowMapper,
    PositionalRowMapper,
    RowError,
    build_row_mapper,
    map_record,
)


def _record(**overrides):
    record = {
        "Rekening": "BE68539007547034",
        "Boekingsdatum": "15/03/2024",
        "Rekeninguittrekselnummer": "003",
        "Transactienummer": "2024-00001",
        "Rekening tegenpartij": "BE71096123456769",
        "Naam tegenpartij bevat": "ACME BV",
        "Straat en nummer": "Kerkstraat 1",
        "Postcode en plaats": "2600  BERCHEM",
        "Transactie": "Overschrijving",
        "Valutadatum": "16/03/2024",
        "Bedrag": "-12,30",
        "Devies": "EUR",
        "BIC": "GKCCBEBB",
        "Landcode": "BE",
        "Mededelingen": "FACTUUR 42 REF. : 0012345678",
    }
    record.update(overrides)
    return record


def test_map_record_full_row():
    txn = map_record(_record())

    assert txn.account_number == "BE68539007547034"
    assert txn.booking_date == "2024-03-15"
    assert txn.value_date == "2024-03-16"
    assert txn.amount == pytest.approx(-12.30)
    assert txn.currency == "EUR"
    assert txn.statement_number == "003"
    assert txn.transaction_number == "2024-00001"
    assert txn.counterpart_account == "BE71096123456769"
    assert txn.counterpart_name == "ACME BV"
    assert txn.counterpart_address == "Kerkstraat 1"
    assert txn.counterpart_postal_code == "2600"
    assert txn.counterpart_city == "BERCHEM"
    assert txn.transaction_type == "Overschrijving"
    assert txn.bic == "GKCCBEBB"
    assert txn.country_code == "BE"
    assert txn.reference_number == "0012345678"


@pytest.mark.parametrize("missing", ["Rekening", "Boekingsdatum", "Bedrag"])
def test_structurally_incomplete_rows_are_dropped(missing):
    assert map_record(_record(**{missing: "  "})) is None

    record = _record()
    del record[missing]
    assert map_record(record) is None


def test_invalid_booking_date_is_row_error():
    with pytest.raises(RowError, match="Invalid booking date: 2024-03-15"):
        map_record(_record(Boekingsdatum="2024-03-15"))


def test_invalid_amount_is_row_error():
    with pytest.raises(RowError, match="Invalid amount: twaalf"):
        map_record(_record(Bedrag="twaalf"))


def test_invalid_value_date_is_tolerated():
    txn = map_record(_record(Valutadatum="soon"))
    assert txn.value_date is None


def test_reference_falls_back_to_transaction_number():
    txn = map_record(_record(Mededelingen="KAARTBETALING DELHAIZE"))
    assert txn.reference_number == "2024-00001"

    txn = map_record(_record(Mededelingen="", Transactienummer=""))
    assert txn.reference_number is None


def test_optional_fields_are_none_not_empty():
    blanks = {
        "Rekeninguittrekselnummer": "",
        "Transactienummer": " ",
        "Rekening tegenpartij": "",
        "Naam tegenpartij bevat": "",
        "Straat en nummer": "",
        "Postcode en plaats": "",
        "Transactie": "",
        "Valutadatum": "",
        "Devies": "",
        "BIC": "",
        "Landcode": "",
        "Mededelingen": "",
    }
    txn = map_record(_record(**blanks))

    assert txn.currency == "EUR"
    for name in (
        "statement_number",
        "transaction_number",
        "value_date",
        "counterpart_account",
        "counterpart_name",
        "counterpart_address",
        "counterpart_postal_code",
        "counterpart_city",
        "transaction_type",
        "bic",
        "country_code",
        "description",
        "reference_number",
    ):
        assert getattr(txn, name) is None, name


def test_header_mapper_reads_by_name_regardless_of_order():
    header = ["Bedrag", "Boekingsdatum", "Rekening"]
    fields = ["100,00", "01/02/2024", "BE62510007547061"]
    mapper = HeaderRowMapper()

    assert mapper.account_number(header, fields) == "BE62510007547061"
    txn = mapper.map_row(header, fields)
    assert txn.amount == pytest.approx(100.0)
    assert txn.booking_date == "2024-02-01"


def test_positional_mapper_ignores_header_names():
    header = [f"col{i}" for i in range(15)]
    fields = list(_record().values())
    mapper = PositionalRowMapper()

    assert mapper.account_number(header, fields) == "BE68539007547034"
    txn = mapper.map_row(header, fields)
    assert txn.amount == pytest.approx(-12.30)
    assert txn.counterpart_city == "BERCHEM"


def test_export_order_matches_column_names():
    assert BELFIUS_COLUMNS.in_export_order() == tuple(_record().keys())


def test_build_row_mapper_modes():
    assert build_row_mapper("header").mode == "header"
    assert isinstance(build_row_mapper("positional"), PositionalRowMapper)
    with pytest.raises(ValueError):
        build_row_mapper("auto")
