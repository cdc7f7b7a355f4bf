"""
Belfius - row mapper.

Responsibility:
- Map one tokenized CSV row onto a canonical BelfiusTransaction.
- Decide row validity:
  - structurally incomplete rows (no account, booking date or amount) -> None
  - present-but-unparsable booking date or amount -> RowError

Design notes:
- Column names are the binding contract (HeaderRowMapper).
- PositionalRowMapper reads the standard export column order and exists for
  old exports whose headers were mangled; it is only used when configured.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from .normalize import extract_reference, parse_amount, parse_date, parse_postal_code_city

DEFAULT_CURRENCY = "EUR"


class RowError(ValueError):
    """A single row could not be normalized. The batch carries on without it."""


@dataclass(frozen=True)
class BelfiusTransaction:
    """
    Canonical statement line.

    Invariants:
    - booking_date / value_date are "YYYY-MM-DD" strings (range-checked only)
    - amount is signed (positive=credit, negative=debit)
    - optional text fields are None, never ""
    """
    account_number: str
    booking_date: str
    amount: float
    currency: str = DEFAULT_CURRENCY
    statement_number: Optional[str] = None
    transaction_number: Optional[str] = None
    value_date: Optional[str] = None
    counterpart_account: Optional[str] = None
    counterpart_name: Optional[str] = None
    counterpart_address: Optional[str] = None
    counterpart_postal_code: Optional[str] = None
    counterpart_city: Optional[str] = None
    transaction_type: Optional[str] = None
    bic: Optional[str] = None
    country_code: Optional[str] = None
    description: Optional[str] = None
    reference_number: Optional[str] = None


@dataclass(frozen=True)
class BelfiusColumns:
    account: str = "Rekening"
    booking_date: str = "Boekingsdatum"
    statement_number: str = "Rekeninguittrekselnummer"
    transaction_number: str = "Transactienummer"
    counterpart_account: str = "Rekening tegenpartij"
    counterpart_name: str = "Naam tegenpartij bevat"
    counterpart_address: str = "Straat en nummer"
    counterpart_postal_city: str = "Postcode en plaats"
    transaction_type: str = "Transactie"
    value_date: str = "Valutadatum"
    amount: str = "Bedrag"
    currency: str = "Devies"
    bic: str = "BIC"
    country_code: str = "Landcode"
    description: str = "Mededelingen"

    def in_export_order(self) -> tuple:
        return (
            self.account,
            self.booking_date,
            self.statement_number,
            self.transaction_number,
            self.counterpart_account,
            self.counterpart_name,
            self.counterpart_address,
            self.counterpart_postal_city,
            self.transaction_type,
            self.value_date,
            self.amount,
            self.currency,
            self.bic,
            self.country_code,
            self.description,
        )


BELFIUS_COLUMNS = BelfiusColumns()


def _clean(value: Optional[object]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class HeaderRowMapper:
    """Reads fields by Belfius column name."""

    mode = "header"

    def __init__(self, columns: BelfiusColumns = BELFIUS_COLUMNS):
        self.columns = columns

    def account_number(self, header: Sequence[str], fields: Sequence[str]) -> Optional[str]:
        return self._record(header, fields).get(self.columns.account)

    def map_row(self, header: Sequence[str], fields: Sequence[str]) -> Optional[BelfiusTransaction]:
        return map_record(self._record(header, fields), self.columns)

    @staticmethod
    def _record(header: Sequence[str], fields: Sequence[str]) -> dict:
        return dict(zip(header, fields))


class PositionalRowMapper(HeaderRowMapper):
    """Reads fields by their position in the standard Belfius export."""

    mode = "positional"

    def _record(self, header: Sequence[str], fields: Sequence[str]) -> dict:
        return dict(zip(self.columns.in_export_order(), fields))


def map_record(
    record: Mapping[str, Optional[str]],
    columns: BelfiusColumns = BELFIUS_COLUMNS,
) -> Optional[BelfiusTransaction]:
    """
    Map a header-keyed record to a BelfiusTransaction.

    Returns None for structurally incomplete rows.
    Raises RowError when the booking date or amount is present but invalid.
    """
    account_number = _clean(record.get(columns.account))
    booking_date_str = _clean(record.get(columns.booking_date))
    amount_str = _clean(record.get(columns.amount))

    if not account_number or not booking_date_str or not amount_str:
        return None

    booking_date = parse_date(booking_date_str)
    if booking_date is None:
        raise RowError(f"Invalid booking date: {booking_date_str}")

    amount = parse_amount(amount_str)
    if amount is None:
        raise RowError(f"Invalid amount: {amount_str}")

    transaction_number = _clean(record.get(columns.transaction_number))
    description = _clean(record.get(columns.description))
    postal = parse_postal_code_city(_clean(record.get(columns.counterpart_postal_city)))

    return BelfiusTransaction(
        account_number=account_number,
        booking_date=booking_date,
        amount=amount,
        currency=_clean(record.get(columns.currency)) or DEFAULT_CURRENCY,
        statement_number=_clean(record.get(columns.statement_number)),
        transaction_number=transaction_number,
        value_date=parse_date(_clean(record.get(columns.value_date))),
        counterpart_account=_clean(record.get(columns.counterpart_account)),
        counterpart_name=_clean(record.get(columns.counterpart_name)),
        counterpart_address=_clean(record.get(columns.counterpart_address)),
        counterpart_postal_code=postal.postal_code,
        counterpart_city=postal.city,
        transaction_type=_clean(record.get(columns.transaction_type)),
        bic=_clean(record.get(columns.bic)),
        country_code=_clean(record.get(columns.country_code)),
        description=description,
        reference_number=extract_reference(description) or transaction_number,
    )


def build_row_mapper(mode: str) -> HeaderRowMapper:
    if mode == "header":
        return HeaderRowMapper()
    if mode == "positional":
        return PositionalRowMapper()
    raise ValueError(f"Unknown Belfius column mode: {mode!r} (expected 'header' or 'positional')")
