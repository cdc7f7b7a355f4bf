"""
Belfius - CSV parser.

Responsibility:
- Tokenize a semicolon-delimited Belfius export (first line = header).
- Filter rows: blank rows and rows whose account column does not start with
  "BE" (metadata/summary lines) are skipped silently.
- Feed surviving rows to the row mapper, isolating per-row failures.

Design notes:
- Only two conditions fail the whole parse: a structural tokenizer error
  (bad quoting, field counts that cannot be reconciled with the header) and
  "no valid transactions".
- Row errors are part of the result so callers can report them without
  re-running the mapper.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from .row_mapper import BelfiusTransaction, HeaderRowMapper, RowError

logger = logging.getLogger(__name__)

DELIMITER = ";"
ACCOUNT_MARKER = "BE"
NO_TRANSACTIONS_ERROR = "No valid transactions found in CSV file. Please check the file format."


class CsvParseError(Exception):
    """The file could not be tokenized at all."""


@dataclass(frozen=True)
class ParsedRow:
    row: int
    transaction: BelfiusTransaction


@dataclass(frozen=True)
class RowFailure:
    row: int
    error: str

    def as_dict(self) -> Dict[str, Any]:
        return {"row": self.row, "error": self.error}


@dataclass
class ParseResult:
    ok: bool
    rows: List[ParsedRow] = field(default_factory=list)
    row_errors: List[RowFailure] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def transactions(self) -> List[BelfiusTransaction]:
        return [parsed.transaction for parsed in self.rows]


def _is_blank(fields: Sequence[str]) -> bool:
    return all(not (value or "").strip() for value in fields)


def _clean_header(name: str) -> str:
    return name.lstrip("\ufeff").strip()


class BelfiusCsvParser:
    def __init__(self, row_mapper: Optional[HeaderRowMapper] = None, delimiter: str = DELIMITER):
        self.row_mapper = row_mapper or HeaderRowMapper()
        self.delimiter = delimiter

    def parse(self, content: Union[bytes, str]) -> ParseResult:
        try:
            header, data_rows = self._tokenize(content)
        except CsvParseError as e:
            logger.warning("[csv] tokenizer failed: %s", e)
            return ParseResult(ok=False, error=f"CSV parsing failed: {e}")

        logger.info("[csv] processing %s rows (mode=%s)", len(data_rows), self.row_mapper.mode)
        logger.debug("[csv] headers found: %s", header)

        rows: List[ParsedRow] = []
        row_errors: List[RowFailure] = []

        for row_no, fields in enumerate(data_rows, start=1):
            if _is_blank(fields):
                continue

            account = (self.row_mapper.account_number(header, fields) or "").strip()
            if not account.startswith(ACCOUNT_MARKER):
                logger.debug("[csv] skipping row %s: no valid account number", row_no)
                continue

            try:
                transaction = self.row_mapper.map_row(header, fields)
            except RowError as e:
                logger.warning("[csv] error parsing row %s: %s", row_no, e)
                row_errors.append(RowFailure(row=row_no, error=str(e)))
                continue

            if transaction is None:
                logger.debug("[csv] skipping row %s: missing required fields", row_no)
                continue
            rows.append(ParsedRow(row=row_no, transaction=transaction))

        if not rows:
            return ParseResult(ok=False, row_errors=row_errors, error=NO_TRANSACTIONS_ERROR)

        logger.info(
            "[csv] parsed %s transactions (%s row errors)",
            len(rows),
            len(row_errors),
        )
        return ParseResult(ok=True, rows=rows, row_errors=row_errors)

    def _tokenize(self, content: Union[bytes, str]):
        if isinstance(content, bytes):
            try:
                text = content.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise CsvParseError(f"file is not valid UTF-8 ({e})") from e
        else:
            text = content.lstrip("\ufeff")

        reader = csv.reader(io.StringIO(text, newline=""), delimiter=self.delimiter, strict=True)
        header: List[str] = []
        data_rows: List[List[str]] = []
        try:
            for fields in reader:
                if not fields:
                    continue
                if not header:
                    header = [_clean_header(name) for name in fields]
                    continue
                data_rows.append(self._fit_to_header(fields, header, len(data_rows) + 1))
        except csv.Error as e:
            raise CsvParseError(f"{e} (line {reader.line_num})") from e

        return header, data_rows

    @staticmethod
    def _fit_to_header(fields: List[str], header: Sequence[str], row_no: int) -> List[str]:
        expected = len(header)
        if len(fields) > expected:
            if not _is_blank(fields[expected:]):
                raise CsvParseError(
                    f"Too many fields: expected {expected} fields but parsed {len(fields)} (row {row_no})"
                )
            return fields[:expected]
        if len(fields) < expected and not _is_blank(fields):
            raise CsvParseError(
                f"Too few fields: expected {expected} fields but parsed {len(fields)} (row {row_no})"
            )
        return fields
