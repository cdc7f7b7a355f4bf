"""
Belfius - field normalizers.

Responsibility:
- Turn locale-bearing strings from a Belfius export into canonical values:
  - dates "DD/MM/YYYY" -> "YYYY-MM-DD"
  - amounts with a decimal comma -> float
  - "2600  BERCHEM" -> (postal code, city)
  - free-text communications -> reference number

Design notes:
- Pure functions: no IO, no logging, no global state.
- Every normalizer returns None for input it cannot interpret; deciding
  whether that is an error is the row mapper's job.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

_DATE_PART = re.compile(r"\d+", re.ASCII)
_AMOUNT_NOISE = re.compile(r"[^\d,.\-]", re.ASCII)
_POSTAL_CODE_CITY = re.compile(r"^(\d+)\s+(.+)$", re.DOTALL)
_REF_MARKER = re.compile(r"REF\.\s*:\s*(\S+)")
_PAYCONIQ_MARKER = re.compile(r"Payconiq\s+([a-f0-9]+)")


class PostalCodeCity(NamedTuple):
    postal_code: Optional[str]
    city: Optional[str]


def parse_date(value: Optional[str]) -> Optional[str]:
    """
    Parse a "DD/MM/YYYY" date into "YYYY-MM-DD".

    Only the ranges day 1..31 and month 1..12 are checked; "31/02/2024"
    comes back as "2024-02-31". Calendar validity is enforced where the
    value is stored.
    """
    if not value or not value.strip():
        return None

    parts = value.strip().split("/")
    if len(parts) != 3:
        return None

    stripped = [p.strip() for p in parts]
    if not all(_DATE_PART.fullmatch(p) for p in stripped):
        return None

    day, month, year = (int(p) for p in stripped)
    if day < 1 or day > 31 or month < 1 or month > 12:
        return None

    return f"{year:04d}-{month:02d}-{day:02d}"


def parse_amount(value: Optional[str]) -> Optional[float]:
    """
    Parse a Belgian amount ("-1234,56", "12,30 EUR") into a float.

    Everything except digits, ",", "." and "-" is dropped, then the first
    comma becomes the decimal point. Thousands separators are not
    understood: "1.234,56" has two decimal points after cleaning and
    returns None.
    """
    if not value or not value.strip():
        return None

    cleaned = _AMOUNT_NOISE.sub("", value).replace(",", ".", 1)
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_postal_code_city(value: Optional[str]) -> PostalCodeCity:
    if not value or not value.strip():
        return PostalCodeCity(None, None)

    text = value.strip()
    match = _POSTAL_CODE_CITY.match(text)
    if match:
        return PostalCodeCity(match.group(1).strip(), match.group(2).strip())

    return PostalCodeCity(None, text)


def extract_reference(description: Optional[str]) -> Optional[str]:
    """First "REF. : <token>" in the text, else "Payconiq <hex>", else None."""
    if not description:
        return None

    ref_match = _REF_MARKER.search(description)
    if ref_match:
        return ref_match.group(1)

    payconiq_match = _PAYCONIQ_MARKER.search(description)
    if payconiq_match:
        return payconiq_match.group(1)

    return None
