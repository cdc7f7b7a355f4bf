# tools/generate_demo_csv.py
from __future__ import annotations

import argparse
import csv
import random
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import List

HEADER = [
    "Rekening",
    "Boekingsdatum",
    "Rekeninguittrekselnummer",
    "Transactienummer",
    "Rekening tegenpartij",
    "Naam tegenpartij bevat",
    "Straat en nummer",
    "Postcode en plaats",
    "Transactie",
    "Valutadatum",
    "Bedrag",
    "Devies",
    "BIC",
    "Landcode",
    "Mededelingen",
]


@dataclass(frozen=True)
class Counterpart:
    name: str
    account: str
    street: str
    postal_city: str
    bic: str
    min_amt: float
    max_amt: float
    sign: int  # -1 debit, +1 credit
    kind: str


COUNTERPARTS: List[Counterpart] = [
    Counterpart("ACME BV", "BE71096123456769", "Kerkstraat 1", "2600  BERCHEM", "GKCCBEBB", 1800, 3200, +1, "Overschrijving"),
    Counterpart("DELHAIZE", "BE45310180855089", "Rue Osseghem 53", "1080  BRUSSEL", "BBRUBEBB", 15, 180, -1, "Betaling Bancontact"),
    Counterpart("ENGIE", "BE03310147285684", "Simon Bolivarlaan 36", "1000  BRUSSEL", "BBRUBEBB", 60, 240, -1, "Domiciliering"),
    Counterpart("PROXIMUS", "BE88000325448041", "Koning Albert II-laan 27", "1030  SCHAARBEEK", "BPOTBEB1", 40, 90, -1, "Domiciliering"),
    Counterpart("CAFE DE KROON", "", "", "ANTWERPEN", "", 3, 25, -1, "Payconiq"),
]

ACCOUNTS = ["BE68539007547034", "BE62510007547061"]


def daterange(start: date, end: date):
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)


def belgian_amount(value: float) -> str:
    return f"{value:.2f}".replace(".", ",")


def belgian_date(d: date) -> str:
    return d.strftime("%d/%m/%Y")


def generate(start: date, end: date, seed: int = 7, bad_rows: int = 0) -> List[List[str]]:
    rng = random.Random(seed)
    rows: List[List[str]] = []
    sequence = 0

    for d in daterange(start, end):
        for _ in range(rng.randint(0, 2)):
            sequence += 1
            cp = rng.choice(COUNTERPARTS)
            amount = round(rng.uniform(cp.min_amt, cp.max_amt), 2) * cp.sign
            if cp.kind == "Payconiq":
                message = f"Payconiq {rng.getrandbits(48):012x} {cp.name}"
            else:
                message = f"{cp.kind.upper()} {cp.name} REF. : {d.year}{sequence:08d}"
            rows.append(
                [
                    rng.choice(ACCOUNTS),
                    belgian_date(d),
                    f"{d.month:03d}",
                    f"{d.year}-{sequence:05d}",
                    cp.account,
                    cp.name,
                    cp.street,
                    cp.postal_city,
                    cp.kind,
                    belgian_date(d),
                    belgian_amount(amount),
                    "EUR",
                    cp.bic,
                    "BE" if cp.account else "",
                    message,
                ]
            )

    # Sprinkle rows that the importer must report as row errors.
    for row in rng.sample(rows, min(bad_rows, len(rows))):
        row[10] = "n/a"

    return rows


def write_csv(path: Path, rows: List[List[str]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f, delimiter=";")
        w.writerow(HEADER)
        for r in rows:
            w.writerow(r)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Write a synthetic Belfius CSV export.")
    parser.add_argument("--out", default="demo_belfius.csv")
    parser.add_argument("--start", default="2025-01-01")
    parser.add_argument("--end", default="2025-03-31")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--bad-rows", type=int, default=0)
    args = parser.parse_args()

    out = Path(args.out)
    rows = generate(
        start=date.fromisoformat(args.start),
        end=date.fromisoformat(args.end),
        seed=args.seed,
        bad_rows=args.bad_rows,
    )
    write_csv(out, rows)
    print(f"Wrote {len(rows)} rows to {out}")
