from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

FORMATS = ["axis", "generic"]


@dataclass
class Txn:
    d: date
    desc: str
    amount: float


_AXIS_ROWS = [
    ("UPI/P2M/ZOMATO/410233118842", -450.00),
    ("NEFT/SALARY/ACME TECHNOLOGIES", 52000.00),
    ("ATM-CASH/AXIS BANK MG ROAD", -2000.00),
    ("UPI/P2A/412398877123/Ravi Kumar/HDFC", -1200.00),
    ("BIGBASKET ORDER 88213", -1875.50),
    ("IMPS/P2A/412300011122/Anita Desai/SBIN", 3000.00),
    ("ACH/ZERODHA BROKING", -5000.00),
]

_GENERIC_ROWS = [
    ("Grocery store purchase", -1250.00),
    ("Interest received", 85.25),
    ("Electricity bill", -2310.00),
    ("Cafe Mocha", -320.00),
    ("Cash deposit", 10000.00),
]


def _mk_txns(rows: list[tuple[str, float]], start: date, seed: int) -> list[Txn]:
    rng = random.Random(seed)
    txns = []
    day = start
    for desc, amount in rows:
        day = day + timedelta(days=rng.randint(1, 3))
        txns.append(Txn(day, desc, round(amount, 2)))
    return txns


def _write_axis_pdf(path: Path, txns: list[Txn], opening: float, ps: date) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    c = canvas.Canvas(str(path), pagesize=A4)
    c.setFont("Courier", 8)

    c.drawString(36, 810, "AXIS BANK")
    c.drawString(36, 798, "Statement of Account No : 912010000000000 for the period")
    c.drawString(36, 786, "TEST CUSTOMER")

    # Fixed-x table columns so rows come back as positioned words.
    x_date = 36
    x_desc = 100
    x_debit = 330
    x_credit = 400
    x_bal = 480

    y = 760
    c.drawString(x_date, y, "Tran Date")
    c.drawString(x_desc, y, "Particulars")
    c.drawString(x_debit, y, "Debit")
    c.drawString(x_credit, y, "Credit")
    c.drawString(x_bal, y, "Balance")

    y -= 14
    c.drawString(x_date, y, f"{ps:%d-%m-%Y}")
    c.drawString(x_desc, y, "OPENING BALANCE")
    c.drawString(x_bal, y, f"{opening:.2f}")

    bal = opening
    for t in txns:
        y -= 14
        bal = round(bal + t.amount, 2)
        c.drawString(x_date, y, f"{t.d:%d-%m-%Y}")
        c.drawString(x_desc, y, t.desc)
        if t.amount < 0:
            c.drawString(x_debit, y, f"{abs(t.amount):.2f}")
        else:
            c.drawString(x_credit, y, f"{t.amount:.2f}")
        c.drawString(x_bal, y, f"{bal:.2f}")

    y -= 14
    c.drawString(x_desc, y, f"CLOSING BALANCE {bal:.2f}")
    c.save()


def _write_pdf(path: Path, lines: Iterable[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    c = canvas.Canvas(str(path), pagesize=A4)
    c.setFont("Courier", 10)
    y = 810
    for line in lines:
        c.drawString(36, y, line)
        y -= 14
        if y < 70:
            c.showPage()
            c.setFont("Courier", 10)
            y = 810
    c.save()


def _generic_lines(txns: list[Txn]) -> list[str]:
    lines = ["ACCOUNT ACTIVITY", "Date Description Amount"]
    for t in txns:
        lines.append(f"{t.d:%Y/%m/%d} {t.desc:<28} {t.amount:,.2f}")
    return lines


def generate_all(out_dir: str = "tests/fixtures_synthetic", seed: int = 1) -> dict[str, list[Txn]]:
    """Write one synthetic statement per format; return the rows written."""
    root = Path(out_dir)
    written: dict[str, list[Txn]] = {}

    start = date(2024, 4, 1)
    txns = _mk_txns(_AXIS_ROWS, start, seed)
    _write_axis_pdf(root / "axis" / "statement_a.pdf", txns, 25000.00, start)
    written["axis"] = txns

    txns = _mk_txns(_GENERIC_ROWS, date(2024, 5, 1), seed + 1)
    _write_pdf(root / "generic" / "statement_a.pdf", _generic_lines(txns))
    written["generic"] = txns

    return written


if __name__ == "__main__":
    generate_all()
