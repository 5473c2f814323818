# generic.py
"""Format-agnostic statement parser used when no bank-specific parser fits.

Exports:
- extract_transactions(lines, skipped=None) -> list[dict]

Transaction dict keys match the bank parsers (Date, Description, Amount,
Balance, Transaction Type, Direction Rule). Balance is always None here.

One row per line: a loose date, a single amount, and whatever text is left
over as the description. Lines whose date or amount cannot be parsed are
reported through ``skipped`` and dropped.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

_HEADER_RE = re.compile(
    r"^(?=.*?\b(?:date|dt)\b)"
    r"(?=.*?\b(?:description|particulars|details|narration|remarks|transaction)\b)"
    r"(?=.*?\b(?:amount|debit|credit|withdrawals?|deposits?|amt)\b)",
    re.IGNORECASE,
)
_DATE_RE = re.compile(r"(?<!\d)(\d{4}[-/]\d{1,2}[-/]\d{1,2}|\d{1,2}[-/]\d{1,2}[-/]\d{2,4})(?!\d)")
_DECIMAL_AMOUNT_RE = re.compile(r"(?<![\w.,])[-+]?(?:\d{1,3}(?:,\d{2,3})+|\d+)\.\d{2}(?![\d])")
_AMOUNT_RE = re.compile(r"(?<![\w.,])[-+]?(?:\d{1,3}(?:,\d{2,3})+|\d+)(?:\.\d{2})?(?![\d.,])")
_MARKER_RE = re.compile(r"^\s*\(?(dr|cr)\b\)?\.?", re.IGNORECASE)
_DEBIT_RE = re.compile(r"\b(?:debit|withdrawal|payment|purchase)|\batm\b|upi/p2m", re.IGNORECASE)

_PLACEHOLDER = "Unknown Transaction"


def _find_table_start(lines: list[str]) -> int:
    for i, line in enumerate(lines):
        if _HEADER_RE.search(line or ""):
            return i + 1
    return 0


def normalise_date(value: str) -> date:
    """Parse a loose date by looking at which end holds the 4-digit year.

    ``YYYY-MM-DD`` when the first segment has four digits, ``DD-MM-YYYY``
    when the last one does, otherwise ``DD-MM-YY`` in the 2000s.
    """
    parts = re.split(r"[-/]", value.strip())
    if len(parts) != 3:
        raise ValueError(f"not a date: {value!r}")
    if len(parts[0]) == 4:
        y, m, d = parts
    elif len(parts[2]) == 4:
        d, m, y = parts
    elif len(parts[2]) == 2:
        d, m, y = parts[0], parts[1], "20" + parts[2]
    else:
        raise ValueError(f"ambiguous year in {value!r}")
    return date(int(y), int(m), int(d))


def _parse_amount(token: str) -> float:
    return float(token.replace(",", "").replace("+", ""))


def extract_transactions(lines: list[str], skipped: Optional[list] = None) -> list[dict]:
    transactions: list[dict] = []
    if skipped is None:
        skipped = []

    for line_no in range(_find_table_start(lines), len(lines)):
        line = (lines[line_no] or "").strip()
        dm = _DATE_RE.search(line)
        if not dm:
            continue

        rest = (line[: dm.start()] + " " + line[dm.end():]).strip()
        am = _DECIMAL_AMOUNT_RE.search(rest) or _AMOUNT_RE.search(rest)
        if not am:
            continue

        try:
            tx_date = normalise_date(dm.group(1))
            amount = _parse_amount(am.group(0))
        except ValueError as e:
            skipped.append({"line_no": line_no, "line": line, "reason": str(e)})
            continue

        tail = rest[am.end():]
        marker = _MARKER_RE.match(tail)
        if marker:
            tail = tail[marker.end():]
        # Trailing figures are balance/secondary columns, not description text.
        tail = _DECIMAL_AMOUNT_RE.sub(" ", tail)
        description = re.sub(r"\s+", " ", rest[: am.start()] + " " + tail).strip()

        token = am.group(0)
        if token.startswith(("-", "+")):
            rule = "sign"
        elif marker:
            amount = -abs(amount) if marker.group(1).lower() == "dr" else abs(amount)
            rule = "marker"
        elif _DEBIT_RE.search(description):
            amount = -abs(amount)
            rule = "keyword"
        else:
            rule = "detected"

        transactions.append(
            {
                "Date": tx_date,
                "Description": description or _PLACEHOLDER,
                "Amount": amount,
                "Balance": None,
                "Transaction Type": "Debit" if amount < 0 else "Credit",
                "Direction Rule": rule,
            }
        )

    transactions.sort(key=lambda t: t["Date"])
    return transactions
