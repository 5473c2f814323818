# axis-1.0.py
"""Axis-style (India) savings account statement parser (text layer only; NO OCR).

Layout: Tran Date | Chq No | Particulars | Debit | Credit | Balance, with the
table columns flattened into one text line per row.

Exports:
- extract_transactions(lines, skipped=None) -> list[dict]

Transaction dict keys (exact):
- Date (datetime.date)
- Description (string)
- Amount (float; credits positive, debits negative)
- Balance (float or None)
- Transaction Type ("Debit" or "Credit")
- Direction Rule (name of the rule that decided the sign)

Notes:
- Rows without any amount are not transactions and are skipped.
- A row whose only figure is a balance (opening/closing balance lines, or a
  bare date + number) is skipped.
- Skipped candidate rows are reported through ``skipped`` as
  {"line_no", "line", "reason"} dicts.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

_HEADER_KEYWORDS = ("transaction date", "particulars", "debit", "credit", "balance")
_HEADER_MIN_HITS = 3

_DATE_RE = re.compile(r"(?<!\d)(\d{1,2})[-/](\d{1,2})[-/](\d{2,4})(?!\d)")
_LEADING_REF_RE = re.compile(r"^\d{6,}\s+")
_LEADING_VALUE_DATE_RE = re.compile(r"^\d{1,2}[-/]\d{1,2}[-/]\d{2,4}\s+")
# Western (1,234,567.89) and Indian (12,34,567.89) digit grouping; always two decimals.
_AMOUNT_RE = re.compile(r"(?<![\d.,])(?:\d{1,3}(?:,\d{2,3})+|\d+)\.\d{2}(?![\d])")

_DEBIT_RE = re.compile(r"\b(?:debit|withdrawal|payment)|\batm\b|upi/p2m", re.IGNORECASE)
_CREDIT_RE = re.compile(r"\b(?:credit|deposit|salary|refund)", re.IGNORECASE)
_PURCHASE_RE = re.compile(
    r"\b(?:upi|pos|purchase|bill|emi|ecom|imps|neft)\b|\btransfer to\b",
    re.IGNORECASE,
)
_BALANCE_ONLY_RE = re.compile(
    r"^(?:opening|closing)\s+balance|^balance\b|brought\s+forward|carried\s+forward|^b/f$|^c/f$|^total\b",
    re.IGNORECASE,
)

_PLACEHOLDER = "Unknown Transaction"
_BALANCE_TOLERANCE = 0.01


# -----------------------------
# Helpers
# -----------------------------

def _parse_money(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    s = value.replace(",", "").strip()
    try:
        return float(s)
    except ValueError:
        return None


def _parse_date(day: str, month: str, year: str) -> date:
    if len(year) == 3:
        raise ValueError(f"ambiguous year '{year}'")
    y = int(year)
    if len(year) == 2:
        y += 2000
    return date(y, int(month), int(day))


def _is_header(line: str) -> bool:
    low = line.lower()
    return sum(1 for k in _HEADER_KEYWORDS if k in low) >= _HEADER_MIN_HITS


def _find_table_start(lines: list[str]) -> int:
    for i, line in enumerate(lines):
        if _is_header(line):
            return i + 1
    return 0


def _direction_from_keywords(description: str) -> Optional[str]:
    if _DEBIT_RE.search(description):
        return "Debit"
    if _CREDIT_RE.search(description):
        return "Credit"
    return None


def _resolve_direction(
    description: str,
    amounts: list[float],
    previous_balance: Optional[float] = None,
) -> tuple[float, str, Optional[float]]:
    """Decide the signed amount of a row.

    Rules, first match wins:
    1. keyword  - direction words in the description; magnitude = first amount
    2. column   - with 2+ amounts, a zero-filled debit or credit column
       balance  - with 2+ amounts, the move from the previous running balance
       purchase - with 2+ amounts, purchase/payment wording means debit
       detected - with 2+ amounts, the first amount as printed
    3. default  - a single amount with no direction words is a credit

    Returns (signed amount, rule name, running balance or None).
    """
    first = amounts[0]
    balance = amounts[-1] if len(amounts) >= 2 else None

    keyword = _direction_from_keywords(description)
    if keyword == "Debit":
        return -abs(first), "keyword", balance
    if keyword == "Credit":
        return abs(first), "keyword", balance

    if len(amounts) >= 2:
        if len(amounts) >= 3:
            debit_col, credit_col = amounts[0], amounts[1]
            if debit_col == 0 and credit_col != 0:
                return abs(credit_col), "column", balance
            if credit_col == 0 and debit_col != 0:
                return -abs(debit_col), "column", balance

        if previous_balance is not None and balance is not None:
            if abs((previous_balance - first) - balance) <= _BALANCE_TOLERANCE:
                return -abs(first), "balance", balance
            if abs((previous_balance + first) - balance) <= _BALANCE_TOLERANCE:
                return abs(first), "balance", balance

        if _PURCHASE_RE.search(description):
            return -abs(first), "purchase", balance
        return first, "detected", balance

    return abs(first), "default", None


# -----------------------------
# Public API
# -----------------------------

def extract_transactions(lines: list[str], skipped: Optional[list] = None) -> list[dict]:
    transactions: list[dict] = []
    if skipped is None:
        skipped = []

    previous_balance: Optional[float] = None
    for line_no in range(_find_table_start(lines), len(lines)):
        line = (lines[line_no] or "").strip()
        m = _DATE_RE.search(line)
        if not m:
            continue

        try:
            tx_date = _parse_date(m.group(1), m.group(2), m.group(3))
        except ValueError:
            skipped.append({"line_no": line_no, "line": line, "reason": f"invalid date '{m.group(0)}'"})
            continue

        rest = (line[: m.start()] + " " + line[m.end():]).strip()
        rest = _LEADING_VALUE_DATE_RE.sub("", rest)
        rest = _LEADING_REF_RE.sub("", rest)

        amount_matches = list(_AMOUNT_RE.finditer(rest))
        if not amount_matches:
            skipped.append({"line_no": line_no, "line": line, "reason": "no amount"})
            continue

        amounts = [_parse_money(a.group(0)) for a in amount_matches]
        if any(a is None for a in amounts):
            skipped.append({"line_no": line_no, "line": line, "reason": "unparseable amount"})
            continue

        description = re.sub(r"\s+", " ", rest[: amount_matches[0].start()]).strip()

        if _BALANCE_ONLY_RE.search(description) or (len(amounts) == 1 and not description):
            if len(amounts) == 1:
                previous_balance = amounts[0]
            skipped.append({"line_no": line_no, "line": line, "reason": "balance only"})
            continue

        amount, rule, balance = _resolve_direction(description, amounts, previous_balance)
        if balance is not None:
            previous_balance = balance

        transactions.append(
            {
                "Date": tx_date,
                "Description": description or _PLACEHOLDER,
                "Amount": amount,
                "Balance": balance,
                "Transaction Type": "Debit" if amount < 0 else "Credit",
                "Direction Rule": rule,
            }
        )

    transactions.sort(key=lambda t: t["Date"])
    return transactions
