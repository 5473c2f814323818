"""Keyword categorisation of transaction descriptions.

The category table is an ordered, immutable tuple of ``CategoryRule``.
Order matters: keyword sets overlap ("amazon prime" vs "amazon") and the
first matching rule wins. Callers may pass their own table, e.g. one loaded
from CSV with ``load_category_table``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

GROCERIES = "Groceries"
DINING = "Dining Out"
ENTERTAINMENT = "Entertainment"
UTILITIES = "Utilities"
TRANSPORT = "Transport"
HEALTH = "Healthcare"
EDUCATION = "Education"
SHOPPING = "Shopping"
TRAVEL = "Travel"
RENT = "Rent/Housing"
INVESTMENTS = "Investments"
INSURANCE = "Insurance"
OTHERS = "Others"

DEFAULT_COLOR = "#CCCCCC"


@dataclass(frozen=True)
class CategoryRule:
    category: str
    keywords: tuple[str, ...]
    color: str = DEFAULT_COLOR


CATEGORY_TABLE: tuple[CategoryRule, ...] = (
    CategoryRule(GROCERIES, ("bigbasket", "grofer", "dmart", "grocery"), "#FF9F6B"),
    CategoryRule(DINING, ("swiggy", "zomato", "restaurant", "cafe"), "#FFC857"),
    CategoryRule(ENTERTAINMENT, ("netflix", "amazon prime", "hotstar", "movie", "bookmyshow"), "#58C7B4"),
    CategoryRule(UTILITIES, ("electricity", "water", "gas", "broadband", "jio", "airtel"), "#6E59A5"),
    CategoryRule(TRANSPORT, ("uber", "ola", "metro", "petrol", "diesel", "train"), "#E5DEFF"),
    CategoryRule(HEALTH, ("hospital", "pharmacy", "doctor", "apollo", "medplus"), "#A9DEF9"),
    CategoryRule(EDUCATION, ("school", "college", "tuition", "course", "fee"), "#D4A5A5"),
    CategoryRule(SHOPPING, ("myntra", "amazon", "flipkart", "mall", "retail"), "#77DD77"),
    CategoryRule(TRAVEL, ("hotel", "flight", "makemytrip", "yatra", "travel"), "#FFD4B8"),
    CategoryRule(RENT, ("rent", "housing", "apartment", "maintenance"), "#CFBAF0"),
    CategoryRule(INVESTMENTS, ("mutual fund", "stock", "zerodha", "groww", "investment"), "#B4F8C8"),
    CategoryRule(INSURANCE, ("insurance", "lic", "policy"), "#FBE7C6"),
    CategoryRule(OTHERS, (), "#FFAEBC"),
)


def _fallback_category(table) -> str:
    for rule in table:
        if not rule.keywords:
            return rule.category
    return OTHERS


def categorise_transaction(description: str, table=CATEGORY_TABLE) -> str:
    """Return the first category whose keywords occur in ``description``."""
    low = (description or "").lower()
    for rule in table:
        if any(k in low for k in rule.keywords):
            return rule.category
    return _fallback_category(table)


def category_color(category: str, table=CATEGORY_TABLE) -> str:
    for rule in table:
        if rule.category == category:
            return rule.color
    return DEFAULT_COLOR


# ----------------------------
# Category tables from CSV
# ----------------------------

def _read_table_csv(path: str, pd):
    encodings = ["utf-8-sig", "utf-8", "cp1252", "latin1"]
    last_err = None
    for enc in encodings:
        try:
            return pd.read_csv(path, encoding=enc, dtype=str, keep_default_na=False)
        except UnicodeDecodeError as e:
            last_err = e
    raise ValueError(f"Could not decode category table '{path}': {last_err}")


def _as_bool(v, default: bool = True) -> bool:
    s = str(v if v is not None else "").strip().lower()
    if s in {"", "nan"}:
        return default
    if s in {"true", "1", "yes", "y", "on"}:
        return True
    if s in {"false", "0", "no", "n", "off"}:
        return False
    return default


def _as_priority(v) -> int:
    try:
        s = str(v if v is not None else "").strip()
        if not s or s.lower() == "nan":
            return 9999
        return int(float(s))
    except ValueError:
        return 9999


def load_category_table(path: str) -> tuple[CategoryRule, ...]:
    """Build a category table from a CSV file.

    Columns: ``Category``, ``Keywords`` (``;``-separated), optional
    ``Color``, ``Priority`` (lower first; file order otherwise) and
    ``Active``. A keyword-less catch-all ``Others`` rule is appended when
    the file does not define one.
    """
    import pandas as pd

    df = _read_table_csv(path, pd)
    if "Category" not in df.columns or "Keywords" not in df.columns:
        raise ValueError(f"Category table '{path}' needs 'Category' and 'Keywords' columns")

    records = []
    for idx, row in df.iterrows():
        if not _as_bool(row.get("Active"), default=True):
            continue
        category = str(row.get("Category", "")).strip()
        if not category or category.lower() == "nan":
            continue
        keywords = tuple(
            k.strip().lower() for k in str(row.get("Keywords", "")).split(";") if k.strip()
        )
        color = str(row.get("Color", "") or "").strip() or DEFAULT_COLOR
        records.append((_as_priority(row.get("Priority")), idx, CategoryRule(category, keywords, color)))

    records.sort(key=lambda r: (r[0], r[1]))
    rules = [r[2] for r in records]
    if not any(not r.keywords for r in rules):
        rules.append(CategoryRule(OTHERS, (), category_color(OTHERS)))

    logger.info("Loaded %d category rules from %s", len(rules), path)
    return tuple(rules)
