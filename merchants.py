"""Merchant names from raw statement descriptions.

UPI and IMPS descriptions carry slash-delimited payment metadata
(``UPI/P2M/<payee>/<ref>/...``); the payee is picked out of those segments.
Free text falls back to a capitalised two-word name, then to the leading
words of the description.
"""

from __future__ import annotations

import re

UNKNOWN_MERCHANT = "Unknown Merchant"

KNOWN_MERCHANTS = (
    "bigbasket",
    "swiggy",
    "zomato",
    "amazon",
    "flipkart",
    "netflix",
    "airtel",
    "jio",
    "uber",
    "ola",
    "apollo",
    "myntra",
    "bookmyshow",
    "makemytrip",
    "dmart",
    "paytm",
    "phonepe",
    "hotstar",
    "reliance",
)

# Scheme, flow and channel codes that appear between payment-reference slashes.
_SCHEME_CODES = {
    "UPI", "IMPS", "NEFT", "RTGS", "P2M", "P2A", "P2P", "MB", "IB", "MOB", "INB",
    "DR", "CR", "PAY", "COLLECT", "INTENT",
}

_UPI_RE = re.compile(r"\bUPI\s*/", re.IGNORECASE)
_IMPS_RE = re.compile(r"\bIMPS\s*/", re.IGNORECASE)
_NAME_RE = re.compile(r"\b([A-Z][a-z]+ [A-Z][a-z]+)\b")
_REF_LIKE_RE = re.compile(r"^(?=.*\d)[A-Za-z0-9]{6,}$")


def _is_known(segment: str) -> bool:
    low = segment.lower()
    return any(k in low for k in KNOWN_MERCHANTS)


def _is_candidate(segment: str) -> bool:
    if not segment or not any(ch.isalpha() for ch in segment):
        return False
    if segment.upper() in _SCHEME_CODES:
        return False
    if "@" in segment or _REF_LIKE_RE.match(segment):
        return False
    return not segment.isupper()


def _from_reference(text: str, start: int, fallback_index: int) -> str:
    segments = [s.strip() for s in text[start:].split("/")]
    for seg in segments[1:]:
        if "@" in seg:
            # Payment address: only the handle of a known merchant is a name.
            handle = seg.split("@", 1)[0].strip()
            if handle and _is_known(handle):
                return handle
            continue
        if seg and (_is_known(seg) or _is_candidate(seg)):
            return seg

    names = [s if "@" not in s else "" for s in segments]
    if len(names) > fallback_index and any(ch.isalpha() for ch in names[fallback_index]):
        return names[fallback_index]
    named = [s for s in names[1:] if any(ch.isalpha() for ch in s) and s.upper() not in _SCHEME_CODES]
    if named:
        return named[0]
    return next((s for s in reversed(segments) if s), "")


def resolve_merchant(description: str) -> str:
    """Return a short merchant name for a description (never empty)."""
    desc = re.sub(r"\s+", " ", description or "").strip()
    if not desc:
        return UNKNOWN_MERCHANT

    m = _UPI_RE.search(desc)
    if m:
        merchant = _from_reference(desc, m.start(), fallback_index=2)
        if merchant:
            return merchant

    m = _IMPS_RE.search(desc)
    if m:
        merchant = _from_reference(desc, m.start(), fallback_index=3)
        if merchant:
            return merchant

    m = _NAME_RE.search(desc)
    if m:
        return m.group(1)

    return " ".join(desc.split(" ")[:3])
