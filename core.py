# Version: 1.0
import glob
import importlib.util
import io
import json
import logging
import mimetypes
import os
import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Protocol

import categorisation
import merchants

logger = logging.getLogger(__name__)

_PDFPLUMBER_CACHE = None


# ----------------------------
# CONFIG (edit these as needed)
# ----------------------------

PARSERS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "Parsers")
LOGS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "Logs")
PDF_MIME_TYPE = "application/pdf"

# Vertical distance (PDF units) within which positioned fragments share a row.
ROW_TOLERANCE = 5.0

# Strategies in priority order; the first is the primary extractor.
PARSER_ORDER = ["axis", "generic"]

# Fewer primary records than this triggers the fallback strategies.
MIN_PRIMARY_RECORDS = 2


# ----------------------------
# Errors
# ----------------------------

class StatementError(Exception):
    """Base class for terminal statement-processing failures."""


class InvalidInputFormat(StatementError, ValueError):
    pass


class ExtractionFailure(StatementError, RuntimeError):
    pass


class NoTransactionsFound(StatementError):
    """Raised when no strategy produced a record.

    ``states`` and ``skipped`` carry the pipeline trail of the failed run.
    """

    def __init__(
        self,
        message: str = "No transactions found: unsupported statement format",
        states=None,
        skipped=None,
    ):
        super().__init__(message)
        self.states = list(states or [])
        self.skipped = list(skipped or [])


# ----------------------------
# Records
# ----------------------------

@dataclass(frozen=True)
class TextFragment:
    """A piece of page text positioned in PDF space (y grows upwards)."""

    text: str
    x: float
    y: float


@dataclass
class Transaction:
    id: str
    date: str
    description: str
    amount: float
    merchant: str
    category: str

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class LineParseSkip:
    """A candidate line dropped by a parser. Recorded, never raised."""

    parser: str
    line_no: int
    line: str
    reason: str


class ExtractionState(Enum):
    EXTRACTING_PRIMARY = "ExtractingPrimary"
    EXTRACTING_FALLBACK = "ExtractingFallback"
    POST_PROCESSING = "PostProcessing"
    DONE = "Done"
    FAILED = "Failed"


@dataclass
class ExtractionResult:
    transactions: list[Transaction]
    parser: str | None
    skipped: list[LineParseSkip] = field(default_factory=list)
    states: list[ExtractionState] = field(default_factory=list)

    @property
    def state(self) -> ExtractionState:
        return self.states[-1] if self.states else ExtractionState.DONE

    @property
    def used_fallback(self) -> bool:
        return ExtractionState.EXTRACTING_FALLBACK in self.states


# ----------------------------
# Utilities
# ----------------------------

def ensure_folder(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def _require_pdfplumber():
    global _PDFPLUMBER_CACHE
    if _PDFPLUMBER_CACHE is not None:
        return _PDFPLUMBER_CACHE
    try:
        import pdfplumber
    except ImportError as e:
        raise ExtractionFailure(
            "pdfplumber is required for PDF text extraction.\n\n"
            "Install it with:\n"
            "  python -m pip install pdfplumber\n\n"
            f"Original error: {e}"
        ) from e
    _PDFPLUMBER_CACHE = pdfplumber
    return pdfplumber


def is_pdf(mime_type: str | None) -> bool:
    return (mime_type or "") == PDF_MIME_TYPE


def _write_log_json(prefix: str, obj) -> str | None:
    try:
        ensure_folder(LOGS_DIR)
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = os.path.join(LOGS_DIR, f"{prefix}_{ts}.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(obj, f, indent=2, ensure_ascii=False, default=str)
        return path
    except OSError as e:
        logger.warning("Could not write log file for %s: %s", prefix, e)
        return None


def write_diagnostics_log(result: ExtractionResult, source: str = "") -> str | None:
    """Dump the parser choice and skipped lines of a run to LOGS_DIR."""
    return _write_log_json(
        "extraction",
        {
            "source": source,
            "parser": result.parser,
            "state": result.state.value,
            "transaction_count": len(result.transactions),
            "skipped": [asdict(s) for s in result.skipped],
        },
    )


# ----------------------------
# Text extraction
# ----------------------------

class TextExtractor(Protocol):
    """Turns document bytes into page text, one page at a time.

    Pages are yielded in document order, either as flat text or as
    positioned fragments. An OCR-backed extractor can be slotted in here
    without touching the parsers.
    """

    def extract_pages(self, data: bytes) -> Iterator[str | list[TextFragment]]:
        ...


class PdfplumberTextExtractor:
    """Reads the text layer of a PDF with pdfplumber (no OCR)."""

    def __init__(self, password: str | None = None):
        self.password = password

    def extract_pages(self, data: bytes) -> Iterator[str | list[TextFragment]]:
        pdfplumber = _require_pdfplumber()
        try:
            pdf = pdfplumber.open(io.BytesIO(data), password=self.password)
        except Exception as e:
            raise ExtractionFailure(
                f"Could not read PDF: {e}. Check that the file is a valid, uncorrupted PDF."
            ) from e

        with pdf:
            try:
                pages = pdf.pages
            except Exception as e:
                raise ExtractionFailure(
                    f"Could not read PDF pages: {e}. Check that the file is a valid, uncorrupted PDF."
                ) from e

            for page_no, page in enumerate(pages, start=1):
                try:
                    words = page.extract_words() or []
                    if words:
                        height = float(page.height)
                        yield [
                            TextFragment(
                                text=w.get("text", ""),
                                x=float(w.get("x0", 0)),
                                y=height - float(w.get("bottom", 0)),
                            )
                            for w in words
                            if w.get("text")
                        ]
                        continue
                    yield page.extract_text() or ""
                except Exception as e:
                    raise ExtractionFailure(
                        f"Could not extract text from page {page_no}: {e}. "
                        "Check that the file is a valid, uncorrupted PDF."
                    ) from e


# ----------------------------
# Text normalisation
# ----------------------------

_WS_RE = re.compile(r"\s+")


def _collapse(text: str) -> str:
    return _WS_RE.sub(" ", text or "").strip()


def _group_fragments_into_lines(fragments: Sequence[TextFragment], tol: float) -> list[str]:
    ordered = sorted(fragments, key=lambda f: (-f.y, f.x))
    rows: list[list[TextFragment]] = []
    current: list[TextFragment] = []
    current_y: float | None = None

    for frag in ordered:
        if current_y is None or abs(frag.y - current_y) <= tol:
            current.append(frag)
            current_y = frag.y
        else:
            rows.append(current)
            current = [frag]
            current_y = frag.y

    if current:
        rows.append(current)

    lines = []
    for row in rows:
        row.sort(key=lambda f: f.x)
        lines.append(" ".join(f.text for f in row))
    return lines


def normalise_page(page: str | Sequence[TextFragment], tolerance: float = ROW_TOLERANCE) -> list[str]:
    """Reconstruct reading-order lines for one page.

    Positioned fragments are grouped into rows top-to-bottom and ordered
    left-to-right within a row; flat text is split on newlines. Lines are
    whitespace-collapsed and empty lines dropped. Column alignment of
    overlapping table rows is not guaranteed.
    """
    if isinstance(page, str):
        raw_lines = page.splitlines()
    else:
        raw_lines = _group_fragments_into_lines(list(page), tolerance)

    lines = []
    for raw in raw_lines:
        line = _collapse(raw)
        if line:
            lines.append(line)
    return lines


def normalise_pages(pages: Iterable[str | Sequence[TextFragment]], tolerance: float = ROW_TOLERANCE) -> list[str]:
    lines: list[str] = []
    for page in pages:
        lines.extend(normalise_page(page, tolerance=tolerance))
    return lines


# ----------------------------
# Parser loading
# ----------------------------

_PARSER_CACHE: dict = {}


def load_parser_module(name: str):
    """Load ``Parsers/<name>.py`` or the newest ``Parsers/<name>-<version>.py``."""
    module_name = name.strip().lower()
    if module_name in _PARSER_CACHE:
        return _PARSER_CACHE[module_name]

    parser_path = os.path.join(PARSERS_DIR, f"{module_name}.py")

    if not os.path.exists(parser_path):
        pattern = os.path.join(PARSERS_DIR, f"{module_name}-*.py")
        matches = sorted(glob.glob(pattern), key=_version_key)
        if matches:
            parser_path = matches[-1]

    if not os.path.exists(parser_path):
        raise FileNotFoundError(
            f"No parser found for '{name}'. Expected either:\n"
            f"  - {os.path.join(PARSERS_DIR, module_name + '.py')}\n"
            f"  - {os.path.join(PARSERS_DIR, module_name + '-<version>.py')}"
        )

    module_key = os.path.splitext(os.path.basename(parser_path))[0]

    spec = importlib.util.spec_from_file_location(f"parsers.{module_key}", parser_path)
    if spec is None or spec.loader is None:
        raise RuntimeError(f"Unable to load parser module from {parser_path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    if not hasattr(module, "extract_transactions"):
        raise AttributeError(
            f"Parser '{parser_path}' does not define extract_transactions(lines, skipped)."
        )

    _PARSER_CACHE[module_name] = module
    return module


def _version_key(path: str) -> tuple:
    stem = os.path.splitext(os.path.basename(path))[0]
    version = stem.split("-", 1)[1] if "-" in stem else ""
    return tuple(int(p) if p.isdigit() else 0 for p in version.split("."))


# ----------------------------
# Pipeline
# ----------------------------

def _run_parser(name: str, lines: list[str], skipped: list[LineParseSkip]) -> list[dict]:
    parser = load_parser_module(name)
    raw_skips: list[dict] = []
    rows = parser.extract_transactions(lines, raw_skips)
    for s in raw_skips:
        skip = LineParseSkip(
            parser=name,
            line_no=int(s.get("line_no", -1)),
            line=str(s.get("line", "")),
            reason=str(s.get("reason", "")),
        )
        logger.debug("[%s] skipped line %d (%s): %s", name, skip.line_no, skip.reason, skip.line)
        skipped.append(skip)
    logger.info("[%s] extracted %d rows, skipped %d lines", name, len(rows), len(raw_skips))
    return rows


def _to_transactions(parser_name: str, rows: list[dict], table) -> list[Transaction]:
    txns: list[Transaction] = []
    for n, row in enumerate(rows, start=1):
        description = _collapse(str(row.get("Description", "") or "")) or "Unknown Transaction"
        tx_date = row.get("Date")
        iso = tx_date.isoformat() if isinstance(tx_date, date) else str(tx_date)
        try:
            amount = round(float(row.get("Amount", 0) or 0), 2)
        except (TypeError, ValueError):
            amount = 0.0
        txns.append(
            Transaction(
                id=f"{parser_name}-{n}",
                date=iso,
                description=description,
                amount=amount,
                merchant=merchants.resolve_merchant(description),
                category=categorisation.categorise_transaction(description, table),
            )
        )
    return txns


def extract_transactions_from_lines(
    lines: list[str],
    parser_order: Sequence[str] | None = None,
    min_records: int | None = None,
    category_table=None,
) -> ExtractionResult:
    """Run the extraction strategies over normalised lines.

    The primary strategy runs first. When it yields fewer than
    ``min_records`` rows, each fallback runs in turn and its output replaces
    the current one if it has at least as many rows. Results are never
    merged. The returned transactions are sorted newest first.
    """
    order = list(PARSER_ORDER if parser_order is None else parser_order)
    threshold = MIN_PRIMARY_RECORDS if min_records is None else min_records
    table = categorisation.CATEGORY_TABLE if category_table is None else category_table
    if not order:
        raise ValueError("parser_order must name at least one parser")

    skipped: list[LineParseSkip] = []
    states: list[ExtractionState] = []

    def enter(state: ExtractionState) -> None:
        logger.debug("pipeline state: %s", state.value)
        states.append(state)

    enter(ExtractionState.EXTRACTING_PRIMARY)
    chosen_name = order[0]
    chosen = _run_parser(chosen_name, lines, skipped)

    for name in order[1:]:
        if len(chosen) >= threshold:
            break
        enter(ExtractionState.EXTRACTING_FALLBACK)
        logger.warning(
            "[%s] produced %d rows (minimum %d); trying '%s'",
            chosen_name, len(chosen), threshold, name,
        )
        rows = _run_parser(name, lines, skipped)
        if len(rows) >= len(chosen):
            chosen_name, chosen = name, rows

    enter(ExtractionState.POST_PROCESSING)
    txns = _to_transactions(chosen_name, chosen, table)
    txns.sort(key=lambda t: t.date, reverse=True)

    if not txns:
        enter(ExtractionState.FAILED)
        logger.warning("No transactions found in %d lines", len(lines))
        raise NoTransactionsFound(states=states, skipped=skipped)

    enter(ExtractionState.DONE)
    logger.info("Using '%s' parser: %d transactions", chosen_name, len(txns))
    return ExtractionResult(transactions=txns, parser=chosen_name, skipped=skipped, states=states)


def extract_transactions_from_text(
    text: str | Iterable[str | Sequence[TextFragment]],
    tolerance: float = ROW_TOLERANCE,
    **kwargs,
) -> ExtractionResult:
    """Run the pipeline on a flat string or a sequence of per-page inputs."""
    pages = [text] if isinstance(text, str) else text
    lines = normalise_pages(pages, tolerance=tolerance)
    return extract_transactions_from_lines(lines, **kwargs)


def process_statement(
    data: bytes,
    mime_type: str,
    extractor: TextExtractor | None = None,
    tolerance: float = ROW_TOLERANCE,
    **kwargs,
) -> ExtractionResult:
    """Validate a PDF upload and turn it into a ledger of transactions.

    Pages are pulled from the extractor one at a time and concatenated in
    page order. Raises InvalidInputFormat, ExtractionFailure or
    NoTransactionsFound.
    """
    if not is_pdf(mime_type):
        raise InvalidInputFormat(f"Expected a PDF ({PDF_MIME_TYPE}), got '{mime_type}'")

    extractor = extractor or PdfplumberTextExtractor()
    lines: list[str] = []
    page_count = 0
    for page in extractor.extract_pages(data):
        page_count += 1
        lines.extend(normalise_page(page, tolerance=tolerance))
    logger.info("Read %d pages, %d lines", page_count, len(lines))

    return extract_transactions_from_lines(lines, **kwargs)


def process_statement_file(path: str, extractor: TextExtractor | None = None, **kwargs) -> ExtractionResult:
    mime_type, _ = mimetypes.guess_type(path)
    if not is_pdf(mime_type):
        raise InvalidInputFormat(f"Not a PDF file: {path}")
    with open(path, "rb") as f:
        data = f.read()
    return process_statement(data, mime_type, extractor=extractor, **kwargs)


# ----------------------------
# Self-tests
# ----------------------------

def _run_self_tests() -> None:
    frags = [
        TextFragment("450.00", 300, 700.5),
        TextFragment("12-03-2024", 40, 700),
        TextFragment("UPI/P2M/ZOMATO/ref123", 120, 702),
        TextFragment("Header", 40, 760),
    ]
    got = normalise_page(frags)
    assert got == ["Header", "12-03-2024 UPI/P2M/ZOMATO/ref123 450.00"], got

    assert normalise_page("  a   b \n\n c ") == ["a b", "c"]

    res = extract_transactions_from_text(
        "Transaction Date Particulars Debit Credit Balance\n"
        "12-03-2024 UPI/P2M/ZOMATO/ref123 450.00 10500.00\n"
        "01/04/2024 Salary Credit 50000.00 125000.00\n"
    )
    assert res.parser == "axis", res.parser
    assert [t.date for t in res.transactions] == ["2024-04-01", "2024-03-12"], res.transactions
    zomato = res.transactions[1]
    assert zomato.amount == -450.0 and zomato.merchant == "ZOMATO", zomato
    assert zomato.category == "Dining Out", zomato
    assert res.transactions[0].amount == 50000.0, res.transactions[0]

    try:
        extract_transactions_from_text("no dates here\nnothing to see")
    except NoTransactionsFound:
        pass
    else:
        raise AssertionError("expected NoTransactionsFound")

    try:
        process_statement(b"", "text/plain")
    except InvalidInputFormat:
        pass
    else:
        raise AssertionError("expected InvalidInputFormat")

    assert _version_key("axis-1.10.py") > _version_key("axis-1.9.py")

    print("Self-tests passed.")
