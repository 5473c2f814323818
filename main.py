# Version: 1.0
import argparse
import importlib
import logging
import os
import sys
import traceback
from datetime import datetime


def check_dependencies() -> None:
    missing = []
    installable = []

    if sys.version_info < (3, 10):
        missing.append("Python 3.10+ is required.")

    for module, package in [
        ("pdfplumber", "pdfplumber"),
        ("pandas", "pandas"),
    ]:
        try:
            importlib.import_module(module)
        except ImportError:
            missing.append(f"Missing dependency: {package}")
            installable.append(package)

    if missing:
        message = "Cannot start because required dependencies are missing:\n\n"
        message += "\n".join(f"- {item}" for item in missing)
        if installable:
            message += "\n\nInstall them with:\n  python -m pip install " + " ".join(installable)
        print(message, file=sys.stderr)
        raise SystemExit(1)


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Turn bank statement PDFs into a categorised transaction ledger.")
    p.add_argument("paths", nargs="*", help="statement PDF files")
    p.add_argument("--report", action="store_true", help="print a spending report after the ledger")
    p.add_argument("--sample", action="store_true", help="use generated sample data instead of a statement")
    p.add_argument("--categories", help="CSV file with a custom category table")
    p.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging level (default: WARNING)",
    )
    p.add_argument("--diagnostics", action="store_true", help="write skipped-line diagnostics to the Logs folder")
    p.add_argument("--selftest", action="store_true", help="run built-in self-tests and exit")
    return p


def _print_ledger(transactions) -> None:
    for t in transactions:
        print(f"{t.date}  {t.amount:>12.2f}  {t.category:<14} {t.merchant:<24} {t.description}")


def main(argv=None) -> int:
    args = _build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    check_dependencies()

    import analysis
    import categorisation
    import core

    if args.selftest:
        core._run_self_tests()
        return 0

    if not os.path.isdir(core.PARSERS_DIR):
        raise FileNotFoundError(f"Missing Parsers folder: {core.PARSERS_DIR}")

    table = categorisation.load_category_table(args.categories) if args.categories else None

    if args.sample:
        transactions = analysis.generate_sample_transactions()
        _print_ledger(transactions)
        if args.report:
            print()
            print(analysis.build_text_report(transactions))
        return 0

    if not args.paths:
        print("No statement given. Pass one or more PDF files, or --sample.", file=sys.stderr)
        return 2

    status = 0
    for path in args.paths:
        print(f"== {os.path.basename(path)}")
        try:
            result = core.process_statement_file(path, category_table=table)
        except core.InvalidInputFormat:
            print("Invalid file format: please provide a PDF file.", file=sys.stderr)
            status = 1
            continue
        except core.ExtractionFailure as e:
            print(f"Error processing file: {e}", file=sys.stderr)
            status = 1
            continue
        except core.NoTransactionsFound:
            print(
                "No transactions could be extracted from this statement. "
                "Please try a different statement or use --sample.",
                file=sys.stderr,
            )
            status = 1
            continue

        if args.diagnostics:
            log_path = core.write_diagnostics_log(result, source=path)
            if log_path:
                print(f"Diagnostics written to {log_path}")

        print(f"Extracted {len(result.transactions)} transactions ({result.parser} parser)")
        _print_ledger(result.transactions)
        if args.report:
            print()
            print(analysis.build_text_report(result.transactions))

    return status


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except Exception as e:
        try:
            import core

            core.ensure_folder(core.LOGS_DIR)
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            crash_path = os.path.join(core.LOGS_DIR, f"crash_{ts}.txt")
            err = "".join(traceback.format_exception(type(e), e, e.__traceback__))
            with open(crash_path, "w", encoding="utf-8") as f:
                f.write(err)
        except OSError:
            pass
        raise
