import tempfile
import unittest
from pathlib import Path

import core

try:
    import pdfplumber  # noqa: F401
    from tools.generate_statement_fixtures import generate_all
except ImportError as e:  # pragma: no cover
    generate_all = None
    _IMPORT_ERROR = str(e)
else:
    _IMPORT_ERROR = ""


@unittest.skipIf(generate_all is None, f"fixture toolchain unavailable: {_IMPORT_ERROR}")
class TestSyntheticStatements(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls._tmp = tempfile.TemporaryDirectory()
        cls.root = Path(cls._tmp.name)
        cls.written = generate_all(out_dir=str(cls.root), seed=1)

    @classmethod
    def tearDownClass(cls):
        cls._tmp.cleanup()

    def _run(self, fmt):
        return core.process_statement_file(str(self.root / fmt / "statement_a.pdf"))

    def _expected(self, fmt):
        return sorted(((t.d.isoformat(), round(t.amount, 2)) for t in self.written[fmt]), reverse=True)

    def test_axis_statement(self):
        res = self._run("axis")
        self.assertEqual(res.parser, "axis")
        self.assertFalse(res.used_fallback)
        got = [(t.date, t.amount) for t in res.transactions]
        self.assertEqual(got, self._expected("axis"))

        by_desc = {t.description: t for t in res.transactions}
        zomato = by_desc["UPI/P2M/ZOMATO/410233118842"]
        self.assertEqual(zomato.merchant, "ZOMATO")
        self.assertEqual(zomato.category, "Dining Out")
        self.assertEqual(by_desc["IMPS/P2A/412300011122/Anita Desai/SBIN"].merchant, "Anita Desai")
        self.assertEqual(by_desc["BIGBASKET ORDER 88213"].category, "Groceries")
        self.assertEqual(by_desc["ACH/ZERODHA BROKING"].category, "Investments")

        # Opening balance row is dropped, not emitted.
        self.assertTrue(any(s.reason == "balance only" for s in res.skipped))

    def test_generic_statement_uses_fallback(self):
        res = self._run("generic")
        self.assertEqual(res.parser, "generic")
        self.assertTrue(res.used_fallback)
        got = [(t.date, t.amount) for t in res.transactions]
        self.assertEqual(got, self._expected("generic"))
        self.assertEqual(
            {t.description for t in res.transactions},
            {t.desc for t in self.written["generic"]},
        )

    def test_corrupt_pdf_is_extraction_failure(self):
        with self.assertRaises(core.ExtractionFailure):
            core.process_statement(b"%PDF-1.4 not really a pdf", "application/pdf")


if __name__ == "__main__":
    unittest.main()
