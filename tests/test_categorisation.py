import os
import tempfile
import unittest

import categorisation
from categorisation import CATEGORY_TABLE, CategoryRule, categorise_transaction


class TestDefaultTable(unittest.TestCase):
    def test_keyword_hits(self):
        cases = {
            "UPI/P2M/ZOMATO/ref123": categorisation.DINING,
            "BIGBASKET ORDER 88213": categorisation.GROCERIES,
            "ACH/ZERODHA BROKING": categorisation.INVESTMENTS,
            "Airtel postpaid": categorisation.UTILITIES,
            "LIC premium": categorisation.INSURANCE,
            "Apollo Pharmacy": categorisation.HEALTH,
        }
        for desc, expected in cases.items():
            with self.subTest(desc=desc):
                self.assertEqual(categorise_transaction(desc), expected)

    def test_first_matching_rule_wins(self):
        self.assertEqual(categorise_transaction("Amazon Prime membership"), categorisation.ENTERTAINMENT)
        self.assertEqual(categorise_transaction("Amazon order"), categorisation.SHOPPING)
        # "coffee" also contains "fee", but dining comes first.
        self.assertEqual(categorise_transaction("Cafe Coffee Day"), categorisation.DINING)

    def test_unmatched_goes_to_others(self):
        self.assertEqual(categorise_transaction(""), categorisation.OTHERS)
        self.assertEqual(categorise_transaction(None), categorisation.OTHERS)
        self.assertEqual(categorise_transaction("Salary Credit"), categorisation.OTHERS)

    def test_table_is_last_rule_catch_all(self):
        self.assertEqual(CATEGORY_TABLE[-1].category, categorisation.OTHERS)
        self.assertEqual(CATEGORY_TABLE[-1].keywords, ())

    def test_is_pure(self):
        before = tuple(CATEGORY_TABLE)
        first = categorise_transaction("Swiggy order")
        second = categorise_transaction("Swiggy order")
        self.assertEqual(first, second)
        self.assertEqual(before, CATEGORY_TABLE)

    def test_colors(self):
        self.assertEqual(categorisation.category_color(categorisation.DINING), "#FFC857")
        self.assertEqual(categorisation.category_color("Nope"), categorisation.DEFAULT_COLOR)


class TestCustomTables(unittest.TestCase):
    def test_custom_catch_all(self):
        table = (CategoryRule("Pets", ("vet",)), CategoryRule("Misc", ()))
        self.assertEqual(categorise_transaction("VET CLINIC", table), "Pets")
        self.assertEqual(categorise_transaction("xyz", table), "Misc")

    def test_table_without_catch_all(self):
        table = (CategoryRule("Pets", ("vet",)),)
        self.assertEqual(categorise_transaction("xyz", table), categorisation.OTHERS)

    def test_salary_can_be_added(self):
        table = (CategoryRule("Income", ("salary",)),) + CATEGORY_TABLE
        self.assertEqual(categorise_transaction("Salary Credit", table), "Income")


class TestLoadCategoryTable(unittest.TestCase):
    def _write(self, text: str) -> str:
        fd, path = tempfile.mkstemp(suffix=".csv")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        self.addCleanup(os.remove, path)
        return path

    def test_priority_active_and_catch_all(self):
        path = self._write(
            "Category,Keywords,Color,Priority,Active\n"
            "Pets,vet; Pet Store,#123456,2,true\n"
            "Food,zomato,,1,\n"
            "Old,xyz,,,false\n"
        )
        table = categorisation.load_category_table(path)
        self.assertEqual([r.category for r in table], ["Food", "Pets", categorisation.OTHERS])
        self.assertEqual(table[1].keywords, ("vet", "pet store"))
        self.assertEqual(table[1].color, "#123456")
        self.assertEqual(table[0].color, categorisation.DEFAULT_COLOR)
        self.assertEqual(categorise_transaction("UPI/P2M/ZOMATO/1", table), "Food")
        self.assertEqual(categorise_transaction("xyz", table), categorisation.OTHERS)

    def test_file_order_without_priority(self):
        path = self._write("Category,Keywords\nB,bb\nA,aa\nRest,\n")
        table = categorisation.load_category_table(path)
        self.assertEqual([r.category for r in table], ["B", "A", "Rest"])

    def test_missing_columns(self):
        path = self._write("Name,Words\nx,y\n")
        with self.assertRaises(ValueError):
            categorisation.load_category_table(path)


if __name__ == "__main__":
    unittest.main()
