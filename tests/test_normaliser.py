import unittest

import core
from core import TextFragment


class TestNormaliseFlatText(unittest.TestCase):
    def test_splits_trims_and_drops_blank_lines(self):
        text = "  Statement of Account \n\n\t12-03-2024   UPI/P2M/ZOMATO   450.00 \r\n   \n"
        self.assertEqual(
            core.normalise_page(text),
            ["Statement of Account", "12-03-2024 UPI/P2M/ZOMATO 450.00"],
        )

    def test_pages_are_concatenated_in_order(self):
        pages = ["page one\nline two", "page two"]
        self.assertEqual(core.normalise_pages(pages), ["page one", "line two", "page two"])

    def test_empty_input(self):
        self.assertEqual(core.normalise_page(""), [])
        self.assertEqual(core.normalise_page([]), [])


class TestNormaliseFragments(unittest.TestCase):
    def test_rows_top_to_bottom_and_left_to_right(self):
        frags = [
            TextFragment("Balance", 480, 760),
            TextFragment("Particulars", 100, 760),
            TextFragment("10500.00", 480, 746),
            TextFragment("12-03-2024", 36, 746),
            TextFragment("450.00", 330, 746),
            TextFragment("Tran", 36, 760),
            TextFragment("UPI/P2M/ZOMATO/ref123", 100, 746),
        ]
        self.assertEqual(
            core.normalise_page(frags),
            [
                "Tran Particulars Balance",
                "12-03-2024 UPI/P2M/ZOMATO/ref123 450.00 10500.00",
            ],
        )

    def test_small_vertical_jitter_stays_on_one_row(self):
        frags = [
            TextFragment("b", 50, 701.5),
            TextFragment("a", 10, 700),
            TextFragment("c", 90, 698.2),
        ]
        self.assertEqual(core.normalise_page(frags), ["a b c"])

    def test_gap_larger_than_tolerance_breaks_line(self):
        frags = [TextFragment("top", 10, 700), TextFragment("bottom", 10, 694)]
        self.assertEqual(core.normalise_page(frags), ["top", "bottom"])

    def test_gradual_drift_follows_consecutive_fragments(self):
        frags = [
            TextFragment("a", 10, 700),
            TextFragment("b", 50, 696),
            TextFragment("c", 90, 692),
        ]
        self.assertEqual(core.normalise_page(frags), ["a b c"])

    def test_tolerance_is_tunable(self):
        frags = [TextFragment("top", 10, 700), TextFragment("bottom", 10, 694)]
        self.assertEqual(core.normalise_page(frags, tolerance=8), ["top bottom"])

    def test_blank_fragments_do_not_produce_lines(self):
        frags = [TextFragment("  ", 10, 700), TextFragment("x", 10, 600)]
        self.assertEqual(core.normalise_page(frags), ["x"])


if __name__ == "__main__":
    unittest.main()
