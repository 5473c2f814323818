import unittest

from merchants import UNKNOWN_MERCHANT, resolve_merchant


class TestStructuredReferences(unittest.TestCase):
    def test_upi_merchant_payment(self):
        self.assertEqual(resolve_merchant("UPI/P2M/ZOMATO/ref123"), "ZOMATO")

    def test_upi_person_to_account(self):
        self.assertEqual(resolve_merchant("UPI/P2A/412398877123/Ravi Kumar/HDFC"), "Ravi Kumar")

    def test_imps_payee(self):
        self.assertEqual(resolve_merchant("IMPS/P2A/412300011122/Anita Desai/SBIN"), "Anita Desai")

    def test_known_merchant_any_case(self):
        self.assertEqual(resolve_merchant("upi/p2m/Swiggy Instamart/123"), "Swiggy Instamart")

    def test_uppercase_payee_without_known_name(self):
        desc = "UPI/DR/408812345678/SHARMA STORES/YESB/sharma@ybl"
        self.assertEqual(resolve_merchant(desc), "SHARMA STORES")

    def test_payment_address_of_known_merchant(self):
        self.assertEqual(resolve_merchant("UPI/P2M/zomato@hdfcbank/ref"), "zomato")

    def test_unknown_payment_address_is_not_a_name(self):
        desc = "UPI/P2A/412398877123/ravi.k@okaxis/Ravi Kumar"
        self.assertEqual(resolve_merchant(desc), "Ravi Kumar")

    def test_reference_buried_in_text(self):
        self.assertEqual(resolve_merchant("BY TRANSFER UPI/P2M/BIGBASKET/991"), "BIGBASKET")


class TestFreeText(unittest.TestCase):
    def test_two_word_name(self):
        self.assertEqual(resolve_merchant("Payment to Ravi Kumar for dinner"), "Ravi Kumar")

    def test_first_three_words(self):
        self.assertEqual(resolve_merchant("BIGBASKET ORDER 88213 BLR"), "BIGBASKET ORDER 88213")

    def test_short_description_is_returned_whole(self):
        self.assertEqual(resolve_merchant("ATM   WDL"), "ATM WDL")

    def test_empty_description(self):
        self.assertEqual(resolve_merchant(""), UNKNOWN_MERCHANT)
        self.assertEqual(resolve_merchant("   "), UNKNOWN_MERCHANT)
        self.assertEqual(resolve_merchant(None), UNKNOWN_MERCHANT)


if __name__ == "__main__":
    unittest.main()
