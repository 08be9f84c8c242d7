import os
import shutil
import tempfile
import unittest
from urllib.parse import unquote
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from PIL import Image

from errors import ValidationError
from models import PaymentMethod, Receipt
from receipt import ReceiptActions, ReceiptGenerator, email_url, receipt_text


def _receipt(payment_method="cash", **overrides):
    document = {
        "id": 1, "document_number": "RCP-20261018-0001", "date": "2026-10-18",
        "customer_name": "Jane", "customer_phone": "0771",
        "items": [
            {"description": "Cola Zero", "quantity": 3, "unit_price": 10.0, "total": 30.0},
        ],
        "subtotal": 30.0, "tax": None, "total": 27.0, "currency": "USD",
        "payment_method": payment_method, "status": "paid", "employee_name": "Front Cashier",
    }
    document.update(overrides)
    return Receipt.from_document(document, discount_amount=3.0, discount_type="percent",
                                 amount_received=30.0 if payment_method == "cash" else 27.0,
                                 change_amount=3.0 if payment_method == "cash" else 0.0)


class ReceiptModelTests(unittest.TestCase):
    def test_from_document_annotations(self):
        r = _receipt()
        self.assertEqual(r.payment_method, PaymentMethod.CASH)
        self.assertEqual(r.tax_amount, 0.0)
        self.assertEqual(r.items[0].total, 30.0)
        self.assertEqual(r.change_amount, 3.0)

    def test_receipt_is_immutable(self):
        r = _receipt()
        with self.assertRaises(Exception):
            r.total = 1.0


class ReceiptTextTests(unittest.TestCase):
    def test_text_lists_items_and_payment(self):
        text = receipt_text(_receipt(), "Dale Convenience")
        self.assertIn("Receipt Number: RCP-20261018-0001", text)
        self.assertIn("1. Cola Zero - Qty: 3 x $10.00 = $30.00", text)
        self.assertIn("Discount (10%): -$3.00", text)
        self.assertIn("Total: $27.00", text)
        self.assertIn("Change: $3.00", text)

    def test_card_receipt_has_no_change_line(self):
        text = receipt_text(_receipt("card"))
        self.assertIn("Payment Method: CARD", text)
        self.assertNotIn("Change", text)

    def test_email_url(self):
        url = email_url(_receipt(), "jane@example.com", "Dale")
        self.assertTrue(url.startswith("mailto:jane@example.com?subject="))
        self.assertIn("Receipt RCP-20261018-0001 - Dale", unquote(url))
        self.assertIn("- Cola Zero (3x) = $30.00", unquote(url))

    def test_email_without_address_rejected(self):
        with self.assertRaises(ValidationError):
            email_url(_receipt(), None)


class ReceiptActionTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.actions = ReceiptActions(_receipt(), "Dale Convenience", os.path.join(self.tmpdir, "receipts"))

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_print_creates_png(self):
        png = self.actions.print_receipt()
        self.assertTrue(png.endswith("RCP-20261018-0001.png"))
        with Image.open(png) as img:
            self.assertEqual(img.width, ReceiptGenerator.WIDTH)

    def test_long_item_names_wrap(self):
        long_name = " ".join(["Extra"] * 40)
        r = _receipt(items=[{"description": long_name, "quantity": 1, "unit_price": 1.0, "total": 1.0}] * 12)
        png = ReceiptGenerator.generate(r, self.tmpdir, "Dale")
        self.assertTrue(os.path.exists(png))

    def test_share_writes_text(self):
        path = self.actions.share_receipt()
        with open(path, encoding="utf-8") as fh:
            self.assertIn("Total: $27.00", fh.read())

    def test_email_action(self):
        self.assertTrue(self.actions.email_receipt("a@b.co").startswith("mailto:a@b.co"))


if __name__ == '__main__':
    unittest.main()
