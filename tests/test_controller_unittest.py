import os
import shutil
import tempfile
import unittest
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import Settings
from controller import PosController
from database import DatabaseManager
from errors import InsufficientStock, PermissionDenied, ValidationError
from inserting import seed
from models import DiscountType, PaymentMethod
from session import EmployeeSession
from store import SqliteBusinessStore


class ControllerTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.mgr = DatabaseManager(db_name=os.path.join(self.tmpdir, 'pos.db'))
        seed(self.mgr)
        self.store = SqliteBusinessStore(self.mgr)
        self.session = EmployeeSession(self.mgr)
        settings = Settings(RECEIPTS_DIR=os.path.join(self.tmpdir, 'receipts'), CURRENCY='USD')
        self.C = PosController(self.store, self.session, settings)
        self.C.load_products()
        self.by_name = {p.name: p for p in self.C.products}

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_visible_products_filters_catalog(self):
        names = [p.name for p in self.C.visible_products("cola")]
        self.assertEqual(names, ["Cola Zero"])
        self.assertIn("Drinks", self.C.categories())

    def test_add_to_cart_opens_cart(self):
        self.C.add_to_cart(self.by_name["Umbrella"])
        self.assertTrue(self.C.cart_open)
        self.assertEqual(len(self.C.cart), 1)

    def test_stock_limit_from_snapshot(self):
        umbrella = self.by_name["Umbrella"]  # 10 in stock
        self.C.add_to_cart(umbrella)
        with self.assertRaises(InsufficientStock):
            self.C.update_quantity(umbrella.id, 10)
        self.assertEqual(self.C.cart.find(umbrella.id).quantity, 1)

    def test_clear_cart_requires_confirmation(self):
        self.C.add_to_cart(self.by_name["Umbrella"])
        self.C.amount_received = "50"
        self.assertFalse(self.C.clear_cart(lambda: False))
        self.assertEqual(len(self.C.cart), 1)

        self.assertTrue(self.C.clear_cart(lambda: True))
        self.assertEqual(len(self.C.cart), 0)
        self.assertEqual(self.C.amount_received, "")
        self.assertIsNone(self.C.discount)
        self.assertFalse(self.C.cart_open)

    def test_discount_requires_permission(self):
        self.C.add_to_cart(self.by_name["Umbrella"])
        with self.assertRaises(PermissionDenied):
            self.C.apply_discount("10")

        self.session.login("cashier", "cashier123")
        with self.assertRaises(PermissionDenied):
            self.C.apply_discount("10")

        self.session.login("manager", "manager123")
        self.C.apply_discount("10", DiscountType.PERCENT)
        self.assertAlmostEqual(self.C.totals().discount_amount, 0.95)

    def test_owner_can_apply_fixed_discount(self):
        self.session.login("owner", "owner123")
        self.C.add_to_cart(self.by_name["Umbrella"])
        self.C.apply_discount("100", "fixed")
        self.assertEqual(self.C.totals().total, 0.0)
        self.C.apply_discount("0")
        self.assertIsNone(self.C.discount)

    def test_add_new_customer_selects_it(self):
        customer = self.C.add_new_customer("  Jane Doe ", "0771")
        self.assertIsNotNone(customer.id)
        self.assertIs(self.C.selected_customer, customer)
        self.assertEqual([c.name for c in self.store.list_customers()], ["Jane Doe"])
        with self.assertRaises(ValidationError):
            self.C.add_new_customer("   ")

    def test_complete_payment_two_lines(self):
        self.session.login("cashier", "cashier123")
        cola = self.by_name["Cola Zero"]
        burger = self.by_name["Beef Burger"]
        self.C.add_to_cart(cola)
        self.C.update_quantity(cola.id, 2)
        self.C.add_to_cart(burger)
        self.C.new_customer_name = "Walk-in Sam"
        self.C.set_payment(PaymentMethod.CASH, "20")
        expected = self.C.totals()

        receipt = self.C.complete_payment()

        self.assertEqual(self.store.get_product(cola.id).quantity, cola.quantity - 3)
        self.assertEqual(self.store.get_product(burger.id).quantity, burger.quantity - 1)
        self.assertEqual(receipt.total, expected.total)
        self.assertAlmostEqual(sum(it.total for it in receipt.items), receipt.subtotal)
        self.assertAlmostEqual(receipt.change_amount, 20 - expected.total)
        self.assertEqual(receipt.employee_name, "Front Cashier")
        self.assertTrue(receipt.document_number.startswith("RCP-"))
        self.assertEqual(len(self.store.list_transactions()), 1)
        # cart stays until the cashier starts a new sale
        self.assertEqual(len(self.C.cart), 2)
        self.assertFalse(self.C.cart_open)

        self.C.new_sale()
        self.assertEqual(len(self.C.cart), 0)
        self.assertIsNone(self.C.receipt)
        self.assertEqual(self.C.payment_method, PaymentMethod.CASH)
        reloaded = {p.id: p for p in self.C.products}
        self.assertEqual(reloaded[cola.id].quantity, cola.quantity - 3)

    def test_complete_payment_rejected_leaves_stock(self):
        umbrella = self.by_name["Umbrella"]
        self.C.add_to_cart(umbrella)
        self.C.new_customer_name = "Sam"
        self.C.set_payment("cash", "1")
        with self.assertRaises(ValidationError):
            self.C.complete_payment()
        self.assertEqual(self.store.get_product(umbrella.id).quantity, umbrella.quantity)
        self.assertIsNone(self.C.receipt)

    def test_stock_label_uses_threshold(self):
        umbrella = self.by_name["Umbrella"]  # 10 in stock
        self.assertEqual(self.C.stock_label(umbrella), "In Stock")
        self.C.settings = Settings(LOW_STOCK_THRESHOLD=20)
        self.assertEqual(self.C.stock_label(umbrella), "Low Stock")

    def test_email_receipt_goes_to_selected_customer(self):
        with self.assertRaises(ValidationError):
            self.C.email_receipt()
        self.C.add_new_customer("Ann", "0772", "ann@example.com")
        self.C.add_to_cart(self.by_name["Umbrella"])
        self.C.set_payment("card")
        self.C.complete_payment()
        self.assertTrue(self.C.email_receipt().startswith("mailto:ann@example.com?"))

    def test_email_receipt_without_customer_email(self):
        self.C.add_to_cart(self.by_name["Umbrella"])
        self.C.new_customer_name = "Sam"
        self.C.set_payment("card")
        self.C.complete_payment()
        with self.assertRaises(ValidationError) as ctx:
            self.C.email_receipt()
        self.assertIn("email", ctx.exception.message)

    def test_inactive_product_cannot_be_added(self):
        umbrella = self.by_name["Umbrella"]
        self.store.update_product(umbrella.id, {"is_active": 0})
        self.C.load_products()
        retired = {p.id: p for p in self.C.products}[umbrella.id]
        with self.assertRaises(ValidationError):
            self.C.add_to_cart(retired)
        self.assertEqual(len(self.C.cart), 0)
        self.assertFalse(self.C.cart_open)

    def test_receipt_actions_after_sale(self):
        self.assertIsNone(self.C.receipt_actions())
        self.C.add_to_cart(self.by_name["Umbrella"])
        self.C.new_customer_name = "Sam"
        self.C.set_payment("card")
        self.C.complete_payment()
        path = self.C.receipt_actions().share_receipt()
        self.assertTrue(os.path.exists(path))


if __name__ == '__main__':
    unittest.main()
