from catalog import filter_products, list_categories, stock_status
from checkout import CheckoutOrchestrator, CheckoutRequest
from config import get_settings
from errors import PermissionDenied, ValidationError
from logger import get_logger
from models import DiscountSpec, DiscountType, PaymentMethod
from pricing import parse_amount, price_cart
from receipt import ReceiptActions
from services import CartService
from session import APPLY_DISCOUNTS

logger = get_logger(__name__)


class PosController:
    """State of one POS screen: catalog, cart, discount, customer and payment inputs.

    Screens call these methods and render the results; nothing here draws.
    """

    def __init__(self, store, session, settings=None):
        self.store = store
        self.session = session
        self.settings = settings or get_settings()
        self.checkout_engine = CheckoutOrchestrator(
            store, session, currency=self.settings.CURRENCY, tax_rate=self.settings.TAX_RATE
        )

        # Data State
        self.products = []
        self.carts = CartService()
        self.discount = None
        self.payment_method = PaymentMethod.CASH
        self.amount_received = ""
        self.selected_customer = None
        self.new_customer_name = ""
        self.new_customer_phone = ""
        self.receipt = None

    @property
    def cart(self):
        return self.carts.cart

    @property
    def cart_open(self):
        return self.carts.cart_open

    # --- DATA ---
    def load_products(self):
        self.products = self.store.list_products()
        return self.products

    def visible_products(self, query="", category=None):
        return filter_products(self.products, query, category)

    def categories(self):
        return list_categories(self.products)

    def stock_label(self, product):
        return stock_status(product.quantity, self.settings.LOW_STOCK_THRESHOLD)

    # --- CART LOGIC ---
    def add_to_cart(self, product):
        self.carts.add_to_cart(product)

    def update_quantity(self, product_id, delta):
        self.carts.update_quantity(product_id, delta)

    def remove_from_cart(self, product_id):
        self.carts.remove_from_cart(product_id)

    def clear_cart(self, confirm):
        """Empty the cart after ``confirm()`` returns true. Returns whether it cleared."""
        if not confirm():
            return False
        self.carts.clear_cart()
        self.discount = None
        self.amount_received = ""
        return True

    # --- DISCOUNT ---
    def can_apply_discounts(self):
        return self.session.has_permission(APPLY_DISCOUNTS)

    def apply_discount(self, value, discount_type=DiscountType.PERCENT):
        if not self.can_apply_discounts():
            raise PermissionDenied("You do not have permission to apply discounts")
        amount = parse_amount(value)
        if amount is None or amount <= 0:
            self.discount = None
            return
        self.discount = DiscountSpec(discount_type, amount)
        logger.info("discount_applied", type=self.discount.type.value, value=amount)

    def remove_discount(self):
        self.discount = None

    # --- CUSTOMER ---
    def select_customer(self, customer):
        self.selected_customer = customer

    def add_new_customer(self, name, phone="", email=""):
        if not (name or "").strip():
            raise ValidationError("Please enter customer name")
        customer = self.store.add_customer({
            "name": name.strip(),
            "phone": (phone or "").strip() or None,
            "email": (email or "").strip() or None,
        })
        self.selected_customer = customer
        self.new_customer_name = ""
        self.new_customer_phone = ""
        return customer

    # --- PAYMENT ---
    def set_payment(self, method, amount_received=""):
        self.payment_method = PaymentMethod(method)
        self.amount_received = amount_received if amount_received is not None else ""

    def totals(self):
        return price_cart(self.cart, self.discount, self.payment_method, self.amount_received,
                          self.settings.TAX_RATE)

    # --- CHECKOUT ---
    def complete_payment(self):
        request = CheckoutRequest(
            self.cart,
            payment_method=self.payment_method,
            amount_received=self.amount_received,
            discount=self.discount,
            customer=self.selected_customer,
            new_customer_name=self.new_customer_name,
            new_customer_phone=self.new_customer_phone,
        )
        self.receipt = self.checkout_engine.checkout(request)
        self.carts.cart_open = False
        return self.receipt

    def receipt_actions(self):
        if self.receipt is None:
            return None
        return ReceiptActions(self.receipt, self.settings.BUSINESS_NAME, self.settings.RECEIPTS_DIR)

    def email_receipt(self):
        """mailto: link for the last receipt, addressed to the selected customer."""
        actions = self.receipt_actions()
        if actions is None:
            raise ValidationError("No completed sale to email")
        email = self.selected_customer.email if self.selected_customer else None
        return actions.email_receipt(email)

    def new_sale(self):
        self.carts.clear_cart()
        self.selected_customer = None
        self.new_customer_name = ""
        self.new_customer_phone = ""
        self.discount = None
        self.amount_received = ""
        self.payment_method = PaymentMethod.CASH
        self.receipt = None
        self.checkout_engine.reset()
        # pick up the stock written by the last sale
        self.load_products()
