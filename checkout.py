"""Turning a cart into a paid receipt.

The sequence is strictly ordered and not atomic:

    Idle -> Validating -> ReservingStock -> PersistingSale
         -> RecordingLedgerEntry -> Completed

Stock is decremented product by product before the sale document exists, and
nothing is rolled back if a later step fails. Stock figures come from the
Product snapshots held by the cart, so two tills selling the same product can
both succeed (last write wins).
"""
from datetime import date
from enum import Enum

from errors import InvalidTransition, PersistenceError, ValidationError
from logger import get_logger
from models import Customer, DiscountType, PaymentMethod, Receipt
from pricing import format_currency, parse_amount, price_cart

logger = get_logger(__name__)


class CheckoutState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    RESERVING_STOCK = "reserving_stock"
    PERSISTING_SALE = "persisting_sale"
    RECORDING_LEDGER_ENTRY = "recording_ledger_entry"
    COMPLETED = "completed"
    FAILED = "failed"


TRANSITIONS = {
    CheckoutState.IDLE: {CheckoutState.VALIDATING},
    CheckoutState.VALIDATING: {CheckoutState.IDLE, CheckoutState.RESERVING_STOCK, CheckoutState.FAILED},
    CheckoutState.RESERVING_STOCK: {CheckoutState.PERSISTING_SALE, CheckoutState.FAILED},
    CheckoutState.PERSISTING_SALE: {CheckoutState.RECORDING_LEDGER_ENTRY, CheckoutState.FAILED},
    CheckoutState.RECORDING_LEDGER_ENTRY: {CheckoutState.COMPLETED},
    CheckoutState.COMPLETED: {CheckoutState.IDLE},
    CheckoutState.FAILED: {CheckoutState.IDLE},
}


class CheckoutRequest:
    """Everything the cashier has entered when pressing "Complete Payment"."""

    def __init__(self, cart, payment_method=PaymentMethod.CASH, amount_received=None, discount=None,
                 customer=None, new_customer_name="", new_customer_phone=""):
        self.cart = cart
        self.payment_method = PaymentMethod(payment_method)
        self.amount_received = amount_received
        self.discount = discount
        self.customer = customer
        self.new_customer_name = new_customer_name or ""
        self.new_customer_phone = new_customer_phone or ""


class CheckoutOrchestrator:
    """Runs one checkout at a time against injected collaborators.

    ``store`` provides update_product, add_document and add_transaction;
    ``session`` provides get_current_employee_name.
    """

    def __init__(self, store, session=None, currency="USD", tax_rate=0.0):
        self.store = store
        self.session = session
        self.currency = currency
        self.tax_rate = tax_rate
        self.state = CheckoutState.IDLE
        self.last_error = None

    def transition(self, to):
        if to not in TRANSITIONS[self.state]:
            raise InvalidTransition(f"Cannot move checkout from {self.state.value} to {to.value}")
        logger.debug("checkout_transition", from_state=self.state.value, to_state=to.value)
        self.state = to

    def reset(self):
        """Return to IDLE from any state."""
        if self.state != CheckoutState.IDLE:
            logger.debug("checkout_reset", from_state=self.state.value)
            self.state = CheckoutState.IDLE
        self.last_error = None

    def checkout(self, request):
        """Run the full sequence and return the Receipt.

        Raises ValidationError (state back to IDLE, nothing written) or
        PersistenceError (state FAILED, earlier stock updates kept).
        A machine left COMPLETED or FAILED by the previous sale is reset first.
        """
        if self.state in (CheckoutState.COMPLETED, CheckoutState.FAILED):
            self.reset()
        self.transition(CheckoutState.VALIDATING)
        try:
            pricing = price_cart(request.cart, request.discount, request.payment_method,
                                 request.amount_received, self.tax_rate)
            customer = self._validate(request, pricing)
        except ValidationError as e:
            self.last_error = e
            logger.info("checkout_rejected", reason=e.message)
            self.transition(CheckoutState.IDLE)
            raise
        except Exception as e:
            self._fail(e)
            raise PersistenceError(f"Failed to complete sale: {e}") from e

        self.transition(CheckoutState.RESERVING_STOCK)
        self._reserve_stock(request.cart)

        self.transition(CheckoutState.PERSISTING_SALE)
        try:
            document = self._persist_sale(request, pricing, customer)
            receipt = self._build_receipt(request, pricing, document)
        except Exception as e:
            self._fail(e)
            raise PersistenceError(f"Failed to complete sale: {e}") from e

        self.transition(CheckoutState.RECORDING_LEDGER_ENTRY)
        self._record_ledger_entry(pricing, customer)

        self.transition(CheckoutState.COMPLETED)
        logger.info("checkout_completed", document_number=receipt.document_number,
                    total=receipt.total, payment_method=receipt.payment_method.value)
        return receipt

    def _validate(self, request, pricing):
        if not request.cart:
            raise ValidationError("Please add products to cart")

        if request.customer is not None:
            customer = request.customer
        elif request.new_customer_name.strip():
            customer = Customer(None, request.new_customer_name.strip(),
                                phone=request.new_customer_phone.strip() or None)
        else:
            raise ValidationError("Please select or enter customer name")

        if request.payment_method == PaymentMethod.CASH:
            received = parse_amount(request.amount_received)
            if received is None or received < pricing.total:
                received = received or 0.0
                raise ValidationError(
                    f"Insufficient payment: received {format_currency(received, self.currency)}, "
                    f"need {format_currency(pricing.total - received, self.currency)} more",
                    {"received": received, "total": pricing.total},
                )
        return customer

    def _reserve_stock(self, cart):
        for line in cart:
            new_stock = line.product.quantity - line.quantity
            try:
                self.store.update_product(line.product.id, {"quantity": new_stock})
            except Exception as e:
                self._fail(e)
                raise PersistenceError(
                    f"Failed to update stock for {line.product.name}: {e}",
                    {"product_id": line.product.id},
                ) from e
            logger.info("stock_reserved", product_id=line.product.id, quantity=line.quantity,
                        remaining=new_stock)

    def _persist_sale(self, request, pricing, customer):
        items = [
            {
                "description": line.product.name,
                "quantity": line.quantity,
                "unit_price": line.product.selling_price,
                "total": line.line_total,
            }
            for line in request.cart
        ]

        notes = None
        if pricing.discount_amount > 0:
            if pricing.discount_type == DiscountType.PERCENT:
                notes = f"Discount: {request.discount.value:g}%"
            else:
                notes = f"Discount: {format_currency(pricing.discount_amount, self.currency)}"

        employee_name = self.session.get_current_employee_name() if self.session else None

        fields = {
            "type": "receipt",
            "customer_id": customer.id,
            "customer_name": customer.name,
            "customer_phone": customer.phone,
            "items": items,
            "subtotal": pricing.subtotal,
            "discount_amount": pricing.discount_amount,
            "tax": pricing.tax_amount if pricing.tax_amount > 0 else None,
            "total": pricing.total,
            "currency": self.currency,
            "date": date.today().isoformat(),
            "status": "paid",
            "payment_method": request.payment_method.value,
            "employee_name": employee_name or "",
            "notes": notes,
        }
        document = self.store.add_document(fields)
        logger.info("sale_document_created", document_number=document["document_number"],
                    total=pricing.total)
        return document

    def _build_receipt(self, request, pricing, document):
        if request.payment_method == PaymentMethod.CASH:
            amount_received = parse_amount(request.amount_received) or 0.0
        else:
            amount_received = pricing.total
        return Receipt.from_document(
            document,
            discount_amount=pricing.discount_amount,
            discount_type=pricing.discount_type,
            amount_received=amount_received,
            change_amount=pricing.change_amount,
        )

    def _record_ledger_entry(self, pricing, customer):
        try:
            self.store.add_transaction({
                "type": "sale",
                "amount": pricing.total,
                "currency": self.currency,
                "description": f"POS Sale - {customer.name}",
                "category": "sales",
                "date": date.today().isoformat(),
            })
        except Exception:
            # The sale is complete once the document exists.
            logger.exception("ledger_entry_failed", customer=customer.name, amount=pricing.total)

    def _fail(self, error):
        self.last_error = error
        logger.error("checkout_failed", state=self.state.value, error=str(error))
        self.transition(CheckoutState.FAILED)
