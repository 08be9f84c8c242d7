"""Totals derived from the cart, the discount input and the payment input.

All arithmetic is plain float; values are only rounded when formatted for display.
"""
import math

from models import DiscountType, PaymentMethod, PriceSummary


def parse_amount(value):
    """Parse a cashier-entered amount. Returns None for blank or unparseable input."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            amount = float(text)
        except ValueError:
            return None
    if not math.isfinite(amount):
        return None
    return amount


def compute_discount(subtotal, discount):
    if discount is None or discount.value <= 0:
        return 0.0
    if discount.type == DiscountType.PERCENT:
        amount = (subtotal * discount.value) / 100
    else:
        amount = discount.value
    # percent over 100 is clamped the same way as an oversized fixed amount
    return max(0.0, min(amount, subtotal))


def compute_tax(taxable, rate=0.0):
    if not rate or taxable <= 0:
        return 0.0
    return taxable * rate


def compute_change(payment_method, amount_received, total):
    if PaymentMethod(payment_method) != PaymentMethod.CASH:
        return 0.0
    received = parse_amount(amount_received)
    if received is None:
        return 0.0
    return max(0.0, received - total)


def price_cart(cart, discount=None, payment_method=PaymentMethod.CASH, amount_received=None, tax_rate=0.0):
    subtotal = cart.subtotal
    discount_amount = compute_discount(subtotal, discount)
    tax_amount = compute_tax(subtotal - discount_amount, tax_rate)
    total = subtotal - discount_amount + tax_amount
    return PriceSummary(
        subtotal=subtotal,
        discount_amount=discount_amount,
        discount_type=discount.type if discount is not None else DiscountType.PERCENT,
        tax_amount=tax_amount,
        total=total,
        change_amount=compute_change(payment_method, amount_received, total),
    )


def format_currency(amount, currency="USD"):
    symbol = "$" if currency == "USD" else "ZWL"
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"
