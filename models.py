from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from errors import InsufficientStock, ValidationError


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    MOBILE_MONEY = "mobile_money"
    BANK_TRANSFER = "bank_transfer"

    @property
    def label(self):
        return self.value.replace("_", " ").upper()


class DiscountType(str, Enum):
    PERCENT = "percent"
    FIXED = "fixed"


#product model
class Product:
    def __init__(self, id, name, category, selling_price, quantity, is_active=True, sku=None):
        self.id = id
        self.name = name
        self.category = category
        self.selling_price = float(selling_price)
        self.quantity = int(quantity)
        self.is_active = bool(is_active)
        self.sku = sku

    @property
    def is_sellable(self):
        return self.is_active and self.quantity > 0

    def __repr__(self):
        return f"Product(id={self.id!r}, name={self.name!r}, quantity={self.quantity})"


#customer model; walk-in customers typed in at the till have no id
class Customer:
    def __init__(self, id, name, phone=None, email=None):
        self.id = id
        self.name = name
        self.phone = phone
        self.email = email


class DiscountSpec:
    def __init__(self, type, value):
        self.type = DiscountType(type)
        self.value = float(value)

    def __repr__(self):
        return f"DiscountSpec({self.type.value}, {self.value})"


#cart line model
class CartLine:
    def __init__(self, product, quantity=1):
        self.product = product
        self.quantity = quantity

    @property
    def line_total(self):
        return self.product.selling_price * self.quantity


#cart model
class Cart:
    """Lines of the sale in progress, in the order products were first added.

    Stock checks use the Product snapshot each line holds; nothing is re-read
    from the catalog here.
    """

    def __init__(self):
        self.lines = []

    def __len__(self):
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)

    def __bool__(self):
        return bool(self.lines)

    def find(self, product_id):
        for line in self.lines:
            if line.product.id == product_id:
                return line
        return None

    def add(self, product):
        """Add one unit of ``product``. Returns True when a new line was created."""
        if not product.is_active:
            raise ValidationError(f"{product.name} is not available for sale", {"product_id": product.id})
        line = self.find(product.id)
        if line is None:
            if not product.is_sellable:
                raise InsufficientStock(product, 1)
            self.lines.append(CartLine(product, 1))
            return True

        if line.quantity + 1 > line.product.quantity:
            raise InsufficientStock(line.product, line.quantity + 1)
        line.quantity += 1
        return False

    def update_quantity(self, product_id, delta):
        line = self.find(product_id)
        if line is None:
            return

        new_quantity = line.quantity + delta
        if new_quantity <= 0:
            self.remove(product_id)
            return
        if new_quantity > line.product.quantity:
            raise InsufficientStock(line.product, new_quantity)
        line.quantity = new_quantity

    def remove(self, product_id):
        self.lines = [line for line in self.lines if line.product.id != product_id]

    def clear(self):
        self.lines = []

    @property
    def subtotal(self):
        return sum(line.line_total for line in self.lines)


@dataclass(frozen=True)
class PriceSummary:
    subtotal: float
    discount_amount: float
    discount_type: DiscountType
    tax_amount: float
    total: float
    change_amount: float


@dataclass(frozen=True)
class ReceiptLine:
    description: str
    quantity: int
    unit_price: float
    total: float


@dataclass(frozen=True)
class Receipt:
    """Snapshot of a completed sale, built once from the persisted document."""
    id: int
    document_number: str
    date: str
    customer_name: str
    items: Tuple[ReceiptLine, ...]
    subtotal: float
    tax_amount: float
    total: float
    currency: str
    payment_method: PaymentMethod
    status: str = "paid"
    customer_id: Optional[int] = None
    customer_phone: Optional[str] = None
    employee_name: str = ""
    notes: Optional[str] = None
    # display annotations attached after the document is stored
    discount_amount: float = 0.0
    discount_type: DiscountType = DiscountType.PERCENT
    amount_received: float = 0.0
    change_amount: float = 0.0

    @classmethod
    def from_document(cls, document, discount_amount, discount_type, amount_received, change_amount):
        items = tuple(
            ReceiptLine(
                description=it["description"],
                quantity=int(it["quantity"]),
                unit_price=float(it["unit_price"]),
                total=float(it["total"]),
            )
            for it in document["items"]
        )
        return cls(
            id=document["id"],
            document_number=document["document_number"],
            date=document["date"],
            customer_name=document["customer_name"],
            items=items,
            subtotal=float(document["subtotal"]),
            tax_amount=float(document.get("tax") or 0.0),
            total=float(document["total"]),
            currency=document["currency"],
            payment_method=PaymentMethod(document["payment_method"]),
            status=document.get("status", "paid"),
            customer_id=document.get("customer_id"),
            customer_phone=document.get("customer_phone"),
            employee_name=document.get("employee_name") or "",
            notes=document.get("notes"),
            discount_amount=float(discount_amount),
            discount_type=DiscountType(discount_type),
            amount_received=float(amount_received),
            change_amount=float(change_amount),
        )
