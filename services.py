#Product Service
from products import get_product, list_products
from customers import list_customers
from models import Cart, Customer, Product


def product_from_row(r):
    return Product(r["id"], r["name"], r["category"], r["selling_price"], r["quantity"],
                   is_active=bool(r["is_active"]), sku=r["sku"])


def customer_from_row(r):
    return Customer(r["id"], r["name"], phone=r["phone"], email=r["email"])


class ProductService:
    def __init__(self, db):
        self.db = db

    def get_all_products(self):
        return [product_from_row(r) for r in list_products(self.db)]

    def get_product_by_id(self, id):
        row = get_product(self.db, id)
        if not row:
            return None
        return product_from_row(row)


class CustomerService:
    def __init__(self, db):
        self.db = db

    def get_all_customers(self):
        return [customer_from_row(r) for r in list_customers(self.db)]


#Cart service
class CartService:
    """Cart operations for one POS session.

    ``cart_open`` mirrors the cart panel: adding a new product opens it.
    Stock errors propagate as InsufficientStock with the cart unchanged.
    """

    def __init__(self):
        self.cart = Cart()
        self.cart_open = False

    def add_to_cart(self, product):
        if self.cart.add(product):
            self.cart_open = True

    def update_quantity(self, product_id, delta):
        self.cart.update_quantity(product_id, delta)

    def remove_from_cart(self, product_id):
        self.cart.remove(product_id)

    def clear_cart(self):
        self.cart.clear()
        self.cart_open = False

    def get_lines(self):
        return list(self.cart.lines)

    def get_subtotal(self):
        return self.cart.subtotal
