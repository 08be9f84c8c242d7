"""sqlite-backed implementation of the business data collaborators used at checkout."""
import customers
import documents
import products
import transactions
from services import CustomerService, ProductService, customer_from_row


class SqliteBusinessStore:
    def __init__(self, db):
        self.db = db
        self.product_service = ProductService(db)
        self.customer_service = CustomerService(db)

    # Catalog
    def list_products(self):
        return self.product_service.get_all_products()

    def get_product(self, product_id):
        return self.product_service.get_product_by_id(product_id)

    def update_product(self, product_id, fields):
        if not products.update_product(self.db, product_id, fields):
            raise LookupError(f"Product {product_id} not found")

    # Customers
    def list_customers(self):
        return self.customer_service.get_all_customers()

    def add_customer(self, fields):
        return customer_from_row(customers.add_customer(self.db, fields))

    # Documents
    def add_document(self, fields):
        return documents.add_document(self.db, fields)

    def get_document(self, document_id):
        return documents.get_document(self.db, document_id)

    def list_documents(self, date=None):
        return documents.list_documents(self.db, date=date)

    # Ledger
    def add_transaction(self, fields):
        transactions.add_transaction(self.db, fields)

    def list_transactions(self, date=None):
        return [dict(r) for r in transactions.list_transactions(self.db, date=date)]
