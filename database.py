import sqlite3

from config import get_settings


class DatabaseManager:
    def __init__(self, db_name=None):
        self.db_name = db_name or get_settings().DB_PATH
        self.check_schema()

    def connect(self):
        # Wait for locks instead of failing when another till is writing.
        conn = sqlite3.connect(self.db_name, timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute('PRAGMA foreign_keys = ON')
        return conn

    def check_schema(self):
        conn = self.connect()
        c = conn.cursor()
        c.execute('PRAGMA journal_mode=WAL')
        c.execute('PRAGMA busy_timeout = 30000')

        # Products
        c.execute('''CREATE TABLE IF NOT EXISTS products (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            sku TEXT UNIQUE,
            name TEXT NOT NULL,
            category TEXT,
            selling_price REAL NOT NULL,
            quantity INTEGER NOT NULL DEFAULT 0,
            is_active INTEGER NOT NULL DEFAULT 1
        )''')

        # Customers
        c.execute('''CREATE TABLE IF NOT EXISTS customers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            phone TEXT,
            email TEXT,
            address TEXT,
            notes TEXT,
            created_at TEXT NOT NULL
        )''')

        # Employees; permissions is a comma separated capability list
        c.execute('''CREATE TABLE IF NOT EXISTS employees (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL UNIQUE,
            name TEXT NOT NULL,
            password_hash TEXT NOT NULL,
            role TEXT NOT NULL,
            permissions TEXT NOT NULL DEFAULT '',
            is_active INTEGER NOT NULL DEFAULT 1
        )''')

        # Sale documents
        c.execute('''CREATE TABLE IF NOT EXISTS documents (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            document_number TEXT NOT NULL UNIQUE,
            type TEXT NOT NULL,
            customer_id INTEGER,
            customer_name TEXT NOT NULL,
            customer_phone TEXT,
            subtotal REAL NOT NULL,
            discount_amount REAL NOT NULL DEFAULT 0,
            tax REAL,
            total REAL NOT NULL,
            currency TEXT NOT NULL,
            date TEXT NOT NULL,
            status TEXT NOT NULL,
            payment_method TEXT,
            employee_name TEXT,
            notes TEXT,
            created_at TEXT NOT NULL,
            FOREIGN KEY(customer_id) REFERENCES customers(id)
        )''')

        c.execute('''CREATE TABLE IF NOT EXISTS document_items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            document_id INTEGER NOT NULL,
            position INTEGER NOT NULL,
            description TEXT NOT NULL,
            quantity INTEGER NOT NULL,
            unit_price REAL NOT NULL,
            total REAL NOT NULL,
            FOREIGN KEY(document_id) REFERENCES documents(id)
        )''')

        # Ledger
        c.execute('''CREATE TABLE IF NOT EXISTS transactions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            type TEXT NOT NULL,
            amount REAL NOT NULL,
            currency TEXT NOT NULL,
            description TEXT,
            category TEXT,
            date TEXT NOT NULL,
            created_at TEXT NOT NULL
        )''')

        # Stock Movements
        c.execute('''CREATE TABLE IF NOT EXISTS stock_movements (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            product_id INTEGER NOT NULL,
            change INTEGER NOT NULL,
            reason TEXT NOT NULL,
            created_at TEXT NOT NULL,
            FOREIGN KEY(product_id) REFERENCES products(id)
        )''')

        # Day-end shifts
        c.execute('''CREATE TABLE IF NOT EXISTS pos_shifts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            shift_date TEXT NOT NULL,
            shift_start_time TEXT NOT NULL,
            shift_end_time TEXT,
            opened_by TEXT,
            closed_by TEXT,
            status TEXT NOT NULL DEFAULT 'open',
            opening_cash REAL NOT NULL DEFAULT 0,
            expected_cash REAL NOT NULL DEFAULT 0,
            actual_cash REAL,
            cash_discrepancy REAL,
            discrepancy_notes TEXT,
            total_sales REAL NOT NULL DEFAULT 0,
            cash_sales REAL NOT NULL DEFAULT 0,
            card_sales REAL NOT NULL DEFAULT 0,
            mobile_money_sales REAL NOT NULL DEFAULT 0,
            bank_transfer_sales REAL NOT NULL DEFAULT 0,
            total_receipts INTEGER NOT NULL DEFAULT 0,
            total_discounts REAL NOT NULL DEFAULT 0,
            currency TEXT NOT NULL DEFAULT 'USD',
            notes TEXT
        )''')

        conn.commit()
        conn.close()
