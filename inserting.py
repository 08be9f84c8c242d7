import sqlite3
import time

from logger import get_logger
from session import APPLY_DISCOUNTS, hash_password

logger = get_logger(__name__)

# (name, category, selling_price, quantity)
DEMO_PRODUCTS = [
    ("Chicken Sandwich", "Meals", 4.50, 50),
    ("Beef Burger", "Meals", 5.80, 50),
    ("Spaghetti", "Meals", 3.95, 25),
    ("Cola Zero", "Drinks", 1.45, 100),
    ("Bottled Water", "Drinks", 0.80, 200),
    ("Orange Juice", "Drinks", 1.90, 40),
    ("Potato Chips", "Snacks", 1.55, 30),
    ("Corn Bits", "Snacks", 0.60, 100),
    ("Chocolate Bar", "Desserts", 1.35, 80),
    ("Umbrella", "Others", 9.50, 10),
]

# (username, display name, password, role, permissions)
DEMO_EMPLOYEES = [
    ("owner", "Store Owner", "owner123", "owner", ""),
    ("manager", "Shift Manager", "manager123", "manager", APPLY_DISCOUNTS),
    ("cashier", "Front Cashier", "cashier123", "cashier", ""),
]


def commit_with_retry(conn, retries=6, initial_delay=0.5):
    """Attempt to commit, retrying on `sqlite3.OperationalError: database is locked`.

    Retries use exponential backoff (initial_delay * 2**attempt).
    """
    last_exc = None
    for attempt in range(retries):
        try:
            conn.commit()
            return
        except sqlite3.OperationalError as e:
            last_exc = e
            msg = str(e).lower()
            if 'locked' in msg or 'busy' in msg:
                time.sleep(initial_delay * (2 ** attempt))
                continue
            raise
    raise last_exc


def seed(db):
    """Insert the demo catalog and employees. Rows that already exist are left alone."""
    conn = db.connect()
    try:
        c = conn.cursor()
        existing = {r["name"] for r in c.execute("SELECT name FROM products").fetchall()}
        added = 0
        for name, category, price, quantity in DEMO_PRODUCTS:
            if name in existing:
                continue
            c.execute("INSERT INTO products (name, category, selling_price, quantity) VALUES (?,?,?,?)",
                      (name, category, price, quantity))
            added += 1

        for username, display_name, password, role, permissions in DEMO_EMPLOYEES:
            c.execute(
                "INSERT OR IGNORE INTO employees (username, name, password_hash, role, permissions) VALUES (?,?,?,?,?)",
                (username, display_name, hash_password(password), role, permissions)
            )
        commit_with_retry(conn)
    finally:
        conn.close()

    logger.info("database_seeded", products_added=added)
    return added
