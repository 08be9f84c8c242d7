from datetime import datetime

PRODUCT_FIELDS = ("sku", "name", "category", "selling_price", "quantity", "is_active")


def add_product(db, name, selling_price, quantity, category=None, sku=None, is_active=True):
    conn = db.connect()
    try:
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO products (sku, name, category, selling_price, quantity, is_active) VALUES (?, ?, ?, ?, ?, ?)",
            (sku, name, category, selling_price, quantity, 1 if is_active else 0)
        )
        conn.commit()
        return cur.lastrowid
    finally:
        conn.close()


def get_product(db, product_id):
    conn = db.connect()
    try:
        return conn.execute("SELECT * FROM products WHERE id = ?", (product_id,)).fetchone()
    finally:
        conn.close()


def list_products(db):
    conn = db.connect()
    try:
        return conn.execute("SELECT * FROM products ORDER BY name").fetchall()
    finally:
        conn.close()


def update_product(db, product_id, fields):
    """Overwrite the given columns of a product.

    A changed ``quantity`` is written as-is (last write wins) and logged to
    stock_movements. Returns False when the product does not exist.
    """
    unknown = set(fields) - set(PRODUCT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown product fields: {', '.join(sorted(unknown))}")
    if not fields:
        return True

    conn = db.connect()
    try:
        row = conn.execute("SELECT quantity FROM products WHERE id = ?", (product_id,)).fetchone()
        if not row:
            return False

        columns = ", ".join(f"{name} = ?" for name in fields)
        conn.execute(f"UPDATE products SET {columns} WHERE id = ?", (*fields.values(), product_id))

        if "quantity" in fields:
            change = int(fields["quantity"]) - row["quantity"]
            if change:
                conn.execute(
                    "INSERT INTO stock_movements (product_id, change, reason, created_at) VALUES (?, ?, ?, ?)",
                    (product_id, change, "sale" if change < 0 else "restock",
                     datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
                )
        conn.commit()
        return True
    finally:
        conn.close()
