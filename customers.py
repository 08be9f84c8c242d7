from datetime import datetime


def add_customer(db, fields):
    name = (fields.get("name") or "").strip()
    if not name:
        raise ValueError("Customer name is required")

    conn = db.connect()
    try:
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO customers (name, phone, email, address, notes, created_at) VALUES (?, ?, ?, ?, ?, ?)",
            (name, fields.get("phone"), fields.get("email"), fields.get("address"), fields.get("notes"),
             datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
        )
        conn.commit()
        return conn.execute("SELECT * FROM customers WHERE id = ?", (cur.lastrowid,)).fetchone()
    finally:
        conn.close()


def list_customers(db):
    conn = db.connect()
    try:
        return conn.execute("SELECT * FROM customers ORDER BY name").fetchall()
    finally:
        conn.close()
