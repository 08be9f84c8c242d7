from datetime import datetime


def add_transaction(db, fields):
    """
    Example input:
    {"type": "sale", "amount": 27.0, "currency": "USD",
     "description": "POS Sale - Jane", "category": "sales", "date": "2026-10-18"}
    """
    conn = db.connect()
    try:
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO transactions (type, amount, currency, description, category, date, created_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (fields["type"], fields["amount"], fields["currency"], fields.get("description"),
             fields.get("category"), fields["date"], datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
        )
        conn.commit()
        return cur.lastrowid
    finally:
        conn.close()


def list_transactions(db, date=None):
    conn = db.connect()
    try:
        if date:
            return conn.execute("SELECT * FROM transactions WHERE date = ? ORDER BY id", (date,)).fetchall()
        return conn.execute("SELECT * FROM transactions ORDER BY id").fetchall()
    finally:
        conn.close()
