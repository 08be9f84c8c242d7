from datetime import datetime

NUMBER_PREFIXES = {"receipt": "RCP", "invoice": "INV", "quotation": "QUO"}


def _next_document_number(conn, doc_type, date):
    prefix = f"{NUMBER_PREFIXES.get(doc_type, 'DOC')}-{date.replace('-', '')}-"
    row = conn.execute(
        "SELECT MAX(document_number) AS last FROM documents WHERE document_number LIKE ?", (prefix + "%",)
    ).fetchone()
    sequence = int(row["last"][len(prefix):]) if row["last"] else 0
    return f"{prefix}{sequence + 1:04d}"


def add_document(db, fields):
    """Insert a document and its items, returning the stored document as a dict.

    The document number is generated here: one running sequence per type and day,
    continuing from the highest number already issued. The write lock is taken
    before the number is read so two tills cannot issue the same one.
    """
    date = fields.get("date") or datetime.now().strftime("%Y-%m-%d")
    conn = db.connect()
    try:
        cur = conn.cursor()
        cur.execute("BEGIN IMMEDIATE")
        number = _next_document_number(conn, fields["type"], date)
        cur.execute("""
            INSERT INTO documents (document_number, type, customer_id, customer_name, customer_phone,
                                   subtotal, discount_amount, tax, total, currency, date, status,
                                   payment_method, employee_name, notes, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (number, fields["type"], fields.get("customer_id"), fields["customer_name"],
              fields.get("customer_phone"), fields["subtotal"], fields.get("discount_amount") or 0.0,
              fields.get("tax"), fields["total"], fields["currency"], date, fields["status"],
              fields.get("payment_method"), fields.get("employee_name"), fields.get("notes"),
              datetime.now().strftime("%Y-%m-%d %H:%M:%S")))
        document_id = cur.lastrowid

        for position, it in enumerate(fields.get("items") or []):
            cur.execute(
                "INSERT INTO document_items (document_id, position, description, quantity, unit_price, total) VALUES (?,?,?,?,?,?)",
                (document_id, position, it["description"], it["quantity"], it["unit_price"], it["total"])
            )

        conn.commit()
        return _load(conn, document_id)
    finally:
        conn.close()


def _load(conn, document_id):
    row = conn.execute("SELECT * FROM documents WHERE id = ?", (document_id,)).fetchone()
    if not row:
        return None
    doc = dict(row)
    items = conn.execute(
        "SELECT description, quantity, unit_price, total FROM document_items WHERE document_id = ? ORDER BY position",
        (document_id,)
    ).fetchall()
    doc["items"] = [dict(it) for it in items]
    return doc


def get_document(db, document_id):
    conn = db.connect()
    try:
        return _load(conn, document_id)
    finally:
        conn.close()


def list_documents(db, date=None, doc_type="receipt"):
    conn = db.connect()
    try:
        query = "SELECT id FROM documents WHERE type = ?"
        params = [doc_type]
        if date:
            query += " AND date = ?"
            params.append(date)
        rows = conn.execute(query + " ORDER BY id", params).fetchall()
        return [_load(conn, r["id"]) for r in rows]
    finally:
        conn.close()
