"""Opening and closing the till for the day.

Closing a shift totals the day's paid receipts per payment method and compares
the counted cash against ``opening_cash + cash_sales``.
"""
from datetime import date, datetime

from errors import ShiftError
from logger import get_logger
from models import PaymentMethod

logger = get_logger(__name__)

SALES_COLUMNS = {
    PaymentMethod.CASH.value: "cash_sales",
    PaymentMethod.CARD.value: "card_sales",
    PaymentMethod.MOBILE_MONEY.value: "mobile_money_sales",
    PaymentMethod.BANK_TRANSFER.value: "bank_transfer_sales",
}


def _now():
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def get_open_shift(db, shift_date=None):
    shift_date = shift_date or date.today().isoformat()
    conn = db.connect()
    try:
        row = conn.execute(
            "SELECT * FROM pos_shifts WHERE shift_date = ? AND status = 'open'", (shift_date,)
        ).fetchone()
        return dict(row) if row else None
    finally:
        conn.close()


def open_shift(db, opening_cash=0.0, shift_date=None, opened_by=None, currency="USD"):
    shift_date = shift_date or date.today().isoformat()
    if get_open_shift(db, shift_date):
        raise ShiftError(f"A shift is already open for {shift_date}")

    conn = db.connect()
    try:
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO pos_shifts (shift_date, shift_start_time, opened_by, status, opening_cash, expected_cash, currency) "
            "VALUES (?, ?, ?, 'open', ?, ?, ?)",
            (shift_date, _now(), opened_by, opening_cash, opening_cash, currency)
        )
        conn.commit()
        shift_id = cur.lastrowid
    finally:
        conn.close()
    logger.info("shift_opened", shift_id=shift_id, shift_date=shift_date, opening_cash=opening_cash)
    return shift_id


def summarize_sales(db, shift_date=None):
    shift_date = shift_date or date.today().isoformat()
    summary = {column: 0.0 for column in SALES_COLUMNS.values()}
    summary.update({"shift_date": shift_date, "total_sales": 0.0, "total_receipts": 0, "total_discounts": 0.0})

    conn = db.connect()
    try:
        rows = conn.execute("""
            SELECT payment_method, COUNT(*) AS receipts, SUM(total) AS total, SUM(discount_amount) AS discounts
            FROM documents
            WHERE type = 'receipt' AND status = 'paid' AND date = ?
            GROUP BY payment_method
        """, (shift_date,)).fetchall()
    finally:
        conn.close()

    for r in rows:
        column = SALES_COLUMNS.get(r["payment_method"])
        if column:
            summary[column] += r["total"] or 0.0
        summary["total_sales"] += r["total"] or 0.0
        summary["total_receipts"] += r["receipts"]
        summary["total_discounts"] += r["discounts"] or 0.0
    return summary


def close_shift(db, shift_id, actual_cash, closed_by=None, notes=None, discrepancy_notes=None):
    conn = db.connect()
    try:
        shift = conn.execute("SELECT * FROM pos_shifts WHERE id = ?", (shift_id,)).fetchone()
    finally:
        conn.close()
    if not shift:
        raise ShiftError(f"Shift {shift_id} not found")
    if shift["status"] != "open":
        raise ShiftError(f"Shift {shift_id} is already closed")

    summary = summarize_sales(db, shift["shift_date"])
    expected_cash = shift["opening_cash"] + summary["cash_sales"]
    discrepancy = actual_cash - expected_cash

    conn = db.connect()
    try:
        conn.execute("""
            UPDATE pos_shifts SET
                shift_end_time = ?, closed_by = ?, status = 'closed',
                expected_cash = ?, actual_cash = ?, cash_discrepancy = ?, discrepancy_notes = ?,
                total_sales = ?, cash_sales = ?, card_sales = ?, mobile_money_sales = ?,
                bank_transfer_sales = ?, total_receipts = ?, total_discounts = ?, notes = ?
            WHERE id = ?
        """, (_now(), closed_by, expected_cash, actual_cash, discrepancy, discrepancy_notes,
              summary["total_sales"], summary["cash_sales"], summary["card_sales"],
              summary["mobile_money_sales"], summary["bank_transfer_sales"],
              summary["total_receipts"], summary["total_discounts"], notes, shift_id))
        conn.commit()
        row = conn.execute("SELECT * FROM pos_shifts WHERE id = ?", (shift_id,)).fetchone()
    finally:
        conn.close()

    if abs(discrepancy) >= 0.005:
        logger.warning("shift_cash_discrepancy", shift_id=shift_id, expected=expected_cash,
                       actual=actual_cash, discrepancy=discrepancy)
    logger.info("shift_closed", shift_id=shift_id, total_sales=summary["total_sales"])
    return dict(row)
