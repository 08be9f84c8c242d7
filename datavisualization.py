"""Sales charts rendered to PNG files (no GUI needed)."""
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from shifts import SALES_COLUMNS  # noqa: E402


def _save(fig, path):
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
    return path


def render_day_end_chart(summary, path, currency="USD"):
    """Bar chart of one day's sales per payment method."""
    labels = [method.replace("_", " ").title() for method in SALES_COLUMNS]
    values = [summary.get(column, 0.0) for column in SALES_COLUMNS.values()]

    fig = plt.figure(figsize=(6, 4))
    ax = fig.add_subplot(111)
    if sum(values) > 0:
        ax.bar(labels, values, color=['#2ca02c', '#1f77b4', '#ff7f0e', '#9467bd'])
        ax.set_title(f"Sales by Payment Method - {summary.get('shift_date', '')}")
        ax.set_ylabel(f"Sales ({currency})")
    else:
        ax.text(0.5, 0.5, 'No sales for this day', ha='center', va='center')
        ax.set_axis_off()
    return _save(fig, path)


def render_daily_sales_chart(db, start, end, path, currency="USD"):
    """Line chart of paid receipt totals per day between ``start`` and ``end`` (YYYY-MM-DD)."""
    conn = db.connect()
    try:
        rows = conn.execute("""
            SELECT date AS day, SUM(total) AS total
            FROM documents
            WHERE type = 'receipt' AND status = 'paid' AND date BETWEEN ? AND ?
            GROUP BY day
            ORDER BY day
        """, (start, end)).fetchall()
    finally:
        conn.close()
    days = [r['day'] for r in rows]
    totals = [r['total'] for r in rows]

    fig = plt.figure(figsize=(6, 4))
    ax = fig.add_subplot(111)
    if days:
        ax.plot(days, totals, marker='o', color='#1f77b4')
        ax.set_title('Daily Sales')
        ax.set_xlabel('Date')
        ax.set_ylabel(f'Total Sales ({currency})')
        ax.tick_params(axis='x', rotation=45)
    else:
        ax.text(0.5, 0.5, 'No sales in range', ha='center', va='center')
    return _save(fig, path)
