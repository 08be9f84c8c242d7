import argparse
import sys

from config import get_settings
from controller import PosController
from database import DatabaseManager
from datavisualization import render_day_end_chart
from errors import PosError
from inserting import seed
from logger import setup_logging
from pricing import format_currency
from session import EmployeeSession
from shifts import close_shift, get_open_shift, open_shift, summarize_sales
from store import SqliteBusinessStore


def _parse_item(text):
    product_id, _, qty = text.partition(":")
    return int(product_id), int(qty or 1)


def cmd_products(args, ctl, settings):
    ctl.load_products()
    for p in ctl.visible_products(args.search or "", args.category):
        print(f"{p.id:<4} {p.name:<30} {p.category or '':<12} "
              f"{format_currency(p.selling_price, settings.CURRENCY):>10} {p.quantity:>6}  {ctl.stock_label(p)}")


def cmd_sell(args, ctl, settings):
    if args.username:
        ctl.session.login(args.username, args.password or "")
    ctl.load_products()
    by_id = {p.id: p for p in ctl.products}
    for product_id, qty in map(_parse_item, args.items):
        if product_id not in by_id:
            raise PosError(f"Unknown product {product_id}")
        ctl.add_to_cart(by_id[product_id])
        if qty > 1:
            ctl.update_quantity(product_id, qty - 1)

    if args.discount:
        ctl.apply_discount(args.discount, args.discount_type)
    ctl.new_customer_name = args.customer
    ctl.new_customer_phone = args.phone or ""
    ctl.set_payment(args.pay, args.received)

    receipt = ctl.complete_payment()
    actions = ctl.receipt_actions()
    print(f"Sale complete: {receipt.document_number} total {format_currency(receipt.total, receipt.currency)}")
    if receipt.change_amount > 0:
        print(f"Change due: {format_currency(receipt.change_amount, receipt.currency)}")
    if args.print:
        print(f"Receipt image: {actions.print_receipt()}")
    print(f"Receipt text: {actions.share_receipt()}")


def cmd_open_shift(args, db, settings):
    shift_id = open_shift(db, args.opening_cash, opened_by=args.by, currency=settings.CURRENCY)
    print(f"Shift {shift_id} opened")


def cmd_day_end(args, db, settings):
    money = lambda amount: format_currency(amount, settings.CURRENCY)
    summary = summarize_sales(db, args.date)
    print(f"Sales for {summary['shift_date']}: {money(summary['total_sales'])} "
          f"across {summary['total_receipts']} receipts (discounts {money(summary['total_discounts'])})")
    for key in ("cash_sales", "card_sales", "mobile_money_sales", "bank_transfer_sales"):
        print(f"  {key.replace('_', ' '):<22} {money(summary[key]):>12}")

    if args.actual_cash is not None:
        shift = get_open_shift(db, summary["shift_date"])
        if not shift:
            raise PosError("No open shift to close")
        closed = close_shift(db, shift["id"], args.actual_cash, closed_by=args.by)
        print(f"Expected cash {money(closed['expected_cash'])}, counted {money(closed['actual_cash'])}, "
              f"discrepancy {money(closed['cash_discrepancy'])}")
    if args.chart:
        print(f"Chart: {render_day_end_chart(summary, args.chart, settings.CURRENCY)}")


def build_parser():
    parser = argparse.ArgumentParser(description="Point-of-sale till")
    parser.add_argument('--db', help='Path to the sqlite database')
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('seed', help='Insert demo products and employees')

    p = sub.add_parser('products', help='List sellable products')
    p.add_argument('--search')
    p.add_argument('--category')

    p = sub.add_parser('sell', help='Ring up a sale')
    p.add_argument('items', nargs='+', metavar='PRODUCT_ID[:QTY]')
    p.add_argument('--customer', required=True)
    p.add_argument('--phone')
    p.add_argument('--pay', default='cash', choices=['cash', 'card', 'mobile_money', 'bank_transfer'])
    p.add_argument('--received', help='Cash handed over by the customer')
    p.add_argument('--discount')
    p.add_argument('--discount-type', default='percent', choices=['percent', 'fixed'])
    p.add_argument('--username')
    p.add_argument('--password')
    p.add_argument('--print', action='store_true', help='Also render the receipt image')

    p = sub.add_parser('open-shift', help='Open today\'s shift')
    p.add_argument('--opening-cash', type=float, default=0.0)
    p.add_argument('--by')

    p = sub.add_parser('day-end', help='Show the day\'s sales and optionally close the shift')
    p.add_argument('--date')
    p.add_argument('--actual-cash', type=float)
    p.add_argument('--by')
    p.add_argument('--chart', help='Write a sales-by-method chart to this PNG path')
    return parser


def main(argv=None):
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.DEBUG)
    args = build_parser().parse_args(argv)

    db = DatabaseManager(args.db or settings.DB_PATH)
    try:
        if args.command == 'seed':
            print(f"Seeded {seed(db)} products.")
        elif args.command in ('products', 'sell'):
            ctl = PosController(SqliteBusinessStore(db), EmployeeSession(db), settings)
            (cmd_products if args.command == 'products' else cmd_sell)(args, ctl, settings)
        elif args.command == 'open-shift':
            cmd_open_shift(args, db, settings)
        elif args.command == 'day-end':
            cmd_day_end(args, db, settings)
    except PosError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
