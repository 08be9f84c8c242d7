import os
from urllib.parse import quote

import qrcode
from PIL import Image, ImageDraw, ImageFont

from errors import ReceiptActionError, ValidationError
from logger import get_logger
from models import DiscountType, PaymentMethod
from pricing import format_currency

logger = get_logger(__name__)


def _text_size(draw_obj, text, font):
    bbox = draw_obj.textbbox((0, 0), text, font=font)
    return (bbox[2] - bbox[0], bbox[3] - bbox[1])


def _wrap_text(draw_obj, text, font, max_w):
    words = (text or '').split()
    if not words:
        return ['']
    lines = []
    cur = words[0]
    for w in words[1:]:
        tw, _ = _text_size(draw_obj, cur + ' ' + w, font)
        if tw <= max_w:
            cur = cur + ' ' + w
        else:
            lines.append(cur)
            cur = w
    lines.append(cur)
    return lines


class ReceiptGenerator:
    WIDTH = 800
    HEADER_H = 200
    LINE_H = 28
    FOOTER_H = 220
    QR_SIZE = 140

    @staticmethod
    def _load_font(size):
        # Try common system fonts, fallback to default
        for f in ("arial.ttf", "DejaVuSans.ttf", "LiberationSans-Regular.ttf"):
            try:
                return ImageFont.truetype(f, size)
            except OSError:
                continue
        return ImageFont.load_default()

    @staticmethod
    def _qr_image(data, size):
        qr = qrcode.QRCode(box_size=4, border=2)
        qr.add_data(data)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white").convert('RGB')
        return img.resize((size, size), Image.NEAREST)

    @classmethod
    def generate(cls, receipt, receipts_dir, business_name=""):
        """Render ``receipt`` to ``<receipts_dir>/<document_number>.png`` and return the path."""
        os.makedirs(receipts_dir, exist_ok=True)
        png_path = os.path.join(receipts_dir, f"{receipt.document_number}.png")
        money = lambda amount: format_currency(amount, receipt.currency)

        width = cls.WIDTH
        line_h = cls.LINE_H
        f_head = cls._load_font(28)
        f_sub = cls._load_font(16)
        f_body = cls._load_font(14)
        f_mono = cls._load_font(12)

        x = 40
        right_boundary = width - x
        value_x = right_boundary - 20
        col_total_right = value_x
        col_price_right = value_x - 120
        col_qty_center = col_price_right - 60
        item_col_w = max(80, int(col_qty_center - x) - 12)

        # Wrap item names first so the image height fits every line
        tmp_draw = ImageDraw.Draw(Image.new('RGB', (1, 1)))
        prepared_items = []
        total_items_height = 0
        for it in receipt.items:
            lines = _wrap_text(tmp_draw, it.description, f_mono, item_col_w)
            block_h = len(lines) * line_h + 6
            total_items_height += block_h
            prepared_items.append((lines, str(it.quantity), f"{it.unit_price:.2f}", f"{it.total:.2f}"))

        items_h = max(200, total_items_height + 20)
        height = cls.HEADER_H + items_h + cls.FOOTER_H

        img = Image.new('RGB', (width, height), color=(255, 255, 255))
        draw = ImageDraw.Draw(img)

        # Header
        y = 30
        draw.text((x, y), business_name or "Receipt", font=f_head, fill=(20, 20, 20))
        y += 40
        draw.text((x, y), f"Receipt #: {receipt.document_number}", font=cls._load_font(18), fill=(0, 0, 0))
        y += 24
        draw.text((x, y), f"Date: {receipt.date}", font=f_body, fill=(0, 0, 0))
        y += 20
        draw.text((x, y), f"Customer: {receipt.customer_name}", font=f_body, fill=(0, 0, 0))
        y += 20
        if receipt.employee_name:
            draw.text((x, y), f"Served by: {receipt.employee_name}", font=f_body, fill=(0, 0, 0))
        y += 26

        draw.line((x, y, width - x, y), fill=(200, 200, 200), width=1)
        y += 12

        # Column headers
        draw.text((x, y), "Item", font=f_mono, fill=(0, 0, 0))
        tw_q, _ = _text_size(draw, "Qty", f_mono)
        draw.text((col_qty_center - tw_q / 2, y), "Qty", font=f_mono, fill=(0, 0, 0))
        tw_p, _ = _text_size(draw, "Price", f_mono)
        draw.text((col_price_right - tw_p, y), "Price", font=f_mono, fill=(0, 0, 0))
        tw_t, _ = _text_size(draw, "Total", f_mono)
        draw.text((col_total_right - tw_t, y), "Total", font=f_mono, fill=(0, 0, 0))
        y += 18
        draw.line((x, y, width - x, y), fill=(230, 230, 230), width=1)
        y += 8

        for lines, qty, price, total in prepared_items:
            for i, ln in enumerate(lines):
                draw.text((x, y), ln, font=f_mono, fill=(20, 20, 20))
                if i == 0:
                    qw, _ = _text_size(draw, qty, f_mono)
                    draw.text((col_qty_center - qw / 2, y), qty, font=f_mono, fill=(20, 20, 20))
                    pw, _ = _text_size(draw, price, f_mono)
                    draw.text((col_price_right - pw, y), price, font=f_mono, fill=(20, 20, 20))
                    tw_item, _ = _text_size(draw, total, f_mono)
                    draw.text((col_total_right - tw_item, y), total, font=f_mono, fill=(20, 20, 20))
                y += line_h
            draw.line((x, y, width - x, y), fill=(245, 245, 245), width=1)
            y += 6

        # Totals, right-aligned
        y = max(y, cls.HEADER_H + items_h) + 8
        totals = [f"Subtotal: {money(receipt.subtotal)}"]
        if receipt.discount_amount > 0:
            totals.append(f"Discount: -{money(receipt.discount_amount)}")
        if receipt.tax_amount > 0:
            totals.append(f"Tax: {money(receipt.tax_amount)}")
        totals.append(f"Total: {money(receipt.total)}")
        totals.append(f"Payment: {receipt.payment_method.label}")
        if receipt.payment_method == PaymentMethod.CASH:
            totals.append(f"Amount Received: {money(receipt.amount_received)}")
            if receipt.change_amount > 0:
                totals.append(f"Change: {money(receipt.change_amount)}")
        for txt in totals:
            twt, _ = _text_size(draw, txt, f_body)
            fill = (0, 100, 0) if txt.startswith(("Total", "Change")) else (0, 0, 0)
            draw.text((value_x - twt, y), txt, font=f_body, fill=fill)
            y += line_h - 6

        draw.text((x, height - 50), "Thank you for your purchase!", font=f_sub, fill=(80, 80, 80))

        # QR of the receipt number in the upper-right header area
        qr_img = cls._qr_image(receipt.document_number, cls.QR_SIZE)
        img.paste(qr_img, (width - cls.QR_SIZE - 20, min(30, cls.HEADER_H - cls.QR_SIZE - 10)))

        img.save(png_path)
        return png_path


def receipt_text(receipt, business_name=""):
    money = lambda amount: format_currency(amount, receipt.currency)
    lines = []
    if business_name:
        lines.append(business_name)
    lines.append(f"Receipt Number: {receipt.document_number}")
    lines.append(f"Date: {receipt.date}")
    lines.append(f"Customer: {receipt.customer_name}")
    if receipt.employee_name:
        lines.append(f"Served by: {receipt.employee_name}")
    lines.append("")
    lines.append("Items:")
    for index, it in enumerate(receipt.items, start=1):
        lines.append(f"{index}. {it.description} - Qty: {it.quantity} x {money(it.unit_price)} = {money(it.total)}")
    lines.append("")
    lines.append(f"Subtotal: {money(receipt.subtotal)}")
    if receipt.discount_amount > 0:
        label = "Discount"
        if receipt.discount_type == DiscountType.PERCENT and receipt.subtotal > 0:
            label = f"Discount ({receipt.discount_amount / receipt.subtotal * 100:g}%)"
        lines.append(f"{label}: -{money(receipt.discount_amount)}")
    if receipt.tax_amount > 0:
        lines.append(f"Tax: {money(receipt.tax_amount)}")
    lines.append(f"Total: {money(receipt.total)}")
    lines.append(f"Payment Method: {receipt.payment_method.label}")
    if receipt.payment_method == PaymentMethod.CASH:
        lines.append(f"Amount Received: {money(receipt.amount_received)}")
        lines.append(f"Change: {money(receipt.change_amount)}")
    return "\n".join(lines) + "\n"


def email_url(receipt, customer_email, business_name=""):
    """Build a mailto: link carrying the receipt summary."""
    if not customer_email:
        raise ValidationError(
            "Customer email not available. Please select a customer with an email address."
        )
    money = lambda amount: format_currency(amount, receipt.currency)
    subject = f"Receipt {receipt.document_number} - {business_name}".rstrip(" -")
    items = "\n".join(f"- {it.description} ({it.quantity}x) = {money(it.total)}" for it in receipt.items)
    body = (
        "Thank you for your purchase!\n\n"
        f"Receipt Number: {receipt.document_number}\n"
        f"Date: {receipt.date}\n"
        f"Total: {money(receipt.total)}\n"
        f"Payment Method: {receipt.payment_method.label}\n\n"
        f"Items:\n{items}\n"
    )
    return f"mailto:{customer_email}?subject={quote(subject)}&body={quote(body)}"


class ReceiptActions:
    """Print, email and share hooks for a finished receipt."""

    def __init__(self, receipt, business_name="", receipts_dir="receipts"):
        self.receipt = receipt
        self.business_name = business_name
        self.receipts_dir = receipts_dir

    def print_receipt(self):
        try:
            path = ReceiptGenerator.generate(self.receipt, self.receipts_dir, self.business_name)
        except OSError as e:
            raise ReceiptActionError(f"Failed to generate receipt for printing: {e}") from e
        logger.info("receipt_printed", document_number=self.receipt.document_number, path=path)
        return path

    def email_receipt(self, customer_email):
        url = email_url(self.receipt, customer_email, self.business_name)
        logger.info("receipt_email_prepared", document_number=self.receipt.document_number)
        return url

    def share_receipt(self):
        path = os.path.join(self.receipts_dir, f"{self.receipt.document_number}.txt")
        try:
            os.makedirs(self.receipts_dir, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as fh:
                fh.write(receipt_text(self.receipt, self.business_name))
        except OSError as e:
            raise ReceiptActionError(f"Failed to export receipt: {e}") from e
        logger.info("receipt_shared", document_number=self.receipt.document_number, path=path)
        return path
