"""PDF rendering of a settled bill."""

from __future__ import annotations

from decimal import Decimal
from io import BytesIO
from typing import Any

from restopos.models.bill import Bill
from restopos.models.order import Order
from restopos.services.billing import TaxRates, base_amount, calculate_totals, to_decimal
from restopos.services.order_service import format_order_id
from restopos.utils.pdf_fonts import register_pdf_font
from restopos.utils.time import as_utc


def _reportlab():
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    return {
        "colors": colors,
        "A4": A4,
        "ParagraphStyle": ParagraphStyle,
        "getSampleStyleSheet": getSampleStyleSheet,
        "Paragraph": Paragraph,
        "SimpleDocTemplate": SimpleDocTemplate,
        "Spacer": Spacer,
        "Table": Table,
        "TableStyle": TableStyle,
    }


def _format_money(value: Decimal | int | float) -> str:
    return f"{to_decimal(value):.2f}"


def _format_rate(rate: Decimal | None) -> str:
    return f"{rate.normalize():f}%" if rate is not None else "-"


def _build_styles() -> dict[str, Any]:
    font_name = register_pdf_font()
    rl = _reportlab()
    styles = rl["getSampleStyleSheet"]()
    return {
        "font_name": font_name,
        "title": rl["ParagraphStyle"]("BillTitle", parent=styles["Title"], fontName=font_name),
        "normal": rl["ParagraphStyle"]("BillNormal", parent=styles["Normal"], fontName=font_name),
        "footer": rl["ParagraphStyle"]("BillFooter", parent=styles["Italic"], fontName=font_name),
    }


def bill_filename(order: Order, modified: bool = False) -> str:
    suffix = "_modified" if modified else ""
    return f"bill_{format_order_id(order.id)}{suffix}.pdf"


def _summary_rows(order: Order, bill: Bill | None) -> list[list[str]]:
    base = base_amount(order.items)
    rates = TaxRates.from_bill(bill)
    totals = calculate_totals(base, rates)
    rows = [["Subtotal", "", _format_money(base)]]
    for label, rate, amount in (
        ("VAT (low)", rates.vat_low, totals.vat_low_amount),
        ("VAT (high)", rates.vat_high, totals.vat_high_amount),
        ("Service tax", rates.service_tax, totals.service_tax_amount),
        ("Service charge", rates.service_charge, totals.service_charge_amount),
    ):
        if rate:
            rows.append([label, _format_rate(rate), _format_money(amount)])
    if order.discount_amount:
        rows.append(["Discount (not deducted)", "", _format_money(order.discount_amount)])
    rows.append(["Total payable", "", _format_money(totals.total_amount)])
    return rows


def render_bill_pdf(order: Order, bill: Bill | None, business_name: str | None = None) -> bytes:
    """Render one order's bill as an A4 PDF and return the bytes."""
    styles = _build_styles()
    rl = _reportlab()
    created_at = as_utc(order.created_at)

    story: list[Any] = [
        rl["Paragraph"](business_name or "Bill", styles["title"]),
        rl["Paragraph"](f"Order ID: {format_order_id(order.id)}", styles["normal"]),
        rl["Paragraph"](f"Table: {order.table_number if order.table_number is not None else '-'}", styles["normal"]),
        rl["Paragraph"](f"Date: {created_at.strftime('%Y-%m-%d %H:%M')} UTC", styles["normal"]),
    ]
    if order.customer_name:
        story.append(rl["Paragraph"](f"Customer: {order.customer_name}", styles["normal"]))
    story.append(rl["Spacer"](1, 10))

    item_rows = [["Item", "Qty", "Price", "Amount"]]
    for item in order.items:
        price = to_decimal(item.price)
        item_rows.append([item.name, str(item.quantity), _format_money(price), _format_money(price * item.quantity)])
    items_table = rl["Table"](item_rows, colWidths=[250, 50, 80, 90])
    items_table.setStyle(
        rl["TableStyle"](
            [
                ("BACKGROUND", (0, 0), (-1, 0), rl["colors"].lightgrey),
                ("GRID", (0, 0), (-1, -1), 0.5, rl["colors"].black),
                ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
                ("FONTNAME", (0, 0), (-1, -1), styles["font_name"]),
            ]
        )
    )
    story.append(items_table)
    story.append(rl["Spacer"](1, 10))

    summary_table = rl["Table"](_summary_rows(order, bill), colWidths=[250, 130, 90])
    summary_table.setStyle(
        rl["TableStyle"](
            [
                ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                ("LINEABOVE", (0, -1), (-1, -1), 1, rl["colors"].black),
                ("FONTNAME", (0, 0), (-1, -1), styles["font_name"]),
            ]
        )
    )
    story.append(summary_table)
    story.append(rl["Spacer"](1, 16))
    story.append(rl["Paragraph"]("Thank you for dining with us!", styles["footer"]))

    buffer = BytesIO()
    rl["SimpleDocTemplate"](buffer, pagesize=rl["A4"], title=bill_filename(order)).build(story)
    return buffer.getvalue()
