"""Money arithmetic shared by the store and billing.

Amounts are Decimals rounded half-up to cents. Line totals are rounded
first, then the subtotal; tax is rounded on its own and the total is the sum
of the two rounded figures. This can differ by one cent from rounding only
``subtotal * 1.19`` and is kept as a known approximation.
"""

import dataclasses
from decimal import ROUND_HALF_UP, Decimal

from hospital_admin.store.models import Invoice, InvoiceItem

VAT_RATE = Decimal("0.19")
CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Convert a price to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(unit_price, quantity: int) -> Decimal:
    return round_money(to_decimal(unit_price) * quantity)


def compute_totals(items: list[InvoiceItem]) -> tuple[Decimal, Decimal, Decimal]:
    """Return (subtotal, tax, total) for a list of line items."""
    subtotal = round_money(sum((item.total for item in items), Decimal("0")))
    tax = round_money(subtotal * VAT_RATE)
    total = round_money(subtotal + tax)
    return subtotal, tax, total


def with_invoice_totals(invoice: Invoice) -> Invoice:
    """Return the invoice with line and invoice totals recomputed from its items."""
    items = [
        dataclasses.replace(
            item,
            unit_price=to_decimal(item.unit_price),
            total=line_total(item.unit_price, item.quantity),
        )
        for item in invoice.items
    ]
    subtotal, tax, total = compute_totals(items)
    return dataclasses.replace(invoice, items=items, subtotal=subtotal, tax=tax, total=total)
