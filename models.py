# models.py
from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from pdf_renderer import PdfRenderer

ZERO = Decimal("0")
CENT = Decimal("0.01")


class InvoiceValidationError(ValueError):
    pass


def to_decimal(value, field_name: str) -> Decimal:
    """
    Coerce a number (or numeric string) to Decimal without going through binary floats.
    Floats are converted via their shortest repr, so 0.1 -> Decimal("0.1").
    """
    if isinstance(value, bool):
        raise InvoiceValidationError(f"{field_name} must be numeric, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            raise InvoiceValidationError(f"{field_name} must be numeric, got {value!r}") from None
    if not result.is_finite():
        raise InvoiceValidationError(f"{field_name} must be a finite number, got {value!r}")
    return result


# -----------------------------
# Line items
# -----------------------------
class LineItem:
    """One billable entry on an invoice."""

    def __init__(
        self,
        price=0,
        quantity=1,
        description: str = "",
        display_price: Optional[str] = None,
        display_quantity: Optional[str] = None,
    ):
        self.price = price
        self.quantity = quantity
        self.description = description
        self.display_price = display_price
        self.display_quantity = display_quantity

    @property
    def price(self) -> Decimal:
        return self._price

    @price.setter
    def price(self, value):
        self._price = to_decimal(value, "price")

    @property
    def quantity(self) -> Decimal:
        return self._quantity

    @quantity.setter
    def quantity(self, value):
        self._quantity = to_decimal(value, "quantity")

    def amount(self) -> Decimal:
        # no rounding here; rounding only happens for tax and for display
        return self.price * self.quantity

    def __repr__(self) -> str:
        return f"LineItem(price={self.price!r}, quantity={self.quantity!r}, description={self.description!r})"


# -----------------------------
# Invoiceable capability
# -----------------------------
class Invoiceable:
    """
    Anything with line items, rates and status dates can be totalled and rendered.

    Subclasses provide `line_items`, `tax_rate` and `shipping_rate`; every other
    field the renderer reads has an "absent" default here.
    """

    invoice_number = None
    bill_to = None
    ship_to = None
    notes = None
    invoice_details = ()
    tax_description = None
    shipping_description = None

    due_at = None
    paid_at = None
    refunded_at = None

    # overrides for config.defaults()
    company_name = None
    company_details = None
    invoice_logo = None
    page_size = None
    currency = None

    _renderer = None

    # ---- renderer slot ----
    @property
    def renderer(self):
        if self._renderer is None:
            self._renderer = PdfRenderer()
        return self._renderer

    @renderer.setter
    def renderer(self, value):
        self._renderer = value

    def render_pdf(self) -> bytes:
        return self.renderer.render(self)

    def render_pdf_to_file(self, path) -> None:
        self.renderer.render_to_file(self, path)

    def translation(self, key: str) -> Optional[str]:
        """Invoice-specific label for a translation key, or None to use the global table."""
        return None

    # ---- money ----
    def subtotal(self) -> Decimal:
        return sum((item.amount() for item in self.line_items), ZERO)

    def tax(self) -> Decimal:
        subtotal = self.subtotal()
        if subtotal <= 0:
            return ZERO
        return (subtotal * to_decimal(self.tax_rate, "tax_rate")).quantize(CENT, rounding=ROUND_HALF_UP)

    def shipping(self) -> Decimal:
        # flat rate, not clamped at zero
        return to_decimal(self.shipping_rate, "shipping_rate")

    def total(self) -> Decimal:
        return self.subtotal() + self.tax() + self.shipping()

    # ---- status ----
    def is_paid(self) -> bool:
        return self.paid_at is not None

    def is_refunded(self) -> bool:
        return self.refunded_at is not None

    def is_overdue(self, today: Optional[date] = None) -> bool:
        due_at = self.due_at
        if due_at is None or self.is_paid():
            return False

        today = today or date.today()
        # datetime is a date subclass, so check it first
        if isinstance(due_at, datetime):
            return due_at < datetime.combine(today, time.min, tzinfo=due_at.tzinfo)
        if isinstance(due_at, date):
            return due_at < today
        return False


# -----------------------------
# Invoice
# -----------------------------
class Invoice(Invoiceable):
    """
    Stick a bunch of line items in it, add some details, and render it out.
    """

    def __init__(
        self,
        *,
        invoice_number=None,
        bill_to: Optional[str] = None,
        ship_to: Optional[str] = None,
        notes: Optional[str] = None,
        line_items: Optional[list[LineItem]] = None,
        shipping_rate=None,
        shipping_description: Optional[str] = None,
        tax_rate=None,
        tax_description: Optional[str] = None,
        due_at=None,
        paid_at=None,
        refunded_at=None,
        currency: Optional[str] = None,
        invoice_details=None,
        company_name: Optional[str] = None,
        company_details: Optional[str] = None,
        invoice_logo=None,
        page_size=None,
        translations: Optional[dict[str, str]] = None,
        renderer=None,
    ):
        self.invoice_number = invoice_number
        self.bill_to = bill_to
        self.ship_to = ship_to
        self.notes = notes
        self.line_items = list(line_items or [])
        self.shipping_rate = shipping_rate
        self.shipping_description = shipping_description
        self.tax_rate = tax_rate
        self.tax_description = tax_description
        self.due_at = due_at
        self.paid_at = paid_at
        self.refunded_at = refunded_at
        self.currency = currency
        self.invoice_details = invoice_details
        self.company_name = company_name
        self.company_details = company_details
        self.invoice_logo = invoice_logo
        self.page_size = page_size
        self.translations = dict(translations or {})
        if renderer is not None:
            self.renderer = renderer

    @property
    def tax_rate(self) -> Decimal:
        return self._tax_rate

    @tax_rate.setter
    def tax_rate(self, value):
        self._tax_rate = ZERO if value is None else to_decimal(value, "tax_rate")

    @property
    def shipping_rate(self) -> Decimal:
        return self._shipping_rate

    @shipping_rate.setter
    def shipping_rate(self, value):
        self._shipping_rate = ZERO if value is None else to_decimal(value, "shipping_rate")

    @property
    def invoice_details(self) -> list[tuple[str, str]]:
        return self._invoice_details

    @invoice_details.setter
    def invoice_details(self, value):
        if value is None:
            value = []
        elif isinstance(value, dict):
            value = value.items()
        self._invoice_details = [(label, detail) for label, detail in value]

    def translation(self, key: str) -> Optional[str]:
        return self.translations.get(key)

    def __repr__(self) -> str:
        return f"Invoice(invoice_number={self.invoice_number!r}, line_items={len(self.line_items)})"
