from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from models import Invoice, Invoiceable, InvoiceValidationError, LineItem, to_decimal
from pdf_renderer import PdfRenderer


def three_items():
    return [
        LineItem(price=20, quantity=5, description="Pants"),  # $100 in pants
        LineItem(price=10, quantity=3, description="Shirts"),  # $30 in shirts
        LineItem(price=5, quantity=200, description="Hats"),  # $1000 in hats
    ]


# -----------------------------
# Construction
# -----------------------------
def test_invoice_accepts_options():
    i = Invoice(
        invoice_number=20,
        bill_to="Here",
        ship_to="There",
        notes="These are some notes.",
        line_items=[LineItem(price=10, quantity=3, description="Shirts")],
        shipping_rate=15.00,
        shipping_description="USPS Priority Mail:",
        tax_rate=0.125,
        tax_description="Local Sales Tax, 12.5%",
    )

    assert i.invoice_number == 20
    assert i.bill_to == "Here"
    assert i.ship_to == "There"
    assert i.notes == "These are some notes."
    assert i.line_items[0].description == "Shirts"
    assert i.shipping_rate == Decimal("15.00")
    assert i.shipping_description == "USPS Priority Mail:"
    assert i.tax_rate == Decimal("0.125")
    assert i.tax_description == "Local Sales Tax, 12.5%"


def test_unset_fields_are_absent():
    i = Invoice()
    assert i.invoice_number is None
    assert i.ship_to is None
    assert i.line_items == []
    assert i.invoice_details == []
    assert i.tax_rate == Decimal("0")
    assert i.shipping_rate == Decimal("0")


def test_unknown_option_is_rejected():
    with pytest.raises(TypeError):
        Invoice(colour="blue")


def test_rates_are_decimals_not_floats():
    i = Invoice(tax_rate=0.1, shipping_rate="4.95")
    assert isinstance(i.tax_rate, Decimal)
    assert i.tax_rate == Decimal("0.1")
    assert i.shipping_rate == Decimal("4.95")

    i.tax_rate = None
    assert i.tax_rate == Decimal("0")


@pytest.mark.parametrize("value", ["ten", "", "nan", "Infinity", True, object()])
def test_malformed_numbers_fail_on_assignment(value):
    with pytest.raises(InvoiceValidationError):
        LineItem(price=value)
    with pytest.raises(InvoiceValidationError):
        Invoice(tax_rate=value)


def test_quantity_is_validated_on_reassignment():
    item = LineItem(price=1, quantity=1)
    with pytest.raises(InvoiceValidationError):
        item.quantity = "a dozen"
    assert item.quantity == Decimal("1")


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        to_decimal("abc", "price")


def test_invoice_details_keep_insertion_order():
    i = Invoice(invoice_details={"Ordered By:": "Alan Johnson", "Paid By:": "Dude McDude"})
    assert i.invoice_details == [("Ordered By:", "Alan Johnson"), ("Paid By:", "Dude McDude")]

    i.invoice_details = [("PO:", "1234")]
    assert i.invoice_details == [("PO:", "1234")]


# -----------------------------
# Money
# -----------------------------
def test_line_item_amount_has_no_float_drift():
    item = LineItem(price=0.1, quantity=3)
    assert item.amount() == Decimal("0.3")


def test_fractional_and_negative_quantities():
    assert LineItem(price="2.50", quantity="1.5").amount() == Decimal("3.750")
    assert LineItem(price=10, quantity=-2).amount() == Decimal("-20")


def test_subtotal_totals_all_line_items():
    i = Invoice(line_items=three_items())
    assert i.subtotal() == Decimal("1130")


def test_subtotal_of_no_items_is_zero():
    assert Invoice().subtotal() == Decimal("0")
    assert Invoice().total() == Decimal("0")


def test_tax_is_rounded_to_two_places():
    i = Invoice(tax_rate=0.1)
    i.line_items.append(LineItem(price=20, quantity=5, description="Pants"))
    assert i.tax() == Decimal("10")


def test_tax_rounds_half_up():
    i = Invoice(tax_rate="0.5", line_items=[LineItem(price="0.05", quantity=1)])
    assert i.tax() == Decimal("0.03")


def test_no_tax_on_zero_or_negative_subtotal():
    i = Invoice(tax_rate=0.1)
    i.line_items.append(LineItem(price=-1, quantity=100, description="Negative Priced Pants"))
    assert i.tax() == Decimal("0")

    assert Invoice(tax_rate=0.1).tax() == Decimal("0")


def test_total():
    i = Invoice(tax_rate=0.1)
    i.line_items.extend(three_items())
    assert i.total() == Decimal("1243")


def test_shipping_is_flat_and_added_to_total():
    i = Invoice(shipping_rate=15, line_items=three_items())
    assert i.shipping() == Decimal("15")
    assert i.total() == Decimal("1145")


def test_negative_shipping_is_not_clamped():
    i = Invoice(shipping_rate=-5, line_items=[LineItem(price=10, quantity=1)])
    assert i.shipping() == Decimal("-5")
    assert i.total() == Decimal("5")


# -----------------------------
# Status
# -----------------------------
def test_overdue_when_past_due_and_unpaid():
    i = Invoice(due_at=date.today() - timedelta(days=1))
    assert i.is_overdue()


def test_not_overdue_when_past_due_and_paid():
    i = Invoice(due_at=date.today() - timedelta(days=1), paid_at=date.today())
    assert not i.is_overdue()


def test_not_overdue_on_due_date_or_without_one():
    assert not Invoice(due_at=date.today()).is_overdue()
    assert not Invoice().is_overdue()


def test_overdue_when_due_date_is_a_past_datetime():
    i = Invoice(due_at=datetime(2011, 1, 1, 14, 33, 20, tzinfo=timezone.utc))
    assert i.is_overdue()

    naive = Invoice(due_at=datetime(2011, 1, 1, 14, 33, 20))
    assert naive.is_overdue()


def test_datetime_due_later_today_is_not_overdue():
    i = Invoice(due_at=datetime(2011, 1, 1, 14, 33, 20))
    assert not i.is_overdue(today=date(2011, 1, 1))
    assert i.is_overdue(today=date(2011, 1, 2))


def test_refunded_and_paid_follow_their_timestamps():
    assert not Invoice().is_refunded()
    assert Invoice(refunded_at=date.today()).is_refunded()
    assert not Invoice().is_paid()
    assert Invoice(paid_at=date.today()).is_paid()
    assert Invoice(paid_at="yesterday-ish").is_paid()


# -----------------------------
# Rendering hooks
# -----------------------------
def test_uses_pdf_renderer_by_default():
    assert isinstance(Invoice().renderer, PdfRenderer)


def test_renderer_can_be_swapped():
    class FakeRenderer:
        def __init__(self):
            self.calls = []

        def render(self, invoice):
            self.calls.append(("render", invoice))
            return b"fake"

        def render_to_file(self, invoice, path):
            self.calls.append(("render_to_file", invoice, path))

    i = Invoice()
    fake = FakeRenderer()
    i.renderer = fake

    assert i.render_pdf() == b"fake"
    i.render_pdf_to_file("out.pdf")
    assert fake.calls == [("render", i), ("render_to_file", i, "out.pdf")]


def test_renderer_can_be_passed_in():
    renderer = PdfRenderer(font_size=10)
    assert Invoice(renderer=renderer).renderer is renderer


def test_translation_override():
    i = Invoice(translations={"invoice.total": "Amount Due:"})
    assert i.translation("invoice.total") == "Amount Due:"
    assert i.translation("invoice.tax") is None


def test_other_invoiceables_get_totals():
    class Subscription(Invoiceable):
        def __init__(self, items):
            self.line_items = items
            self.tax_rate = Decimal("0.2")
            self.shipping_rate = Decimal("0")

    sub = Subscription([LineItem(price="9.99", quantity=2)])
    assert sub.subtotal() == Decimal("19.98")
    assert sub.tax() == Decimal("4.00")
    assert sub.total() == Decimal("23.98")
    assert not sub.is_paid()
    assert sub.translation("invoice.total") is None


def test_other_invoiceables_may_use_plain_numbers_for_rates():
    class Subscription(Invoiceable):
        line_items = [LineItem(price=10, quantity=3)]
        tax_rate = 0.1
        shipping_rate = 5

    sub = Subscription()
    assert sub.tax() == Decimal("3.00")
    assert sub.shipping() == Decimal("5")
    assert sub.total() == Decimal("38.00")
