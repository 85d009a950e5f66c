# pdf_renderer.py
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from reportlab.lib import colors

from config import Logo, defaults, resolve_page_size
from money import format_money
from pdf_canvas import PdfCanvas, coerce_font
from translations import translate

logger = logging.getLogger(__name__)

STAMP_COLOR = colors.HexColor("#cc0000")
RULE_COLOR = colors.HexColor("#cccccc")
ROW_COLORS = [colors.HexColor("#dfdfdf"), colors.HexColor("#ffffff")]

BILL_TO_WIDTH = 200
DEFAULT_FONT = "Helvetica"
DEFAULT_FONT_SIZE = 8


def invoice_or_default(invoice, name: str):
    value = getattr(invoice, name, None)
    if value is not None and value != "":
        return value
    return getattr(defaults(), name)


def format_quantity(quantity) -> str:
    """
    Plain decimal notation, always with a fractional part: 5 -> "5.0", 2.50 -> "2.5".
    """
    text = format(Decimal(quantity).normalize(), "f")
    return text if "." in text else f"{text}.0"


# -----------------------------
# Table style helpers
# -----------------------------
def _padding(top, right=None, bottom=None, left=None):
    right = top if right is None else right
    bottom = top if bottom is None else bottom
    left = right if left is None else left
    cells = ((0, 0), (-1, -1))
    return [
        ("TOPPADDING", *cells, top),
        ("RIGHTPADDING", *cells, right),
        ("BOTTOMPADDING", *cells, bottom),
        ("LEFTPADDING", *cells, left),
    ]


def _font(pdf, start, stop, *, bold=False, size=None):
    commands = []
    if bold:
        commands.append(("FONTNAME", start, stop, pdf.bold_font_name))
    if size:
        commands.append(("FONTSIZE", start, stop, size))
        commands.append(("LEADING", start, stop, pdf.leading(size)))
    return commands


# -----------------------------
# Render context
# -----------------------------
class RenderContext:
    """Everything a stage needs: the invoice, the canvas and the lookup helpers."""

    def __init__(self, invoice, pdf, font_size=DEFAULT_FONT_SIZE):
        self.invoice = invoice
        self.pdf = pdf
        self.font_size = font_size

    def invoice_or_default(self, name: str):
        return invoice_or_default(self.invoice, name)

    def t(self, key: str) -> str:
        """Invoice-specific translation first, then the global table."""
        lookup = getattr(self.invoice, "translation", None)
        text = lookup(key) if lookup else None
        return text or translate(key, defaults().locale)

    def money(self, amount) -> str:
        return format_money(amount, self.invoice_or_default("currency"))

    def format_date(self, value) -> str:
        if isinstance(value, date):
            return value.strftime(defaults().date_format)
        return str(value)


# -----------------------------
# Stages
# -----------------------------
def stamp_text(ctx: RenderContext):
    invoice = ctx.invoice
    if invoice.is_refunded():
        return ctx.t("status.refunded")
    if invoice.is_paid():
        return ctx.t("status.paid")
    if invoice.is_overdue():
        return ctx.t("status.overdue")
    return None


def render_stamp(ctx: RenderContext) -> None:
    stamp = stamp_text(ctx)
    if not stamp:
        return

    pdf = ctx.pdf
    with pdf.floating():
        with pdf.bounding_box((150, pdf.cursor - 50), width=pdf.bounds.width - 300):
            pdf.draw_text(stamp, size=25, bold=True, align="center", rotate=15, color=STAMP_COLOR)


def company_table_data(ctx: RenderContext):
    rows = [[ctx.invoice_or_default("company_name").strip()]]
    rows += [[line] for line in ctx.invoice_or_default("company_details").splitlines()]
    return rows


def render_company_banner(ctx: RenderContext) -> None:
    pdf = ctx.pdf
    top = pdf.bounds.height

    # logo, top left
    logo_height = 0
    logo = ctx.invoice_or_default("invoice_logo")
    if logo:
        logo = Logo.coerce(logo)
        logo_height = pdf.draw_image(logo.filename, at=(0, top), width=logo.width, height=logo.height)

    # company name + details, top right
    rows = company_table_data(ctx)
    style = [*_padding(0), *_font(pdf, (0, 0), (0, 0), bold=True, size=12)]
    width, height = pdf.measure_table(rows, style=style)
    with pdf.floating():
        pdf.move_cursor_to(top)
        pdf.draw_table(rows, style=style, x=pdf.bounds.width - width)

    pdf.move_cursor_to(top - max(logo_height, height + 5) - 20)


def render_bill_to_ship_to(ctx: RenderContext) -> None:
    pdf = ctx.pdf
    invoice = ctx.invoice
    style = [*_padding(2, 0), *_font(pdf, (0, 0), (0, 0), bold=True)]

    with pdf.floating():
        pdf.draw_table(
            [[ctx.t("invoice.bill_to")], [invoice.bill_to or ""]],
            col_widths=[BILL_TO_WIDTH],
            style=style,
        )
        bottom = pdf.cursor

    if invoice.ship_to:
        pdf.draw_table(
            [[ctx.t("invoice.ship_to")], [invoice.ship_to]],
            col_widths=[BILL_TO_WIDTH],
            style=style,
            x=pdf.bounds.width - BILL_TO_WIDTH,
        )

    # start below whichever of the two ran longer
    pdf.move_cursor_to(min(bottom, pdf.cursor) - 20)


def invoice_details_table_data(ctx: RenderContext):
    invoice = ctx.invoice
    data = []

    if invoice.invoice_number not in (None, ""):
        data.append([ctx.t("invoice.invoice_no"), str(invoice.invoice_number)])

    for key, value in (
        ("invoice.due_date", invoice.due_at),
        ("invoice.paid_date", invoice.paid_at),
        ("invoice.refunded_date", invoice.refunded_at),
    ):
        if value is not None:
            data.append([ctx.t(key), ctx.format_date(value)])

    data.extend([str(label), str(value)] for label, value in invoice.invoice_details)
    return data


def render_invoice_details_table(ctx: RenderContext) -> None:
    data = invoice_details_table_data(ctx)
    if not data:
        return

    pdf = ctx.pdf
    pdf.draw_table(data, style=[
        *_padding(1, 10, 1, 1),
        *_font(pdf, (0, 0), (-1, -1), bold=True),
        ("ALIGN", (-1, 0), (-1, -1), "RIGHT"),
    ])


def line_items_table_data(ctx: RenderContext):
    header = [
        ctx.t("line_item.description"),
        ctx.t("line_item.unit_price"),
        ctx.t("line_item.quantity"),
        ctx.t("line_item.amount"),
    ]
    rows = [
        [
            item.description or "",
            item.display_price or ctx.money(item.price),
            item.display_quantity or format_quantity(item.quantity),
            ctx.money(item.amount()),
        ]
        for item in ctx.invoice.line_items
    ]
    return [header, *rows]


def line_items_column_widths(ctx: RenderContext, data) -> list[float]:
    """
    Price, quantity and amount get their natural width; description takes the rest.
    """
    widths = ctx.pdf.measure_column_widths(data, horizontal_padding=20, bold_rows=(0,))
    widths[0] = ctx.pdf.bounds.width - widths[1] - widths[2] - widths[3]
    return widths


def render_line_items_table(ctx: RenderContext) -> None:
    pdf = ctx.pdf
    data = line_items_table_data(ctx)

    style = [
        *_padding(5, 10),
        *_font(pdf, (0, 0), (-1, 0), bold=True),
        ("ALIGN", (1, 0), (-1, 0), "CENTER"),
    ]
    if len(data) > 1:
        style += [
            ("GRID", (0, 1), (-1, -1), 0.5, RULE_COLOR),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), ROW_COLORS),
            ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ]

    pdf.move_down(20)
    pdf.draw_table(data, col_widths=line_items_column_widths(ctx, data), style=style, repeat_rows=1)


def totals_table_data(ctx: RenderContext):
    invoice = ctx.invoice
    data = []

    if invoice.tax_rate > 0 or invoice.shipping_rate > 0:
        data.append([ctx.t("invoice.subtotal"), ctx.money(invoice.subtotal())])

    if invoice.tax_rate > 0:
        data.append([invoice.tax_description or ctx.t("invoice.tax"), ctx.money(invoice.tax())])

    if invoice.shipping_rate > 0:
        data.append([invoice.shipping_description or ctx.t("invoice.shipping"), ctx.money(invoice.shipping())])

    data.append([ctx.t("invoice.total"), ctx.money(invoice.total())])
    return data


def render_totals_table(ctx: RenderContext) -> None:
    pdf = ctx.pdf
    data = totals_table_data(ctx)
    style = [
        *_font(pdf, (0, 0), (0, -1), bold=True),
        *_font(pdf, (0, -1), (-1, -1), size=ctx.font_size + 4),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
    ]

    width, _ = pdf.measure_table(data, style=style)
    pdf.draw_table(data, style=style, x=pdf.bounds.width - width)
    pdf.move_down(2)


def render_notes(ctx: RenderContext) -> None:
    notes = ctx.invoice.notes
    if not notes:
        return

    pdf = ctx.pdf
    pdf.move_down(30)
    pdf.draw_text(ctx.t("invoice.notes"), bold=True)
    pdf.stroke_horizontal_rule(offset=3, line_width=0.5, color=RULE_COLOR)
    pdf.move_down(10)
    pdf.draw_text(str(notes))


def render_page_numbers(ctx: RenderContext) -> None:
    pdf = ctx.pdf
    if pdf.page_count > 1:
        pdf.number_pages("<page> / <total>", at=(pdf.bounds.width - 18, -15))


DEFAULT_STAGES = (
    render_stamp,
    render_company_banner,
    render_bill_to_ship_to,
    render_invoice_details_table,
    render_line_items_table,
    render_totals_table,
    render_notes,
    render_page_numbers,
)


# -----------------------------
# Renderer
# -----------------------------
class PdfRenderer:
    """
    Renders anything Invoiceable to PDF. Usually reached through
    `invoice.render_pdf()` / `invoice.render_pdf_to_file(path)`.
    """

    def __init__(self, font=DEFAULT_FONT, font_size=DEFAULT_FONT_SIZE, stages=DEFAULT_STAGES, canvas_factory=PdfCanvas):
        self.font = font
        self.font_size = font_size
        self.stages = tuple(stages)
        self.canvas_factory = canvas_factory

    @property
    def font(self):
        return self._font

    @font.setter
    def font(self, value):
        self._font = coerce_font(value)

    def render(self, invoice) -> bytes:
        return self.generate_pdf(invoice).finalize_to_bytes()

    def render_to_file(self, invoice, path) -> None:
        self.generate_pdf(invoice).finalize_to_file(path)
        logger.info("wrote invoice pdf to %s", path)

    def setup(self, invoice):
        page_size = resolve_page_size(invoice_or_default(invoice, "page_size"))
        pdf = self.canvas_factory(page_size=page_size)
        pdf.set_font(self.font)
        pdf.set_font_size(self.font_size)
        return pdf

    def generate_pdf(self, invoice):
        pdf = self.setup(invoice)
        ctx = RenderContext(invoice, pdf, self.font_size)
        for stage in self.stages:
            logger.debug("rendering %s", stage.__name__)
            stage(ctx)
        return pdf
