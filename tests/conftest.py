from datetime import date

import pytest

from config import reset_defaults
from models import Invoice, LineItem
from pdf_canvas import PdfCanvas
from pdf_renderer import PdfRenderer


class RecordingCanvas(PdfCanvas):
    """A real canvas that also remembers what the renderer asked it to draw."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tables = []
        self.texts = []
        self.numbered = []

    def draw_table(self, rows, **kwargs):
        self.tables.append([list(row) for row in rows])
        return super().draw_table(rows, **kwargs)

    def draw_text(self, text, **kwargs):
        self.texts.append((text, kwargs))
        return super().draw_text(text, **kwargs)

    def number_pages(self, fmt, **kwargs):
        self.numbered.append(fmt)
        return super().number_pages(fmt, **kwargs)


@pytest.fixture(autouse=True)
def fresh_defaults():
    reset_defaults()
    yield
    reset_defaults()


def sample_items():
    return [
        LineItem(price=20, quantity=5, description="Pants"),
        LineItem(price=10, quantity=3, description="Shirts"),
        LineItem(price=5, quantity=200.0, description="Hats"),
    ]


@pytest.fixture
def new_invoice():
    def build(**params):
        options = {
            "tax_rate": 0.1,
            "notes": "These are some crazy awesome notes!",
            "invoice_number": 12,
            "due_at": date(2011, 1, 22),
            "bill_to": "Alan Johnson\n101 This Way\nSomewhere, SC 22222",
            "ship_to": "Frank Johnson\n101 That Way\nOther, SC 22229",
            "line_items": sample_items(),
        }
        options.update(params)
        return Invoice(**options)

    return build


@pytest.fixture
def recording_renderer():
    return PdfRenderer(canvas_factory=RecordingCanvas)


@pytest.fixture
def png_logo(tmp_path):
    from PIL import Image

    path = tmp_path / "logo.png"
    Image.new("RGB", (50, 20), (40, 80, 160)).save(path)
    return path


@pytest.fixture
def svg_logo(tmp_path):
    path = tmp_path / "logo.svg"
    path.write_text(
        '<svg xmlns="http://www.w3.org/2000/svg" width="100" height="50">'
        '<rect x="0" y="0" width="100" height="50" fill="#336699"/>'
        "</svg>",
        encoding="utf-8",
    )
    return path
