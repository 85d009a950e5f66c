# config.py
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from reportlab.lib import pagesizes

# Load environment variables from .env if present
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent


def _multiline(value: str) -> str:
    # .env files can't hold real newlines comfortably, so accept "\n"
    return value.replace("\\n", "\n")


class Config:
    # Company banner
    COMPANY_NAME = os.getenv("INVOICE_COMPANY_NAME", "Awesome Corp")
    COMPANY_DETAILS = _multiline(
        os.getenv("INVOICE_COMPANY_DETAILS", "awesomecorp.com\\ninfo@awesomecorp.com")
    )

    # Page / logo
    # Page size is a reportlab page size name, e.g. LETTER, A4, LEGAL
    PAGE_SIZE = os.getenv("INVOICE_PAGE_SIZE", "LETTER")
    LOGO = os.getenv("INVOICE_LOGO", "")
    LOGO_SIZE = os.getenv("INVOICE_LOGO_SIZE", "")  # e.g. 100x100

    # Formatting
    CURRENCY = os.getenv("INVOICE_CURRENCY", "USD")
    DATE_FORMAT = os.getenv("INVOICE_DATE_FORMAT", "%B %d, %Y")
    LOCALE = os.getenv("INVOICE_LOCALE", "en")

    # CLI output
    EXPORTS_DIR = os.getenv("INVOICE_EXPORTS_DIR", (BASE_DIR / "exports").as_posix())
    LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")


# -----------------------------
# Logo
# -----------------------------
def parse_size(size: str | None) -> tuple[float | None, float | None]:
    """
    "100x80" -> (100.0, 80.0). Empty -> (None, None).
    """
    raw = (size or "").strip().lower()
    if not raw:
        return None, None
    try:
        width, height = raw.split("x")
        return float(width), float(height)
    except ValueError:
        raise ValueError(f"Logo size must look like WIDTHxHEIGHT, got {size!r}") from None


@dataclass(frozen=True)
class Logo:
    filename: str
    width: float | None = None
    height: float | None = None

    @property
    def is_svg(self) -> bool:
        return Path(self.filename).suffix.lower() == ".svg"

    @classmethod
    def coerce(cls, value) -> "Logo":
        """
        Accepts a Logo, a path, or a mapping like {"filename": "...", "size": "100x100"}.
        """
        if isinstance(value, Logo):
            return value
        if isinstance(value, dict):
            if not value.get("filename"):
                raise ValueError(f"Logo needs a filename, got {value!r}")
            width, height = parse_size(value.get("size"))
            return cls(str(value["filename"]), width, height)
        return cls(str(value))


# -----------------------------
# Page size
# -----------------------------
def resolve_page_size(value) -> tuple[float, float]:
    """
    Page size given by reportlab name ("A4", "letter") or as a (width, height) tuple in points.
    """
    if isinstance(value, str):
        size = getattr(pagesizes, value.strip().upper(), None)
        if not isinstance(size, tuple):
            raise ValueError(f"Unknown page size: {value!r}")
        return size
    width, height = value
    return float(width), float(height)


# -----------------------------
# Process-wide defaults
# -----------------------------
@dataclass
class Defaults:
    """
    Fallbacks for anything an invoice doesn't set itself.
    Read-only while a render is in flight.
    """
    company_name: str
    company_details: str
    page_size: str | tuple
    invoice_logo: Logo | None
    currency: str
    date_format: str
    locale: str

    @classmethod
    def from_config(cls) -> "Defaults":
        logo = None
        if Config.LOGO:
            width, height = parse_size(Config.LOGO_SIZE)
            logo = Logo(Config.LOGO, width, height)
        return cls(
            company_name=Config.COMPANY_NAME,
            company_details=Config.COMPANY_DETAILS,
            page_size=Config.PAGE_SIZE,
            invoice_logo=logo,
            currency=Config.CURRENCY,
            date_format=Config.DATE_FORMAT,
            locale=Config.LOCALE,
        )


_defaults: Defaults | None = None


def defaults() -> Defaults:
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_config()
    return _defaults


def reset_defaults() -> None:
    """Drop any changes made to the defaults; the next defaults() call rebuilds from Config."""
    global _defaults
    _defaults = None
