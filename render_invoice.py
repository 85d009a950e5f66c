# render_invoice.py
import argparse
import json
import logging
from datetime import date, datetime
from pathlib import Path

from config import Config
from models import Invoice, LineItem
from pdf_renderer import DEFAULT_FONT, DEFAULT_FONT_SIZE, PdfRenderer

logger = logging.getLogger(__name__)

DATE_FIELDS = ("due_at", "paid_at", "refunded_at")


def _parse_when(value):
    """
    "2024-01-22" -> date, "2024-01-22T14:30:00" -> datetime; anything else is kept as text.
    """
    if not isinstance(value, str):
        return value
    s = value.strip()
    try:
        if "T" in s or " " in s:
            return datetime.fromisoformat(s)
        return date.fromisoformat(s)
    except ValueError:
        return value


def invoice_from_dict(data: dict) -> Invoice:
    options = dict(data)
    options["line_items"] = [LineItem(**item) for item in options.get("line_items") or []]
    for name in DATE_FIELDS:
        if options.get(name) is not None:
            options[name] = _parse_when(options[name])
    return Invoice(**options)


def load_invoice(path: Path) -> Invoice:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must hold a JSON object")
    return invoice_from_dict(data)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Render invoice JSON files to PDF.")
    parser.add_argument("inputs", nargs="+", help="Invoice JSON file(s).")
    parser.add_argument("--out-dir", default=Config.EXPORTS_DIR, help="Where to write the PDFs.")
    parser.add_argument("--font", default=DEFAULT_FONT, help="Built-in PDF font name.")
    parser.add_argument("--font-size", type=float, default=DEFAULT_FONT_SIZE, help="Base font size in points.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=Config.LOG_LEVEL.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.font_size <= 0:
        parser.error("--font-size must be positive")

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    renderer = PdfRenderer(font=args.font, font_size=args.font_size)

    total = len(args.inputs)
    generated = 0
    failed = 0

    for i, name in enumerate(args.inputs, start=1):
        src = Path(name)
        dest = out_dir / f"{src.stem}.pdf"
        try:
            invoice = load_invoice(src)
            renderer.render_to_file(invoice, dest)
            generated += 1
            print(f"[{i}/{total}] DONE  {src} -> {dest}")
        except Exception as e:
            failed += 1
            logger.debug("render failed for %s", src, exc_info=True)
            print(f"[{i}/{total}] FAIL  {src}  ({e})")

    print("\nInvoice rendering complete.")
    print(f"Generated: {generated}")
    print(f"Failed:    {failed}")
    print(f"Exports:   {out_dir}")

    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
