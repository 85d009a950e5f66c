# translations.py
from __future__ import annotations

DEFAULT_LOCALE = "en"

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        "status.paid": "PAID",
        "status.refunded": "REFUNDED",
        "status.overdue": "OVERDUE",
        "invoice.bill_to": "Bill To",
        "invoice.ship_to": "Ship To",
        "invoice.invoice_no": "Invoice #:",
        "invoice.due_date": "Due Date:",
        "invoice.paid_date": "Paid Date:",
        "invoice.refunded_date": "Refunded Date:",
        "invoice.subtotal": "Subtotal:",
        "invoice.tax": "Tax:",
        "invoice.shipping": "Shipping:",
        "invoice.total": "Total:",
        "invoice.notes": "Notes",
        "line_item.description": "Description",
        "line_item.unit_price": "Unit Price",
        "line_item.quantity": "Quantity",
        "line_item.amount": "Amount",
    },
    "de": {
        "status.paid": "BEZAHLT",
        "status.refunded": "ERSTATTET",
        "status.overdue": "ÜBERFÄLLIG",
        "invoice.bill_to": "Rechnungsadresse",
        "invoice.ship_to": "Lieferadresse",
        "invoice.invoice_no": "Rechnungsnr.:",
        "invoice.due_date": "Fälligkeitsdatum:",
        "invoice.paid_date": "Zahlungsdatum:",
        "invoice.refunded_date": "Erstattungsdatum:",
        "invoice.subtotal": "Zwischensumme:",
        "invoice.tax": "Steuer:",
        "invoice.shipping": "Versand:",
        "invoice.total": "Gesamt:",
        "invoice.notes": "Anmerkungen",
        "line_item.description": "Beschreibung",
        "line_item.unit_price": "Stückpreis",
        "line_item.quantity": "Menge",
        "line_item.amount": "Betrag",
    },
    "es": {
        "status.paid": "PAGADA",
        "status.refunded": "REEMBOLSADA",
        "status.overdue": "VENCIDA",
        "invoice.bill_to": "Facturar a",
        "invoice.ship_to": "Enviar a",
        "invoice.invoice_no": "Factura n.º:",
        "invoice.due_date": "Fecha de vencimiento:",
        "invoice.paid_date": "Fecha de pago:",
        "invoice.refunded_date": "Fecha de reembolso:",
        "invoice.subtotal": "Subtotal:",
        "invoice.tax": "Impuestos:",
        "invoice.shipping": "Envío:",
        "invoice.total": "Total:",
        "invoice.notes": "Notas",
        "line_item.description": "Descripción",
        "line_item.unit_price": "Precio unitario",
        "line_item.quantity": "Cantidad",
        "line_item.amount": "Importe",
    },
    "fr": {
        "status.paid": "PAYÉE",
        "status.refunded": "REMBOURSÉE",
        "status.overdue": "EN RETARD",
        "invoice.bill_to": "Facturer à",
        "invoice.ship_to": "Livrer à",
        "invoice.invoice_no": "Facture n° :",
        "invoice.due_date": "Date d'échéance :",
        "invoice.paid_date": "Date de paiement :",
        "invoice.refunded_date": "Date de remboursement :",
        "invoice.subtotal": "Sous-total :",
        "invoice.tax": "Taxes :",
        "invoice.shipping": "Livraison :",
        "invoice.total": "Total :",
        "invoice.notes": "Notes",
        "line_item.description": "Description",
        "line_item.unit_price": "Prix unitaire",
        "line_item.quantity": "Quantité",
        "line_item.amount": "Montant",
    },
    "nl": {
        "status.paid": "BETAALD",
        "status.refunded": "TERUGBETAALD",
        "status.overdue": "VERVALLEN",
        "invoice.bill_to": "Factuuradres",
        "invoice.ship_to": "Afleveradres",
        "invoice.invoice_no": "Factuurnummer:",
        "invoice.due_date": "Vervaldatum:",
        "invoice.paid_date": "Betaaldatum:",
        "invoice.refunded_date": "Terugbetaald op:",
        "invoice.subtotal": "Subtotaal:",
        "invoice.tax": "BTW:",
        "invoice.shipping": "Verzending:",
        "invoice.total": "Totaal:",
        "invoice.notes": "Opmerkingen",
        "line_item.description": "Omschrijving",
        "line_item.unit_price": "Prijs per stuk",
        "line_item.quantity": "Aantal",
        "line_item.amount": "Bedrag",
    },
}


def translate(key: str, locale: str | None = None) -> str:
    """
    Look up a label. Unknown locales and missing keys fall back to English,
    then to the key itself so a typo shows up on the page instead of crashing.
    """
    lang = (locale or DEFAULT_LOCALE).strip().lower().replace("_", "-")
    table = TRANSLATIONS.get(lang) or TRANSLATIONS.get(lang.split("-")[0]) or {}
    return table.get(key) or TRANSLATIONS[DEFAULT_LOCALE].get(key) or key
