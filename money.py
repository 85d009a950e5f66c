# money.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN


class UnknownCurrencyError(ValueError):
    pass


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    subunit_to_unit: int
    symbol_first: bool = True
    thousands_separator: str = ","
    decimal_mark: str = "."

    @property
    def decimal_places(self) -> int:
        # 100 -> 2, 1 -> 0
        return len(str(self.subunit_to_unit)) - 1


CURRENCIES = {
    c.code: c
    for c in (
        Currency("USD", "$", 100),
        Currency("CAD", "$", 100),
        Currency("AUD", "$", 100),
        Currency("EUR", "€", 100, thousands_separator=".", decimal_mark=","),
        Currency("GBP", "£", 100),
        Currency("JPY", "¥", 1),
        Currency("CHF", "CHF ", 100, thousands_separator="'"),
        Currency("SEK", " kr", 100, symbol_first=False, thousands_separator=" ", decimal_mark=","),
    )
}


def get_currency(code: str | None) -> Currency:
    key = (code or "").strip().upper()
    try:
        return CURRENCIES[key]
    except KeyError:
        raise UnknownCurrencyError(f"Unknown currency: {code!r}") from None


def format_money(amount, currency_code: str | None) -> str:
    """
    Decimal("1243") + "USD" -> "$1,243.00"

    The amount is scaled to whole subunits (cents) first, so anything finer than
    the currency's smallest unit is rounded away, half to even.
    """
    currency = get_currency(currency_code)
    amount = Decimal(amount)

    subunits = (amount * currency.subunit_to_unit).quantize(Decimal("1"), rounding=ROUND_HALF_EVEN)
    value = subunits / currency.subunit_to_unit

    places = currency.decimal_places
    number = f"{abs(value):,.{places}f}"
    # python always formats as 1,234.56; swap in the currency's marks
    number = number.replace(",", "\0").replace(".", currency.decimal_mark).replace("\0", currency.thousands_separator)

    sign = "-" if subunits < 0 else ""
    if currency.symbol_first:
        return f"{sign}{currency.symbol}{number}"
    return f"{sign}{number}{currency.symbol}"
