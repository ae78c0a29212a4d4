# app/utils/currency.py
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext

from app.models.enums import CurrencyCode, SymbolPosition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrencySettings:
    code: CurrencyCode
    symbol: str
    position: SymbolPosition
    decimal_places: int
    thousands_separator: str
    decimal_separator: str

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "symbol": self.symbol,
            "position": self.position.value,
            "decimal_places": self.decimal_places,
            "thousands_separator": self.thousands_separator,
            "decimal_separator": self.decimal_separator,
        }


CURRENCY_PRESETS = {
    CurrencyCode.EUR: CurrencySettings(CurrencyCode.EUR, "€", SymbolPosition.before, 0, ".", ","),
    CurrencyCode.USD: CurrencySettings(CurrencyCode.USD, "$", SymbolPosition.before, 2, ",", "."),
    CurrencyCode.GBP: CurrencySettings(CurrencyCode.GBP, "£", SymbolPosition.before, 2, ",", "."),
    CurrencyCode.JPY: CurrencySettings(CurrencyCode.JPY, "¥", SymbolPosition.before, 0, ",", "."),
    CurrencyCode.CNY: CurrencySettings(CurrencyCode.CNY, "¥", SymbolPosition.before, 2, ",", "."),
}

# Order shown in the currency picker
CURRENCY_LABELS = {
    CurrencyCode.USD: "US Dollar ($)",
    CurrencyCode.EUR: "Euro (€)",
    CurrencyCode.GBP: "British Pound (£)",
    CurrencyCode.JPY: "Japanese Yen (¥)",
    CurrencyCode.CNY: "Chinese Yuan (¥)",
}


def get_preset(code):
    """
    Look up the preset for a currency code.
    Accepts a CurrencyCode or its string value; returns None for anything unknown.
    """
    if isinstance(code, CurrencyCode):
        return CURRENCY_PRESETS[code]
    if not isinstance(code, str):
        return None
    try:
        return CURRENCY_PRESETS[CurrencyCode(code)]
    except ValueError:
        return None


def group_digits(digits: str, separator: str) -> str:
    """Insert separator every three digits from the right, never before the first digit."""
    groups = []
    while len(digits) > 3:
        groups.append(digits[-3:])
        digits = digits[:-3]
    groups.append(digits)
    return separator.join(reversed(groups))


def _to_decimal(amount) -> Decimal:
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise TypeError(f"Not a numeric amount: {amount!r}")
    value = Decimal(str(amount))
    if not value.is_finite():
        raise ValueError(f"Not a finite amount: {amount!r}")
    return value


def _place_symbol(number: str, settings: CurrencySettings) -> str:
    if settings.position == SymbolPosition.before:
        return f"{settings.symbol}{number}"
    return f"{number}{settings.symbol}"


def _fallback(amount, settings: CurrencySettings) -> str:
    try:
        return f"{settings.symbol}{float(amount):.2f}"
    except (TypeError, ValueError, OverflowError):
        return f"{settings.symbol}{amount}"


def format_amount(amount, settings: CurrencySettings) -> str:
    """
    Render a monetary amount with the given currency settings.

    Rounds half away from zero to settings.decimal_places, groups the integer
    part, joins the fraction with the decimal separator and places the symbol
    without a space. A minus sign stays next to the digits ("$-1,234.50").
    Anything that cannot be formatted falls back to symbol + two decimals.
    """
    try:
        quantum = Decimal(1).scaleb(-settings.decimal_places)
        value = _to_decimal(amount)
        with localcontext() as ctx:
            # enough precision for every integer digit plus the fraction
            ctx.prec = max(value.adjusted(), 0) + settings.decimal_places + 2
            rounded = value.quantize(quantum, rounding=ROUND_HALF_UP)
        sign = "-" if rounded < 0 else ""

        integer_part, _, fraction = f"{abs(rounded):f}".partition(".")
        number = sign + group_digits(integer_part, settings.thousands_separator)
        if settings.decimal_places > 0:
            number = f"{number}{settings.decimal_separator}{fraction}"

        return _place_symbol(number, settings)
    except Exception as e:
        logger.debug("Falling back to plain formatting for %r: %s", amount, e)
        return _fallback(amount, settings)
