# utils/currency.py
from decimal import Decimal, ROUND_HALF_UP

CURRENCY_SYMBOLS = {
     "ZMW": "K",
     "USD": "$",
     "EUR": "€",
     "GBP": "£",
     "ZAR": "R",
}

CENTS = Decimal("0.01")


def to_decimal(amount) -> Decimal:
     """Coerce an amount (None, int, float, str, Decimal) to a 2dp Decimal."""
     if amount is None or amount == "":
          return Decimal("0.00")
     if isinstance(amount, float):
          amount = repr(amount)
     return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_currency(amount, currency: str = "ZMW") -> str:
     """
     Format an amount for display, e.g. 1234.5 -> "K1,234.50".

     None formats as zero. Unknown currency codes are used as the prefix.
     """
     value = to_decimal(amount)
     symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
     sign = "-" if value < 0 else ""
     return f"{sign}{symbol}{abs(value):,.2f}"
