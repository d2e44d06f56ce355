"""Money rounding helpers used wherever totals are computed."""

from decimal import ROUND_HALF_UP, Decimal

SUPPORTED_CURRENCIES = frozenset(
    {
        "USD",
        "EUR",
        "GBP",
        "JPY",
        "CAD",
        "AUD",
        "CHF",
        "CNY",
        "SEK",
        "NZD",
        "MXN",
        "SGD",
        "HKD",
        "NOK",
        "KRW",
        "TRY",
        "RUB",
        "INR",
        "BRL",
        "ZAR",
    }
)

_CENT = Decimal("0.01")


def round_money(value) -> float:
    """Round half-up to two decimals.

    Goes through `str` so binary float noise does not leak into the result:
    ``round_money(10.005) == 10.01`` whereas ``round(10.005, 2) == 10.0``.
    """
    return float(Decimal(str(value or 0)).quantize(_CENT, rounding=ROUND_HALF_UP))
