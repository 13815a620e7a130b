# apps/payments/logic/amounts.py
from __future__ import annotations

from decimal import Decimal

from rest_framework.exceptions import ValidationError

from config.dictionaries.models import Currency


def get_fraction_digits(currency_code: str) -> int:
    try:
        return Currency.objects.only("fraction_digits").get(code=currency_code).fraction_digits
    except Currency.DoesNotExist:
        raise ValidationError({"currency": [f"Unknown currency: {currency_code}"]})


def to_minor_units(amount: Decimal, fraction_digits: int) -> int:
    """
    12.34 CHF -> 1234. Лишние знаки отбрасываем (truncate), не округляем.
    """
    return int(Decimal(amount) * (Decimal(10) ** fraction_digits))


def from_minor_units(amount: int | str, fraction_digits: int) -> Decimal:
    """1234 -> Decimal("12.34") для валюты с двумя знаками."""
    exponent = Decimal(1).scaleb(-fraction_digits)
    return (Decimal(int(amount)) * exponent).quantize(exponent)
