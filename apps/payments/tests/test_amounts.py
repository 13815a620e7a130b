# apps/payments/tests/test_amounts.py
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError


def test_decimal_price_to_minor_units():
    from apps.payments.logic.amounts import to_minor_units

    assert to_minor_units(Decimal("12.34"), 2) == 1234


def test_minor_units_back_to_decimal():
    from apps.payments.logic.amounts import from_minor_units

    assert from_minor_units(1234, 2) == Decimal("12.34")
    assert from_minor_units("1234", 2) == Decimal("12.34")


def test_minor_units_truncate_extra_digits():
    from apps.payments.logic.amounts import to_minor_units

    assert to_minor_units(Decimal("12.345"), 2) == 1234
    assert to_minor_units(Decimal("12.349"), 2) == 1234


def test_zero_fraction_digit_currency():
    from apps.payments.logic.amounts import from_minor_units, to_minor_units

    assert to_minor_units(Decimal("1500"), 0) == 1500
    assert from_minor_units(1500, 0) == Decimal("1500")


@pytest.mark.django_db
def test_fraction_digits_come_from_currency_dictionary():
    from apps.payments.logic.amounts import get_fraction_digits
    from config.dictionaries.models import Currency

    Currency.objects.create(code="JPY", name="Japanese yen", symbol="¥", fraction_digits=0)
    Currency.objects.create(code="CHF", name="Swiss franc", symbol="CHF", fraction_digits=2)

    assert get_fraction_digits("JPY") == 0
    assert get_fraction_digits("CHF") == 2


@pytest.mark.django_db
def test_unknown_currency_is_rejected():
    from apps.payments.logic.amounts import get_fraction_digits

    with pytest.raises(ValidationError) as e:
        get_fraction_digits("XXX")

    assert e.value.detail == {"currency": ["Unknown currency: XXX"]}
