import pytest
from django.db import IntegrityError


pytestmark = pytest.mark.django_db


def test_currency_str_returns_code():
    from config.dictionaries.models import Currency

    c = Currency.objects.create(code="EUR", name="Euro", symbol="€")
    assert str(c) == "EUR"


def test_currency_defaults_to_two_fraction_digits():
    from config.dictionaries.models import Currency

    c = Currency.objects.create(code="CHF", name="Swiss franc", symbol="CHF")
    assert c.fraction_digits == 2


def test_currency_code_unique():
    from config.dictionaries.models import Currency

    Currency.objects.create(code="EUR", name="Euro", symbol="€")

    with pytest.raises(IntegrityError):
        Currency.objects.create(code="EUR", name="Euro 2", symbol="€")
