import pytest
from django.core.management import call_command


pytestmark = pytest.mark.django_db


def test_seed_dictionaries_creates_default_records():
    from config.dictionaries.models import Currency

    assert Currency.objects.count() == 0

    call_command("seed_dictionaries")

    assert Currency.objects.filter(code="CHF").exists()
    assert Currency.objects.get(code="JPY").fraction_digits == 0


def test_seed_dictionaries_is_idempotent():
    from config.dictionaries.models import Currency

    call_command("seed_dictionaries")
    call_command("seed_dictionaries")

    assert Currency.objects.filter(code="EUR").count() == 1
