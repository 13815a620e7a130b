import pytest


pytestmark = pytest.mark.django_db


def test_list_currencies_returns_items(client):
    from config.dictionaries.models import Currency

    Currency.objects.create(code="EUR", name="Euro", symbol="€")

    resp = client.get("/api/v1/dictionaries/currencies/")

    assert resp.status_code == 200
    data = resp.json()
    assert isinstance(data, list)
    assert data[0]["code"] == "EUR"
    assert data[0]["name"] == "Euro"
    assert data[0]["symbol"] == "€"
    assert data[0]["fraction_digits"] == 2


def test_list_currencies_is_ordered_by_code(client):
    from config.dictionaries.models import Currency

    Currency.objects.create(code="USD", name="US dollar", symbol="$")
    Currency.objects.create(code="CHF", name="Swiss franc", symbol="CHF")

    resp = client.get("/api/v1/dictionaries/currencies/")

    assert [c["code"] for c in resp.json()] == ["CHF", "USD"]
