# conftest.py
from decimal import Decimal

import pytest


MERCHANT_ID = "1100007006"
HMAC_KEY = "a1b2c3d4e5f60718293a4b5c6d7e8f90a1b2c3d4e5f60718293a4b5c6d7e8f90"
OLD_HMAC_KEY = "00112233445566778899aabbccddeeff"
TRANSACTION_ID = "230101120000000001"


@pytest.fixture
def gateway_settings(settings):
    """
    Базовая конфигурация Datatrans для тестов: level 2, CAA, без alias.
    Менять через configure_gateway(...), чтобы кэш GatewayConfig сбрасывался.
    """
    settings.DATATRANS = {
        "MERCHANT_ID": MERCHANT_ID,
        "SERVICE_URL": "https://pilot.datatrans.biz/upp/jsp/upStart.jsp",
        "REQUEST_TYPE": "CAA",
        "USE_ALIAS": False,
        "SECURITY_LEVEL": 2,
        "SIGN": "",
        "HMAC_KEYS": [HMAC_KEY],
        "API_URL": "https://api.sandbox.datatrans.com",
        "API_PASSWORD": "api-secret",
        "RETURN_SUCCESS_URL": "/checkout/complete/",
        "RETURN_FAILURE_URL": "/checkout/payment/",
    }
    return settings.DATATRANS


@pytest.fixture
def configure_gateway(settings, gateway_settings):
    def _configure(**overrides):
        settings.DATATRANS = {**gateway_settings, **overrides}

        from apps.payments.providers.registry import get_gateway_config

        return get_gateway_config()

    return _configure


@pytest.fixture
def currency_chf(db):
    from config.dictionaries.models import Currency

    currency, _ = Currency.objects.get_or_create(
        code="CHF",
        defaults={"name": "Swiss franc", "symbol": "CHF", "fraction_digits": 2},
    )
    return currency


@pytest.fixture
def order_factory(db, currency_chf):
    from apps.orders.models import Order

    def _make_order(total: Decimal = Decimal("12.34"), currency: str = "CHF", **kwargs):
        return Order.objects.create(total=total, currency=currency, **kwargs)

    return _make_order


@pytest.fixture
def payment_factory(order_factory):
    """
    Pending-платёж Datatrans (как после build_redirect_request).
    """
    from apps.payments.logic.payments import create_payment

    def _make_payment(order=None, amount: Decimal = Decimal("12.34"), currency: str = "CHF"):
        order = order or order_factory(total=amount, currency=currency)
        return create_payment(order=order, amount=amount, currency=currency)

    return _make_payment


@pytest.fixture
def signed_callback(gateway_settings):
    """
    Тело callback'а, как его POST'ит шлюз, с корректным sign2.
    Поле со значением None убирается из payload.
    """
    from apps.payments.providers.datatrans.signature import sign

    def _make(payment, *, status="success", amount=None, currency=None, key=HMAC_KEY, **fields):
        amount = str(amount if amount is not None else int(payment.amount * 100))
        currency = currency or payment.currency

        data = {
            "status": status,
            "refno": payment.refno,
            "amount": amount,
            "currency": currency,
            "uppTransactionId": TRANSACTION_ID,
            "authorizationCode": "947291",
            "responseMessage": "Authorized",
            "responseCode": "01",
            "security_level": "2",
            "sign2": sign(key, MERCHANT_ID, amount, currency, TRANSACTION_ID),
            "aliasCC": "70119122433810042",
            "maskedCC": "424242xxxxxx4242",
            "expm": "12",
            "expy": "30",
            "pmethod": "VIS",
        }
        data.update(fields)
        return {k: v for k, v in data.items() if v is not None}

    return _make


class FakeGatewayApi:
    def __init__(self, settle="settled", cancel="canceled", refund="settled"):
        self.statuses = {"settle": settle, "cancel": cancel, "refund": refund}
        self.calls = []

    def settle(self, *, transaction):
        self.calls.append(("settle", transaction))
        return self.statuses["settle"]

    def cancel(self, *, transaction):
        self.calls.append(("cancel", transaction))
        return self.statuses["cancel"]

    def refund(self, *, transaction):
        self.calls.append(("refund", transaction))
        return self.statuses["refund"]

    @property
    def actions(self):
        return [name for name, _ in self.calls]


@pytest.fixture
def fake_api(monkeypatch):
    api = FakeGatewayApi()
    monkeypatch.setattr(
        "apps.payments.providers.registry.get_gateway_api",
        lambda config: api,
    )
    return api
