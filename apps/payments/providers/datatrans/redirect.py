# apps/payments/providers/datatrans/redirect.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from django.urls import reverse

from apps.payments.logic.amounts import get_fraction_digits, to_minor_units
from apps.payments.logic.payments import create_payment, get_open_payment
from apps.payments.models import OrderPayment

from .config import GatewayConfig, RequestType, SecurityLevel
from .signature import sign_for

logger = logging.getLogger(__name__)

# request_type -> reqtype на проводе; conditional = только авторизация, settle отдельным вызовом
_WIRE_REQTYPE = {
    RequestType.AUTHORIZE_ONLY: "NOA",
    RequestType.CONDITIONAL: "NOA",
    RequestType.AUTHORIZE_AND_CAPTURE: "CAA",
    RequestType.PROVIDER_DEFAULT: None,
}


@dataclass(frozen=True)
class PaymentRequest:
    service_url: str
    merchant_id: str
    amount: int
    currency: str
    refno: str
    success_url: str
    error_url: str
    cancel_url: str
    sign: str | None = None
    sign2: str | None = None
    reqtype: str | None = None
    use_alias: bool = False

    def as_form_data(self) -> dict[str, str]:
        """Поля POST-формы для автосабмита в шлюз; отсутствующие не отправляем."""
        data = {
            "merchantId": self.merchant_id,
            "amount": str(self.amount),
            "currency": self.currency,
            "refno": self.refno,
            "successUrl": self.success_url,
            "errorUrl": self.error_url,
            "cancelUrl": self.cancel_url,
        }
        if self.sign is not None:
            data["sign"] = self.sign
        if self.sign2 is not None:
            data["sign2"] = self.sign2
        if self.reqtype is not None:
            data["reqtype"] = self.reqtype
        if self.use_alias:
            data["useAlias"] = "yes"
        return data


def build_redirect_request(
    *,
    order,
    config: GatewayConfig,
    absolute_uri: Callable[[str], str],
    payment: OrderPayment | None = None,
) -> PaymentRequest:
    """
    Use-case: подписанный редирект в шлюз для одной попытки checkout.

    - refno = платёж; если платежа ещё нет, создаём pending ДО подписи
      (иначе нечего подписывать и не по чему потом найти callback);
    - сумма в minor units по fraction_digits валюты;
    - level 2 -> sign2 (HMAC), level 1 -> статический sign, level 0 -> ничего.
    """
    if payment is None:
        payment = get_open_payment(order=order)
    if payment is None:
        payment = create_payment(
            order=order,
            amount=order.total,
            currency=order.currency,
            metadata={"gateway": "datatrans"},
        )

    amount = to_minor_units(payment.amount, get_fraction_digits(payment.currency))

    sign = None
    sign2 = None
    if config.security_level == SecurityLevel.HMAC:
        sign2 = sign_for(config, amount=amount, currency=payment.currency, identifier=payment.refno)
    elif config.security_level == SecurityLevel.STATIC_SIGN and config.sign:
        sign = config.sign.value

    logger.info(
        "Datatrans redirect built for payment %s (amount=%s %s, security_level=%s)",
        payment.public_id,
        amount,
        payment.currency,
        int(config.security_level),
    )

    return PaymentRequest(
        service_url=config.service_url,
        merchant_id=config.merchant_id,
        amount=amount,
        currency=payment.currency,
        refno=payment.refno,
        success_url=absolute_uri(reverse("datatrans-success")),
        error_url=absolute_uri(reverse("datatrans-error")),
        cancel_url=absolute_uri(reverse("datatrans-cancel")),
        sign=sign,
        sign2=sign2,
        reqtype=_WIRE_REQTYPE[config.request_type],
        use_alias=config.use_alias,
    )
