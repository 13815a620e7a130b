from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.db import transaction

from apps.payments.models import OrderPayment, PaymentEvent


@transaction.atomic
def create_payment(
    *,
    order,
    amount: Decimal,
    currency: str,
    idempotency_key: str | None = None,
    provider: str = "datatrans",
    metadata: dict[str, Any] | None = None,
) -> OrderPayment:
    """
    Создаёт платёж в статусе pending + одно событие PaymentEvent(action='create').

    Инварианты:
    - идемпотентность: если idempotency_key задан и платёж с ним уже есть -> вернуть его
      и НЕ создавать дубликаты PaymentEvent;
    - платёж должен существовать ДО редиректа в шлюз: его refno подписывается.
    """
    metadata = metadata or {}

    if idempotency_key:
        existing = (
            OrderPayment.objects
            .filter(idempotency_key=idempotency_key)
            .select_for_update()  # защищаемся от гонки при параллельных ретраях
            .first()
        )
        if existing:
            return existing

    payment = OrderPayment.objects.create(
        order=order,
        status=OrderPayment.Status.PENDING,
        amount=amount,
        currency=currency,
        idempotency_key=idempotency_key,
        provider=provider,
    )

    PaymentEvent.objects.create(
        payment=payment,
        from_status=None,
        to_status=payment.status,
        action="create",
        source=PaymentEvent.Source.CHECKOUT,
        metadata=metadata,
    )

    return payment


def get_open_payment(*, order, provider: str = "datatrans") -> OrderPayment | None:
    """Последний pending-платёж заказа у этого провайдера (повторный checkout)."""
    return (
        OrderPayment.objects
        .filter(order=order, provider=provider, status=OrderPayment.Status.PENDING)
        .order_by("-id")
        .first()
    )
