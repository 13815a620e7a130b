# apps/payments/logic/commit_transition.py
from __future__ import annotations

from datetime import datetime

from django.db import transaction
from django.utils import timezone

from apps.payments.logic.status_fsm import assert_can_transition
from apps.payments.models import OrderPayment, PaymentEvent

Status = OrderPayment.Status


def _max_length(field_name: str) -> int:
    return OrderPayment._meta.get_field(field_name).max_length


def commit_transition(
    *,
    payment: OrderPayment,
    to_status: str,
    action: str,
    source: str = PaymentEvent.Source.CHECKOUT,
    remote_id: str | None = None,
    remote_state: str | None = None,
    provider_payload: dict | None = None,
    metadata: dict | None = None,
    now: datetime | None = None,
) -> OrderPayment:
    """
    Use-case: единственная точка изменения статуса платежа.

    Конкурентность:
    - return (браузер) и notify (сервер-сервер) могут прийти для одного refno
      в любом порядке или оба.
    - transaction.atomic + select_for_update на строку payment сериализуют их.

    Строго:
    - переход проверяем под lock по ALLOWED_TRANSITIONS (иначе 400);
    - status, remote_id, remote_state и timestamp пишутся ОДНИМ save();
    - на каждый переход ровно один PaymentEvent.
    """

    if metadata is None:
        metadata = {}
    if now is None:
        now = timezone.now()

    with transaction.atomic():
        locked = OrderPayment.objects.select_for_update().get(pk=payment.pk)

        assert_can_transition(current=locked.status, new=to_status)

        old_status = locked.status
        fields = ["status", "updated_at"]

        locked.status = to_status

        if remote_id is not None:
            locked.remote_id = remote_id[: _max_length("remote_id")]
            fields.append("remote_id")
        if remote_state is not None:
            locked.remote_state = remote_state[: _max_length("remote_state")]
            fields.append("remote_state")
        if provider_payload is not None:
            locked.raw_provider_payload = provider_payload
            fields.append("raw_provider_payload")

        if to_status in {Status.AUTHORIZED, Status.CAPTURED} and locked.authorized_at is None:
            locked.authorized_at = now
            fields.append("authorized_at")
        if to_status == Status.CAPTURED:
            locked.captured_at = now
            fields.append("captured_at")

        locked._status_change_allowed = True
        locked.save(update_fields=fields)

        PaymentEvent.objects.create(
            payment=locked,
            from_status=old_status,
            to_status=to_status,
            action=action,
            source=source,
            metadata=metadata,
        )

        return locked
