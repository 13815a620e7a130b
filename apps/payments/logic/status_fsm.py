# apps/payments/logic/status_fsm.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from rest_framework.exceptions import ValidationError

from apps.payments.models import OrderPayment

Status = OrderPayment.Status


@dataclass(frozen=True)
class TransitionResult:
    ok: bool
    reason: str | None = None


# Один источник правды: allowed transitions
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    Status.PENDING: {
        Status.AUTHORIZED,
        Status.CAPTURED,
        Status.CANCELLED,
        Status.REFUNDED,
        Status.FAILED,
    },
    Status.AUTHORIZED: {Status.CAPTURED, Status.CANCELLED},
    Status.CAPTURED: set(),
    Status.CANCELLED: set(),
    Status.REFUNDED: set(),
    Status.FAILED: set(),
}

SUCCESS_STATUSES = frozenset({Status.AUTHORIZED, Status.CAPTURED})

TERMINAL_STATUSES = frozenset(s for s, allowed in ALLOWED_TRANSITIONS.items() if not allowed)


def can_transition(*, current: str, new: str) -> TransitionResult:
    # в отличие от заказа, повторный переход в тот же статус: не переход
    if new == current:
        return TransitionResult(ok=False, reason=f"Payment is already {current}.")

    allowed = ALLOWED_TRANSITIONS.get(current, set())
    if new in allowed:
        return TransitionResult(ok=True)

    return TransitionResult(ok=False, reason="Invalid status transition.")


def assert_can_transition(*, current: str, new: str) -> None:
    """
    Бросает DRF ValidationError если переход запрещён.
    """
    res = can_transition(current=current, new=new)
    if not res.ok:
        raise ValidationError({"status": [res.reason or "Invalid status transition."]})


def allowed_next_statuses(*, current: str) -> Iterable[str]:
    return sorted(ALLOWED_TRANSITIONS.get(current, set()))
