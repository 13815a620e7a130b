# apps/payments/providers/datatrans/callback.py
from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from django.db import transaction
from django.utils import timezone

from apps.payments.logic.amounts import from_minor_units, get_fraction_digits, to_minor_units
from apps.payments.logic.commit_transition import commit_transition
from apps.payments.logic.status_fsm import SUCCESS_STATUSES
from apps.payments.models import OrderPayment
from apps.payments.providers import registry
from apps.payments.providers.port import GatewayApiPort, RemoteTransaction

from . import error_codes
from .config import AliasMissingPolicy, GatewayConfig, RequestType, SecurityLevel
from .notifier import Notifier, NullNotifier
from .signature import verify_for

logger = logging.getLogger(__name__)

Status = OrderPayment.Status

# копируются в raw_provider_payload как есть, без валидации
CUSTOMER_FIELDS = (
    "uppCustomerTitle",
    "uppCustomerName",
    "uppCustomerFirstName",
    "uppCustomerLastName",
    "uppCustomerStreet",
    "uppCustomerStreet2",
    "uppCustomerCity",
    "uppCustomerCountry",
    "uppCustomerZipCode",
    "uppCustomerPhone",
    "uppCustomerFax",
    "uppCustomerEmail",
    "uppCustomerGender",
    "uppCustomerBirthDate",
    "uppCustomerLanguage",
    "refno",
    "aliasCC",
    "maskedCC",
    "expy",
    "expm",
    "pmethod",
    "testOnly",
    "authorizationCode",
    "acqAuthorizationCode",
    "responseCode",
    "uppTransactionId",
)

MESSAGE_SUCCESS = "Payment was processed successfully."
MESSAGE_PROBLEM = "There was a problem while processing your payment."
MESSAGE_CANCELLED = "The payment was cancelled."
MESSAGE_FAILED = "Payment processing failed."
MESSAGE_ALIAS_MISSING = (
    "No alias was provided with the payment. Ensure that the necessary option "
    "is selected or use a different payment provider."
)


class CallbackKind(str, enum.Enum):
    RETURN = "return"  # браузер пользователя
    NOTIFY = "notify"  # сервер-сервер


class OutcomeKind(str, enum.Enum):
    AUTHORIZED = "authorized"
    CAPTURED = "captured"
    DUPLICATE = "duplicate"
    MALFORMED_CALLBACK = "malformed_callback"
    UNKNOWN_REFERENCE = "unknown_reference"
    SECURITY_LEVEL_MISMATCH = "security_level_mismatch"
    INVALID_SIGNATURE = "invalid_signature"
    GATEWAY_ERROR = "gateway_error"
    USER_CANCELLED = "user_cancelled"
    SETTLEMENT_FAILED = "settlement_failed"
    ALIAS_MISSING = "alias_missing"
    PROTOCOL_VIOLATION = "protocol_violation"


# отклоняем запрос целиком (400), платёж не трогаем
REJECTIONS = frozenset({
    OutcomeKind.MALFORMED_CALLBACK,
    OutcomeKind.UNKNOWN_REFERENCE,
    OutcomeKind.SECURITY_LEVEL_MISMATCH,
    OutcomeKind.INVALID_SIGNATURE,
})


@dataclass(frozen=True)
class CallbackOutcome:
    kind: OutcomeKind
    payment: OrderPayment | None = None
    detail: str = ""

    @property
    def is_rejection(self) -> bool:
        return self.kind in REJECTIONS

    @property
    def is_success(self) -> bool:
        if self.kind in (OutcomeKind.AUTHORIZED, OutcomeKind.CAPTURED):
            return True
        if self.kind == OutcomeKind.DUPLICATE and self.payment is not None:
            return self.payment.status in SUCCESS_STATUSES
        return False


def _parse_int(value: Any) -> int | None:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class NotificationPayload:
    """Тело callback'а от шлюза. Недоверенные данные, пока не прошли проверки."""

    status: str = ""
    refno: str = ""
    amount: str = ""
    currency: str = ""
    upp_transaction_id: str = ""
    authorization_code: str = ""
    acq_authorization_code: str = ""
    response_message: str = ""
    error_code: str = ""
    error_detail: str = ""
    error_message: str = ""
    security_level: int | None = None
    sign: str = ""
    sign2: str = ""
    alias_cc: str = ""
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_data(cls, data) -> "NotificationPayload":
        if hasattr(data, "dict"):
            data = data.dict()
        # JSON-тело может быть списком или скаляром: это пустой payload
        data = dict(data) if isinstance(data, Mapping) else {}

        def text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value).strip()

        return cls(
            status=text("status"),
            refno=text("refno"),
            amount=text("amount"),
            currency=text("currency"),
            upp_transaction_id=text("uppTransactionId"),
            authorization_code=text("authorizationCode"),
            acq_authorization_code=text("acqAuthorizationCode"),
            response_message=text("responseMessage"),
            error_code=text("errorCode"),
            error_detail=text("errorDetail"),
            error_message=text("errorMessage"),
            security_level=_parse_int(data.get("security_level")) if text("security_level") else None,
            sign=text("sign"),
            sign2=text("sign2"),
            alias_cc=text("aliasCC"),
            raw=data,
        )

    @property
    def is_empty(self) -> bool:
        return not self.raw

    @property
    def amount_minor(self) -> int | None:
        return _parse_int(self.amount) if self.amount else None

    def provider_payload(self) -> dict[str, Any]:
        return {key: self.raw[key] for key in CUSTOMER_FIELDS if self.raw.get(key)}


class CallbackProcessor:
    """
    Проверка return/notify callback'ов Datatrans и фиксация результата платежа.

    Порядок проверок важен, первая неудача: выход (fail-closed):
    refno -> платёж -> error/cancel -> security level -> sign2 -> success.

    kind влияет только на то, какой ответ построит view; логика одна.
    """

    def __init__(
        self,
        config: GatewayConfig,
        *,
        api: GatewayApiPort | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], Any] = timezone.now,
    ):
        self.config = config
        self._api = api
        self.notifier = notifier or NullNotifier()
        self.clock = clock

    @property
    def api(self) -> GatewayApiPort:
        if self._api is None:
            self._api = registry.get_gateway_api(self.config)
        return self._api

    def process(self, kind: CallbackKind, payload: NotificationPayload) -> CallbackOutcome:
        outcome = self._process(kind, payload)
        self._notify_user(outcome)
        return outcome

    def _process(self, kind: CallbackKind, payload: NotificationPayload) -> CallbackOutcome:
        if payload.is_empty or not payload.refno:
            return self._reject(OutcomeKind.MALFORMED_CALLBACK, kind, payload, "empty payload or missing refno")

        payment = self._find_payment(payload.refno)
        if payment is None:
            return self._reject(OutcomeKind.UNKNOWN_REFERENCE, kind, payload, "no payment for refno")

        if payload.status == "error":
            logger.error(
                "The payment gateway returned the error code %s (%s) with details %s for payment %s",
                payload.error_code,
                error_codes.describe(payload.error_code),
                payload.error_detail or payload.error_message,
                payment.public_id,
                extra={"callback": kind.value},
            )
            return CallbackOutcome(OutcomeKind.GATEWAY_ERROR, payment, payload.error_code)

        if payload.status == "cancel":
            logger.info(
                "The user cancelled the authorisation process for payment %s",
                payment.public_id,
                extra={"callback": kind.value},
            )
            return CallbackOutcome(OutcomeKind.USER_CANCELLED, payment)

        # без этой проверки атакующий просто выкинет sign2 из запроса
        if payload.security_level is None or payload.security_level != self.config.security_level:
            return self._reject(
                OutcomeKind.SECURITY_LEVEL_MISMATCH,
                kind,
                payload,
                f"security_level={payload.security_level!r}",
                payment,
            )

        if self.config.security_level == SecurityLevel.HMAC:
            # сумму берём из payload (что реально сообщил шлюз), не из нашей БД
            valid = bool(payload.upp_transaction_id) and verify_for(
                self.config,
                signature=payload.sign2,
                amount=payload.amount,
                currency=payload.currency,
                identifier=payload.upp_transaction_id,
            )
            if not valid:
                return self._reject(
                    OutcomeKind.INVALID_SIGNATURE,
                    kind,
                    payload,
                    f"non matching sign2 (error code {payload.error_code or '-'})",
                    payment,
                )

        with transaction.atomic():
            locked = OrderPayment.objects.select_for_update().get(pk=payment.pk)

            # return и notify приходят оба; второй терминальный callback: no-op
            if not locked.is_pending:
                logger.info(
                    "Ignoring %s callback for payment %s: already %s",
                    kind.value,
                    locked.public_id,
                    locked.status,
                )
                return CallbackOutcome(OutcomeKind.DUPLICATE, locked)

            if payload.status != "success":
                logger.error(
                    "Datatrans communication failure: unexpected status %r for payment %s",
                    payload.status,
                    locked.public_id,
                )
                failed = self._commit(locked, Status.FAILED, "fail", kind, payload, remote_state=payload.status)
                return CallbackOutcome(OutcomeKind.PROTOCOL_VIOLATION, failed, payload.status)

            return self._handle_success(locked, kind, payload)

    def _handle_success(
        self,
        payment: OrderPayment,
        kind: CallbackKind,
        payload: NotificationPayload,
    ) -> CallbackOutcome:
        remote = self._remote_transaction(payment, payload)

        if self.config.use_alias and not payload.alias_cc:
            outcome = self._handle_missing_alias(payment, kind, payload, remote)
            if outcome is not None:
                return outcome

        if self.config.is_conditional:
            status = self.api.settle(transaction=remote)
            if status != self.config.execute_status:
                logger.error(
                    "Authorization succeeded but settlement failed for payment %s (remote status %r)",
                    payment.public_id,
                    status,
                )
                failed = self._commit(
                    payment, Status.FAILED, "fail", kind, payload, remote_state=status or "settlement failed"
                )
                return CallbackOutcome(OutcomeKind.SETTLEMENT_FAILED, failed, status or "")
            to_status = Status.CAPTURED
        elif self.config.request_type == RequestType.AUTHORIZE_AND_CAPTURE:
            to_status = Status.CAPTURED
        else:
            to_status = Status.AUTHORIZED

        action = "capture" if to_status == Status.CAPTURED else "authorize"
        committed = self._commit(payment, to_status, action, kind, payload)

        logger.info("Payment %s %s via %s callback", committed.public_id, committed.status, kind.value)
        return CallbackOutcome(OutcomeKind(to_status.value), committed)

    def _handle_missing_alias(
        self,
        payment: OrderPayment,
        kind: CallbackKind,
        payload: NotificationPayload,
        remote: RemoteTransaction,
    ) -> CallbackOutcome | None:
        """
        use_alias включён, а alias не пришёл.

        conditional: авторизацию отменяем (cancel), иначе деньги уже списаны: refund.
        Подтвердилось -> предупреждаем пользователя и заканчиваем попытку.
        Не подтвердилось -> оставляем платёж (лучше платёж без recurring, чем никакого).
        """
        if self.config.alias_missing_policy == AliasMissingPolicy.CANCEL:
            remote_status = self.api.cancel(transaction=remote)
            confirmed = remote_status == self.config.cancel_status
            to_status, action = Status.CANCELLED, "cancel"
        else:
            remote_status = self.api.refund(transaction=remote)
            confirmed = remote_status == self.config.refund_status
            to_status, action = Status.REFUNDED, "refund"

        if not confirmed:
            logger.warning(
                "Alias is missing but %s failed for payment %s (remote status %r)",
                action,
                payment.public_id,
                remote_status,
            )
            return None

        logger.warning("Alias is missing for payment %s, payment %s", payment.public_id, to_status.label.lower())
        committed = self._commit(payment, to_status, action, kind, payload, remote_state=remote_status)
        return CallbackOutcome(OutcomeKind.ALIAS_MISSING, committed, action)

    def _commit(
        self,
        payment: OrderPayment,
        to_status: str,
        action: str,
        kind: CallbackKind,
        payload: NotificationPayload,
        *,
        remote_state: str | None = None,
    ) -> OrderPayment:
        return commit_transition(
            payment=payment,
            to_status=to_status,
            action=action,
            source=kind.value,
            remote_id=payload.upp_transaction_id,
            remote_state=remote_state or payload.response_message or payload.status,
            provider_payload=payload.provider_payload(),
            metadata={
                "refno": payload.refno,
                "amount": payload.amount,
                "currency": payload.currency,
                "authorization_code": payload.authorization_code or payload.acq_authorization_code,
            },
            now=self.clock(),
        )

    def _remote_transaction(self, payment: OrderPayment, payload: NotificationPayload) -> RemoteTransaction:
        digits = get_fraction_digits(payment.currency)
        amount = payload.amount_minor
        if amount is None:
            amount = to_minor_units(payment.amount, digits)
        elif payload.currency == payment.currency and from_minor_units(amount, digits) != payment.amount:
            logger.warning(
                "Datatrans reported amount %s %s for payment %s, expected %s",
                amount,
                payload.currency,
                payment.public_id,
                payment.amount,
            )

        return RemoteTransaction(
            transaction_id=payload.upp_transaction_id,
            amount=amount,
            currency=payload.currency or payment.currency,
            refno=payload.refno,
        )

    def _find_payment(self, refno: str) -> OrderPayment | None:
        try:
            public_id = uuid.UUID(refno)
        except ValueError:
            return None
        return OrderPayment.objects.filter(public_id=public_id, provider="datatrans").first()

    def _reject(
        self,
        kind: OutcomeKind,
        callback: CallbackKind,
        payload: NotificationPayload,
        reason: str,
        payment: OrderPayment | None = None,
    ) -> CallbackOutcome:
        logger.warning(
            "Rejected Datatrans %s callback (%s): %s",
            callback.value,
            kind.value,
            reason,
            extra={"refno": payload.refno},
        )
        return CallbackOutcome(kind, payment, reason)

    def _notify_user(self, outcome: CallbackOutcome) -> None:
        if outcome.is_success:
            self.notifier.success(MESSAGE_SUCCESS)
        elif outcome.kind == OutcomeKind.ALIAS_MISSING:
            self.notifier.warning(MESSAGE_ALIAS_MISSING)
        elif outcome.kind == OutcomeKind.USER_CANCELLED:
            self.notifier.warning(MESSAGE_CANCELLED)
        elif outcome.kind in (OutcomeKind.SETTLEMENT_FAILED, OutcomeKind.PROTOCOL_VIOLATION):
            self.notifier.error(MESSAGE_FAILED)
        else:
            self.notifier.warning(MESSAGE_PROBLEM)
