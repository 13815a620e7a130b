# apps/payments/models.py
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from core.models import PublicModel


class OrderPayment(PublicModel):
    """
    Платёж по заказу (одна попытка checkout).

    Важные поля:
    - public_id.hex уходит в шлюз как refno и возвращается в callback'ах (join key).
    - status меняем только через commit_transition (state machine),
      прямой .save() со сменой статуса запрещён.
    - remote_id / remote_state / authorized_at / captured_at пишет только commit.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        AUTHORIZED = "authorized", "Authorized"
        CAPTURED = "captured", "Captured"
        CANCELLED = "cancelled", "Cancelled"
        REFUNDED = "refunded", "Refunded"
        FAILED = "failed", "Failed"

    order = models.ForeignKey("orders.Order", on_delete=models.PROTECT, related_name="payments")

    status = models.CharField(max_length=32, choices=Status.choices, default=Status.PENDING)

    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=8, default="CHF")

    idempotency_key = models.CharField(max_length=128, null=True, blank=True, unique=True)
    provider = models.CharField(max_length=64, default="datatrans")

    # uppTransactionId и текстовый ответ шлюза
    remote_id = models.CharField(max_length=128, blank=True, default="")
    remote_state = models.CharField(max_length=255, blank=True, default="")

    authorized_at = models.DateTimeField(null=True, blank=True)
    captured_at = models.DateTimeField(null=True, blank=True)

    # customer/alias поля из callback'а, как пришли (без валидации)
    raw_provider_payload = models.JSONField(null=True, blank=True)

    # флаг (по умолчанию False), commit временно выставляет True
    _status_change_allowed: bool = False
    _loaded_status: str | None = None

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._loaded_status = self.status

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_status = instance.status
        instance._status_change_allowed = False
        return instance

    def save(self, *args, **kwargs):
        """
        Инвариант: статус нельзя менять прямым .save().
        Менять статус можно только через commit_transition, который выставляет
        payment._status_change_allowed = True перед сохранением.
        """
        if self.pk is not None:
            status_changed = (self._loaded_status is not None) and (self.status != self._loaded_status)
            if status_changed and not getattr(self, "_status_change_allowed", False):
                raise ValidationError("OrderPayment.status can only be changed via commit_transition")

        super().save(*args, **kwargs)

        self._loaded_status = self.status
        self._status_change_allowed = False

    @property
    def refno(self) -> str:
        return self.public_id.hex

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"Payment({self.public_id}) {self.status} {self.amount} {self.currency}"


class PaymentEvent(models.Model):
    """
    Аудит жизненного цикла платежа: одно событие на каждый переход статуса.
    """

    class Source(models.TextChoices):
        CHECKOUT = "checkout", "Checkout"
        RETURN = "return", "Return"
        NOTIFY = "notify", "Notify"

    payment = models.ForeignKey("payments.OrderPayment", on_delete=models.CASCADE, related_name="events")

    from_status = models.CharField(max_length=32, null=True, blank=True)
    to_status = models.CharField(max_length=32)
    action = models.CharField(max_length=32)  # create / authorize / capture / cancel / refund / fail
    source = models.CharField(max_length=16, choices=Source.choices, default=Source.CHECKOUT)

    metadata = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["payment", "created_at"]),
        ]

    def __str__(self) -> str:
        return f"PaymentEvent({self.payment_id}) {self.action} {self.from_status}->{self.to_status}"
