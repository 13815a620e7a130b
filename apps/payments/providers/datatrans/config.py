# apps/payments/providers/datatrans/config.py
from __future__ import annotations

import enum
import functools
from dataclasses import dataclass, field

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.dispatch import receiver

DEFAULT_SERVICE_URL = "https://pilot.datatrans.biz/upp/jsp/upStart.jsp"
DEFAULT_API_URL = "https://api.sandbox.datatrans.com"


class RequestType(str, enum.Enum):
    AUTHORIZE_ONLY = "NOA"
    AUTHORIZE_AND_CAPTURE = "CAA"
    CONDITIONAL = "conditional"
    PROVIDER_DEFAULT = "ignore"


class SecurityLevel(enum.IntEnum):
    NONE = 0
    STATIC_SIGN = 1
    HMAC = 2


class AliasMissingPolicy(str, enum.Enum):
    CANCEL = "cancel"
    REFUND = "refund"


@dataclass(frozen=True)
class Secret:
    """Строка-секрет, которая не попадает в repr/логи."""

    value: str = field(repr=False)

    def __str__(self) -> str:
        return "********"

    def __repr__(self) -> str:
        return "Secret('********')"

    def __bool__(self) -> bool:
        return bool(self.value)


@dataclass(frozen=True)
class GatewayConfig:
    merchant_id: str
    service_url: str = DEFAULT_SERVICE_URL
    request_type: RequestType = RequestType.AUTHORIZE_AND_CAPTURE
    use_alias: bool = False
    security_level: SecurityLevel = SecurityLevel.HMAC
    sign: Secret | None = None
    # первый ключ активный (им подписываем), остальные принимаем при проверке
    hmac_keys: tuple[Secret, ...] = ()
    sign_algorithm: str = "md5"
    alias_missing_policy: AliasMissingPolicy | None = None

    execute_status: str = "settled"
    cancel_status: str = "canceled"
    refund_status: str = "settled"

    api_url: str = DEFAULT_API_URL
    api_password: Secret | None = None
    api_timeout_s: int = 10

    return_success_url: str = "/"
    return_failure_url: str = "/"

    def __post_init__(self):
        if self.alias_missing_policy is None:
            policy = (
                AliasMissingPolicy.CANCEL
                if self.request_type == RequestType.CONDITIONAL
                else AliasMissingPolicy.REFUND
            )
            object.__setattr__(self, "alias_missing_policy", policy)

    @property
    def active_key(self) -> Secret | None:
        return self.hmac_keys[0] if self.hmac_keys else None

    @property
    def is_conditional(self) -> bool:
        return self.request_type == RequestType.CONDITIONAL

    @classmethod
    def from_settings(cls, data: dict) -> "GatewayConfig":
        """
        Разбирает settings.DATATRANS один раз. Ошибки конфигурации -> ImproperlyConfigured.

        Старые ключи HMAC_KEY / HMAC_KEY_2 / USE_HMAC_2 сворачиваются в упорядоченный
        HMAC_KEYS: выбранный ключ первым, второй остаётся для проверки.
        """
        merchant_id = str(data.get("MERCHANT_ID") or "").strip()
        if not merchant_id:
            raise ImproperlyConfigured("DATATRANS['MERCHANT_ID'] is required.")

        try:
            request_type = RequestType(data.get("REQUEST_TYPE", RequestType.AUTHORIZE_AND_CAPTURE.value))
            security_level = SecurityLevel(int(data.get("SECURITY_LEVEL", SecurityLevel.HMAC)))
            policy = data.get("ALIAS_MISSING_POLICY")
            alias_missing_policy = AliasMissingPolicy(policy) if policy else None
        except ValueError as exc:
            raise ImproperlyConfigured(f"Invalid DATATRANS setting: {exc}") from exc

        # cancel отменяет только неподтверждённую авторизацию (conditional),
        # refund возвращает только уже списанные деньги
        conditional = request_type == RequestType.CONDITIONAL
        if alias_missing_policy == AliasMissingPolicy.CANCEL and not conditional:
            raise ImproperlyConfigured(
                "DATATRANS['ALIAS_MISSING_POLICY'] = 'cancel' requires REQUEST_TYPE 'conditional'."
            )
        if alias_missing_policy == AliasMissingPolicy.REFUND and conditional:
            raise ImproperlyConfigured(
                "DATATRANS['ALIAS_MISSING_POLICY'] = 'refund' cannot be used with REQUEST_TYPE 'conditional'."
            )

        algorithm = data.get("SIGN_ALGORITHM", "md5")
        if algorithm not in ("md5", "sha256"):
            raise ImproperlyConfigured(f"Unsupported DATATRANS['SIGN_ALGORITHM']: {algorithm}")

        return cls(
            merchant_id=merchant_id,
            service_url=data.get("SERVICE_URL") or DEFAULT_SERVICE_URL,
            request_type=request_type,
            use_alias=bool(data.get("USE_ALIAS", False)),
            security_level=security_level,
            sign=Secret(data["SIGN"]) if data.get("SIGN") else None,
            hmac_keys=_collect_hmac_keys(data),
            sign_algorithm=algorithm,
            alias_missing_policy=alias_missing_policy,
            execute_status=data.get("EXECUTE_STATUS", "settled"),
            cancel_status=data.get("CANCEL_STATUS", "canceled"),
            refund_status=data.get("REFUND_STATUS", "settled"),
            api_url=(data.get("API_URL") or DEFAULT_API_URL).rstrip("/"),
            api_password=Secret(data["API_PASSWORD"]) if data.get("API_PASSWORD") else None,
            api_timeout_s=int(data.get("API_TIMEOUT_S", 10)),
            return_success_url=data.get("RETURN_SUCCESS_URL") or "/",
            return_failure_url=data.get("RETURN_FAILURE_URL") or "/",
        )


def _collect_hmac_keys(data: dict) -> tuple[Secret, ...]:
    raw_keys = data.get("HMAC_KEYS") or []
    if isinstance(raw_keys, str):
        raise ImproperlyConfigured("DATATRANS['HMAC_KEYS'] must be a list of hex keys, not a string.")
    keys = list(raw_keys)

    legacy = [k for k in (data.get("HMAC_KEY"), data.get("HMAC_KEY_2")) if k]
    if data.get("USE_HMAC_2"):
        legacy.reverse()
    for key in legacy:
        if key not in keys:
            keys.append(key)

    for key in keys:
        try:
            bytes.fromhex(key)
        except ValueError:
            raise ImproperlyConfigured("DATATRANS HMAC keys must be hex encoded.")

    return tuple(Secret(k) for k in keys)


@functools.lru_cache(maxsize=1)
def get_gateway_config() -> GatewayConfig:
    return GatewayConfig.from_settings(getattr(settings, "DATATRANS", {}))


@receiver(setting_changed)
def _reset_gateway_config(*, setting, **kwargs):
    if setting == "DATATRANS":
        get_gateway_config.cache_clear()
