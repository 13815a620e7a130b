# apps/payments/providers/datatrans/signature.py
"""
HMAC-подпись Datatrans (sign2).

Порядок полей и их формат: часть протокола, а не деталь реализации:

    HMAC(key, merchantId + amount + currency + identifier)

amount: целое число в minor units (1234, не "12.34"); identifier: refno для
исходящего редиректа и uppTransactionId для входящего callback'а.
Ключ хранится в hex и перед использованием декодируется в байты.
"""
from __future__ import annotations

import hashlib
import hmac
from typing import Iterable

from .config import GatewayConfig, Secret
from .exceptions import SigningKeyMissing

_DIGESTS = {
    "md5": hashlib.md5,
    "sha256": hashlib.sha256,
}


def sign(
    key: Secret | str,
    merchant_id: str,
    amount: int | str,
    currency: str,
    identifier: str,
    *,
    algorithm: str = "md5",
) -> str:
    raw_key = key.value if isinstance(key, Secret) else key
    message = f"{merchant_id}{amount}{currency}{identifier}"
    return hmac.new(bytes.fromhex(raw_key), message.encode("utf-8"), _DIGESTS[algorithm]).hexdigest()


def verify(
    keys: Iterable[Secret | str],
    signature: str | None,
    merchant_id: str,
    amount: int | str,
    currency: str,
    identifier: str,
    *,
    algorithm: str = "md5",
) -> bool:
    """Пробуем ключи по порядку (ротация); сравнение constant-time."""
    if not signature:
        return False

    for key in keys:
        expected = sign(key, merchant_id, amount, currency, identifier, algorithm=algorithm)
        if hmac.compare_digest(expected.encode("ascii"), signature.lower().encode("utf-8")):
            return True
    return False


def sign_for(config: GatewayConfig, *, amount: int | str, currency: str, identifier: str) -> str:
    if config.active_key is None:
        raise SigningKeyMissing()
    return sign(
        config.active_key,
        config.merchant_id,
        amount,
        currency,
        identifier,
        algorithm=config.sign_algorithm,
    )


def verify_for(
    config: GatewayConfig,
    *,
    signature: str | None,
    amount: int | str,
    currency: str,
    identifier: str,
) -> bool:
    return verify(
        config.hmac_keys,
        signature,
        config.merchant_id,
        amount,
        currency,
        identifier,
        algorithm=config.sign_algorithm,
    )
