# apps/payments/providers/registry.py
from __future__ import annotations

from apps.payments.providers.datatrans.client import DatatransApi
from apps.payments.providers.datatrans.config import GatewayConfig, get_gateway_config as _get_gateway_config
from apps.payments.providers.port import GatewayApiPort


def get_gateway_config() -> GatewayConfig:
    """Конфиг шлюза: разобран один раз из settings.DATATRANS, дальше передаём по значению."""
    return _get_gateway_config()


def get_gateway_api(config: GatewayConfig) -> GatewayApiPort:
    """
    Клиент сервер-сервер API для конфига.

    Вызываем всегда через registry, чтобы в тестах monkeypatch работал по пути.
    """
    return DatatransApi(config)
