# apps/payments/providers/datatrans/client.py
from __future__ import annotations

import logging

import requests

from apps.payments.providers.port import RemoteTransaction

from .config import GatewayConfig

logger = logging.getLogger(__name__)


class DatatransApi:
    """
    Сервер-сервер API Datatrans: settle / cancel / credit (refund) + статус транзакции.

    Авторизация: HTTP basic (merchantId:password). Все вызовы синхронные,
    с таймаутом из конфига. Ретраев нет: любая ошибка возвращается как None,
    решение принимает CallbackProcessor.
    """

    def __init__(self, config: GatewayConfig, *, session: requests.Session | None = None):
        self.config = config
        self.session = session or requests.Session()
        password = config.api_password.value if config.api_password else ""
        self.session.auth = (config.merchant_id, password)

    def settle(self, *, transaction: RemoteTransaction) -> str | None:
        ok = self._post(
            f"/v1/transactions/{transaction.transaction_id}/settle",
            {"amount": transaction.amount, "currency": transaction.currency, "refno": transaction.refno},
        )
        if ok is None:
            return None
        return self.transaction_status(transaction.transaction_id)

    def cancel(self, *, transaction: RemoteTransaction) -> str | None:
        ok = self._post(
            f"/v1/transactions/{transaction.transaction_id}/cancel",
            {"refno": transaction.refno},
        )
        if ok is None:
            return None
        return self.transaction_status(transaction.transaction_id)

    def refund(self, *, transaction: RemoteTransaction) -> str | None:
        result = self._post(
            f"/v1/transactions/{transaction.transaction_id}/credit",
            {"amount": transaction.amount, "currency": transaction.currency, "refno": transaction.refno},
        )
        if result is None:
            return None

        # credit создаёт НОВУЮ транзакцию, её статус и есть результат возврата
        credit_id = result.get("transactionId")
        if not credit_id:
            logger.error(
                "Datatrans credit response has no transactionId",
                extra={"transaction_id": transaction.transaction_id, "result": result},
            )
            return None
        return self.transaction_status(credit_id)

    def transaction_status(self, transaction_id: str) -> str | None:
        url = self._url(f"/v1/transactions/{transaction_id}")
        try:
            resp = self.session.get(url, timeout=self.config.api_timeout_s)
        except requests.RequestException as exc:
            logger.error("Datatrans status request failed: %s", exc, extra={"url": url})
            return None

        if resp.status_code != 200:
            logger.error(
                "Datatrans status request returned %s",
                resp.status_code,
                extra={"url": url, "content": resp.text[:500]},
            )
            return None

        data = self._json(resp, url)
        if data is None:
            return None
        return data.get("status")

    def _post(self, path: str, payload: dict) -> dict | None:
        url = self._url(path)
        try:
            resp = self.session.post(url, json=payload, timeout=self.config.api_timeout_s)
        except requests.RequestException as exc:
            logger.error("Datatrans request failed: %s", exc, extra={"url": url})
            return None

        if resp.status_code not in (200, 201, 204):
            logger.error(
                "Datatrans request returned %s",
                resp.status_code,
                extra={"url": url, "content": resp.text[:500]},
            )
            return None

        if resp.status_code == 204 or not resp.content:
            return {}
        return self._json(resp, url)

    def _json(self, resp, url: str) -> dict | None:
        # 200 с HTML (maintenance, прокси) или не-объектом: ответа нет
        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            logger.error(
                "Datatrans returned a non JSON object body",
                extra={"url": url, "content": resp.text[:500]},
            )
            return None
        return data

    def _url(self, path: str) -> str:
        return f"{self.config.api_url}{path}"
