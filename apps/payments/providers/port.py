# apps/payments/providers/port.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class RemoteTransaction:
    """То, что шлюз сообщил о транзакции; amount: minor units."""

    transaction_id: str
    amount: int
    currency: str
    refno: str


class GatewayApiPort(Protocol):
    """
    Порт (интерфейс) сервер-сервер операций шлюза.

    Каждый метод возвращает статус транзакции, который шлюз сообщил ПОСЛЕ операции,
    или None, если вызов не удался. Ретраев нет: ошибка финальна для этой попытки.
    """

    def settle(self, *, transaction: RemoteTransaction) -> str | None:
        ...

    def cancel(self, *, transaction: RemoteTransaction) -> str | None:
        ...

    def refund(self, *, transaction: RemoteTransaction) -> str | None:
        ...
