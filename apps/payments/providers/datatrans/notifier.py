# apps/payments/providers/datatrans/notifier.py
from __future__ import annotations

from typing import Protocol

from django.contrib import messages


class Notifier(Protocol):
    """Сообщения конечному пользователю (не в логи)."""

    def success(self, message: str) -> None:
        ...

    def warning(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class MessagesNotifier:
    """Return-путь: пользователь в браузере, пишем через django.contrib.messages."""

    def __init__(self, request):
        # DRF Request -> обычный HttpRequest, messages работают с ним
        self.request = getattr(request, "_request", request)

    def success(self, message: str) -> None:
        messages.success(self.request, message)

    def warning(self, message: str) -> None:
        messages.warning(self.request, message)

    def error(self, message: str) -> None:
        messages.error(self.request, message)


class NullNotifier:
    """Notify-путь: сервер-сервер, показывать некому."""

    def success(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass
