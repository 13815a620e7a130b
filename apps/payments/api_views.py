# apps/payments/api_views.py
from __future__ import annotations

from urllib.parse import urlencode

from django.db import transaction
from django.http import HttpResponseRedirect
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.orders.models import Order
from apps.payments.providers import registry
from apps.payments.providers.datatrans.callback import (
    CallbackKind,
    CallbackOutcome,
    CallbackProcessor,
    NotificationPayload,
)
from apps.payments.providers.datatrans.config import GatewayConfig
from apps.payments.providers.datatrans.notifier import MessagesNotifier, NullNotifier
from apps.payments.providers.datatrans.redirect import build_redirect_request


class DatatransRedirectApi(APIView):
    """
    Подписанные данные для POST-автосабмита в шлюз.
    Сама форма/редирект: забота фронта.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request, public_id):
        order = get_object_or_404(Order, public_id=public_id)
        config = registry.get_gateway_config()

        # платёж создаётся (если нужно) и подписывается атомарно
        with transaction.atomic():
            payment_request = build_redirect_request(
                order=order,
                config=config,
                absolute_uri=request.build_absolute_uri,
            )

        return Response(
            {
                "service_url": payment_request.service_url,
                "method": "POST",
                "fields": payment_request.as_form_data(),
            },
            status=status.HTTP_201_CREATED,
        )


class DatatransCallbackApi(APIView):
    """
    Общая часть return/notify: шлюз POST'ит form-urlencoded, аутентификация: подпись.
    """

    authentication_classes = []
    permission_classes = [AllowAny]
    kind: CallbackKind

    def post(self, request):
        config = registry.get_gateway_config()
        payload = NotificationPayload.from_data(request.data)

        processor = CallbackProcessor(config, notifier=self.get_notifier(request))
        outcome = processor.process(self.kind, payload)

        return self.respond(outcome, config)

    def get_notifier(self, request):
        return NullNotifier()

    def respond(self, outcome: CallbackOutcome, config: GatewayConfig):
        raise NotImplementedError


class DatatransReturnApi(DatatransCallbackApi):
    """Браузер пользователя: success/error/cancel URL -> назад в checkout."""

    kind = CallbackKind.RETURN

    def get_notifier(self, request):
        return MessagesNotifier(request)

    def respond(self, outcome: CallbackOutcome, config: GatewayConfig):
        url = config.return_success_url if outcome.is_success else config.return_failure_url
        if outcome.payment is not None:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}{urlencode({'payment': str(outcome.payment.public_id)})}"
        return HttpResponseRedirect(url)


class DatatransNotifyApi(DatatransCallbackApi):
    """Сервер-сервер. Наружу никаких деталей: только 400 или 200."""

    kind = CallbackKind.NOTIFY

    def respond(self, outcome: CallbackOutcome, config: GatewayConfig):
        if outcome.is_rejection:
            return Response(status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_200_OK)
