# apps/payments/providers/datatrans/exceptions.py
from rest_framework import status
from rest_framework.exceptions import APIException


class SigningKeyMissing(APIException):
    """Security level 2 без HMAC-ключа: подписать редирект невозможно."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Payment gateway is not configured."
    default_code = "gateway_not_configured"
