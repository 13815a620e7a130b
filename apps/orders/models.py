# apps/orders/models.py
from __future__ import annotations

from decimal import Decimal

from django.db import models

from core.models import PublicModel


class Order(PublicModel):
    """
    Заказ, который оплачивается через checkout.

    Цены и состав заказа считает внешний checkout-flow; здесь нам нужны только
    итоговая сумма и валюта, чтобы построить платёж.
    """

    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="CHF")
    email = models.EmailField(blank=True, default="")

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"Order {self.public_id}"
