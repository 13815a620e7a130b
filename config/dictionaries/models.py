# -*- coding: utf-8 -*-
# config/dictionaries/models.py

from django.db import models


class Currency(models.Model):
    code = models.CharField(max_length=3, unique=True)  # ISO 4217
    name = models.CharField(max_length=64)
    symbol = models.CharField(max_length=8, blank=True, default="")

    # сколько знаков в minor unit (CHF/EUR = 2, JPY = 0); на проводе суммы только целые
    fraction_digits = models.PositiveSmallIntegerField(default=2)

    class Meta:
        ordering = ["code"]

    def __str__(self) -> str:
        return self.code
