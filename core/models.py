# core/models.py

import uuid
from django.db import models


class PublicModel(models.Model):
    """
    Базовая модель для сущностей, которые видны снаружи (API, платёжный шлюз).
    Наружу отдаём только public_id, внутренний pk не светим.
    """

    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
