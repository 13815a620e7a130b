# apps/payments/urls.py
from django.urls import path
from .api_views import (
    DatatransNotifyApi,
    DatatransRedirectApi,
    DatatransReturnApi,
)

urlpatterns = [
    path("orders/<uuid:public_id>/datatrans/redirect/", DatatransRedirectApi.as_view(), name="datatrans-redirect"),
    path("datatrans/success/", DatatransReturnApi.as_view(), name="datatrans-success"),
    path("datatrans/error/", DatatransReturnApi.as_view(), name="datatrans-error"),
    path("datatrans/cancel/", DatatransReturnApi.as_view(), name="datatrans-cancel"),
    path("datatrans/notify/", DatatransNotifyApi.as_view(), name="datatrans-notify"),
]
