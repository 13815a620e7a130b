from django.urls import path

from .api_views import CurrencyListView


urlpatterns = [
    path("currencies/", CurrencyListView.as_view(), name="currencies-list"),
]
