from rest_framework.generics import ListAPIView
from rest_framework.permissions import AllowAny

from .models import Currency
from .serializers import CurrencySerializer


class CurrencyListView(ListAPIView):
    authentication_classes = []
    permission_classes = [AllowAny]
    queryset = Currency.objects.all()
    serializer_class = CurrencySerializer
