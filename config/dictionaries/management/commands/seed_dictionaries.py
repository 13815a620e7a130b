from django.core.management.base import BaseCommand
from django.db import transaction

from config.dictionaries.models import Currency


# (code, name, symbol, fraction_digits)
DEFAULT_CURRENCIES = (
    ("CHF", "Swiss franc", "CHF", 2),
    ("EUR", "Euro", "€", 2),
    ("USD", "US dollar", "$", 2),
    ("GBP", "Pound sterling", "£", 2),
    ("JPY", "Japanese yen", "¥", 0),
)


class Command(BaseCommand):
    help = "Seed base dictionaries (currencies with minor-unit digits). Safe to run multiple times."

    @transaction.atomic
    def handle(self, *args, **options):
        for code, name, symbol, fraction_digits in DEFAULT_CURRENCIES:
            Currency.objects.update_or_create(
                code=code,
                defaults={"name": name, "symbol": symbol, "fraction_digits": fraction_digits},
            )

        self.stdout.write(self.style.SUCCESS("Dictionaries seeded."))
