from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from receiving.services.reception import ReceptionService
from receiving.services.records import (
    Product,
    ProductStatus,
    QualityParameter,
    QualityThreshold,
    Silo,
)
from receiving.services.repository import COLLECTIONS, DatabaseRepository

PRODUCTS = [
    ("P1", "Soybean", ProductStatus.ACTIVE),
    ("P2", "Corn", ProductStatus.ACTIVE),
    ("P3", "Wheat", ProductStatus.ACTIVE),
    ("P4", "Sunflower", ProductStatus.INACTIVE),
]

PARAMETERS = [
    ("HUM", "Moisture (%)"),
    ("IMP", "Foreign matter (%)"),
    ("DAN", "Damaged kernels (%)"),
]

THRESHOLDS = [
    ("P1", "HUM", "10", "13.5"),
    ("P1", "IMP", "0", "1"),
    ("P1", "DAN", "0", "5"),
    ("P2", "HUM", "12", "14.5"),
    ("P2", "IMP", "0", "1.5"),
    ("P3", "HUM", "10", "14"),
]

SILOS = [
    ("S01", "North silo 1", "P1", 0, 150000),
    ("S02", "North silo 2", "P1", 0, 150000),
    ("S03", "South silo 1", "P2", 0, 200000),
    ("S04", "South silo 2", "P3", 0, 120000),
]


class Command(BaseCommand):
    help = "Load demo products, quality parameters, thresholds and silos."

    def add_arguments(self, parser):
        parser.add_argument('--reset', action='store_true',
                            help='Remove every stored collection, operations included, first')

    @transaction.atomic
    def handle(self, *args, **opts):
        repository = DatabaseRepository()
        if opts['reset']:
            removed = repository.clear(*[key for _, key, _ in COLLECTIONS])
            self.stdout.write(self.style.WARNING(f'Removed {removed} stored collection(s).'))

        service = ReceptionService(repository)
        for code, name, status in PRODUCTS:
            service.save_product(Product(code=code, name=name, status=status))
        for code, name in PARAMETERS:
            service.save_parameter(QualityParameter(code=code, name=name))
        for product, parameter, low, high in THRESHOLDS:
            service.save_threshold(
                QualityThreshold(
                    product_code=product,
                    parameter=parameter,
                    min_value=Decimal(low),
                    max_value=Decimal(high),
                )
            )
        for code, name, product, stock, capacity in SILOS:
            service.save_silo(
                Silo(code=code, name=name, product_code=product, stock=stock, capacity=capacity)
            )

        self.stdout.write(self.style.SUCCESS(
            f'Seeded {len(PRODUCTS)} products, {len(PARAMETERS)} parameters, '
            f'{len(THRESHOLDS)} thresholds and {len(SILOS)} silos.'
        ))
