"""
Synthetic Data Generator

Generates realistic sales transactions and salesperson reference data for
development and demos.
"""

import random
import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Any

from faker import Faker


# =============================================================================
# CONFIGURATION
# =============================================================================

SALES_PEOPLE = [
    # name, department, monthly target
    ("松澤", "営業1部", Decimal("3000000")),
    ("坂口", "営業1部", Decimal("2500000")),
    ("斉藤", "営業2部", Decimal("2000000")),
    ("泉水", "営業2部", Decimal("2000000")),
]

PRODUCTS = [
    # name, category, unit price
    ("クラウドストレージ Pro", "ソフトウェア", Decimal("48000")),
    ("セキュリティスイート", "ソフトウェア", Decimal("36000")),
    ("ノートPC X1", "ハードウェア", Decimal("158000")),
    ("ワイドモニター 27", "ハードウェア", Decimal("42000")),
    ("導入支援パック", "サービス", Decimal("120000")),
    ("保守サポート年間", "サービス", Decimal("60000")),
    ("研修プログラム", None, Decimal("80000")),
]


class SalesDataGenerator:
    """
    Generate sales records and salesperson reference rows.

    Example:
        generator = SalesDataGenerator(seed=42)
        people = generator.generate_people()
        records = generator.generate_records(n=200, days=90)
    """

    def __init__(self, seed: Optional[int] = 42, locale: str = "ja_JP"):
        self.random = random.Random(seed)
        self.fake = Faker(locale)
        if seed is not None:
            self.fake.seed_instance(seed)

    def generate_people(self) -> List[Dict[str, Any]]:
        """Reference rows for the known salespeople"""
        people = []
        for name, department, monthly_target in SALES_PEOPLE:
            people.append({
                "id": str(uuid.UUID(int=self.random.getrandbits(128))),
                "name": name,
                "department": department,
                "email": self.fake.email(),
                "monthly_target": monthly_target,
                "quarterly_target": monthly_target * 3,
                "hire_date": self.fake.date_between(start_date="-10y", end_date="-1y"),
            })
        return people

    def generate_records(
        self,
        n: int = 200,
        days: int = 90,
        end_date: Optional[date] = None,
        customers: int = 25,
    ) -> List[Dict[str, Any]]:
        """
        Generate n sales records spread over the last ``days`` days.

        Returns rows sorted ascending by date.
        """
        end_date = end_date or date.today()
        customer_names = [self.fake.company() for _ in range(customers)]

        records = []
        for _ in range(n):
            product_name, category, unit_price = self.random.choice(PRODUCTS)
            quantity = self.random.randint(1, 10)
            total = unit_price * quantity
            # Occasional negotiated discount: total is not always qty * price
            if self.random.random() < 0.15:
                total = (total * Decimal("0.9")).quantize(Decimal("1"))

            records.append({
                "id": str(uuid.UUID(int=self.random.getrandbits(128))),
                "date": end_date - timedelta(days=self.random.randint(0, days - 1)),
                "customer_name": self.random.choice(customer_names),
                "product_name": product_name,
                "quantity": quantity,
                "unit_price": unit_price,
                "total_amount": total,
                "sales_person": self.random.choice(SALES_PEOPLE)[0],
                "category": category,
                "notes": None,
            })

        records.sort(key=lambda r: r["date"])
        return records
