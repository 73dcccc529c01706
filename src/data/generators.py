"""
Demo Data Generator

Generates a small but realistic storefront for local development:
- Bilingual categories and products with attributes
- Customer and admin profiles
- Orders with lines spread over the trailing months

Records are plain dicts keyed by column name, ready for bulk inserts.
"""

import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from faker import Faker

CATEGORIES = [
    ("إلكترونيات", "Electronics"),
    ("ملابس", "Clothing"),
    ("المنزل والحديقة", "Home & Garden"),
    ("رياضة", "Sports"),
    ("تجميل", "Beauty"),
]

ATTRIBUTES = {
    "Color": ["Black", "White", "Red", "Blue", "Green"],
    "Size": ["S", "M", "L", "XL"],
    "Material": ["Cotton", "Leather", "Plastic", "Steel"],
    "Warranty": ["6 months", "1 year", "2 years"],
}

ORDER_STATUSES = [
    ("pending", 0.10),
    ("confirmed", 0.10),
    ("shipped", 0.15),
    ("delivered", 0.60),
    ("cancelled", 0.05),
]

Record = Dict[str, Any]


class DemoDataGenerator:
    """
    Build a consistent set of storefront records.

    Example:
        data = DemoDataGenerator(seed=42).generate_all(products=50, orders=300)
        data["products"], data["product_attributes"], data["orders"], ...
    """

    def __init__(self, seed: Optional[int] = None, now: Optional[datetime] = None):
        self.random = random.Random(seed)
        self.fake = Faker(["en_US", "ar_AA"])
        if seed is not None:
            self.fake.seed_instance(seed)
        self.now = now or datetime.now(timezone.utc)

    def categories(self) -> List[Record]:
        return [
            {"id": uuid.uuid4(), "name_ar": name_ar, "name_en": name_en, "created_at": self.now}
            for name_ar, name_en in CATEGORIES
        ]

    def profiles(self, n: int = 100) -> List[Record]:
        """``n`` customers plus one admin"""
        profiles = [
            {
                "id": uuid.uuid4(),
                "full_name": self.fake["en_US"].name(),
                "phone": self.fake["en_US"].phone_number(),
                "city": self.fake["en_US"].city(),
                "address": self.fake["en_US"].street_address(),
                "role": "customer",
                "created_at": self._past(days=365),
            }
            for _ in range(n)
        ]
        profiles.append({
            "id": uuid.uuid4(),
            "full_name": "Store Admin",
            "phone": None,
            "city": None,
            "address": None,
            "role": "admin",
            "created_at": self.now,
        })
        return profiles

    def products(self, categories: List[Record], n: int = 50) -> Dict[str, List[Record]]:
        """Products and their attribute rows"""
        products, attributes = [], []

        for _ in range(n):
            category = self.random.choice(categories)
            word_en = self.fake["en_US"].word().title()
            price = round(self.random.uniform(5, 500), 2)
            product_id = uuid.uuid4()

            products.append({
                "id": product_id,
                "name_ar": f"{self.fake['ar_AA'].word()} {category['name_ar']}",
                "name_en": f"{word_en} {category['name_en']}",
                "description_ar": self.fake["ar_AA"].sentence(),
                "description_en": self.fake["en_US"].sentence(nb_words=12),
                "price": price,
                "offer_price": round(price * 0.8, 2) if self.random.random() < 0.2 else None,
                "stock": self.random.randint(0, 200),
                "image_url": [],
                "category_id": category["id"],
                "is_best_seller": self.random.random() < 0.15,
                "limited_time_offer": self.random.random() < 0.1,
                "created_at": self._past(days=365),
            })

            for name in self.random.sample(sorted(ATTRIBUTES), k=self.random.randint(0, 2)):
                attributes.append({
                    "id": uuid.uuid4(),
                    "product_id": product_id,
                    "attribute_name": name,
                    "attribute_value": self.random.choice(ATTRIBUTES[name]),
                })

        return {"products": products, "product_attributes": attributes}

    def orders(
        self,
        profiles: List[Record],
        products: List[Record],
        n: int = 300,
        days: int = 180,
    ) -> Dict[str, List[Record]]:
        """Orders placed by customers over the last ``days`` days, with their lines"""
        customers = [p for p in profiles if p["role"] == "customer"]
        orders, items = [], []

        for _ in range(n):
            order_id = uuid.uuid4()
            total = 0.0

            for product in self.random.sample(products, k=min(len(products), self.random.randint(1, 3))):
                quantity = self.random.choices([1, 2, 3, 4], weights=[0.6, 0.25, 0.1, 0.05])[0]
                unit_price = product["offer_price"] or product["price"]
                items.append({
                    "id": uuid.uuid4(),
                    "order_id": order_id,
                    "product_id": product["id"],
                    "quantity": quantity,
                    "price": unit_price,
                })
                total += unit_price * quantity

            orders.append({
                "id": order_id,
                "user_id": self.random.choice(customers)["id"] if customers else None,
                "status": self.random.choices(
                    [s[0] for s in ORDER_STATUSES],
                    weights=[s[1] for s in ORDER_STATUSES],
                )[0],
                "total_price": round(total, 2),
                "created_at": self._past(days=days),
            })

        return {"orders": orders, "order_items": items}

    def generate_all(
        self,
        customers: int = 100,
        products: int = 50,
        orders: int = 300,
    ) -> Dict[str, List[Record]]:
        categories = self.categories()
        profiles = self.profiles(customers)
        catalog = self.products(categories, products)
        sales = self.orders(profiles, catalog["products"], orders)

        return {
            "categories": categories,
            "profiles": profiles,
            **catalog,
            **sales,
        }

    def _past(self, days: int) -> datetime:
        return self.now - timedelta(seconds=self.random.randint(0, days * 24 * 3600))
