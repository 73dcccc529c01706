"""
Test Suite Configuration
"""
import json
from datetime import datetime, timezone
from typing import AsyncGenerator, Dict, List, Optional, Tuple

import httpx
import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from src.database.connection import create_session_factory
from src.database.models import Base, Order, OrderItem, Product, Profile
from src.repositories import OrderRepository, ProductRepository, UserRepository
from src.schemas.orders import Order as OrderSchema
from src.storage import ProductImageStorage

STORAGE_URL = "https://project.storage.test"
BUCKET = "product-images"


class StorageBackend:
    """In-memory stand-in for the object storage REST API"""

    def __init__(self):
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self.requests: List[httpx.Request] = []
        self.fail_uploads = False
        self.fail_removes = False
        self.fail_keys = set()
        self.remove_error_body = {"message": "remove rejected"}

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        prefix = f"/storage/v1/object/{BUCKET}"

        if request.method == "POST":
            if self.fail_uploads:
                return httpx.Response(500, json={"message": "upload rejected"})
            key = request.url.path[len(prefix) + 1:]
            if key in self.objects:
                return httpx.Response(409, json={"message": "The resource already exists"})
            self.objects[key] = (request.content, request.headers["content-type"])
            return httpx.Response(200, json={"Key": f"{BUCKET}/{key}"})

        if request.method == "DELETE":
            keys = json.loads(request.content)["prefixes"]
            if self.fail_removes or self.fail_keys.intersection(keys):
                return httpx.Response(500, json=self.remove_error_body)
            for key in keys:
                self.objects.pop(key, None)
            return httpx.Response(200, json=[])

        return httpx.Response(404, json={"message": "not found"})


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory database shared by every session of one test"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # SQLite only honours ON DELETE CASCADE with foreign keys switched on
    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
def add_rows(session_factory):
    """Insert ORM rows in one transaction"""

    async def _add(*rows):
        async with session_factory() as session, session.begin():
            session.add_all(rows)
        return rows

    return _add


@pytest.fixture
def storage_backend() -> StorageBackend:
    return StorageBackend()


@pytest.fixture
async def storage(storage_backend) -> AsyncGenerator[ProductImageStorage, None]:
    """Storage client talking to the in-memory backend"""
    client = httpx.AsyncClient(
        base_url=STORAGE_URL,
        transport=httpx.MockTransport(storage_backend.handle),
    )
    storage = ProductImageStorage(STORAGE_URL, "test-key", BUCKET, client=client)
    yield storage
    await storage.aclose()


@pytest.fixture
def product_repo(session_factory, storage) -> ProductRepository:
    return ProductRepository(session_factory, storage)


@pytest.fixture
def order_repo(session_factory) -> OrderRepository:
    return OrderRepository(session_factory)


@pytest.fixture
def user_repo(session_factory) -> UserRepository:
    return UserRepository(session_factory)


@pytest.fixture
def make_product():
    """Product row factory with sensible defaults"""

    def _make(**overrides) -> Product:
        values = {
            "name_ar": "منتج",
            "name_en": "Product",
            "price": 10,
            "image_url": [],
        }
        values.update(overrides)
        return Product(**values)

    return _make


@pytest.fixture
def make_order():
    """Order row factory; ``lines`` is a list of (product, quantity, unit price)"""

    def _make(
        total_price: float,
        created_at: datetime,
        lines: Optional[list] = None,
        status: str = "delivered",
        user: Optional[Profile] = None,
    ) -> Order:
        order = Order(
            total_price=total_price,
            created_at=created_at,
            status=status,
            user_id=user.id if user else None,
        )
        order.order_items = [
            OrderItem(product=product, quantity=quantity, price=price)
            for product, quantity, price in (lines or [])
        ]
        return order

    return _make


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_orders() -> List[OrderSchema]:
    """Orders as returned by the order repository, newest first"""
    return [
        OrderSchema(
            total_price=100.0,
            created_at="2024-03-10T09:30:00+00:00",
            order_items=[
                {"quantity": 2, "price": 30.0, "product": {"name_ar": "قميص", "name_en": "Shirt"}},
                {"quantity": 1, "price": 40.0, "product": {"name_ar": None, "name_en": "Hat"}},
            ],
        ),
        OrderSchema(
            total_price=50.0,
            created_at="2024-03-01T00:00:00+00:00",
            order_items=[
                {"quantity": 1, "price": 50.0, "product": None},
            ],
        ),
        OrderSchema(
            total_price=30.0,
            created_at="2024-01-20T18:00:00+00:00",
            order_items=[
                {"quantity": 1, "price": 30.0, "product": {"name_ar": "قميص", "name_en": "Shirt"}},
            ],
        ),
        OrderSchema(
            total_price=999.0,
            created_at="2023-09-30T23:00:00+00:00",
            order_items=[],
        ),
    ]
