"""
Unit Tests - Product Repository
"""
import base64
import io
from datetime import datetime, timedelta, timezone
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from starlette.datastructures import Headers, UploadFile

from src.config.settings import Settings
from src.database.models import Product as ProductRow
from src.database.models import ProductAttribute as ProductAttributeRow
from src.repositories import (
    ImageUploadError,
    ProductNotFoundError,
    ProductRepository,
    ProductWriteError,
    RepositoryError,
)
from src.repositories.products import file_extension, window_start
from src.schemas.products import (
    Base64Image,
    DateWindow,
    ProductAttributeIn,
    ProductCreate,
    ProductFilters,
    ProductUpdate,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


def broken_attribute() -> ProductAttributeIn:
    """Attribute the database refuses (NOT NULL value)"""
    return ProductAttributeIn.model_construct(attribute_name="Color", attribute_value=None)


class FailingFirstSession:
    """Session factory whose first session cannot reach the database"""

    def __init__(self, session_factory):
        self._session_factory = session_factory
        self.calls = 0

    def __call__(self):
        self.calls += 1
        session = self._session_factory()
        if self.calls == 1:
            async def unreachable(*args, **kwargs):
                raise OperationalError("SELECT", {}, ConnectionError("connection lost"))

            session.execute = unreachable
        return session


async def count_attributes(session_factory, product_id) -> int:
    async with session_factory() as session:
        return (
            await session.execute(
                select(func.count(ProductAttributeRow.id)).where(
                    ProductAttributeRow.product_id == product_id
                )
            )
        ).scalar()


class TestHelpers:
    """Tests for the date window and file name helpers"""

    def test_window_start(self):
        now = datetime(2024, 3, 31, 15, 30, tzinfo=timezone.utc)

        assert window_start(DateWindow.TODAY, now) == datetime(2024, 3, 31, tzinfo=timezone.utc)
        assert window_start(DateWindow.WEEK, now) == now - timedelta(days=7)
        assert window_start(DateWindow.MONTH, now) == datetime(2024, 2, 29, 15, 30, tzinfo=timezone.utc)
        assert window_start(DateWindow.YEAR, now) == datetime(2023, 3, 31, 15, 30, tzinfo=timezone.utc)

    def test_today_starts_at_local_midnight(self):
        """Late UTC evening is already the next day in Cairo"""
        now = datetime(2024, 3, 31, 23, 30, tzinfo=timezone.utc)

        start = window_start(DateWindow.TODAY, now, ZoneInfo("Africa/Cairo"))

        assert start == datetime(2024, 3, 31, 22, 0, tzinfo=timezone.utc)
        assert start.tzinfo == timezone.utc

    def test_unknown_timezone_setting_is_rejected(self):
        assert Settings(APP_TIMEZONE="Asia/Riyadh").timezone == "Asia/Riyadh"
        with pytest.raises(ValidationError):
            Settings(APP_TIMEZONE="Mars/Olympus")

    def test_file_extension(self):
        assert file_extension("photo.PNG") == "PNG"
        assert file_extension("archive.tar.gz") == "gz"
        assert file_extension("noext") == "noext"


class TestListProducts:
    """Tests for ProductRepository.list"""

    async def test_pagination_newest_first(self, product_repo, add_rows, make_product):
        base = datetime.now(timezone.utc)
        await add_rows(*[
            make_product(name_en=f"Item {i}", created_at=base - timedelta(hours=i))
            for i in range(5)
        ])

        first = await product_repo.list(page=1, page_size=2)
        last = await product_repo.list(page=3, page_size=2)

        assert first.total == 5
        assert [p.name_en for p in first.products] == ["Item 0", "Item 1"]
        assert [p.name_en for p in last.products] == ["Item 4"]
        assert last.total == 5

    async def test_products_include_attributes(self, product_repo, add_rows, make_product):
        product = make_product()
        product.attributes = [ProductAttributeRow(attribute_name="Size", attribute_value="L")]
        await add_rows(product)

        page = await product_repo.list()

        assert page.products[0].attributes[0].attribute_name == "Size"
        assert page.products[0].attributes[0].attribute_value == "L"

    async def test_search_matches_either_language(self, product_repo, add_rows, make_product):
        await add_rows(
            make_product(name_ar="قميص قطن", name_en="Cotton Shirt"),
            make_product(name_ar="حذاء", name_en="Running Shoes"),
            make_product(name_ar="قميص", name_en="Tee"),
        )

        english = await product_repo.list(filters=ProductFilters(search="shirt"))
        arabic = await product_repo.list(filters=ProductFilters(search="قميص"))

        assert [p.name_en for p in english.products] == ["Cotton Shirt"]
        assert english.total == 1
        assert sorted(p.name_en for p in arabic.products) == ["Cotton Shirt", "Tee"]

    async def test_search_treats_wildcards_literally(self, product_repo, add_rows, make_product):
        await add_rows(make_product(name_en="100% Cotton"), make_product(name_en="Linen"))

        page = await product_repo.list(filters=ProductFilters(search="%"))

        assert [p.name_en for p in page.products] == ["100% Cotton"]

    async def test_flag_and_date_filters(self, product_repo, add_rows, make_product):
        recent = datetime.now(timezone.utc) - timedelta(days=2)
        old = datetime.now(timezone.utc) - timedelta(days=60)
        await add_rows(
            make_product(name_en="New Best", is_best_seller=True, created_at=recent),
            make_product(name_en="Old Best", is_best_seller=True, created_at=old),
            make_product(name_en="New Offer", limited_time_offer=True, created_at=recent),
        )

        best = await product_repo.list(filters=ProductFilters(is_best_seller=True))
        this_week = await product_repo.list(filters=ProductFilters(date=DateWindow.WEEK))
        best_this_week = await product_repo.list(
            filters=ProductFilters(is_best_seller=True, date=DateWindow.WEEK)
        )

        assert best.total == 2
        assert sorted(p.name_en for p in this_week.products) == ["New Best", "New Offer"]
        assert [p.name_en for p in best_this_week.products] == ["New Best"]

    async def test_today_filter_uses_repository_timezone(
        self, session_factory, storage, add_rows, make_product
    ):
        now = datetime(2024, 3, 31, 23, 30, tzinfo=timezone.utc)
        await add_rows(
            make_product(
                name_en="Before midnight", created_at=datetime(2024, 3, 31, 21, 0, tzinfo=timezone.utc)
            ),
            make_product(
                name_en="After midnight", created_at=datetime(2024, 3, 31, 22, 30, tzinfo=timezone.utc)
            ),
        )
        repo = ProductRepository(
            session_factory, storage, clock=lambda: now, tz=ZoneInfo("Africa/Cairo")
        )

        page = await repo.list(filters=ProductFilters(date=DateWindow.TODAY))

        assert [p.name_en for p in page.products] == ["After midnight"]

    async def test_invalid_page(self, product_repo):
        with pytest.raises(ValueError):
            await product_repo.list(page=0)

    async def test_get_stats(self, product_repo, add_rows, make_product):
        await add_rows(make_product(), make_product())

        stats = await product_repo.get_stats()

        assert stats.total == 2

    async def test_get_missing_product(self, product_repo):
        with pytest.raises(ProductNotFoundError):
            await product_repo.get_by_id(uuid4())


class TestCreateProduct:
    """Tests for ProductRepository.create"""

    async def test_create_with_attributes(self, product_repo, session_factory):
        result = await product_repo.create(ProductCreate(
            name_ar="ساعة",
            name_en="Watch",
            price=120,
            attributes=[
                ProductAttributeIn(attribute_name="Color", attribute_value="Black"),
                ProductAttributeIn(attribute_name="Color", attribute_value="Silver"),
            ],
        ))

        assert result.warnings == []
        assert result.data.name_en == "Watch"
        assert [a.attribute_value for a in result.data.attributes] == ["Black", "Silver"]
        assert all(a.product_id == result.data.id for a in result.data.attributes)

        stored = await product_repo.get_by_id(result.data.id)
        assert len(stored.attributes) == 2

    async def test_attribute_failure_keeps_product(self, product_repo, session_factory):
        """A rejected attribute is reported, the product stays created"""
        result = await product_repo.create(ProductCreate(
            name_ar="ساعة",
            name_en="Watch",
            price=120,
            attributes=[broken_attribute()],
        ))

        assert result.data is not None
        assert result.has_warnings
        assert "attributes" in result.warnings[0]

        stored = await product_repo.get_by_id(result.data.id)
        assert stored.name_en == "Watch"
        assert stored.attributes == []

    async def test_product_row_failure_raises(self, product_repo, session_factory):
        """Nothing is written when the product row is rejected"""
        data = ProductCreate.model_construct(
            name_ar="ساعة",
            name_en=None,
            price=120,
            attributes=[ProductAttributeIn(attribute_name="Color", attribute_value="Black")],
        )

        with pytest.raises(ProductWriteError):
            await product_repo.create(data)

        async with session_factory() as session:
            assert (await session.execute(select(func.count(ProductRow.id)))).scalar() == 0
            assert (await session.execute(select(func.count(ProductAttributeRow.id)))).scalar() == 0


class TestUpdateProduct:
    """Tests for ProductRepository.update"""

    @pytest.fixture
    async def existing(self, add_rows, make_product):
        product = make_product(name_en="Lamp", price=40)
        product.attributes = [
            ProductAttributeRow(attribute_name="Color", attribute_value="White"),
            ProductAttributeRow(attribute_name="Power", attribute_value="40W"),
        ]
        await add_rows(product)
        return product

    async def test_only_set_fields_change(self, product_repo, existing):
        result = await product_repo.update(existing.id, ProductUpdate(price=35))

        assert result.warnings == []
        assert result.data.price == 35
        assert result.data.name_en == "Lamp"
        # Attributes untouched when not supplied
        assert len(result.data.attributes) == 2

    async def test_attributes_replaced_as_a_whole(self, product_repo, session_factory, existing):
        result = await product_repo.update(existing.id, ProductUpdate(
            attributes=[ProductAttributeIn(attribute_name="Color", attribute_value="Red")],
        ))

        assert [a.attribute_value for a in result.data.attributes] == ["Red"]
        assert await count_attributes(session_factory, existing.id) == 1

    async def test_empty_attributes_clear_all(self, product_repo, session_factory, existing):
        result = await product_repo.update(existing.id, ProductUpdate(attributes=[]))

        assert result.data.attributes == []
        assert await count_attributes(session_factory, existing.id) == 0

    async def test_failed_replacement_keeps_old_attributes(
        self, product_repo, session_factory, existing
    ):
        """The row update stands and the previous attributes survive"""
        result = await product_repo.update(existing.id, ProductUpdate(
            name_en="Desk Lamp",
            attributes=[
                ProductAttributeIn(attribute_name="Color", attribute_value="Red"),
                broken_attribute(),
            ],
        ))

        assert result.has_warnings
        assert result.data.name_en == "Desk Lamp"
        assert await count_attributes(session_factory, existing.id) == 2

        stored = await product_repo.get_by_id(existing.id)
        assert stored.name_en == "Desk Lamp"
        assert sorted(a.attribute_value for a in stored.attributes) == ["40W", "White"]

    async def test_null_for_required_column_is_rejected(self, product_repo, existing):
        """An explicit null never reaches the NOT NULL column"""
        with pytest.raises(ValidationError):
            ProductUpdate.model_validate({"price": None})
        with pytest.raises(ValidationError):
            ProductUpdate.model_validate({"name_ar": None, "image_url": None})

        stored = await product_repo.get_by_id(existing.id)
        assert stored.price == 40

    async def test_null_clears_optional_column(self, product_repo, existing):
        result = await product_repo.update(
            existing.id, ProductUpdate.model_validate({"description_en": None, "stock": 2})
        )

        assert result.data.description_en is None
        assert result.data.stock == 2

    async def test_missing_product(self, product_repo):
        with pytest.raises(ProductNotFoundError):
            await product_repo.update(uuid4(), ProductUpdate(price=1))


class TestDeleteProduct:
    """Tests for ProductRepository.delete"""

    async def test_removes_images_and_attributes(
        self, product_repo, session_factory, storage, storage_backend, add_rows, make_product
    ):
        storage_backend.objects["products/a.png"] = (PNG_BYTES, "image/png")
        product = make_product(image_url=[storage.get_public_url("products/a.png")])
        product.attributes = [ProductAttributeRow(attribute_name="Size", attribute_value="M")]
        await add_rows(product)

        result = await product_repo.delete(product.id)

        assert result.warnings == []
        assert storage_backend.objects == {}
        assert await count_attributes(session_factory, product.id) == 0
        with pytest.raises(ProductNotFoundError):
            await product_repo.get_by_id(product.id)

    async def test_image_failure_does_not_block_deletion(
        self, product_repo, storage, storage_backend, add_rows, make_product
    ):
        storage_backend.fail_removes = True
        product = make_product(image_url=[
            storage.get_public_url("products/a.png"),
            storage.get_public_url("products/b.png"),
        ])
        await add_rows(product)

        result = await product_repo.delete(product.id)

        assert len(result.warnings) == 2
        with pytest.raises(ProductNotFoundError):
            await product_repo.get_by_id(product.id)

    async def test_one_failed_image_of_three(
        self, product_repo, storage, storage_backend, add_rows, make_product
    ):
        """The other images and the row are still removed"""
        keys = ["products/a.png", "products/b.png", "products/c.png"]
        for key in keys:
            storage_backend.objects[key] = (PNG_BYTES, "image/png")
        storage_backend.fail_keys = {"products/b.png"}
        product = make_product(image_url=[storage.get_public_url(key) for key in keys])
        await add_rows(product)

        result = await product_repo.delete(product.id)

        assert len(result.warnings) == 1
        assert "products/b.png" in result.warnings[0]
        assert list(storage_backend.objects) == ["products/b.png"]
        with pytest.raises(ProductNotFoundError):
            await product_repo.get_by_id(product.id)

    async def test_unexpected_error_body_is_a_warning(
        self, product_repo, storage, storage_backend, add_rows, make_product
    ):
        storage_backend.fail_removes = True
        storage_backend.remove_error_body = ["remove rejected"]
        product = make_product(image_url=[storage.get_public_url("products/a.png")])
        await add_rows(product)

        result = await product_repo.delete(product.id)

        assert len(result.warnings) == 1
        with pytest.raises(ProductNotFoundError):
            await product_repo.get_by_id(product.id)

    async def test_failed_image_lookup_aborts(
        self, product_repo, session_factory, storage, storage_backend, add_rows, make_product
    ):
        """Nothing is removed when the image list cannot be read"""
        product = make_product(image_url=[storage.get_public_url("products/a.png")])
        await add_rows(product)
        repo = ProductRepository(FailingFirstSession(session_factory), storage)

        with pytest.raises(RepositoryError):
            await repo.delete(product.id)

        assert storage_backend.requests == []
        assert (await product_repo.get_by_id(product.id)).id == product.id

    async def test_foreign_urls_are_skipped(
        self, product_repo, storage_backend, add_rows, make_product
    ):
        product = make_product(image_url=["https://cdn.example.com/images/a.png"])
        await add_rows(product)

        result = await product_repo.delete(product.id)

        assert result.warnings == []
        assert not any(r.method == "DELETE" for r in storage_backend.requests)

    async def test_missing_product(self, product_repo, storage_backend):
        with pytest.raises(ProductNotFoundError):
            await product_repo.delete(uuid4())

        assert storage_backend.requests == []


class TestUploadImage:
    """Tests for ProductRepository.upload_image"""

    async def test_base64_upload(self, product_repo, storage, storage_backend):
        url = await product_repo.upload_image(Base64Image(
            base64=base64.b64encode(PNG_BYTES).decode(),
            name="front.png",
        ))

        [(key, (data, content_type))] = storage_backend.objects.items()
        assert key.startswith("products/")
        assert key.endswith(".png")
        assert data == PNG_BYTES
        assert content_type == "image/png"
        assert url == f"{storage.base_url}/storage/v1/object/public/{storage.bucket}/{key}"

    async def test_file_upload_into_folder(self, product_repo, storage_backend):
        upload = UploadFile(
            file=io.BytesIO(PNG_BYTES),
            filename="side.jpg",
            headers=Headers({"content-type": "image/jpeg"}),
        )

        url = await product_repo.upload_image(upload, folder="banners")

        [(key, (data, content_type))] = storage_backend.objects.items()
        assert key.startswith("banners/")
        assert key.endswith(".jpg")
        assert content_type == "image/jpeg"
        assert url.endswith(key)

    async def test_upload_keys_are_unique(self, product_repo, storage_backend):
        image = Base64Image(base64=base64.b64encode(PNG_BYTES).decode(), name="a.png")

        first = await product_repo.upload_image(image)
        second = await product_repo.upload_image(image)

        assert first != second
        assert len(storage_backend.objects) == 2

    async def test_invalid_base64(self, product_repo, storage_backend):
        with pytest.raises(ImageUploadError):
            await product_repo.upload_image(Base64Image(base64="not base64!", name="a.png"))

        assert storage_backend.requests == []

    async def test_storage_failure_raises(self, product_repo, storage_backend):
        storage_backend.fail_uploads = True

        with pytest.raises(ImageUploadError):
            await product_repo.upload_image(
                Base64Image(base64=base64.b64encode(PNG_BYTES).decode(), name="a.png")
            )
