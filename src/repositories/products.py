"""
Product Repository

CRUD access to products together with their attributes and stored images.

A product spans three backend resources that are written independently:
the product row, its attribute rows, and image objects in the storage
bucket. There is no transaction across them. Failures on the product row
abort the operation and are raised; failures on attributes or images are
logged and reported as warnings on the returned ``OperationResult``.
"""

import base64
import binascii
import secrets
import time
from datetime import datetime, timedelta, timezone, tzinfo
from typing import TYPE_CHECKING, Callable, List, Optional, Union
from uuid import UUID
from zoneinfo import ZoneInfo

import structlog
from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.exc import NoResultFound, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from src.config import get_settings
from src.database.models import Product as ProductRow
from src.database.models import ProductAttribute as ProductAttributeRow
from src.schemas.orders import CountStats
from src.schemas.products import (
    Base64Image,
    DateWindow,
    OperationResult,
    Product,
    ProductAttribute,
    ProductAttributeIn,
    ProductCreate,
    ProductFilters,
    ProductPage,
    ProductUpdate,
)
from src.storage import ProductImageStorage, StorageError
from src.utils import shift_months
from .exceptions import (
    ImageUploadError,
    ProductNotFoundError,
    ProductWriteError,
    RepositoryError,
)

if TYPE_CHECKING:
    from starlette.datastructures import UploadFile

logger = structlog.get_logger(__name__)


def window_start(window: DateWindow, now: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Earliest creation time admitted by a date window.

    ``today`` starts at midnight in ``tz`` (the zone of ``now`` when omitted);
    the result is expressed in the zone of ``now``.
    """
    if window == DateWindow.TODAY:
        local = now.astimezone(tz) if tz else now
        midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
        return midnight.astimezone(now.tzinfo) if tz else midnight
    if window == DateWindow.WEEK:
        return now - timedelta(days=7)
    if window == DateWindow.MONTH:
        return shift_months(now, -1)
    return shift_months(now, -12)


def file_extension(name: str) -> str:
    """Text after the last dot, or the whole name when there is none"""
    return name.rsplit(".", 1)[-1]


class ProductRepository:
    """
    Data access for products.

    Example:
        repo = ProductRepository(get_session_factory(), storage)
        page = await repo.list(page=1, page_size=10, filters=ProductFilters(search="shirt"))
        result = await repo.create(ProductCreate(name_ar="قميص", name_en="Shirt", price=20))
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        storage: ProductImageStorage,
        clock: Optional[Callable[[], datetime]] = None,
        tz: Optional[tzinfo] = None,
    ):
        self._session_factory = session_factory
        self._storage = storage
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._tz = tz or ZoneInfo(get_settings().timezone)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def _filter_conditions(self, filters: ProductFilters) -> list:
        conditions = []

        if filters.category_id:
            conditions.append(ProductRow.category_id == filters.category_id)
        if filters.search:
            conditions.append(
                or_(
                    ProductRow.name_ar.icontains(filters.search, autoescape=True),
                    ProductRow.name_en.icontains(filters.search, autoescape=True),
                )
            )
        if filters.date:
            conditions.append(ProductRow.created_at >= window_start(filters.date, self._clock(), self._tz))
        if filters.is_best_seller is not None:
            conditions.append(ProductRow.is_best_seller == filters.is_best_seller)
        if filters.limited_time_offer is not None:
            conditions.append(ProductRow.limited_time_offer == filters.limited_time_offer)

        return conditions

    async def list(
        self,
        page: int = 1,
        page_size: int = 10,
        filters: Optional[ProductFilters] = None,
    ) -> ProductPage:
        """
        One page of products, newest first, each with its attributes.

        ``total`` counts every product matching the filters, not just the page.
        """
        if page < 1:
            raise ValueError("page must be >= 1")
        if page_size <= 0:
            raise ValueError("page_size must be > 0")

        conditions = self._filter_conditions(filters or ProductFilters())

        query = select(ProductRow).options(selectinload(ProductRow.attributes))
        count_query = select(func.count(ProductRow.id))
        if conditions:
            query = query.where(and_(*conditions))
            count_query = count_query.where(and_(*conditions))

        query = (
            query.order_by(ProductRow.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )

        try:
            async with self._session_factory() as session:
                total = (await session.execute(count_query)).scalar() or 0
                rows = (await session.execute(query)).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Failed to load products", page=page, error=str(e))
            raise RepositoryError("Could not load products") from e

        logger.debug("Products loaded", page=page, count=len(rows), total=total)

        return ProductPage(
            products=[Product.model_validate(row) for row in rows],
            total=total,
            page=page,
            page_size=page_size,
        )

    async def get_stats(self) -> CountStats:
        """Number of products in the catalog"""
        try:
            async with self._session_factory() as session:
                total = (await session.execute(select(func.count(ProductRow.id)))).scalar()
        except SQLAlchemyError as e:
            logger.error("Failed to count products", error=str(e))
            raise RepositoryError("Could not load product statistics") from e
        return CountStats(total=total or 0)

    async def get_by_id(self, product_id: UUID) -> Product:
        """Product with its attributes"""
        query = (
            select(ProductRow)
            .options(selectinload(ProductRow.attributes))
            .where(ProductRow.id == product_id)
        )
        try:
            async with self._session_factory() as session:
                row = (await session.execute(query)).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Failed to load product", product_id=str(product_id), error=str(e))
            raise RepositoryError("Could not load product") from e

        if row is None:
            raise ProductNotFoundError(product_id)
        return Product.model_validate(row)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create(self, data: ProductCreate) -> OperationResult[Product]:
        """
        Insert the product row, then its attributes.

        The product is created even when its attributes cannot be stored.
        """
        try:
            async with self._session_factory() as session, session.begin():
                row = ProductRow(**data.model_dump(exclude={"attributes"}), attributes=[])
                session.add(row)
                await session.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to create product", name_en=data.name_en, error=str(e))
            raise ProductWriteError("Could not create product") from e

        product = Product.model_validate(row)
        result = OperationResult[Product](data=product)
        logger.info("Product created", product_id=str(product.id))

        if data.attributes:
            try:
                result.data.attributes = await self._replace_attributes(
                    product.id, data.attributes, delete_existing=False
                )
            except SQLAlchemyError as e:
                logger.error(
                    "Failed to create product attributes",
                    product_id=str(product.id),
                    error=str(e),
                )
                result.warnings.append(f"Product attributes were not saved: {e}")

        return result

    async def update(self, product_id: UUID, data: ProductUpdate) -> OperationResult[Product]:
        """
        Write the fields set on ``data``.

        When ``attributes`` is set the product's attributes are replaced as a
        whole; a failure there leaves the previous attributes in place.
        """
        changes = data.row_changes()

        try:
            async with self._session_factory() as session, session.begin():
                row = await session.get(
                    ProductRow,
                    product_id,
                    options=[selectinload(ProductRow.attributes)],
                )
                if row is None:
                    raise ProductNotFoundError(product_id)
                for field, value in changes.items():
                    setattr(row, field, value)
                row.updated_at = self._clock()
                await session.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to update product", product_id=str(product_id), error=str(e))
            raise ProductWriteError("Could not update product") from e

        product = Product.model_validate(row)
        result = OperationResult[Product](data=product)
        logger.info("Product updated", product_id=str(product_id), fields=sorted(changes))

        if data.replaces_attributes:
            try:
                result.data.attributes = await self._replace_attributes(
                    product_id, data.attributes or [], delete_existing=True
                )
            except SQLAlchemyError as e:
                logger.error(
                    "Failed to replace product attributes",
                    product_id=str(product_id),
                    error=str(e),
                )
                result.warnings.append(f"Product attributes were not updated: {e}")

        return result

    async def _replace_attributes(
        self,
        product_id: UUID,
        attributes: List[ProductAttributeIn],
        delete_existing: bool,
    ) -> List[ProductAttribute]:
        async with self._session_factory() as session, session.begin():
            if delete_existing:
                await session.execute(
                    delete(ProductAttributeRow).where(ProductAttributeRow.product_id == product_id)
                )
            rows = [
                ProductAttributeRow(product_id=product_id, **attribute.model_dump())
                for attribute in attributes
            ]
            session.add_all(rows)
            await session.flush()
        return [ProductAttribute.model_validate(row) for row in rows]

    async def delete(self, product_id: UUID) -> OperationResult[None]:
        """
        Remove the product's images from storage, then the product row.

        Attribute rows go with the product through the ``ON DELETE CASCADE``
        rule of the ``product_attributes`` table.
        """
        try:
            async with self._session_factory() as session:
                image_urls = (
                    await session.execute(
                        select(ProductRow.image_url).where(ProductRow.id == product_id)
                    )
                ).scalar_one()
        except NoResultFound as e:
            raise ProductNotFoundError(product_id) from e
        except SQLAlchemyError as e:
            logger.error("Failed to load product images", product_id=str(product_id), error=str(e))
            raise RepositoryError("Could not load product before deletion") from e

        result = OperationResult[None]()

        for url in image_urls or []:
            path = self._storage.extract_object_path(url)
            if path is None:
                logger.warning("Image outside the product bucket", product_id=str(product_id), url=url)
                continue
            try:
                await self._storage.remove([path])
            except StorageError as e:
                logger.error(
                    "Failed to remove product image",
                    product_id=str(product_id),
                    path=path,
                    error=str(e),
                )
                result.warnings.append(f"Image {path} was not removed: {e}")

        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(delete(ProductRow).where(ProductRow.id == product_id))
        except SQLAlchemyError as e:
            logger.error("Failed to delete product", product_id=str(product_id), error=str(e))
            raise ProductWriteError("Could not delete product") from e

        logger.info("Product deleted", product_id=str(product_id), images=len(image_urls or []))
        return result

    # -------------------------------------------------------------------------
    # Images
    # -------------------------------------------------------------------------

    async def upload_image(
        self,
        upload: Union[Base64Image, "UploadFile"],
        folder: Optional[str] = None,
    ) -> str:
        """
        Store a product image and return its public URL.

        ``upload`` is either a ``Base64Image`` or a file handle exposing
        ``filename``, ``content_type`` and an async ``read()`` such as
        FastAPI's ``UploadFile``.
        """
        folder = folder or get_settings().storage.default_folder

        if isinstance(upload, Base64Image):
            extension = file_extension(upload.name)
            try:
                data = base64.b64decode(upload.base64, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ImageUploadError("Image payload is not valid base64") from e
            content_type = f"image/{extension}"
        else:
            extension = file_extension(upload.filename or "")
            data = await upload.read()
            content_type = upload.content_type or f"image/{extension}"

        key = f"{folder}/{int(time.time() * 1000)}-{secrets.token_hex(6)}.{extension}"

        try:
            await self._storage.upload(key, data, content_type)
        except StorageError as e:
            logger.error("Failed to upload product image", key=key, error=str(e))
            raise ImageUploadError("Could not upload product image") from e

        logger.info("Product image uploaded", key=key, content_type=content_type)
        return self._storage.get_public_url(key)
