"""
Database Models - Storefront Schema

Tables mirrored from the hosted backend project. The dashboard reads and
writes them directly:

Catalog:
- Category: product categories
- Product: bilingual product rows with image URLs and promotion flags
- ProductAttribute: free-form name/value pairs owned by a product

Sales:
- Order: placed orders with their settled total
- OrderItem: order lines referencing products

Accounts:
- Profile: platform users (customers and admins)

Attribute rows are removed by the database when their product is deleted
(`ON DELETE CASCADE`); the product repository relies on that rule.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, List
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# ENUMERATIONS
# =============================================================================

class OrderStatus(str, Enum):
    """Order status enumeration"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ProfileRole(str, Enum):
    """Account role enumeration"""
    CUSTOMER = "customer"
    ADMIN = "admin"


# =============================================================================
# CATALOG
# =============================================================================

class Category(Base):
    """Product category"""
    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name_ar: Mapped[str] = mapped_column(String(200), nullable=False)
    name_en: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    products: Mapped[List["Product"]] = relationship(back_populates="category")


class Product(Base):
    """
    Product Table

    Bilingual catalog entry. `image_url` holds the public URLs of the
    objects stored in the product image bucket, in display order.
    """
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name_ar: Mapped[str] = mapped_column(String(200), nullable=False)
    name_en: Mapped[str] = mapped_column(String(200), nullable=False)
    description_ar: Mapped[Optional[str]] = mapped_column(Text)
    description_en: Mapped[Optional[str]] = mapped_column(Text)

    # Pricing
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    offer_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))

    stock: Mapped[Optional[int]] = mapped_column(Integer)
    image_url: Mapped[List[str]] = mapped_column(JSON, default=list)

    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("categories.id", ondelete="SET NULL")
    )

    # Promotion flags
    is_best_seller: Mapped[bool] = mapped_column(Boolean, default=False)
    limited_time_offer: Mapped[bool] = mapped_column(Boolean, default=False)

    # Audit
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    category: Mapped[Optional["Category"]] = relationship(back_populates="products")
    attributes: Mapped[List["ProductAttribute"]] = relationship(
        back_populates="product",
        passive_deletes=True,
    )
    order_items: Mapped[List["OrderItem"]] = relationship(back_populates="product")

    __table_args__ = (
        Index("ix_products_category", "category_id"),
        Index("ix_products_created_at", "created_at"),
    )


class ProductAttribute(Base):
    """Name/value attribute of a product. Duplicates are allowed."""
    __tablename__ = "product_attributes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    attribute_name: Mapped[str] = mapped_column(String(200), nullable=False)
    attribute_value: Mapped[str] = mapped_column(Text, nullable=False)

    product: Mapped["Product"] = relationship(back_populates="attributes")

    __table_args__ = (
        Index("ix_product_attributes_product", "product_id"),
    )


# =============================================================================
# SALES
# =============================================================================

class Order(Base):
    """Placed order"""
    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL")
    )
    status: Mapped[str] = mapped_column(String(20), default=OrderStatus.PENDING.value)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    order_items: Mapped[List["OrderItem"]] = relationship(
        back_populates="order",
        passive_deletes=True,
    )
    user: Mapped[Optional["Profile"]] = relationship(back_populates="orders")

    __table_args__ = (
        Index("ix_orders_created_at", "created_at"),
    )


class OrderItem(Base):
    """Order line; `price` is the unit price at checkout"""
    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="SET NULL")
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped["Order"] = relationship(back_populates="order_items")
    product: Mapped[Optional["Product"]] = relationship(back_populates="order_items")


# =============================================================================
# ACCOUNTS
# =============================================================================

class Profile(Base):
    """Platform user profile"""
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    full_name: Mapped[Optional[str]] = mapped_column(String(200))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    city: Mapped[Optional[str]] = mapped_column(String(100))
    address: Mapped[Optional[str]] = mapped_column(Text)
    role: Mapped[str] = mapped_column(String(20), default=ProfileRole.CUSTOMER.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    orders: Mapped[List["Order"]] = relationship(back_populates="user")
