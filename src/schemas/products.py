"""
Product Schemas

Pydantic models exchanged with the product repository and the products API.
"""

from datetime import datetime
from enum import Enum
from typing import Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


class DateWindow(str, Enum):
    """Relative creation-date windows, measured back from now"""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class ProductAttributeIn(BaseModel):
    """Attribute supplied on create/update"""
    attribute_name: str
    attribute_value: str


class ProductAttribute(ProductAttributeIn):
    """Persisted attribute row"""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    product_id: Optional[UUID] = None


class Product(BaseModel):
    """Product as stored, optionally joined with its attributes"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name_ar: str
    name_en: str
    description_ar: Optional[str] = None
    description_en: Optional[str] = None
    price: float
    offer_price: Optional[float] = None
    stock: Optional[int] = None
    image_url: List[str] = Field(default_factory=list)
    category_id: Optional[UUID] = None
    is_best_seller: bool = False
    limited_time_offer: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    attributes: List[ProductAttribute] = Field(default_factory=list)


class ProductCreate(BaseModel):
    """New product. Attributes are written after the product row."""
    name_ar: str = Field(min_length=1)
    name_en: str = Field(min_length=1)
    description_ar: Optional[str] = None
    description_en: Optional[str] = None
    price: float = Field(ge=0)
    offer_price: Optional[float] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    image_url: List[str] = Field(default_factory=list)
    category_id: Optional[UUID] = None
    is_best_seller: bool = False
    limited_time_offer: bool = False
    attributes: List[ProductAttributeIn] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    """
    Partial product update.

    Only fields explicitly set are written. Setting ``attributes`` (even to
    an empty list) replaces every attribute of the product; leaving it unset
    keeps the current attributes untouched. Names, price, images and the
    two flags may be left out but never set to null.
    """
    name_ar: Optional[str] = Field(default=None, min_length=1)
    name_en: Optional[str] = Field(default=None, min_length=1)
    description_ar: Optional[str] = None
    description_en: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    offer_price: Optional[float] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[List[str]] = None
    category_id: Optional[UUID] = None
    is_best_seller: Optional[bool] = None
    limited_time_offer: Optional[bool] = None
    attributes: Optional[List[ProductAttributeIn]] = None

    @field_validator(
        "name_ar", "name_en", "price", "image_url", "is_best_seller", "limited_time_offer"
    )
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @property
    def replaces_attributes(self) -> bool:
        return "attributes" in self.model_fields_set

    def row_changes(self) -> dict:
        """Column values to write on the product row"""
        return self.model_dump(exclude_unset=True, exclude={"attributes"})


class ProductFilters(BaseModel):
    """Optional list filters; each one left as None is not applied"""
    category_id: Optional[UUID] = None
    search: Optional[str] = None
    date: Optional[DateWindow] = None
    is_best_seller: Optional[bool] = None
    limited_time_offer: Optional[bool] = None


class ProductPage(BaseModel):
    """One page of products plus the total number of matches"""
    products: List[Product]
    total: int
    page: int
    page_size: int


class Base64Image(BaseModel):
    """Image sent inline as base64 along with its original file name"""
    base64: str
    name: str


class OperationResult(BaseModel, Generic[T]):
    """
    Outcome of a multi-step write.

    ``data`` is the primary outcome. ``warnings`` lists the secondary steps
    that failed without failing the operation.
    """
    data: Optional[T] = None
    warnings: List[str] = Field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
