"""
Order and Account Schemas
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CountStats(BaseModel):
    """Aggregate count returned by the stats queries"""
    total: int = 0


class OrderItemProduct(BaseModel):
    """Names of the product an order line refers to"""
    model_config = ConfigDict(from_attributes=True)

    name_ar: Optional[str] = None
    name_en: Optional[str] = None


class OrderItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    product_id: Optional[UUID] = None
    quantity: int = Field(gt=0)
    price: float
    product: Optional[OrderItemProduct] = None


class Order(BaseModel):
    """
    Order with its lines.

    ``created_at`` is kept as ISO-8601 text, the form the backend returns it
    in, so month buckets can be matched on its ``YYYY-MM`` prefix.
    """
    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    status: Optional[str] = None
    total_price: float = Field(ge=0)
    created_at: Optional[str] = None
    order_items: List[OrderItem] = Field(default_factory=list)

    @field_validator("created_at", mode="before")
    @classmethod
    def serialize_timestamp(cls, v):
        if isinstance(v, datetime):
            return v.isoformat()
        return v


class OrderPage(BaseModel):
    orders: List[Order]
    total: int


class AdminProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    role: str


class ProfileUpdate(BaseModel):
    """Settings form payload"""
    full_name: str = Field(min_length=2)
    phone: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
