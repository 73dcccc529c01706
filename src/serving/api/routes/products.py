"""
Products API Endpoints

Catalog management for the dashboard: listing, editing and image uploads.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import BaseModel

from src.repositories import ProductRepository
from src.schemas.products import (
    Base64Image,
    DateWindow,
    OperationResult,
    Product,
    ProductCreate,
    ProductFilters,
    ProductPage,
    ProductUpdate,
)
from src.serving.api.dependencies import get_product_repository

router = APIRouter()


class ImageUploadResponse(BaseModel):
    """Public URL of an uploaded image"""
    url: str


@router.get("", response_model=ProductPage)
async def list_products(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=1000),
    category_id: Optional[UUID] = None,
    search: Optional[str] = None,
    date: Optional[DateWindow] = None,
    is_best_seller: Optional[bool] = None,
    limited_time_offer: Optional[bool] = None,
    repo: ProductRepository = Depends(get_product_repository),
) -> ProductPage:
    """
    List products, newest first.

    Filters:
    - Category
    - Arabic or English name containing ``search``
    - Created today, this week, month or year
    - Best seller / limited time offer flags
    """
    filters = ProductFilters(
        category_id=category_id,
        search=search,
        date=date,
        is_best_seller=is_best_seller,
        limited_time_offer=limited_time_offer,
    )
    return await repo.list(page=page, page_size=page_size, filters=filters)


@router.post("", response_model=OperationResult[Product], status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    repo: ProductRepository = Depends(get_product_repository),
) -> OperationResult[Product]:
    """Create a product with its attributes."""
    return await repo.create(data)


@router.post("/images", response_model=ImageUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile = File(...),
    folder: Optional[str] = Form(None),
    repo: ProductRepository = Depends(get_product_repository),
) -> ImageUploadResponse:
    """Upload an image file."""
    return ImageUploadResponse(url=await repo.upload_image(file, folder))


@router.post("/images/base64", response_model=ImageUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_base64_image(
    image: Base64Image,
    folder: Optional[str] = None,
    repo: ProductRepository = Depends(get_product_repository),
) -> ImageUploadResponse:
    """Upload an image sent inline as base64."""
    return ImageUploadResponse(url=await repo.upload_image(image, folder))


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: UUID,
    repo: ProductRepository = Depends(get_product_repository),
) -> Product:
    return await repo.get_by_id(product_id)


@router.patch("/{product_id}", response_model=OperationResult[Product])
async def update_product(
    product_id: UUID,
    data: ProductUpdate,
    repo: ProductRepository = Depends(get_product_repository),
) -> OperationResult[Product]:
    """Update the fields present in the body. ``attributes`` replaces all attributes."""
    return await repo.update(product_id, data)


@router.delete("/{product_id}", response_model=OperationResult[None])
async def delete_product(
    product_id: UUID,
    repo: ProductRepository = Depends(get_product_repository),
) -> OperationResult[None]:
    """Delete a product and its stored images."""
    return await repo.delete(product_id)
