"""
Repositories Module
"""
from .exceptions import (
    ImageUploadError,
    ProductNotFoundError,
    ProductWriteError,
    ProfileNotFoundError,
    RepositoryError,
)
from .orders import OrderRepository
from .products import ProductRepository
from .users import UserRepository

__all__ = [
    "ImageUploadError",
    "ProductNotFoundError",
    "ProductWriteError",
    "ProfileNotFoundError",
    "RepositoryError",
    "OrderRepository",
    "ProductRepository",
    "UserRepository",
]
