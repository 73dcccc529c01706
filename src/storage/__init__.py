"""
Object Storage Module
"""
from .client import (
    PUBLIC_OBJECT_PREFIX,
    ProductImageStorage,
    StorageError,
    close_storage,
    get_storage,
    init_storage,
)

__all__ = [
    "PUBLIC_OBJECT_PREFIX",
    "ProductImageStorage",
    "StorageError",
    "close_storage",
    "get_storage",
    "init_storage",
]
