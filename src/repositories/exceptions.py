"""
Repository Errors

Hard failures of the data-access layer. Each carries a message that can be
shown to a dashboard user as is.
"""


class RepositoryError(Exception):
    """A backend read or write that aborted the operation"""


class ProductNotFoundError(RepositoryError):
    def __init__(self, product_id):
        super().__init__(f"Product {product_id} was not found")
        self.product_id = product_id


class ProductWriteError(RepositoryError):
    """The product row itself could not be written or removed"""


class ImageUploadError(RepositoryError):
    """A product image could not be stored"""


class ProfileNotFoundError(RepositoryError):
    def __init__(self, profile_id):
        super().__init__(f"Profile {profile_id} was not found")
        self.profile_id = profile_id
