"""
Business Logic Layer Module.

This module contains the product business logic. It sits between the REST
handlers and the data access layer:

- taxonomy reference validation for categories and tags
- translation of product CRUD operations into key-value table operations
- partial update expression construction
"""

from catalog.logic.product_service import (
    ProductNotFoundError,
    ProductService,
    TaxonomyReferenceError,
)

__all__ = [
    "ProductNotFoundError",
    "ProductService",
    "TaxonomyReferenceError",
]
