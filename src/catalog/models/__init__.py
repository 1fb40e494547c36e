"""
Product Models Package

This package contains the Pydantic models used throughout the service:
request validation models, response models and the Product domain model.
"""

from .input import CreateProductRequest, UpdateProductRequest
from .output import ErrorOutput, MessageOutput, ProductMessageOutput
from .product import Product

__all__ = [
    # Input models
    "CreateProductRequest",
    "UpdateProductRequest",

    # Output models
    "ErrorOutput",
    "MessageOutput",
    "ProductMessageOutput",

    # Domain models
    "Product",
]
