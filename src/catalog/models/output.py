"""
Output models for API responses using Pydantic.

This module defines the response bodies returned by the products API.
"""

from typing import Annotated

from pydantic import BaseModel, Field

from catalog.models.product import Product


class MessageOutput(BaseModel):
    """Response model carrying only a status message."""

    message: Annotated[str, Field(
        description='Human-readable outcome of the operation',
        examples=['Product deleted']
    )]


class ProductMessageOutput(MessageOutput):
    """Response model for operations that return the affected product."""

    product: Annotated[Product, Field(
        description='The created or updated product'
    )]


class ErrorOutput(BaseModel):
    """Standard error response model."""

    error: Annotated[str, Field(
        description='Human-readable error message',
        examples=['Product not found', 'Not Found']
    )]

    code: Annotated[str | None, Field(
        default=None,
        description='Machine-readable error code',
        examples=['VALIDATION_ERROR', 'INVALID_TAXONOMY_REFERENCE']
    )] = None

    error_id: Annotated[str | None, Field(
        default=None,
        description='Unique identifier of this error occurrence'
    )] = None
