"""
Input models for request validation using Pydantic.

This module defines the models used for validating incoming product requests.
Field names on the wire are PascalCase, matching the stored product attributes.
"""

from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_pascal

# DynamoDB numbers must stay within +/-1E+125
PRICE_LIMIT = 1e125

# A tag is a taxonomy id, so it cannot be empty
TagId = Annotated[str, Field(min_length=1)]


class CreateProductRequest(BaseModel):
    """Request model for creating a new product."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, str_strip_whitespace=True)

    name: Annotated[str, Field(
        min_length=1,
        description='Product name',
        examples=['Widget']
    )]

    description: Annotated[Optional[str], Field(
        default=None,
        description='Optional product description',
        examples=['A very useful widget']
    )] = None

    price: Annotated[float, Field(
        allow_inf_nan=False,
        gt=-PRICE_LIMIT,
        lt=PRICE_LIMIT,
        description='Product price',
        examples=[9.99]
    )]

    category: Annotated[str, Field(
        min_length=1,
        description='Taxonomy id of the product category',
        examples=['cat-1']
    )]

    tags: Annotated[Optional[List[TagId]], Field(
        default=None,
        description='Taxonomy ids of the product tags',
        examples=[['tag-eco']]
    )] = None

    # Zero is a valid stock level, only absence is an error
    stock: Annotated[int, Field(
        strict=True,
        ge=0,
        description='Units in stock',
        examples=[0, 5]
    )]


class UpdateProductRequest(BaseModel):
    """
    Request model for a partial product update.

    Only the listed fields may be changed. Unknown attributes, including the
    immutable ProductId, CreatedAt and UpdatedAt, are rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra='forbid',
    )

    name: Annotated[Optional[str], Field(
        default=None,
        min_length=1,
        description='Updated product name'
    )] = None

    description: Annotated[Optional[str], Field(
        default=None,
        description='Updated product description, null clears it'
    )] = None

    price: Annotated[Optional[float], Field(
        default=None,
        allow_inf_nan=False,
        gt=-PRICE_LIMIT,
        lt=PRICE_LIMIT,
        description='Updated product price'
    )] = None

    category: Annotated[Optional[str], Field(
        default=None,
        min_length=1,
        description='Updated category taxonomy id'
    )] = None

    tags: Annotated[Optional[List[TagId]], Field(
        default=None,
        description='Updated tag taxonomy ids, replaces the stored list'
    )] = None

    stock: Annotated[Optional[int], Field(
        default=None,
        strict=True,
        ge=0,
        description='Updated units in stock'
    )] = None

    @field_validator('name', 'price', 'category', 'tags', 'stock')
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        """Explicit null is only allowed for the description."""
        if v is None:
            raise ValueError('value cannot be null')
        return v

    @model_validator(mode='after')
    def require_at_least_one_field(self) -> 'UpdateProductRequest':
        if not self.model_fields_set:
            raise ValueError('At least one field must be provided for update')
        return self

    def to_update_fields(self) -> Dict[str, Any]:
        """Provided fields keyed by their stored attribute name."""
        return self.model_dump(by_alias=True, exclude_unset=True)
