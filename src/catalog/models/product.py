"""
Product domain model for the business logic layer.

This module defines the core Product entity used throughout the application.
Attributes are snake_case in Python and PascalCase on the wire and in DynamoDB.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal

PRODUCT_ID_ATTRIBUTE = 'ProductId'
TAXONOMY_ID_ATTRIBUTE = 'TaxonomyId'


class Product(BaseModel):
    """Core Product domain model."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    product_id: Annotated[str, Field(
        description='Unique identifier for the product',
        examples=['6f1c2a52-0b7e-4c38-9d0e-1f1f2b9c6a11']
    )]

    name: Annotated[str, Field(
        min_length=1,
        description='Product name',
        examples=['Widget']
    )]

    description: Annotated[Optional[str], Field(
        default=None,
        description='Optional product description'
    )] = None

    price: Annotated[float, Field(
        description='Product price',
        examples=[9.99]
    )]

    category: Annotated[str, Field(
        min_length=1,
        description='Taxonomy id of the product category',
        examples=['cat-1']
    )]

    tags: Annotated[Optional[List[str]], Field(
        default=None,
        description='Taxonomy ids of the product tags',
        examples=[['tag-eco', 'tag-sale']]
    )] = None

    stock: Annotated[int, Field(
        ge=0,
        description='Units in stock',
        examples=[5]
    )]

    created_at: Annotated[str, Field(
        description='ISO timestamp when the product was created'
    )]

    updated_at: Annotated[str, Field(
        description='ISO timestamp when the product was last updated'
    )]

    @classmethod
    def create(
        cls,
        name: str,
        price: float,
        category: str,
        stock: int,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> 'Product':
        """
        Create a new product with generated ID and timestamps.

        Args:
            name: Product name
            price: Product price
            category: Taxonomy id of the category
            stock: Units in stock
            description: Optional description
            tags: Optional taxonomy ids of the tags

        Returns:
            New Product instance with generated fields
        """
        now = datetime.now(timezone.utc).isoformat()
        return cls(
            product_id=str(uuid4()),
            name=name,
            description=description,
            price=price,
            category=category,
            tags=tags,
            stock=stock,
            created_at=now,
            updated_at=now,
        )

    def to_item(self) -> Dict[str, Any]:
        """
        Convert the product to a DynamoDB item.

        Floats are not accepted by boto3, so numbers are converted to Decimal.
        Unset optional attributes are left out of the item.
        """
        return to_dynamodb_value(self.model_dump(by_alias=True, exclude_none=True))

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'Product':
        """Build a product from a DynamoDB item (Decimal numbers are coerced by pydantic)."""
        return cls.model_validate(item)

    def to_response(self) -> Dict[str, Any]:
        """JSON-ready representation with PascalCase keys."""
        return self.model_dump(mode='json', by_alias=True)


def to_dynamodb_value(value: Any) -> Any:
    """Round-trip a JSON-compatible value so that every float becomes a Decimal."""
    return json.loads(json.dumps(value), parse_float=Decimal)
