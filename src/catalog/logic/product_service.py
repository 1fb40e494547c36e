"""
Business Logic Layer for Product Management.

This module contains the product service: taxonomy reference validation for
categories and tags, and the translation of product CRUD operations into
key-value table operations.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from aws_lambda_powertools.metrics import MetricUnit

from catalog.dal import BaseDAL
from catalog.dal.dynamodb_handler import ConditionalCheckFailedError
from catalog.handlers.utils.errors import (
    BusinessLogicError,
    ErrorContext,
    ResourceNotFoundError,
)
from catalog.handlers.utils.observability import logger, metrics, tracer
from catalog.models.input import CreateProductRequest, UpdateProductRequest
from catalog.models.product import PRODUCT_ID_ATTRIBUTE, TAXONOMY_ID_ATTRIBUTE, Product, to_dynamodb_value

# Number of items requested per scan page while listing
LIST_SCAN_PAGE_SIZE = 100


class TaxonomyReferenceError(BusinessLogicError):
    """Raised when a category or tag does not reference an existing taxonomy entry."""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(
            message=message,
            error_code="INVALID_TAXONOMY_REFERENCE",
            context=context,
            user_message=message,
        )


class ProductNotFoundError(ResourceNotFoundError):
    """Raised when a product targeted by a mutation does not exist."""

    def __init__(self, product_id: str, context: Optional[ErrorContext] = None):
        super().__init__(
            resource_type="Product",
            resource_id=product_id,
            context=context,
        )


class ProductService:
    """Business logic service for product management."""

    def __init__(
        self,
        products_dal: BaseDAL,
        taxonomy_dal: BaseDAL,
        max_tag_workers: int = 8,
    ):
        """
        Initialize product service.

        Args:
            products_dal: DAL handler for the products table
            taxonomy_dal: DAL handler for the taxonomy table
            max_tag_workers: Upper bound on concurrent tag lookups
        """
        self.products_dal = products_dal
        self.taxonomy_dal = taxonomy_dal
        self.max_tag_workers = max_tag_workers

    @tracer.capture_method
    def category_exists(self, taxonomy_id: str) -> bool:
        """Check whether a taxonomy entry with this id is present."""
        return self._taxonomy_entry_exists(taxonomy_id)

    def _taxonomy_entry_exists(self, taxonomy_id: str) -> bool:
        # Runs on tag validation worker threads
        return self.taxonomy_dal.get_item({TAXONOMY_ID_ATTRIBUTE: taxonomy_id}) is not None

    @tracer.capture_method
    def validate_tags(self, tags: Optional[List[str]]) -> bool:
        """
        Check that every tag references an existing taxonomy entry.

        One lookup per distinct tag runs on a thread pool, and all lookups are
        joined before returning. An empty or missing list is valid.

        Args:
            tags: Taxonomy ids to validate

        Returns:
            True if all tags exist, False otherwise
        """
        if not tags:
            return True

        unique_tags = list(dict.fromkeys(tags))
        workers = min(len(unique_tags), self.max_tag_workers)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(self._taxonomy_entry_exists, unique_tags))

        missing = [tag for tag, exists in zip(unique_tags, results) if not exists]
        if missing:
            logger.info("Unknown tags rejected", extra={"missing_tags": missing})
        return not missing

    def _validate_taxonomy_references(
        self,
        category: Optional[str],
        tags: Optional[List[str]],
        context: Optional[ErrorContext],
    ) -> None:
        if category is not None and not self.category_exists(category):
            logger.error(f"Category {category} does not exist")
            metrics.add_metric(name="TaxonomyReferenceRejected", unit=MetricUnit.Count, value=1)
            raise TaxonomyReferenceError(f"Category {category} does not exist", context=context)

        if tags is not None and not self.validate_tags(tags):
            logger.error("One or more tags are invalid")
            metrics.add_metric(name="TaxonomyReferenceRejected", unit=MetricUnit.Count, value=1)
            raise TaxonomyReferenceError("One or more tags are invalid", context=context)

    @tracer.capture_method
    def create_product(
        self,
        request: CreateProductRequest,
        context: Optional[ErrorContext] = None,
    ) -> Product:
        """
        Create a new product.

        Args:
            request: Create product request data
            context: Error context for tracing

        Returns:
            The stored product with its generated id and timestamps

        Raises:
            TaxonomyReferenceError: If the category or a tag does not exist
            DALError: If the storage call fails
        """
        self._validate_taxonomy_references(request.category, request.tags, context)

        product = Product.create(
            name=request.name,
            description=request.description,
            price=request.price,
            category=request.category,
            tags=request.tags,
            stock=request.stock,
        )

        self.products_dal.put_item(product.to_item())

        tracer.put_annotation("product_id", product.product_id)
        metrics.add_metric(name="ProductCreated", unit=MetricUnit.Count, value=1)
        logger.info("Product created", extra={"product": product.to_response()})

        return product

    @tracer.capture_method
    def get_product(self, product_id: str) -> Optional[Product]:
        """
        Retrieve a product by its ID.

        Returns:
            The product, or None if no product has this id
        """
        item = self.products_dal.get_item({PRODUCT_ID_ATTRIBUTE: product_id})
        if item is None:
            logger.info(f"Product not found: {product_id}")
            return None
        return Product.from_item(item)

    @tracer.capture_method
    def list_products(self, limit: int = 10, offset: int = 0) -> List[Product]:
        """
        List products in table scan order.

        Args:
            limit: Maximum number of products to return
            offset: Number of products to skip first

        Returns:
            At most ``limit`` products
        """
        wanted = offset + limit
        collected: List[Dict[str, Any]] = []
        start_key: Optional[Dict[str, Any]] = None

        while len(collected) < wanted:
            page = self.products_dal.scan_items(
                limit=min(LIST_SCAN_PAGE_SIZE, wanted - len(collected)),
                exclusive_start_key=start_key,
            )
            collected.extend(page['items'])
            start_key = page.get('last_evaluated_key')
            if not start_key:
                break

        products = [Product.from_item(item) for item in collected[offset:wanted]]
        logger.info("Products listed", extra={"limit": limit, "offset": offset, "count": len(products)})
        return products

    @tracer.capture_method
    def update_product(
        self,
        product_id: str,
        request: UpdateProductRequest,
        context: Optional[ErrorContext] = None,
    ) -> Product:
        """
        Apply a partial update to an existing product.

        Category and tags are re-validated only when present in the request.
        Fields not in the request keep their stored values; UpdatedAt is refreshed.

        Args:
            product_id: Product identifier
            request: Fields to change
            context: Error context for tracing

        Returns:
            The product as stored after the update

        Raises:
            TaxonomyReferenceError: If a new category or tag does not exist
            ProductNotFoundError: If no product has this id
            DALError: If the storage call fails
        """
        fields = request.to_update_fields()
        self._validate_taxonomy_references(fields.get('Category'), fields.get('Tags'), context)

        fields['UpdatedAt'] = datetime.now(timezone.utc).isoformat()
        update_expression, names, values = build_update_expression(fields)

        try:
            item = self.products_dal.update_item(
                key={PRODUCT_ID_ATTRIBUTE: product_id},
                update_expression=update_expression,
                expression_attribute_values=values,
                expression_attribute_names={**names, '#pk': PRODUCT_ID_ATTRIBUTE},
                condition_expression='attribute_exists(#pk)',
            )
        except ConditionalCheckFailedError as e:
            raise ProductNotFoundError(product_id, context=context) from e

        metrics.add_metric(name="ProductUpdated", unit=MetricUnit.Count, value=1)
        logger.info(f"Product updated: {product_id}", extra={"updated_fields": sorted(fields)})

        return Product.from_item(item)

    @tracer.capture_method
    def delete_product(self, product_id: str) -> None:
        """Delete a product; deleting an unknown id is not an error."""
        deleted = self.products_dal.delete_item({PRODUCT_ID_ATTRIBUTE: product_id})
        if deleted:
            metrics.add_metric(name="ProductDeleted", unit=MetricUnit.Count, value=1)
        logger.info(f"Product deleted: {product_id}", extra={"existed": deleted})


def build_update_expression(fields: Dict[str, Any]) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
    """
    Build a DynamoDB SET expression over exactly the given attributes.

    Attribute names go through placeholders since several product attributes
    (Name among them) are DynamoDB reserved words.

    Returns:
        Update expression, expression attribute names, expression attribute values
    """
    names = {f'#{attribute}': attribute for attribute in fields}
    values = {f':{attribute}': to_dynamodb_value(value) for attribute, value in fields.items()}
    assignments = ', '.join(f'#{attribute} = :{attribute}' for attribute in fields)
    return f'SET {assignments}', names, values
