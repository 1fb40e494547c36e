"""
Products Handler - Lambda function for the product catalog API.

This module implements the handler layer for product operations: it parses
API Gateway requests, calls the product service and maps results and service
errors to HTTP responses.
"""

import functools
import json
from typing import Any, Dict, Optional

from aws_lambda_powertools.event_handler import Response, content_types
from aws_lambda_powertools.event_handler.exceptions import NotFoundError
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from catalog.dal import get_dal_handler
from catalog.handlers.models.env_vars import get_handler_env_vars
from catalog.handlers.utils.errors import (
    BaseServiceError,
    ErrorContext,
    ValidationError as ServiceValidationError,
    create_error_context,
    format_error_response,
    get_http_status_code,
    log_error_metrics,
)
from catalog.handlers.utils.observability import logger, metrics, tracer
from catalog.handlers.utils.rest_api_resolver import PRODUCTS_PATH, app
from catalog.logic.product_service import ProductService
from catalog.models.input import CreateProductRequest, UpdateProductRequest
from catalog.models.output import ErrorOutput, MessageOutput, ProductMessageOutput

DEFAULT_LIST_LIMIT = 10
MAX_LIST_LIMIT = 100


@functools.lru_cache(maxsize=1)
def get_product_service() -> ProductService:
    """Build the product service and its table handlers once per execution environment."""
    env_vars = get_handler_env_vars()
    products_dal = get_dal_handler(
        env_vars.PRODUCTS_TABLE,
        region_name=env_vars.REGION,
        endpoint_url=env_vars.DYNAMODB_ENDPOINT,
    )
    taxonomy_dal = get_dal_handler(
        env_vars.TAXONOMY_TABLE,
        region_name=env_vars.REGION,
        endpoint_url=env_vars.DYNAMODB_ENDPOINT,
    )
    return ProductService(
        products_dal=products_dal,
        taxonomy_dal=taxonomy_dal,
        max_tag_workers=env_vars.TAG_VALIDATION_WORKERS,
    )


def create_api_response(
    status_code: int,
    body: Any,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    """Create a JSON API response."""
    return Response(
        status_code=status_code,
        content_type=content_types.APPLICATION_JSON,
        body=body,
        headers=headers,
    )


def handle_service_errors(func):
    """Decorator to handle service errors and convert to HTTP responses."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)

        except BaseServiceError as e:
            log_error_metrics(e)
            return create_api_response(
                status_code=get_http_status_code(e),
                body=format_error_response(e),
                headers={"Retry-After": str(e.retry_after)} if e.retry_after else None,
            )

        except ValidationError as e:
            # Pydantic request validation errors
            logger.warning("Request validation failed", extra={
                "validation_errors": str(e),
                "error_count": e.error_count(),
            })
            metrics.add_metric(name="ValidationError", unit=MetricUnit.Count, value=1)

            field_errors = [
                {"field": ".".join(str(part) for part in error["loc"]) or "body", "message": error["msg"]}
                for error in e.errors()
            ]
            validation_error = ServiceValidationError(
                message="Missing or invalid fields",
                field_errors=field_errors,
            )
            return create_api_response(
                status_code=400,
                body=format_error_response(validation_error),
            )

        except Exception as e:
            logger.exception("Unexpected error in handler", extra={
                "error": str(e),
                "function_name": func.__name__,
            })
            metrics.add_metric(name="UnexpectedError", unit=MetricUnit.Count, value=1)

            return create_api_response(
                status_code=500,
                body=ErrorOutput(error="An unexpected error occurred", code="INTERNAL_SERVER_ERROR").model_dump(
                    exclude_none=True
                ),
            )

    return wrapper


def _request_context(operation: str, product_id: Optional[str] = None) -> ErrorContext:
    request_context = app.current_event.request_context
    request_id = request_context.request_id if request_context else "unknown"
    return create_error_context(request_id=request_id or "unknown", operation=operation, resource_id=product_id)


def _parse_json_body(context: ErrorContext) -> Any:
    try:
        return json.loads(app.current_event.decoded_body or "{}")
    except json.JSONDecodeError as e:
        raise ServiceValidationError(
            message="Invalid JSON in request body",
            context=context,
        ) from e


def _parse_int(value: Optional[str], default: int) -> int:
    # Non-numeric values fall back to the default
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


@app.post(PRODUCTS_PATH)
@tracer.capture_method
@handle_service_errors
def create_product():
    """
    Create a new product.

    Returns:
        201 with the created product
    """
    logger.info("Create product request received")
    context = _request_context("create_product")

    create_request = CreateProductRequest.model_validate(_parse_json_body(context))
    tracer.put_annotation("category", create_request.category)

    product = get_product_service().create_product(create_request, context=context)

    body = ProductMessageOutput(message="Product created", product=product)
    return create_api_response(
        status_code=201,
        body=body.model_dump(mode="json", by_alias=True),
        headers={"Location": f"{PRODUCTS_PATH}/{product.product_id}"},
    )


@app.get(PRODUCTS_PATH)
@tracer.capture_method
@handle_service_errors
def list_products():
    """
    List products with offset pagination.

    Returns:
        200 with a JSON array of products
    """
    limit = _parse_int(app.current_event.get_query_string_value(name="limit"), DEFAULT_LIST_LIMIT)
    offset = _parse_int(app.current_event.get_query_string_value(name="offset"), 0)

    limit = min(max(limit, 1), MAX_LIST_LIMIT)
    offset = max(offset, 0)

    tracer.put_annotation("limit", limit)
    tracer.put_annotation("offset", offset)

    products = get_product_service().list_products(limit=limit, offset=offset)

    return create_api_response(
        status_code=200,
        body=[product.to_response() for product in products],
    )


@app.get(f"{PRODUCTS_PATH}/<product_id>")
@tracer.capture_method
@handle_service_errors
def get_product(product_id: str):
    """
    Get a product by ID.

    Args:
        product_id: Product identifier

    Returns:
        200 with the product, 404 if it does not exist
    """
    logger.info("Get product request received", extra={"product_id": product_id})
    tracer.put_annotation("product_id", product_id)

    product = get_product_service().get_product(product_id)
    if product is None:
        return create_api_response(
            status_code=404,
            body=ErrorOutput(error="Product not found").model_dump(exclude_none=True),
        )

    return create_api_response(status_code=200, body=product.to_response())


@app.put(f"{PRODUCTS_PATH}/<product_id>")
@tracer.capture_method
@handle_service_errors
def update_product(product_id: str):
    """
    Partially update an existing product.

    Args:
        product_id: Product identifier

    Returns:
        200 with the updated product
    """
    logger.info("Update product request received", extra={"product_id": product_id})
    context = _request_context("update_product", product_id)
    tracer.put_annotation("product_id", product_id)

    update_request = UpdateProductRequest.model_validate(_parse_json_body(context))
    product = get_product_service().update_product(product_id, update_request, context=context)

    body = ProductMessageOutput(message="Product updated", product=product)
    return create_api_response(status_code=200, body=body.model_dump(mode="json", by_alias=True))


@app.delete(f"{PRODUCTS_PATH}/<product_id>")
@tracer.capture_method
@handle_service_errors
def delete_product(product_id: str):
    """
    Delete a product. Deleting an unknown product succeeds.

    Args:
        product_id: Product identifier
    """
    logger.info("Delete product request received", extra={"product_id": product_id})
    tracer.put_annotation("product_id", product_id)

    get_product_service().delete_product(product_id)

    return create_api_response(status_code=200, body=MessageOutput(message="Product deleted").model_dump())


@app.not_found
def handle_not_found(exc: NotFoundError) -> Response:
    logger.info("Route not found", extra={"path": app.current_event.path})
    return create_api_response(status_code=404, body=ErrorOutput(error="Not Found").model_dump(exclude_none=True))


@tracer.capture_lambda_handler
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Main Lambda handler function.

    Args:
        event: API Gateway REST proxy event
        context: Lambda context object

    Returns:
        API Gateway response
    """
    metrics.add_metric(name="RequestCount", unit=MetricUnit.Count, value=1)
    tracer.put_annotation("service", "products-api")
    tracer.put_annotation("environment", get_handler_env_vars().ENVIRONMENT)

    return app.resolve(event, context)
