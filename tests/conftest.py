"""
Pytest configuration and shared fixtures for the products API.

This module provides common test fixtures and configuration used across
unit, integration, and end-to-end tests.
"""

import json
import os
from typing import Any, Callable, Dict, Optional
from unittest.mock import Mock

import boto3
import pytest
from moto import mock_aws

# Powertools reads these when the catalog modules are imported at collection time
os.environ.update({
    "AWS_DEFAULT_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "test",
    "AWS_SECRET_ACCESS_KEY": "test",
    "AWS_SECURITY_TOKEN": "test",
    "AWS_SESSION_TOKEN": "test",
    "REGION": "us-east-1",
    "PRODUCTS_TABLE": "test-products-table",
    "TAXONOMY_TABLE": "test-taxonomy-table",
    "ENVIRONMENT": "test",
    "POWERTOOLS_SERVICE_NAME": "test-products-api",
    "LOG_LEVEL": "DEBUG",
    "POWERTOOLS_TRACE_DISABLED": "true",  # Disable X-Ray in tests
    "LAMBDA_ENV_MODELER_DISABLE_CACHE": "true",
})

PRODUCTS_TABLE = os.environ["PRODUCTS_TABLE"]
TAXONOMY_TABLE = os.environ["TAXONOMY_TABLE"]
TAXONOMY_SEED = ["cat-1", "cat-2", "tag-a", "tag-b"]


@pytest.fixture(autouse=True)
def reset_caches():
    """Reset cached configuration, clients and buffered metrics between tests."""
    from catalog.handlers.products_handler import get_product_service
    from catalog.handlers.utils.observability import metrics

    get_product_service.cache_clear()
    metrics.clear_metrics()
    yield
    get_product_service.cache_clear()
    metrics.clear_metrics()


# DynamoDB fixtures
@pytest.fixture
def dynamodb_tables():
    """Create mock products and taxonomy tables, with the taxonomy seeded."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")

        products = dynamodb.create_table(
            TableName=PRODUCTS_TABLE,
            KeySchema=[{"AttributeName": "ProductId", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "ProductId", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        taxonomy = dynamodb.create_table(
            TableName=TAXONOMY_TABLE,
            KeySchema=[{"AttributeName": "TaxonomyId", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "TaxonomyId", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        products.wait_until_exists()
        taxonomy.wait_until_exists()

        for taxonomy_id in TAXONOMY_SEED:
            taxonomy.put_item(Item={"TaxonomyId": taxonomy_id, "Name": taxonomy_id.upper()})

        yield products, taxonomy


@pytest.fixture
def products_table(dynamodb_tables):
    return dynamodb_tables[0]


# Sample data fixtures
@pytest.fixture
def sample_product_data() -> Dict[str, Any]:
    """Sample create request body."""
    return {
        "Name": "Widget",
        "Description": "A very useful widget",
        "Price": 9.99,
        "Category": "cat-1",
        "Tags": ["tag-a"],
        "Stock": 5,
    }


@pytest.fixture
def lambda_context():
    """Create a mock Lambda context for testing."""
    context = Mock()
    context.function_name = "test-products-function"
    context.function_version = "1"
    context.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:test-products-function"
    context.memory_limit_in_mb = "512"
    context.remaining_time_in_millis = lambda: 30000
    context.aws_request_id = "test-request-id-123"
    context.log_group_name = "/aws/lambda/test-products-function"
    context.log_stream_name = "2024/01/01/[$LATEST]test123"
    return context


@pytest.fixture
def api_gateway_event() -> Callable[..., Dict[str, Any]]:
    """Factory for API Gateway REST proxy events."""

    def build(
        method: str,
        path: str,
        body: Optional[Any] = None,
        query: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)

        return {
            "resource": path,
            "httpMethod": method,
            "path": path,
            "headers": {
                "Content-Type": "application/json",
                "User-Agent": "test-agent/1.0",
            },
            "multiValueHeaders": {},
            "body": body,
            "requestContext": {
                "requestId": "test-request-id-123",
                "accountId": "123456789012",
                "stage": "test",
                "httpMethod": method,
                "path": path,
                "resourcePath": path,
                "protocol": "HTTP/1.1",
                "identity": {
                    "sourceIp": "127.0.0.1",
                    "userAgent": "test-agent/1.0",
                },
            },
            "pathParameters": None,
            "queryStringParameters": query,
            "multiValueQueryStringParameters": {k: [v] for k, v in query.items()} if query else None,
            "stageVariables": None,
            "isBase64Encoded": False,
        }

    return build


# Integration test fixtures
@pytest.fixture
def integration_client():
    """HTTP client for a deployed stage, skipped when API_BASE_URL is unset."""
    import httpx

    base_url = os.environ.get("API_BASE_URL")
    if not base_url:
        pytest.skip("API_BASE_URL is not set")

    with httpx.Client(base_url=base_url, timeout=30.0) as client:
        yield client


# Error simulation fixtures
@pytest.fixture
def mock_dynamodb_error():
    """Mock DynamoDB errors for testing error handling."""
    from botocore.exceptions import ClientError

    def create_error(error_code: str, message: str = "Test error"):
        return ClientError(
            error_response={
                "Error": {
                    "Code": error_code,
                    "Message": message,
                }
            },
            operation_name="TestOperation"
        )

    return create_error


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "e2e" in str(item.fspath):
            item.add_marker(pytest.mark.e2e)
