"""
Integration tests for the products Lambda handler.

Requests go through the full lambda_handler, routing, validation and service
layers against moto-mocked DynamoDB tables.
"""

import json
from typing import Any, Dict
from unittest.mock import patch

import pytest

from catalog.handlers.products_handler import lambda_handler

PRODUCTS_PATH = "/api/v1/products"


def invoke(event: Dict[str, Any], context) -> Dict[str, Any]:
    """Run the handler and decode the JSON body and headers."""
    result = lambda_handler(event, context)

    headers = dict(result.get("headers") or {})
    for name, values in (result.get("multiValueHeaders") or {}).items():
        headers.setdefault(name, values[0])

    body = result.get("body")
    return {
        "status_code": result["statusCode"],
        "headers": headers,
        "body": json.loads(body) if body else None,
    }


@pytest.mark.integration
class TestProductsLifecycle:
    """End-to-end product flow through the handler."""

    def test_create_get_update_delete(self, dynamodb_tables, api_gateway_event, lambda_context):
        """Test the full lifecycle of one product."""
        created = invoke(api_gateway_event("POST", PRODUCTS_PATH, {
            "Name": "Widget", "Price": 9.99, "Category": "cat-1", "Tags": ["tag-a"], "Stock": 5,
        }), lambda_context)

        assert created["status_code"] == 201
        assert created["body"]["message"] == "Product created"
        product = created["body"]["product"]
        product_id = product["ProductId"]
        assert product["Name"] == "Widget"
        assert product["Price"] == 9.99
        assert product["Stock"] == 5
        assert product["CreatedAt"] == product["UpdatedAt"]
        assert created["headers"]["Location"] == f"{PRODUCTS_PATH}/{product_id}"

        fetched = invoke(api_gateway_event("GET", f"{PRODUCTS_PATH}/{product_id}"), lambda_context)
        assert fetched["status_code"] == 200
        assert fetched["body"] == product

        updated = invoke(api_gateway_event("PUT", f"{PRODUCTS_PATH}/{product_id}", {"Stock": 3}), lambda_context)
        assert updated["status_code"] == 200
        assert updated["body"]["message"] == "Product updated"
        assert updated["body"]["product"]["Stock"] == 3
        assert updated["body"]["product"]["Name"] == "Widget"
        assert updated["body"]["product"]["CreatedAt"] == product["CreatedAt"]

        deleted = invoke(api_gateway_event("DELETE", f"{PRODUCTS_PATH}/{product_id}"), lambda_context)
        assert deleted["status_code"] == 200
        assert deleted["body"] == {"message": "Product deleted"}

        gone = invoke(api_gateway_event("GET", f"{PRODUCTS_PATH}/{product_id}"), lambda_context)
        assert gone["status_code"] == 404
        assert gone["body"] == {"error": "Product not found"}

    def test_entry_point_delegates_to_handler(self, dynamodb_tables, api_gateway_event, lambda_context):
        """Test the deployed Lambda entry point module."""
        from products.lambda_function import lambda_handler as entry_point

        result = entry_point(api_gateway_event("GET", PRODUCTS_PATH), lambda_context)

        assert result["statusCode"] == 200
        assert json.loads(result["body"]) == []


@pytest.mark.integration
class TestCreateProductEndpoint:
    """Test cases for POST /api/v1/products."""

    def test_missing_fields(self, dynamodb_tables, api_gateway_event, lambda_context):
        response = invoke(api_gateway_event("POST", PRODUCTS_PATH, {"Name": "Widget"}), lambda_context)

        assert response["status_code"] == 400
        assert response["body"]["code"] == "VALIDATION_ERROR"
        fields = {error["field"] for error in response["body"]["field_errors"]}
        assert fields == {"Price", "Category", "Stock"}

    def test_zero_stock_accepted(self, dynamodb_tables, api_gateway_event, lambda_context):
        response = invoke(api_gateway_event("POST", PRODUCTS_PATH, {
            "Name": "Widget", "Price": 1, "Category": "cat-1", "Stock": 0,
        }), lambda_context)

        assert response["status_code"] == 201
        assert response["body"]["product"]["Stock"] == 0

    def test_invalid_json(self, dynamodb_tables, api_gateway_event, lambda_context):
        response = invoke(api_gateway_event("POST", PRODUCTS_PATH, "{not json"), lambda_context)

        assert response["status_code"] == 400
        assert response["body"]["error"] == "Invalid JSON in request body"

    def test_unknown_category(self, dynamodb_tables, products_table, api_gateway_event, lambda_context):
        """Test that an unknown category is rejected and nothing is stored."""
        response = invoke(api_gateway_event("POST", PRODUCTS_PATH, {
            "Name": "Widget", "Price": 1, "Category": "cat-404", "Stock": 1,
        }), lambda_context)

        assert response["status_code"] == 422
        assert response["body"]["error"] == "Category cat-404 does not exist"
        assert response["body"]["code"] == "INVALID_TAXONOMY_REFERENCE"
        assert products_table.scan()["Count"] == 0

    def test_unknown_tag(self, dynamodb_tables, api_gateway_event, lambda_context):
        response = invoke(api_gateway_event("POST", PRODUCTS_PATH, {
            "Name": "Widget", "Price": 1, "Category": "cat-1", "Tags": ["tag-a", "tag-zzz"], "Stock": 1,
        }), lambda_context)

        assert response["status_code"] == 422
        assert response["body"]["error"] == "One or more tags are invalid"

    @pytest.mark.parametrize("raw_body", [
        '{"Name": "W", "Price": 1e400, "Category": "cat-1", "Stock": 1}',
        '{"Name": "W", "Price": NaN, "Category": "cat-1", "Stock": 1}',
        '{"Name": "W", "Price": 1e200, "Category": "cat-1", "Stock": 1}',
        '{"Name": "W", "Price": 1, "Category": "cat-1", "Tags": [""], "Stock": 1}',
        '{"Name": "W", "Price": 1, "Category": "cat-1", "Stock": true}',
        '{"Name": "   ", "Price": 1, "Category": "cat-1", "Stock": 1}',
    ])
    def test_unstorable_values_are_input_errors(
        self, dynamodb_tables, products_table, api_gateway_event, lambda_context, raw_body
    ):
        """Test that values DynamoDB would refuse are rejected as bad input."""
        response = invoke(api_gateway_event("POST", PRODUCTS_PATH, raw_body), lambda_context)

        assert response["status_code"] == 400
        assert response["body"]["code"] == "VALIDATION_ERROR"
        assert products_table.scan()["Count"] == 0

    def test_storage_throttling(self, dynamodb_tables, api_gateway_event, lambda_context, mock_dynamodb_error):
        """Test that throttled writes map to 503 with a retry hint."""
        from catalog.handlers.products_handler import get_product_service

        service = get_product_service()
        with patch.object(service.products_dal.table, "put_item", side_effect=mock_dynamodb_error("ThrottlingException")):
            response = invoke(api_gateway_event("POST", PRODUCTS_PATH, {
                "Name": "Widget", "Price": 1, "Category": "cat-1", "Stock": 1,
            }), lambda_context)

        assert response["status_code"] == 503
        assert response["headers"]["Retry-After"] == "30"
        assert response["body"]["code"] == "THROTTLING_ERROR"


@pytest.mark.integration
class TestListProductsEndpoint:
    """Test cases for GET /api/v1/products."""

    def _create(self, api_gateway_event, lambda_context, count):
        for i in range(count):
            invoke(api_gateway_event("POST", PRODUCTS_PATH, {
                "Name": f"Widget {i}", "Price": 1, "Category": "cat-1", "Stock": i,
            }), lambda_context)

    def test_default_limit(self, dynamodb_tables, api_gateway_event, lambda_context):
        self._create(api_gateway_event, lambda_context, 12)

        response = invoke(api_gateway_event("GET", PRODUCTS_PATH), lambda_context)

        assert response["status_code"] == 200
        assert len(response["body"]) == 10

    def test_limit_and_offset(self, dynamodb_tables, api_gateway_event, lambda_context):
        self._create(api_gateway_event, lambda_context, 5)

        first = invoke(api_gateway_event("GET", PRODUCTS_PATH, query={"limit": "3"}), lambda_context)
        rest = invoke(api_gateway_event("GET", PRODUCTS_PATH, query={"limit": "3", "offset": "3"}), lambda_context)

        ids = [p["ProductId"] for p in first["body"] + rest["body"]]
        assert len(first["body"]) == 3
        assert len(rest["body"]) == 2
        assert len(set(ids)) == 5

    def test_non_numeric_parameters_use_defaults(self, dynamodb_tables, api_gateway_event, lambda_context):
        self._create(api_gateway_event, lambda_context, 2)

        response = invoke(
            api_gateway_event("GET", PRODUCTS_PATH, query={"limit": "abc", "offset": "xyz"}),
            lambda_context,
        )

        assert response["status_code"] == 200
        assert len(response["body"]) == 2

    def test_limit_is_clamped(self, dynamodb_tables, api_gateway_event, lambda_context):
        self._create(api_gateway_event, lambda_context, 2)

        response = invoke(api_gateway_event("GET", PRODUCTS_PATH, query={"limit": "0"}), lambda_context)

        assert len(response["body"]) == 1


@pytest.mark.integration
class TestUpdateProductEndpoint:
    """Test cases for PUT /api/v1/products/{id}."""

    def _create(self, api_gateway_event, lambda_context) -> str:
        created = invoke(api_gateway_event("POST", PRODUCTS_PATH, {
            "Name": "Widget", "Price": 1, "Category": "cat-1", "Stock": 1,
        }), lambda_context)
        return created["body"]["product"]["ProductId"]

    def test_update_unknown_product(self, dynamodb_tables, products_table, api_gateway_event, lambda_context):
        """Test that updating an unknown id is a 404 and creates nothing."""
        response = invoke(api_gateway_event("PUT", f"{PRODUCTS_PATH}/missing", {"Stock": 1}), lambda_context)

        assert response["status_code"] == 404
        assert response["body"]["error"] == "Product not found"
        assert products_table.scan()["Count"] == 0

    def test_empty_update(self, dynamodb_tables, api_gateway_event, lambda_context):
        product_id = self._create(api_gateway_event, lambda_context)

        response = invoke(api_gateway_event("PUT", f"{PRODUCTS_PATH}/{product_id}", {}), lambda_context)

        assert response["status_code"] == 400
        assert response["body"]["field_errors"][0]["field"] == "body"

    def test_immutable_fields_rejected(self, dynamodb_tables, api_gateway_event, lambda_context):
        product_id = self._create(api_gateway_event, lambda_context)

        response = invoke(
            api_gateway_event("PUT", f"{PRODUCTS_PATH}/{product_id}", {"ProductId": "other"}),
            lambda_context,
        )

        assert response["status_code"] == 400

    def test_update_with_unknown_tag(self, dynamodb_tables, api_gateway_event, lambda_context):
        product_id = self._create(api_gateway_event, lambda_context)

        response = invoke(
            api_gateway_event("PUT", f"{PRODUCTS_PATH}/{product_id}", {"Tags": ["tag-zzz"]}),
            lambda_context,
        )

        assert response["status_code"] == 422

    @pytest.mark.parametrize("raw_body", ['{"Price": 1e400}', '{"Tags": [""]}', '{"Stock": true}'])
    def test_unstorable_update_values(self, dynamodb_tables, api_gateway_event, lambda_context, raw_body):
        """Test that an update DynamoDB would refuse leaves the product unchanged."""
        product_id = self._create(api_gateway_event, lambda_context)

        response = invoke(api_gateway_event("PUT", f"{PRODUCTS_PATH}/{product_id}", raw_body), lambda_context)
        fetched = invoke(api_gateway_event("GET", f"{PRODUCTS_PATH}/{product_id}"), lambda_context)

        assert response["status_code"] == 400
        assert fetched["body"]["Price"] == 1
        assert fetched["body"]["Stock"] == 1

    def test_update_stock_to_zero(self, dynamodb_tables, api_gateway_event, lambda_context):
        product_id = self._create(api_gateway_event, lambda_context)

        response = invoke(api_gateway_event("PUT", f"{PRODUCTS_PATH}/{product_id}", {"Stock": 0}), lambda_context)

        assert response["status_code"] == 200
        assert response["body"]["product"]["Stock"] == 0


@pytest.mark.integration
class TestRouting:
    """Test cases for routes outside the product resource."""

    def test_delete_unknown_product_succeeds(self, dynamodb_tables, api_gateway_event, lambda_context):
        response = invoke(api_gateway_event("DELETE", f"{PRODUCTS_PATH}/missing"), lambda_context)

        assert response["status_code"] == 200
        assert response["body"] == {"message": "Product deleted"}

    @pytest.mark.parametrize("method, path", [
        ("GET", "/api/v2/products"),
        ("GET", "/unknown"),
        ("PATCH", f"{PRODUCTS_PATH}/p-1"),
    ])
    def test_unmatched_route(self, dynamodb_tables, api_gateway_event, lambda_context, method, path):
        response = invoke(api_gateway_event(method, path), lambda_context)

        assert response["status_code"] == 404
        assert response["body"] == {"error": "Not Found"}
