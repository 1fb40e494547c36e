#!/usr/bin/env python3
"""
OpenAPI specification generator for the products API.

This script generates an OpenAPI 3 document from the AWS Lambda Powertools
event handler routes and adds the error responses the handlers can return,
which route signatures do not declare.
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

import yaml

from catalog.models.output import ErrorOutput

HTTP_METHODS = ("get", "post", "put", "patch", "delete")

# Error responses per operation, keyed by the HTTP method
ERROR_RESPONSES = {
    "post": {
        "400": "Missing or invalid fields",
        "422": "Category or tag does not exist",
    },
    "put": {
        "400": "Missing, invalid or non-updatable fields",
        "404": "Product not found",
        "422": "Category or tag does not exist",
    },
    "get": {
        "404": "Product not found",
    },
}

COMMON_ERROR_RESPONSES = {
    "500": "Unexpected error",
    "503": "Storage throttled, retry after the Retry-After header",
}


def get_openapi_spec() -> Dict[str, Any]:
    """
    Generate the OpenAPI specification from the application routes.

    Returns:
        OpenAPI specification dictionary
    """
    # Importing the handler registers the routes on the shared resolver
    from catalog.handlers import products_handler  # noqa: F401
    from catalog.handlers.utils.rest_api_resolver import (
        API_DESCRIPTION,
        API_TITLE,
        API_VERSION,
        PRODUCTS_TAG,
        app,
    )

    spec = json.loads(app.get_openapi_json_schema(
        title=API_TITLE,
        version=API_VERSION,
        description=API_DESCRIPTION,
        tags=[PRODUCTS_TAG],
    ))
    add_error_responses(spec)
    return spec


def add_error_responses(spec: Dict[str, Any]) -> None:
    """Attach ErrorOutput responses to every operation in place."""
    schemas = spec.setdefault("components", {}).setdefault("schemas", {})
    schemas.setdefault("ErrorOutput", ErrorOutput.model_json_schema())
    error_content = {"application/json": {"schema": {"$ref": "#/components/schemas/ErrorOutput"}}}

    for path, path_item in spec.get("paths", {}).items():
        for method, operation in path_item.items():
            if method not in HTTP_METHODS:
                continue

            errors = dict(COMMON_ERROR_RESPONSES)
            # Listing has no path parameter, so it never answers 404
            if method != "get" or "{" in path:
                errors.update(ERROR_RESPONSES.get(method, {}))

            responses = operation.setdefault("responses", {})
            for status, description in errors.items():
                responses.setdefault(status, {"description": description, "content": error_content})


def validate_openapi_spec(spec: Dict[str, Any]) -> bool:
    """Check the top-level structure of the generated document."""
    for field in ("openapi", "info", "paths"):
        if field not in spec:
            print(f"Missing required field: {field}")
            return False

    if not spec["paths"]:
        print("No paths defined in specification")
        return False

    for path, path_item in spec["paths"].items():
        for method, operation in path_item.items():
            if method in HTTP_METHODS and "responses" not in operation:
                print(f"Operation {method.upper()} {path} has no responses")
                return False

    print("OpenAPI specification validation passed")
    return True


def main():
    """Main function for the OpenAPI generator script."""
    parser = argparse.ArgumentParser(
        description="Generate OpenAPI specification for the products API"
    )
    parser.add_argument(
        "--format",
        choices=["json", "yaml"],
        default="yaml",
        help="Output format (default: yaml)"
    )
    parser.add_argument(
        "--out-destination",
        default=".",
        help="Output directory (default: current directory)"
    )
    parser.add_argument(
        "--out-filename",
        help="Output filename (default: openapi.{format})"
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate the generated specification"
    )

    args = parser.parse_args()

    spec = get_openapi_spec()
    spec["info"]["x-generated"] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "generator": "products-api/openapi-generator",
    }

    if args.validate and not validate_openapi_spec(spec):
        sys.exit(1)

    filename = args.out_filename or f"openapi.{args.format}"
    output_dir = Path(args.out_destination)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / filename

    with open(output_path, "w", encoding="utf-8") as f:
        if args.format == "json":
            json.dump(spec, f, indent=2, ensure_ascii=False)
        else:
            yaml.dump(spec, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    print(f"OpenAPI specification written to: {output_path}")
    print(f"Specification contains {len(spec.get('paths', {}))} paths")


if __name__ == "__main__":
    main()
