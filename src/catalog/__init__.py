"""
Products API service package.

This package contains the product catalog service implementation in four layers:

- handlers: API handlers and entry points
- logic: business rules (taxonomy validation) and domain operations
- dal: data access layer for DynamoDB tables
- models: Pydantic models for requests, responses and the Product entity
"""

__version__ = "1.0.0"
