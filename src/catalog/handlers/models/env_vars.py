"""
Environment variable models for type-safe configuration.

This module defines the Pydantic model for the environment variables used by the
products Lambda handler. Values are parsed and validated once per execution
environment and cached by aws-lambda-env-modeler.
"""

from typing import Annotated, Optional

from aws_lambda_env_modeler import get_environment_variables
from pydantic import BaseModel, Field


class ProductsHandlerEnvVars(BaseModel):
    """Environment variables for the products handler."""

    # AWS region of the DynamoDB tables
    REGION: Annotated[str, Field(
        default='ap-south-1',
        description='AWS region for the DynamoDB tables',
        min_length=1
    )] = 'ap-south-1'

    # DynamoDB table holding products
    PRODUCTS_TABLE: Annotated[str, Field(
        default='Products',
        description='DynamoDB table name for product storage',
        min_length=1
    )] = 'Products'

    # DynamoDB table holding category and tag taxonomy entries
    TAXONOMY_TABLE: Annotated[str, Field(
        default='ProductTaxonomyAttributes',
        description='DynamoDB table name for taxonomy attributes',
        min_length=1
    )] = 'ProductTaxonomyAttributes'

    # Log level for AWS Powertools Logger
    LOG_LEVEL: Annotated[str, Field(
        default='INFO',
        description='Log level for application logging',
        pattern=r'^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$'
    )] = 'INFO'

    # Local DynamoDB endpoint, unset in AWS
    DYNAMODB_ENDPOINT: Annotated[Optional[str], Field(
        default=None,
        description='DynamoDB endpoint URL override for local testing'
    )] = None

    TAG_VALIDATION_WORKERS: Annotated[int, Field(
        default=8,
        description='Maximum number of concurrent taxonomy lookups when validating tags',
        ge=1,
        le=32
    )] = 8

    # Service name for observability
    POWERTOOLS_SERVICE_NAME: Annotated[str, Field(
        default='products-api',
        description='Service name for AWS Powertools'
    )] = 'products-api'

    # Environment name (dev, staging, prod, test)
    ENVIRONMENT: Annotated[str, Field(
        default='dev',
        description='Deployment environment name'
    )] = 'dev'


def get_handler_env_vars() -> ProductsHandlerEnvVars:
    """
    Get typed environment variables for the products handler.

    Returns:
        Validated environment variables model instance
    """
    return get_environment_variables(model=ProductsHandlerEnvVars)
