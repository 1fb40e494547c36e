"""
Products Lambda Function - Entry point for the products API.

This module serves as the Lambda function entry point that delegates to the
products handler in the catalog package.
"""

from typing import Any, Dict

from aws_lambda_powertools.utilities.typing import LambdaContext

from catalog.handlers.products_handler import lambda_handler as products_handler


def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Lambda function entry point for the products API.

    Args:
        event: Lambda event payload (API Gateway REST proxy event)
        context: Lambda context object

    Returns:
        API Gateway response dictionary
    """
    return products_handler(event, context)
