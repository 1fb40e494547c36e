"""
Data Access Layer (DAL) for the products API.

This module provides the data access layer interface and factory function
for key-value table operations. The logic layer only depends on BaseDAL, so
tests can substitute an in-memory implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class BaseDAL(ABC):
    """Abstract base class for single-table key-value access."""

    table_name: str

    @abstractmethod
    def get_item(self, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Get a single item by key, None if absent."""
        pass

    @abstractmethod
    def put_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Create or overwrite an item."""
        pass

    @abstractmethod
    def update_item(
        self,
        key: Dict[str, Any],
        update_expression: str,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        condition_expression: Optional[Any] = None,
    ) -> Optional[Dict[str, Any]]:
        """Apply a partial update and return the item after the update."""
        pass

    @abstractmethod
    def delete_item(self, key: Dict[str, Any]) -> bool:
        """Delete an item by key, False if it was not there."""
        pass

    @abstractmethod
    def scan_items(
        self,
        limit: Optional[int] = None,
        exclusive_start_key: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Scan one page of items, with 'items' and optional 'last_evaluated_key'."""
        pass


def get_dal_handler(
    table_name: str,
    region_name: Optional[str] = None,
    endpoint_url: Optional[str] = None,
) -> BaseDAL:
    """
    Factory function to get the DynamoDB DAL handler for a table.

    Args:
        table_name: Name of the DynamoDB table
        region_name: AWS region name
        endpoint_url: DynamoDB endpoint URL (for local testing)

    Returns:
        DAL handler instance
    """
    # Import here to avoid circular imports
    from catalog.dal.dynamodb_handler import DynamoDBHandler

    return DynamoDBHandler(table_name, region_name=region_name, endpoint_url=endpoint_url)


__all__ = [
    'BaseDAL',
    'get_dal_handler',
]
