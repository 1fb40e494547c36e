"""
DynamoDB implementation of the Data Access Layer (DAL).

This module wraps a single DynamoDB table behind BaseDAL, translating boto3
failures into service errors and recording per-operation metrics.
"""

import functools
import time
from typing import Any, Dict, Optional

import boto3
from aws_lambda_powertools.metrics import MetricUnit
from botocore.exceptions import BotoCoreError, ClientError

from catalog.dal import BaseDAL
from catalog.handlers.utils.errors import (
    BaseServiceError,
    ErrorCategory,
    ErrorSeverity,
    ExternalServiceError,
)
from catalog.handlers.utils.observability import logger, metrics, tracer


class DALError(BaseServiceError):
    """Base exception for Data Access Layer errors."""

    def __init__(
        self,
        message: str,
        operation: str,
        table_name: str,
        error_code: str = "DAL_ERROR",
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        retry_after: Optional[int] = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            severity=severity,
            category=ErrorCategory.INFRASTRUCTURE,
            retry_after=retry_after,
            user_message="A database error occurred. Please try again later.",
        )
        self.operation = operation
        self.table_name = table_name


class ConditionalCheckFailedError(DALError):
    """Raised when a conditional check fails in DynamoDB."""

    def __init__(self, table_name: str, operation: str):
        super().__init__(
            message="Conditional check failed",
            operation=operation,
            table_name=table_name,
            error_code="CONDITIONAL_CHECK_FAILED",
            severity=ErrorSeverity.MEDIUM,
        )


def handle_dynamodb_errors(operation: str):
    """Decorator to translate DynamoDB errors and record operation metrics."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(self: 'DynamoDBHandler', *args, **kwargs):
            operation_start = time.time()
            metrics.add_metric(name=f"DynamoDB{operation}Count", unit=MetricUnit.Count, value=1)

            try:
                result = func(self, *args, **kwargs)

            except ClientError as e:
                error_code = e.response['Error']['Code']
                error_message = e.response['Error']['Message']

                metrics.add_metric(name=f"DynamoDB{operation}Error", unit=MetricUnit.Count, value=1)

                if error_code == 'ConditionalCheckFailedException':
                    logger.info(f"DynamoDB {operation} condition not met", extra={
                        "table_name": self.table_name,
                        "operation": operation,
                    })
                    raise ConditionalCheckFailedError(table_name=self.table_name, operation=operation) from e

                logger.error(f"DynamoDB {operation} error", extra={
                    "error_code": error_code,
                    "error_message": error_message,
                    "table_name": self.table_name,
                    "operation": operation,
                })

                if error_code == 'ResourceNotFoundException':
                    raise DALError(
                        message=f"Table {self.table_name} not found",
                        operation=operation,
                        table_name=self.table_name,
                        error_code="TABLE_NOT_FOUND",
                    ) from e
                elif error_code == 'ProvisionedThroughputExceededException':
                    raise DALError(
                        message="DynamoDB throughput exceeded",
                        operation=operation,
                        table_name=self.table_name,
                        error_code="THROUGHPUT_EXCEEDED",
                        retry_after=60,
                    ) from e
                elif error_code == 'ThrottlingException':
                    raise DALError(
                        message="DynamoDB throttling detected",
                        operation=operation,
                        table_name=self.table_name,
                        error_code="THROTTLING_ERROR",
                        retry_after=30,
                    ) from e
                else:
                    raise DALError(
                        message=f"DynamoDB error: {error_message}",
                        operation=operation,
                        table_name=self.table_name,
                        error_code=f"DYNAMODB_{error_code}",
                    ) from e

            except BotoCoreError as e:
                metrics.add_metric(name=f"DynamoDB{operation}Error", unit=MetricUnit.Count, value=1)
                logger.error(f"DynamoDB connection error during {operation}", extra={
                    "error": str(e),
                    "table_name": self.table_name,
                })
                raise ExternalServiceError(
                    message=f"Database connection error: {str(e)}",
                    service_name="DynamoDB",
                    error_code="DATABASE_CONNECTION_ERROR",
                ) from e

            operation_duration = (time.time() - operation_start) * 1000
            metrics.add_metric(name=f"DynamoDB{operation}Duration", unit=MetricUnit.Milliseconds, value=operation_duration)
            tracer.put_annotation("dynamodb_operation", operation)
            tracer.put_annotation("table_name", self.table_name)

            return result

        return wrapper
    return decorator


class DynamoDBHandler(BaseDAL):
    """DynamoDB table handler with consistent error handling and observability."""

    def __init__(
        self,
        table_name: str,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ):
        """
        Initialize DynamoDB handler.

        Args:
            table_name: Name of the DynamoDB table
            region_name: AWS region name
            endpoint_url: DynamoDB endpoint URL (for local testing)
        """
        self.table_name = table_name

        resource_config = {}
        if region_name:
            resource_config['region_name'] = region_name
        if endpoint_url:
            resource_config['endpoint_url'] = endpoint_url

        self.dynamodb = boto3.resource('dynamodb', **resource_config)
        self.table = self.dynamodb.Table(table_name)

        logger.debug("DynamoDB handler initialized", extra={
            "table_name": table_name,
            "region_name": region_name,
            "endpoint_url": endpoint_url,
        })

    @tracer.capture_method
    @handle_dynamodb_errors("GetItem")
    def get_item(self, key: Dict[str, Any], consistent_read: bool = False) -> Optional[Dict[str, Any]]:
        """
        Get a single item from DynamoDB.

        Args:
            key: Primary key of the item to retrieve
            consistent_read: Whether to use strongly consistent read

        Returns:
            Item data or None if not found

        Raises:
            DALError: If DynamoDB operation fails
        """
        response = self.table.get_item(Key=key, ConsistentRead=consistent_read)
        item = response.get('Item')

        logger.debug("Item lookup completed", extra={
            "table_name": self.table_name,
            "key": key,
            "found": item is not None,
        })

        return item

    @tracer.capture_method
    @handle_dynamodb_errors("PutItem")
    def put_item(self, item: Dict[str, Any], condition_expression: Optional[Any] = None) -> Dict[str, Any]:
        """
        Put an item into DynamoDB, overwriting any item with the same key.

        Args:
            item: Item data to store
            condition_expression: Conditional expression for the put operation

        Returns:
            The stored item data

        Raises:
            DALError: If DynamoDB operation fails
            ConditionalCheckFailedError: If condition check fails
        """
        put_item_kwargs: Dict[str, Any] = {'Item': item}
        if condition_expression is not None:
            put_item_kwargs['ConditionExpression'] = condition_expression

        self.table.put_item(**put_item_kwargs)

        logger.info("Item stored successfully", extra={"table_name": self.table_name})
        return item

    @tracer.capture_method
    @handle_dynamodb_errors("UpdateItem")
    def update_item(
        self,
        key: Dict[str, Any],
        update_expression: str,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        condition_expression: Optional[Any] = None,
        return_values: str = "ALL_NEW",
    ) -> Optional[Dict[str, Any]]:
        """
        Update an item in DynamoDB.

        Args:
            key: Primary key of the item to update
            update_expression: Update expression
            expression_attribute_values: Expression attribute values
            expression_attribute_names: Expression attribute names
            condition_expression: Conditional expression for the update
            return_values: What values to return after update

        Returns:
            Updated item data or None

        Raises:
            DALError: If DynamoDB operation fails
            ConditionalCheckFailedError: If condition check fails
        """
        update_kwargs: Dict[str, Any] = {
            'Key': key,
            'UpdateExpression': update_expression,
            'ReturnValues': return_values,
        }

        if expression_attribute_values:
            update_kwargs['ExpressionAttributeValues'] = expression_attribute_values

        if expression_attribute_names:
            update_kwargs['ExpressionAttributeNames'] = expression_attribute_names

        if condition_expression is not None:
            update_kwargs['ConditionExpression'] = condition_expression

        response = self.table.update_item(**update_kwargs)

        logger.info("Item updated successfully", extra={
            "table_name": self.table_name,
            "key": key,
        })

        return response.get('Attributes')

    @tracer.capture_method
    @handle_dynamodb_errors("DeleteItem")
    def delete_item(self, key: Dict[str, Any]) -> bool:
        """
        Delete an item from DynamoDB.

        Args:
            key: Primary key of the item to delete

        Returns:
            True if item was deleted, False if not found

        Raises:
            DALError: If DynamoDB operation fails
        """
        response = self.table.delete_item(Key=key, ReturnValues='ALL_OLD')

        if response.get('Attributes'):
            logger.info("Item deleted successfully", extra={
                "table_name": self.table_name,
                "key": key,
            })
            return True

        logger.info("Item not found for deletion", extra={
            "table_name": self.table_name,
            "key": key,
        })
        return False

    @tracer.capture_method
    @handle_dynamodb_errors("Scan")
    def scan_items(
        self,
        limit: Optional[int] = None,
        exclusive_start_key: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Scan one page of items from DynamoDB.

        Args:
            limit: Maximum number of items to evaluate
            exclusive_start_key: Pagination token

        Returns:
            Dictionary with 'items' and optional 'last_evaluated_key'

        Raises:
            DALError: If DynamoDB operation fails
        """
        scan_kwargs: Dict[str, Any] = {}

        if limit:
            scan_kwargs['Limit'] = limit

        if exclusive_start_key:
            scan_kwargs['ExclusiveStartKey'] = exclusive_start_key

        response = self.table.scan(**scan_kwargs)

        result = {
            'items': response.get('Items', []),
            'count': response.get('Count', 0),
        }

        if 'LastEvaluatedKey' in response:
            result['last_evaluated_key'] = response['LastEvaluatedKey']

        logger.debug("Scan completed successfully", extra={
            "table_name": self.table_name,
            "items_count": result['count'],
            "has_more_results": 'last_evaluated_key' in result,
        })

        return result
