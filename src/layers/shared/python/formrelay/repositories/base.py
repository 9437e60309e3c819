"""Base repository class for DynamoDB operations."""

import asyncio
import os
from typing import Any, Generic, TypeVar

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from formrelay.models.base import BaseModel
from formrelay.utils.exceptions import ConflictError, StoreError

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)


def _store_error(e: Exception, action: str) -> StoreError:
    """Wrap a botocore failure into a StoreError tagged with the HTTP status."""
    if isinstance(e, ClientError):
        upstream_status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        code = e.response.get("Error", {}).get("Code", "Unknown")
        message = e.response.get("Error", {}).get("Message", str(e))
        logger.error("DynamoDB request failed", action=action, error_code=code, error=message)
        return StoreError(
            f"DynamoDB {action} failed: {code}",
            upstream_status=upstream_status,
            original_error=message,
        )
    logger.error("DynamoDB request failed", action=action, error=str(e))
    return StoreError(f"DynamoDB {action} failed", original_error=str(e))


class BaseRepository(Generic[T]):
    """Base repository for DynamoDB single-table design.

    Every method is a coroutine. boto3 is synchronous, so calls are pushed to
    a worker thread and the event loop only yields while they run.
    """

    def __init__(
        self,
        model_class: type[T],
        table_name: str | None = None,
    ):
        """Initialize repository.

        Args:
            model_class: The Pydantic model class for this repository.
            table_name: DynamoDB table name. Defaults to TABLE_NAME env var.
        """
        self.model_class = model_class
        self.table_name = table_name or os.environ.get("TABLE_NAME", "formrelay-dev")
        self._dynamodb = None
        self._table = None

    @property
    def dynamodb(self):
        """Get DynamoDB resource (lazy initialization)."""
        if self._dynamodb is None:
            self._dynamodb = boto3.resource("dynamodb")
        return self._dynamodb

    @property
    def table(self):
        """Get DynamoDB table (lazy initialization)."""
        if self._table is None:
            self._table = self.dynamodb.Table(self.table_name)
        return self._table

    def _build_key(self, pk: str, sk: str) -> dict[str, str]:
        """Build key dictionary for DynamoDB operations."""
        return {"PK": pk, "SK": sk}

    def _build_item(self, item: T) -> dict[str, Any]:
        db_item = item.to_dynamodb()
        db_item.update(item.get_keys())
        gsi_keys = item.get_gsi1_keys()
        if gsi_keys:
            db_item.update(gsi_keys)
        return db_item

    async def get(self, pk: str, sk: str) -> T | None:
        """Get an item by its primary key.

        Args:
            pk: Partition key value.
            sk: Sort key value.

        Returns:
            Model instance or None if not found.

        Raises:
            StoreError: If the backend fails.
        """
        try:
            response = await asyncio.to_thread(
                self.table.get_item, Key=self._build_key(pk, sk)
            )
        except (ClientError, BotoCoreError) as e:
            raise _store_error(e, "get_item") from e

        item = response.get("Item")
        if not item:
            return None

        return self.model_class.from_dynamodb(item)

    async def create(self, item: T) -> T:
        """Create a new item (fails if exists).

        Args:
            item: Model instance to create.

        Returns:
            The created model instance, as read back from the written item.

        Raises:
            ConflictError: If an item with the same keys already exists.
            StoreError: If the backend fails.
        """
        db_item = self._build_item(item)

        try:
            await asyncio.to_thread(
                self.table.put_item,
                Item=db_item,
                ConditionExpression="attribute_not_exists(PK)",
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise ConflictError("Item already exists") from e
            raise _store_error(e, "put_item") from e
        except BotoCoreError as e:
            raise _store_error(e, "put_item") from e

        logger.debug(
            "Item saved",
            pk=db_item["PK"],
            sk=db_item["SK"],
            model=self.model_class.__name__,
        )

        return self.model_class.from_dynamodb(db_item)

    async def update(self, item: T) -> T:
        """Update an existing item with optimistic locking.

        Args:
            item: Model instance to update.

        Returns:
            The updated model instance.

        Raises:
            ConflictError: If the stored version changed (concurrent modification).
            StoreError: If the backend fails.
        """
        old_version = item.version
        item.increment_version()
        db_item = self._build_item(item)

        try:
            await asyncio.to_thread(
                self.table.put_item,
                Item=db_item,
                ConditionExpression="version = :old_version",
                ExpressionAttributeValues={":old_version": old_version},
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise ConflictError("Item was modified by another process") from e
            raise _store_error(e, "put_item") from e
        except BotoCoreError as e:
            raise _store_error(e, "put_item") from e

        logger.debug(
            "Item updated",
            pk=db_item["PK"],
            sk=db_item["SK"],
            version=item.version,
        )

        return item

    def _query_kwargs(
        self,
        pk: str,
        index_name: str | None,
        scan_forward: bool,
        filter_expression: str | None,
        expression_names: dict[str, str] | None,
        expression_values: dict[str, Any] | None,
    ) -> dict[str, Any]:
        pk_attr = "GSI1PK" if index_name == "GSI1" else "PK"
        kwargs: dict[str, Any] = {
            "KeyConditionExpression": f"{pk_attr} = :pk",
            "ExpressionAttributeValues": {":pk": pk, **(expression_values or {})},
            "ScanIndexForward": scan_forward,
        }
        if index_name:
            kwargs["IndexName"] = index_name
        if filter_expression:
            kwargs["FilterExpression"] = filter_expression
        if expression_names:
            kwargs["ExpressionAttributeNames"] = expression_names
        return kwargs

    async def query(
        self,
        pk: str,
        index_name: str | None = None,
        limit: int | None = None,
        scan_forward: bool = True,
        filter_expression: str | None = None,
        expression_names: dict[str, str] | None = None,
        expression_values: dict[str, Any] | None = None,
    ) -> list[T]:
        """Query items by partition key.

        Follows pagination until ``limit`` matching items are collected, since
        DynamoDB applies ``Limit`` before the filter expression.

        Args:
            pk: Partition key value (GSI1PK when querying GSI1).
            index_name: Optional GSI name.
            limit: Maximum items to return.
            scan_forward: Sort direction (True = ascending).
            filter_expression: Optional filter expression.
            expression_names: Expression attribute names.
            expression_values: Expression attribute values.

        Returns:
            List of model instances in sort key order.
        """
        kwargs = self._query_kwargs(
            pk, index_name, scan_forward, filter_expression, expression_names, expression_values
        )
        if limit:
            kwargs["Limit"] = limit

        items: list[T] = []
        try:
            while True:
                response = await asyncio.to_thread(self.table.query, **kwargs)
                items.extend(
                    self.model_class.from_dynamodb(item) for item in response.get("Items", [])
                )
                last_key = response.get("LastEvaluatedKey")
                if not last_key or (limit and len(items) >= limit):
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            raise _store_error(e, "query") from e

        return items[:limit] if limit else items

    async def count_items(
        self,
        pk: str,
        index_name: str | None = None,
        filter_expression: str | None = None,
        expression_names: dict[str, str] | None = None,
        expression_values: dict[str, Any] | None = None,
    ) -> int:
        """Count items under a partition key, across all result pages."""
        kwargs = self._query_kwargs(
            pk, index_name, True, filter_expression, expression_names, expression_values
        )
        kwargs["Select"] = "COUNT"

        total = 0
        try:
            while True:
                response = await asyncio.to_thread(self.table.query, **kwargs)
                total += response.get("Count", 0)
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            raise _store_error(e, "query") from e

        return total
