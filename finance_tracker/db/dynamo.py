import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from finance_tracker.core.config import Settings, settings
from finance_tracker.core.exceptions import NotFoundError, StoreUnavailable, ValidationError
from finance_tracker.db.base import Storage
from finance_tracker.models.category import CategoryInDB
from finance_tracker.models.transaction import TransactionInDB
from finance_tracker.models.user import UserInDB

logger = logging.getLogger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def _error_code(error: Exception) -> str:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code", "")
    return ""


def _unavailable(operation: str, error: Exception) -> StoreUnavailable:
    if isinstance(error, ClientError):
        message = error.response.get("Error", {}).get("Message", str(error))
    else:
        message = str(error)
    logger.error(f"{operation} failed: {message}")
    return StoreUnavailable(f"Store unavailable during {operation}")


def _transaction_item(txn: TransactionInDB) -> Dict[str, Any]:
    """Dates go in as ISO-8601 strings, the amount as a DynamoDB number."""
    item = txn.model_dump(mode="json")
    item["amount"] = txn.amount
    return item


class DynamoStorage(Storage):
    """
    DynamoDB tables:
      users         PK user_id, GSI email-index on email
      categories    PK category_id
      transactions  PK user_id, SK transaction_id
    """

    def __init__(self, config: Settings = settings, resource: Any = None) -> None:
        self._dynamodb = resource or boto3.resource(
            "dynamodb",
            region_name=config.DYNAMO_REGION,
            endpoint_url=config.DYNAMO_ENDPOINT_URL,
        )
        self.users_table = self._dynamodb.Table(config.DYNAMO_USERS_TABLE)
        self.categories_table = self._dynamodb.Table(config.DYNAMO_CATEGORIES_TABLE)
        self.transactions_table = self._dynamodb.Table(config.DYNAMO_TRANSACTIONS_TABLE)

    @staticmethod
    def _collect(operation, **kwargs) -> List[Dict[str, Any]]:
        """Run a query or scan until DynamoDB stops returning LastEvaluatedKey."""
        items: List[Dict[str, Any]] = []
        while True:
            response = operation(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    # Users

    def get_user(self, user_id: str) -> Optional[UserInDB]:
        try:
            response = self.users_table.get_item(Key={"user_id": user_id})
        except (ClientError, BotoCoreError) as e:
            raise _unavailable("get_user", e) from e
        item = response.get("Item")
        return UserInDB.model_validate(item) if item else None

    def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        """Query the users table through the email GSI."""
        try:
            response = self.users_table.query(
                IndexName="email-index",
                KeyConditionExpression=Key("email").eq(email),
            )
        except (ClientError, BotoCoreError) as e:
            raise _unavailable("get_user_by_email", e) from e
        items = response.get("Items", [])
        return UserInDB.model_validate(items[0]) if items else None

    def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        try:
            items = self._collect(self.users_table.scan, FilterExpression=Attr("username").eq(username))
        except (ClientError, BotoCoreError) as e:
            raise _unavailable("get_user_by_username", e) from e
        return UserInDB.model_validate(items[0]) if items else None

    def put_user(self, user: UserInDB) -> UserInDB:
        try:
            self.users_table.put_item(
                Item=user.model_dump(mode="json"),
                ConditionExpression=Attr("user_id").not_exists(),
            )
        except ClientError as e:
            if _error_code(e) == CONDITIONAL_CHECK_FAILED:
                raise ValidationError("User already exists") from e
            raise _unavailable("put_user", e) from e
        except BotoCoreError as e:
            raise _unavailable("put_user", e) from e
        return user

    def list_users(self) -> List[UserInDB]:
        try:
            items = self._collect(self.users_table.scan)
        except (ClientError, BotoCoreError) as e:
            raise _unavailable("list_users", e) from e
        users = [UserInDB.model_validate(item) for item in items]
        return sorted(users, key=lambda u: u.created_at)

    # Categories

    def list_categories(self) -> List[CategoryInDB]:
        try:
            items = self._collect(self.categories_table.scan)
        except (ClientError, BotoCoreError) as e:
            raise _unavailable("list_categories", e) from e
        categories = [CategoryInDB.model_validate(item) for item in items]
        return sorted(categories, key=lambda c: c.name)

    def get_category(self, category_id: str) -> Optional[CategoryInDB]:
        try:
            response = self.categories_table.get_item(Key={"category_id": category_id})
        except (ClientError, BotoCoreError) as e:
            raise _unavailable("get_category", e) from e
        item = response.get("Item")
        return CategoryInDB.model_validate(item) if item else None

    def put_category(self, category: CategoryInDB) -> CategoryInDB:
        try:
            self.categories_table.put_item(
                Item=category.model_dump(mode="json"),
                ConditionExpression=Attr("category_id").not_exists(),
            )
        except ClientError as e:
            if _error_code(e) == CONDITIONAL_CHECK_FAILED:
                raise ValidationError("Category already exists") from e
            raise _unavailable("put_category", e) from e
        except BotoCoreError as e:
            raise _unavailable("put_category", e) from e
        return category

    # Transactions

    def list_transactions(self, user_id: str) -> List[TransactionInDB]:
        """All transactions in the user's partition."""
        try:
            items = self._collect(
                self.transactions_table.query,
                KeyConditionExpression=Key("user_id").eq(user_id),
            )
        except (ClientError, BotoCoreError) as e:
            raise _unavailable("list_transactions", e) from e
        return [TransactionInDB.model_validate(item) for item in items]

    def get_transaction_record(self, user_id: str, transaction_id: str) -> Optional[TransactionInDB]:
        try:
            response = self.transactions_table.get_item(
                Key={"user_id": user_id, "transaction_id": transaction_id}
            )
        except (ClientError, BotoCoreError) as e:
            raise _unavailable("get_transaction", e) from e
        item = response.get("Item")
        return TransactionInDB.model_validate(item) if item else None

    def insert_transaction(self, txn: TransactionInDB) -> TransactionInDB:
        try:
            self.transactions_table.put_item(
                Item=_transaction_item(txn),
                ConditionExpression=Attr("transaction_id").not_exists(),
            )
        except ClientError as e:
            if _error_code(e) == CONDITIONAL_CHECK_FAILED:
                raise ValidationError("Transaction already exists") from e
            raise _unavailable("insert_transaction", e) from e
        except BotoCoreError as e:
            raise _unavailable("insert_transaction", e) from e
        return txn

    def replace_transaction(self, txn: TransactionInDB) -> TransactionInDB:
        # Key includes user_id, so the condition also enforces ownership.
        try:
            self.transactions_table.put_item(
                Item=_transaction_item(txn),
                ConditionExpression=Attr("transaction_id").exists(),
            )
        except ClientError as e:
            if _error_code(e) == CONDITIONAL_CHECK_FAILED:
                raise NotFoundError("Transaction not found") from e
            raise _unavailable("replace_transaction", e) from e
        except BotoCoreError as e:
            raise _unavailable("replace_transaction", e) from e
        return txn

    def remove_transaction(self, user_id: str, transaction_id: str) -> bool:
        try:
            response = self.transactions_table.delete_item(
                Key={"user_id": user_id, "transaction_id": transaction_id},
                ReturnValues="ALL_OLD",
            )
        except (ClientError, BotoCoreError) as e:
            raise _unavailable("remove_transaction", e) from e
        return "Attributes" in response

    # Health

    def ping(self) -> Dict[str, Dict[str, Any]]:
        tables = {
            "users": self.users_table,
            "categories": self.categories_table,
            "transactions": self.transactions_table,
        }
        status: Dict[str, Dict[str, Any]] = {}
        for label, table in tables.items():
            try:
                table.scan(Limit=1)
                status[label] = {"name": table.name, "status": "accessible"}
            except (ClientError, BotoCoreError) as e:
                logger.error(f"DynamoDB check failed for {table.name}: {e}")
                status[label] = {"name": table.name, "status": "error", "error": str(e)}
        return status


@lru_cache
def get_storage() -> Storage:
    """Process-wide store; FastAPI routes depend on this."""
    return DynamoStorage(settings)
