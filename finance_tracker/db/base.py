"""
Storage contract.

Backends implement the primitive reads and writes; the transaction rules that
must hold for every backend (ownership scoping, category/type consistency,
not-found semantics) live here once.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from finance_tracker.core.exceptions import NotFoundError, ValidationError
from finance_tracker.models.category import CategoryCreate, CategoryInDB, TransactionType
from finance_tracker.models.transaction import (
    TransactionCreate,
    TransactionFilters,
    TransactionInDB,
    TransactionPage,
    TransactionUpdate,
    TransactionWithCategory,
)
from finance_tracker.models.user import UserInDB
from finance_tracker.utils.query import query_transactions, with_category

logger = logging.getLogger(__name__)


class Storage(ABC):
    # Users

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserInDB]: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[UserInDB]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[UserInDB]: ...

    @abstractmethod
    def put_user(self, user: UserInDB) -> UserInDB:
        """Insert a new user. Raises ValidationError if the id is taken."""

    @abstractmethod
    def list_users(self) -> List[UserInDB]: ...

    # Categories

    @abstractmethod
    def list_categories(self) -> List[CategoryInDB]: ...

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[CategoryInDB]: ...

    @abstractmethod
    def put_category(self, category: CategoryInDB) -> CategoryInDB: ...

    # Transactions

    @abstractmethod
    def list_transactions(self, user_id: str) -> List[TransactionInDB]:
        """Every transaction owned by ``user_id``."""

    @abstractmethod
    def get_transaction_record(self, user_id: str, transaction_id: str) -> Optional[TransactionInDB]: ...

    @abstractmethod
    def insert_transaction(self, txn: TransactionInDB) -> TransactionInDB: ...

    @abstractmethod
    def replace_transaction(self, txn: TransactionInDB) -> TransactionInDB:
        """Overwrite an existing transaction. Raises NotFoundError if it is gone."""

    @abstractmethod
    def remove_transaction(self, user_id: str, transaction_id: str) -> bool:
        """Delete permanently. Returns False when nothing was deleted."""

    def ping(self) -> Dict[str, Dict[str, Any]]:
        """Per-table reachability for the status endpoint. Backends without tables report nothing."""
        return {}

    # Shared operations

    def create_category(self, payload: CategoryCreate) -> CategoryInDB:
        wanted = payload.name.lower()
        if any(existing.name.lower() == wanted for existing in self.list_categories()):
            raise ValidationError(f"Category '{payload.name}' already exists")
        return self.put_category(CategoryInDB(**payload.model_dump()))

    def _check_category(self, category_id: str, txn_type: TransactionType) -> CategoryInDB:
        category = self.get_category(category_id)
        if category is None:
            raise ValidationError(f"Category {category_id} does not exist")
        if category.type != txn_type:
            raise ValidationError(
                f"Category '{category.name}' is for {category.type.value} transactions, "
                f"not {txn_type.value}"
            )
        return category

    def create_transaction(self, user_id: str, payload: TransactionCreate) -> TransactionWithCategory:
        category = self._check_category(payload.category_id, payload.type)
        txn = self.insert_transaction(TransactionInDB(user_id=user_id, **payload.model_dump()))
        logger.info(f"Created transaction {txn.transaction_id} for user {user_id}")
        return with_category(txn, category)

    def get_transaction(self, user_id: str, transaction_id: str) -> TransactionWithCategory:
        txn = self.get_transaction_record(user_id, transaction_id)
        if txn is None:
            raise NotFoundError("Transaction not found")
        category = self.get_category(txn.category_id)
        if category is None:
            raise NotFoundError("Transaction not found")
        return with_category(txn, category)

    def update_transaction(
        self,
        user_id: str,
        transaction_id: str,
        changes: TransactionUpdate,
    ) -> TransactionWithCategory:
        current = self.get_transaction_record(user_id, transaction_id)
        if current is None:
            raise NotFoundError("Transaction not found")

        fields = changes.model_dump(exclude_unset=True, exclude_none=True)
        if not fields:
            raise ValidationError("No fields to update")
        merged = current.model_copy(update=fields)

        # The merged record must still satisfy the category/type rule even when
        # only one of the two fields changed.
        category = self._check_category(merged.category_id, merged.type)
        updated = self.replace_transaction(merged)
        logger.info(f"Updated transaction {transaction_id} for user {user_id}: {sorted(fields)}")
        return with_category(updated, category)

    def delete_transaction(self, user_id: str, transaction_id: str) -> None:
        if not self.remove_transaction(user_id, transaction_id):
            raise NotFoundError("Transaction not found")
        logger.info(f"Deleted transaction {transaction_id} for user {user_id}")

    def query_transactions(self, user_id: str, filters: TransactionFilters) -> TransactionPage:
        items, total = query_transactions(self.list_transactions(user_id), self.list_categories(), filters)
        return TransactionPage(transactions=items, total=total)
