from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from finance_tracker.core.config import settings
from finance_tracker.core.exceptions import NotFoundError, ValidationError
from finance_tracker.core.security import create_access_token
from finance_tracker.db.base import Storage
from finance_tracker.db.dynamo import get_storage
from finance_tracker.db.seed import seed_default_categories
from finance_tracker.main import app
from finance_tracker.models.category import CategoryInDB, TransactionType
from finance_tracker.models.transaction import TransactionInDB
from finance_tracker.models.user import UserInDB, UserRole


class InMemoryStorage(Storage):
    """Dict-backed store with the same contract as the DynamoDB one."""

    def __init__(self) -> None:
        self.users: Dict[str, UserInDB] = {}
        self.categories: Dict[str, CategoryInDB] = {}
        self.transactions: Dict[Tuple[str, str], TransactionInDB] = {}

    def get_user(self, user_id: str) -> Optional[UserInDB]:
        return self.users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        return next((u for u in self.users.values() if u.email == email), None)

    def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        return next((u for u in self.users.values() if u.username == username), None)

    def put_user(self, user: UserInDB) -> UserInDB:
        if user.user_id in self.users:
            raise ValidationError("User already exists")
        self.users[user.user_id] = user
        return user

    def list_users(self) -> List[UserInDB]:
        return sorted(self.users.values(), key=lambda u: u.created_at)

    def list_categories(self) -> List[CategoryInDB]:
        return sorted(self.categories.values(), key=lambda c: c.name)

    def get_category(self, category_id: str) -> Optional[CategoryInDB]:
        return self.categories.get(category_id)

    def put_category(self, category: CategoryInDB) -> CategoryInDB:
        self.categories[category.category_id] = category
        return category

    def list_transactions(self, user_id: str) -> List[TransactionInDB]:
        return [t for (owner, _), t in self.transactions.items() if owner == user_id]

    def get_transaction_record(self, user_id: str, transaction_id: str) -> Optional[TransactionInDB]:
        return self.transactions.get((user_id, transaction_id))

    def insert_transaction(self, txn: TransactionInDB) -> TransactionInDB:
        self.transactions[(txn.user_id, txn.transaction_id)] = txn
        return txn

    def replace_transaction(self, txn: TransactionInDB) -> TransactionInDB:
        key = (txn.user_id, txn.transaction_id)
        if key not in self.transactions:
            raise NotFoundError("Transaction not found")
        self.transactions[key] = txn
        return txn

    def remove_transaction(self, user_id: str, transaction_id: str) -> bool:
        return self.transactions.pop((user_id, transaction_id), None) is not None


def make_user(store: Storage, username: str, role: UserRole = UserRole.USER) -> UserInDB:
    # Not a real bcrypt hash; these users log in through tokens only.
    user = UserInDB(
        username=username,
        email=f"{username}@example.com",
        name=username.title(),
        role=role,
        password_hash="not-a-hash",
    )
    return store.put_user(user)


def auth_header(user: UserInDB) -> Dict[str, str]:
    token = create_access_token({"sub": user.user_id, "email": user.email, "role": user.role.value}, settings)
    return {"Authorization": f"Bearer {token}"}


def make_txn(
    amount: str,
    txn_type: TransactionType,
    date: datetime,
    category_id: str = "cat-food",
    user_id: str = "user-1",
    description: str = "sample",
    created_at: Optional[datetime] = None,
) -> TransactionInDB:
    data = dict(
        user_id=user_id,
        category_id=category_id,
        amount=Decimal(amount),
        description=description,
        type=txn_type,
        date=date,
    )
    if created_at is not None:
        data["created_at"] = created_at
    return TransactionInDB(**data)


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def store() -> InMemoryStorage:
    store = InMemoryStorage()
    seed_default_categories(store)
    return store


@pytest.fixture
def client(store):
    app.dependency_overrides[get_storage] = lambda: store
    # Not entered as a context manager: the seeding lifespan stays off.
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user(store) -> UserInDB:
    return make_user(store, "alice")


@pytest.fixture
def other_user(store) -> UserInDB:
    return make_user(store, "bob")


@pytest.fixture
def admin(store) -> UserInDB:
    return make_user(store, "root", UserRole.ADMIN)


@pytest.fixture
def reader(store) -> UserInDB:
    return make_user(store, "viewer", UserRole.READ_ONLY)


def category_id(store: Storage, name: str) -> str:
    return next(c.category_id for c in store.list_categories() if c.name == name)
