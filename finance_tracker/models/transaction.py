from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, List, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field, PlainSerializer, field_validator

from finance_tracker.models.category import CategoryPublic, TransactionType

CENTS = Decimal("0.01")
# Twelve digits, two of them after the point
MAX_AMOUNT = Decimal("1e10")

# Amounts leave the API as fixed two-digit strings ("10.00"), never floats.
Money = Annotated[Decimal, PlainSerializer(lambda v: f"{v:.2f}", return_type=str, when_used="json")]


def normalize_amount(value: Union[str, int, float, Decimal]) -> Decimal:
    """Parse an amount and round it to cents. Rejects zero and negatives."""
    if isinstance(value, bool):
        raise ValueError("Amount must be a valid number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError("Amount must be a valid number")
    if not amount.is_finite():
        raise ValueError("Amount must be a valid number")
    if amount >= MAX_AMOUNT:
        raise ValueError("Amount is too large")
    try:
        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the decimal context can hold
        raise ValueError("Amount must be a valid number")
    if amount >= MAX_AMOUNT:
        raise ValueError("Amount is too large")
    if amount <= 0:
        raise ValueError("Amount must be greater than zero")
    return amount


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionCreate(BaseModel):
    category_id: str
    amount: Money
    description: str
    type: TransactionType
    date: datetime

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value):
        return normalize_amount(value)

    @field_validator("description")
    @classmethod
    def _description(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Description is required")
        return value

    @field_validator("date")
    @classmethod
    def _date(cls, value: datetime) -> datetime:
        return to_utc(value)


class TransactionUpdate(BaseModel):
    category_id: Optional[str] = None
    amount: Optional[Money] = None
    description: Optional[str] = None
    type: Optional[TransactionType] = None
    date: Optional[datetime] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value):
        if value is None:
            return value
        return normalize_amount(value)

    @field_validator("description")
    @classmethod
    def _description(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("Description is required")
        return value

    @field_validator("date")
    @classmethod
    def _date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value) if value is not None else value


class TransactionInDB(BaseModel):
    transaction_id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    category_id: str
    amount: Money
    description: str
    type: TransactionType
    date: datetime
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value):
        return normalize_amount(value)

    @field_validator("date", "created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return to_utc(value)


class TransactionPublic(BaseModel):
    transaction_id: str
    category_id: str
    amount: Money
    description: str
    type: TransactionType
    date: datetime
    created_at: datetime


class TransactionWithCategory(TransactionPublic):
    category: CategoryPublic


class TransactionPage(BaseModel):
    transactions: List[TransactionWithCategory]
    total: int


class SortField(str, Enum):
    DATE = "date"
    AMOUNT = "amount"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class TransactionFilters(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)
    search: Optional[str] = None
    category_id: Optional[str] = None
    type: Optional[TransactionType] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    sort_by: SortField = SortField.DATE
    sort_order: SortOrder = SortOrder.DESC

    @field_validator("date_from", "date_to")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value) if value is not None else value
