from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class CategoryCreate(BaseModel):
    name: str
    icon: str
    color: str
    type: TransactionType

    @field_validator("name", "icon", "color")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field must not be empty")
        return value


class CategoryInDB(CategoryCreate):
    category_id: str = Field(default_factory=lambda: str(uuid4()))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CategoryPublic(BaseModel):
    category_id: str
    name: str
    icon: str
    color: str
    type: TransactionType
