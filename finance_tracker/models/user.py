from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, EmailStr, Field, field_validator


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"
    READ_ONLY = "read-only"


class UserCreate(BaseModel):
    username: str
    email: EmailStr
    password: str = Field(min_length=6)
    name: str

    @field_validator("username", "name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field must not be empty")
        return value


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserInDB(BaseModel):
    user_id: str = Field(default_factory=lambda: str(uuid4()))
    username: str
    email: EmailStr
    name: str
    password_hash: str
    role: UserRole = UserRole.USER
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UserPublic(BaseModel):
    user_id: str
    username: str
    email: EmailStr
    name: str
    role: UserRole


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserPublic
