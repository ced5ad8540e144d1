"""Pydantic schemas for User API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from flowgenie.models.user import User

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(BaseModel):
    model_config = _camel

    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=1)
    flow_address: str | None = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        email = value.strip().lower()
        if "@" not in email:
            raise ValueError("must be an email address")
        return email


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class ProfileUpdate(BaseModel):
    model_config = _camel

    email: str | None = Field(default=None, min_length=3, max_length=254)
    flow_address: str | None = None

    @field_validator("email")
    @classmethod
    def _normalize_optional_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        email = value.strip().lower()
        if "@" not in email:
            raise ValueError("must be an email address")
        return email


class PasswordChange(BaseModel):
    model_config = _camel

    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class ConnectWalletRequest(BaseModel):
    model_config = _camel

    flow_address: str = Field(min_length=1)


class UserRead(BaseModel):
    model_config = _camel

    id: str
    email: str
    flow_address: str | None = None
    created_at: datetime
    updated_at: datetime
    # hashed_password is NEVER exposed

    @classmethod
    def from_user(cls, user: User) -> "UserRead":
        return cls(
            id=user.id,
            email=user.email,
            flow_address=user.flow_address,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
