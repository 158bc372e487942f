import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from tracker.utils.role_permissions import RoleEnum


def _normalize_email(v: str) -> str:
    v = (v or "").strip().lower()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("invalid email address")
    return v


class UserBase(BaseModel):
    email: str
    display_name: str | None = None


class UserCreate(UserBase):
    display_name: str = Field(min_length=1, max_length=80)
    role: RoleEnum

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("display_name")
    @classmethod
    def _display_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("display_name must not be blank")
        return v


class User(UserBase):
    id: uuid.UUID
    role: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class CreatedUser(BaseModel):
    id: uuid.UUID
    email: str
    display_name: str
    role: str


class UserWithRole(BaseModel):
    user_id: uuid.UUID
    display_name: str
    email: str
    role: str
    role_label: Optional[str] = None


class RoleUpdate(BaseModel):
    role: RoleEnum


class Producer(BaseModel):
    id: uuid.UUID
    display_name: str


class SetupStatus(BaseModel):
    complete: bool


class SetupAdminCreate(BaseModel):
    email: str
    display_name: str = Field(min_length=1, max_length=80)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalize_email(v)
