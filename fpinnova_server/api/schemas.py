# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pydantic schemas for API request/response."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from fpinnova_server.config import settings
from fpinnova_server.models import CodeLogAction, CodeStatus, UserRole
from fpinnova_server.models.verification_code import MAX_EXPIRATION_HOURS


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Auth
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    center: str | None = None
    department: str | None = None
    active: bool

    model_config = ConfigDict(from_attributes=True)


# Verification codes
class CodeCreate(BaseModel):
    type: UserRole
    expiration_hours: float = Field(
        default_factory=lambda: settings.code_default_expiration_hours,
        gt=0,
        le=MAX_EXPIRATION_HOURS,
    )
    max_uses: int = Field(default_factory=lambda: settings.code_default_max_uses, ge=1)


class CodeSubmit(BaseModel):
    code: str = Field(min_length=1, max_length=32)

    @field_validator("code")
    @classmethod
    def normalize(cls, v: str) -> str:
        # Codes are printed upper-case; users often type them otherwise.
        return v.strip().upper()


class CodeRevoke(BaseModel):
    reason: CodeStatus = CodeStatus.REVOKED


class CodeResponse(BaseModel):
    id: str
    code: str
    type: UserRole
    created_at: datetime
    expires_at: datetime
    max_uses: int
    current_uses: int
    status: CodeStatus

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", "expires_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return _utc(v)


class CodeRedeemed(BaseModel):
    """What a public caller learns about a valid code."""

    type: UserRole
    expires_at: datetime
    remaining_uses: int

    @field_validator("expires_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return _utc(v)


class CodeLogResponse(BaseModel):
    id: str
    code_id: str
    action: CodeLogAction
    timestamp: datetime
    details: str | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("timestamp")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return _utc(v)


class CleanupResult(BaseModel):
    cleaned: int
