# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Verification codes for invitations and role grants, with their audit log."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fpinnova_server.models.base import Base, new_id

# Ten years; keeps expires_at inside the datetime range.
MAX_EXPIRATION_HOURS = 24 * 365 * 10


class CodeStatus(str, enum.Enum):
    """Lifecycle state of a code. Only ACTIVE is non-terminal."""

    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"
    REVOKED = "revoked"


class CodeLogAction(str, enum.Enum):
    GENERATED = "generated"
    USED = "used"
    EXPIRED = "expired"
    USED_EXHAUSTED = "used-exhausted"
    REVOKED = "revoked"
    CLEANED = "cleaned"


class VerificationCode(Base):
    """Short random code redeemable up to max_uses times before expires_at."""

    __tablename__ = "verification_codes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    code: Mapped[str] = mapped_column(String(8), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    max_uses: Mapped[int] = mapped_column(Integer, nullable=False)
    current_uses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=CodeStatus.ACTIVE.value, index=True
    )


class VerificationCodeLog(Base):
    """Append-only history entry for a verification code."""

    __tablename__ = "verification_code_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # Not a foreign key: log entries are kept as written even if codes are purged.
    code_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(16), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
