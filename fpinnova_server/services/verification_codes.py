# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Verification code registry: generate, validate, consume, revoke, list, cleanup.

Every public operation runs in its own transaction opened from the injected
session factory, so a status change and its log entry commit (or roll back)
together. Consumption is a conditional UPDATE guarded on status and use count,
which keeps current_uses <= max_uses even with concurrent redeemers.
"""

import enum
import logging
import secrets
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fpinnova_server.config import settings
from fpinnova_server.models import (
    CodeLogAction,
    CodeStatus,
    UserRole,
    VerificationCode,
    VerificationCodeLog,
)
from fpinnova_server.models.verification_code import MAX_EXPIRATION_HOURS

logger = logging.getLogger(__name__)

CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
CODE_LENGTH = 8
REVOKE_REASONS = (CodeStatus.EXPIRED, CodeStatus.USED, CodeStatus.REVOKED)


class InvalidCodeRequest(ValueError):
    """Raised before any state change when generate/revoke inputs are invalid."""


class CodeGenerationError(RuntimeError):
    """Raised when no collision-free code could be drawn."""


@dataclass
class CodeFilters:
    """Optional predicates for listing codes. Unset fields do not filter."""

    type: str | None = None
    status: str | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite drops tzinfo) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _mask(code: str) -> str:
    return code[:2] + "*" * (len(code) - 2)


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, enum.Enum) else value


class VerificationCodeRegistry:
    """Owns the verification_codes and verification_code_logs tables."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        rng: Any = None,
        now: Callable[[], datetime] = utc_now,
        generation_attempts: int | None = None,
    ) -> None:
        self._session_maker = session_maker
        self._rng = rng or secrets.SystemRandom()
        self._now = now
        if generation_attempts is None:
            generation_attempts = settings.code_generation_attempts
        if generation_attempts < 1:
            raise ValueError("generation_attempts must be at least 1")
        self._generation_attempts = generation_attempts

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        async with self._session_maker() as db:
            async with db.begin():
                yield db

    def _draw_code(self) -> str:
        return "".join(self._rng.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))

    async def _unused_code_string(self, db: AsyncSession) -> str:
        for _ in range(self._generation_attempts):
            candidate = self._draw_code()
            clash = await db.scalar(
                select(VerificationCode.id).where(
                    VerificationCode.code == candidate,
                    VerificationCode.status == CodeStatus.ACTIVE.value,
                )
            )
            if clash is None:
                return candidate
            logger.warning("Generated code collides with an active code, drawing again")
        raise CodeGenerationError(
            f"Could not generate a unique code in {self._generation_attempts} attempts"
        )

    def _add_log(
        self,
        db: AsyncSession,
        code_id: str,
        action: CodeLogAction,
        details: str | None = None,
    ) -> None:
        db.add(
            VerificationCodeLog(
                code_id=code_id,
                action=action.value,
                timestamp=self._now(),
                details=details,
            )
        )

    def _retire(
        self,
        db: AsyncSession,
        code: VerificationCode,
        status: CodeStatus,
        action: CodeLogAction,
        details: str | None = None,
    ) -> None:
        code.status = status.value
        self._add_log(db, code.id, action, details)
        logger.info("Verification code %s is now %s (%s)", code.id, status.value, action.value)

    async def generate(
        self, code_type: UserRole | str, expiration_hours: float, max_uses: int
    ) -> VerificationCode:
        """Create and persist a new active code."""
        if max_uses < 1:
            raise InvalidCodeRequest("max_uses must be a positive integer")
        if not 0 < expiration_hours <= MAX_EXPIRATION_HOURS:
            raise InvalidCodeRequest(
                f"expiration_hours must be positive and at most {MAX_EXPIRATION_HOURS}"
            )
        async with self._transaction() as db:
            created_at = self._now()
            code = VerificationCode(
                code=await self._unused_code_string(db),
                type=_plain(code_type),
                created_at=created_at,
                expires_at=created_at + timedelta(hours=expiration_hours),
                max_uses=max_uses,
                current_uses=0,
                status=CodeStatus.ACTIVE.value,
            )
            db.add(code)
            await db.flush()
            self._add_log(db, code.id, CodeLogAction.GENERATED)
        logger.info(
            "Generated %s code %s (%s) expiring %s, max uses %d",
            code.type, code.id, _mask(code.code), code.expires_at.isoformat(), max_uses,
        )
        return code

    async def _check(self, db: AsyncSession, code_string: str) -> VerificationCode | None:
        result = await db.execute(
            select(VerificationCode)
            .where(
                VerificationCode.code == code_string,
                VerificationCode.status == CodeStatus.ACTIVE.value,
            )
            .limit(1)
        )
        code = result.scalar_one_or_none()
        if code is None:
            return None
        if self._now() >= as_utc(code.expires_at):
            self._retire(db, code, CodeStatus.EXPIRED, CodeLogAction.EXPIRED)
            return None
        if code.current_uses >= code.max_uses:
            self._retire(db, code, CodeStatus.USED, CodeLogAction.USED_EXHAUSTED)
            return None
        return code

    async def validate(self, code_string: str) -> VerificationCode | None:
        """Return the active code for code_string without consuming a use.

        A code found to be stale is retired as a side effect and None is returned.
        """
        async with self._transaction() as db:
            return await self._check(db, code_string)

    async def consume(self, code_string: str) -> VerificationCode | None:
        """Redeem one use of code_string. Returns the updated code or None."""
        async with self._transaction() as db:
            code = await self._check(db, code_string)
            if code is None:
                return None
            result = await db.execute(
                update(VerificationCode)
                .where(
                    VerificationCode.id == code.id,
                    VerificationCode.status == CodeStatus.ACTIVE.value,
                    VerificationCode.current_uses < VerificationCode.max_uses,
                )
                .values(
                    current_uses=VerificationCode.current_uses + 1,
                    status=case(
                        (
                            VerificationCode.current_uses + 1 >= VerificationCode.max_uses,
                            CodeStatus.USED.value,
                        ),
                        else_=CodeStatus.ACTIVE.value,
                    ),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                logger.warning("Verification code %s was redeemed concurrently; rejecting", code.id)
                return None
            await db.refresh(code)
            self._add_log(db, code.id, CodeLogAction.USED)
        logger.info(
            "Verification code %s used (%d/%d)", code.id, code.current_uses, code.max_uses
        )
        return code

    async def revoke(self, code_id: str, reason: CodeStatus | str = CodeStatus.REVOKED) -> None:
        """Stamp code_id with reason regardless of its current status. Unknown ids are ignored."""
        try:
            status = CodeStatus(reason)
        except ValueError:
            raise InvalidCodeRequest(f"Invalid revoke reason: {reason}") from None
        if status not in REVOKE_REASONS:
            raise InvalidCodeRequest(f"Invalid revoke reason: {reason}")
        async with self._transaction() as db:
            code = await db.get(VerificationCode, code_id)
            if code is None:
                return
            self._retire(db, code, status, CodeLogAction(status.value))

    async def cleanup(self) -> int:
        """Retire active codes that are past expiry or exhausted. Returns how many changed."""
        cleaned = 0
        async with self._transaction() as db:
            result = await db.execute(
                select(VerificationCode).where(VerificationCode.status == CodeStatus.ACTIVE.value)
            )
            now = self._now()
            for code in result.scalars().all():
                expired = now >= as_utc(code.expires_at)
                if not expired and code.current_uses < code.max_uses:
                    continue
                status = CodeStatus.EXPIRED if expired else CodeStatus.USED
                self._retire(
                    db, code, status, CodeLogAction.CLEANED, f"Auto cleanup: {status.value}"
                )
                cleaned += 1
        if cleaned:
            logger.info("Cleanup retired %d verification code(s)", cleaned)
        return cleaned

    async def list_codes(self, filters: CodeFilters | None = None) -> Sequence[VerificationCode]:
        """Codes matching every predicate set in filters."""
        filters = filters or CodeFilters()
        query = select(VerificationCode)
        if filters.type:
            query = query.where(VerificationCode.type == _plain(filters.type))
        if filters.status:
            query = query.where(VerificationCode.status == CodeStatus(filters.status).value)
        if filters.from_date is not None:
            query = query.where(VerificationCode.created_at >= as_utc(filters.from_date))
        if filters.to_date is not None:
            query = query.where(VerificationCode.created_at <= as_utc(filters.to_date))
        async with self._transaction() as db:
            result = await db.execute(
                query.order_by(VerificationCode.created_at, VerificationCode.id)
            )
            return result.scalars().all()

    async def get_logs(self, code_id: str | None = None) -> Sequence[VerificationCodeLog]:
        """All log entries, or only those for code_id."""
        query = select(VerificationCodeLog)
        if code_id is not None:
            query = query.where(VerificationCodeLog.code_id == code_id)
        async with self._transaction() as db:
            result = await db.execute(query.order_by(VerificationCodeLog.timestamp))
            return result.scalars().all()


def get_code_registry() -> VerificationCodeRegistry:
    """Dependency for FastAPI: registry bound to the application database."""
    from fpinnova_server.database import async_session_maker

    return VerificationCodeRegistry(async_session_maker)
