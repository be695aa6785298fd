# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Admin API - verification code management. Requires admin user."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from fpinnova_server.api.schemas import CleanupResult, CodeCreate, CodeLogResponse, CodeResponse, CodeRevoke
from fpinnova_server.auth import require_admin
from fpinnova_server.models import CodeStatus, UserRole
from fpinnova_server.services.verification_codes import (
    CodeFilters,
    CodeGenerationError,
    InvalidCodeRequest,
    VerificationCodeRegistry,
    get_code_registry,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/codes", response_model=CodeResponse, status_code=status.HTTP_201_CREATED)
async def create_code(
    body: CodeCreate,
    admin_id: str = Depends(require_admin),
    registry: VerificationCodeRegistry = Depends(get_code_registry),
) -> CodeResponse:
    """Generate a verification code granting body.type. Admin only."""
    try:
        code = await registry.generate(body.type, body.expiration_hours, body.max_uses)
    except InvalidCodeRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except CodeGenerationError as e:
        logger.error("Code generation failed for admin %s: %s", admin_id, e)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Could not generate code, try again")
    return CodeResponse.model_validate(code)


@router.get("/codes", response_model=list[CodeResponse])
async def list_codes(
    code_type: UserRole | None = Query(None, alias="type", description="Only codes granting this role"),
    status_filter: CodeStatus | None = Query(None, alias="status"),
    from_date: datetime | None = Query(None, description="Created at or after (ISO 8601)"),
    to_date: datetime | None = Query(None, description="Created at or before (ISO 8601)"),
    _admin_id: str = Depends(require_admin),
    registry: VerificationCodeRegistry = Depends(get_code_registry),
) -> list[CodeResponse]:
    """List codes, optionally filtered. Admin only."""
    codes = await registry.list_codes(
        CodeFilters(
            type=code_type.value if code_type else None,
            status=status_filter.value if status_filter else None,
            from_date=from_date,
            to_date=to_date,
        )
    )
    return [CodeResponse.model_validate(c) for c in codes]


@router.get("/codes/logs", response_model=list[CodeLogResponse])
async def list_code_logs(
    code_id: str | None = Query(None),
    _admin_id: str = Depends(require_admin),
    registry: VerificationCodeRegistry = Depends(get_code_registry),
) -> list[CodeLogResponse]:
    """Audit log for all codes or a single one. Admin only."""
    logs = await registry.get_logs(code_id)
    return [CodeLogResponse.model_validate(entry) for entry in logs]


@router.post("/codes/{code_id}/revoke", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_code(
    code_id: str,
    body: CodeRevoke | None = None,
    _admin_id: str = Depends(require_admin),
    registry: VerificationCodeRegistry = Depends(get_code_registry),
) -> None:
    """Mark a code revoked (or expired/used). Unknown ids are ignored. Admin only."""
    reason = body.reason if body else CodeStatus.REVOKED
    try:
        await registry.revoke(code_id, reason)
    except InvalidCodeRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/codes/cleanup", response_model=CleanupResult)
async def cleanup_codes(
    _admin_id: str = Depends(require_admin),
    registry: VerificationCodeRegistry = Depends(get_code_registry),
) -> CleanupResult:
    """Retire expired and exhausted active codes now. Admin only."""
    return CleanupResult(cleaned=await registry.cleanup())
