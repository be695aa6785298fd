# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Public code API - check or redeem a verification code.

Every failure answers with the same message so callers cannot tell an unknown
code from an expired or exhausted one.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from fpinnova_server.api.schemas import CodeRedeemed, CodeSubmit
from fpinnova_server.models import VerificationCode
from fpinnova_server.rate_limit import rate_limit_dep
from fpinnova_server.services.verification_codes import VerificationCodeRegistry, get_code_registry

router = APIRouter(prefix="/codes", tags=["codes"], dependencies=[Depends(rate_limit_dep)])

INVALID_CODE = "Invalid or expired code"


def _redeemed(code: VerificationCode | None) -> CodeRedeemed:
    if code is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CODE)
    return CodeRedeemed(
        type=code.type,
        expires_at=code.expires_at,
        remaining_uses=code.max_uses - code.current_uses,
    )


@router.post("/validate", response_model=CodeRedeemed)
async def validate_code(
    body: CodeSubmit,
    registry: VerificationCodeRegistry = Depends(get_code_registry),
) -> CodeRedeemed:
    """Check a code without using it."""
    return _redeemed(await registry.validate(body.code))


@router.post("/redeem", response_model=CodeRedeemed)
async def redeem_code(
    body: CodeSubmit,
    registry: VerificationCodeRegistry = Depends(get_code_registry),
) -> CodeRedeemed:
    """Use a code once."""
    return _redeemed(await registry.consume(body.code))
