# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Application settings API: appearance for everyone, full document and backups for admins."""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from fpinnova_server.auth import require_admin
from fpinnova_server.database import get_db
from fpinnova_server.services.app_settings import (
    InvalidSettingsBackup,
    create_backup,
    get_settings,
    public_appearance,
    restore_backup,
    update_settings,
)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/appearance")
async def get_appearance(db: AsyncSession = Depends(get_db)) -> dict:
    """Branding and colors for the login screen and app shell. No auth required."""
    return public_appearance(await get_settings(db))


@router.get("")
async def read_settings(
    _admin_id: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Full settings document. Admin only."""
    return await get_settings(db)


@router.put("")
async def write_settings(
    body: dict,
    _admin_id: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Replace the given top-level sections (general, appearance, views, ...). Admin only."""
    return await update_settings(db, body)


@router.get("/backup")
async def download_backup(
    _admin_id: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Download settings as a JSON file. Admin only."""
    return Response(
        content=await create_backup(db),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="fpinnova-settings.json"'},
    )


@router.post("/restore")
async def upload_backup(
    backup: UploadFile = File(...),
    _admin_id: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Restore settings from a backup file. Admin only."""
    try:
        return await restore_backup(db, await backup.read())
    except InvalidSettingsBackup as e:
        raise HTTPException(status_code=400, detail=str(e))
