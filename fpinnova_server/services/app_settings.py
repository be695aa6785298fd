# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Application settings (branding, views, reviews, integrations) stored in the DB."""

import copy
import json
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fpinnova_server.models.app_setting import APP_SETTINGS_KEY, DEFAULT_APP_SETTINGS, AppSetting

logger = logging.getLogger(__name__)


class InvalidSettingsBackup(ValueError):
    """Backup payload is not a JSON object."""


async def _load_row(db: AsyncSession) -> AppSetting | None:
    result = await db.execute(select(AppSetting).where(AppSetting.key == APP_SETTINGS_KEY))
    return result.scalar_one_or_none()


async def _save(db: AsyncSession, data: dict) -> None:
    row = await _load_row(db)
    value = json.dumps(data)
    if row:
        row.value = value
    else:
        db.add(AppSetting(key=APP_SETTINGS_KEY, value=value))
    await db.flush()


async def get_settings(db: AsyncSession) -> dict:
    """Return stored settings over the defaults. Persists the defaults on first read."""
    row = await _load_row(db)
    if row:
        try:
            stored = json.loads(row.value)
            return {**copy.deepcopy(DEFAULT_APP_SETTINGS), **stored}
        except json.JSONDecodeError:
            logger.warning("Stored app settings are not valid JSON; using defaults")
            return copy.deepcopy(DEFAULT_APP_SETTINGS)
    defaults = copy.deepcopy(DEFAULT_APP_SETTINGS)
    await _save(db, defaults)
    return defaults


async def update_settings(db: AsyncSession, new_settings: dict) -> dict:
    """Replace the given top-level sections and persist. Other sections are kept."""
    current = await get_settings(db)
    merged = {**current, **new_settings}
    await _save(db, merged)
    logger.info("App settings updated: %s", ", ".join(sorted(new_settings)) or "(nothing)")
    return merged


async def create_backup(db: AsyncSession) -> str:
    """Current settings as pretty-printed JSON."""
    return json.dumps(await get_settings(db), indent=2)


async def restore_backup(db: AsyncSession, raw: str | bytes) -> dict:
    """Apply a JSON backup produced by create_backup."""
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidSettingsBackup(f"Backup is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidSettingsBackup("Backup must be a JSON object")
    return await update_settings(db, data)


def public_appearance(app_settings: dict) -> dict:
    """Subset safe to expose without auth (branding and colors)."""
    return {"appearance": app_settings.get("appearance", {})}
