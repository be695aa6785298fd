# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Demo data seeding."""

from sqlalchemy import func, select

from fpinnova_server.models import (
    AppSetting,
    Category,
    CategoryRequirement,
    Convocatoria,
    Project,
    User,
    project_presenters,
    project_reviewers,
)
from fpinnova_server.scripts.seed import seed


async def _count(db, table) -> int:
    return await db.scalar(select(func.count()).select_from(table))


async def test_seed_populates_demo_data(db):
    await seed(db)
    await db.commit()

    assert await _count(db, User) == 5
    assert await _count(db, Convocatoria) == 1
    assert await _count(db, Category) == 3
    assert await _count(db, CategoryRequirement) == 8
    assert await _count(db, Project) == 3
    assert await _count(db, project_presenters) == 2
    assert await _count(db, project_reviewers) == 2
    assert await _count(db, AppSetting) == 1

    admin = await db.scalar(select(User).where(User.email == "admin@fpinnova.es"))
    assert admin.is_admin
    scored = await db.scalar(select(Project).where(Project.score.is_not(None)))
    assert scored.title == "Sistema de Monitorización IoT"
