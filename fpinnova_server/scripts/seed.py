#!/usr/bin/env python3
# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Populate an empty database with demo data. Run: python -m fpinnova_server.scripts.seed"""

import asyncio
import json
import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from fpinnova_server.auth import hash_password
from fpinnova_server.models import (
    AppSetting,
    Category,
    CategoryRequirement,
    Convocatoria,
    Project,
    User,
    UserRole,
)
from fpinnova_server.models.app_setting import APP_SETTINGS_KEY, DEFAULT_APP_SETTINGS

logger = logging.getLogger(__name__)

DEMO_USERS = [
    ("Administrador", "admin@fpinnova.es", "admin123", UserRole.ADMIN, "IES Tecnológico", "Informática"),
    ("Juan Pérez", "juan@example.com", "password123", UserRole.COORDINATOR, "IES Tecnológico", "Informática"),
    ("María García", "maria@example.com", "password123", UserRole.PRESENTER, "IES Innovación", "Electrónica"),
    ("Ana Martínez", "ana@example.com", "password123", UserRole.REVIEWER, "IES Tecnológico", "Robótica"),
    ("Carlos López", "carlos@example.com", "password123", UserRole.REVIEWER, "IES Innovación", "Mecánica"),
]

DEMO_CATEGORIES = [
    ("Tecnología e Innovación", "Proyectos tecnológicos innovadores",
     ["Memoria técnica", "Presupuesto", "Video demostrativo"]),
    ("Educación Digital", "Proyectos de innovación educativa",
     ["Memoria técnica", "Guía didáctica", "Demo funcional"]),
    ("Sostenibilidad", "Proyectos enfocados en sostenibilidad y medio ambiente",
     ["Memoria técnica", "Estudio de impacto ambiental"]),
]


async def seed(db: AsyncSession) -> None:
    """Add the demo data set to db. The caller commits."""
    users = [
        User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role.value,
            center=center,
            department=department,
            active=True,
        )
        for name, email, password, role, center, department in DEMO_USERS
    ]
    db.add_all(users)

    convocatoria = Convocatoria(
        title="Convocatoria FP Innova 2024",
        description="Proyectos de innovación en Formación Profesional para el año académico 2024",
        start_date=date(2024, 3, 1),
        end_date=date(2024, 6, 30),
        status="active",
        year=2024,
        documentation_deadline=date(2024, 5, 15),
        review_deadline=date(2024, 6, 15),
    )
    for name, description, requirements in DEMO_CATEGORIES:
        convocatoria.categories.append(
            Category(
                name=name,
                description=description,
                max_participants=4,
                min_corrections=2,
                requirements=[CategoryRequirement(requirement=r) for r in requirements],
            )
        )
    db.add(convocatoria)
    await db.flush()

    technology, education, sustainability = convocatoria.categories
    iot = Project(
        title="Sistema de Monitorización IoT",
        description="Sistema de monitorización ambiental utilizando sensores IoT y análisis de datos en tiempo real.",
        convocatoria_id=convocatoria.id,
        category_id=technology.id,
        center="IES Tecnológico",
        department="Informática",
        status="reviewing",
        submission_date=date(2024, 3, 1),
        score=8.5,
        presenters=[users[1], users[2]],
        reviewers=[users[3], users[4]],
    )
    adaptive = Project(
        title="Plataforma de Aprendizaje Adaptativo",
        description="Sistema educativo que adapta el contenido según el progreso y necesidades del estudiante.",
        convocatoria_id=convocatoria.id,
        category_id=education.id,
        center="IES Innovación",
        department="Pedagogía",
        status="submitted",
        submission_date=date(2024, 3, 10),
    )
    waste = Project(
        title="Gestión de Residuos Inteligente",
        description="Sistema de optimización para la gestión y reciclaje de residuos en centros educativos.",
        convocatoria_id=convocatoria.id,
        category_id=sustainability.id,
        center="IES Tecnológico",
        department="Medio Ambiente",
        status="draft",
    )
    db.add_all([iot, adaptive, waste])
    db.add(AppSetting(key=APP_SETTINGS_KEY, value=json.dumps(DEFAULT_APP_SETTINGS)))
    await db.flush()


async def main():
    from fpinnova_server.database import async_session_maker, init_db

    logging.basicConfig(level=logging.INFO)
    await init_db()
    async with async_session_maker() as session:
        try:
            await seed(session)
            await session.commit()
        except Exception:
            await session.rollback()
            logger.exception("Error during seed")
            raise
    logger.info("Seed completed successfully")


if __name__ == "__main__":
    asyncio.run(main())
