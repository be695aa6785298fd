# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Project model with presenter and reviewer assignments."""

from datetime import date

from sqlalchemy import Column, Date, Float, ForeignKey, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fpinnova_server.models.base import Base, new_id
from fpinnova_server.models.user import User

project_presenters = Table(
    "project_presenters",
    Base.metadata,
    Column("project_id", ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

project_reviewers = Table(
    "project_reviewers",
    Base.metadata,
    Column("project_id", ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Project(Base):
    """Innovation project submitted to a convocatoria category."""

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    convocatoria_id: Mapped[str] = mapped_column(ForeignKey("convocatorias.id"), nullable=False, index=True)
    category_id: Mapped[str] = mapped_column(ForeignKey("categories.id"), nullable=False, index=True)
    center: Mapped[str | None] = mapped_column(String(255), nullable=True)
    department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # draft | submitted | reviewing | reviewed | awarded | rejected
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="draft")
    submission_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    score: Mapped[float | None] = mapped_column(Float, nullable=True)

    presenters: Mapped[list["User"]] = relationship("User", secondary=project_presenters)
    reviewers: Mapped[list["User"]] = relationship("User", secondary=project_reviewers)
