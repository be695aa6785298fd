# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Convocatoria (award call), its categories and their requirements."""

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fpinnova_server.models.base import Base, new_id


class Convocatoria(Base):
    """One yearly call for innovation projects."""

    __tablename__ = "convocatorias"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="draft")
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    documentation_deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    review_deadline: Mapped[date | None] = mapped_column(Date, nullable=True)

    categories: Mapped[list["Category"]] = relationship(
        "Category", back_populates="convocatoria", cascade="all, delete-orphan"
    )


class Category(Base):
    """Category within a convocatoria; projects compete per category."""

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    convocatoria_id: Mapped[str] = mapped_column(
        ForeignKey("convocatorias.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    min_corrections: Mapped[int] = mapped_column(Integer, nullable=False, default=2)

    convocatoria: Mapped["Convocatoria"] = relationship("Convocatoria", back_populates="categories")
    requirements: Mapped[list["CategoryRequirement"]] = relationship(
        "CategoryRequirement", back_populates="category", cascade="all, delete-orphan"
    )


class CategoryRequirement(Base):
    """A document or deliverable required for projects in a category."""

    __tablename__ = "category_requirements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    category_id: Mapped[str] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    requirement: Mapped[str] = mapped_column(String(255), nullable=False)

    category: Mapped["Category"] = relationship("Category", back_populates="requirements")
