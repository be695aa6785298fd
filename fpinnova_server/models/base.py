# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Base model and shared column helpers."""

import uuid

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


def new_id() -> str:
    """Opaque primary key for new rows."""
    return str(uuid.uuid4())
