# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Database models."""

from fpinnova_server.models.base import Base
from fpinnova_server.models.user import User, UserRole
from fpinnova_server.models.convocatoria import Category, CategoryRequirement, Convocatoria
from fpinnova_server.models.project import Project, project_presenters, project_reviewers
from fpinnova_server.models.app_setting import AppSetting
from fpinnova_server.models.verification_code import (
    CodeLogAction,
    CodeStatus,
    VerificationCode,
    VerificationCodeLog,
)

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Convocatoria",
    "Category",
    "CategoryRequirement",
    "Project",
    "project_presenters",
    "project_reviewers",
    "AppSetting",
    "CodeLogAction",
    "CodeStatus",
    "VerificationCode",
    "VerificationCodeLog",
]
