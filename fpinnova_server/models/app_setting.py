# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Key-value application settings (appearance, views, integrations)."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fpinnova_server.models.base import Base

APP_SETTINGS_KEY = "app_settings"

# Defaults when nothing is stored. Sections are merged shallowly on update.
DEFAULT_APP_SETTINGS = {
    "general": {
        "timezone": "Europe/Madrid",
        "dateFormat": "DD/MM/YYYY",
        "timeFormat": "24h",
        "defaultLanguage": "es",
        "emailNotifications": True,
        "pushNotifications": True,
        "systemEmails": {
            "from": "noreply@fpinnova.es",
            "replyTo": "support@fpinnova.es",
        },
    },
    "appearance": {
        "branding": {
            "logo": "https://upload.wikimedia.org/wikipedia/commons/thumb/b/b5/Logotipo_del_Gobierno_de_Canarias.svg/2560px-Logotipo_del_Gobierno_de_Canarias.svg.png",
            "appName": "FP Innova",
            "favicon": "https://www3.gobiernodecanarias.org/medusa/mediateca/ecoescuela/wp-content/uploads/sites/2/2013/11/favicon-Gobierno-de-Canarias.png",
        },
        "colors": {
            "primary": "#2563eb",
            "secondary": "#1e40af",
            "accent": "#3b82f6",
            "headerBg": "#1e3a8a",
            "sidebarBg": "#f0f9ff",
            "textPrimary": "#111827",
            "textSecondary": "#4b5563",
        },
    },
    "views": {
        "defaultViews": {"projects": "grid", "users": "grid", "convocatorias": "grid"},
        "displayOptions": {
            "showDescription": True,
            "showMetadata": True,
            "showThumbnails": True,
            "itemsPerPage": 12,
        },
        "dashboardLayout": {
            "showStats": True,
            "showRecentActivity": True,
            "showUpcomingDeadlines": True,
            "showQuickActions": True,
        },
    },
    "reviews": {
        "allowAdminReview": False,
        "allowCoordinatorReview": False,
    },
    "integrations": {
        "googleAuth": {"enabled": False, "clientId": "", "clientSecret": ""},
        "microsoftAuth": {"enabled": False, "clientId": "", "clientSecret": ""},
        "storage": {"provider": "local"},
        "analytics": {"enabled": False, "trackingId": ""},
    },
}


class AppSetting(Base):
    """Key-value application configuration. Value is a JSON document."""

    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
