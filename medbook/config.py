"""Configuration for the medbook persistence layer.

Business constants live here as module-level values; runtime settings
come from the environment (a local .env file is honored).
"""
import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

# Storage keys (shared with the mobile app's on-device store)
PROFILE_KEY = "userProfile"
NOTIFICATIONS_KEY = "notifications"
DARK_MODE_KEY = "darkMode"

FLAG_DEFAULTS = {
    NOTIFICATIONS_KEY: True,
    DARK_MODE_KEY: False,
}

SPECIALTIES = [
    "Clínico Geral",
    "Cardiologia",
    "Dermatologia",
    "Ginecologia",
    "Ortopedia",
    "Pediatria",
    "Psiquiatria",
    "Neurologia",
]

# Splash gate timings (seconds)
SPLASH_MANUAL_ENTRY_DELAY = 2.0
SPLASH_AUTO_NAVIGATION_DELAY = 5.0

# Date format used in user-facing messages (pt-BR)
DISPLAY_DATE_FORMAT = "%d/%m/%Y"


class StoreSettings(BaseModel):
    """Runtime settings resolved from environment variables."""
    backend: Literal["memory", "file", "sql"] = Field(
        default="file",
        description="Key-value store adapter"
    )
    store_dir: str = Field(default="data/store", description="Directory for the file store")
    database_url: str = Field(
        default="sqlite:///medbook.db",
        description="SQLAlchemy URL for the sql store"
    )
    log_level: str = Field(default="INFO", description="Logging level")


def load_settings() -> StoreSettings:
    """
    Build StoreSettings from the environment.

    Returns:
        StoreSettings with environment overrides applied
    """
    return StoreSettings(
        backend=os.getenv("MEDBOOK_STORE_BACKEND", "file").lower(),
        store_dir=os.getenv("MEDBOOK_STORE_DIR", "data/store"),
        database_url=os.getenv("MEDBOOK_DATABASE_URL", "sqlite:///medbook.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
