"""Wiring for the presentation layer: settings → logging → store → repositories."""
from dataclasses import dataclass
from typing import Optional

from medbook.config import StoreSettings, load_settings
from medbook.logging_config import get_logger, setup_structured_logging
from medbook.profile_repository import ProfileRepository
from medbook.settings_repository import SettingsRepository
from medbook.storage import KeyValueStore, create_store

logger = get_logger(__name__)


@dataclass
class Repositories:
    """Everything a screen is allowed to call into, sharing one store."""
    store: KeyValueStore
    profiles: ProfileRepository
    settings: SettingsRepository


def build_repositories(settings: Optional[StoreSettings] = None) -> Repositories:
    """
    Build the repositories from configuration.

    Args:
        settings: Explicit settings (default: read from the environment)

    Returns:
        Repositories bound to a single store adapter
    """
    if settings is None:
        settings = load_settings()

    setup_structured_logging(log_level=settings.log_level)
    store = create_store(settings)
    logger.info("repositories_ready", backend=settings.backend)

    return Repositories(
        store=store,
        profiles=ProfileRepository(store),
        settings=SettingsRepository(store),
    )
