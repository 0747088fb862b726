"""Repository for the two independent boolean app preferences."""
import asyncio
import json
from typing import Optional

from medbook import config
from medbook.errors import CorruptDataError, StorageError
from medbook.logging_config import get_logger
from medbook.models import AppSettings
from medbook.storage import KeyValueStore

logger = get_logger(__name__)


class SettingsRepository:
    """
    Reads and writes the notifications and darkMode flags.

    Each flag has its own key; reading or writing one never touches the
    other. Reads never fail: a missing, unreadable or malformed value
    yields the default.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    @staticmethod
    def _check_key(key: str):
        if key not in config.FLAG_DEFAULTS:
            raise ValueError(
                f"Unknown setting '{key}'. Expected one of: {sorted(config.FLAG_DEFAULTS)}"
            )

    async def load_flag(self, key: str, default: Optional[bool] = None) -> bool:
        """
        Load one flag.

        Args:
            key: notifications or darkMode
            default: Value for a missing/unusable entry (falls back to the
                     flag's built-in default)

        Returns:
            Stored boolean, or the default
        """
        self._check_key(key)
        if default is None:
            default = config.FLAG_DEFAULTS[key]

        try:
            raw = await self.store.get(key)
        except StorageError as exc:
            logger.warning("flag_load_failed", key=key, error=str(exc))
            return default
        except CorruptDataError as exc:
            logger.error("flag_corrupt", key=key, error=str(exc))
            return default

        if raw is None:
            return default

        try:
            value = json.loads(raw)
        except (ValueError, RecursionError):
            logger.error("flag_corrupt", key=key, raw=raw[:50])
            return default

        if not isinstance(value, bool):
            logger.error("flag_corrupt", key=key, raw=raw[:50])
            return default

        logger.debug("flag_loaded", key=key, value=value)
        return value

    async def save_flag(self, key: str, value: bool) -> bool:
        """
        Persist one flag.

        Returns:
            True if stored, False if the store write failed
        """
        self._check_key(key)
        if not isinstance(value, bool):
            raise TypeError(f"Setting '{key}' must be a bool, got {type(value).__name__}")

        try:
            await self.store.set(key, json.dumps(value))
        except StorageError as exc:
            logger.error("storage_failed", operation="set", key=key, error=str(exc))
            return False

        logger.info("flag_saved", key=key, value=value)
        return True

    async def notifications(self) -> bool:
        return await self.load_flag(config.NOTIFICATIONS_KEY)

    async def dark_mode(self) -> bool:
        return await self.load_flag(config.DARK_MODE_KEY)

    async def set_notifications(self, value: bool) -> bool:
        return await self.save_flag(config.NOTIFICATIONS_KEY, value)

    async def set_dark_mode(self, value: bool) -> bool:
        return await self.save_flag(config.DARK_MODE_KEY, value)

    async def load_all(self) -> AppSettings:
        """Load both flags concurrently."""
        notifications, dark_mode = await asyncio.gather(
            self.notifications(),
            self.dark_mode(),
        )
        return AppSettings(notifications=notifications, dark_mode=dark_mode)
