"""Splash gate: leave the splash screen on a timer or a manual action.

The manual "enter" action becomes available after a short delay; if the
user does not take it, navigation happens automatically. Whichever comes
first wins.
"""
import asyncio
import contextlib
from enum import Enum

from medbook import config
from medbook.logging_config import get_logger
from medbook.settings_repository import SettingsRepository

logger = get_logger(__name__)


class SplashExit(str, Enum):
    """How the splash screen was left."""
    AUTO = "auto"
    MANUAL = "manual"


class SplashGate:
    """Races the auto-navigation timer against a manual enter action."""

    def __init__(
        self,
        settings: SettingsRepository,
        manual_entry_delay: float = config.SPLASH_MANUAL_ENTRY_DELAY,
        auto_navigation_delay: float = config.SPLASH_AUTO_NAVIGATION_DELAY
    ):
        self.settings = settings
        self.manual_entry_delay = manual_entry_delay
        self.auto_navigation_delay = auto_navigation_delay
        self.manual_entry_available = False
        self.dark_mode = config.FLAG_DEFAULTS[config.DARK_MODE_KEY]
        self._entered = asyncio.Event()

    def enter(self) -> bool:
        """
        Manual enter action.

        Returns:
            True if accepted, False if the enter button is not shown yet
        """
        if not self.manual_entry_available:
            return False
        self._entered.set()
        return True

    async def _reveal_manual_entry(self):
        await asyncio.sleep(self.manual_entry_delay)
        self.manual_entry_available = True

    async def run(self) -> SplashExit:
        """
        Load the theme preference, then wait for the first exit trigger.

        Returns:
            SplashExit.MANUAL if enter() won, SplashExit.AUTO otherwise
        """
        self.dark_mode = await self.settings.dark_mode()

        reveal = asyncio.create_task(self._reveal_manual_entry())
        try:
            await asyncio.wait_for(self._entered.wait(), timeout=self.auto_navigation_delay)
            exit_reason = SplashExit.MANUAL
        except asyncio.TimeoutError:
            exit_reason = SplashExit.AUTO
        finally:
            reveal.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reveal

        logger.info("splash_exit", reason=exit_reason.value, dark_mode=self.dark_mode)
        return exit_reason
