"""Repository for the single on-device user profile."""
from typing import Optional

from medbook import config
from medbook.errors import CorruptDataError, StorageError, ValidationError
from medbook.logging_config import get_logger
from medbook.models import UserProfile
from medbook.storage import KeyValueStore
from medbook.validation import validate_profile

logger = get_logger(__name__)


class ProfileRepository:
    """
    Owns the singleton UserProfile record.

    Responsibilities:
    - Decode the stored record, telling "absent" apart from "corrupt"
    - Gate every write on the required-field check
    - Write the whole record in one store operation (no partial patches)

    Concurrent saves from different sessions are not coordinated:
    the last write to complete wins.
    """

    def __init__(self, store: KeyValueStore, key: str = config.PROFILE_KEY):
        """
        Args:
            store: Key-value store adapter
            key: Storage key for the profile record
        """
        self.store = store
        self.key = key

    async def load(self, strict: bool = False) -> Optional[UserProfile]:
        """
        Load the stored profile.

        Args:
            strict: Raise on a corrupt record instead of treating it as absent

        Returns:
            UserProfile, or None if no profile was ever saved (or it is corrupt
            and strict is False)

        Raises:
            StorageError: If the store read fails
            CorruptDataError: If strict and the stored value does not decode
        """
        try:
            raw = await self.store.get(self.key)
        except StorageError as exc:
            logger.error("storage_failed", operation="get", key=self.key, error=str(exc))
            raise
        except CorruptDataError as exc:
            return self._corrupt(exc, strict)

        if raw is None:
            logger.info("profile_missing", key=self.key)
            return None

        try:
            profile = UserProfile.from_json(raw)
        except CorruptDataError as exc:
            return self._corrupt(exc, strict)

        logger.info("profile_loaded", key=self.key)
        return profile

    def _corrupt(self, exc: CorruptDataError, strict: bool) -> None:
        exc.key = self.key
        logger.error("profile_corrupt", key=self.key, error=str(exc))
        if strict:
            raise exc
        return None

    async def exists(self) -> bool:
        """True iff load() would return a profile."""
        return await self.load() is not None

    async def save(self, profile: UserProfile) -> None:
        """
        Validate and persist the whole profile, replacing any prior value.

        Args:
            profile: Complete profile to store

        Raises:
            ValidationError: If a required field is blank (store untouched)
            StorageError: If the store write fails
        """
        try:
            validate_profile(profile)
        except ValidationError as exc:
            logger.warning("profile_validation_failed", key=self.key, fields=exc.fields)
            raise

        try:
            await self.store.set(self.key, profile.to_json())
        except StorageError as exc:
            logger.error("storage_failed", operation="set", key=self.key, error=str(exc))
            raise

        logger.info("profile_saved", key=self.key)
