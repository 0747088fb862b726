"""Key-value store adapters.

All adapters expose the same async contract:
- get(key) -> text or None
- set(key, text)  (whole-value replace)
- remove(key)

Failures surface as StorageError with the underlying exception chained.
A stored value that cannot be decoded as text surfaces as CorruptDataError.
Blocking adapters push their I/O through asyncio.to_thread so the event
loop keeps serving other work while a call is pending.
"""
import asyncio
import os
import tempfile
from datetime import datetime, UTC
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from medbook.config import StoreSettings
from medbook.database_models import Base, KeyValueEntry
from medbook.errors import CorruptDataError, StorageError
from medbook.logging_config import get_logger

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    """Async string-keyed storage consumed by the repositories."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def remove(self, key: str) -> None:
        ...


class InMemoryKeyValueStore:
    """
    Dict-backed store.

    Good for: tests, previews, ephemeral runs.
    NOT for: anything that must survive the process.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Store values must be text, got {type(value).__name__}", key=key)
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._data)


class JsonFileKeyValueStore:
    """
    One file per key under a directory (<store_dir>/<key>.json).

    Writes go to a temp file in the same directory and are moved into
    place with os.replace, so a reader never sees a half-written value.
    """

    def __init__(self, store_dir: Optional[str] = None):
        """
        Initialize file store.

        Args:
            store_dir: Directory for value files.
                       Defaults to 'data/store' in the project root.
        """
        if store_dir is None:
            project_root = Path(__file__).parent.parent
            store_dir = project_root / "data" / "store"

        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)

    def _get_path(self, key: str) -> Path:
        """Get file path for a key."""
        # Sanitize key to prevent path traversal
        safe_key = key.replace("/", "_").replace("\\", "_").replace("..", "_")
        return self.store_dir / f"{safe_key}.json"

    def _read(self, key: str) -> Optional[str]:
        path = self._get_path(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CorruptDataError(f"Stored value for '{key}' is not UTF-8 text: {exc}", key=key) from exc

    def _write(self, key: str, value: str) -> None:
        path = self._get_path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.store_dir, prefix=f".{path.stem}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _delete(self, key: str) -> None:
        self._get_path(key).unlink(missing_ok=True)

    async def get(self, key: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._read, key)
        except OSError as exc:
            raise StorageError(f"Could not read '{key}' from {self.store_dir}: {exc}", key=key) from exc

    async def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Store values must be text, got {type(value).__name__}", key=key)
        try:
            await asyncio.to_thread(self._write, key, value)
        except OSError as exc:
            raise StorageError(f"Could not write '{key}' to {self.store_dir}: {exc}", key=key) from exc

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._delete, key)
        except OSError as exc:
            raise StorageError(f"Could not remove '{key}' from {self.store_dir}: {exc}", key=key) from exc

    def list_keys(self) -> List[str]:
        """List stored keys (file stems)."""
        return sorted(p.stem for p in self.store_dir.glob("*.json"))


# Transient sqlite errors such as "database is locked"
_sql_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.05, min=0.05, max=0.5),
    retry=retry_if_exception_type(OperationalError),
    reraise=True,
)


class SqlKeyValueStore:
    """
    Key-value store on a SQLAlchemy table (kv_entries).

    Pattern: Thin wrapper around SQLAlchemy sessions, one transaction per call.
    """

    def __init__(self, database_url: str):
        """
        Initialize store with database connection.

        Args:
            database_url: SQLAlchemy connection string
        """
        engine_kwargs = {"pool_pre_ping": True}
        if database_url.startswith("sqlite"):
            # Calls arrive from asyncio.to_thread workers
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in database_url:
                # One shared connection so every thread sees the same db
                engine_kwargs = {
                    "poolclass": StaticPool,
                    "connect_args": {"check_same_thread": False},
                }
        self.engine = create_engine(database_url, **engine_kwargs)
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine)

    @_sql_retry
    def _read(self, key: str) -> Optional[str]:
        with self.SessionLocal() as db:
            entry = db.get(KeyValueEntry, key)
            return entry.value if entry else None

    @_sql_retry
    def _write(self, key: str, value: str) -> None:
        with self.SessionLocal() as db:
            entry = db.get(KeyValueEntry, key)
            if entry is None:
                db.add(KeyValueEntry(key=key, value=value, updated_at=datetime.now(UTC)))
            else:
                entry.value = value
                entry.updated_at = datetime.now(UTC)
            db.commit()

    @_sql_retry
    def _delete(self, key: str) -> None:
        with self.SessionLocal() as db:
            db.query(KeyValueEntry).filter(KeyValueEntry.key == key).delete()
            db.commit()

    async def get(self, key: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._read, key)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not read '{key}': {exc}", key=key) from exc

    async def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Store values must be text, got {type(value).__name__}", key=key)
        try:
            await asyncio.to_thread(self._write, key, value)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not write '{key}': {exc}", key=key) from exc

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._delete, key)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not remove '{key}': {exc}", key=key) from exc

    def close(self):
        """Dispose the engine and its pooled connections."""
        self.engine.dispose()


def create_store(settings: StoreSettings) -> KeyValueStore:
    """
    Build the configured key-value store.

    Args:
        settings: Resolved StoreSettings

    Returns:
        Store adapter for settings.backend
    """
    if settings.backend == "memory":
        store = InMemoryKeyValueStore()
    elif settings.backend == "sql":
        store = SqlKeyValueStore(database_url=settings.database_url)
    else:
        store = JsonFileKeyValueStore(store_dir=settings.store_dir)

    logger.info("store_created", backend=settings.backend)
    return store
