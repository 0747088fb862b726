"""Tests for key-value store adapters."""
import os
from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError

from medbook.config import StoreSettings
from medbook.errors import CorruptDataError, StorageError
from medbook.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    SqlKeyValueStore,
    create_store,
)


@pytest.fixture
def sql_store():
    """Create SqlKeyValueStore with in-memory database."""
    store = SqlKeyValueStore(database_url="sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture(params=["memory", "file", "sql"])
def any_store(request, temp_store_dir):
    """Each adapter, to check the shared contract."""
    if request.param == "memory":
        yield InMemoryKeyValueStore()
    elif request.param == "file":
        yield JsonFileKeyValueStore(store_dir=temp_store_dir)
    else:
        store = SqlKeyValueStore(database_url="sqlite:///:memory:")
        yield store
        store.close()


@pytest.mark.asyncio
async def test_get_missing_key_returns_none(any_store):
    assert await any_store.get("userProfile") is None


@pytest.mark.asyncio
async def test_set_then_get_returns_same_text(any_store):
    await any_store.set("darkMode", "true")
    assert await any_store.get("darkMode") == "true"


@pytest.mark.asyncio
async def test_set_replaces_whole_value(any_store):
    await any_store.set("userProfile", '{"name": "Ana"}')
    await any_store.set("userProfile", '{"name": "Ana Silva"}')

    assert await any_store.get("userProfile") == '{"name": "Ana Silva"}'


@pytest.mark.asyncio
async def test_keys_are_independent(any_store):
    await any_store.set("notifications", "false")
    await any_store.set("darkMode", "true")

    assert await any_store.get("notifications") == "false"
    assert await any_store.get("darkMode") == "true"


@pytest.mark.asyncio
async def test_remove_deletes_key(any_store):
    await any_store.set("darkMode", "true")
    await any_store.remove("darkMode")

    assert await any_store.get("darkMode") is None


@pytest.mark.asyncio
async def test_remove_missing_key_is_noop(any_store):
    await any_store.remove("never-set")  # Should not raise


@pytest.mark.asyncio
async def test_non_text_value_rejected(any_store):
    with pytest.raises(StorageError):
        await any_store.set("darkMode", True)


@pytest.mark.asyncio
async def test_file_store_persists_across_instances(temp_store_dir):
    """A new store on the same directory should see earlier writes."""
    first = JsonFileKeyValueStore(store_dir=temp_store_dir)
    await first.set("userProfile", '{"name": "Ana"}')

    second = JsonFileKeyValueStore(store_dir=temp_store_dir)
    assert await second.get("userProfile") == '{"name": "Ana"}'


@pytest.mark.asyncio
async def test_file_store_writes_one_file_per_key(temp_store_dir):
    store = JsonFileKeyValueStore(store_dir=temp_store_dir)
    await store.set("notifications", "true")
    await store.set("darkMode", "false")

    assert store.list_keys() == ["darkMode", "notifications"]
    assert not [p for p in Path(temp_store_dir).iterdir() if p.suffix == ".tmp"]


@pytest.mark.asyncio
async def test_file_store_sanitizes_keys(temp_store_dir):
    """Keys should not escape the store directory."""
    store = JsonFileKeyValueStore(store_dir=temp_store_dir)
    await store.set("../outside", "1")

    assert not (Path(temp_store_dir).parent / "outside.json").exists()
    assert await store.get("../outside") == "1"


@pytest.mark.asyncio
async def test_file_store_read_failure_raises_storage_error(temp_store_dir):
    """A key path that cannot be read should surface as StorageError."""
    store = JsonFileKeyValueStore(store_dir=temp_store_dir)
    os.mkdir(Path(temp_store_dir) / "userProfile.json")

    with pytest.raises(StorageError) as exc_info:
        await store.get("userProfile")

    assert exc_info.value.key == "userProfile"
    assert isinstance(exc_info.value.__cause__, OSError)


@pytest.mark.asyncio
async def test_file_store_non_utf8_value_raises_corrupt_data(temp_store_dir):
    """Bytes that are not UTF-8 text are corruption, not a read failure."""
    store = JsonFileKeyValueStore(store_dir=temp_store_dir)
    (Path(temp_store_dir) / "darkMode.json").write_bytes(b"\xff")

    with pytest.raises(CorruptDataError) as exc_info:
        await store.get("darkMode")

    assert exc_info.value.key == "darkMode"


@pytest.mark.asyncio
async def test_sql_store_retries_transient_errors(sql_store, monkeypatch):
    """Locked-database errors should be retried before failing."""
    calls = {"count": 0}
    original = sql_store.SessionLocal

    def flaky_session():
        calls["count"] += 1
        if calls["count"] < 3:
            raise OperationalError("SELECT", {}, Exception("database is locked"))
        return original()

    monkeypatch.setattr(sql_store, "SessionLocal", flaky_session)

    assert await sql_store.get("darkMode") is None
    assert calls["count"] == 3


@pytest.mark.asyncio
async def test_sql_store_gives_up_with_storage_error(sql_store, monkeypatch):
    def broken_session():
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(sql_store, "SessionLocal", broken_session)

    with pytest.raises(StorageError):
        await sql_store.set("darkMode", "true")


def test_create_store_selects_backend(temp_store_dir):
    assert isinstance(create_store(StoreSettings(backend="memory")), InMemoryKeyValueStore)
    assert isinstance(
        create_store(StoreSettings(backend="file", store_dir=temp_store_dir)),
        JsonFileKeyValueStore
    )

    sql = create_store(StoreSettings(backend="sql", database_url="sqlite:///:memory:"))
    assert isinstance(sql, SqlKeyValueStore)
    sql.close()
