"""Shared test fixtures."""
import tempfile

import pytest

from medbook.models import UserProfile
from medbook.profile_repository import ProfileRepository
from medbook.settings_repository import SettingsRepository
from medbook.storage import InMemoryKeyValueStore
from tests.utils.fake_stores import FailingKeyValueStore


@pytest.fixture
def memory_store():
    """Empty in-memory store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def failing_store():
    """In-memory store with switchable failures."""
    return FailingKeyValueStore()


@pytest.fixture
def temp_store_dir():
    """Create temporary directory for file store tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def profile_repo(memory_store):
    return ProfileRepository(memory_store)


@pytest.fixture
def settings_repo(memory_store):
    return SettingsRepository(memory_store)


@pytest.fixture
def ana_profile() -> UserProfile:
    """Minimal valid profile."""
    return UserProfile(
        name="Ana",
        email="a@x.com",
        phone="1199999999",
        cpf="11122233344"
    )


@pytest.fixture
def full_profile() -> UserProfile:
    """Profile with every optional field filled."""
    return UserProfile(
        name="Carlos Oliveira",
        email="carlos@example.com",
        phone="(11) 98888-7777",
        cpf="123.456.789-00",
        birth_date="15/03/1985",
        address="Rua das Flores, 123 - São Paulo",
        emergency_contact="Maria Oliveira (11) 97777-6666"
    )
