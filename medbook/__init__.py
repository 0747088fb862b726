"""Local profile and settings persistence for the medical appointment app."""
from medbook.appointments import AppointmentResult, submit_appointment, validate_appointment
from medbook.bootstrap import Repositories, build_repositories
from medbook.edit_session import (
    CommitOutcome,
    EditSession,
    SessionMode,
    create_profile,
    open_edit_session,
)
from medbook.errors import (
    CorruptDataError,
    InvalidTransitionError,
    MedbookError,
    SessionBusyError,
    SessionDisposedError,
    StorageError,
    UnknownFieldError,
    ValidationError,
)
from medbook.models import AppSettings, AppointmentRequest, UserProfile
from medbook.profile_repository import ProfileRepository
from medbook.settings_repository import SettingsRepository
from medbook.splash import SplashExit, SplashGate
from medbook.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    SqlKeyValueStore,
    create_store,
)

__all__ = [
    "AppSettings",
    "AppointmentRequest",
    "AppointmentResult",
    "CommitOutcome",
    "CorruptDataError",
    "EditSession",
    "InMemoryKeyValueStore",
    "InvalidTransitionError",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MedbookError",
    "ProfileRepository",
    "Repositories",
    "SessionBusyError",
    "SessionDisposedError",
    "SessionMode",
    "SettingsRepository",
    "SplashExit",
    "SplashGate",
    "SqlKeyValueStore",
    "StorageError",
    "UnknownFieldError",
    "UserProfile",
    "ValidationError",
    "build_repositories",
    "create_profile",
    "create_store",
    "open_edit_session",
    "submit_appointment",
    "validate_appointment",
]
