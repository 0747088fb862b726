"""Edit session for the profile screen.

States:
- VIEWING: committed profile shown, no draft
- EDITING: draft copy of committed being changed

A session is created when the profile screen mounts and disposed when it
unmounts. committed is read from the repository once, at creation.
"""
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from medbook.errors import (
    InvalidTransitionError,
    MedbookError,
    SessionBusyError,
    SessionDisposedError,
    StorageError,
    ValidationError,
)
from medbook.logging_config import generate_session_id, get_logger, session_log_context
from medbook.models import UserProfile
from medbook.profile_repository import ProfileRepository

logger = get_logger(__name__)

SAVE_FAILED_TITLE = "Erro ao Salvar"
SAVE_FAILED_MESSAGE = "Não foi possível salvar seu perfil. Tente novamente."


class SessionMode(str, Enum):
    """Discrete edit-session modes."""
    VIEWING = "viewing"
    EDITING = "editing"


# Mode → operations allowed in that mode
ALLOWED_OPERATIONS: Dict[SessionMode, list[str]] = {
    SessionMode.VIEWING: ["begin_edit"],
    SessionMode.EDITING: ["mutate_field", "commit", "discard"],
}


def validate_operation(mode: SessionMode, operation: str) -> bool:
    """
    Check whether an operation is allowed in a mode.

    Example:
        >>> validate_operation(SessionMode.VIEWING, "begin_edit")
        True
        >>> validate_operation(SessionMode.VIEWING, "commit")
        False
    """
    return operation in ALLOWED_OPERATIONS.get(mode, [])


@dataclass
class CommitOutcome:
    """Result of a commit or profile creation, ready to show to the user."""
    ok: bool
    title: str
    message: str
    error: Optional[MedbookError] = None
    profile: Optional[UserProfile] = None

    @property
    def validation_failed(self) -> bool:
        return isinstance(self.error, ValidationError)

    @property
    def storage_failed(self) -> bool:
        return isinstance(self.error, StorageError)


def _failure(exc: MedbookError, validation_title: str) -> CommitOutcome:
    if isinstance(exc, ValidationError):
        return CommitOutcome(ok=False, title=validation_title, message=exc.message, error=exc)
    return CommitOutcome(ok=False, title=SAVE_FAILED_TITLE, message=SAVE_FAILED_MESSAGE, error=exc)


class EditSession:
    """
    Viewing/Editing state machine over the committed profile.

    The draft is a deep copy of committed and profiles are frozen, so
    committed changes only through commit(); mutate_field() replaces the
    draft with an updated copy. Operations are serialized:
    nothing else may run while a commit is waiting on the store.
    """

    def __init__(
        self,
        repository: ProfileRepository,
        committed: Optional[UserProfile],
        session_id: Optional[str] = None
    ):
        self.repository = repository
        self.session_id = session_id or generate_session_id()
        self._mode = SessionMode.VIEWING
        self._committed = committed
        self._draft: Optional[UserProfile] = None
        self._committing = False
        self._disposed = False
        self.load_error: Optional[StorageError] = None
        self._log = logger.bind(session_id=self.session_id)

    @classmethod
    async def create(cls, repository: ProfileRepository) -> "EditSession":
        """
        Create a session in VIEWING mode with the currently stored profile.

        If the store cannot be read the session starts without a profile
        (routing to creation) and load_error holds the StorageError.
        """
        load_error = None
        try:
            committed = await repository.load()
        except StorageError as exc:
            committed = None
            load_error = exc

        session = cls(repository, committed)
        session.load_error = load_error
        if load_error is not None:
            session._log.error("storage_failed", operation="create", error=str(load_error))
        session._log.info("session_created", has_profile=committed is not None)
        return session

    @property
    def mode(self) -> SessionMode:
        return self._mode

    @property
    def committed(self) -> Optional[UserProfile]:
        return self._committed

    @property
    def draft(self) -> Optional[UserProfile]:
        return self._draft

    @property
    def is_editing(self) -> bool:
        return self._mode == SessionMode.EDITING

    @property
    def needs_creation(self) -> bool:
        """True when there is no profile yet; route to the creation flow."""
        return self._committed is None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _require(self, operation: str):
        if self._disposed:
            raise SessionDisposedError(f"Session {self.session_id} is disposed")
        if self._committing:
            raise SessionBusyError(f"Cannot {operation}: commit in progress")
        if not validate_operation(self._mode, operation):
            raise InvalidTransitionError(
                f"Cannot {operation} while {self._mode.value}"
            )

    def begin_edit(self) -> UserProfile:
        """
        VIEWING → EDITING with a fresh deep copy of committed.

        Returns:
            The new draft

        Raises:
            InvalidTransitionError: If already editing, or no profile exists
        """
        self._require("begin_edit")
        if self._committed is None:
            raise InvalidTransitionError(
                "No committed profile to edit; create a profile first"
            )

        self._draft = self._committed.model_copy(deep=True)
        self._mode = SessionMode.EDITING
        self._log.info("edit_started")
        return self._draft

    def mutate_field(self, key: str, value: str) -> None:
        """
        Replace one draft field.

        Args:
            key: Field name (camelCase or snake_case)
            value: New text value

        Raises:
            InvalidTransitionError: If not editing
            UnknownFieldError: If key names no profile field
        """
        self._require("mutate_field")
        self._draft = self._draft.with_field(key, value)

    async def commit(self) -> CommitOutcome:
        """
        Validate and save the draft.

        On success the draft becomes committed and the session returns to
        VIEWING. On validation or storage failure nothing changes: the
        session stays EDITING with the draft intact so the user can retry.
        """
        self._require("commit")
        draft = self._draft

        self._committing = True
        try:
            await self.repository.save(draft)
        except (ValidationError, StorageError) as exc:
            self._log.warning("edit_commit_failed", error=type(exc).__name__)
            return _failure(exc, validation_title="Erro na Validação")
        finally:
            self._committing = False

        self._committed = draft
        self._draft = None
        self._mode = SessionMode.VIEWING
        self._log.info("edit_committed")
        return CommitOutcome(
            ok=True,
            title="Perfil Atualizado",
            message="Suas informações foram salvas com sucesso!",
            profile=draft
        )

    def discard(self) -> None:
        """EDITING → VIEWING, dropping the draft. No store access."""
        self._require("discard")
        self._draft = None
        self._mode = SessionMode.VIEWING
        self._log.info("edit_discarded")

    def dispose(self) -> None:
        """End the session. Any unsaved draft is dropped."""
        if self._disposed:
            return
        self._disposed = True
        self._draft = None
        self._mode = SessionMode.VIEWING
        self._log.info("session_disposed")


@asynccontextmanager
async def open_edit_session(repository: ProfileRepository):
    """
    Create an EditSession and dispose it on exit.

    Log events emitted inside the block carry the session id.

    Usage:
        async with open_edit_session(repo) as session:
            session.begin_edit()
            ...
    """
    session = await EditSession.create(repository)
    try:
        with session_log_context(session.session_id):
            yield session
    finally:
        session.dispose()


async def create_profile(repository: ProfileRepository, profile: UserProfile) -> CommitOutcome:
    """
    First-time profile creation, used when no profile exists yet.

    Returns:
        CommitOutcome; failures carry ValidationError or StorageError
    """
    try:
        await repository.save(profile)
    except (ValidationError, StorageError) as exc:
        return _failure(exc, validation_title="Perfil Incompleto")

    return CommitOutcome(
        ok=True,
        title="Perfil Criado com Sucesso!",
        message=(
            "Seu perfil foi criado e salvo. Agora você pode usar "
            "todas as funcionalidades do aplicativo."
        ),
        profile=profile
    )
