"""Error taxonomy for the persistence layer and edit sessions.

Recoverable errors (ValidationError, StorageError, CorruptDataError) are
raised by repositories and turned into outcome values at the session
boundary. Precondition errors always propagate: they mean the caller used
the API in the wrong state.
"""
from typing import Iterable, List


class MedbookError(Exception):
    """Base class for all medbook errors."""
    pass


class ValidationError(MedbookError):
    """Raised when required profile fields are missing or blank."""

    def __init__(self, fields: Iterable[str], message: str = None):
        self.fields: List[str] = list(fields)
        if message is None:
            message = (
                "Por favor, preencha todos os campos obrigatórios "
                "(Nome, E-mail, Telefone e CPF)."
            )
        super().__init__(message)
        self.message = message


class StorageError(MedbookError):
    """Raised when the underlying key-value store fails."""

    def __init__(self, message: str, key: str = None):
        super().__init__(message)
        self.key = key


class CorruptDataError(MedbookError):
    """Raised when a stored value exists but cannot be decoded."""

    def __init__(self, message: str, key: str = None):
        super().__init__(message)
        self.key = key


class InvalidTransitionError(MedbookError):
    """Raised when an edit-session operation is called in the wrong mode."""
    pass


class UnknownFieldError(MedbookError):
    """Raised when mutating a field that UserProfile does not define."""
    pass


class SessionBusyError(MedbookError):
    """Raised when a session operation overlaps an in-flight commit."""
    pass


class SessionDisposedError(MedbookError):
    """Raised when a disposed session is used."""
    pass
