"""Exception hierarchy shared by the store, persistence layer and quiz engine."""

from enum import Enum
from typing import Optional


class VocabularyError(Exception):
    """Base class for all MyVocab errors."""


class NotFoundError(VocabularyError):
    """A referenced entity (word, template file, ...) does not exist."""


class DecodeReason(Enum):
    """Why a persisted dataset could not be decoded."""
    MISSING_FIELD = "missing_field"
    TYPE_MISMATCH = "type_mismatch"
    CORRUPTED = "corrupted"


class DecodeFailedError(VocabularyError):
    """
    Persisted data is malformed.

    Attributes:
        reason: DecodeReason sub-kind
        path: JSON path of the offending value (e.g. "words[3].userStatus")
    """

    def __init__(self, reason: DecodeReason, message: str, path: Optional[str] = None):
        self.reason = reason
        self.path = path
        location = f" at '{path}'" if path else ""
        super().__init__(f"{reason.value}{location}: {message}")


class PersistenceError(VocabularyError):
    """Storage-layer failure. Recoverable: in-memory state stays usable."""


class CopyFailedError(PersistenceError):
    """The bundled template could not be copied to the working location."""


class WriteFailedError(PersistenceError):
    """The dataset could not be written to the working copy."""


class InvalidStateError(VocabularyError):
    """API misuse, e.g. reading a quiz summary before the session finished."""


class EmptyPoolError(VocabularyError):
    """A quiz session was started without any eligible words."""
