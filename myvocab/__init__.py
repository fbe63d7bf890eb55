"""MyVocab - personal vocabulary trainer"""

__version__ = "1.0.0"
__author__ = "MyVocab Team"

from .config import Config
from .errors import (
    CopyFailedError,
    DecodeFailedError,
    DecodeReason,
    EmptyPoolError,
    InvalidStateError,
    NotFoundError,
    PersistenceError,
    VocabularyError,
    WriteFailedError,
)
from .models import Dataset, UserProfile, UserSettings, UserWordStatus, Word
from .services import (
    JSONRepository,
    ProgressAggregator,
    QuizSession,
    QuizState,
    SpeechService,
    VocabularyStore,
)

__all__ = [
    'Config',
    'CopyFailedError',
    'DecodeFailedError',
    'DecodeReason',
    'EmptyPoolError',
    'InvalidStateError',
    'NotFoundError',
    'PersistenceError',
    'VocabularyError',
    'WriteFailedError',
    'Dataset',
    'UserProfile',
    'UserSettings',
    'UserWordStatus',
    'Word',
    'JSONRepository',
    'ProgressAggregator',
    'QuizSession',
    'QuizState',
    'SpeechService',
    'VocabularyStore',
]
