"""Services layer for business logic separation."""

from .repository import BaseRepository, JSONRepository
from .vocabulary_store import VocabularyStore
from .progress_service import ProgressAggregator, ProgressSnapshot, compute_accuracy
from .quiz_service import Feedback, Question, QuizSession, QuizState, QuizSummary
from .speech_service import SpeechService

__all__ = [
    "BaseRepository",
    "JSONRepository",
    "VocabularyStore",
    "ProgressAggregator",
    "ProgressSnapshot",
    "compute_accuracy",
    "Feedback",
    "Question",
    "QuizSession",
    "QuizState",
    "QuizSummary",
    "SpeechService",
]
