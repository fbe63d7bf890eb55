"""
Vocabulary record model.

Mirrors the on-disk dataset document (camelCase JSON keys) with snake_case
dataclasses. Lexical records are frozen: state changes are made by replacing
a whole record, never by assigning fields.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from ..errors import DecodeFailedError, DecodeReason


# ==================== Decoding helpers ====================

def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _type_name(expected: type) -> str:
    return {str: "string", int: "integer", float: "number", bool: "boolean",
            list: "array", dict: "object"}.get(expected, expected.__name__)


def _matches(value: Any, expected: type) -> bool:
    # bool is a subclass of int; JSON true/false is never a number here
    if expected in (int, float) and isinstance(value, bool):
        return False
    if expected is float:
        return isinstance(value, (int, float))
    return isinstance(value, expected)


def _require_object(data: Any, path: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeFailedError(
            DecodeReason.TYPE_MISMATCH,
            f"expected object, got {type(data).__name__}",
            path or None,
        )
    return data


def _get(data: Dict[str, Any], key: str, expected: type, path: str, optional: bool = False) -> Any:
    """Fetch data[key], checking presence and JSON type."""
    key_path = _join(path, key)
    value = data.get(key)
    if value is None:
        if optional:
            return None
        raise DecodeFailedError(DecodeReason.MISSING_FIELD, f"required field '{key}' is missing", key_path)
    if not _matches(value, expected):
        raise DecodeFailedError(
            DecodeReason.TYPE_MISMATCH,
            f"expected {_type_name(expected)}, got {type(value).__name__}",
            key_path,
        )
    return float(value) if expected is float else value


def _get_strings(data: Dict[str, Any], key: str, path: str) -> Tuple[str, ...]:
    items = _get(data, key, list, path)
    for i, item in enumerate(items):
        if not isinstance(item, str):
            raise DecodeFailedError(
                DecodeReason.TYPE_MISMATCH,
                f"expected string, got {type(item).__name__}",
                f"{_join(path, key)}[{i}]",
            )
    return tuple(items)


# ==================== User ====================

@dataclass(frozen=True)
class UserSettings:
    """Per-user preferences."""
    daily_goal: int = 20
    notifications: bool = True
    sound_enabled: bool = True
    theme: str = "light"

    def clamped(self) -> "UserSettings":
        """Return settings whose daily goal is at least 1."""
        if self.daily_goal >= 1:
            return self
        return replace(self, daily_goal=1)

    @classmethod
    def from_dict(cls, data: Any, path: str = "settings") -> "UserSettings":
        data = _require_object(data, path)
        return cls(
            daily_goal=_get(data, "dailyGoal", int, path),
            notifications=_get(data, "notifications", bool, path),
            sound_enabled=_get(data, "soundEnabled", bool, path),
            theme=_get(data, "theme", str, path),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dailyGoal": self.daily_goal,
            "notifications": self.notifications,
            "soundEnabled": self.sound_enabled,
            "theme": self.theme,
        }


@dataclass(frozen=True)
class UserProgress:
    """Cumulative learning counters stored on the profile."""
    words_learned: int = 0
    words_reviewed: int = 0
    accuracy: float = 0.0
    last_study_date: str = ""

    @classmethod
    def from_dict(cls, data: Any, path: str = "progress") -> "UserProgress":
        data = _require_object(data, path)
        return cls(
            words_learned=_get(data, "wordsLearned", int, path),
            words_reviewed=_get(data, "wordsReviewed", int, path),
            accuracy=_get(data, "accuracy", float, path),
            last_study_date=_get(data, "lastStudyDate", str, path),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wordsLearned": self.words_learned,
            "wordsReviewed": self.words_reviewed,
            "accuracy": self.accuracy,
            "lastStudyDate": self.last_study_date,
        }


@dataclass(frozen=True)
class UserProfile:
    """The single user of a dataset. ``id`` and ``email`` never change."""
    id: str
    name: str
    email: str
    level: str
    total_score: int = 0
    streak: int = 0
    settings: UserSettings = field(default_factory=UserSettings)
    progress: UserProgress = field(default_factory=UserProgress)

    @classmethod
    def from_dict(cls, data: Any, path: str = "user") -> "UserProfile":
        data = _require_object(data, path)
        return cls(
            id=_get(data, "id", str, path),
            name=_get(data, "name", str, path),
            email=_get(data, "email", str, path),
            level=_get(data, "level", str, path),
            total_score=_get(data, "totalScore", int, path),
            streak=_get(data, "streak", int, path),
            settings=UserSettings.from_dict(_get(data, "settings", dict, path), _join(path, "settings")),
            progress=UserProgress.from_dict(_get(data, "progress", dict, path), _join(path, "progress")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "level": self.level,
            "totalScore": self.total_score,
            "streak": self.streak,
            "settings": self.settings.to_dict(),
            "progress": self.progress.to_dict(),
        }


# ==================== Categories ====================

@dataclass(frozen=True)
class Category:
    """Read-only reference data grouping words."""
    id: str
    name: str
    description: str = ""
    color: str = ""
    icon: str = ""
    word_count: int = 0
    difficulty: str = ""

    @classmethod
    def from_dict(cls, data: Any, path: str = "category") -> "Category":
        data = _require_object(data, path)
        return cls(
            id=_get(data, "id", str, path),
            name=_get(data, "name", str, path),
            description=_get(data, "description", str, path),
            color=_get(data, "color", str, path),
            icon=_get(data, "icon", str, path),
            word_count=_get(data, "wordCount", int, path),
            difficulty=_get(data, "difficulty", str, path),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "icon": self.icon,
            "wordCount": self.word_count,
            "difficulty": self.difficulty,
        }


# ==================== Words ====================

@dataclass(frozen=True)
class Definition:
    """One sense of a word with an example sentence."""
    definition: str
    example: str = ""
    example_translation: str = ""

    @classmethod
    def from_dict(cls, data: Any, path: str = "definition") -> "Definition":
        data = _require_object(data, path)
        return cls(
            definition=_get(data, "definition", str, path),
            example=_get(data, "example", str, path),
            example_translation=_get(data, "exampleTranslation", str, path),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "definition": self.definition,
            "example": self.example,
            "exampleTranslation": self.example_translation,
        }


@dataclass(frozen=True)
class UserWordStatus:
    """
    Learning state of one word.

    Invariant: 0 <= correct_count <= review_count. Construction fails with
    ValueError otherwise, so an invalid status can never reach the store.
    """
    learned: bool = False
    starred: bool = False
    review_count: int = 0
    correct_count: int = 0
    last_reviewed: Optional[str] = None
    next_review: Optional[str] = None

    def __post_init__(self) -> None:
        if self.review_count < 0 or self.correct_count < 0:
            raise ValueError("review_count and correct_count must not be negative")
        if self.correct_count > self.review_count:
            raise ValueError(
                f"correct_count ({self.correct_count}) exceeds review_count ({self.review_count})"
            )

    def after_review(self, correct: bool, reviewed_on: Optional[str] = None) -> "UserWordStatus":
        """
        Compute the status that follows one review.

        Both counters move in the same replacement, so the invariant holds
        even if the caller is interrupted.

        Args:
            correct: Whether the word was answered correctly
            reviewed_on: Date stamp for last_reviewed (kept unchanged if None)

        Returns:
            New UserWordStatus
        """
        return replace(
            self,
            learned=self.learned or correct,
            review_count=self.review_count + 1,
            correct_count=self.correct_count + (1 if correct else 0),
            last_reviewed=reviewed_on if reviewed_on is not None else self.last_reviewed,
        )

    @classmethod
    def from_dict(cls, data: Any, path: str = "userStatus") -> "UserWordStatus":
        data = _require_object(data, path)
        try:
            return cls(
                learned=_get(data, "learned", bool, path),
                starred=_get(data, "starred", bool, path),
                review_count=_get(data, "reviewCount", int, path),
                correct_count=_get(data, "correctCount", int, path),
                last_reviewed=_get(data, "lastReviewed", str, path, optional=True),
                next_review=_get(data, "nextReview", str, path, optional=True),
            )
        except ValueError as e:
            raise DecodeFailedError(DecodeReason.CORRUPTED, str(e), path) from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "learned": self.learned,
            "starred": self.starred,
            "reviewCount": self.review_count,
            "correctCount": self.correct_count,
            "lastReviewed": self.last_reviewed,
            "nextReview": self.next_review,
        }


@dataclass(frozen=True)
class Word:
    """A vocabulary entry: immutable lexical facts plus the learner's status."""
    id: str
    word: str
    phonetic: str = ""
    part_of_speech: str = ""
    difficulty: str = ""
    frequency: float = 0.0
    category_id: str = ""
    definitions: Tuple[Definition, ...] = ()
    synonyms: Tuple[str, ...] = ()
    antonyms: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    audio_url: str = ""
    image_url: str = ""
    date_added: str = ""
    user_status: UserWordStatus = field(default_factory=UserWordStatus)

    @property
    def primary_definition(self) -> Optional[str]:
        """First definition text, the answer used by quizzes."""
        return self.definitions[0].definition if self.definitions else None

    def with_status(self, status: UserWordStatus) -> "Word":
        return replace(self, user_status=status)

    @classmethod
    def from_dict(cls, data: Any, path: str = "word") -> "Word":
        data = _require_object(data, path)
        definitions_path = _join(path, "definitions")
        definitions = tuple(
            Definition.from_dict(item, f"{definitions_path}[{i}]")
            for i, item in enumerate(_get(data, "definitions", list, path))
        )
        return cls(
            id=_get(data, "id", str, path),
            word=_get(data, "word", str, path),
            phonetic=_get(data, "phonetic", str, path),
            part_of_speech=_get(data, "partOfSpeech", str, path),
            difficulty=_get(data, "difficulty", str, path),
            frequency=_get(data, "frequency", float, path),
            category_id=_get(data, "categoryId", str, path),
            definitions=definitions,
            synonyms=_get_strings(data, "synonyms", path),
            antonyms=_get_strings(data, "antonyms", path),
            tags=_get_strings(data, "tags", path),
            audio_url=_get(data, "audioUrl", str, path),
            image_url=_get(data, "imageUrl", str, path),
            date_added=_get(data, "dateAdded", str, path),
            user_status=UserWordStatus.from_dict(
                _get(data, "userStatus", dict, path), _join(path, "userStatus")
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "word": self.word,
            "phonetic": self.phonetic,
            "partOfSpeech": self.part_of_speech,
            "difficulty": self.difficulty,
            "frequency": self.frequency,
            "categoryId": self.category_id,
            "definitions": [d.to_dict() for d in self.definitions],
            "synonyms": list(self.synonyms),
            "antonyms": list(self.antonyms),
            "tags": list(self.tags),
            "audioUrl": self.audio_url,
            "imageUrl": self.image_url,
            "dateAdded": self.date_added,
            "userStatus": self.user_status.to_dict(),
        }


# ==================== Aggregate root ====================

@dataclass
class Dataset:
    """Everything persisted for one user: profile, categories and words."""
    user: UserProfile
    categories: List[Category] = field(default_factory=list)
    words: List[Word] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Dataset":
        """
        Decode a dataset document.

        Raises:
            DecodeFailedError: on missing fields, wrong types, duplicate
                word ids or counters that break the status invariant
        """
        data = _require_object(data, "")
        user = UserProfile.from_dict(_get(data, "user", dict, ""), "user")
        categories = [
            Category.from_dict(item, f"categories[{i}]")
            for i, item in enumerate(_get(data, "categories", list, ""))
        ]
        words = [
            Word.from_dict(item, f"words[{i}]")
            for i, item in enumerate(_get(data, "words", list, ""))
        ]

        seen = set()
        for i, word in enumerate(words):
            if word.id in seen:
                raise DecodeFailedError(
                    DecodeReason.CORRUPTED, f"duplicate word id '{word.id}'", f"words[{i}].id"
                )
            seen.add(word.id)

        return cls(user=user, categories=categories, words=words)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user": self.user.to_dict(),
            "categories": [c.to_dict() for c in self.categories],
            "words": [w.to_dict() for w in self.words],
        }
