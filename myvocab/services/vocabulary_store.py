"""
Vocabulary Store - the single in-memory owner of a Dataset.

Separates data access from the presentation layer:
- All mutations go through this API and are serialized by a lock
- Every mutation is visible immediately, then persisted in the background
- Lookups are index-backed; category/unlearned views are lazy
"""

import bisect
import logging
from dataclasses import replace
from pathlib import Path
from threading import RLock
from typing import Callable, Dict, Iterator, List, Optional, Tuple

import pandas as pd

from ..config import Config
from ..errors import NotFoundError, PersistenceError
from ..models import Category, Dataset, UserProfile, UserSettings, UserWordStatus, Word
from ..utils import TextParser, ensure_dir, today_iso
from .progress_service import compute_accuracy
from .repository import BaseRepository, JSONRepository

logger = logging.getLogger(__name__)

# Column order for tabular views/exports of the word list
WORD_COLUMNS = [
    "id", "word", "phonetic", "part_of_speech", "difficulty", "frequency",
    "category_id", "definition", "example", "synonyms", "antonyms", "tags",
    "learned", "starred", "review_count", "correct_count", "last_reviewed",
]


class VocabularyStore:
    """
    Owner of the user's vocabulary data.

    One instance per process; pass it to collaborators (quiz sessions,
    progress aggregators, front ends) instead of reaching for global state.

    Usage:
        store = VocabularyStore.load()            # bootstrap or load zdata.json
        word = store.next_unlearned_word()
        store.mark_learned(word.id)               # saved in the background
        store.flush()                             # wait for pending saves
    """

    def __init__(self, dataset: Dataset, repository: Optional[BaseRepository] = None):
        """
        Initialize the store.

        Args:
            dataset: Dataset to own (its lists are copied)
            repository: Persistence gateway; None keeps the store in memory only
        """
        self._repository = repository
        self._lock = RLock()
        self._change_callbacks: List[Callable[[], None]] = []
        self._save_error_callbacks: List[Callable[[Exception], None]] = []
        self.last_save_error: Optional[Exception] = None

        self._dataset = Dataset(
            user=self._clamp_profile(dataset.user),
            categories=list(dataset.categories),
            words=list(dataset.words),
        )
        self._rebuild_index()

    @classmethod
    def load(cls, repository: Optional[BaseRepository] = None) -> "VocabularyStore":
        """
        Factory: initialize the repository and wrap its dataset.

        Raises:
            NotFoundError, CopyFailedError, DecodeFailedError: see
                BaseRepository.initialize
        """
        repository = repository or JSONRepository()
        return cls(repository.initialize(), repository)

    # ==================== Indexes ====================

    def _rebuild_index(self) -> None:
        self._positions: Dict[str, int] = {}
        self._unlearned: List[int] = []
        for pos, word in enumerate(self._dataset.words):
            self._positions[word.id] = pos
            if not word.user_status.learned:
                self._unlearned.append(pos)
        self._categories: Dict[str, Category] = {c.id: c for c in self._dataset.categories}

    def _reindex_learned(self, pos: int, was_learned: bool, is_learned: bool) -> None:
        if was_learned == is_learned:
            return
        if is_learned:
            i = bisect.bisect_left(self._unlearned, pos)
            if i < len(self._unlearned) and self._unlearned[i] == pos:
                del self._unlearned[i]
        else:
            bisect.insort(self._unlearned, pos)

    # ==================== Read access ====================

    @property
    def user(self) -> UserProfile:
        return self._dataset.user

    @property
    def categories(self) -> Tuple[Category, ...]:
        return tuple(self._dataset.categories)

    @property
    def words(self) -> Tuple[Word, ...]:
        return tuple(self._dataset.words)

    @property
    def count(self) -> int:
        """Get total word count."""
        return len(self._dataset.words)

    def get_word(self, word_id: str) -> Optional[Word]:
        pos = self._positions.get(word_id)
        return self._dataset.words[pos] if pos is not None else None

    def get_category(self, category_id: str) -> Optional[Category]:
        return self._categories.get(category_id)

    def words_by_category(self, category_id: str) -> Iterator[Word]:
        """Lazily yield the words of one category, in dataset order."""
        for word in self._dataset.words:
            if word.category_id == category_id:
                yield word

    def unlearned_words(self) -> Iterator[Word]:
        """Lazily yield words not yet learned, in dataset order."""
        with self._lock:
            positions = tuple(self._unlearned)
        for pos in positions:
            yield self._dataset.words[pos]

    def next_unlearned_word(self) -> Optional[Word]:
        """First unlearned word in dataset order, or None when all are learned."""
        with self._lock:
            if not self._unlearned:
                return None
            return self._dataset.words[self._unlearned[0]]

    def starred_words(self) -> Iterator[Word]:
        for word in self._dataset.words:
            if word.user_status.starred:
                yield word

    def search(self, query: str) -> List[Word]:
        """
        Search words by text, definition or tag.

        Args:
            query: Search query (case and Unicode-form insensitive)

        Returns:
            Matching words in dataset order
        """
        needle = TextParser.fold(query)
        if not needle:
            return []

        matches = []
        for word in self._dataset.words:
            haystack = [word.word, *(d.definition for d in word.definitions), *word.tags]
            if any(needle in TextParser.fold(text) for text in haystack):
                matches.append(word)
        return matches

    def snapshot(self) -> Dataset:
        """Detached copy of the current dataset."""
        with self._lock:
            return Dataset(
                user=self._dataset.user,
                categories=list(self._dataset.categories),
                words=list(self._dataset.words),
            )

    # ==================== Mutations ====================

    def _require_position(self, word_id: str) -> int:
        pos = self._positions.get(word_id)
        if pos is None:
            raise NotFoundError(f"Word '{word_id}' not found")
        return pos

    def _replace_status(self, pos: int, status: UserWordStatus) -> Word:
        old = self._dataset.words[pos]
        new = old.with_status(status)
        self._dataset.words[pos] = new
        self._reindex_learned(pos, old.user_status.learned, status.learned)
        return new

    def update_word_status(self, word_id: str, new_status: UserWordStatus) -> Word:
        """
        Replace a word's status record and persist.

        Args:
            word_id: Word identifier
            new_status: Complete replacement status

        Returns:
            The updated word

        Raises:
            NotFoundError: no word with this id
        """
        if not isinstance(new_status, UserWordStatus):
            raise TypeError(f"expected UserWordStatus, got {type(new_status).__name__}")

        with self._lock:
            word = self._replace_status(self._require_position(word_id), new_status)
            self._persist()
        self._notify_change()
        return word

    def record_review(self, word_id: str, correct: bool, reviewed_on: Optional[str] = None) -> Word:
        """
        Record one review outcome (quiz answer, flash-card check).

        The new status is derived from the old one in a single replacement.

        Raises:
            NotFoundError: no word with this id
        """
        with self._lock:
            pos = self._require_position(word_id)
            status = self._dataset.words[pos].user_status.after_review(
                correct, reviewed_on or today_iso()
            )
            return self.update_word_status(word_id, status)

    def mark_learned(self, word_id: str, studied_on: Optional[str] = None) -> Word:
        """
        Learn-new-word flow: mark the word learned and update the profile.

        The status counts a correct review. The profile's words_learned grows
        by one if the word was not learned before; accuracy and last study
        date are refreshed. Both changes go out in one save.

        Raises:
            NotFoundError: no word with this id
        """
        stamp = studied_on or today_iso()
        with self._lock:
            pos = self._require_position(word_id)
            old = self._dataset.words[pos]
            word = self._replace_status(pos, old.user_status.after_review(True, stamp))

            user = self._dataset.user
            progress = replace(
                user.progress,
                words_learned=user.progress.words_learned + (0 if old.user_status.learned else 1),
                accuracy=compute_accuracy(self._dataset.words),
                last_study_date=stamp,
            )
            self._dataset.user = replace(user, progress=progress)
            self._persist()

        goal = self._dataset.user.settings.daily_goal
        if progress.words_learned > 0 and progress.words_learned % goal == 0:
            logger.info("Daily goal of %d words reached", goal)
        self._notify_change()
        return word

    def toggle_starred(self, word_id: str) -> Word:
        """
        Flip a word's starred flag.

        Raises:
            NotFoundError: no word with this id
        """
        with self._lock:
            status = self._dataset.words[self._require_position(word_id)].user_status
            return self.update_word_status(word_id, replace(status, starred=not status.starred))

    def update_user_profile(self, profile: UserProfile) -> None:
        """
        Replace the user profile wholesale and persist.

        The daily goal is clamped to at least 1.

        Raises:
            ValueError: the profile's id or email differ from the current ones
        """
        with self._lock:
            current = self._dataset.user
            if profile.id != current.id or profile.email != current.email:
                raise ValueError("User id and email cannot be changed")
            self._dataset.user = self._clamp_profile(profile)
            self._persist()
        self._notify_change()

    def update_settings(self, settings: UserSettings) -> None:
        """Replace the user's settings (daily goal clamped to at least 1)."""
        with self._lock:
            self.update_user_profile(replace(self._dataset.user, settings=settings))

    @staticmethod
    def _clamp_profile(profile: UserProfile) -> UserProfile:
        if profile.settings.daily_goal >= 1:
            return profile
        logger.warning(
            "dailyGoal %d is not allowed, using 1 instead", profile.settings.daily_goal
        )
        return replace(profile, settings=profile.settings.clamped())

    # ==================== Persistence ====================

    def _persist(self) -> None:
        """Schedule a background save. Caller holds the lock."""
        if self._repository is None:
            return
        try:
            future = self._repository.save_async(self._dataset)
        except RuntimeError as e:
            # executor already shut down
            self._record_save_error(PersistenceError(f"Save could not be scheduled: {e}"))
            return
        future.add_done_callback(self._on_saved)

    def _on_saved(self, future) -> None:
        error = future.exception()
        if error is None:
            if future.result():
                self.last_save_error = None
            return
        self._record_save_error(error)

    def _record_save_error(self, error: Exception) -> None:
        self.last_save_error = error
        if isinstance(error, PersistenceError):
            logger.error("Saving vocabulary failed: %s", error)
        else:
            logger.error("Unexpected error while saving vocabulary", exc_info=error)
        for callback in self._save_error_callbacks:
            try:
                callback(error)
            except Exception:
                logger.exception("Save-error callback failed")

    def save_now(self) -> None:
        """
        Save synchronously, e.g. to retry after a failed background save.

        Raises:
            WriteFailedError: the working copy was left untouched
        """
        if self._repository is None:
            return
        with self._lock:
            try:
                self._repository.save(self._dataset)
            except PersistenceError as e:
                self.last_save_error = e
                raise
            self.last_save_error = None

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for background saves; True when none are pending."""
        if self._repository is None:
            return True
        return self._repository.flush(timeout)

    def close(self) -> None:
        if self._repository is not None:
            self._repository.close()

    @property
    def save_failed(self) -> bool:
        return self.last_save_error is not None

    # ==================== Observers ====================

    def on_change(self, callback: Callable[[], None]) -> None:
        """
        Register a callback for data changes.

        Args:
            callback: Function to call after each mutation
        """
        self._change_callbacks.append(callback)

    def on_save_error(self, callback: Callable[[Exception], None]) -> None:
        """Register a callback for failed background saves."""
        self._save_error_callbacks.append(callback)

    def _notify_change(self) -> None:
        for callback in self._change_callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Change callback failed")

    # ==================== Tabular views ====================

    def to_dataframe(self) -> pd.DataFrame:
        """
        Word list as a DataFrame (one row per word, primary sense only).

        Multi-valued fields are space-separated like the Tags column of
        the CSV vocabulary format.
        """
        rows = []
        for w in self.words:
            first = w.definitions[0] if w.definitions else None
            rows.append({
                "id": w.id,
                "word": w.word,
                "phonetic": w.phonetic,
                "part_of_speech": w.part_of_speech,
                "difficulty": w.difficulty,
                "frequency": w.frequency,
                "category_id": w.category_id,
                "definition": first.definition if first else "",
                "example": first.example if first else "",
                "synonyms": " ".join(w.synonyms),
                "antonyms": " ".join(w.antonyms),
                "tags": " ".join(w.tags),
                "learned": w.user_status.learned,
                "starred": w.user_status.starred,
                "review_count": w.user_status.review_count,
                "correct_count": w.user_status.correct_count,
                "last_reviewed": w.user_status.last_reviewed or "",
            })
        return pd.DataFrame(rows, columns=WORD_COLUMNS)

    def export_csv(self, csv_path: Optional[str] = None) -> Path:
        """
        Export the word list to a pipe-separated CSV file.

        Args:
            csv_path: Target file (defaults to EXPORT_DIR/vocabulary.csv)

        Returns:
            Path of the written file
        """
        path = Path(csv_path or Path(Config.EXPORT_DIR) / "vocabulary.csv")
        ensure_dir(str(path.parent))
        self.to_dataframe().to_csv(path, sep='|', index=False, encoding='utf-8-sig')
        logger.info("Exported %d words to %s", self.count, path)
        return path
