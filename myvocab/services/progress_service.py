"""
Progress Service - derived learning metrics.

Everything here is recomputed from the store's current state on each call;
nothing is cached and nothing is mutated.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Tuple

import pandas as pd

from ..models import Word

if TYPE_CHECKING:
    from .vocabulary_store import VocabularyStore


def compute_accuracy(words: Iterable[Word]) -> float:
    """Total correct answers over total reviews; 0.0 when nothing was reviewed."""
    correct = 0
    reviewed = 0
    for word in words:
        correct += word.user_status.correct_count
        reviewed += word.user_status.review_count
    if reviewed == 0:
        return 0.0
    return correct / reviewed


@dataclass(frozen=True)
class ProgressSnapshot:
    """Read-only progress figures for the presentation layer."""
    accuracy: float
    learned_count: int
    reviewed_count: int
    words_learned: int
    daily_goal: int
    daily_done: int
    daily_fraction: float
    daily_goal_reached: bool
    streak: int
    total_score: int


class ProgressAggregator:
    """
    Progress metrics over a VocabularyStore.

    Usage:
        progress = ProgressAggregator(store)
        progress.accuracy()
        progress.daily_progress_fraction()
    """

    def __init__(self, store: "VocabularyStore"):
        self._store = store

    def _goal(self) -> int:
        # The store clamps dailyGoal at its write boundary
        return self._store.user.settings.daily_goal

    def accuracy(self) -> float:
        return compute_accuracy(self._store.words)

    def daily_progress(self) -> Tuple[int, int]:
        """Return (words learned in the current goal cycle, daily goal)."""
        goal = self._goal()
        return self._store.user.progress.words_learned % goal, goal

    def daily_progress_fraction(self) -> float:
        done, goal = self.daily_progress()
        return done / goal

    def is_daily_goal_reached(self) -> bool:
        learned = self._store.user.progress.words_learned
        return learned > 0 and learned % self._goal() == 0

    def learned_count(self) -> int:
        """Number of words whose status is learned."""
        return sum(1 for w in self._store.words if w.user_status.learned)

    def reviewed_count(self) -> int:
        """Number of words reviewed at least once."""
        return sum(1 for w in self._store.words if w.user_status.review_count > 0)

    def category_breakdown(self) -> pd.DataFrame:
        """
        Per-category counts.

        Words pointing at an unknown category are grouped under their raw
        category id with an empty name.

        Returns:
            DataFrame with columns category_id, name, words, learned,
            reviewed, accuracy (one row per category id, sorted by id)
        """
        columns = ["category_id", "name", "words", "learned", "reviewed", "accuracy"]
        words = self._store.to_dataframe()
        if words.empty:
            return pd.DataFrame(columns=columns)

        words["reviewed"] = words["review_count"] > 0
        grouped = words.groupby("category_id").agg(
            words=("id", "count"),
            learned=("learned", "sum"),
            reviewed=("reviewed", "sum"),
            review_total=("review_count", "sum"),
            correct_total=("correct_count", "sum"),
        ).reset_index()

        grouped["accuracy"] = (
            grouped["correct_total"] / grouped["review_total"].where(grouped["review_total"] > 0)
        ).fillna(0.0)
        names = {c.id: c.name for c in self._store.categories}
        grouped["name"] = grouped["category_id"].map(names).fillna("")
        grouped[["learned", "reviewed"]] = grouped[["learned", "reviewed"]].astype(int)
        return grouped[columns]

    def snapshot(self) -> ProgressSnapshot:
        user = self._store.user
        done, goal = self.daily_progress()
        return ProgressSnapshot(
            accuracy=self.accuracy(),
            learned_count=self.learned_count(),
            reviewed_count=self.reviewed_count(),
            words_learned=user.progress.words_learned,
            daily_goal=goal,
            daily_done=done,
            daily_fraction=done / goal,
            daily_goal_reached=self.is_daily_goal_reached(),
            streak=user.streak,
            total_score=user.total_score,
        )
