"""Tests for the ProgressAggregator."""

from dataclasses import replace

import pytest

from myvocab.models import Dataset, UserProgress, UserSettings
from myvocab.services import ProgressAggregator, VocabularyStore, compute_accuracy


@pytest.fixture
def progress(store):
    return ProgressAggregator(store)


def test_accuracy_without_reviews_is_zero(profile, make_word):
    store = VocabularyStore(Dataset(user=profile, words=[make_word("a", "x"), make_word("b", "y")]))
    assert ProgressAggregator(store).accuracy() == 0.0
    assert compute_accuracy([]) == 0.0


def test_accuracy(progress, store):
    assert progress.accuracy() == pytest.approx(0.5)
    store.record_review("w1", True)
    store.record_review("w3", False)
    # 2 correct out of 4 reviews
    assert progress.accuracy() == pytest.approx(0.5)
    store.record_review("w4", True)
    assert progress.accuracy() == pytest.approx(3 / 5)


def test_daily_progress(progress, store):
    assert progress.daily_progress() == (1, 2)
    assert progress.daily_progress_fraction() == pytest.approx(0.5)
    assert not progress.is_daily_goal_reached()

    store.mark_learned("w1")
    assert progress.daily_progress() == (0, 2)
    assert progress.daily_progress_fraction() == 0.0
    assert progress.is_daily_goal_reached()

    store.mark_learned("w3")
    assert progress.daily_progress() == (1, 2)
    assert not progress.is_daily_goal_reached()


def test_nothing_learned_is_not_a_reached_goal(profile):
    store = VocabularyStore(Dataset(user=profile))
    progress = ProgressAggregator(store)
    assert progress.daily_progress() == (0, 20)
    assert not progress.is_daily_goal_reached()


def test_fraction_stays_in_range(profile):
    for learned in range(0, 12):
        user = replace(
            profile,
            settings=UserSettings(daily_goal=5),
            progress=UserProgress(words_learned=learned),
        )
        fraction = ProgressAggregator(VocabularyStore(Dataset(user=user))).daily_progress_fraction()
        assert 0.0 <= fraction < 1.0


def test_goal_of_zero_never_divides_by_zero(profile):
    user = replace(profile, settings=UserSettings(daily_goal=0), progress=UserProgress(words_learned=3))
    progress = ProgressAggregator(VocabularyStore(Dataset(user=user)))
    assert progress.daily_progress() == (0, 1)
    assert progress.is_daily_goal_reached()


def test_counts(progress, store):
    assert progress.learned_count() == 1
    assert progress.reviewed_count() == 1

    store.record_review("w4", False)
    assert progress.learned_count() == 1
    assert progress.reviewed_count() == 2


def test_category_breakdown(progress):
    df = progress.category_breakdown()
    assert list(df.columns) == ["category_id", "name", "words", "learned", "reviewed", "accuracy"]

    rows = {row.category_id: row for row in df.itertuples(index=False)}
    assert rows["cat_001"].name == "Business"
    assert (rows["cat_001"].words, rows["cat_001"].learned, rows["cat_001"].reviewed) == (3, 1, 1)
    assert rows["cat_001"].accuracy == pytest.approx(0.5)
    assert (rows["cat_002"].words, rows["cat_002"].learned) == (2, 0)
    assert rows["cat_002"].accuracy == 0.0


def test_category_breakdown_empty(profile):
    df = ProgressAggregator(VocabularyStore(Dataset(user=profile))).category_breakdown()
    assert df.empty


def test_snapshot(progress, store):
    store.mark_learned("w1")
    snapshot = progress.snapshot()
    assert snapshot.learned_count == 2
    assert snapshot.words_learned == 2
    assert (snapshot.daily_done, snapshot.daily_goal) == (0, 2)
    assert snapshot.daily_goal_reached
    assert snapshot.streak == 3
    assert snapshot.accuracy == pytest.approx(2 / 3)
