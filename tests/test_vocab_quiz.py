"""Tests for the console front end."""

import builtins

import pytest

import vocab_quiz
from myvocab.services import SpeechService


@pytest.fixture
def muted():
    return SpeechService(enabled=False)


def feed(monkeypatch, answers):
    replies = iter(answers)
    monkeypatch.setattr(builtins, "input", lambda prompt="": next(replies))


def test_parse_args_defaults():
    args = vocab_quiz.parse_args([])
    assert args.mode == "quiz"
    assert args.mute is False


def test_ask_choice(monkeypatch, capsys):
    feed(monkeypatch, ["9", "two", "2"])
    assert vocab_quiz.ask_choice("> ", 4) == 1
    assert "Please enter 1-4" in capsys.readouterr().out

    feed(monkeypatch, ["q"])
    assert vocab_quiz.ask_choice("> ", 4) is None


def test_run_quiz_answers_every_question(monkeypatch, store, muted, capsys):
    feed(monkeypatch, ["1"] * 3)
    vocab_quiz.run_quiz(store, muted, size=3, category=None)
    out = capsys.readouterr().out
    assert "Quiz finished" in out
    assert sum(w.user_status.review_count for w in store.words) == 2 + 3


def test_run_quiz_unknown_category(store, muted, capsys):
    vocab_quiz.run_quiz(store, muted, size=3, category="cat_404")
    assert "No words" in capsys.readouterr().out


def test_run_learn_skips_and_marks(monkeypatch, store, muted, capsys):
    # w1: skip, w3: learn, then quit at w4
    feed(monkeypatch, ["", "n", "", "y", "q"])
    vocab_quiz.run_learn(store, muted)

    assert not store.get_word("w1").user_status.learned
    assert store.get_word("w3").user_status.learned
    assert store.user.progress.words_learned == 2
    assert "Daily goal reached" in capsys.readouterr().out
