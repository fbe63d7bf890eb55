"""
Quiz Service - multiple-choice quiz session engine.

One QuizSession runs one attempt as a small state machine:

    NOT_STARTED -> AWAITING_ANSWER -> FEEDBACK -> (AWAITING_ANSWER | FINISHED)

Each question shows a word and asks for its first definition. Wrong options
are distinct definitions of other words; when a pool has too few of them the
question simply has fewer options.
"""

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Sequence, Tuple

from ..config import Config
from ..errors import EmptyPoolError, InvalidStateError, NotFoundError
from ..models import Word

if TYPE_CHECKING:
    from .vocabulary_store import VocabularyStore

logger = logging.getLogger(__name__)


class QuizState(Enum):
    """Quiz session states."""
    NOT_STARTED = "not_started"
    AWAITING_ANSWER = "awaiting_answer"
    FEEDBACK = "feedback"
    FINISHED = "finished"


@dataclass(frozen=True)
class Question:
    """One multiple-choice question."""
    word: Word
    options: Tuple[str, ...]
    correct_index: int

    @property
    def prompt(self) -> str:
        return self.word.word

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_index]


@dataclass(frozen=True)
class Feedback:
    """Outcome of one submitted answer."""
    word: Word
    selected_option: str
    correct_option: str
    is_correct: bool
    score: int


@dataclass(frozen=True)
class QuizSummary:
    """End-of-session report."""
    total_score: int
    total_questions: int
    mistakes: Tuple[Word, ...]
    elapsed_seconds: float = 0.0

    @property
    def correct_answers(self) -> int:
        return self.total_questions - len(self.mistakes)

    @property
    def accuracy(self) -> float:
        if self.total_questions == 0:
            return 0.0
        return self.correct_answers / self.total_questions


class QuizSession:
    """
    Multiple-choice quiz engine.

    The engine never changes store data itself: each answer is forwarded
    to ``store.record_review``.

    Usage:
        quiz = QuizSession(store)
        question = quiz.start(store.words, session_size=10)
        feedback = quiz.submit_answer(question.options[0])
        quiz.advance()
        ...
        report = quiz.summary()
    """

    REWARD = Config.REWARD
    OPTION_COUNT = Config.OPTION_COUNT

    def __init__(
        self,
        store: Optional["VocabularyStore"] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        strict: Optional[bool] = None,
    ):
        """
        Initialize a quiz session.

        Args:
            store: Store receiving review results (None: results are not recorded)
            rng: Random source for sampling and shuffling
            clock: Monotonic time source for the session timer
            strict: Raise InvalidStateError on misuse (defaults to
                    Config.STRICT_MODE); otherwise log and ignore the call
        """
        self._store = store
        self._rng = rng or random.Random()
        self._clock = clock
        self._strict = Config.STRICT_MODE if strict is None else strict
        self._reset()

    def _reset(self) -> None:
        self._state = QuizState.NOT_STARTED
        self._words: List[Word] = []
        self._distractor_pool: Sequence[Word] = ()
        self._index = 0
        self._question: Optional[Question] = None
        self._feedback: Optional[Feedback] = None
        self._score = 0
        self._mistakes: List[Word] = []
        self._started_at: Optional[float] = None
        self._finished_at: Optional[float] = None

    # ==================== Snapshots ====================

    @property
    def state(self) -> QuizState:
        return self._state

    @property
    def score(self) -> int:
        return self._score

    @property
    def current_question(self) -> Optional[Question]:
        """The question being asked or just answered."""
        return self._question

    @property
    def last_feedback(self) -> Optional[Feedback]:
        return self._feedback

    @property
    def question_number(self) -> int:
        """1-based number of the current question (0 before start)."""
        if self._state is QuizState.NOT_STARTED:
            return 0
        return min(self._index + 1, len(self._words))

    @property
    def total_questions(self) -> int:
        return len(self._words)

    @property
    def progress(self) -> Tuple[int, int]:
        """(answered questions, total questions)."""
        answered = self._index + (1 if self._state in (QuizState.FEEDBACK, QuizState.FINISHED) else 0)
        return min(answered, len(self._words)), len(self._words)

    @property
    def mistakes(self) -> Tuple[Word, ...]:
        return tuple(self._mistakes)

    @property
    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        end = self._finished_at if self._finished_at is not None else self._clock()
        return end - self._started_at

    # ==================== State checks ====================

    def _check_state(self, expected: QuizState, action: str) -> bool:
        if self._state is expected:
            return True
        message = f"Cannot {action} in state {self._state.value} (expected {expected.value})"
        if self._strict:
            raise InvalidStateError(message)
        logger.error(message)
        return False

    # ==================== Session lifecycle ====================

    def start(
        self,
        source_pool: Iterable[Word],
        session_size: int = Config.SESSION_SIZE,
        distractor_pool: Optional[Iterable[Word]] = None,
    ) -> Optional[Question]:
        """
        Start a session and return its first question.

        Args:
            source_pool: Words to ask about (any iterable, read once)
            session_size: Maximum number of questions
            distractor_pool: Words supplying wrong options (defaults to source_pool)

        Returns:
            The first question

        Raises:
            EmptyPoolError: no word in the pool has a definition
            InvalidStateError: the session was already started (strict mode)
        """
        if not self._check_state(QuizState.NOT_STARTED, "start a session"):
            return None

        # Pools may be one-shot iterators such as store.unlearned_words()
        pool = tuple(source_pool)
        candidates = self._eligible(pool)
        if not candidates:
            raise EmptyPoolError("No words with definitions are available for a quiz")
        if session_size < 1:
            raise ValueError(f"session_size must be at least 1, got {session_size}")

        self._words = self._rng.sample(candidates, min(session_size, len(candidates)))
        self._distractor_pool = tuple(distractor_pool) if distractor_pool is not None else pool
        self._index = 0
        self._score = 0
        self._mistakes = []
        self._feedback = None
        self._started_at = self._clock()
        self._finished_at = None

        self._question = self.generate_question(self._words[0], self._distractor_pool)
        self._state = QuizState.AWAITING_ANSWER
        logger.debug("Quiz started with %d questions", len(self._words))
        return self._question

    @staticmethod
    def _eligible(pool: Sequence[Word]) -> List[Word]:
        """Distinct words (by id) that have a definition to ask for."""
        seen = set()
        eligible = []
        skipped = 0
        for word in pool:
            if word.id in seen:
                continue
            seen.add(word.id)
            if word.primary_definition is None:
                skipped += 1
                continue
            eligible.append(word)
        if skipped:
            logger.warning("Skipped %d word(s) without definitions", skipped)
        return eligible

    def generate_question(self, word: Word, full_pool: Sequence[Word]) -> Question:
        """
        Build a question for a word.

        The correct option is the word's first definition. Up to
        OPTION_COUNT - 1 distinct definitions from other pool words are
        added as distractors, then all options are shuffled.

        Raises:
            ValueError: the word has no definitions
        """
        correct = word.primary_definition
        if correct is None:
            raise ValueError(f"Word '{word.id}' has no definitions")

        # dict keeps first-seen order so sampling is reproducible with a seeded rng
        alternatives = list(dict.fromkeys(
            w.primary_definition
            for w in full_pool
            if w.primary_definition is not None and w.primary_definition != correct
        ))
        wanted = self.OPTION_COUNT - 1
        distractors = self._rng.sample(alternatives, min(wanted, len(alternatives)))
        if len(distractors) < wanted:
            logger.debug(
                "Only %d distractor(s) available for '%s'", len(distractors), word.word
            )

        options = [correct, *distractors]
        self._rng.shuffle(options)
        return Question(word=word, options=tuple(options), correct_index=options.index(correct))

    def submit_answer(self, selected_option: str) -> Optional[Feedback]:
        """
        Score the answer to the current question.

        Args:
            selected_option: Option text chosen by the user

        Returns:
            Feedback for the answer

        Raises:
            InvalidStateError: no question is awaiting an answer (strict mode)
        """
        if not self._check_state(QuizState.AWAITING_ANSWER, "submit an answer"):
            return None

        question = self._question
        is_correct = selected_option == question.correct_option
        if is_correct:
            self._score += self.REWARD
        else:
            self._mistakes.append(question.word)

        self._feedback = Feedback(
            word=question.word,
            selected_option=selected_option,
            correct_option=question.correct_option,
            is_correct=is_correct,
            score=self._score,
        )
        self._state = QuizState.FEEDBACK
        self._forward_review(question.word, is_correct)
        return self._feedback

    def submit_index(self, option_index: int) -> Optional[Feedback]:
        """Answer by option position instead of text."""
        if not self._check_state(QuizState.AWAITING_ANSWER, "submit an answer"):
            return None
        options = self._question.options
        if not 0 <= option_index < len(options):
            message = f"Option {option_index} out of range (0-{len(options) - 1})"
            if self._strict:
                raise IndexError(message)
            logger.error(message)
            return None
        return self.submit_answer(options[option_index])

    def _forward_review(self, word: Word, is_correct: bool) -> None:
        # The answer is already scored; recording it must not undo that
        if self._store is None:
            return
        try:
            self._store.record_review(word.id, is_correct)
        except NotFoundError:
            logger.warning("Quiz word '%s' is not in the store; review not recorded", word.id)
        except Exception:
            logger.exception("Recording the review of '%s' failed", word.id)

    def advance(self) -> Optional[Question]:
        """
        Move past the feedback.

        Returns:
            The next question, or None when the session has finished

        Raises:
            InvalidStateError: not showing feedback (strict mode)
        """
        if not self._check_state(QuizState.FEEDBACK, "advance"):
            return None

        if self._index + 1 < len(self._words):
            self._index += 1
            self._question = self.generate_question(self._words[self._index], self._distractor_pool)
            self._feedback = None
            self._state = QuizState.AWAITING_ANSWER
            return self._question

        self._state = QuizState.FINISHED
        self._finished_at = self._clock()
        logger.debug("Quiz finished: score %d, %d mistake(s)", self._score, len(self._mistakes))
        return None

    def summary(self) -> Optional[QuizSummary]:
        """
        End-of-session report.

        Raises:
            InvalidStateError: the session has not finished (strict mode)
        """
        if not self._check_state(QuizState.FINISHED, "read the summary"):
            return None
        return QuizSummary(
            total_score=self._score,
            total_questions=len(self._words),
            mistakes=tuple(self._mistakes),
            elapsed_seconds=self.elapsed_seconds,
        )

    def restart(
        self,
        source_pool: Iterable[Word],
        session_size: int = Config.SESSION_SIZE,
        distractor_pool: Optional[Iterable[Word]] = None,
    ) -> Optional[Question]:
        """Discard the current attempt and start a new one."""
        self._reset()
        return self.start(source_pool, session_size, distractor_pool)
