"""
MyVocab: console vocabulary trainer
-----------------------------------

Runs a multiple-choice quiz or the learn-new-word flow against the local
vocabulary dataset. The first run copies the bundled word list into the
data directory (see MYVOCAB_DATA_DIR).
"""

import argparse
import sys
from typing import List, Optional

from myvocab.config import Config
from myvocab.errors import (
    DecodeFailedError,
    EmptyPoolError,
    NotFoundError,
    VocabularyError,
    WriteFailedError,
)
from myvocab.services import ProgressAggregator, QuizSession, SpeechService, VocabularyStore
from myvocab.utils import setup_logger


def ask_choice(prompt: str, count: int) -> Optional[int]:
    """Read a 1-based choice; None means quit."""
    while True:
        raw = input(prompt).strip().lower()
        if raw in ("q", "quit"):
            return None
        if raw.isdigit() and 1 <= int(raw) <= count:
            return int(raw) - 1
        print(f"Please enter 1-{count} or q.")


def run_quiz(store: VocabularyStore, speech: SpeechService, size: int, category: Optional[str]) -> None:
    pool = list(store.words_by_category(category)) if category else list(store.words)
    quiz = QuizSession(store, strict=False)

    try:
        question = quiz.start(pool, session_size=size, distractor_pool=store.words)
    except EmptyPoolError as e:
        print(f"[!] {e}")
        return

    while question is not None:
        number, total = quiz.question_number, quiz.total_questions
        print(f"\n[{number}/{total}]  {question.prompt}  {question.word.phonetic}   (score {quiz.score})")
        speech.speak(question.prompt)
        for i, option in enumerate(question.options, start=1):
            print(f"  {i}. {option}")

        choice = ask_choice("> ", len(question.options))
        if choice is None:
            print("Quiz aborted.")
            return

        feedback = quiz.submit_index(choice)
        if feedback.is_correct:
            print(f"✓ Correct! +{QuizSession.REWARD}")
        else:
            print(f"✗ Wrong. Answer: {feedback.correct_option}")
        question = quiz.advance()

    report = quiz.summary()
    print("\n=== Quiz finished ===")
    print(f"Score: {report.total_score}   Accuracy: {report.accuracy:.0%}   "
          f"Time: {report.elapsed_seconds:.0f}s")
    if report.mistakes:
        print("Review these:")
        for word in report.mistakes:
            print(f"  - {word.word}: {word.primary_definition}")


def run_learn(store: VocabularyStore, speech: SpeechService) -> None:
    progress = ProgressAggregator(store)
    if store.next_unlearned_word() is None:
        print("No words left to learn.")
        return

    for word in store.unlearned_words():
        done, goal = progress.daily_progress()
        print(f"\n[{done}/{goal}]  {word.word}  {word.phonetic}  ({word.part_of_speech})")
        speech.speak(word.word)
        if input("Press Enter to show the meaning (q to quit) ").strip().lower() == "q":
            return
        for definition in word.definitions:
            print(f"  {definition.definition}")
            if definition.example:
                print(f"    {definition.example}")
                print(f"    {definition.example_translation}")

        answer = input("Mark as learned? [Y/n/q] ").strip().lower()
        if answer == "q":
            return
        if answer == "n":
            continue
        store.mark_learned(word.id)
        if progress.is_daily_goal_reached():
            print("🎉 Daily goal reached!")
    print("That was the last unlearned word.")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="MyVocab console trainer")
    parser.add_argument("mode", nargs="?", choices=("quiz", "learn", "stats", "export"), default="quiz")
    parser.add_argument("-n", "--size", type=int, default=Config.SESSION_SIZE, help="questions per quiz")
    parser.add_argument("-c", "--category", help="limit the quiz to one category id")
    parser.add_argument("--mute", action="store_true", help="disable pronunciation")
    parser.add_argument("-o", "--output", help="CSV path for export mode")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> bool:
    """Main entry point."""
    args = parse_args(argv)
    logger = setup_logger()

    try:
        store = VocabularyStore.load()
    except NotFoundError as e:
        print(f"❌ Error: {e}")
        return False
    except DecodeFailedError as e:
        print(f"❌ Error: the vocabulary file {Config.DATA_FILE} is damaged ({e})")
        return False
    except VocabularyError as e:
        print(f"❌ Error: {e}")
        return False

    store.on_save_error(lambda error: print(f"[!] Progress not saved yet: {error}"))
    speech = SpeechService(enabled=store.user.settings.sound_enabled and not args.mute)

    try:
        if args.mode == "quiz":
            run_quiz(store, speech, args.size, args.category)
        elif args.mode == "learn":
            run_learn(store, speech)
        elif args.mode == "stats":
            progress = ProgressAggregator(store)
            snapshot = progress.snapshot()
            print(f"Learned: {snapshot.learned_count}/{store.count}   "
                  f"Accuracy: {snapshot.accuracy:.0%}   "
                  f"Today: {snapshot.daily_done}/{snapshot.daily_goal}")
            print(progress.category_breakdown().to_string(index=False))
        elif args.mode == "export":
            print(f"Exported to {store.export_csv(args.output)}")
    except (KeyboardInterrupt, EOFError):
        print("\n[!] Interrupted by user.")
    finally:
        store.flush()

    success = True
    if store.save_failed:
        try:
            store.save_now()
        except WriteFailedError as e:
            logger.error("Final save failed: %s", e)
            success = False
    store.close()
    return success


def run() -> None:
    sys.exit(0 if main() else 1)


if __name__ == "__main__":
    run()
