"""CLI interface for Hebrew Quiz.

Usage:
    python -m hebrew_quiz quiz [--topic colors]   Start a quiz session
    python -m hebrew_quiz level numbers-2-math    Play a level
    python -m hebrew_quiz levels [--topic verbs]  List levels and lock state
    python -m hebrew_quiz stats                   Show your progress
    python -m hebrew_quiz reset --yes             Wipe all progress
"""

import argparse
import asyncio
import logging
import time

from backend.config import settings
from backend.database import async_session, engine
from backend.models import Base
from backend.srs.scheduling import is_due
from backend.srs.session import SessionController
from backend.storage import SnapshotStore
from backend.vocab.topics import ALL_TOPICS, topic_level
from backend.vocab.types import Topic


async def ensure_db() -> None:
    """Create tables if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def open_controller() -> SessionController:
    """Build a controller backed by the database, with saved progress restored."""
    await ensure_db()
    controller = SessionController(store=SnapshotStore(async_session))
    await controller.hydrate()
    controller.load_items()
    return controller


def play(controller: SessionController) -> None:
    """Ask every question of the active session on the terminal."""
    while (question := controller.current_item()) is not None:
        progress = controller.session_progress()
        print(f"  [{progress.current + 1}/{progress.total}]")
        if question.prompt_native:
            print(f"  {question.prompt_native}")
        if question.prompt_target and question.prompt_target != question.prompt_native:
            print(f"  {question.prompt_target}")
        for j, opt in enumerate(question.options, 1):
            print(f"    {j}. {opt}")

        start_time = time.time()
        response = input("\n  Your answer: ").strip()
        latency_ms = int((time.time() - start_time) * 1000)

        if response.lower() == "q":
            print("\n  Session ended early.")
            return

        if response.isdigit() and 1 <= int(response) <= len(question.options):
            response = question.options[int(response) - 1]

        is_correct = response.casefold() == question.answer.casefold()
        controller.answer(question.id, is_correct, latency_ms)

        if is_correct:
            print(f"  Correct! (+XP, streak {controller.progress.streak})\n")
        else:
            print(f"  The answer was: {question.answer}\n")


def print_summary(controller: SessionController) -> None:
    print("\n  Session Complete!")
    print(
        f"  Accuracy: {controller.session_accuracy()}%  "
        f"Avg time: {controller.session_average_latency() / 1000:.1f}s"
    )
    p = controller.progress
    print(f"  Level {p.level}  XP {p.xp}/{controller.get_next_level_xp()}\n")


async def cmd_quiz(args: argparse.Namespace) -> None:
    """Run an interactive topic quiz."""
    controller = await open_controller()
    queue = controller.start_session(args.topic, args.size)
    if queue is None or queue.total == 0:
        print("\n  No questions available. Check the vocabulary file.")
        return

    print(f"\n  Quiz: {args.topic or 'all topics'} ({queue.total} questions)")
    print("  Pick an option number or type the answer. Type 'q' to quit\n")
    play(controller)
    print_summary(controller)
    controller.end_session()
    await controller.flush()


async def cmd_level(args: argparse.Namespace) -> None:
    """Play a level session."""
    controller = await open_controller()
    if args.level_id in controller.levels and not controller.is_level_unlocked(args.level_id):
        print(f"\n  Level {args.level_id} is locked. Complete the previous level first.")
        return

    queue = controller.start_level(args.level_id)
    if queue is None:
        print(f"\n  Cannot start level: {controller.level_error}")
        return

    print(f"\n  {controller.levels[args.level_id].title} ({queue.total} questions)\n")
    play(controller)
    print_summary(controller)
    controller.end_session()
    record = controller.level_progress.get(args.level_id)
    if record is not None:
        status = "completed" if record.completed else "not yet completed"
        print(f"  Level {status} (average {record.accuracy}% over {record.attempts} attempts)\n")
    await controller.flush()


async def cmd_levels(args: argparse.Namespace) -> None:
    """List levels per topic with their lock state."""
    controller = await open_controller()
    topics = [Topic(args.topic)] if args.topic else ALL_TOPICS
    for topic in topics:
        print(f"\n  {topic.value} ({topic_level(topic).value})")
        for level in controller.get_levels_for_topic(topic):
            record = controller.level_progress.get(level.id)
            if record is not None and record.completed:
                mark = "done"
            elif controller.is_level_unlocked(level.id):
                mark = "open"
            else:
                mark = "locked"
            print(f"    {level.id:<28} {mark:<7} {level.title}")
    print()


async def cmd_stats(args: argparse.Namespace) -> None:
    """Show player progress and how many items are due."""
    controller = await open_controller()
    p = controller.progress
    due = sum(1 for stats in controller.stats_table.values() if is_due(stats))
    seen = len(controller.stats_table)

    print("\n  Hebrew Quiz Statistics")
    print(f"  {'Level:':<20} {p.level}")
    print(f"  {'XP:':<20} {p.xp}/{controller.get_next_level_xp()}")
    print(f"  {'Streak:':<20} {p.streak}")
    print(f"  {'Items seen:':<20} {seen}/{len(controller.items)}")
    print(f"  {'Due now:':<20} {due}")
    for topic in ALL_TOPICS:
        print(f"  {topic.value + ':':<20} {p.topic_mastery.get(topic, 0)}%")
    print()


async def cmd_reset(args: argparse.Namespace) -> None:
    """Wipe statistics, progress and level records."""
    if not args.yes:
        print("  Refusing to reset without --yes")
        return
    controller = await open_controller()
    await controller.reset_progress()
    print(f"  Progress reset (data version {settings.data_version})")


def main() -> None:
    """Entry point for the Hebrew Quiz CLI application."""
    parser = argparse.ArgumentParser(
        prog="hebrew_quiz",
        description="Adaptive vocabulary quiz with spaced repetition",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    topic_choices = [t.value for t in Topic]

    # quiz
    quiz_parser = subparsers.add_parser("quiz", help="Start a quiz session")
    quiz_parser.add_argument("-t", "--topic", choices=topic_choices, help="Limit to one topic")
    quiz_parser.add_argument(
        "-n", "--size", type=int, default=settings.default_session_size, help="Questions per session"
    )

    # level
    level_parser = subparsers.add_parser("level", help="Play a level")
    level_parser.add_argument("level_id", help="Level id, e.g. numbers-1-flashcards")

    # levels
    levels_parser = subparsers.add_parser("levels", help="List levels")
    levels_parser.add_argument("-t", "--topic", choices=topic_choices, help="Only this topic")

    # stats
    subparsers.add_parser("stats", help="Show your progress")

    # reset
    reset_parser = subparsers.add_parser("reset", help="Wipe all progress")
    reset_parser.add_argument("--yes", action="store_true", help="Confirm the reset")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if not args.command:
        parser.print_help()
        return

    commands = {
        "quiz": cmd_quiz,
        "level": cmd_level,
        "levels": cmd_levels,
        "stats": cmd_stats,
        "reset": cmd_reset,
    }
    asyncio.run(commands[args.command](args))


if __name__ == "__main__":
    main()
