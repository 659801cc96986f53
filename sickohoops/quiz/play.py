"""
Play a SickoHoops quiz in the terminal.

Usage:
    python -m sickohoops.quiz.play "Every NBA MVP since 2010"
    python -m sickohoops.quiz.play --level 5
    python -m sickohoops.quiz.play "Top 5 leaders in points per game each year from 2020 to 2022" --time-limit 300

Type a player's name to find every answer for that player. /give-up ends the
quiz and reveals the answers.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from sickohoops.config import DEFAULT_TIME_LIMIT
from sickohoops.errors import QuizGenerationError
from sickohoops.llm.prompts import default_max_questions, random_prompt
from sickohoops.quiz.controller import QuizController
from sickohoops.quiz.session import QuizSession
from sickohoops.sources.resolver import build_default_resolver

logger = logging.getLogger(__name__)

GIVE_UP = "/give-up"


def format_clock(seconds: int) -> str:
    minutes, seconds = divmod(max(seconds, 0), 60)
    return f"{minutes}:{seconds:02d}"


def reveal_table(session: QuizSession) -> str:
    """Every answer, marking the ones that were found."""
    found = set(session.found())
    lines = [f"{'':2} {'Year':<6} {'Team':<10} {'Player':<28} {'Stat':>6}"]
    for i, record in enumerate(session.answer_set):
        mark = "✓" if i in found else "·"
        lines.append(
            f"{mark:2} {record.year:<6} {record.team:<10} {record.player:<28} {record.stat_value!s:>6}"
        )
    return "\n".join(lines)


async def play(topic: str, time_limit: int, max_questions: Optional[int]) -> int:
    controller = QuizController(build_default_resolver(show_progress=True))

    print(f"\nLoading quiz: {topic}")
    try:
        session = await controller.load(
            topic,
            time_limit=time_limit,
            max_questions=max_questions,
            start_timer=True,
        )
    except QuizGenerationError as e:
        print(f"\n❌ {e.message}")
        if e.details:
            print(f"   {e.details}")
        return 1

    if session is None:
        return 1

    payload = controller.payload
    print("\n" + "=" * 60)
    print(payload.title)
    if payload.description:
        print(payload.description)
    print("=" * 60)
    print(f"{session.total} answers, {format_clock(session.time_remaining)} on the clock. {GIVE_UP} to stop.\n")

    while session.is_active:
        prompt = f"[{session.score}/{session.total} | {format_clock(session.time_remaining)}] > "
        text = await asyncio.to_thread(input, prompt)

        if not session.is_active:
            break
        if text.strip() == GIVE_UP:
            session.forfeit()
            break

        result = session.submit(text)
        if result is not None and result.matched:
            names = sorted({session.answer_set[i].player for i in result.matched})
            print(f"  ✓ {', '.join(names)} (+{len(result.matched)})")
        elif text.strip():
            print("  ✗ no match")

    print(f"\nFinal score: {session.score}/{session.total} ({session.completion_reason.value})\n")
    print(reveal_table(session))
    return 0


def main():
    parser = argparse.ArgumentParser(description="Play an NBA quiz in the terminal")
    parser.add_argument("topic", nargs="?", help="Quiz topic (default: a random suggestion)")
    parser.add_argument("--level", type=int, default=3, help="Sicko level for a random topic (1-5)")
    parser.add_argument("--time-limit", type=int, default=DEFAULT_TIME_LIMIT, help="Seconds on the clock")
    parser.add_argument("--max-questions", type=int, help="Cap on generated answers")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    topic = args.topic or random_prompt(args.level)
    max_questions = args.max_questions or default_max_questions(topic)

    try:
        code = asyncio.run(play(topic, args.time_limit, max_questions))
    except (KeyboardInterrupt, EOFError):
        print("\nBye.")
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
