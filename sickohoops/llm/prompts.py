"""
Prompt templates for generated quizzes.

Every generative provider gets the same system prompt and the same user
prompt, parameterized by topic, time limit and maximum answer count.
"""

import random
import re
from typing import Optional

from sickohoops.config import DEFAULT_TIME_LIMIT


QUIZ_SYSTEM_PROMPT = "You are a specialized NBA quiz generator that returns only valid JSON."


QUIZ_PROMPT_TEMPLATE = """Generate an NBA quiz about "{topic}".

The response must be a valid JSON object with this structure:
{{
  "title": "Quiz title",
  "description": "Brief description of the quiz",
  "answers": [
    {{
      "points": number (only include if relevant, otherwise set to 0),
      "player": "Player full name",
      "team": "YYYY-TTT format (year-team)",
      "year": "YYYY" (season end year as string)
    }}
  ],
  "timeLimit": {time_limit}
}}

Rules:
1. Include ALL instances that match the criteria (for historical lists).
2. For yearly data, use the season end year (e.g., 2022-23 season is 2023).
3. Keep descriptions concise and factual.
4. All data must be factually accurate and verifiable.
5. Return ONLY the JSON object, no additional text.
6. Limit to {max_items} items maximum.
7. For player names, use their most commonly known name.
8. Make sure the "year" field is a string, not a number.
9. For team abbreviations, use the standard 3-letter NBA team codes (LAL, BOS, etc.)
10. Always include the points/stats value when relevant to the query.
11. NEVER use "N/A" for team abbreviations. Use the actual team code or "NBA" if unknown.

Return ONLY valid JSON."""


def build_quiz_prompt(topic: str, time_limit: int = DEFAULT_TIME_LIMIT, max_items: int = 50) -> str:
    """Fill the quiz prompt template."""
    return QUIZ_PROMPT_TEMPLATE.format(
        topic=topic.replace('"', "'"),
        time_limit=int(time_limit),
        max_items=int(max_items),
    )


# Suggested topics by "sicko level" (difficulty 1-5)
QUIZ_PROMPTS = {
    1: [
        "Every NBA MVP since 2010",
        "NBA champions from the last 10 years",
        "Players who scored 50+ points in a game last season",
        "Current NBA players with multiple All-Star appearances",
        "NBA Rookie of the Year winners since 2015",
    ],
    2: [
        "Every NBA Finals MVP since 2000",
        "Players who averaged 25+ points per game last season",
        "NBA Defensive Player of the Year winners since 2010",
        "Players with multiple scoring titles since 2000",
        "NBA champions from 2000-2010",
    ],
    3: [
        "Every NBA MVP since 1990",
        "Players with 60+ point games since 2000",
        "Every NBA scoring champion since 2000",
        "Players with multiple triple-doubles in a playoff series",
        "NBA Sixth Man of the Year winners since 2000",
    ],
    4: [
        "Every NBA scoring champion since 1990",
        "Players with 70+ point games in NBA history",
        "NBA players with 20+ rebounds in a game since 2015",
        "Players who have led the league in assists",
        "NBA Defensive Player of the Year winners since 1990",
    ],
    5: [
        "Top 5 leaders in Points per game each year since 2000",
        "Every player to average a triple-double for a season",
        "Players with 5+ steals in a playoff game",
        "Every player with 10+ three-pointers in a game",
        "Players who have led the league in blocks for multiple seasons",
    ],
}

DEFAULT_LEVEL = 3

YEARLY_LEADERS_TOPIC = re.compile(r"leaders?.*(each|every|per|since|from|by)\s+year", re.IGNORECASE)


def random_prompt(level: int = DEFAULT_LEVEL, rng: Optional[random.Random] = None) -> str:
    """Pick a suggested topic for a difficulty level (unknown levels use 3)."""
    prompts = QUIZ_PROMPTS.get(level) or QUIZ_PROMPTS[DEFAULT_LEVEL]
    return (rng or random).choice(prompts)


def is_yearly_leaders_topic(topic: str) -> bool:
    """Yearly leader topics are long lists and take longer to resolve."""
    return bool(YEARLY_LEADERS_TOPIC.search(topic))


def default_max_questions(topic: str) -> int:
    """Question cap a client should request for a topic."""
    return 130 if is_yearly_leaders_topic(topic) else 100
