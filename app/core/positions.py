"""
Candidate position levels and the prompt wording attached to each.

Defaults can be overridden per position with environment variables:
POSITION_DIFFICULTY_TEXT_<SLUG>, POSITION_INSTRUCTION_<SLUG>, POSITION_LEVEL_<SLUG>.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

VALID_POSITIONS = ("intern", "fresher", "junior", "middle", "senior", "expert")

DEFAULT_DIFFICULTY_TEXT = {
    "intern": "basic understanding of programming concepts",
    "fresher": "fundamental programming knowledge",
    "junior": "practical application of programming concepts",
    "middle": "intermediate understanding of software development",
    "senior": "deep understanding of scalable systems and best practices",
    "expert": "advanced architectural thinking and system design expertise",
}

DEFAULT_POSITION_INSTRUCTION = {
    "intern": "suitable for an intern-level candidate",
    "fresher": "appropriate for a fresher with limited experience",
    "junior": "targeted at a junior developer with some experience",
    "middle": "designed for a mid-level developer with solid experience",
    "senior": "targeted at a senior developer with extensive experience",
    "expert": "challenging for expert-level developers and architects",
}

DEFAULT_POSITION_LEVELS = {
    "intern": 1,
    "fresher": 2,
    "junior": 3,
    "middle": 4,
    "senior": 5,
    "expert": 6,
}

FALLBACK_DIFFICULTY_TEXT = "various difficulty levels"
FALLBACK_POSITION_INSTRUCTION = "suitable for developers of different experience levels"
FALLBACK_POSITION_LEVEL = 3


@dataclass(frozen=True)
class PositionMetadata:
    slug: str
    difficulty_text: str
    position_instruction: str
    level: int


def is_valid_position(position: str | None) -> bool:
    return bool(position) and position.strip().lower() in VALID_POSITIONS


def _env_override(prefix: str, slug: str) -> str | None:
    value = os.getenv(f"{prefix}_{slug.upper()}")
    return value.strip() if value and value.strip() else None


def _level_for(slug: str) -> int:
    raw = _env_override("POSITION_LEVEL", slug)
    if raw is not None:
        try:
            return int(raw)
        except ValueError:
            logger.warning("Ignoring non-integer POSITION_LEVEL_%s=%r", slug.upper(), raw)
    return DEFAULT_POSITION_LEVELS.get(slug, FALLBACK_POSITION_LEVEL)


def get_position_metadata(position: str) -> PositionMetadata:
    """
    Resolve difficulty wording, instruction and level for a position slug.

    Unknown positions get generic values instead of failing.
    """
    slug = (position or "").strip().lower()
    if slug not in VALID_POSITIONS:
        logger.warning("Unknown position %r; using generic prompt wording", position)
        return PositionMetadata(
            slug=slug,
            difficulty_text=FALLBACK_DIFFICULTY_TEXT,
            position_instruction=FALLBACK_POSITION_INSTRUCTION,
            level=FALLBACK_POSITION_LEVEL,
        )

    return PositionMetadata(
        slug=slug,
        difficulty_text=_env_override("POSITION_DIFFICULTY_TEXT", slug) or DEFAULT_DIFFICULTY_TEXT[slug],
        position_instruction=_env_override("POSITION_INSTRUCTION", slug) or DEFAULT_POSITION_INSTRUCTION[slug],
        level=_level_for(slug),
    )
