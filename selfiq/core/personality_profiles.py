"""Canonical personality profile table.

Single source of truth for the known scoring categories, their fixed
priority order (used to break ties between equal scores) and the static
label/description content shown for each dominant category.

``CATEGORY_PRIORITY`` is the tie-break order: when two categories share the
maximum score, the one listed first wins. Never derive precedence from dict
iteration order of a score vector.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class ProfileEntry:
    category: str
    label: str
    description: str
    strengths: Tuple[str, ...]
    keywords: Tuple[str, ...]


CATEGORY_PRIORITY: Tuple[str, ...] = (
    "extraversion",
    "agreeableness",
    "conscientiousness",
    "neuroticism",
    "openness",
)

DEFAULT_CATEGORY = "openness"

PROFILES: Dict[str, ProfileEntry] = {
    "extraversion": ProfileEntry(
        category="extraversion",
        label="The Sociable Networker",
        description=(
            "You are outgoing and draw energy from social interaction. People feel at ease "
            "around you and you find it easy to motivate others."
        ),
        strengths=("Excellent communication", "Team player and motivator", "Builds networks quickly", "Confident presenter"),
        keywords=("Communicative", "Team-minded", "Motivating", "Confident"),
    ),
    "agreeableness": ProfileEntry(
        category="agreeableness",
        label="The Empathic Mediator",
        description=(
            "You are empathic, helpful and good at resolving conflict. Harmony and "
            "constructive cooperation are your strengths."
        ),
        strengths=("High emotional intelligence", "Conflict resolution", "Fosters team harmony", "Reliable partner"),
        keywords=("Empathic", "Conciliatory", "Cooperative", "Dependable"),
    ),
    "conscientiousness": ProfileEntry(
        category="conscientiousness",
        label="The Structured Analyst",
        description=(
            "You are organised, reliable and detail-oriented. Quality and accuracy are "
            "your highest priorities."
        ),
        strengths=("Excellent planning", "Highly reliable", "Quality-minded", "Structured way of working"),
        keywords=("Organised", "Diligent", "Precise", "Process-oriented"),
    ),
    "neuroticism": ProfileEntry(
        category="neuroticism",
        label="The Sensitive Perfectionist",
        description=(
            "You are emotionally perceptive and attentive. Your sensitivity lets you notice "
            "nuances that others miss."
        ),
        strengths=("Attention to detail", "Risk awareness", "Quality focus", "Emotional depth"),
        keywords=("Attentive", "Careful", "Reflective", "Quality-conscious"),
    ),
    "openness": ProfileEntry(
        category="openness",
        label="The Creative Innovator",
        description=(
            "You are open-minded, curious and inventive. New ideas and unconventional "
            "solutions are your strength."
        ),
        strengths=("Creative problem solving", "Drive to innovate", "Adapts quickly", "Visionary thinking"),
        keywords=("Creative", "Innovative", "Flexible", "Visionary"),
    ),
}

# Percentage bands used when describing how strongly a dimension is expressed.
# Each tuple: (upper bound inclusive, band name); anything above the last bound is very_high.
BANDS: List[Tuple[int, str]] = [
    (20, "very_low"),
    (40, "low"),
    (60, "medium"),
    (80, "high"),
]
TOP_BAND = "very_high"


def _validate_integrity() -> None:
    if len(set(CATEGORY_PRIORITY)) != len(CATEGORY_PRIORITY):
        raise ValueError("Duplicate categories in CATEGORY_PRIORITY")
    if set(PROFILES) != set(CATEGORY_PRIORITY):
        missing = set(CATEGORY_PRIORITY) - set(PROFILES)
        extra = set(PROFILES) - set(CATEGORY_PRIORITY)
        raise ValueError(f"PROFILES coverage mismatch missing={missing} extra={extra}")
    if DEFAULT_CATEGORY not in PROFILES:
        raise ValueError(f"DEFAULT_CATEGORY {DEFAULT_CATEGORY!r} has no profile entry")
    bounds = [b for b, _ in BANDS]
    if bounds != sorted(bounds):
        raise ValueError("BANDS must be sorted by upper bound")

_validate_integrity()

__all__ = [
    "ProfileEntry",
    "CATEGORY_PRIORITY",
    "DEFAULT_CATEGORY",
    "PROFILES",
    "BANDS",
    "TOP_BAND",
]
