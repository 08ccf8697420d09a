"""Personality profile derivation (v1).

Single source of truth for categories and tie-break order is
``selfiq.core.personality_profiles``. Ranking is deterministic: score
descending, then ``CATEGORY_PRIORITY`` order. Categories outside the known
table never win; a vector with no known category falls back to
``DEFAULT_CATEGORY``.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from selfiq.core.personality_profiles import (
    BANDS,
    CATEGORY_PRIORITY,
    DEFAULT_CATEGORY,
    PROFILES,
    TOP_BAND,
    ProfileEntry,
)
from selfiq.services.scoring import normalize_score

_PRIORITY_INDEX = {category: i for i, category in enumerate(CATEGORY_PRIORITY)}


@dataclass(frozen=True)
class Profile:
    category: str
    label: str
    description: str


@dataclass(frozen=True)
class DimensionProfile:
    category: str
    label: str
    score: int
    percentage: int
    band: str
    strengths: Tuple[str, ...]
    keywords: Tuple[str, ...]


@dataclass(frozen=True)
class ProfileSummary:
    primary: DimensionProfile
    secondary: Optional[DimensionProfile]
    dimensions: List[DimensionProfile]
    combined_strengths: List[str]
    combined_keywords: List[str]


def profile_for(category: str) -> ProfileEntry:
    """Lookup table access; unrecognized categories get the default entry."""
    return PROFILES.get(category) or PROFILES[DEFAULT_CATEGORY]


def rank_categories(scores: Dict[str, int]) -> List[Tuple[str, int]]:
    """Known categories ordered by score desc, ties in priority order. Missing categories count as 0."""
    ranked = [(c, int(scores.get(c, 0))) for c in CATEGORY_PRIORITY]
    ranked.sort(key=lambda kv: (-kv[1], _PRIORITY_INDEX[kv[0]]))
    return ranked


def dominant_category(scores: Dict[str, int]) -> str:
    known = {c: v for c, v in (scores or {}).items() if c in _PRIORITY_INDEX}
    if not known:
        return DEFAULT_CATEGORY
    best = max(known.values())
    for category in CATEGORY_PRIORITY:
        if known.get(category) == best:
            return category
    return DEFAULT_CATEGORY  # pragma: no cover


def derive_profile(scores: Dict[str, int]) -> Profile:
    entry = profile_for(dominant_category(scores))
    return Profile(category=entry.category, label=entry.label, description=entry.description)


def band_for(percentage: float) -> str:
    for upper, name in BANDS:
        if percentage <= upper:
            return name
    return TOP_BAND


def _dimension(category: str, score: int, raw_min: int, raw_max: int) -> DimensionProfile:
    entry = PROFILES[category]
    pct = int(round(normalize_score(score, raw_min, raw_max)))
    return DimensionProfile(
        category=category,
        label=entry.label,
        score=score,
        percentage=pct,
        band=band_for(pct),
        strengths=entry.strengths,
        keywords=entry.keywords,
    )


def summarize(scores: Dict[str, int], raw_min: int = -5, raw_max: int = 5) -> ProfileSummary:
    """Rank every known dimension and build primary/secondary profiles.

    The primary dimension is always ``dominant_category(scores)`` so the
    summary agrees with ``derive_profile``.
    """
    primary_cat = dominant_category(scores)
    ranked = rank_categories(scores)
    ordered = [primary_cat] + [c for c, _ in ranked if c != primary_cat]
    dims = [_dimension(c, int((scores or {}).get(c, 0)), raw_min, raw_max) for c in ordered]
    primary = dims[0]
    secondary = dims[1] if len(dims) > 1 else None
    strengths = list(primary.strengths[:3]) + (list(secondary.strengths[:2]) if secondary else [])
    keywords = list(primary.keywords[:3]) + (list(secondary.keywords[:2]) if secondary else [])
    return ProfileSummary(
        primary=primary,
        secondary=secondary,
        dimensions=dims,
        combined_strengths=strengths,
        combined_keywords=keywords,
    )
