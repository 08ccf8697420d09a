"""Score folding & display normalization.

Pure functions, no I/O. A score vector is built by summing each answered
option's category deltas; since the fold is plain integer addition the
result does not depend on the order answers were submitted in.
"""
from typing import Dict, Iterable

from selfiq.core.assessment_catalog import AssessmentDefinition
from selfiq.core.records import AnswerRecord

RAW_MIN = -5
RAW_MAX = 5


def fold_scores(answers: Iterable[AnswerRecord], definition: AssessmentDefinition) -> Dict[str, int]:
    """Accumulate per-category scores for ``answers``.

    Every declared scoring category starts at 0 so it is present in the
    vector even if no answer touched it; categories only seen in answer
    deltas start at 0 implicitly. Raises ``UnknownAnswerError`` for ids that
    are not part of the definition.
    """
    scores: Dict[str, int] = {c: 0 for c in definition.scoring_categories}
    for record in answers:
        answer = definition.resolve(record.question_id, record.answer_id)
        for category, delta in answer.score.items():
            scores[category] = scores.get(category, 0) + int(delta)
    return scores


def normalize_score(raw: float, raw_min: int = RAW_MIN, raw_max: int = RAW_MAX) -> float:
    """Map a raw category score onto 0-100 for display, clamping out-of-range input."""
    if raw_max <= raw_min:
        raise ValueError("raw_max must be greater than raw_min")
    scaled = ((raw - raw_min) / (raw_max - raw_min)) * 100
    return max(0.0, min(100.0, scaled))


def normalize_vector(scores: Dict[str, int], raw_min: int = RAW_MIN, raw_max: int = RAW_MAX) -> Dict[str, float]:
    return {category: normalize_score(raw, raw_min, raw_max) for category, raw in scores.items()}
