"""Value types passed between the assessment services.

``SessionProgress`` is the only mutable one; everything a finished session
produces (``AnswerRecord``, ``AssessmentResult``, ``UserStatistics``) is
frozen.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class AnswerRecord:
    question_id: str
    answer_id: str

    def to_dict(self) -> Dict[str, str]:
        return {"questionId": self.question_id, "answerId": self.answer_id}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "AnswerRecord":
        return cls(question_id=str(data["questionId"]), answer_id=str(data["answerId"]))


@dataclass
class SessionProgress:
    """Resumable state of one (user, assessment) session.

    ``progress_percentage`` is computed from ``completed_question_ids`` and
    ``total_questions`` on every read; it has no stored value of its own.
    """
    user_id: str
    test_id: str
    total_questions: int
    current_question_index: int = 0
    completed_question_ids: List[str] = field(default_factory=list)
    answers: List[AnswerRecord] = field(default_factory=list)
    last_updated: Optional[datetime] = None
    started_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.total_questions <= 0:
            raise ValueError("total_questions must be positive")
        if self.current_question_index < 0:
            raise ValueError("current_question_index must be >= 0")
        if self.current_question_index > self.total_questions:
            raise ValueError("current_question_index exceeds total_questions")
        if len(set(self.completed_question_ids)) > self.total_questions:
            raise ValueError("more completed questions than the assessment has")

    @property
    def progress_percentage(self) -> float:
        return 100 * len(set(self.completed_question_ids)) / self.total_questions

    @property
    def current_question_label(self) -> int:
        """1-based question number shown to the user (index + 1, capped at the total)."""
        return min(self.current_question_index + 1, self.total_questions)

    @property
    def is_complete(self) -> bool:
        return len(set(self.completed_question_ids)) >= self.total_questions

    def copy(self) -> "SessionProgress":
        return SessionProgress(
            user_id=self.user_id,
            test_id=self.test_id,
            total_questions=self.total_questions,
            current_question_index=self.current_question_index,
            completed_question_ids=list(self.completed_question_ids),
            answers=list(self.answers),
            last_updated=self.last_updated,
            started_at=self.started_at,
        )


@dataclass(frozen=True)
class AssessmentResult:
    user_id: str
    test_id: str
    test_name: str
    scores: Mapping[str, int]
    percentage_score: float
    answers: Tuple[AnswerRecord, ...]
    completed_at: datetime
    primary_profile: Optional[str] = None
    secondary_profile: Optional[str] = None
    completion_time_seconds: Optional[int] = None
    id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "scores", MappingProxyType(dict(self.scores)))
        object.__setattr__(self, "answers", tuple(self.answers))


@dataclass(frozen=True)
class UserStatistics:
    total_completed: int
    average_score: float
    last_test_date: Optional[datetime]
    unique_tests_taken: int
