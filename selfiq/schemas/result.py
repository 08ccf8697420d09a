from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import datetime

from selfiq.services.profile import profile_for, summarize
from selfiq.services.scoring import normalize_vector


class AnswerRecordOut(BaseModel):
    questionId: str
    answerId: str


class DimensionOut(BaseModel):
    category: str
    label: str
    score: int
    percentage: int
    band: str


class ProfileOut(BaseModel):
    category: str
    label: str
    description: str


class ResultOut(BaseModel):
    id: str
    test_id: str
    test_name: str
    scores: Dict[str, int]
    normalized_scores: Dict[str, float]
    percentage_score: float
    answers: List[AnswerRecordOut]
    primary_profile: Optional[str] = None
    secondary_profile: Optional[str] = None
    profile: Optional[ProfileOut] = None
    dimensions: List[DimensionOut] = []
    completion_time_seconds: Optional[int] = None
    completed_at: datetime

    @classmethod
    def from_result(cls, result, raw_min: int = -5, raw_max: int = 5):
        profile = None
        if result.primary_profile:
            entry = profile_for(result.primary_profile)
            profile = ProfileOut(category=entry.category, label=entry.label, description=entry.description)
        summary = summarize(result.scores, raw_min, raw_max)
        return cls(
            id=result.id,
            test_id=result.test_id,
            test_name=result.test_name,
            scores=dict(result.scores),
            normalized_scores=normalize_vector(result.scores, raw_min, raw_max),
            percentage_score=result.percentage_score,
            answers=[AnswerRecordOut(**a.to_dict()) for a in result.answers],
            primary_profile=result.primary_profile,
            secondary_profile=result.secondary_profile,
            profile=profile,
            dimensions=[
                DimensionOut(category=d.category, label=d.label, score=d.score, percentage=d.percentage, band=d.band)
                for d in summary.dimensions
            ],
            completion_time_seconds=result.completion_time_seconds,
            completed_at=result.completed_at,
        )


class ResultHistoryOut(BaseModel):
    results: List[ResultOut]
    next_cursor: Optional[str] = None


class StatisticsOut(BaseModel):
    total_completed: int
    average_score: float
    last_test_date: Optional[datetime] = None
    unique_tests_taken: int


class PopularTestOut(BaseModel):
    test_id: str
    test_name: str
    completion_count: int
    average_score: float
