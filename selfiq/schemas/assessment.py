from pydantic import BaseModel
from typing import List, Optional


class AnswerOptionOut(BaseModel):
    id: str
    text: str


class QuestionOut(BaseModel):
    id: str
    text: str
    answers: List[AnswerOptionOut]


class AssessmentSummaryOut(BaseModel):
    id: str
    name: str
    category_id: str
    is_premium: bool
    total_questions: int
    description: Optional[str] = None


class AssessmentDetailOut(AssessmentSummaryOut):
    scoring_categories: List[str]
    questions: List[QuestionOut]

    @classmethod
    def from_definition(cls, definition):
        """Client view of a definition; score deltas stay server-side."""
        return cls(
            id=definition.id,
            name=definition.name,
            category_id=definition.category_id,
            is_premium=definition.is_premium,
            total_questions=definition.total_questions,
            description=definition.description,
            scoring_categories=list(definition.scoring_categories),
            questions=[
                QuestionOut(
                    id=q.id,
                    text=q.text,
                    answers=[AnswerOptionOut(id=a.id, text=a.text) for a in q.answers],
                )
                for q in definition.questions
            ],
        )


class AccessOut(BaseModel):
    assessment_id: str
    has_access: bool
