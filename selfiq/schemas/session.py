from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class AnswerSubmission(BaseModel):
    question_id: str = Field(..., min_length=1)
    answer_id: str = Field(..., min_length=1)


class ProgressOut(BaseModel):
    test_id: str
    state: str
    current_question_index: int
    current_question_label: int
    current_question_id: Optional[str] = None
    total_questions: int
    completed_questions: List[str]
    progress_percentage: float
    last_updated: Optional[datetime] = None
    resumed: bool = False

    @classmethod
    def from_session(cls, session):
        progress = session.progress
        current = session.current_question
        return cls(
            test_id=session.definition.id,
            state=session.state.value,
            current_question_index=progress.current_question_index,
            current_question_label=progress.current_question_label,
            current_question_id=current.id if current else None,
            total_questions=progress.total_questions,
            completed_questions=list(progress.completed_question_ids),
            progress_percentage=progress.progress_percentage,
            last_updated=progress.last_updated,
            resumed=session.resumed,
        )


class SubmitAnswerOut(ProgressOut):
    persisted: bool
    is_final: bool


class InFlightSessionOut(BaseModel):
    test_id: str
    current_question_index: int
    current_question_label: int
    progress_percentage: float
    last_updated: Optional[datetime] = None
