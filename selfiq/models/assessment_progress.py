from sqlalchemy import Column, String, DateTime, Integer, Float, JSON, UniqueConstraint
from selfiq.db import Base
import uuid

class AssessmentProgress(Base):
    """In-flight session progress, one row per (user, assessment).

    The unique constraint is the conflict key used by the upsert in
    ``selfiq.services.progress_store``: concurrent writers for the same pair
    collapse onto this row, last writer wins.
    """
    __tablename__ = "assessment_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "test_id", name="uq_assessment_progress_user_test"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    test_id = Column(String, nullable=False)
    current_question_index = Column(Integer, nullable=False, default=0)
    completed_questions = Column(JSON, nullable=False, default=list)
    # [{"questionId": ..., "answerId": ...}] in submission order
    answers = Column(JSON, nullable=False, default=list)
    progress_percentage = Column(Float, nullable=False, default=0.0)
    last_updated = Column(DateTime, nullable=False)
    # When the session was first started; survives resumes so completion time spans devices
    started_at = Column(DateTime, nullable=True)
