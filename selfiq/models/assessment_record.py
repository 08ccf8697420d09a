from sqlalchemy import Column, String, DateTime, Integer, Float, JSON, Index
from selfiq.db import Base
import uuid

class AssessmentRecord(Base):
    """Finalized assessment result. Rows are inserted once and never updated."""
    __tablename__ = "assessment_results"
    __table_args__ = (
        Index("ix_assessment_results_user_test_completed", "user_id", "test_id", "completed_at"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    test_id = Column(String, nullable=False)
    test_name = Column(String, nullable=False)
    scores = Column(JSON, nullable=False)  # {category: int}
    percentage_score = Column(Float, nullable=False)
    answers = Column(JSON, nullable=False)  # [{"questionId": ..., "answerId": ...}]
    primary_profile = Column(String, nullable=True)
    secondary_profile = Column(String, nullable=True)
    completion_time_seconds = Column(Integer, nullable=True)
    completed_at = Column(DateTime, nullable=False)
