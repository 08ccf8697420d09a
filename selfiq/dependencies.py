"""FastAPI dependency providers for the assessment services."""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from selfiq.core.assessment_catalog import AssessmentCatalog
from selfiq.core.settings import settings
from selfiq.db import get_db
from selfiq.services.access import AccessGate
from selfiq.services.feedback import FeedbackService
from selfiq.services.progress_store import ProgressStore
from selfiq.services.result_archive import ResultArchive


@lru_cache(maxsize=1)
def _load_catalog() -> AssessmentCatalog:
    return AssessmentCatalog.from_directory(settings.content_dir)


def get_catalog() -> AssessmentCatalog:
    return _load_catalog()


def get_feedback(request: Request) -> Optional[FeedbackService]:
    # Created in the application lifespan; absent when the app runs without it (e.g. bare TestClient)
    return getattr(request.app.state, "feedback", None)


def get_progress_store(db: Session = Depends(get_db)) -> ProgressStore:
    return ProgressStore(db)


def get_result_archive(db: Session = Depends(get_db)) -> ResultArchive:
    return ResultArchive(db)


def get_access_gate(db: Session = Depends(get_db), catalog: AssessmentCatalog = Depends(get_catalog)) -> AccessGate:
    return AccessGate.for_session(db, catalog)
