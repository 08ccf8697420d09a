from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from selfiq.core.assessment_catalog import AssessmentCatalog
from selfiq.core.settings import settings
from selfiq.dependencies import (
    get_access_gate,
    get_catalog,
    get_feedback,
    get_progress_store,
    get_result_archive,
)
from selfiq.exceptions import ForbiddenException
from selfiq.models.user import User
from selfiq.schemas.result import ResultOut
from selfiq.schemas.session import AnswerSubmission, InFlightSessionOut, ProgressOut, SubmitAnswerOut
from selfiq.services.access import AccessGate
from selfiq.services.assessment_session import AssessmentSession
from selfiq.services.auth import get_current_user
from selfiq.services.feedback import FeedbackService
from selfiq.services.progress_store import ProgressStore
from selfiq.services.result_archive import ResultArchive

router = APIRouter(prefix="/sessions", tags=["Sessions"])


def _open_session(
    test_id: str,
    user: User,
    catalog: AssessmentCatalog,
    store: ProgressStore,
    archive: ResultArchive,
    feedback: Optional[FeedbackService],
    announce: bool = False,
) -> AssessmentSession:
    """Rebuild the session for (user, test) from the store; raises UnknownAssessmentError.

    Only the start endpoint announces; answer and finalize requests just reload.
    """
    session = AssessmentSession(
        catalog.get(test_id),
        user.id,
        store,
        archive,
        feedback=feedback,
        raw_min=settings.score_raw_min,
        raw_max=settings.score_raw_max,
    )
    session.start(announce=announce)
    return session


def _require_access(gate: AccessGate, user: User, test_id: str, catalog: AssessmentCatalog) -> None:
    catalog.get(test_id)  # unknown ids are a 404, not a 403
    if not gate.can_access(user.id, test_id):
        raise ForbiddenException(f"No access to assessment {test_id}")


@router.get("", response_model=List[InFlightSessionOut])
def list_in_flight_sessions(
    catalog: AssessmentCatalog = Depends(get_catalog),
    store: ProgressStore = Depends(get_progress_store),
    current_user: User = Depends(get_current_user),
):
    return [
        InFlightSessionOut(
            test_id=p.test_id,
            current_question_index=p.current_question_index,
            current_question_label=p.current_question_label,
            progress_percentage=p.progress_percentage,
            last_updated=p.last_updated,
        )
        for p in store.load_all(current_user.id, catalog)
    ]


@router.post("/{test_id}/start", response_model=ProgressOut)
def start_session(
    test_id: str,
    catalog: AssessmentCatalog = Depends(get_catalog),
    gate: AccessGate = Depends(get_access_gate),
    store: ProgressStore = Depends(get_progress_store),
    archive: ResultArchive = Depends(get_result_archive),
    feedback: Optional[FeedbackService] = Depends(get_feedback),
    current_user: User = Depends(get_current_user),
):
    _require_access(gate, current_user, test_id, catalog)
    session = _open_session(test_id, current_user, catalog, store, archive, feedback, announce=True)
    return ProgressOut.from_session(session)


@router.post("/{test_id}/answers", response_model=SubmitAnswerOut)
def submit_answer(
    test_id: str,
    payload: AnswerSubmission,
    catalog: AssessmentCatalog = Depends(get_catalog),
    gate: AccessGate = Depends(get_access_gate),
    store: ProgressStore = Depends(get_progress_store),
    archive: ResultArchive = Depends(get_result_archive),
    feedback: Optional[FeedbackService] = Depends(get_feedback),
    current_user: User = Depends(get_current_user),
):
    _require_access(gate, current_user, test_id, catalog)
    session = _open_session(test_id, current_user, catalog, store, archive, feedback)
    outcome = session.submit_answer(payload.question_id, payload.answer_id)
    base = ProgressOut.from_session(session)
    return SubmitAnswerOut(**base.model_dump(), persisted=outcome.persisted, is_final=outcome.is_final)


@router.post("/{test_id}/finalize", response_model=ResultOut)
def finalize_session(
    test_id: str,
    catalog: AssessmentCatalog = Depends(get_catalog),
    gate: AccessGate = Depends(get_access_gate),
    store: ProgressStore = Depends(get_progress_store),
    archive: ResultArchive = Depends(get_result_archive),
    feedback: Optional[FeedbackService] = Depends(get_feedback),
    current_user: User = Depends(get_current_user),
):
    _require_access(gate, current_user, test_id, catalog)
    session = _open_session(test_id, current_user, catalog, store, archive, feedback)
    result = session.finalize()
    if result is None:
        raise HTTPException(status_code=503, detail="Result could not be saved; progress kept, please retry")
    return ResultOut.from_result(result, settings.score_raw_min, settings.score_raw_max)


@router.delete("/{test_id}")
def restart_session(
    test_id: str,
    catalog: AssessmentCatalog = Depends(get_catalog),
    store: ProgressStore = Depends(get_progress_store),
    archive: ResultArchive = Depends(get_result_archive),
    current_user: User = Depends(get_current_user),
):
    session = AssessmentSession(catalog.get(test_id), current_user.id, store, archive)
    if not session.restart():
        raise HTTPException(status_code=503, detail="Progress could not be reset, please retry")
    return {"test_id": test_id, "deleted": True, "state": session.state.value}
