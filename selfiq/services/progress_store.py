"""Progress store adapter: load / save / delete one in-flight session.

Merge policy: **last writer wins**. ``save`` is a native
``INSERT ... ON CONFLICT (user_id, test_id) DO UPDATE`` so two devices (or a
crashed-and-restarted client) writing progress for the same
(user, assessment) pair always collapse onto a single row holding whatever
was written last. There is no field-level merge. A port to another store
must keep the same unique-key overwrite semantics.

Failure policy: every database error is logged, rolled back and reported
as ``False`` (save/delete) or ``None`` (load). A missing row is a normal
``None``, not an error. Nothing is cached in-process; callers must not
treat progress as durable until ``save`` has returned ``True``.
"""
from __future__ import annotations
import logging
import uuid
from typing import List, Optional

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from selfiq.core.assessment_catalog import AssessmentCatalog, AssessmentDefinition
from selfiq.core.records import AnswerRecord, SessionProgress
from selfiq.exceptions import UnknownAnswerError
from selfiq.models.assessment_progress import AssessmentProgress
from selfiq.utils.datetime import ensure_aware_utc, to_naive_utc, utc_now

logger = logging.getLogger("selfiq.progress_store")

_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}
_UPDATE_COLUMNS = (
    "current_question_index",
    "completed_questions",
    "answers",
    "progress_percentage",
    "last_updated",
    "started_at",
)


def _to_progress(row: AssessmentProgress, definition: AssessmentDefinition) -> SessionProgress:
    """Rebuild progress from a row, raising ValueError when it no longer fits ``definition``.

    Rows written against an older revision of the content can name questions
    or answers that are gone; such a row cannot be resumed or finalized.
    """
    progress = SessionProgress(
        user_id=row.user_id,
        test_id=row.test_id,
        total_questions=definition.total_questions,
        current_question_index=row.current_question_index or 0,
        completed_question_ids=list(row.completed_questions or []),
        answers=[AnswerRecord.from_dict(a) for a in (row.answers or [])],
        last_updated=ensure_aware_utc(row.last_updated),
        started_at=ensure_aware_utc(row.started_at),
    )
    for question_id in progress.completed_question_ids:
        if definition.question(question_id) is None:
            raise ValueError(f"question {question_id!r} is not part of {definition.id}")
    for record in progress.answers:
        try:
            definition.resolve(record.question_id, record.answer_id)
        except UnknownAnswerError as e:
            raise ValueError(str(e)) from e
    if {a.question_id for a in progress.answers} != set(progress.completed_question_ids):
        raise ValueError("answers and completed questions disagree")
    return progress


class ProgressStore:
    def __init__(self, db: Session):
        self.db = db

    def load(self, user_id: Optional[str], definition: AssessmentDefinition) -> Optional[SessionProgress]:
        if not user_id:
            return None
        try:
            row = (
                self.db.query(AssessmentProgress)
                .filter(AssessmentProgress.user_id == user_id, AssessmentProgress.test_id == definition.id)
                .first()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error loading progress user={user_id} test={definition.id}: {e}")
            return None
        if row is None:
            return None
        try:
            # progress_percentage is recomputed from the row, never read back
            return _to_progress(row, definition)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Discarding unreadable progress row user={user_id} test={definition.id}: {e}")
            return None

    def load_all(self, user_id: Optional[str], catalog: AssessmentCatalog) -> List[SessionProgress]:
        """All in-flight sessions for one user, most recently touched first.

        Rows for assessments no longer in the catalog are skipped.
        """
        if not user_id:
            return []
        try:
            rows = (
                self.db.query(AssessmentProgress)
                .filter(AssessmentProgress.user_id == user_id)
                .order_by(AssessmentProgress.last_updated.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error loading all progress for user={user_id}: {e}")
            return []
        result = []
        for row in rows:
            definition = catalog.find(row.test_id)
            if definition is None:
                continue
            try:
                result.append(_to_progress(row, definition))
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Skipping unreadable progress row user={user_id} test={row.test_id}: {e}")
        return result

    def save(self, progress: SessionProgress) -> bool:
        if not progress.user_id:
            return False
        values = {
            "user_id": progress.user_id,
            "test_id": progress.test_id,
            "current_question_index": progress.current_question_index,
            "completed_questions": list(progress.completed_question_ids),
            "answers": [a.to_dict() for a in progress.answers],
            "progress_percentage": progress.progress_percentage,
            "last_updated": to_naive_utc(progress.last_updated or utc_now()),
            "started_at": to_naive_utc(progress.started_at),
        }
        try:
            insert = _UPSERT_DIALECTS.get(self.db.get_bind().dialect.name)
            if insert is None:
                self._merge(values)
            else:
                stmt = insert(AssessmentProgress).values(id=str(uuid.uuid4()), **values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=["user_id", "test_id"],
                    set_={col: getattr(stmt.excluded, col) for col in _UPDATE_COLUMNS},
                )
                self.db.execute(stmt)
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error saving progress user={progress.user_id} test={progress.test_id}: {e}")
            return False

    def _merge(self, values: dict) -> None:
        # Dialects without ON CONFLICT: overwrite in place, still one row per pair
        row = (
            self.db.query(AssessmentProgress)
            .filter(AssessmentProgress.user_id == values["user_id"], AssessmentProgress.test_id == values["test_id"])
            .with_for_update()
            .first()
        )
        if row is None:
            self.db.add(AssessmentProgress(id=str(uuid.uuid4()), **values))
        else:
            for col in _UPDATE_COLUMNS:
                setattr(row, col, values[col])

    def delete(self, user_id: Optional[str], test_id: str) -> bool:
        """Remove progress for the pair. Deleting an absent row still succeeds."""
        if not user_id:
            return False
        try:
            (
                self.db.query(AssessmentProgress)
                .filter(AssessmentProgress.user_id == user_id, AssessmentProgress.test_id == test_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting progress user={user_id} test={test_id}: {e}")
            return False
