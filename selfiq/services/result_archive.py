"""Result archive: append-only storage of finalized assessment results.

Rows are inserted once and never updated. One user may hold many results
for the same assessment; "the" result for an assessment is the most recent
by ``completed_at``. Store failures are logged and returned as ``None`` /
empty values, matching ``selfiq.services.progress_store``.
"""
from __future__ import annotations
import base64
import json
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import distinct, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from selfiq.core.records import AnswerRecord, AssessmentResult, UserStatistics
from selfiq.models.assessment_record import AssessmentRecord
from selfiq.utils.datetime import ensure_aware_utc, to_naive_utc

logger = logging.getLogger("selfiq.result_archive")


def encode_cursor(completed_at: datetime, result_id: str) -> str:
    payload = {"ts": to_naive_utc(completed_at).isoformat(), "id": result_id}
    return base64.urlsafe_b64encode(json.dumps(payload).encode()).decode()


def decode_cursor(cursor: str) -> tuple[datetime, str]:
    """Inverse of ``encode_cursor``; raises ValueError for anything malformed."""
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        data = json.loads(raw)
        return datetime.fromisoformat(data["ts"]), str(data["id"])
    except Exception as e:
        raise ValueError("Invalid cursor") from e


def _to_result(row: AssessmentRecord) -> AssessmentResult:
    return AssessmentResult(
        id=row.id,
        user_id=row.user_id,
        test_id=row.test_id,
        test_name=row.test_name,
        scores={str(k): int(v) for k, v in (row.scores or {}).items()},
        percentage_score=float(row.percentage_score),
        answers=tuple(AnswerRecord.from_dict(a) for a in (row.answers or [])),
        primary_profile=row.primary_profile,
        secondary_profile=row.secondary_profile,
        completion_time_seconds=row.completion_time_seconds,
        completed_at=ensure_aware_utc(row.completed_at),
    )


class ResultArchive:
    def __init__(self, db: Session):
        self.db = db

    def append(self, result: AssessmentResult) -> Optional[AssessmentResult]:
        """Insert ``result``; returns the stored copy (with its id) or None on failure."""
        if not result.user_id:
            return None
        row = AssessmentRecord(
            id=result.id or str(uuid.uuid4()),
            user_id=result.user_id,
            test_id=result.test_id,
            test_name=result.test_name,
            scores=dict(result.scores),
            percentage_score=result.percentage_score,
            answers=[a.to_dict() for a in result.answers],
            primary_profile=result.primary_profile,
            secondary_profile=result.secondary_profile,
            completion_time_seconds=result.completion_time_seconds,
            completed_at=to_naive_utc(result.completed_at),
        )
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error saving result user={result.user_id} test={result.test_id}: {e}")
            return None
        return _to_result(row)

    def latest(self, user_id: Optional[str], test_id: str) -> Optional[AssessmentResult]:
        if not user_id:
            return None
        try:
            row = (
                self.db.query(AssessmentRecord)
                .filter(AssessmentRecord.user_id == user_id, AssessmentRecord.test_id == test_id)
                .order_by(AssessmentRecord.completed_at.desc(), AssessmentRecord.id.desc())
                .first()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error loading latest result user={user_id} test={test_id}: {e}")
            return None
        return _to_result(row) if row else None

    def history(self, user_id: Optional[str]) -> List[AssessmentResult]:
        """Every result for the user, newest first."""
        items, _ = self.history_page(user_id, limit=None)
        return items

    def history_page(
        self, user_id: Optional[str], limit: Optional[int] = 20, cursor: Optional[str] = None
    ) -> Tuple[List[AssessmentResult], Optional[str]]:
        """Keyset-paginated history, newest first. Raises ValueError for a bad cursor."""
        if not user_id:
            return [], None
        base = self.db.query(AssessmentRecord).filter(AssessmentRecord.user_id == user_id)
        if cursor:
            ts, rid = decode_cursor(cursor)
            base = base.filter(
                (AssessmentRecord.completed_at < ts)
                | ((AssessmentRecord.completed_at == ts) & (AssessmentRecord.id < rid))
            )
        query = base.order_by(AssessmentRecord.completed_at.desc(), AssessmentRecord.id.desc())
        if limit is not None:
            query = query.limit(limit + 1)
        try:
            rows = query.all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error loading result history user={user_id}: {e}")
            return [], None
        has_more = limit is not None and len(rows) > limit
        if limit is not None:
            rows = rows[:limit]
        next_cursor = encode_cursor(rows[-1].completed_at, rows[-1].id) if has_more and rows else None
        return [_to_result(r) for r in rows], next_cursor

    def statistics(self, user_id: Optional[str]) -> Optional[UserStatistics]:
        """Aggregate over the user's results; None when there are none."""
        if not user_id:
            return None
        try:
            total, average, last, unique = (
                self.db.query(
                    func.count(AssessmentRecord.id),
                    func.avg(AssessmentRecord.percentage_score),
                    func.max(AssessmentRecord.completed_at),
                    func.count(distinct(AssessmentRecord.test_id)),
                )
                .filter(AssessmentRecord.user_id == user_id)
                .one()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error loading statistics user={user_id}: {e}")
            return None
        if not total:
            return None
        return UserStatistics(
            total_completed=int(total),
            average_score=round(float(average or 0), 2),
            last_test_date=ensure_aware_utc(last),
            unique_tests_taken=int(unique),
        )

    def popular_tests(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Cross-user completion counts per assessment, most completed first."""
        completion_count = func.count(AssessmentRecord.id).label("completion_count")
        try:
            rows = (
                self.db.query(
                    AssessmentRecord.test_id,
                    func.max(AssessmentRecord.test_name).label("test_name"),
                    completion_count,
                    func.avg(AssessmentRecord.percentage_score).label("average_score"),
                )
                .group_by(AssessmentRecord.test_id)
                .order_by(completion_count.desc(), AssessmentRecord.test_id)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error loading popular tests: {e}")
            return []
        return [
            {
                "test_id": r.test_id,
                "test_name": r.test_name,
                "completion_count": int(r.completion_count),
                "average_score": round(float(r.average_score or 0), 2),
            }
            for r in rows
        ]
