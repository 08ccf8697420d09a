"""Assessment session lifecycle.

``AssessmentSession`` drives one (user, assessment) pair through

    not_started -> in_progress -> completed

* ``start()`` resumes persisted progress when it exists, otherwise begins a
  fresh session at question index 0.
* ``submit_answer()`` records one answer, advances the index, recomputes
  progress and flushes it through the progress store. The in-memory state
  advances even when the flush fails; ``SubmitOutcome.persisted`` tells the
  caller whether the store actually has it.
* ``finalize()`` is only allowed once every question is answered. It folds
  the scores, derives the profile, appends the result to the archive and
  then deletes the progress row. If the archive write fails nothing changes
  and ``finalize()`` may be retried.
* ``restart()`` is allowed from any state and drops persisted progress.

Misuse (wrong state, unknown ids, answering a question twice) raises
``InvalidTransitionError`` / ``UnknownAnswerError``. Store problems never
raise; they arrive here as ``False``/``None`` from the collaborators.
"""
from __future__ import annotations
import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from selfiq.core.assessment_catalog import AssessmentDefinition, Question
from selfiq.core.records import AnswerRecord, AssessmentResult, SessionProgress
from selfiq.exceptions import InvalidTransitionError
from selfiq.services import audit
from selfiq.services.feedback import ANSWER_RECORDED, ASSESSMENT_COMPLETED, FeedbackService
from selfiq.services.profile import summarize
from selfiq.services.progress_store import ProgressStore
from selfiq.services.result_archive import ResultArchive
from selfiq.services.scoring import RAW_MAX, RAW_MIN, fold_scores
from selfiq.utils.datetime import elapsed_seconds, utc_now

logger = logging.getLogger("selfiq.session")


class SessionState(enum.Enum):
    not_started = "not_started"
    in_progress = "in_progress"
    completed = "completed"


@dataclass(frozen=True)
class SubmitOutcome:
    progress: SessionProgress
    persisted: bool
    is_final: bool


class AssessmentSession:
    def __init__(
        self,
        definition: AssessmentDefinition,
        user_id: str,
        progress_store: ProgressStore,
        result_archive: ResultArchive,
        feedback: Optional[FeedbackService] = None,
        clock: Callable[[], datetime] = utc_now,
        raw_min: int = RAW_MIN,
        raw_max: int = RAW_MAX,
    ):
        self.definition = definition
        self.user_id = user_id
        self.progress_store = progress_store
        self.result_archive = result_archive
        self.feedback = feedback
        self.clock = clock
        self.raw_min = raw_min
        self.raw_max = raw_max
        self.state = SessionState.not_started
        self.resumed = False
        self.result: Optional[AssessmentResult] = None
        self._progress: Optional[SessionProgress] = None

    @property
    def progress(self) -> Optional[SessionProgress]:
        return self._progress.copy() if self._progress else None

    @property
    def current_question(self) -> Optional[Question]:
        if self._progress is None or self._progress.is_complete:
            return None
        idx = self._progress.current_question_index
        if idx < self.definition.total_questions:
            question = self.definition.questions[idx]
            if question.id not in self._progress.completed_question_ids:
                return question
        # Index and answered set disagree (out-of-order submissions): first unanswered question
        for question in self.definition.questions:
            if question.id not in self._progress.completed_question_ids:
                return question
        return None

    def _require(self, operation: str, *states: SessionState) -> None:
        if self.state not in states:
            raise InvalidTransitionError(operation, self.state.value)

    def start(self, announce: bool = True) -> SessionProgress:
        """Resume stored progress or begin at question 0. Idempotent while in progress.

        ``announce=False`` rebuilds the session for a follow-up call (answer,
        finalize) without emitting a ``session.start`` audit event.
        """
        if self.state == SessionState.in_progress:
            return self._progress.copy()
        self._require("start", SessionState.not_started)
        stored = self.progress_store.load(self.user_id, self.definition)
        if stored is not None:
            self._progress = stored
            if self._progress.started_at is None:
                self._progress.started_at = stored.last_updated or self.clock()
            self.resumed = True
        else:
            self._progress = SessionProgress(
                user_id=self.user_id,
                test_id=self.definition.id,
                total_questions=self.definition.total_questions,
                started_at=self.clock(),
            )
            self.resumed = False
        self.state = SessionState.in_progress
        if announce:
            audit.log_session_start(
                self.user_id, self.definition.id, self.resumed, self._progress.current_question_index
            )
        return self._progress.copy()

    def submit_answer(self, question_id: str, answer_id: str) -> SubmitOutcome:
        self._require("submit an answer", SessionState.in_progress)
        progress = self._progress
        if progress.is_complete:
            raise InvalidTransitionError("submit an answer", self.state.value, "every question is already answered")
        # raises UnknownAnswerError before anything is mutated
        self.definition.resolve(question_id, answer_id)
        if question_id in progress.completed_question_ids:
            raise InvalidTransitionError(
                "submit an answer", self.state.value, f"question {question_id} was already answered"
            )

        progress.answers.append(AnswerRecord(question_id=question_id, answer_id=answer_id))
        progress.completed_question_ids.append(question_id)
        progress.current_question_index = min(progress.current_question_index + 1, progress.total_questions)
        progress.last_updated = self.clock()

        persisted = self.progress_store.save(progress)
        if not persisted:
            logger.warning(
                f"Progress for user={self.user_id} test={self.definition.id} kept in memory only "
                f"(question {progress.current_question_label}/{progress.total_questions})"
            )
        is_final = progress.is_complete
        if self.feedback:
            self.feedback.cue(ANSWER_RECORDED, test_id=self.definition.id, question_id=question_id, is_final=is_final)
        audit.log_answer_submit(self.user_id, self.definition.id, question_id, answer_id, persisted)
        return SubmitOutcome(progress=progress.copy(), persisted=persisted, is_final=is_final)

    def finalize(self) -> Optional[AssessmentResult]:
        """Archive the finished session. Returns the stored result, or None if archiving failed."""
        self._require("finalize", SessionState.in_progress)
        progress = self._progress
        if not progress.is_complete:
            raise InvalidTransitionError(
                "finalize",
                self.state.value,
                f"{len(set(progress.completed_question_ids))} of {progress.total_questions} questions answered",
            )

        scores = fold_scores(progress.answers, self.definition)
        summary = summarize(scores, self.raw_min, self.raw_max)
        completed_at = self.clock()
        elapsed = elapsed_seconds(progress.started_at, completed_at)
        result = AssessmentResult(
            user_id=self.user_id,
            test_id=self.definition.id,
            test_name=self.definition.name,
            scores=scores,
            percentage_score=progress.progress_percentage,
            answers=tuple(progress.answers),
            primary_profile=summary.primary.category,
            secondary_profile=summary.secondary.category if summary.secondary else None,
            completion_time_seconds=elapsed,
            completed_at=completed_at,
        )

        stored = self.result_archive.append(result)
        if stored is None:
            logger.warning(f"Finalize failed for user={self.user_id} test={self.definition.id}; progress kept")
            return None

        # The result is durable from here on; a failed delete only leaves a stale resumable row.
        if not self.progress_store.delete(self.user_id, self.definition.id):
            logger.error(
                f"Result {stored.id} archived but progress row for user={self.user_id} "
                f"test={self.definition.id} could not be deleted"
            )
        self.result = stored
        self.state = SessionState.completed
        if self.feedback:
            self.feedback.cue(ASSESSMENT_COMPLETED, test_id=self.definition.id, primary_profile=stored.primary_profile)
        audit.log_session_complete(
            self.user_id, self.definition.id, stored.id, stored.primary_profile, stored.completion_time_seconds
        )
        return stored

    def restart(self) -> bool:
        """Drop persisted progress and return to not_started. Returns whether the delete succeeded."""
        deleted = self.progress_store.delete(self.user_id, self.definition.id)
        self._progress = None
        self.result = None
        self.resumed = False
        self.state = SessionState.not_started
        audit.log_session_reset(self.user_id, self.definition.id, deleted)
        return deleted
