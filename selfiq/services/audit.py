"""Audit/analytics logging helper functions for assessment session events.

Standard JSON-ish single-line logs so they are easy to index. Emission is
fire-and-forget: a formatting or handler problem is logged and dropped, it
never reaches the caller.
"""
from __future__ import annotations
import logging
from datetime import datetime, UTC
from typing import Optional, Any

_logger = logging.getLogger("selfiq.audit")


def _emit(event: str, user_id: Optional[str] = None, **data: Any):
    try:
        payload = {"ts": datetime.now(UTC).isoformat(), "event": event}
        if user_id:
            payload["user_id"] = user_id
        payload.update(data)
        parts = [f"{k}={repr(v)}" for k, v in payload.items()]
        _logger.info("AUDIT " + " ".join(parts))
    except Exception:
        _logger.exception(f"Failed to emit audit event {event}")

# Public convenience wrappers

def log_session_start(user_id: str, test_id: str, resumed: bool, question_index: int):
    _emit("session.start", user_id=user_id, test_id=test_id, resumed=resumed, question_index=question_index)

def log_answer_submit(user_id: str, test_id: str, question_id: str, answer_id: str, persisted: bool):
    _emit("session.answer", user_id=user_id, test_id=test_id, question_id=question_id, answer_id=answer_id, persisted=persisted)

def log_session_complete(user_id: str, test_id: str, result_id: Optional[str], primary_profile: Optional[str],
                         completion_time_seconds: Optional[int]):
    _emit(
        "session.complete",
        user_id=user_id,
        test_id=test_id,
        result_id=result_id,
        primary_profile=primary_profile,
        completion_time_seconds=completion_time_seconds,
    )

def log_session_reset(user_id: str, test_id: str, deleted: bool):
    _emit("session.reset", user_id=user_id, test_id=test_id, deleted=deleted)

def log_access_denied(user_id: Optional[str], test_id: str, reason: str):
    _emit("access.denied", user_id=user_id, test_id=test_id, reason=reason)
