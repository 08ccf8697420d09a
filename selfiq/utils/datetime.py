"""UTC helpers.

The application works with aware UTC datetimes; the database columns are
naive and hold UTC. Convert at the storage boundary only.
"""
from __future__ import annotations
from datetime import datetime, UTC
from typing import Optional

__all__ = ["utc_now", "ensure_aware_utc", "to_naive_utc", "elapsed_seconds"]


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_aware_utc(dt: datetime | None) -> Optional[datetime]:
    """Value read from a naive UTC column -> aware UTC. None passes through."""
    if dt is None:
        return None
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)


def to_naive_utc(dt: datetime | None) -> Optional[datetime]:
    """Aware (any zone) -> naive UTC for storage. Naive input is taken as UTC already."""
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(UTC).replace(tzinfo=None)


def elapsed_seconds(start: datetime | None, end: datetime) -> Optional[int]:
    """Whole seconds from ``start`` to ``end``, never negative; None without a start."""
    if start is None:
        return None
    delta = ensure_aware_utc(end) - ensure_aware_utc(start)
    return max(0, int(delta.total_seconds()))
