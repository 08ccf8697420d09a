"""Client feedback cues (sounds, haptics) as an injected service.

One ``FeedbackService`` is created per application in the FastAPI lifespan
and handed to whatever needs it; there is no module-level instance. Cues
are only dispatched between ``initialize()`` and ``dispose()`` and while
``enabled`` is true. Listener failures are logged and swallowed so a broken
cue can never interrupt an assessment.
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger("selfiq.feedback")

ANSWER_RECORDED = "answer_recorded"
ASSESSMENT_COMPLETED = "assessment_completed"

Listener = Callable[[str, Dict[str, Any]], None]


class FeedbackService:
    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._initialized = False
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        self._initialized = True
        logger.debug(f"Feedback service initialized (enabled={self.enabled})")

    def dispose(self) -> None:
        self._initialized = False
        self._listeners.clear()
        logger.debug("Feedback service disposed")

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled

    def subscribe(self, cue: str, listener: Listener) -> None:
        self._listeners[cue].append(listener)

    def unsubscribe(self, cue: str, listener: Listener) -> None:
        try:
            self._listeners[cue].remove(listener)
        except ValueError:
            pass

    def cue(self, name: str, **data: Any) -> int:
        """Dispatch ``name`` to its listeners; returns how many were called successfully."""
        if not (self._initialized and self.enabled):
            return 0
        delivered = 0
        for listener in list(self._listeners.get(name, ())):
            try:
                listener(name, data)
                delivered += 1
            except Exception as e:
                logger.warning(f"Feedback listener for {name} failed: {e}")
        return delivered
