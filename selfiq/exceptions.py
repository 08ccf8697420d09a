"""Exception types shared by the services and the HTTP layer.

Two families live here:

* HTTP-facing exceptions (``UnauthorizedException`` and friends) that route
  handlers raise and ``selfiq.main`` turns into JSON responses.
* Domain errors raised by the assessment core when a caller misuses it.
  Store failures are never raised; they come back as ``False``/``None``
  from the store adapters, so anything in this second family means
  "programming-contract violation", not "backend problem".
"""
from fastapi import HTTPException, status


class UnauthorizedException(HTTPException):
    def __init__(self, detail: str = "Authentication required"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class ForbiddenException(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundException(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ValidationException(HTTPException):
    def __init__(self, detail: str = "Invalid request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class AssessmentError(Exception):
    """Base class for assessment domain errors."""


class InvalidTransitionError(AssessmentError):
    """An operation was called in a session state that does not allow it."""

    def __init__(self, operation: str, state: str, reason: str | None = None):
        self.operation = operation
        self.state = state
        message = f"Cannot {operation} while session is {state}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnknownAssessmentError(AssessmentError):
    def __init__(self, assessment_id: str):
        self.assessment_id = assessment_id
        super().__init__(f"Unknown assessment: {assessment_id}")


class UnknownAnswerError(AssessmentError):
    """Question/answer ids that do not belong to the assessment definition."""


class InvalidDefinitionError(AssessmentError):
    """An assessment content document failed integrity validation."""
