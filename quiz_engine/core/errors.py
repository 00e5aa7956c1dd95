"""
Error taxonomy for the quiz engine.

Three families are surfaced to callers:

- NotFoundError: a scope, question, attempt, remediation or practice session
  does not exist. Always safe to report as a 404.
- InvalidTransitionError: the caller is out of sync with server state
  (answering a stale question, answering a finished attempt). Reported as a
  conflict.
- EmptyRepositoryError / ContentError: content is missing or unusable. These
  are configuration problems, not client errors.

Every service raises before persisting, so a failed call leaves the stored
session untouched.
"""

from __future__ import annotations


class QuizEngineError(Exception):
    """Base exception for quiz engine errors."""

    status_code = 500


# ========================================
# Not found
# ========================================


class NotFoundError(QuizEngineError):
    """Raised when a requested entity does not exist."""

    status_code = 404


class ScopeNotFound(NotFoundError):
    """Raised when a quiz/topic/subchapter scope id is unknown."""


class QuestionNotFound(NotFoundError):
    """Raised when a question id is unknown in the requested context."""


class AttemptNotFound(NotFoundError):
    """Raised when an attempt id is unknown."""


class RemediationNotFound(NotFoundError):
    """Raised when a remediation id is unknown."""


class SessionNotFound(NotFoundError):
    """Raised when a practice session id is unknown."""


# ========================================
# Invalid transitions
# ========================================


class InvalidTransitionError(QuizEngineError):
    """Raised when a call does not match the session's current state."""

    status_code = 409


class QuestionMismatch(InvalidTransitionError):
    """Raised when an answer targets a question other than the current one."""


class AttemptAlreadyCompleted(InvalidTransitionError):
    """Raised when answering an attempt that is already completed."""


class RemediationAlreadyCompleted(InvalidTransitionError):
    """Raised when submitting to a remediation whose quota is already met."""


class QuestionAlreadyAnswered(InvalidTransitionError):
    """Raised when a practice question instance is answered twice."""


# ========================================
# Content / configuration
# ========================================


class EmptyRepositoryError(QuizEngineError):
    """Raised when no question is available for the requested pool."""


class ContentError(QuizEngineError):
    """Raised when authored content has no resolvable correct answer."""


class SessionStoreError(QuizEngineError):
    """Raised when the session store cannot honour a create/update."""


ERRORS_BY_NAME: dict[str, type[QuizEngineError]] = {
    cls.__name__: cls
    for cls in (
        QuizEngineError,
        NotFoundError,
        ScopeNotFound,
        QuestionNotFound,
        AttemptNotFound,
        RemediationNotFound,
        SessionNotFound,
        InvalidTransitionError,
        QuestionMismatch,
        AttemptAlreadyCompleted,
        RemediationAlreadyCompleted,
        QuestionAlreadyAnswered,
        EmptyRepositoryError,
        ContentError,
        SessionStoreError,
    )
}


def error_payload(exc: QuizEngineError) -> dict[str, str]:
    """Serialize an engine error for transport."""
    return {"error": type(exc).__name__, "message": str(exc)}
