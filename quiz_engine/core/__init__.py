"""
Core building blocks: error taxonomy and logging setup.
"""

from quiz_engine.core.errors import (
    AttemptAlreadyCompleted,
    AttemptNotFound,
    ContentError,
    EmptyRepositoryError,
    InvalidTransitionError,
    NotFoundError,
    QuestionAlreadyAnswered,
    QuestionMismatch,
    QuestionNotFound,
    QuizEngineError,
    RemediationAlreadyCompleted,
    RemediationNotFound,
    ScopeNotFound,
    SessionNotFound,
    SessionStoreError,
)

__all__ = [
    "QuizEngineError",
    "NotFoundError",
    "ScopeNotFound",
    "QuestionNotFound",
    "AttemptNotFound",
    "RemediationNotFound",
    "SessionNotFound",
    "InvalidTransitionError",
    "QuestionMismatch",
    "AttemptAlreadyCompleted",
    "RemediationAlreadyCompleted",
    "QuestionAlreadyAnswered",
    "EmptyRepositoryError",
    "ContentError",
    "SessionStoreError",
]
