"""
Quiz delivery and practice drilling.
"""

from .attempt_service import (
    AnswerOutcome,
    CurrentQuestion,
    QuizAttemptService,
    QuizSummary,
    StartedAttempt,
    WrongQuestion,
    percentage_of,
)
from .practice_service import (
    PracticeAnswerOutcome,
    PracticeSessionService,
    PracticeStats,
    StartedPractice,
)

__all__ = [
    "QuizAttemptService",
    "StartedAttempt",
    "CurrentQuestion",
    "AnswerOutcome",
    "WrongQuestion",
    "QuizSummary",
    "percentage_of",
    "PracticeSessionService",
    "StartedPractice",
    "PracticeAnswerOutcome",
    "PracticeStats",
]
