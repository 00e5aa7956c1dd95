"""
Answer grading.

Each question type has one grader, registered with ``@register``. Multiple
choice questions are graded against their flagged-correct option only.
Open-ended grading is pluggable: the default grader accepts a normalized
exact match against the question's accepted answers, and callers can
register their own grader (or pass a grader mapping to a service).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from quiz_engine.core.errors import ContentError
from quiz_engine.quiz.models import Question, QuestionType


@dataclass
class GradeResult:
    """Outcome of grading one answer."""

    is_correct: bool
    submitted_answer: str  # human-readable text of what was submitted
    correct_answer: str
    selected_option_id: str | None = None
    text_answer: str | None = None


class Grader(Protocol):
    """Protocol for question type graders."""

    def grade(self, question: Question, answer: str) -> GradeResult:
        """Grade a raw answer (option id or free text) for the question."""
        ...


# Grader registry - populated by @register decorator
GRADERS: dict[QuestionType, Grader] = {}


def register(question_type: QuestionType):
    """Decorator to register a grader for a question type."""

    def decorator(cls):
        GRADERS[question_type] = cls()
        return cls

    return decorator


def get_grader(
    question_type: str | QuestionType,
    graders: Mapping[QuestionType, Grader] | None = None,
) -> Grader:
    """Get the grader for a question type."""
    if isinstance(question_type, str):
        question_type = QuestionType(question_type)
    registry = graders if graders is not None else GRADERS
    grader = registry.get(question_type)
    if grader is None:
        raise ContentError(f"No grader registered for {question_type.value} questions")
    return grader


def grade_answer(
    question: Question,
    answer: str,
    graders: Mapping[QuestionType, Grader] | None = None,
) -> GradeResult:
    """Grade ``answer`` with the grader registered for the question's type."""
    return get_grader(question.question_type, graders).grade(question, answer)


@register(QuestionType.MULTIPLE_CHOICE)
class MultipleChoiceGrader:
    """Compares the selected option id with the flagged-correct option."""

    def grade(self, question: Question, answer: str) -> GradeResult:
        correct = question.correct_option()
        selected = question.find_option(answer)
        if selected is None:
            logger.debug(f"Option {answer!r} is not part of question {question.id}")

        return GradeResult(
            is_correct=selected is not None and selected.id == correct.id,
            submitted_answer=selected.text if selected else answer,
            correct_answer=correct.text,
            selected_option_id=answer,
        )


_WHITESPACE = re.compile(r"\s+")


def normalize_text(value: str) -> str:
    """Casefold and collapse whitespace for lenient text comparison."""
    return _WHITESPACE.sub(" ", value.strip()).casefold()


@register(QuestionType.OPEN_ENDED)
class ExactTextGrader:
    """Normalized exact match against the question's accepted answers."""

    def grade(self, question: Question, answer: str) -> GradeResult:
        if not question.accepted_answers:
            raise ContentError(f"Open-ended question {question.id} has no accepted answers")

        normalized = normalize_text(answer)
        is_correct = any(
            normalized == normalize_text(accepted) for accepted in question.accepted_answers
        )
        return GradeResult(
            is_correct=is_correct,
            submitted_answer=answer,
            correct_answer=question.accepted_answers[0],
            text_answer=answer,
        )
