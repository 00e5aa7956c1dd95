"""
Quiz Attempt Service.

Primary quiz delivery state machine: serves a scope's questions one at a
time, grades each answer against the question the learner is actually on,
and produces the post-quiz summary that feeds remediation.

    IN_PROGRESS --answer(last question)--> COMPLETED

COMPLETED is terminal. Every mutating call works on a fresh copy loaded from
the session store and persists only once the whole call has succeeded.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from quiz_engine.core.errors import (
    AttemptAlreadyCompleted,
    AttemptNotFound,
    ContentError,
    EmptyRepositoryError,
    QuestionMismatch,
)
from quiz_engine.quiz.grading import Grader, grade_answer
from quiz_engine.quiz.models import Difficulty, Question, QuestionType
from quiz_engine.quiz.repository import QuestionRepository
from quiz_engine.sessions.locks import SessionLockRegistry
from quiz_engine.sessions.state import (
    AnswerRecord,
    Attempt,
    AttemptStatus,
    SessionKind,
    new_session_id,
)
from quiz_engine.sessions.store import SessionStore


@dataclass
class StartedAttempt:
    attempt_id: str
    total_questions: int
    first_question: Question


@dataclass
class CurrentQuestion:
    """Question at the attempt's cursor; ``question`` is None once all are answered."""

    question: Optional[Question]
    index: int
    total: int


@dataclass
class AnswerOutcome:
    is_correct: bool
    explanation: str
    correct_answer: str
    next_question: Optional[Question]
    all_answered: bool


@dataclass
class WrongQuestion:
    """A missed question, ready to be escalated into remediation."""

    question_id: str
    question_text: str
    user_answer: str
    correct_answer: str
    explanation: str
    recommended_difficulty: Difficulty


@dataclass
class QuizSummary:
    attempt_id: str
    quiz_id: str
    status: AttemptStatus
    score: int
    total: int
    answered: int
    percentage: int
    wrong_questions: list[WrongQuestion] = field(default_factory=list)

    @property
    def remediation_required(self) -> bool:
        return bool(self.wrong_questions)


def percentage_of(score: int, total: int) -> int:
    """100 * score / total rounded half up; 0 for an empty quiz."""
    if total <= 0:
        return 0
    return (200 * score + total) // (2 * total)


class QuizAttemptService:
    """
    Serve quiz questions one at a time and score the answers.

    Args:
        repository: Source of the quiz's questions
        store: Session store holding attempts
        locks: Per-session lock registry (shared with other services)
        graders: Optional grader mapping overriding the global registry
        recommended_difficulty: Remediation difficulty suggested for missed questions
    """

    def __init__(
        self,
        repository: QuestionRepository,
        store: SessionStore,
        locks: SessionLockRegistry | None = None,
        graders: Mapping[QuestionType, Grader] | None = None,
        recommended_difficulty: Difficulty | str = Difficulty.STANDARD,
    ):
        self.repository = repository
        self.store = store
        self.locks = locks if locks is not None else SessionLockRegistry()
        self.graders = graders
        self.recommended_difficulty = Difficulty(recommended_difficulty)

    # ========================================
    # Operations
    # ========================================

    def start(self, quiz_id: str) -> StartedAttempt:
        """
        Start a new attempt over every question in the quiz scope.

        Raises:
            ScopeNotFound: quiz_id is not a known scope
            EmptyRepositoryError: the scope has no questions
            ContentError: the scope lists the same question twice
        """
        questions = self.repository.find_by_scope(quiz_id)
        if not questions:
            raise EmptyRepositoryError(f"Quiz {quiz_id} has no questions")
        # answers are keyed by question id
        if len({q.id for q in questions}) != len(questions):
            raise ContentError(f"Quiz {quiz_id} repeats a question id")

        attempt = Attempt(id=new_session_id("att"), quiz_id=quiz_id, questions=questions)
        self.store.create(attempt)

        logger.info(f"Attempt {attempt.id} started on {quiz_id} ({attempt.total} questions)")
        return StartedAttempt(
            attempt_id=attempt.id,
            total_questions=attempt.total,
            first_question=questions[0],
        )

    def current_question(self, attempt_id: str) -> CurrentQuestion:
        attempt = self._load(attempt_id)
        return CurrentQuestion(
            question=attempt.current_question(),
            index=attempt.current_index,
            total=attempt.total,
        )

    def answer(self, attempt_id: str, question_id: str, answer_id: str) -> AnswerOutcome:
        """
        Grade the answer to the question at the attempt's cursor and advance.

        Args:
            attempt_id: Attempt being answered
            question_id: Question the learner answered; must be the current one
            answer_id: Selected option id, or free text for open-ended questions

        Raises:
            AttemptNotFound: unknown attempt
            AttemptAlreadyCompleted: every question is already answered
            QuestionMismatch: question_id is not the current question
        """
        with self.locks.hold(SessionKind.ATTEMPT, attempt_id):
            attempt = self._load(attempt_id)
            if attempt.is_completed:
                raise AttemptAlreadyCompleted(f"Attempt {attempt_id} is already completed")

            current = attempt.current_question()
            if current is None or current.id != question_id:
                expected = current.id if current else None
                raise QuestionMismatch(
                    f"Attempt {attempt_id} is on question {expected}, not {question_id}"
                )

            result = grade_answer(current, answer_id, self.graders)
            attempt.answers[current.id] = AnswerRecord(
                question_id=current.id,
                is_correct=result.is_correct,
                selected_option_id=result.selected_option_id,
                text_answer=result.text_answer,
            )
            attempt.current_index += 1
            if attempt.current_index >= attempt.total:
                attempt.status = AttemptStatus.COMPLETED

            self.store.update(attempt)

        logger.debug(
            f"Attempt {attempt_id}: {current.id} "
            f"{'correct' if result.is_correct else 'wrong'} "
            f"({attempt.current_index}/{attempt.total})"
        )
        if attempt.is_completed:
            logger.info(f"Attempt {attempt_id} completed")

        return AnswerOutcome(
            is_correct=result.is_correct,
            explanation=current.explanation,
            correct_answer=result.correct_answer,
            next_question=attempt.current_question(),
            all_answered=attempt.is_completed,
        )

    def summary(self, attempt_id: str) -> QuizSummary:
        """
        Score the attempt so far.

        Safe to call mid-attempt: unanswered questions count toward the total
        but are not listed as wrong.
        """
        attempt = self._load(attempt_id)

        score = 0
        wrong: list[WrongQuestion] = []
        for question in attempt.questions:
            record = attempt.answers.get(question.id)
            if record is None:
                continue
            if record.is_correct:
                score += 1
                continue
            wrong.append(
                WrongQuestion(
                    question_id=question.id,
                    question_text=question.body,
                    user_answer=_answer_text(question, record),
                    correct_answer=_correct_text(question),
                    explanation=question.explanation,
                    recommended_difficulty=self.recommended_difficulty,
                )
            )

        return QuizSummary(
            attempt_id=attempt.id,
            quiz_id=attempt.quiz_id,
            status=attempt.status,
            score=score,
            total=attempt.total,
            answered=len(attempt.answers),
            percentage=percentage_of(score, attempt.total),
            wrong_questions=wrong,
        )

    # ========================================
    # Helpers
    # ========================================

    def _load(self, attempt_id: str) -> Attempt:
        attempt = self.store.get(SessionKind.ATTEMPT, attempt_id)
        if attempt is None:
            raise AttemptNotFound(f"Attempt not found: {attempt_id}")
        return attempt


def _answer_text(question: Question, record: AnswerRecord) -> str:
    if record.text_answer is not None:
        return record.text_answer
    option = question.find_option(record.selected_option_id or "")
    return option.text if option else (record.selected_option_id or "")


def _correct_text(question: Question) -> str:
    if question.question_type == QuestionType.MULTIPLE_CHOICE:
        return question.correct_option().text
    return question.accepted_answers[0] if question.accepted_answers else ""
