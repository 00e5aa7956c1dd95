"""
Remediation Service.

Mastery loop for one missed quiz question: serve remedial questions at the
chosen difficulty until the learner has answered ``required`` of them
correctly.

    ACTIVE --submit(correct)--> ACTIVE | COMPLETE
    ACTIVE --submit(wrong)----> ACTIVE (next question)

Wrong answers never reset progress and there is no attempt ceiling. Remedial
questions come from the curated bank for the missed question when one exists
at that difficulty, otherwise from the generic bank, cycling through the bank
in order.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from quiz_engine.core.errors import (
    AttemptNotFound,
    ContentError,
    EmptyRepositoryError,
    QuestionNotFound,
    RemediationAlreadyCompleted,
    RemediationNotFound,
)
from quiz_engine.quiz.grading import Grader, grade_answer
from quiz_engine.quiz.models import Difficulty, Question, QuestionType
from quiz_engine.quiz.repository import QuestionRepository
from quiz_engine.sessions.locks import SessionLockRegistry
from quiz_engine.sessions.state import (
    AnswerRecord,
    RemediationSession,
    SessionKind,
    new_session_id,
)
from quiz_engine.sessions.store import SessionStore


@dataclass
class RemediationView:
    remediation_id: str
    attempt_id: str
    question_id: str
    difficulty: Difficulty
    completed: int
    required: int
    remediation_completed: bool
    question: Optional[Question]
    questions_served: int

    @property
    def progress(self) -> dict[str, int]:
        return {"completed": self.completed, "required": self.required}


@dataclass
class RemedialAnswerOutcome:
    is_correct: bool
    explanation: str
    correct_answer: str
    completed: int
    required: int
    remediation_completed: bool
    next_question: Optional[Question]

    @property
    def progress(self) -> dict[str, int]:
        return {"completed": self.completed, "required": self.required}


class RemediationService:
    """
    Drive remediation sessions for missed quiz questions.

    Args:
        repository: Source of curated and generic remedial banks
        store: Session store holding attempts and remediation sessions
        locks: Per-session lock registry
        graders: Optional grader mapping overriding the global registry
        required_correct: Correct remedial answers needed to finish
    """

    def __init__(
        self,
        repository: QuestionRepository,
        store: SessionStore,
        locks: SessionLockRegistry | None = None,
        graders: Mapping[QuestionType, Grader] | None = None,
        required_correct: int = 2,
    ):
        self.repository = repository
        self.store = store
        self.locks = locks if locks is not None else SessionLockRegistry()
        self.graders = graders
        self.required_correct = required_correct

    def begin(
        self,
        attempt_id: str,
        question_id: str,
        difficulty: Difficulty | str,
    ) -> RemediationView:
        """
        Open a remediation session for a question of an attempt.

        Raises:
            AttemptNotFound: unknown attempt
            QuestionNotFound: the question is not part of the attempt
            EmptyRepositoryError: no remedial questions at this difficulty
        """
        difficulty = Difficulty(difficulty)
        attempt = self.store.get(SessionKind.ATTEMPT, attempt_id)
        if attempt is None:
            raise AttemptNotFound(f"Attempt not found: {attempt_id}")
        if not any(question.id == question_id for question in attempt.questions):
            raise QuestionNotFound(f"Question {question_id} is not part of attempt {attempt_id}")

        session = RemediationSession(
            id=new_session_id("rem"),
            attempt_id=attempt_id,
            question_id=question_id,
            difficulty=difficulty,
            required=self.required_correct,
        )
        self._serve_next(session)
        self.store.create(session)

        logger.info(
            f"Remediation {session.id} begun for {question_id} "
            f"({difficulty.value}, {session.required} correct needed)"
        )
        return self._view(session)

    def submit(self, remediation_id: str, answer_id: str) -> RemedialAnswerOutcome:
        """
        Grade the answer to the currently served remedial question.

        Raises:
            RemediationNotFound: unknown remediation
            RemediationAlreadyCompleted: the quota is already met
        """
        with self.locks.hold(SessionKind.REMEDIATION, remediation_id):
            session = self._load(remediation_id)
            if session.remediation_completed:
                raise RemediationAlreadyCompleted(
                    f"Remediation {remediation_id} is already completed"
                )

            question = session.current_question
            if question is None:
                raise ContentError(f"Remediation {remediation_id} has no question to answer")

            result = grade_answer(question, answer_id, self.graders)
            session.history.append(
                AnswerRecord(
                    question_id=question.id,
                    is_correct=result.is_correct,
                    selected_option_id=result.selected_option_id,
                    text_answer=result.text_answer,
                )
            )
            if result.is_correct:
                session.completed += 1

            if session.completed >= session.required:
                session.remediation_completed = True
                session.current_question = None
            else:
                session.ordinal += 1
                self._serve_next(session)

            self.store.update(session)

        logger.debug(
            f"Remediation {remediation_id}: {'correct' if result.is_correct else 'wrong'} "
            f"({session.completed}/{session.required})"
        )
        if session.remediation_completed:
            logger.info(
                f"Remediation {remediation_id} completed after "
                f"{session.questions_served} questions"
            )

        return RemedialAnswerOutcome(
            is_correct=result.is_correct,
            explanation=question.explanation,
            correct_answer=result.correct_answer,
            completed=session.completed,
            required=session.required,
            remediation_completed=session.remediation_completed,
            next_question=session.current_question,
        )

    def get(self, remediation_id: str) -> RemediationView:
        return self._view(self._load(remediation_id))

    # ========================================
    # Helpers
    # ========================================

    def _serve_next(self, session: RemediationSession) -> None:
        """Materialize the bank entry at the session's ordinal as the current question."""
        bank = self.repository.find_related(session.question_id, session.difficulty)
        if not bank:
            raise EmptyRepositoryError(
                f"No {session.difficulty.value} remedial questions for {session.question_id}"
            )
        source = bank[(session.ordinal - 1) % len(bank)]
        session.current_question = source.instantiate()
        session.questions_served += 1

    def _load(self, remediation_id: str) -> RemediationSession:
        session = self.store.get(SessionKind.REMEDIATION, remediation_id)
        if session is None:
            raise RemediationNotFound(f"Remediation not found: {remediation_id}")
        return session

    @staticmethod
    def _view(session: RemediationSession) -> RemediationView:
        return RemediationView(
            remediation_id=session.id,
            attempt_id=session.attempt_id,
            question_id=session.question_id,
            difficulty=session.difficulty,
            completed=session.completed,
            required=session.required,
            remediation_completed=session.remediation_completed,
            question=session.current_question,
            questions_served=session.questions_served,
        )
