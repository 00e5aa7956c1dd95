"""
Practice Session Service.

Open-ended, non-scored drilling at a fixed difficulty. A session starts with
a handful of questions from the scope (or the generic bank when the scope
has nothing at that difficulty) and grows by one question per
``generate_more`` call for as long as the learner keeps going.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from quiz_engine.core.errors import (
    EmptyRepositoryError,
    QuestionAlreadyAnswered,
    QuestionNotFound,
    SessionNotFound,
)
from quiz_engine.quiz.grading import Grader, grade_answer
from quiz_engine.quiz.models import Difficulty, Question, QuestionType
from quiz_engine.quiz.repository import QuestionRepository
from quiz_engine.sessions.locks import SessionLockRegistry
from quiz_engine.sessions.state import AnswerRecord, PracticeSession, SessionKind, new_session_id
from quiz_engine.sessions.store import SessionStore


@dataclass
class StartedPractice:
    session_id: str
    difficulty: Difficulty
    questions: list[Question]
    context_used: bool


@dataclass
class PracticeAnswerOutcome:
    is_correct: bool
    explanation: str
    correct_answer: str
    questions_completed: int
    total_correct: int


@dataclass
class PracticeStats:
    session_id: str
    scope_id: str
    difficulty: Difficulty
    context_used: bool
    questions_served: int
    questions_completed: int
    total_correct: int
    accuracy: float


class PracticeSessionService:
    """Serve and grade practice questions for one scope and difficulty."""

    def __init__(
        self,
        repository: QuestionRepository,
        store: SessionStore,
        locks: SessionLockRegistry | None = None,
        graders: Mapping[QuestionType, Grader] | None = None,
        initial_count: int = 5,
    ):
        self.repository = repository
        self.store = store
        self.locks = locks if locks is not None else SessionLockRegistry()
        self.graders = graders
        self.initial_count = initial_count

    def start(self, scope_id: str, difficulty: Difficulty | str) -> StartedPractice:
        """
        Open a practice session.

        Raises:
            ScopeNotFound: unknown scope
            EmptyRepositoryError: neither the scope nor the generic bank has
                questions at this difficulty
        """
        difficulty = Difficulty(difficulty)
        pool = self.repository.find_by_difficulty(scope_id, difficulty)
        context_used = bool(pool)
        if not context_used:
            logger.info(
                f"No {difficulty.value} questions in {scope_id}, using the generic bank"
            )
            pool = self.repository.find_generic(difficulty)
        if not pool:
            raise EmptyRepositoryError(f"No {difficulty.value} practice questions for {scope_id}")

        session = PracticeSession(
            id=new_session_id("prac"),
            scope_id=scope_id,
            difficulty=difficulty,
            context_used=context_used,
            questions=[question.instantiate() for question in pool[: self.initial_count]],
        )
        self.store.create(session)

        logger.info(
            f"Practice {session.id} started on {scope_id} "
            f"({difficulty.value}, {len(session.questions)} questions)"
        )
        return StartedPractice(
            session_id=session.id,
            difficulty=difficulty,
            questions=list(session.questions),
            context_used=context_used,
        )

    def answer(self, session_id: str, question_id: str, answer_id: str) -> PracticeAnswerOutcome:
        """
        Grade one served question instance.

        Raises:
            SessionNotFound: unknown session
            QuestionNotFound: the instance was not served in this session
            QuestionAlreadyAnswered: the instance already has an answer
        """
        with self.locks.hold(SessionKind.PRACTICE, session_id):
            session = self._load(session_id)
            question = session.find_question(question_id)
            if question is None:
                raise QuestionNotFound(f"Question {question_id} is not part of practice {session_id}")
            if question_id in session.answers:
                raise QuestionAlreadyAnswered(f"Question {question_id} was already answered")

            result = grade_answer(question, answer_id, self.graders)
            session.answers[question_id] = AnswerRecord(
                question_id=question_id,
                is_correct=result.is_correct,
                selected_option_id=result.selected_option_id,
                text_answer=result.text_answer,
            )
            if result.is_correct:
                session.correct_count += 1

            self.store.update(session)

        logger.debug(
            f"Practice {session_id}: {session.correct_count}/{len(session.answers)} correct"
        )
        return PracticeAnswerOutcome(
            is_correct=result.is_correct,
            explanation=question.explanation,
            correct_answer=result.correct_answer,
            questions_completed=len(session.answers),
            total_correct=session.correct_count,
        )

    def generate_more(self, session_id: str) -> Question:
        """
        Serve one more question.

        Prefers the first pool question not yet served in this session. Once
        the pool is exhausted, recycles the question served the fewest times
        (earliest in pool order on ties) as a fresh instance.
        """
        with self.locks.hold(SessionKind.PRACTICE, session_id):
            session = self._load(session_id)
            pool = self._pool(session)
            if not pool:
                raise EmptyRepositoryError(
                    f"No {session.difficulty.value} practice questions for {session.scope_id}"
                )

            served = Counter(question.source_id for question in session.questions)
            chosen = _first_unseen(pool, served)
            if chosen is None:
                chosen = min(pool, key=lambda q: served[q.id])
                logger.debug(f"Practice {session_id}: pool exhausted, recycling {chosen.id}")

            instance = chosen.instantiate()
            session.questions.append(instance)
            self.store.update(session)

        return instance

    def get(self, session_id: str) -> PracticeStats:
        session = self._load(session_id)
        return PracticeStats(
            session_id=session.id,
            scope_id=session.scope_id,
            difficulty=session.difficulty,
            context_used=session.context_used,
            questions_served=len(session.questions),
            questions_completed=len(session.answers),
            total_correct=session.correct_count,
            accuracy=session.accuracy,
        )

    def _pool(self, session: PracticeSession) -> list[Question]:
        if session.context_used:
            return self.repository.find_by_difficulty(session.scope_id, session.difficulty)
        return self.repository.find_generic(session.difficulty)

    def _load(self, session_id: str) -> PracticeSession:
        session = self.store.get(SessionKind.PRACTICE, session_id)
        if session is None:
            raise SessionNotFound(f"Practice session not found: {session_id}")
        return session


def _first_unseen(pool: list[Question], served: Counter) -> Optional[Question]:
    for question in pool:
        if question.id not in served:
            return question
    return None
