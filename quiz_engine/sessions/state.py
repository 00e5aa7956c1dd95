"""
Serializable session state for attempts, remediation and practice sessions.

Each state converts to and from a plain dict so any session store can keep it
as a blob. Question content is snapshotted into the state, never shared by
reference with the repository.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, ClassVar
from uuid import uuid4

from quiz_engine.quiz.models import Difficulty, Question


class SessionKind(str, Enum):
    """Kinds of state kept in the session store."""

    ATTEMPT = "attempt"
    REMEDIATION = "remediation"
    PRACTICE = "practice"


class AttemptStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_session_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:16]}"


def _dump_question(question: Question | None) -> dict | None:
    return question.model_dump(mode="json") if question is not None else None


def _load_question(data: dict | None) -> Question | None:
    return Question.model_validate(data) if data is not None else None


class _Expiring:
    """Age check shared by all session states."""

    last_saved_at: str

    def is_expired(self, max_age: timedelta, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - datetime.fromisoformat(self.last_saved_at) > max_age


@dataclass
class AnswerRecord:
    """One graded answer."""

    question_id: str
    is_correct: bool
    selected_option_id: str | None = None
    text_answer: str | None = None
    answered_at: str = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AnswerRecord":
        return cls(**data)


@dataclass
class Attempt(_Expiring):
    """One learner's pass through an ordered quiz question list."""

    kind: ClassVar[SessionKind] = SessionKind.ATTEMPT

    id: str
    quiz_id: str
    questions: list[Question]
    answers: dict[str, AnswerRecord] = field(default_factory=dict)
    current_index: int = 0
    status: AttemptStatus = AttemptStatus.IN_PROGRESS
    created_at: str = field(default_factory=utc_now)
    last_saved_at: str = field(default_factory=utc_now)

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def is_completed(self) -> bool:
        return self.status == AttemptStatus.COMPLETED

    def current_question(self) -> Question | None:
        """Question at current_index, or None once every question is answered."""
        if self.current_index >= len(self.questions):
            return None
        return self.questions[self.current_index]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "questions": [_dump_question(q) for q in self.questions],
            "answers": {qid: record.to_dict() for qid, record in self.answers.items()},
            "current_index": self.current_index,
            "status": self.status.value,
            "created_at": self.created_at,
            "last_saved_at": self.last_saved_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Attempt":
        return cls(
            id=data["id"],
            quiz_id=data["quiz_id"],
            questions=[_load_question(q) for q in data["questions"]],
            answers={qid: AnswerRecord.from_dict(r) for qid, r in data["answers"].items()},
            current_index=data["current_index"],
            status=AttemptStatus(data["status"]),
            created_at=data["created_at"],
            last_saved_at=data["last_saved_at"],
        )


@dataclass
class RemediationSession(_Expiring):
    """Mastery loop for one missed question."""

    kind: ClassVar[SessionKind] = SessionKind.REMEDIATION

    id: str
    attempt_id: str
    question_id: str
    difficulty: Difficulty
    required: int
    completed: int = 0
    ordinal: int = 1  # 1-based position of the next remedial question in the bank cycle
    current_question: Question | None = None
    questions_served: int = 0
    remediation_completed: bool = False
    history: list[AnswerRecord] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now)
    last_saved_at: str = field(default_factory=utc_now)

    @property
    def progress(self) -> dict[str, int]:
        return {"completed": self.completed, "required": self.required}

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "attempt_id": self.attempt_id,
            "question_id": self.question_id,
            "difficulty": self.difficulty.value,
            "required": self.required,
            "completed": self.completed,
            "ordinal": self.ordinal,
            "current_question": _dump_question(self.current_question),
            "questions_served": self.questions_served,
            "remediation_completed": self.remediation_completed,
            "history": [record.to_dict() for record in self.history],
            "created_at": self.created_at,
            "last_saved_at": self.last_saved_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RemediationSession":
        return cls(
            id=data["id"],
            attempt_id=data["attempt_id"],
            question_id=data["question_id"],
            difficulty=Difficulty(data["difficulty"]),
            required=data["required"],
            completed=data["completed"],
            ordinal=data["ordinal"],
            current_question=_load_question(data["current_question"]),
            questions_served=data["questions_served"],
            remediation_completed=data["remediation_completed"],
            history=[AnswerRecord.from_dict(r) for r in data.get("history", [])],
            created_at=data["created_at"],
            last_saved_at=data["last_saved_at"],
        )


@dataclass
class PracticeSession(_Expiring):
    """Open-ended, non-scored drilling at a fixed difficulty."""

    kind: ClassVar[SessionKind] = SessionKind.PRACTICE

    id: str
    scope_id: str
    difficulty: Difficulty
    context_used: bool = True
    questions: list[Question] = field(default_factory=list)
    answers: dict[str, AnswerRecord] = field(default_factory=dict)
    correct_count: int = 0
    created_at: str = field(default_factory=utc_now)
    last_saved_at: str = field(default_factory=utc_now)

    def find_question(self, instance_id: str) -> Question | None:
        for question in self.questions:
            if question.id == instance_id:
                return question
        return None

    @property
    def accuracy(self) -> float:
        if not self.answers:
            return 0.0
        return round(self.correct_count / len(self.answers) * 100, 1)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "scope_id": self.scope_id,
            "difficulty": self.difficulty.value,
            "context_used": self.context_used,
            "questions": [_dump_question(q) for q in self.questions],
            "answers": {qid: record.to_dict() for qid, record in self.answers.items()},
            "correct_count": self.correct_count,
            "created_at": self.created_at,
            "last_saved_at": self.last_saved_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PracticeSession":
        return cls(
            id=data["id"],
            scope_id=data["scope_id"],
            difficulty=Difficulty(data["difficulty"]),
            context_used=data["context_used"],
            questions=[_load_question(q) for q in data["questions"]],
            answers={qid: AnswerRecord.from_dict(r) for qid, r in data["answers"].items()},
            correct_count=data["correct_count"],
            created_at=data["created_at"],
            last_saved_at=data["last_saved_at"],
        )


SessionState = Attempt | RemediationSession | PracticeSession

STATE_TYPES: dict[SessionKind, type] = {
    SessionKind.ATTEMPT: Attempt,
    SessionKind.REMEDIATION: RemediationSession,
    SessionKind.PRACTICE: PracticeSession,
}
