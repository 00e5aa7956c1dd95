"""
Question content models.

Questions are authored content and never change once loaded. Sessions work on
*instances*: copies of a question with a fresh instance id and freshly
re-identified options, so option ids are never shared between two serves of
the same original question. An instance keeps an explicit pointer back to its
original question (and each option to its original option); nothing in the
engine derives identity by parsing ids.
"""

from __future__ import annotations

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from quiz_engine.core.errors import ContentError


class Difficulty(str, Enum):
    """Difficulty levels a question can be authored at."""

    EASY = "easy"
    STANDARD = "standard"
    HARD = "hard"


class QuestionType(str, Enum):
    """Supported question types."""

    MULTIPLE_CHOICE = "multiple_choice"
    OPEN_ENDED = "open_ended"


class Option(BaseModel):
    """Answer choice for a multiple choice question."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str  # A, B, C, D
    text: str
    is_correct: bool = False
    original_option_id: str | None = None


class Question(BaseModel):
    """Assessment item tied to a quiz/topic/subchapter scope."""

    model_config = ConfigDict(frozen=True)

    id: str
    scope_id: str
    difficulty: Difficulty
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    body: str
    explanation: str = ""
    options: tuple[Option, ...] = ()
    # Open-ended only: answers the default grader accepts
    accepted_answers: tuple[str, ...] = ()
    # Set on session instances only
    original_question_id: str | None = None

    @model_validator(mode="after")
    def _check_correct_option(self) -> "Question":
        if self.question_type == QuestionType.MULTIPLE_CHOICE:
            flagged = sum(1 for option in self.options if option.is_correct)
            if flagged != 1:
                raise ValueError(
                    f"multiple choice question {self.id!r} must flag exactly one "
                    f"correct option, found {flagged}"
                )
        return self

    @property
    def is_instance(self) -> bool:
        return self.original_question_id is not None

    @property
    def source_id(self) -> str:
        """Id of the authored question this one was copied from (or its own id)."""
        return self.original_question_id or self.id

    def find_option(self, option_id: str) -> Option | None:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def correct_option(self) -> Option:
        """Return the flagged-correct option, failing loudly if there is none."""
        for option in self.options:
            if option.is_correct:
                return option
        raise ContentError(f"Question {self.id} has no correct option")

    def instantiate(self) -> "Question":
        """Materialize a session-scoped copy with fresh question and option ids."""
        instance_id = f"qi-{uuid4().hex}"
        options = tuple(
            Option(
                id=f"opt-{uuid4().hex[:12]}",
                label=option.label,
                text=option.text,
                is_correct=option.is_correct,
                original_option_id=option.original_option_id or option.id,
            )
            for option in self.options
        )
        return self.model_copy(
            update={
                "id": instance_id,
                "options": options,
                "original_question_id": self.source_id,
            }
        )

    def public_view(self) -> dict:
        """Learner-facing view: no correctness flags, no accepted answers."""
        return {
            "id": self.id,
            "scope_id": self.scope_id,
            "difficulty": self.difficulty.value,
            "question_type": self.question_type.value,
            "body": self.body,
            "options": [
                {"id": option.id, "label": option.label, "text": option.text}
                for option in self.options
            ],
        }


class ScopeInfo(BaseModel):
    """Summary of a question scope (quiz, topic or subchapter)."""

    id: str
    title: str = ""
    question_count: int = 0
    difficulties: dict[str, int] = Field(default_factory=dict)
