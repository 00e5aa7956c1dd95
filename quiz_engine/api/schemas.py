"""
Response models shared by several routers.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from quiz_engine.quiz.models import Difficulty, Question, QuestionType


class OptionView(BaseModel):
    """Answer choice as shown to the learner (no correctness flag)."""

    id: str
    label: str
    text: str


class QuestionView(BaseModel):
    """Question as shown to the learner."""

    id: str
    scope_id: str
    difficulty: Difficulty
    question_type: QuestionType
    body: str
    options: list[OptionView]


class ProgressView(BaseModel):
    completed: int
    required: int


class ErrorDetail(BaseModel):
    """Body of ``detail`` in every engine error response."""

    error: str
    message: str


class ErrorResponse(BaseModel):
    detail: ErrorDetail


ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Unknown scope, question or session"},
    409: {"model": ErrorResponse, "description": "Call not valid in the session's current state"},
    500: {"model": ErrorResponse, "description": "Empty question pool or storage failure"},
}


def question_view(question: Optional[Question]) -> Optional[QuestionView]:
    if question is None:
        return None
    return QuestionView.model_validate(question.public_view())
