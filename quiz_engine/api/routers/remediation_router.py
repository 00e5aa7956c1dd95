"""
Remediation router.

Opens a remediation loop for a missed question and grades remedial answers
until the correctness quota is met.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from quiz_engine.adaptive.remediation_service import RemediationView
from quiz_engine.api.deps import get_services
from quiz_engine.api.schemas import ProgressView, QuestionView, question_view
from quiz_engine.quiz.models import Difficulty
from quiz_engine.services import EngineServices

router = APIRouter()


class BeginRemediationRequest(BaseModel):
    attempt_id: str
    question_id: str = Field(..., description="Missed question of the attempt")
    difficulty: Difficulty = Difficulty.STANDARD


class RemediationResponse(BaseModel):
    remediation_id: str
    attempt_id: str
    question_id: str
    difficulty: Difficulty
    progress: ProgressView
    remediation_completed: bool
    question: Optional[QuestionView]
    questions_served: int


class RemedialAnswerRequest(BaseModel):
    answer_id: str


class RemedialAnswerResponse(BaseModel):
    is_correct: bool
    explanation: str
    correct_answer: str
    progress: ProgressView
    remediation_completed: bool
    next_question: Optional[QuestionView]


def _remediation_response(view: RemediationView) -> RemediationResponse:
    return RemediationResponse(
        remediation_id=view.remediation_id,
        attempt_id=view.attempt_id,
        question_id=view.question_id,
        difficulty=view.difficulty,
        progress=ProgressView(**view.progress),
        remediation_completed=view.remediation_completed,
        question=question_view(view.question),
        questions_served=view.questions_served,
    )


@router.post("/remediations", response_model=RemediationResponse, status_code=201)
def begin_remediation(
    request: BeginRemediationRequest,
    services: EngineServices = Depends(get_services),
):
    view = services.remediation.begin(request.attempt_id, request.question_id, request.difficulty)
    return _remediation_response(view)


@router.get("/remediations/{remediation_id}", response_model=RemediationResponse)
def get_remediation(remediation_id: str, services: EngineServices = Depends(get_services)):
    return _remediation_response(services.remediation.get(remediation_id))


@router.post("/remediations/{remediation_id}/answers", response_model=RemedialAnswerResponse)
def submit_remedial_answer(
    remediation_id: str,
    request: RemedialAnswerRequest,
    services: EngineServices = Depends(get_services),
):
    outcome = services.remediation.submit(remediation_id, request.answer_id)
    return RemedialAnswerResponse(
        is_correct=outcome.is_correct,
        explanation=outcome.explanation,
        correct_answer=outcome.correct_answer,
        progress=ProgressView(**outcome.progress),
        remediation_completed=outcome.remediation_completed,
        next_question=question_view(outcome.next_question),
    )
