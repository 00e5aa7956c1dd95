"""
Practice router.

Open-ended practice sessions: start, answer, ask for more, read stats.
"""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from quiz_engine.api.deps import get_services
from quiz_engine.api.schemas import QuestionView, question_view
from quiz_engine.quiz.models import Difficulty
from quiz_engine.services import EngineServices

router = APIRouter(prefix="/practice")


class StartPracticeRequest(BaseModel):
    scope_id: str
    difficulty: Difficulty


class PracticeSessionResponse(BaseModel):
    session_id: str
    difficulty: Difficulty
    questions: List[QuestionView]
    context_used: bool


class PracticeAnswerRequest(BaseModel):
    question_id: str
    answer_id: str


class PracticeAnswerResponse(BaseModel):
    is_correct: bool
    explanation: str
    correct_answer: str
    questions_completed: int
    total_correct: int


class MoreQuestionResponse(BaseModel):
    question: QuestionView


class PracticeStatsResponse(BaseModel):
    session_id: str
    scope_id: str
    difficulty: Difficulty
    context_used: bool
    questions_served: int
    questions_completed: int
    total_correct: int
    accuracy: float


@router.post("", response_model=PracticeSessionResponse, status_code=201)
def start_practice(
    request: StartPracticeRequest,
    services: EngineServices = Depends(get_services),
):
    started = services.practice.start(request.scope_id, request.difficulty)
    return PracticeSessionResponse(
        session_id=started.session_id,
        difficulty=started.difficulty,
        questions=[question_view(q) for q in started.questions],
        context_used=started.context_used,
    )


@router.get("/{session_id}", response_model=PracticeStatsResponse)
def get_practice(session_id: str, services: EngineServices = Depends(get_services)):
    stats = services.practice.get(session_id)
    return PracticeStatsResponse(
        session_id=stats.session_id,
        scope_id=stats.scope_id,
        difficulty=stats.difficulty,
        context_used=stats.context_used,
        questions_served=stats.questions_served,
        questions_completed=stats.questions_completed,
        total_correct=stats.total_correct,
        accuracy=stats.accuracy,
    )


@router.post("/{session_id}/answers", response_model=PracticeAnswerResponse)
def answer_practice(
    session_id: str,
    request: PracticeAnswerRequest,
    services: EngineServices = Depends(get_services),
):
    outcome = services.practice.answer(session_id, request.question_id, request.answer_id)
    return PracticeAnswerResponse(
        is_correct=outcome.is_correct,
        explanation=outcome.explanation,
        correct_answer=outcome.correct_answer,
        questions_completed=outcome.questions_completed,
        total_correct=outcome.total_correct,
    )


@router.post("/{session_id}/more", response_model=MoreQuestionResponse)
def generate_more_practice(session_id: str, services: EngineServices = Depends(get_services)):
    """Serve one more practice question (unseen first, then least served)."""
    return MoreQuestionResponse(question=question_view(services.practice.generate_more(session_id)))
