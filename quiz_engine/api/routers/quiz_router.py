"""
Quiz attempt router.

Endpoints for:
- Starting an attempt on a quiz scope
- Reading the current question
- Answering the current question
- The post-quiz summary (partial while the attempt is in progress)
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from quiz_engine.api.deps import get_services
from quiz_engine.api.schemas import QuestionView, question_view
from quiz_engine.quiz.models import Difficulty
from quiz_engine.services import EngineServices
from quiz_engine.sessions.state import AttemptStatus

router = APIRouter()


# ========================================
# Request/Response Models
# ========================================


class StartAttemptResponse(BaseModel):
    attempt_id: str
    total_questions: int
    first_question: QuestionView


class CurrentQuestionResponse(BaseModel):
    """Current question; ``question`` is null once every question is answered."""

    question: Optional[QuestionView]
    index: int
    total: int


class AnswerRequest(BaseModel):
    question_id: str = Field(..., description="Question being answered (must be the current one)")
    answer_id: str = Field(..., description="Selected option id, or free text for open-ended questions")


class AnswerResponse(BaseModel):
    is_correct: bool
    explanation: str
    correct_answer: str
    next_question: Optional[QuestionView]
    all_answered: bool


class WrongQuestionResponse(BaseModel):
    question_id: str
    question_text: str
    user_answer: str
    correct_answer: str
    explanation: str
    recommended_difficulty: Difficulty


class QuizSummaryResponse(BaseModel):
    attempt_id: str
    quiz_id: str
    status: AttemptStatus
    score: int
    total: int
    answered: int
    percentage: int
    remediation_required: bool
    wrong_questions: List[WrongQuestionResponse]


# ========================================
# Endpoints
# ========================================


@router.post("/quizzes/{quiz_id}/attempts", response_model=StartAttemptResponse, status_code=201)
def start_quiz(quiz_id: str, services: EngineServices = Depends(get_services)):
    """Start a new attempt over the quiz's questions."""
    started = services.attempts.start(quiz_id)
    return StartAttemptResponse(
        attempt_id=started.attempt_id,
        total_questions=started.total_questions,
        first_question=question_view(started.first_question),
    )


@router.get("/attempts/{attempt_id}/current", response_model=CurrentQuestionResponse)
def get_current_question(attempt_id: str, services: EngineServices = Depends(get_services)):
    current = services.attempts.current_question(attempt_id)
    return CurrentQuestionResponse(
        question=question_view(current.question),
        index=current.index,
        total=current.total,
    )


@router.post("/attempts/{attempt_id}/answers", response_model=AnswerResponse)
def answer_question(
    attempt_id: str,
    request: AnswerRequest,
    services: EngineServices = Depends(get_services),
):
    """Grade the answer to the current question and advance the attempt."""
    outcome = services.attempts.answer(attempt_id, request.question_id, request.answer_id)
    return AnswerResponse(
        is_correct=outcome.is_correct,
        explanation=outcome.explanation,
        correct_answer=outcome.correct_answer,
        next_question=question_view(outcome.next_question),
        all_answered=outcome.all_answered,
    )


@router.get("/attempts/{attempt_id}/summary", response_model=QuizSummaryResponse)
def get_quiz_summary(attempt_id: str, services: EngineServices = Depends(get_services)):
    summary = services.attempts.summary(attempt_id)
    return QuizSummaryResponse(
        attempt_id=summary.attempt_id,
        quiz_id=summary.quiz_id,
        status=summary.status,
        score=summary.score,
        total=summary.total,
        answered=summary.answered,
        percentage=summary.percentage,
        remediation_required=summary.remediation_required,
        wrong_questions=[
            WrongQuestionResponse(
                question_id=wrong.question_id,
                question_text=wrong.question_text,
                user_answer=wrong.user_answer,
                correct_answer=wrong.correct_answer,
                explanation=wrong.explanation,
                recommended_difficulty=wrong.recommended_difficulty,
            )
            for wrong in summary.wrong_questions
        ],
    )
