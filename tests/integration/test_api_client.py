"""
Integration tests for QuizEngineClient against the in-process API.
"""

import pytest
from fastapi.testclient import TestClient

from quiz_engine.api.main import create_app
from quiz_engine.api_client import QuizEngineClient
from quiz_engine.core.errors import (
    AttemptNotFound,
    QuestionAlreadyAnswered,
    QuestionMismatch,
    ScopeNotFound,
    SessionNotFound,
)
from quiz_engine.sessions.state import SessionKind

pytestmark = pytest.mark.integration


@pytest.fixture
def engine_client(services):
    with QuizEngineClient(base_url="http://testserver", client=TestClient(create_app(services))) as client:
        yield client


def correct_attempt_answer(services, attempt_id, question_id):
    attempt = services.store.get(SessionKind.ATTEMPT, attempt_id)
    question = next(q for q in attempt.questions if q.id == question_id)
    return question.correct_option().id


class TestQuizCalls:
    def test_start_answer_and_summary(self, engine_client, services):
        started = engine_client.start_quiz("calc")
        attempt_id = started["attempt_id"]

        question = started["first_question"]
        while question is not None:
            answer_id = correct_attempt_answer(services, attempt_id, question["id"])
            result = engine_client.answer_question(attempt_id, question["id"], answer_id)
            question = result["next_question"]

        assert result["all_answered"] is True
        summary = engine_client.get_summary(attempt_id)
        assert summary["percentage"] == 100
        assert summary["wrong_questions"] == []

    def test_current_question(self, engine_client):
        attempt_id = engine_client.start_quiz("calc")["attempt_id"]
        assert engine_client.get_current_question(attempt_id)["question"]["id"] == "c1"

    def test_errors_are_rebuilt(self, engine_client):
        with pytest.raises(ScopeNotFound):
            engine_client.start_quiz("nope")
        with pytest.raises(AttemptNotFound):
            engine_client.get_summary("att-missing")

    def test_mismatch_is_rebuilt(self, engine_client):
        attempt_id = engine_client.start_quiz("calc")["attempt_id"]

        with pytest.raises(QuestionMismatch) as excinfo:
            engine_client.answer_question(attempt_id, "c2", "c2-b")
        assert "c2" in str(excinfo.value)


class TestRemediationCalls:
    def test_begin_get_submit(self, engine_client, services):
        attempt_id = engine_client.start_quiz("calc")["attempt_id"]

        begun = engine_client.begin_remediation(attempt_id, "c2")
        remediation_id = begun["remediation_id"]
        assert engine_client.get_remediation(remediation_id)["question"] == begun["question"]

        session = services.store.get(SessionKind.REMEDIATION, remediation_id)
        result = engine_client.submit_remedial_answer(
            remediation_id, session.current_question.correct_option().id
        )
        assert result["progress"] == {"completed": 1, "required": 2}


class TestPracticeCalls:
    def test_practice_calls(self, engine_client, services):
        started = engine_client.start_practice("drill", "easy")
        session_id = started["session_id"]
        question = started["questions"][0]

        session = services.store.get(SessionKind.PRACTICE, session_id)
        answer_id = session.find_question(question["id"]).correct_option().id
        engine_client.answer_practice(session_id, question["id"], answer_id)

        with pytest.raises(QuestionAlreadyAnswered):
            engine_client.answer_practice(session_id, question["id"], answer_id)

        more = engine_client.generate_more(session_id)
        assert more["scope_id"] == "drill"
        assert engine_client.get_practice(session_id)["questions_served"] == 4


class TestHousekeepingCalls:
    def test_scopes_health_delete_sweep(self, engine_client):
        assert "calc" in {scope["id"] for scope in engine_client.list_scopes()}
        assert engine_client.health()["status"] == "healthy"

        session_id = engine_client.start_practice("drill", "easy")["session_id"]
        assert engine_client.delete_session("practice", session_id)["deleted"] is True
        with pytest.raises(SessionNotFound):
            engine_client.get_practice(session_id)

        assert engine_client.sweep_sessions()["removed"] == 0
