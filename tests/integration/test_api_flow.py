"""
Integration tests for the HTTP API.

Drives full quiz -> summary -> remediation and practice flows through
FastAPI's TestClient against an in-memory repository and store.
"""

import pytest
from fastapi.testclient import TestClient

from quiz_engine.api.main import create_app
from quiz_engine.sessions.state import SessionKind

pytestmark = pytest.mark.integration


@pytest.fixture
def client(services):
    return TestClient(create_app(services))


def answer_for(services, kind, session_id, question_id, correct):
    """Pick an option id using the stored (server-side) snapshot of the question."""
    state = services.store.get(SessionKind(kind), session_id)
    if kind == "attempt":
        question = next(q for q in state.questions if q.id == question_id)
    elif kind == "remediation":
        question = state.current_question
    else:
        question = state.find_question(question_id)
    return next(o.id for o in question.options if o.is_correct == correct)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["components"]["session_backend"] == "memory"

    def test_scopes(self, client):
        response = client.get("/scopes")

        assert response.status_code == 200
        assert {scope["id"] for scope in response.json()} == {"calc", "drill", "words", "empty"}


class TestQuizFlow:
    def test_full_attempt_and_remediation(self, client, services):
        started = client.post("/quizzes/calc/attempts")
        assert started.status_code == 201
        attempt_id = started.json()["attempt_id"]
        question = started.json()["first_question"]
        assert started.json()["total_questions"] == 4
        assert all("is_correct" not in option for option in question["options"])

        for correct in [True, False, True, False]:
            answer_id = answer_for(services, "attempt", attempt_id, question["id"], correct)
            response = client.post(
                f"/attempts/{attempt_id}/answers",
                json={"question_id": question["id"], "answer_id": answer_id},
            )
            assert response.status_code == 200
            assert response.json()["is_correct"] is correct
            question = response.json()["next_question"]

        assert question is None
        assert client.get(f"/attempts/{attempt_id}/current").json()["question"] is None

        summary = client.get(f"/attempts/{attempt_id}/summary").json()
        assert (summary["score"], summary["total"], summary["percentage"]) == (2, 4, 50)
        assert summary["remediation_required"] is True
        assert summary["status"] == "COMPLETED"
        missed = [w["question_id"] for w in summary["wrong_questions"]]
        assert missed == ["c2", "c4"]

        begun = client.post(
            "/remediations",
            json={"attempt_id": attempt_id, "question_id": "c2", "difficulty": "standard"},
        )
        assert begun.status_code == 201
        remediation_id = begun.json()["remediation_id"]
        assert begun.json()["progress"] == {"completed": 0, "required": 2}

        for expected_completed in [1, 2]:
            rq = client.get(f"/remediations/{remediation_id}").json()["question"]
            answer_id = answer_for(services, "remediation", remediation_id, rq["id"], True)
            result = client.post(
                f"/remediations/{remediation_id}/answers", json={"answer_id": answer_id}
            ).json()
            assert result["progress"]["completed"] == expected_completed

        assert result["remediation_completed"] is True
        assert result["next_question"] is None

        again = client.post(f"/remediations/{remediation_id}/answers", json={"answer_id": "x"})
        assert again.status_code == 409
        assert again.json()["detail"]["error"] == "RemediationAlreadyCompleted"

    def test_current_question_is_idempotent(self, client):
        attempt_id = client.post("/quizzes/calc/attempts").json()["attempt_id"]

        first = client.get(f"/attempts/{attempt_id}/current").json()
        second = client.get(f"/attempts/{attempt_id}/current").json()

        assert first == second
        assert first["index"] == 0

    def test_question_mismatch(self, client):
        attempt_id = client.post("/quizzes/calc/attempts").json()["attempt_id"]

        response = client.post(
            f"/attempts/{attempt_id}/answers", json={"question_id": "c3", "answer_id": "c3-b"}
        )

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "QuestionMismatch"
        assert client.get(f"/attempts/{attempt_id}/current").json()["index"] == 0


class TestErrors:
    def test_unknown_quiz(self, client):
        response = client.post("/quizzes/nope/attempts")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "ScopeNotFound"

    def test_empty_quiz(self, client):
        response = client.post("/quizzes/empty/attempts")

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "EmptyRepositoryError"

    def test_unknown_attempt(self, client):
        assert client.get("/attempts/att-missing/summary").status_code == 404

    def test_unknown_remediation(self, client):
        response = client.get("/remediations/rem-missing")
        assert response.json()["detail"]["error"] == "RemediationNotFound"

    def test_error_body_is_documented(self, client):
        schema = client.get("/openapi.json").json()

        responses = schema["paths"]["/attempts/{attempt_id}/answers"]["post"]["responses"]
        assert {"404", "409", "500"} <= set(responses)
        assert set(schema["components"]["schemas"]["ErrorDetail"]["properties"]) == {"error", "message"}

    def test_invalid_difficulty_is_rejected(self, client):
        response = client.post("/practice", json={"scope_id": "drill", "difficulty": "extreme"})
        assert response.status_code == 422


class TestPracticeFlow:
    def test_practice_session(self, client, services):
        started = client.post("/practice", json={"scope_id": "drill", "difficulty": "easy"})
        assert started.status_code == 201
        session_id = started.json()["session_id"]
        assert started.json()["context_used"] is True
        assert len(started.json()["questions"]) == 3

        question = started.json()["questions"][0]
        answer_id = answer_for(services, "practice", session_id, question["id"], True)
        result = client.post(
            f"/practice/{session_id}/answers",
            json={"question_id": question["id"], "answer_id": answer_id},
        ).json()
        assert result == {
            "is_correct": True,
            "explanation": "Because of d1.",
            "correct_answer": "d1 answer B",
            "questions_completed": 1,
            "total_correct": 1,
        }

        repeat = client.post(
            f"/practice/{session_id}/answers",
            json={"question_id": question["id"], "answer_id": answer_id},
        )
        assert repeat.status_code == 409

        more = client.post(f"/practice/{session_id}/more")
        assert more.status_code == 200
        assert more.json()["question"]["id"] not in {q["id"] for q in started.json()["questions"]}

        stats = client.get(f"/practice/{session_id}").json()
        assert stats["questions_served"] == 4
        assert stats["questions_completed"] == 1
        assert stats["accuracy"] == 100.0

    def test_generic_fallback(self, client):
        started = client.post("/practice", json={"scope_id": "drill", "difficulty": "standard"})
        assert started.json()["context_used"] is False


class TestSessionHousekeeping:
    def test_delete_session(self, client):
        attempt_id = client.post("/quizzes/calc/attempts").json()["attempt_id"]

        deleted = client.delete(f"/sessions/attempt/{attempt_id}")
        assert deleted.status_code == 200
        assert deleted.json()["deleted"] is True

        assert client.get(f"/attempts/{attempt_id}/current").status_code == 404
        assert client.delete(f"/sessions/attempt/{attempt_id}").status_code == 404

    def test_delete_unknown_kind(self, client):
        assert client.delete("/sessions/quiz/anything").status_code == 422

    def test_sweep(self, client, services):
        client.post("/quizzes/calc/attempts")

        kept = client.post("/sessions/sweep")
        assert kept.json() == {"removed": 0, "max_age_hours": 24}

        swept = client.post("/sessions/sweep", json={"max_age_hours": 0})
        assert swept.json()["removed"] == 1
        assert len(services.locks) == 0

    def test_answers_to_unknown_attempts_leave_no_locks(self, client, services):
        for n in range(20):
            response = client.post(
                f"/attempts/bogus-{n}/answers", json={"question_id": "c1", "answer_id": "c1-b"}
            )
            assert response.status_code == 404

        assert len(services.locks) == 0
