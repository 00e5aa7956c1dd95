"""
HTTP client for the quiz engine API.

Every method returns the decoded JSON body. Engine errors come back as the
same exception classes the services raise, rebuilt from the error body.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from config import get_settings
from quiz_engine.core.errors import ERRORS_BY_NAME, QuizEngineError


class QuizEngineClient:
    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.Client] = None):
        self.base_url = (base_url or get_settings().api_base_url).rstrip("/")
        self._client = client or httpx.Client(base_url=self.base_url, timeout=10.0)
        self._owns_client = client is None

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "QuizEngineClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ========================================
    # Quiz attempts
    # ========================================

    def start_quiz(self, quiz_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/quizzes/{quiz_id}/attempts")

    def get_current_question(self, attempt_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/attempts/{attempt_id}/current")

    def answer_question(self, attempt_id: str, question_id: str, answer_id: str) -> Dict[str, Any]:
        return self._request(
            "POST",
            f"/attempts/{attempt_id}/answers",
            json={"question_id": question_id, "answer_id": answer_id},
        )

    def get_summary(self, attempt_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/attempts/{attempt_id}/summary")

    # ========================================
    # Remediation
    # ========================================

    def begin_remediation(
        self, attempt_id: str, question_id: str, difficulty: str = "standard"
    ) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/remediations",
            json={"attempt_id": attempt_id, "question_id": question_id, "difficulty": difficulty},
        )

    def get_remediation(self, remediation_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/remediations/{remediation_id}")

    def submit_remedial_answer(self, remediation_id: str, answer_id: str) -> Dict[str, Any]:
        return self._request(
            "POST",
            f"/remediations/{remediation_id}/answers",
            json={"answer_id": answer_id},
        )

    # ========================================
    # Practice
    # ========================================

    def start_practice(self, scope_id: str, difficulty: str) -> Dict[str, Any]:
        return self._request(
            "POST", "/practice", json={"scope_id": scope_id, "difficulty": difficulty}
        )

    def get_practice(self, session_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/practice/{session_id}")

    def answer_practice(self, session_id: str, question_id: str, answer_id: str) -> Dict[str, Any]:
        return self._request(
            "POST",
            f"/practice/{session_id}/answers",
            json={"question_id": question_id, "answer_id": answer_id},
        )

    def generate_more(self, session_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/practice/{session_id}/more")["question"]

    # ========================================
    # Housekeeping
    # ========================================

    def list_scopes(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/scopes")

    def delete_session(self, kind: str, session_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/sessions/{kind}/{session_id}")

    def sweep_sessions(self, max_age_hours: Optional[int] = None) -> Dict[str, Any]:
        return self._request("POST", "/sessions/sweep", json={"max_age_hours": max_age_hours})

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._client.request(method, path, **kwargs)
        if response.is_success:
            return response.json()

        error = _engine_error(response)
        if error is not None:
            raise error
        response.raise_for_status()


def _engine_error(response: httpx.Response) -> Optional[QuizEngineError]:
    """Rebuild the engine error carried in an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    detail = body.get("detail") if isinstance(body, dict) else None
    if not isinstance(detail, dict) or "error" not in detail:
        return None

    error_cls = ERRORS_BY_NAME.get(detail["error"], QuizEngineError)
    return error_cls(detail.get("message", ""))
