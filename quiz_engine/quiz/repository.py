"""
Question Repository.

Read-only store of authored questions. The rest of the engine only ever
reads from it:

- scope questions, in authored (difficulty-mixed) order, for quizzes and
  practice sessions
- curated remedial banks, keyed by original question and difficulty
- generic remedial banks, keyed by difficulty, used when no curated bank
  exists

Every query returns a fresh list, so callers cannot disturb the shared
content. Reads need no locking.
"""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Any, Protocol

from loguru import logger
from pydantic import ValidationError

from quiz_engine.core.errors import ContentError, QuestionNotFound, ScopeNotFound
from quiz_engine.quiz.models import Difficulty, Question, ScopeInfo

GENERIC_REMEDIAL_SCOPE = "remedial-generic"


class QuestionRepository(Protocol):
    """Read-only question source consumed by the services."""

    def list_scopes(self) -> list[ScopeInfo]:
        ...

    def find_by_scope(self, scope_id: str) -> list[Question]:
        ...

    def find_by_difficulty(self, scope_id: str, difficulty: Difficulty) -> list[Question]:
        ...

    def find_related(self, original_question_id: str, difficulty: Difficulty) -> list[Question]:
        ...

    def find_generic(self, difficulty: Difficulty) -> list[Question]:
        ...

    def get_question(self, question_id: str) -> Question:
        ...


class InMemoryQuestionRepository:
    """
    Question repository held entirely in memory.

    Usually built from a JSON question bank with ``from_file``; tests build
    it directly from Question objects.
    """

    def __init__(
        self,
        scopes: dict[str, list[Question]],
        titles: dict[str, str] | None = None,
        curated: dict[str, dict[Difficulty, list[Question]]] | None = None,
        generic: dict[Difficulty, list[Question]] | None = None,
    ):
        self._scopes = {scope_id: tuple(questions) for scope_id, questions in scopes.items()}
        self._titles = titles or {}
        self._curated = {
            question_id: {Difficulty(d): tuple(bank) for d, bank in banks.items()}
            for question_id, banks in (curated or {}).items()
        }
        self._generic = {Difficulty(d): tuple(bank) for d, bank in (generic or {}).items()}
        self._by_id = self._index()

    def _index(self) -> dict[str, Question]:
        by_id: dict[str, Question] = {}
        for scope_id, questions in self._scopes.items():
            repeated = [qid for qid, n in Counter(q.id for q in questions).items() if n > 1]
            if repeated:
                raise ContentError(f"Scope {scope_id} lists question ids more than once: {repeated}")
        pools = [q for questions in self._scopes.values() for q in questions]
        pools += [q for banks in self._curated.values() for bank in banks.values() for q in bank]
        pools += [q for bank in self._generic.values() for q in bank]
        for question in pools:
            if question.id in by_id and by_id[question.id] != question:
                raise ContentError(f"Duplicate question id in repository: {question.id}")
            by_id[question.id] = question
        return by_id

    # ========================================
    # Queries
    # ========================================

    def list_scopes(self) -> list[ScopeInfo]:
        scopes = []
        for scope_id, questions in self._scopes.items():
            counts = Counter(q.difficulty.value for q in questions)
            scopes.append(
                ScopeInfo(
                    id=scope_id,
                    title=self._titles.get(scope_id, ""),
                    question_count=len(questions),
                    difficulties=dict(counts),
                )
            )
        return scopes

    def find_by_scope(self, scope_id: str) -> list[Question]:
        if scope_id not in self._scopes:
            raise ScopeNotFound(f"Scope not found: {scope_id}")
        return list(self._scopes[scope_id])

    def find_by_difficulty(self, scope_id: str, difficulty: Difficulty) -> list[Question]:
        difficulty = Difficulty(difficulty)
        return [q for q in self.find_by_scope(scope_id) if q.difficulty == difficulty]

    def find_related(self, original_question_id: str, difficulty: Difficulty) -> list[Question]:
        """Curated remedial bank for the question, else the generic bank."""
        difficulty = Difficulty(difficulty)
        curated = self._curated.get(original_question_id, {}).get(difficulty)
        if curated:
            return list(curated)
        return self.find_generic(difficulty)

    def find_generic(self, difficulty: Difficulty) -> list[Question]:
        return list(self._generic.get(Difficulty(difficulty), ()))

    def get_question(self, question_id: str) -> Question:
        try:
            return self._by_id[question_id]
        except KeyError:
            raise QuestionNotFound(f"Question not found: {question_id}") from None

    # ========================================
    # Loading
    # ========================================

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InMemoryQuestionRepository":
        """
        Build a repository from a question bank document.

        Layout::

            {
              "scopes": [{"id": ..., "title": ..., "questions": [...]}],
              "remedial": {
                "curated": {"<question id>": {"easy": [...], ...}},
                "generic": {"easy": [...], "standard": [...], "hard": [...]}
              }
            }

        Missing ``scope_id``/``difficulty`` fields on nested questions are
        filled from their position in the document.
        """
        scopes: dict[str, list[Question]] = {}
        titles: dict[str, str] = {}
        for scope in data.get("scopes", []):
            scope_id = scope["id"]
            titles[scope_id] = scope.get("title", "")
            scopes[scope_id] = [
                _parse_question(raw, scope_id=scope_id) for raw in scope.get("questions", [])
            ]

        scope_of = {q.id: q.scope_id for questions in scopes.values() for q in questions}
        remedial = data.get("remedial", {})

        curated: dict[str, dict[Difficulty, list[Question]]] = {}
        for question_id, banks in remedial.get("curated", {}).items():
            scope_id = scope_of.get(question_id, GENERIC_REMEDIAL_SCOPE)
            curated[question_id] = {
                Difficulty(difficulty): [
                    _parse_question(raw, scope_id=scope_id, difficulty=difficulty)
                    for raw in bank
                ]
                for difficulty, bank in banks.items()
            }

        generic = {
            Difficulty(difficulty): [
                _parse_question(raw, scope_id=GENERIC_REMEDIAL_SCOPE, difficulty=difficulty)
                for raw in bank
            ]
            for difficulty, bank in remedial.get("generic", {}).items()
        }

        return cls(scopes, titles=titles, curated=curated, generic=generic)

    @classmethod
    def from_file(cls, path: str | Path) -> "InMemoryQuestionRepository":
        """Load a JSON question bank from disk."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Question bank not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        repository = cls.from_dict(data)
        logger.info(
            f"Loaded question bank {path.name}: "
            f"{len(repository._scopes)} scopes, {len(repository._by_id)} questions"
        )
        return repository


def _parse_question(
    raw: dict[str, Any],
    scope_id: str,
    difficulty: str | None = None,
) -> Question:
    payload = {"scope_id": scope_id, **raw}
    if difficulty is not None:
        payload.setdefault("difficulty", difficulty)
    try:
        return Question.model_validate(payload)
    except ValidationError as exc:
        raise ContentError(f"Invalid question {raw.get('id', '?')}: {exc}") from exc
