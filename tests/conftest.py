"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import Settings  # noqa: E402
from quiz_engine.adaptive.remediation_service import RemediationService  # noqa: E402
from quiz_engine.quiz.models import Difficulty, Option, Question, QuestionType  # noqa: E402
from quiz_engine.quiz.repository import InMemoryQuestionRepository  # noqa: E402
from quiz_engine.services import build_services  # noqa: E402
from quiz_engine.sessions.locks import SessionLockRegistry  # noqa: E402
from quiz_engine.sessions.store import MemorySessionStore  # noqa: E402
from quiz_engine.study.attempt_service import QuizAttemptService  # noqa: E402
from quiz_engine.study.practice_service import PracticeSessionService  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (HTTP API and client)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


# ========================================
# Content
# ========================================


def make_mcq(
    question_id: str,
    difficulty: str = "easy",
    scope_id: str = "calc",
    correct: str = "B",
) -> Question:
    """Four-option multiple choice question whose correct option is ``correct``."""
    options = tuple(
        Option(
            id=f"{question_id}-{label.lower()}",
            label=label,
            text=f"{question_id} answer {label}",
            is_correct=label == correct,
        )
        for label in "ABCD"
    )
    return Question(
        id=question_id,
        scope_id=scope_id,
        difficulty=Difficulty(difficulty),
        body=f"Question {question_id}?",
        explanation=f"Because of {question_id}.",
        options=options,
    )


def make_open(question_id: str, accepted: tuple[str, ...], scope_id: str = "words") -> Question:
    return Question(
        id=question_id,
        scope_id=scope_id,
        difficulty=Difficulty.EASY,
        question_type=QuestionType.OPEN_ENDED,
        body=f"Question {question_id}?",
        explanation="Accepted answers are listed.",
        accepted_answers=accepted,
    )


def wrong_option_id(question: Question) -> str:
    return next(option.id for option in question.options if not option.is_correct)


@pytest.fixture
def correct_id():
    """Id of the flagged-correct option of a (served) question."""
    return lambda question: question.correct_option().id


@pytest.fixture
def wrong_id():
    """Id of some incorrect option of a (served) question."""
    return wrong_option_id


@pytest.fixture
def repository():
    """
    Small repository:

    - calc: 4 mixed-difficulty questions (c2 has curated standard remedials)
    - drill: exactly 3 easy questions and 1 hard question
    - words: one open-ended question
    - empty: no questions
    - generic remedial banks for easy and standard, none for hard
    """
    scopes = {
        "calc": [
            make_mcq("c1", "easy"),
            make_mcq("c2", "standard"),
            make_mcq("c3", "easy"),
            make_mcq("c4", "hard"),
        ],
        "drill": [
            make_mcq("d1", "easy", scope_id="drill"),
            make_mcq("d2", "easy", scope_id="drill"),
            make_mcq("d3", "easy", scope_id="drill"),
            make_mcq("d4", "hard", scope_id="drill"),
        ],
        "words": [make_open("w1", ("zero", "0"))],
        "empty": [],
    }
    curated = {
        "c2": {
            Difficulty.STANDARD: [
                make_mcq("r-c2-1", "standard"),
                make_mcq("r-c2-2", "standard"),
            ],
        },
    }
    generic = {
        Difficulty.EASY: [
            make_mcq("g-e1", "easy", scope_id="remedial-generic"),
            make_mcq("g-e2", "easy", scope_id="remedial-generic"),
        ],
        Difficulty.STANDARD: [
            make_mcq("g-s1", "standard", scope_id="remedial-generic"),
        ],
    }
    titles = {"calc": "Calculus basics", "drill": "Drill"}
    return InMemoryQuestionRepository(scopes, titles=titles, curated=curated, generic=generic)


@pytest.fixture
def store():
    return MemorySessionStore()


@pytest.fixture
def locks():
    return SessionLockRegistry()


@pytest.fixture
def attempt_service(repository, store, locks):
    return QuizAttemptService(repository, store, locks=locks)


@pytest.fixture
def remediation_service(repository, store, locks):
    return RemediationService(repository, store, locks=locks, required_correct=2)


@pytest.fixture
def practice_service(repository, store, locks):
    return PracticeSessionService(repository, store, locks=locks, initial_count=5)


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        session_backend="memory",
        session_dir=tmp_path / "sessions",
        database_url=f"sqlite:///{tmp_path / 'sessions.db'}",
    )


@pytest.fixture
def services(settings, repository, store):
    return build_services(settings, repository=repository, store=store)


@pytest.fixture
def mcq():
    """Factory for four-option multiple choice questions."""
    return make_mcq


@pytest.fixture
def open_question():
    """Factory for open-ended questions."""
    return make_open
