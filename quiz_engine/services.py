"""
Wiring for the engine's services.

The API server and the CLI both build one ``EngineServices`` from settings:
one question repository, one session store and one lock registry shared by
all three services.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from config import Settings, get_settings
from quiz_engine.adaptive.remediation_service import RemediationService
from quiz_engine.quiz.repository import InMemoryQuestionRepository, QuestionRepository
from quiz_engine.sessions.locks import SessionLockRegistry
from quiz_engine.sessions.store import SessionStore, build_session_store
from quiz_engine.study.attempt_service import QuizAttemptService
from quiz_engine.study.practice_service import PracticeSessionService


@dataclass
class EngineServices:
    settings: Settings
    repository: QuestionRepository
    store: SessionStore
    locks: SessionLockRegistry
    attempts: QuizAttemptService
    remediation: RemediationService
    practice: PracticeSessionService


def build_services(
    settings: Settings | None = None,
    repository: QuestionRepository | None = None,
    store: SessionStore | None = None,
) -> EngineServices:
    """
    Build the services from settings.

    Args:
        settings: Settings to use (defaults to ``get_settings()``)
        repository: Repository to use instead of loading ``question_bank_path``
        store: Session store to use instead of the configured backend
    """
    settings = settings or get_settings()
    repository = repository or InMemoryQuestionRepository.from_file(settings.question_bank_path)
    store = store or build_session_store(settings)
    locks = SessionLockRegistry()

    services = EngineServices(
        settings=settings,
        repository=repository,
        store=store,
        locks=locks,
        attempts=QuizAttemptService(
            repository,
            store,
            locks=locks,
            recommended_difficulty=settings.remediation_default_difficulty,
        ),
        remediation=RemediationService(
            repository,
            store,
            locks=locks,
            required_correct=settings.remediation_required_correct,
        ),
        practice=PracticeSessionService(
            repository,
            store,
            locks=locks,
            initial_count=settings.practice_initial_count,
        ),
    )
    logger.debug(f"Engine services ready: {settings.get_session_config()}")
    return services
