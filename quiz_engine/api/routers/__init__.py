"""
API routers for the quiz engine service.
"""

from .practice_router import router as practice_router
from .quiz_router import router as quiz_router
from .remediation_router import router as remediation_router
from .sessions_router import router as sessions_router

__all__ = [
    "quiz_router",
    "remediation_router",
    "practice_router",
    "sessions_router",
]
