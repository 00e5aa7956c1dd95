"""
FastAPI dependencies.
"""

from __future__ import annotations

from fastapi import Request

from quiz_engine.services import EngineServices


def get_services(request: Request) -> EngineServices:
    """Services attached to the application at startup."""
    return request.app.state.services
