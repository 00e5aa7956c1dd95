"""
Adaptive remediation for missed quiz questions.
"""

from .remediation_service import RemedialAnswerOutcome, RemediationService, RemediationView

__all__ = ["RemediationService", "RemediationView", "RemedialAnswerOutcome"]
