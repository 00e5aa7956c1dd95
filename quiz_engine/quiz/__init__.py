"""
Question content: models, grading and the read-only question repository.

Question Types:
- multiple_choice: graded against the single flagged-correct option
- open_ended: graded by a pluggable grader (default: normalized exact match)

Difficulties: easy, standard, hard
"""

from .grading import GRADERS, GradeResult, get_grader, grade_answer, register
from .models import Difficulty, Option, Question, QuestionType, ScopeInfo
from .repository import InMemoryQuestionRepository, QuestionRepository

__all__ = [
    "Difficulty",
    "Option",
    "Question",
    "QuestionType",
    "ScopeInfo",
    "GRADERS",
    "GradeResult",
    "get_grader",
    "grade_answer",
    "register",
    "InMemoryQuestionRepository",
    "QuestionRepository",
]
