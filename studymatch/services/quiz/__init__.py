"""
Quiz scoring: questions with multi-role weighted options, additive scoring
normalized against the whole quiz, and question bank administration.
"""

from studymatch.services.quiz.admin import QuizAdminService
from studymatch.services.quiz.scoring import compute_role_vector, max_role_weights
from studymatch.services.quiz.service import QuizService

__all__ = [
    "QuizService",
    "QuizAdminService",
    "compute_role_vector",
    "max_role_weights",
]
