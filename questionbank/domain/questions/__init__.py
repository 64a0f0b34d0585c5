"""
Question domain module for the question bank.

This module contains the domain model, validation engine, repositories and
service for polymorphic questions. The SQLAlchemy repository lives in
``sql_repository`` and is imported on demand, since it depends on the
database engine module.
"""

from .model import Question, QuestionType, Difficulty, Visibility
from .repository import QuestionRepository, QuestionFilter, QuestionOrdering
from .memory_repository import MemoryQuestionRepository
from .service import QuestionService

__all__ = [
    'Question',
    'QuestionType',
    'Difficulty',
    'Visibility',
    'QuestionRepository',
    'QuestionFilter',
    'QuestionOrdering',
    'MemoryQuestionRepository',
    'QuestionService',
]
