"""
Memory Question Repository Module

This module provides an in-memory implementation of the QuestionRepository
interface for development and testing purposes.
"""

import copy
import dataclasses
import logging
from typing import Any, Dict, List, Optional

from .model import Difficulty, Question, SortField
from .repository import (
    QuestionFilter,
    QuestionOrdering,
    QuestionRepository,
    new_question_id,
    utc_now,
)

# Setup logging
logger = logging.getLogger(__name__)


def _sort_value(question: Question, sort_field: SortField) -> Any:
    value = getattr(question, sort_field.attribute)
    if isinstance(value, Difficulty):
        return value.rank
    return value


class MemoryQuestionRepository(QuestionRepository):
    """
    In-memory implementation of the QuestionRepository.

    Questions are deep-copied on the way in and out, so callers can never
    mutate stored state through a returned object.
    """

    def __init__(self, initial_data: Optional[List[Question]] = None):
        """
        Initialize the repository with optional initial data.

        Args:
            initial_data: Optional list of stored Question entities, ids included
        """
        self._questions: Dict[str, Question] = {}

        if initial_data:
            for question in initial_data:
                self._questions[question.id] = copy.deepcopy(question)

    async def create(self, question: Question) -> Question:
        now = utc_now()
        stored = dataclasses.replace(
            copy.deepcopy(question),
            id=new_question_id(),
            created_at=now,
            updated_at=now,
        )
        self._questions[stored.id] = stored
        logger.debug(f"Stored question {stored.id}")
        return copy.deepcopy(stored)

    async def find_by_id(self, question_id: str) -> Optional[Question]:
        question = self._questions.get(question_id)
        return copy.deepcopy(question) if question is not None else None

    async def find_many(
        self,
        question_filter: Optional[QuestionFilter] = None,
        skip: int = 0,
        take: Optional[int] = None,
        order_by: Optional[QuestionOrdering] = None
    ) -> List[Question]:
        question_filter = question_filter or QuestionFilter()
        order_by = order_by or QuestionOrdering()

        result = [
            question for question in self._questions.values()
            if question_filter.matches(question)
        ]
        result.sort(
            key=lambda question: (_sort_value(question, order_by.field), question.id),
            reverse=order_by.descending
        )

        end = skip + take if take is not None else None
        return [copy.deepcopy(question) for question in result[skip:end]]

    async def count(self, question_filter: Optional[QuestionFilter] = None) -> int:
        question_filter = question_filter or QuestionFilter()
        return sum(1 for question in self._questions.values() if question_filter.matches(question))

    async def update(self, question_id: str, patch: Dict[str, Any]) -> Optional[Question]:
        if question_id not in self._questions:
            return None

        updated = dataclasses.replace(self._questions[question_id], **copy.deepcopy(patch))
        self._questions[question_id] = updated
        return copy.deepcopy(updated)

    async def delete(self, question_id: str) -> bool:
        if question_id in self._questions:
            del self._questions[question_id]
            return True
        return False

    def get_all(self) -> List[Question]:
        """
        Get all questions.

        This method is specific to the memory implementation and not part of
        the QuestionRepository interface.

        Returns:
            List of all Question entities
        """
        return [copy.deepcopy(question) for question in self._questions.values()]

    def clear(self) -> None:
        """
        Clear all questions.

        This method is specific to the memory implementation and not part of
        the QuestionRepository interface.
        """
        self._questions.clear()
