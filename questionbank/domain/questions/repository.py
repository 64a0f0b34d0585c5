"""
Question Repository Module

This module defines the repository interface the question service persists
through, together with the filter and ordering objects it passes down.
"""

import abc
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .model import Difficulty, Question, QuestionType, SortField, SortOrder, Visibility


def new_question_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class QuestionFilter:
    """
    Conjunction of list filters; None (or no tags) means "no constraint".

    ``category`` matches as a case-insensitive substring and every entry of
    ``tags`` must be carried by the question, compared case-insensitively.
    """
    type: Optional[QuestionType] = None
    category: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    visibility: Optional[Visibility] = None
    tags: List[str] = field(default_factory=list)

    def matches(self, question: Question) -> bool:
        if self.type is not None and question.type != self.type:
            return False
        if self.category and self.category.lower() not in question.category.lower():
            return False
        if self.difficulty is not None and question.difficulty != self.difficulty:
            return False
        if self.visibility is not None and question.visibility != self.visibility:
            return False
        if self.tags:
            carried = {tag.lower() for tag in question.tags}
            if not all(tag.lower() in carried for tag in self.tags):
                return False
        return True


@dataclass
class QuestionOrdering:
    field: SortField = SortField.CREATED_AT
    order: SortOrder = SortOrder.DESC

    @property
    def descending(self) -> bool:
        return self.order == SortOrder.DESC


class QuestionRepository(abc.ABC):
    """
    Abstract base class for question repositories.

    This interface defines the contract for accessing and storing Question
    entities. Implementations never raise for a missing question; they return
    None or False and leave the decision to the caller.
    """

    @abc.abstractmethod
    async def create(self, question: Question) -> Question:
        """
        Persist a new question.

        Args:
            question: Question without id or timestamps

        Returns:
            The stored question with id, created_at and updated_at assigned
        """
        pass

    @abc.abstractmethod
    async def find_by_id(self, question_id: str) -> Optional[Question]:
        """
        Get a question by its ID.

        Args:
            question_id: The ID of the question to retrieve

        Returns:
            The Question entity if found, None otherwise
        """
        pass

    @abc.abstractmethod
    async def find_many(
        self,
        question_filter: Optional[QuestionFilter] = None,
        skip: int = 0,
        take: Optional[int] = None,
        order_by: Optional[QuestionOrdering] = None
    ) -> List[Question]:
        """
        Find questions matching a filter.

        Args:
            question_filter: Filter to apply, or None for all questions
            skip: Number of matching questions to skip
            take: Maximum number of questions to return, or None for all
            order_by: Sort key; ties are broken by id in the same direction

        Returns:
            List of matching Question entities
        """
        pass

    @abc.abstractmethod
    async def count(self, question_filter: Optional[QuestionFilter] = None) -> int:
        pass

    @abc.abstractmethod
    async def update(self, question_id: str, patch: Dict[str, Any]) -> Optional[Question]:
        """
        Apply changes to a stored question.

        Args:
            question_id: The ID of the question to update
            patch: New values keyed by Question attribute name

        Returns:
            The updated Question entity, or None when it does not exist
        """
        pass

    @abc.abstractmethod
    async def delete(self, question_id: str) -> bool:
        """
        Delete a question by its ID.

        Args:
            question_id: The ID of the question to delete

        Returns:
            True if the question was deleted, False otherwise
        """
        pass
