"""
SQL Question Repository Module

This module provides the SQLAlchemy implementation of the QuestionRepository
interface. Every operation runs in its own async session; SQLAlchemy failures
surface as DatabaseError.
"""

import dataclasses
from typing import Any, Dict, List, Optional

from sqlalchemy import case, delete, func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from questionbank.common.error_handling import DatabaseError, trace_errors
from questionbank.common.logger import app_logger
from questionbank.database.init_db import get_session_factory
from .database_models import QuestionRecord, QuestionTagRecord
from .model import DIFFICULTY_ORDER, Question, SortField
from .repository import (
    QuestionFilter,
    QuestionOrdering,
    QuestionRepository,
    new_question_id,
    utc_now,
)

logger = app_logger.getChild("questions.sql_repository")

DIFFICULTY_RANK = {difficulty.value: rank for rank, difficulty in enumerate(DIFFICULTY_ORDER)}


def _filter_conditions(question_filter: Optional[QuestionFilter]) -> List[Any]:
    if question_filter is None:
        return []

    conditions = []
    if question_filter.type is not None:
        conditions.append(QuestionRecord.type == question_filter.type.value)
    if question_filter.category:
        conditions.append(QuestionRecord.category.icontains(question_filter.category, autoescape=True))
    if question_filter.difficulty is not None:
        conditions.append(QuestionRecord.difficulty == question_filter.difficulty.value)
    if question_filter.visibility is not None:
        conditions.append(QuestionRecord.visibility == question_filter.visibility.value)

    # One EXISTS per tag gives all-of semantics
    for tag in dict.fromkeys(tag.lower() for tag in question_filter.tags):
        conditions.append(
            select(QuestionTagRecord.question_id)
            .where(QuestionTagRecord.question_id == QuestionRecord.id, QuestionTagRecord.tag == tag)
            .exists()
        )
    return conditions


def _sort_columns(order_by: QuestionOrdering) -> List[Any]:
    if order_by.field == SortField.DIFFICULTY:
        key = case(DIFFICULTY_RANK, value=QuestionRecord.difficulty)
    else:
        key = getattr(QuestionRecord, order_by.field.attribute)

    if order_by.descending:
        return [key.desc(), QuestionRecord.id.desc()]
    return [key.asc(), QuestionRecord.id.asc()]


class SqlQuestionRepository(QuestionRepository):
    """
    Repository implementation for questions using SQLAlchemy Async.

    Tags are stored twice: as a JSON list on the question row, which keeps
    their order and spelling, and lowercased in ``question_tags`` for
    filtering.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self._session_factory = session_factory

    @property
    def async_session(self) -> async_sessionmaker:
        """Get the async session factory, falling back to the global one."""
        if self._session_factory is None:
            self._session_factory = get_session_factory()
        return self._session_factory

    @trace_errors("create question", capture_as=DatabaseError)
    async def create(self, question: Question) -> Question:
        now = utc_now()
        stored = dataclasses.replace(question, id=new_question_id(), created_at=now, updated_at=now)

        async with self.async_session() as session:
            async with session.begin():
                session.add(QuestionRecord.from_domain(stored))
                # Parent row first, the tag rows reference it
                await session.flush()
                session.add_all(QuestionTagRecord.for_question(stored.id, stored.tags))

        logger.debug(f"Stored question {stored.id}")
        return stored

    @trace_errors("find question", capture_as=DatabaseError)
    async def find_by_id(self, question_id: str) -> Optional[Question]:
        async with self.async_session() as session:
            record = await session.get(QuestionRecord, question_id)
            return record.to_domain() if record is not None else None

    @trace_errors("find questions", capture_as=DatabaseError)
    async def find_many(
        self,
        question_filter: Optional[QuestionFilter] = None,
        skip: int = 0,
        take: Optional[int] = None,
        order_by: Optional[QuestionOrdering] = None
    ) -> List[Question]:
        stmt = (
            select(QuestionRecord)
            .where(*_filter_conditions(question_filter))
            .order_by(*_sort_columns(order_by or QuestionOrdering()))
            .offset(skip)
        )
        if take is not None:
            stmt = stmt.limit(take)

        async with self.async_session() as session:
            result = await session.execute(stmt)
            return [record.to_domain() for record in result.scalars().all()]

    @trace_errors("count questions", capture_as=DatabaseError)
    async def count(self, question_filter: Optional[QuestionFilter] = None) -> int:
        stmt = select(func.count(QuestionRecord.id)).where(*_filter_conditions(question_filter))

        async with self.async_session() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    @trace_errors("update question", capture_as=DatabaseError)
    async def update(self, question_id: str, patch: Dict[str, Any]) -> Optional[Question]:
        async with self.async_session() as session:
            async with session.begin():
                record = await session.get(QuestionRecord, question_id)
                if record is None:
                    return None

                updated = dataclasses.replace(record.to_domain(), **patch)
                record.apply(updated)

                if "tags" in patch:
                    await session.execute(
                        delete(QuestionTagRecord).where(QuestionTagRecord.question_id == question_id)
                    )
                    session.add_all(QuestionTagRecord.for_question(question_id, updated.tags))

        return updated

    @trace_errors("delete question", capture_as=DatabaseError)
    async def delete(self, question_id: str) -> bool:
        async with self.async_session() as session:
            async with session.begin():
                await session.execute(
                    delete(QuestionTagRecord).where(QuestionTagRecord.question_id == question_id)
                )
                result = await session.execute(
                    delete(QuestionRecord).where(QuestionRecord.id == question_id)
                )

        logger.debug(f"Deleted {result.rowcount} question(s) with ID {question_id}")
        return result.rowcount > 0
