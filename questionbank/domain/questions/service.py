"""
Question Service

This module implements the service layer for questions: it re-checks content
against the question type, applies the update rules, and maps missing
questions to QuestionNotFoundError. Persistence is delegated to an injected
QuestionRepository.
"""

from collections.abc import Mapping
from typing import Any, List

from questionbank.common.error_handling import QuestionNotFoundError, ValidationError
from questionbank.common.logger import LoggerAdapter, app_logger, log_execution_time
from .model import (
    PaginatedResult,
    Question,
    QuestionContent,
    QuestionCreate,
    QuestionQueryParams,
    QuestionType,
    QuestionUpdate,
    content_from_dict,
    content_matches_type,
)
from .repository import QuestionFilter, QuestionOrdering, QuestionRepository, utc_now
from .validator import validate_content

logger = app_logger.getChild("questions.service")


class QuestionService:
    """
    Business operations on questions.

    The stored type of a question never changes. Content supplied on update is
    always checked against that stored type, whatever ``type`` the caller sends.
    """

    def __init__(self, repository: QuestionRepository):
        self.repository = repository

    def _parse_content(self, question_type: QuestionType, content: Any) -> QuestionContent:
        message = f"Invalid {question_type.label} content structure"

        if not isinstance(content, Mapping):
            if not content_matches_type(question_type, content):
                raise ValidationError(message, errors=[
                    {"field": "content", "message": f"Content does not match question type {question_type.value}"}
                ])
            # Typed content is held to the same rules as wire content
            content = content.to_dict()

        result = validate_content(question_type, dict(content))
        if not result.is_valid:
            raise ValidationError(message, errors=result.errors)
        return content_from_dict(question_type, content)

    async def _require(self, question_id: str) -> Question:
        question = await self.repository.find_by_id(question_id)
        if question is None:
            raise QuestionNotFoundError(question_id)
        return question

    @log_execution_time(logger)
    async def create_question(self, request: QuestionCreate) -> Question:
        """
        Create a question after checking its content against its type.

        Args:
            request: Question fields; content may still be a wire dictionary

        Returns:
            The stored question with id and timestamps

        Raises:
            ValidationError: If the type is unknown or the content does not fit it
        """
        question_type = QuestionType.parse(request.type)
        if question_type is None:
            raise ValidationError("Unknown question type", errors=[
                {"field": "type", "message": "Invalid question type"}
            ])

        question = Question(
            title=request.title,
            type=question_type,
            category=request.category,
            difficulty=request.difficulty,
            visibility=request.visibility,
            tags=list(request.tags),
            points=request.points,
            estimated_time=request.estimated_time,
            negative_marks=request.negative_marks,
            explanation=request.explanation,
            author_notes=request.author_notes,
            content=self._parse_content(question_type, request.content),
        )

        created = await self.repository.create(question)
        LoggerAdapter(logger, {"question_id": created.id}).info(
            f"Created {question_type.value} question"
        )
        return created

    async def get_question_by_id(self, question_id: str) -> Question:
        return await self._require(question_id)

    @log_execution_time(logger)
    async def get_all_questions(self, params: QuestionQueryParams) -> PaginatedResult:
        """
        Get one page of questions matching the query filters.

        Args:
            params: Paging, filter and sort options

        Returns:
            The page of questions with the total number of matches
        """
        question_filter = QuestionFilter(
            type=params.type,
            category=params.category,
            difficulty=params.difficulty,
            visibility=params.visibility,
            tags=list(params.tags),
        )
        ordering = QuestionOrdering(field=params.sort_by, order=params.sort_order)

        total = await self.repository.count(question_filter)

        # Offsets past the last match never reach the store
        items = []
        if params.skip < total:
            items = await self.repository.find_many(
                question_filter,
                skip=params.skip,
                take=params.limit,
                order_by=ordering
            )

        return PaginatedResult(
            items=items,
            current_page=params.page,
            page_size=params.limit,
            total_items=total,
        )

    @log_execution_time(logger)
    async def update_question(self, question_id: str, changes: QuestionUpdate) -> Question:
        """
        Apply a partial update to a question.

        Args:
            question_id: The ID of the question to update
            changes: Supplied fields; None leaves a field unchanged

        Returns:
            The updated question

        Raises:
            QuestionNotFoundError: If the question does not exist
            ValidationError: If new content does not fit the stored type
        """
        question_log = LoggerAdapter(logger, {"question_id": question_id})
        existing = await self._require(question_id)

        if changes.type is not None and QuestionType.parse(changes.type) != existing.type:
            question_log.with_context(requested_type=changes.type).warning(
                f"Ignoring type change, keeping {existing.type.value}"
            )

        patch = changes.base_changes()
        if changes.content is not None:
            patch["content"] = self._parse_content(existing.type, changes.content)
        patch["updated_at"] = utc_now()

        updated = await self.repository.update(question_id, patch)
        if updated is None:
            raise QuestionNotFoundError(question_id)

        question_log.info(f"Updated question fields: {', '.join(sorted(patch))}")
        return updated

    @log_execution_time(logger)
    async def delete_question(self, question_id: str) -> None:
        await self._require(question_id)

        if not await self.repository.delete(question_id):
            raise QuestionNotFoundError(question_id)

        LoggerAdapter(logger, {"question_id": question_id}).info("Deleted question")

    async def get_questions_by_category(self, category: str) -> List[Question]:
        """Get every question whose category contains ``category``, newest first."""
        return await self.repository.find_many(QuestionFilter(category=category))

    async def get_questions_by_type(self, question_type: QuestionType) -> List[Question]:
        """Get every question of one type, newest first."""
        return await self.repository.find_many(QuestionFilter(type=question_type))
