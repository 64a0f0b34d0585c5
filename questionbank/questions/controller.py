"""
Question Controller

This module implements the API endpoints for questions. Each endpoint parses
its input through ``mapping``, calls the QuestionService held on the
application state, and wraps the result in the standard envelope. Errors
propagate to the handlers registered in ``questionbank.api``.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status

from questionbank.api import APIResponse
from questionbank.common.error_handling import ValidationError
from questionbank.common.logger import get_logger
from questionbank.common.validation import validate_uuid
from questionbank.domain.questions.service import QuestionService
from questionbank.questions import mapping

# Set up logger
logger = get_logger(__name__)

router = APIRouter()


def get_question_service(request: Request) -> QuestionService:
    """Dependency returning the service built during application startup."""
    service = getattr(request.app.state, "question_service", None)
    if service is None:
        raise RuntimeError("Question service not initialized. Application startup may not have run.")
    return service


def _question_id(question_id: str) -> str:
    try:
        validate_uuid(question_id)
    except ValueError as e:
        raise ValidationError("Validation failed", errors=[{"field": "id", "message": str(e)}])
    return question_id.strip()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_question(
    payload: Any = Body(...),
    service: QuestionService = Depends(get_question_service)
):
    """Create a question of any type."""
    question = await service.create_question(mapping.parse_create_payload(payload))
    return APIResponse.success(mapping.serialize_question(question), "Question created successfully")


@router.get("")
async def get_all_questions(
    request: Request,
    service: QuestionService = Depends(get_question_service)
):
    """
    List questions with pagination, filtering and sorting.

    Query parameters: page, limit, type, category, difficulty, visibility,
    tags (comma-separated, all must match), sortBy, sortOrder.
    """
    params = mapping.parse_query_params(request.query_params)
    result = await service.get_all_questions(params)
    page = mapping.serialize_page(result)
    return APIResponse.paginated(page["data"], page["pagination"], "Questions fetched successfully")


@router.get("/category/{category}")
async def get_questions_by_category(
    category: str,
    service: QuestionService = Depends(get_question_service)
):
    questions = await service.get_questions_by_category(category)
    return APIResponse.success(mapping.serialize_questions(questions), "Questions fetched successfully")


@router.get("/type/{question_type}")
async def get_questions_by_type(
    question_type: str,
    service: QuestionService = Depends(get_question_service)
):
    questions = await service.get_questions_by_type(mapping.parse_question_type(question_type))
    return APIResponse.success(mapping.serialize_questions(questions), "Questions fetched successfully")


@router.get("/{question_id}")
async def get_question(
    question_id: str,
    service: QuestionService = Depends(get_question_service)
):
    question = await service.get_question_by_id(_question_id(question_id))
    return APIResponse.success(mapping.serialize_question(question), "Question fetched successfully")


@router.put("/{question_id}")
async def update_question(
    question_id: str,
    payload: Any = Body(...),
    service: QuestionService = Depends(get_question_service)
):
    """Update the supplied fields of a question; its type never changes."""
    question_id = _question_id(question_id)
    question = await service.update_question(question_id, mapping.parse_update_payload(payload))
    return APIResponse.success(mapping.serialize_question(question), "Question updated successfully")


@router.delete("/{question_id}")
async def delete_question(
    question_id: str,
    service: QuestionService = Depends(get_question_service)
):
    await service.delete_question(_question_id(question_id))
    return APIResponse.success(message="Question deleted successfully")
