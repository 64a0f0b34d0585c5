"""
Request/Response Mapping for the Question API

Turns validated wire payloads and query strings into service request objects,
and questions back into camelCase JSON.
"""

from typing import Any, Dict, List, Mapping, Optional

from questionbank.common.error_handling import ValidationError
from questionbank.common.validation import is_blank
from questionbank.domain.questions.model import (
    Difficulty,
    PaginatedResult,
    Question,
    QuestionCreate,
    QuestionQueryParams,
    QuestionType,
    QuestionUpdate,
    SortField,
    SortOrder,
    Visibility,
)
from questionbank.domain.questions.validator import (
    validate_query_params,
    validate_question,
    validate_question_update,
)

VALIDATION_FAILED = "Validation failed"

QUERY_KEYS = ("page", "limit", "type", "category", "difficulty", "visibility", "tags", "sortBy", "sortOrder")


def _clean_text(value: Optional[str]) -> Optional[str]:
    """Trim a free-text field; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def _clean_tags(tags: Optional[List[str]]) -> List[str]:
    # Exact duplicates collapse onto their first occurrence
    return list(dict.fromkeys(tag.strip() for tag in tags or []))


def parse_query_params(raw: Mapping[str, Any]) -> QuestionQueryParams:
    """
    Validate string query parameters and convert them to QuestionQueryParams.

    Args:
        raw: Query parameters as received

    Returns:
        Parsed parameters with defaults applied

    Raises:
        ValidationError: If any parameter is malformed
    """
    params = {key: raw[key] for key in QUERY_KEYS if key in raw and not is_blank(raw[key])}
    validate_query_params(params).raise_if_invalid(VALIDATION_FAILED)

    return QuestionQueryParams(
        page=int(params.get("page", 1)),
        limit=int(params.get("limit", 10)),
        type=QuestionType(params["type"]) if "type" in params else None,
        category=params["category"].strip() if "category" in params else None,
        difficulty=Difficulty(params["difficulty"]) if "difficulty" in params else None,
        visibility=Visibility(params["visibility"]) if "visibility" in params else None,
        tags=params.get("tags"),
        sort_by=SortField(params["sortBy"].strip()) if "sortBy" in params else SortField.CREATED_AT,
        sort_order=SortOrder(params["sortOrder"]) if "sortOrder" in params else SortOrder.DESC,
    )


def parse_create_payload(payload: Any) -> QuestionCreate:
    """
    Validate a create body and convert it to a QuestionCreate.

    Content stays a wire dictionary; the service turns it into its variant.

    Raises:
        ValidationError: With every violation found in the body
    """
    validate_question(payload).raise_if_invalid(VALIDATION_FAILED)

    return QuestionCreate(
        title=payload["title"].strip(),
        type=payload["type"],
        category=payload["category"].strip(),
        difficulty=Difficulty(payload["difficulty"]),
        visibility=Visibility(payload["visibility"]),
        tags=_clean_tags(payload.get("tags")),
        points=payload["points"],
        estimated_time=payload["estimatedTime"],
        negative_marks=payload.get("negativeMarks") or 0,
        explanation=_clean_text(payload.get("explanation")),
        author_notes=_clean_text(payload.get("authorNotes")),
        content=payload["content"],
    )


def parse_update_payload(payload: Any) -> QuestionUpdate:
    """
    Validate an update body and convert it to a QuestionUpdate.

    Keys that are absent or null are left unchanged by the service.

    Raises:
        ValidationError: With every violation found in the supplied fields
    """
    validate_question_update(payload).raise_if_invalid(VALIDATION_FAILED)

    changes = QuestionUpdate(
        type=payload.get("type"),
        points=payload.get("points"),
        estimated_time=payload.get("estimatedTime"),
        negative_marks=payload.get("negativeMarks"),
        content=payload.get("content"),
    )
    if payload.get("title") is not None:
        changes.title = payload["title"].strip()
    if payload.get("category") is not None:
        changes.category = payload["category"].strip()
    if payload.get("difficulty") is not None:
        changes.difficulty = Difficulty(payload["difficulty"])
    if payload.get("visibility") is not None:
        changes.visibility = Visibility(payload["visibility"])
    if payload.get("tags") is not None:
        changes.tags = _clean_tags(payload["tags"])
    if payload.get("explanation") is not None:
        changes.explanation = payload["explanation"].strip()
    if payload.get("authorNotes") is not None:
        changes.author_notes = payload["authorNotes"].strip()

    return changes


def parse_question_type(value: str) -> QuestionType:
    """
    Resolve a question type taken from a path segment.

    Raises:
        ValidationError: If the value is not a known type
    """
    question_type = QuestionType.parse(value)
    if question_type is None:
        raise ValidationError(VALIDATION_FAILED, errors=[{"field": "type", "message": "Invalid question type"}])
    return question_type


def serialize_question(question: Question) -> Dict[str, Any]:
    return question.to_dict()


def serialize_questions(questions: List[Question]) -> List[Dict[str, Any]]:
    return [serialize_question(question) for question in questions]


def serialize_page(result: PaginatedResult) -> Dict[str, Any]:
    return {
        "data": serialize_questions(result.items),
        "pagination": result.pagination(),
    }
