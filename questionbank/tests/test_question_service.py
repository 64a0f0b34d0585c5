"""
Tests for the QuestionService business rules.

The service runs over the in-memory repository; the SQL repository shares
the same contract and is covered in test_sql_repository.
"""

import math

import pytest

from questionbank.common.error_handling import QuestionNotFoundError, ValidationError
from questionbank.domain.questions.model import (
    Difficulty,
    McqContent,
    McqOption,
    QuestionCreate,
    QuestionQueryParams,
    QuestionType,
    QuestionUpdate,
    SortField,
    SortOrder,
    Visibility,
    content_from_dict,
)
from questionbank.questions.mapping import parse_create_payload

from conftest import (
    descriptive_content,
    descriptive_payload,
    image_based_payload,
    mcq_content,
    mcq_payload,
    programming_payload,
)

MISSING_ID = "00000000-0000-4000-8000-000000000000"


async def create(service, payload):
    return await service.create_question(parse_create_payload(payload))


class TestCreateQuestion:
    """Creation and content re-validation."""

    @pytest.mark.asyncio
    async def test_create_assigns_identity(self, service):
        # Act
        question = await create(service, mcq_payload())

        # Assert
        assert question.id
        assert question.created_at is not None
        assert question.created_at == question.updated_at
        assert question.type is QuestionType.MCQ
        assert isinstance(question.content, McqContent)

    @pytest.mark.asyncio
    async def test_every_type_can_be_created(self, service):
        for factory in (mcq_payload, programming_payload, descriptive_payload, image_based_payload):
            await create(service, factory())

        result = await service.get_all_questions(QuestionQueryParams())

        assert result.total_items == 4
        assert {question.type for question in result.items} == set(QuestionType)

    @pytest.mark.asyncio
    async def test_unknown_type(self, service):
        request = parse_create_payload(mcq_payload())
        request.type = "ESSAY"

        with pytest.raises(ValidationError) as exc_info:
            await service.create_question(request)

        assert exc_info.value.message == "Unknown question type"

    @pytest.mark.asyncio
    async def test_content_must_match_declared_type(self, service, repository):
        request = parse_create_payload(mcq_payload())
        request.type = QuestionType.PROGRAMMING

        with pytest.raises(ValidationError) as exc_info:
            await service.create_question(request)

        assert exc_info.value.message == "Invalid Programming content structure"
        assert exc_info.value.errors
        assert repository.get_all() == []

    @pytest.mark.asyncio
    async def test_typed_content_of_another_variant_is_rejected(self, service):
        request = QuestionCreate(
            title="Explain recursion",
            type=QuestionType.DESCRIPTIVE,
            category="Programming",
            difficulty=Difficulty.HARD,
            visibility=Visibility.PUBLIC,
            points=10,
            estimated_time=15,
            content=content_from_dict(QuestionType.MCQ, mcq_content()),
        )

        with pytest.raises(ValidationError) as exc_info:
            await service.create_question(request)

        assert exc_info.value.message == "Invalid Descriptive content structure"

    @pytest.mark.asyncio
    async def test_typed_content_is_held_to_content_rules(self, service, repository):
        request = parse_create_payload(mcq_payload())
        request.content = McqContent(question_content="x", options=[McqOption("o1", "3", False)])

        with pytest.raises(ValidationError) as exc_info:
            await service.create_question(request)

        assert exc_info.value.message == "Invalid MCQ content structure"
        fields = {error["field"] for error in exc_info.value.errors}
        assert {"content.questionContent", "content.options"} <= fields
        assert repository.get_all() == []


class TestReadQuestions:
    """Lookup, pagination and filtering."""

    @pytest.mark.asyncio
    async def test_get_missing_question(self, service):
        with pytest.raises(QuestionNotFoundError) as exc_info:
            await service.get_question_by_id(MISSING_ID)

        assert exc_info.value.status_code == 404
        assert exc_info.value.question_id == MISSING_ID

    @pytest.mark.asyncio
    async def test_round_trip(self, service):
        created = await create(service, programming_payload())

        fetched = await service.get_question_by_id(created.id)

        assert fetched == created

    @pytest.mark.asyncio
    async def test_pages_reproduce_sorted_set(self, service):
        # Arrange
        for index in range(25):
            await create(service, mcq_payload(title=f"Question {index:02d}"))

        # Act
        pages = []
        for page in range(1, 4):
            params = QuestionQueryParams(page=page, limit=10, sort_by=SortField.TITLE, sort_order=SortOrder.ASC)
            pages.append(await service.get_all_questions(params))

        # Assert
        assert [len(result.items) for result in pages] == [10, 10, 5]
        assert all(result.total_pages == math.ceil(25 / 10) for result in pages)
        titles = [question.title for result in pages for question in result.items]
        assert titles == [f"Question {index:02d}" for index in range(25)]

    @pytest.mark.asyncio
    async def test_page_beyond_the_end_is_empty(self, service):
        await create(service, mcq_payload())

        result = await service.get_all_questions(QuestionQueryParams(page=5, limit=10))

        assert result.items == []
        assert result.total_items == 1
        assert result.total_pages == 1

    @pytest.mark.asyncio
    async def test_tags_filter_requires_all_tags(self, service):
        await create(service, mcq_payload(title="Only algebra", tags=["Algebra"]))
        both = await create(service, mcq_payload(title="Algebra and geometry", tags=["algebra", "Geometry"]))
        await create(service, mcq_payload(title="Only geometry", tags=["geometry"]))

        result = await service.get_all_questions(QuestionQueryParams(tags="ALGEBRA,geometry"))

        assert [question.id for question in result.items] == [both.id]
        assert result.total_items == 1

    @pytest.mark.asyncio
    async def test_category_is_case_insensitive_substring(self, service):
        await create(service, mcq_payload(category="Applied Mathematics"))
        await create(service, mcq_payload(category="Physics"))

        result = await service.get_all_questions(QuestionQueryParams(category="MATH"))

        assert [question.category for question in result.items] == ["Applied Mathematics"]

    @pytest.mark.asyncio
    async def test_filters_combine(self, service):
        await create(service, mcq_payload(difficulty="HARD", visibility="PRIVATE"))
        await create(service, mcq_payload(difficulty="HARD", visibility="PUBLIC"))
        await create(service, descriptive_payload(difficulty="HARD", visibility="PRIVATE"))

        result = await service.get_all_questions(QuestionQueryParams(
            type=QuestionType.MCQ, difficulty=Difficulty.HARD, visibility=Visibility.PRIVATE
        ))

        assert result.total_items == 1
        assert result.items[0].visibility is Visibility.PRIVATE

    @pytest.mark.asyncio
    async def test_sort_by_difficulty_uses_level_order(self, service):
        for difficulty in ("MEDIUM", "HARD", "EASY"):
            await create(service, mcq_payload(difficulty=difficulty))

        ascending = await service.get_all_questions(
            QuestionQueryParams(sort_by=SortField.DIFFICULTY, sort_order=SortOrder.ASC)
        )
        descending = await service.get_all_questions(
            QuestionQueryParams(sort_by=SortField.DIFFICULTY, sort_order=SortOrder.DESC)
        )

        assert [q.difficulty.value for q in ascending.items] == ["EASY", "MEDIUM", "HARD"]
        assert [q.difficulty.value for q in descending.items] == ["HARD", "MEDIUM", "EASY"]

    @pytest.mark.asyncio
    async def test_by_category_and_type(self, service):
        mcq = await create(service, mcq_payload(category="Chemistry"))
        essay = await create(service, descriptive_payload(category="History"))

        by_category = await service.get_questions_by_category("chem")
        by_type = await service.get_questions_by_type(QuestionType.DESCRIPTIVE)

        assert [question.id for question in by_category] == [mcq.id]
        assert [question.id for question in by_type] == [essay.id]


class TestUpdateQuestion:
    """Partial updates and type immutability."""

    @pytest.mark.asyncio
    async def test_update_base_fields(self, service):
        original = await create(service, mcq_payload())

        updated = await service.update_question(original.id, QuestionUpdate(title="Renamed question", points=50))

        assert updated.title == "Renamed question"
        assert updated.points == 50
        assert updated.category == original.category
        assert updated.created_at == original.created_at
        assert updated.updated_at >= original.updated_at

    @pytest.mark.asyncio
    async def test_type_never_changes(self, service):
        original = await create(service, mcq_payload())

        updated = await service.update_question(original.id, QuestionUpdate(type="DESCRIPTIVE", points=3))

        assert updated.type is QuestionType.MCQ
        assert (await service.get_question_by_id(original.id)).type is QuestionType.MCQ

    @pytest.mark.asyncio
    async def test_content_is_checked_against_stored_type(self, service):
        original = await create(service, mcq_payload())

        # Claiming a new type does not let foreign content through
        with pytest.raises(ValidationError) as exc_info:
            await service.update_question(
                original.id,
                QuestionUpdate(type="DESCRIPTIVE", content=descriptive_content())
            )

        assert exc_info.value.message == "Invalid MCQ content structure"
        stored = await service.get_question_by_id(original.id)
        assert stored.content == original.content

    @pytest.mark.asyncio
    async def test_content_is_replaced_wholesale(self, service):
        original = await create(service, mcq_payload())
        new_content = mcq_content()
        new_content["options"].append({"id": "c", "text": "5", "isCorrect": False})

        updated = await service.update_question(original.id, QuestionUpdate(content=new_content))

        assert [option.id for option in updated.content.options] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_typed_content_update_is_held_to_content_rules(self, service):
        original = await create(service, mcq_payload())
        broken = McqContent(
            question_content="What is the value of 2 + 2?",
            options=[McqOption("a", "3", False), McqOption("b", "5", False)],
        )

        with pytest.raises(ValidationError) as exc_info:
            await service.update_question(original.id, QuestionUpdate(content=broken))

        assert exc_info.value.errors == [
            {"field": "content.options", "message": "At least one option must be marked as correct"}
        ]
        assert (await service.get_question_by_id(original.id)).content == original.content

    @pytest.mark.asyncio
    async def test_update_missing_question(self, service):
        with pytest.raises(QuestionNotFoundError):
            await service.update_question(MISSING_ID, QuestionUpdate(title="Nothing here"))


class TestDeleteQuestion:

    @pytest.mark.asyncio
    async def test_delete_then_fetch(self, service):
        question = await create(service, mcq_payload())

        await service.delete_question(question.id)

        with pytest.raises(QuestionNotFoundError):
            await service.get_question_by_id(question.id)

    @pytest.mark.asyncio
    async def test_delete_missing_question(self, service):
        with pytest.raises(QuestionNotFoundError):
            await service.delete_question(MISSING_ID)
