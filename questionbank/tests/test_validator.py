"""
Tests for the question validation engine.

Covers base field rules, each content variant, cross-field rules, partial
update validation and query parameter validation.
"""

import pytest

from questionbank.common.validation import FieldViolation
from questionbank.domain.questions.model import QuestionType
from questionbank.domain.questions.validator import (
    validate,
    validate_content,
    validate_query_params,
    validate_question,
    validate_question_update,
)

from conftest import (
    PAYLOAD_FACTORIES,
    descriptive_content,
    image_based_content,
    mcq_content,
    mcq_payload,
    programming_content,
)


def fields(result):
    return [violation.field for violation in result.violations]


def messages(result):
    return {violation.field: violation.message for violation in result.violations}


class TestBaseRules:
    """Rules shared by every question type."""

    @pytest.mark.parametrize("question_type", sorted(PAYLOAD_FACTORIES))
    def test_valid_payloads_pass(self, question_type):
        result = validate_question(PAYLOAD_FACTORIES[question_type]())

        assert result.is_valid, result.errors

    def test_missing_required_fields_are_all_reported(self):
        result = validate_question({"type": "MCQ", "content": mcq_content()})

        assert messages(result) == {
            "title": "Title is required",
            "category": "Category is required",
            "difficulty": "Difficulty is required",
            "visibility": "Visibility is required",
            "points": "Points are required",
            "estimatedTime": "Estimated time is required",
        }

    def test_title_is_measured_after_trimming(self):
        result = validate_question(mcq_payload(title="  ab  "))

        assert messages(result) == {"title": "Title must be between 3 and 500 characters"}

    def test_whitespace_title_counts_as_missing(self):
        result = validate_question(mcq_payload(title="   "))

        assert messages(result) == {"title": "Title is required"}

    def test_enum_values_must_match_exactly(self):
        result = validate_question(mcq_payload(difficulty="easy", visibility="SECRET"))

        assert messages(result) == {
            "difficulty": "Invalid difficulty level",
            "visibility": "Invalid visibility type",
        }

    @pytest.mark.parametrize("points", [-1, 1001, "10", 10.5, True])
    def test_points_must_be_integer_in_range(self, points):
        result = validate_question(mcq_payload(points=points))

        assert messages(result) == {"points": "Points must be between 0 and 1000"}

    def test_estimated_time_bounds(self):
        assert validate_question(mcq_payload(estimatedTime=1)).is_valid
        assert validate_question(mcq_payload(estimatedTime=1440)).is_valid
        assert fields(validate_question(mcq_payload(estimatedTime=0))) == ["estimatedTime"]
        assert fields(validate_question(mcq_payload(estimatedTime=1441))) == ["estimatedTime"]

    def test_each_tag_is_checked_with_its_index(self):
        result = validate_question(mcq_payload(tags=["ok", "x", "fine", "y" * 51]))

        assert result.violations == [
            FieldViolation("tags[1]", "Each tag must be between 2 and 50 characters"),
            FieldViolation("tags[3]", "Each tag must be between 2 and 50 characters"),
        ]

    def test_tags_must_be_an_array(self):
        result = validate_question(mcq_payload(tags="algebra"))

        assert messages(result) == {"tags": "Tags must be an array"}

    def test_optional_text_limits(self):
        result = validate_question(mcq_payload(explanation="e" * 5001, authorNotes="n" * 2001))

        assert messages(result) == {
            "explanation": "Explanation must not exceed 5000 characters",
            "authorNotes": "Author notes must not exceed 2000 characters",
        }

    def test_unknown_type_skips_content_rules(self):
        result = validate_question(mcq_payload(type="ESSAY", content={}))

        assert messages(result) == {"type": "Invalid question type"}

    def test_missing_type_skips_content_rules(self):
        payload = mcq_payload(content=None)
        del payload["type"]

        result = validate_question(payload)

        assert messages(result) == {"type": "Question type is required"}

    def test_non_object_body(self):
        result = validate_question(["not", "an", "object"])

        assert fields(result) == ["body"]

    def test_validate_dispatches_on_given_type(self):
        # Declared type wins over the payload's own type key
        result = validate("PROGRAMMING", mcq_payload())

        assert "content.programmingLanguage" in fields(result)


class TestMcqRules:
    """MCQ content rules."""

    def test_at_least_one_correct_option(self):
        content = mcq_content()
        for option in content["options"]:
            option["isCorrect"] = False

        result = validate_content(QuestionType.MCQ, content)

        assert result.violations == [
            FieldViolation("content.options", "At least one option must be marked as correct")
        ]

    def test_option_count_bounds(self):
        content = mcq_content()
        content["options"] = content["options"][1:]

        result = validate_content(QuestionType.MCQ, content)

        assert messages(result) == {"content.options": "Must have between 2 and 10 options"}

    def test_option_paths_are_indexed(self):
        content = mcq_content()
        content["options"][1]["isCorrect"] = "yes"
        content["options"][0]["text"] = ""

        result = validate_content(QuestionType.MCQ, content)

        assert messages(result) == {
            "content.options[0].text": "Option text is required",
            "content.options[1].isCorrect": "isCorrect must be a boolean",
            "content.options": "At least one option must be marked as correct",
        }

    def test_question_content_length(self):
        content = mcq_content()
        content["questionContent"] = "too short"

        result = validate_content(QuestionType.MCQ, content)

        assert messages(result) == {
            "content.questionContent": "Question content must be between 10 and 10000 characters"
        }

    def test_missing_content(self):
        result = validate_question(mcq_payload(content=None))

        assert messages(result) == {"content": "Content is required"}

    def test_content_must_be_an_object(self):
        result = validate_question(mcq_payload(content="options"))

        assert messages(result) == {"content": "Content must be an object"}

    def test_non_object_option(self):
        content = mcq_content()
        content["options"].append("c")

        result = validate_content(QuestionType.MCQ, content)

        assert fields(result) == ["content.options[2]"]


class TestProgrammingRules:
    """Programming content rules."""

    def test_enums_and_limits(self):
        content = programming_content()
        content.update(programmingLanguage="COBOL", timeLimit=50, memoryLimit=2048, codeTheme="SOLARIZED")

        result = validate_content(QuestionType.PROGRAMMING, content)

        assert messages(result) == {
            "content.programmingLanguage": "Invalid programming language",
            "content.timeLimit": "Time limit must be between 100 and 30000 milliseconds",
            "content.memoryLimit": "Memory limit must be between 16 and 1024 MB",
            "content.codeTheme": "Invalid code theme",
        }

    def test_flags_must_be_literal_booleans(self):
        content = programming_content()
        content["showTestCases"] = 1
        del content["allowDebugging"]

        result = validate_content(QuestionType.PROGRAMMING, content)

        assert messages(result) == {
            "content.showTestCases": "showTestCases must be a boolean",
            "content.allowDebugging": "allowDebugging must be a boolean",
        }

    def test_test_case_rules(self):
        content = programming_content()
        content["testCases"][1].update(expectedOutput="", points=101, description="d" * 501)

        result = validate_content(QuestionType.PROGRAMMING, content)

        assert messages(result) == {
            "content.testCases[1].expectedOutput": "Expected output is required",
            "content.testCases[1].points": "Test case points must be between 0 and 100",
            "content.testCases[1].description": "Test case description must not exceed 500 characters",
        }

    def test_whitespace_input_is_a_valid_test_case_input(self):
        content = programming_content()
        content["testCases"][0]["input"] = " "

        assert validate_content(QuestionType.PROGRAMMING, content).is_valid

    def test_requires_at_least_one_test_case(self):
        content = programming_content()
        content["testCases"] = []

        result = validate_content(QuestionType.PROGRAMMING, content)

        assert messages(result) == {"content.testCases": "Must have between 1 and 50 test cases"}


class TestDescriptiveRules:
    """Descriptive content rules."""

    def test_word_settings_are_optional(self):
        content = {"questionContent": "Describe your favourite algorithm."}

        assert validate_content(QuestionType.DESCRIPTIVE, content).is_valid

    def test_max_words_below_min_words(self):
        content = descriptive_content()
        content.update(minWords=200, maxWords=100)

        result = validate_content(QuestionType.DESCRIPTIVE, content)

        assert result.violations == [
            FieldViolation("content.maxWords", "Maximum words must be greater than minimum words")
        ]

    def test_equal_min_and_max_words(self):
        content = descriptive_content()
        content.update(minWords=100, maxWords=100)

        assert validate_content(QuestionType.DESCRIPTIVE, content).is_valid

    def test_cross_rule_ignores_missing_min_words(self):
        content = descriptive_content()
        del content["minWords"]
        content["maxWords"] = 5

        assert validate_content(QuestionType.DESCRIPTIVE, content).is_valid

    def test_word_limit_bounds(self):
        content = descriptive_content()
        content["wordLimit"] = 9

        result = validate_content(QuestionType.DESCRIPTIVE, content)

        assert messages(result) == {"content.wordLimit": "Word limit must be between 10 and 10000"}


class TestImageBasedRules:
    """Image-based content rules."""

    @pytest.mark.parametrize("url", ["not a url", "ftp://example.com/a.png", "example.com/a.png"])
    def test_option_image_url_must_be_http(self, url):
        content = image_based_content()
        content["options"][0]["imageUrl"] = url

        result = validate_content(QuestionType.IMAGE_BASED, content)

        assert messages(result) == {"content.options[0].imageUrl": "Option image URL must be a valid URL"}

    def test_missing_option_image_url(self):
        content = image_based_content()
        del content["options"][1]["imageUrl"]

        result = validate_content(QuestionType.IMAGE_BASED, content)

        assert messages(result) == {"content.options[1].imageUrl": "Option image URL is required"}

    def test_display_settings_flags(self):
        content = image_based_content()
        del content["displaySettings"]["randomizeOrder"]
        content["displaySettings"]["allowZoom"] = "true"

        result = validate_content(QuestionType.IMAGE_BASED, content)

        assert messages(result) == {
            "content.displaySettings.allowZoom": "allowZoom must be a boolean",
            "content.displaySettings.randomizeOrder": "randomizeOrder must be a boolean",
        }

    def test_display_settings_required(self):
        content = image_based_content()
        del content["displaySettings"]

        result = validate_content(QuestionType.IMAGE_BASED, content)

        assert messages(result) == {"content.displaySettings": "Display settings are required"}

    def test_at_least_one_correct_option(self):
        content = image_based_content()
        content["options"][1]["isCorrect"] = False

        result = validate_content(QuestionType.IMAGE_BASED, content)

        assert messages(result) == {"content.options": "At least one option must be marked as correct"}


class TestUpdateRules:
    """Partial validation of update payloads."""

    def test_only_present_fields_are_checked(self):
        assert validate_question_update({"points": 20}).is_valid
        assert validate_question_update({}).is_valid

    def test_null_fields_are_skipped(self):
        assert validate_question_update({"title": None, "difficulty": None}).is_valid

    def test_present_fields_are_validated(self):
        result = validate_question_update({"title": "ab", "points": 5000})

        assert messages(result) == {
            "title": "Title must be between 3 and 500 characters",
            "points": "Points must be between 0 and 1000",
        }

    def test_blank_required_field_is_rejected(self):
        result = validate_question_update({"category": "  "})

        assert messages(result) == {"category": "Category is required"}

    def test_type_and_content_are_left_to_the_service(self):
        assert validate_question_update({"type": "NOPE", "content": {"questionContent": ""}}).is_valid


class TestQueryRules:
    """Validation of string query parameters."""

    def test_valid_query(self):
        params = {
            "page": "2",
            "limit": "100",
            "type": "MCQ",
            "category": "Math",
            "difficulty": "HARD",
            "visibility": "PRIVATE",
            "tags": "a,b",
            "sortBy": "difficulty",
            "sortOrder": "asc",
        }

        assert validate_query_params(params).is_valid

    @pytest.mark.parametrize("key, value, message", [
        ("page", "0", "Page must be a positive integer"),
        ("page", "abc", "Page must be a positive integer"),
        ("limit", "101", "Limit must be between 1 and 100"),
        ("limit", "1.5", "Limit must be between 1 and 100"),
        ("type", "ESSAY", "Invalid question type"),
        ("category", "x", "Category must be between 2 and 100 characters"),
        ("sortBy", "author", "Invalid sort field"),
        ("sortOrder", "up", "Sort order must be asc or desc"),
    ])
    def test_invalid_parameter(self, key, value, message):
        result = validate_query_params({key: value})

        assert messages(result) == {key: message}
