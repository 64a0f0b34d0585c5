"""
Question Rule Tables

Declarative field rules for the question payload. Each ``ObjectSchema`` is an
ordered list of ``FieldRule`` entries plus the cross-field rules evaluated once
the per-field checks of the same object have run. ``CONTENT_SCHEMAS`` maps each
question type to the schema of its content variant.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from questionbank.common.validation import (
    Validator,
    coerce_integer,
    is_integer,
    validate_boolean,
    validate_enum,
    validate_length,
    validate_list,
    validate_object,
    validate_one_of,
    validate_range,
    validate_string,
    validate_url,
)
from questionbank.domain.questions.model import (
    CodeTheme,
    Difficulty,
    EvaluationMode,
    ProgrammingLanguage,
    QuestionType,
    SortField,
    SortOrder,
    Visibility,
)


@dataclass
class FieldRule:
    """
    Rule set for one key of an object.

    Attributes:
        name: Key inside the enclosing object
        checks: Validators run in order; each receives the previous result
        required: Whether a missing value is a violation
        required_message: Message reported for a missing required value
        item_checks: Validators applied to every element of a list value
        item_schema: Schema applied to every element of a list value
        schema: Schema applied to an object value
        strip_blank: Whether whitespace-only strings count as missing
    """
    name: str
    checks: List[Validator] = field(default_factory=list)
    required: bool = False
    required_message: Optional[str] = None
    item_checks: List[Validator] = field(default_factory=list)
    item_schema: Optional["ObjectSchema"] = None
    schema: Optional["ObjectSchema"] = None
    strip_blank: bool = True


@dataclass
class CrossFieldRule:
    """
    Constraint spanning several keys of one object.

    ``holds`` receives the raw object and returns False only when the rule
    applies and is broken; missing dependents make it not applicable.
    """
    field: str
    message: str
    holds: Callable[[Dict[str, Any]], bool]


@dataclass
class ObjectSchema:
    fields: List[FieldRule]
    cross_rules: List[CrossFieldRule] = field(default_factory=list)


def _at_least_one_correct(data: Dict[str, Any]) -> bool:
    options = data.get("options")
    if not isinstance(options, list) or not options:
        return True
    return any(isinstance(option, dict) and option.get("isCorrect") is True for option in options)


def _max_words_not_below_min(data: Dict[str, Any]) -> bool:
    min_words = data.get("minWords")
    max_words = data.get("maxWords")
    if not (is_integer(min_words) and is_integer(max_words)):
        return True
    return max_words >= min_words


def _text(description: str, min_length: Optional[int] = None, max_length: Optional[int] = None) -> List[Validator]:
    return [validate_string(description), validate_length(min_length, max_length, description)]


def _flag(name: str) -> FieldRule:
    message = f"{name} must be a boolean"
    return FieldRule(name, [validate_boolean(name)], required=True, required_message=message)


QUESTION_CONTENT_RULE = FieldRule(
    "questionContent",
    _text("Question content", 10, 10000),
    required=True,
    required_message="Question content is required",
)

AT_LEAST_ONE_CORRECT = CrossFieldRule(
    "options", "At least one option must be marked as correct", _at_least_one_correct
)


# Base fields shared by every question type

BASE_SCHEMA = ObjectSchema([
    FieldRule("title", _text("Title", 3, 500), required=True, required_message="Title is required"),
    FieldRule(
        "type",
        [validate_enum(QuestionType, "Invalid question type")],
        required=True,
        required_message="Question type is required",
    ),
    FieldRule("category", _text("Category", 2, 100), required=True, required_message="Category is required"),
    FieldRule(
        "difficulty",
        [validate_enum(Difficulty, "Invalid difficulty level")],
        required=True,
        required_message="Difficulty is required",
    ),
    FieldRule(
        "visibility",
        [validate_enum(Visibility, "Invalid visibility type")],
        required=True,
        required_message="Visibility is required",
    ),
    FieldRule(
        "tags",
        [validate_list(description="Tags", message="Tags must be an array")],
        item_checks=_text("Each tag", 2, 50),
    ),
    FieldRule(
        "points",
        [validate_range(0, 1000, message="Points must be between 0 and 1000")],
        required=True,
        required_message="Points are required",
    ),
    FieldRule(
        "estimatedTime",
        [validate_range(1, 1440, message="Estimated time must be between 1 and 1440 minutes")],
        required=True,
        required_message="Estimated time is required",
    ),
    FieldRule("negativeMarks", [validate_range(0, 100, message="Negative marks must be between 0 and 100")]),
    FieldRule("explanation", _text("Explanation", max_length=5000)),
    FieldRule("authorNotes", _text("Author notes", max_length=2000)),
])


# MCQ

MCQ_OPTION_SCHEMA = ObjectSchema([
    FieldRule("id", [validate_string("Option ID")], required=True, required_message="Option ID is required"),
    FieldRule("text", _text("Option text", 1, 1000), required=True, required_message="Option text is required"),
    _flag("isCorrect"),
])

MCQ_SCHEMA = ObjectSchema(
    [
        QUESTION_CONTENT_RULE,
        FieldRule(
            "options",
            [validate_list(2, 10, message="Must have between 2 and 10 options")],
            required=True,
            required_message="Options are required",
            item_schema=MCQ_OPTION_SCHEMA,
        ),
    ],
    cross_rules=[AT_LEAST_ONE_CORRECT],
)


# Programming

TEST_CASE_SCHEMA = ObjectSchema([
    FieldRule("id", [validate_string("Test case ID")], required=True, required_message="Test case ID is required"),
    FieldRule(
        "input",
        [validate_string("Test case input")],
        required=True,
        required_message="Test case input is required",
        strip_blank=False,
    ),
    FieldRule(
        "expectedOutput",
        [validate_string("Expected output")],
        required=True,
        required_message="Expected output is required",
        strip_blank=False,
    ),
    FieldRule(
        "points",
        [validate_range(0, 100, message="Test case points must be between 0 and 100")],
        required=True,
        required_message="Test case points must be between 0 and 100",
    ),
    FieldRule("description", _text("Test case description", max_length=500)),
    _flag("isHidden"),
])

PROGRAMMING_SCHEMA = ObjectSchema([
    QUESTION_CONTENT_RULE,
    FieldRule(
        "programmingLanguage",
        [validate_enum(ProgrammingLanguage, "Invalid programming language")],
        required=True,
        required_message="Programming language is required",
    ),
    FieldRule(
        "evaluationMode",
        [validate_enum(EvaluationMode, "Invalid evaluation mode")],
        required=True,
        required_message="Evaluation mode is required",
    ),
    FieldRule(
        "timeLimit",
        [validate_range(100, 30000, "Time limit", unit="milliseconds")],
        required=True,
        required_message="Time limit is required",
    ),
    FieldRule(
        "memoryLimit",
        [validate_range(16, 1024, "Memory limit", unit="MB")],
        required=True,
        required_message="Memory limit is required",
    ),
    FieldRule(
        "codeTheme",
        [validate_enum(CodeTheme, "Invalid code theme")],
        required=True,
        required_message="Code theme is required",
    ),
    _flag("showTestCases"),
    _flag("allowDebugging"),
    FieldRule("starterCode", _text("Starter code", max_length=10000)),
    FieldRule(
        "testCases",
        [validate_list(1, 50, message="Must have between 1 and 50 test cases")],
        required=True,
        required_message="Test cases are required",
        item_schema=TEST_CASE_SCHEMA,
    ),
])


# Descriptive

DESCRIPTIVE_SCHEMA = ObjectSchema(
    [
        QUESTION_CONTENT_RULE,
        FieldRule("wordLimit", [validate_range(10, 10000, message="Word limit must be between 10 and 10000")]),
        FieldRule("minWords", [validate_range(1, 10000, message="Minimum words must be between 1 and 10000")]),
        FieldRule("maxWords", [validate_range(1, 10000, message="Maximum words must be between 1 and 10000")]),
    ],
    cross_rules=[
        CrossFieldRule("maxWords", "Maximum words must be greater than minimum words", _max_words_not_below_min),
    ],
)


# Image-based

IMAGE_OPTION_SCHEMA = ObjectSchema([
    FieldRule("id", [validate_string("Option ID")], required=True, required_message="Option ID is required"),
    FieldRule(
        "imageUrl",
        [validate_url("Option image URL must be a valid URL")],
        required=True,
        required_message="Option image URL is required",
    ),
    FieldRule("altText", _text("Alt text", max_length=500)),
    _flag("isCorrect"),
])

DISPLAY_SETTINGS_SCHEMA = ObjectSchema([
    _flag("allowZoom"),
    _flag("showLabels"),
    _flag("showTextDescriptions"),
    _flag("randomizeOrder"),
])

IMAGE_BASED_SCHEMA = ObjectSchema(
    [
        QUESTION_CONTENT_RULE,
        FieldRule("questionImageUrl", [validate_url("Question image URL must be a valid URL")]),
        FieldRule("questionImageAlt", _text("Question image alt text", max_length=500)),
        FieldRule(
            "options",
            [validate_list(2, 10, message="Must have between 2 and 10 options")],
            required=True,
            required_message="Options are required",
            item_schema=IMAGE_OPTION_SCHEMA,
        ),
        FieldRule(
            "displaySettings",
            [validate_object("Display settings")],
            required=True,
            required_message="Display settings are required",
            schema=DISPLAY_SETTINGS_SCHEMA,
        ),
    ],
    cross_rules=[AT_LEAST_ONE_CORRECT],
)


CONTENT_SCHEMAS: Dict[QuestionType, ObjectSchema] = {
    QuestionType.MCQ: MCQ_SCHEMA,
    QuestionType.PROGRAMMING: PROGRAMMING_SCHEMA,
    QuestionType.DESCRIPTIVE: DESCRIPTIVE_SCHEMA,
    QuestionType.IMAGE_BASED: IMAGE_BASED_SCHEMA,
}


# List query parameters arrive as strings

def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


QUERY_SCHEMA = ObjectSchema([
    FieldRule(
        "page",
        [
            coerce_integer("Page must be a positive integer"),
            validate_range(1, message="Page must be a positive integer"),
        ],
    ),
    FieldRule(
        "limit",
        [
            coerce_integer("Limit must be between 1 and 100"),
            validate_range(1, 100, message="Limit must be between 1 and 100"),
        ],
    ),
    FieldRule("type", [validate_enum(QuestionType, "Invalid question type")]),
    FieldRule("category", _text("Category", 2, 100)),
    FieldRule("difficulty", [validate_enum(Difficulty, "Invalid difficulty level")]),
    FieldRule("visibility", [validate_enum(Visibility, "Invalid visibility type")]),
    FieldRule("tags", [validate_string("Tags")]),
    FieldRule(
        "sortBy",
        [_strip, validate_one_of([member.value for member in SortField], "Invalid sort field")],
    ),
    FieldRule(
        "sortOrder",
        [validate_one_of([member.value for member in SortOrder], "Sort order must be asc or desc")],
    ),
])
