"""
Question Domain Model Module

This module defines the core domain entities for the question subsystem:
the polymorphic ``Question`` record, the four content variants it can carry,
and the request objects the service accepts.

Content variants form a tagged union keyed by ``QuestionType``; the
``CONTENT_TYPES`` table maps each tag to the dataclass that holds its shape.
All ``from_dict``/``to_dict`` methods speak the camelCase wire format.
"""

import enum
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, Union


class QuestionType(str, enum.Enum):
    """Discriminator of the content variant a question carries."""
    MCQ = "MCQ"
    PROGRAMMING = "PROGRAMMING"
    DESCRIPTIVE = "DESCRIPTIVE"
    IMAGE_BASED = "IMAGE_BASED"

    @classmethod
    def parse(cls, value: Any) -> Optional["QuestionType"]:
        """Return the member for ``value``, or None when it is not a known tag."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (ValueError, TypeError):
            return None

    @property
    def label(self) -> str:
        return QUESTION_TYPE_LABELS[self]


QUESTION_TYPE_LABELS = {
    QuestionType.MCQ: "MCQ",
    QuestionType.PROGRAMMING: "Programming",
    QuestionType.DESCRIPTIVE: "Descriptive",
    QuestionType.IMAGE_BASED: "Image-based",
}


class Difficulty(str, enum.Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"

    @property
    def rank(self) -> int:
        return DIFFICULTY_ORDER.index(self)


DIFFICULTY_ORDER = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD]


class Visibility(str, enum.Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class ProgrammingLanguage(str, enum.Enum):
    JAVASCRIPT = "JAVASCRIPT"
    PYTHON = "PYTHON"
    JAVA = "JAVA"
    CPP = "CPP"
    C = "C"
    CSHARP = "CSHARP"
    GO = "GO"
    RUST = "RUST"


class EvaluationMode(str, enum.Enum):
    AUTOMATIC = "AUTOMATIC"
    MANUAL = "MANUAL"


class CodeTheme(str, enum.Enum):
    LIGHT = "LIGHT"
    DARK = "DARK"
    MONOKAI = "MONOKAI"
    DRACULA = "DRACULA"


class SortField(str, enum.Enum):
    """Wire names of the fields a question list can be sorted by."""
    TITLE = "title"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    POINTS = "points"
    DIFFICULTY = "difficulty"

    @property
    def attribute(self) -> str:
        return SORT_ATTRIBUTES[self]


SORT_ATTRIBUTES = {
    SortField.TITLE: "title",
    SortField.CREATED_AT: "created_at",
    SortField.UPDATED_AT: "updated_at",
    SortField.POINTS: "points",
    SortField.DIFFICULTY: "difficulty",
}


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


# Content variants

@dataclass
class McqOption:
    id: str
    text: str
    is_correct: bool

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "McqOption":
        return cls(id=data["id"], text=data["text"], is_correct=data["isCorrect"])

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "isCorrect": self.is_correct}


@dataclass
class McqContent:
    question_content: str
    options: List[McqOption]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "McqContent":
        return cls(
            question_content=data["questionContent"],
            options=[McqOption.from_dict(option) for option in data["options"]],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionContent": self.question_content,
            "options": [option.to_dict() for option in self.options],
        }


@dataclass
class TestCase:
    id: str
    input: str
    expected_output: str
    points: int
    is_hidden: bool
    description: Optional[str] = None

    __test__ = False  # keep pytest from collecting this class

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TestCase":
        return cls(
            id=data["id"],
            input=data["input"],
            expected_output=data["expectedOutput"],
            points=data["points"],
            is_hidden=data["isHidden"],
            description=data.get("description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "input": self.input,
            "expectedOutput": self.expected_output,
            "points": self.points,
            "description": self.description,
            "isHidden": self.is_hidden,
        })


@dataclass
class ProgrammingContent:
    question_content: str
    programming_language: ProgrammingLanguage
    evaluation_mode: EvaluationMode
    time_limit: int
    memory_limit: int
    code_theme: CodeTheme
    show_test_cases: bool
    allow_debugging: bool
    test_cases: List[TestCase]
    starter_code: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProgrammingContent":
        return cls(
            question_content=data["questionContent"],
            programming_language=ProgrammingLanguage(data["programmingLanguage"]),
            evaluation_mode=EvaluationMode(data["evaluationMode"]),
            time_limit=data["timeLimit"],
            memory_limit=data["memoryLimit"],
            code_theme=CodeTheme(data["codeTheme"]),
            show_test_cases=data["showTestCases"],
            allow_debugging=data["allowDebugging"],
            test_cases=[TestCase.from_dict(case) for case in data["testCases"]],
            starter_code=data.get("starterCode"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "questionContent": self.question_content,
            "programmingLanguage": self.programming_language.value,
            "evaluationMode": self.evaluation_mode.value,
            "timeLimit": self.time_limit,
            "memoryLimit": self.memory_limit,
            "codeTheme": self.code_theme.value,
            "showTestCases": self.show_test_cases,
            "allowDebugging": self.allow_debugging,
            "starterCode": self.starter_code,
            "testCases": [case.to_dict() for case in self.test_cases],
        })


@dataclass
class DescriptiveContent:
    question_content: str
    word_limit: Optional[int] = None
    min_words: Optional[int] = None
    max_words: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DescriptiveContent":
        return cls(
            question_content=data["questionContent"],
            word_limit=data.get("wordLimit"),
            min_words=data.get("minWords"),
            max_words=data.get("maxWords"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "questionContent": self.question_content,
            "wordLimit": self.word_limit,
            "minWords": self.min_words,
            "maxWords": self.max_words,
        })


@dataclass
class ImageOption:
    id: str
    image_url: str
    is_correct: bool
    alt_text: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImageOption":
        return cls(
            id=data["id"],
            image_url=data["imageUrl"],
            is_correct=data["isCorrect"],
            alt_text=data.get("altText"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "imageUrl": self.image_url,
            "altText": self.alt_text,
            "isCorrect": self.is_correct,
        })


@dataclass
class DisplaySettings:
    allow_zoom: bool
    show_labels: bool
    show_text_descriptions: bool
    randomize_order: bool

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DisplaySettings":
        return cls(
            allow_zoom=data["allowZoom"],
            show_labels=data["showLabels"],
            show_text_descriptions=data["showTextDescriptions"],
            randomize_order=data["randomizeOrder"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allowZoom": self.allow_zoom,
            "showLabels": self.show_labels,
            "showTextDescriptions": self.show_text_descriptions,
            "randomizeOrder": self.randomize_order,
        }


@dataclass
class ImageBasedContent:
    question_content: str
    options: List[ImageOption]
    display_settings: DisplaySettings
    question_image_url: Optional[str] = None
    question_image_alt: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImageBasedContent":
        return cls(
            question_content=data["questionContent"],
            options=[ImageOption.from_dict(option) for option in data["options"]],
            display_settings=DisplaySettings.from_dict(data["displaySettings"]),
            question_image_url=data.get("questionImageUrl"),
            question_image_alt=data.get("questionImageAlt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "questionContent": self.question_content,
            "questionImageUrl": self.question_image_url,
            "questionImageAlt": self.question_image_alt,
            "options": [option.to_dict() for option in self.options],
            "displaySettings": self.display_settings.to_dict(),
        })


QuestionContent = Union[McqContent, ProgrammingContent, DescriptiveContent, ImageBasedContent]

CONTENT_TYPES: Dict[QuestionType, Type[Any]] = {
    QuestionType.MCQ: McqContent,
    QuestionType.PROGRAMMING: ProgrammingContent,
    QuestionType.DESCRIPTIVE: DescriptiveContent,
    QuestionType.IMAGE_BASED: ImageBasedContent,
}


def content_from_dict(question_type: QuestionType, data: Mapping[str, Any]) -> QuestionContent:
    """Build the content variant registered for ``question_type``."""
    return CONTENT_TYPES[question_type].from_dict(data)


def content_matches_type(question_type: QuestionType, content: Any) -> bool:
    return isinstance(content, CONTENT_TYPES[question_type])


@dataclass
class Question:
    """
    Represents a question in the question bank.

    Attributes:
        id: Identifier assigned by the repository on creation
        title: Short title of the question
        type: Content variant discriminator, fixed at creation
        category: Free-form category name
        difficulty: Difficulty level
        visibility: Whether the question is public
        points: Points awarded for a correct answer
        estimated_time: Expected solving time in minutes
        content: Type-specific content variant
        tags: Ordered, duplicate-free tags
        negative_marks: Marks deducted for a wrong answer
        explanation: Optional explanation shown after answering
        author_notes: Optional notes for authors
        created_at: When the question was created
        updated_at: When the question was last updated
    """
    title: str
    type: QuestionType
    category: str
    difficulty: Difficulty
    visibility: Visibility
    points: int
    estimated_time: int
    content: QuestionContent
    tags: List[str] = field(default_factory=list)
    negative_marks: int = 0
    explanation: Optional[str] = None
    author_notes: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the question to its wire representation.

        Returns:
            Dictionary with camelCase keys and ISO-8601 timestamps
        """
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type.value,
            "category": self.category,
            "difficulty": self.difficulty.value,
            "visibility": self.visibility.value,
            "tags": list(self.tags),
            "points": self.points,
            "estimatedTime": self.estimated_time,
            "negativeMarks": self.negative_marks,
            "explanation": self.explanation,
            "authorNotes": self.author_notes,
            "content": self.content.to_dict(),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Question":
        """
        Create a Question from its wire representation.

        Args:
            data: Dictionary produced by ``to_dict``

        Returns:
            A Question instance
        """
        question_type = QuestionType(data["type"])
        created_at = data.get("createdAt")
        updated_at = data.get("updatedAt")

        return cls(
            id=data.get("id"),
            title=data["title"],
            type=question_type,
            category=data["category"],
            difficulty=Difficulty(data["difficulty"]),
            visibility=Visibility(data["visibility"]),
            tags=list(data.get("tags") or []),
            points=data["points"],
            estimated_time=data["estimatedTime"],
            negative_marks=data.get("negativeMarks") or 0,
            explanation=data.get("explanation"),
            author_notes=data.get("authorNotes"),
            content=content_from_dict(question_type, data["content"]),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )


# Service request objects

@dataclass
class QuestionCreate:
    """
    Input of ``QuestionService.create_question``.

    ``type`` may be an unknown string and ``content`` a raw wire dictionary:
    the service checks both before anything is persisted.
    """
    title: str
    type: Union[QuestionType, str]
    category: str
    difficulty: Difficulty
    visibility: Visibility
    points: int
    estimated_time: int
    content: Union[Mapping[str, Any], QuestionContent]
    tags: List[str] = field(default_factory=list)
    negative_marks: int = 0
    explanation: Optional[str] = None
    author_notes: Optional[str] = None


@dataclass
class QuestionUpdate:
    """
    Input of ``QuestionService.update_question``; None means "leave unchanged".

    A blank ``explanation`` or ``author_notes`` clears the stored value, the
    same way a blank one is stored as None on create.

    ``type`` is accepted for wire compatibility but never changes the stored
    type. ``content`` replaces the stored content wholesale.
    """
    title: Optional[str] = None
    type: Optional[Union[QuestionType, str]] = None
    category: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    visibility: Optional[Visibility] = None
    tags: Optional[List[str]] = None
    points: Optional[int] = None
    estimated_time: Optional[int] = None
    negative_marks: Optional[int] = None
    explanation: Optional[str] = None
    author_notes: Optional[str] = None
    content: Optional[Union[Mapping[str, Any], QuestionContent]] = None

    BASE_FIELDS = (
        "title", "category", "difficulty", "visibility", "tags", "points",
        "estimated_time", "negative_marks", "explanation", "author_notes",
    )
    OPTIONAL_TEXT_FIELDS = ("explanation", "author_notes")

    def base_changes(self) -> Dict[str, Any]:
        """Base-field attributes that were supplied, keyed by attribute name."""
        changes = {}
        for name in self.BASE_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            # Blank optional text clears the field
            if name in self.OPTIONAL_TEXT_FIELDS and not value.strip():
                value = None
            changes[name] = value
        return changes


def parse_tags(tags: Union[str, Sequence[str], None]) -> List[str]:
    """Split a comma-separated tag list; blank entries are dropped."""
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [tag.strip() for tag in tags if tag and tag.strip()]


@dataclass
class QuestionQueryParams:
    """Paging, filtering and sorting options of a question listing."""
    page: int = 1
    limit: int = 10
    type: Optional[QuestionType] = None
    category: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    visibility: Optional[Visibility] = None
    tags: Union[str, List[str], None] = None
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC

    def __post_init__(self):
        self.tags = parse_tags(self.tags)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class PaginatedResult:
    items: List[Question]
    current_page: int
    page_size: int
    total_items: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.page_size) if self.page_size else 0

    def pagination(self) -> Dict[str, int]:
        return {
            "currentPage": self.current_page,
            "pageSize": self.page_size,
            "totalItems": self.total_items,
            "totalPages": self.total_pages,
        }
