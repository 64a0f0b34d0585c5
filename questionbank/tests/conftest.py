"""
Shared fixtures for the question bank test suite.

Payload factories return fresh wire-format dictionaries on every call so
tests can mutate them freely.
"""

import pytest
from fastapi.testclient import TestClient

from questionbank.config import Settings
from questionbank.domain.questions.memory_repository import MemoryQuestionRepository
from questionbank.domain.questions.model import Difficulty, Question, QuestionType, Visibility, content_from_dict
from questionbank.domain.questions.service import QuestionService
from questionbank.main import create_app

API_PREFIX = "/api/v1/questions"


def base_payload(question_type, content, **overrides):
    payload = {
        "title": "Sample question title",
        "type": question_type,
        "category": "Mathematics",
        "difficulty": "EASY",
        "visibility": "PUBLIC",
        "tags": ["algebra", "basics"],
        "points": 10,
        "estimatedTime": 5,
        "negativeMarks": 0,
        "content": content,
    }
    payload.update(overrides)
    return payload


def mcq_content():
    return {
        "questionContent": "What is the value of 2 + 2?",
        "options": [
            {"id": "a", "text": "3", "isCorrect": False},
            {"id": "b", "text": "4", "isCorrect": True},
        ],
    }


def programming_content():
    return {
        "questionContent": "Write a function that reverses a string.",
        "programmingLanguage": "PYTHON",
        "evaluationMode": "AUTOMATIC",
        "timeLimit": 2000,
        "memoryLimit": 256,
        "codeTheme": "DARK",
        "showTestCases": True,
        "allowDebugging": False,
        "starterCode": "def reverse(s):\n    pass",
        "testCases": [
            {"id": "t1", "input": "abc", "expectedOutput": "cba", "points": 5, "isHidden": False},
            {
                "id": "t2",
                "input": "racecar",
                "expectedOutput": "racecar",
                "points": 5,
                "isHidden": True,
                "description": "Palindrome",
            },
        ],
    }


def descriptive_content():
    return {
        "questionContent": "Explain the difference between a list and a tuple.",
        "wordLimit": 300,
        "minWords": 50,
        "maxWords": 300,
    }


def image_based_content():
    return {
        "questionContent": "Which image shows a right triangle?",
        "questionImageUrl": "https://example.com/prompt.png",
        "questionImageAlt": "Three triangles",
        "options": [
            {"id": "a", "imageUrl": "https://example.com/a.png", "altText": "Acute", "isCorrect": False},
            {"id": "b", "imageUrl": "https://example.com/b.png", "isCorrect": True},
        ],
        "displaySettings": {
            "allowZoom": True,
            "showLabels": True,
            "showTextDescriptions": False,
            "randomizeOrder": False,
        },
    }


def mcq_payload(**overrides):
    return base_payload("MCQ", overrides.pop("content", mcq_content()), **overrides)


def programming_payload(**overrides):
    return base_payload("PROGRAMMING", overrides.pop("content", programming_content()), **overrides)


def descriptive_payload(**overrides):
    return base_payload("DESCRIPTIVE", overrides.pop("content", descriptive_content()), **overrides)


def image_based_payload(**overrides):
    return base_payload("IMAGE_BASED", overrides.pop("content", image_based_content()), **overrides)


PAYLOAD_FACTORIES = {
    "MCQ": mcq_payload,
    "PROGRAMMING": programming_payload,
    "DESCRIPTIVE": descriptive_payload,
    "IMAGE_BASED": image_based_payload,
}


def sample_question(**overrides):
    """Build an unsaved MCQ Question entity."""
    fields = {
        "title": "Sample question title",
        "type": QuestionType.MCQ,
        "category": "Mathematics",
        "difficulty": Difficulty.EASY,
        "visibility": Visibility.PUBLIC,
        "tags": ["algebra", "basics"],
        "points": 10,
        "estimated_time": 5,
        "content": content_from_dict(QuestionType.MCQ, mcq_content()),
    }
    fields.update(overrides)
    return Question(**fields)


@pytest.fixture
def settings():
    """Settings for an in-memory application that never signals the test process."""
    return Settings(
        ENV="test",
        STORAGE_BACKEND="memory",
        EXIT_ON_CRASH=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def repository():
    """Create an empty in-memory repository."""
    return MemoryQuestionRepository()


@pytest.fixture
def service(repository):
    """Create a question service over the in-memory repository."""
    return QuestionService(repository)


@pytest.fixture
def app(repository, settings):
    """Create a test application bound to the in-memory repository."""
    return create_app(repository=repository, settings=settings)


@pytest.fixture
def client(app):
    """Create test client for the application"""
    with TestClient(app) as client:
        yield client
