"""
SQLAlchemy ORM models for questions.

This module defines the database models for the question bank:
- QuestionRecord: one row per question, content and tags stored as JSON
- QuestionTagRecord: one row per lowercased tag, used for all-of tag filtering
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Text

from questionbank.database.base import ModelBase
from .model import Difficulty, Question, QuestionType, Visibility, content_from_dict


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class QuestionRecord(ModelBase):
    """Model for stored questions."""
    __tablename__ = "questions"

    id = Column(String(36), primary_key=True)
    title = Column(String(500), nullable=False)
    type = Column(String(20), nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    difficulty = Column(String(10), nullable=False, index=True)
    visibility = Column(String(10), nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    points = Column(Integer, nullable=False)
    estimated_time = Column(Integer, nullable=False)
    negative_marks = Column(Integer, nullable=False, default=0)
    explanation = Column(Text, nullable=True)
    author_notes = Column(Text, nullable=True)
    content = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    @classmethod
    def from_domain(cls, question: Question) -> "QuestionRecord":
        record = cls(id=question.id)
        record.apply(question)
        return record

    def apply(self, question: Question) -> None:
        """Copy every mutable field of a domain question onto this row."""
        self.update({
            "title": question.title,
            "type": question.type.value,
            "category": question.category,
            "difficulty": question.difficulty.value,
            "visibility": question.visibility.value,
            "tags": list(question.tags),
            "points": question.points,
            "estimated_time": question.estimated_time,
            "negative_marks": question.negative_marks,
            "explanation": question.explanation,
            "author_notes": question.author_notes,
            "content": question.content.to_dict(),
            "created_at": question.created_at,
            "updated_at": question.updated_at,
        })

    def to_domain(self) -> Question:
        question_type = QuestionType(self.type)
        return Question(
            id=self.id,
            title=self.title,
            type=question_type,
            category=self.category,
            difficulty=Difficulty(self.difficulty),
            visibility=Visibility(self.visibility),
            tags=list(self.tags or []),
            points=self.points,
            estimated_time=self.estimated_time,
            negative_marks=self.negative_marks,
            explanation=self.explanation,
            author_notes=self.author_notes,
            content=content_from_dict(question_type, self.content),
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
        )


class QuestionTagRecord(ModelBase):
    """Model for the lowercased tags of a question."""
    __tablename__ = "question_tags"

    question_id = Column(
        String(36),
        ForeignKey("questions.id", ondelete="CASCADE"),
        primary_key=True
    )
    tag = Column(String(50), primary_key=True)

    __table_args__ = (
        Index("idx_question_tags_tag", "tag"),
    )

    @classmethod
    def for_question(cls, question_id: str, tags: List[str]) -> List["QuestionTagRecord"]:
        normalized = dict.fromkeys(tag.lower() for tag in tags)
        return [cls(question_id=question_id, tag=tag) for tag in normalized]
