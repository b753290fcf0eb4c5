"""
Course models for Prep Academy LMS.

Defines Course, Topic, Subtopic, Material and Test models for the
learning content structure.
"""

from datetime import datetime
from typing import Optional
from enum import Enum
from sqlalchemy import (
    Integer, String, DateTime, Text, ForeignKey, UniqueConstraint, Index,
    CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.core.database import Base, utcnow


class ContentStatus(str, Enum):
    """Status of content items."""
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class MaterialType(str, Enum):
    """Kinds of learning material."""
    TEXT = "TEXT"
    VIDEO = "VIDEO"
    PDF = "PDF"
    LINK = "LINK"


class Course(Base):
    """
    Course model: an ordered set of topics with materials and tests.
    """
    __tablename__ = "courses"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Basic information
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        default=ContentStatus.DRAFT.value,
        nullable=False
    )

    # Author information
    author_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    topics = relationship(
        "Topic",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Topic.order_index"
    )
    enrollments = relationship("CourseEnrollment", back_populates="course", cascade="all, delete-orphan")
    author = relationship("User", backref="authored_courses")

    __table_args__ = (
        Index("idx_course_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title='{self.title}', slug='{self.slug}')>"

    @property
    def material_count(self) -> int:
        return sum(len(topic.materials) for topic in self.topics)

    @property
    def test_count(self) -> int:
        return sum(len(topic.tests) for topic in self.topics)


class Topic(Base):
    """
    Topic model representing a unit within a course.
    """
    __tablename__ = "topics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    course_id: Mapped[int] = mapped_column(Integer, ForeignKey("courses.id"), nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    # Relationships
    course = relationship("Course", back_populates="topics")
    subtopics = relationship(
        "Subtopic",
        back_populates="topic",
        cascade="all, delete-orphan",
        order_by="Subtopic.order_index"
    )
    materials = relationship("Material", back_populates="topic", cascade="all, delete-orphan")
    tests = relationship("Test", back_populates="topic", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_topic_course_order", "course_id", "order_index"),
    )

    def __repr__(self) -> str:
        return f"<Topic(id={self.id}, title='{self.title}', course_id={self.course_id})>"


class Subtopic(Base):
    """
    Optional grouping of materials inside a topic.
    """
    __tablename__ = "subtopics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    topic_id: Mapped[int] = mapped_column(Integer, ForeignKey("topics.id"), nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    topic = relationship("Topic", back_populates="subtopics")
    materials = relationship("Material", back_populates="subtopic")

    def __repr__(self) -> str:
        return f"<Subtopic(id={self.id}, title='{self.title}', topic_id={self.topic_id})>"


class Material(Base):
    """
    A piece of learning material (text, video, document or link).
    """
    __tablename__ = "materials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    topic_id: Mapped[int] = mapped_column(Integer, ForeignKey("topics.id"), nullable=False)
    subtopic_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("subtopics.id"), nullable=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), default=MaterialType.TEXT.value, nullable=False)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    topic = relationship("Topic", back_populates="materials")
    subtopic = relationship("Subtopic", back_populates="materials")
    progress_records = relationship("MaterialProgress", back_populates="material", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_material_topic_order", "topic_id", "order_index"),
    )

    def __repr__(self) -> str:
        return f"<Material(id={self.id}, title='{self.title}', type='{self.type}')>"


class Test(Base):
    """
    A graded test attached to a topic.
    """
    __tablename__ = "tests"
    # Keep pytest from collecting this model when imported in test modules.
    __test__ = False

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    topic_id: Mapped[int] = mapped_column(Integer, ForeignKey("topics.id"), nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    passing_score: Mapped[int] = mapped_column(Integer, default=60, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    topic = relationship("Topic", back_populates="tests")
    submissions = relationship("TestSubmission", back_populates="test", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("passing_score >= 0 AND passing_score <= 100", name="check_test_passing_score"),
        UniqueConstraint("topic_id", "title", name="uq_test_topic_title"),
    )

    def __repr__(self) -> str:
        return f"<Test(id={self.id}, title='{self.title}', topic_id={self.topic_id})>"
