"""
Progress tracking models for Prep Academy LMS.

Defines CourseEnrollment, MaterialProgress and TestSubmission, the
learner activity the gamification engine aggregates.
"""

from datetime import datetime
from typing import Optional
from enum import Enum
from sqlalchemy import (
    Integer, String, DateTime, ForeignKey, UniqueConstraint, Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.core.database import Base, utcnow


class EnrollmentStatus(str, Enum):
    """Status of a student's enrollment in a course."""
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    COMPLETED = "COMPLETED"


class ProgressStatus(str, Enum):
    """Status of a student's progress through a material."""
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class CourseEnrollment(Base):
    """
    A student's enrollment in a course.
    """
    __tablename__ = "course_enrollments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    student_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    course_id: Mapped[int] = mapped_column(Integer, ForeignKey("courses.id"), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default=EnrollmentStatus.ACTIVE.value,
        nullable=False
    )

    enrolled_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    student = relationship("User", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_student_course_enrollment"),
        Index("idx_enrollment_student_status", "student_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<CourseEnrollment(student_id={self.student_id}, course_id={self.course_id}, status='{self.status}')>"

    @property
    def is_completed(self) -> bool:
        return self.status == EnrollmentStatus.COMPLETED.value


class MaterialProgress(Base):
    """
    Tracks time spent on, and completion of, a single material.
    """
    __tablename__ = "material_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    material_id: Mapped[int] = mapped_column(Integer, ForeignKey("materials.id"), nullable=False)
    student_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default=ProgressStatus.NOT_STARTED.value,
        nullable=False
    )

    # Time tracking
    time_spent: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # in seconds
    study_points_awarded: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_accessed: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    material = relationship("Material", back_populates="progress_records")
    student = relationship("User")

    __table_args__ = (
        UniqueConstraint("material_id", "student_id", name="uq_material_student_progress"),
        CheckConstraint("time_spent >= 0", name="check_time_spent_positive"),
        CheckConstraint("study_points_awarded >= 0", name="check_study_points_positive"),
        Index("idx_material_progress_student", "student_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<MaterialProgress(material_id={self.material_id}, student_id={self.student_id}, status='{self.status}')>"

    @property
    def hours_spent(self) -> float:
        return self.time_spent / 3600


class TestSubmission(Base):
    """
    A student's graded submission for a test.
    """
    __tablename__ = "test_submissions"
    __test__ = False

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    test_id: Mapped[int] = mapped_column(Integer, ForeignKey("tests.id"), nullable=False)
    student_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    # Relationships
    test = relationship("Test", back_populates="submissions")
    student = relationship("User")

    __table_args__ = (
        CheckConstraint("score >= 0 AND score <= 100", name="check_submission_score"),
        Index("idx_test_submission_student", "student_id", "test_id"),
    )

    def __repr__(self) -> str:
        return f"<TestSubmission(test_id={self.test_id}, student_id={self.student_id}, score={self.score})>"
