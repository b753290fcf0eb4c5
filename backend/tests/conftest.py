"""
Pytest configuration and fixtures for the backend tests.

Every test gets a fresh in-memory SQLite schema; API tests share that
session with the app through a get_db override.
"""
import os

os.environ["TESTING"] = "true"

from datetime import timedelta
from typing import Dict, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import app.models  # noqa: F401
from app.core.database import Base, SessionLocal, engine, get_db, utcnow
from app.core.security import create_access_token
from app.main import app as fastapi_app
from app.models.course import Course, Topic, Material, Test
from app.models.gamification import Badge, Achievement, Leaderboard
from app.models.user import User, UserRole
from app.seed import DEFAULT_BADGES, DEFAULT_ACHIEVEMENTS, DEFAULT_LEADERBOARDS
from app.services.gamification import GamificationService


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Database session over a freshly created schema"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def service(db) -> GamificationService:
    return GamificationService(db)


@pytest.fixture
def catalogue(db):
    """Default badges, achievements and leaderboards"""
    for model, rows in (
        (Badge, DEFAULT_BADGES),
        (Achievement, DEFAULT_ACHIEVEMENTS),
        (Leaderboard, DEFAULT_LEADERBOARDS),
    ):
        for row in rows:
            db.add(model(**row))
    db.commit()


@pytest.fixture
def make_user(db):
    """Factory for users; usernames and emails are derived from the name"""
    def _make_user(name: str, role: UserRole = UserRole.STUDENT, is_active: bool = True) -> User:
        user = User(
            email=f"{name}@academy.kz",
            username=name,
            name=name.title(),
            role=role.value,
            is_active=is_active
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def student(make_user) -> User:
    return make_user("alice")


@pytest.fixture
def other_student(make_user) -> User:
    return make_user("bob")


@pytest.fixture
def admin(make_user) -> User:
    return make_user("root", role=UserRole.ADMIN)


@pytest.fixture
def course(db) -> Course:
    """One topic with two materials and one test"""
    course = Course(title="Algebra Basics", slug="algebra-basics")
    topic = Topic(title="Linear equations", order_index=1)
    topic.materials = [
        Material(title="Intro", order_index=1),
        Material(title="Worked examples", order_index=2),
    ]
    topic.tests = [Test(title="Linear equations quiz")]
    course.topics = [topic]
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@pytest.fixture
def active_window():
    """A (start, end) pair around the current time"""
    now = utcnow()
    return now - timedelta(hours=1), now + timedelta(days=1)


@pytest.fixture
def auth_headers():
    """Bearer header for a user"""
    def _auth_headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.username)}"}
    return _auth_headers


@pytest.fixture
def client(db) -> Generator[TestClient, None, None]:
    """Test client bound to the test session"""
    def override_get_db():
        yield db

    fastapi_app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()
