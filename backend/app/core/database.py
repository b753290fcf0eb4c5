"""
SQLAlchemy engine, session factory and declarative base for Prep Academy LMS.

Also hosts the startup bootstrap (``init_db``) that creates the first admin
account and the default gamification catalogue.
"""

from datetime import datetime, timezone
from typing import Generator
from sqlalchemy import create_engine, MetaData, text
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
import logging

from .config import settings


logger = logging.getLogger(__name__)


# Deterministic constraint names so migrations can address them
metadata = MetaData(naming_convention={
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
})


def _build_engine():
    if settings.TESTING:
        # One shared in-memory database for the whole test process
        return create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool
        )
    if settings.is_sqlite:
        return create_engine(
            settings.DATABASE_URL,
            connect_args={"check_same_thread": False},
            echo=settings.DEBUG
        )
    return create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        echo=settings.DEBUG
    )


engine = _build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base(metadata=metadata)


def utcnow() -> datetime:
    """Current time as naive UTC, the representation stored in every timestamp column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Convert an offset-aware datetime to naive UTC; naive values are assumed UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(db: Session) -> None:
    """
    Create the first admin account and the default gamification catalogue
    (badges, achievements and all-time leaderboards).

    Safe to call on every startup: existing rows are matched by email or name
    and left untouched, so catalogue edits made through the admin API survive.
    """
    from app.models.user import User, UserRole
    from app.models.gamification import Badge, Achievement, Leaderboard
    from app.core.security import get_password_hash
    from app.seed import DEFAULT_BADGES, DEFAULT_ACHIEVEMENTS, DEFAULT_LEADERBOARDS

    owner = db.query(User).filter(User.email == settings.FIRST_ADMIN_EMAIL).first()
    if owner is None:
        db.add(User(
            email=settings.FIRST_ADMIN_EMAIL,
            username=settings.FIRST_ADMIN_USERNAME,
            hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
            name="Administrator",
            role=UserRole.OWNER.value,
            is_active=True
        ))
        logger.info(f"Created owner account {settings.FIRST_ADMIN_EMAIL}")

    created = 0
    for model, rows in (
        (Badge, DEFAULT_BADGES),
        (Achievement, DEFAULT_ACHIEVEMENTS),
        (Leaderboard, DEFAULT_LEADERBOARDS),
    ):
        existing = {name for (name,) in db.query(model.name)}
        for row in rows:
            if row["name"] not in existing:
                db.add(model(**row))
                created += 1

    db.commit()
    logger.info(f"Gamification catalogue seeded ({created} new rows)")


def check_database_connection() -> bool:
    """Run ``SELECT 1``; False (and an error log) if the database is unreachable."""
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
    finally:
        db.close()


class DatabaseManager:
    """
    Schema-level helpers used at startup and by the admin dashboard.
    """

    @staticmethod
    def create_all_tables():
        import app.models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ready")

    @staticmethod
    def get_table_stats(db: Session) -> dict:
        """Row counts for the main tables, keyed by table name."""
        from app.models import (
            User, Course, UserPoints, PointTransaction, UserBadge,
            UserAchievement, Team, Event, Challenge
        )

        return {
            model.__tablename__: {
                "count": db.query(model).count(),
                "model": model.__name__
            }
            for model in (
                User, Course, UserPoints, PointTransaction, UserBadge,
                UserAchievement, Team, Event, Challenge
            )
        }
