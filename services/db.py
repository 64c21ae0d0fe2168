"""
services/db.py
────────────────────────────────────────────────────────────────────────
* Async SQLAlchemy v2 setup
* Models for the profile / tracking / plan tables
* Small DAO helpers used by routers and scripts
"""
from __future__ import annotations

import datetime as dt
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
    select,
)
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from config import settings
from core.models.user import ProfileSnapshot

# ───────── connection helper ────────────────────────────────────────
_ENGINE: AsyncEngine | None = None


def _normalise_url(url: str) -> str:
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def engine() -> AsyncEngine:
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = create_async_engine(_normalise_url(settings.database_url), pool_pre_ping=True)
    return _ENGINE


# ───────── clock ─────────────────────────────────────────────────────
def utc_now() -> dt.datetime:
    """Naive UTC timestamp; log rows and "today" windows both use it."""
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


def utc_today() -> dt.date:
    return utc_now().date()


# ───────── declarative base ──────────────────────────────────────────
Base = declarative_base(cls=AsyncAttrs)


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    full_name: Mapped[str | None] = mapped_column(String)
    height_cm: Mapped[float | None] = mapped_column(Float)
    age: Mapped[int | None] = mapped_column(Integer)
    gender: Mapped[str | None] = mapped_column(String)
    activity_level: Mapped[str | None] = mapped_column(String)
    current_weight: Mapped[float | None] = mapped_column(Float)
    target_weight: Mapped[float | None] = mapped_column(Float)
    fitness_goal: Mapped[str | None] = mapped_column(String)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


class UserGoal(Base):
    __tablename__ = "user_goals"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    goal_type: Mapped[str]
    target_weight: Mapped[float | None] = mapped_column(Float)
    target_date: Mapped[dt.date | None] = mapped_column(Date)
    current_progress: Mapped[float | None] = mapped_column(Float)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())


class UserWeight(Base):
    __tablename__ = "user_weights"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    date: Mapped[dt.date] = mapped_column(Date)
    weight: Mapped[float] = mapped_column(Float)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())


class MuscleMeasurement(Base):
    __tablename__ = "user_muscle_measurements"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    date: Mapped[dt.date] = mapped_column(Date)
    chest: Mapped[float | None] = mapped_column(Float)
    biceps: Mapped[float | None] = mapped_column(Float)
    waist: Mapped[float | None] = mapped_column(Float)
    thighs: Mapped[float | None] = mapped_column(Float)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())


class WorkoutLog(Base):
    __tablename__ = "user_workout_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    date: Mapped[dt.date] = mapped_column(Date)
    duration: Mapped[int] = mapped_column(Integer)  # minutes
    exercises: Mapped[list] = mapped_column(JSON)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())


class NutritionLog(Base):
    __tablename__ = "user_nutrition_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    name: Mapped[str]
    calories: Mapped[float] = mapped_column(Float)
    protein: Mapped[float] = mapped_column(Float)
    carbs: Mapped[float] = mapped_column(Float)
    fat: Mapped[float] = mapped_column(Float)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utc_now)


class AIPlan(Base):
    __tablename__ = "user_ai_plans"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    plan_type: Mapped[str]
    title: Mapped[str]
    description: Mapped[str | None] = mapped_column(Text)
    plan_data: Mapped[dict] = mapped_column(JSON)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


class DailyTask(Base):
    __tablename__ = "user_daily_tasks"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    plan_id: Mapped[int] = mapped_column(ForeignKey("user_ai_plans.id", ondelete="CASCADE"))
    task_type: Mapped[str]
    title: Mapped[str]
    description: Mapped[str | None] = mapped_column(Text)
    target_date: Mapped[dt.date] = mapped_column(Date, index=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[dt.datetime | None] = mapped_column(DateTime)


class GenerationFailure(Base):
    __tablename__ = "generation_failures"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64))
    stage: Mapped[str]
    error_message: Mapped[str] = mapped_column(Text)
    raw_input: Mapped[str | None] = mapped_column(Text)
    raw_output: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())


# ───────── DAO helpers ───────────────────────────────────────────────

async def latest_weights(db: AsyncSession, user_id: str, limit: int = 10) -> list[UserWeight]:
    res = await db.execute(
        select(UserWeight)
        .where(UserWeight.user_id == user_id)
        .order_by(UserWeight.date.desc(), UserWeight.id.desc())
        .limit(limit)
    )
    return list(res.scalars().all())


async def active_goals(db: AsyncSession, user_id: str) -> list[UserGoal]:
    res = await db.execute(
        select(UserGoal)
        .where(UserGoal.user_id == user_id, UserGoal.is_active.is_(True))
        .order_by(UserGoal.id.desc())
    )
    return list(res.scalars().all())


async def has_measurements(db: AsyncSession, user_id: str) -> bool:
    res = await db.execute(
        select(MuscleMeasurement.id).where(MuscleMeasurement.user_id == user_id).limit(1)
    )
    return res.first() is not None


async def load_profile_snapshot(db: AsyncSession, user_id: str) -> ProfileSnapshot:
    """Latest known profile; missing pieces stay None."""
    profile = await db.get(Profile, user_id)
    weights = await latest_weights(db, user_id, limit=1)
    goals = await active_goals(db, user_id)

    weight = weights[0].weight if weights else (profile.current_weight if profile else None)
    goal = goals[0].goal_type if goals else (profile.fitness_goal if profile else None)
    target_weight = (
        goals[0].target_weight if goals and goals[0].target_weight
        else (profile.target_weight if profile else None)
    )
    return ProfileSnapshot(
        user_id=user_id,
        height=profile.height_cm if profile else None,
        age=profile.age if profile else None,
        gender=profile.gender if profile else None,
        activity_level=profile.activity_level if profile else None,
        weight=weight,
        target_weight=target_weight,
        goal=goal,
    )


# ───────── session helpers ───────────────────────────────────────────

def _sessionmaker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine(), expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with _sessionmaker()() as session:
        yield session


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Session for scripts running outside FastAPI."""
    async with _sessionmaker()() as session:
        yield session


async def create_all() -> None:
    async with engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
