# api/v1/profiles.py
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.v1.schemas import (
    GoalIn,
    GoalOut,
    MeasurementIn,
    MeasurementOut,
    ProfileCompletion,
    ProfileIn,
    ProfileOut,
    TipsOut,
    WeightIn,
    WeightOut,
    WorkoutIn,
    WorkoutOut,
)
from core.tips import build_tips
from services.db import (
    MuscleMeasurement,
    Profile,
    UserGoal,
    UserWeight,
    WorkoutLog,
    active_goals,
    get_session,
    has_measurements,
    latest_weights,
    load_profile_snapshot,
)

router = APIRouter()


# ───────────────────────── profile ──────────────────────────
@router.get("/{user_id}/profile", response_model=ProfileOut)
async def fetch_profile(
    user_id: str,
    db: AsyncSession = Depends(get_session),
) -> ProfileOut:
    profile = await db.get(Profile, user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileOut.model_validate(profile, from_attributes=True)


@router.put("/{user_id}/profile", response_model=ProfileOut)
async def upsert_profile(
    user_id: str,
    body: ProfileIn,
    db: AsyncSession = Depends(get_session),
) -> ProfileOut:
    profile = await db.get(Profile, user_id)
    if profile is None:
        profile = Profile(id=user_id)
        db.add(profile)

    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)

    await db.commit()
    await db.refresh(profile)
    return ProfileOut.model_validate(profile, from_attributes=True)


@router.get("/{user_id}/profile/completion", response_model=ProfileCompletion)
async def profile_completion(
    user_id: str,
    db: AsyncSession = Depends(get_session),
) -> ProfileCompletion:
    snapshot = await load_profile_snapshot(db, user_id)
    return ProfileCompletion(**snapshot.completion())


# ───────────────────────── weights ──────────────────────────
@router.post(
    "/{user_id}/weights",
    response_model=WeightOut,
    status_code=status.HTTP_201_CREATED,
)
async def log_weight(
    user_id: str,
    body: WeightIn,
    db: AsyncSession = Depends(get_session),
) -> WeightOut:
    entry = UserWeight(user_id=user_id, weight=body.weight, date=body.date or date.today())
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return WeightOut.model_validate(entry, from_attributes=True)


@router.get("/{user_id}/weights", response_model=list[WeightOut])
async def list_weights(
    user_id: str,
    limit: int = 10,
    db: AsyncSession = Depends(get_session),
) -> list[WeightOut]:
    rows = await latest_weights(db, user_id, limit=limit)
    return [WeightOut.model_validate(w, from_attributes=True) for w in rows]


# ───────────────────────── measurements ─────────────────────
@router.post(
    "/{user_id}/measurements",
    response_model=MeasurementOut,
    status_code=status.HTTP_201_CREATED,
)
async def log_measurement(
    user_id: str,
    body: MeasurementIn,
    db: AsyncSession = Depends(get_session),
) -> MeasurementOut:
    entry = MuscleMeasurement(
        user_id=user_id,
        date=body.date or date.today(),
        **body.model_dump(exclude={"date"}),
    )
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return MeasurementOut.model_validate(entry, from_attributes=True)


@router.get("/{user_id}/measurements", response_model=list[MeasurementOut])
async def list_measurements(
    user_id: str,
    limit: int = 10,
    db: AsyncSession = Depends(get_session),
) -> list[MeasurementOut]:
    res = await db.execute(
        select(MuscleMeasurement)
        .where(MuscleMeasurement.user_id == user_id)
        .order_by(MuscleMeasurement.date.desc(), MuscleMeasurement.id.desc())
        .limit(limit)
    )
    return [MeasurementOut.model_validate(m, from_attributes=True) for m in res.scalars().all()]


# ───────────────────────── workouts ─────────────────────────
@router.post(
    "/{user_id}/workouts",
    response_model=WorkoutOut,
    status_code=status.HTTP_201_CREATED,
)
async def log_workout(
    user_id: str,
    body: WorkoutIn,
    db: AsyncSession = Depends(get_session),
) -> WorkoutOut:
    entry = WorkoutLog(
        user_id=user_id,
        date=body.date or date.today(),
        duration=body.duration,
        exercises=[e.model_dump() for e in body.exercises],
    )
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return WorkoutOut.model_validate(entry, from_attributes=True)


@router.get("/{user_id}/workouts", response_model=list[WorkoutOut])
async def list_workouts(
    user_id: str,
    limit: int = 10,
    db: AsyncSession = Depends(get_session),
) -> list[WorkoutOut]:
    res = await db.execute(
        select(WorkoutLog)
        .where(WorkoutLog.user_id == user_id)
        .order_by(WorkoutLog.date.desc(), WorkoutLog.id.desc())
        .limit(limit)
    )
    return [WorkoutOut.model_validate(w, from_attributes=True) for w in res.scalars().all()]


# ───────────────────────── goals ────────────────────────────
@router.post(
    "/{user_id}/goals",
    response_model=GoalOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_goal(
    user_id: str,
    body: GoalIn,
    db: AsyncSession = Depends(get_session),
) -> GoalOut:
    goal = UserGoal(user_id=user_id, is_active=True, current_progress=0, **body.model_dump())
    db.add(goal)
    await db.commit()
    await db.refresh(goal)
    return GoalOut.model_validate(goal, from_attributes=True)


@router.get("/{user_id}/goals", response_model=list[GoalOut])
async def list_goals(
    user_id: str,
    db: AsyncSession = Depends(get_session),
) -> list[GoalOut]:
    return [GoalOut.model_validate(g, from_attributes=True) for g in await active_goals(db, user_id)]


# ───────────────────────── tips ─────────────────────────────
@router.get("/{user_id}/tips", response_model=TipsOut)
async def tips(
    user_id: str,
    db: AsyncSession = Depends(get_session),
) -> TipsOut:
    snapshot = await load_profile_snapshot(db, user_id)
    goals = [g.goal_type for g in await active_goals(db, user_id)]
    weights = [w.weight for w in await latest_weights(db, user_id, limit=10)]
    measured = await has_measurements(db, user_id)
    return TipsOut(tips=build_tips(snapshot, goals, weights, has_measurements=measured))
