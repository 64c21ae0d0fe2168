# api/v1/nutrition.py
from __future__ import annotations

from datetime import date, datetime, time, timedelta

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.v1.deps import get_calculator
from api.v1.schemas import DailyProgress, NutritionLogIn, NutritionLogOut
from core.nutrition_calc import NutritionalCalculator
from core.nutrition_log import progress_for_day
from services.db import NutritionLog, get_session, load_profile_snapshot, utc_today

router = APIRouter()


@router.post(
    "/{user_id}/nutrition",
    response_model=NutritionLogOut,
    status_code=status.HTTP_201_CREATED,
)
async def log_food(
    user_id: str,
    body: NutritionLogIn,
    db: AsyncSession = Depends(get_session),
) -> NutritionLogOut:
    entry = NutritionLog(user_id=user_id, **body.model_dump())
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return NutritionLogOut.model_validate(entry, from_attributes=True)


@router.get("/{user_id}/nutrition/progress", response_model=DailyProgress)
async def nutrition_progress(
    user_id: str,
    day: date | None = None,
    db: AsyncSession = Depends(get_session),
    calc: NutritionalCalculator = Depends(get_calculator),
) -> DailyProgress:
    """What was logged on `day` (UTC, default today) against the current targets."""
    day = day or utc_today()
    snapshot = await load_profile_snapshot(db, user_id)
    targets = calc.targets_from_payload(snapshot.to_payload())

    start = datetime.combine(day, time.min)
    res = await db.execute(
        select(NutritionLog).where(
            NutritionLog.user_id == user_id,
            NutritionLog.created_at >= start,
            NutritionLog.created_at < start + timedelta(days=1),
        )
    )
    entries = [
        {
            "calories": row.calories,
            "protein": row.protein,
            "carbs": row.carbs,
            "fat": row.fat,
            "created_at": row.created_at,
        }
        for row in res.scalars().all()
    ]
    return DailyProgress(**progress_for_day(entries, targets, day))
