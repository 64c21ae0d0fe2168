# api/v1/plans.py
from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.v1.deps import get_calculator
from api.v1.schemas import PlanCreated, PlanOut, PlanRequest
from config import settings
from core.errors import UpstreamGenerationError
from core.nutrition_calc import NutritionalCalculator
from core.plan_builder import (
    PLAN_SYSTEM,
    build_plan_prompt,
    expand_daily_tasks,
    parse_plan,
    plan_description,
    plan_title,
)
from services import llm
from services.auth import current_user_id
from services.db import AIPlan, DailyTask, get_session, load_profile_snapshot

_LOG = logging.getLogger(__name__)

router = APIRouter()

# the workout prompt describes the person; nutrition also needs targets
_WORKOUT_FIELDS = ("height", "age", "gender", "activityLevel")


@router.post("", response_model=PlanCreated, status_code=status.HTTP_201_CREATED)
async def generate_plan(
    body: PlanRequest,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
    calc: NutritionalCalculator = Depends(get_calculator),
) -> PlanCreated:
    _LOG.info("generating %s plan for user %s", body.plan_type, user_id)

    # 1) profile + targets
    snapshot = await load_profile_snapshot(db, user_id)
    snapshot.require(_WORKOUT_FIELDS)
    targets = None
    if body.plan_type in ("nutrition", "combined"):
        targets = calc.targets_from_payload(snapshot.to_payload())

    # 2) model call
    prompt = build_plan_prompt(body.plan_type, snapshot, targets)
    try:
        raw = await llm.agenerate(prompt, system=PLAN_SYSTEM)
        plan_data = parse_plan(raw, body.plan_type, targets)
    except UpstreamGenerationError as exc:
        _LOG.error("plan generation failed for %s: %s", user_id, exc)
        await llm.log_failure_to_db(db, user_id, exc, raw_input=prompt)
        raise

    # 3) persist plan + a week of tasks
    plan = AIPlan(
        user_id=user_id,
        plan_type=body.plan_type,
        title=plan_title(body.plan_type, plan_data),
        description=plan_description(plan_data),
        plan_data=plan_data,
        is_active=True,
    )
    db.add(plan)
    await db.flush()

    tasks = expand_daily_tasks(plan_data, body.plan_type, date.today(), days=settings.plan_days)
    db.add_all(DailyTask(user_id=user_id, plan_id=plan.id, **t) for t in tasks)
    await db.commit()
    await db.refresh(plan)

    _LOG.info("created %s plan %d with %d tasks", body.plan_type, plan.id, len(tasks))
    return PlanCreated(
        plan=PlanOut.model_validate(plan, from_attributes=True),
        tasks_created=len(tasks),
    )


@router.get("", response_model=list[PlanOut])
async def list_active_plans(
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[PlanOut]:
    res = await db.execute(
        select(AIPlan)
        .where(AIPlan.user_id == user_id, AIPlan.is_active.is_(True))
        .order_by(AIPlan.id.desc())
    )
    return [PlanOut.model_validate(p, from_attributes=True) for p in res.scalars().all()]


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_plan(
    plan_id: int,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Response:
    plan = await db.get(AIPlan, plan_id)
    if plan is None or plan.user_id != user_id:
        raise HTTPException(status_code=404, detail="Plan not found")
    plan.is_active = False
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
