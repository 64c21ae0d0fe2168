# api/v1/targets.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.v1.deps import get_calculator
from api.v1.schemas import TargetRequest, TargetResponse
from core.nutrition_calc import NutritionalCalculator
from services.db import get_session, load_profile_snapshot

router = APIRouter()


@router.post("/targets", response_model=TargetResponse)
def compute_targets(
    body: TargetRequest,
    calc: NutritionalCalculator = Depends(get_calculator),
) -> TargetResponse:
    """Daily calorie + macro targets for an explicit profile."""
    targets = calc.targets_from_payload(body.payload())
    return TargetResponse(**targets.as_dict())


@router.get("/users/{user_id}/targets", response_model=TargetResponse)
async def user_targets(
    user_id: str,
    db: AsyncSession = Depends(get_session),
    calc: NutritionalCalculator = Depends(get_calculator),
) -> TargetResponse:
    """Targets recomputed from the latest stored profile, weight and goal."""
    snapshot = await load_profile_snapshot(db, user_id)
    targets = calc.targets_from_payload(snapshot.to_payload())
    return TargetResponse(**targets.as_dict())
