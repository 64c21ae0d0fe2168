# api/v1/meals.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from api.v1.deps import get_calculator
from api.v1.schemas import MealRecommendationOut, TargetRequest, TargetResponse
from core.errors import UpstreamGenerationError
from core.nutrition_calc import NutritionalCalculator, parse_profile
from core.plan_builder import MEAL_SYSTEM, build_meal_prompt, parse_meal_plan
from services import llm

_LOG = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/recommendation",
    response_model=MealRecommendationOut,
    summary="Compute targets and ask the model for a one-day meal plan",
)
async def recommend_meals(
    body: TargetRequest,
    calc: NutritionalCalculator = Depends(get_calculator),
):
    profile, goal = parse_profile(body.payload())
    targets = calc.targets(profile, goal)

    prompt = build_meal_prompt(profile, goal, targets)
    try:
        raw = await llm.agenerate(prompt, system=MEAL_SYSTEM)
        meal_plan = parse_meal_plan(raw)
    except UpstreamGenerationError as exc:
        _LOG.warning("meal plan generation failed: %s", exc)
        # targets are still valid without the meal plan
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc), "targets": targets.as_dict()},
        )

    return MealRecommendationOut(
        targets=TargetResponse(**targets.as_dict()),
        meal_plan=meal_plan,
    )
