# api/v1/schemas/target.py
from __future__ import annotations
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from core.models.meal import MealPlan


class TargetRequest(BaseModel):
    """Raw calculator input; `core.nutrition_calc.parse_profile` validates it."""

    goal: Any = Field(None, examples=["maintain_weight"])
    weight: Any = Field(None, description="kg", examples=[80])
    height: Any = Field(None, description="cm", examples=[180])
    age: Any = Field(None, description="years", examples=[30])
    gender: Any = Field(None, examples=["male"])
    activityLevel: Any = Field(
        None,
        validation_alias=AliasChoices("activityLevel", "activity_level"),
        examples=["moderate"],
    )

    model_config = ConfigDict(extra="ignore")

    def payload(self) -> dict[str, Any]:
        return self.model_dump()


class TargetResponse(BaseModel):
    calories: int
    protein: int
    carbs: int
    fat: int


class MealRecommendationOut(BaseModel):
    targets: TargetResponse
    meal_plan: MealPlan
