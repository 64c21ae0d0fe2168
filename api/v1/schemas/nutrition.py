from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NutritionLogIn(BaseModel):
    name: str
    calories: float = Field(..., ge=0)
    protein: float = Field(0, ge=0)
    carbs: float = Field(0, ge=0)
    fat: float = Field(0, ge=0)


class NutritionLogOut(NutritionLogIn):
    id: int
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class MacroProgress(BaseModel):
    consumed: float
    target: int
    remaining: float
    percent: float


class DailyProgress(BaseModel):
    date: str
    items: int
    macros: dict[str, MacroProgress]
