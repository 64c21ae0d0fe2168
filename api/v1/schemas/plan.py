from __future__ import annotations
from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

PlanType = Literal["workout", "nutrition", "combined"]


class PlanRequest(BaseModel):
    plan_type: PlanType


class PlanOut(BaseModel):
    id: int
    plan_type: str
    title: str
    description: str | None
    plan_data: dict[str, Any]
    is_active: bool
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class PlanCreated(BaseModel):
    success: bool = True
    plan: PlanOut
    tasks_created: int


class TaskOut(BaseModel):
    id: int
    plan_id: int
    task_type: str
    title: str
    description: str | None = None
    target_date: date
    is_completed: bool
    completed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TaskUpdate(BaseModel):
    is_completed: bool
