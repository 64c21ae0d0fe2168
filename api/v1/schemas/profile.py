from __future__ import annotations
import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ProfileIn(BaseModel):
    full_name: str | None = None
    height_cm: float | None = None
    age: int | None = None
    gender: str | None = Field(None, examples=["male", "female"])
    activity_level: str | None = Field(None, examples=["moderate"])
    current_weight: float | None = None
    target_weight: float | None = None
    fitness_goal: str | None = Field(None, examples=["lose_weight"])


class ProfileOut(ProfileIn):
    id: str

    model_config = ConfigDict(from_attributes=True)


class CompletionCheck(BaseModel):
    key: str
    label: str
    completed: bool


class ProfileCompletion(BaseModel):
    checks: list[CompletionCheck]
    completed: int
    total: int
    is_complete: bool
    missing: list[str]


class WeightIn(BaseModel):
    weight: float = Field(..., gt=0)
    date: dt.date | None = None


class WeightOut(BaseModel):
    id: int
    weight: float
    date: dt.date

    model_config = ConfigDict(from_attributes=True)


class MeasurementIn(BaseModel):
    """Circumferences in cm; any subset, but at least one."""

    chest: float | None = Field(None, gt=0)
    biceps: float | None = Field(None, gt=0)
    waist: float | None = Field(None, gt=0)
    thighs: float | None = Field(None, gt=0)
    date: dt.date | None = None

    @model_validator(mode="after")
    def _at_least_one(self) -> "MeasurementIn":
        if all(v is None for v in (self.chest, self.biceps, self.waist, self.thighs)):
            raise ValueError("at least one measurement is required")
        return self


class MeasurementOut(BaseModel):
    id: int
    date: dt.date
    chest: float | None = None
    biceps: float | None = None
    waist: float | None = None
    thighs: float | None = None

    model_config = ConfigDict(from_attributes=True)


class ExerciseEntry(BaseModel):
    name: str = Field(..., min_length=1, examples=["Bench Press"])
    sets: int = Field(..., gt=0)
    reps: int = Field(..., gt=0)
    weight: float = Field(0, ge=0)


class WorkoutIn(BaseModel):
    exercises: list[ExerciseEntry] = Field(..., min_length=1)
    duration: int = Field(60, gt=0, description="minutes")
    date: dt.date | None = None


class WorkoutOut(WorkoutIn):
    id: int
    date: dt.date

    model_config = ConfigDict(from_attributes=True)


class GoalIn(BaseModel):
    goal_type: str = Field(..., examples=["lose_weight", "gain_muscle"])
    target_weight: float | None = None
    target_date: dt.date | None = None


class GoalOut(GoalIn):
    id: int
    is_active: bool
    current_progress: float | None = None

    model_config = ConfigDict(from_attributes=True)


class TipsOut(BaseModel):
    tips: list[str]
