"""Re-export individual schema modules for easy imports."""

from .target import TargetRequest, TargetResponse, MealRecommendationOut
from .profile import (
    ProfileIn,
    ProfileOut,
    ProfileCompletion,
    WeightIn,
    WeightOut,
    MeasurementIn,
    MeasurementOut,
    WorkoutIn,
    WorkoutOut,
    GoalIn,
    GoalOut,
    TipsOut,
)
from .plan import PlanRequest, PlanOut, PlanCreated, TaskOut, TaskUpdate
from .nutrition import NutritionLogIn, NutritionLogOut, DailyProgress

__all__ = [
    "TargetRequest",
    "TargetResponse",
    "MealRecommendationOut",
    "ProfileIn",
    "ProfileOut",
    "ProfileCompletion",
    "WeightIn",
    "WeightOut",
    "MeasurementIn",
    "MeasurementOut",
    "WorkoutIn",
    "WorkoutOut",
    "GoalIn",
    "GoalOut",
    "TipsOut",
    "PlanRequest",
    "PlanOut",
    "PlanCreated",
    "TaskOut",
    "TaskUpdate",
    "NutritionLogIn",
    "NutritionLogOut",
    "DailyProgress",
]
