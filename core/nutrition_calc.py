"""
core/nutrition_calc.py
────────────────────────────────────────────────────────────────────────
Single source of truth for daily calorie + macro targets.

1. BMR     (Mifflin–St Jeor)
2. TDEE    (activity multiplier)
3. Goal    (fixed daily kcal delta)
4. Macros  protein 1.6 g/kg · fat 25 % of kcal · carbs = remainder

Every caller (HTTP endpoints, plan generation, scripts) imports this
module; no other file re-declares the tables below.

Rounding is half-away-from-zero (388.5 → 389) for every integer output.
Targets under `MIN_SAFE_CALORIES` are rejected with `UnsafeTargetError`,
never clamped.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Mapping

from core.errors import FieldError, UnsafeTargetError, ValidationError

Logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────
#  Enumerations
# ──────────────────────────────────────────────────────────────────────
class Gender(str, Enum):
    male = "male"
    female = "female"


class ActivityLevel(str, Enum):
    sedentary = "sedentary"
    light = "light"
    moderate = "moderate"
    active = "active"
    very_active = "very_active"


class Goal(str, Enum):
    lose_weight = "lose_weight"
    maintain_weight = "maintain_weight"
    gain_weight = "gain_weight"
    gain_muscle = "gain_muscle"


# ──────────────────────────────────────────────────────────────────────
#  Constants
# ──────────────────────────────────────────────────────────────────────
ACTIVITY_FACTORS: dict[ActivityLevel, float] = {
    ActivityLevel.sedentary: 1.2,
    ActivityLevel.light: 1.375,
    ActivityLevel.moderate: 1.55,
    ActivityLevel.active: 1.725,
    ActivityLevel.very_active: 1.9,
}

GOAL_ADJUSTMENTS: dict[Goal, int] = {
    Goal.lose_weight: -500,
    Goal.maintain_weight: 0,
    Goal.gain_weight: 500,
    Goal.gain_muscle: 250,
}

GENDER_CONSTANTS: dict[Gender, int] = {Gender.male: 5, Gender.female: -161}

PROTEIN_G_PER_KG = 1.6
FAT_SHARE = 0.25
KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9

MIN_SAFE_CALORIES = 1200

# inclusive (low, high)
WEIGHT_RANGE_KG = (20.0, 500.0)
HEIGHT_RANGE_CM = (50.0, 300.0)
AGE_RANGE_YEARS = (13, 150)


# ──────────────────────────────────────────────────────────────────────
#  Value objects
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class UserProfile:
    weight_kg: float
    height_cm: float
    age: int
    gender: Gender
    activity_level: ActivityLevel

    def __post_init__(self) -> None:
        errors: list[FieldError] = []
        values = {
            "weight_kg": _number("weight", self.weight_kg, WEIGHT_RANGE_KG, errors),
            "height_cm": _number("height", self.height_cm, HEIGHT_RANGE_CM, errors),
            "age": _number("age", self.age, AGE_RANGE_YEARS, errors, integral=True),
            "gender": _choice("gender", self.gender, Gender, errors),
            "activity_level": _choice(
                "activityLevel", self.activity_level, ActivityLevel, errors
            ),
        }
        if errors:
            raise ValidationError(errors)
        for name, value in values.items():
            object.__setattr__(self, name, value)


@dataclass(frozen=True)
class MacroTargets:
    calories: int
    protein_g: int
    carbs_g: int
    fat_g: int

    @property
    def macro_calories(self) -> int:
        return (
            self.protein_g * KCAL_PER_G_PROTEIN
            + self.carbs_g * KCAL_PER_G_CARBS
            + self.fat_g * KCAL_PER_G_FAT
        )

    def as_dict(self) -> dict[str, int]:
        """JSON shape shared with every consumer: calories/protein/carbs/fat."""
        return {
            "calories": self.calories,
            "protein": self.protein_g,
            "carbs": self.carbs_g,
            "fat": self.fat_g,
        }


# ──────────────────────────────────────────────────────────────────────
#  Boundary parsing
# ──────────────────────────────────────────────────────────────────────
def parse_profile(payload: Mapping[str, Any]) -> tuple[UserProfile, Goal]:
    """
    Validate an untyped `{goal, weight, height, age, gender, activityLevel}`
    object.  All offending fields are reported together; nothing is
    defaulted.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError.single("profile", "must be an object")

    activity = payload.get("activityLevel", payload.get("activity_level"))
    errors: list[FieldError] = []
    weight = _number("weight", payload.get("weight"), WEIGHT_RANGE_KG, errors)
    height = _number("height", payload.get("height"), HEIGHT_RANGE_CM, errors)
    age = _number("age", payload.get("age"), AGE_RANGE_YEARS, errors, integral=True)
    gender = _choice("gender", payload.get("gender"), Gender, errors)
    level = _choice("activityLevel", activity, ActivityLevel, errors)
    goal = _choice("goal", payload.get("goal"), Goal, errors)
    if errors:
        raise ValidationError(errors)

    profile = UserProfile(
        weight_kg=weight,
        height_cm=height,
        age=age,
        gender=gender,
        activity_level=level,
    )
    return profile, goal


# ──────────────────────────────────────────────────────────────────────
#  Formula steps
# ──────────────────────────────────────────────────────────────────────
def bmr(profile: UserProfile) -> float:
    base = 10 * profile.weight_kg + 6.25 * profile.height_cm - 5 * profile.age
    return base + GENDER_CONSTANTS[profile.gender]


def tdee(profile: UserProfile) -> float:
    return bmr(profile) * ACTIVITY_FACTORS[profile.activity_level]


def goal_calories(profile: UserProfile, goal: Goal) -> float:
    return tdee(profile) + GOAL_ADJUSTMENTS[goal]


def compute_macro_targets(
    profile: UserProfile,
    goal: Goal | str,
    *,
    floor_kcal: int = MIN_SAFE_CALORIES,
) -> MacroTargets:
    if not isinstance(profile, UserProfile):
        raise ValidationError.single("profile", "must be a UserProfile")
    errors: list[FieldError] = []
    goal = _choice("goal", goal, Goal, errors)
    if errors:
        raise ValidationError(errors)

    target = goal_calories(profile, goal)
    calories = round_half_up(target)
    if calories < floor_kcal:
        raise UnsafeTargetError(
            calories, floor_kcal, f"{calories} kcal is below the {floor_kcal} kcal floor"
        )

    protein_g = round_half_up(profile.weight_kg * PROTEIN_G_PER_KG)
    fat_g = round_half_up(target * FAT_SHARE / KCAL_PER_G_FAT)
    carbs_g = round_half_up(
        (target - protein_g * KCAL_PER_G_PROTEIN - fat_g * KCAL_PER_G_FAT)
        / KCAL_PER_G_CARBS
    )
    if carbs_g < 0:
        raise UnsafeTargetError(
            calories, floor_kcal, "protein and fat exceed the calorie target"
        )

    Logger.debug(
        "targets goal=%s kcal=%d p=%d c=%d f=%d",
        goal.value, calories, protein_g, carbs_g, fat_g,
    )
    return MacroTargets(calories, protein_g, carbs_g, fat_g)


# ──────────────────────────────────────────────────────────────────────
#  Calculator
# ──────────────────────────────────────────────────────────────────────
class NutritionalCalculator:
    """Bundles the formula steps with a configured safety floor."""

    def __init__(self, floor_kcal: int = MIN_SAFE_CALORIES) -> None:
        self.floor_kcal = floor_kcal

    def bmr(self, profile: UserProfile) -> float:
        return bmr(profile)

    def tdee(self, profile: UserProfile) -> float:
        return tdee(profile)

    def targets(self, profile: UserProfile, goal: Goal | str) -> MacroTargets:
        return compute_macro_targets(profile, goal, floor_kcal=self.floor_kcal)

    def targets_from_payload(self, payload: Mapping[str, Any]) -> MacroTargets:
        profile, goal = parse_profile(payload)
        return self.targets(profile, goal)


# ──────────────────────────────────────────────────────────────────────
#  Helpers
# ──────────────────────────────────────────────────────────────────────
def round_half_up(value: float) -> int:
    """Round half away from zero; the builtin `round` is half-to-even."""
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _number(
    field: str,
    value: Any,
    bounds: tuple[float, float],
    errors: list[FieldError],
    integral: bool = False,
) -> float | int | None:
    if value is None:
        errors.append(FieldError(field, "is required"))
        return None
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        errors.append(FieldError(field, "must be a number"))
        return None
    try:
        num = float(value)
    except OverflowError:
        num = math.inf
    if not math.isfinite(num):
        errors.append(FieldError(field, "must be finite"))
        return None
    if integral and not num.is_integer():
        errors.append(FieldError(field, "must be an integer"))
        return None
    lo, hi = bounds
    if not lo <= num <= hi:
        errors.append(FieldError(field, f"must be between {lo:g} and {hi:g}"))
        return None
    return int(num) if integral else num


def _choice(field: str, value: Any, enum_cls: type[Enum], errors: list[FieldError]):
    if value is None:
        errors.append(FieldError(field, "is required"))
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        errors.append(FieldError(field, f"must be one of {allowed}"))
        return None
