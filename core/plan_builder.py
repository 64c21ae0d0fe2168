"""
core/plan_builder.py
────────────────────────────────────────────────────────────────────────
Prompt construction and response handling for the two generated
artefacts:

* a one-day meal plan aimed at the locally computed macro targets
* a workout / nutrition / combined weekly plan plus its daily tasks

Numbers always come from `core.nutrition_calc`; the model only fills in
foods and exercises, so nothing here trusts its arithmetic.
"""

from __future__ import annotations

import json
import logging
from datetime import date, timedelta
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from core.errors import UpstreamGenerationError, ValidationError
from core.models.meal import MealPlan
from core.models.user import ProfileSnapshot
from core.nutrition_calc import Goal, MacroTargets, UserProfile
from scripts.helpers import extract_clean_json

_LOG = logging.getLogger(__name__)

# ──────────────── constants ──────────────────
PLAN_TYPES = ("workout", "nutrition", "combined")
TASK_TYPES = {"workout": "workout", "nutrition": "nutrition", "combined": "habit"}
DEFAULT_TASKS = ["Follow your plan", "Track progress"]
DEFAULT_DESCRIPTION = "AI-generated personalized plan"

MEAL_SYSTEM = "You are a helpful nutrition assistant that provides meal plans in JSON format."
PLAN_SYSTEM = (
    "You are a certified fitness and nutrition expert. "
    "Always respond with valid JSON only, no additional text or explanations."
)

_WORKOUT_FORMAT = """{
  "title": "Personalized Workout Plan",
  "description": "Brief description",
  "weeklyPlan": {
    "monday": {"focus": "Upper Body", "exercises": [{"name": "Push-ups", "sets": 3, "reps": "8-12", "rest": "60s"}]},
    "tuesday": {"focus": "Cardio", "exercises": [...]},
    ...
  },
  "dailyTasks": ["Complete today's workout", "Track your progress", "Stay hydrated"]
}"""


# ─────────────────────────── meal plan ───────────────────────────
def build_meal_prompt(profile: UserProfile, goal: Goal, targets: MacroTargets) -> str:
    return (
        "You are a nutrition assistant. Generate a daily meal plan (breakfast, lunch, "
        "dinner, and one snack) for a user with the following profile: "
        f"Goal: {goal.value}, Current Weight: {profile.weight_kg:g} kg, "
        f"Height: {profile.height_cm:g} cm, Age: {profile.age}, "
        f"Gender: {profile.gender.value}, Activity level: {profile.activity_level.value}. "
        f"Their daily macronutrient targets are: {targets.calories} calories, "
        f"{targets.protein_g}g protein, {targets.carbs_g}g carbs, and {targets.fat_g}g fat. "
        "For each meal, provide the food item, an estimated calorie count, protein, carbs, "
        'and fat content. Also include a "summary" object with the total "calories", '
        '"protein", "carbs", and "fat" for the entire day. Please provide the output as a '
        "single JSON object without any extra text, explanation, or markdown. The JSON "
        'should follow this structure: { "breakfast": [{ "name": "...", "calories": ..., '
        '"protein": ..., "carbs": ..., "fat": ... }], "lunch": [...], "dinner": [...], '
        '"snacks": [...], "summary": { "calories": ..., "protein": ..., "carbs": ..., "fat": ... } }'
    )


def parse_meal_plan(raw: str | dict) -> MealPlan:
    data = extract_clean_json(raw, stage="meal_plan")
    try:
        plan = MealPlan.model_validate(data)
    except PydanticValidationError as exc:
        raise UpstreamGenerationError(
            "meal_plan", f"unexpected meal plan shape: {exc.error_count()} errors",
            raw if isinstance(raw, str) else json.dumps(raw),
        ) from exc
    if not plan.items():
        raise UpstreamGenerationError("meal_plan", "meal plan contains no meals", str(raw))
    if plan.summary is None:
        plan.summary = plan.computed_summary()
    return plan


# ─────────────────────────── weekly plan ─────────────────────────
def _check_plan_type(plan_type: str) -> str:
    if plan_type not in PLAN_TYPES:
        raise ValidationError.single("plan_type", f"must be one of {', '.join(PLAN_TYPES)}")
    return plan_type


def _workout_section(snapshot: ProfileSnapshot) -> str:
    text = (
        f"Create a personalized weekly workout plan for a {snapshot.age}-year-old "
        f"{snapshot.gender} who is {snapshot.height:g}cm tall"
    )
    if snapshot.weight:
        text += f" and weighs {snapshot.weight:g}kg"
    text += f". Activity level: {snapshot.activity_level}."
    if snapshot.goal:
        text += f" Primary goal: {snapshot.goal}"
        if snapshot.target_weight:
            text += f" (target weight: {snapshot.target_weight:g}kg)"
        text += "."
    return text + (
        "\n\nProvide a structured 7-day workout plan with:\n"
        "- Specific exercises for each day\n"
        "- Sets, reps, and rest periods\n"
        "- Progressive difficulty\n"
        "- Rest days included\n"
        "- Equipment needed (prefer bodyweight/minimal equipment)\n\n"
        f"Format as JSON with this structure:\n{_WORKOUT_FORMAT}"
    )


def _nutrition_section(targets: MacroTargets, combined: bool) -> str:
    nutrition = {
        "dailyCalories": targets.calories,
        "macros": {
            "protein": f"{targets.protein_g}g",
            "carbs": f"{targets.carbs_g}g",
            "fat": f"{targets.fat_g}g",
        },
        "meals": {
            "breakfast": ["Oatmeal with berries", "Greek yogurt with nuts"],
            "lunch": ["Grilled chicken salad", "Quinoa bowl"],
            "dinner": ["Salmon with vegetables", "Lean beef with sweet potato"],
            "snacks": ["Apple with almond butter", "Protein smoothie"],
        },
        "hydration": "2.5-3L water daily",
        "guidelines": ["Eat protein with every meal", "Include vegetables in lunch and dinner"],
    }
    tasks_key = "combinedDailyTasks" if combined else "dailyTasks"
    tasks = (
        ["Complete workout", "Track nutrition", "Stay hydrated", "Get adequate sleep"]
        if combined
        else ["Track your meals", "Drink enough water", "Take progress photos"]
    )
    lead = "Add to the existing JSON structure:" if combined else "Format as JSON:"
    shape = json.dumps({"nutritionPlan": nutrition, tasks_key: tasks}, indent=2)
    return (
        "Create a personalized nutrition plan for the same person. "
        f"Their daily targets are fixed at {targets.calories} calories, "
        f"{targets.protein_g}g protein, {targets.carbs_g}g carbs and {targets.fat_g}g fat; "
        "build the meals around these numbers and do not change them.\n\n"
        "Provide:\n"
        "- Sample meal ideas for breakfast, lunch, dinner, snacks\n"
        "- Hydration goals\n"
        "- Key nutritional guidelines\n\n"
        f"{lead}\n{shape}"
    )


def build_plan_prompt(
    plan_type: str,
    snapshot: ProfileSnapshot,
    targets: MacroTargets | None = None,
) -> str:
    _check_plan_type(plan_type)
    parts: list[str] = []
    if plan_type in ("workout", "combined"):
        parts.append(_workout_section(snapshot))
    if plan_type in ("nutrition", "combined"):
        if targets is None:
            raise ValueError(f"{plan_type} plan needs macro targets")
        parts.append(_nutrition_section(targets, combined=plan_type == "combined"))
    return "\n\nALSO:\n\n".join(parts)


def parse_plan(raw: str | dict, plan_type: str, targets: MacroTargets | None = None) -> dict[str, Any]:
    """Decode the model reply and pin the locally computed targets onto it."""
    data = extract_clean_json(raw, stage="plan")
    if targets is not None and plan_type in ("nutrition", "combined"):
        data["targets"] = targets.as_dict()
        nutrition = data.get("nutritionPlan")
        if isinstance(nutrition, dict):
            if nutrition.get("dailyCalories") != targets.calories:
                _LOG.info(
                    "model changed dailyCalories %r → %d; restoring",
                    nutrition.get("dailyCalories"), targets.calories,
                )
            nutrition["dailyCalories"] = targets.calories
    return data


def plan_title(plan_type: str, plan_data: dict[str, Any]) -> str:
    title = plan_data.get("title")
    if isinstance(title, str) and title.strip():
        return title.strip()
    return f"{plan_type.capitalize()} Plan"


def plan_description(plan_data: dict[str, Any]) -> str:
    desc = plan_data.get("description")
    return desc.strip() if isinstance(desc, str) and desc.strip() else DEFAULT_DESCRIPTION


# ─────────────────────────── tasks ───────────────────────────────
def task_titles(plan_data: dict[str, Any]) -> list[str]:
    for key in ("dailyTasks", "combinedDailyTasks"):
        raw = plan_data.get(key)
        if isinstance(raw, list):
            titles = [t.strip() for t in raw if isinstance(t, str) and t.strip()]
            if titles:
                return titles
    return list(DEFAULT_TASKS)


def expand_daily_tasks(
    plan_data: dict[str, Any],
    plan_type: str,
    start: date,
    days: int = 7,
) -> list[dict[str, Any]]:
    """One task row per title per day, starting at `start`."""
    _check_plan_type(plan_type)
    titles = task_titles(plan_data)
    return [
        {
            "task_type": TASK_TYPES[plan_type],
            "title": title,
            "target_date": start + timedelta(days=offset),
        }
        for offset in range(days)
        for title in titles
    ]


def is_plan_stale(plan_data: dict[str, Any], fresh: MacroTargets) -> bool:
    """True when a stored targets snapshot no longer matches the profile."""
    stored = plan_data.get("targets")
    if not isinstance(stored, dict):
        return False
    return stored != fresh.as_dict()
