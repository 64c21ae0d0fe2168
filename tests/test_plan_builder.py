from datetime import date

import pytest

from core.errors import UpstreamGenerationError, ValidationError
from core.models.user import ProfileSnapshot
from core.nutrition_calc import Goal, MacroTargets, UserProfile
from core.plan_builder import (
    DEFAULT_DESCRIPTION,
    build_meal_prompt,
    build_plan_prompt,
    expand_daily_tasks,
    is_plan_stale,
    parse_meal_plan,
    parse_plan,
    plan_description,
    plan_title,
)

TARGETS = MacroTargets(calories=2259, protein_g=128, carbs_g=295, fat_g=63)
PROFILE = UserProfile(80, 180, 30, "male", "moderate")
SNAPSHOT = ProfileSnapshot(
    user_id="u1", height=180, age=30, gender="male", activity_level="moderate",
    weight=80, target_weight=75, goal="lose_weight",
)


# ── prompts ──────────────────────────────────────────────────────────
def test_meal_prompt_carries_local_targets():
    prompt = build_meal_prompt(PROFILE, Goal.lose_weight, TARGETS)
    assert "2259 calories" in prompt
    assert "128g protein" in prompt
    assert "Goal: lose_weight" in prompt


def test_workout_prompt_describes_person():
    prompt = build_plan_prompt("workout", SNAPSHOT)
    assert "30-year-old male who is 180cm tall and weighs 80kg" in prompt
    assert "target weight: 75kg" in prompt
    assert "nutritionPlan" not in prompt


def test_nutrition_prompt_embeds_targets():
    prompt = build_plan_prompt("nutrition", SNAPSHOT, TARGETS)
    assert '"dailyCalories": 2259' in prompt
    assert '"dailyTasks"' in prompt


def test_combined_prompt_has_both_sections():
    prompt = build_plan_prompt("combined", SNAPSHOT, TARGETS)
    assert "weekly workout plan" in prompt
    assert "ALSO:" in prompt
    assert '"combinedDailyTasks"' in prompt


def test_unknown_plan_type():
    with pytest.raises(ValidationError) as exc:
        build_plan_prompt("yoga", SNAPSHOT)
    assert exc.value.fields == ["plan_type"]


def test_nutrition_prompt_requires_targets():
    with pytest.raises(ValueError):
        build_plan_prompt("nutrition", SNAPSHOT)


# ── parsing ──────────────────────────────────────────────────────────
def test_meal_plan_summary_filled_when_missing():
    raw = (
        '{"breakfast": [{"name": "Oats", "calories": 400, "protein": 20, "carbs": 60, "fat": 8}],'
        ' "dinner": [{"name": "Salmon", "calories": 600, "protein": 45, "carbs": 30, "fat": 25}]}'
    )
    plan = parse_meal_plan(raw)
    assert plan.summary.calories == 1000
    assert plan.summary.protein == 65
    assert plan.lunch == []


def test_meal_plan_without_meals_is_upstream_error():
    with pytest.raises(UpstreamGenerationError):
        parse_meal_plan('{"summary": {"calories": 2000}}')


def test_meal_plan_wrong_shape_is_upstream_error():
    with pytest.raises(UpstreamGenerationError):
        parse_meal_plan('{"breakfast": "eggs"}')


def test_parse_plan_pins_targets():
    raw = '```json\n{"nutritionPlan": {"dailyCalories": 3100}, "dailyTasks": ["Eat"]}\n```'
    data = parse_plan(raw, "nutrition", TARGETS)
    assert data["nutritionPlan"]["dailyCalories"] == 2259
    assert data["targets"] == TARGETS.as_dict()


def test_parse_workout_plan_untouched():
    data = parse_plan('{"title": "Strength"}', "workout")
    assert data == {"title": "Strength"}


def test_title_and_description_defaults():
    assert plan_title("nutrition", {}) == "Nutrition Plan"
    assert plan_title("workout", {"title": " Push Pull "}) == "Push Pull"
    assert plan_description({}) == DEFAULT_DESCRIPTION


# ── tasks ────────────────────────────────────────────────────────────
def test_tasks_one_per_title_per_day():
    start = date(2026, 3, 1)
    tasks = expand_daily_tasks({"dailyTasks": ["A", "B", "C"]}, "workout", start)
    assert len(tasks) == 21
    assert tasks[0] == {"task_type": "workout", "title": "A", "target_date": start}
    assert tasks[-1]["target_date"] == date(2026, 3, 7)


def test_tasks_fall_back_to_combined_then_default():
    start = date(2026, 3, 1)
    combined = expand_daily_tasks({"combinedDailyTasks": ["Sleep"]}, "combined", start, days=2)
    assert [t["title"] for t in combined] == ["Sleep", "Sleep"]
    assert {t["task_type"] for t in combined} == {"habit"}

    default = expand_daily_tasks({"dailyTasks": [None, " "]}, "nutrition", start, days=1)
    assert [t["title"] for t in default] == ["Follow your plan", "Track progress"]
    assert default[0]["task_type"] == "nutrition"


# ── staleness ────────────────────────────────────────────────────────
def test_stale_detection():
    data = {"targets": TARGETS.as_dict()}
    assert is_plan_stale(data, TARGETS) is False
    heavier = MacroTargets(2359, 144, 303, 66)
    assert is_plan_stale(data, heavier) is True
    assert is_plan_stale({"title": "workout only"}, heavier) is False
