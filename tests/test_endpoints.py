"""Store-backed endpoints against an in-memory SQLite database."""

import json
from datetime import date, datetime, timezone
from types import SimpleNamespace

import httpx
from sqlalchemy import select

from api.v1 import nutrition as nutrition_api
from scripts.check_plans import check_user
from services import llm
from services.db import AIPlan, GenerationFailure, NutritionLog, utc_now

USER_ID = "user-1"

PROFILE = {
    "height_cm": 180,
    "age": 30,
    "gender": "male",
    "activity_level": "moderate",
    "target_weight": 75,
}

PLAN_REPLY = json.dumps(
    {
        "title": "Lean Week",
        "nutritionPlan": {"dailyCalories": 3100, "meals": {"breakfast": ["Oats"]}},
        "dailyTasks": ["Track your meals", "Drink enough water", "Take progress photos"],
    }
)


async def _complete_profile(client, weight=80, goal="maintain_weight"):
    await client.put(f"/api/v1/users/{USER_ID}/profile", json=PROFILE)
    await client.post(f"/api/v1/users/{USER_ID}/weights", json={"weight": weight})
    await client.post(f"/api/v1/users/{USER_ID}/goals", json={"goal_type": goal})


async def test_profile_roundtrip(client):
    r = await client.put(f"/api/v1/users/{USER_ID}/profile", json={"age": 30})
    assert r.status_code == 200
    r = await client.put(f"/api/v1/users/{USER_ID}/profile", json={"height_cm": 175})
    body = r.json()
    assert body["age"] == 30 and body["height_cm"] == 175

    assert (await client.get("/api/v1/users/nobody/profile")).status_code == 404


async def test_incomplete_profile_reports_missing_fields(client):
    await client.put(f"/api/v1/users/{USER_ID}/profile", json={"height_cm": 180})
    r = await client.get(f"/api/v1/users/{USER_ID}/targets")
    assert r.status_code == 400
    assert r.json()["missing"] == ["weight", "age", "gender", "activityLevel", "goal"]

    c = (await client.get(f"/api/v1/users/{USER_ID}/profile/completion")).json()
    assert c["completed"] == 1
    assert c["is_complete"] is False


async def test_targets_from_store_use_latest_weight_and_goal(client):
    await _complete_profile(client)
    r = await client.get(f"/api/v1/users/{USER_ID}/targets")
    assert r.json() == {"calories": 2759, "protein": 128, "carbs": 389, "fat": 77}

    await client.post(f"/api/v1/users/{USER_ID}/goals", json={"goal_type": "lose_weight"})
    r = await client.get(f"/api/v1/users/{USER_ID}/targets")
    assert r.json()["calories"] == 2259

    c = (await client.get(f"/api/v1/users/{USER_ID}/profile/completion")).json()
    assert c["is_complete"] is True


async def test_tips(client):
    await _complete_profile(client, weight=90, goal="lose_weight")
    tips = (await client.get(f"/api/v1/users/{USER_ID}/tips")).json()["tips"]
    assert tips[0].startswith("Your BMI is 27.8")


async def test_plan_requires_token(client):
    r = await client.post("/api/v1/plans", json={"plan_type": "workout"})
    assert r.status_code == 401


async def test_plan_requires_profile(client, auth_headers, fake_llm):
    r = await client.post("/api/v1/plans", json={"plan_type": "workout"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Please complete your profile first"
    assert fake_llm.prompts == []


async def test_nutrition_plan_tasks_and_staleness(client, auth_headers, fake_llm, sessionmaker):
    await _complete_profile(client)
    fake_llm.reply = PLAN_REPLY

    r = await client.post("/api/v1/plans", json={"plan_type": "nutrition"}, headers=auth_headers)
    assert r.status_code == 201
    created = r.json()
    plan = created["plan"]
    assert created["tasks_created"] == 21
    assert plan["title"] == "Lean Week"
    assert plan["description"] == "AI-generated personalized plan"
    assert plan["plan_data"]["targets"] == {"calories": 2759, "protein": 128, "carbs": 389, "fat": 77}
    assert plan["plan_data"]["nutritionPlan"]["dailyCalories"] == 2759

    # today's tasks, then tick one off
    tasks = (await client.get("/api/v1/tasks", headers=auth_headers)).json()
    assert len(tasks) == 3
    assert {t["task_type"] for t in tasks} == {"nutrition"}
    r = await client.patch(
        f"/api/v1/tasks/{tasks[0]['id']}", json={"is_completed": True}, headers=auth_headers
    )
    assert r.json()["is_completed"] is True
    assert r.json()["completed_at"] is not None
    r = await client.patch(
        f"/api/v1/tasks/{tasks[0]['id']}", json={"is_completed": False}, headers=auth_headers
    )
    assert r.json()["completed_at"] is None

    # profile changes → the stored snapshot is stale
    async with sessionmaker() as db:
        assert await check_user(db, USER_ID) == []
    await client.post(f"/api/v1/users/{USER_ID}/weights", json={"weight": 90})
    async with sessionmaker() as db:
        assert await check_user(db, USER_ID, deactivate=True) == [plan["id"]]

    active = (await client.get("/api/v1/plans", headers=auth_headers)).json()
    assert active == []


async def test_plan_upstream_failure_is_logged(client, auth_headers, fake_llm, sessionmaker):
    await _complete_profile(client)
    fake_llm.reply = "not json at all"
    r = await client.post("/api/v1/plans", json={"plan_type": "workout"}, headers=auth_headers)
    assert r.status_code == 502

    async with sessionmaker() as db:
        failures = (await db.execute(select(GenerationFailure))).scalars().all()
        plans = (await db.execute(select(AIPlan))).scalars().all()
    assert len(failures) == 1
    assert failures[0].stage == "plan"
    assert plans == []


async def test_deactivate_plan(client, auth_headers, fake_llm):
    await _complete_profile(client)
    fake_llm.reply = '{"title": "Move", "dailyTasks": ["Walk"]}'
    plan_id = (
        await client.post("/api/v1/plans", json={"plan_type": "workout"}, headers=auth_headers)
    ).json()["plan"]["id"]

    assert (await client.delete(f"/api/v1/plans/{plan_id}", headers=auth_headers)).status_code == 204
    assert (await client.get("/api/v1/plans", headers=auth_headers)).json() == []
    assert (await client.delete("/api/v1/plans/999", headers=auth_headers)).status_code == 404


async def test_nutrition_progress(client):
    await _complete_profile(client)
    r = await client.post(
        f"/api/v1/users/{USER_ID}/nutrition",
        json={"name": "Oats", "calories": 400, "protein": 20, "carbs": 60, "fat": 8},
    )
    assert r.status_code == 201
    logged_on = r.json()["created_at"][:10]

    r = await client.get(
        f"/api/v1/users/{USER_ID}/nutrition/progress", params={"day": logged_on}
    )
    body = r.json()
    assert body["items"] == 1
    assert body["macros"]["calories"]["target"] == 2759
    assert body["macros"]["calories"]["remaining"] == 2359
    assert date.fromisoformat(body["date"]) == date.fromisoformat(logged_on)


async def test_plan_model_timeout_is_logged(client, auth_headers, monkeypatch, sessionmaker):
    def _timeout(**kwargs):
        raise httpx.ReadTimeout("timed out")

    fake = SimpleNamespace(models=SimpleNamespace(generate_content=_timeout))
    monkeypatch.setattr(llm, "_get_client", lambda: fake)
    await _complete_profile(client)

    r = await client.post("/api/v1/plans", json={"plan_type": "workout"}, headers=auth_headers)
    assert r.status_code == 502
    async with sessionmaker() as db:
        failures = (await db.execute(select(GenerationFailure))).scalars().all()
    assert [f.stage for f in failures] == ["generate"]


# ── tracking ─────────────────────────────────────────────────────────
async def test_measurement_unlocks_muscle_tip(client):
    await _complete_profile(client, goal="gain_muscle")
    tips_url = f"/api/v1/users/{USER_ID}/tips"
    before = (await client.get(tips_url)).json()["tips"]
    assert not any("muscle measurements" in t for t in before)

    r = await client.post(
        f"/api/v1/users/{USER_ID}/measurements",
        json={"chest": 95, "biceps": 35, "date": "2030-01-02"},
    )
    assert r.status_code == 201
    assert r.json()["waist"] is None

    after = (await client.get(tips_url)).json()["tips"]
    assert "Track muscle measurements to monitor growth progress" in after

    listed = (await client.get(f"/api/v1/users/{USER_ID}/measurements")).json()
    assert [m["chest"] for m in listed] == [95]


async def test_empty_measurement_rejected(client):
    r = await client.post(f"/api/v1/users/{USER_ID}/measurements", json={"date": "2030-01-02"})
    assert r.status_code == 422


async def test_workout_log(client):
    body = {
        "exercises": [
            {"name": "Bench Press", "sets": 3, "reps": 10, "weight": 60},
            {"name": "Pull-ups", "sets": 3, "reps": 8},
        ],
        "duration": 75,
        "date": "2030-01-02",
    }
    r = await client.post(f"/api/v1/users/{USER_ID}/workouts", json=body)
    assert r.status_code == 201
    assert r.json()["exercises"][1]["weight"] == 0

    await client.post(
        f"/api/v1/users/{USER_ID}/workouts",
        json={"exercises": [{"name": "Squat", "sets": 5, "reps": 5}], "date": "2030-01-03"},
    )
    listed = (await client.get(f"/api/v1/users/{USER_ID}/workouts")).json()
    assert [w["date"] for w in listed] == ["2030-01-03", "2030-01-02"]
    assert listed[0]["duration"] == 60


async def test_workout_without_exercises_rejected(client):
    r = await client.post(f"/api/v1/users/{USER_ID}/workouts", json={"exercises": []})
    assert r.status_code == 422


# ── clock ────────────────────────────────────────────────────────────
def test_log_timestamps_are_naive_utc():
    stamp = utc_now()
    assert stamp.tzinfo is None
    assert abs((datetime.now(timezone.utc).replace(tzinfo=None) - stamp).total_seconds()) < 5


async def test_progress_default_day_uses_utc_clock(client, monkeypatch, sessionmaker):
    await _complete_profile(client)
    # 00:30 UTC on the 2nd; local "today" may still be the 1st
    async with sessionmaker() as db:
        db.add_all([
            NutritionLog(user_id=USER_ID, name="Late snack", calories=300, protein=5,
                         carbs=40, fat=10, created_at=datetime(2030, 1, 1, 23, 50)),
            NutritionLog(user_id=USER_ID, name="Toast", calories=200, protein=6,
                         carbs=30, fat=4, created_at=datetime(2030, 1, 2, 0, 30)),
        ])
        await db.commit()
    monkeypatch.setattr(nutrition_api, "utc_today", lambda: date(2030, 1, 2))

    body = (await client.get(f"/api/v1/users/{USER_ID}/nutrition/progress")).json()
    assert body["date"] == "2030-01-02"
    assert body["items"] == 1
    assert body["macros"]["calories"]["consumed"] == 200
