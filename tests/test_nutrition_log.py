from datetime import date, datetime

from core.nutrition_calc import MacroTargets
from core.nutrition_log import daily_totals, progress_for_day

TARGETS = MacroTargets(calories=2000, protein_g=150, carbs_g=200, fat_g=67)

ENTRIES = [
    {"calories": 500, "protein": 40, "carbs": 50, "fat": 15, "created_at": datetime(2026, 3, 1, 8)},
    {"calories": 700, "protein": 50, "carbs": 60, "fat": 25, "created_at": datetime(2026, 3, 1, 13)},
    {"calories": 300, "protein": 10, "carbs": 40, "fat": 10, "created_at": datetime(2026, 3, 2, 9)},
]


def test_daily_totals_grouped_by_date():
    totals = daily_totals(ENTRIES)
    assert list(totals.index) == [date(2026, 3, 1), date(2026, 3, 2)]
    assert totals.loc[date(2026, 3, 1), "calories"] == 1200
    assert totals.loc[date(2026, 3, 2), "protein"] == 10


def test_progress_against_targets():
    out = progress_for_day(ENTRIES, TARGETS, date(2026, 3, 1))
    assert out["date"] == "2026-03-01"
    assert out["items"] == 2
    cal = out["macros"]["calories"]
    assert cal == {"consumed": 1200.0, "target": 2000, "remaining": 800.0, "percent": 60.0}
    assert out["macros"]["fat"]["target"] == 67


def test_empty_day():
    out = progress_for_day([], TARGETS, date(2026, 3, 5))
    assert out["items"] == 0
    assert out["macros"]["protein"]["consumed"] == 0.0
    assert out["macros"]["protein"]["remaining"] == 150
