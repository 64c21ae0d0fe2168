from __future__ import annotations

from config import settings
from core.nutrition_calc import NutritionalCalculator


def get_calculator() -> NutritionalCalculator:
    return NutritionalCalculator(floor_kcal=settings.calorie_floor_kcal)
