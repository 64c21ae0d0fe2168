"""
core/tips.py
────────────────────────────────────────────────────────────────────────
Rule-based coaching tips from the latest profile, active goals, weight
log and muscle measurements.  No model calls; output is capped at five
de-duplicated lines.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from core.models.user import ProfileSnapshot

MAX_TIPS = 5
STABLE_KG = 0.5

COMPLETE_PROFILE_TIP = (
    "Complete your profile (height, age, gender, activity level) "
    "to get personalized recommendations."
)
DEFAULT_TIPS = [
    "Set a specific fitness goal to get personalized recommendations",
    "Log your weight regularly to track progress",
    "Stay hydrated and get adequate sleep for recovery",
]


def bmi(weight_kg: float, height_cm: float) -> float:
    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def bmi_category(value: float) -> tuple[str, str]:
    if value < 18.5:
        return "underweight", "Consider a balanced diet for healthy weight gain."
    if value < 25:
        return "in the healthy range", "Keep up the great work maintaining your health!"
    if value < 30:
        return "overweight", "Focus on a balanced diet and regular exercise for weight management."
    return (
        "obese",
        "It is recommended to create a sustainable workout and diet plan. "
        "Consulting a professional can be beneficial.",
    )


def _goal_tips(
    goal: str,
    bmi_value: float | None,
    weights: Sequence[float],
    has_measurements: bool,
) -> list[str]:
    if goal == "lose_weight":
        tips = ["Maintain a caloric deficit with nutritious, whole foods."]
        if bmi_value is not None and bmi_value >= 25:
            tips.append("Combine strength training with cardio to maximize fat loss while preserving muscle.")
        else:
            tips.append("Focus on cardio exercises like running or swimming.")
        if len(weights) >= 2 and weights[0] - weights[1] > 0:
            tips.append("Consider adjusting your diet as weight has increased recently")
        return tips
    if goal == "gain_weight":
        tips = ["Increase protein intake and eat in a caloric surplus."]
        if bmi_value is not None and bmi_value < 18.5:
            tips.append("Focus on compound exercises like squats and deadlifts to build overall mass.")
        else:
            tips.append("Incorporate strength training to build muscle mass.")
        return tips
    if goal == "gain_muscle":
        tips = [
            "Aim for 1.6-2.2g protein per kg of body weight.",
            "Focus on progressive overload in your resistance training for muscle growth.",
        ]
        if has_measurements:
            tips.append("Track muscle measurements to monitor growth progress")
        return tips
    if goal == "maintain_weight":
        return [
            "Balance cardio and strength training for a healthy body composition.",
            "Focus on consistency in both diet and exercise to maintain your current weight.",
        ]
    return []


def build_tips(
    snapshot: ProfileSnapshot,
    goals: Sequence[str],
    weights: Sequence[float],
    has_measurements: bool = False,
) -> list[str]:
    """`weights` is newest first."""
    tips: list[str] = []
    profile_ready = all(
        [snapshot.height, snapshot.age, snapshot.gender, snapshot.activity_level]
    )

    bmi_value = None
    if profile_ready and weights:
        bmi_value = bmi(weights[0], snapshot.height)
        category, advice = bmi_category(bmi_value)
        tips.append(f"Your BMI is {bmi_value:.1f} ({category}). {advice}")

    for goal in goals:
        tips.extend(_goal_tips(goal, bmi_value, weights, has_measurements))

    if len(weights) >= 3:
        # sum of consecutive drops over the latest three entries
        trend = float(np.sum(-np.diff(np.asarray(weights[:3], dtype=float))))
        if abs(trend) < STABLE_KG:
            tips.append("Your weight is stable - great for maintaining current habits")

    if not tips:
        tips.extend(DEFAULT_TIPS)

    if not profile_ready:
        tips.insert(0, COMPLETE_PROFILE_TIP)

    return list(dict.fromkeys(tips))[:MAX_TIPS]
