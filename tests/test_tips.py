from core.models.user import ProfileSnapshot
from core.tips import COMPLETE_PROFILE_TIP, DEFAULT_TIPS, MAX_TIPS, bmi, build_tips

READY = ProfileSnapshot(
    user_id="u1", height=180, age=30, gender="male", activity_level="moderate"
)


def test_bmi_value():
    assert round(bmi(81, 180), 2) == 25.0


def test_bmi_line_and_goal_tips():
    tips = build_tips(READY, ["lose_weight"], [90.0, 89.0])
    assert tips[0].startswith("Your BMI is 27.8 (overweight)")
    assert "Combine strength training with cardio" in tips[2]
    assert tips[3] == "Consider adjusting your diet as weight has increased recently"


def test_gain_weight_underweight_gets_compound_lifts():
    tips = build_tips(READY, ["gain_weight"], [55.0])
    assert any("compound exercises" in t for t in tips)


def test_gain_weight_without_bmi_uses_general_strength_tip():
    empty = ProfileSnapshot(user_id="u1")
    tips = build_tips(empty, ["gain_weight"], [])
    assert any("strength training to build muscle mass" in t for t in tips)


def test_muscle_tracking_tip_only_with_measurements():
    without = build_tips(READY, ["gain_muscle"], [])
    with_m = build_tips(READY, ["gain_muscle"], [], has_measurements=True)
    assert not any("muscle measurements" in t for t in without)
    assert any("muscle measurements" in t for t in with_m)


def test_stable_weight_detected():
    tips = build_tips(READY, [], [80.2, 80.0, 80.1])
    assert any("weight is stable" in t for t in tips)


def test_defaults_and_profile_prompt():
    tips = build_tips(ProfileSnapshot(user_id="u1"), [], [])
    assert tips[0] == COMPLETE_PROFILE_TIP
    assert tips[1:] == DEFAULT_TIPS


def test_capped_and_deduplicated():
    tips = build_tips(READY, ["lose_weight", "lose_weight", "maintain_weight"], [90.0, 89.0, 90.2])
    assert len(tips) == MAX_TIPS
    assert len(set(tips)) == len(tips)
