"""Scoring - Pure functions for meal, recovery and wellness scores.

All functions are pure: same input always produces same output, no side effects.
Score tables are kept as ordered data and evaluated top-down.
"""

import math

from .models import GoalProfile, ImprovementTip, MealScore, NutritionTotals, WellnessScore

# Meal score weights: calorie control, macro balance, food quality.
CALORIE_WEIGHT = 0.40
MACRO_WEIGHT = 0.30
QUALITY_WEIGHT = 0.30

# Score drops by this many points per 100% deviation from goal.
CALORIE_PENALTY_SLOPE = 200
MACRO_PENALTY_SLOPE = 100
LIMIT_PENALTY_SLOPE = 100

TIP_THRESHOLD = 70

# (minimum overall score, grade, color)
GRADE_TABLE: tuple[tuple[int, str, str], ...] = (
    (90, "A+", "accentPositive"),
    (80, "A-", "accentPositive"),
    (70, "B", "yellow"),
    (60, "C", "orange"),
    (0, "D", "red"),
)

MEAL_SUMMARY_TABLE: tuple[tuple[int, str], ...] = (
    (80, "Excellent work!"),
    (60, "Good effort!"),
    (0, "Focus on consistency."),
)

# Wellness weights, in percent so the combination stays in integer arithmetic.
NUTRITION_WEIGHT_PCT = 40
SLEEP_WEIGHT_PCT = 30
RECOVERY_WEIGHT_PCT = 30

# (exclusive upper bound on resting heart rate in bpm, points)
RHR_POINTS: tuple[tuple[float, int], ...] = (
    (50, 50),
    (55, 45),
    (60, 40),
    (65, 35),
    (70, 30),
    (75, 25),
    (80, 20),
)
RHR_FLOOR_POINTS = 10

# (inclusive lower bound on HRV in ms, points)
HRV_POINTS: tuple[tuple[float, int], ...] = (
    (70, 50),
    (50, 40),
    (30, 30),
    (20, 20),
)
HRV_FLOOR_POINTS = 10

MISSING_METRIC_POINTS = 25

WELLNESS_SUMMARY_TABLE: tuple[tuple[int, str, str], ...] = (
    (90, "Primed for a great day!", "accentPositive"),
    (80, "Feeling strong and ready.", "green"),
    (70, "Solid foundation for today.", "yellow"),
    (60, "A good day to focus on recovery.", "orange"),
    (0, "Prioritize rest and nutrition.", "red"),
)


def _clamp(value: float, low: float = 0, high: float = 100) -> float:
    if math.isnan(value):
        return low
    return max(low, min(high, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ==================== Meal Score ====================


def deviation_score(actual: float, goal: float, slope: float) -> float:
    """Score closeness to a goal, penalizing misses in either direction.

    100 at the goal, dropping linearly by `slope` points per 100% deviation.
    A goal of zero or less is unknown, so no penalty applies.
    """
    if goal <= 0:
        return 100.0
    return _clamp(100 - abs(actual - goal) / goal * slope)


def sufficiency_score(actual: float, goal: float) -> float:
    """Score progress toward a minimum target, capped at 100."""
    if goal <= 0:
        return 100.0
    return _clamp(actual / goal * 100)


def limit_score(actual: float, goal: float) -> float:
    """Score a nutrient that should stay at or under its limit."""
    if goal <= 0 or actual <= goal:
        return 100.0
    return _clamp(100 - (actual - goal) / goal * LIMIT_PENALTY_SLOPE)


def calculate_calorie_score(totals: NutritionTotals, goals: GoalProfile) -> float:
    return deviation_score(totals.calories, goals.calorie_goal, CALORIE_PENALTY_SLOPE)


def calculate_macro_score(totals: NutritionTotals, goals: GoalProfile) -> float:
    """Mean closeness of protein, carbs and fats to their goals."""
    scores = (
        deviation_score(totals.protein, goals.protein_goal, MACRO_PENALTY_SLOPE),
        deviation_score(totals.carbs, goals.carbs_goal, MACRO_PENALTY_SLOPE),
        deviation_score(totals.fats, goals.fats_goal, MACRO_PENALTY_SLOPE),
    )
    return _clamp(sum(scores) / len(scores))


def calculate_quality_score(totals: NutritionTotals, goals: GoalProfile) -> float:
    """Equal blend of fiber sufficiency, saturated-fat and sodium discipline."""
    scores = (
        sufficiency_score(totals.fiber, goals.fiber_goal),
        limit_score(totals.saturated_fat, goals.saturated_fat_goal),
        limit_score(totals.sodium, goals.sodium_goal),
    )
    return _clamp(sum(scores) / len(scores))


def grade_for_score(score: int) -> tuple[str, str]:
    """Map an overall score to its (grade, color)."""
    for minimum, grade, color in GRADE_TABLE:
        if score >= minimum:
            return grade, color
    return GRADE_TABLE[-1][1], GRADE_TABLE[-1][2]


def meal_summary_for_score(score: int) -> str:
    for minimum, summary in MEAL_SUMMARY_TABLE:
        if score >= minimum:
            return summary
    return MEAL_SUMMARY_TABLE[-1][1]


def _calorie_tip(totals: NutritionTotals, goals: GoalProfile) -> ImprovementTip:
    diff = round(totals.calories - goals.calorie_goal)
    if diff > 0:
        advice = (
            f"You were {diff} kcal over your goal. Trim portion sizes or swap "
            "one calorie-dense snack for vegetables or fruit."
        )
    else:
        advice = (
            f"You were {abs(diff)} kcal under your goal. Add a balanced snack "
            "so your body has enough fuel."
        )
    return ImprovementTip(category="Calories", advice=advice, icon="flame.fill", color="orange")


def _macro_tip(totals: NutritionTotals, goals: GoalProfile) -> ImprovementTip:
    macros = (
        ("protein", totals.protein, goals.protein_goal),
        ("carbs", totals.carbs, goals.carbs_goal),
        ("fats", totals.fats, goals.fats_goal),
    )
    # Largest relative miss; earlier macros win ties.
    name, actual, goal = max(
        macros, key=lambda m: abs(m[1] - m[2]) / m[2] if m[2] > 0 else 0.0
    )
    diff = round(actual - goal)
    direction = "over" if diff > 0 else "under"
    advice = f"Your {name} was {abs(diff)}g {direction} your goal of {round(goal)}g."
    if name == "protein" and diff < 0:
        advice += " Add a lean protein like chicken, Greek yogurt or tofu."
    elif diff > 0:
        advice += f" Try smaller portions of {name}-heavy foods."
    else:
        advice += f" Include a source of {name} in your next meal."
    return ImprovementTip(category="Macros", advice=advice, icon="chart.pie.fill", color="blue")


def _quality_tip(totals: NutritionTotals, goals: GoalProfile) -> ImprovementTip:
    components = (
        ("fiber", sufficiency_score(totals.fiber, goals.fiber_goal)),
        ("saturated_fat", limit_score(totals.saturated_fat, goals.saturated_fat_goal)),
        ("sodium", limit_score(totals.sodium, goals.sodium_goal)),
    )
    weakest, _ = min(components, key=lambda c: c[1])

    if weakest == "fiber":
        advice = (
            f"You had {round(totals.fiber)}g of fiber against a goal of "
            f"{round(goals.fiber_goal)}g. Add whole grains, beans or vegetables."
        )
    elif weakest == "saturated_fat":
        advice = (
            f"Saturated fat reached {round(totals.saturated_fat)}g, above your "
            f"limit of {round(goals.saturated_fat_goal)}g. Choose leaner cuts "
            "and cook with olive oil."
        )
    else:
        advice = (
            f"Sodium reached {round(totals.sodium)}mg, above your limit of "
            f"{round(goals.sodium_goal)}mg. Cut back on processed and restaurant foods."
        )
    return ImprovementTip(category="Food Quality", advice=advice, icon="leaf.fill", color="green")


def build_improvement_tips(
    totals: NutritionTotals,
    goals: GoalProfile,
    calorie_score: float,
    macro_score: float,
    quality_score: float,
) -> list[ImprovementTip]:
    """One tip per category scoring below TIP_THRESHOLD, in display order."""
    tips: list[ImprovementTip] = []
    if calorie_score < TIP_THRESHOLD:
        tips.append(_calorie_tip(totals, goals))
    if macro_score < TIP_THRESHOLD:
        tips.append(_macro_tip(totals, goals))
    if quality_score < TIP_THRESHOLD:
        tips.append(_quality_tip(totals, goals))
    return tips


def compute_meal_score(
    totals: NutritionTotals,
    goals: GoalProfile,
    personalized_ai_summary: str = "",
) -> MealScore:
    """Grade a day's nutrition against the user's goals.

    Args:
        totals: Nutrient totals for the day
        goals: User's goal profile
        personalized_ai_summary: Externally generated summary text, passed through

    Returns:
        MealScore with sub-scores, grade and improvement tips
    """
    calorie_score = calculate_calorie_score(totals, goals)
    macro_score = calculate_macro_score(totals, goals)
    quality_score = calculate_quality_score(totals, goals)

    weighted = (
        calorie_score * CALORIE_WEIGHT
        + macro_score * MACRO_WEIGHT
        + quality_score * QUALITY_WEIGHT
    )
    overall = int(_clamp(_round_half_up(weighted)))
    grade, color = grade_for_score(overall)

    return MealScore(
        overall_score=overall,
        grade=grade,
        calorie_score=_round_half_up(calorie_score),
        macro_score=_round_half_up(macro_score),
        quality_score=_round_half_up(quality_score),
        summary=meal_summary_for_score(overall),
        color=color,
        personalized_ai_summary=personalized_ai_summary,
        improvement_tips=build_improvement_tips(
            totals, goals, calorie_score, macro_score, quality_score
        ),
        actual_calories=totals.calories,
        goal_calories=goals.calorie_goal,
        actual_protein=totals.protein,
        goal_protein=goals.protein_goal,
        actual_carbs=totals.carbs,
        goal_carbs=goals.carbs_goal,
        actual_fats=totals.fats,
        goal_fats=goals.fats_goal,
        actual_fiber=totals.fiber,
        goal_fiber=goals.fiber_goal,
        actual_saturated_fat=totals.saturated_fat,
        goal_saturated_fat=goals.saturated_fat_goal,
        actual_sodium=totals.sodium,
        goal_sodium=goals.sodium_goal,
    )


# ==================== Wellness Score ====================


def _rhr_points(resting_heart_rate: float | None) -> int:
    if resting_heart_rate is None or math.isnan(resting_heart_rate):
        return MISSING_METRIC_POINTS
    for upper_bound, points in RHR_POINTS:
        if resting_heart_rate < upper_bound:
            return points
    return RHR_FLOOR_POINTS


def _hrv_points(hrv: float | None) -> int:
    if hrv is None or math.isnan(hrv):
        return MISSING_METRIC_POINTS
    for lower_bound, points in HRV_POINTS:
        if hrv >= lower_bound:
            return points
    return HRV_FLOOR_POINTS


def compute_recovery_score(resting_heart_rate: float | None, hrv: float | None) -> int:
    """Score physical recovery from resting heart rate and HRV.

    Each metric contributes up to 50 points; a missing metric gets 25.
    """
    return min(100, _rhr_points(resting_heart_rate) + _hrv_points(hrv))


def wellness_summary_for_score(score: int) -> tuple[str, str]:
    """Map an overall wellness score to its (summary, color)."""
    for minimum, summary, color in WELLNESS_SUMMARY_TABLE:
        if score >= minimum:
            return summary, color
    return WELLNESS_SUMMARY_TABLE[-1][1], WELLNESS_SUMMARY_TABLE[-1][2]


def compute_wellness_score(
    meal_score: MealScore | None,
    sleep_score: int | None,
    resting_heart_rate: float | None,
    hrv: float | None,
) -> WellnessScore:
    """Combine nutrition, sleep and recovery into one weighted score.

    Args:
        meal_score: Yesterday's meal score, if one was calculated
        sleep_score: Last night's sleep score (0-100)
        resting_heart_rate: Latest resting heart rate in bpm
        hrv: Latest heart rate variability in ms

    Returns:
        WellnessScore weighted 40% nutrition, 30% sleep, 30% recovery
    """
    nutrition = meal_score.overall_score if meal_score is not None else 0
    sleep = int(_clamp(sleep_score)) if sleep_score is not None else 0
    recovery = compute_recovery_score(resting_heart_rate, hrv)

    weighted_pct = (
        nutrition * NUTRITION_WEIGHT_PCT
        + sleep * SLEEP_WEIGHT_PCT
        + recovery * RECOVERY_WEIGHT_PCT
    )
    overall = (weighted_pct + 50) // 100
    summary, color = wellness_summary_for_score(overall)

    return WellnessScore(
        overall_score=overall,
        nutrition_score=nutrition,
        sleep_score=sleep,
        recovery_score=recovery,
        summary=summary,
        color=color,
    )
