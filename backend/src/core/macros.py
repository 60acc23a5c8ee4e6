"""Nutrient Calculations - Pure functions for nutrition math.

All functions are pure: same input always produces same output, no side effects.
"""

from enum import Enum

from .models import DailyLog, FoodItem, GoalProfile, NutritionTotals


class Micronutrient(str, Enum):
    """Micronutrients tracked against a goal, with display name and unit."""

    CALCIUM = "calcium"
    IRON = "iron"
    POTASSIUM = "potassium"
    SODIUM = "sodium"
    FIBER = "fiber"
    VITAMIN_A = "vitamin_a"
    VITAMIN_C = "vitamin_c"
    VITAMIN_D = "vitamin_d"
    VITAMIN_B12 = "vitamin_b12"
    FOLATE = "folate"


MICRONUTRIENT_LABELS: dict[Micronutrient, tuple[str, str]] = {
    Micronutrient.CALCIUM: ("Calcium", "mg"),
    Micronutrient.IRON: ("Iron", "mg"),
    Micronutrient.POTASSIUM: ("Potassium", "mg"),
    Micronutrient.SODIUM: ("Sodium", "mg"),
    Micronutrient.FIBER: ("Fiber", "g"),
    Micronutrient.VITAMIN_A: ("Vitamin A", "mcg"),
    Micronutrient.VITAMIN_C: ("Vitamin C", "mg"),
    Micronutrient.VITAMIN_D: ("Vitamin D", "mcg"),
    Micronutrient.VITAMIN_B12: ("Vitamin B12", "mcg"),
    Micronutrient.FOLATE: ("Folate", "mcg"),
}

# Fields summed as plain numbers; a missing value counts as zero.
_REQUIRED_FIELDS = ("calories", "protein", "carbs", "fats")
_DEFAULTED_FIELDS = ("saturated_fat", "fiber", "sodium")
# Fields that stay None unless at least one item reports them.
_OPTIONAL_FIELDS = (
    "calcium",
    "iron",
    "potassium",
    "vitamin_a",
    "vitamin_c",
    "vitamin_d",
    "vitamin_b12",
    "folate",
)


def calculate_nutrition_totals(items: list[FoodItem]) -> NutritionTotals:
    """Sum nutrients across a list of food items.

    Args:
        items: Food items to aggregate

    Returns:
        NutritionTotals for the items
    """
    totals: dict[str, float | None] = {}

    for field in _REQUIRED_FIELDS:
        totals[field] = sum(getattr(item, field) for item in items)

    for field in _DEFAULTED_FIELDS:
        totals[field] = sum(getattr(item, field) or 0 for item in items)

    for field in _OPTIONAL_FIELDS:
        reported = [getattr(item, field) for item in items if getattr(item, field) is not None]
        totals[field] = sum(reported) if reported else None

    return NutritionTotals(**totals)


def calculate_daily_totals(log: DailyLog) -> NutritionTotals:
    """Calculate total nutrients for every meal in a day's log."""
    return calculate_nutrition_totals(log.food_items)


def micronutrient_value(totals: NutritionTotals, nutrient: Micronutrient) -> float:
    """Look up a micronutrient intake; unreported values count as zero."""
    mapping = {
        Micronutrient.CALCIUM: totals.calcium,
        Micronutrient.IRON: totals.iron,
        Micronutrient.POTASSIUM: totals.potassium,
        Micronutrient.SODIUM: totals.sodium,
        Micronutrient.FIBER: totals.fiber,
        Micronutrient.VITAMIN_A: totals.vitamin_a,
        Micronutrient.VITAMIN_C: totals.vitamin_c,
        Micronutrient.VITAMIN_D: totals.vitamin_d,
        Micronutrient.VITAMIN_B12: totals.vitamin_b12,
        Micronutrient.FOLATE: totals.folate,
    }
    return mapping[nutrient] or 0.0


def micronutrient_goal(goals: GoalProfile, nutrient: Micronutrient) -> float:
    """Look up the daily goal for a micronutrient."""
    mapping = {
        Micronutrient.CALCIUM: goals.calcium_goal,
        Micronutrient.IRON: goals.iron_goal,
        Micronutrient.POTASSIUM: goals.potassium_goal,
        Micronutrient.SODIUM: goals.sodium_goal,
        Micronutrient.FIBER: goals.fiber_goal,
        Micronutrient.VITAMIN_A: goals.vitamin_a_goal,
        Micronutrient.VITAMIN_C: goals.vitamin_c_goal,
        Micronutrient.VITAMIN_D: goals.vitamin_d_goal,
        Micronutrient.VITAMIN_B12: goals.vitamin_b12_goal,
        Micronutrient.FOLATE: goals.folate_goal,
    }
    return mapping[nutrient]


def calculate_micronutrient_progress(
    totals: NutritionTotals, goals: GoalProfile
) -> dict[Micronutrient, float]:
    """Percentage of each micronutrient goal met (0 when the goal is unset).

    Args:
        totals: Nutrient totals for the day
        goals: User's goal profile

    Returns:
        Mapping of micronutrient to percentage met, rounded to 1 decimal
    """
    progress: dict[Micronutrient, float] = {}
    for nutrient in Micronutrient:
        goal = micronutrient_goal(goals, nutrient)
        if goal <= 0:
            progress[nutrient] = 0.0
            continue
        progress[nutrient] = round(micronutrient_value(totals, nutrient) / goal * 100, 1)
    return progress
