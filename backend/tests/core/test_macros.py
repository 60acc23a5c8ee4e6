"""Unit tests for nutrient calculations - pure functions, no mocks needed."""

from datetime import date

from src.core.models import DailyLog, FoodItem, GoalProfile, Meal, NutritionTotals
from src.core.macros import (
    Micronutrient,
    calculate_daily_totals,
    calculate_micronutrient_progress,
    calculate_nutrition_totals,
    micronutrient_value,
)


def make_item(name: str, calories: float, **kwargs) -> FoodItem:
    """Helper to create food items for tests."""
    return FoodItem(
        name=name,
        calories=calories,
        protein=kwargs.pop("protein", 0),
        carbs=kwargs.pop("carbs", 0),
        fats=kwargs.pop("fats", 0),
        **kwargs,
    )


class TestCalculateNutritionTotals:
    """Tests for calculate_nutrition_totals."""

    def test_empty_list(self):
        """Empty list returns zero totals."""
        totals = calculate_nutrition_totals([])
        assert totals.calories == 0
        assert totals.protein == 0
        assert totals.sodium == 0
        assert totals.iron is None

    def test_sums_macros(self):
        """Macros are summed across items."""
        items = [
            make_item("Eggs", 140, protein=12, carbs=1, fats=10),
            make_item("Toast", 80, protein=3, carbs=15, fats=1),
        ]
        totals = calculate_nutrition_totals(items)
        assert totals.calories == 220
        assert totals.protein == 15
        assert totals.carbs == 16
        assert totals.fats == 11

    def test_missing_quality_fields_count_as_zero(self):
        """Unreported fiber and sodium add nothing."""
        items = [
            make_item("Apple", 95, fiber=4.4, sodium=2),
            make_item("Water", 0),
        ]
        totals = calculate_nutrition_totals(items)
        assert totals.fiber == 4.4
        assert totals.sodium == 2
        assert totals.saturated_fat == 0

    def test_optional_micronutrient_stays_none(self):
        """A micronutrient nobody reported stays None; reported ones are summed."""
        items = [
            make_item("Spinach", 20, iron=2.7),
            make_item("Steak", 300, iron=3.0),
            make_item("Rice", 200),
        ]
        totals = calculate_nutrition_totals(items)
        assert round(totals.iron, 1) == 5.7
        assert totals.calcium is None


class TestCalculateDailyTotals:
    """Tests for calculate_daily_totals."""

    def test_sums_across_meals(self):
        """Items from every meal are included."""
        log = DailyLog(
            log_date=date(2024, 3, 1),
            meals=[
                Meal(name="Breakfast", food_items=[make_item("Oats", 150, protein=5)]),
                Meal(name="Dinner", food_items=[make_item("Salmon", 400, protein=40)]),
            ],
        )
        totals = calculate_daily_totals(log)
        assert totals.calories == 550
        assert totals.protein == 45


class TestMicronutrientProgress:
    """Tests for calculate_micronutrient_progress."""

    def test_percentages(self):
        """Progress is intake over goal, rounded to one decimal."""
        totals = NutritionTotals(iron=9, calcium=333.3, sodium=1150)
        progress = calculate_micronutrient_progress(totals, GoalProfile())

        assert progress[Micronutrient.IRON] == 50.0
        assert progress[Micronutrient.CALCIUM] == 33.3
        assert progress[Micronutrient.SODIUM] == 50.0
        assert progress[Micronutrient.FOLATE] == 0.0

    def test_zero_goal_reports_zero(self):
        """An unset goal never divides by zero."""
        totals = NutritionTotals(iron=9)
        progress = calculate_micronutrient_progress(totals, GoalProfile(iron_goal=0))
        assert progress[Micronutrient.IRON] == 0.0

    def test_covers_every_micronutrient(self):
        """Every tracked micronutrient is reported."""
        progress = calculate_micronutrient_progress(NutritionTotals(), GoalProfile())
        assert set(progress) == set(Micronutrient)

    def test_unreported_value_is_zero(self):
        """A None total reads as zero."""
        assert micronutrient_value(NutritionTotals(), Micronutrient.VITAMIN_D) == 0.0
