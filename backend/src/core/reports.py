"""Report Generation - Pure functions for generating reports.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date, timedelta

from .models import DailyLog, GoalProfile, MicronutrientAverage, ReportSummary
from .macros import (
    MICRONUTRIENT_LABELS,
    Micronutrient,
    calculate_daily_totals,
    micronutrient_goal,
    micronutrient_value,
)

# Days covered by each named timeframe, ending today.
TIMEFRAME_DAYS = {
    "week": 7,
    "month": 30,
    "quarter": 90,
}


def timeframe_range(timeframe: str, today: date) -> tuple[date, date]:
    """Return the (start, end) dates covered by a named timeframe.

    Raises:
        ValueError: If the timeframe is not known
    """
    if timeframe not in TIMEFRAME_DAYS:
        raise ValueError(f"Unknown timeframe: {timeframe}")
    return today - timedelta(days=TIMEFRAME_DAYS[timeframe] - 1), today


def _logs_with_food(logs: list[DailyLog], start: date, end: date) -> list[DailyLog]:
    # Days with no food logged would drag the averages down
    return [
        log for log in logs
        if start <= log.log_date <= end and log.food_items
    ]


def generate_report_summary(
    logs: list[DailyLog],
    timeframe: str,
    start: date,
    end: date,
) -> ReportSummary:
    """Average daily intake across the days that have food logged.

    Args:
        logs: Daily logs (may include days outside the range)
        timeframe: Name of the timeframe, for display
        start: First day of the range (inclusive)
        end: Last day of the range (inclusive)

    Returns:
        ReportSummary with averages rounded to 1 decimal
    """
    logged = _logs_with_food(logs, start, end)
    days_logged = len(logged)

    if days_logged == 0:
        return ReportSummary(
            timeframe=timeframe,
            start_date=start,
            end_date=end,
            average_calories=0,
            average_protein=0,
            average_carbs=0,
            average_fats=0,
            days_logged=0,
        )

    totals = [calculate_daily_totals(log) for log in logged]

    return ReportSummary(
        timeframe=timeframe,
        start_date=start,
        end_date=end,
        average_calories=round(sum(t.calories for t in totals) / days_logged, 1),
        average_protein=round(sum(t.protein for t in totals) / days_logged, 1),
        average_carbs=round(sum(t.carbs for t in totals) / days_logged, 1),
        average_fats=round(sum(t.fats for t in totals) / days_logged, 1),
        days_logged=days_logged,
    )


def calculate_micronutrient_averages(
    logs: list[DailyLog],
    goals: GoalProfile,
) -> list[MicronutrientAverage]:
    """Average daily intake of each tracked micronutrient versus its goal.

    Args:
        logs: Daily logs to average; days without food are skipped
        goals: User's goal profile

    Returns:
        One MicronutrientAverage per tracked micronutrient, in display order
    """
    logged = [log for log in logs if log.food_items]
    totals = [calculate_daily_totals(log) for log in logged]

    averages: list[MicronutrientAverage] = []
    for nutrient in Micronutrient:
        name, unit = MICRONUTRIENT_LABELS[nutrient]
        if totals:
            average = sum(micronutrient_value(t, nutrient) for t in totals) / len(totals)
        else:
            average = 0.0
        averages.append(
            MicronutrientAverage(
                key=nutrient.value,
                name=name,
                unit=unit,
                average_value=round(average, 1),
                goal_value=micronutrient_goal(goals, nutrient),
            )
        )
    return averages
