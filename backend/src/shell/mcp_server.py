"""MCP Server - Tool definitions for scoring, recipes, cycle and workout insights.

Each tool loads the caller's documents from Firestore, hands them to the pure
core functions and returns plain dictionaries.
Handles authentication via API key in Authorization header.
"""

import logging
import os
from contextvars import ContextVar
from datetime import date, timedelta

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from ..core.cycle import calculate_cycle_day
from ..core.ingredients import parse_ingredients as parse_ingredient_lines
from ..core.macros import calculate_daily_totals, calculate_micronutrient_progress
from ..core.models import CycleSettings, MealScore
from ..core.reports import (
    TIMEFRAME_DAYS,
    calculate_micronutrient_averages,
    generate_report_summary,
    timeframe_range,
)
from ..core.scoring import compute_meal_score, compute_wellness_score
from ..core.workouts import advance_program, calculate_workout_analytics, next_workout
from .auth import AuthClient
from .firestore_client import FitPlateFirestoreClient, FirestoreConfig


logger = logging.getLogger(__name__)

# Context variable to store current user_id per request
current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)

transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=True,
    allowed_hosts=[
        "localhost:*",
        "127.0.0.1:*",
        "*.run.app:*",
        "*.run.app",
    ],
)

mcp = FastMCP(
    "fitplate",
    instructions="""FitPlate - Nutrition, recovery and training insights.

Use these tools to score a user's logged nutrition, combine it with sleep and
recovery into a wellness score, parse recipe ingredients, and report on cycle
phase and workout progress.

Scores are computed from the user's food logs and goals in the FitPlate app.
Sleep score, resting heart rate and HRV come from the user's health data and
must be passed in when available.""",
    stateless_http=True,
    transport_security=transport_security,
)

# Lazy-initialized clients
_firestore_client: FitPlateFirestoreClient | None = None
_auth_client: AuthClient | None = None


def get_firestore_client() -> FitPlateFirestoreClient:
    """Get or create Firestore client."""
    global _firestore_client
    if _firestore_client is None:
        config = FirestoreConfig(
            project_id=os.environ.get("GOOGLE_CLOUD_PROJECT"),
            database=os.environ.get("FIRESTORE_DATABASE"),
        )
        _firestore_client = FitPlateFirestoreClient(config)
    return _firestore_client


def get_auth_client() -> AuthClient:
    """Get or create Auth client."""
    global _auth_client
    if _auth_client is None:
        _auth_client = AuthClient(get_firestore_client().client)
    return _auth_client


def get_user_id() -> str:
    """Get current authenticated user ID.

    Raises:
        RuntimeError: If no user is authenticated
    """
    user_id = current_user_id.get()
    if user_id is None:
        raise RuntimeError("No authenticated user. Ensure API key is provided.")
    return user_id


def _parse_date(date_str: str | None, default: date) -> date | None:
    """Parse YYYY-MM-DD, returning None when malformed."""
    if date_str is None:
        return default
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        return None


def _score_log(user_id: str, log_date: date) -> MealScore | None:
    """Score a day's log, or None when nothing was logged or goals are missing."""
    db = get_firestore_client()
    log = db.get_log(user_id, log_date)
    if log is None or not log.food_items:
        return None

    goals = db.get_goals(user_id)
    if goals is None:
        return None

    return compute_meal_score(calculate_daily_totals(log), goals)


# ==================== Goal & Log Tools ====================


@mcp.tool()
def get_goals() -> dict:
    """Retrieve the user's daily nutrition goals.

    Returns:
        Dictionary with all configured goals, or error message if not set up
    """
    goals = get_firestore_client().get_goals(get_user_id())
    if goals is None:
        return {"error": "No goals found. Set your goals in the app first."}
    return goals.model_dump()


@mcp.tool()
def get_day(date_str: str | None = None) -> dict:
    """Get a day's nutrient totals and micronutrient progress.

    Args:
        date_str: Date in YYYY-MM-DD format (defaults to today)

    Returns:
        Dictionary with date, meals, totals and percent of each micronutrient goal
    """
    user_id = get_user_id()
    db = get_firestore_client()

    log_date = _parse_date(date_str, date.today())
    if log_date is None:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    log = db.get_log(user_id, log_date)
    if log is None:
        return {"date": log_date.isoformat(), "meals": [], "warning": "Nothing logged on this day."}

    totals = calculate_daily_totals(log)
    result = {
        "date": log_date.isoformat(),
        "meals": [
            {"name": meal.name, "foods": [item.name for item in meal.food_items]}
            for meal in log.meals
        ],
        "totals": totals.model_dump(),
    }

    goals = db.get_goals(user_id)
    if goals is not None:
        result["micronutrient_progress"] = {
            nutrient.value: percent
            for nutrient, percent in calculate_micronutrient_progress(totals, goals).items()
        }
    return result


# ==================== Score Tools ====================


@mcp.tool()
def score_day(date_str: str | None = None) -> dict:
    """Grade a day's nutrition against the user's goals and save the score.

    Args:
        date_str: Date in YYYY-MM-DD format (defaults to yesterday)

    Returns:
        Meal score with grade, sub-scores and improvement tips
    """
    user_id = get_user_id()
    db = get_firestore_client()

    log_date = _parse_date(date_str, date.today() - timedelta(days=1))
    if log_date is None:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    if db.get_goals(user_id) is None:
        return {"error": "No goals found. Set your goals in the app first."}

    score = _score_log(user_id, log_date)
    if score is None:
        return {"date": log_date.isoformat(), **MealScore.no_score().model_dump()}

    if not db.save_meal_score(user_id, log_date, score):
        logger.warning("Meal score for %s computed but not saved", log_date)

    return {"date": log_date.isoformat(), **score.model_dump()}


@mcp.tool()
def get_wellness_score(
    sleep_score: int | None = None,
    resting_heart_rate: float | None = None,
    hrv: float | None = None,
) -> dict:
    """Combine yesterday's nutrition with last night's sleep and recovery.

    Args:
        sleep_score: Last night's sleep score, 0-100 (optional)
        resting_heart_rate: Latest resting heart rate in bpm (optional)
        hrv: Latest heart rate variability in ms (optional)

    Returns:
        Wellness score weighted 40% nutrition, 30% sleep, 30% recovery
    """
    user_id = get_user_id()
    yesterday = date.today() - timedelta(days=1)

    meal_score = _score_log(user_id, yesterday)
    wellness = compute_wellness_score(meal_score, sleep_score, resting_heart_rate, hrv)
    return wellness.model_dump()


# ==================== Recipe Tools ====================


@mcp.tool()
def parse_ingredients(lines: list[str]) -> list[dict]:
    """Parse recipe ingredient lines into quantity, unit and name.

    Args:
        lines: Ingredient lines, e.g. ["1 1/2 cups chopped onions", "salt to taste"]

    Returns:
        One parsed ingredient per line, in the same order
    """
    return [ingredient.model_dump() for ingredient in parse_ingredient_lines(lines)]


# ==================== Cycle Tools ====================


@mcp.tool()
def get_cycle_status() -> dict:
    """Get today's cycle day and phase.

    Returns:
        Cycle day number and phase, or a message if no period start is logged
    """
    settings = get_firestore_client().get_cycle_settings(get_user_id())
    cycle_day = calculate_cycle_day(settings.last_period_start, date.today(), settings)
    if cycle_day is None:
        return {"message": "Log the start of your period to see your cycle phase."}
    return cycle_day.model_dump(mode="json")


@mcp.tool()
def log_period_start(date_str: str | None = None) -> dict:
    """Record the first day of the user's period.

    Args:
        date_str: Date in YYYY-MM-DD format (defaults to today)

    Returns:
        The updated cycle day and phase
    """
    user_id = get_user_id()
    db = get_firestore_client()

    start = _parse_date(date_str, date.today())
    if start is None:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}
    if start > date.today():
        return {"error": "Period start cannot be in the future."}

    settings = db.get_cycle_settings(user_id).model_copy(update={"last_period_start": start})
    if not db.save_cycle_settings(user_id, settings):
        return {"error": "Failed to save cycle settings. Please try again."}

    cycle_day = calculate_cycle_day(start, date.today(), settings)
    return cycle_day.model_dump(mode="json")


@mcp.tool()
def update_cycle_settings(cycle_length: int, period_length: int) -> dict:
    """Update the user's typical cycle and period lengths.

    Args:
        cycle_length: Typical cycle length in days (e.g., 28)
        period_length: Typical period length in days (e.g., 5)

    Returns:
        The saved settings
    """
    user_id = get_user_id()
    db = get_firestore_client()

    if cycle_length < 1 or period_length < 1:
        return {"error": "Cycle and period lengths must be at least 1 day."}

    current = db.get_cycle_settings(user_id)
    settings = CycleSettings(
        typical_cycle_length=cycle_length,
        typical_period_length=period_length,
        last_period_start=current.last_period_start,
    )
    if not db.save_cycle_settings(user_id, settings):
        return {"error": "Failed to save cycle settings. Please try again."}
    return settings.model_dump(mode="json")


# ==================== Workout Tools ====================


@mcp.tool()
def get_workout_analytics(days: int = 30) -> dict:
    """Summarize training volume and personal records.

    Args:
        days: Number of days to look back, including today (default 30)

    Returns:
        Total volume in lbs, session count and personal record per exercise
    """
    user_id = get_user_id()
    if days < 1:
        return {"error": "days must be at least 1."}

    end_date = date.today()
    start_date = end_date - timedelta(days=days - 1)
    sessions = get_firestore_client().get_session_logs(user_id, start_date, end_date)
    analytics = calculate_workout_analytics(sessions)

    return {
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "total_volume": analytics.total_volume,
        "session_count": analytics.session_count,
        "personal_records": {
            name: record.display for name, record in analytics.personal_records.items()
        },
    }


@mcp.tool()
def get_next_workout() -> dict:
    """Find the next routine in the user's active workout program.

    Returns:
        Program name, routine and "Week N · Day M" title, or a message
    """
    program = get_firestore_client().get_active_program(get_user_id())
    if program is None:
        return {"message": "No active workout program."}

    upcoming = next_workout(program)
    if upcoming is None:
        return {"program": program.name, "message": "Program complete or not scheduled."}

    return {
        "program": program.name,
        "routine": upcoming.routine.name,
        "week_number": upcoming.week_number,
        "day_number": upcoming.day_number,
        "title": upcoming.title,
    }


@mcp.tool()
def complete_program_workout() -> dict:
    """Mark the next workout in the active program as done.

    Returns:
        The new progress index and the workout that follows it
    """
    user_id = get_user_id()
    db = get_firestore_client()

    program = db.get_active_program(user_id)
    if program is None:
        return {"error": "No active workout program."}
    if next_workout(program) is None:
        return {"error": "Program complete or not scheduled."}

    advanced = advance_program(program)
    if not db.save_program_progress(user_id, advanced):
        return {"error": "Failed to save progress. Please try again."}

    upcoming = next_workout(advanced)
    return {
        "program": advanced.name,
        "current_progress_index": advanced.current_progress_index,
        "next": upcoming.title if upcoming else None,
    }


# ==================== Report Tools ====================


@mcp.tool()
def get_report(timeframe: str = "week") -> dict:
    """Average daily intake over a timeframe.

    Args:
        timeframe: One of "week", "month" or "quarter"

    Returns:
        Average calories and macros over the days that have food logged
    """
    user_id = get_user_id()
    if timeframe not in TIMEFRAME_DAYS:
        return {"error": f"Unknown timeframe. Use one of: {', '.join(TIMEFRAME_DAYS)}."}

    start, end = timeframe_range(timeframe, date.today())
    logs = get_firestore_client().get_logs_range(user_id, start, end)
    return generate_report_summary(logs, timeframe, start, end).model_dump(mode="json")


@mcp.tool()
def get_micronutrients(timeframe: str = "week") -> dict:
    """Average micronutrient intake versus goals over a timeframe.

    Args:
        timeframe: One of "week", "month" or "quarter"

    Returns:
        Average, goal and percent met for each tracked micronutrient
    """
    user_id = get_user_id()
    db = get_firestore_client()

    if timeframe not in TIMEFRAME_DAYS:
        return {"error": f"Unknown timeframe. Use one of: {', '.join(TIMEFRAME_DAYS)}."}

    goals = db.get_goals(user_id)
    if goals is None:
        return {"error": "No goals found. Set your goals in the app first."}

    start, end = timeframe_range(timeframe, date.today())
    logs = db.get_logs_range(user_id, start, end)

    return {
        "timeframe": timeframe,
        "micronutrients": [
            {
                "name": avg.name,
                "unit": avg.unit,
                "average": avg.average_value,
                "goal": avg.goal_value,
                "percent_met": round(avg.percentage_met, 1),
            }
            for avg in calculate_micronutrient_averages(logs, goals)
        ],
    }
