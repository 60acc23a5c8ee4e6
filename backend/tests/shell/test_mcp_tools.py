"""Tests for MCP tools with a mocked Firestore client."""

from datetime import date, datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest

from src.core.models import (
    CompletedExercise,
    CompletedSet,
    CycleSettings,
    DailyLog,
    FoodItem,
    GoalProfile,
    Meal,
    WorkoutProgram,
    WorkoutRoutine,
    WorkoutSessionLog,
)
from src.shell import mcp_server


@pytest.fixture
def db():
    """Mock Firestore client returned to every tool."""
    with patch("src.shell.mcp_server.get_firestore_client") as get_client:
        client = MagicMock()
        get_client.return_value = client
        yield client


@pytest.fixture
def user():
    """Authenticate the current request as a test user."""
    token = mcp_server.current_user_id.set("user-123")
    yield "user-123"
    mcp_server.current_user_id.reset(token)


def make_log(log_date: date) -> DailyLog:
    return DailyLog(
        log_date=log_date,
        meals=[
            Meal(
                name="Lunch",
                food_items=[
                    FoodItem(name="Chicken Bowl", calories=2000, protein=150, carbs=250, fats=70,
                             fiber=30, saturated_fat=15, sodium=2000, iron=9),
                ],
            )
        ],
    )


@pytest.fixture
def program():
    return WorkoutProgram(
        id="p1",
        name="Strength",
        routines=[WorkoutRoutine(id="a", name="Push"), WorkoutRoutine(id="b", name="Pull")],
        days_of_week=[1, 4],
    )


class TestAuthentication:
    """Tests for get_user_id."""

    def test_unauthenticated_raises(self):
        """Tools refuse to run without a user."""
        with pytest.raises(RuntimeError):
            mcp_server.get_user_id()

    def test_authenticated(self, user):
        """The context user is returned."""
        assert mcp_server.get_user_id() == "user-123"


class TestGoalsAndDays:
    """Tests for get_goals and get_day."""

    def test_get_goals(self, db, user):
        """Goals are returned as a dictionary."""
        db.get_goals.return_value = GoalProfile(calorie_goal=1800)
        assert mcp_server.get_goals()["calorie_goal"] == 1800
        db.get_goals.assert_called_once_with("user-123")

    def test_get_goals_missing(self, db, user):
        """Missing goals return an error."""
        db.get_goals.return_value = None
        assert "error" in mcp_server.get_goals()

    def test_get_day(self, db, user):
        """A day's meals, totals and micronutrient progress are returned."""
        db.get_log.return_value = make_log(date(2024, 3, 1))
        db.get_goals.return_value = GoalProfile()

        result = mcp_server.get_day("2024-03-01")

        assert result["date"] == "2024-03-01"
        assert result["meals"] == [{"name": "Lunch", "foods": ["Chicken Bowl"]}]
        assert result["totals"]["calories"] == 2000
        assert result["micronutrient_progress"]["iron"] == 50.0

    def test_get_day_invalid_date(self, db, user):
        """Malformed dates return an error."""
        assert "error" in mcp_server.get_day("03/01/2024")


class TestScoreDay:
    """Tests for score_day."""

    def test_scores_and_saves(self, db, user):
        """A logged day is scored and the score saved."""
        db.get_log.return_value = make_log(date(2024, 3, 1))
        db.get_goals.return_value = GoalProfile()

        result = mcp_server.score_day("2024-03-01")

        assert result["date"] == "2024-03-01"
        assert result["overall_score"] == 100
        assert result["grade"] == "A+"
        db.save_meal_score.assert_called_once()
        assert db.save_meal_score.call_args[0][1] == date(2024, 3, 1)

    def test_defaults_to_yesterday(self, db, user):
        """With no date, yesterday is scored."""
        db.get_log.return_value = None
        db.get_goals.return_value = GoalProfile()

        result = mcp_server.score_day()

        yesterday = date.today() - timedelta(days=1)
        assert result["date"] == yesterday.isoformat()

    def test_nothing_logged(self, db, user):
        """An empty day gets the neutral score and nothing is saved."""
        db.get_log.return_value = None
        db.get_goals.return_value = GoalProfile()

        result = mcp_server.score_day("2024-03-01")

        assert result["grade"] == "N/A"
        db.save_meal_score.assert_not_called()

    def test_no_goals(self, db, user):
        """Missing goals return an error."""
        db.get_goals.return_value = None
        assert "error" in mcp_server.score_day("2024-03-01")


class TestWellnessScore:
    """Tests for get_wellness_score."""

    def test_no_data(self, db, user):
        """With nothing logged and no metrics the score is 15."""
        db.get_log.return_value = None

        result = mcp_server.get_wellness_score()

        assert result["overall_score"] == 15
        assert result["recovery_score"] == 50

    def test_uses_yesterdays_log(self, db, user):
        """Yesterday's meal score feeds the nutrition component."""
        yesterday = date.today() - timedelta(days=1)
        db.get_log.return_value = make_log(yesterday)
        db.get_goals.return_value = GoalProfile()

        result = mcp_server.get_wellness_score(sleep_score=90, resting_heart_rate=45, hrv=80)

        assert db.get_log.call_args[0][1] == yesterday
        assert result["nutrition_score"] == 100
        assert result["overall_score"] == 97


class TestParseIngredients:
    """Tests for parse_ingredients."""

    def test_parses_lines_in_order(self):
        """Each line becomes one parsed ingredient."""
        result = mcp_server.parse_ingredients(["1 1/2 cups chopped onions", "salt to taste"])

        assert result[0] == {
            "quantity": 1.5,
            "unit": "cup",
            "name": "onions",
            "original_string": "1 1/2 cups chopped onions",
        }
        assert result[1]["name"] == "salt"


class TestCycleTools:
    """Tests for cycle tools."""

    def test_status_without_period(self, db, user):
        """No logged period gives a message."""
        db.get_cycle_settings.return_value = CycleSettings()
        assert "message" in mcp_server.get_cycle_status()

    def test_status(self, db, user):
        """A period starting today is cycle day 1."""
        db.get_cycle_settings.return_value = CycleSettings(last_period_start=date.today())

        result = mcp_server.get_cycle_status()

        assert result["cycle_day_number"] == 1
        assert result["phase"] == "menstrual"

    def test_log_period_start(self, db, user):
        """Logging a start saves it and returns the cycle day."""
        db.get_cycle_settings.return_value = CycleSettings()
        db.save_cycle_settings.return_value = True
        start = date.today() - timedelta(days=5)

        result = mcp_server.log_period_start(start.isoformat())

        saved = db.save_cycle_settings.call_args[0][1]
        assert saved.last_period_start == start
        assert result["cycle_day_number"] == 6
        assert result["phase"] == "follicular"

    def test_log_future_period_rejected(self, db, user):
        """A future start date is rejected."""
        tomorrow = date.today() + timedelta(days=1)
        assert "error" in mcp_server.log_period_start(tomorrow.isoformat())
        db.save_cycle_settings.assert_not_called()

    def test_update_settings_keeps_start(self, db, user):
        """Updating lengths keeps the logged start date."""
        db.get_cycle_settings.return_value = CycleSettings(last_period_start=date(2024, 3, 1))
        db.save_cycle_settings.return_value = True

        result = mcp_server.update_cycle_settings(30, 4)

        assert result["typical_cycle_length"] == 30
        assert result["last_period_start"] == "2024-03-01"

    def test_update_settings_rejects_zero(self, db, user):
        """Lengths below one day are rejected."""
        assert "error" in mcp_server.update_cycle_settings(0, 5)


class TestWorkoutTools:
    """Tests for workout tools."""

    def test_analytics(self, db, user):
        """Volume and records are summarized."""
        db.get_session_logs.return_value = [
            WorkoutSessionLog(
                date=datetime(2024, 3, 1, 7, 0),
                completed_exercises=[
                    CompletedExercise(
                        exercise_name="Squat",
                        sets=[CompletedSet(weight=185, reps=5), CompletedSet(weight=205, reps=3)],
                    )
                ],
            )
        ]

        result = mcp_server.get_workout_analytics(days=7)

        assert result["total_volume"] == 1540
        assert result["session_count"] == 1
        assert result["personal_records"] == {"Squat": "205.0 lbs x 3 reps"}

    def test_next_workout(self, db, user, program):
        """The next routine is named with its week and day."""
        db.get_active_program.return_value = program

        result = mcp_server.get_next_workout()

        assert result["routine"] == "Push"
        assert result["title"] == "Week 1 · Day 1"

    def test_no_program(self, db, user):
        """No program gives a message."""
        db.get_active_program.return_value = None
        assert "message" in mcp_server.get_next_workout()

    def test_complete_workout(self, db, user, program):
        """Completing advances the program by one."""
        db.get_active_program.return_value = program
        db.save_program_progress.return_value = True

        result = mcp_server.complete_program_workout()

        assert result["current_progress_index"] == 1
        assert result["next"] == "Week 1 · Day 2"
        assert db.save_program_progress.call_args[0][1].current_progress_index == 1

    def test_complete_finished_program(self, db, user, program):
        """A finished program cannot be advanced."""
        db.get_active_program.return_value = program.model_copy(
            update={"current_progress_index": 24}
        )
        assert "error" in mcp_server.complete_program_workout()
        db.save_program_progress.assert_not_called()


class TestReportTools:
    """Tests for report tools."""

    def test_report(self, db, user):
        """Averages come from the logs in range."""
        db.get_logs_range.return_value = [make_log(date.today())]

        result = mcp_server.get_report("week")

        assert result["days_logged"] == 1
        assert result["average_calories"] == 2000
        start, end = db.get_logs_range.call_args[0][1:]
        assert (end - start).days == 6

    def test_unknown_timeframe(self, db, user):
        """Unknown timeframes return an error."""
        assert "error" in mcp_server.get_report("decade")

    def test_micronutrients(self, db, user):
        """Each micronutrient reports its percent met."""
        db.get_goals.return_value = GoalProfile()
        db.get_logs_range.return_value = [make_log(date.today())]

        result = mcp_server.get_micronutrients("week")

        iron = next(m for m in result["micronutrients"] if m["name"] == "Iron")
        assert iron["average"] == 9
        assert iron["percent_met"] == 50.0
