"""Firestore Client - Persistence for the mobile app's logs, goals and workouts.

This module handles all database I/O. Documents are the ones the mobile app
writes; scoring and analytics logic is in the core module.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any

from google.cloud import firestore

from ..core.models import (
    CycleSettings,
    DailyLog,
    GoalProfile,
    MealScore,
    WorkoutProgram,
    WorkoutSessionLog,
)


logger = logging.getLogger(__name__)


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
    """

    project_id: str | None = None
    database: str | None = None


class FitPlateFirestoreClient:
    """Client for reading and writing the app's Firestore documents.

    Document structure per user:
        users/{user_id}: { goals: { calories, protein, ... } }
            dailyLogs/{YYYY-MM-DD}: { date, meals: [...], exercises: [...] }
            dailySummaries/{YYYY-MM-DD}: { mealScore, mealOverallScore, ... }
            userSettings/cycle: { typicalCycleLength, ... }
            workoutSessionLogs/{id}: { date, routineID, completedExercises }
            workoutPrograms/{id}: { name, routines, daysOfWeek, ... }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore client.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _user_ref(self, user_id: str) -> firestore.DocumentReference:
        """Get reference to user document."""
        return self.client.collection("users").document(user_id)

    def _log_ref(self, user_id: str, log_date: date) -> firestore.DocumentReference:
        """Get reference to daily log document."""
        return self._user_ref(user_id).collection("dailyLogs").document(log_date.isoformat())

    def _summary_ref(self, user_id: str, log_date: date) -> firestore.DocumentReference:
        """Get reference to daily summary document."""
        return self._user_ref(user_id).collection("dailySummaries").document(log_date.isoformat())

    def _cycle_ref(self, user_id: str) -> firestore.DocumentReference:
        """Get reference to cycle settings document."""
        return self._user_ref(user_id).collection("userSettings").document("cycle")

    @staticmethod
    def _to_daily_log(log_date: date, data: dict[str, Any]) -> DailyLog:
        return DailyLog(
            log_date=log_date,
            meals=data.get("meals") or [],
            exercises=data.get("exercises") or [],
        )

    # ==================== Goal Operations ====================

    def get_goals(self, user_id: str) -> GoalProfile | None:
        """Fetch the user's nutrition goals.

        Args:
            user_id: The user's ID

        Returns:
            GoalProfile if the user has goals, None otherwise
        """
        logger.debug("Fetching goals for user: %s", user_id[:8])
        try:
            doc = self._user_ref(user_id).get()
            if not doc.exists:
                return None
            goals = (doc.to_dict() or {}).get("goals")
            if not goals:
                return None
            return GoalProfile(**goals)
        except Exception as e:
            logger.error("Failed to fetch goals: %s", str(e))
            return None

    # ==================== Daily Log Operations ====================

    def get_log(self, user_id: str, log_date: date) -> DailyLog | None:
        """Fetch a daily log.

        Args:
            user_id: The user's ID
            log_date: Date of the log

        Returns:
            DailyLog if found, None otherwise
        """
        logger.debug("Fetching log for %s on %s", user_id[:8], log_date)
        try:
            doc = self._log_ref(user_id, log_date).get()
            if not doc.exists:
                return None
            return self._to_daily_log(log_date, doc.to_dict() or {})
        except Exception as e:
            logger.error("Failed to fetch log: %s", str(e))
            return None

    def get_logs_range(
        self, user_id: str, start_date: date, end_date: date
    ) -> list[DailyLog]:
        """Fetch logs for a date range.

        Log documents are keyed by date, so the range is fetched as one batch get.

        Args:
            user_id: The user's ID
            start_date: Start of range (inclusive)
            end_date: End of range (inclusive)

        Returns:
            List of DailyLogs found, oldest first (may be empty)
        """
        logger.debug(
            "Fetching logs for %s from %s to %s", user_id[:8], start_date, end_date
        )
        days = (end_date - start_date).days + 1
        if days <= 0:
            return []

        refs = [self._log_ref(user_id, start_date + timedelta(days=i)) for i in range(days)]
        logs: list[DailyLog] = []

        try:
            for doc in self.client.get_all(refs):
                if not doc.exists:
                    continue
                logs.append(self._to_daily_log(date.fromisoformat(doc.id), doc.to_dict() or {}))

            logs.sort(key=lambda log: log.log_date)
            logger.debug("Found %d logs in range", len(logs))
            return logs
        except Exception as e:
            logger.error("Failed to fetch logs range: %s", str(e))
            return []

    # ==================== Score Operations ====================

    def save_meal_score(self, user_id: str, log_date: date, score: MealScore) -> bool:
        """Store a day's meal score in its daily summary.

        Args:
            user_id: The user's ID
            log_date: Date the score is for
            score: The computed meal score

        Returns:
            True if successful
        """
        logger.info("Saving meal score for %s on %s", user_id[:8], log_date)
        try:
            self._summary_ref(user_id, log_date).set(
                {
                    "date": datetime.combine(log_date, time.min),
                    "mealScore": score.grade,
                    "mealOverallScore": score.overall_score,
                    "calorieScore": score.calorie_score,
                    "macroScore": score.macro_score,
                    "qualityScore": score.quality_score,
                },
                merge=True,
            )
            return True
        except Exception as e:
            logger.error("Failed to save meal score: %s", str(e))
            return False

    # ==================== Cycle Operations ====================

    def get_cycle_settings(self, user_id: str) -> CycleSettings:
        """Fetch cycle settings, falling back to defaults.

        Args:
            user_id: The user's ID

        Returns:
            Stored CycleSettings, or the defaults if none are stored or the read fails
        """
        try:
            doc = self._cycle_ref(user_id).get()
            if doc.exists:
                return CycleSettings(**(doc.to_dict() or {}))
        except Exception as e:
            logger.error("Failed to fetch cycle settings: %s", str(e))
        return CycleSettings()

    def save_cycle_settings(self, user_id: str, settings: CycleSettings) -> bool:
        """Save cycle settings.

        Args:
            user_id: The user's ID
            settings: Settings to save

        Returns:
            True if successful
        """
        logger.info("Saving cycle settings for user: %s", user_id[:8])
        try:
            data = settings.model_dump(mode="json", by_alias=True)
            self._cycle_ref(user_id).set(data)
            return True
        except Exception as e:
            logger.error("Failed to save cycle settings: %s", str(e))
            return False

    # ==================== Workout Operations ====================

    def get_session_logs(
        self, user_id: str, start_date: date, end_date: date
    ) -> list[WorkoutSessionLog]:
        """Fetch workout sessions performed within a date range.

        Args:
            user_id: The user's ID
            start_date: Start of range (inclusive)
            end_date: End of range (inclusive)

        Returns:
            List of sessions, oldest first (may be empty)
        """
        sessions: list[WorkoutSessionLog] = []
        try:
            query = (
                self._user_ref(user_id)
                .collection("workoutSessionLogs")
                .where("date", ">=", datetime.combine(start_date, time.min))
                .where("date", "<=", datetime.combine(end_date, time.max))
                .order_by("date")
            )
            for doc in query.stream():
                sessions.append(WorkoutSessionLog(**{**(doc.to_dict() or {}), "id": doc.id}))

            logger.debug("Found %d workout sessions in range", len(sessions))
            return sessions
        except Exception as e:
            logger.error("Failed to fetch workout sessions: %s", str(e))
            return []

    def get_active_program(self, user_id: str) -> WorkoutProgram | None:
        """Fetch the most recently created workout program.

        Args:
            user_id: The user's ID

        Returns:
            WorkoutProgram if the user has one, None otherwise
        """
        try:
            query = (
                self._user_ref(user_id)
                .collection("workoutPrograms")
                .order_by("dateCreated", direction=firestore.Query.DESCENDING)
                .limit(1)
            )
            for doc in query.stream():
                return WorkoutProgram(**{**(doc.to_dict() or {}), "id": doc.id})
            return None
        except Exception as e:
            logger.error("Failed to fetch workout program: %s", str(e))
            return None

    def save_program_progress(self, user_id: str, program: WorkoutProgram) -> bool:
        """Persist a program's progress index.

        Args:
            user_id: The user's ID
            program: Program carrying the new progress index

        Returns:
            True if successful
        """
        if program.id is None:
            logger.warning("Cannot save progress for a program without an ID")
            return False
        try:
            self._user_ref(user_id).collection("workoutPrograms").document(program.id).update(
                {"currentProgressIndex": program.current_progress_index}
            )
            return True
        except Exception as e:
            logger.error("Failed to save program progress: %s", str(e))
            return False
