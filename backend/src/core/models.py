"""Core Data Models - Pydantic models for type safety.

All models are value objects with no behavior beyond validation.
Result models are frozen; input records accept the mobile app's camelCase keys.
"""

from datetime import date as DateType
from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class AppRecord(BaseModel):
    """Base for records stored by the mobile app (camelCase in Firestore)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ==================== Food Logs ====================


class FoodItem(AppRecord):
    """A single food item logged by the user."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(min_length=1, description="Name of the food")
    calories: float = Field(ge=0, description="Total calories")
    protein: float = Field(ge=0, description="Protein in grams")
    carbs: float = Field(ge=0, description="Carbohydrates in grams")
    fats: float = Field(ge=0, description="Fat in grams")
    saturated_fat: Optional[float] = Field(default=None, ge=0, alias="saturatedFat")
    fiber: Optional[float] = Field(default=None, ge=0)
    sodium: Optional[float] = Field(default=None, ge=0, description="Sodium in mg")
    calcium: Optional[float] = Field(default=None, ge=0)
    iron: Optional[float] = Field(default=None, ge=0)
    potassium: Optional[float] = Field(default=None, ge=0)
    vitamin_a: Optional[float] = Field(default=None, ge=0, alias="vitaminA")
    vitamin_c: Optional[float] = Field(default=None, ge=0, alias="vitaminC")
    vitamin_d: Optional[float] = Field(default=None, ge=0, alias="vitaminD")
    vitamin_b12: Optional[float] = Field(default=None, ge=0, alias="vitaminB12")
    folate: Optional[float] = Field(default=None, ge=0)


class Meal(AppRecord):
    """A named group of food items (Breakfast, Lunch, ...)."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    food_items: list[FoodItem] = Field(default_factory=list, alias="foodItems")


class LoggedExercise(AppRecord):
    """An exercise entry attached to a daily log."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    duration_minutes: Optional[int] = Field(default=None, ge=0, alias="durationMinutes")
    calories_burned: float = Field(default=0, ge=0, alias="caloriesBurned")
    source: str = Field(default="manual", description="'manual' or 'HealthKit'")
    workout_id: Optional[str] = Field(default=None, alias="workoutID")
    session_id: Optional[str] = Field(default=None, alias="sessionID")


class DailyLog(AppRecord):
    """A day's log containing all meals and exercises."""

    log_date: DateType = Field(description="Date of this log (YYYY-MM-DD)")
    meals: list[Meal] = Field(default_factory=list)
    exercises: list[LoggedExercise] = Field(default_factory=list)

    @property
    def food_items(self) -> list[FoodItem]:
        return [item for meal in self.meals for item in meal.food_items]


# ==================== Nutrition & Goals ====================


class NutritionTotals(BaseModel):
    """Aggregate of a period's consumed nutrients.

    Micronutrients are None when no food in the period reported them.
    """

    model_config = ConfigDict(frozen=True)

    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fats: float = Field(default=0, ge=0)
    saturated_fat: float = Field(default=0, ge=0)
    fiber: float = Field(default=0, ge=0)
    sodium: float = Field(default=0, ge=0, description="Sodium in mg")
    calcium: Optional[float] = Field(default=None, ge=0)
    iron: Optional[float] = Field(default=None, ge=0)
    potassium: Optional[float] = Field(default=None, ge=0)
    vitamin_a: Optional[float] = Field(default=None, ge=0)
    vitamin_c: Optional[float] = Field(default=None, ge=0)
    vitamin_d: Optional[float] = Field(default=None, ge=0)
    vitamin_b12: Optional[float] = Field(default=None, ge=0)
    folate: Optional[float] = Field(default=None, ge=0)


class GoalProfile(AppRecord):
    """User's daily nutrition targets.

    A zero or negative goal means "not yet known"; scoring skips its penalty.
    Goals stored as null fall back to their defaults.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    calorie_goal: float = Field(default=2000, alias="calories")
    protein_goal: float = Field(default=150, alias="protein")
    carbs_goal: float = Field(default=250, alias="carbs")
    fats_goal: float = Field(default=70, alias="fats")
    fiber_goal: float = Field(default=25, alias="fiberGoal")
    saturated_fat_goal: float = Field(default=20, alias="saturatedFatGoal")
    sodium_goal: float = Field(default=2300, alias="sodiumGoal")
    calcium_goal: float = Field(default=1000, alias="calciumGoal")
    iron_goal: float = Field(default=18, alias="ironGoal")
    potassium_goal: float = Field(default=3500, alias="potassiumGoal")
    vitamin_a_goal: float = Field(default=900, alias="vitaminAGoal")
    vitamin_c_goal: float = Field(default=90, alias="vitaminCGoal")
    vitamin_d_goal: float = Field(default=20, alias="vitaminDGoal")
    vitamin_b12_goal: float = Field(default=2.4, alias="vitaminB12Goal")
    folate_goal: float = Field(default=400, alias="folateGoal")

    @field_validator("*", mode="before")
    @classmethod
    def null_goal_uses_default(cls, value, info: ValidationInfo):
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


# ==================== Scores ====================


class ImprovementTip(BaseModel):
    """One advisory tip attached to a meal score."""

    model_config = ConfigDict(frozen=True)

    category: str
    advice: str
    icon: str = Field(description="SF Symbol name shown next to the tip")
    color: str


class MealScore(BaseModel):
    """Graded summary of one day's nutrition versus goals."""

    model_config = ConfigDict(frozen=True)

    overall_score: int = Field(ge=0, le=100)
    grade: str
    calorie_score: int = Field(ge=0, le=100)
    macro_score: int = Field(ge=0, le=100)
    quality_score: int = Field(ge=0, le=100)
    summary: str
    color: str
    personalized_ai_summary: str = ""
    improvement_tips: list[ImprovementTip] = Field(default_factory=list)
    actual_calories: float = 0
    goal_calories: float = 0
    actual_protein: float = 0
    goal_protein: float = 0
    actual_carbs: float = 0
    goal_carbs: float = 0
    actual_fats: float = 0
    goal_fats: float = 0
    actual_fiber: float = 0
    goal_fiber: float = 0
    actual_saturated_fat: float = 0
    goal_saturated_fat: float = 0
    actual_sodium: float = 0
    goal_sodium: float = 0

    @classmethod
    def no_score(cls) -> "MealScore":
        """Neutral score used when nothing has been logged."""
        return cls(
            overall_score=0,
            grade="N/A",
            calorie_score=0,
            macro_score=0,
            quality_score=0,
            summary="Log a full day of meals to get your score.",
            color="gray",
            personalized_ai_summary="No data available.",
        )


class WellnessScore(BaseModel):
    """Composite of nutrition, sleep and recovery scores."""

    model_config = ConfigDict(frozen=True)

    overall_score: int = Field(ge=0, le=100)
    nutrition_score: int = Field(ge=0, le=100)
    sleep_score: int = Field(ge=0, le=100)
    recovery_score: int = Field(ge=0, le=100)
    summary: str
    color: str


# ==================== Recipes ====================


class ParsedIngredient(BaseModel):
    """Structured quantity/unit/name extracted from a recipe line."""

    model_config = ConfigDict(frozen=True)

    quantity: float = Field(gt=0)
    unit: str = Field(description="Canonical unit or 'item'")
    name: str
    original_string: str = Field(description="Raw input line, verbatim")


# ==================== Cycle Tracking ====================


class MenstrualPhase(str, Enum):
    MENSTRUAL = "menstrual"
    FOLLICULAR = "follicular"
    OVULATORY = "ovulatory"
    LUTEAL = "luteal"


class CycleSettings(AppRecord):
    """User's typical cycle and period lengths, in days."""

    typical_cycle_length: int = Field(default=28, ge=1, alias="typicalCycleLength")
    typical_period_length: int = Field(default=5, ge=1, alias="typicalPeriodLength")
    last_period_start: Optional[DateType] = Field(default=None, alias="lastPeriodStartDate")


class CycleDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: DateType
    cycle_day_number: int = Field(ge=1)
    phase: MenstrualPhase


# ==================== Workouts ====================


class CompletedSet(AppRecord):
    reps: int = Field(default=0, ge=0)
    weight: float = Field(default=0, ge=0, description="Weight in lbs")
    distance: Optional[float] = None
    duration_in_seconds: Optional[int] = Field(default=None, alias="durationInSeconds")


class CompletedExercise(AppRecord):
    exercise_name: str = Field(alias="exerciseName")
    sets: list[CompletedSet] = Field(default_factory=list)


class WorkoutSessionLog(AppRecord):
    """One finished workout session and everything done in it."""

    id: Optional[str] = None
    date: datetime
    routine_id: str = Field(default="", alias="routineID")
    completed_exercises: list[CompletedExercise] = Field(
        default_factory=list, alias="completedExercises"
    )


class WorkoutRoutine(AppRecord):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str


class WorkoutProgram(AppRecord):
    """A multi-week training program cycling through its routines."""

    id: Optional[str] = None
    name: str
    routines: list[WorkoutRoutine] = Field(default_factory=list)
    days_of_week: list[int] = Field(default_factory=list, alias="daysOfWeek")
    current_progress_index: int = Field(default=0, ge=0, alias="currentProgressIndex")


class PersonalRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    exercise_name: str
    weight: float
    reps: int

    @property
    def display(self) -> str:
        return f"{self.weight:.1f} lbs x {self.reps} reps"


class WorkoutAnalytics(BaseModel):
    """Training volume and personal records over a set of sessions."""

    model_config = ConfigDict(frozen=True)

    total_volume: float = Field(ge=0)
    personal_records: dict[str, PersonalRecord] = Field(default_factory=dict)
    session_count: int = Field(default=0, ge=0)


class NextWorkout(BaseModel):
    model_config = ConfigDict(frozen=True)

    routine: WorkoutRoutine
    week_number: int
    day_number: int
    title: str


# ==================== Reports ====================


class ReportSummary(BaseModel):
    """Average daily intake over a timeframe."""

    timeframe: str
    start_date: DateType
    end_date: DateType
    average_calories: float
    average_protein: float
    average_carbs: float
    average_fats: float
    days_logged: int


class MicronutrientAverage(BaseModel):
    """Average micronutrient intake compared to its goal."""

    key: str
    name: str
    unit: str
    average_value: float
    goal_value: float

    @property
    def percentage_met(self) -> float:
        if self.goal_value <= 0:
            return 0.0
        return self.average_value / self.goal_value * 100


# ==================== Users ====================


class ApiKeyRecord(BaseModel):
    """API key document stored in Firestore, keyed by key hash."""

    user_id: str = Field(description="App user ID the key acts for")
    created_at: datetime = Field(default_factory=datetime.utcnow)
