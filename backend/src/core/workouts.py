"""Workout Analytics - Pure functions for training volume, PRs and program progress.

All functions are pure: same input always produces same output, no side effects.
"""

from .models import (
    NextWorkout,
    PersonalRecord,
    WorkoutAnalytics,
    WorkoutProgram,
    WorkoutSessionLog,
)

PROGRAM_LENGTH_WEEKS = 12


def calculate_total_volume(sessions: list[WorkoutSessionLog]) -> float:
    """Total volume lifted: sum of weight x reps over every set.

    Args:
        sessions: Completed workout sessions

    Returns:
        Volume in lbs
    """
    return sum(
        s.weight * s.reps
        for session in sessions
        for exercise in session.completed_exercises
        for s in exercise.sets
    )


def find_personal_records(sessions: list[WorkoutSessionLog]) -> dict[str, PersonalRecord]:
    """Heaviest set per exercise. The first set at a given weight keeps the record.

    Args:
        sessions: Completed workout sessions, in the order they should be considered

    Returns:
        Mapping of exercise name to its PersonalRecord
    """
    records: dict[str, PersonalRecord] = {}
    for session in sessions:
        for exercise in session.completed_exercises:
            for s in exercise.sets:
                current = records.get(exercise.exercise_name)
                if current is None or s.weight > current.weight:
                    records[exercise.exercise_name] = PersonalRecord(
                        exercise_name=exercise.exercise_name,
                        weight=s.weight,
                        reps=s.reps,
                    )
    return records


def calculate_workout_analytics(sessions: list[WorkoutSessionLog]) -> WorkoutAnalytics:
    """Volume and personal records over a set of sessions, oldest first."""
    ordered = sorted(sessions, key=lambda s: s.date)
    return WorkoutAnalytics(
        total_volume=calculate_total_volume(ordered),
        personal_records=find_personal_records(ordered),
        session_count=len(ordered),
    )


def next_workout(program: WorkoutProgram) -> NextWorkout | None:
    """Work out which routine comes next in a program.

    A program runs for PROGRAM_LENGTH_WEEKS weeks with one workout per
    scheduled weekday, cycling through its routines in order.

    Returns:
        NextWorkout, or None if the program has no schedule, no routines or is finished
    """
    days_per_week = len(program.days_of_week)
    if not program.routines or days_per_week == 0:
        return None

    index = program.current_progress_index
    if index >= days_per_week * PROGRAM_LENGTH_WEEKS:
        return None

    routine = program.routines[index % len(program.routines)]
    week_number = index // days_per_week + 1
    day_number = index % days_per_week + 1

    return NextWorkout(
        routine=routine,
        week_number=week_number,
        day_number=day_number,
        title=f"Week {week_number} · Day {day_number}",
    )


def advance_program(program: WorkoutProgram) -> WorkoutProgram:
    """Return a copy of the program moved on by one completed workout."""
    return program.model_copy(
        update={"current_progress_index": program.current_progress_index + 1}
    )
