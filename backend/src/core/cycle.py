"""Cycle Tracking - Pure functions for menstrual cycle day and phase.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date

from .models import CycleDay, CycleSettings, MenstrualPhase

# Ovulation window extends this many days either side of mid-cycle.
OVULATION_WINDOW_DAYS = 2


def determine_phase(cycle_day: int, settings: CycleSettings) -> MenstrualPhase:
    """Classify a 1-based cycle day into its phase.

    Args:
        cycle_day: Day of the cycle, day 1 being the first day of the period
        settings: User's typical cycle and period lengths

    Returns:
        The MenstrualPhase for that day
    """
    midpoint = settings.typical_cycle_length // 2
    ovulation_start = midpoint - OVULATION_WINDOW_DAYS
    ovulation_end = midpoint + OVULATION_WINDOW_DAYS

    if cycle_day <= settings.typical_period_length:
        return MenstrualPhase.MENSTRUAL
    if cycle_day < ovulation_start:
        return MenstrualPhase.FOLLICULAR
    if cycle_day <= ovulation_end:
        return MenstrualPhase.OVULATORY
    return MenstrualPhase.LUTEAL


def calculate_cycle_day(
    last_period_start: date | None,
    today: date,
    settings: CycleSettings,
) -> CycleDay | None:
    """Calculate today's cycle day from the last logged period start.

    Args:
        last_period_start: First day of the most recent period, if logged
        today: The date to evaluate
        settings: User's typical cycle and period lengths

    Returns:
        CycleDay, or None if no period is logged or the start is in the future
    """
    if last_period_start is None or last_period_start > today:
        return None

    day_number = (today - last_period_start).days + 1
    return CycleDay(
        date=today,
        cycle_day_number=day_number,
        phase=determine_phase(day_number, settings),
    )
