# server/plan_checks.py
"""Checks that a generated study plan actually fits the request it answers."""

import math
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from dateutil import parser as dateparser

from .schemas import PlannerIn, StudyPlan

HOURS_TOLERANCE = 0.01


def _to_date(value: str) -> Optional[date]:
    try:
        return dateparser.isoparse(value).date()
    except (ValueError, OverflowError, TypeError):
        return None


def check_plan_against_input(plan: Dict[str, Any], planner_input: PlannerIn) -> List[str]:
    """
    Return a list of human-readable problems; empty means the plan fits.

    `plan` must already have passed StudyPlan validation.
    """
    problems: List[str] = []
    parsed = StudyPlan.model_validate(plan)
    days_left = planner_input.daysLeft or 0
    daily_hours = planner_input.dailyHours or 0

    expected_weeks = math.ceil(days_left / 7)
    if len(parsed.weeks) != expected_weeks:
        problems.append(
            f"expected {expected_weeks} week(s) for {days_left} day(s), got {len(parsed.weeks)}"
        )

    last = len(parsed.weeks)
    for i, week in enumerate(parsed.weeks, start=1):
        if week.weekNumber != i:
            problems.append(f"week {i} is numbered {week.weekNumber}")

        # only the trailing week may be short
        size = len(week.days)
        if i < last and size != 7:
            problems.append(f"week {i} has {size} day(s), expected 7")
        elif i == last and not 1 <= size <= 7:
            problems.append(f"week {i} has {size} day(s), expected 1 to 7")

        if week.days:
            if _to_date(week.startDate) != _to_date(week.days[0].date):
                problems.append(
                    f"week {i} starts {week.startDate!r} but its first day is {week.days[0].date!r}"
                )
            if _to_date(week.endDate) != _to_date(week.days[-1].date):
                problems.append(
                    f"week {i} ends {week.endDate!r} but its last day is {week.days[-1].date!r}"
                )

    all_days = [d for week in parsed.weeks for d in week.days]
    if len(all_days) != days_left:
        problems.append(f"expected {days_left} day(s), got {len(all_days)}")

    start = _to_date(planner_input.startDate or "")
    if start is not None:
        for offset, day in enumerate(all_days):
            expected = start + timedelta(days=offset)
            actual = _to_date(day.date)
            if actual != expected:
                problems.append(
                    f"day {offset + 1} should be {expected.isoformat()}, got {day.date!r}"
                )
                # one misplaced day shifts every later one; report it once
                break

    for day in all_days:
        booked = sum(s.duration for s in day.sessions)
        if abs(booked - day.totalHours) > HOURS_TOLERANCE:
            problems.append(
                f"{day.date}: sessions add up to {booked:g}h but totalHours is {day.totalHours:g}"
            )
        if day.totalHours > daily_hours + HOURS_TOLERANCE:
            problems.append(
                f"{day.date}: {day.totalHours:g}h exceeds the {daily_hours}h daily limit"
            )

    return problems
