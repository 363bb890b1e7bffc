"""Weekly planner lookups."""
from datetime import date
from typing import Optional

from jee_tracker.dates import week_days
from jee_tracker.models import AppState, Chapter, PlannerTask


def tasks_for_date(state: AppState, day: str) -> list[PlannerTask]:
    return [t for t in state.planner_tasks if t.date == day]


def tasks_for_week(state: AppState, day: date) -> dict[str, list[PlannerTask]]:
    """Tasks of the Sunday-to-Saturday week around ``day``, keyed by ISO date."""
    return {iso: tasks_for_date(state, iso) for iso in week_days(day)}


def chapter_for_task(state: AppState, task: PlannerTask) -> Optional[Chapter]:
    # planner tasks are not cascaded on chapter deletion, so this can be None
    return state.chapter_by_id(task.chapter_id)
