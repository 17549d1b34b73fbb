"""
Derived task views

Pure functions over a reconciler snapshot; safe to recompute on every
render.
"""

from collections import OrderedDict
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence, Union
from insighttask.config.constants import STATUS_COLUMNS
from insighttask.models.task import Task, TaskStatus
from insighttask.utils.date_utils import get_current_date, is_same_day


def filter_tasks_by_query(tasks: Sequence[Task], query: str) -> Sequence[Task]:
    """
    Filter tasks by a case-insensitive search over title and description

    An empty or whitespace-only query returns the input unchanged.
    """
    normalized_query = (query or "").strip().lower()

    if not normalized_query:
        return tasks

    return [
        task
        for task in tasks
        if normalized_query in f"{task.title} {task.description or ''}".lower()
    ]


def due_on_date(tasks: Sequence[Task], day: Union[date, datetime]) -> List[Task]:
    """Tasks due on the given calendar day"""
    return [task for task in tasks if is_same_day(task.due_date, day)]


def due_today(tasks: Sequence[Task], today: Optional[date] = None) -> List[Task]:
    """Tasks due on today's local calendar date (My Day)"""
    return due_on_date(tasks, today or get_current_date())


def resolve_drop_status(tasks: Sequence[Task], over_id: Optional[str]) -> Optional[TaskStatus]:
    """
    Resolve the status a dropped card should take

    Args:
        tasks: Current tasks
        over_id: Column id or id of the card it was dropped on

    Returns:
        The column's status, the target card's status, or None when the
        target is unknown
    """
    if not over_id:
        return None

    if over_id in STATUS_COLUMNS:
        return TaskStatus(over_id)

    for task in tasks:
        if task.id == over_id:
            return task.display_status

    return None


def tasks_by_status(tasks: Sequence[Task]) -> "OrderedDict[TaskStatus, List[Task]]":
    """Bucket tasks into board columns, keeping snapshot order within each"""
    columns: "OrderedDict[TaskStatus, List[Task]]" = OrderedDict(
        (TaskStatus(column), []) for column in STATUS_COLUMNS
    )
    for task in tasks:
        columns[task.display_status].append(task)
    return columns


def task_counts(tasks: Sequence[Task]) -> Dict[TaskStatus, int]:
    """Number of tasks per column"""
    return {status: len(column) for status, column in tasks_by_status(tasks).items()}


def due_dates(tasks: Sequence[Task]) -> List[date]:
    """Distinct due dates, ascending (calendar markers)"""
    return sorted({task.due_date for task in tasks if task.due_date is not None})
