"""
Plain-text rendering of task views
"""

from datetime import date
from typing import Sequence
from insighttask.models.task import Task, TaskStatus
from insighttask.services.task_views import task_counts, tasks_by_status


COLUMN_TITLES = {
    TaskStatus.TODO: "To do",
    TaskStatus.IN_PROGRESS: "In progress",
    TaskStatus.DONE: "Done",
}


def format_task_line(task: Task) -> str:
    """
    Format one task as a single line

    Args:
        task: Task to format

    Returns:
        Line like "- Plan week [high] (due 2026-10-19)"
    """
    line = f"- {task.title}"
    if task.priority:
        line += f" [{task.priority.value}]"
    if task.due_date:
        line += f" (due {task.due_date.isoformat()})"
    return line


def format_board(tasks: Sequence[Task]) -> str:
    """Render the three Kanban columns with their counts"""
    counts = task_counts(tasks)
    sections = []
    for status, column in tasks_by_status(tasks).items():
        header = f"{COLUMN_TITLES[status]} ({counts[status]})"
        lines = [format_task_line(task) for task in column] or ["  (empty)"]
        sections.append("\n".join([header] + lines))
    return "\n\n".join(sections)


def format_task_list(title: str, tasks: Sequence[Task], empty_message: str) -> str:
    """Render a titled task list such as My Day"""
    if not tasks:
        return f"{title}\n{empty_message}"
    return "\n".join([title] + [f"{format_task_line(task)} {{{task.display_status.value}}}" for task in tasks])


def format_due_markers(dates: Sequence[date]) -> str:
    """Render the calendar's due-date markers on one line"""
    if not dates:
        return "Due dates: none"
    return "Due dates: " + ", ".join(day.isoformat() for day in dates)
