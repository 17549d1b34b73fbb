"""
Tests for derived task views
"""

from datetime import date, datetime
from unittest.mock import patch
from insighttask.models.task import TaskStatus
from insighttask.services.task_views import (
    due_dates,
    due_on_date,
    due_today,
    filter_tasks_by_query,
    resolve_drop_status,
    task_counts,
    tasks_by_status,
)
from fakes import make_task


def test_filter_matches_description(sample_tasks):
    """Test that the query matches descriptions"""
    result = filter_tasks_by_query(sample_tasks, "outline")
    assert [task.id for task in result] == ["t1"]


def test_filter_is_case_insensitive(sample_tasks):
    assert [task.id for task in filter_tasks_by_query(sample_tasks, "BUILD ui")] == ["t2"]


def test_filter_trims_query(sample_tasks):
    assert [task.id for task in filter_tasks_by_query(sample_tasks, "  plan  ")] == ["t1"]


def test_filter_empty_query_returns_input_unchanged(sample_tasks):
    """Test that empty and whitespace queries return the exact input"""
    assert filter_tasks_by_query(sample_tasks, "") is sample_tasks
    assert filter_tasks_by_query(sample_tasks, "   \t") is sample_tasks


def test_filter_results_are_subset_containing_query():
    tasks = [
        make_task(id="a", title="Call bank", description="ask about fees"),
        make_task(id="b", title="Fees report", description=None),
        make_task(id="c", title="Groceries", description="milk"),
    ]

    result = filter_tasks_by_query(tasks, "fees")

    assert [task.id for task in result] == ["a", "b"]
    for task in result:
        assert "fees" in f"{task.title} {task.description or ''}".lower()


def test_filter_does_not_match_none_description_text():
    tasks = [make_task(id="a", title="Plan", description=None)]
    assert filter_tasks_by_query(tasks, "none") == []


def test_resolve_drop_status_on_column(sample_tasks):
    assert resolve_drop_status(sample_tasks, "in_progress") == "in_progress"
    assert resolve_drop_status(sample_tasks, "todo") == TaskStatus.TODO
    assert resolve_drop_status(sample_tasks, "done") == TaskStatus.DONE


def test_resolve_drop_status_on_task(sample_tasks):
    assert resolve_drop_status(sample_tasks, "t2") == "done"


def test_resolve_drop_status_on_task_without_status():
    tasks = [make_task(id="t9", status=None)]
    assert resolve_drop_status(tasks, "t9") == TaskStatus.TODO


def test_resolve_drop_status_unknown(sample_tasks):
    assert resolve_drop_status(sample_tasks, "missing") is None
    assert resolve_drop_status(sample_tasks, "") is None
    assert resolve_drop_status(sample_tasks, None) is None


def test_due_on_date_compares_calendar_day():
    tasks = [
        make_task(id="a", due_date="2026-10-19"),
        make_task(id="b", due_date="2026-10-20"),
        make_task(id="c", due_date=None),
    ]

    assert [task.id for task in due_on_date(tasks, date(2026, 10, 19))] == ["a"]
    assert [task.id for task in due_on_date(tasks, datetime(2026, 10, 20, 23, 59))] == ["b"]


def test_due_today_uses_local_date():
    tasks = [
        make_task(id="a", due_date="2026-10-19"),
        make_task(id="b", due_date="2026-10-18"),
    ]

    with patch("insighttask.services.task_views.get_current_date", return_value=date(2026, 10, 19)):
        assert [task.id for task in due_today(tasks)] == ["a"]

    assert [task.id for task in due_today(tasks, today=date(2026, 10, 18))] == ["b"]


def test_tasks_by_status_buckets_in_order():
    tasks = [
        make_task(id="a", status="done"),
        make_task(id="b", status=None),
        make_task(id="c", status="in_progress"),
        make_task(id="d", status="todo"),
    ]

    columns = tasks_by_status(tasks)

    assert list(columns) == [TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.DONE]
    assert [task.id for task in columns[TaskStatus.TODO]] == ["b", "d"]
    assert [task.id for task in columns[TaskStatus.DONE]] == ["a"]
    assert task_counts(tasks) == {TaskStatus.TODO: 2, TaskStatus.IN_PROGRESS: 1, TaskStatus.DONE: 1}


def test_due_dates_are_distinct_and_sorted():
    tasks = [
        make_task(id="a", due_date="2026-10-21"),
        make_task(id="b", due_date="2026-10-19"),
        make_task(id="c", due_date="2026-10-21"),
        make_task(id="d"),
    ]

    assert due_dates(tasks) == [date(2026, 10, 19), date(2026, 10, 21)]
