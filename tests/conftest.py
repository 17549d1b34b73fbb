"""
Pytest configuration and fixtures
"""

import os

os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
from unittest.mock import AsyncMock, MagicMock
from insighttask.api.store_client import TaskStoreClient
from insighttask.models.session import Session
from insighttask.services.task_reconciler import TaskListReconciler
from fakes import make_task


@pytest.fixture
def session():
    """Signed-in owner"""
    return Session(access_token="token-1", user_id="user-1")


@pytest.fixture
def sample_tasks():
    """Two tasks, newest first"""
    return [
        make_task(id="t1", title="Plan week", description="Outline priorities", status="todo"),
        make_task(
            id="t2",
            title="Build UI",
            description=None,
            status="done",
            created_at="2026-10-17T09:00:00+00:00",
        ),
    ]


@pytest.fixture
def mock_store(sample_tasks):
    """Mock task store client"""
    store = MagicMock(spec=TaskStoreClient)
    store.list_tasks = AsyncMock(return_value=list(sample_tasks))
    store.create_task = AsyncMock(return_value=sample_tasks[0])
    store.update_task = AsyncMock(return_value=sample_tasks[0])
    store.delete_task = AsyncMock(return_value=True)
    store.get_user = AsyncMock(return_value=Session(access_token="token-1", user_id="user-1"))
    return store


@pytest.fixture
def reconciler(mock_store, session):
    """Reconciler with mocked store"""
    return TaskListReconciler(mock_store, session)
