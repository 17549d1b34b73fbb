"""
Task create, update and delete actions
"""

from typing import Any, Awaitable, Callable, Dict, Type
from pydantic import BaseModel, ValidationError
from insighttask.api.store_client import TaskStoreClient
from insighttask.config.constants import MSG_CREATE_FAILED, MSG_DELETE_FAILED, MSG_UPDATE_FAILED
from insighttask.models.response import ActionResult
from insighttask.models.session import Session
from insighttask.models.task import TaskInput, TaskUpdateInput
from insighttask.utils.error_handler import (
    StoreUnavailableError,
    ValidationFailedError,
    handle_error,
)
from insighttask.utils.logger import logger


SessionProvider = Callable[[], Awaitable[Session]]


def validate_input(model: Type[BaseModel], data: Dict[str, Any]) -> BaseModel:
    """
    Validate form data against a task input model

    Raises:
        ValidationFailedError: With one message per invalid field
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise ValidationFailedError(errors) from e


class TaskActions:
    """
    Validated task mutations for the signed-in owner

    Results are returned, never raised. A successful mutation needs no
    local patch: its echo arrives through the change feed.
    """

    def __init__(self, store: TaskStoreClient, get_session: SessionProvider):
        """
        Initialize task actions

        Args:
            store: Task store client
            get_session: Returns the current session or raises
                NotAuthenticatedError
        """
        self.store = store
        self.get_session = get_session
        self.logger = logger

    async def create_task(self, data: Dict[str, Any]) -> ActionResult:
        """Create a task for the current user"""
        try:
            task_input = validate_input(TaskInput, data)
            session = await self.get_session()
            task = await self.store.create_task(session, task_input.to_payload())
            self.logger.info(f"[TaskActions] Created '{task.title}' ({task.id})")
            return ActionResult(success=True)
        except Exception as e:
            return handle_error(e, MSG_CREATE_FAILED)

    async def update_task(self, data: Dict[str, Any]) -> ActionResult:
        """Update one of the current user's tasks"""
        try:
            task_input = validate_input(TaskUpdateInput, data)
            session = await self.get_session()
            updated = await self.store.update_task(session, task_input.id, task_input.to_payload())
            if updated is None:
                raise StoreUnavailableError(f"No owned task {task_input.id}")
            self.logger.info(f"[TaskActions] Updated {task_input.id}")
            return ActionResult(success=True)
        except Exception as e:
            return handle_error(e, MSG_UPDATE_FAILED)

    async def delete_task(self, task_id: str) -> ActionResult:
        """Delete one of the current user's tasks"""
        try:
            if not task_id:
                raise ValidationFailedError(["id: Task id is required"])
            session = await self.get_session()
            if not await self.store.delete_task(session, task_id):
                raise StoreUnavailableError(f"No owned task {task_id}")
            self.logger.info(f"[TaskActions] Deleted {task_id}")
            return ActionResult(success=True)
        except Exception as e:
            return handle_error(e, MSG_DELETE_FAILED)
