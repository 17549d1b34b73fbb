"""
Kanban board service
"""

from typing import Optional
from insighttask.models.task import TaskStatus
from insighttask.services.task_reconciler import TaskListReconciler
from insighttask.services.task_views import resolve_drop_status
from insighttask.utils.error_handler import InsightTaskError
from insighttask.utils.logger import logger


class BoardService:
    """Drag-and-drop status transitions on the board"""

    def __init__(self, reconciler: TaskListReconciler):
        """
        Initialize board service

        Args:
            reconciler: Session task list
        """
        self.reconciler = reconciler
        self.logger = logger

    async def handle_drop(self, active_id: str, over_id: Optional[str]) -> Optional[TaskStatus]:
        """
        Move a dragged card to the column it was dropped on

        Args:
            active_id: Id of the dragged task
            over_id: Column id or id of the card under the pointer

        Returns:
            The new status, or None if nothing changed or the store
            rejected the move (the reconciler has rolled back)
        """
        tasks = self.reconciler.snapshot()
        current = next((task for task in tasks if task.id == active_id), None)
        next_status = resolve_drop_status(tasks, over_id)

        if current is None or next_status is None or current.display_status == next_status:
            return None

        try:
            await self.reconciler.set_status_optimistic(active_id, next_status)
        except InsightTaskError as e:
            self.logger.warning(f"[Board] Move of {active_id} to {next_status.value} rolled back: {e}")
            return None

        return next_status
