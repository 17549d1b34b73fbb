"""
Task list reconciler

Owns the session's in-memory task collection and merges three update
sources into it: full loads, change feed events and optimistic status
edits. Merges are idempotent: duplicate inserts are absorbed by id and
updates or deletes for rows not in the collection are dropped.
"""

import asyncio
from typing import Callable, Iterable, List, Optional, Tuple
from insighttask.api.store_client import TaskStoreClient
from insighttask.config.constants import MSG_LOAD_FAILED, MSG_STATUS_UPDATE_FAILED
from insighttask.models.events import ChangeEvent, ChangeKind
from insighttask.models.session import Session
from insighttask.models.task import Task, TaskStatus
from insighttask.utils.error_handler import InsightTaskError, StoreUnavailableError
from insighttask.utils.logger import logger


Snapshot = Tuple[Task, ...]


def _unique_by_id(tasks: Iterable[Task]) -> List[Task]:
    """Drop repeated ids, keeping the first occurrence"""
    seen = set()
    unique = []
    for task in tasks:
        if task.id in seen:
            continue
        seen.add(task.id)
        unique.append(task)
    return unique


class TaskListReconciler:
    """Authoritative ordered task collection for one session"""

    def __init__(
        self,
        store: TaskStoreClient,
        session: Session,
        on_change: Optional[Callable[[Snapshot], None]] = None,
    ):
        """
        Initialize reconciler

        Args:
            store: Task store client
            session: Signed-in owner
            on_change: Called with the new snapshot after every change
        """
        self.store = store
        self.session = session
        self.on_change = on_change
        self.is_loading = False
        self.error: Optional[str] = None
        self._tasks: List[Task] = []
        self.logger = logger

    def snapshot(self) -> Snapshot:
        """Current ordered collection (read-only)"""
        return tuple(self._tasks)

    def _replace(self, tasks: List[Task]) -> None:
        self._tasks = tasks
        if self.on_change is not None:
            self.on_change(self.snapshot())

    def _index_of(self, task_id: str) -> Optional[int]:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        return None

    async def load(self) -> bool:
        """
        Replace the collection with a full fetch, newest first

        On failure the previous collection is kept and ``error`` is set.

        Returns:
            True if the fetch succeeded
        """
        self.is_loading = True
        self.error = None

        try:
            tasks = await self.store.list_tasks(self.session)
        except Exception as e:
            self.logger.error(f"[Reconciler] Failed to fetch tasks: {e}", exc_info=True)
            self.error = MSG_LOAD_FAILED
            return False
        finally:
            self.is_loading = False

        self._replace(_unique_by_id(tasks))
        self.logger.info(f"[Reconciler] Loaded {len(self._tasks)} tasks")
        return True

    def apply_remote_event(self, event: ChangeEvent) -> bool:
        """
        Merge one change feed event

        Args:
            event: Tagged change

        Returns:
            True if the collection changed
        """
        record = event.record
        index = self._index_of(record.id)

        if event.kind == ChangeKind.INSERTED:
            if index is not None:
                return False
            self._replace([record] + self._tasks)
            return True

        if event.kind == ChangeKind.UPDATED:
            if index is None:
                self.logger.debug(f"[Reconciler] Update for unknown task {record.id} dropped")
                return False
            tasks = list(self._tasks)
            tasks[index] = record
            self._replace(tasks)
            return True

        if event.kind == ChangeKind.DELETED:
            if index is None:
                return False
            self._replace(self._tasks[:index] + self._tasks[index + 1:])
            return True

        return False

    async def set_status_optimistic(self, task_id: str, new_status: TaskStatus) -> Task:
        """
        Change a task's status locally, then confirm it remotely

        The new status is visible in the snapshot before the store answers.
        If the store update fails the whole collection is restored to its
        pre-call state.

        Args:
            task_id: Task id
            new_status: Status to assign

        Returns:
            The optimistically updated task

        Raises:
            KeyError: If the task is not in the collection
            StoreUnavailableError: If the remote update failed (rolled back)
            NotAuthenticatedError: If the session was rejected (rolled back)
        """
        new_status = TaskStatus(new_status)
        index = self._index_of(task_id)
        if index is None:
            raise KeyError(task_id)

        previous = list(self._tasks)
        updated = previous[index].with_status(new_status)
        tasks = list(previous)
        tasks[index] = updated
        self._replace(tasks)

        try:
            confirmed = await self.store.update_task(
                self.session, task_id, {"status": new_status.value}
            )
            if confirmed is None:
                raise StoreUnavailableError(f"Task {task_id} was not updated")
        except Exception as e:
            self.logger.error(f"[Reconciler] Failed to update task status: {e}")
            self.error = MSG_STATUS_UPDATE_FAILED
            self._replace(previous)
            if isinstance(e, InsightTaskError):
                raise
            raise StoreUnavailableError(MSG_STATUS_UPDATE_FAILED) from e

        self.logger.debug(f"[Reconciler] Task {task_id} moved to {new_status.value}")
        return updated

    async def consume(self, queue: "asyncio.Queue[Optional[ChangeEvent]]") -> None:
        """
        Apply queued change events in order until a None sentinel arrives

        Args:
            queue: Queue fed by the change feed subscriber
        """
        while True:
            event = await queue.get()
            try:
                if event is None:
                    return
                self.apply_remote_event(event)
            finally:
                queue.task_done()
