"""
Task store client (Supabase REST dialect)

Every request is sent with the caller's own access token so the store's
owner-matching row policy applies. Queries additionally filter on the
owner column; the client never uses a service key.
"""

from datetime import date
from typing import Any, Dict, List, Optional
import httpx
from pydantic import ValidationError
from insighttask.api.base_client import BaseAPIClient
from insighttask.config.constants import AUTH_PATH, REST_PATH, TASKS_TABLE
from insighttask.models.session import Session
from insighttask.models.task import Task, TaskStatus
from insighttask.utils.error_handler import NotAuthenticatedError, StoreUnavailableError
from insighttask.utils.logger import logger


def _eq(value: Any) -> str:
    """PostgREST equality filter"""
    return f"eq.{value}"


class TaskStoreClient(BaseAPIClient):
    """Client for the tasks table and the auth user endpoint"""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize store client

        Args:
            base_url: Project URL (e.g. https://xyz.supabase.co)
            api_key: Public anon key
            transport: Optional httpx transport
        """
        super().__init__(base_url, transport=transport)
        self.api_key = api_key
        self.logger = logger

    def _get_headers(self, access_token: str, prefer: Optional[str] = None) -> Dict[str, str]:
        """Get request headers with authentication"""
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _call(self, method: str, endpoint: str, **kwargs) -> Any:
        """Perform a request and map failures onto store errors"""
        try:
            return await self._request(method, endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (401, 403):
                raise NotAuthenticatedError() from e
            raise StoreUnavailableError(
                f"Store request failed: {method} {endpoint}",
                error_code=str(e.response.status_code),
            ) from e
        except httpx.RequestError as e:
            raise StoreUnavailableError(f"Store unreachable: {e}") from e

    @staticmethod
    def _parse_rows(rows: Any) -> List[Task]:
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise StoreUnavailableError("Unexpected store response shape")
        try:
            return [Task.model_validate(row) for row in rows]
        except ValidationError as e:
            raise StoreUnavailableError(f"Malformed task row: {e}") from e

    async def get_user(self, access_token: Optional[str]) -> Session:
        """
        Resolve the session for an access token

        Args:
            access_token: JWT issued by the auth service

        Returns:
            Session for the signed-in user

        Raises:
            NotAuthenticatedError: If the token is missing or rejected
            StoreUnavailableError: If the auth endpoint cannot be reached
        """
        if not access_token:
            raise NotAuthenticatedError()

        data = await self._call(
            "GET",
            f"{AUTH_PATH}/user",
            headers=self._get_headers(access_token),
        )

        user_id = (data or {}).get("id")
        if not user_id:
            raise NotAuthenticatedError()

        self.logger.debug(f"[Store] Resolved session for user {user_id}")
        return Session(access_token=access_token, user_id=user_id)

    async def list_tasks(
        self,
        session: Session,
        status: Optional[TaskStatus] = None,
        due_date: Optional[date] = None,
    ) -> List[Task]:
        """
        Fetch the owner's tasks, newest first

        Args:
            session: Caller session
            status: Optional status filter
            due_date: Optional due date filter

        Returns:
            List of tasks ordered by created_at descending
        """
        params = {
            "select": "*",
            "user_id": _eq(session.user_id),
            "order": "created_at.desc",
        }
        if status is not None:
            params["status"] = _eq(TaskStatus(status).value)
        if due_date is not None:
            params["due_date"] = _eq(due_date.isoformat())

        rows = await self._call(
            "GET",
            f"{REST_PATH}/{TASKS_TABLE}",
            headers=self._get_headers(session.access_token),
            params=params,
        )
        tasks = self._parse_rows(rows)
        self.logger.debug(f"[Store] Fetched {len(tasks)} tasks")
        return tasks

    async def create_task(self, session: Session, payload: Dict[str, Any]) -> Task:
        """
        Insert a task owned by the caller

        Args:
            session: Caller session
            payload: Normalized column values (without owner)

        Returns:
            Created task with generated id and created_at
        """
        rows = await self._call(
            "POST",
            f"{REST_PATH}/{TASKS_TABLE}",
            headers=self._get_headers(session.access_token, prefer="return=representation"),
            json_data={**payload, "user_id": session.user_id},
        )
        tasks = self._parse_rows(rows)
        if not tasks:
            raise StoreUnavailableError("Insert returned no row")

        self.logger.info(f"[Store] Created task {tasks[0].id}")
        return tasks[0]

    async def update_task(
        self,
        session: Session,
        task_id: str,
        fields: Dict[str, Any],
    ) -> Optional[Task]:
        """
        Update an owned task

        Args:
            session: Caller session
            task_id: Task id
            fields: Columns to set

        Returns:
            Updated task, or None if no owned row matched
        """
        fields = {key: value for key, value in fields.items() if key not in ("id", "user_id")}
        rows = await self._call(
            "PATCH",
            f"{REST_PATH}/{TASKS_TABLE}",
            headers=self._get_headers(session.access_token, prefer="return=representation"),
            params={"id": _eq(task_id), "user_id": _eq(session.user_id)},
            json_data=fields,
        )
        tasks = self._parse_rows(rows)
        if not tasks:
            self.logger.warning(f"[Store] Update matched no owned row: {task_id}")
            return None

        self.logger.info(f"[Store] Updated task {task_id}: {sorted(fields)}")
        return tasks[0]

    async def delete_task(self, session: Session, task_id: str) -> bool:
        """
        Delete an owned task

        Args:
            session: Caller session
            task_id: Task id

        Returns:
            True if an owned row was deleted
        """
        rows = await self._call(
            "DELETE",
            f"{REST_PATH}/{TASKS_TABLE}",
            headers=self._get_headers(session.access_token, prefer="return=representation"),
            params={"id": _eq(task_id), "user_id": _eq(session.user_id)},
        )
        deleted = bool(self._parse_rows(rows))
        self.logger.info(f"[Store] Deleted task {task_id}: {deleted}")
        return deleted
