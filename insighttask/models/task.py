"""
Task model
"""

import uuid
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from insighttask.config.constants import DEFAULT_STATUS, DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from insighttask.utils.date_utils import parse_due_date


class TaskStatus(str, Enum):
    """Kanban columns"""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(str, Enum):
    """Task priority levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(BaseModel):
    """Task row as stored in the remote store"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    owner_id: str = Field(alias="user_id")
    title: str
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date_value(cls, value: Any) -> Optional[date]:
        return parse_due_date(value)

    @property
    def display_status(self) -> TaskStatus:
        """Status shown on the board; absent status is shown as todo"""
        return self.status or TaskStatus.TODO

    def with_status(self, status: TaskStatus) -> "Task":
        """Copy of this task with a different status"""
        return self.model_copy(update={"status": TaskStatus(status)})

    def to_record(self) -> Dict[str, Any]:
        """JSON-ready row using store column names"""
        return self.model_dump(mode="json", by_alias=True)


class TaskInput(BaseModel):
    """Task creation input from the task form"""

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date_value(cls, value: Any) -> Optional[date]:
        return parse_due_date(value)

    def to_payload(self) -> Dict[str, Any]:
        """
        Normalized column values sent to the store

        Status defaults to todo. The owner column is never part of the
        payload; it is added from the session identity.
        """
        return {
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value if self.priority else None,
            "status": (self.status or TaskStatus(DEFAULT_STATUS)).value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
        }


class TaskUpdateInput(TaskInput):
    """Task edit input; id must be a UUID"""

    id: str

    @field_validator("id")
    @classmethod
    def check_uuid(cls, value: str) -> str:
        uuid.UUID(value)
        return value
