"""
Change feed event model
"""

from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, ValidationError
from insighttask.models.task import Task


class ChangeKind(str, Enum):
    """Row-level change kinds delivered by the feed"""
    INSERTED = "inserted"
    UPDATED = "updated"
    DELETED = "deleted"


_POSTGRES_TYPES = {
    "INSERT": ChangeKind.INSERTED,
    "UPDATE": ChangeKind.UPDATED,
    "DELETE": ChangeKind.DELETED,
}


class ChangeEvent(BaseModel):
    """Tagged change: post-image for inserts and updates, pre-image for deletes"""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    record: Task

    @classmethod
    def from_postgres_change(cls, data: Dict[str, Any]) -> Optional["ChangeEvent"]:
        """
        Build an event from a realtime postgres_changes payload

        Args:
            data: Payload with "type" (INSERT/UPDATE/DELETE), "record"
                and "old_record"

        Returns:
            ChangeEvent, or None for unknown types and missing or
            unparseable rows
        """
        kind = _POSTGRES_TYPES.get(str(data.get("type", "")).upper())
        if kind is None:
            return None

        row = data.get("old_record") if kind == ChangeKind.DELETED else data.get("record")
        if not row or not row.get("id"):
            return None

        # Delete pre-images only carry the primary key unless the table
        # uses REPLICA IDENTITY FULL
        if kind == ChangeKind.DELETED:
            row = {"user_id": "", "title": "", **row}

        try:
            return cls(kind=kind, record=Task.model_validate(row))
        except ValidationError:
            return None
