"""
Notification Schemas.

One Notification is emitted for every remote operation that completes,
successfully or not. Labels are the short user-facing texts a UI shows
as a toast.

Usage:
    from notekeeper.events.schemas import Notification

    event = Notification.success("create", note_id=note.id)
    event = Notification.failure(CreateFailure())
"""

from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field

from notekeeper.core.exceptions import RemoteFailure
from notekeeper.core.utils import utc_now

Operation = Literal["load", "create", "update", "delete"]

SUCCESS_TITLES: dict[str, str] = {
    "load": "Notes loaded",
    "create": "Note created",
    "update": "Saved",
    "delete": "Deleted",
}

FAILURE_TITLE = "Error"


class Notification(BaseModel):
    """Envelope for a completed operation.

    Fields:
        event_id: Unique event identifier (auto-generated UUID)
        timestamp: ISO 8601 UTC timestamp
        operation: Which manager operation completed
        status: success or failure
        title: Short label (``Note created``, ``Saved``, ``Deleted``, ``Error``)
        description: Failure reason, when there is one
        note_id: Note the operation targeted, when there is one
    """

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    operation: Operation
    status: Literal["success", "failure"]
    title: str
    description: str | None = None
    note_id: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @classmethod
    def success(cls, operation: Operation, note_id: str | None = None) -> "Notification":
        return cls(
            operation=operation,
            status="success",
            title=SUCCESS_TITLES[operation],
            note_id=note_id,
        )

    @classmethod
    def failure(cls, error: RemoteFailure, note_id: str | None = None) -> "Notification":
        return cls(
            operation=error.operation,
            status="failure",
            title=FAILURE_TITLE,
            description=error.reason,
            note_id=note_id,
        )
