"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.

Failures raised before any optimistic mutation (ValidationFailure,
NotFoundFailure) propagate to the caller. Remote failures (LoadFailure,
CreateFailure, UpdateFailure, DeleteFailure) are produced after the local
state has been rolled back and are reported through the operation result
and the notification channel.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationFailure(ApplicationError):
    """Raised when a draft or change-set is rejected before any remote call."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class NotFoundFailure(ApplicationError):
    """Raised when an update or delete targets a note absent from local state."""

    def __init__(self, message: str = "Note not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class StoreError(ApplicationError):
    """Raised by remote store clients when a backend call fails."""

    def __init__(self, message: str = "Remote store error", status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message, code="SYS_STORE_ERROR")


class RemoteFailure(ApplicationError):
    """A remote call failed and local optimistic state was rolled back."""

    operation = "remote"
    reason = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason, code="SYS_EXTERNAL_SERVICE_ERROR")


class LoadFailure(RemoteFailure):
    """Fetching the note collection failed."""

    operation = "load"
    reason = "Failed to load notes"


class CreateFailure(RemoteFailure):
    """Creating a note on the remote store failed."""

    operation = "create"
    reason = "Create failed"


class UpdateFailure(RemoteFailure):
    """Saving changes to a note failed."""

    operation = "update"
    reason = "Save failed"


class DeleteFailure(RemoteFailure):
    """Deleting a note failed."""

    operation = "delete"
    reason = "Delete failed"
