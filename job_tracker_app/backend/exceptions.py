"""
Error taxonomy shared by the tracker services.

Services raise these; the API layer turns them into HTTP responses through
``utils.api_helpers.handle_service_error``.
"""
from typing import List, Optional, Sequence


class TrackerError(Exception):
    """Base class for every error raised by the tracker services."""


class ValidationError(TrackerError):
    """A local check failed before anything was sent to the store."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class StoreError(TrackerError):
    """The data store rejected or failed an operation."""

    def __init__(self, action: str, message: Optional[str] = None):
        super().__init__(message or f"Failed to {action}")
        self.action = action


class NotFoundError(StoreError):
    """The requested row does not exist or belongs to another user."""

    def __init__(self, resource: str):
        super().__init__(f"load {resource.lower()}", f"{resource} not found")
        self.resource = resource


class LinkError(StoreError):
    """A relationship referenced an application or resume the user does not own."""

    def __init__(self, resource: str, resource_id: int):
        super().__init__("link records", f"{resource} {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class PartialCompoundFailure(StoreError):
    """A multi-step write failed partway; the completed steps were rolled back."""

    def __init__(self, action: str, step: str, completed_steps: Sequence[str]):
        super().__init__(action, f"Failed to {action}: step '{step}' failed")
        self.step = step
        self.completed_steps: List[str] = list(completed_steps)
