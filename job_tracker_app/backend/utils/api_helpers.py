"""
Common API utilities and helper functions shared across API modules.
"""
import logging
from typing import Optional

from fastapi import HTTPException, status

from ..exceptions import (
    LinkError,
    NotFoundError,
    PartialCompoundFailure,
    StoreError,
    TrackerError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def handle_service_error(error: Exception, action: str) -> HTTPException:
    """
    Standardized translation of service layer exceptions.

    Store failures only ever expose a generic message; the cause has already
    been logged by the service.

    Args:
        error: The exception that occurred
        action: What the caller was doing, e.g. "load applications"

    Returns:
        HTTPException with appropriate status code and message
    """
    if isinstance(error, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, (NotFoundError, LinkError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, PartialCompoundFailure):
        logger.error("%s stopped at step %s (completed: %s)", action, error.step, error.completed_steps)
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}")
    if isinstance(error, StoreError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}")
    if isinstance(error, TrackerError):
        logger.error("Unhandled tracker error during %s: %s", action, error)
    else:
        logger.exception("Unexpected error during %s", action)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}")


def check_resource_exists(resource: Optional[object], resource_type: str) -> None:
    """
    Raise a 404 if a resource lookup came back empty.

    Args:
        resource: The resource to check
        resource_type: Type of resource for error message

    Raises:
        HTTPException: If resource is None
    """
    if resource is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource_type} not found"
        )
