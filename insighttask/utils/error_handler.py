"""
Error handling utilities
"""

from typing import List, Optional
from insighttask.config.constants import MSG_GENERIC, MSG_NOT_AUTHENTICATED
from insighttask.models.response import ActionResult
from insighttask.utils.logger import logger


class InsightTaskError(Exception):
    """Base exception for application errors"""
    pass


class NotAuthenticatedError(InsightTaskError):
    """No valid session for the caller"""
    def __init__(self, message: str = MSG_NOT_AUTHENTICATED):
        self.message = message
        super().__init__(self.message)


class StoreUnavailableError(InsightTaskError):
    """Remote store fetch or mutation failed"""
    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ValidationFailedError(InsightTaskError):
    """Input violates task field constraints"""
    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class ExternalServiceError(InsightTaskError):
    """Completion service failed or returned malformed content"""
    pass


class SubscriptionError(InsightTaskError):
    """Live change feed could not be established"""
    pass


def handle_error(error: Exception, fallback: Optional[str] = None) -> ActionResult:
    """
    Log error and convert it to a failed result with a user-facing message

    Args:
        error: Exception to handle
        fallback: Message used for store and external service failures

    Returns:
        ActionResult with success=False
    """
    if isinstance(error, NotAuthenticatedError):
        logger.warning(f"Not authenticated: {error}")
        return ActionResult(success=False, error=error.message)

    if isinstance(error, ValidationFailedError):
        logger.info(f"Validation failed: {error}")
        return ActionResult(success=False, error=str(error))

    logger.error(f"Error occurred: {error}", exc_info=True)

    if isinstance(error, (StoreUnavailableError, ExternalServiceError)):
        return ActionResult(success=False, error=fallback or MSG_GENERIC)

    # Unexpected defect
    return ActionResult(success=False, error=MSG_GENERIC)


def format_error_message(error: Exception, fallback: Optional[str] = None) -> str:
    """
    Format error message for user

    Args:
        error: Exception to format
        fallback: Message used for store and external service failures

    Returns:
        User-friendly error message
    """
    return handle_error(error, fallback).error or MSG_GENERIC
