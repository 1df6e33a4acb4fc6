"""
Standardized error handling utilities for Liquid Law.

This module provides the custom exception classes raised by the law core and a
helper that renders any exception into a consistent, loggable payload.
"""

from typing import Any, Dict, Optional

from utils.audit_logger import AuditEventType, audit_logger


# Custom exception classes for domain-specific errors
class LiquidLawError(Exception):
    """Base exception for all Liquid Law errors."""

    def __init__(self, message: str, error_code: str = 'INTERNAL_ERROR'):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ValidationError(LiquidLawError):
    """Exception raised for input validation failures."""

    def __init__(self, message: str, error_code: str = 'VALIDATION_ERROR'):
        super().__init__(message, error_code)


class ResourceNotFoundError(LiquidLawError):
    """Exception raised when a referenced law or citizen does not exist."""

    def __init__(self, message: str, error_code: str = 'NOT_FOUND'):
        super().__init__(message, error_code)


class AlreadyRecountingError(LiquidLawError):
    """Exception raised when a law is already being recounted."""

    def __init__(self, message: str = 'Recount already started.', error_code: str = 'ALREADY_RECOUNTING'):
        super().__init__(message, error_code)


class VotingClosedError(LiquidLawError):
    """Exception raised when voting on a law has been closed."""

    def __init__(self, message: str = 'Vote cast closed for law.', error_code: str = 'VOTING_CLOSED'):
        super().__init__(message, error_code)


class PersistenceError(LiquidLawError):
    """Exception raised when the underlying store rejects a read or write."""

    def __init__(self, message: str, error_code: str = 'PERSISTENCE_ERROR'):
        super().__init__(message, error_code)


class DuplicateKeyError(PersistenceError):
    """Exception raised when a write collides with a natural-key uniqueness constraint."""

    def __init__(self, message: str, error_code: str = 'DUPLICATE_KEY'):
        super().__init__(message, error_code)


class NotificationError(LiquidLawError):
    """Exception raised when an outbound message could not be delivered."""

    def __init__(self, message: str, error_code: str = 'NOTIFICATION_ERROR'):
        super().__init__(message, error_code)


def create_error_response(
    error: Exception,
    law_id: Optional[int] = None,
    citizen_id: Optional[int] = None
) -> Dict[str, Any]:
    """
    Create a standardized error payload with logging.

    Args:
        error: The exception that occurred
        law_id: Optional law ID for logging
        citizen_id: Optional citizen ID for logging

    Returns:
        Dict with 'error' and 'error_code' keys
    """
    if isinstance(error, LiquidLawError):
        error_code = error.error_code
        message = error.message

        # Storage failures are operator-facing; domain refusals are not
        if isinstance(error, PersistenceError) and not isinstance(error, DuplicateKeyError):
            audit_logger.log_error(
                AuditEventType.ERROR_DATABASE,
                message=message,
                law_id=law_id,
                citizen_id=citizen_id,
                error_code=error_code
            )

        response = {
            'error': message,
            'error_code': error_code
        }

    else:
        error_code = 'INTERNAL_ERROR'

        audit_logger.log_error(
            AuditEventType.ERROR_APPLICATION,
            message=f'Unexpected error: {str(error)}',
            law_id=law_id,
            citizen_id=citizen_id,
            error_code=error_code,
            error_type=type(error).__name__
        )

        response = {
            'error': 'An internal error occurred. Please try again later.',
            'error_code': error_code
        }

    return response
