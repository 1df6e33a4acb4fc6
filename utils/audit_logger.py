"""
Audit logging for voting operations.

This module provides structured logging for the events that change the outcome
of a law: law creation, direct votes, recounts, trust changes and outbound
notifications. Logs are formatted as JSON for easy parsing and analysis.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional

from config import Config


# Define audit event types
class AuditEventType:
    """Enumeration of audit event types."""
    # Law lifecycle
    LAW_CREATE = "law.create"
    LAW_DUPLICATE = "law.duplicate"
    VOTE_CAST = "law.vote"

    # Recount
    RECOUNT_START = "recount.start"
    RECOUNT_COMPLETE = "recount.complete"
    RECOUNT_FAILURE = "recount.failure"
    RECOUNT_REJECTED = "recount.rejected"
    RECOUNT_COMPENSATE = "recount.compensate"
    RECOUNT_RESET = "recount.reset"

    # Delegation
    TRUST_SET = "trust.set"
    TRUST_REVOKE = "trust.revoke"

    # Notifications
    NOTIFICATION_SENT = "notification.sent"
    NOTIFICATION_FAILURE = "notification.failure"

    # Errors
    ERROR_DATABASE = "error.database"
    ERROR_APPLICATION = "error.application"


class AuditLogger:
    """
    Centralized audit logger for voting events.

    Logs are structured JSON with consistent fields:
    - timestamp: ISO8601 timestamp
    - event_type: Type of event (see AuditEventType)
    - law_id: Law ID if applicable
    - citizen_id: Acting citizen if applicable
    - data: Event-specific data
    - status: success/failure
    - message: Human-readable message
    """

    def __init__(self):
        """Initialize the audit logger."""
        self.logger = logging.getLogger('audit')
        self.logger.setLevel(getattr(logging, Config.LOG_LEVEL, logging.INFO))

        if Config.AUDIT_LOG_FILE:
            handler = logging.FileHandler(Config.AUDIT_LOG_FILE)
        else:
            handler = logging.StreamHandler(sys.stdout)

        if Config.LOG_FORMAT == 'json':
            formatter = JSONFormatter()
        else:
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )

        handler.setFormatter(formatter)
        self.logger.addHandler(handler)

    def log_event(
        self,
        event_type: str,
        status: str = 'success',
        law_id: Optional[int] = None,
        citizen_id: Optional[int] = None,
        message: Optional[str] = None,
        **data
    ):
        """
        Log an audit event.

        Args:
            event_type: Type of event (use AuditEventType constants)
            status: 'success' or 'failure'
            law_id: Law ID if applicable
            citizen_id: Citizen ID if applicable
            message: Human-readable message
            **data: Additional event-specific data
        """
        event = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'event_type': event_type,
            'status': status,
        }

        if law_id is not None:
            event['law_id'] = law_id
        if citizen_id is not None:
            event['citizen_id'] = citizen_id

        if message:
            event['message'] = message

        if data:
            event['data'] = data

        if status == 'failure' or event_type.startswith('error.'):
            self.logger.warning(json.dumps(event, default=str) if Config.LOG_FORMAT == 'json' else str(event))
        else:
            self.logger.info(json.dumps(event, default=str) if Config.LOG_FORMAT == 'json' else str(event))

    # Convenience methods for common events

    def log_vote(self, law_id: int, citizen_id: int, value: str):
        """Log a direct vote."""
        self.log_event(
            AuditEventType.VOTE_CAST,
            law_id=law_id,
            citizen_id=citizen_id,
            message=f'Citizen {citizen_id} voted {value} on law {law_id}',
            value=value
        )

    def log_recount(self, law_id: int, success: bool, reason: Optional[str] = None, **details):
        """Log the outcome of a recount."""
        event_type = AuditEventType.RECOUNT_COMPLETE if success else AuditEventType.RECOUNT_FAILURE
        self.log_event(
            event_type,
            status='success' if success else 'failure',
            law_id=law_id,
            message=f'Recount {"completed" if success else "failed"} for law {law_id}',
            reason=reason,
            **details
        )

    def log_trust(self, truster_id: int, trustee_id: Optional[int]):
        """Log a trust edge change."""
        if trustee_id is None:
            self.log_event(
                AuditEventType.TRUST_REVOKE,
                citizen_id=truster_id,
                message=f'Citizen {truster_id} revoked delegation'
            )
        else:
            self.log_event(
                AuditEventType.TRUST_SET,
                citizen_id=truster_id,
                message=f'Citizen {truster_id} delegates to {trustee_id}',
                trustee_id=trustee_id
            )

    def log_error(self, event_type: str, message: str, **details):
        """Log an `AuditEventType.ERROR_*` event."""
        self.log_event(
            event_type,
            status='failure',
            message=message,
            **details
        )


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record):
        """Format log record as JSON."""
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
        }

        # If the message is already JSON (from audit logger), parse it
        try:
            message_data = json.loads(record.getMessage())
            log_data.update(message_data)
        except (json.JSONDecodeError, ValueError):
            log_data['message'] = record.getMessage()

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


# Global audit logger instance
audit_logger = AuditLogger()
