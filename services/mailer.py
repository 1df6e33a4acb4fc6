"""
Outbound notification delivery.

The core sends a message as four fields: a recipient (address and display
name), a subject and a body. Delivery is fire-and-forget: a failure is reported
to the caller as a NotificationError and never retried here.

MandrillMailer delivers through the Mandrill transactional email HTTP API.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, NamedTuple

import requests

from config import Config
from utils.audit_logger import AuditEventType, audit_logger
from utils.error_handling import NotificationError

log = logging.getLogger(__name__)


class Recipient(NamedTuple):
    """Named tuple for a message recipient."""
    address: str
    display_name: str

    @classmethod
    def for_citizen(cls, citizen) -> 'Recipient':
        return cls(address=citizen.email, display_name=citizen.full_name)


class Mailer(ABC):
    """Contract for sending a message to one recipient."""

    @abstractmethod
    def send_message(self, recipient: Recipient, subject: str, body: str) -> Any:
        """Deliver the message or raise NotificationError."""


class MandrillMailer(Mailer):
    """
    Mailer posting to Mandrill's `messages/send.json` endpoint.

    Args:
        api_key: Mandrill API key
        from_email: Sender address
        from_name: Sender display name
        api_url: Base URL of the Mandrill API
        timeout: Request timeout in seconds
    """
    # Per-recipient statuses Mandrill reports for messages it will not deliver
    FAILED_STATUSES = ('rejected', 'invalid')

    def __init__(self, api_key: str, from_email: str, from_name: str,
                 api_url: str = 'https://mandrillapp.com/api/1.0', timeout: int = 30):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout

    @classmethod
    def from_config(cls, config_class=Config) -> 'MandrillMailer':
        return cls(
            api_key=config_class.MANDRILL_API_KEY,
            from_email=config_class.MANDRILL_FROM_EMAIL,
            from_name=config_class.MANDRILL_FROM_NAME,
            api_url=config_class.MANDRILL_API_URL,
            timeout=config_class.MANDRILL_TIMEOUT,
        )

    def build_payload(self, recipient: Recipient, subject: str, body: str) -> Dict[str, Any]:
        message = {
            'html': body,
            'text': body,
            'subject': subject,
            'from_email': self.from_email,
            'from_name': self.from_name,
            'to': [{
                'email': recipient.address,
                'name': recipient.display_name,
            }],
            'auto_text': True,
        }
        return {
            'key': self.api_key,
            'message': message,
            'async': False,
            'ip_pool': 'Main Pool',
            'send_at': None,
        }

    def send_message(self, recipient: Recipient, subject: str, body: str) -> List[Dict[str, Any]]:
        """
        Send one message through Mandrill.

        Returns:
            Mandrill's per-recipient results

        Raises:
            NotificationError: on transport errors, non-2xx responses, or a
                recipient Mandrill rejected
        """
        log.debug('Sending email to %s, subject %s', recipient.address, subject)
        payload = self.build_payload(recipient, subject, body)

        try:
            response = requests.post(f"{self.api_url}/messages/send.json", json=payload, timeout=self.timeout)
            response.raise_for_status()
            results = response.json()
        except requests.RequestException as e:
            self._report_failure(recipient, subject, f"Mandrill request failed: {e}")
            raise NotificationError(f"Could not send message to {recipient.address}: {e}") from e
        except ValueError as e:
            self._report_failure(recipient, subject, "Mandrill returned a non-JSON response")
            raise NotificationError(f"Unexpected response from Mandrill: {e}") from e

        failed = [r for r in results if r.get('status') in self.FAILED_STATUSES]
        if failed:
            reason = failed[0].get('reject_reason') or failed[0].get('status')
            self._report_failure(recipient, subject, reason)
            raise NotificationError(f"Message to {recipient.address} was {failed[0].get('status')}: {reason}")

        audit_logger.log_event(
            AuditEventType.NOTIFICATION_SENT,
            message=f'Message sent to {recipient.address}',
            subject=subject
        )
        return results

    def _report_failure(self, recipient: Recipient, subject: str, reason: str):
        log.warning('A mandrill error occurred: %s', reason)
        audit_logger.log_event(
            AuditEventType.NOTIFICATION_FAILURE,
            status='failure',
            message=f'Message to {recipient.address} failed: {reason}',
            subject=subject
        )
