from unittest.mock import MagicMock, patch

import pytest
import requests

from config import TestingConfig
from models.citizen import Citizen
from services.mailer import MandrillMailer, Recipient
from utils.error_handling import NotificationError

RECIPIENT = Recipient(address='ada@example.org', display_name='Ada Lovelace')


@pytest.fixture
def mailer():
    return MandrillMailer(api_key='key-123', from_email='no-reply@liquidlaw.org', from_name='Liquid Law',
                          api_url='https://mandrill.test/api/1.0/', timeout=5)


def mandrill_response(results, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = results
    return response


def test_payload(mailer):
    payload = mailer.build_payload(RECIPIENT, 'Law closed', '<p>Results are in</p>')

    assert payload['key'] == 'key-123'
    assert payload['async'] is False
    assert payload['ip_pool'] == 'Main Pool'
    assert payload['send_at'] is None
    message = payload['message']
    assert message['html'] == message['text'] == '<p>Results are in</p>'
    assert message['subject'] == 'Law closed'
    assert message['from_email'] == 'no-reply@liquidlaw.org'
    assert message['from_name'] == 'Liquid Law'
    assert message['to'] == [{'email': 'ada@example.org', 'name': 'Ada Lovelace'}]


def test_send_message(mailer):
    results = [{'email': 'ada@example.org', 'status': 'sent', '_id': 'abc'}]
    with patch('services.mailer.requests.post', return_value=mandrill_response(results)) as mock_post:
        assert mailer.send_message(RECIPIENT, 'Law closed', 'Results are in') == results

    url = mock_post.call_args.args[0]
    assert url == 'https://mandrill.test/api/1.0/messages/send.json'
    assert mock_post.call_args.kwargs['timeout'] == 5
    assert mock_post.call_args.kwargs['json']['message']['subject'] == 'Law closed'


def test_queued_is_not_a_failure(mailer):
    results = [{'email': 'ada@example.org', 'status': 'queued'}]
    with patch('services.mailer.requests.post', return_value=mandrill_response(results)):
        assert mailer.send_message(RECIPIENT, 's', 'b') == results


def test_rejected_recipient(mailer):
    results = [{'email': 'ada@example.org', 'status': 'rejected', 'reject_reason': 'hard-bounce'}]
    with patch('services.mailer.requests.post', return_value=mandrill_response(results)):
        with pytest.raises(NotificationError, match='hard-bounce'):
            mailer.send_message(RECIPIENT, 's', 'b')


def test_transport_error(mailer):
    with patch('services.mailer.requests.post', side_effect=requests.ConnectionError('unreachable')):
        with pytest.raises(NotificationError) as excinfo:
            mailer.send_message(RECIPIENT, 's', 'b')
    assert excinfo.value.error_code == 'NOTIFICATION_ERROR'


def test_http_error(mailer):
    response = mandrill_response({'status': 'error', 'message': 'Invalid API key'}, status_code=500)
    response.raise_for_status.side_effect = requests.HTTPError('500 Server Error')
    with patch('services.mailer.requests.post', return_value=response) as mock_post:
        with pytest.raises(NotificationError):
            mailer.send_message(RECIPIENT, 's', 'b')
    # Delivery failures are reported, never retried
    assert mock_post.call_count == 1


def test_non_json_response(mailer):
    response = mandrill_response(None)
    response.json.side_effect = ValueError('No JSON object could be decoded')
    with patch('services.mailer.requests.post', return_value=response):
        with pytest.raises(NotificationError, match='Unexpected response'):
            mailer.send_message(RECIPIENT, 's', 'b')


def test_from_config():
    mailer = MandrillMailer.from_config(TestingConfig)
    assert mailer.api_key == 'test-mandrill-key'
    assert mailer.api_url == TestingConfig.MANDRILL_API_URL.rstrip('/')
    assert mailer.timeout == TestingConfig.MANDRILL_TIMEOUT


def test_recipient_for_citizen():
    citizen = Citizen(email='ada@example.org', full_name='Ada Lovelace')
    assert Recipient.for_citizen(citizen) == RECIPIENT
