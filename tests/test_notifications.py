import os
import unittest
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from notification.channels import (
    EmailChannel,
    NotificationChannel,
    NotificationChannelFactory,
    SmsChannel,
)
from notification.message_builder import StatusMessageBuilder, StatusNotificationContent
from notification.service import NotificationService

SMTP_ENV = {
    'SMTP_SERVER': 'smtp.example.com',
    'SMTP_PORT': '587',
    'SMTP_USERNAME': 'mailer',
    'SMTP_PASSWORD': 'secret',
    'FROM_EMAIL': 'jobs@example.com',
    'NOTIFICATION_DRY_RUN': 'false',
}
TWILIO_ENV = {
    'TWILIO_ACCOUNT_SID': 'AC123',
    'TWILIO_AUTH_TOKEN': 'token',
    'TWILIO_PHONE_NUMBER': '+15550000000',
    'NOTIFICATION_DRY_RUN': 'false',
}


def candidate(**overrides):
    fields = dict(
        id=uuid.uuid4(), name="Jane Doe", username="jane",
        email="jane@example.com", phone="(555) 123-4567",
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestStatusMessageBuilder(unittest.TestCase):

    def setUp(self):
        self.content = StatusNotificationContent(
            candidate_name="Jane", job_title="Backend Engineer", company="Acme", status="shortlisted"
        )

    def test_sms_text(self):
        text = StatusMessageBuilder.sms_text(self.content)
        self.assertIn("Congratulations Jane", text)
        self.assertIn("Backend Engineer at Acme", text)

    def test_unknown_status_falls_back(self):
        content = self.content.model_copy(update={'status': 'on-hold'})
        self.assertEqual(
            StatusMessageBuilder.sms_text(content),
            "Your application status has been updated to on-hold"
        )
        self.assertEqual(
            StatusMessageBuilder.email_subject(content),
            "Application Status Update: Backend Engineer"
        )

    def test_email_html_escapes_and_includes_note(self):
        content = self.content.model_copy(update={
            'candidate_name': "<Jane>",
            'note': "Bring ID",
            'sent_at': datetime(2024, 3, 1, tzinfo=timezone.utc),
        })
        body = StatusMessageBuilder.email_html(content)
        self.assertIn("&lt;Jane&gt;", body)
        self.assertIn("Bring ID", body)
        self.assertIn("03/01/2024", body)
        self.assertIn("Shortlisted", body)

    def test_format_phone(self):
        self.assertEqual(StatusMessageBuilder.format_phone("(555) 123-4567"), "+15551234567")
        self.assertEqual(StatusMessageBuilder.format_phone("+44 20 7946 0958"), "+442079460958")


class TestEmailChannel(unittest.TestCase):

    @patch.dict(os.environ, SMTP_ENV)
    @patch("notification.channels.smtplib.SMTP")
    def test_send_email(self, mock_smtp):
        server = mock_smtp.return_value.__enter__.return_value
        ok = EmailChannel().send("jane@example.com", "Subject", "Body", {'html': "<p>Hi</p>"})

        self.assertTrue(ok)
        mock_smtp.assert_called_once_with("smtp.example.com", 587)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "secret")
        server.send_message.assert_called_once()

    @patch.dict(os.environ, SMTP_ENV)
    @patch("notification.channels.smtplib.SMTP", side_effect=OSError("connection refused"))
    def test_send_failure_returns_false(self, mock_smtp):
        self.assertFalse(EmailChannel().send("jane@example.com", "Subject", "Body", {}))

    @patch.dict(os.environ, {'NOTIFICATION_DRY_RUN': 'true'})
    @patch("notification.channels.smtplib.SMTP")
    def test_dry_run_does_not_connect(self, mock_smtp):
        self.assertTrue(EmailChannel().send("jane@example.com", "Subject", "Body", {}))
        mock_smtp.assert_not_called()

    @patch.dict(os.environ, {'NOTIFICATION_DRY_RUN': 'false', 'SMTP_SERVER': ''})
    def test_missing_config(self):
        self.assertFalse(EmailChannel().send("jane@example.com", "Subject", "Body", {}))


class TestSmsChannel(unittest.TestCase):

    @patch.dict(os.environ, TWILIO_ENV)
    @patch("notification.channels.requests.post")
    def test_send_sms(self, mock_post):
        mock_post.return_value = MagicMock(status_code=201)
        self.assertTrue(SmsChannel().send("+15551234567", "", "Hello", {}))

        args, kwargs = mock_post.call_args
        self.assertIn("/Accounts/AC123/Messages.json", args[0])
        self.assertEqual(kwargs['auth'], ("AC123", "token"))
        self.assertEqual(kwargs['data']['To'], "+15551234567")

    @patch.dict(os.environ, TWILIO_ENV)
    @patch("notification.channels.requests.post")
    def test_api_error(self, mock_post):
        mock_post.return_value = MagicMock(status_code=400, text="bad number")
        self.assertFalse(SmsChannel().send("+1", "", "Hello", {}))


class TestChannelFactory(unittest.TestCase):

    def test_known_channels(self):
        self.assertIsInstance(NotificationChannelFactory.get_channel('SMS'), SmsChannel)
        self.assertIn('email', NotificationChannelFactory.list_channels())

    def test_unknown_channel(self):
        with self.assertRaises(ValueError):
            NotificationChannelFactory.get_channel('pigeon')

    def test_register_requires_channel_subclass(self):
        with self.assertRaises(ValueError):
            NotificationChannelFactory.register_channel('bad', dict)


class RecordingChannel(NotificationChannel):
    sent = []

    @property
    def channel_type(self) -> str:
        return 'recording'

    def send(self, recipient, subject, body, metadata):
        RecordingChannel.sent.append((recipient, subject, body))
        return True


class TestNotificationService(unittest.TestCase):

    def test_disabled_service_sends_nothing(self):
        with patch.object(NotificationChannelFactory, 'get_channel') as get_channel:
            result = NotificationService(enabled=False).send_status_notifications(
                candidate(), "Backend Engineer", "hired", "Acme"
            )
        self.assertEqual(result, {})
        get_channel.assert_not_called()

    def test_sends_on_each_channel(self):
        channel = MagicMock()
        channel.send.return_value = True
        with patch.object(NotificationChannelFactory, 'get_channel', return_value=channel):
            result = NotificationService(channels=['sms', 'email']).send_status_notifications(
                candidate(), "Backend Engineer", "hired", "Acme", note="Welcome"
            )

        self.assertEqual(result, {'sms': True, 'email': True})
        sms_call, email_call = channel.send.call_args_list
        self.assertEqual(sms_call.args[0], "+15551234567")
        self.assertEqual(email_call.args[0], "jane@example.com")
        self.assertEqual(email_call.args[3]['from_name'], "Acme Hiring Team")

    def test_channel_without_recipient_is_skipped(self):
        channel = MagicMock()
        channel.send.return_value = True
        with patch.object(NotificationChannelFactory, 'get_channel', return_value=channel):
            result = NotificationService(channels=['sms', 'email']).send_status_notifications(
                candidate(phone=''), "Backend Engineer", "reviewed"
            )
        self.assertEqual(result, {'email': True})

    def test_channel_error_is_reported_not_raised(self):
        with patch.object(NotificationChannelFactory, 'get_channel', side_effect=RuntimeError("boom")):
            result = NotificationService(channels=['sms']).send_status_notifications(
                candidate(), "Backend Engineer", "rejected"
            )
        self.assertEqual(result, {'sms': False})

    def test_custom_channel_gets_plain_text(self):
        NotificationChannelFactory.register_channel('recording', RecordingChannel)
        RecordingChannel.sent = []
        person = candidate()
        result = NotificationService(channels=['recording']).send_status_notifications(
            person, "Backend Engineer", "interview", "Acme"
        )
        self.assertEqual(result, {'recording': True})
        recipient, subject, _ = RecordingChannel.sent[0]
        self.assertEqual(recipient, str(person.id))
        self.assertIn("Interview Invitation", subject)


if __name__ == "__main__":
    unittest.main()
