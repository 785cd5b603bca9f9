#!/usr/bin/env python3
"""
Notification Channels

Delivery channels for candidate-facing notifications. Each channel takes a
recipient, subject and body and reports success as a bool; failures are
logged and never raised to the caller.

Usage:
    from notification.channels import NotificationChannelFactory

    channel = NotificationChannelFactory.get_channel('sms')
    channel.send('+15551234567', '', 'Your application was reviewed', {})
"""

from abc import ABC, abstractmethod
from typing import Dict, Any
import logging
import os

import requests
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from core.utils import mask_email, mask_phone

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


def _is_dry_run_mode() -> bool:
    """Check if notification channels should run in dry-run (log-only) mode."""
    return os.environ.get('NOTIFICATION_DRY_RUN', '').lower() in ('true', '1', 'yes')


class NotificationChannel(ABC):
    """
    Abstract base class for all notification channels.
    """

    @property
    @abstractmethod
    def channel_type(self) -> str:
        """Return the channel type identifier."""
        pass

    @abstractmethod
    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        """
        Send a notification through this channel.

        Args:
            recipient: Target recipient (format depends on channel)
            subject: Notification subject/title
            body: Notification body
            metadata: Additional channel-specific metadata

        Returns:
            True if sent successfully, False otherwise
        """
        pass

    def validate_config(self) -> bool:
        return True


class EmailChannel(NotificationChannel):
    """Email notification channel via SMTP."""

    @property
    def channel_type(self) -> str:
        return 'email'

    def validate_config(self) -> bool:
        required_vars = ['SMTP_SERVER', 'SMTP_PORT', 'SMTP_USERNAME', 'SMTP_PASSWORD']
        return all(os.environ.get(var) for var in required_vars)

    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        if _is_dry_run_mode():
            logger.info(f"[DRY RUN] Email to {mask_email(recipient)}: {subject}")
            return True

        if not self.validate_config():
            logger.error("Email not configured - SMTP environment variables not set")
            return False

        try:
            smtp_server = os.environ.get('SMTP_SERVER', 'smtp.gmail.com')
            smtp_port = int(os.environ.get('SMTP_PORT', '587'))
            username = os.environ.get('SMTP_USERNAME', '')
            password = os.environ.get('SMTP_PASSWORD', '')
            from_email = os.environ.get('FROM_EMAIL', username)

            msg = MIMEMultipart()
            from_name = metadata.get('from_name')
            msg['From'] = f'"{from_name}" <{from_email}>' if from_name else from_email
            msg['To'] = recipient
            msg['Subject'] = subject

            html_body = metadata.get('html')
            if html_body:
                msg.attach(MIMEText(html_body, 'html', 'utf-8'))
            else:
                msg.attach(MIMEText(body, 'plain', 'utf-8'))

            with smtplib.SMTP(smtp_server, smtp_port) as server:
                server.starttls()
                server.login(username, password)
                server.send_message(msg)

            logger.info(f"Email sent to {mask_email(recipient)}")
            return True

        except Exception as e:
            logger.error(f"Failed to send email to {mask_email(recipient)}: {e}")
            return False


class SmsChannel(NotificationChannel):
    """SMS notification channel via the Twilio REST API."""

    @property
    def channel_type(self) -> str:
        return 'sms'

    def validate_config(self) -> bool:
        required_vars = ['TWILIO_ACCOUNT_SID', 'TWILIO_AUTH_TOKEN', 'TWILIO_PHONE_NUMBER']
        return all(os.environ.get(var) for var in required_vars)

    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        if _is_dry_run_mode():
            logger.info(f"[DRY RUN] SMS to {mask_phone(recipient)}: {body}")
            return True

        if not self.validate_config():
            logger.error("SMS not configured - Twilio environment variables not set")
            return False

        account_sid = os.environ['TWILIO_ACCOUNT_SID']
        auth_token = os.environ['TWILIO_AUTH_TOKEN']

        try:
            response = requests.post(
                TWILIO_MESSAGES_URL.format(sid=account_sid),
                auth=(account_sid, auth_token),
                data={
                    'From': os.environ['TWILIO_PHONE_NUMBER'],
                    'To': recipient,
                    'Body': body,
                },
                timeout=30
            )

            if response.status_code in (200, 201):
                logger.info(f"SMS sent to {mask_phone(recipient)}")
                return True
            else:
                logger.error(f"Twilio API error: {response.status_code} - {response.text}")
                return False

        except Exception as e:
            logger.error(f"Failed to send SMS to {mask_phone(recipient)}: {e}")
            return False


class NotificationChannelFactory:
    """
    Factory for creating notification channels.

    New channels can be registered at runtime with `register_channel`.
    """

    _channels: Dict[str, type] = {
        'email': EmailChannel,
        'sms': SmsChannel,
    }

    @classmethod
    def get_channel(cls, channel_type: str) -> NotificationChannel:
        """
        Get a notification channel instance by type.

        Raises:
            ValueError: If channel type is not registered
        """
        channel_class = cls._channels.get(channel_type.lower())
        if not channel_class:
            raise ValueError(f"Unknown channel type: {channel_type}. "
                           f"Available: {', '.join(cls._channels.keys())}")

        return channel_class()

    @classmethod
    def register_channel(cls, channel_type: str, channel_class: type):
        if not issubclass(channel_class, NotificationChannel):
            raise ValueError("Channel class must extend NotificationChannel")

        cls._channels[channel_type.lower()] = channel_class
        logger.info(f"Registered new channel type: {channel_type}")

    @classmethod
    def list_channels(cls) -> list:
        """List all available channel types."""
        return list(cls._channels.keys())
