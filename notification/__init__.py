"""
Notification Module

Status-change notifications for candidates over SMS and email.

Usage:
    from notification import NotificationService, NotificationChannelFactory

    service = NotificationService(channels=['sms', 'email'])
    service.send_status_notifications(candidate, "Backend Engineer", "hired", "Acme")

    channel = NotificationChannelFactory.get_channel('email')
    channel.send('user@example.com', 'Subject', 'Body', {})
"""

from notification.channels import (
    NotificationChannel,
    EmailChannel,
    SmsChannel,
    NotificationChannelFactory,
)

from notification.message_builder import (
    StatusMessageBuilder,
    StatusNotificationContent,
)

from notification.service import (
    NotificationService,
)

__all__ = [
    # Channels
    'NotificationChannel',
    'EmailChannel',
    'SmsChannel',
    'NotificationChannelFactory',
    # Messages
    'StatusMessageBuilder',
    'StatusNotificationContent',
    # Service
    'NotificationService',
]
