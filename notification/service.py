#!/usr/bin/env python3
"""
Notification Service

Sends application status notifications to candidates over the configured
channels (SMS and email). Delivery runs after the status change has been
committed; a failed delivery is logged and reported in the result map but
never raised.

Usage:
    from notification.service import NotificationService

    service = NotificationService(channels=['sms', 'email'])
    results = service.send_status_notifications(
        candidate=user,
        job_title="Backend Engineer",
        status="shortlisted",
        company_name="Acme",
    )
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, Optional

from notification.channels import NotificationChannelFactory
from notification.message_builder import StatusMessageBuilder, StatusNotificationContent

logger = logging.getLogger(__name__)

DEFAULT_CHANNELS = ('sms', 'email')


class NotificationService:
    """Dispatches status-change messages to a candidate on every enabled channel."""

    def __init__(self, channels: Optional[Iterable[str]] = None, enabled: bool = True):
        self.channel_types = [c.lower() for c in (channels or DEFAULT_CHANNELS)]
        self.enabled = enabled

    def send_status_notifications(
        self,
        candidate,
        job_title: str,
        status: str,
        company_name: Optional[str] = None,
        note: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Dict[str, bool]:
        """
        Notify a candidate that their application status changed.

        Args:
            candidate: User row with name/username, email and phone
            job_title: Title of the job applied for
            status: New application status value
            company_name: Employer company name (defaults to "Company")
            note: Optional employer note included in the email
            now: Timestamp shown in the email footer

        Returns:
            Map of channel type to delivery result. Channels without a
            recipient on file are omitted.
        """
        if not self.enabled:
            logger.debug("Notifications disabled; skipping status notification")
            return {}

        company = company_name or "Company"
        content = StatusNotificationContent(
            candidate_name=candidate.name or candidate.username or "Candidate",
            job_title=job_title or "",
            company=company,
            status=status,
            note=note,
            sent_at=now,
        )

        results: Dict[str, bool] = {}
        for channel_type in self.channel_types:
            try:
                results.update(self._send_on(channel_type, candidate, content))
            except Exception as e:
                logger.error(f"Notification via {channel_type} failed for status '{status}': {e}")
                results[channel_type] = False

        sent = [c for c, ok in results.items() if ok]
        logger.info(
            f"Status notification '{status}' for {job_title}: "
            f"sent via {', '.join(sent) if sent else 'no channel'}"
        )
        return results

    def _send_on(self, channel_type: str, candidate, content: StatusNotificationContent) -> Dict[str, bool]:
        channel = NotificationChannelFactory.get_channel(channel_type)

        if channel_type == 'sms':
            if not candidate.phone:
                return {}
            recipient = StatusMessageBuilder.format_phone(candidate.phone)
            body = StatusMessageBuilder.sms_text(content)
            return {channel_type: channel.send(recipient, '', body, {})}

        if channel_type == 'email':
            if not candidate.email:
                return {}
            subject = StatusMessageBuilder.email_subject(content)
            metadata = {
                'html': StatusMessageBuilder.email_html(content),
                'from_name': f"{content.company} Hiring Team",
            }
            return {channel_type: channel.send(candidate.email, subject, StatusMessageBuilder.sms_text(content), metadata)}

        # Registered custom channels get the plain text message
        return {channel_type: channel.send(
            str(candidate.id), StatusMessageBuilder.email_subject(content),
            StatusMessageBuilder.sms_text(content), {}
        )}
