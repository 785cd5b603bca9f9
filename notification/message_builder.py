import html
import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from core.lifecycle.states import ApplicationStatus


class StatusNotificationContent(BaseModel):
    candidate_name: str
    job_title: str
    company: str
    status: str
    note: Optional[str] = None
    sent_at: Optional[datetime] = None


SMS_TEMPLATES = {
    ApplicationStatus.PENDING: "Hi {name}, your application for {job_title} at {company} has been received and is pending review. We'll update you soon!",
    ApplicationStatus.REVIEWED: "Hi {name}, good news! Your application for {job_title} at {company} has been reviewed. We'll be in touch shortly.",
    ApplicationStatus.SHORTLISTED: "🎉 Congratulations {name}! You've been shortlisted for {job_title} at {company}. Our team will contact you for next steps.",
    ApplicationStatus.INTERVIEW: "📅 Hi {name}, you've been invited for an interview for {job_title} at {company}. Please check your email for details.",
    ApplicationStatus.HIRED: "🎊 CONGRATULATIONS {name}! We're pleased to offer you the position of {job_title} at {company}. Welcome to the team!",
    ApplicationStatus.REJECTED: "Hi {name}, thank you for your interest in {job_title} at {company}. After careful review, we've decided to move forward with other candidates.",
    ApplicationStatus.WITHDRAWN: "Hi {name}, your application for {job_title} at {company} has been withdrawn as requested.",
}

EMAIL_SUBJECTS = {
    ApplicationStatus.PENDING: "Application Received: {job_title}",
    ApplicationStatus.REVIEWED: "Application Reviewed: {job_title}",
    ApplicationStatus.SHORTLISTED: "🎉 You've Been Shortlisted! - {job_title}",
    ApplicationStatus.INTERVIEW: "📅 Interview Invitation - {job_title}",
    ApplicationStatus.HIRED: "🎊 Congratulations! Job Offer - {job_title}",
    ApplicationStatus.REJECTED: "Update on Your Application - {job_title}",
    ApplicationStatus.WITHDRAWN: "Application Withdrawn - {job_title}",
}

DISPLAY_NAMES = {
    ApplicationStatus.PENDING: "Pending Review",
    ApplicationStatus.REVIEWED: "Reviewed",
    ApplicationStatus.SHORTLISTED: "Shortlisted",
    ApplicationStatus.INTERVIEW: "Interview Stage",
    ApplicationStatus.HIRED: "Hired",
    ApplicationStatus.REJECTED: "Not Selected",
    ApplicationStatus.WITHDRAWN: "Withdrawn",
}

# Per-status heading, body paragraph and callout colours; other statuses use pending's
EMAIL_BLOCKS = {
    ApplicationStatus.PENDING: (
        "Application Received",
        "Thank you for applying for the <strong>{job_title}</strong> position at <strong>{company}</strong>. "
        "Your application has been received and is now pending review. Our hiring team will carefully "
        "evaluate your qualifications and get back to you soon.",
        "#f3f4f6",
        "#f59e0b",
    ),
    ApplicationStatus.SHORTLISTED: (
        "Congratulations!",
        "We are pleased to inform you that you have been <strong style=\"color: #059669;\">SHORTLISTED</strong> "
        "for the <strong>{job_title}</strong> position at <strong>{company}</strong>! Our recruitment team "
        "will contact you within 2-3 business days to discuss next steps.",
        "#d1fae5",
        "#059669",
    ),
    ApplicationStatus.HIRED: (
        "Welcome to the Team!",
        "<strong>CONGRATULATIONS!</strong> We are thrilled to offer you the position of "
        "<strong>{job_title}</strong> at <strong>{company}</strong>. Our HR team will send you the formal "
        "offer letter and onboarding details within 24 hours.",
        "#dbeafe",
        "#1e40af",
    ),
    ApplicationStatus.REJECTED: (
        "Application Update",
        "Thank you for your interest in the <strong>{job_title}</strong> position at <strong>{company}</strong>. "
        "After careful consideration, we regret to inform you that we have decided to move forward with other "
        "candidates whose qualifications more closely match our current requirements.",
        "#fef2f2",
        "#dc2626",
    ),
}

_NON_DIGITS = re.compile(r'\D')


def _status(value: str) -> Optional[ApplicationStatus]:
    try:
        return ApplicationStatus(value)
    except ValueError:
        return None


class StatusMessageBuilder:
    """Renders the per-status SMS text, email subject and HTML body."""

    @staticmethod
    def sms_text(content: StatusNotificationContent) -> str:
        template = SMS_TEMPLATES.get(_status(content.status))
        if template is None:
            return f"Your application status has been updated to {content.status}"
        return template.format(
            name=content.candidate_name, job_title=content.job_title, company=content.company
        )

    @staticmethod
    def email_subject(content: StatusNotificationContent) -> str:
        template = EMAIL_SUBJECTS.get(_status(content.status))
        if template is None:
            return f"Application Status Update: {content.job_title}"
        return template.format(job_title=content.job_title)

    @staticmethod
    def display_name(status: str) -> str:
        return DISPLAY_NAMES.get(_status(status), status)

    @staticmethod
    def email_html(content: StatusNotificationContent) -> str:
        status = _status(content.status)
        heading, paragraph, background, accent = EMAIL_BLOCKS.get(
            status, EMAIL_BLOCKS[ApplicationStatus.PENDING]
        )
        name = html.escape(content.candidate_name)
        company = html.escape(content.company)
        body = paragraph.format(job_title=html.escape(content.job_title), company=company)
        display = html.escape(StatusMessageBuilder.display_name(content.status))

        note_block = ""
        if content.note:
            note_block = f'<p style="margin-top: 10px;"><strong>Note:</strong> {html.escape(content.note)}</p>'

        date_line = ""
        if content.sent_at:
            date_line = f'<p style="color: #6b7280; font-size: 12px;">{content.sent_at.strftime("%m/%d/%Y")}</p>'

        return f"""<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #2563eb;">{html.escape(heading)}</h2>
  <p>Dear {name},</p>
  <p>{body}</p>
  <div style="background-color: {background}; padding: 20px; border-radius: 8px; margin: 20px 0; border-left: 4px solid {accent};">
    <p style="margin: 0;"><strong>Status:</strong> <span style="color: {accent};">{display}</span></p>
    {note_block}
  </div>
  <p>Best regards,<br>{company} Hiring Team</p>
  {date_line}
</div>"""

    @staticmethod
    def format_phone(phone: str) -> str:
        """Digits only; 10-digit numbers get +1, everything else a leading +."""
        digits = _NON_DIGITS.sub('', phone or '')
        if len(digits) == 10:
            return f"+1{digits}"
        return f"+{digits}"
