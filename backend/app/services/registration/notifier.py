"""Staff notification email for new registrations.

Builds a summary of a stored registration and sends it through Flask-Mail
to the fixed staff address.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote

from flask import render_template
from flask_mail import Message

from .errors import NotificationError

logger = logging.getLogger(__name__)

SUBJECT_TEMPLATE = 'New registration: {child_name} ({academic_path})'


@dataclass
class NotificationMessage:
    subject: str
    body: str
    context: dict


def build_record_link(console_url: Optional[str], document_id: str) -> Optional[str]:
    if not console_url:
        return None
    return f"{console_url.rstrip('/')}/{quote(document_id, safe='')}"


def format_submitted_at(value: datetime) -> str:
    return value.strftime('%B %d, %Y at %I:%M %p UTC')


def build_notification_message(
    submission,
    document_id: str,
    *,
    ip_address: str,
    submitted_at: Optional[datetime] = None,
    console_url: Optional[str] = None,
) -> NotificationMessage:
    """Render the plain-text summary and the template context for HTML."""
    submitted_at = submitted_at or datetime.now(timezone.utc)
    academic_path = str(submission.academic_path).upper()
    record_link = build_record_link(console_url, document_id)

    context = {
        'parent_name': submission.parent_name,
        'child_name': submission.child_name,
        'academic_path': academic_path,
        'email': submission.email,
        'phone': submission.phone,
        'message': submission.message,
        'submitted_at': format_submitted_at(submitted_at),
        'ip_address': ip_address,
        'document_id': document_id,
        'record_link': record_link,
    }

    lines = [
        'A new registration was submitted.',
        '',
        f"Parent: {submission.parent_name}",
        f"Child: {submission.child_name}",
        f"Program: {academic_path}",
        '',
        f"Email: {submission.email}",
        f"Phone: {submission.phone}",
    ]
    if submission.message:
        lines += ['', 'Message:', str(submission.message)]
    lines += [
        '',
        f"Submitted: {context['submitted_at']}",
        f"IP address: {ip_address}",
        f"Record: {record_link or document_id}",
    ]

    subject = SUBJECT_TEMPLATE.format(child_name=submission.child_name, academic_path=academic_path)
    return NotificationMessage(subject=subject, body='\n'.join(lines), context=context)


class RegistrationNotifier:
    """Sends one email per stored registration to the staff address."""

    def __init__(self, mail, recipient: str, *, sender: Optional[str] = None, console_url: Optional[str] = None,
                 html_template: Optional[str] = 'email/registration_notification.html'):
        self.mail = mail
        self.recipient = recipient
        self.sender = sender
        self.console_url = console_url
        self.html_template = html_template

    @classmethod
    def from_app(cls, app, mail) -> 'RegistrationNotifier':
        return cls(
            mail,
            app.config['NOTIFICATION_ADDRESS'],
            sender=app.config.get('MAIL_DEFAULT_SENDER'),
            console_url=app.config.get('REGISTRATION_CONSOLE_URL'),
        )

    def notify(self, submission, document_id: str, *, ip_address: str) -> None:
        """Send the summary email.

        Raises:
            NotificationError: the message could not be built or sent
        """
        try:
            notification = build_notification_message(
                submission,
                document_id,
                ip_address=ip_address,
                console_url=self.console_url,
            )
            html = None
            if self.html_template:
                html = render_template(self.html_template, **notification.context)
            msg = Message(
                subject=notification.subject,
                body=notification.body,
                html=html,
                recipients=[self.recipient],
                sender=self.sender,
            )
            logger.info('Sending registration notification for %s to %s', document_id, self.recipient)
            self.mail.send(msg)
        except Exception as e:
            raise NotificationError(str(e), document_id=document_id) from e
        logger.info('Registration notification sent for %s', document_id)
