"""Email templates for form confirmations and admin notifications."""

import html as html_module
import os

from formrelay.models.email import EmailMessage
from formrelay.models.submission import ContactSubmission, WaitlistSubmission

_HTML_SHELL = """<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <h2 style="color: #667eea;">{heading}</h2>
    {content}
  </div>
</body>
</html>"""


def _site_name() -> str:
    return os.environ.get("SITE_NAME", "FormRelay")


def _esc(value: object) -> str:
    return html_module.escape(str(value), quote=True)


def _format_time(submission: ContactSubmission | WaitlistSubmission) -> str:
    return submission.submitted_at.strftime("%Y-%m-%d %H:%M UTC")


def contact_confirmation(submission: ContactSubmission, sender: str, support_email: str) -> EmailMessage:
    """Thank-you email sent to the person who filled in the contact form."""
    site = _site_name()
    text = f"""Dear {submission.name},

Thank you for reaching out to {site}!

We have received your message and our team will get back to you within 24-48 hours.

Your Message:
-------------
{submission.message}

Submission ID: {submission.id}
Email: {submission.email}
Submitted: {_format_time(submission)}

Best regards,
The {site} Team

---
This is an automated message. For support, contact us at {support_email}"""

    content = f"""<p>Dear <strong>{_esc(submission.name)}</strong>,</p>
    <p>Thank you for reaching out to {_esc(site)}! Our team will get back to you within <strong>24-48 hours</strong>.</p>
    <blockquote style="border-left: 4px solid #667eea; padding-left: 15px; white-space: pre-wrap;">{_esc(submission.message)}</blockquote>
    <p style="font-size: 14px; color: #666;">
      <strong>Submission ID:</strong> {_esc(submission.id)}<br>
      <strong>Email:</strong> {_esc(submission.email)}<br>
      <strong>Submitted:</strong> {_format_time(submission)}
    </p>"""

    return EmailMessage(
        sender=sender,
        recipients=[submission.email],
        subject=f"Thank You for Contacting {site}",
        body_text=text,
        body_html=_HTML_SHELL.format(heading="Thank You!", content=content),
    )


def contact_notification(submission: ContactSubmission, sender: str, admin_email: str) -> EmailMessage:
    """Internal notice about a new contact submission. Replies go to the submitter."""
    text = f"""New Contact Form Submission
===========================

Name: {submission.name}
Email: {submission.email}

Message:
--------
{submission.message}

Submission ID: {submission.id}
Submitted At: {_format_time(submission)}
Status: {submission.status}

Please respond within 24-48 hours. Reply directly to: {submission.email}"""

    content = f"""<p>
      <strong>Name:</strong> {_esc(submission.name)}<br>
      <strong>Email:</strong> <a href="mailto:{_esc(submission.email)}">{_esc(submission.email)}</a>
    </p>
    <blockquote style="border-left: 4px solid #667eea; padding-left: 15px; white-space: pre-wrap;">{_esc(submission.message)}</blockquote>
    <p>
      <strong>Submission ID:</strong> {_esc(submission.id)}<br>
      <strong>Submitted At:</strong> {_format_time(submission)}<br>
      <strong>Status:</strong> {_esc(str(submission.status).upper())}
    </p>"""

    return EmailMessage(
        sender=sender,
        recipients=[admin_email],
        subject=f"New Contact Form Submission - {submission.name}",
        body_text=text,
        body_html=_HTML_SHELL.format(heading="New Contact Form Submission", content=content),
        reply_to=[submission.email],
    )


def waitlist_confirmation(submission: WaitlistSubmission, sender: str, support_email: str) -> EmailMessage:
    """Welcome email sent to a new waitlist member."""
    site = _site_name()
    greeting = f"Hi {submission.name}," if submission.name else "Hi there,"
    text = f"""{greeting}

Welcome to the {site} waitlist! You are number {submission.position} in line.

We will notify you as soon as we launch.

Submission ID: {submission.id}
Email: {submission.email}

Best regards,
The {site} Team

---
This is an automated message. For support, contact us at {support_email}"""

    content = f"""<p>{_esc(greeting)}</p>
    <p>Welcome to the {_esc(site)} waitlist! You are number <strong>#{submission.position}</strong> in line.</p>
    <p>We will notify you as soon as we launch.</p>
    <p style="font-size: 14px; color: #666;"><strong>Submission ID:</strong> {_esc(submission.id)}</p>"""

    return EmailMessage(
        sender=sender,
        recipients=[submission.email],
        subject=f"Welcome to the {site} Waitlist!",
        body_text=text,
        body_html=_HTML_SHELL.format(heading="You're on the list!", content=content),
    )


def waitlist_notification(submission: WaitlistSubmission, sender: str, admin_email: str) -> EmailMessage:
    """Internal notice about a new waitlist signup."""
    name = submission.name or "(not provided)"
    text = f"""New Waitlist Signup
===================

Email: {submission.email}
Name: {name}
Position: #{submission.position}
Submission ID: {submission.id}
Submitted At: {_format_time(submission)}"""

    content = f"""<p>
      <strong>Email:</strong> {_esc(submission.email)}<br>
      <strong>Name:</strong> {_esc(name)}<br>
      <strong>Position:</strong> #{submission.position}<br>
      <strong>Submission ID:</strong> {_esc(submission.id)}<br>
      <strong>Submitted At:</strong> {_format_time(submission)}
    </p>"""

    return EmailMessage(
        sender=sender,
        recipients=[admin_email],
        subject=f"New Waitlist Signup - Position #{submission.position}",
        body_text=text,
        body_html=_HTML_SHELL.format(heading="New Waitlist Signup", content=content),
    )
