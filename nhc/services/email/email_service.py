"""
Email service for sending transactional emails.

Supports SMTP and console logging modes. Each send is attempted up to
a fixed number of times before it is reported as failed.
"""

import asyncio
import html
import logging
import re
from dataclasses import dataclass
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

import aiosmtplib

from config.email_config import (
    DONATION_LINKS,
    EMAIL_DEFAULTS,
    EMAIL_SUBJECTS,
    MAIL_MAX_RETRIES,
)

logger = logging.getLogger(__name__)

_TAGS = re.compile(r"<[^>]+>")
_BLANK_LINES = re.compile(r"\n\s*\n+")


class EmailDeliveryError(Exception):
    """A message could not be delivered after all attempts."""


@dataclass(frozen=True)
class EmailMessage:
    subject: str
    html: str

    @property
    def text(self) -> str:
        """Plain-text alternative derived from the HTML body."""
        stripped = html.unescape(_TAGS.sub("", self.html))
        return _BLANK_LINES.sub("\n\n", stripped).strip()


class EmailService:
    """
    Email service with multi-mode support.

    Modes:
        - console: Log emails to console (development)
        - smtp: Send via SMTP
    """

    def __init__(
        self,
        mode: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None,
        site_url: str = "https://www.nutritionhabitchallenge.com",
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        max_retries: int = MAIL_MAX_RETRIES,
        retry_delay: float = 1.0,
    ):
        """
        Initialize email service.

        Args:
            mode: "console" or "smtp"
            from_email: Sender email address
            from_name: Sender display name
            site_url: Base URL for links in emails
            smtp_host: SMTP server host
            smtp_port: SMTP server port
            smtp_user: SMTP username
            smtp_password: SMTP password
            max_retries: Attempts per message
            retry_delay: Seconds to wait between attempts
        """
        self._mode = mode or EMAIL_DEFAULTS["mode"]
        self._from_email = from_email or EMAIL_DEFAULTS["from_email"]
        self._from_name = from_name or EMAIL_DEFAULTS["from_name"]
        self._team_name = EMAIL_DEFAULTS["team_name"]
        self._site_url = site_url.rstrip("/")
        self._smtp_host = smtp_host
        self._smtp_port = smtp_port
        self._smtp_user = smtp_user
        self._smtp_password = smtp_password
        self._max_retries = max(1, max_retries)
        self._retry_delay = retry_delay

        if self._mode == "smtp" and not self._smtp_host:
            logger.warning("SMTP host not configured, falling back to console mode")
            self._mode = "console"

        logger.info(f"Email service initialized in {self._mode} mode")

    @property
    def mode(self) -> str:
        return self._mode

    # ─────────────────────────────────────────────────────────────────
    # Delivery
    # ─────────────────────────────────────────────────────────────────

    async def send_mail(self, to: str, message: EmailMessage) -> None:
        """
        Deliver one message, retrying on failure.

        Raises:
            EmailDeliveryError: Every attempt failed
        """
        last_error: Optional[Exception] = None

        for attempt in range(1, self._max_retries + 1):
            try:
                if self._mode == "smtp":
                    await self._send_smtp(to, message)
                else:
                    self._send_console(to, message)
                logger.info(f"Successfully sent mail to {to}: {message.subject}")
                return
            except (aiosmtplib.SMTPException, OSError) as e:
                last_error = e
                logger.warning(f"Mail to {to} failed (attempt {attempt}/{self._max_retries}): {e}")
                if attempt < self._max_retries and self._retry_delay:
                    await asyncio.sleep(self._retry_delay)

        logger.error(f"Error sending mail to {to}: {last_error}")
        raise EmailDeliveryError(f"Error sending mail to {to}: {last_error}")

    def _send_console(self, to: str, message: EmailMessage) -> None:
        """Log email to console (development mode)."""
        logger.info("=" * 60)
        logger.info("EMAIL (console mode)")
        logger.info(f"To: {to}")
        logger.info(f"Subject: {message.subject}")
        logger.info("-" * 60)
        logger.info(message.text)
        logger.info("=" * 60)

    async def _send_smtp(self, to: str, message: EmailMessage) -> None:
        mime = MIMEMultipart("alternative")
        mime["Subject"] = message.subject
        mime["From"] = f"{self._from_name} <{self._from_email}>"
        mime["To"] = to

        mime.attach(MIMEText(message.text, "plain"))
        mime.attach(MIMEText(message.html, "html"))

        # Port 465 is implicit TLS, anything else upgrades with STARTTLS
        use_tls = self._smtp_port == 465

        await aiosmtplib.send(
            mime,
            hostname=self._smtp_host,
            port=self._smtp_port,
            username=self._smtp_user,
            password=self._smtp_password,
            use_tls=use_tls,
            start_tls=not use_tls,
        )

    # ─────────────────────────────────────────────────────────────────
    # Templates
    # ─────────────────────────────────────────────────────────────────

    def verification_message(self, first_name: Optional[str], code: str) -> EmailMessage:
        link = f"{self._site_url}/verify/{code}"
        body = f"""
<p>Hi {_escape(first_name) or "there"},</p>
<p>Thank you for creating an account at <a href="{self._site_url}">{self._site_url}</a>!</p>
<p>Before you can register, you need to verify your e-mail address.<br />
To do so, just click this link or paste the URL into your browser: <a href="{_escape(link)}">{_escape(link)}</a></p>
{self._signature()}
"""
        return EmailMessage(subject=EMAIL_SUBJECTS["verification"], html=body)

    def registration_message(
        self,
        first_name: Optional[str],
        family: Optional[str],
        donation: Optional[str],
    ) -> EmailMessage:
        family_block = ""
        if family:
            family_block = (
                "<p>Here is your family code to share with members of your family, "
                f"they'll need it when they register: <strong>{_escape(family)}</strong></p>"
            )

        donation_block = ""
        if donation in DONATION_LINKS:
            charity, url = DONATION_LINKS[donation]
            donation_block = (
                f'<p>To donate to the {charity}, follow <a href="{url}" target="_blank">this link</a>.</p>'
            )

        body = f"""
<p>Hi {_escape(first_name) or "there"},</p>
<p>Congratulations! You are now registered for the Nutrition Habit Challenge. Your participation benefits both you and our community.</p>
{family_block}
<p>We'll be sending you an email as we get closer to the event. In the meantime, check out the <a href="{self._site_url}/resources">Resource Page</a> for great information and insights to help you be successful with the Challenge.</p>
{donation_block}
<p><small>If you would like a physical scorecard to track your challenge progress with, download and print the <a href="{self._site_url}/downloads/scorecard.pdf">PDF scorecard.</a></small></p>
{self._signature()}
"""
        return EmailMessage(subject=EMAIL_SUBJECTS["registration"], html=body)

    def reset_password_message(self, first_name: Optional[str], reset_code: str) -> EmailMessage:
        link = f"{self._site_url}/reset-password/{reset_code}"
        body = f"""
<p>Hi {_escape(first_name) or "there"},</p>
<p>We received a request to reset the password on this account at <a href="{self._site_url}">{self._site_url}</a></p>
<p>To reset your password, use the following link: <a href="{_escape(link)}">{_escape(link)}</a></p>
<p>If you did not make this request, please ignore this e-mail.</p>
{self._signature()}
"""
        return EmailMessage(subject=EMAIL_SUBJECTS["reset_password"], html=body)

    def announcement_message(self, subject: str, body: str) -> EmailMessage:
        """Admin-authored bulk message; the body is sent as written."""
        return EmailMessage(subject=subject, html=body)

    def _signature(self) -> str:
        return f"<p>Sincerely,<br />\n{self._team_name}</p>"


def _escape(value: Optional[str]) -> str:
    return html.escape(value or "")
