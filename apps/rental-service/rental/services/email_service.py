"""
SMTP delivery and template rendering for customer emails.

Templates live in ``rental/templates/email`` as ``<name>.html`` with an
optional ``<name>.txt`` twin. Delivery goes through aiosmtplib; callers get a
result dict instead of an exception so a mail outage never breaks a booking.
"""

import html
import logging
import os
import re
from dataclasses import dataclass, field
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import aiosmtplib
from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / 'templates' / 'email'

_TAG = re.compile(r'<[^>]+>')
_WHITESPACE = re.compile(r'\s+')


def _env(name: str, default: str = '') -> str:
    return os.getenv(name, default)


def _env_flag(name: str, default: bool) -> bool:
    return _env(name, 'true' if default else 'false').strip().lower() == 'true'


def _env_port() -> int:
    raw = _env('SMTP_PORT', '587').strip()
    try:
        return int(raw)
    except ValueError:
        return 0


@dataclass
class EmailServiceConfig:
    """SMTP settings, read from the environment when the object is built."""

    smtp_host: str = field(default_factory=lambda: _env('SMTP_HOST', 'localhost'))
    smtp_port: int = field(default_factory=_env_port)
    smtp_username: str = field(default_factory=lambda: _env('SMTP_USERNAME'))
    smtp_password: str = field(default_factory=lambda: _env('SMTP_PASSWORD'))
    smtp_use_tls: bool = field(default_factory=lambda: _env_flag('SMTP_USE_TLS', True))
    smtp_use_ssl: bool = field(default_factory=lambda: _env_flag('SMTP_USE_SSL', False))
    from_email: str = field(default_factory=lambda: _env('FROM_EMAIL', 'noreply@orange-rental.de'))
    from_name: str = field(default_factory=lambda: _env('FROM_NAME', 'Orange Car Rental'))
    reply_to_email: str = field(default_factory=lambda: _env('REPLY_TO_EMAIL'))
    template_dir: str = field(default_factory=lambda: _env('EMAIL_TEMPLATE_DIR', str(DEFAULT_TEMPLATE_DIR)))

    def is_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_port > 0 and self.from_email)

    def validate(self) -> List[str]:
        checks = (
            (not self.smtp_host, "SMTP_HOST is required"),
            (self.smtp_port <= 0, "SMTP_PORT must be a positive integer"),
            (not self.from_email, "FROM_EMAIL is required"),
            (self.smtp_use_ssl and self.smtp_use_tls, "Cannot use both SSL and TLS simultaneously"),
        )
        return [message for failed, message in checks if failed]

    @property
    def sender(self) -> str:
        return formataddr((self.from_name, self.from_email))

    @property
    def message_domain(self) -> str:
        return self.from_email.rpartition('@')[2] or 'orange-rental.de'


class EmailService:
    """Sends reservation emails over SMTP."""

    def __init__(self, config: Optional[EmailServiceConfig] = None):
        self.config = config or EmailServiceConfig()
        self.template_env = self._build_template_env(Path(self.config.template_dir))

    @staticmethod
    def _build_template_env(template_path: Path) -> Environment:
        if not template_path.is_dir():
            logger.warning("Email template directory %s missing; using bundled templates", template_path)
            template_path = DEFAULT_TEMPLATE_DIR
        return Environment(
            loader=FileSystemLoader(str(template_path)),
            autoescape=select_autoescape(['html']),
            keep_trailing_newline=True,
        )

    def render_template(self, template_name: str, context: Dict[str, Any]) -> Tuple[str, str]:
        """
        Render ``<template_name>.html`` and its plain-text twin.

        Without a ``.txt`` template the text part is derived from the HTML.
        """
        html_content = self.template_env.get_template(f"{template_name}.html").render(**context)
        try:
            text_content = self.template_env.get_template(f"{template_name}.txt").render(**context)
        except TemplateNotFound:
            text_content = html_to_text(html_content)
        return html_content, text_content

    def build_message(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> MIMEMultipart:
        message = MIMEMultipart('alternative')
        message['From'] = self.config.sender
        message['To'] = to_email
        message['Subject'] = subject
        message['Message-ID'] = make_msgid(domain=self.config.message_domain)
        reply_address = reply_to or self.config.reply_to_email
        if reply_address:
            message['Reply-To'] = reply_address
        # multipart/alternative: the last part is the preferred one
        if text_content:
            message.attach(MIMEText(text_content, 'plain', 'utf-8'))
        message.attach(MIMEText(html_content, 'html', 'utf-8'))
        return message

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Deliver one email.

        Returns ``{'success': True, 'message_id': ...}`` or
        ``{'success': False, 'error': ...}``.
        """
        problems = self.config.validate()
        if problems or not self.config.is_configured():
            return {'success': False, 'error': 'Email service not configured: ' + ', '.join(problems)}

        message = self.build_message(to_email, subject, html_content, text_content, reply_to)
        try:
            async with aiosmtplib.SMTP(**self._smtp_options()) as smtp:
                if self.config.smtp_username and self.config.smtp_password:
                    await smtp.login(self.config.smtp_username, self.config.smtp_password)
                smtp_result = await smtp.send_message(message)
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("Email to %s failed: %s", to_email, exc, exc_info=True)
            return {'success': False, 'error': f"Failed to send email to {to_email}: {exc}"}

        logger.info("Email '%s' sent to %s", subject, to_email)
        return {'success': True, 'message_id': message['Message-ID'], 'smtp_result': smtp_result}

    def _smtp_options(self) -> Dict[str, Any]:
        # implicit TLS (port 465) and STARTTLS are mutually exclusive
        return {
            'hostname': self.config.smtp_host,
            'port': self.config.smtp_port,
            'use_tls': self.config.smtp_use_ssl,
            'start_tls': self.config.smtp_use_tls and not self.config.smtp_use_ssl,
        }


def html_to_text(html_content: str) -> str:
    return _WHITESPACE.sub(' ', html.unescape(_TAG.sub('', html_content))).strip()


@lru_cache(maxsize=1)
def get_email_service() -> EmailService:
    """Process-wide service built from the current environment."""
    return EmailService()
