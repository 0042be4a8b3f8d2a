"""
notify/mailer.py -- SMTP email sender with templated account emails.

Mailer.send(to, subject, html) is the whole gateway contract. AuthService only
calls the two convenience wrappers, which render a Jinja2 template and call
send(). Tests substitute a recording double with the same methods.

Transport:
  SMTP_HOST set   -- smtplib.SMTP, STARTTLS when SMTP_USE_TLS, login when
                     SMTP_USER/SMTP_PASSWORD are set.
  SMTP_HOST empty -- console backend: the message is logged, not sent. Lets a
                     developer copy the verification link from the server log.

send() raises MailDeliveryError on any transport failure. Whether that failure
matters is the caller's decision.
"""

from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from urllib.parse import urlencode

from jinja2 import Environment, PackageLoader, select_autoescape

from core.config import Settings

logger = logging.getLogger("flashcards.mail")

_templates = Environment(
    loader=PackageLoader("notify", "templates"),
    autoescape=select_autoescape(["html"]),
)


class MailDeliveryError(Exception):
    """Raised when the SMTP transport fails to hand off a message."""


class Mailer:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def send(self, to: str, subject: str, html: str) -> None:
        s = self._settings
        if not s.smtp_host:
            logger.info("SMTP not configured; email to %s not sent. Subject: %s\n%s", to, subject, html)
            return

        msg = MIMEMultipart("alternative")
        msg["From"] = s.email_from
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html", "utf-8"))

        try:
            with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=10) as server:
                if s.smtp_use_tls:
                    server.starttls()
                if s.smtp_user and s.smtp_password:
                    server.login(s.smtp_user, s.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(f"Failed to send email to {to}") from exc
        logger.info("Email sent to %s (%s)", to, subject)

    # ------------------------------------------------------------------
    # Account emails
    # ------------------------------------------------------------------

    def send_verification_email(self, email: str, token: str) -> None:
        url = self._link("/verify-email", token)
        html = _templates.get_template("verify_email.html").render(url=url)
        self.send(email, "Verify Your Email Address", html)

    def send_password_reset_email(self, email: str, token: str) -> None:
        url = self._link("/reset-password", token)
        html = _templates.get_template("reset_password.html").render(
            url=url,
            expire_hours=self._settings.reset_token_expire_hours,
        )
        self.send(email, "Reset Your Password", html)

    def _link(self, path: str, token: str) -> str:
        base = self._settings.frontend_url.rstrip("/")
        return f"{base}{path}?{urlencode({'token': token})}"
