"""Email delivery over SMTP.

If SMTP is not configured, messages are logged but NOT sent.
"""

import logging
import smtplib
from email.mime.text import MIMEText

from hr_backend.core.config import Settings

logger = logging.getLogger(__name__)


class EmailService:
    """Sends plain-text mail through the configured SMTP server."""

    def __init__(self, settings: Settings):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS
        self.sender = settings.SMTP_FROM

    def is_configured(self) -> bool:
        return bool(self.host)

    def send(self, to: str, subject: str, body: str) -> bool:
        """Send one message. Returns False when SMTP is not configured."""
        if not self.is_configured():
            logger.warning("[EMAIL NOT SENT - SMTP NOT CONFIGURED] to=%s subject=%s", to, subject)
            return False

        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to

        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            if self.use_tls:
                server.starttls()
            if self.user and self.password:
                server.login(self.user, self.password)
            server.sendmail(self.sender, [to], msg.as_string())
        logger.info("Email sent to %s: %s", to, subject)
        return True
