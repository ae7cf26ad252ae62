"""
SMTP relay notifier adapter - Implements Notifier protocol.

Sends plain text mail through an authenticated SMTP relay (STARTTLS by
default). One connection per message; no retry or queueing.
"""

import logging
import smtplib
from email.message import EmailMessage

logger = logging.getLogger(__name__)


class SmtpNotifier:
    """
    Implements Notifier protocol via smtplib.

    Delivery failures, including the socket timeout, are logged and
    reported as False rather than raised.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        use_tls: bool = True,
        timeout: float = 15.0,
    ) -> None:
        """
        Args:
            host: SMTP relay hostname
            port: SMTP relay port
            username: Login user, or None to skip authentication
            password: Login password
            sender: From address (defaults to username)
            use_tls: Upgrade the connection with STARTTLS
            timeout: Socket timeout in seconds for the whole exchange
        """
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender or username or ""
        self._use_tls = use_tls
        self._timeout = timeout

    def _build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        if self._sender:
            message["From"] = self._sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    def send(self, to: str, subject: str, body: str) -> bool:
        message = self._build_message(to, subject, body)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as conn:
                conn.ehlo()
                if self._use_tls:
                    conn.starttls()
                    conn.ehlo()
                if self._username:
                    conn.login(self._username, self._password or "")
                conn.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"[SMTP] Failed to send '{subject}' to {to}: {e}")
            return False

        logger.info(f"[SMTP] Sent '{subject}' to {to}")
        return True
