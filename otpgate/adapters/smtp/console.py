"""
Console notifier adapter - Implements Notifier protocol.

This module provides a console-based implementation of the domain's
notifier port, logging outgoing messages for local development.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """
    Implements Notifier protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - the passcode ends up in the log.
    """

    def send(self, to: str, subject: str, body: str) -> bool:
        """
        Log the message at INFO level (simulates email delivery).

        Args:
            to: Recipient email address (normalized by domain layer)
            subject: Message subject line
            body: Plain text body

        Returns:
            Always True
        """
        logger.info("[NOTIFY] To: %s Subject: %s Body: %s", to, subject, body)
        return True
