"""Notifier adapters - Message delivery implementations."""

from .console import ConsoleNotifier
from .relay import SmtpNotifier

__all__ = ["ConsoleNotifier", "SmtpNotifier"]
