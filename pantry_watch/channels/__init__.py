"""Delivery transports for local alerts and outbound email."""

from .console import ConsoleAlertSender
from .emailjs import EmailJSSender

__all__ = ["ConsoleAlertSender", "EmailJSSender"]
