"""
Notification transports.
"""

from subtrack.infrastructure.notifications.log_sender import LoggingNotificationSender
from subtrack.infrastructure.notifications.resend_sender import ResendNotificationSender


__all__ = [
    "LoggingNotificationSender",
    "ResendNotificationSender",
]
