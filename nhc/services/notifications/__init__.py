"""Notification services."""

from nhc.services.notifications.dispatcher import NotificationDispatcher, MailJob, JobStatus

__all__ = [
    "NotificationDispatcher",
    "MailJob",
    "JobStatus",
]
