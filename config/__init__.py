"""
Configuration module - Fixed constants shared by the API, jobs and scripts.
"""

from config.email_config import EMAIL_DEFAULTS, EMAIL_SUBJECTS, MAIL_MAX_RETRIES
from config.messages import ErrorMessages, DONATION_CHOICES, SHARING_CHOICES

__all__ = [
    "EMAIL_DEFAULTS",
    "EMAIL_SUBJECTS",
    "MAIL_MAX_RETRIES",
    "ErrorMessages",
    "DONATION_CHOICES",
    "SHARING_CHOICES",
]
