"""
Email service configuration constants.

These are fixed values that don't change per environment.
Environment-specific values (SMTP host, credentials, site URL) are
loaded through nhc.config.Settings.
"""

# Attempts per recipient before a send is reported as failed
MAIL_MAX_RETRIES = 5

EMAIL_DEFAULTS = {
    "mode": "console",
    "from_email": "info@nutritionhabitchallenge.com",
    "from_name": "Nutrition Habit Challenge",
    "team_name": "The NHC Team",
}

EMAIL_SUBJECTS = {
    "verification": "Nutrition Habit Challenge: E-Mail Verification Required",
    "registration": "Nutrition Habit Challenge: Registration Confirmation",
    "reset_password": "Nutrition Habit Challenge: Reset Password Request",
}

DONATION_LINKS = {
    "ysb": (
        "Youth Service Bureau",
        "http://ccysb.com/?page_id=1197",
    ),
    "cvim": (
        "Centre Volunteers in Medicine",
        "https://cvim.ejoinme.org/MyPages/CVIMNHC/tabid/524126/Default.aspx",
    ),
}
