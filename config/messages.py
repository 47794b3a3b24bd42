"""
User-facing messages and enumerated form choices.
"""


class ErrorMessages:
    """Error strings shown to end users."""

    REQUIRED = "This is a required input."
    PROFANITY = "Please don't use profanity. You're gooder than that."
    BAD_CHOICE = "That is not a valid choice, please select from the available options."
    INTERNAL = "Uh oh, something went wrong on our end. Please try again."
    FAMILY = (
        "The Family Code you entered does not exist. If you did not receive "
        "an existing code, leave this field blank."
    )
    FORBIDDEN = "You are not authorized to access this function."
    MISSING_TOKEN = "Missing Token. Please log in to continue."
    TOKEN_EXPIRED = "Token Expired"
    INVALID_TOKEN = "Invalid Token. Please log in to continue."
    PARSE = "Failed to parse request."
    BAD_MESSAGE = "Message is missing required fields."
    MISSING_FIELDS = "Your submission was missing required fields."


DONATION_CHOICES = ("ysb", "cvim", "none")

SHARING_CHOICES = ("everyone", "none", "organization")

# Category given to participants created by the CSV importer
IMPORTED_PARTICIPANT_CATEGORY = "Other"
UNKNOWN_COMMITMENT = "Unknown Commitment"
