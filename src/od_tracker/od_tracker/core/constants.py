"""Constants and defaults.

Note: Keep constants here to avoid magic strings spread across code.
"""

REGULAR_CLASS_NAME = "Regular Class"
REGULAR_CLASS_VENUE = "Classroom"
DEFAULT_EVENT_VENUE = "Event Venue"
UNKNOWN_EVENT_NAME = "Unknown Event"

DEFAULT_MAX_ATTACHMENT_MB = 5
ALLOWED_ATTACHMENT_TYPES = ("image/jpeg", "image/jpg", "image/png", "application/pdf")

ALLOWED_ROSTER_EXTENSIONS = (".xlsx",)

MIN_PASSWORD_LENGTH = 8
DEFAULT_LIST_LIMIT = 500
DEFAULT_SESSION_DAYS = 7
