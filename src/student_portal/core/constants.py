"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import Role

ADMIN_ROLES = frozenset({Role.ADMIN, Role.DEV})
MODERATOR_ROLES = ADMIN_ROLES | {Role.COORDINATOR}
ASSIGNABLE_ROLES = (Role.ADMIN, Role.SENATOR, Role.COORDINATOR, Role.ATTORNEY)

HOME_PATHS = {
    Role.ADMIN: "/admin",
    Role.DEV: "/admin",
    Role.COORDINATOR: "/admin",
    Role.SENATOR: "/senate",
    Role.ATTORNEY: "/attorney",
    Role.STUDENT: "/student",
}
UNAUTHORIZED_PATH = "/unauthorized"

# Reporting periods
PERIOD_DAYS = 14
PERIOD_MS = PERIOD_DAYS * 24 * 60 * 60 * 1000
DEFAULT_TIMEZONE = "America/Chicago"
DEFAULT_TARGET_HOURS = 6.0
# datetime.weekday() numbering, Thursday=3
DEFAULT_ANCHOR_WEEKDAY = 3

# Hour logs
ACTIVITY_MAX_LENGTH = 200
ENTRY_MATCH_WINDOW_SECONDS = 2

# Events
EVENT_TITLE_MAX_LENGTH = 255
DEFAULT_EVENT_COLOR = "#93C5FD"
BORDER_DARKEN_AMOUNT = 40

# Appointments
SLOT_MINUTES = 30
MAX_LISTED_ATTORNEYS = 2

# Identity provider paging
PROVIDER_PAGE_SIZE = 100

# Team images
MAX_IMAGE_BYTES = 5 * 1024 * 1024
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}
