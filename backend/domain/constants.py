"""
Domain constants used across services/routers.
"""

# Admin listing pagination
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

# Shipping address rules
ZIP_CODE_PATTERN = r"^[0-9]{5,6}$"
PHONE_PATTERN = r"^[0-9]{10,15}$"
PHONE_STRIP_CHARS = " -()"

# Status filter value meaning "no filter" on the admin listing
STATUS_FILTER_ALL = "all"
