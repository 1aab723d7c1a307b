"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SITE_CHECKIN_CODE_TYPE = "site_checkin"

# Stale-session reaper
STALE_SESSION_HOURS = 16
FALLBACK_SHIFT_HOURS = 12

# Late-close dialog suggests 20:00 on the previous day
DEFAULT_LATE_CLOSE_HOUR = 20

# Expiry monitor
EXPIRY_WARNING_DAYS = 30
NOTICE_VALID_DAYS = 7
EXPIRY_NOTICE_TARGET_ROLES = ("admin", "manager")

DEFAULT_BUSINESS_TIMEZONE = "Asia/Shanghai"
