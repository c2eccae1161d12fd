"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Local cache keys, versioned by suffix.
ATTENDANCE_KEY = "geo_attendance_attendance_v5"
SESSION_KEY = "geo_attendance_session_v5"
SESSION_USER_KEY = "geo_attendance_session_user_v5"

# Keys used by the local adapter when it stands in for the remote backend.
LOCAL_USERS_KEY = "geo_attendance_users_local"
LOCAL_ATTENDANCE_KEY = "geo_attendance_attendance_local"

GEOLOCATION_TIMEOUT_SECONDS = 12.0
DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0

EMPLOYEE_LOG_LIMIT = 10
ADMIN_LOG_LIMIT = 25

MIN_PASSWORD_LENGTH = 6

DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org"
GEOCODER_USER_AGENT = "geo-attendance/1.0"

# Placeholders sent to the remote backend for empty fields.
REMOTE_EMPTY_ADDRESS = "Location unavailable"
REMOTE_EMPTY_USER_NAME = "Unknown"
